import math

from props_ops.header import split_frontmatter
from props_ops.serializer import (
    flatten_lists,
    format_entry,
    prepare_for_write,
    render_header,
    serialize,
)


def _reparse(props):
    fm, body = split_frontmatter(render_header(props))
    assert body == ""
    return fm


def test_scalars():
    assert serialize(None) == "null"
    assert serialize(True) == "true"
    assert serialize(False) == "false"
    assert serialize(3) == "3"
    assert serialize(1.5) == "1.5"
    assert serialize(1e-05) == "1.0e-05"
    assert serialize(float("inf")) == ".inf"


def test_plain_and_quoted_strings():
    assert serialize("plain text") == "plain text"
    assert serialize('say "hi"') == '"say \\"hi\\""'
    assert serialize("it's") == '"it\'s"'
    assert serialize("a: b") == '"a: b"'
    assert serialize("issue #4") == '"issue #4"'
    assert serialize("see [[Note]]") == '"see [[Note]]"'
    assert serialize(" padded") == '" padded"'
    assert serialize("") == '""'
    assert serialize(r"C:\temp") == '"C:\\\\temp"'


def test_strings_that_would_change_type_are_quoted():
    assert serialize("007") == '"007"'
    assert serialize("true") == '"true"'
    assert serialize("null") == '"null"'
    assert serialize("- item") == '"- item"'


def test_multiline_block():
    assert serialize("a\nb") == "|-\n  a\n  b"
    assert serialize("a\nb\n") == "|\n  a\n  b"
    assert serialize("a\n\nb") == "|-\n  a\n  \n  b"
    assert format_entry("notes", "line one\nline two") == "notes: |-\n  line one\n  line two"


def test_lists_and_mappings():
    assert serialize([]) == "[]"
    assert serialize({}) == "{}"
    assert format_entry("tags", ["a", "b"]) == "tags:\n  - a\n  - b"
    assert format_entry("meta", {"x": 1, "y": "z"}) == "meta:\n  x: 1\n  y: z"
    assert format_entry("meta", {"inner": {"k": [1, 2]}}) == "meta:\n  inner:\n    k:\n      - 1\n      - 2"


def test_flattening_is_a_separate_pass():
    assert serialize([["a"], "b"]) == "\n  -\n      - a\n  - b"
    assert flatten_lists([["a", "b"], "c", [["d"]]]) == ["a", "b", "c", ["d"]]
    assert prepare_for_write({"tags": [["a"], "b"], "n": 1}) == {"tags": ["a", "b"], "n": 1}


def test_render_header():
    assert render_header({}) == "---\n---\n"
    assert render_header({"title": "Hello", "n": 2}) == "---\ntitle: Hello\nn: 2\n---\n"


def test_serialized_header_parses_back_to_same_values():
    props = {
        "title": "Plain",
        "code": "007",
        "price": "1.50",
        "when": "2024-01-02",
        "link": "[[Other Note]]",
        "quote": 'He said "no": #1',
        "multi": "first\n  indented\n\nlast\n",
        "lead": "\n  starts blank",
        "tabbed": "a\tb",
        "tags": ["x", "007", ["nested", 1], {"k": "v"}, "two\nlines"],
        "meta": {"a": None, "b": [True, 2.5], "c": {}},
        "empty_list": [],
        "empty_text": "",
        "yes": "yes",
        "float": 1e-05,
        "weird key: #": "v",
    }
    assert _reparse(props) == props


def test_serialize_is_total_on_deep_nesting():
    deep = "leaf"
    for i in range(12):
        deep = [deep, {"level": i, "child": deep}] if i % 2 else {"k": deep}
    text = serialize(deep)
    assert isinstance(text, str)
    assert _reparse({"deep": deep}) == {"deep": deep}


def test_nan_serializes():
    fm = _reparse({"x": float("nan")})
    assert math.isnan(fm["x"])
