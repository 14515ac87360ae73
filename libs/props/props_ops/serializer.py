"""Header value serializer.

Renders raw values into block-style YAML for the fenced header. Output is
hand-assembled line by line; PyYAML is only consulted to check that a plain
scalar reads back as the same string.
"""
from __future__ import annotations

import math
from functools import lru_cache
from typing import Any, Dict, List, Mapping

import yaml

from .const import INDENT, YAML_FM_DELIM
from .header import HeaderLoader

# leading characters that would start a non-plain YAML node
INDICATOR_CHARS = set("-?:,[]{}#&*!|>'\"%@`")

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def _is_special(ch: str) -> bool:
    code = ord(ch)
    return code < 0x20 or 0x7F <= code <= 0x9F or ch in "\u2028\u2029\ufeff"


def quote(text: str) -> str:
    out = []
    for ch in text:
        if ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif _is_special(ch):
            code = ord(ch)
            out.append(f"\\x{code:02x}" if code < 0x100 else f"\\u{code:04x}")
        else:
            out.append(ch)
    return '"' + "".join(out) + '"'


@lru_cache(maxsize=4096)
def _reads_back_as(text: str) -> bool:
    try:
        return yaml.load(text, Loader=HeaderLoader) == text
    except yaml.YAMLError:
        return False


def _needs_quotes(text: str) -> bool:
    if not text or text.strip() != text:
        return True
    if any(ch in text for ch in ('"', "'", ":", "#")):
        return True
    if "[[" in text or "]]" in text:
        return True
    if text[0] in INDICATOR_CHARS:
        return True
    # null/true/1.5/~ and friends must stay strings
    return not _reads_back_as(text)


def _is_printable(text: str) -> bool:
    return not any(_is_special(ch) for ch in text if ch != "\n")


def _block_scalar(text: str) -> str:
    if text.endswith("\n\n"):
        chomp = "+"
        body = text[:-1]
    elif text.endswith("\n"):
        chomp = ""
        body = text[:-1]
    else:
        chomp = "-"
        body = text
    lines = body.split("\n")
    return "|" + chomp + "".join("\n" + INDENT + line for line in lines)


def _fits_block(text: str) -> bool:
    if not text.strip() or not _is_printable(text):
        return False
    # block indentation is detected from the first non-blank line
    for line in text.split("\n"):
        if line.strip():
            return line[0] not in (" ", "\t")
        if line:
            return False
    return False


def serialize_string(text: str) -> str:
    if "\n" in text:
        return _block_scalar(text) if _fits_block(text) else quote(text)
    if not _is_printable(text):
        return quote(text)
    return quote(text) if _needs_quotes(text) else text


def serialize_number(num: int | float) -> str:
    if isinstance(num, float):
        if math.isnan(num):
            return ".nan"
        if math.isinf(num):
            return ".inf" if num > 0 else "-.inf"
        text = repr(num)
        if "e" in text and "." not in text.split("e")[0]:
            mantissa, exp = text.split("e")
            text = f"{mantissa}.0e{exp}"
        return text
    return str(num)


def _indent_fragment(fragment: str) -> str:
    return fragment.replace("\n", "\n" + INDENT)


def format_key(key: Any) -> str:
    key = str(key)
    return quote(key) if "\n" in key or _needs_quotes(key) else key


def format_entry(key: Any, value: Any) -> str:
    """One ``key: value`` entry; block values continue on following lines."""
    fragment = serialize(value)
    if fragment.startswith("\n"):
        return f"{format_key(key)}:{fragment}"
    return f"{format_key(key)}: {fragment}"


def serialize_list(items: List[Any]) -> str:
    if not items:
        return "[]"
    entries = []
    for item in items:
        fragment = _indent_fragment(serialize(item))
        if fragment.startswith("\n"):
            entries.append("-" + fragment)
        else:
            entries.append("- " + fragment)
    return "\n" + INDENT + _indent_fragment("\n".join(entries))


def serialize_mapping(mapping: Mapping[Any, Any]) -> str:
    if not mapping:
        return "{}"
    body = "\n".join(format_entry(k, v) for k, v in mapping.items())
    return "\n" + INDENT + _indent_fragment(body)


def serialize(value: Any) -> str:
    """Render ``value`` as the text following ``key:`` in the header."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return serialize_number(value)
    if isinstance(value, str):
        return serialize_string(value)
    if isinstance(value, (list, tuple)):
        return serialize_list(list(value))
    if isinstance(value, Mapping):
        return serialize_mapping(value)
    return serialize_string(str(value))


def flatten_lists(items: List[Any]) -> List[Any]:
    """Concatenate one level of nested lists: ``[a, [b, c]] -> [a, b, c]``."""
    out: List[Any] = []
    for item in items:
        if isinstance(item, (list, tuple)):
            out.extend(item)
        else:
            out.append(item)
    return out


def prepare_for_write(properties: Mapping[str, Any]) -> Dict[str, Any]:
    """Flatten one level of nesting in every top-level list value."""
    return {
        k: flatten_lists(list(v)) if isinstance(v, (list, tuple)) else v
        for k, v in properties.items()
    }


def render_header(properties: Mapping[str, Any]) -> str:
    lines = [YAML_FM_DELIM]
    lines.extend(format_entry(k, v) for k, v in properties.items())
    lines.append(YAML_FM_DELIM)
    return "\n".join(lines) + "\n"
