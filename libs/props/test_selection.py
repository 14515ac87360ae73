import asyncio
from pathlib import Path

import pytest

from props_ops.selection import DirectorySource, DocumentSource, discover_documents, find_template, resolve_templates


@pytest.fixture
def template_tree(tmp_path):
    (tmp_path / "nested").mkdir()
    for rel in ["Meeting Note.md", "Daily.md", "notes.txt", "nested/Project.md"]:
        (tmp_path / rel).write_text("---\na: 1\n---\n", encoding="utf-8")
    return tmp_path


def test_directory_source_flat(template_tree):
    found = asyncio.run(resolve_templates([DirectorySource(template_tree)]))
    assert [p.name for p in found] == ["Daily.md", "Meeting Note.md"]


def test_directory_source_recursive(template_tree):
    found = asyncio.run(resolve_templates([DirectorySource(template_tree, recursive=True)]))
    assert sorted(p.name for p in found) == ["Daily.md", "Meeting Note.md", "Project.md"]


def test_sources_are_deduplicated(template_tree):
    sources = [
        DocumentSource(template_tree / "Daily.md"),
        DirectorySource(template_tree),
        DocumentSource(template_tree / "Daily.md"),
    ]
    found = asyncio.run(resolve_templates(sources))
    assert [p.name for p in found] == ["Daily.md", "Meeting Note.md"]


def test_missing_and_non_document_sources_yield_nothing(template_tree):
    sources = [
        DocumentSource(template_tree / "gone.md"),
        DocumentSource(template_tree / "notes.txt"),
        DirectorySource(template_tree / "nowhere"),
    ]
    assert asyncio.run(resolve_templates(sources)) == []


def test_unknown_source_type():
    with pytest.raises(TypeError):
        asyncio.run(resolve_templates(["Daily.md"]))


def test_discover_documents(template_tree):
    found = asyncio.run(discover_documents(template_tree))
    assert [p.name for p in found] == ["Daily.md", "Meeting Note.md", "Project.md"]
    flat = asyncio.run(discover_documents(template_tree, "*.md"))
    assert [p.name for p in flat] == ["Daily.md", "Meeting Note.md"]


def test_find_template():
    templates = [Path("Daily.md"), Path("Meeting Note.md")]
    assert find_template(templates, "meeting") == Path("Meeting Note.md")
    assert find_template(templates, "DAILY!") == Path("Daily.md")
    assert find_template(templates, "zzz") is None
    assert find_template([], "meeting") is None
