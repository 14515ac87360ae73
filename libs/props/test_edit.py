import asyncio

from props_ops.edit import apply_properties, bulk_edit


def test_apply_properties_replaces_header(memory_store):
    store = memory_store({"a.md": "---\nold: 1\n---\nbody\n"})
    assert asyncio.run(apply_properties(store, "a.md", {"new": "007"}))
    assert store.docs["a.md"] == '---\nnew: "007"\n---\nbody\n'


def test_apply_properties_preserving_existing(memory_store):
    store = memory_store({"a.md": "---\na: 1\nb: 2\n---\nbody\n"})
    assert asyncio.run(apply_properties(store, "a.md", {"b": 3, "c": 4}, preserve_existing=True))
    assert store.docs["a.md"] == "---\na: 1\nb: 3\nc: 4\n---\nbody\n"


def test_apply_properties_reports_failure(memory_store):
    store = memory_store({"a.md": "body\n"}, fail_writes=["a.md"])
    assert not asyncio.run(apply_properties(store, "a.md", {"x": 1}))


def test_bulk_edit_deletes_then_upserts(memory_store):
    store = memory_store({
        "a.md": "---\nold: 1\nkeep: k\n---\nA\n",
        "b.md": "B\n",
    })
    report = asyncio.run(bulk_edit(store, ["a.md", "b.md"], {"status": "done", "  ": "ignored"}, ["old"]))
    assert report.summary() == "2/2"
    assert store.docs["a.md"] == "---\nkeep: k\nstatus: done\n---\nA\n"
    assert store.docs["b.md"] == "---\nstatus: done\n---\n\nB\n"


def test_bulk_edit_without_preserving_existing(memory_store):
    store = memory_store({"a.md": "---\nold: 1\n---\nA\n"})
    asyncio.run(bulk_edit(store, ["a.md"], {"tags": [["x"], "y"]}, preserve_existing=False))
    assert store.docs["a.md"] == "---\ntags:\n  - x\n  - y\n---\nA\n"


def test_edits_read_each_document_once(memory_store):
    store = memory_store({"a.md": "---\nx: 1\n---\nA\n", "b.md": "B\n"})
    asyncio.run(bulk_edit(store, ["a.md", "b.md"], {"y": 2}))
    assert store.reads == ["a.md", "b.md"]
    store.reads.clear()
    asyncio.run(bulk_edit(store, ["a.md"], {"z": 3}, preserve_existing=False))
    assert store.reads == ["a.md"]
    store.reads.clear()
    asyncio.run(apply_properties(store, "b.md", {"w": 4}, preserve_existing=True))
    assert store.reads == ["b.md"]
    assert store.docs["b.md"] == "---\ny: 2\nw: 4\n---\n\nB\n"
