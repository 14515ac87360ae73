from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

from .aggregate import apply_property_order, check_reorder, infer_display_type, scan
from .cache import PropertyCache
from .codec import detect_display_type, display_type_label
from .const import DEFAULT_FUZZY_THRESHOLD, MD_GLOB
from .edit import apply_properties, bulk_edit
from .merge import MergePolicy, apply_template
from .selection import (
    DirectorySource,
    DocumentSource,
    TemplateSource,
    discover_documents,
    find_template,
    resolve_templates,
)
from .store import FileDocumentStore
from .types import to_json_safe


# ---------------------------
# Helper to standardize result
# ---------------------------
def _ok(data: Any, meta: Dict | None = None) -> Dict:
    return {"ok": True, "data": to_json_safe(data), "error": None, "meta": meta or {}}


def _err(msg: str, meta: Dict | None = None) -> Dict:
    return {"ok": False, "data": None, "error": msg, "meta": meta or {}}


async def _documents(root: Optional[str], paths: Optional[List[str]], include_glob: str) -> List[Path]:
    if paths:
        return [Path(p) for p in paths]
    if root is None:
        raise ValueError("either root or paths is required")
    return await discover_documents(root, include_glob)


def _sources(entries: List[Dict[str, Any]]) -> List[TemplateSource]:
    """``{"type": "file"|"directory", "path": ..., "include_subdirectories": bool}``"""
    sources: List[TemplateSource] = []
    for entry in entries:
        kind = entry.get("type", "file")
        if kind == "file":
            sources.append(DocumentSource(Path(entry["path"])))
        elif kind == "directory":
            sources.append(DirectorySource(Path(entry["path"]), bool(entry.get("include_subdirectories", False))))
        else:
            raise ValueError(f"unknown template source type: {kind!r}")
    return sources


# ---------------------------
# Public async API (tool-call)
# ---------------------------

async def props_read(path: str) -> Dict:
    try:
        store = FileDocumentStore()
        mapping = await store.get_header_mapping(Path(path))
        types = {k: detect_display_type(v) for k, v in mapping.items()}
        return _ok({"path": path, "properties": mapping, "types": types})
    except Exception as e:
        return _err(str(e))


async def props_scan(
    root: Optional[str] = None,
    paths: Optional[List[str]] = None,
    include_glob: str = MD_GLOB,
) -> Dict:
    """Per-key usage across documents plus the reorder verdict."""
    try:
        docs = await _documents(root, paths, include_glob)
        cache = PropertyCache(FileDocumentStore())
        entries = await scan(cache, docs)
        verdict = await check_reorder(cache, docs)
        rows = [
            {
                "key": e.key,
                "count": e.count,
                "examples": e.examples,
                "type": display_type_label(infer_display_type(e.examples)),
            }
            for e in sorted(entries.values(), key=lambda e: -e.count)
        ]
        return _ok(
            {"properties": rows, "can_reorder": verdict.can_reorder, "ordered_keys": verdict.ordered_keys},
            meta={"files": len(docs)},
        )
    except Exception as e:
        return _err(str(e))


async def props_apply_template(
    template: str,
    targets: List[str],
    keys: List[str],
    positioning: str = "below",
    override_all: bool = True,
    preserve_all: bool = False,
    override_keys: Optional[List[str]] = None,
    preserve_keys: Optional[List[str]] = None,
    make_backup: bool = True,
) -> Dict:
    try:
        if not keys:
            return _err("no properties selected")
        policy = MergePolicy.from_choices(
            keys,
            positioning=positioning,
            override_all=override_all,
            preserve_all=preserve_all,
            override_keys=override_keys or (),
            preserve_keys=preserve_keys or (),
        )
        report = await apply_template(FileDocumentStore(make_backup), template, targets, keys, policy)
        return _ok(report, meta={"summary": report.summary(), "failed": report.failed})
    except Exception as e:
        return _err(str(e))


async def props_reorder(
    order: List[str],
    root: Optional[str] = None,
    paths: Optional[List[str]] = None,
    include_glob: str = MD_GLOB,
    force: bool = False,
    make_backup: bool = True,
) -> Dict:
    try:
        docs = await _documents(root, paths, include_glob)
        store = FileDocumentStore(make_backup)
        cache = PropertyCache(store)
        if not force:
            verdict = await check_reorder(cache, docs)
            if not verdict.can_reorder:
                return _err("documents do not share an identical key set", meta={"ordered_keys": verdict.ordered_keys})
        report = await apply_property_order(store, docs, order, cache)
        return _ok(report, meta={"summary": report.summary(), "failed": report.failed})
    except Exception as e:
        return _err(str(e))


async def props_bulk_edit(
    paths: List[str],
    modify: Optional[Dict[str, Any]] = None,
    delete: Optional[List[str]] = None,
    preserve_existing: bool = True,
    make_backup: bool = True,
) -> Dict:
    try:
        report = await bulk_edit(FileDocumentStore(make_backup), paths, modify, delete or (), preserve_existing)
        return _ok(report, meta={"summary": report.summary(), "failed": report.failed})
    except Exception as e:
        return _err(str(e))


async def props_apply(path: str, properties: Dict[str, Any], preserve_existing: bool = False) -> Dict:
    try:
        ok = await apply_properties(FileDocumentStore(), path, properties, preserve_existing)
        if not ok:
            return _err(f"could not write properties to {path}")
        return _ok({"path": path})
    except Exception as e:
        return _err(str(e))


async def props_resolve_templates(sources: List[Dict[str, Any]]) -> Dict:
    try:
        templates = await resolve_templates(_sources(sources))
        return _ok([str(p) for p in templates], meta={"count": len(templates)})
    except Exception as e:
        return _err(str(e))


async def props_find_template(
    sources: List[Dict[str, Any]],
    query: str,
    threshold: float = DEFAULT_FUZZY_THRESHOLD,
) -> Dict:
    try:
        templates = await resolve_templates(_sources(sources))
        match = find_template(templates, query, threshold)
        if match is None:
            return _err(f"no template matches {query!r}", meta={"candidates": len(templates)})
        return _ok(str(match))
    except Exception as e:
        return _err(str(e))
