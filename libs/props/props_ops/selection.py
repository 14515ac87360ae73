from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Set, Union

from .const import DEFAULT_FUZZY_THRESHOLD, MD_GLOB, MD_SUFFIX
from .utils import fuzzy_score, run_in_thread

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentSource:
    path: Path


@dataclass(frozen=True)
class DirectorySource:
    path: Path
    recursive: bool = False


TemplateSource = Union[DocumentSource, DirectorySource]


def _is_document(p: Path) -> bool:
    return p.is_file() and p.suffix.lower() == MD_SUFFIX


def _list_directory(folder: Path, recursive: bool) -> List[Path]:
    pattern = MD_GLOB if recursive else "*" + MD_SUFFIX
    return sorted(p for p in folder.glob(pattern) if _is_document(p))


async def resolve_templates(sources: Iterable[TemplateSource]) -> List[Path]:
    """Expand template sources to documents, first occurrence wins."""
    templates: List[Path] = []
    seen: Set[Path] = set()
    for source in sources:
        if not isinstance(source, (DocumentSource, DirectorySource)):
            raise TypeError(f"unsupported template source: {source!r}")
        path = Path(source.path)
        if isinstance(source, DocumentSource):
            found = [path] if await run_in_thread(_is_document, path) else []
        elif not await run_in_thread(path.is_dir):
            found = []
        else:
            found = await run_in_thread(_list_directory, path, source.recursive)
        if not found:
            logger.warning("template source %s yielded no documents", path)
        for p in found:
            key = p.resolve()
            if key not in seen:
                seen.add(key)
                templates.append(p)
    return templates


async def discover_documents(root: str | Path, include_glob: str = MD_GLOB) -> List[Path]:
    root = Path(root)
    paths = await run_in_thread(lambda: list(root.glob(include_glob)))
    return sorted(p for p in paths if p.is_file() and p.suffix.lower() == MD_SUFFIX)


def find_template(
    templates: Iterable[Path],
    query: str,
    threshold: float = DEFAULT_FUZZY_THRESHOLD,
) -> Optional[Path]:
    """Best fuzzy match of ``query`` against template titles (file stems)."""
    q = (query or "").strip()
    best: Optional[Path] = None
    best_score = -1.0
    for p in templates:
        sc = fuzzy_score(q, p.stem)
        if sc >= threshold and sc > best_score:
            best, best_score = p, sc
    return best
