from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Set

from .cache import PropertyCache
from .codec import DisplayType, detect_display_type, restore_value, values_equal
from .const import MAX_EXAMPLES
from .merge import write_properties
from .store import DocumentStore
from .types import AggregateEntry, BatchReport, ReorderVerdict

logger = logging.getLogger(__name__)


async def scan(cache: PropertyCache, files: Iterable[Path | str]) -> Dict[str, AggregateEntry]:
    """Count each key across ``files`` and keep a few distinct example values."""
    entries: Dict[str, AggregateEntry] = {}
    for doc in files:
        try:
            props = await cache.get(Path(doc))
        except Exception as e:
            logger.error("error scanning properties in %s: %s", doc, e)
            continue
        for key, prop in props.items():
            value = restore_value(prop)
            entry = entries.setdefault(key, AggregateEntry(key=key))
            entry.count += 1
            if len(entry.examples) < MAX_EXAMPLES and not any(values_equal(ex, value) for ex in entry.examples):
                entry.examples.append(value)
    return entries


async def check_reorder(cache: PropertyCache, files: Iterable[Path | str]) -> ReorderVerdict:
    """Reordering is allowed only when every file has exactly the same key set."""
    common: Optional[Set[str]] = None
    union: Dict[str, None] = {}  # insertion-ordered set
    for doc in files:
        try:
            keys = list((await cache.get(Path(doc))).keys())
        except Exception as e:
            logger.error("error reading properties in %s: %s", doc, e)
            keys = []
        union.update(dict.fromkeys(keys))
        if common is None:
            common = set(keys)
        else:
            common &= set(keys)
    can_reorder = common is not None and len(common) == len(union) and len(common) > 0
    return ReorderVerdict(can_reorder=can_reorder, ordered_keys=list(union))


def infer_display_type(examples: Sequence[object]) -> DisplayType:
    if not examples:
        return DisplayType.TEXT
    return detect_display_type(examples[0])


async def apply_property_order(
    store: DocumentStore,
    files: Iterable[Path | str],
    order: Sequence[str],
    cache: Optional[PropertyCache] = None,
) -> BatchReport:
    """Rewrite each header with its keys in ``order``; unlisted keys are dropped."""
    cache = cache or PropertyCache(store)
    report = BatchReport()
    for doc in files:
        doc = Path(doc)
        try:
            props = await cache.get(doc)
            ordered = {k: props[k] for k in order if k in props}
            dropped: List[str] = [k for k in props if k not in ordered]
            if dropped:
                logger.warning("reorder drops %s from %s", ", ".join(dropped), doc)
            await write_properties(store, doc, ordered, await cache.text(doc))
            cache.invalidate(doc)
            report.record(doc, True)
        except Exception as e:
            logger.error("error reordering properties in %s: %s", doc, e)
            report.record(doc, False, str(e))
    logger.info("reordered properties in %s documents", report.summary())
    return report
