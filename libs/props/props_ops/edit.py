from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional

from .cache import PropertyCache
from .codec import tag
from .merge import write_properties
from .store import DocumentStore
from .types import BatchReport

logger = logging.getLogger(__name__)


async def apply_properties(
    store: DocumentStore,
    doc: Path | str,
    properties: Mapping[str, Any],
    preserve_existing: bool = False,
    cache: Optional[PropertyCache] = None,
) -> bool:
    """Write ``properties`` as the header of ``doc``.

    With ``preserve_existing`` the current header stays underneath: existing
    keys keep their slot (new values win), new keys are appended.
    """
    doc = Path(doc)
    cache = cache or PropertyCache(store)
    try:
        props = tag(properties)
        text = None
        if preserve_existing:
            existing = await cache.get(doc)
            existing.update(props)
            props = existing
            text = await cache.text(doc)
        await write_properties(store, doc, props, text)
        cache.invalidate(doc)
        return True
    except Exception as e:
        logger.error("error applying properties to %s: %s", doc, e)
        return False


async def bulk_edit(
    store: DocumentStore,
    docs: Iterable[Path | str],
    modify: Optional[Mapping[str, Any]] = None,
    delete: Iterable[str] = (),
    preserve_existing: bool = True,
    cache: Optional[PropertyCache] = None,
) -> BatchReport:
    """Delete then upsert properties across ``docs``."""
    cache = cache or PropertyCache(store)
    to_delete = set(delete)
    updates: Dict[str, Any] = {k.strip(): v for k, v in (modify or {}).items() if k.strip()}
    tagged_updates = tag(updates)
    report = BatchReport()
    for doc in docs:
        doc = Path(doc)
        try:
            text = await cache.text(doc)
            props = await cache.get(doc) if preserve_existing else {}
            for key in to_delete:
                props.pop(key, None)
            props.update(tagged_updates)
            await write_properties(store, doc, props, text)
            cache.invalidate(doc)
            report.record(doc, True)
        except Exception as e:
            logger.error("error processing %s: %s", doc, e)
            report.record(doc, False, str(e))
    logger.info("modified %s documents", report.summary())
    return report
