from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Tuple

from .codec import PropertySet, tag
from .header import split_frontmatter
from .store import DocumentStore

logger = logging.getLogger(__name__)


class PropertyCache:
    """Per-operation memo of document path -> (raw text, tagged header).

    Best effort only: nothing invalidates entries when a document changes
    outside this process. Build one per top-level operation and drop it after.
    """

    def __init__(self, store: DocumentStore) -> None:
        self.store = store
        self._entries: Dict[str, Tuple[str, PropertySet]] = {}

    async def _load(self, doc: Path) -> Tuple[str, PropertySet]:
        key = str(doc)
        if key not in self._entries:
            text = await self.store.read(Path(doc))
            mapping, _ = split_frontmatter(text)
            self._entries[key] = (text, tag(mapping or {}))
        else:
            logger.debug("cache hit: %s", key)
        return self._entries[key]

    async def get(self, doc: Path) -> PropertySet:
        _, props = await self._load(doc)
        return dict(props)

    async def text(self, doc: Path) -> str:
        """Raw document text as read alongside its header."""
        text, _ = await self._load(doc)
        return text

    def invalidate(self, doc: Path) -> None:
        self._entries.pop(str(doc), None)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, doc: object) -> bool:
        return str(doc) in self._entries

    def __len__(self) -> int:
        return len(self._entries)
