from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict

from .header import split_frontmatter
from .utils import atomic_write_text, read_text, run_in_thread

logger = logging.getLogger(__name__)


class DocumentStore(ABC):
    """Raw read/write access to documents plus their parsed header."""

    @abstractmethod
    async def read(self, doc: Path) -> str:
        ...

    @abstractmethod
    async def write(self, doc: Path, text: str) -> None:
        ...

    async def get_header_mapping(self, doc: Path) -> Dict[str, Any]:
        text = await self.read(doc)
        fm, _ = split_frontmatter(text)
        return fm


class FileDocumentStore(DocumentStore):
    """Markdown files on disk; writes are atomic with an optional ``.bak``."""

    def __init__(self, make_backup: bool = True) -> None:
        self.make_backup = make_backup

    async def read(self, doc: Path) -> str:
        return await run_in_thread(read_text, Path(doc))

    async def write(self, doc: Path, text: str) -> None:
        await run_in_thread(atomic_write_text, Path(doc), text, self.make_backup)
        logger.debug("wrote %s (%d chars)", doc, len(text))
