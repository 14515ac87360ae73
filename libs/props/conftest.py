from pathlib import Path
from typing import Dict, Iterable, List

import pytest

from props_ops.store import DocumentStore


class MemoryDocumentStore(DocumentStore):
    """Dict-backed store that can be told to fail on given documents."""

    def __init__(self, docs: Dict[str, str], fail_reads: Iterable[str] = (), fail_writes: Iterable[str] = ()) -> None:
        self.docs = dict(docs)
        self.fail_reads = set(fail_reads)
        self.fail_writes = set(fail_writes)
        self.reads: List[str] = []
        self.writes: List[str] = []

    async def read(self, doc: Path) -> str:
        key = str(doc)
        self.reads.append(key)
        if key in self.fail_reads:
            raise OSError(f"cannot read {key}")
        return self.docs[key]

    async def write(self, doc: Path, text: str) -> None:
        key = str(doc)
        if key in self.fail_writes:
            raise OSError(f"cannot write {key}")
        self.docs[key] = text
        self.writes.append(key)


@pytest.fixture
def memory_store():
    return MemoryDocumentStore
