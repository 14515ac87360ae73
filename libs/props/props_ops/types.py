from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass
class AggregateEntry:
    key: str
    count: int = 0
    examples: List[Any] = field(default_factory=list)  # raw values, distinct


@dataclass
class ReorderVerdict:
    can_reorder: bool
    ordered_keys: List[str]  # union of keys in discovery order


@dataclass
class DocumentResult:
    path: str
    ok: bool
    error: Optional[str] = None


@dataclass
class BatchReport:
    """Outcome of a sequential per-document batch."""

    attempted: int = 0
    succeeded: int = 0
    results: List[DocumentResult] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return self.attempted - self.succeeded

    def record(self, path: Path | str, ok: bool, error: Optional[str] = None) -> None:
        self.attempted += 1
        if ok:
            self.succeeded += 1
        self.results.append(DocumentResult(path=str(path), ok=ok, error=error))

    def summary(self) -> str:
        return f"{self.succeeded}/{self.attempted}"


def to_json_safe(obj: Any) -> Any:
    if hasattr(obj, "__dataclass_fields__"):
        return to_json_safe(asdict(obj))
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, (list, tuple)):
        return [to_json_safe(x) for x in obj]
    if isinstance(obj, dict):
        return {k: to_json_safe(v) for k, v in obj.items()}
    return obj
