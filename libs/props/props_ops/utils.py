from __future__ import annotations

import asyncio
import os
import shutil
import tempfile
from pathlib import Path

from rapidfuzz import fuzz as _rf_fuzz
from rapidfuzz import utils as _rf_utils


def ensure_dir(p: Path) -> None:
    p.parent.mkdir(parents=True, exist_ok=True)


def atomic_write_text(path: Path, text: str, make_backup: bool = True) -> None:
    ensure_dir(path)
    if make_backup and path.exists():
        backup = path.with_suffix(path.suffix + ".bak")
        shutil.copy2(path, backup)
    # temp file in the target dir so os.replace never crosses filesystems
    with tempfile.NamedTemporaryFile("w", delete=False, encoding="utf-8", dir=path.parent, newline="") as tmp:
        tmp.write(text)
        tmp.flush()
        os.fsync(tmp.fileno())
        tmp_path = Path(tmp.name)
    os.replace(tmp_path, path)


def run_in_thread(func, *args, **kwargs):
    loop = asyncio.get_running_loop()
    return loop.run_in_executor(None, lambda: func(*args, **kwargs))


def read_text(path: Path) -> str:
    with open(path, "r", encoding="utf-8", errors="replace", newline="") as fh:
        return fh.read()


def fuzzy_score(a: str, b: str) -> float:
    # case- and punctuation-insensitive
    return float(_rf_fuzz.QRatio(a or "", b or "", processor=_rf_utils.default_process))
