from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .const import DEFAULT_FUZZY_THRESHOLD, MD_GLOB


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class PropsConfig:
    """Configuration for property operations"""
    root: str
    include_glob: str
    make_backup: bool
    log_level: str
    fuzzy_threshold: float

    @classmethod
    def from_env(cls) -> "PropsConfig":
        """Create config from environment variables (and a .env file if present)"""
        load_dotenv()
        return cls(
            root=os.getenv("PROPS_ROOT", "."),
            include_glob=os.getenv("PROPS_GLOB", MD_GLOB),
            make_backup=_env_bool("PROPS_BACKUP", True),
            log_level=os.getenv("PROPS_LOG_LEVEL", "INFO").upper(),
            fuzzy_threshold=float(os.getenv("PROPS_FUZZY_THRESHOLD", str(DEFAULT_FUZZY_THRESHOLD))),
        )
