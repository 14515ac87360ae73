from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

import yaml

from .const import YAML_FM_DELIM

logger = logging.getLogger(__name__)

_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class HeaderLoader(yaml.SafeLoader):
    """SafeLoader that keeps dates and datetimes as plain strings."""


HeaderLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def yaml_load(text: str) -> Dict[str, Any]:
    """Parse header YAML; anything but a mapping is treated as empty."""
    try:
        val = yaml.load(text, Loader=HeaderLoader) or {}
    except yaml.YAMLError as e:
        logger.warning("malformed header, treating as empty: %s", e)
        return {}
    if not isinstance(val, dict):
        return {}
    return {str(k): v for k, v in val.items()}


def _is_fence(line: str) -> bool:
    return line.rstrip("\r\n") == YAML_FM_DELIM


def locate_header(raw: str) -> Optional[Tuple[int, int, int]]:
    """Return (yaml_start, yaml_end, span_end) offsets of the fenced header.

    ``span_end`` points just past the closing fence line. None when the text
    does not open with a fence or the fence is never closed.
    """
    lines = raw.splitlines(keepends=True)
    if not lines or not _is_fence(lines[0]):
        return None
    yaml_start = len(lines[0])
    pos = yaml_start
    for line in lines[1:]:
        if _is_fence(line):
            return yaml_start, pos, pos + len(line)
        pos += len(line)
    return None


def split_frontmatter(raw: str) -> Tuple[Dict[str, Any], str]:
    """Extract header mapping and return (fm, body)."""
    raw = raw.lstrip("\ufeff")  # strip BOM if present
    span = locate_header(raw)
    if span is None:
        return {}, raw
    yaml_start, yaml_end, span_end = span
    return yaml_load(raw[yaml_start:yaml_end]), raw[span_end:]


def replace_header(raw: str, header_block: str) -> str:
    """Swap the fenced header span for ``header_block`` or prepend one."""
    raw = raw.lstrip("\ufeff")
    if not header_block.endswith("\n"):
        header_block += "\n"
    span = locate_header(raw)
    if span is None:
        return header_block + "\n" + raw if raw else header_block
    return header_block + raw[span[2]:]
