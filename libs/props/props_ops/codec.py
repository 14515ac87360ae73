"""Type-preserving property codec.

Raw header values (None, bool, int, float, str, list, dict) are wrapped in a
``TaggedProperty`` that records the semantic type explicitly. Strings that look
numeric also keep their untouched literal in ``original_text`` so restoring
never re-derives ``"007"`` as ``7``.
"""
from __future__ import annotations

import json
import math
import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from .const import PREVIEW_CUT, PREVIEW_MAX_LEN

NUMBER_STRING_PATTERN = re.compile(r"-?\d+(\.\d+)?")
DATETIME_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}")
DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")


class TypeTag(str, Enum):
    NULL = "null"
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"


class DisplayType(str, Enum):
    TEXT = "text"
    LIST = "list"
    NUMBER = "number"
    CHECKBOX = "checkbox"
    DATE = "date"
    DATETIME = "datetime"


DISPLAY_LABELS = {
    DisplayType.TEXT: "Text",
    DisplayType.LIST: "List",
    DisplayType.NUMBER: "Number",
    DisplayType.CHECKBOX: "Checkbox",
    DisplayType.DATE: "Date",
    DisplayType.DATETIME: "Date & Time",
}


@dataclass
class TaggedProperty:
    value: Any  # ARRAY holds List[TaggedProperty], OBJECT holds a PropertySet
    type: TypeTag
    original_text: Optional[str] = None


PropertySet = Dict[str, TaggedProperty]


def looks_numeric(text: str) -> bool:
    """True when ``text`` would convert cleanly to a number."""
    s = text.strip()
    if not s or "_" in s:
        return False
    try:
        return not math.isnan(float(s))
    except ValueError:
        pass
    try:
        int(s, 0)  # 0x1f, 0o17, 0b101
        return True
    except ValueError:
        return False


def tag_value(value: Any) -> TaggedProperty:
    if isinstance(value, TaggedProperty):
        return value
    if value is None:
        return TaggedProperty(None, TypeTag.NULL)
    if isinstance(value, bool):
        return TaggedProperty(value, TypeTag.BOOLEAN)
    if isinstance(value, (int, float)):
        return TaggedProperty(value, TypeTag.NUMBER)
    if isinstance(value, str):
        return TaggedProperty(value, TypeTag.STRING, value if looks_numeric(value) else None)
    if isinstance(value, (list, tuple)):
        return TaggedProperty([tag_value(item) for item in value], TypeTag.ARRAY)
    if isinstance(value, Mapping):
        return TaggedProperty(tag(value), TypeTag.OBJECT)
    # unknown shapes pass through untouched
    return TaggedProperty(value, TypeTag.STRING)


def tag(properties: Mapping[str, Any]) -> PropertySet:
    return {str(k): tag_value(v) for k, v in properties.items()}


def restore_value(prop: Any) -> Any:
    if not isinstance(prop, TaggedProperty):
        return prop
    if prop.type is TypeTag.STRING and prop.original_text is not None:
        return prop.original_text
    if prop.type is TypeTag.ARRAY:
        return [restore_value(item) for item in prop.value]
    if prop.type is TypeTag.OBJECT:
        return restore(prop.value)
    return prop.value


def restore(props: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: restore_value(v) for k, v in props.items()}


def detect_display_type(value: Any) -> DisplayType:
    """Presentation-only classification; never mutates ``value``."""
    value = restore_value(value)
    if value is None:
        return DisplayType.TEXT
    if isinstance(value, (list, tuple)):
        return DisplayType.LIST
    if isinstance(value, bool):
        return DisplayType.CHECKBOX
    if isinstance(value, (int, float)):
        return DisplayType.NUMBER
    if isinstance(value, str):
        if NUMBER_STRING_PATTERN.fullmatch(value):
            return DisplayType.NUMBER
        if DATETIME_PATTERN.match(value):
            return DisplayType.DATETIME
        if DATE_PATTERN.fullmatch(value):
            return DisplayType.DATE
    return DisplayType.TEXT


def display_type_label(display_type: DisplayType | str) -> str:
    if isinstance(display_type, DisplayType):
        return DISPLAY_LABELS[display_type]
    try:
        return DISPLAY_LABELS[DisplayType(display_type.lower())]
    except ValueError:
        return DISPLAY_LABELS[DisplayType.TEXT]


def _to_number(value: Any) -> int | float:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return 0 if isinstance(value, float) and math.isnan(value) else value
    if isinstance(value, str) and value.strip():
        s = value.strip()
        try:
            return int(s)
        except ValueError:
            pass
        try:
            num = float(s)
        except ValueError:
            return 0
        return 0 if math.isnan(num) else num
    return 0


def _to_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip())
        except ValueError:
            pass
    return datetime.now()


def convert_value(value: Any, display_type: DisplayType | str) -> Any:
    """Coerce a raw value to the shape a display type expects."""
    display_type = DisplayType(display_type)
    if display_type is DisplayType.NUMBER:
        return _to_number(value)
    if display_type is DisplayType.CHECKBOX:
        if isinstance(value, str):
            return value.strip().lower() == "true"
        return bool(value)
    if display_type is DisplayType.DATE:
        return _to_datetime(value).date().isoformat()
    if display_type is DisplayType.DATETIME:
        return _to_datetime(value).isoformat()
    if display_type is DisplayType.LIST:
        if isinstance(value, (list, tuple)):
            return list(value)
        if value is None:
            return []
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
            except ValueError:
                return [value]
            return parsed if isinstance(parsed, list) else [value]
        return [str(value)]
    # text
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    return str(value)


def preview_value(value: Any) -> str:
    value = restore_value(value)
    if value is None:
        return "null"
    if isinstance(value, str):
        if len(value) > PREVIEW_MAX_LEN:
            return f'"{value[:PREVIEW_CUT]}..."'
        return f'"{value}"'
    if isinstance(value, (list, tuple)):
        return "[]" if not value else f"[Array: {len(value)} items]"
    if isinstance(value, Mapping):
        return "{Object}"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def values_equal(a: Any, b: Any) -> bool:
    """Deep equality that keeps booleans and numbers apart (``True != 1``)."""
    a, b = restore_value(a), restore_value(b)
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        return len(a) == len(b) and all(values_equal(x, y) for x, y in zip(a, b))
    if isinstance(a, Mapping) and isinstance(b, Mapping):
        return list(a.keys()) == list(b.keys()) and all(values_equal(a[k], b[k]) for k in a)
    if isinstance(a, (list, tuple, Mapping)) or isinstance(b, (list, tuple, Mapping)):
        return False
    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        return a == b
    return type(a) is type(b) and a == b

