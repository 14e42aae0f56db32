"""Literal sentinels for writing scalar values into spreadsheet cells."""

import json
import re
from datetime import date, datetime, time
from typing import Any, Optional

from .types import ValueKind
from .values import value_kind


NULL_SENTINEL = "null"
EMPTY_STRING_SENTINEL = '""'
EMPTY_ARRAY_SENTINEL = "[]"
EMPTY_OBJECT_SENTINEL = "{}"

_RESERVED_WORDS = frozenset({NULL_SENTINEL, "true", "false", EMPTY_ARRAY_SENTINEL, EMPTY_OBJECT_SENTINEL})
_PLACEHOLDER_PATTERN = re.compile(r"^\[(?:Array\((\d+)\)|(Object))\]$")
# Characters that cannot be stored in worksheet XML; a bare \r is read back as \n
_CONTROL_PATTERN = re.compile(r"[\x00-\x08\x0b-\x1f]")
_NUMBER_PATTERN = re.compile(r"-?(?:0|[1-9]\d*)(?:\.\d+)?(?:[eE][+-]?\d+)?")


class _Missing:
    """Marker for a cell that carries no value."""

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


def is_lossy_number(value: Any) -> bool:
    """
    Check whether a number changes on its way through a numeric cell.

    openpyxl writes numbers with "%.16g" and reads text without a point or
    exponent back as an int, so 17-digit floats, integral floats and ints
    past 16 digits do not survive as numeric cells.
    """
    text = "%.16g" % value
    stored = float(text) if any(c in text for c in ".eE") else int(text)
    return type(stored) is not type(value) or stored != value


def exact_number_text(text: str) -> Any:
    """Get the number a text cell spells out exactly, or None if it is not one."""
    if not _NUMBER_PATTERN.fullmatch(text):
        return None
    number = float(text) if any(c in text for c in ".eE") else int(text)
    canonical = repr(number) if isinstance(number, float) else str(number)
    if canonical != text or not is_lossy_number(number):
        return None
    return number


def needs_quoting(text: str) -> bool:
    """Check whether a string would be misread as a sentinel if written bare."""
    stripped = text.strip()
    if stripped.lower() in _RESERVED_WORDS:
        return True
    if len(stripped) >= 2 and stripped.startswith('"') and stripped.endswith('"'):
        return True
    # openpyxl stores strings starting with "=" as formulas
    if text.startswith("=") or _CONTROL_PATTERN.search(text):
        return True
    if exact_number_text(stripped) is not None:
        return True
    return bool(_PLACEHOLDER_PATTERN.match(stripped))


def encode_scalar(value: Any) -> Any:
    """
    Encode a scalar or empty container into a cell value.

    Args:
        value: Scalar, empty list or empty dict

    Returns:
        Value suitable for an openpyxl cell
    """
    kind = value_kind(value)

    if kind == ValueKind.NULL:
        return NULL_SENTINEL
    if kind == ValueKind.BOOL:
        return value
    if kind == ValueKind.NUMBER:
        if is_lossy_number(value):
            return repr(value) if isinstance(value, float) else str(value)
        return value
    if kind == ValueKind.STRING:
        if value == "":
            return EMPTY_STRING_SENTINEL
        if needs_quoting(value):
            return json.dumps(value, ensure_ascii=False)
        return value
    if kind == ValueKind.ARRAY and not value:
        return EMPTY_ARRAY_SENTINEL
    if kind == ValueKind.OBJECT and not value:
        return EMPTY_OBJECT_SENTINEL

    raise ValueError(f"Cannot encode non-empty {kind.value} into a single cell")


def decode_cell(raw: Any) -> Any:
    """
    Decode a cell value back into a typed value.

    Empty cells decode to MISSING. Unrecognised cell types are coerced to
    strings rather than rejected.
    """
    if raw is None:
        return MISSING

    if isinstance(raw, bool):
        return raw

    if isinstance(raw, (int, float)):
        return raw

    # Dates typed by hand in a spreadsheet tool
    if isinstance(raw, (datetime, date, time)):
        return raw.isoformat()

    if not isinstance(raw, str):
        return str(raw)

    if raw == "":
        return MISSING

    stripped = raw.strip()
    lowered = stripped.lower()

    if lowered == NULL_SENTINEL:
        return None
    if stripped == EMPTY_STRING_SENTINEL:
        return ""
    if stripped == EMPTY_ARRAY_SENTINEL:
        return []
    if stripped == EMPTY_OBJECT_SENTINEL:
        return {}
    if lowered == "true":
        return True
    if lowered == "false":
        return False

    number = exact_number_text(stripped)
    if number is not None:
        return number

    unquoted = _unquote(stripped)
    if unquoted is not None:
        return unquoted

    return raw


def encode_header(name: str) -> str:
    """Encode a column name so that it is never an empty cell."""
    stripped = name.strip()
    looks_quoted = len(stripped) >= 2 and stripped.startswith('"') and stripped.endswith('"')
    if name == "" or name.startswith("=") or looks_quoted or _CONTROL_PATTERN.search(name):
        return json.dumps(name, ensure_ascii=False)
    return name


def decode_header(raw: Any) -> Optional[str]:
    """Decode a column header cell; empty cells give None."""
    if raw is None or raw == "":
        return None
    if not isinstance(raw, str):
        if isinstance(raw, float) and raw.is_integer():
            return str(int(raw))
        return str(raw)
    unquoted = _unquote(raw.strip())
    return unquoted if unquoted is not None else raw


def placeholder_kind(raw: Any) -> Optional[ValueKind]:
    """Get the container kind named by a summary placeholder, if any."""
    if not isinstance(raw, str):
        return None
    match = _PLACEHOLDER_PATTERN.match(raw.strip())
    if not match:
        return None
    return ValueKind.OBJECT if match.group(2) else ValueKind.ARRAY


def _unquote(text: str) -> Optional[str]:
    """Decode a JSON-quoted string cell, or None if it is not one."""
    if len(text) < 2 or not (text.startswith('"') and text.endswith('"')):
        return None
    try:
        decoded = json.loads(text)
    except ValueError:
        return None
    return decoded if isinstance(decoded, str) else None
