"""Value model helpers for JSON-like trees."""

import copy
from typing import Any

from .types import Path, ValueKind


SCALAR_KINDS = frozenset({ValueKind.NULL, ValueKind.BOOL, ValueKind.NUMBER, ValueKind.STRING})


def value_kind(value: Any) -> ValueKind:
    """
    Classify a value into its ValueKind.

    Args:
        value: Any JSON-like value

    Returns:
        ValueKind of the value

    Raises:
        TypeError: If the value is not representable as JSON
    """
    if value is None:
        return ValueKind.NULL
    # bool is a subclass of int
    if isinstance(value, bool):
        return ValueKind.BOOL
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, list):
        return ValueKind.ARRAY
    if isinstance(value, dict):
        return ValueKind.OBJECT
    raise TypeError(f"Unsupported value type: {type(value).__name__}")


def is_scalar(value: Any) -> bool:
    """Check whether a value is a scalar (null, bool, number or string)."""
    return value_kind(value) in SCALAR_KINDS


def is_container(value: Any) -> bool:
    """Check whether a value is an array or object."""
    return value_kind(value) in (ValueKind.ARRAY, ValueKind.OBJECT)


def summarize(value: Any) -> str:
    """Get the display placeholder for a container value."""
    kind = value_kind(value)
    if kind == ValueKind.ARRAY:
        return f"[Array({len(value)})]"
    if kind == ValueKind.OBJECT:
        return "[Object]"
    raise ValueError(f"Cannot summarize scalar value of kind {kind.value}")


def set_in(value: Any, path: Path, new_value: Any) -> Any:
    """
    Return a new tree with new_value stored at path.

    Containers along the path are copied; untouched siblings are shared.
    Missing intermediate containers are created as objects or arrays
    depending on the next segment.
    """
    if not path:
        return copy.deepcopy(new_value)

    head, tail = path[0], path[1:]

    if isinstance(head, int):
        items = list(value) if isinstance(value, list) else []
        while len(items) <= head:
            items.append(None)
        items[head] = set_in(items[head], tail, new_value)
        return items

    mapping = dict(value) if isinstance(value, dict) else {}
    mapping[head] = set_in(mapping.get(head), tail, new_value)
    return mapping


def remove_in(value: Any, path: Path) -> Any:
    """Return a new tree with the node at path removed; array items shift left."""
    if not path:
        return None

    head, tail = path[0], path[1:]
    kind = value_kind(value)

    if kind == ValueKind.ARRAY and isinstance(head, int):
        if not 0 <= head < len(value):
            return list(value)
        if not tail:
            return [item for i, item in enumerate(value) if i != head]
        items = list(value)
        items[head] = remove_in(items[head], tail)
        return items

    if kind == ValueKind.OBJECT and isinstance(head, str):
        if head not in value:
            return dict(value)
        mapping = dict(value)
        if not tail:
            del mapping[head]
        else:
            mapping[head] = remove_in(mapping[head], tail)
        return mapping

    return copy.deepcopy(value)
