"""Row model for the flattened tabular representation."""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from ..types import RowKind


METADATA_SEPARATOR = "|"


@dataclass
class Row:
    """
    One emitted unit of the flattened representation.

    A row knows its kind, its outline level and the encoded path of the
    node it describes. Payload fields are used according to the kind:
    ``label``/``value`` for field and section rows, ``columns`` for
    column-header rows and ``cells`` for table rows.
    """

    kind: RowKind
    level: int
    path: str
    label: Optional[str] = None
    value: Any = None
    columns: List[str] = field(default_factory=list)
    cells: List[Any] = field(default_factory=list)

    def __post_init__(self):
        """Validate row after initialization."""
        self._validate()

    def _validate(self) -> None:
        """Validate row integrity."""
        if not isinstance(self.kind, RowKind):
            raise ValueError(f"Invalid kind: {self.kind}")

        if self.level < 0:
            raise ValueError("level must be non-negative")

        if self.kind == RowKind.TABLE_ROW and self.columns and len(self.cells) > len(self.columns):
            raise ValueError("table row has more cells than columns")

    def metadata(self) -> str:
        """Render the hidden metadata cell, ``kind|path``."""
        return f"{self.kind.value}{METADATA_SEPARATOR}{self.path}"

    @staticmethod
    def parse_metadata(text: Any) -> Optional[Tuple[Optional[RowKind], str]]:
        """
        Parse a metadata cell.

        Returns:
            None if the cell is not row metadata at all, otherwise a
            ``(kind, path)`` tuple where kind is None for unknown tags
        """
        if not isinstance(text, str) or METADATA_SEPARATOR not in text:
            return None

        tag, path = text.split(METADATA_SEPARATOR, 1)
        tag = tag.strip()
        try:
            return RowKind(tag), path
        except ValueError:
            if not tag or not tag.replace("-", "").isalpha():
                return None
            return None, path

    def is_header(self) -> bool:
        """Check if this row opens a section or table block."""
        return self.kind in (RowKind.SECTION, RowKind.TABLE_HEADER)

    def payload(self) -> List[Any]:
        """Get the visible cells of this row, left to right."""
        if self.kind == RowKind.COLUMN_HEADERS:
            return list(self.columns)
        if self.kind == RowKind.TABLE_ROW:
            return list(self.cells)
        return [self.label, self.value]

    def to_dict(self) -> dict:
        """Convert row to a dictionary for display and debugging."""
        return {
            "kind": self.kind.value,
            "level": self.level,
            "path": self.path,
            "label": self.label,
            "value": self.value,
            "columns": self.columns,
            "cells": self.cells,
        }
