"""Best-effort reconstruction of sheets that lack the metadata column.

Structure is inferred from indentation alone, so the same grid can be
read more than one way. Ambiguous rows are routed to a resolver; the
default policy guesses the way older exports were read, and the "reject"
policy raises instead.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional, Tuple

from .cell_codec import MISSING, decode_cell, decode_header, placeholder_kind
from .config import CodecConfig
from .types import AmbiguousLegacyRowError, NoRootDeterminedError, ValueKind


INDENT_WIDTH = 4
HIERARCHY_HEADER = ("structure", "value", "type")
ROOT_ARRAY_LABEL = "Root Array"

_INDEX_LABEL = re.compile(r"^\[(0|[1-9][0-9]*)\]$")
_CONTAINER_TYPES = {"array": ValueKind.ARRAY, "object": ValueKind.OBJECT}


class LegacyDecision(Enum):
    """How to treat an ambiguous row found in table mode."""
    DATA = "data"
    BREAK = "break"


@dataclass
class LegacyRowContext:
    """What a resolver sees when a row is ambiguous."""
    row_number: int
    cells: List[Any]
    columns: List[Optional[str]]


Resolver = Callable[[LegacyRowContext], LegacyDecision]


@dataclass
class _Node:
    """Container under construction; kind None means not yet known."""
    kind: Optional[ValueKind] = None
    entries: List[Tuple[str, Any]] = field(default_factory=list)


@dataclass
class _Frame:
    indent: int
    node: _Node
    columns: Optional[List[Optional[str]]] = None
    table_indent: int = 0
    expect_data: bool = False


@dataclass
class _Line:
    """One normalized sheet row."""
    row_number: int
    indent: int
    cells: List[Any]
    type_hint: Optional[str] = None


@dataclass
class LegacyReport:
    """Diagnostics collected while reading a legacy sheet."""
    layout: str = "staircase"
    ambiguous_rows: int = 0
    warnings: List[str] = field(default_factory=list)


@dataclass
class _LegacyState:
    """State owned by a single legacy reconstruct call."""
    stack: List[_Frame]
    report: LegacyReport
    lines_applied: int = 0


def _first_filled(cells: List[Any]) -> Optional[int]:
    for index, value in enumerate(cells):
        if value is not None and value != "":
            return index
    return None


def _trim(cells: List[Any]) -> List[Any]:
    end = len(cells)
    while end and (cells[end - 1] is None or cells[end - 1] == ""):
        end -= 1
    return list(cells[:end])


def _finalize(value: Any) -> Any:
    if not isinstance(value, _Node):
        return value

    labels = [label for label, _ in value.entries]
    is_array = value.kind == ValueKind.ARRAY or (
        value.kind is None and labels and all(_INDEX_LABEL.match(label) for label in labels)
    )

    if is_array:
        return [_finalize(child) for _, child in value.entries]
    return {label: _finalize(child) for label, child in value.entries}


class LegacyReconstructor:
    """
    Rebuilds a tree from an indentation-only sheet.

    Two layouts are understood: the staircase layout (indent = number of
    leading empty cells) and the older three-column hierarchy export
    (``Structure | Value | Type`` with four-space indentation).
    """

    def __init__(self, config: Optional[CodecConfig] = None,
                 resolver: Optional[Resolver] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the legacy reconstructor.

        Args:
            config: Optional codec configuration
            resolver: Optional callable deciding ambiguous rows; overrides
                the configured legacy_ambiguity policy
            logger: Optional logger instance
        """
        self.config = config or CodecConfig()
        self.logger = logger or logging.getLogger(__name__)
        self.resolver = resolver or self._policy_resolver

    def reconstruct(self, grid: List[List[Any]], full_tree_hint: Any = None) -> Any:
        """
        Rebuild a value tree from a raw grid.

        Args:
            grid: Sheet rows as lists of cell values, starting at column A
            full_tree_hint: Returned when the grid holds no data

        Returns:
            Reconstructed object or array

        Raises:
            NoRootDeterminedError: If the grid holds no data and no hint is given
            AmbiguousLegacyRowError: If the resolver rejects an ambiguous row
        """
        value, _ = self.reconstruct_with_report(grid, full_tree_hint)
        return value

    def reconstruct_with_report(self, grid: List[List[Any]],
                                full_tree_hint: Any = None) -> Tuple[Any, LegacyReport]:
        """Rebuild a value tree and return it with a LegacyReport."""
        report = LegacyReport()
        root = _Node()
        lines = self._normalize(grid, report, root)
        state = _LegacyState(stack=[_Frame(indent=-1, node=root)], report=report)

        for line in lines:
            self._apply_line(state, line)

        if state.lines_applied == 0:
            if full_tree_hint is not None:
                return full_tree_hint, report
            raise NoRootDeterminedError("No data found")

        self.logger.info(f"Legacy {report.layout} import applied {state.lines_applied} rows "
                         f"({report.ambiguous_rows} ambiguous)")
        return _finalize(root), report

    def _normalize(self, grid: List[List[Any]], report: LegacyReport, root: _Node) -> List[Optional[_Line]]:
        """Convert the grid into lines; None marks a blank row."""
        rows = [_trim(list(cells)) for cells in grid]
        first = next((i for i, cells in enumerate(rows) if cells), None)
        if first is None:
            return []

        header = tuple(str(c).strip().lower() for c in rows[first] if c is not None)
        if header[:3] == HIERARCHY_HEADER:
            report.layout = "hierarchy"
            return self._normalize_hierarchy(rows[first + 1:], first + 2, root)

        lines: List[Optional[_Line]] = []
        for row_number, cells in enumerate(rows, start=1):
            start = _first_filled(cells)
            if start is None:
                lines.append(None)
                continue
            lines.append(_Line(row_number, start, cells[start:]))
        return lines

    def _normalize_hierarchy(self, rows: List[List[Any]], first_row_number: int,
                             root: _Node) -> List[Optional[_Line]]:
        """Normalize ``Structure | Value | Type`` rows."""
        lines: List[Optional[_Line]] = []
        shift = 0

        for row_number, cells in enumerate(rows, start=first_row_number):
            if not cells or cells[0] is None:
                lines.append(None)
                continue

            structure = str(cells[0])
            label = structure.lstrip(" ")
            indent = (len(structure) - len(label)) // INDENT_WIDTH
            value = cells[1] if len(cells) > 1 else None
            type_hint = str(cells[2]).strip().lower() if len(cells) > 2 and cells[2] is not None else None

            # The root array is written as its own row above its items
            if not lines and indent == 0 and label == ROOT_ARRAY_LABEL and type_hint == "array":
                root.kind = ValueKind.ARRAY
                shift = 1
                continue

            lines.append(_Line(row_number, max(indent - shift, 0), [label, value], type_hint))

        return lines

    def _apply_line(self, state: _LegacyState, line: Optional[_Line]) -> None:
        """Reduce one line into the state."""
        if line is None:
            # Blank rows end table mode
            for frame in state.stack:
                frame.columns = None
            return

        while len(state.stack) > 1 and state.stack[-1].indent >= line.indent:
            state.stack.pop()

        frame = state.stack[-1]

        if frame.columns is not None and self._apply_table_line(state, frame, line):
            state.lines_applied += 1
            return

        self._apply_plain_line(state, frame, line)
        state.lines_applied += 1

    def _apply_table_line(self, state: _LegacyState, frame: _Frame, line: _Line) -> bool:
        """Handle a line while the frame is in table mode; False hands it back."""
        if line.indent < frame.table_indent or line.indent >= frame.table_indent + len(frame.columns):
            frame.columns = None
            return False

        offset = line.indent - frame.table_indent
        cells = [None] * offset + list(line.cells)

        if [decode_header(c) for c in cells] == frame.columns:
            frame.expect_data = True
            return True

        if not frame.expect_data:
            state.report.ambiguous_rows += 1
            context = LegacyRowContext(line.row_number, cells, list(frame.columns))
            if self.resolver(context) == LegacyDecision.BREAK:
                frame.columns = None
                return False

        element = _Node(kind=ValueKind.OBJECT)
        for column, raw in zip(frame.columns, cells):
            if column is None or placeholder_kind(raw) is not None:
                continue
            value = decode_cell(raw)
            if value is not MISSING:
                element.entries.append((column, value))

        frame.node.entries.append((f"[{len(frame.node.entries)}]", element))
        frame.expect_data = False
        state.stack.append(_Frame(indent=frame.table_indent, node=element))
        return True

    def _apply_plain_line(self, state: _LegacyState, frame: _Frame, line: _Line) -> None:
        """Handle a section, field or column-header line."""
        label = decode_header(line.cells[0])
        if label is None:
            label = ""
        cells = line.cells

        if line.type_hint is not None:
            self._apply_typed_line(state, frame, line, label)
            return

        container_kind = placeholder_kind(cells[1]) if len(cells) == 2 else None

        if len(cells) == 1 or container_kind is not None:
            node = _Node(kind=container_kind)
            frame.node.entries.append((label, node))
            state.stack.append(_Frame(indent=line.indent, node=node))
            return

        enters_table = len(cells) >= 3 or (
            frame.node.kind == ValueKind.ARRAY and not _INDEX_LABEL.match(label)
        )
        if enters_table:
            frame.node.kind = ValueKind.ARRAY
            frame.columns = [decode_header(c) for c in cells]
            frame.table_indent = line.indent
            frame.expect_data = True
            return

        value = decode_cell(cells[1])
        frame.node.entries.append((label, None if value is MISSING else value))

    def _apply_typed_line(self, state: _LegacyState, frame: _Frame, line: _Line, label: str) -> None:
        """Handle a hierarchy-layout line whose Type column names the kind."""
        kind = _CONTAINER_TYPES.get(line.type_hint)
        if kind is not None:
            node = _Node(kind=kind)
            frame.node.entries.append((label, node))
            state.stack.append(_Frame(indent=line.indent, node=node))
            return

        frame.node.entries.append((label, self._coerce_typed(line.cells[1], line.type_hint, state.report)))

    def _coerce_typed(self, raw: Any, type_hint: str, report: LegacyReport) -> Any:
        """Coerce a hierarchy-layout value using its Type column."""
        if type_hint == "null":
            return None
        if type_hint == "boolean":
            if isinstance(raw, bool):
                return raw
            return str(raw).strip().lower() == "true"
        if type_hint == "number":
            if isinstance(raw, (int, float)) and not isinstance(raw, bool):
                return raw
            try:
                text = str(raw).strip()
                return float(text) if any(c in text for c in ".eE") else int(text)
            except ValueError:
                report.warnings.append(f"Could not read {raw!r} as a number")
                return raw
        if type_hint == "string":
            return "" if raw is None else str(raw)

        report.warnings.append(f"Unknown type {type_hint!r}, value kept as is")
        return raw

    def _policy_resolver(self, context: LegacyRowContext) -> LegacyDecision:
        """Resolve ambiguity according to CodecConfig.legacy_ambiguity."""
        if self.config.legacy_ambiguity == "reject":
            raise AmbiguousLegacyRowError(
                f"Row {context.row_number} could be table data or a new field",
                context={"row": context.row_number, "cells": context.cells}
            )
        self.logger.debug(f"Row {context.row_number}: ambiguous, read as table data")
        return LegacyDecision.DATA
