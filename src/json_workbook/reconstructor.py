"""Reconstruction of value trees from outlined rows."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .cell_codec import MISSING, decode_cell, placeholder_kind
from .config import CodecConfig
from .models import Row
from .path_codec import PathCodec
from .types import NoRootDeterminedError, Path, PathDecodeError, PathSegment, RowKind, ValueKind
from .values import is_container, value_kind


class _SparseArray:
    """Array under construction, keyed by original index."""

    __slots__ = ("items",)

    def __init__(self, items: Optional[Dict[int, Any]] = None):
        self.items: Dict[int, Any] = items or {}


@dataclass
class ReconstructionReport:
    """Diagnostics collected while rebuilding a tree."""
    applied_rows: int = 0
    skipped_rows: int = 0
    used_template: bool = False
    warnings: List[str] = field(default_factory=list)


@dataclass
class _ReconstructionState:
    """State owned by a single reconstruct call."""
    root: Any = None
    columns: Optional[List[str]] = None
    report: ReconstructionReport = field(default_factory=ReconstructionReport)


def _to_builder(value: Any) -> Any:
    """Copy a plain value into builder form."""
    kind = value_kind(value)
    if kind == ValueKind.OBJECT:
        return {key: _to_builder(child) for key, child in value.items()}
    if kind == ValueKind.ARRAY:
        return _SparseArray({index: _to_builder(child) for index, child in enumerate(value)})
    return value


def _finalize(node: Any) -> Any:
    """Convert builder form back into plain values, compacting arrays."""
    if isinstance(node, _SparseArray):
        return [_finalize(node.items[index]) for index in sorted(node.items)]
    if isinstance(node, dict):
        return {key: _finalize(child) for key, child in node.items()}
    return node


def _kind_for_segment(segment: PathSegment) -> ValueKind:
    return ValueKind.ARRAY if isinstance(segment, int) else ValueKind.OBJECT


def _is_kind(node: Any, kind: ValueKind) -> bool:
    if kind == ValueKind.ARRAY:
        return isinstance(node, _SparseArray)
    return isinstance(node, dict)


def _new_container(kind: ValueKind) -> Any:
    return _SparseArray() if kind == ValueKind.ARRAY else {}


def _get_child(node: Any, segment: PathSegment) -> Any:
    if isinstance(node, _SparseArray):
        return node.items.get(segment)
    return node.get(segment)


def _set_child(node: Any, segment: PathSegment, child: Any) -> None:
    if isinstance(node, _SparseArray):
        node.items[segment] = child
    else:
        node[segment] = child


class Reconstructor:
    """
    Rebuilds a value tree from rows produced by the Flattener.

    The encoded path on each row is authoritative; outline levels and
    labels are presentation only. When the full original tree is supplied
    it is used as a template so that rows deleted in a spreadsheet tool do
    not delete data.
    """

    def __init__(self, config: Optional[CodecConfig] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the reconstructor.

        Args:
            config: Optional codec configuration
            logger: Optional logger instance
        """
        self.config = config or CodecConfig()
        self.logger = logger or logging.getLogger(__name__)
        # Warnings of the most recent call
        self.warnings: List[str] = []

    def reconstruct(self, rows: Iterable[Row], full_tree_hint: Any = None) -> Any:
        """
        Rebuild a value tree from rows.

        Args:
            rows: Rows in file order
            full_tree_hint: Optional exact original tree used as template

        Returns:
            Reconstructed object or array

        Raises:
            NoRootDeterminedError: If no row yields a usable root and no hint is given
        """
        value, _ = self.reconstruct_with_report(rows, full_tree_hint)
        return value

    def reconstruct_with_report(self, rows: Iterable[Row],
                                full_tree_hint: Any = None) -> Tuple[Any, ReconstructionReport]:
        """Rebuild a value tree and return it with a ReconstructionReport."""
        state = _ReconstructionState()
        self.warnings = state.report.warnings

        if full_tree_hint is not None:
            if is_container(full_tree_hint):
                state.root = _to_builder(full_tree_hint)
                state.report.used_template = True
            else:
                self._warn(state, "Ignoring full-tree hint that is not an object or array")

        for row_number, row in enumerate(rows, start=1):
            try:
                applied = self._apply_row(state, row)
            except PathDecodeError as e:
                state.columns = None
                self._skip(state, f"Row {row_number}: {e}")
                continue

            if applied:
                state.report.applied_rows += 1

        if state.root is None:
            raise NoRootDeterminedError("No data found", context={"warnings": state.report.warnings})

        self.logger.info(f"Reconstructed tree from {state.report.applied_rows} rows "
                         f"({state.report.skipped_rows} skipped, template={state.report.used_template})")
        return _finalize(state.root), state.report

    def _apply_row(self, state: _ReconstructionState, row: Row) -> bool:
        """Apply one row to the state; returns False when the row is ignored."""
        if row.kind == RowKind.COLUMN_HEADERS:
            state.columns = list(row.columns)
            return True

        if row.kind != RowKind.TABLE_ROW:
            state.columns = None

        if not row.path:
            self.logger.debug(f"Ignoring {row.kind.value} row without path")
            return False

        path = PathCodec.decode(row.path)

        if not self._ensure_root(state, path):
            return False

        if row.kind == RowKind.FIELD:
            return self._apply_field(state, row, path)
        if row.kind in (RowKind.SECTION, RowKind.TABLE_HEADER):
            return self._apply_header(state, row, path)
        if row.kind == RowKind.TABLE_ROW:
            return self._apply_table_row(state, row, path)

        self._skip(state, f"Unexpected row kind {row.kind.value} at {row.path!r}")
        return False

    def _ensure_root(self, state: _ReconstructionState, path: Path) -> bool:
        """Create the root from the first usable path, or check it matches."""
        needed = _kind_for_segment(path[0])

        if state.root is None:
            state.root = _new_container(needed)
            self.logger.debug(f"Root determined as {needed.value}")
            return True

        if not _is_kind(state.root, needed):
            self._skip(state, f"Path {PathCodec.encode(path)!r} does not match the {self._root_kind(state).value} root")
            return False

        return True

    def _apply_field(self, state: _ReconstructionState, row: Row, path: Path) -> bool:
        value = decode_cell(row.value)
        if value is MISSING:
            self.logger.debug(f"Field {row.path!r} has no value, keeping existing data")
            return False

        parent = self._ensure_container(state.root, path[:-1], _kind_for_segment(path[-1]))
        _set_child(parent, path[-1], _to_builder(value))
        return True

    def _apply_header(self, state: _ReconstructionState, row: Row, path: Path) -> bool:
        kind = placeholder_kind(row.value)
        if kind is None and row.kind == RowKind.TABLE_HEADER:
            kind = ValueKind.ARRAY
        if kind is None:
            # Children will create the container with the right kind
            return False

        self._ensure_container(state.root, path, kind)
        return True

    def _apply_table_row(self, state: _ReconstructionState, row: Row, path: Path) -> bool:
        if state.columns is None:
            self._skip(state, f"Table row {row.path!r} has no column headers before it")
            return False

        element = self._ensure_container(state.root, path, ValueKind.OBJECT)

        for column, raw in zip(state.columns, row.cells):
            if column is None or placeholder_kind(raw) is not None:
                continue
            value = decode_cell(raw)
            if value is MISSING:
                continue
            element[column] = _to_builder(value)

        return True

    def _ensure_container(self, root: Any, path: Path, kind: ValueKind) -> Any:
        """
        Walk path from root, creating or replacing containers as needed.

        Intermediate container kinds follow the next segment; the final
        container has the requested kind.
        """
        node = root
        for position, segment in enumerate(path):
            if position + 1 < len(path):
                needed = _kind_for_segment(path[position + 1])
            else:
                needed = kind
            child = _get_child(node, segment)
            if not _is_kind(child, needed):
                child = _new_container(needed)
                _set_child(node, segment, child)
            node = child
        return node

    def _root_kind(self, state: _ReconstructionState) -> ValueKind:
        return ValueKind.ARRAY if isinstance(state.root, _SparseArray) else ValueKind.OBJECT

    def _skip(self, state: _ReconstructionState, message: str) -> None:
        state.report.skipped_rows += 1
        self._warn(state, message)

    def _warn(self, state: _ReconstructionState, message: str) -> None:
        state.report.warnings.append(message)
        self.logger.warning(message)
