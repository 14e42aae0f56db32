"""Flattening of value trees into outlined rows."""

import logging
from typing import Any, List, Optional

from .cell_codec import encode_scalar
from .config import CodecConfig
from .models import Row
from .path_codec import PathCodec
from .table_detector import TableAnalysis, TableDetector
from .types import RowKind, ValueKind
from .values import SCALAR_KINDS, is_container, is_scalar, summarize, value_kind


class Flattener:
    """
    Walks a value tree depth-first and emits typed rows.

    Objects and arrays become section rows whose children sit one outline
    level deeper, arrays of flat objects become table blocks, and scalars
    become field rows. Every row carries the encoded path of its node so
    the tree can be rebuilt from the rows alone.
    """

    def __init__(self, detector: Optional[TableDetector] = None,
                 config: Optional[CodecConfig] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the flattener.

        Args:
            detector: Optional TableDetector instance
            config: Optional codec configuration
            logger: Optional logger instance
        """
        self.config = config or CodecConfig()
        self.logger = logger or logging.getLogger(__name__)
        self.detector = detector or TableDetector(strict=self.config.strict_tables, logger=self.logger)

    def flatten(self, value: Any) -> List[Row]:
        """
        Flatten a value tree into rows.

        Args:
            value: Root object or array

        Returns:
            Ordered list of rows

        Raises:
            ValueError: If the root is not an object or array
        """
        kind = value_kind(value)
        if not is_container(value):
            raise ValueError(f"Unsupported root data type: {kind.value}")

        rows: List[Row] = []

        if kind == ValueKind.ARRAY and value:
            analysis = self.detector.analyze(value)
            if analysis.is_table:
                self._flatten_table(value, analysis, None, "", 0, rows, with_header=False)
                self.logger.info(f"Flattened root table of {len(value)} rows into {len(rows)} rows")
                return rows

        self._flatten_children(value, "", 0, rows)
        self.logger.info(f"Flattened {kind.value} root into {len(rows)} rows")
        return rows

    def _flatten_node(self, value: Any, label: str, path: str, level: int, rows: List[Row]) -> None:
        """Flatten one labelled node."""
        kind = value_kind(value)

        if kind in SCALAR_KINDS or not value:
            rows.append(Row(RowKind.FIELD, level, path, label=label, value=encode_scalar(value)))
            return

        if kind == ValueKind.ARRAY:
            analysis = self.detector.analyze(value)
            if analysis.is_table:
                self._flatten_table(value, analysis, label, path, level, rows)
                return

        rows.append(Row(RowKind.SECTION, level, path, label=label, value=summarize(value)))
        self._flatten_children(value, path, level + 1, rows)

    def _flatten_children(self, container: Any, path: str, level: int, rows: List[Row]) -> None:
        """Flatten the children of an object or array in order."""
        if value_kind(container) == ValueKind.OBJECT:
            for key, child in container.items():
                self._flatten_node(child, key, PathCodec.join(path, key), level, rows)
        else:
            for index, child in enumerate(container):
                self._flatten_node(child, f"[{index}]", PathCodec.join(path, index), level, rows)

    def _flatten_table(self, array: List[Any], analysis: TableAnalysis, label: Optional[str],
                       path: str, level: int, rows: List[Row], with_header: bool = True) -> None:
        """
        Flatten an array of objects as a table block.

        Each element gets its own column-header row followed by its data
        row, so any contiguous range of rows can be read on its own.
        """
        inner_level = level
        if with_header:
            rows.append(Row(RowKind.TABLE_HEADER, level, path, label=label, value=summarize(array)))
            inner_level = level + 1

        columns = analysis.columns

        for index, element in enumerate(array):
            element_path = PathCodec.join(path, index)
            cells = []
            nested = []

            for column in columns:
                if column not in element:
                    cells.append(None)
                    continue
                cell_value = element[column]
                if is_scalar(cell_value) or not cell_value:
                    cells.append(encode_scalar(cell_value))
                else:
                    cells.append(summarize(cell_value))
                    nested.append((column, cell_value))

            rows.append(Row(RowKind.COLUMN_HEADERS, inner_level, element_path, columns=list(columns)))
            rows.append(Row(RowKind.TABLE_ROW, inner_level, element_path, columns=list(columns), cells=cells))

            for column, cell_value in nested:
                self._flatten_node(cell_value, column, PathCodec.join(element_path, column),
                                   inner_level + 1, rows)
