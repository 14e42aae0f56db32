"""Workbook writer rendering rows into an outlined .xlsx file."""

import json
import logging
from io import BytesIO
from typing import Any, List, Optional

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.properties import Outline
from openpyxl.worksheet.worksheet import Worksheet

from ..cell_codec import encode_header, placeholder_kind
from ..config import CodecConfig
from ..models import Row
from ..types import RowKind


HEADER_FONT = Font(bold=True)
COLUMN_HEADER_FONT = Font(italic=True)
COLUMN_HEADER_FILL = PatternFill(start_color="DDDDDD", end_color="DDDDDD", fill_type="solid")
PLACEHOLDER_FONT = Font(color="808080")


class WorkbookWriter:
    """
    Renders flattened rows into a workbook.

    Layout of the primary sheet: column A holds hidden ``kind|path``
    metadata, then one empty column per outline level, then the row's
    label/value or table cells. The full tree is stored as JSON text in a
    hidden sheet, split into chunks that fit a single cell.
    """

    def __init__(self, config: Optional[CodecConfig] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the workbook writer.

        Args:
            config: Optional codec configuration
            logger: Optional logger instance
        """
        self.config = config or CodecConfig()
        self.logger = logger or logging.getLogger(__name__)

    def render(self, rows: List[Row], full_tree: Any = None) -> Workbook:
        """
        Render rows into a new workbook.

        Args:
            rows: Flattened rows in order
            full_tree: Optional original tree for the hidden side channel

        Returns:
            openpyxl Workbook
        """
        workbook = Workbook()
        worksheet = workbook.active
        worksheet.title = self.config.sheet_name
        # Parents above children, like a tree view
        worksheet.sheet_properties.outlinePr = Outline(summaryBelow=False, summaryRight=True)

        max_column = 1
        for row_index, row in enumerate(rows, start=1):
            self._write_cell(worksheet, row_index, 1, row.metadata())
            max_column = max(max_column, self._render_row(worksheet, row_index, row))

            level = min(row.level, self.config.max_outline_level)
            if level:
                worksheet.row_dimensions[row_index].outlineLevel = level

        worksheet.column_dimensions["A"].hidden = True
        self._auto_adjust_columns(worksheet, max_column)

        if full_tree is not None and self.config.write_side_channel:
            self._write_side_channel(workbook, full_tree)

        self.logger.debug(f"Rendered {len(rows)} rows across {max_column} columns")
        return workbook

    def write_bytes(self, rows: List[Row], full_tree: Any = None) -> bytes:
        """Render rows and serialize the workbook to bytes."""
        buffer = BytesIO()
        self.render(rows, full_tree).save(buffer)
        return buffer.getvalue()

    def _render_row(self, worksheet: Worksheet, row_index: int, row: Row) -> int:
        """Write the visible cells of one row; returns the last column used."""
        start = 2 + row.level
        last = start

        if row.kind == RowKind.COLUMN_HEADERS:
            for offset, name in enumerate(row.columns):
                cell = self._write_cell(worksheet, row_index, start + offset, encode_header(name))
                cell.font = COLUMN_HEADER_FONT
                cell.fill = COLUMN_HEADER_FILL
                last = start + offset
            return last

        if row.kind == RowKind.TABLE_ROW:
            for offset, value in enumerate(row.cells):
                if value is None:
                    continue
                cell = self._write_cell(worksheet, row_index, start + offset, value)
                if placeholder_kind(value) is not None:
                    cell.font = PLACEHOLDER_FONT
                last = start + offset
            return last

        if row.label is not None:
            # Empty keys still need a visible label so the staircase can be read back
            label_cell = self._write_cell(worksheet, row_index, start, encode_header(row.label))
            if row.is_header():
                label_cell.font = HEADER_FONT

        if row.value is not None:
            value_cell = self._write_cell(worksheet, row_index, start + 1, row.value)
            if row.is_header():
                value_cell.font = PLACEHOLDER_FONT
            last = start + 1

        return last

    def _write_cell(self, worksheet: Worksheet, row: int, column: int, value: Any):
        """Write a cell, keeping strings that start with "=" as text."""
        cell = worksheet.cell(row=row, column=column, value=value)
        if isinstance(value, str) and value.startswith("="):
            cell.data_type = "s"
        return cell

    def _auto_adjust_columns(self, worksheet: Worksheet, num_columns: int) -> None:
        """Auto-adjust visible column widths based on content."""
        for col_idx in range(2, num_columns + 1):
            max_length = 0
            column_letter = get_column_letter(col_idx)

            for column_cells in worksheet.iter_cols(min_col=col_idx, max_col=col_idx):
                for cell in column_cells:
                    if cell.value is not None:
                        max_length = max(max_length, len(str(cell.value)))

            adjusted_width = min(max(max_length + 2, self.config.min_column_width),
                                 self.config.max_column_width)
            worksheet.column_dimensions[column_letter].width = adjusted_width

    def _write_side_channel(self, workbook: Workbook, full_tree: Any) -> None:
        """Store the full tree as chunked JSON text in a hidden sheet."""
        hidden_sheet = workbook.create_sheet(self.config.schema_sheet_name)
        hidden_sheet.sheet_state = "hidden"

        text = json.dumps(full_tree, ensure_ascii=False, separators=(",", ":"), allow_nan=False)
        size = self.config.chunk_size
        chunks = [text[i:i + size] for i in range(0, len(text), size)]

        for row_idx, chunk in enumerate(chunks, start=1):
            self._write_cell(hidden_sheet, row_idx, 1, chunk)

        self.logger.debug(f"Stored side channel of {len(text)} characters in {len(chunks)} chunks")
