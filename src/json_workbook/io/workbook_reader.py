"""Workbook reader turning .xlsx files back into rows."""

import json
import logging
import zipfile
from dataclasses import dataclass, field
from io import BytesIO
from typing import Any, List, Optional

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.workbook import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from ..cell_codec import decode_header
from ..config import CodecConfig
from ..models import Row
from ..types import ErrorType, ProcessingError, RowKind, SchemaSideChannelError
from ..values import is_container


@dataclass
class SheetContents:
    """Everything the importer needs from a workbook."""
    sheet_name: str
    has_metadata: bool
    rows: List[Row] = field(default_factory=list)
    grid: List[List[Any]] = field(default_factory=list)
    side_channel: Optional[str] = None
    skipped_rows: int = 0
    warnings: List[str] = field(default_factory=list)


def _first_filled(cells: List[Any]) -> Optional[int]:
    """Index of the first non-empty cell, or None."""
    for index, value in enumerate(cells):
        if value is not None and value != "":
            return index
    return None


def _trim(cells: List[Any]) -> List[Any]:
    """Drop trailing empty cells."""
    end = len(cells)
    while end and (cells[end - 1] is None or cells[end - 1] == ""):
        end -= 1
    return list(cells[:end])


class WorkbookReader:
    """
    Reads the primary sheet and the hidden side channel of a workbook.

    Sheets that carry the ``kind|path`` metadata column are parsed into
    rows. Sheets without it are returned as a raw grid for the legacy
    reconstructor.
    """

    def __init__(self, config: Optional[CodecConfig] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the workbook reader.

        Args:
            config: Optional codec configuration
            logger: Optional logger instance
        """
        self.config = config or CodecConfig()
        self.logger = logger or logging.getLogger(__name__)

    def read_bytes(self, data: bytes) -> SheetContents:
        """
        Read workbook bytes.

        Args:
            data: Contents of an .xlsx file

        Returns:
            SheetContents of the primary sheet

        Raises:
            ProcessingError: If the bytes are not a readable workbook
        """
        try:
            workbook = load_workbook(BytesIO(data), data_only=True)
        # ElementTree and lxml parse errors both derive from SyntaxError
        except (zipfile.BadZipFile, InvalidFileException, KeyError, OSError, SyntaxError) as e:
            raise ProcessingError(f"Not a readable .xlsx workbook: {e}", ErrorType.FORMAT)

        worksheet = self._primary_sheet(workbook)
        grid = [list(cells) for cells in worksheet.iter_rows(values_only=True)]

        contents = SheetContents(
            sheet_name=worksheet.title,
            has_metadata=self._has_metadata(grid),
            grid=grid,
            side_channel=self._read_side_channel(workbook)
        )

        if contents.has_metadata:
            self._parse_rows(grid, contents)

        self.logger.info(f"Read sheet {worksheet.title!r}: {len(grid)} rows, "
                         f"metadata={contents.has_metadata}, side_channel={contents.side_channel is not None}")
        return contents

    def decode_side_channel(self, text: Optional[str]) -> Any:
        """
        Parse side-channel text into the full tree.

        Raises:
            SchemaSideChannelError: If the text is missing, unparseable or not a container
        """
        if text is None:
            raise SchemaSideChannelError(f"Hidden sheet {self.config.schema_sheet_name!r} is missing or empty")

        try:
            value = json.loads(text)
        except ValueError as e:
            raise SchemaSideChannelError(f"Hidden sheet does not contain valid JSON: {e}")

        if not is_container(value):
            raise SchemaSideChannelError(f"Hidden sheet root must be an object or array, got {type(value).__name__}")

        return value

    def _primary_sheet(self, workbook: Workbook) -> Worksheet:
        """Pick the hierarchy sheet, falling back to the first visible sheet."""
        if self.config.sheet_name in workbook.sheetnames:
            return workbook[self.config.sheet_name]

        for worksheet in workbook.worksheets:
            if worksheet.title != self.config.schema_sheet_name and worksheet.sheet_state == "visible":
                return worksheet

        return workbook.worksheets[0]

    def _has_metadata(self, grid: List[List[Any]]) -> bool:
        """Check whether column A carries row metadata."""
        for cells in grid:
            if not cells:
                continue
            parsed = Row.parse_metadata(cells[0])
            if parsed is not None and parsed[0] is not None:
                return True
        return False

    def _parse_rows(self, grid: List[List[Any]], contents: SheetContents) -> None:
        """Parse metadata rows, locating payload cells through the staircase."""
        header_start: Optional[int] = None

        for row_number, cells in enumerate(grid, start=1):
            if not cells:
                continue

            parsed = Row.parse_metadata(cells[0])
            if parsed is None:
                self.logger.debug(f"Row {row_number}: no metadata, ignored")
                continue

            kind, path = parsed
            if kind is None:
                contents.skipped_rows += 1
                message = f"Row {row_number}: unknown row kind in {cells[0]!r}"
                contents.warnings.append(message)
                self.logger.warning(message)
                continue

            visible = _trim(cells[1:])
            start = _first_filled(visible)

            if kind == RowKind.COLUMN_HEADERS:
                header_start = start
                if start is None:
                    contents.rows.append(Row(kind, 0, path))
                    continue
                columns = [decode_header(value) for value in visible[start:]]
                contents.rows.append(Row(kind, start, path, columns=columns))
                continue

            if kind == RowKind.TABLE_ROW:
                # Leading cells of a table row may be blank; align with its headers
                if header_start is not None:
                    start = header_start
                contents.rows.append(Row(kind, start or 0, path, cells=visible[start or 0:]))
                continue

            header_start = None

            if start is None:
                contents.rows.append(Row(kind, 0, path))
                continue

            label = visible[start]
            value = visible[start + 1] if start + 1 < len(visible) else None
            contents.rows.append(Row(kind, start, path, label=str(label), value=value))

    def _read_side_channel(self, workbook: Workbook) -> Optional[str]:
        """Concatenate the hidden sheet's column A in row order."""
        if self.config.schema_sheet_name not in workbook.sheetnames:
            return None

        parts = []
        for (value,) in workbook[self.config.schema_sheet_name].iter_rows(min_col=1, max_col=1, values_only=True):
            if value is None:
                continue
            parts.append(str(value))

        return "".join(parts) or None
