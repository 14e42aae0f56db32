"""Workbook I/O operations for the JSON Workbook codec."""

from .workbook_reader import SheetContents, WorkbookReader
from .workbook_writer import WorkbookWriter

__all__ = ["SheetContents", "WorkbookReader", "WorkbookWriter"]
