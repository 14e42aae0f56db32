"""Main JSON Workbook transformer implementation."""

import asyncio
import logging
from pathlib import Path
from typing import Any, List, Optional

from .config import CodecConfig
from .error_handler import ErrorHandler
from .flattener import Flattener
from .io import WorkbookReader, WorkbookWriter
from .legacy_reconstructor import LegacyReconstructor, Resolver
from .models import Row
from .parser import DocumentParser
from .profiler import PerformanceProfiler
from .reconstructor import Reconstructor
from .table_detector import TableDetector
from .types import (
    DocumentFormat,
    ErrorType,
    ExportResult,
    ImportResult,
    ProcessingError,
    SchemaSideChannelError,
    WorkbookTransformerInterface,
)


class WorkbookTransformer(WorkbookTransformerInterface):
    """
    Main implementation of the workbook transformer interface.

    Provides bidirectional conversion between JSON-like value trees and
    outlined spreadsheet workbooks that survive manual editing.
    """

    def __init__(self, config: Optional[CodecConfig] = None,
                 logger: Optional[logging.Logger] = None,
                 legacy_resolver: Optional[Resolver] = None):
        """
        Initialize the workbook transformer.

        Args:
            config: Optional codec configuration
            logger: Optional logger instance
            legacy_resolver: Optional callable deciding ambiguous legacy rows
        """
        self.config = config or CodecConfig()
        self.logger = logger or logging.getLogger(__name__)

        self.error_handler = ErrorHandler(self.logger)
        self.parser = DocumentParser(self.error_handler, self.logger)
        self.detector = TableDetector(strict=self.config.strict_tables, logger=self.logger)
        self.flattener = Flattener(self.detector, self.config, self.logger)
        self.reconstructor = Reconstructor(self.config, self.logger)
        self.legacy_reconstructor = LegacyReconstructor(self.config, legacy_resolver, self.logger)
        self.writer = WorkbookWriter(self.config, self.logger)
        self.reader = WorkbookReader(self.config, self.logger)
        self.profiler = PerformanceProfiler(self.logger)

    def flatten(self, value: Any) -> List[Row]:
        """Flatten a value tree into rows without rendering a workbook."""
        return self.flattener.flatten(value)

    def export_bytes(self, value: Any) -> ExportResult:
        """
        Export a value tree into workbook bytes.

        Args:
            value: Root object or array

        Returns:
            ExportResult with the .xlsx bytes on success
        """
        validation = self.error_handler.validate_value(value)
        if not validation.is_valid:
            return ExportResult(
                success=False,
                errors=[error.message for error in validation.errors]
            )

        try:
            with self.profiler.profile_operation("export"):
                rows = self.flattener.flatten(value)
                data = self.writer.write_bytes(rows, value)
                self.profiler.record_output(output_size=len(data), row_count=len(rows))
        except (ProcessingError, ValueError, TypeError) as e:
            self.logger.error(f"Export failed: {e}")
            return ExportResult(success=False, errors=[f"Export failed: {str(e)}"])

        self.logger.info(f"Exported {len(rows)} rows ({len(data)} bytes)")
        return ExportResult(success=True, data=data, row_count=len(rows))

    def export_text(self, text: str, fmt: DocumentFormat = DocumentFormat.JSON) -> ExportResult:
        """Parse a JSON or YAML document and export it."""
        try:
            value = self.parser.parse(text, fmt)
        except ValueError as e:
            return ExportResult(success=False, errors=[str(e)])
        return self.export_bytes(value)

    def import_bytes(self, data: bytes) -> ImportResult:
        """
        Import a value tree from workbook bytes.

        A failed import never returns a partial tree.

        Args:
            data: Contents of an .xlsx file

        Returns:
            ImportResult with the reconstructed value on success
        """
        try:
            with self.profiler.profile_operation("import", input_size=len(data)):
                result = self._import_contents(data)
                self.profiler.record_output(row_count=result.row_count)
        except ProcessingError as e:
            response = self.error_handler.handle_processing_error(e)
            return ImportResult(success=False, errors=[str(e), response.suggested_action])

        return result

    async def export_file(self, value: Any, output_path: str) -> ExportResult:
        """
        Export a value tree into a workbook file.

        Args:
            value: Root object or array
            output_path: Destination .xlsx path

        Returns:
            ExportResult; ``data`` holds the bytes that were written
        """
        result = self.export_bytes(value)
        if not result.success:
            return result

        try:
            await asyncio.to_thread(self._write_output, output_path, result.data)
        except OSError as e:
            error = ProcessingError(f"Failed to write {output_path}: {e}", ErrorType.FILESYSTEM,
                                    context={"path": output_path})
            response = self.error_handler.handle_processing_error(error)
            return ExportResult(success=False, errors=[str(error), response.suggested_action])

        result.output_path = str(Path(output_path).absolute())
        return result

    async def import_file(self, input_path: str) -> ImportResult:
        """
        Import a value tree from a workbook file.

        Args:
            input_path: Source .xlsx path

        Returns:
            ImportResult with the reconstructed value on success
        """
        try:
            data = await asyncio.to_thread(Path(input_path).read_bytes)
        except OSError as e:
            error = ProcessingError(f"Failed to read {input_path}: {e}", ErrorType.FILESYSTEM,
                                    context={"path": input_path})
            response = self.error_handler.handle_processing_error(error)
            return ImportResult(success=False, errors=[str(error), response.suggested_action])

        return self.import_bytes(data)

    def _import_contents(self, data: bytes) -> ImportResult:
        """Read the workbook and pick the reconstruction strategy."""
        contents = self.reader.read_bytes(data)
        warnings = list(contents.warnings)

        hint = None
        if self.config.use_side_channel:
            try:
                hint = self.reader.decode_side_channel(contents.side_channel)
            except SchemaSideChannelError as e:
                self.logger.warning(f"Side channel unusable, importing from visible rows only: {e}")
                warnings.append(str(e))

        if contents.has_metadata:
            value, report = self.reconstructor.reconstruct_with_report(contents.rows, hint)
            warnings.extend(report.warnings)
            return ImportResult(
                success=True,
                value=value,
                row_count=len(contents.rows),
                skipped_rows=contents.skipped_rows + report.skipped_rows,
                used_side_channel=report.used_template,
                warnings=warnings
            )

        self.logger.warning("No metadata column found, falling back to legacy import")
        value, legacy_report = self.legacy_reconstructor.reconstruct_with_report(contents.grid, hint)
        warnings.extend(legacy_report.warnings)
        if legacy_report.ambiguous_rows:
            warnings.append(f"{legacy_report.ambiguous_rows} ambiguous rows were resolved heuristically")
        return ImportResult(
            success=True,
            value=value,
            row_count=len(contents.grid),
            legacy=True,
            warnings=warnings
        )

    @staticmethod
    def _write_output(output_path: str, data: bytes) -> None:
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
