"""Error handling implementation for the JSON Workbook codec."""

import logging
from typing import Any, Optional

from .types import (
    DocumentFormat,
    ErrorHandlerInterface,
    ErrorResponse,
    ErrorType,
    ProcessingError,
    ValidationError,
    ValidationResult,
)
from .utils.validation import ValidationUtils


class ErrorHandler(ErrorHandlerInterface):
    """
    Error handler for export and import operations.

    Validates input documents and value trees, and maps processing errors
    to recovery suggestions that the facade and CLI report to the user.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the error handler.

        Args:
            logger: Optional logger instance for error reporting
        """
        self.logger = logger or logging.getLogger(__name__)

    def validate_input(self, input_data: str, fmt: DocumentFormat = DocumentFormat.JSON) -> ValidationResult:
        """
        Validate input document text.

        Args:
            input_data: JSON or YAML text to validate
            fmt: Format of the text

        Returns:
            ValidationResult with validation details
        """
        try:
            return ValidationUtils.validate_document(input_data, fmt)
        except Exception as e:
            self.logger.error(f"Unexpected error during input validation: {e}")
            return ValidationResult(
                is_valid=False,
                errors=[ValidationError(
                    type=ErrorType.SYNTAX,
                    message=f"Validation failed with unexpected error: {str(e)}",
                    location="input"
                )],
                warnings=[]
            )

    def validate_value(self, value: Any) -> ValidationResult:
        """Validate that a value tree can be exported."""
        result = ValidationUtils.validate_value(value)
        for warning in result.warnings:
            self.logger.warning(warning)
        return result

    def handle_processing_error(self, error: ProcessingError) -> ErrorResponse:
        """
        Handle processing errors and provide recovery suggestions.

        Args:
            error: ProcessingError to handle

        Returns:
            ErrorResponse with recovery information
        """
        self.logger.error(f"Processing error: {error.error_type.value} - {error}")

        if error.error_type == ErrorType.PATH:
            return ErrorResponse(
                can_recover=True,
                suggested_action="The row's hidden path cell was edited or corrupted. "
                                 "The row is skipped; restore column A from a fresh export to keep it.",
                partial_results=error.context
            )
        elif error.error_type == ErrorType.SIDE_CHANNEL:
            return ErrorResponse(
                can_recover=True,
                suggested_action="The hidden schema sheet is missing or damaged. "
                                 "Import continues from the visible rows only; deleted rows will be lost.",
                partial_results=None
            )
        elif error.error_type == ErrorType.NO_ROOT:
            return ErrorResponse(
                can_recover=False,
                suggested_action="No data found. Check that the workbook was exported by this tool "
                                 "or follows the Structure/Value/Type layout.",
                partial_results=None
            )
        elif error.error_type == ErrorType.AMBIGUOUS:
            return ErrorResponse(
                can_recover=True,
                suggested_action="The legacy sheet cannot be read unambiguously. "
                                 "Retry with the 'guess' policy or re-export the data with this tool.",
                partial_results=error.context
            )
        elif error.error_type == ErrorType.FORMAT:
            return ErrorResponse(
                can_recover=False,
                suggested_action="The input is not a readable .xlsx workbook.",
                partial_results=None
            )
        elif error.error_type == ErrorType.FILESYSTEM:
            return ErrorResponse(
                can_recover=True,
                suggested_action="Check file permissions, available disk space, and directory access.",
                partial_results=error.context.get('path') if error.context else None
            )
        elif error.error_type in (ErrorType.SYNTAX, ErrorType.STRUCTURE):
            return ErrorResponse(
                can_recover=False,
                suggested_action="Fix the input document so that it parses into an object or array "
                                 "of JSON values.",
                partial_results=None
            )
        else:
            return ErrorResponse(
                can_recover=False,
                suggested_action="Unknown error type. Please check logs and retry.",
                partial_results=None
            )
