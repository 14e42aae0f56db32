"""Core type definitions for the JSON Workbook codec."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Tuple, Union


PathSegment = Union[str, int]
Path = Tuple[PathSegment, ...]


class ValueKind(Enum):
    """Enumeration of JSON value kinds."""
    NULL = "null"
    BOOL = "boolean"
    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"


class RowKind(Enum):
    """Enumeration of row kinds, valued by their metadata tag."""
    FIELD = "field"
    SECTION = "section"
    TABLE_HEADER = "table-header"
    COLUMN_HEADERS = "table-col-headers"
    TABLE_ROW = "table-row"


class DocumentFormat(Enum):
    """Enumeration of supported text document formats."""
    JSON = "json"
    YAML = "yaml"


class ErrorType(Enum):
    """Enumeration of error types."""
    SYNTAX = "syntax"
    STRUCTURE = "structure"
    PATH = "path"
    SIDE_CHANNEL = "side-channel"
    NO_ROOT = "no-root"
    AMBIGUOUS = "ambiguous"
    FILESYSTEM = "filesystem"
    FORMAT = "format"


@dataclass
class ExportResult:
    """Result of an export operation."""
    success: bool
    data: bytes = b""
    row_count: int = 0
    output_path: Optional[str] = None
    errors: Optional[List[str]] = None


@dataclass
class ImportResult:
    """Result of an import operation."""
    success: bool
    value: Any = None
    row_count: int = 0
    skipped_rows: int = 0
    used_side_channel: bool = False
    legacy: bool = False
    warnings: List[str] = field(default_factory=list)
    errors: Optional[List[str]] = None


@dataclass
class ValidationError:
    """Validation error details."""
    type: ErrorType
    message: str
    location: Optional[str] = None


@dataclass
class ValidationResult:
    """Result of input validation."""
    is_valid: bool
    errors: List[ValidationError]
    warnings: List[str]


@dataclass
class ErrorResponse:
    """Response for error handling."""
    can_recover: bool
    suggested_action: str
    partial_results: Optional[Any] = None


class ProcessingError(Exception):
    """Custom exception for processing errors."""

    def __init__(self, message: str, error_type: ErrorType, context: Optional[Any] = None):
        super().__init__(message)
        self.error_type = error_type
        self.context = context


class PathDecodeError(ProcessingError):
    """Raised when an encoded path is malformed."""

    def __init__(self, message: str, context: Optional[Any] = None):
        super().__init__(message, ErrorType.PATH, context)


class SchemaSideChannelError(ProcessingError):
    """Raised when the hidden full-tree sheet is missing or unparseable."""

    def __init__(self, message: str, context: Optional[Any] = None):
        super().__init__(message, ErrorType.SIDE_CHANNEL, context)


class NoRootDeterminedError(ProcessingError):
    """Raised when no row yields a usable root."""

    def __init__(self, message: str = "No data found", context: Optional[Any] = None):
        super().__init__(message, ErrorType.NO_ROOT, context)


class AmbiguousLegacyRowError(ProcessingError):
    """Raised when a legacy row cannot be classified and guessing is disabled."""

    def __init__(self, message: str, context: Optional[Any] = None):
        super().__init__(message, ErrorType.AMBIGUOUS, context)


# Abstract base classes for interfaces

class WorkbookTransformerInterface(ABC):
    """Abstract interface for the workbook transformer."""

    @abstractmethod
    def export_bytes(self, value: Any) -> ExportResult:
        """Export a value tree into workbook bytes."""
        pass

    @abstractmethod
    def import_bytes(self, data: bytes) -> ImportResult:
        """Import a value tree from workbook bytes."""
        pass

    @abstractmethod
    async def export_file(self, value: Any, output_path: str) -> ExportResult:
        """Export a value tree into a workbook file."""
        pass

    @abstractmethod
    async def import_file(self, input_path: str) -> ImportResult:
        """Import a value tree from a workbook file."""
        pass


class ErrorHandlerInterface(ABC):
    """Abstract interface for error handling."""

    @abstractmethod
    def validate_input(self, input_data: str, fmt: DocumentFormat) -> ValidationResult:
        """Validate input document text."""
        pass

    @abstractmethod
    def handle_processing_error(self, error: ProcessingError) -> ErrorResponse:
        """Handle processing errors."""
        pass
