"""Document parser for JSON and YAML text."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from .error_handler import ErrorHandler
from .types import DocumentFormat, ValueKind
from .utils.yaml_support import dump_yaml, load_yaml
from .values import value_kind


_SUFFIX_FORMATS = {
    ".json": DocumentFormat.JSON,
    ".yaml": DocumentFormat.YAML,
    ".yml": DocumentFormat.YAML,
}


class DocumentParser:
    """
    Parses and renders the text documents that feed the codec.

    JSON and YAML are both adapters around the same value model: parsing
    yields plain dicts/lists/scalars, and dumping preserves key order.
    """

    def __init__(self, error_handler: Optional[ErrorHandler] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the document parser.

        Args:
            error_handler: Optional ErrorHandler instance
            logger: Optional logger instance
        """
        self.error_handler = error_handler or ErrorHandler()
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def detect_format(path: str, default: DocumentFormat = DocumentFormat.JSON) -> DocumentFormat:
        """Guess the document format from a file suffix."""
        return _SUFFIX_FORMATS.get(Path(path).suffix.lower(), default)

    def parse(self, text: str, fmt: DocumentFormat = DocumentFormat.JSON) -> Any:
        """
        Parse document text into a validated value tree.

        Args:
            text: JSON or YAML text
            fmt: Format of the text

        Returns:
            Parsed object or array

        Raises:
            ValueError: If the text is invalid or not an exportable tree
        """
        validation_result = self.error_handler.validate_input(text, fmt)
        if not validation_result.is_valid:
            error_messages = [error.message for error in validation_result.errors]
            raise ValueError(f"Invalid {fmt.value.upper()} input: {'; '.join(error_messages)}")

        if fmt == DocumentFormat.JSON:
            try:
                data = json.loads(text)
            except json.JSONDecodeError as e:
                raise ValueError(f"JSON parsing failed: {e.msg} at line {e.lineno}, column {e.colno}")
        else:
            data = load_yaml(text)

        value_validation = self.error_handler.validate_value(data)
        if not value_validation.is_valid:
            error_messages = [error.message for error in value_validation.errors]
            raise ValueError(f"Unsupported document: {'; '.join(error_messages)}")

        self.logger.info(f"Parsed {fmt.value} document with {value_kind(data).value} root")
        return data

    def dump(self, value: Any, fmt: DocumentFormat = DocumentFormat.JSON) -> str:
        """Render a value tree as pretty-printed JSON or YAML text."""
        if fmt == DocumentFormat.JSON:
            return json.dumps(value, ensure_ascii=False, indent=2, allow_nan=False) + "\n"
        return dump_yaml(value)

    def get_structure_statistics(self, data: Any) -> Dict[str, Any]:
        """
        Get statistics about a value tree.

        Args:
            data: Parsed value to analyze

        Returns:
            Dictionary with structure statistics
        """
        stats = {
            "max_depth": 0,
            "object_count": 0,
            "array_count": 0,
            "scalar_count": 0,
            "total_keys": 0,
            "total_items": 0,
            "root_kind": value_kind(data).value
        }
        stats["max_depth"] = self._count_elements(data, stats, 0)
        return stats

    def _count_elements(self, data: Any, stats: Dict[str, Any], depth: int) -> int:
        """Recursively count elements; returns the maximum depth."""
        kind = value_kind(data)
        max_depth = depth

        if kind == ValueKind.OBJECT:
            stats["object_count"] += 1
            stats["total_keys"] += len(data)
            for value in data.values():
                max_depth = max(max_depth, self._count_elements(value, stats, depth + 1))
        elif kind == ValueKind.ARRAY:
            stats["array_count"] += 1
            stats["total_items"] += len(data)
            for item in data:
                max_depth = max(max_depth, self._count_elements(item, stats, depth + 1))
        else:
            stats["scalar_count"] += 1

        return max_depth
