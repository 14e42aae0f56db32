"""Detection of arrays that can be laid out as tables."""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

from .types import ValueKind
from .values import is_container, value_kind


@dataclass
class TableAnalysis:
    """Result of analyzing an array for table layout."""
    is_table: bool
    columns: List[str] = field(default_factory=list)
    row_count: int = 0
    nested_columns: List[str] = field(default_factory=list)
    reason: Optional[str] = None


class TableDetector:
    """
    Classifies arrays as tables (rows of flat objects) or plain lists.

    In strict mode an array is a table only when every element is an
    object whose values are all scalars. In loose mode nested values are
    allowed and get summarized in their cells.
    """

    def __init__(self, strict: bool = True, logger: Optional[logging.Logger] = None):
        """
        Initialize the table detector.

        Args:
            strict: Reject elements that contain nested arrays or objects
            logger: Optional logger instance
        """
        self.strict = strict
        self.logger = logger or logging.getLogger(__name__)

    def is_table(self, array: List[Any]) -> bool:
        """Check if an array should be laid out as a table."""
        return self.analyze(array).is_table

    def columns(self, array: List[Any]) -> List[str]:
        """
        Get the union of element keys in first-seen order.

        Non-object elements are ignored.
        """
        seen = {}
        for element in array:
            if value_kind(element) == ValueKind.OBJECT:
                for key in element:
                    seen.setdefault(key, None)
        return list(seen)

    def analyze(self, array: List[Any]) -> TableAnalysis:
        """
        Analyze an array for table layout.

        Args:
            array: Array value to analyze

        Returns:
            TableAnalysis describing the decision
        """
        if value_kind(array) != ValueKind.ARRAY:
            raise ValueError(f"TableDetector expects an array, got {type(array).__name__}")

        if not array:
            return TableAnalysis(is_table=False, reason="empty array")

        for index, element in enumerate(array):
            if value_kind(element) != ValueKind.OBJECT:
                return TableAnalysis(
                    is_table=False,
                    row_count=len(array),
                    reason=f"element [{index}] is not an object"
                )

        nested_columns = {}
        for element in array:
            for key, value in element.items():
                # Empty containers fit in one cell as sentinels
                if is_container(value) and value:
                    nested_columns.setdefault(key, None)

        columns = self.columns(array)

        if not columns:
            return TableAnalysis(is_table=False, row_count=len(array), reason="elements have no keys")

        if nested_columns and self.strict:
            self.logger.debug(f"Array rejected as table, nested columns: {list(nested_columns)}")
            return TableAnalysis(
                is_table=False,
                columns=columns,
                row_count=len(array),
                nested_columns=list(nested_columns),
                reason="elements contain nested structures"
            )

        return TableAnalysis(
            is_table=True,
            columns=columns,
            row_count=len(array),
            nested_columns=list(nested_columns)
        )
