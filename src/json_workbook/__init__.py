"""
JSON Workbook - Bidirectional JSON to spreadsheet codec.

Flattens JSON-like value trees into outlined, human-editable workbook rows
and reconstructs the exact tree from those rows after editing.
"""

from .config import CodecConfig
from .flattener import Flattener
from .legacy_reconstructor import LegacyDecision, LegacyReconstructor
from .models import Row
from .path_codec import PathCodec
from .reconstructor import Reconstructor
from .table_detector import TableDetector
from .types import ExportResult, ImportResult, RowKind, ValueKind
from .workbook_transformer import WorkbookTransformer

__version__ = "1.0.0"
__all__ = [
    "WorkbookTransformer",
    "CodecConfig",
    "Flattener",
    "Reconstructor",
    "LegacyReconstructor",
    "LegacyDecision",
    "TableDetector",
    "PathCodec",
    "Row",
    "RowKind",
    "ValueKind",
    "ExportResult",
    "ImportResult",
]
