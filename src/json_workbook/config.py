"""Configuration for the JSON Workbook codec."""

from dataclasses import dataclass, asdict, fields
from typing import Any, Dict


LEGACY_POLICIES = ("guess", "reject")


@dataclass
class CodecConfig:
    """
    Settings shared by the flattener, renderer, reader and reconstructors.

    Attributes:
        sheet_name: Title of the visible hierarchy sheet
        schema_sheet_name: Title of the hidden sheet holding the full tree
        chunk_size: Maximum characters per side-channel cell
        max_outline_level: Highest outline level written to a row (Excel caps at 7)
        strict_tables: Only arrays of flat objects are laid out as tables
        write_side_channel: Store the full tree in the hidden sheet on export
        use_side_channel: Use the hidden sheet as template on import
        legacy_ambiguity: "guess" or "reject" for ambiguous legacy rows
        min_column_width: Lower bound for computed column widths
        max_column_width: Upper bound for computed column widths
    """

    sheet_name: str = "Hierarchy"
    schema_sheet_name: str = "_schema"
    chunk_size: int = 30000
    max_outline_level: int = 7
    strict_tables: bool = True
    write_side_channel: bool = True
    use_side_channel: bool = True
    legacy_ambiguity: str = "guess"
    min_column_width: int = 4
    max_column_width: int = 60

    def __post_init__(self):
        """Validate configuration after initialization."""
        self.validate()

    def validate(self) -> None:
        """Raise ValueError when a setting is out of range."""
        if not self.sheet_name or not self.schema_sheet_name:
            raise ValueError("sheet names cannot be empty")

        if self.sheet_name == self.schema_sheet_name:
            raise ValueError("sheet_name and schema_sheet_name must differ")

        # Excel rejects cells longer than 32767 characters
        if not 0 < self.chunk_size <= 32767:
            raise ValueError("chunk_size must be between 1 and 32767")

        if not 0 <= self.max_outline_level <= 7:
            raise ValueError("max_outline_level must be between 0 and 7")

        if self.legacy_ambiguity not in LEGACY_POLICIES:
            raise ValueError(f"legacy_ambiguity must be one of {LEGACY_POLICIES}")

        if self.min_column_width <= 0 or self.max_column_width < self.min_column_width:
            raise ValueError("column widths must satisfy 0 < min <= max")

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CodecConfig':
        """Create CodecConfig from a dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})
