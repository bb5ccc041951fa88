"""Data models for the canonical column structure and reconciliation results."""

from typing import Any, Optional
from pydantic import BaseModel, Field

MAIN_HEADER_SOURCE = "Main header"


def fallback_source(alias_index: int) -> str:
    """Label for a match made through the alias at ``alias_index`` (0-based).

    Alias 0 sits on row 2 of the structure sheet, hence the offset. The number
    is relative to the column's own alias list, not a literal sheet row.
    """
    return f"Row {alias_index + 2}"


def synthesized_header(column_index: int) -> str:
    """Placeholder name for a blank header cell (1-based)."""
    return f"Column_{column_index + 1}"


class StructureColumn(BaseModel):
    """A canonical column and the historical names it is known by."""

    main_header: str
    aliases: list[str] = Field(default_factory=list)


class ColumnMeta(BaseModel):
    """Per-column match information from one matching pass. Never persisted."""

    match_found: bool = False
    is_fallback: bool = False
    match_source: Optional[str] = None  # "Main header" or "Row <n>"
    is_new_column: bool = False


class HeaderMatch(BaseModel):
    """How a single uploaded header was resolved."""

    uploaded_header: str
    column_index: int  # 0-based position in the uploaded header row
    main_header: str
    match_source: Optional[str] = None
    is_fallback: bool = False
    is_new_column: bool = False


class MatchCounts(BaseModel):
    """Aggregate counts for a matching pass."""

    total_columns: int = 0
    matched_columns: int = 0
    fallback_matches: int = 0
    new_columns: int = 0


class MatchResult(BaseModel):
    """Result of matching uploaded headers against a structure."""

    mapping: dict[str, str]  # uploaded header -> main header
    structure: list[StructureColumn]  # input structure plus registered columns
    meta: list[ColumnMeta]  # parallel to ``structure``
    matches: list[HeaderMatch]  # one per uploaded header, in upload order
    counts: MatchCounts

    @property
    def new_column_names(self) -> list[str]:
        return [m.uploaded_header for m in self.matches if m.is_new_column]


class ReconciliationSummary(BaseModel):
    """Summary reported back after processing an upload."""

    total_columns: int
    matched_columns: int
    fallback_matches: int
    new_columns: int
    processed_sheet: str
    success: bool = True
    output_file_name: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalColumns": self.total_columns,
            "matchedColumns": self.matched_columns,
            "fallbackMatches": self.fallback_matches,
            "newColumns": self.new_columns,
            "processedSheet": self.processed_sheet,
            "success": self.success,
            "outputFileName": self.output_file_name,
        }


class ProcessResult(BaseModel):
    """Everything produced by reconciling one upload."""

    structure: list[StructureColumn]
    meta: list[ColumnMeta]
    summary: ReconciliationSummary
    output_file_name: str


def render_column(column: StructureColumn, meta: Optional[ColumnMeta] = None) -> dict[str, Any]:
    """Render a structure column and its match info for JSON responses."""
    meta = meta or ColumnMeta()
    rendered: dict[str, Any] = {
        "mainHeader": column.main_header,
        "aliases": list(column.aliases),
        "matchFound": meta.match_found,
        "isFallback": meta.is_fallback,
        "isNewColumn": meta.is_new_column,
    }
    if meta.match_source is not None:
        rendered["matchSource"] = meta.match_source
    return rendered


def render_structure(
    structure: list[StructureColumn], meta: Optional[list[ColumnMeta]] = None
) -> list[dict[str, Any]]:
    """Render a whole structure; without ``meta`` all derived fields are false."""
    if meta is None:
        return [render_column(column) for column in structure]
    return [render_column(column, m) for column, m in zip(structure, meta)]


class ReconciliationError(Exception):
    """Base class for errors raised while reconciling uploads."""

    pass


class ValidationError(ReconciliationError):
    """Exception raised when request input is missing or invalid."""

    pass


class DuplicateColumnError(ValidationError):
    """Exception raised when adding a column whose header already exists."""

    def __init__(self, column_name: str):
        self.column_name = column_name
        super().__init__(f"Column '{column_name}' already exists")


class NotFoundError(ReconciliationError):
    """Exception raised when a required sheet or stored file does not exist."""

    pass


class EmptyInputError(ReconciliationError):
    """Exception raised when a grid has no rows at all."""

    pass


class StorageError(ReconciliationError):
    """Exception raised when the file store cannot be read or written."""

    pass
