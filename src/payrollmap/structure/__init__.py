"""Canonical column structure and the reconciliation of uploads against it."""

from .models import (
    MAIN_HEADER_SOURCE,
    StructureColumn,
    ColumnMeta,
    HeaderMatch,
    MatchCounts,
    MatchResult,
    ReconciliationSummary,
    ProcessResult,
    ReconciliationError,
    ValidationError,
    DuplicateColumnError,
    NotFoundError,
    EmptyInputError,
    StorageError,
    render_structure,
)
from .loader import load_structure
from .matcher import ColumnMatcher, uploaded_header_texts
from .projector import RowProjector, canonical_headers
from .reporter import build_summary
from .mutator import add_column
from .storage import FileStore, StructureRepository
from .service import ReconciliationService

__all__ = [
    "MAIN_HEADER_SOURCE",
    "StructureColumn",
    "ColumnMeta",
    "HeaderMatch",
    "MatchCounts",
    "MatchResult",
    "ReconciliationSummary",
    "ProcessResult",
    "ReconciliationError",
    "ValidationError",
    "DuplicateColumnError",
    "NotFoundError",
    "EmptyInputError",
    "StorageError",
    "render_structure",
    "load_structure",
    "ColumnMatcher",
    "uploaded_header_texts",
    "RowProjector",
    "canonical_headers",
    "build_summary",
    "add_column",
    "FileStore",
    "StructureRepository",
    "ReconciliationService",
]
