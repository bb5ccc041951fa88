"""Derive the canonical structure from a header + alias grid."""

import logging
from typing import Any

from ..workbook import Grid
from .models import EmptyInputError, StructureColumn, synthesized_header

logger = logging.getLogger(__name__)


def _is_blank(value: Any) -> bool:
    return value is None or value == ""


def header_text(value: Any, column_index: int) -> str:
    """Render a header cell as text, synthesizing a name for blank cells."""
    if _is_blank(value):
        return synthesized_header(column_index)
    return value if isinstance(value, str) else str(value)


def load_structure(grid: Grid) -> list[StructureColumn]:
    """
    Build the structure from a grid.

    Row 0 supplies one main header per column. Every later row may hold an
    alias for the column above it: string cells are trimmed and kept in row
    order, blank and non-string cells are skipped.

    Args:
        grid: Rows of cell values, header row first

    Returns:
        The structure columns in header order

    Raises:
        EmptyInputError: If the grid has no rows
    """
    if len(grid) < 1:
        raise EmptyInputError("Structure sheet is empty")

    headers = grid[0]
    structure = []

    for col_index, header in enumerate(headers):
        aliases = []
        for row in grid[1:]:
            if col_index >= len(row):
                continue
            value = row[col_index]
            if isinstance(value, str) and value.strip() != "":
                aliases.append(value.strip())

        structure.append(
            StructureColumn(main_header=header_text(header, col_index), aliases=aliases)
        )

    logger.debug(f"Loaded structure with {len(structure)} columns")
    return structure
