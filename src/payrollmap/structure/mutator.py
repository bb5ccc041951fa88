"""Add canonical columns to a structure grid."""

from ..workbook import Grid
from .loader import header_text
from .models import DuplicateColumnError, EmptyInputError


def add_column(grid: Grid, name: str) -> Grid:
    """
    Return a copy of the structure grid with one more column.

    ``name`` is appended to the header row and every data row gets an empty
    cell in the new column. Short rows are padded to the header width first,
    so the row count is unchanged and the new column starts out with no aliases.
    The input grid is not modified.

    Raises:
        EmptyInputError: If the grid has no header row
        DuplicateColumnError: If ``name`` equals an existing main header as
            the structure renders it (blank cells as ``Column_<n>``, numbers
            as text)
    """
    if len(grid) < 1:
        raise EmptyInputError("Structure sheet is empty")

    headers = list(grid[0])
    if name in [header_text(cell, index) for index, cell in enumerate(headers)]:
        raise DuplicateColumnError(name)

    width = len(headers)
    updated: Grid = [headers + [name]]
    for row in grid[1:]:
        cells = list(row) if row is not None else []
        cells.extend([None] * (width - len(cells)))
        # Cells past the header width are not part of any column; keep them after the new one
        cells.insert(width, None)
        updated.append(cells)
    return updated
