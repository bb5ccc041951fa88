"""Data models for decoded workbooks."""

from typing import Any, Optional
from pydantic import BaseModel, Field

# A grid is a list of rows; row 0 holds the headers, rows 1..N the data.
# Rows are ragged: trailing empty cells are not stored.
Grid = list[list[Any]]


class Sheet(BaseModel):
    """A single worksheet as a grid of cell values."""

    name: str
    rows: Grid = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return len(self.rows) == 0

    @property
    def header(self) -> list[Any]:
        """Return the header row (empty if the sheet has no rows)."""
        return list(self.rows[0]) if self.rows else []

    @property
    def data_rows(self) -> Grid:
        return [list(row) for row in self.rows[1:]]


class Workbook(BaseModel):
    """A decoded workbook: its sheets in tab order."""

    sheets: list[Sheet] = Field(default_factory=list)

    @property
    def sheet_names(self) -> list[str]:
        return [sheet.name for sheet in self.sheets]

    def first_sheet(self) -> Optional[Sheet]:
        return self.sheets[0] if self.sheets else None

    def find_sheet(self, name: str, case_sensitive: bool = False) -> Optional[Sheet]:
        """Find the first sheet with the given name."""
        for sheet in self.sheets:
            if case_sensitive and sheet.name == name:
                return sheet
            if not case_sensitive and sheet.name.lower() == name.lower():
                return sheet
        return None


class WorkbookDecodeError(Exception):
    """Exception raised when bytes cannot be read as a workbook."""

    pass
