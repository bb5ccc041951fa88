"""Project uploaded rows onto the canonical column order."""

from typing import Any

from ..workbook import Grid
from .models import StructureColumn


def canonical_headers(structure: list[StructureColumn]) -> list[str]:
    """Main headers in structure order, keeping only the first of any duplicates."""
    seen: set[str] = set()
    headers = []
    for column in structure:
        if column.main_header not in seen:
            seen.add(column.main_header)
            headers.append(column.main_header)
    return headers


def source_columns(uploaded_headers: list[str], mapping: dict[str, str]) -> dict[str, int]:
    """For each main header, the first uploaded column index mapped onto it."""
    sources: dict[str, int] = {}
    for index, uploaded in enumerate(uploaded_headers):
        target = mapping.get(uploaded)
        if target is not None:
            sources.setdefault(target, index)
    return sources


class RowProjector:
    """Remaps and reorders uploaded data rows onto the canonical layout."""

    def project(
        self,
        structure: list[StructureColumn],
        uploaded_headers: list[str],
        mapping: dict[str, str],
        rows: Grid,
    ) -> Grid:
        """
        Build the output grid.

        Args:
            structure: Structure after matching (including new columns)
            uploaded_headers: Uploaded header strings, in source-column order
            mapping: Uploaded header -> main header
            rows: Uploaded data rows (header row excluded)

        Returns:
            Grid whose row 0 is the deduplicated canonical header row, followed
            by one projected row per input data row. Canonical columns with no
            uploaded source are filled with empty strings.
        """
        headers = canonical_headers(structure)
        sources = source_columns(uploaded_headers, mapping)

        output: Grid = [list(headers)]
        for row in rows:
            output.append([self._cell(row, sources.get(header)) for header in headers])
        return output

    def _cell(self, row: list[Any], index) -> Any:
        if index is None or index >= len(row):
            return ""
        return row[index]
