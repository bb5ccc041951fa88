"""Workbook codec: .xlsx bytes to grids and back, via openpyxl."""

import io
import logging
from zipfile import BadZipFile

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from .models import Grid, Sheet, Workbook, WorkbookDecodeError

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _trim_row(row: tuple) -> list:
    """Drop trailing empty cells from a row."""
    values = list(row)
    while values and values[-1] is None:
        values.pop()
    return values


def _read_grid(worksheet) -> Grid:
    rows = [_trim_row(row) for row in worksheet.iter_rows(values_only=True)]
    # Trailing blank rows are formatting residue, not data
    while rows and not rows[-1]:
        rows.pop()
    return rows


def _open_workbook(data: bytes, data_only: bool):
    try:
        return openpyxl.load_workbook(io.BytesIO(data), data_only=data_only)
    except (InvalidFileException, BadZipFile, KeyError, ValueError, OSError) as e:
        raise WorkbookDecodeError(f"Could not read workbook: {e}") from e


def _save(wb) -> bytes:
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def decode_workbook(data: bytes) -> Workbook:
    """
    Decode workbook bytes into named sheets of cell grids.

    Cell values are the cached values (formulas are not evaluated).

    Raises:
        WorkbookDecodeError: If the bytes are not a readable workbook
    """
    wb = _open_workbook(data, data_only=True)

    try:
        sheets = [Sheet(name=ws.title, rows=_read_grid(ws)) for ws in wb.worksheets]
    finally:
        wb.close()

    logger.debug(f"Decoded workbook with sheets {[s.name for s in sheets]}")
    return Workbook(sheets=sheets)


def encode_workbook(workbook: Workbook) -> bytes:
    """Encode sheets of cell grids into .xlsx bytes."""
    wb = openpyxl.Workbook()
    if workbook.sheets:
        wb.remove(wb.active)
    for sheet in workbook.sheets:
        ws = wb.create_sheet(title=sheet.name)
        for row in sheet.rows:
            ws.append(list(row))

    return _save(wb)


def encode_grid(rows: Grid, sheet_name: str) -> bytes:
    """Encode a single grid as a one-sheet workbook."""
    return encode_workbook(Workbook(sheets=[Sheet(name=sheet_name, rows=rows)]))


def update_first_sheet(data: bytes, before: Grid, after: Grid) -> bytes:
    """
    Write grid changes into the first sheet of existing workbook bytes.

    ``before`` is the grid that was decoded from ``data`` and ``after`` the
    grid to store. Only cells whose value differs are written, so untouched
    cells keep their formulas and styles, and the other sheets are saved as
    they were.

    Raises:
        WorkbookDecodeError: If the bytes are not a readable workbook
    """
    wb = _open_workbook(data, data_only=False)
    if not wb.worksheets:
        raise WorkbookDecodeError("Workbook has no worksheets")
    ws = wb.worksheets[0]

    changed = 0
    for r in range(max(len(before), len(after))):
        old = (before[r] if r < len(before) else None) or []
        new = (after[r] if r < len(after) else None) or []
        for c in range(max(len(old), len(new))):
            value = new[c] if c < len(new) else None
            if value != (old[c] if c < len(old) else None):
                # ws.cell(..., value=None) would leave the old value in place
                ws.cell(row=r + 1, column=c + 1).value = value
                changed += 1

    logger.debug(f"Updated {changed} cells in sheet '{ws.title}'")
    return _save(wb)
