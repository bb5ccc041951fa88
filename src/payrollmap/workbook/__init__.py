"""Workbook decoding and encoding."""

from .codec import (
    XLSX_MEDIA_TYPE,
    decode_workbook,
    encode_grid,
    encode_workbook,
    update_first_sheet,
)
from .models import Grid, Sheet, Workbook, WorkbookDecodeError

__all__ = [
    "XLSX_MEDIA_TYPE",
    "decode_workbook",
    "encode_grid",
    "encode_workbook",
    "update_first_sheet",
    "Grid",
    "Sheet",
    "Workbook",
    "WorkbookDecodeError",
]
