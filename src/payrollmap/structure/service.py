"""Reconciliation service: the entry point used by the API and the CLI."""

import logging
import time
from pathlib import PurePosixPath
from typing import Any, Optional

import aiosqlite

from ..config import Settings, settings
from ..history import RunAction, RunHistoryStore, RunRecord
from ..workbook import Grid, Sheet, Workbook, decode_workbook, encode_grid
from .loader import load_structure
from .matcher import ColumnMatcher, uploaded_header_texts
from .models import (
    EmptyInputError,
    MatchResult,
    NotFoundError,
    ProcessResult,
    StructureColumn,
    ValidationError,
)
from .mutator import add_column
from .projector import RowProjector
from .reporter import build_summary
from .storage import FileStore, StructureRepository

logger = logging.getLogger(__name__)

DEFAULT_UPLOAD_NAME = "upload.xlsx"


class ReconciliationService:
    """
    Coordinates structure storage, matching, projection and reporting.

    Two operations touch the structure and they have different contracts:

    - ``process_upload`` is a dry pass. New columns found in the upload are
      registered on an in-memory copy and returned, never written back.
    - ``add_column`` commits a new canonical column to the structure file.
    """

    def __init__(
        self,
        store: Optional[FileStore] = None,
        repository: Optional[StructureRepository] = None,
        history: Optional[RunHistoryStore] = None,
        config: Optional[Settings] = None,
    ):
        """
        Initialize the service.

        Args:
            store: File store for the structure and output files (created from
                config if not provided)
            repository: Structure repository (created over ``store`` if not provided)
            history: Optional run history store; runs are not recorded without it
            config: Settings to use instead of the module-level settings
        """
        self.config = config or settings
        self.store = store or FileStore(self.config.storage_root)
        self.repository = repository or StructureRepository(
            self.store, self.config.structure_file_name
        )
        self.history = history
        self.matcher = ColumnMatcher()
        self.projector = RowProjector()

    # Structure

    def get_structure(self) -> list[StructureColumn]:
        """Load the canonical structure fresh from storage."""
        return self.repository.load()

    async def add_column(self, column_name: Any) -> list[StructureColumn]:
        """
        Commit a new canonical column and return the reloaded structure.

        Raises:
            ValidationError: If the name is not a non-blank string
            DuplicateColumnError: If a header with this exact text exists
        """
        if not isinstance(column_name, str) or not column_name.strip():
            raise ValidationError("Invalid column name")

        grid = self.repository.update_grid(lambda rows: add_column(rows, column_name))
        structure = load_structure(grid)
        logger.info(f"Added column '{column_name}' to structure ({len(structure)} columns)")

        await self._record_run(
            RunRecord(
                action=RunAction.ADD_COLUMN,
                description=f"Added column '{column_name}'",
                details={"column_name": column_name, "total_columns": len(structure)},
            )
        )
        return structure

    # Reconciliation

    def find_payroll_sheet(self, workbook: Workbook) -> Sheet:
        """
        Locate the sheet to reconcile by case-insensitive name.

        Raises:
            NotFoundError: If no sheet has the configured name
            EmptyInputError: If the sheet has no rows
        """
        sheet = workbook.find_sheet(self.config.payroll_sheet_name)
        if sheet is None:
            raise NotFoundError(
                f"Sheet '{self.config.payroll_sheet_name}' not found "
                f"(sheets: {', '.join(workbook.sheet_names) or 'none'})"
            )
        if sheet.is_empty:
            raise EmptyInputError(f"Sheet '{sheet.name}' is empty")
        return sheet

    def reconcile(
        self, structure: list[StructureColumn], sheet: Sheet
    ) -> tuple[MatchResult, Grid]:
        """Match a sheet's headers and project its rows. Touches no storage."""
        headers = uploaded_header_texts(sheet.header)
        result = self.matcher.match(structure, headers)
        rows = self.projector.project(
            result.structure, headers, result.mapping, sheet.data_rows
        )
        return result, rows

    def output_file_name(self, original_name: Optional[str], now_ms: Optional[int] = None) -> str:
        """Name for a generated file: ``<prefix><epoch-ms>_<original base name>``."""
        base = PurePosixPath((original_name or "").replace("\\", "/")).name
        if not base or base in (".", ".."):
            base = DEFAULT_UPLOAD_NAME
        if now_ms is None:
            now_ms = int(time.time() * 1000)
        return f"{self.config.output_file_prefix}{now_ms}_{base}"

    async def process_upload(self, file_name: Optional[str], data: bytes) -> ProcessResult:
        """
        Reconcile an uploaded workbook against the stored structure.

        The projected rows are written to a new output file in the store. The
        structure file itself is left untouched.

        Raises:
            WorkbookDecodeError: If the upload is not a readable workbook
            NotFoundError: If the upload has no payroll history sheet
            EmptyInputError: If that sheet, or the structure sheet, is empty
            StorageError: If the structure cannot be read or the output written
        """
        sheet = self.find_payroll_sheet(decode_workbook(data))
        structure = self.get_structure()

        result, rows = self.reconcile(structure, sheet)

        output_name = self.output_file_name(file_name)
        self.store.write(output_name, encode_grid(rows, self.config.output_sheet_title))

        summary = build_summary(result.counts, sheet.name, self.config.output_file_label)
        logger.info(
            f"Processed '{file_name}' sheet '{sheet.name}': {len(rows) - 1} rows, "
            f"output {output_name}"
        )

        await self._record_run(
            RunRecord(
                action=RunAction.PROCESS,
                source_file=file_name,
                output_file=output_name,
                description=f"Processed sheet '{sheet.name}'",
                details={
                    "summary": summary.to_dict(),
                    "new_columns": result.new_column_names,
                    "rows": len(rows) - 1,
                },
            )
        )

        return ProcessResult(
            structure=result.structure,
            meta=result.meta,
            summary=summary,
            output_file_name=output_name,
        )

    def read_output(self, file_name: str) -> bytes:
        """Read a generated file back from the store."""
        return self.store.read(file_name)

    # History

    async def list_runs(self, action: Optional[RunAction] = None, limit: int = 50) -> list[RunRecord]:
        if not self._history_available():
            return []
        return await self.history.get_runs(action, limit=limit)

    def _history_available(self) -> bool:
        return self.history is not None and self.history.is_open

    async def _record_run(self, run: RunRecord) -> Optional[str]:
        """Record a run in the history. Failures are logged, not raised."""
        if not self._history_available():
            return None

        try:
            await self.history.record_run(run)
            logger.info(f"Recorded {run.action.value} run: {run.id}")
            return run.id
        except aiosqlite.Error as e:
            logger.error(f"Failed to record run history: {e}")
            return None
