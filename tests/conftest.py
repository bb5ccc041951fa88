"""Pytest configuration and shared fixtures."""

import io
from pathlib import Path
from typing import AsyncGenerator, Callable

import openpyxl
import pytest
import pytest_asyncio

from payrollmap.config import Settings
from payrollmap.history import RunHistoryStore
from payrollmap.structure import FileStore, ReconciliationService, StructureRepository

STRUCTURE_FILE = "Structure Sheet Payroll Analysis.xlsx"

# Row 1 holds main headers, rows 2+ hold aliases
STRUCTURE_ROWS = [
    ["Name", "Salary", "Department"],
    ["Full Name", None, "Dept"],
    ["Employee", None, None],
]


def _build_workbook(sheets: dict[str, list[list]]) -> bytes:
    wb = openpyxl.Workbook()
    wb.remove(wb.active)
    for name, rows in sheets.items():
        ws = wb.create_sheet(title=name)
        for row in rows:
            ws.append(row)
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def build_workbook() -> Callable[[dict[str, list[list]]], bytes]:
    """Return a helper that builds .xlsx bytes from {sheet name: rows}."""
    return _build_workbook


@pytest.fixture
def read_workbook() -> Callable[[bytes], dict[str, list[list]]]:
    """Return a helper that reads .xlsx bytes back into {sheet name: rows}."""

    def _read(data: bytes) -> dict[str, list[list]]:
        wb = openpyxl.load_workbook(io.BytesIO(data))
        return {
            ws.title: [list(row) for row in ws.iter_rows(values_only=True)]
            for ws in wb.worksheets
        }

    return _read


@pytest.fixture
def storage_root(tmp_path: Path) -> Path:
    """Storage root containing the default structure workbook."""
    root = tmp_path / "upload"
    root.mkdir()
    (root / STRUCTURE_FILE).write_bytes(_build_workbook({"Structure": STRUCTURE_ROWS}))
    return root


@pytest.fixture
def test_settings(tmp_path: Path, storage_root: Path) -> Settings:
    """Create settings with test values."""
    return Settings(
        storage_root=storage_root,
        structure_file_name=STRUCTURE_FILE,
        payroll_sheet_name="payroll history",
        output_sheet_title="Payroll History",
        output_file_prefix="Processed_",
        output_file_label="Processed_Output.xlsx",
        database_path=tmp_path / "test.db",
        enable_run_history=True,
        host="127.0.0.1",
        port=8000,
        cors_allow_origins=["*"],
    )


@pytest.fixture
def file_store(storage_root: Path) -> FileStore:
    return FileStore(storage_root)


@pytest.fixture
def structure_repository(file_store: FileStore) -> StructureRepository:
    return StructureRepository(file_store, STRUCTURE_FILE)


@pytest_asyncio.fixture
async def history_store(tmp_path: Path) -> AsyncGenerator[RunHistoryStore, None]:
    """Create a run history database for testing."""
    store = RunHistoryStore(tmp_path / "test_history.db")
    await store.initialize()
    yield store
    await store.close()


@pytest.fixture
def service(test_settings: Settings, file_store: FileStore) -> ReconciliationService:
    """Service over the temporary storage root, without run history."""
    return ReconciliationService(store=file_store, config=test_settings)


@pytest_asyncio.fixture
async def service_with_history(
    test_settings: Settings, file_store: FileStore, history_store: RunHistoryStore
) -> ReconciliationService:
    """Service over the temporary storage root, recording runs."""
    return ReconciliationService(store=file_store, history=history_store, config=test_settings)


@pytest.fixture
def lifespan_service(
    tmp_path: Path, test_settings: Settings, file_store: FileStore
) -> ReconciliationService:
    """Service whose history store is left for the app lifespan to open."""
    return ReconciliationService(
        store=file_store,
        history=RunHistoryStore(tmp_path / "lifespan.db"),
        config=test_settings,
    )
