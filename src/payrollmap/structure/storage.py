"""File persistence for the structure workbook and generated output files."""

import logging
import threading
from pathlib import Path
from typing import Callable, Optional

from ..config import settings
from ..workbook import Grid, Sheet, Workbook, decode_workbook, update_first_sheet
from .loader import load_structure
from .models import EmptyInputError, NotFoundError, StorageError, StructureColumn

logger = logging.getLogger(__name__)


class FileStore:
    """Byte store keyed by file name under a single root directory."""

    def __init__(self, root: Optional[Path] = None):
        self.root = Path(root) if root is not None else settings.storage_root

    def resolve(self, name: str) -> Path:
        """
        Map a file name to its path under the root.

        Only bare file names are accepted; anything with a directory part
        could escape the root and is reported as not found.
        """
        if not name or name in (".", "..") or Path(name).name != name or "\\" in name:
            raise NotFoundError(f"File '{name}' not found")
        return self.root / name

    def exists(self, name: str) -> bool:
        try:
            return self.resolve(name).is_file()
        except NotFoundError:
            return False

    def read(self, name: str) -> bytes:
        """Read a stored file.

        Raises:
            NotFoundError: If no such file is stored
            StorageError: If the file exists but cannot be read
        """
        path = self.resolve(name)
        if not path.is_file():
            raise NotFoundError(f"File '{name}' not found")
        try:
            return path.read_bytes()
        except OSError as e:
            raise StorageError(f"Failed to read '{name}': {e}") from e

    def write(self, name: str, data: bytes) -> Path:
        """Write (or overwrite) a stored file and return its path."""
        path = self.resolve(name)
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise StorageError(f"Failed to write '{name}': {e}") from e
        logger.info(f"Wrote {len(data)} bytes to {path}")
        return path


class StructureRepository:
    """
    Loads and saves the canonical structure workbook.

    The structure lives in the first sheet of a fixed-name workbook. It is
    re-read on every call; nothing is cached. Read-modify-write cycles go
    through ``update_grid`` which holds a lock, so writers in one process are
    serialized. Separate processes sharing the root are not coordinated.
    """

    def __init__(self, store: FileStore, file_name: Optional[str] = None):
        self.store = store
        self.file_name = file_name or settings.structure_file_name
        self._lock = threading.Lock()

    def _read(self) -> bytes:
        try:
            return self.store.read(self.file_name)
        except NotFoundError as e:
            raise StorageError(f"Structure file '{self.file_name}' not found") from e

    def load_workbook(self) -> Workbook:
        return decode_workbook(self._read())

    def load_sheet(self) -> Sheet:
        """Return the structure sheet (the first sheet of the workbook)."""
        sheet = self.load_workbook().first_sheet()
        if sheet is None:
            raise EmptyInputError("Structure workbook has no sheets")
        return sheet

    def load_grid(self) -> Grid:
        return self.load_sheet().rows

    def load(self) -> list[StructureColumn]:
        return load_structure(self.load_grid())

    def update_grid(self, change: Callable[[Grid], Grid]) -> Grid:
        """
        Apply ``change`` to the structure grid and persist the result.

        Only the cells that ``change`` altered are written into the stored
        workbook. Formulas, styles and the other sheets are kept as they
        were. If ``change`` raises, nothing is written.
        """
        with self._lock:
            data = self._read()
            sheet = decode_workbook(data).first_sheet()
            if sheet is None:
                raise EmptyInputError("Structure workbook has no sheets")

            rows = change(sheet.rows)
            self.store.write(self.file_name, update_first_sheet(data, sheet.rows, rows))
            logger.info(f"Saved structure sheet '{sheet.name}' ({len(rows)} rows)")
            return rows
