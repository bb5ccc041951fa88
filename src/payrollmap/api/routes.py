"""API routes for payrollmap."""

import logging
from typing import Any, Optional
from urllib.parse import quote

from fastapi import APIRouter, File, Query, UploadFile
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field

from ..history import RunAction
from ..structure import (
    NotFoundError,
    ReconciliationError,
    ValidationError,
    render_structure,
)
from ..workbook import XLSX_MEDIA_TYPE

logger = logging.getLogger(__name__)

router = APIRouter()

DOWNLOAD_PATH = "/api/payroll/download"


def get_service():
    """Get the global reconciliation service instance."""
    from .app import get_service as _get_service

    return _get_service()


class AddColumnRequest(BaseModel):
    """Request to add a canonical column."""

    model_config = ConfigDict(populate_by_name=True)

    # Left untyped so a non-string name is reported as a 400, not a 422
    column_name: Any = Field(default=None, alias="columnName")


def _status_for(error: Exception) -> int:
    if isinstance(error, ValidationError):
        return 400
    if isinstance(error, NotFoundError):
        return 404
    return 500


def _content_disposition(filename: str) -> str:
    """Build an attachment header that survives spaces and non-ASCII names."""
    fallback = filename.encode("ascii", "replace").decode("ascii")
    fallback = fallback.replace("\\", "_").replace('"', "_")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


def _error_response(error: Exception, fallback_message: str) -> JSONResponse:
    """
    Log an error and turn it into a ``{"error": ...}`` response.

    Client errors carry their own message; server errors get the generic
    ``fallback_message`` and are logged with a traceback.
    """
    status_code = _status_for(error)
    if status_code == 500:
        logger.error(f"{fallback_message}: {error}", exc_info=True)
        message = fallback_message
    else:
        logger.warning(f"{fallback_message}: {error}")
        message = str(error)
    return JSONResponse(status_code=status_code, content={"error": message})


# Structure endpoints


@router.get("/payroll/structure")
async def get_structure():
    """Return the canonical structure with all match fields reset."""
    service = get_service()
    try:
        structure = service.get_structure()
    except Exception as e:
        return _error_response(e, "Failed to load structure sheet")
    return {"structure": render_structure(structure)}


@router.post("/payroll/structure/column")
async def add_structure_column(request: AddColumnRequest):
    """Add a canonical column and persist the structure file."""
    service = get_service()
    try:
        structure = await service.add_column(request.column_name)
    except Exception as e:
        return _error_response(e, "Failed to add column")
    return {"structure": render_structure(structure)}


# Reconciliation endpoints


@router.post("/payroll/process")
async def process_file(file: Optional[UploadFile] = File(None)):
    """
    Reconcile an uploaded workbook against the canonical structure.

    The upload's "Payroll History" sheet (any case) is remapped onto the
    structure's column order and saved as a new workbook. Columns the
    structure does not know are added to the returned structure only.
    """
    if file is None:
        return _error_response(ValidationError("No file uploaded"), "Failed to process file")

    service = get_service()
    try:
        data = await file.read()
        result = await service.process_upload(file.filename, data)
    except Exception as e:
        return _error_response(e, "Failed to process file")

    return {
        "structure": render_structure(result.structure, result.meta),
        "summary": result.summary.to_dict(),
        "outputUrl": f"{DOWNLOAD_PATH}/{quote(result.output_file_name)}",
    }


@router.get("/payroll/download/{filename}")
async def download_file(filename: str):
    """Download a generated workbook."""
    service = get_service()
    try:
        data = service.read_output(filename)
    except ReconciliationError as e:
        logger.warning(f"Error downloading file '{filename}': {e}")
        return JSONResponse(status_code=404, content={"error": "File not found"})

    return Response(
        content=data,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": _content_disposition(filename)},
    )


# Run history


@router.get("/payroll/history")
async def list_runs(
    action: Optional[RunAction] = None,
    limit: int = Query(50, ge=1, le=500),
):
    """List recorded process and add-column runs, newest first."""
    service = get_service()
    try:
        runs = await service.list_runs(action, limit=limit)
    except Exception as e:
        return _error_response(e, "Failed to load run history")
    return {"count": len(runs), "runs": [run.to_dict() for run in runs]}


# Health check


@router.get("/health")
async def health_check():
    """Health check endpoint with diagnostics."""
    service = get_service()

    config = {
        "storage_root": str(service.store.root),
        "structure_file": service.repository.file_name,
        "structure_file_present": service.store.exists(service.repository.file_name),
        "run_history_enabled": service.history is not None,
    }

    return {
        "status": "ok",
        "service": "payrollmap",
        "config": config,
    }
