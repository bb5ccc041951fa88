"""FastAPI application factory."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import settings
from ..history import RunHistoryStore
from ..structure import ReconciliationService
from .routes import router

# Global service instance
_service: Optional[ReconciliationService] = None


def get_service() -> ReconciliationService:
    """Get the global reconciliation service instance."""
    global _service
    if _service is None:
        history = RunHistoryStore() if settings.enable_run_history else None
        _service = ReconciliationService(history=history)
    return _service


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle."""
    # Startup
    service = get_service()
    if service.history is not None:
        await service.history.initialize()
    yield
    # Shutdown
    if service.history is not None:
        await service.history.close()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="payrollmap",
        description="Payroll history column reconciliation against a canonical structure",
        version=__version__,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # API routes
    app.include_router(router, prefix="/api")

    return app
