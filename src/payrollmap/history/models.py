"""Data models for the run history."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field


def _utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


class RunAction(str, Enum):
    """Kind of request a run record describes."""

    PROCESS = "process"
    ADD_COLUMN = "add_column"


class RunRecord(BaseModel):
    """An audit entry for a successful process or add-column request."""

    id: str = ""
    timestamp: datetime = Field(default_factory=_utc_now)
    action: RunAction
    source_file: Optional[str] = None  # uploaded file name, if any
    output_file: Optional[str] = None  # generated output file name, if any
    description: str
    details: dict[str, Any] = Field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "action": self.action.value,
            "source_file": self.source_file,
            "output_file": self.output_file,
            "description": self.description,
            "details": self.details,
        }
