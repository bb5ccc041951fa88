"""Run history persistence for payrollmap."""

from .store import RunHistoryStore
from .models import RunAction, RunRecord

__all__ = ["RunHistoryStore", "RunAction", "RunRecord"]
