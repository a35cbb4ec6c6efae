"""Data models for workflow runs"""

import os
from enum import Enum
from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, Field


# Pause after select_all, for the host UI to apply the selection
SELECT_PAUSE_MS = 500
# Pause after mark_as_read; the heavier operation gets the longer pause
MARK_PAUSE_MS = 2000


class WorkflowState(str, Enum):
    """States of one select -> mark-read -> deselect run"""
    IDLE = "idle"
    SELECTING = "selecting"
    PAUSING_AFTER_SELECT = "pausing_after_select"
    MARKING_READ = "marking_read"
    PAUSING_AFTER_MARK = "pausing_after_mark"
    DESELECTING = "deselecting"
    DONE = "done"
    FAILED = "failed"


class WorkflowTimings(BaseModel):
    """Inter-phase pauses standing in for completion signals the host page never sends"""
    select_pause_ms: int = Field(default=SELECT_PAUSE_MS, ge=0)
    mark_pause_ms: int = Field(default=MARK_PAUSE_MS, ge=0)

    @classmethod
    def from_env(cls) -> "WorkflowTimings":
        """Build timings from READ_ALL_SELECT_PAUSE_MS / READ_ALL_MARK_PAUSE_MS"""
        return cls(
            select_pause_ms=int(os.getenv("READ_ALL_SELECT_PAUSE_MS", SELECT_PAUSE_MS)),
            mark_pause_ms=int(os.getenv("READ_ALL_MARK_PAUSE_MS", MARK_PAUSE_MS)),
        )


class WorkflowResult(BaseModel):
    """Outcome of one workflow run"""
    provider: Optional[str] = None
    correlation_id: str = "N/A"
    state: WorkflowState = WorkflowState.IDLE
    error: Optional[str] = None
    phases_completed: List[str] = Field(default_factory=list)
    started_at: datetime = Field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None

    @property
    def succeeded(self) -> bool:
        return self.state == WorkflowState.DONE

    @property
    def duration_seconds(self) -> float:
        if self.finished_at is None:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()
