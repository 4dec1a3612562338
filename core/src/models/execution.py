"""
Execution record models.
"""

from pydantic import BaseModel
from typing import Optional, Tuple
from datetime import datetime
from enum import Enum
from uuid import UUID

from core.src.models.event import GitEvent, Repository


class StepStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


class PipelineStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"
    CANCELLED = "cancelled"
    SKIPPED = "skipped"


class StepResult(BaseModel):
    step_name: str
    status: StepStatus
    stdout: str = ""
    stderr: str = ""
    exit_code: Optional[int] = None
    duration_ms: int = 0
    started_at: datetime
    completed_at: Optional[datetime] = None

    class Config:
        frozen = True


class PipelineExecution(BaseModel):
    id: UUID
    pipeline_name: str
    pipeline_version: str
    repository: Repository
    git_event: GitEvent
    status: PipelineStatus
    step_results: Tuple[StepResult, ...] = ()
    started_at: datetime
    completed_at: Optional[datetime] = None

    class Config:
        frozen = True

    @property
    def duration_ms(self) -> Optional[int]:
        if self.completed_at is None:
            return None
        return int((self.completed_at - self.started_at).total_seconds() * 1000)
