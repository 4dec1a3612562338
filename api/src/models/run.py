from pydantic import BaseModel
from typing import Optional, List, Dict
from datetime import datetime
from uuid import UUID

from core.src.models import GitEventKind, PipelineStatus, StepStatus

class RegisterRepoRequest(BaseModel):
    repo_url: str
    pulsefile: str
    repo_identifier: Optional[str] = None
    repo_type: str = "github"

class RegisterRepoResponse(BaseModel):
    message: str
    repo_identifier: str

class RepositoryResponse(BaseModel):
    id: UUID
    full_name: str
    repo_url: str
    repo_type: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class ManualTriggerRequest(BaseModel):
    repository: str
    branch: Optional[str] = None
    commit_sha: Optional[str] = None
    kind: GitEventKind = GitEventKind.PUSH
    sender: str = "manual"

class StepLogResponse(BaseModel):
    name: str
    status: StepStatus
    stdout: str
    stderr: str
    exit_code: Optional[int] = None
    duration_ms: int
    started_at: datetime
    completed_at: Optional[datetime] = None

class ExecutionLogsResponse(BaseModel):
    execution_id: UUID
    status: PipelineStatus
    steps: List[StepLogResponse] = []

class JobStatusResponse(BaseModel):
    job_id: str
    status: str
    execution_id: Optional[str] = None
    steps: Dict[str, str] = {}
