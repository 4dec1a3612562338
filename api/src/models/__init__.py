from api.src.models.pipeline import RegisteredRepository, PipelineExecutionRecord
from api.src.models.run import (
    RegisterRepoRequest,
    RegisterRepoResponse,
    RepositoryResponse,
    ManualTriggerRequest,
    StepLogResponse,
    ExecutionLogsResponse,
    JobStatusResponse,
)

__all__ = [
    "RegisteredRepository",
    "PipelineExecutionRecord",
    "RegisterRepoRequest",
    "RegisterRepoResponse",
    "RepositoryResponse",
    "ManualTriggerRequest",
    "StepLogResponse",
    "ExecutionLogsResponse",
    "JobStatusResponse",
]
