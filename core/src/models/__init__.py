from core.src.models.pipeline import (
    PipelineDefinition,
    GitTriggerSet,
    StepSpec,
    DEFAULT_PIPELINE_NAME,
    DEFAULT_PIPELINE_VERSION,
    DEFAULT_BRANCH_PATTERNS,
)
from core.src.models.event import (
    GitEventKind,
    GitEvent,
    Repository,
    PullRequest,
    normalize_repo_identifier,
    repository_from_identifier,
)
from core.src.models.execution import (
    StepStatus,
    PipelineStatus,
    StepResult,
    PipelineExecution,
)

__all__ = [
    "PipelineDefinition",
    "GitTriggerSet",
    "StepSpec",
    "DEFAULT_PIPELINE_NAME",
    "DEFAULT_PIPELINE_VERSION",
    "DEFAULT_BRANCH_PATTERNS",
    "GitEventKind",
    "GitEvent",
    "Repository",
    "PullRequest",
    "normalize_repo_identifier",
    "repository_from_identifier",
    "StepStatus",
    "PipelineStatus",
    "StepResult",
    "PipelineExecution",
]
