import pytest

from controller.src.models.job import QueuedJob
from core.src.models import (
    GitEvent,
    GitEventKind,
    GitTriggerSet,
    PipelineDefinition,
    Repository,
    StepSpec,
)

def build_job(*steps: StepSpec, branch: str = "main", branches=("*",), kind=GitEventKind.PUSH) -> dict:
    pipeline = PipelineDefinition(
        name="ci",
        version="1.0",
        triggers=GitTriggerSet(on_push=True, on_branch_delete=True, branch_patterns=tuple(branches)),
        steps=steps,
    )
    event = GitEvent(
        kind=kind,
        repository=Repository(
            owner="acme",
            name="widgets",
            full_name="acme/widgets",
            clone_url="https://github.com/acme/widgets.git",
        ),
        branch=branch,
        commit_sha=None if kind == GitEventKind.BRANCH_DELETE else "abc123",
    )
    job = QueuedJob(job_id="job-1", pipeline=pipeline, event=event, queued_at="2024-01-01T00:00:00+00:00")
    return job.model_dump(mode="json")

@pytest.fixture
def make_job():
    return build_job
