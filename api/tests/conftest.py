import asyncio
from datetime import datetime, timedelta, timezone
import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from api.src.db.database import Base
from api.src.models.pipeline import PipelineExecutionRecord
from core.src.models import (
    GitEvent,
    GitEventKind,
    PipelineExecution,
    PipelineStatus,
    Repository,
    StepResult,
    StepStatus,
)

PULSEFILE = '''
pipeline {
  name: "ci";
  version: "2.0";
  triggers {
    git {
      on_push: true;
      branches: ["main"];
    }
  }
  steps {
    step "build" {
      run: """make build""";
    }
    step "test" {
      run: """make test""";
    }
  }
}
'''

@pytest.fixture
def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'pulse.db'}", poolclass=NullPool)

    async def create_tables():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(create_tables())
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    asyncio.run(engine.dispose())

def build_event(full_name: str = "acme/widgets", branch: str = "main") -> GitEvent:
    owner, name = full_name.split("/")
    return GitEvent(
        kind=GitEventKind.PUSH,
        repository=Repository(
            owner=owner,
            name=name,
            full_name=full_name,
            clone_url=f"https://github.com/{full_name}.git",
        ),
        branch=branch,
        commit_sha="abc123",
        sender="octocat",
    )

def build_execution(
    full_name: str = "acme/widgets",
    status: PipelineStatus = PipelineStatus.SUCCESS,
    minutes_ago: int = 0,
) -> PipelineExecution:
    started_at = datetime.now(timezone.utc) - timedelta(minutes=minutes_ago)
    event = build_event(full_name)
    return PipelineExecution(
        id=uuid.uuid4(),
        pipeline_name="ci",
        pipeline_version="2.0",
        repository=event.repository,
        git_event=event,
        status=status,
        step_results=(
            StepResult(
                step_name="build",
                status=StepStatus.SUCCESS if status == PipelineStatus.SUCCESS else StepStatus.FAILED,
                stdout="built\n",
                stderr="",
                exit_code=0 if status == PipelineStatus.SUCCESS else 1,
                duration_ms=120,
                started_at=started_at,
                completed_at=started_at + timedelta(milliseconds=120),
            ),
        ),
        started_at=started_at,
        completed_at=started_at + timedelta(seconds=1),
    )

def to_record(execution: PipelineExecution, job_id: str = "job-1") -> PipelineExecutionRecord:
    return PipelineExecutionRecord(
        id=execution.id,
        job_id=job_id,
        repository_full_name=execution.repository.full_name,
        pipeline_name=execution.pipeline_name,
        pipeline_version=execution.pipeline_version,
        status=execution.status.value,
        event_kind=execution.git_event.kind.value,
        branch=execution.git_event.branch,
        step_count=len(execution.step_results),
        started_at=execution.started_at,
        completed_at=execution.completed_at,
        record=execution.model_dump(mode="json"),
    )

@pytest.fixture
def store_executions(session_factory):
    """Persist executions the way the controller does."""
    def store(*executions: PipelineExecution):
        async def insert():
            async with session_factory() as db:
                for execution in executions:
                    db.add(to_record(execution))
                await db.commit()
        asyncio.run(insert())
    return store

@pytest.fixture
def pulsefile():
    return PULSEFILE

@pytest.fixture
def make_execution():
    return build_execution

@pytest.fixture
def make_event():
    return build_event
