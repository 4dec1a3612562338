"""Tests for status reporting."""

from datetime import datetime, timezone
from unittest.mock import MagicMock
import uuid

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from controller.src.models.db import Base, PipelineExecutionRecord
from controller.src.models.job import QueuedJob
from controller.src.services import status_reporter
from core.src.models import PipelineExecution, PipelineStatus, StepResult, StepStatus

@pytest.fixture
def redis_client(monkeypatch):
    client = MagicMock()
    monkeypatch.setattr(status_reporter, "get_redis_client", lambda: client)
    return client

@pytest.fixture
def session_factory(monkeypatch, tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'pulse.db'}")
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine)
    monkeypatch.setattr(status_reporter, "SessionLocal", factory)
    yield factory
    engine.dispose()

def make_execution(make_job, status=PipelineStatus.SUCCESS) -> PipelineExecution:
    job = QueuedJob.model_validate(make_job())
    now = datetime.now(timezone.utc)
    return PipelineExecution(
        id=uuid.uuid4(),
        pipeline_name=job.pipeline.name,
        pipeline_version=job.pipeline.version,
        repository=job.event.repository,
        git_event=job.event,
        status=status,
        step_results=(StepResult(step_name="build", status=StepStatus.SUCCESS, exit_code=0, started_at=now),),
        started_at=now,
        completed_at=now,
    )

def test_update_job_status(redis_client):
    status_reporter.update_job_status("job-1", "running")
    redis_client.hset.assert_called_once_with("pulse:status", "job-1", "running")
    redis_client.close.assert_called_once()

def test_update_job_status_with_execution(redis_client):
    status_reporter.update_job_status("job-1", "success", execution_id="exec-1")
    redis_client.hset.assert_any_call("pulse:status", "job-1", "success")
    redis_client.hset.assert_any_call("pulse:executions", "job-1", "exec-1")

def test_report_step(redis_client):
    result = StepResult(step_name="build", status=StepStatus.FAILED, started_at=datetime.now(timezone.utc))
    status_reporter.report_step("job-1", 2, result)
    redis_client.hset.assert_called_once_with("pulse:steps:job-1", "2", "failed")

def test_save_execution(session_factory, make_job):
    execution = make_execution(make_job)

    status_reporter.save_execution("job-1", execution)
    # Saving again replaces rather than duplicates
    status_reporter.save_execution("job-1", execution)

    with session_factory() as session:
        rows = session.query(PipelineExecutionRecord).all()

    assert len(rows) == 1
    row = rows[0]
    assert row.id == execution.id
    assert row.job_id == "job-1"
    assert row.repository_full_name == "acme/widgets"
    assert row.status == "success"
    assert row.event_kind == "push"
    assert row.branch == "main"
    assert row.step_count == 1
    assert PipelineExecution.model_validate(row.record) == execution
