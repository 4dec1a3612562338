"""Tests for running queued jobs."""

import os
from pathlib import Path

import pytest

from controller.src.services import executor
from core.src.errors import WorkspaceError
from core.src.models import GitEventKind, PipelineStatus, StepSpec, StepStatus

pytestmark = pytest.mark.skipif(os.name == "nt", reason="steps run through sh")

@pytest.fixture
def reporter(monkeypatch):
    """Capture everything the runner reports."""
    calls = {"status": [], "steps": [], "saved": []}

    monkeypatch.setattr(
        executor, "update_job_status",
        lambda job_id, status, execution_id=None: calls["status"].append((job_id, status, execution_id)),
    )
    monkeypatch.setattr(
        executor, "report_step",
        lambda job_id, position, result: calls["steps"].append((job_id, position, result.status)),
    )
    monkeypatch.setattr(
        executor, "save_execution",
        lambda job_id, execution: calls["saved"].append((job_id, execution)),
    )
    monkeypatch.setattr(executor.settings, "clone_repository", False)
    return calls

def test_successful_job(reporter, make_job):
    job = make_job(
        StepSpec(name="build", command="echo building"),
        StepSpec(name="test", command="echo testing"),
    )

    execution = executor.run_job(job)

    assert execution.status == PipelineStatus.SUCCESS
    assert execution.step_results[0].stdout == "building\n"
    assert reporter["steps"] == [("job-1", 0, StepStatus.SUCCESS), ("job-1", 1, StepStatus.SUCCESS)]
    assert reporter["saved"] == [("job-1", execution)]
    assert reporter["status"] == [
        ("job-1", "running", None),
        ("job-1", "success", str(execution.id)),
    ]

def test_failed_job_stops_early(reporter, make_job):
    job = make_job(
        StepSpec(name="build", command="exit 3"),
        StepSpec(name="deploy", command="echo deploy"),
    )

    execution = executor.run_job(job)

    assert execution.status == PipelineStatus.FAILED
    assert len(execution.step_results) == 1
    assert execution.step_results[0].exit_code == 3
    assert reporter["status"][-1] == ("job-1", "failed", str(execution.id))

def test_trigger_mismatch_is_saved_as_skipped(reporter, make_job):
    job = make_job(StepSpec(name="build", command="echo hi"), branches=("release/*",))

    execution = executor.run_job(job)

    assert execution.status == PipelineStatus.SKIPPED
    assert execution.step_results == ()
    assert reporter["steps"] == []
    assert reporter["saved"][0][1].id == execution.id

def test_steps_run_in_prepared_workspace(reporter, make_job, monkeypatch, tmp_path):
    removed = []
    monkeypatch.setattr(executor.settings, "clone_repository", True)
    monkeypatch.setattr(executor, "prepare_workspace", lambda event: str(tmp_path))
    monkeypatch.setattr(executor, "cleanup_workspace", removed.append)

    execution = executor.run_job(make_job(StepSpec(name="where", command="pwd")))

    assert Path(execution.step_results[0].stdout.strip()).resolve() == tmp_path.resolve()
    assert removed == [str(tmp_path)]

def test_workspace_failure_marks_job_errored(reporter, make_job, monkeypatch):
    def fail(event):
        raise WorkspaceError("Failed to clone repository: not found")

    monkeypatch.setattr(executor.settings, "clone_repository", True)
    monkeypatch.setattr(executor, "prepare_workspace", fail)

    assert executor.run_job(make_job(StepSpec(name="build", command="echo hi"))) is None
    assert reporter["status"] == [("job-1", "running", None), ("job-1", "error", None)]
    assert reporter["saved"] == []

def test_step_timeout_applies(reporter, make_job, monkeypatch):
    monkeypatch.setattr(executor.settings, "step_timeout", 1)

    execution = executor.run_job(make_job(StepSpec(name="hang", command="sleep 30")))

    assert execution.status == PipelineStatus.FAILED
    assert "timed out" in execution.step_results[0].stderr

def test_skipped_job_is_recorded_without_a_checkout(reporter, make_job, monkeypatch):
    cloned = []
    monkeypatch.setattr(executor.settings, "clone_repository", True)
    monkeypatch.setattr(executor, "prepare_workspace", cloned.append)

    execution = executor.run_job(make_job(StepSpec(name="build", command="echo hi"), branches=("release/*",)))

    assert execution.status == PipelineStatus.SKIPPED
    assert cloned == []
    assert reporter["saved"][0][1].id == execution.id
    assert reporter["status"][-1] == ("job-1", "skipped", str(execution.id))

def test_branch_delete_job_runs(reporter, make_job, monkeypatch, tmp_path):
    cloned = []

    def prepare(event):
        cloned.append(event.kind)
        return str(tmp_path)

    monkeypatch.setattr(executor.settings, "clone_repository", True)
    monkeypatch.setattr(executor, "prepare_workspace", prepare)
    monkeypatch.setattr(executor, "cleanup_workspace", lambda path: None)

    job = make_job(StepSpec(name="cleanup", command="echo gone"), branch="feature/gone", kind=GitEventKind.BRANCH_DELETE)
    execution = executor.run_job(job)

    assert cloned == [GitEventKind.BRANCH_DELETE]
    assert execution.status == PipelineStatus.SUCCESS
    assert reporter["status"][-1] == ("job-1", "success", str(execution.id))
