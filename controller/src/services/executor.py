"""
Job runner - executes a queued pipeline in a fresh workspace.
"""

import logging
from typing import Any, Dict, Optional

from controller.src.config import get_settings
from controller.src.models.job import QueuedJob
from controller.src.services.status_reporter import (
    report_step,
    save_execution,
    update_job_status,
)
from controller.src.services.workspace import cleanup_workspace, prepare_workspace
from core.src.engine import execute_pipeline
from core.src.errors import WorkspaceError
from core.src.models import PipelineExecution
from core.src.triggers import matches

logger = logging.getLogger(__name__)
settings = get_settings()

def run_job(job_data: Dict[str, Any]) -> Optional[PipelineExecution]:
    """
    Run one queued job to completion.
    Returns the execution record, or None if no workspace could be prepared.
    """
    job = QueuedJob.model_validate(job_data)
    full_name = job.event.repository.full_name

    logger.info(f"Starting job {job.job_id}: pipeline '{job.pipeline.name}' of {full_name}")
    update_job_status(job.job_id, "running")

    workspace = None
    try:
        # Events the pipeline ignores are recorded as skipped without a checkout
        if settings.clone_repository and matches(job.pipeline.triggers, job.event):
            workspace = prepare_workspace(job.event)

        execution = execute_pipeline(
            job.pipeline,
            job.event,
            working_directory=workspace,
            step_timeout=settings.step_timeout or None,
            on_step_finished=lambda _, position, result: report_step(job.job_id, position, result),
        )
    except WorkspaceError as e:
        logger.error(f"Job {job.job_id} could not prepare a workspace: {e}")
        update_job_status(job.job_id, "error")
        return None
    finally:
        if workspace:
            cleanup_workspace(workspace)

    save_execution(job.job_id, execution)
    update_job_status(job.job_id, execution.status.value, execution_id=str(execution.id))

    logger.info(f"Job {job.job_id} finished with status: {execution.status.value}")
    return execution
