"""
Execution engine - gates a pipeline on its triggers and runs its steps in order.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, List, Optional
from uuid import UUID

from core.src.executor import PathLike, run_step
from core.src.models.event import GitEvent
from core.src.models.execution import (
    PipelineExecution,
    PipelineStatus,
    StepResult,
    StepStatus,
)
from core.src.models.pipeline import PipelineDefinition
from core.src.parser import parse_pulsefile
from core.src.triggers import matches

logger = logging.getLogger(__name__)

StepCallback = Callable[[UUID, int, StepResult], None]


def execute_pipeline(
    pipeline: PipelineDefinition,
    event: GitEvent,
    working_directory: Optional[PathLike] = None,
    step_timeout: Optional[float] = None,
    on_step_finished: Optional[StepCallback] = None,
) -> PipelineExecution:
    """
    Run ``pipeline`` for ``event`` and return the finished execution record.

    Step failures and errors raised by ``on_step_finished`` are reported
    through the record or the log, never raised. Steps after a failure that
    is not allowed are not attempted and do not appear in the results.
    """
    execution_id = uuid.uuid4()
    started_at = datetime.now(timezone.utc)

    logger.info(f"Starting execution {execution_id} of pipeline '{pipeline.name}'")

    if not matches(pipeline.triggers, event):
        logger.info(f"Execution {execution_id} skipped: {event.kind.value} event did not match triggers")
        return _finish(execution_id, pipeline, event, PipelineStatus.SKIPPED, [], started_at)

    status = PipelineStatus.RUNNING
    results: List[StepResult] = []

    for position, step in enumerate(pipeline.steps):
        logger.info(f"Execution {execution_id}: step {position} ({step.name})")

        result = run_step(step, working_directory, timeout=step_timeout)
        results.append(result)

        if on_step_finished is not None:
            try:
                on_step_finished(execution_id, position, result)
            except Exception:
                logger.exception(f"Execution {execution_id}: step callback failed for step {position} ({step.name})")

        if result.status == StepStatus.FAILED:
            if not step.allow_failure:
                logger.warning(
                    f"Execution {execution_id}: step {position} ({step.name}) failed "
                    f"and allow_failure is false, stopping pipeline"
                )
                status = PipelineStatus.FAILED
                break
            logger.info(f"Execution {execution_id}: step {position} ({step.name}) failed but is allowed to fail")

    if status == PipelineStatus.RUNNING:
        # Any failure left at this point was allowed
        status = PipelineStatus.SUCCESS

    execution = _finish(execution_id, pipeline, event, status, results, started_at)
    logger.info(f"Execution {execution_id} of pipeline '{pipeline.name}' finished with status: {status.value}")
    return execution


def execute_pulsefile(text: str, event: GitEvent, **kwargs) -> PipelineExecution:
    """Parse then execute. ``ParseError`` propagates to the caller."""
    return execute_pipeline(parse_pulsefile(text), event, **kwargs)


def _finish(
    execution_id: UUID,
    pipeline: PipelineDefinition,
    event: GitEvent,
    status: PipelineStatus,
    results: List[StepResult],
    started_at: datetime,
) -> PipelineExecution:
    return PipelineExecution(
        id=execution_id,
        pipeline_name=pipeline.name,
        pipeline_version=pipeline.version,
        repository=event.repository,
        git_event=event,
        status=status,
        step_results=tuple(results),
        started_at=started_at,
        completed_at=datetime.now(timezone.utc),
    )
