"""
Report job progress to Redis and execution records to the database.
"""

import logging
from typing import Optional
import redis
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from controller.src.config import get_settings
from controller.src.models.db import PipelineExecutionRecord
from core.src.models import PipelineExecution, StepResult

logger = logging.getLogger(__name__)
settings = get_settings()

JOB_STATUS = "pulse:status"
JOB_EXECUTIONS = "pulse:executions"
JOB_STEPS_PREFIX = "pulse:steps:"

# Sync database connection for controller
engine = create_engine(settings.database_url)
SessionLocal = sessionmaker(bind=engine)

def get_redis_client() -> redis.Redis:
    return redis.from_url(settings.redis_url, decode_responses=True)

def update_job_status(job_id: str, status: str, execution_id: Optional[str] = None):
    """Publish the live status of a job."""
    client = get_redis_client()

    try:
        client.hset(JOB_STATUS, job_id, status)
        if execution_id:
            client.hset(JOB_EXECUTIONS, job_id, execution_id)
    finally:
        client.close()

    logger.info(f"Updated job {job_id} status to {status}")

def report_step(job_id: str, position: int, result: StepResult):
    """Publish the outcome of one step while the job is still running."""
    client = get_redis_client()

    try:
        client.hset(f"{JOB_STEPS_PREFIX}{job_id}", str(position), result.status.value)
    finally:
        client.close()

    logger.debug(f"Step {position} of job {job_id} finished with {result.status.value}")

def save_execution(job_id: str, execution: PipelineExecution):
    """Persist a finished execution record."""
    with SessionLocal() as session:
        session.merge(PipelineExecutionRecord.from_execution(job_id, execution))
        session.commit()

    logger.info(f"Saved execution {execution.id} of job {job_id}")
