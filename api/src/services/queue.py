"""
Redis queue service for pipeline jobs.
"""

import redis.asyncio as redis
import json
import uuid
from typing import Dict, Any, Optional
from datetime import datetime, timezone

from api.src.config import get_settings
from core.src.models import GitEvent, PipelineDefinition

settings = get_settings()

PIPELINE_QUEUE = "pulse:jobs"
JOB_STATUS = "pulse:status"
JOB_EXECUTIONS = "pulse:executions"
JOB_STEPS_PREFIX = "pulse:steps:"

async def get_redis_client() -> redis.Redis:
    """Get async Redis client."""
    return redis.from_url(settings.redis_url, decode_responses=True)

async def enqueue_job(pipeline: PipelineDefinition, event: GitEvent) -> str:
    """Add a parsed pipeline and its triggering event to the queue. Returns the job id."""
    client = await get_redis_client()
    job_id = str(uuid.uuid4())

    job = {
        "job_id": job_id,
        "pipeline": pipeline.model_dump(mode="json"),
        "event": event.model_dump(mode="json"),
        "queued_at": datetime.now(timezone.utc).isoformat(),
    }

    try:
        await client.lpush(PIPELINE_QUEUE, json.dumps(job))
        await client.hset(JOB_STATUS, job_id, "queued")
    finally:
        await client.close()

    return job_id

async def get_job_status(job_id: str) -> Optional[Dict[str, Any]]:
    """Live status of a queued job, with its execution id and step progress once known."""
    client = await get_redis_client()

    try:
        status = await client.hget(JOB_STATUS, job_id)
        if status is None:
            return None
        return {
            "job_id": job_id,
            "status": status,
            "execution_id": await client.hget(JOB_EXECUTIONS, job_id),
            "steps": await client.hgetall(f"{JOB_STEPS_PREFIX}{job_id}"),
        }
    finally:
        await client.close()

async def get_queue_length() -> int:
    """Get number of jobs in queue."""
    client = await get_redis_client()

    try:
        return await client.llen(PIPELINE_QUEUE)
    finally:
        await client.close()
