"""
Queue worker - pulls jobs from Redis and executes them.
"""

import asyncio
import logging
import redis
import json
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Dict, Any

from controller.src.config import get_settings
from controller.src.services.executor import run_job
from controller.src.services.status_reporter import update_job_status

logger = logging.getLogger(__name__)
settings = get_settings()

PIPELINE_QUEUE = "pulse:jobs"

async def get_next_job(client: redis.Redis) -> Optional[Dict[str, Any]]:
    """Pull next job from Redis queue."""
    result = await asyncio.to_thread(client.brpop, PIPELINE_QUEUE, timeout=5)
    if result:
        _, job_data = result
        return json.loads(job_data)
    return None

async def process_job(job: Dict[str, Any], pool: ThreadPoolExecutor, slots: asyncio.Semaphore):
    """Run a job on the pool and free its slot when done."""
    job_id = job.get("job_id", "unknown")
    logger.info(f"Received job {job_id}")

    try:
        await asyncio.get_running_loop().run_in_executor(pool, run_job, job)
    except Exception as e:
        logger.exception(f"Failed to execute job {job_id}: {e}")
        if job_id != "unknown":
            try:
                update_job_status(job_id, "error")
            except redis.RedisError:
                logger.exception(f"Could not mark job {job_id} as errored")
    finally:
        slots.release()

async def worker_loop():
    """Main worker loop."""
    client = redis.from_url(settings.redis_url, decode_responses=True)
    pool = ThreadPoolExecutor(max_workers=settings.worker_concurrency, thread_name_prefix="pulse-job")
    slots = asyncio.Semaphore(settings.worker_concurrency)
    running = set()

    logger.info(f"Worker started with {settings.worker_concurrency} slots, waiting for jobs...")

    try:
        while True:
            await slots.acquire()

            try:
                job = await get_next_job(client)
            except Exception as e:
                slots.release()
                logger.exception(f"Worker error: {e}")
                await asyncio.sleep(5)
                continue

            if job is None:
                slots.release()
                continue

            task = asyncio.create_task(process_job(job, pool, slots))
            running.add(task)
            task.add_done_callback(running.discard)
    finally:
        pool.shutdown(wait=True)
        client.close()

def run_worker():
    """Entry point for worker."""
    try:
        asyncio.run(worker_loop())
    except KeyboardInterrupt:
        logger.info("Worker shutting down...")
