from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import logging

from api.src.db.database import get_db
from api.src.models.run import ManualTriggerRequest, JobStatusResponse
from api.src.services.queue import enqueue_job, get_job_status
from api.src.services.store import (
    get_repository,
    list_repository_executions,
    count_executions_by_status,
    count_repositories,
)
from core.src.errors import ParseError
from core.src.models import (
    GitEvent,
    PipelineExecution,
    normalize_repo_identifier,
    repository_from_identifier,
)
from core.src.parser import parse_pulsefile

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pipelines"])

@router.get("/pipelines/{repo:path}/status", response_model=List[PipelineExecution])
async def get_pipeline_status(repo: str, limit: int = 10, db: AsyncSession = Depends(get_db)):
    """Recent executions of a repository's pipeline."""
    executions = await list_repository_executions(db, repo, limit=limit)

    if not executions and not await get_repository(db, repo):
        raise HTTPException(status_code=404, detail="Repository not found")

    return executions

@router.post("/pipelines/run")
async def trigger_pipeline(request: ManualTriggerRequest, db: AsyncSession = Depends(get_db)):
    """Queue a run of a registered repository's pipeline."""
    registered = await get_repository(db, normalize_repo_identifier(request.repository))
    if not registered:
        raise HTTPException(status_code=404, detail="Repository not registered")

    try:
        pipeline = parse_pulsefile(registered.pulsefile)
    except ParseError as e:
        raise HTTPException(status_code=400, detail=str(e))

    branch = request.branch or "main"
    event = GitEvent(
        kind=request.kind,
        repository=repository_from_identifier(registered.full_name, clone_url=registered.repo_url),
        branch=branch,
        commit_sha=request.commit_sha,
        sender=request.sender,
    )

    job_id = await enqueue_job(pipeline, event)
    logger.info(f"Manually queued job {job_id} for {registered.full_name}")

    return {"status": "queued", "job_id": job_id, "pipeline": pipeline.name}

@router.get("/jobs/{job_id}", response_model=JobStatusResponse)
async def get_job(job_id: str):
    """Live status of a queued job."""
    status = await get_job_status(job_id)

    if status is None:
        raise HTTPException(status_code=404, detail="Job not found")

    return status

@router.get("/stats")
async def get_pipeline_stats(db: AsyncSession = Depends(get_db)):
    """Get pipeline statistics."""
    status_counts = await count_executions_by_status(db)

    return {
        "repositories": await count_repositories(db),
        "executions": status_counts,
        "total_executions": sum(status_counts.values()),
    }
