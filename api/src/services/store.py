"""
Repository registry and execution store backed by the API database.
"""

import logging
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from api.src.models.pipeline import RegisteredRepository, PipelineExecutionRecord
from core.src.models import PipelineExecution, PipelineStatus

logger = logging.getLogger(__name__)

async def register_repository(
    db: AsyncSession,
    full_name: str,
    repo_url: str,
    pulsefile: str,
    repo_type: str = "github",
) -> RegisteredRepository:
    """Register a repository, replacing the Pulsefile of an existing one."""
    repository = await get_repository(db, full_name)

    if repository:
        repository.repo_url = repo_url
        repository.repo_type = repo_type
        repository.pulsefile = pulsefile
    else:
        repository = RegisteredRepository(
            full_name=full_name,
            repo_url=repo_url,
            repo_type=repo_type,
            pulsefile=pulsefile,
        )
        db.add(repository)

    await db.commit()
    await db.refresh(repository)
    logger.info(f"Registered repository {full_name}")
    return repository

async def unregister_repository(db: AsyncSession, full_name: str) -> bool:
    repository = await get_repository(db, full_name)
    if not repository:
        return False

    await db.delete(repository)
    await db.commit()
    logger.info(f"Unregistered repository {full_name}")
    return True

async def get_repository(db: AsyncSession, full_name: str) -> Optional[RegisteredRepository]:
    result = await db.execute(
        select(RegisteredRepository).where(RegisteredRepository.full_name == full_name)
    )
    return result.scalar_one_or_none()

async def get_repo_pulsefile(db: AsyncSession, full_name: str) -> Optional[str]:
    repository = await get_repository(db, full_name)
    return repository.pulsefile if repository else None

async def list_repositories(db: AsyncSession) -> List[RegisteredRepository]:
    result = await db.execute(
        select(RegisteredRepository).order_by(RegisteredRepository.created_at.desc())
    )
    return list(result.scalars().all())

async def get_execution(db: AsyncSession, execution_id: UUID) -> Optional[PipelineExecution]:
    row = await db.get(PipelineExecutionRecord, execution_id)
    return PipelineExecution.model_validate(row.record) if row else None

async def list_executions(
    db: AsyncSession,
    limit: int = 20,
    offset: int = 0,
    status: Optional[PipelineStatus] = None,
) -> List[PipelineExecution]:
    """List executions, most recent first."""
    query = select(PipelineExecutionRecord).order_by(PipelineExecutionRecord.started_at.desc())

    if status:
        query = query.where(PipelineExecutionRecord.status == status.value)

    result = await db.execute(query.limit(limit).offset(offset))
    return [PipelineExecution.model_validate(row.record) for row in result.scalars().all()]

async def list_repository_executions(
    db: AsyncSession,
    full_name: str,
    limit: int = 10,
) -> List[PipelineExecution]:
    """Most recent executions of one repository."""
    result = await db.execute(
        select(PipelineExecutionRecord)
        .where(PipelineExecutionRecord.repository_full_name == full_name)
        .order_by(PipelineExecutionRecord.started_at.desc())
        .limit(limit)
    )
    return [PipelineExecution.model_validate(row.record) for row in result.scalars().all()]

async def count_executions_by_status(db: AsyncSession) -> Dict[str, int]:
    result = await db.execute(
        select(PipelineExecutionRecord.status, func.count(PipelineExecutionRecord.id))
        .group_by(PipelineExecutionRecord.status)
    )
    return {row[0]: row[1] for row in result.all()}

async def count_repositories(db: AsyncSession) -> int:
    result = await db.execute(select(func.count(RegisteredRepository.id)))
    return result.scalar() or 0
