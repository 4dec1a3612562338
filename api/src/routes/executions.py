from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from uuid import UUID

from api.src.db.database import get_db
from api.src.models.run import ExecutionLogsResponse, StepLogResponse
from api.src.services.store import get_execution, list_executions
from core.src.models import PipelineExecution, PipelineStatus

router = APIRouter(prefix="/executions", tags=["executions"])

@router.get("", response_model=List[PipelineExecution])
async def list_all_executions(
    limit: int = 20,
    offset: int = 0,
    status: Optional[PipelineStatus] = None,
    db: AsyncSession = Depends(get_db)
):
    """List pipeline executions, most recent first."""
    return await list_executions(db, limit=limit, offset=offset, status=status)

@router.get("/{execution_id}", response_model=PipelineExecution)
async def get_execution_record(execution_id: UUID, db: AsyncSession = Depends(get_db)):
    """Get a specific pipeline execution."""
    execution = await get_execution(db, execution_id)

    if not execution:
        raise HTTPException(status_code=404, detail="Pipeline execution not found")

    return execution

@router.get("/{execution_id}/logs", response_model=ExecutionLogsResponse)
async def get_execution_logs(execution_id: UUID, db: AsyncSession = Depends(get_db)):
    """Get output of every attempted step of an execution."""
    execution = await get_execution(db, execution_id)

    if not execution:
        raise HTTPException(status_code=404, detail="Pipeline execution not found")

    return ExecutionLogsResponse(
        execution_id=execution.id,
        status=execution.status,
        steps=[
            StepLogResponse(
                name=result.step_name,
                status=result.status,
                stdout=result.stdout,
                stderr=result.stderr,
                exit_code=result.exit_code,
                duration_ms=result.duration_ms,
                started_at=result.started_at,
                completed_at=result.completed_at,
            )
            for result in execution.step_results
        ],
    )
