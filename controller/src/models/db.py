"""
Database models for controller (sync version).
"""

from sqlalchemy import Column, String, DateTime, Integer, JSON, Uuid
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

from core.src.models import PipelineExecution

Base = declarative_base()

class PipelineExecutionRecord(Base):
    __tablename__ = "pipeline_executions"

    id = Column(Uuid, primary_key=True)
    job_id = Column(String(36), index=True)
    repository_full_name = Column(String(255), nullable=False, index=True)
    pipeline_name = Column(String(255), nullable=False)
    pipeline_version = Column(String(50), nullable=False)
    status = Column(String(50), nullable=False)
    event_kind = Column(String(50), nullable=False)
    branch = Column(String(255))
    step_count = Column(Integer, nullable=False, default=0)
    started_at = Column(DateTime(timezone=True), nullable=False)
    completed_at = Column(DateTime(timezone=True))
    record = Column(JSON, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    @classmethod
    def from_execution(cls, job_id: str, execution: PipelineExecution) -> "PipelineExecutionRecord":
        return cls(
            id=execution.id,
            job_id=job_id,
            repository_full_name=execution.repository.full_name,
            pipeline_name=execution.pipeline_name,
            pipeline_version=execution.pipeline_version,
            status=execution.status.value,
            event_kind=execution.git_event.kind.value,
            branch=execution.git_event.branch,
            step_count=len(execution.step_results),
            started_at=execution.started_at,
            completed_at=execution.completed_at,
            record=execution.model_dump(mode="json"),
        )
