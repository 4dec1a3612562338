from sqlalchemy import Column, String, DateTime, Integer, Text, JSON, Uuid
from sqlalchemy.sql import func
import uuid

from api.src.db.database import Base

class RegisteredRepository(Base):
    __tablename__ = "repositories"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    full_name = Column(String(255), nullable=False, unique=True)
    repo_url = Column(String(500), nullable=False)
    repo_type = Column(String(50), nullable=False, default="github")
    pulsefile = Column(Text, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

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
