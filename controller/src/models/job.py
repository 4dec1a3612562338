"""
Queued job models.
"""

from pydantic import BaseModel

from core.src.models import GitEvent, PipelineDefinition

class QueuedJob(BaseModel):
    job_id: str
    pipeline: PipelineDefinition
    event: GitEvent
    queued_at: str
