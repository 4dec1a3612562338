from controller.src.models.db import PipelineExecutionRecord
from controller.src.models.job import QueuedJob

__all__ = [
    "PipelineExecutionRecord",
    "QueuedJob",
]
