"""
Parsed pipeline definition models.
"""

from pydantic import BaseModel
from typing import Tuple

DEFAULT_PIPELINE_NAME = "default"
DEFAULT_PIPELINE_VERSION = "1.0"
DEFAULT_BRANCH_PATTERNS = ("*",)


class GitTriggerSet(BaseModel):
    on_push: bool = False
    on_pull_request: bool = False
    on_merge: bool = False
    on_tag: bool = False
    on_release: bool = False
    on_branch_create: bool = False
    on_branch_delete: bool = False
    branch_patterns: Tuple[str, ...] = DEFAULT_BRANCH_PATTERNS

    class Config:
        frozen = True


class StepSpec(BaseModel):
    name: str = ""
    command: str
    allow_failure: bool = False

    class Config:
        frozen = True


class PipelineDefinition(BaseModel):
    name: str = DEFAULT_PIPELINE_NAME
    version: str = DEFAULT_PIPELINE_VERSION
    triggers: GitTriggerSet = GitTriggerSet()
    steps: Tuple[StepSpec, ...] = ()

    class Config:
        frozen = True
