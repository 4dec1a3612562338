"""
Default resolution: turns a raw parse tree into a fully populated definition.
"""

from typing import Optional

from core.src.models.pipeline import (
    DEFAULT_BRANCH_PATTERNS,
    DEFAULT_PIPELINE_NAME,
    DEFAULT_PIPELINE_VERSION,
    GitTriggerSet,
    PipelineDefinition,
    StepSpec,
)
from core.src.parser.grammar import RawGitTriggers, RawPipeline, RawStep


def resolve_defaults(raw: RawPipeline) -> PipelineDefinition:
    """Apply every default exactly once and freeze the result."""
    return PipelineDefinition(
        name=raw.name or DEFAULT_PIPELINE_NAME,
        version=raw.version or DEFAULT_PIPELINE_VERSION,
        triggers=resolve_triggers(raw.git),
        steps=tuple(resolve_step(step) for step in raw.steps),
    )


def resolve_triggers(raw: Optional[RawGitTriggers] = None) -> GitTriggerSet:
    if raw is None:
        return GitTriggerSet()
    branches = DEFAULT_BRANCH_PATTERNS if raw.branches is None else tuple(raw.branches)
    return GitTriggerSet(branch_patterns=branches, **raw.flags)


def resolve_step(raw: RawStep) -> StepSpec:
    return StepSpec(
        name=raw.name,
        command=(raw.run or "").strip(),
        allow_failure=bool(raw.allow_failure),
    )
