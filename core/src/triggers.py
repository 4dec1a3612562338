"""
Trigger matching: decides whether a pipeline runs for a Git event.
"""

from typing import Sequence

from core.src.models.event import GitEvent, GitEventKind
from core.src.models.pipeline import GitTriggerSet

KIND_FLAGS = {
    GitEventKind.PUSH: "on_push",
    GitEventKind.PULL_REQUEST: "on_pull_request",
    GitEventKind.MERGE: "on_merge",
    GitEventKind.TAG: "on_tag",
    GitEventKind.RELEASE: "on_release",
    GitEventKind.BRANCH_CREATE: "on_branch_create",
    GitEventKind.BRANCH_DELETE: "on_branch_delete",
}


def kind_enabled(triggers: GitTriggerSet, kind: GitEventKind) -> bool:
    return getattr(triggers, KIND_FLAGS[kind])


def matches(triggers: GitTriggerSet, event: GitEvent) -> bool:
    """Check whether ``event`` should start a pipeline with these triggers."""
    if not kind_enabled(triggers, event.kind):
        return False

    if event.branch is not None:
        return matches_branch(triggers.branch_patterns, event.branch)
    if event.tag is not None:
        # No tag patterns exist; tag-carrying events only need on_tag.
        return triggers.on_tag
    return True


def matches_branch(patterns: Sequence[str], branch: str) -> bool:
    """
    Any-match of ``branch`` against glob-like patterns.
    "*" matches everything, "prefix/*" matches branches starting with "prefix/".
    An empty pattern list matches nothing.
    """
    for pattern in patterns:
        if pattern == "*" or pattern == branch:
            return True
        if pattern.endswith("/*") and branch.startswith(pattern[:-1]):
            return True
    return False
