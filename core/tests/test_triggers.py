"""Tests for trigger matching."""

from core.src.models import GitEvent, GitEventKind, GitTriggerSet, Repository
from core.src.triggers import matches, matches_branch


def make_event(kind=GitEventKind.PUSH, branch=None, tag=None):
    return GitEvent(
        kind=kind,
        repository=Repository(
            owner="test",
            name="repo",
            full_name="test/repo",
            clone_url="https://github.com/test/repo.git",
            default_branch="main",
        ),
        branch=branch,
        tag=tag,
        sender="user",
    )


def test_default_triggers():
    triggers = GitTriggerSet()
    assert triggers.on_push is False
    assert triggers.branch_patterns == ("*",)


def test_wildcard_matches_everything():
    assert matches_branch(["*"], "main")
    assert matches_branch(["*"], "feature/abc")


def test_exact_branch():
    assert matches_branch(["main"], "main")
    assert not matches_branch(["main"], "develop")


def test_prefix_pattern():
    assert matches_branch(["feature/*"], "feature/abc")
    assert matches_branch(["feature/*"], "feature/")
    assert not matches_branch(["feature/*"], "main")
    assert not matches_branch(["feature/*"], "feature")


def test_empty_patterns_match_nothing():
    assert not matches_branch([], "main")


def test_any_pattern_matches():
    assert matches_branch(["release/*", "main"], "main")
    assert matches_branch(["main", "release/*"], "release/1.2")


def test_push_on_matching_branch():
    triggers = GitTriggerSet(on_push=True, branch_patterns=("main",))
    assert matches(triggers, make_event(branch="main"))


def test_push_on_other_branch():
    triggers = GitTriggerSet(on_push=True, branch_patterns=("main",))
    assert not matches(triggers, make_event(branch="develop"))


def test_disabled_event_kind():
    triggers = GitTriggerSet(on_push=True)
    assert not matches(triggers, make_event(kind=GitEventKind.PULL_REQUEST))


def test_kind_without_branch_or_tag():
    triggers = GitTriggerSet(on_pull_request=True, branch_patterns=())
    assert matches(triggers, make_event(kind=GitEventKind.PULL_REQUEST))


def test_tag_event_ignores_branch_patterns():
    triggers = GitTriggerSet(on_tag=True, branch_patterns=())
    assert matches(triggers, make_event(kind=GitEventKind.TAG, tag="v1.0.0"))


def test_tag_event_requires_tag_flag():
    triggers = GitTriggerSet(on_push=True)
    assert not matches(triggers, make_event(kind=GitEventKind.TAG, tag="v1.0.0"))


def test_each_kind_maps_to_its_flag():
    for kind, flag in [
        (GitEventKind.MERGE, "on_merge"),
        (GitEventKind.RELEASE, "on_release"),
        (GitEventKind.BRANCH_CREATE, "on_branch_create"),
        (GitEventKind.BRANCH_DELETE, "on_branch_delete"),
    ]:
        assert matches(GitTriggerSet(**{flag: True}), make_event(kind=kind))
        assert not matches(GitTriggerSet(), make_event(kind=kind))
