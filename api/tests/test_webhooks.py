"""Tests for webhook handling."""

import hashlib
import hmac

import pytest
from api.src.services import github
from api.src.services.github import parse_webhook_event, verify_signature
from core.src.errors import WebhookPayloadError
from core.src.models import GitEventKind

REPOSITORY = {
    "name": "test-repo",
    "full_name": "user/test-repo",
    "clone_url": "https://github.com/user/test-repo.git",
    "default_branch": "main",
    "owner": {"login": "user"},
}

def test_parse_push_payload():
    payload = {
        "ref": "refs/heads/main",
        "repository": REPOSITORY,
        "head_commit": {
            "id": "abc123def456",
            "message": "Test commit",
        },
        "sender": {"login": "testuser"},
    }

    event = parse_webhook_event("push", payload)

    assert event.kind == GitEventKind.PUSH
    assert event.repository.name == "test-repo"
    assert event.repository.full_name == "user/test-repo"
    assert event.repository.owner == "user"
    assert event.branch == "main"
    assert event.tag is None
    assert event.commit_sha == "abc123def456"
    assert event.sender == "testuser"

def test_parse_payload_with_after():
    """Test fallback to 'after' field for commit SHA."""
    payload = {
        "ref": "refs/heads/feature/login",
        "after": "xyz789",
        "repository": REPOSITORY,
        "head_commit": {},
    }

    event = parse_webhook_event("push", payload)
    assert event.commit_sha == "xyz789"
    assert event.branch == "feature/login"

def test_push_of_tag_ref_sets_tag():
    payload = {"ref": "refs/tags/v1.2.0", "after": "abc", "repository": REPOSITORY}

    event = parse_webhook_event("push", payload)
    assert event.kind == GitEventKind.PUSH
    assert event.branch is None
    assert event.tag == "v1.2.0"

def test_deleting_push_is_ignored():
    payload = {"ref": "refs/heads/old", "deleted": True, "repository": REPOSITORY}
    assert parse_webhook_event("push", payload) is None

def test_opened_pull_request():
    payload = {
        "action": "opened",
        "repository": REPOSITORY,
        "pull_request": {
            "number": 7,
            "title": "Add login",
            "state": "open",
            "base": {"ref": "main"},
            "head": {"ref": "feature/login", "sha": "headsha"},
        },
    }

    event = parse_webhook_event("pull_request", payload)
    assert event.kind == GitEventKind.PULL_REQUEST
    assert event.branch is None
    assert event.commit_sha == "headsha"
    assert event.pull_request.number == 7
    assert event.pull_request.head_branch == "feature/login"

def test_merged_pull_request_becomes_merge_on_base_branch():
    payload = {
        "action": "closed",
        "repository": REPOSITORY,
        "pull_request": {
            "number": 7,
            "title": "Add login",
            "state": "closed",
            "merged": True,
            "merge_commit_sha": "mergesha",
            "base": {"ref": "main"},
            "head": {"ref": "feature/login", "sha": "headsha"},
        },
    }

    event = parse_webhook_event("pull_request", payload)
    assert event.kind == GitEventKind.MERGE
    assert event.branch == "main"
    assert event.commit_sha == "mergesha"

def test_closed_unmerged_pull_request_is_ignored():
    payload = {
        "action": "closed",
        "repository": REPOSITORY,
        "pull_request": {
            "number": 7,
            "merged": False,
            "base": {"ref": "main"},
            "head": {"ref": "feature/login"},
        },
    }
    assert parse_webhook_event("pull_request", payload) is None

def test_malformed_pull_request_raises():
    payload = {"action": "opened", "repository": REPOSITORY, "pull_request": {"number": 1}}
    with pytest.raises(WebhookPayloadError):
        parse_webhook_event("pull_request", payload)

def test_create_and_delete_events():
    tag = parse_webhook_event("create", {"ref": "v2.0.0", "ref_type": "tag", "repository": REPOSITORY})
    assert tag.kind == GitEventKind.TAG
    assert tag.tag == "v2.0.0"

    branch = parse_webhook_event("create", {"ref": "develop", "ref_type": "branch", "repository": REPOSITORY})
    assert branch.kind == GitEventKind.BRANCH_CREATE
    assert branch.branch == "develop"

    deleted = parse_webhook_event("delete", {"ref": "develop", "ref_type": "branch", "repository": REPOSITORY})
    assert deleted.kind == GitEventKind.BRANCH_DELETE
    assert deleted.branch == "develop"

    assert parse_webhook_event("delete", {"ref": "v1", "ref_type": "tag", "repository": REPOSITORY}) is None

def test_published_release():
    payload = {"action": "published", "release": {"tag_name": "v3.0.0"}, "repository": REPOSITORY}

    event = parse_webhook_event("release", payload)
    assert event.kind == GitEventKind.RELEASE
    assert event.tag == "v3.0.0"

    payload["action"] = "created"
    assert parse_webhook_event("release", payload) is None

def test_unhandled_event_type_is_ignored():
    assert parse_webhook_event("issues", {"repository": REPOSITORY}) is None
    assert parse_webhook_event(None, {}) is None

def test_missing_repository_raises():
    with pytest.raises(WebhookPayloadError):
        parse_webhook_event("push", {"ref": "refs/heads/main"})

def test_verify_signature_without_secret(monkeypatch):
    """When no secret is configured, verification should pass."""
    monkeypatch.setattr(github.settings, "github_webhook_secret", "")
    assert verify_signature(b"payload", "sha256=anything") is True

def test_verify_signature_with_secret(monkeypatch):
    monkeypatch.setattr(github.settings, "github_webhook_secret", "s3cret")
    body = b'{"ref": "refs/heads/main"}'
    signature = "sha256=" + hmac.new(b"s3cret", body, hashlib.sha256).hexdigest()

    assert verify_signature(body, signature) is True
    assert verify_signature(body, "sha256=deadbeef") is False
    assert verify_signature(body, None) is False
