"""
GitHub service for webhook validation, event mapping and Pulsefile lookup.
"""

import hmac
import hashlib
import logging
from typing import Optional, Dict, Any

import httpx

from api.src.config import get_settings
from core.src.errors import PulsefileNotFoundError, WebhookPayloadError
from core.src.models import GitEvent, GitEventKind, PullRequest, Repository

logger = logging.getLogger(__name__)
settings = get_settings()

PULL_REQUEST_ACTIONS = {"opened", "synchronize", "reopened"}

def verify_signature(payload: bytes, signature: Optional[str]) -> bool:
    """Verify GitHub webhook signature."""
    if not settings.github_webhook_secret:
        # Skip verification if no secret configured (development)
        return True

    if not signature:
        return False

    expected = "sha256=" + hmac.new(
        settings.github_webhook_secret.encode(),
        payload,
        hashlib.sha256
    ).hexdigest()
    return hmac.compare_digest(expected, signature)

def _strip_ref(ref: str, prefix: str) -> Optional[str]:
    return ref[len(prefix):] if ref.startswith(prefix) else None

def parse_repository(payload: Dict[str, Any]) -> Repository:
    """Extract repository info from a GitHub webhook payload."""
    repo = payload.get("repository")
    if not repo or not repo.get("full_name"):
        raise WebhookPayloadError("Webhook payload has no repository")

    full_name = repo["full_name"]
    owner = (repo.get("owner") or {}).get("login") or full_name.split("/")[0]

    return Repository(
        owner=owner,
        name=repo.get("name") or full_name.split("/")[-1],
        full_name=full_name,
        clone_url=repo.get("clone_url", ""),
        default_branch=repo.get("default_branch") or "main",
    )

def parse_webhook_event(event_type: Optional[str], payload: Dict[str, Any]) -> Optional[GitEvent]:
    """
    Map a GitHub webhook delivery to a GitEvent.
    Returns None for deliveries that never trigger pipelines.
    """
    if event_type not in ("push", "pull_request", "create", "delete", "release"):
        return None

    repository = parse_repository(payload)
    sender = (payload.get("sender") or {}).get("login", "")
    ref = payload.get("ref") or ""

    if event_type == "push":
        if payload.get("deleted"):
            # Branch deletions also arrive as a "delete" delivery
            return None
        head_commit = payload.get("head_commit") or {}
        return GitEvent(
            kind=GitEventKind.PUSH,
            repository=repository,
            branch=_strip_ref(ref, "refs/heads/"),
            tag=_strip_ref(ref, "refs/tags/"),
            commit_sha=head_commit.get("id") or payload.get("after"),
            sender=sender,
        )

    if event_type == "pull_request":
        return _pull_request_event(repository, payload, sender)

    if event_type == "create":
        # create/delete send the short ref name plus a ref_type
        if payload.get("ref_type") == "tag":
            return GitEvent(
                kind=GitEventKind.TAG,
                repository=repository,
                tag=_strip_ref(ref, "refs/tags/") or ref,
                sender=sender,
            )
        return GitEvent(
            kind=GitEventKind.BRANCH_CREATE,
            repository=repository,
            branch=_strip_ref(ref, "refs/heads/") or ref,
            sender=sender,
        )

    if event_type == "delete":
        if payload.get("ref_type") == "tag":
            return None
        return GitEvent(
            kind=GitEventKind.BRANCH_DELETE,
            repository=repository,
            branch=_strip_ref(ref, "refs/heads/") or ref,
            sender=sender,
        )

    release = payload.get("release") or {}
    if payload.get("action") != "published" or not release.get("tag_name"):
        return None
    return GitEvent(
        kind=GitEventKind.RELEASE,
        repository=repository,
        tag=release["tag_name"],
        sender=sender,
    )

def _pull_request_event(repository: Repository, payload: Dict[str, Any], sender: str) -> Optional[GitEvent]:
    pr = payload.get("pull_request") or {}
    action = payload.get("action")

    try:
        details = PullRequest(
            number=pr["number"],
            title=pr.get("title", ""),
            base_branch=pr["base"]["ref"],
            head_branch=pr["head"]["ref"],
            state=pr.get("state", ""),
        )
    except (KeyError, TypeError, ValueError):
        raise WebhookPayloadError("Pull request payload is missing number, base or head")

    if action == "closed" and pr.get("merged"):
        # A merge lands on the base branch, so branch patterns apply to it
        return GitEvent(
            kind=GitEventKind.MERGE,
            repository=repository,
            branch=details.base_branch,
            pull_request=details,
            commit_sha=pr.get("merge_commit_sha"),
            sender=sender,
        )

    if action not in PULL_REQUEST_ACTIONS:
        return None

    return GitEvent(
        kind=GitEventKind.PULL_REQUEST,
        repository=repository,
        pull_request=details,
        commit_sha=(pr.get("head") or {}).get("sha"),
        sender=sender,
    )

async def fetch_pulsefile(event: GitEvent) -> str:
    """
    Fetch the Pulsefile from the repository at the event's commit
    (falling back to its branch, then the default branch).
    """
    repository = event.repository
    ref = event.commit_sha or event.branch or event.tag or repository.default_branch
    url = f"{settings.github_raw_base_url}/{repository.full_name}/{ref}/{settings.pulsefile_name}"

    logger.info(f"Fetching Pulsefile from {url}")

    try:
        async with httpx.AsyncClient(timeout=10.0) as client:
            response = await client.get(url)
    except httpx.HTTPError as e:
        raise PulsefileNotFoundError(f"Failed to fetch Pulsefile for {repository.full_name}: {e}")

    if response.status_code != 200:
        raise PulsefileNotFoundError(
            f"Pulsefile not found in repository {repository.full_name} (HTTP {response.status_code})"
        )

    return response.text
