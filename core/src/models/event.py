"""
Git event models. Built by the webhook adapter or the CLI, never by the engine.
"""

from pydantic import BaseModel
from typing import Optional
from enum import Enum


class GitEventKind(str, Enum):
    PUSH = "push"
    PULL_REQUEST = "pull_request"
    MERGE = "merge"
    TAG = "tag"
    RELEASE = "release"
    BRANCH_CREATE = "branch_create"
    BRANCH_DELETE = "branch_delete"


class Repository(BaseModel):
    owner: str
    name: str
    full_name: str
    clone_url: str
    default_branch: str = "main"

    class Config:
        frozen = True


class PullRequest(BaseModel):
    number: int
    title: str
    base_branch: str
    head_branch: str
    state: str

    class Config:
        frozen = True


class GitEvent(BaseModel):
    kind: GitEventKind
    repository: Repository
    branch: Optional[str] = None
    tag: Optional[str] = None
    pull_request: Optional[PullRequest] = None
    commit_sha: Optional[str] = None
    sender: str = ""

    class Config:
        frozen = True


def normalize_repo_identifier(repo: str) -> str:
    """Reduce a repository URL (https or scp-style ssh) to ``owner/name``.

    Identifiers that are already ``owner/name`` are returned unchanged.
    """
    repo = repo.strip().rstrip("/")
    if repo.endswith(".git"):
        repo = repo[:-4]
    if repo.startswith("git@") and ":" in repo:
        repo = repo.split(":", 1)[1]
    elif "://" in repo:
        repo = repo.split("://", 1)[1].split("/", 1)[-1]
    parts = [p for p in repo.split("/") if p]
    return "/".join(parts[-2:]) if len(parts) >= 2 else repo


def repository_from_identifier(repo: str, clone_url: str = "", default_branch: str = "main") -> Repository:
    full_name = normalize_repo_identifier(repo)
    owner, _, name = full_name.rpartition("/")
    return Repository(
        owner=owner,
        name=name,
        full_name=full_name,
        clone_url=clone_url,
        default_branch=default_branch,
    )
