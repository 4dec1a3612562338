"""
Job workspaces - a fresh checkout of the repository per job.
"""

import logging
import os
import shutil
import subprocess
import tempfile
from typing import Optional

from controller.src.config import get_settings
from core.src.errors import WorkspaceError
from core.src.models import GitEvent, GitEventKind

logger = logging.getLogger(__name__)
settings = get_settings()

def clone_repository(clone_url: str, commit_sha: Optional[str] = None, ref: Optional[str] = None) -> str:
    """
    Clone repository to a temporary directory.
    Returns path to cloned repo.
    """
    temp_dir = tempfile.mkdtemp(prefix="pulse_", dir=settings.workspace_root)
    repo_path = os.path.join(temp_dir, "repo")

    command = ["git", "clone", "--depth", "1"]
    if ref and not commit_sha:
        command += ["--branch", ref]

    try:
        subprocess.run(
            command + [clone_url, repo_path],
            check=True,
            capture_output=True,
            timeout=120
        )

        if commit_sha:
            subprocess.run(
                ["git", "fetch", "--depth", "1", "origin", commit_sha],
                cwd=repo_path,
                capture_output=True,
                timeout=60
            )
            subprocess.run(
                ["git", "checkout", commit_sha],
                cwd=repo_path,
                check=True,
                capture_output=True,
                timeout=30
            )

        return repo_path
    except subprocess.TimeoutExpired:
        cleanup_workspace(repo_path)
        raise WorkspaceError("Repository clone timed out")
    except subprocess.CalledProcessError as e:
        cleanup_workspace(repo_path)
        raise WorkspaceError(f"Failed to clone repository: {e.stderr.decode(errors='replace')}")
    except OSError as e:
        cleanup_workspace(repo_path)
        raise WorkspaceError(f"Failed to run git: {e}")

def prepare_workspace(event: GitEvent) -> str:
    """Check out the commit (or ref) the event points at."""
    repository = event.repository
    if not repository.clone_url:
        raise WorkspaceError(f"Repository {repository.full_name} has no clone URL")

    if event.kind == GitEventKind.BRANCH_DELETE:
        # The deleted branch is gone from the remote
        logger.info(f"Cloning {repository.full_name} at its default branch")
        return clone_repository(repository.clone_url)

    logger.info(f"Cloning {repository.full_name} at {event.commit_sha or event.branch or event.tag or 'HEAD'}")
    return clone_repository(repository.clone_url, event.commit_sha, event.branch or event.tag)

def cleanup_workspace(repo_path: str):
    """Clean up cloned repository."""
    parent = os.path.dirname(repo_path)
    if repo_path and os.path.exists(parent):
        shutil.rmtree(parent, ignore_errors=True)
        logger.debug(f"Removed workspace {parent}")
