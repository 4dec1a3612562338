"""
Step executor - runs one pipeline step as a local shell subprocess.
"""

import logging
import os
import signal
import subprocess
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Union

from core.src.models.execution import StepResult, StepStatus
from core.src.models.pipeline import StepSpec

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

KILL_GRACE_SECONDS = 5


def shell_command(command: str) -> List[str]:
    """Wrap a script body for the host shell."""
    if os.name == "nt":
        return ["cmd", "/C", command]
    return ["sh", "-c", command]


def _decode(data: Optional[bytes]) -> str:
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")


def _kill(process: subprocess.Popen):
    if os.name == "nt":
        process.kill()
        return
    try:
        os.killpg(process.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass


def run_step(
    step: StepSpec,
    working_directory: Optional[PathLike] = None,
    timeout: Optional[float] = None,
) -> StepResult:
    """
    Run a step once and return its result.
    Never raises for spawn failures (including commands the OS rejects,
    such as ones with NUL bytes) or non-zero exits; those become
    failed results. ``timeout`` is an optional external deadline in seconds.
    """
    started_at = datetime.now(timezone.utc)
    start = time.monotonic()
    cwd = str(working_directory) if working_directory is not None else None

    logger.info(f"Executing step '{step.name}'")

    popen_kwargs = {}
    if timeout is not None and os.name != "nt":
        # Own process group so the whole tree can be killed on timeout
        popen_kwargs["start_new_session"] = True

    try:
        process = subprocess.Popen(
            shell_command(step.command),
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            **popen_kwargs,
        )
    except (OSError, ValueError) as e:
        logger.error(f"Step '{step.name}' could not be started: {e}")
        return StepResult(
            step_name=step.name,
            status=StepStatus.FAILED,
            stderr=f"Failed to execute command: {e}",
            duration_ms=int((time.monotonic() - start) * 1000),
            started_at=started_at,
            completed_at=datetime.now(timezone.utc),
        )

    timed_out = False
    try:
        stdout, stderr = process.communicate(timeout=timeout)
    except subprocess.TimeoutExpired:
        timed_out = True
        _kill(process)
        try:
            stdout, stderr = process.communicate(timeout=KILL_GRACE_SECONDS)
        except subprocess.TimeoutExpired as e:
            # A process that left the group still holds the pipes open
            stdout, stderr = e.stdout, e.stderr
            process.stdout.close()
            process.stderr.close()
            process.wait()

    duration_ms = int((time.monotonic() - start) * 1000)
    stdout_text = _decode(stdout)
    stderr_text = _decode(stderr)

    if timed_out:
        logger.error(f"Step '{step.name}' timed out after {timeout}s")
        stderr_text += f"\nStep timed out after {timeout}s"
        exit_code = None
        status = StepStatus.FAILED
    else:
        # Negative return codes mean the process was killed by a signal.
        exit_code = process.returncode if process.returncode >= 0 else None
        status = StepStatus.SUCCESS if process.returncode == 0 else StepStatus.FAILED
        logger.info(f"Step '{step.name}' finished with status {status.value} (exit code {exit_code})")

    return StepResult(
        step_name=step.name,
        status=status,
        stdout=stdout_text,
        stderr=stderr_text,
        exit_code=exit_code,
        duration_ms=duration_ms,
        started_at=started_at,
        completed_at=datetime.now(timezone.utc),
    )
