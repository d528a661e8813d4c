"""
Process utilities for running external tools (git, package managers).

This module provides:
- Async subprocess execution with captured output
- A structured ProcessResult instead of raised exceptions
- Guaranteed child cleanup when the caller is interrupted

Every external call made by subpin goes through run_process(). A non-zero
exit status is reported through ProcessResult.success, never raised, so the
callers can keep going after a failed step.
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

IS_WINDOWS = sys.platform == "win32"
IS_UNIX = not IS_WINDOWS


class ProcessResult(BaseModel):
    """Structured result from process execution."""

    command: list[str] = Field(default_factory=list)
    """The command that was run."""

    success: bool
    """Whether the process completed successfully (exit code 0)."""

    exit_code: int | None
    """Process exit code, or None if the process never started."""

    stdout: str = ""
    """Standard output from the process."""

    stderr: str = ""
    """Standard error from the process."""

    duration_ms: int = 0
    """Execution duration in milliseconds."""

    error: str | None = None
    """Error message if the process could not be run at all."""

    skipped: bool = False
    """Whether the step was skipped because a step it depends on failed."""

    @property
    def message(self) -> str:
        """Best diagnostic text for a failed result."""
        if self.error:
            return self.error
        if self.stderr.strip():
            return self.stderr.strip()
        if self.exit_code is not None:
            return f"'{' '.join(self.command)}' exited with status {self.exit_code}"
        return f"'{' '.join(self.command)}' failed"

    @classmethod
    def skip(cls, command: list[str], reason: str) -> "ProcessResult":
        """Build a result for a step that was never attempted."""
        return cls(
            command=command,
            success=False,
            exit_code=None,
            error=reason,
            skipped=True,
        )


def _elapsed_ms(started_at: datetime) -> int:
    return int((datetime.now(timezone.utc) - started_at).total_seconds() * 1000)


async def run_process(
    command: list[str],
    *,
    cwd: Path | str | None = None,
    env: dict[str, str] | None = None,
) -> ProcessResult:
    """
    Run a subprocess to completion and capture its output.

    There is no timeout: a git call runs until git exits. If the awaiting
    task is cancelled (Ctrl+C), the child is terminated before returning.

    Args:
        command: Command and arguments as a list (e.g., ["git", "status"])
        cwd: Working directory for the process.
        env: Extra environment variables, merged over os.environ.

    Returns:
        ProcessResult with output, exit code, and timing information.

    Example:
        >>> result = await run_process(["git", "rev-parse", "HEAD"], cwd="lib/core")
        >>> if result.success:
        ...     print(result.stdout.strip())
    """
    started_at = datetime.now(timezone.utc)
    process: asyncio.subprocess.Process | None = None

    process_env = None
    if env is not None:
        process_env = os.environ.copy()
        process_env.update(env)

    # create_subprocess_exec reports a missing cwd as FileNotFoundError too
    if cwd is not None and not Path(cwd).is_dir():
        return ProcessResult(
            command=command,
            success=False,
            exit_code=None,
            error=f"Working directory does not exist: {cwd}",
        )

    try:
        kwargs: dict[str, Any] = {
            "stdout": asyncio.subprocess.PIPE,
            "stderr": asyncio.subprocess.PIPE,
            "cwd": str(cwd) if cwd is not None else None,
            "env": process_env,
        }

        # Own process group on Unix so the whole tree can be killed
        if IS_UNIX:
            kwargs["start_new_session"] = True

        logger.debug("Running process: %s (cwd=%s)", " ".join(command), cwd)
        process = await asyncio.create_subprocess_exec(*command, **kwargs)
        stdout_bytes, stderr_bytes = await process.communicate()

        stdout = stdout_bytes.decode("utf-8", errors="replace") if stdout_bytes else ""
        stderr = stderr_bytes.decode("utf-8", errors="replace") if stderr_bytes else ""

        return ProcessResult(
            command=command,
            success=process.returncode == 0,
            exit_code=process.returncode,
            stdout=stdout,
            stderr=stderr,
            duration_ms=_elapsed_ms(started_at),
        )

    except FileNotFoundError:
        return ProcessResult(
            command=command,
            success=False,
            exit_code=None,
            duration_ms=_elapsed_ms(started_at),
            error=f"Command not found: {command[0]}. Ensure it is installed and in PATH.",
        )

    except OSError as e:
        logger.debug("Process failed to start: %s", command, exc_info=True)
        return ProcessResult(
            command=command,
            success=False,
            exit_code=None,
            duration_ms=_elapsed_ms(started_at),
            error=f"Could not run {command[0]}: {e}",
        )

    finally:
        if process is not None:
            await ensure_process_terminated(process)


async def kill_process_group(process: asyncio.subprocess.Process) -> None:
    """
    Kill the process group to ensure all child processes are terminated.

    Args:
        process: The subprocess to kill along with its children.
    """
    if process.returncode is not None:
        return

    try:
        if IS_UNIX:
            try:
                pgid = os.getpgid(process.pid)
                os.killpg(pgid, signal.SIGKILL)
                logger.debug("Killed process group %s", pgid)
            except (ProcessLookupError, OSError) as e:
                logger.debug("Process group kill failed (process may be dead): %s", e)
        else:
            try:
                process.kill()
            except (ProcessLookupError, OSError) as e:
                logger.debug("Process kill failed (process may be dead): %s", e)

        try:
            await asyncio.wait_for(process.wait(), timeout=5.0)
        except asyncio.TimeoutError:
            logger.warning("Process %s did not exit after SIGKILL", process.pid)

    except Exception as e:
        logger.warning("Error during process group kill: %s", e)


async def ensure_process_terminated(process: asyncio.subprocess.Process) -> None:
    """
    Ensure the process is fully terminated.

    Sends SIGTERM, waits up to 2 seconds, then kills the process group.
    Called from finally blocks; a no-op when the process already exited.

    Args:
        process: The subprocess to terminate.
    """
    if process.returncode is not None:
        return

    try:
        logger.debug("Terminating process %s", process.pid)
        process.terminate()

        try:
            await asyncio.wait_for(process.wait(), timeout=2.0)
        except asyncio.TimeoutError:
            await kill_process_group(process)

    except (ProcessLookupError, OSError) as e:
        logger.debug("Process termination skipped (already dead): %s", e)
