"""Short-lived subprocess helpers shared by command-driven backends."""

from __future__ import annotations

import asyncio
import logging
import shlex

from deskremote.backends.base import BackendError

logger = logging.getLogger(__name__)


def split_command(command: str, backend: str = "") -> list[str]:
    """Split a configured command line into argv."""
    try:
        argv = shlex.split(command)
    except ValueError as e:
        raise BackendError(f"Cannot parse command {command!r}: {e}", backend=backend) from e
    if not argv:
        raise BackendError("Empty command", backend=backend)
    return argv


async def run_command(argv: list[str], backend: str = "") -> str:
    """Run a command to completion and return its stdout.

    Raises:
        BackendError: If the command cannot be started or exits non-zero.
    """
    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise BackendError(f"Cannot run {argv[0]}: {e}", backend=backend) from e

    stdout, stderr = await process.communicate()
    if process.returncode != 0:
        detail = stderr.decode(errors="replace").strip() or f"exit status {process.returncode}"
        raise BackendError(f"{argv[0]} failed: {detail}", backend=backend)
    logger.debug("Ran %s", " ".join(argv))
    return stdout.decode(errors="replace")
