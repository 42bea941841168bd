"""Application launcher that spawns GUI programs detached from the server."""

from __future__ import annotations

import asyncio
import logging

from deskremote.backends.base import ApplicationLauncher, BackendError
from deskremote.backends.process import split_command

logger = logging.getLogger(__name__)


class ProcessApplicationLauncher(ApplicationLauncher):
    """Starts an application by running its command line in a new session.

    The launched program outlives the WebSocket session that asked for
    it. A background task reaps it when it exits.
    """

    name = "launcher"

    def __init__(self) -> None:
        self._reapers: set[asyncio.Task[int]] = set()

    async def launch(self, identifier: str) -> None:
        argv = split_command(identifier, backend=self.name)
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as e:
            raise BackendError(f"Cannot launch {identifier!r}: {e}", backend=self.name) from e

        reaper = asyncio.create_task(process.wait())
        self._reapers.add(reaper)
        reaper.add_done_callback(self._reapers.discard)
        logger.info("Launched %s (pid=%d)", identifier, process.pid)
