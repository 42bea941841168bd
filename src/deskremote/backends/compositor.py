"""Window manager bridge over the compositor's command-line IPC client.

The default targets niri (``niri msg action <action> [args]``). The
action string is appended to the configured command as-is; the
compositor owns its grammar and reports errors through its exit status.
"""

from __future__ import annotations

import logging

from deskremote.backends.base import WindowManagerBridge
from deskremote.backends.process import run_command, split_command

logger = logging.getLogger(__name__)


class CommandWindowManagerBridge(WindowManagerBridge):
    """Invokes compositor actions through an IPC command-line client."""

    name = "compositor"

    def __init__(self, command: str = "niri msg action") -> None:
        self._base_argv = split_command(command, backend=self.name)

    async def invoke(self, command: str) -> None:
        argv = self._base_argv + split_command(command, backend=self.name)
        await run_command(argv, backend=self.name)
        logger.info("Compositor action: %s", command)
