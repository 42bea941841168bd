"""Builds backend sets from configuration.

Process-wide resources (the relay helper, the launcher, the application
lister, the compositor bridge, command-driven volume) are created once.
The input simulator is created fresh for every session by :meth:`create`.
"""

from __future__ import annotations

import logging

from deskremote.backends.apps import DesktopEntryLister
from deskremote.backends.base import (
    ApplicationLauncher,
    BackendError,
    BackendSet,
    CapabilityLister,
    InputSimulator,
    VolumeController,
    WindowManagerBridge,
)
from deskremote.backends.compositor import CommandWindowManagerBridge
from deskremote.backends.launcher import ProcessApplicationLauncher
from deskremote.backends.pynput_backend import PynputInputSimulator
from deskremote.backends.relay import CommandRelay, RelayInputSimulator
from deskremote.backends.volume import CommandVolumeController, KeyVolumeController
from deskremote.config.settings import Settings

logger = logging.getLogger(__name__)


class BackendFactory:
    """Creates one :class:`BackendSet` per session from shared resources."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self.relay: CommandRelay | None = None
        if settings.input.backend == "relay":
            self.relay = CommandRelay(
                command=settings.relay.command,
                expect_reply=settings.relay.expect_reply,
                reply_timeout=settings.relay.reply_timeout,
            )
        self.launcher: ApplicationLauncher = ProcessApplicationLauncher()
        self.apps: CapabilityLister = DesktopEntryLister(
            [(p.path, p.priority) for p in settings.apps.search_paths]
        )
        self.compositor: WindowManagerBridge | None = None
        if settings.compositor.enabled:
            self.compositor = CommandWindowManagerBridge(settings.compositor.command)
        self.volume: VolumeController | None = None
        if settings.volume.backend == "command":
            self.volume = CommandVolumeController(
                increase_command=settings.volume.increase_command,
                decrease_command=settings.volume.decrease_command,
                mute_command=settings.volume.mute_command,
            )

    async def start(self) -> None:
        """Start process-wide helpers. A helper that fails to start is retried per session."""
        if self.relay is not None:
            try:
                await self.relay.start()
            except BackendError as e:
                logger.warning("Relay helper not available: %s -- sessions will retry", e)

    async def stop(self) -> None:
        if self.relay is not None:
            await self.relay.stop()

    def create_input(self) -> InputSimulator:
        if self.relay is not None:
            return RelayInputSimulator(self.relay)
        return PynputInputSimulator()

    def create(self) -> BackendSet:
        """Bind a fresh set of backends for one session (input not yet opened)."""
        simulator = self.create_input()
        volume = self.volume if self.volume is not None else KeyVolumeController(simulator)
        return BackendSet(
            input=simulator,
            launcher=self.launcher,
            volume=volume,
            apps=self.apps,
            compositor=self.compositor,
        )
