"""Volume controllers.

Two ways to change the volume:

- :class:`KeyVolumeController` presses the media volume keys through the
  session's input simulator and lets the desktop handle them.
- :class:`CommandVolumeController` runs configured commands (``wpctl``
  by default) for hosts where media keys are not bound.
"""

from __future__ import annotations

import logging

from deskremote.backends.base import InputSimulator, SymbolicKey, VolumeController
from deskremote.backends.process import run_command, split_command

logger = logging.getLogger(__name__)


class KeyVolumeController(VolumeController):
    name = "volume-keys"

    def __init__(self, simulator: InputSimulator) -> None:
        self._simulator = simulator

    async def increase(self) -> None:
        await self._simulator.press_key(SymbolicKey.VOLUME_UP)

    async def decrease(self) -> None:
        await self._simulator.press_key(SymbolicKey.VOLUME_DOWN)

    async def toggle_mute(self) -> None:
        await self._simulator.press_key(SymbolicKey.VOLUME_MUTE)


class CommandVolumeController(VolumeController):
    name = "volume-command"

    def __init__(
        self,
        increase_command: str = "wpctl set-volume @DEFAULT_AUDIO_SINK@ 5%+",
        decrease_command: str = "wpctl set-volume @DEFAULT_AUDIO_SINK@ 5%-",
        mute_command: str = "wpctl set-mute @DEFAULT_AUDIO_SINK@ toggle",
    ) -> None:
        self._increase = split_command(increase_command, backend=self.name)
        self._decrease = split_command(decrease_command, backend=self.name)
        self._mute = split_command(mute_command, backend=self.name)

    async def increase(self) -> None:
        await run_command(self._increase, backend=self.name)

    async def decrease(self) -> None:
        await run_command(self._decrease, backend=self.name)

    async def toggle_mute(self) -> None:
        await run_command(self._mute, backend=self.name)
