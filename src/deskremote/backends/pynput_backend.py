"""Direct input simulation through pynput.

Injects events with the platform's native API (X11/uinput on Linux,
Quartz on macOS, SendInput on Windows). pynput calls block, so each one
runs in the default executor.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

from deskremote.backends.base import Axis, BackendError, Button, InputSimulator, SymbolicKey

logger = logging.getLogger(__name__)

# SymbolicKey -> attribute name on pynput.keyboard.Key
PYNPUT_KEY_NAMES: dict[SymbolicKey, str] = {
    SymbolicKey.BACKSPACE: "backspace",
    SymbolicKey.RETURN: "enter",
    SymbolicKey.ESCAPE: "esc",
    SymbolicKey.TAB: "tab",
    SymbolicKey.SPACE: "space",
    SymbolicKey.DELETE: "delete",
    SymbolicKey.UP: "up",
    SymbolicKey.DOWN: "down",
    SymbolicKey.LEFT: "left",
    SymbolicKey.RIGHT: "right",
    SymbolicKey.HOME: "home",
    SymbolicKey.END: "end",
    SymbolicKey.PAGE_UP: "page_up",
    SymbolicKey.PAGE_DOWN: "page_down",
    SymbolicKey.VOLUME_UP: "media_volume_up",
    SymbolicKey.VOLUME_DOWN: "media_volume_down",
    SymbolicKey.VOLUME_MUTE: "media_volume_mute",
}

# Symbol keys pynput has no Key member for, typed through their character
PYNPUT_CHAR_KEYS: dict[SymbolicKey, str] = {
    SymbolicKey.SEMICOLON: ";",
    SymbolicKey.COLON: ":",
    SymbolicKey.APOSTROPHE: "'",
    SymbolicKey.BACKSLASH: "\\",
    SymbolicKey.SLASH: "/",
    SymbolicKey.LEFT_BRACE: "[",
    SymbolicKey.RIGHT_BRACE: "]",
}


class PynputInputSimulator(InputSimulator):
    """Sends keyboard and mouse events through pynput controllers.

    The pynput import happens in :meth:`open`, since it fails on hosts
    without a usable display server and that must surface as a session
    start failure rather than an import error at server startup.
    """

    name = "pynput"

    def __init__(self, keyboard: Any = None, mouse: Any = None) -> None:
        self._keyboard = keyboard
        self._mouse = mouse
        self._keys: dict[SymbolicKey, Any] = {}
        self._buttons: dict[Button, Any] = {}

    @property
    def is_open(self) -> bool:
        return bool(self._keys)

    async def open(self) -> None:
        """Create the pynput keyboard and mouse controllers."""
        try:
            from pynput import keyboard, mouse

            if self._keyboard is None:
                self._keyboard = keyboard.Controller()
            if self._mouse is None:
                self._mouse = mouse.Controller()
        except Exception as e:
            raise BackendError(f"pynput is not usable on this host: {e}", backend=self.name) from e

        self._keys = {sym: getattr(keyboard.Key, attr) for sym, attr in PYNPUT_KEY_NAMES.items()}
        self._keys.update(
            {sym: keyboard.KeyCode.from_char(char) for sym, char in PYNPUT_CHAR_KEYS.items()}
        )
        self._buttons = {
            Button.LEFT: mouse.Button.left,
            Button.MIDDLE: mouse.Button.middle,
            Button.RIGHT: mouse.Button.right,
        }
        logger.info("Opened pynput input simulator")

    async def close(self) -> None:
        if self._keys:
            self._keys = {}
            self._buttons = {}
            logger.info("Closed pynput input simulator")

    async def press_key(self, key: SymbolicKey) -> None:
        await self._run(self._keyboard.tap, self._keys[key])
        logger.debug("Pressed key: %s", key.value)

    async def type_char(self, char: str) -> None:
        await self._run(self._keyboard.type, char)
        logger.debug("Typed char: %r", char)

    async def move_relative(self, dx: float, dy: float) -> None:
        await self._run(self._mouse.move, dx, dy)

    async def scroll(self, axis: Axis, amount: float) -> None:
        if axis is Axis.HORIZONTAL:
            await self._run(self._mouse.scroll, amount, 0)
        else:
            # pynput scrolls up for positive dy
            await self._run(self._mouse.scroll, 0, -amount)

    async def click(self, button: Button) -> None:
        await self._run(self._mouse.click, self._buttons[button])
        logger.debug("Clicked %s", button.value)

    async def _run(self, fn: Callable[..., Any], *args: Any) -> None:
        if not self.is_open:
            raise BackendError("Input simulator not open", backend=self.name)
        try:
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, lambda: fn(*args))
        except Exception as e:
            raise BackendError(f"pynput call failed: {e}", backend=self.name) from e
