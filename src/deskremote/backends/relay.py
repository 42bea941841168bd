"""Helper-process command relay.

Some hosts cannot be driven through pynput (Wayland compositors, for
example), so input is delegated to a long-running helper daemon such as
``dotool`` that reads one newline-terminated command per line on stdin.

The helper is a single process for the whole server. Every session
writes to the same pipe, so :class:`CommandRelay` serializes writes (and
the optional reply read) behind one lock.
"""

from __future__ import annotations

import asyncio
import logging
import shlex

from deskremote.backends.base import Axis, BackendError, Button, InputSimulator, SymbolicKey

logger = logging.getLogger(__name__)

# Seconds to wait for the helper to exit before killing it
STOP_TIMEOUT = 2.0


class CommandRelay:
    """Owns the helper process and pipes text commands to it.

    Usage::

        relay = CommandRelay("dotool")
        await relay.start()
        await relay.send("mousemove 10 -3")
        await relay.stop()
    """

    name = "relay"

    def __init__(
        self,
        command: str = "dotool",
        expect_reply: bool = False,
        reply_timeout: float = 1.0,
    ) -> None:
        self._argv = shlex.split(command)
        self._expect_reply = expect_reply
        self._reply_timeout = reply_timeout
        self._process: asyncio.subprocess.Process | None = None
        self._lock = asyncio.Lock()
        self._unread_replies = 0

    @property
    def is_running(self) -> bool:
        return self._process is not None and self._process.returncode is None

    async def start(self) -> None:
        """Start the helper process if it is not already running.

        Raises:
            BackendError: If the helper cannot be spawned.
        """
        async with self._lock:
            await self._ensure_started()

    async def stop(self) -> None:
        """Close the helper's stdin and wait for it to exit."""
        async with self._lock:
            process = self._process
            self._process = None
            self._unread_replies = 0
            if process is None:
                return
            if process.stdin is not None:
                process.stdin.close()
            try:
                await asyncio.wait_for(process.wait(), timeout=STOP_TIMEOUT)
            except asyncio.TimeoutError:
                process.kill()
                await process.wait()
            logger.info("Helper %s stopped (exit=%s)", self._argv[0], process.returncode)

    async def send(self, line: str) -> str:
        """Write one command line and return the helper's reply.

        Args:
            line: The command, without a trailing newline.

        Returns:
            The reply line when ``expect_reply`` is set, otherwise "".

        Raises:
            BackendError: If the line is not a single line, or the helper
                cannot be written to or does not reply in time.
        """
        if "\n" in line or "\r" in line:
            raise BackendError(f"Relay commands must be one line: {line!r}", backend=self.name)

        async with self._lock:
            if self._unread_replies:
                await self._discard_late_replies()
            await self._ensure_started()
            process = self._process
            assert process is not None and process.stdin is not None
            try:
                process.stdin.write(f"{line}\n".encode())
                await process.stdin.drain()
            except (BrokenPipeError, ConnectionResetError) as e:
                raise BackendError(f"Helper {self._argv[0]} is gone: {e}", backend=self.name) from e
            logger.debug("Relayed: %s", line)

            if not self._expect_reply:
                return ""
            # Outstanding until read; drained before the next command
            self._unread_replies += 1
            assert process.stdout is not None
            try:
                reply = await asyncio.wait_for(process.stdout.readline(), timeout=self._reply_timeout)
            except asyncio.TimeoutError as e:
                raise BackendError(
                    f"Helper {self._argv[0]} did not reply to {line!r}", backend=self.name
                ) from e
            self._unread_replies -= 1
            return reply.decode(errors="replace").rstrip("\r\n")

    async def _discard_late_replies(self) -> None:
        process = self._process
        while self._unread_replies and self.is_running:
            assert process is not None and process.stdout is not None
            try:
                late = await asyncio.wait_for(process.stdout.readline(), timeout=self._reply_timeout)
            except asyncio.TimeoutError:
                logger.warning(
                    "Helper %s still owes %d replies, restarting it",
                    self._argv[0], self._unread_replies,
                )
                process.kill()
                await process.wait()
                self._process = None
                break
            self._unread_replies -= 1
            logger.debug("Discarded late reply: %r", late)
        self._unread_replies = 0

    async def _ensure_started(self) -> None:
        if self.is_running:
            return
        if self._process is not None:
            logger.warning(
                "Helper %s exited (code=%s), restarting", self._argv[0], self._process.returncode
            )
        try:
            self._process = await asyncio.create_subprocess_exec(
                *self._argv,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE if self._expect_reply else asyncio.subprocess.DEVNULL,
            )
        except OSError as e:
            self._process = None
            raise BackendError(f"Cannot start helper {self._argv[0]}: {e}", backend=self.name) from e
        self._unread_replies = 0
        logger.info("Started helper %s (pid=%d)", " ".join(self._argv), self._process.pid)


# dotool key names (Linux input event codes, lowercased, without KEY_)
RELAY_KEY_NAMES: dict[SymbolicKey, str] = {
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
    SymbolicKey.PAGE_UP: "pageup",
    SymbolicKey.PAGE_DOWN: "pagedown",
    SymbolicKey.SEMICOLON: "semicolon",
    SymbolicKey.COLON: "shift+semicolon",
    SymbolicKey.APOSTROPHE: "apostrophe",
    SymbolicKey.BACKSLASH: "backslash",
    SymbolicKey.SLASH: "slash",
    SymbolicKey.LEFT_BRACE: "leftbrace",
    SymbolicKey.RIGHT_BRACE: "rightbrace",
    SymbolicKey.VOLUME_UP: "volumeup",
    SymbolicKey.VOLUME_DOWN: "volumedown",
    SymbolicKey.VOLUME_MUTE: "mute",
}


class RelayInputSimulator(InputSimulator):
    """Input simulator that formats events as helper commands.

    Opening only makes sure the shared helper is running; closing leaves
    it alone since other sessions still use it.
    """

    name = "relay"

    def __init__(self, relay: CommandRelay) -> None:
        self._relay = relay

    async def open(self) -> None:
        await self._relay.start()

    async def close(self) -> None:
        pass

    async def press_key(self, key: SymbolicKey) -> None:
        await self._relay.send(f"key {RELAY_KEY_NAMES[key]}")

    async def type_char(self, char: str) -> None:
        if char in ("\n", "\r"):
            await self.press_key(SymbolicKey.RETURN)
            return
        await self._relay.send(f"type {char}")

    async def move_relative(self, dx: float, dy: float) -> None:
        await self._relay.send(f"mousemove {dx} {dy}")

    async def scroll(self, axis: Axis, amount: float) -> None:
        # wheel is positive-up; amounts here are positive-down
        if axis is Axis.HORIZONTAL:
            await self._relay.send(f"hwheel {amount}")
        else:
            await self._relay.send(f"wheel {-amount}")

    async def click(self, button: Button) -> None:
        await self._relay.send(f"click {button.value}")
