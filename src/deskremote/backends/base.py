"""Capability interfaces for effector backends.

The dispatcher never talks to pynput, a helper daemon or a compositor
directly. It talks to the small interfaces below, bundled into a
:class:`BackendSet` that is chosen once per session. Swapping the input
simulator for the helper-process relay, or leaving out the compositor
bridge, changes nothing outside the backend factory.
"""

from __future__ import annotations

import enum
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class SymbolicKey(str, enum.Enum):
    """Backend-independent names for non-character keys."""

    BACKSPACE = "backspace"
    RETURN = "return"
    ESCAPE = "escape"
    TAB = "tab"
    SPACE = "space"
    DELETE = "delete"
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    HOME = "home"
    END = "end"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    SEMICOLON = "semicolon"
    COLON = "colon"
    APOSTROPHE = "apostrophe"
    BACKSLASH = "backslash"
    SLASH = "slash"
    LEFT_BRACE = "left_brace"
    RIGHT_BRACE = "right_brace"
    VOLUME_UP = "volume_up"
    VOLUME_DOWN = "volume_down"
    VOLUME_MUTE = "volume_mute"


class Axis(str, enum.Enum):
    """Scroll axis. Positive amounts move right / down."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


class Button(str, enum.Enum):
    LEFT = "left"
    MIDDLE = "middle"
    RIGHT = "right"


class Application(BaseModel):
    """An installed application as reported by a capability lister."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Display name")
    locator: str = Field(description="Where the lister found it (e.g. a .desktop path)")


class BackendError(Exception):
    """Raised when an effector backend fails to perform an operation."""

    def __init__(self, message: str, backend: str = "") -> None:
        super().__init__(message)
        self.backend = backend


# ---------------------------------------------------------------------------
# Capability interfaces
# ---------------------------------------------------------------------------


class InputSimulator(ABC):
    """Injects keyboard and pointer events on the host.

    One instance is opened per session and closed when the session ends.

    Example usage::

        async with PynputInputSimulator() as sim:
            await sim.move_relative(10, -4)
            await sim.click(Button.LEFT)
    """

    name: str = "input"

    @abstractmethod
    async def open(self) -> None:
        """Acquire the underlying input channel.

        Raises:
            BackendError: If the channel cannot be acquired.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release the input channel. Safe to call more than once."""
        ...

    @abstractmethod
    async def press_key(self, key: SymbolicKey) -> None:
        """Press and release one symbolic key."""
        ...

    @abstractmethod
    async def type_char(self, char: str) -> None:
        """Type a single Unicode code point."""
        ...

    @abstractmethod
    async def move_relative(self, dx: float, dy: float) -> None:
        """Move the pointer by a displacement from its current position."""
        ...

    @abstractmethod
    async def scroll(self, axis: Axis, amount: float) -> None:
        """Scroll along one axis."""
        ...

    @abstractmethod
    async def click(self, button: Button) -> None:
        """Press and release one pointer button."""
        ...

    async def drag(self, axis: Axis, amount: float) -> None:
        """Apply one axis of a drag gesture.

        Backends that do not distinguish a drag from the wheel inherit
        this and scroll instead.
        """
        await self.scroll(axis, amount)

    async def __aenter__(self) -> InputSimulator:
        await self.open()
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        await self.close()


class WindowManagerBridge(ABC):
    """Forwards opaque action strings to the compositor."""

    name: str = "compositor"

    @abstractmethod
    async def invoke(self, command: str) -> None:
        ...


class ApplicationLauncher(ABC):
    """Starts GUI applications by identifier."""

    name: str = "launcher"

    @abstractmethod
    async def launch(self, identifier: str) -> None:
        ...


class VolumeController(ABC):
    """Adjusts system audio. Clamping is the controller's business."""

    name: str = "volume"

    @abstractmethod
    async def increase(self) -> None:
        ...

    @abstractmethod
    async def decrease(self) -> None:
        ...

    @abstractmethod
    async def toggle_mute(self) -> None:
        ...


class CapabilityLister(ABC):
    """Enumerates installed applications."""

    name: str = "apps"

    @abstractmethod
    async def list_applications(self) -> list[Application]:
        """Return applications in enumeration order, duplicates included."""
        ...


@dataclass(frozen=True)
class BackendSet:
    """The concrete backends bound to one session.

    Only ``input`` is mandatory. A missing optional capability makes the
    actions that need it fail explicitly instead of doing nothing.
    """

    input: InputSimulator
    launcher: ApplicationLauncher | None = None
    volume: VolumeController | None = None
    apps: CapabilityLister | None = None
    compositor: WindowManagerBridge | None = None
