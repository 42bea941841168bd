"""Maps decoded actions onto effector backends.

:meth:`Dispatcher.dispatch` performs exactly one effect per action and
returns exactly one outcome:

- :class:`Ack` for effect-only actions,
- :class:`~deskremote.protocol.responses.Capabilities` for
  ``GetCapabilities``,
- :class:`Failure` for anything that could not be carried out.

Failures are values, not exceptions. The session turns them into error
strings for the client and moves on to the next message.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from typing import Mapping, Union

from pydantic import BaseModel, ConfigDict

from deskremote.backends.base import Axis, BackendError, BackendSet, Button, SymbolicKey
from deskremote.protocol.actions import (
    Action,
    CompositorAction,
    DecreaseVolume,
    Drag,
    GetCapabilities,
    IncreaseVolume,
    KeyPress,
    LeftClick,
    MiddleClick,
    MouseMove,
    OpenTarget,
    RightClick,
    Scroll,
    ToggleMuteVolume,
    UnicodeChar,
)
from deskremote.protocol.responses import Acknowledgement, Capabilities

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0

# Client key names -> symbolic keys. A name missing here is typed literally
# when it is a single character and unsupported otherwise.
NAMED_KEYS: dict[str, SymbolicKey] = {
    "Backspace": SymbolicKey.BACKSPACE,
    "backspace": SymbolicKey.BACKSPACE,
    "Return": SymbolicKey.RETURN,
    "Enter": SymbolicKey.RETURN,
    "enter": SymbolicKey.RETURN,
    "Escape": SymbolicKey.ESCAPE,
    "esc": SymbolicKey.ESCAPE,
    "Tab": SymbolicKey.TAB,
    "space": SymbolicKey.SPACE,
    "Delete": SymbolicKey.DELETE,
    "ArrowUp": SymbolicKey.UP,
    "ArrowDown": SymbolicKey.DOWN,
    "ArrowLeft": SymbolicKey.LEFT,
    "ArrowRight": SymbolicKey.RIGHT,
    "Home": SymbolicKey.HOME,
    "End": SymbolicKey.END,
    "PageUp": SymbolicKey.PAGE_UP,
    "PageDown": SymbolicKey.PAGE_DOWN,
    "semicolon": SymbolicKey.SEMICOLON,
    "colon": SymbolicKey.COLON,
    "apostrophe": SymbolicKey.APOSTROPHE,
    "backslash": SymbolicKey.BACKSLASH,
    "slash": SymbolicKey.SLASH,
    "leftbrace": SymbolicKey.LEFT_BRACE,
    "rightbrace": SymbolicKey.RIGHT_BRACE,
}

CLICK_BUTTONS: dict[type, Button] = {
    LeftClick: Button.LEFT,
    MiddleClick: Button.MIDDLE,
    RightClick: Button.RIGHT,
}


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------


class FailureKind(str, enum.Enum):
    UNSUPPORTED_KEY = "unsupported_key"
    UNRECOGNIZED_TARGET = "unrecognized_target"
    BACKEND_ERROR = "backend_error"
    TIMEOUT = "timeout"
    UNSUPPORTED_ACTION = "unsupported_action"


class Ack(BaseModel):
    """The action was carried out and produced no data."""

    model_config = ConfigDict(frozen=True)


class Failure(BaseModel):
    """The action could not be carried out."""

    model_config = ConfigDict(frozen=True)

    kind: FailureKind
    detail: str

    def to_acknowledgement(self) -> Acknowledgement:
        return Acknowledgement.failure(self.kind.value, self.detail)


Outcome = Union[Ack, Capabilities, Failure]


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------


class Dispatcher:
    """Stateless action-to-backend mapping.

    Args:
        open_targets: Closed table of ``Open`` target identifiers and the
            launcher identifier each one starts.
        timeout: Seconds to wait for the backend work of one action, or
            None to wait indefinitely. An expired wait is reported as
            ``Failure(timeout)``; a blocking call already running in an
            executor thread is not interrupted.
    """

    def __init__(
        self,
        open_targets: Mapping[str, str] | None = None,
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> None:
        self._open_targets = dict(open_targets or {})
        self._timeout = timeout

    @property
    def open_targets(self) -> dict[str, str]:
        return dict(self._open_targets)

    async def dispatch(self, action: Action, backends: BackendSet) -> Outcome:
        """Perform one action and report its outcome. Never raises for backend failures."""
        try:
            if self._timeout is None:
                return await self._dispatch(action, backends)
            return await asyncio.wait_for(self._dispatch(action, backends), timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.warning("%s timed out after %.1fs", action.tag, self._timeout)
            return Failure(
                kind=FailureKind.TIMEOUT,
                detail=f"{action.tag} did not complete within {self._timeout}s",
            )
        except BackendError as e:
            logger.warning("%s failed in backend %s: %s", action.tag, e.backend or "?", e)
            return Failure(kind=FailureKind.BACKEND_ERROR, detail=str(e))
        except OSError as e:
            logger.warning("%s failed: %s", action.tag, e)
            return Failure(kind=FailureKind.BACKEND_ERROR, detail=str(e))
        except Exception as e:
            logger.exception("%s raised an unexpected error", action.tag)
            return Failure(kind=FailureKind.BACKEND_ERROR, detail=f"{type(e).__name__}: {e}")

    async def _dispatch(self, action: Action, backends: BackendSet) -> Outcome:
        sim = backends.input

        if isinstance(action, KeyPress):
            key = NAMED_KEYS.get(action.value)
            if key is None and len(action.value) == 1:
                await sim.type_char(action.value)
            elif key is None:
                return Failure(
                    kind=FailureKind.UNSUPPORTED_KEY,
                    detail=f"Unrecognized key code: {action.value}",
                )
            else:
                await sim.press_key(key)

        elif isinstance(action, UnicodeChar):
            await sim.type_char(action.value)

        elif isinstance(action, MouseMove):
            await sim.move_relative(action.x, action.y)

        elif isinstance(action, Scroll):
            await sim.scroll(Axis.HORIZONTAL, action.x)
            await sim.scroll(Axis.VERTICAL, action.y)

        elif isinstance(action, Drag):
            await sim.drag(Axis.HORIZONTAL, action.x)
            await sim.drag(Axis.VERTICAL, action.y)

        elif isinstance(action, (LeftClick, MiddleClick, RightClick)):
            await sim.click(CLICK_BUTTONS[type(action)])

        elif isinstance(action, CompositorAction):
            if backends.compositor is None:
                return _unsupported(action, "no compositor bridge configured")
            await backends.compositor.invoke(action.value)

        elif isinstance(action, OpenTarget):
            identifier = self._open_targets.get(action.value)
            if identifier is None:
                return Failure(
                    kind=FailureKind.UNRECOGNIZED_TARGET,
                    detail=f"Unrecognized target: {action.value}",
                )
            if backends.launcher is None:
                return _unsupported(action, "no application launcher configured")
            await backends.launcher.launch(identifier)

        elif isinstance(action, (IncreaseVolume, DecreaseVolume, ToggleMuteVolume)):
            volume = backends.volume
            if volume is None:
                return _unsupported(action, "no volume controller configured")
            if isinstance(action, IncreaseVolume):
                await volume.increase()
            elif isinstance(action, DecreaseVolume):
                await volume.decrease()
            else:
                await volume.toggle_mute()

        elif isinstance(action, GetCapabilities):
            if backends.apps is None:
                return _unsupported(action, "no application lister configured")
            apps = await backends.apps.list_applications()
            return Capabilities(apps=[app.name for app in apps])

        else:
            return _unsupported(action, "not implemented")

        return Ack()


def _unsupported(action: Action, reason: str) -> Failure:
    return Failure(kind=FailureKind.UNSUPPORTED_ACTION, detail=f"{action.tag}: {reason}")
