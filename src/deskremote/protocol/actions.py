"""Action taxonomy for the remote-control protocol.

Every message a client sends decodes into exactly one of the models
below. The set is closed: the wire tag of each variant is its class-level
``tag`` and :data:`ACTION_TYPES` is the only registry the codec consults.

Models are frozen, forbid unknown fields, and validate strictly (no
string-to-number or bool-to-number coercion), so a decoded Action is
exactly what the client meant and nothing else.
"""

from __future__ import annotations

from typing import ClassVar, Union

from pydantic import BaseModel, ConfigDict, Field

# int or float displacement; ints stay ints so encoding is lossless
Delta = Union[int, float]


class _ActionBase(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        strict=True,
        allow_inf_nan=False,
    )

    tag: ClassVar[str]

    @classmethod
    def is_unit(cls) -> bool:
        """Whether this variant carries no fields on the wire."""
        return not cls.model_fields


# ---------------------------------------------------------------------------
# Key input
# ---------------------------------------------------------------------------


class KeyPress(_ActionBase):
    """Press a named key such as ``Backspace``, ``Return`` or ``Escape``."""

    tag: ClassVar[str] = "Key"

    value: str = Field(min_length=1, description="Symbolic key name")


class UnicodeChar(_ActionBase):
    """Type one literal Unicode code point."""

    tag: ClassVar[str] = "Unicode"

    value: str = Field(min_length=1, max_length=1, description="A single code point")


# ---------------------------------------------------------------------------
# Pointer input
# ---------------------------------------------------------------------------


class MouseMove(_ActionBase):
    """Move the pointer relative to its current position."""

    tag: ClassVar[str] = "MouseMove"

    x: Delta
    y: Delta


class Scroll(_ActionBase):
    """Scroll by horizontal and vertical wheel deltas."""

    tag: ClassVar[str] = "Scroll"

    x: Delta
    y: Delta


class Drag(_ActionBase):
    """Two-finger drag gesture, applied as two single-axis operations."""

    tag: ClassVar[str] = "Drag"

    x: Delta
    y: Delta


class LeftClick(_ActionBase):
    tag: ClassVar[str] = "LeftClick"


class MiddleClick(_ActionBase):
    tag: ClassVar[str] = "MiddleClick"


class RightClick(_ActionBase):
    tag: ClassVar[str] = "RightClick"


# ---------------------------------------------------------------------------
# Compositor and system actions
# ---------------------------------------------------------------------------


class CompositorAction(_ActionBase):
    """An opaque command forwarded verbatim to the window manager."""

    tag: ClassVar[str] = "Compositor"

    value: str


class OpenTarget(_ActionBase):
    """Launch one of the configured open targets."""

    tag: ClassVar[str] = "Open"

    value: str


class IncreaseVolume(_ActionBase):
    tag: ClassVar[str] = "IncreaseVolume"


class DecreaseVolume(_ActionBase):
    tag: ClassVar[str] = "DecreaseVolume"


class ToggleMuteVolume(_ActionBase):
    tag: ClassVar[str] = "ToggleMuteVolume"


# ---------------------------------------------------------------------------
# Introspection
# ---------------------------------------------------------------------------


class GetCapabilities(_ActionBase):
    """Ask the host which applications are installed."""

    tag: ClassVar[str] = "GetCapabilities"


Action = Union[
    KeyPress,
    UnicodeChar,
    MouseMove,
    Scroll,
    Drag,
    LeftClick,
    MiddleClick,
    RightClick,
    CompositorAction,
    OpenTarget,
    IncreaseVolume,
    DecreaseVolume,
    ToggleMuteVolume,
    GetCapabilities,
]

ACTION_TYPES: dict[str, type[_ActionBase]] = {
    cls.tag: cls
    for cls in (
        KeyPress,
        UnicodeChar,
        MouseMove,
        Scroll,
        Drag,
        LeftClick,
        MiddleClick,
        RightClick,
        CompositorAction,
        OpenTarget,
        IncreaseVolume,
        DecreaseVolume,
        ToggleMuteVolume,
        GetCapabilities,
    )
}
