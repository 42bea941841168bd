"""JSON codec for actions and outcomes.

Wire format is externally tagged JSON::

    "LeftClick"                              unit variant
    {"LeftClick": null}                      unit variant, object form
    {"MouseMove": {"x": 12, "y": -3.5}}     data variant

Decoding is strict. Anything that is not exactly one known variant with
exactly its fields raises :class:`DecodeError`; there is no best-effort
fallback.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from deskremote.protocol.actions import ACTION_TYPES, Action
from deskremote.protocol.responses import Acknowledgement, Capabilities

logger = logging.getLogger(__name__)


class DecodeError(Exception):
    """Raised when a payload is not a valid Action."""

    def __init__(self, payload: str, cause: Exception | str) -> None:
        super().__init__(f"Could not decode {payload!r}: {cause}")
        self.payload = payload
        self.cause = cause


class UnsupportedFrame(Exception):
    """Raised for frames that do not carry text (e.g. binary frames)."""

    def __init__(self, frame_type: str = "binary") -> None:
        super().__init__(f"Unsupported {frame_type} frame, expected text")
        self.frame_type = frame_type


def decode(payload: str) -> Action:
    """Parse one text payload into an Action.

    Args:
        payload: A single JSON message as received from the client.

    Returns:
        The decoded, immutable Action.

    Raises:
        DecodeError: If the payload is not valid JSON, names an unknown
            variant, or has missing, unknown or mistyped fields.
    """
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise DecodeError(payload, e) from e

    if isinstance(data, str):
        tag, body = data, None
    elif isinstance(data, dict) and len(data) == 1:
        ((tag, body),) = data.items()
    else:
        raise DecodeError(payload, "expected a variant name or a single-key object")

    action_type = ACTION_TYPES.get(tag)
    if action_type is None:
        raise DecodeError(payload, f"unknown variant {tag!r}")

    try:
        action = action_type.model_validate({} if body is None else body)
    except ValidationError as e:
        raise DecodeError(payload, e) from e
    return action  # type: ignore[return-value]


def decode_frame(frame: str | bytes) -> Action:
    """Decode a transport frame, rejecting anything that is not text."""
    if isinstance(frame, (bytes, bytearray)):
        raise UnsupportedFrame("binary")
    return decode(frame)


def encode(value: Capabilities | Acknowledgement) -> str:
    """Serialize a response or acknowledgement to its wire form."""
    if isinstance(value, Acknowledgement):
        return value.text
    if isinstance(value, Capabilities):
        return _dumps({value.tag: value.model_dump()})
    raise TypeError(f"Cannot encode {type(value).__name__}")


def encode_action(action: Action) -> str:
    """Serialize an Action to its canonical wire form."""
    if action.is_unit():
        return _dumps(action.tag)
    return _dumps({action.tag: action.model_dump()})


def _dumps(obj: Any) -> str:
    return json.dumps(obj, ensure_ascii=False, allow_nan=False)
