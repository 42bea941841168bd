"""Wire protocol for deskremote.

Public API:
    Action -- Closed union of client intents
    decode / encode -- JSON codec
    DecodeError / UnsupportedFrame -- Codec errors
"""

from deskremote.protocol.actions import ACTION_TYPES, Action
from deskremote.protocol.codec import (
    DecodeError,
    UnsupportedFrame,
    decode,
    decode_frame,
    encode,
    encode_action,
)
from deskremote.protocol.responses import ACK_TEXT, Acknowledgement, Capabilities

__all__ = [
    "ACK_TEXT",
    "ACTION_TYPES",
    "Acknowledgement",
    "Action",
    "Capabilities",
    "DecodeError",
    "UnsupportedFrame",
    "decode",
    "decode_frame",
    "encode",
    "encode_action",
]
