"""Per-connection session lifecycle.

A session moves through three states::

    CONNECTED --(input handle acquired)--> ACTIVE --(close / fatal)--> CLOSED
        \\________________(acquisition failed)_______________________/

While ACTIVE it reads one frame, decodes it, dispatches it and writes
the replies before reading the next one. Bad messages and failed actions
are answered with an error string and the session carries on; only
transport failures end it.
"""

from __future__ import annotations

import enum
import logging

from fastapi import WebSocket, WebSocketDisconnect

from deskremote.backends.base import BackendError, BackendSet
from deskremote.dispatch import Dispatcher, Failure
from deskremote.protocol.codec import DecodeError, UnsupportedFrame, decode_frame, encode
from deskremote.protocol.responses import Acknowledgement, Capabilities

logger = logging.getLogger(__name__)

# WebSocket close code for "internal error"
CLOSE_INTERNAL_ERROR = 1011


class HandleAcquisitionError(Exception):
    """Raised when a session cannot acquire its input handle."""


class SessionState(str, enum.Enum):
    CONNECTED = "connected"
    ACTIVE = "active"
    CLOSED = "closed"


class Session:
    """Owns one client connection and the backends bound to it.

    The WebSocket must already be accepted. :meth:`run` returns when the
    session is CLOSED; it never raises for client or backend errors.
    """

    def __init__(self, websocket: WebSocket, backends: BackendSet, dispatcher: Dispatcher) -> None:
        self._websocket = websocket
        self._backends = backends
        self._dispatcher = dispatcher
        self._state = SessionState.CONNECTED
        self._handle_open = False
        self.messages_handled = 0
        client = websocket.client
        self.peer = f"{client.host}:{client.port}" if client else "unknown"

    @property
    def state(self) -> SessionState:
        return self._state

    async def run(self) -> None:
        """Serve the connection until it closes."""
        try:
            await self._activate()
        except HandleAcquisitionError as e:
            logger.error("Session %s not started: %s", self.peer, e)
            await self._close_transport(CLOSE_INTERNAL_ERROR, "input backend unavailable")
            return

        try:
            while True:
                message = await self._websocket.receive()
                if message["type"] == "websocket.disconnect":
                    logger.info("Client %s disconnected (code=%s)", self.peer, message.get("code"))
                    break
                frame = message.get("text")
                if frame is None:
                    frame = message.get("bytes") or b""
                for reply in await self.handle_frame(frame):
                    await self._websocket.send_text(reply)
        except (WebSocketDisconnect, OSError) as e:
            logger.info("Connection to %s lost: %s", self.peer, e)
        except Exception:
            logger.exception("Session %s failed", self.peer)
            await self._close_transport(CLOSE_INTERNAL_ERROR, "internal error")
        finally:
            await self._release()

    async def handle_frame(self, frame: str | bytes) -> list[str]:
        """Process one inbound frame and return the replies to send, in order."""
        self.messages_handled += 1
        try:
            action = decode_frame(frame)
        except UnsupportedFrame as e:
            logger.warning("Rejected frame from %s: %s", self.peer, e)
            return [encode(Acknowledgement.failure("unsupported_frame", str(e)))]
        except DecodeError as e:
            logger.warning("Could not decode message from %s: %s", self.peer, e.cause)
            return [encode(Acknowledgement.failure("decode_error", str(e.cause)))]

        logger.debug("Message from %s: %r", self.peer, action)
        outcome = await self._dispatcher.dispatch(action, self._backends)

        if isinstance(outcome, Failure):
            return [encode(outcome.to_acknowledgement())]
        replies = []
        if isinstance(outcome, Capabilities):
            replies.append(encode(outcome))
        replies.append(encode(Acknowledgement()))
        return replies

    async def _activate(self) -> None:
        try:
            await self._backends.input.open()
        except BackendError as e:
            self._state = SessionState.CLOSED
            raise HandleAcquisitionError(
                f"Cannot acquire input handle ({self._backends.input.name}): {e}"
            ) from e
        self._handle_open = True
        self._state = SessionState.ACTIVE
        logger.info("Session %s active (input=%s)", self.peer, self._backends.input.name)

    async def _release(self) -> None:
        if self._handle_open:
            self._handle_open = False
            try:
                await self._backends.input.close()
            except BackendError as e:
                logger.warning("Error releasing input handle for %s: %s", self.peer, e)
        self._state = SessionState.CLOSED
        logger.info("Session %s closed after %d messages", self.peer, self.messages_handled)

    async def _close_transport(self, code: int, reason: str) -> None:
        try:
            await self._websocket.close(code=code, reason=reason)
        except (RuntimeError, OSError) as e:
            logger.debug("Close on %s ignored: %s", self.peer, e)
