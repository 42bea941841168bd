"""Outcome values the server writes back to the client.

Structured responses are externally tagged JSON objects; acknowledgements
are flat strings. A client must accept both forms on the same connection.
"""

from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

ACK_TEXT = "I understood your message!"


class Capabilities(BaseModel):
    """Installed application names, in enumeration order."""

    model_config = ConfigDict(frozen=True)

    tag: ClassVar[str] = "Capabilities"

    apps: list[str] = Field(default_factory=list)


# Only one structured variant exists today.
Response = Capabilities


class Acknowledgement(BaseModel):
    """Generic success or failure confirmation for one message."""

    model_config = ConfigDict(frozen=True)

    ok: bool = True
    text: str = ACK_TEXT

    @classmethod
    def failure(cls, kind: str, detail: str) -> Acknowledgement:
        return cls(ok=False, text=f"Error: {kind}: {detail}")
