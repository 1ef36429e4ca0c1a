"""How a freshly opened connection is authenticated."""

from __future__ import annotations

from enum import StrEnum


class HandshakeMode(StrEnum):
    # The signed URL already authenticates; the service replies on its own.
    IMPLICIT = "implicit"
    # A JSON {"event": "Start"} message must be sent after the socket opens.
    EVENTS = "events"


__all__ = ["HandshakeMode"]
