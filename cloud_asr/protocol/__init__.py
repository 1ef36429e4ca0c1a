"""Wire protocol for the recognition service."""

from .codes import is_fatal_code, classify_service_error
from .kinds import MessageKind
from .parser import parse_server_message
from .control import encode_end, encode_stop, encode_start, stop_message
from .message import ServerMessage

__all__ = [
    "MessageKind",
    "ServerMessage",
    "classify_service_error",
    "encode_end",
    "encode_start",
    "encode_stop",
    "is_fatal_code",
    "parse_server_message",
    "stop_message",
]
