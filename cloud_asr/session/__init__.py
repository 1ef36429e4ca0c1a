"""Streaming recognition sessions: state machine, transport and manager."""

from .machine import RULES, step
from .handle import SessionHandle
from .timers import TimerSet
from .manager import SessionManager
from .transport import ConnectFn, Transport, get_ws_options
from .callbacks import SessionCallbacks

__all__ = [
    "RULES",
    "ConnectFn",
    "SessionCallbacks",
    "SessionHandle",
    "SessionManager",
    "TimerSet",
    "Transport",
    "get_ws_options",
    "step",
]
