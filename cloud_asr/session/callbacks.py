"""Caller-facing callbacks for one session."""

from __future__ import annotations

import logging
from typing import Any
from dataclasses import dataclass
from collections.abc import Callable

from cloud_asr.state import Outcome, ErrorKind

logger = logging.getLogger(__name__)

TextCallback = Callable[[str], Any]
ErrorCallback = Callable[[ErrorKind, str], Any]
ClosedCallback = Callable[[Outcome], Any]


def _call_safely(name: str, fn: Callable[..., Any] | None, *args: Any) -> None:
    if fn is None:
        return
    try:
        fn(*args)
    except Exception:
        # A broken callback must not take the session down with it.
        logger.exception("session callback %s raised", name)


@dataclass(frozen=True, slots=True)
class SessionCallbacks:
    on_interim: TextCallback | None = None
    on_final: TextCallback | None = None
    on_error: ErrorCallback | None = None
    on_closed: ClosedCallback | None = None

    def interim(self, text: str) -> None:
        _call_safely("on_interim", self.on_interim, text)

    def final(self, text: str) -> None:
        _call_safely("on_final", self.on_final, text)

    def error(self, kind: ErrorKind, message: str) -> None:
        _call_safely("on_error", self.on_error, kind, message)

    def closed(self, outcome: Outcome) -> None:
        _call_safely("on_closed", self.on_closed, outcome)


__all__ = ["ClosedCallback", "ErrorCallback", "SessionCallbacks", "TextCallback"]
