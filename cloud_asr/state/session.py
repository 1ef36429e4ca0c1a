"""Mutable bookkeeping for one logical recognition session."""

from __future__ import annotations

import uuid
from dataclasses import field, dataclass
from typing import TYPE_CHECKING

from .phase import SessionState
from .outcome import Outcome

if TYPE_CHECKING:
    from cloud_asr.errors import ASRError


def new_session_id() -> str:
    return f"asr_{uuid.uuid4().hex[:12]}"


@dataclass(slots=True)
class Session:
    """One logical recognition request, spanning every transport attempt.

    `session_id` changes per attempt; the owning handle keeps the caller-facing
    identity. Only the state machine mutates a session (on a copy).
    """

    session_id: str = field(default_factory=new_session_id)
    state: SessionState = SessionState.IDLE
    attempt_count: int = 0
    backoff_ms: int = 1000
    initial_backoff_ms: int = 1000
    max_attempts: int = 3
    started_at: float = 0.0
    last_activity_at: float = 0.0
    accumulated_final_text: str = ""
    accumulated_interim_text: str = ""
    manual_stop: bool = False
    final_delivered: bool = False
    protocol_errors: int = 0
    last_error: ASRError | None = None
    outcome: Outcome | None = None

    def best_text(self) -> str:
        return self.accumulated_final_text.strip() or self.accumulated_interim_text.strip()


__all__ = ["Session", "new_session_id"]
