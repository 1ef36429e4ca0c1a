"""Terminal result handed back to the caller."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .outcome import Outcome

if TYPE_CHECKING:
    from cloud_asr.errors import ASRError


@dataclass(frozen=True, slots=True)
class RecognitionResult:
    outcome: Outcome
    text: str = ""
    error: ASRError | None = None

    @property
    def ok(self) -> bool:
        return self.outcome == Outcome.FINAL


__all__ = ["RecognitionResult"]
