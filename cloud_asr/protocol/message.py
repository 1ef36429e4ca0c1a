"""Parsed service message."""

from __future__ import annotations

from dataclasses import dataclass

from .kinds import MessageKind


@dataclass(frozen=True, slots=True)
class ServerMessage:
    kind: MessageKind
    code: int = 0
    message: str = ""
    voice_id: str = ""
    text: str = ""
    final: bool = False

    @property
    def is_final_marker(self) -> bool:
        return self.kind == MessageKind.RESULT and self.final and not self.text


__all__ = ["ServerMessage"]
