"""Caller-supplied service credentials."""

from __future__ import annotations

from dataclasses import dataclass

from cloud_asr.errors import ConfigurationError
from cloud_asr.config.credentials import REDACTED_PREFIX_CHARS


def redact(value: str) -> str:
    value = value or ""
    if not value:
        return "<empty>"
    return f"{value[:REDACTED_PREFIX_CHARS]}***"


@dataclass(frozen=True, slots=True)
class Credentials:
    """SecretId/SecretKey/AppId triple. Held in memory for one client only."""

    secret_id: str
    secret_key: str
    app_id: str

    def __repr__(self) -> str:
        return (
            f"Credentials(secret_id={redact(self.secret_id)!r}, "
            f"secret_key={redact(self.secret_key)!r}, app_id={redact(self.app_id)!r})"
        )

    __str__ = __repr__

    def validate(self) -> None:
        # Each field is required on its own; one is never a stand-in for another.
        missing = [
            name
            for name, value in (
                ("secret_id", self.secret_id),
                ("secret_key", self.secret_key),
                ("app_id", self.app_id),
            )
            if not isinstance(value, str) or not value.strip()
        ]
        if missing:
            raise ConfigurationError(f"missing credential field(s): {', '.join(missing)}")


__all__ = ["Credentials", "redact"]
