"""Output of a signing operation."""

from __future__ import annotations

from dataclasses import field, dataclass
from collections.abc import Mapping

from cloud_asr.state import SigningScheme
from cloud_asr.state.credentials import redact


@dataclass(frozen=True, slots=True)
class SignedRequest:
    scheme: SigningScheme
    signature: str = field(repr=False)
    params: Mapping[str, str]
    sign_string: str
    url: str = field(repr=False)

    @property
    def voice_id(self) -> str:
        return self.params.get("voice_id", "")

    @property
    def timestamp(self) -> int:
        return int(self.params.get("timestamp", "0"))

    def redacted_url(self) -> str:
        if not self.signature:
            return self.url
        return self.url.replace(self.signature, redact(self.signature))

    def as_payload(self) -> dict[str, object]:
        return {
            "signature": self.signature,
            "params": dict(self.params),
            "signString": self.sign_string,
        }


__all__ = ["SignedRequest"]
