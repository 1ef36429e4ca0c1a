"""Request signing schemes accepted by the recognition service."""

from __future__ import annotations

from enum import StrEnum


class SigningScheme(StrEnum):
    # HMAC-SHA1 over "{host}/{path}/{appId}?{query}", base64 + percent-encoded.
    QUERY_SHA1 = "query-sha1"
    # Derived-key HMAC-SHA256 chain over a canonical request, hex encoded.
    TC3 = "tc3"


__all__ = ["SigningScheme"]
