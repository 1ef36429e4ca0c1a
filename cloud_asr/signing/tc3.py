"""TC3-HMAC-SHA256 signing (derived-key chain over a canonical request)."""

from __future__ import annotations

import hmac
import hashlib
from datetime import datetime, timezone
from collections.abc import Mapping

from cloud_asr.state import SigningScheme
from cloud_asr.state.credentials import Credentials
from cloud_asr.config.signing import (
    ASR_HOST,
    TC3_METHOD,
    TC3_SERVICE,
    TC3_ALGORITHM,
    ASR_WS_SCHEME,
    TC3_KEY_PREFIX,
    TC3_TERMINATOR,
    ASR_PATH_PREFIX,
    TC3_SIGNED_HEADERS,
)

from .params import canonical_query
from .request import SignedRequest


def _sha256_hex(message: str) -> str:
    return hashlib.sha256(message.encode("utf-8")).hexdigest()


def _hmac_sha256(key: bytes, message: str) -> bytes:
    return hmac.new(key, message.encode("utf-8"), hashlib.sha256).digest()


def utc_date(timestamp: int) -> str:
    return datetime.fromtimestamp(int(timestamp), tz=timezone.utc).strftime("%Y%m%d")


def credential_scope(date: str) -> str:
    return f"{date}/{TC3_SERVICE}/{TC3_TERMINATOR}"


def canonical_request(uri: str, query: str, host: str) -> str:
    return "\n".join(
        [
            TC3_METHOD,
            uri,
            query,
            f"{TC3_SIGNED_HEADERS}:{host}\n",
            TC3_SIGNED_HEADERS,
            _sha256_hex(""),
        ]
    )


def string_to_sign(timestamp: int, scope: str, hashed_request: str) -> str:
    return "\n".join([TC3_ALGORITHM, str(int(timestamp)), scope, hashed_request])


def signing_key(secret_key: str, date: str) -> bytes:
    k_date = _hmac_sha256(f"{TC3_KEY_PREFIX}{secret_key}".encode("utf-8"), date)
    k_service = _hmac_sha256(k_date, TC3_SERVICE)
    return _hmac_sha256(k_service, TC3_TERMINATOR)


def sign_tc3(
    credentials: Credentials,
    params: Mapping[str, str],
    *,
    timestamp: int,
    host: str = ASR_HOST,
    path_prefix: str = ASR_PATH_PREFIX,
) -> SignedRequest:
    """Sign `params` with the TC3 chain; `timestamp` also fixes the UTC scope date."""
    uri = f"/{path_prefix}/{credentials.app_id}"
    query = canonical_query(params)
    date = utc_date(timestamp)
    scope = credential_scope(date)

    hashed = _sha256_hex(canonical_request(uri, query, host))
    to_sign = string_to_sign(timestamp, scope, hashed)
    key = signing_key(credentials.secret_key, date)
    signature = hmac.new(key, to_sign.encode("utf-8"), hashlib.sha256).hexdigest()

    url = (
        f"{ASR_WS_SCHEME}://{host}{uri}?{query}"
        f"&algorithm={TC3_ALGORITHM}"
        f"&credential={credentials.secret_id}/{scope}"
        f"&signature={signature}"
    )
    return SignedRequest(
        scheme=SigningScheme.TC3,
        signature=signature,
        params=params,
        sign_string=to_sign,
        url=url,
    )


__all__ = [
    "canonical_request",
    "credential_scope",
    "sign_tc3",
    "signing_key",
    "string_to_sign",
    "utc_date",
]
