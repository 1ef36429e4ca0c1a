"""Request-signing constants (env-resolved constants only)."""

from __future__ import annotations

import os

ASR_HOST: str = (os.getenv("ASR_HOST") or "asr.cloud.tencent.com").strip()
ASR_PATH_PREFIX: str = (os.getenv("ASR_PATH_PREFIX") or "asr/v2").strip().strip("/")
ASR_WS_SCHEME: str = "wss"

# "query-sha1" or "tc3"; the target endpoint dictates which one it accepts.
ASR_SIGNING_SCHEME: str = (os.getenv("ASR_SIGNING_SCHEME") or "query-sha1").strip().lower()

# Every name the service accepts on the connection query string.
RECOGNITION_PARAM_NAMES: frozenset[str] = frozenset(
    {
        "engine_model_type",
        "voice_format",
        "needvad",
        "filter_dirty",
        "filter_modal",
        "filter_punc",
        "convert_num_mode",
        "timestamp",
        "nonce",
        "voice_id",
        "expired",
        "secretid",
    }
)

# Derived from credentials and timestamp; callers may not set them.
DERIVED_PARAM_NAMES: frozenset[str] = frozenset({"secretid", "expired"})

# Query-string HMAC-SHA1 scheme.
QUERY_SIGN_EXPIRY_S: int = 300
QUERY_SIGN_NONCE_UPPER: int = 1_000_000
QUERY_SIGN_DEFAULTS: dict[str, str] = {
    "engine_model_type": "16k_zh",
    "voice_format": "1",
    "needvad": "1",
    "filter_dirty": "0",
    "filter_modal": "0",
    "filter_punc": "0",
    "convert_num_mode": "1",
}

# TC3-HMAC-SHA256 scheme.
TC3_ALGORITHM: str = "TC3-HMAC-SHA256"
TC3_SERVICE: str = "asr"
TC3_TERMINATOR: str = "tc3_request"
TC3_KEY_PREFIX: str = "TC3"
TC3_METHOD: str = "GET"
TC3_SIGNED_HEADERS: str = "host"
TC3_EXPIRY_S: int = 3600
TC3_NONCE_UPPER: int = 10_000_000
TC3_DEFAULTS: dict[str, str] = dict(QUERY_SIGN_DEFAULTS)

# The signature is appended after the canonical parameters; these never take
# part in the sorted parameter set.
SIGNATURE_QUERY_KEYS: tuple[str, ...] = ("algorithm", "credential", "signature")

__all__ = [
    "ASR_HOST",
    "ASR_PATH_PREFIX",
    "ASR_SIGNING_SCHEME",
    "ASR_WS_SCHEME",
    "DERIVED_PARAM_NAMES",
    "QUERY_SIGN_DEFAULTS",
    "QUERY_SIGN_EXPIRY_S",
    "QUERY_SIGN_NONCE_UPPER",
    "RECOGNITION_PARAM_NAMES",
    "SIGNATURE_QUERY_KEYS",
    "TC3_ALGORITHM",
    "TC3_DEFAULTS",
    "TC3_EXPIRY_S",
    "TC3_KEY_PREFIX",
    "TC3_METHOD",
    "TC3_NONCE_UPPER",
    "TC3_SERVICE",
    "TC3_SIGNED_HEADERS",
    "TC3_TERMINATOR",
]
