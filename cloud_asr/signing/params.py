"""Recognition parameter assembly and canonical query serialization.

The serialized order of the parameters is part of the signature contract:
keys are always emitted in strict lexicographic order, and values are encoded
exactly like JavaScript's `encodeURIComponent`.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any
from urllib.parse import quote
from collections.abc import Mapping

from cloud_asr.state import SigningScheme
from cloud_asr.errors import ConfigurationError
from cloud_asr.config.signing import (
    TC3_DEFAULTS,
    TC3_EXPIRY_S,
    QUERY_SIGN_DEFAULTS,
    QUERY_SIGN_EXPIRY_S,
    DERIVED_PARAM_NAMES,
    RECOGNITION_PARAM_NAMES,
)

# Characters encodeURIComponent leaves alone on top of quote()'s always-safe set.
_URI_COMPONENT_SAFE = "!~*'()"


def encode_component(value: str) -> str:
    return quote(value, safe=_URI_COMPONENT_SAFE)


def scheme_defaults(scheme: SigningScheme) -> Mapping[str, str]:
    return TC3_DEFAULTS if scheme == SigningScheme.TC3 else QUERY_SIGN_DEFAULTS


def scheme_expiry_s(scheme: SigningScheme) -> int:
    return TC3_EXPIRY_S if scheme == SigningScheme.TC3 else QUERY_SIGN_EXPIRY_S


def _render(value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def normalize_overrides(overrides: Mapping[str, Any] | None) -> dict[str, str]:
    """Validate caller-supplied parameters; empty values count as absent."""
    out: dict[str, str] = {}
    for name, value in (overrides or {}).items():
        if not isinstance(name, str) or name != name.lower() or name not in RECOGNITION_PARAM_NAMES:
            raise ConfigurationError(f"unknown recognition parameter {name!r}")
        if name in DERIVED_PARAM_NAMES:
            raise ConfigurationError(f"recognition parameter {name!r} is derived and cannot be set")
        if value is None:
            continue
        rendered = _render(value)
        if rendered:
            out[name] = rendered
    return out


def build_params(
    secret_id: str,
    overrides: Mapping[str, Any] | None,
    *,
    scheme: SigningScheme,
    timestamp: int,
    nonce: int,
    voice_id: str,
) -> Mapping[str, str]:
    """Merge defaults, caller values and per-request values into a sorted, read-only mapping.

    Caller-supplied `timestamp`, `nonce` and `voice_id` win over the keyword
    values; `expired` is always derived from the effective timestamp.
    """
    merged: dict[str, str] = dict(scheme_defaults(scheme))
    merged.update(
        {
            "timestamp": str(int(timestamp)),
            "nonce": str(int(nonce)),
            "voice_id": voice_id,
        }
    )
    merged.update(normalize_overrides(overrides))

    try:
        effective_ts = int(merged["timestamp"])
        effective_nonce = int(merged["nonce"])
    except ValueError as exc:
        raise ConfigurationError(f"timestamp and nonce must be integers: {exc}") from exc
    if effective_ts < 0 or effective_nonce < 0:
        raise ConfigurationError("timestamp and nonce must be non-negative")

    merged["timestamp"] = str(effective_ts)
    merged["nonce"] = str(effective_nonce)
    merged["expired"] = str(effective_ts + scheme_expiry_s(scheme))
    merged["secretid"] = secret_id
    return MappingProxyType({key: merged[key] for key in sorted(merged)})


def canonical_query(params: Mapping[str, str]) -> str:
    return "&".join(f"{key}={encode_component(params[key])}" for key in sorted(params))


__all__ = [
    "build_params",
    "canonical_query",
    "encode_component",
    "normalize_overrides",
    "scheme_defaults",
    "scheme_expiry_s",
]
