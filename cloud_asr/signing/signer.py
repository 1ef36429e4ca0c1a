"""Signer: the only place where wall-clock time and randomness enter a signature."""

from __future__ import annotations

import time
import uuid
import logging
import secrets
from typing import Any
from collections.abc import Mapping, Callable

from cloud_asr.state import SigningScheme, SigningSettings
from cloud_asr.errors import ConfigurationError
from cloud_asr.state.credentials import Credentials, redact
from cloud_asr.config.signing import ASR_HOST, TC3_NONCE_UPPER, ASR_PATH_PREFIX, QUERY_SIGN_NONCE_UPPER

from .tc3 import sign_tc3
from .sha1 import sign_query
from .params import build_params, normalize_overrides
from .request import SignedRequest

logger = logging.getLogger(__name__)


def default_voice_id(scheme: SigningScheme, now_s: float, nonce: int) -> str:
    if scheme == SigningScheme.TC3:
        return f"{int(now_s * 1000)}_{nonce}"
    return str(uuid.uuid4())


def _as_int(name: str, value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"recognition parameter {name!r} must be an integer, got {value!r}") from exc


class Signer:
    """Builds signed connection requests for one scheme.

    `clock` returns Unix seconds, `nonce_source(upper)` returns an int in
    `[0, upper)` and `voice_id_source(scheme, now_s, nonce)` returns the
    per-attempt voice id. All three are injectable so a signature can be
    reproduced exactly; with fixed `timestamp`, `nonce` and `voice_id` the
    result is a pure function of the inputs.
    """

    def __init__(
        self,
        scheme: SigningScheme = SigningScheme.QUERY_SHA1,
        *,
        host: str = ASR_HOST,
        path_prefix: str = ASR_PATH_PREFIX,
        clock: Callable[[], float] | None = None,
        nonce_source: Callable[[int], int] | None = None,
        voice_id_source: Callable[[SigningScheme, float, int], str] | None = None,
    ) -> None:
        self.scheme = SigningScheme(scheme)
        self.host = host
        self.path_prefix = path_prefix.strip("/")
        self._clock = clock or time.time
        self._nonce_source = nonce_source or secrets.randbelow
        self._voice_id_source = voice_id_source or default_voice_id

    @classmethod
    def from_settings(cls, settings: SigningSettings, **kwargs: Any) -> Signer:
        return cls(settings.scheme, host=settings.host, path_prefix=settings.path_prefix, **kwargs)

    @property
    def nonce_upper(self) -> int:
        return TC3_NONCE_UPPER if self.scheme == SigningScheme.TC3 else QUERY_SIGN_NONCE_UPPER

    def sign(
        self,
        credentials: Credentials,
        overrides: Mapping[str, Any] | None = None,
        *,
        timestamp: int | None = None,
        nonce: int | None = None,
    ) -> SignedRequest:
        """Sign one connection attempt.

        Explicit `timestamp`/`nonce` win over the same names in `overrides`,
        which win over the clock and nonce source.
        """
        credentials.validate()
        given = normalize_overrides(overrides)
        now_s = self._clock()

        if timestamp is not None:
            given["timestamp"] = str(int(timestamp))
        if nonce is not None:
            given["nonce"] = str(int(nonce))
        effective_ts = _as_int("timestamp", given.get("timestamp") or int(now_s))
        effective_nonce = _as_int("nonce", given.get("nonce") or self._nonce_source(self.nonce_upper))
        voice_id = given.get("voice_id") or self._voice_id_source(self.scheme, now_s, effective_nonce)

        params = build_params(
            credentials.secret_id,
            {**given, "timestamp": effective_ts, "nonce": effective_nonce, "voice_id": voice_id},
            scheme=self.scheme,
            timestamp=effective_ts,
            nonce=effective_nonce,
            voice_id=voice_id,
        )
        if self.scheme == SigningScheme.TC3:
            signed = sign_tc3(
                credentials,
                params,
                timestamp=effective_ts,
                host=self.host,
                path_prefix=self.path_prefix,
            )
        else:
            signed = sign_query(credentials, params, host=self.host, path_prefix=self.path_prefix)

        logger.debug(
            "signer: scheme=%s secret_id=%s voice_id=%s url=%s",
            self.scheme.value,
            redact(credentials.secret_id),
            signed.voice_id,
            signed.redacted_url(),
        )
        return signed


__all__ = ["Signer", "default_voice_id"]
