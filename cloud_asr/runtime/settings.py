"""Load client settings.

Configuration values are resolved from the environment in `cloud_asr/config/*`
and exposed here as structured dataclasses. Each signing scheme comes with its
own session profile (no-result timeout, handshake style).
"""

from __future__ import annotations

from cloud_asr.errors import ConfigurationError
from cloud_asr.config.retry import MAX_ATTEMPTS, BACKOFF_MULTIPLIER, INITIAL_BACKOFF_MS
from cloud_asr.config.signing import ASR_HOST, ASR_PATH_PREFIX, ASR_SIGNING_SCHEME
from cloud_asr.config.audio import (
    ASR_CHANNELS,
    CAPTURE_QUEUE_MAX,
    ASR_SAMPLE_RATE_HZ,
    CAPTURE_BLOCK_SAMPLES,
)
from cloud_asr.config.session import (
    STOP_GRACE_S,
    FINAL_GRACE_S,
    WS_OPEN_TIMEOUT_S,
    ASR_HANDSHAKE_MODE,
    SEND_STOP_ON_FINAL,
    HANDSHAKE_TIMEOUT_S,
    FINAL_MARKER_GRACE_S,
    WS_MAX_MESSAGE_BYTES,
    TC3_NO_RESULT_TIMEOUT_S,
    QUERY_SIGN_NO_RESULT_TIMEOUT_S,
)
from cloud_asr.state import (
    AudioSettings,
    HandshakeMode,
    RetrySettings,
    SigningScheme,
    ClientSettings,
    SessionSettings,
    SigningSettings,
)


def parse_scheme(value: str | SigningScheme) -> SigningScheme:
    try:
        return SigningScheme(str(value).strip().lower())
    except ValueError as exc:
        choices = ", ".join(s.value for s in SigningScheme)
        raise ConfigurationError(f"unknown signing scheme {value!r} (expected one of: {choices})") from exc


def parse_handshake(value: str | HandshakeMode) -> HandshakeMode:
    try:
        return HandshakeMode(str(value).strip().lower())
    except ValueError as exc:
        choices = ", ".join(m.value for m in HandshakeMode)
        raise ConfigurationError(f"unknown handshake mode {value!r} (expected one of: {choices})") from exc


def session_profile(scheme: SigningScheme, *, handshake: HandshakeMode | None = None) -> SessionSettings:
    no_result_timeout_s = TC3_NO_RESULT_TIMEOUT_S if scheme == SigningScheme.TC3 else QUERY_SIGN_NO_RESULT_TIMEOUT_S
    return SessionSettings(
        handshake=handshake or parse_handshake(ASR_HANDSHAKE_MODE),
        handshake_timeout_s=HANDSHAKE_TIMEOUT_S,
        no_result_timeout_s=no_result_timeout_s,
        final_grace_s=FINAL_GRACE_S,
        final_marker_grace_s=FINAL_MARKER_GRACE_S,
        stop_grace_s=STOP_GRACE_S,
        send_stop_on_final=SEND_STOP_ON_FINAL,
        open_timeout_s=WS_OPEN_TIMEOUT_S,
        max_message_bytes=WS_MAX_MESSAGE_BYTES,
    )


def load_settings(scheme: str | SigningScheme | None = None) -> ClientSettings:
    resolved = parse_scheme(scheme or ASR_SIGNING_SCHEME)
    return ClientSettings(
        signing=SigningSettings(scheme=resolved, host=ASR_HOST, path_prefix=ASR_PATH_PREFIX),
        session=session_profile(resolved),
        retry=RetrySettings(
            max_attempts=MAX_ATTEMPTS,
            initial_backoff_ms=INITIAL_BACKOFF_MS,
            backoff_multiplier=BACKOFF_MULTIPLIER,
        ),
        audio=AudioSettings(
            sample_rate_hz=ASR_SAMPLE_RATE_HZ,
            channels=ASR_CHANNELS,
            block_samples=CAPTURE_BLOCK_SAMPLES,
            queue_max=CAPTURE_QUEUE_MAX,
        ),
    )


__all__ = ["load_settings", "parse_handshake", "parse_scheme", "session_profile"]
