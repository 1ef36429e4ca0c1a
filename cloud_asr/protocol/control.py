"""Control messages sent to the service (JSON text frames)."""

from __future__ import annotations

from collections.abc import Mapping

import orjson

from cloud_asr.state import HandshakeMode
from cloud_asr.config.signing import SIGNATURE_QUERY_KEYS
from cloud_asr.config.service import (
    CTRL_KEY_TYPE,
    CTRL_KEY_EVENT,
    CTRL_TYPE_END,
    CTRL_EVENT_STOP,
    CTRL_EVENT_START,
    RESP_KEY_VOICE_ID,
)

# Never echoed back in a Start event.
_PRIVATE_PARAM_KEYS = frozenset({"secretid", *SIGNATURE_QUERY_KEYS})


def _dumps(payload: dict[str, object]) -> str:
    return orjson.dumps(payload).decode("utf-8")


def encode_end() -> str:
    return _dumps({CTRL_KEY_TYPE: CTRL_TYPE_END})


def encode_start(voice_id: str, params: Mapping[str, str] | None = None) -> str:
    payload: dict[str, object] = {CTRL_KEY_EVENT: CTRL_EVENT_START, RESP_KEY_VOICE_ID: voice_id}
    for key in sorted(params or {}):
        if key in _PRIVATE_PARAM_KEYS or key == RESP_KEY_VOICE_ID:
            continue
        payload[key] = params[key]
    return _dumps(payload)


def encode_stop(voice_id: str) -> str:
    return _dumps({CTRL_KEY_EVENT: CTRL_EVENT_STOP, RESP_KEY_VOICE_ID: voice_id})


def stop_message(mode: HandshakeMode, voice_id: str) -> str:
    if mode == HandshakeMode.EVENTS:
        return encode_stop(voice_id)
    return encode_end()


__all__ = ["encode_end", "encode_start", "encode_stop", "stop_message"]
