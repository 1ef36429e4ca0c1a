"""Service message parsing/validation.

Shapes recognized (all JSON objects):
- handshake ack: {"code": 0, "voice_id": ...} without "result"
- result:        {"code": 0, "result": {"voice_text_str": ...}, "final": 0|1}
- final marker:  {"code": 0, "final": 1} without "result"
- error:         {"code": <nonzero>, "message": ...}
"""

from __future__ import annotations

from typing import Any

import orjson

from cloud_asr.errors import ProtocolError
from cloud_asr.config.service import (
    RESP_KEY_CODE,
    RESP_CODE_OK,
    RESP_KEY_TEXT,
    RESP_KEY_FINAL,
    RESP_KEY_RESULT,
    RESP_KEY_MESSAGE,
    RESP_KEY_VOICE_ID,
)

from .kinds import MessageKind
from .message import ServerMessage


def _optional_str(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ProtocolError(f"message field {key!r} must be a string")
    return value


def _is_final(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value == 1
    raise ProtocolError(f"message field {RESP_KEY_FINAL!r} must be 0 or 1")


def parse_server_message(raw: str | bytes) -> ServerMessage:
    try:
        data = orjson.loads(raw)
    except orjson.JSONDecodeError as exc:
        raise ProtocolError(f"invalid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise ProtocolError("message must be a JSON object")

    code = data.get(RESP_KEY_CODE)
    if isinstance(code, bool) or not isinstance(code, int):
        raise ProtocolError(f"message missing integer {RESP_KEY_CODE!r}")

    message = _optional_str(data, RESP_KEY_MESSAGE)
    voice_id = _optional_str(data, RESP_KEY_VOICE_ID)
    if code != RESP_CODE_OK:
        return ServerMessage(kind=MessageKind.ERROR, code=code, message=message, voice_id=voice_id)

    final = _is_final(data.get(RESP_KEY_FINAL))
    result = data.get(RESP_KEY_RESULT)
    if result is None:
        kind = MessageKind.RESULT if final else MessageKind.HANDSHAKE
        return ServerMessage(kind=kind, code=code, message=message, voice_id=voice_id, final=final)

    if not isinstance(result, dict):
        raise ProtocolError(f"message {RESP_KEY_RESULT!r} must be an object")
    text = _optional_str(result, RESP_KEY_TEXT).strip()
    return ServerMessage(
        kind=MessageKind.RESULT,
        code=code,
        message=message,
        voice_id=voice_id,
        text=text,
        final=final,
    )


__all__ = ["parse_server_message"]
