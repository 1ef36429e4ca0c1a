"""Service error code classification."""

from __future__ import annotations

from cloud_asr.errors import ServiceError
from cloud_asr.config.service import FATAL_SERVICE_CODES


def is_fatal_code(code: int) -> bool:
    return int(code) in FATAL_SERVICE_CODES


def classify_service_error(code: int, message: str = "") -> ServiceError:
    detail = (message or "").strip() or "no message"
    return ServiceError(
        message=f"service error {int(code)}: {detail}",
        code=int(code),
        fatal=is_fatal_code(code),
    )


__all__ = ["classify_service_error", "is_fatal_code"]
