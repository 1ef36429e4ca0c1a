"""Credential sources (environment only, never persisted)."""

from __future__ import annotations

import os

ENV_SECRET_ID = "TENCENT_SECRET_ID"
ENV_SECRET_KEY = "TENCENT_SECRET_KEY"
ENV_APP_ID = "TENCENT_APP_ID"

# Server-side signing endpoint keeps the key out of clients entirely.
ENV_SERVER_SECRET_KEY = "TENCENT_CLOUD_SECRET_KEY"

REDACTED_PREFIX_CHARS = 4


def get_secret_id() -> str:
    return (os.getenv(ENV_SECRET_ID) or "").strip()


def get_secret_key() -> str:
    return (os.getenv(ENV_SECRET_KEY) or "").strip()


def get_app_id() -> str:
    return (os.getenv(ENV_APP_ID) or "").strip()


def get_server_secret_key() -> str:
    return (os.getenv(ENV_SERVER_SECRET_KEY) or "").strip()


__all__ = [
    "ENV_APP_ID",
    "ENV_SECRET_ID",
    "ENV_SECRET_KEY",
    "ENV_SERVER_SECRET_KEY",
    "REDACTED_PREFIX_CHARS",
    "get_app_id",
    "get_secret_id",
    "get_secret_key",
    "get_server_secret_key",
]
