from __future__ import annotations

import sys
from pathlib import Path

import pytest

from cloud_asr.state.credentials import Credentials
from cloud_asr.state import HandshakeMode, RetrySettings, SessionSettings


def pytest_configure() -> None:
    # Keep `import cloud_asr` and `import linting` working when running `pytest` from the repo root.
    repo_root = Path(__file__).resolve().parents[1]
    repo_root_str = str(repo_root)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(secret_id="AKID123", secret_key="testkey", app_id="1000001")


@pytest.fixture
def fast_profile() -> SessionSettings:
    return SessionSettings(
        handshake=HandshakeMode.IMPLICIT,
        handshake_timeout_s=1.0,
        no_result_timeout_s=1.0,
        final_grace_s=0.05,
        final_marker_grace_s=0.05,
        stop_grace_s=0.05,
    )


@pytest.fixture
def fast_retry() -> RetrySettings:
    return RetrySettings(max_attempts=3, initial_backoff_ms=10, backoff_multiplier=2)
