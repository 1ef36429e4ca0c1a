"""Signature endpoint: signs connection requests so the secret key stays server-side."""

from __future__ import annotations

import logging
from typing import Any
from collections.abc import Callable

from fastapi import FastAPI, Request
from fastapi.responses import ORJSONResponse

from cloud_asr.signing import Signer
from cloud_asr.state import SigningScheme
from cloud_asr.errors import ConfigurationError
from cloud_asr.runtime.logging import configure_logging
from cloud_asr.state.credentials import Credentials, redact
from cloud_asr.config.signing import DERIVED_PARAM_NAMES, RECOGNITION_PARAM_NAMES
from cloud_asr.config.credentials import ENV_SERVER_SECRET_KEY, get_server_secret_key

logger = logging.getLogger(__name__)

SIGNATURE_PATH = "/api/tencent-signature"
_REQUIRED_FIELDS = ("secretId", "appId", "params")
_SIGNABLE_PARAMS = RECOGNITION_PARAM_NAMES - DERIVED_PARAM_NAMES


def _error(status_code: int, message: str) -> ORJSONResponse:
    return ORJSONResponse({"error": message}, status_code=status_code)


def create_app(
    *,
    signer: Signer | None = None,
    secret_key_source: Callable[[], str] = get_server_secret_key,
) -> FastAPI:
    """Build the endpoint app. The secret key is read per request, never taken from the body."""
    app = FastAPI(default_response_class=ORJSONResponse)
    app.state.signer = signer or Signer(SigningScheme.QUERY_SHA1)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post(SIGNATURE_PATH)
    async def tencent_signature(request: Request) -> ORJSONResponse:
        try:
            body: Any = await request.json()
        except ValueError:
            return _error(400, "request body must be JSON")
        if not isinstance(body, dict) or any(body.get(name) in (None, "") for name in _REQUIRED_FIELDS):
            return _error(400, "Missing required parameters: secretId, appId, params")
        if not isinstance(body["params"], dict):
            return _error(400, "params must be an object")

        secret_key = secret_key_source()
        if not secret_key:
            logger.error("signature: %s is not set", ENV_SERVER_SECRET_KEY)
            return _error(500, "Server configuration error: SecretKey not configured")

        credentials = Credentials(secret_id=str(body["secretId"]), secret_key=secret_key, app_id=str(body["appId"]))
        # Only recognised parameters are signed; anything else is dropped.
        params = {key: value for key, value in body["params"].items() if key in _SIGNABLE_PARAMS}
        ignored = sorted(str(key) for key in body["params"] if key not in _SIGNABLE_PARAMS)
        if ignored:
            logger.debug("signature: ignoring unknown params %s", ", ".join(ignored))
        try:
            signed = app.state.signer.sign(credentials, params)
        except ConfigurationError as exc:
            return _error(400, str(exc))
        logger.info("signature: signed request for secret_id=%s app_id=%s", redact(credentials.secret_id), credentials.app_id)
        return ORJSONResponse(signed.as_payload())

    @app.api_route(SIGNATURE_PATH, methods=["GET", "PUT", "PATCH", "DELETE"], include_in_schema=False)
    async def tencent_signature_other_methods() -> ORJSONResponse:
        return _error(405, "Method not allowed")

    return app


def build_app() -> FastAPI:
    """Factory for `uvicorn --factory cloud_asr.server:build_app`."""
    configure_logging()
    return create_app()


__all__ = ["SIGNATURE_PATH", "build_app", "create_app"]
