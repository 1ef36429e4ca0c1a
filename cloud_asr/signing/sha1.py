"""Query-string HMAC-SHA1 signing."""

from __future__ import annotations

import hmac
import base64
import hashlib
from collections.abc import Mapping

from cloud_asr.state import SigningScheme
from cloud_asr.config.signing import ASR_HOST, ASR_WS_SCHEME, ASR_PATH_PREFIX
from cloud_asr.state.credentials import Credentials

from .params import canonical_query, encode_component
from .request import SignedRequest


def sign_string_for(app_id: str, query: str, *, host: str = ASR_HOST, path_prefix: str = ASR_PATH_PREFIX) -> str:
    return f"{host}/{path_prefix}/{app_id}?{query}"


def hmac_sha1_base64(key: str, message: str) -> str:
    digest = hmac.new(key.encode("utf-8"), message.encode("utf-8"), hashlib.sha1).digest()
    return base64.b64encode(digest).decode("ascii")


def sign_query(
    credentials: Credentials,
    params: Mapping[str, str],
    *,
    host: str = ASR_HOST,
    path_prefix: str = ASR_PATH_PREFIX,
) -> SignedRequest:
    """Sign `params` (already built, including `secretid`) for the query-string scheme."""
    query = canonical_query(params)
    sign_string = sign_string_for(credentials.app_id, query, host=host, path_prefix=path_prefix)
    signature = encode_component(hmac_sha1_base64(credentials.secret_key, sign_string))
    url = f"{ASR_WS_SCHEME}://{sign_string}&signature={signature}"
    return SignedRequest(
        scheme=SigningScheme.QUERY_SHA1,
        signature=signature,
        params=params,
        sign_string=sign_string,
        url=url,
    )


__all__ = ["hmac_sha1_base64", "sign_query", "sign_string_for"]
