from __future__ import annotations

import hmac
import base64
import hashlib
from urllib.parse import quote

import pytest

from cloud_asr.errors import ConfigurationError
from cloud_asr.state import SigningScheme
from cloud_asr.signing import Signer, build_params, canonical_query, encode_component
from cloud_asr.signing.tc3 import utc_date, credential_scope
from cloud_asr.state.credentials import Credentials

TS = 1700000000
NONCE = 42

EXPECTED_SIGN_STRING = (
    "asr.cloud.tencent.com/asr/v2/1000001?"
    "convert_num_mode=1&engine_model_type=16k_zh&expired=1700000300"
    "&filter_dirty=0&filter_modal=0&filter_punc=0&needvad=1&nonce=42"
    "&secretid=AKID123&timestamp=1700000000&voice_format=1&voice_id=vid-1"
)


def _fixed_signer(scheme: SigningScheme = SigningScheme.QUERY_SHA1) -> Signer:
    return Signer(
        scheme,
        host="asr.cloud.tencent.com",
        path_prefix="asr/v2",
        clock=lambda: float(TS),
        nonce_source=lambda upper: NONCE,
        voice_id_source=lambda scheme, now_s, nonce: "vid-1",
    )


def test_query_signature_matches_reference_digest(credentials: Credentials) -> None:
    signed = _fixed_signer().sign(credentials, timestamp=TS, nonce=NONCE)

    assert signed.sign_string == EXPECTED_SIGN_STRING
    digest = hmac.new(b"testkey", EXPECTED_SIGN_STRING.encode("utf-8"), hashlib.sha1).digest()
    assert signed.signature == quote(base64.b64encode(digest).decode("ascii"), safe="!~*'()")
    assert signed.url == f"wss://{EXPECTED_SIGN_STRING}&signature={signed.signature}"


def test_signing_is_deterministic_for_fixed_inputs(credentials: Credentials) -> None:
    signer = Signer(SigningScheme.QUERY_SHA1)
    overrides = {"voice_id": "abc"}
    first = signer.sign(credentials, overrides, timestamp=TS, nonce=NONCE)
    second = signer.sign(credentials, overrides, timestamp=TS, nonce=NONCE)
    assert first.signature == second.signature
    assert first.url == second.url


def test_params_are_sorted_and_complete(credentials: Credentials) -> None:
    signed = _fixed_signer().sign(credentials)
    keys = list(signed.params)
    assert keys == sorted(keys)
    assert signed.params["engine_model_type"] == "16k_zh"
    assert signed.params["voice_format"] == "1"
    assert signed.params["needvad"] == "1"
    assert signed.params["expired"] == str(TS + 300)
    assert signed.params["secretid"] == "AKID123"


def test_caller_values_override_defaults(credentials: Credentials) -> None:
    signed = _fixed_signer().sign(credentials, {"engine_model_type": "16k_en", "needvad": 0, "filter_punc": ""})
    assert signed.params["engine_model_type"] == "16k_en"
    assert signed.params["needvad"] == "0"
    # Empty values fall back to the default.
    assert signed.params["filter_punc"] == "0"


def test_timestamp_override_moves_expiry(credentials: Credentials) -> None:
    signed = _fixed_signer().sign(credentials, {"timestamp": TS + 10})
    assert signed.params["timestamp"] == str(TS + 10)
    assert signed.params["expired"] == str(TS + 310)


def test_explicit_keywords_win_over_overrides(credentials: Credentials) -> None:
    signed = _fixed_signer().sign(credentials, {"nonce": 7}, nonce=9)
    assert signed.params["nonce"] == "9"


@pytest.mark.parametrize(
    "overrides",
    [
        {"Engine_Model_Type": "16k_zh"},
        {"unknown_param": "1"},
        {"secretid": "other"},
        {"expired": "1"},
        {"timestamp": "soon"},
    ],
)
def test_invalid_parameters_are_rejected(credentials: Credentials, overrides: dict[str, str]) -> None:
    with pytest.raises(ConfigurationError):
        _fixed_signer().sign(credentials, overrides)


@pytest.mark.parametrize(
    "creds",
    [
        Credentials(secret_id="", secret_key="k", app_id="1"),
        Credentials(secret_id="id", secret_key="", app_id="1"),
        Credentials(secret_id="id", secret_key="k", app_id="  "),
    ],
)
def test_missing_credentials_fail_before_signing(creds: Credentials) -> None:
    with pytest.raises(ConfigurationError):
        _fixed_signer().sign(creds)


def test_encode_component_matches_uri_component_rules() -> None:
    assert encode_component("a+b/c=d") == "a%2Bb%2Fc%3Dd"
    assert encode_component("-_.!~*'()") == "-_.!~*'()"
    assert encode_component("你好") == "%E4%BD%A0%E5%A5%BD"


def test_canonical_query_orders_keys() -> None:
    params = build_params(
        "AKID",
        {"voice_format": "1"},
        scheme=SigningScheme.QUERY_SHA1,
        timestamp=TS,
        nonce=NONCE,
        voice_id="v",
    )
    query = canonical_query(params)
    names = [pair.split("=", 1)[0] for pair in query.split("&")]
    assert names == sorted(names)
    assert "secretid=AKID" in query


def test_default_voice_ids_differ_per_scheme(credentials: Credentials) -> None:
    query = Signer(SigningScheme.QUERY_SHA1, clock=lambda: float(TS), nonce_source=lambda upper: 5)
    tc3 = Signer(SigningScheme.TC3, clock=lambda: float(TS), nonce_source=lambda upper: 5)
    assert len(query.sign(credentials).voice_id) == 36
    assert tc3.sign(credentials).voice_id == f"{TS * 1000}_5"


def test_nonce_ranges_per_scheme() -> None:
    assert Signer(SigningScheme.QUERY_SHA1).nonce_upper == 1_000_000
    assert Signer(SigningScheme.TC3).nonce_upper == 10_000_000


def test_tc3_signature_uses_derived_key_chain(credentials: Credentials) -> None:
    signed = _fixed_signer(SigningScheme.TC3).sign(credentials, timestamp=TS, nonce=NONCE)

    date = utc_date(TS)
    assert date == "20231114"
    scope = credential_scope(date)
    assert scope == "20231114/asr/tc3_request"
    assert signed.params["expired"] == str(TS + 3600)

    query = canonical_query(signed.params)
    canonical = "\n".join(
        ["GET", "/asr/v2/1000001", query, "host:asr.cloud.tencent.com\n", "host", hashlib.sha256(b"").hexdigest()]
    )
    to_sign = "\n".join(
        ["TC3-HMAC-SHA256", str(TS), scope, hashlib.sha256(canonical.encode("utf-8")).hexdigest()]
    )
    k_date = hmac.new(b"TC3testkey", date.encode(), hashlib.sha256).digest()
    k_service = hmac.new(k_date, b"asr", hashlib.sha256).digest()
    k_signing = hmac.new(k_service, b"tc3_request", hashlib.sha256).digest()
    expected = hmac.new(k_signing, to_sign.encode("utf-8"), hashlib.sha256).hexdigest()

    assert signed.sign_string == to_sign
    assert signed.signature == expected
    assert signed.url.endswith(
        f"&algorithm=TC3-HMAC-SHA256&credential=AKID123/{scope}&signature={expected}"
    )


def test_redacted_url_hides_signature(credentials: Credentials) -> None:
    signed = _fixed_signer().sign(credentials)
    assert signed.signature not in signed.redacted_url()
    assert signed.signature not in repr(signed)
    assert signed.redacted_url().endswith("***")


def test_payload_shape(credentials: Credentials) -> None:
    payload = _fixed_signer().sign(credentials).as_payload()
    assert set(payload) == {"signature", "params", "signString"}
    assert payload["signString"] == EXPECTED_SIGN_STRING
