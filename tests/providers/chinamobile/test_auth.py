from __future__ import annotations

import hashlib
import hmac
from datetime import UTC, datetime

import pytest

from vibebox.providers.chinamobile.auth import (
    HmacSigner,
    calculate_signature,
    canonical_string,
    generate_auth_params,
    verify_signature,
)

pytestmark = [pytest.mark.unit, pytest.mark.xdist_group("unit")]

AUTH_FIELDS = {
    "AccessKey",
    "Signature",
    "SignatureMethod",
    "SignatureNonce",
    "SignatureVersion",
    "Timestamp",
    "Version",
}


class TestCanonicalString:
    def test_sorted_and_joined(self):
        assert canonical_string({"b": "2", "a": "1", "c": 3}) == "a=1&b=2&c=3"

    def test_signature_excluded(self):
        assert canonical_string({"a": "1", "Signature": "xyz"}) == "a=1"

    def test_values_are_not_url_encoded(self):
        assert canonical_string({"Timestamp": "2024-01-01T00:00:00Z"}) == (
            "Timestamp=2024-01-01T00:00:00Z"
        )

    def test_structured_values_rendered_as_compact_json(self):
        assert canonical_string({"ids": ["a", "b"], "none": None}) == 'ids=["a","b"]&none='


class TestSignature:
    def test_matches_hmac_sha1_hex(self):
        params = {"AccessKey": "ak", "Version": "2016-12-05"}
        expected = hmac.new(
            b"secret", b"AccessKey=ak&Version=2016-12-05", hashlib.sha1
        ).hexdigest()
        assert calculate_signature(params, "secret") == expected

    def test_verify_roundtrip_and_tamper(self):
        params = {"AccessKey": "ak", "instanceId": "i-1"}
        signature = calculate_signature(params, "secret")
        assert verify_signature(params, "secret", signature)
        assert not verify_signature({**params, "instanceId": "i-2"}, "secret", signature)
        assert not verify_signature(params, "other-secret", signature)


class TestGenerateAuthParams:
    def test_fields(self):
        params = generate_auth_params(
            "ak", "sk", nonce="n-1", now=datetime(2024, 5, 1, 8, 30, 0, tzinfo=UTC)
        )
        assert set(params) == AUTH_FIELDS
        assert params["AccessKey"] == "ak"
        assert params["SignatureMethod"] == "HmacSHA1"
        assert params["SignatureVersion"] == "V2.0"
        assert params["Version"] == "2016-12-05"
        assert params["SignatureNonce"] == "n-1"
        assert params["Timestamp"] == "2024-05-01T08:30:00Z"

    def test_signature_verifies(self):
        params = generate_auth_params("ak", "sk")
        assert verify_signature(dict(params), "sk", params["Signature"])

    def test_additional_params_signed_but_not_returned(self):
        params = generate_auth_params("ak", "sk", {"instanceId": "i-1"})
        assert "instanceId" not in params
        assert verify_signature({**params, "instanceId": "i-1"}, "sk", params["Signature"])
        assert not verify_signature(dict(params), "sk", params["Signature"])

    def test_nonce_unique_per_call(self):
        assert generate_auth_params("ak", "sk")["SignatureNonce"] != (
            generate_auth_params("ak", "sk")["SignatureNonce"]
        )


class TestHmacSigner:
    @pytest.mark.asyncio
    async def test_get_signs_query(self):
        headers: dict[str, str] = {}
        params = {"instanceId": "i-1"}
        await HmacSigner("ak", "sk").sign("GET", "/describe-instance", headers, params)

        assert headers == {}
        assert AUTH_FIELDS <= set(params)
        assert params["instanceId"] == "i-1"
        assert verify_signature(params, "sk", params["Signature"])

    @pytest.mark.asyncio
    async def test_post_signs_headers(self):
        headers: dict[str, str] = {"Content-Type": "application/json"}
        params: dict[str, str] = {}
        await HmacSigner("ak", "sk").sign("POST", "/create-instances", headers, params)

        assert params == {}
        assert AUTH_FIELDS <= set(headers)
        assert headers["Content-Type"] == "application/json"
        assert verify_signature(
            {k: v for k, v in headers.items() if k in AUTH_FIELDS}, "sk", headers["Signature"]
        )
