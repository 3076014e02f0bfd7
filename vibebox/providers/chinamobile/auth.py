"""HMAC-SHA1 request signing for the China Mobile Cloud API.

The signature is computed over the RAW parameter values (not URL-encoded):
parameters sorted by key, rendered ``key=value`` and joined with ``&``.
URL encoding only happens when aiohttp builds the final query string.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import uuid
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from .types import AuthParams

SIGNATURE_METHOD = "HmacSHA1"
SIGNATURE_VERSION = "V2.0"
API_VERSION = "2016-12-05"


def _render(value: Any) -> str:
    match value:
        case None:
            return ""
        case Mapping() | list() | tuple():
            return json.dumps(value, separators=(",", ":"))
        case _:
            return str(value)


def canonical_string(params: Mapping[str, Any]) -> str:
    return "&".join(
        f"{key}={_render(params[key])}" for key in sorted(params) if key != "Signature"
    )


def calculate_signature(params: Mapping[str, Any], secret_key: str) -> str:
    digest = hmac.new(
        secret_key.encode(), canonical_string(params).encode(), hashlib.sha1
    )
    return digest.hexdigest()


def verify_signature(
    params: Mapping[str, Any], secret_key: str, provided_signature: str
) -> bool:
    return hmac.compare_digest(calculate_signature(params, secret_key), provided_signature)


def _timestamp(now: datetime | None = None) -> str:
    return (now or datetime.now(UTC)).strftime("%Y-%m-%dT%H:%M:%SZ")


def generate_auth_params(
    access_key_id: str,
    access_key_secret: str,
    additional_params: Mapping[str, Any] | None = None,
    *,
    nonce: str | None = None,
    now: datetime | None = None,
) -> AuthParams:
    """Build signed auth parameters.

    ``additional_params`` take part in the signature but are not returned.
    """
    params: AuthParams = {
        "AccessKey": access_key_id,
        "SignatureMethod": SIGNATURE_METHOD,
        "SignatureVersion": SIGNATURE_VERSION,
        "SignatureNonce": nonce or str(uuid.uuid4()),
        "Timestamp": _timestamp(now),
        "Version": API_VERSION,
        "Signature": "",
    }
    params["Signature"] = calculate_signature(
        {**params, **(additional_params or {})}, access_key_secret
    )
    return params


class HmacSigner:
    """Signer for HttpClient.

    GET requests carry the auth fields in the query string and sign the query
    parameters with them. Other methods carry them in headers.
    """

    def __init__(self, access_key_id: str, access_key_secret: str) -> None:
        self._access_key_id = access_key_id
        self._access_key_secret = access_key_secret

    async def sign(
        self, method: str, path: str, headers: dict[str, str], params: dict[str, Any]
    ) -> None:
        if method.upper() == "GET":
            params.update(
                generate_auth_params(self._access_key_id, self._access_key_secret, params)
            )
        else:
            headers.update(generate_auth_params(self._access_key_id, self._access_key_secret))
