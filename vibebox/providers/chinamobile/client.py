"""Async HTTP client for the China Mobile Cloud ECS API."""

from __future__ import annotations

import json
from typing import Any

from loguru import logger

from vibebox.core.exceptions import ErrorCode, VendorError
from vibebox.infra.http import HttpClient, HttpError

from .auth import HmacSigner
from .types import (
    BatchOperationResponse,
    CreateInstanceRequest,
    CreateInstanceResponse,
    DeleteInstancesRequest,
    FlavorResponse,
    InstanceDetails,
    InstanceListResponse,
    ZoneResponse,
)

CHINAMOBILE_API_BASE = "https://ecloud.10086.cn"
INSTANCE_API = "/api/openapi-instance/v4"

_ZONE_PATHS = (
    f"{INSTANCE_API}/describe-zones",
    f"{INSTANCE_API}/describe-availability-zones",
    "/api/v1/zones",
)


class ChinaMobileAPIError(VendorError):
    """Error from the China Mobile API, or from reaching it."""

    def __init__(self, message: str, code: str, request_id: str | None = None) -> None:
        super().__init__(message, code, "chinamobile", request_id)


def _error_from_http(e: HttpError) -> ChinaMobileAPIError:
    if e.status == 0:
        return ChinaMobileAPIError(e.body, ErrorCode.NETWORK_ERROR)
    try:
        envelope = json.loads(e.body)
    except ValueError:
        envelope = None
    if isinstance(envelope, dict):
        return ChinaMobileAPIError(
            envelope.get("errorMessage") or str(e),
            str(envelope.get("errorCode") or ErrorCode.HTTP_ERROR),
            envelope.get("requestId"),
        )
    return ChinaMobileAPIError(str(e), ErrorCode.HTTP_ERROR)


class ChinaMobileClient:
    """Async client for China Mobile Cloud ECS.

    Signs every request, unwraps the ``{requestId, state, body}`` envelope and
    turns every failure into ChinaMobileAPIError.
    """

    def __init__(
        self,
        access_key_id: str,
        access_key_secret: str,
        *,
        endpoint: str | None = None,
        timeout: float = 30,
    ) -> None:
        self._http = HttpClient(
            endpoint or CHINAMOBILE_API_BASE,
            HmacSigner(access_key_id, access_key_secret),
            timeout=timeout,
            default_headers={"Content-Type": "application/json"},
        )
        self._log = logger.bind(provider="chinamobile", component="client")

    async def __aenter__(self) -> ChinaMobileClient:
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._http.close()

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        try:
            envelope = await self._http.request(method, path, json=json, params=params)
        except HttpError as e:
            error = _error_from_http(e)
            self._log.warning(
                "API error {method} {path}: {code}",
                method=method, path=path, code=error.code,
            )
            raise error from e

        if not isinstance(envelope, dict):
            raise ChinaMobileAPIError(
                f"Unexpected response from {path}", ErrorCode.UNKNOWN_ERROR
            )

        if envelope.get("state") != "OK":
            self._log.warning(
                "API {method} {path} returned state={state} code={code}",
                method=method, path=path,
                state=envelope.get("state"), code=envelope.get("errorCode"),
            )
            raise ChinaMobileAPIError(
                envelope.get("errorMessage") or "API request failed",
                str(envelope.get("errorCode") or ErrorCode.UNKNOWN_ERROR),
                envelope.get("requestId"),
            )

        return envelope.get("body")

    # =========================================================================
    # Instances
    # =========================================================================

    async def create_instances(self, request: CreateInstanceRequest) -> CreateInstanceResponse:
        return await self._request(
            "POST", f"{INSTANCE_API}/create-instances", dict(request)
        )

    async def delete_instances(self, request: DeleteInstancesRequest) -> BatchOperationResponse:
        return await self._request(
            "POST", f"{INSTANCE_API}/delete-instances", dict(request)
        )

    async def describe_instance(self, instance_id: str) -> InstanceDetails:
        return await self._request(
            "GET", f"{INSTANCE_API}/describe-instance", params={"instanceId": instance_id}
        )

    async def start_instances(self, instance_ids: list[str]) -> BatchOperationResponse:
        return await self._request(
            "POST", f"{INSTANCE_API}/batch-start-instances", {"instanceIds": instance_ids}
        )

    async def stop_instances(self, instance_ids: list[str]) -> BatchOperationResponse:
        return await self._request(
            "POST", f"{INSTANCE_API}/batch-stop-instances", {"instanceIds": instance_ids}
        )

    async def reboot_instances(self, instance_ids: list[str]) -> BatchOperationResponse:
        return await self._request(
            "POST", f"{INSTANCE_API}/batch-reboot-instances", {"instanceIds": instance_ids}
        )

    async def list_instances(
        self, page_num: int = 1, page_size: int = 100
    ) -> InstanceListResponse:
        result = await self._request(
            "GET",
            f"{INSTANCE_API}/list-instances",
            params={"pageNum": page_num, "pageSize": page_size},
        )
        return result or {"totalCount": 0, "content": []}

    # =========================================================================
    # Catalog
    # =========================================================================

    async def list_flavors(self, zone_id: str) -> list[FlavorResponse]:
        result = await self._request(
            "GET", f"{INSTANCE_API}/describe-flavors", params={"zoneId": zone_id}
        )
        return (result or {}).get("flavors", [])

    async def describe_zones(self) -> list[ZoneResponse]:
        """Query zones, trying each known endpoint in order."""
        last_error: ChinaMobileAPIError | None = None
        for path in _ZONE_PATHS:
            try:
                return await self._request("GET", path) or []
            except ChinaMobileAPIError as e:
                self._log.debug("Zone endpoint {path} failed: {error}", path=path, error=e)
                last_error = e
        raise ChinaMobileAPIError(
            "Unable to query zones from any known endpoint",
            last_error.code if last_error else ErrorCode.UNKNOWN_ERROR,
            last_error.request_id if last_error else None,
        ) from last_error

    # =========================================================================
    # Health
    # =========================================================================

    async def health_check(self) -> bool:
        """Check the API with a describe of a non-existent instance.

        Any enveloped answer from the vendor - including "not found" - means
        the API is reachable and the credentials are being processed.
        """
        try:
            await self.describe_instance("health-check-test-id")
        except ChinaMobileAPIError as e:
            return e.code not in (ErrorCode.NETWORK_ERROR, ErrorCode.HTTP_ERROR)
        return True
