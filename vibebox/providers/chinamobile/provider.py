"""China Mobile Cloud ECS provider.

Implements the ResourceProvider contract on top of ChinaMobileClient. The
provider is a stateless facade: it keeps config, a client and an embedded
ProviderEngine, never resource state.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any

from loguru import logger

from vibebox.api.model import (
    Flavor,
    ProviderHealthStatus,
    ProviderType,
    ResourceInfo,
    ResourceMetadata,
    ResourceSpec,
    ResourceStatus,
    RetryOptions,
    WaitForStatusOptions,
)
from vibebox.api.provider import ProviderConfig
from vibebox.core.exceptions import (
    ErrorCode,
    InsufficientQuotaError,
    InvalidParameterError,
    ResourceNotFoundError,
)
from vibebox.providers.engine import ProviderEngine, validate_credentials

from .client import ChinaMobileAPIError, ChinaMobileClient
from .config import ChinaMobileOptions
from .mappings import (
    charge_mode,
    default_flavor_name,
    default_flavor_undersized,
    extract_private_ip,
    extract_public_ip,
    map_image_name,
    map_status,
    select_flavor,
    to_flavor,
    volume_type,
)
from .passwords import (
    VENDOR_PUBLIC_KEY_PEM,
    encrypt_password,
    generate_password,
    load_public_key,
)
from .types import (
    BatchOperationResponse,
    CreateInstanceRequest,
    InstanceDetails,
    InstanceSummary,
    ZoneResponse,
)

_NOT_FOUND_CODES = frozenset({"INSTANCE_NOT_FOUND", "InvalidInstanceId"})
_QUOTA_MARKERS = ("quota", "insufficient")

# Numeric states reported by the instance listing.
_LIST_STATUS: dict[int, ResourceStatus] = {
    1: ResourceStatus.RUNNING,
    16: ResourceStatus.STOPPED,
    12: ResourceStatus.DELETED,
}

SSH_PORT = 22
SSH_USER = "root"


def _parse_time(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def _summary_status(status: int | str) -> ResourceStatus:
    if isinstance(status, int):
        return _LIST_STATUS.get(status, ResourceStatus.UNKNOWN)
    return map_status(status)


class ChinaMobileProvider:
    """China Mobile Cloud ECS adapter.

    Example:
        >>> provider = ChinaMobileProvider()
        >>> await provider.initialize(config)
        >>> info = await provider.create_resource(ResourceSpec(cpu=2, memory=4, disk=20))
        >>> info = await provider.wait_for_status(
        ...     info.id, WaitForStatusOptions(target_status=ResourceStatus.RUNNING)
        ... )
    """

    type = ProviderType.CHINAMOBILE
    name = "China Mobile Cloud ECS"

    def __init__(self, *, engine: ProviderEngine | None = None) -> None:
        self._engine = engine or ProviderEngine(self.type, self.name)
        self._options = ChinaMobileOptions()
        self._client: ChinaMobileClient | None = None
        self._public_key = None
        self._log = logger.bind(provider=self.type, component="provider")

    async def __aenter__(self) -> ChinaMobileProvider:
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()

    @property
    def engine(self) -> ProviderEngine:
        return self._engine

    @property
    def client(self) -> ChinaMobileClient:
        self._engine.ensure_initialized()
        assert self._client is not None
        return self._client

    # =========================================================================
    # Initialization
    # =========================================================================

    async def initialize(self, config: ProviderConfig) -> None:
        validate_credentials(self.type, config)
        if config.type != self.type:
            raise InvalidParameterError(
                self.type, "type", f"Expected type '{self.type}', got '{config.type}'"
            )

        options = ChinaMobileOptions.from_config(config)
        try:
            public_key = load_public_key(options.password_public_key or VENDOR_PUBLIC_KEY_PEM)
        except ValueError as e:
            raise InvalidParameterError(self.type, "options.password_public_key", str(e)) from e

        assert config.credentials is not None
        self._options = options
        self._public_key = public_key
        self._client = ChinaMobileClient(
            config.credentials.access_key_id,
            config.credentials.access_key_secret,
            endpoint=config.endpoint,
            timeout=options.request_timeout,
        )
        self._engine.mark_initialized()
        self._log.info(
            "China Mobile Cloud provider initialized: zone={zone_id}",
            zone_id=options.zone_id,
        )

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def create_resource(self, spec: ResourceSpec) -> ResourceInfo:
        self._engine.ensure_initialized()
        self._validate_spec(spec)
        self._log.info(
            "Creating instance: cpu={cpu} memory={memory}GB disk={disk}GB",
            cpu=spec.cpu, memory=spec.memory, disk=spec.disk,
        )

        network_id = (spec.network_config.vpc_id if spec.network_config else None) or (
            self._options.network_id
        )
        if not network_id:
            raise InvalidParameterError(
                self.type,
                "network_id",
                "Network ID is required. Set options.network_id or spec.network_config.vpc_id",
            )

        zone_id = spec.region or self._options.zone_id
        flavor_name = await self._resolve_flavor(spec, zone_id)
        image_id = map_image_name(spec.image)

        assert self._public_key is not None
        password = generate_password()
        request: CreateInstanceRequest = {
            "zoneId": zone_id,
            "chargeMode": charge_mode(spec),
            "flavorName": flavor_name,
            "bootVolume": {"size": spec.disk, "volumeType": volume_type(spec)},
            "imageId": image_id,
            "privateNetwork": {"networkId": network_id, "portType": 0},
            "instanceName": spec.tags.get("name") or f"instance-{int(time.time() * 1000)}",
            "password": encrypt_password(password, self._public_key),
            "quantity": 1,
        }

        with self._vendor_errors("create instance"):
            response = await self.client.create_instances(request)

        instance_ids = (response or {}).get("instanceIds") or []
        if not instance_ids:
            raise ChinaMobileAPIError(
                "No instance ID returned from create API", ErrorCode.EMPTY_RESPONSE
            )

        instance_id = instance_ids[0]
        order_id = response.get("orderId")
        self._log.info(
            "Instance creation initiated: {instance_id} order={order_id}",
            instance_id=instance_id, order_id=order_id,
        )

        return ResourceInfo(
            id=instance_id,
            status=ResourceStatus.CREATING,
            ssh_port=SSH_PORT,
            ssh_user=SSH_USER,
            ssh_password=password,
            metadata=ResourceMetadata(
                vendor=self.type,
                instance_type=flavor_name,
                region=zone_id,
                image_id=image_id,
                extra={"order_id": order_id, "flavor_name": flavor_name, "zone_id": zone_id},
            ),
            created_at=datetime.now(UTC),
        )

    async def get_resource_info(self, resource_id: str) -> ResourceInfo:
        self._engine.ensure_initialized()
        with self._vendor_errors("describe instance", resource_id):
            instance = await self.client.describe_instance(resource_id)
        if not instance:
            raise ResourceNotFoundError(self.type, resource_id)
        return self._to_resource_info(instance)

    async def start_resource(self, resource_id: str) -> None:
        await self._batch("start", resource_id, self.client.start_instances)

    async def stop_resource(self, resource_id: str) -> None:
        await self._batch("stop", resource_id, self.client.stop_instances)

    async def restart_resource(self, resource_id: str) -> None:
        await self._batch("restart", resource_id, self.client.reboot_instances)

    async def delete_resource(self, resource_id: str) -> None:
        async def delete(instance_ids: list[str]) -> BatchOperationResponse:
            return await self.client.delete_instances(
                {
                    "instanceIds": instance_ids,
                    "deletePublicNetwork": True,
                    "deleteDataVolumes": True,
                }
            )

        await self._batch("delete", resource_id, delete)

    async def wait_for_status(
        self,
        resource_id: str,
        options: WaitForStatusOptions,
        *,
        cancel: asyncio.Event | None = None,
    ) -> ResourceInfo:
        return await self._engine.wait_for_status(
            self.get_resource_info, resource_id, options, cancel=cancel
        )

    async def health_check(self) -> ProviderHealthStatus:
        return await self._engine.health_check(self._reachable)

    async def _reachable(self) -> bool:
        return await self.client.health_check()

    # =========================================================================
    # Discovery
    # =========================================================================

    async def list_resources(self, page: int = 1, page_size: int = 100) -> list[ResourceInfo]:
        """One page of the account's instances, as lightweight snapshots."""
        self._engine.ensure_initialized()
        with self._vendor_errors("list instances"):
            response = await self.client.list_instances(page, page_size)
        return [self._summary_to_resource_info(s) for s in response.get("content", [])]

    async def list_zones(self) -> list[ZoneResponse]:
        self._engine.ensure_initialized()
        with self._vendor_errors("describe zones"):
            return await self.client.describe_zones()

    async def list_flavors(self, zone_id: str | None = None) -> list[Flavor]:
        self._engine.ensure_initialized()
        with self._vendor_errors("list flavors"):
            raw = await self.client.list_flavors(zone_id or self._options.zone_id)
        return [to_flavor(f) for f in raw]

    # =========================================================================
    # Helpers
    # =========================================================================

    def _validate_spec(self, spec: ResourceSpec) -> None:
        for field_name in ("cpu", "memory", "disk"):
            if getattr(spec, field_name) <= 0:
                raise InvalidParameterError(self.type, field_name, "must be greater than 0")

    async def _resolve_flavor(self, spec: ResourceSpec, zone_id: str) -> str:
        if self._options.flavor_catalog:
            catalog = await self._load_catalog(zone_id)
            if catalog:
                flavor = select_flavor(spec.cpu, spec.memory, catalog)
                if flavor is None:
                    raise InvalidParameterError(
                        self.type,
                        "cpu/memory",
                        f"No suitable flavor for {spec.cpu} CPU / {spec.memory:g}GB in {zone_id}",
                    )
                return flavor.name

        name = default_flavor_name(spec.cpu, spec.memory)
        if default_flavor_undersized(spec.cpu, spec.memory):
            self._log.warning(
                "Static flavor {name} is smaller than requested {cpu}C{memory}G",
                name=name, cpu=spec.cpu, memory=spec.memory,
            )
        else:
            self._log.debug(
                "Using static flavor {name} for {cpu}C{memory}G",
                name=name, cpu=spec.cpu, memory=spec.memory,
            )
        return name

    async def _load_catalog(self, zone_id: str) -> list[Flavor]:
        try:
            raw = await self._engine.retry_with_backoff(
                lambda: self.client.list_flavors(zone_id),
                RetryOptions(max_retries=self._options.catalog_retries),
            )
        except ChinaMobileAPIError as e:
            self._log.warning(
                "Flavor catalog unavailable for {zone_id}, using static table: {error}",
                zone_id=zone_id, error=e,
            )
            return []
        return [to_flavor(f) for f in raw]

    async def _batch(
        self,
        action: str,
        resource_id: str,
        call: Callable[[list[str]], Awaitable[BatchOperationResponse]],
    ) -> None:
        self._engine.ensure_initialized()
        self._log.info(
            "{action} instance {resource_id}", action=action.capitalize(), resource_id=resource_id
        )

        with self._vendor_errors(f"{action} instance", resource_id):
            response = await call([resource_id])

        results = (response or {}).get("instanceBatchResult") or []
        if not results or not results[0].get("result"):
            message = results[0].get("message", "") if results else "empty batch result"
            raise ChinaMobileAPIError(
                f"Failed to {action} instance {resource_id}: {message}",
                ErrorCode.OPERATION_REJECTED,
            )

        self._log.info(
            "Instance {action} accepted: {resource_id}", action=action, resource_id=resource_id
        )

    @contextmanager
    def _vendor_errors(self, action: str, resource_id: str | None = None) -> Iterator[None]:
        """Translate vendor error codes into the unified error taxonomy."""
        try:
            yield
        except ChinaMobileAPIError as e:
            self._log.error("Failed to {action}: {error}", action=action, error=e)
            if resource_id is not None and e.code in _NOT_FOUND_CODES:
                raise ResourceNotFoundError(self.type, resource_id) from e
            if any(marker in str(e.code).lower() for marker in _QUOTA_MARKERS):
                raise InsufficientQuotaError(self.type, e.message) from e
            raise

    def _to_resource_info(self, instance: InstanceDetails) -> ResourceInfo:
        ports = instance.get("ports") or []
        return ResourceInfo(
            id=instance["id"],
            status=map_status(instance.get("status")),
            ip_address=extract_public_ip(ports),
            private_ip=extract_private_ip(ports),
            ssh_port=SSH_PORT,
            ssh_user=SSH_USER,
            metadata=ResourceMetadata(
                vendor=self.type,
                instance_type=instance.get("flavorName"),
                region=instance.get("zoneId"),
                image_id=instance.get("imageId"),
                extra={
                    "instance_name": instance.get("instanceName"),
                    "cpu": instance.get("cpu"),
                    "memory": instance.get("memory"),
                    "disk": instance.get("disk"),
                    "image_name": instance.get("imageName"),
                    "charge_mode": instance.get("chargeMode"),
                    "boot_volume_id": instance.get("bootVolumeId"),
                    "boot_volume_type": instance.get("bootVolumeType"),
                    "ports": ports,
                },
            ),
            created_at=_parse_time(instance.get("createdTime")) or datetime.now(UTC),
            updated_at=_parse_time(instance.get("modifiedTime")),
        )

    def _summary_to_resource_info(self, summary: InstanceSummary) -> ResourceInfo:
        return ResourceInfo(
            id=summary["id"],
            status=_summary_status(summary.get("status", "")),
            ssh_port=SSH_PORT,
            ssh_user=SSH_USER,
            metadata=ResourceMetadata(
                vendor=self.type,
                instance_type=summary.get("specsName"),
                region=summary.get("zoneId"),
                extra={"instance_name": summary.get("name")},
            ),
            created_at=_parse_time(summary.get("createdTime")) or datetime.now(UTC),
        )
