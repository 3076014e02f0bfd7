from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Protocol, runtime_checkable

from vibebox.api.model import (
    ProviderHealthStatus,
    ResourceInfo,
    ResourceSpec,
    WaitForStatusOptions,
)


@dataclass(frozen=True, slots=True)
class Credentials:
    access_key_id: str
    access_key_secret: str = field(repr=False)


@dataclass(frozen=True, slots=True)
class ProviderConfig:
    """Immutable provider configuration.

    Args:
        type: Provider tag used by the factory (e.g. "chinamobile").
        credentials: Vendor access key pair.
        region: Default region/zone for created resources.
        endpoint: API base URL override.
        options: Vendor-specific settings, frozen on construction.
    """

    type: str
    credentials: Credentials | None
    region: str | None = None
    endpoint: str | None = None
    options: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "options", MappingProxyType(dict(self.options)))


@runtime_checkable
class ResourceProvider(Protocol):
    """Vendor-agnostic contract for a single compute resource lifecycle.

    Implementations hold only immutable config and a vendor client.
    All resource state lives at the vendor; every read is a fresh query.
    """

    @property
    def type(self) -> str: ...

    @property
    def name(self) -> str: ...

    async def initialize(self, config: ProviderConfig) -> None:
        """Validate config and build the vendor client.

        Raises
        ------
        InvalidParameterError
            Required credential fields are missing.
        """
        ...

    async def create_resource(self, spec: ResourceSpec) -> ResourceInfo:
        """Request a new resource.

        Returns
        -------
        ResourceInfo
            Status CREATING (or RUNNING when the vendor is immediate).
            Poll with wait_for_status for the final state.
        """
        ...

    async def get_resource_info(self, resource_id: str) -> ResourceInfo:
        """Fresh vendor query. Raises ResourceNotFoundError for unknown ids."""
        ...

    async def start_resource(self, resource_id: str) -> None:
        """Returns once the vendor accepted the command, not once it completed."""
        ...

    async def stop_resource(self, resource_id: str) -> None: ...

    async def restart_resource(self, resource_id: str) -> None: ...

    async def delete_resource(self, resource_id: str) -> None:
        """Irreversible. The id is invalid for any other operation afterwards."""
        ...

    async def wait_for_status(
        self,
        resource_id: str,
        options: WaitForStatusOptions,
        *,
        cancel: asyncio.Event | None = None,
    ) -> ResourceInfo:
        """Poll until the target status, ERROR, the deadline or cancellation."""
        ...

    async def health_check(self) -> ProviderHealthStatus:
        """Never raises."""
        ...
