from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from types import MappingProxyType
from typing import Any

from vibebox.core.exceptions import InvalidParameterError


class ProviderType(StrEnum):
    """Known provider tags. The registry accepts any string tag."""

    CHINAMOBILE = "chinamobile"
    ALIYUN = "aliyun"
    TENCENT = "tencent"
    DOCKER = "docker"
    AWS = "aws"
    KUBERNETES = "kubernetes"


class ResourceStatus(StrEnum):
    """Unified lifecycle status every provider maps into.

    DELETED and ERROR are traps: a deleted resource accepts no further
    operations, an errored one only delete and diagnosis.
    """

    CREATING = "CREATING"
    RUNNING = "RUNNING"
    STOPPED = "STOPPED"
    STARTING = "STARTING"
    STOPPING = "STOPPING"
    RESTARTING = "RESTARTING"
    DELETING = "DELETING"
    DELETED = "DELETED"
    ERROR = "ERROR"
    UNKNOWN = "UNKNOWN"


def _freeze(values: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(values or {}))


@dataclass(frozen=True, slots=True)
class NetworkConfig:
    vpc_id: str | None = None
    subnet_id: str | None = None
    security_group_ids: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ResourceSpec:
    """Vendor-agnostic compute request.

    Attributes:
        cpu: CPU cores.
        memory: Memory in GB.
        disk: Boot disk in GB.
        region: Region or zone preference.
        image: Generic OS image name (e.g. "ubuntu-22.04").
        tags: Free-form resource tags. ``name`` becomes the instance name.
        network_config: Optional VPC/subnet placement.
    """

    cpu: int
    memory: float
    disk: int
    region: str | None = None
    image: str | None = None
    tags: Mapping[str, str] = field(default_factory=dict)
    network_config: NetworkConfig | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "tags", _freeze(self.tags))


@dataclass(frozen=True, slots=True)
class ResourceMetadata:
    """Provider metadata, tagged with the vendor that produced it.

    Common fields are typed; everything vendor-specific travels in ``extra``
    untouched.
    """

    vendor: str
    instance_type: str | None = None
    region: str | None = None
    image_id: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "extra", _freeze(self.extra))


@dataclass(frozen=True, slots=True)
class ResourceInfo:
    """Point-in-time snapshot of a vendor resource. Never cached."""

    id: str
    status: ResourceStatus
    metadata: ResourceMetadata
    created_at: datetime
    ip_address: str | None = None
    private_ip: str | None = None
    ssh_port: int = 22
    ssh_user: str = "root"
    ssh_password: str | None = field(default=None, repr=False)
    ssh_key_path: str | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class WaitForStatusOptions:
    target_status: ResourceStatus
    timeout: float = 600.0
    interval: float = 5.0


def _retryable(error: Exception) -> bool:
    return not isinstance(error, InvalidParameterError)


@dataclass(frozen=True, slots=True)
class RetryOptions:
    """Backoff policy for ``ProviderEngine.retry_with_backoff``.

    Delay before attempt k+1 is ``min(initial_delay * factor ** (k - 1), max_delay)``.
    """

    max_retries: int = 3
    initial_delay: float = 1.0
    max_delay: float = 16.0
    factor: float = 2.0
    retry_on: Callable[[Exception], bool] = _retryable


@dataclass(frozen=True, slots=True)
class ProviderHealthStatus:
    healthy: bool
    last_checked: datetime
    message: str | None = None


@dataclass(frozen=True, slots=True)
class Flavor:
    """A vendor's fixed-size compute offering."""

    name: str
    cpu: int
    ram_mb: int
    type: str = ""

    @property
    def memory_gb(self) -> float:
        return self.ram_mb / 1024

    @property
    def score(self) -> float:
        return self.cpu + self.memory_gb
