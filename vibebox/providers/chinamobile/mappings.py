"""Status and spec mappings between China Mobile and the unified model.

Pure functions only; this is the one place that knows vendor vocabulary.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from vibebox.api.model import Flavor, ProviderType, ResourceSpec, ResourceStatus
from vibebox.core.exceptions import InvalidParameterError

from .types import ChargeMode, FlavorResponse, InstancePort, VolumeType

_STATUS_MAP: dict[str, ResourceStatus] = {
    "active": ResourceStatus.RUNNING,
    "in-use": ResourceStatus.RUNNING,
    "building": ResourceStatus.CREATING,
    "creating": ResourceStatus.CREATING,
    "pending": ResourceStatus.CREATING,
    "stopped": ResourceStatus.STOPPED,
    "shutoff": ResourceStatus.STOPPED,
    "shutdown": ResourceStatus.STOPPED,
    "starting": ResourceStatus.STARTING,
    "power-on": ResourceStatus.STARTING,
    "stopping": ResourceStatus.STOPPING,
    "power-off": ResourceStatus.STOPPING,
    "rebooting": ResourceStatus.RESTARTING,
    "reboot": ResourceStatus.RESTARTING,
    "deleting": ResourceStatus.DELETING,
    "deleted": ResourceStatus.DELETED,
    "error": ResourceStatus.ERROR,
    "failed": ResourceStatus.ERROR,
}

# (cpu, memory_gb) -> flavor name. Format: {series}.{size}.{memory/cpu ratio}
_DEFAULT_FLAVORS: dict[tuple[int, float], str] = {
    (2, 4): "s1.large.2",
    (2, 8): "c5.large.4",
    (4, 8): "s1.xlarge.2",
    (4, 16): "c5.xlarge.4",
    (8, 16): "s1.2xlarge.2",
    (8, 32): "c5.2xlarge.4",
}
_DERIVED_FLAVOR_CPU = 2  # vCPUs of every s1.large.N

_IMAGE_MAP: dict[str, str] = {
    "ubuntu-22.04": "ubuntu-22.04-base",
    "ubuntu-20.04": "ubuntu-20.04-base",
    "centos-7": "centos-7-base",
    "centos-8": "centos-8-base",
    "debian-11": "debian-11-base",
}

DEFAULT_IMAGE = "ubuntu-22.04"

_CHARGE_MODES: frozenset[str] = frozenset({"HOUR", "MONTH", "YEAR"})
_VOLUME_TYPES: frozenset[str] = frozenset({"highPerformance", "ssd", "normal"})


def map_status(vendor_status: str | None) -> ResourceStatus:
    """Map a vendor status string to ResourceStatus. Unknown values map to UNKNOWN."""
    if not vendor_status:
        return ResourceStatus.UNKNOWN
    return _STATUS_MAP.get(vendor_status.strip().lower(), ResourceStatus.UNKNOWN)


def to_flavor(raw: FlavorResponse) -> Flavor:
    return Flavor(
        name=raw["flavorName"],
        cpu=int(raw["cpu"]),
        ram_mb=int(raw["ram"]),
        type=raw.get("flavorType", ""),
    )


def select_flavor(cpu: int, memory_gb: float, catalog: Iterable[Flavor]) -> Flavor | None:
    """Smallest flavor with at least ``cpu`` cores and ``memory_gb`` GB.

    Ties are broken by ascending score (cpu + memory in GB). Returns None when
    nothing in the catalog is large enough.
    """
    suitable = [f for f in catalog if f.cpu >= cpu and f.memory_gb >= memory_gb]
    if not suitable:
        return None
    return min(suitable, key=lambda f: f.score)


def default_flavor_name(cpu: int, memory_gb: float) -> str:
    """Static flavor for common sizes, used when no live catalog is available.

    Unlisted sizes derive ``s1.large.{memory per CPU}``. Those are 2-vCPU
    machines, so check default_flavor_undersized() before trusting one.

    Raises:
        InvalidParameterError: Less than 1GB of memory per CPU was requested.
    """
    if name := _DEFAULT_FLAVORS.get((cpu, memory_gb)):  # 4.0 hashes like 4
        return name
    ratio = int(memory_gb // cpu)
    if ratio < 1:
        raise InvalidParameterError(
            ProviderType.CHINAMOBILE,
            "memory",
            f"{memory_gb:g}GB for {cpu} CPU is below 1GB per CPU",
        )
    return f"s1.large.{ratio}"


def default_flavor_undersized(cpu: int, memory_gb: float) -> bool:
    """True when default_flavor_name() names a smaller machine than requested."""
    if (cpu, memory_gb) in _DEFAULT_FLAVORS:
        return False
    ratio = int(memory_gb // cpu)
    return cpu > _DERIVED_FLAVOR_CPU or _DERIVED_FLAVOR_CPU * ratio < memory_gb


def map_image_name(image_name: str | None) -> str:
    """Map a generic OS name to a vendor image id. Unmapped names pass through."""
    name = image_name or DEFAULT_IMAGE
    return _IMAGE_MAP.get(name, name)


def charge_mode(spec: ResourceSpec) -> ChargeMode:
    mode = spec.tags.get("charge_mode", "HOUR").upper()
    return mode if mode in _CHARGE_MODES else "HOUR"  # type: ignore[return-value]


def volume_type(spec: ResourceSpec) -> VolumeType:
    vtype = spec.tags.get("volume_type", "highPerformance")
    return vtype if vtype in _VOLUME_TYPES else "highPerformance"  # type: ignore[return-value]


def extract_public_ip(ports: Sequence[InstancePort]) -> str | None:
    for port in ports:
        if addresses := port.get("publicIp"):
            return addresses[0]
    return None


def extract_private_ip(ports: Sequence[InstancePort]) -> str | None:
    for port in ports:
        if addresses := port.get("privateIp"):
            return addresses[0]
    return None
