"""China Mobile provider options.

Immutable view over ``ProviderConfig.options`` for the China Mobile adapter.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from vibebox.api.provider import ProviderConfig
from vibebox.core.exceptions import InvalidParameterError

DEFAULT_ZONE_ID = "cn-jiangsu-1a"

# =============================================================================
# Configuration
# =============================================================================


@dataclass(frozen=True, slots=True)
class ChinaMobileOptions:
    """China Mobile Cloud ECS adapter options.

    Example:
        >>> config = ProviderConfig(
        ...     type="chinamobile",
        ...     credentials=Credentials("AK", "SK"),
        ...     options={"zone_id": "cn-jiangsu-1a", "network_id": "net-123"},
        ... )

    Args:
        zone_id: Default zone for new instances. ``config.region`` is used
            when the option is absent.
        network_id: Default private network, used when a spec carries no VPC.
        flavor_catalog: Query the live flavor catalog before creating.
            Falls back to the static flavor table when the catalog is unavailable.
        catalog_retries: Retries for the catalog query.
        request_timeout: HTTP request timeout in seconds.
        password_public_key: PEM override for password encryption.
    """

    zone_id: str = DEFAULT_ZONE_ID
    network_id: str = ""
    flavor_catalog: bool = True
    catalog_retries: int = 2
    request_timeout: float = 30
    password_public_key: str | None = None

    @classmethod
    def from_config(cls, config: ProviderConfig) -> ChinaMobileOptions:
        options: Mapping[str, Any] = config.options
        try:
            return cls(
                zone_id=str(options.get("zone_id") or config.region or DEFAULT_ZONE_ID),
                network_id=str(options.get("network_id") or ""),
                flavor_catalog=bool(options.get("flavor_catalog", True)),
                catalog_retries=int(options.get("catalog_retries", 2)),
                request_timeout=float(options.get("request_timeout", 30)),
                password_public_key=options.get("password_public_key"),
            )
        except (TypeError, ValueError) as e:
            raise InvalidParameterError("chinamobile", "options", str(e)) from e
