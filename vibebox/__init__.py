"""Vibebox - one lifecycle contract for compute across cloud vendors.

Example:

    from vibebox import Credentials, ProviderConfig, ResourceSpec, ResourceStatus
    from vibebox import WaitForStatusOptions, default_factory

    provider = await default_factory().create(
        ProviderConfig(
            type="chinamobile",
            credentials=Credentials("AK", "SK"),
            options={"network_id": "net-123"},
        )
    )

    info = await provider.create_resource(ResourceSpec(cpu=2, memory=4, disk=40))
    info = await provider.wait_for_status(
        info.id, WaitForStatusOptions(target_status=ResourceStatus.RUNNING)
    )
"""

from loguru import logger

# Data model and contract
from vibebox.api import (
    Credentials,
    Flavor,
    NetworkConfig,
    ProviderConfig,
    ProviderHealthStatus,
    ProviderType,
    ResourceInfo,
    ResourceMetadata,
    ResourceProvider,
    ResourceSpec,
    ResourceStatus,
    RetryOptions,
    WaitForStatusOptions,
)

# Configuration
from vibebox.config import build_provider_config, load_config, load_provider_config

# Errors
from vibebox.core.exceptions import (
    ConfigurationError,
    ErrorCode,
    InsufficientQuotaError,
    InvalidParameterError,
    OperationCancelledError,
    OperationTimeoutError,
    ProviderError,
    ProviderNotInitializedError,
    ResourceErrorStateError,
    ResourceNotFoundError,
    VendorError,
    VibeboxError,
)

# Logging
from vibebox.observability import LogConfig, setup_logging, teardown_logging

# Providers
from vibebox.providers import (
    BUILTIN_PROVIDERS,
    ProviderEngine,
    ProviderFactory,
    default_factory,
    validate_credentials,
)

__version__ = "0.1.0"

# Silent until the host application calls setup_logging.
logger.disable("vibebox")

__all__ = [
    "BUILTIN_PROVIDERS",
    "ConfigurationError",
    "Credentials",
    "ErrorCode",
    "Flavor",
    "InsufficientQuotaError",
    "InvalidParameterError",
    "LogConfig",
    "NetworkConfig",
    "OperationCancelledError",
    "OperationTimeoutError",
    "ProviderConfig",
    "ProviderEngine",
    "ProviderError",
    "ProviderFactory",
    "ProviderHealthStatus",
    "ProviderNotInitializedError",
    "ProviderType",
    "ResourceErrorStateError",
    "ResourceInfo",
    "ResourceMetadata",
    "ResourceNotFoundError",
    "ResourceProvider",
    "ResourceSpec",
    "ResourceStatus",
    "RetryOptions",
    "VendorError",
    "VibeboxError",
    "WaitForStatusOptions",
    "build_provider_config",
    "default_factory",
    "load_config",
    "load_provider_config",
    "setup_logging",
    "teardown_logging",
]
