"""Core primitives shared by every provider."""

from .exceptions import (
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

__all__ = [
    "ConfigurationError",
    "ErrorCode",
    "InsufficientQuotaError",
    "InvalidParameterError",
    "OperationCancelledError",
    "OperationTimeoutError",
    "ProviderError",
    "ProviderNotInitializedError",
    "ResourceErrorStateError",
    "ResourceNotFoundError",
    "VendorError",
    "VibeboxError",
]
