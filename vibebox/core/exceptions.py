"""Custom exception hierarchy for Vibebox.

All vibebox-specific exceptions inherit from VibeboxError, enabling
callers to catch every provider failure with a single except clause.
Provider errors carry a stable ``code`` so the calling layer can map
them to HTTP responses without string matching.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    INVALID_PARAMETER = "INVALID_PARAMETER"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    INSUFFICIENT_QUOTA = "INSUFFICIENT_QUOTA"
    OPERATION_TIMEOUT = "OPERATION_TIMEOUT"
    OPERATION_CANCELLED = "OPERATION_CANCELLED"
    RESOURCE_ERROR_STATE = "RESOURCE_ERROR_STATE"
    NOT_INITIALIZED = "NOT_INITIALIZED"
    PROVIDER_NOT_FOUND = "PROVIDER_NOT_FOUND"
    PROVIDER_CREATION_FAILED = "PROVIDER_CREATION_FAILED"
    OPERATION_REJECTED = "OPERATION_REJECTED"
    EMPTY_RESPONSE = "EMPTY_RESPONSE"
    NETWORK_ERROR = "NETWORK_ERROR"
    HTTP_ERROR = "HTTP_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class VibeboxError(Exception):
    """Base exception for all Vibebox errors."""


class ConfigurationError(VibeboxError):
    """Raised for invalid configuration files or missing required settings."""


class ProviderError(VibeboxError):
    """Failure reported by a provider or by the provider factory."""

    def __init__(self, message: str, code: str, provider: str) -> None:
        self.message = message
        self.code = code
        self.provider = provider
        super().__init__(message)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(code={self.code!r}, provider={self.provider!r}, "
            f"message={self.message!r})"
        )


class InvalidParameterError(ProviderError):
    """Caller or configuration defect - never retried."""

    def __init__(self, provider: str, parameter: str, message: str) -> None:
        self.parameter = parameter
        super().__init__(
            f"Invalid parameter {parameter}: {message}",
            ErrorCode.INVALID_PARAMETER,
            provider,
        )


class ResourceNotFoundError(ProviderError):
    """Vendor has no record of the resource id."""

    def __init__(self, provider: str, resource_id: str) -> None:
        self.resource_id = resource_id
        super().__init__(
            f"Resource {resource_id} not found",
            ErrorCode.RESOURCE_NOT_FOUND,
            provider,
        )


class InsufficientQuotaError(ProviderError):
    """Vendor capacity or account quota exhausted."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(message, ErrorCode.INSUFFICIENT_QUOTA, provider)


class OperationTimeoutError(ProviderError):
    """Raised when a wait exceeds its deadline."""

    def __init__(self, provider: str, operation: str, timeout: float) -> None:
        self.operation = operation
        self.timeout = timeout
        super().__init__(
            f"Operation {operation} timed out after {timeout:g}s",
            ErrorCode.OPERATION_TIMEOUT,
            provider,
        )


class OperationCancelledError(ProviderError):
    """Raised when a caller aborts a wait through its cancel signal."""

    def __init__(self, provider: str, operation: str) -> None:
        self.operation = operation
        super().__init__(
            f"Operation {operation} was cancelled",
            ErrorCode.OPERATION_CANCELLED,
            provider,
        )


class ResourceErrorStateError(ProviderError):
    """Resource entered ERROR while waiting for another status - do not keep polling."""

    def __init__(self, provider: str, resource_id: str, target_status: str) -> None:
        self.resource_id = resource_id
        self.target_status = target_status
        super().__init__(
            f"Resource {resource_id} entered ERROR state while waiting for {target_status}",
            ErrorCode.RESOURCE_ERROR_STATE,
            provider,
        )


class ProviderNotInitializedError(ProviderError):
    """Raised when a provider is used before initialize() completed."""

    def __init__(self, provider: str) -> None:
        super().__init__(
            f"Provider {provider} is not initialized. Call initialize() first.",
            ErrorCode.NOT_INITIALIZED,
            provider,
        )


class VendorError(ProviderError):
    """Vendor API or transport failure.

    ``code`` is the vendor's own error code when the vendor answered,
    otherwise one of the generic transport codes (NETWORK_ERROR, HTTP_ERROR).
    """

    def __init__(
        self,
        message: str,
        code: str,
        provider: str,
        request_id: str | None = None,
    ) -> None:
        self.request_id = request_id
        super().__init__(message, code, provider)

    def __str__(self) -> str:
        suffix = f" (request_id={self.request_id})" if self.request_id else ""
        return f"[{self.code}] {self.message}{suffix}"
