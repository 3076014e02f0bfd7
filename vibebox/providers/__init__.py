"""Resource providers for Vibebox."""

from vibebox.providers.engine import ProviderEngine, validate_credentials
from vibebox.providers.registry import BUILTIN_PROVIDERS, ProviderFactory, default_factory

__all__ = [
    "BUILTIN_PROVIDERS",
    "ProviderEngine",
    "ProviderFactory",
    "default_factory",
    "validate_credentials",
]
