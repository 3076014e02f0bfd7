"""Provider registry and factory.

Maps a provider-type tag to a zero-argument constructor so callers obtain a
ready-to-use provider from a config alone, with no if/elif chains on vendor
names. Built-in vendors are registered from an explicit list when the factory
is constructed; their modules are imported lazily, only when a provider of
that type is actually created.

Example:
    factory = default_factory()
    provider = await factory.create(config)
"""

from __future__ import annotations

from collections.abc import Callable
from functools import cache

from loguru import logger

from vibebox.api.provider import ProviderConfig, ResourceProvider
from vibebox.core.exceptions import ErrorCode, ProviderError

log = logger.bind(component="registry")

type ProviderClass = Callable[[], ResourceProvider]


def _chinamobile() -> ResourceProvider:
    from .chinamobile.provider import ChinaMobileProvider

    return ChinaMobileProvider()


BUILTIN_PROVIDERS: tuple[tuple[str, ProviderClass], ...] = (
    ("chinamobile", _chinamobile),
)


class ProviderFactory:
    """Registry of provider constructors keyed by provider type.

    Registration is expected at startup or test setup; concurrent
    register/unregister during live traffic needs caller-side locking.
    """

    def __init__(self, *, builtins: bool = True) -> None:
        self._providers: dict[str, ProviderClass] = {}
        if builtins:
            for provider_type, provider_class in BUILTIN_PROVIDERS:
                self.register(provider_type, provider_class)

    def register(self, provider_type: str, provider_class: ProviderClass) -> None:
        """Register a provider constructor, replacing any existing one."""
        if provider_type in self._providers:
            log.warning(
                "Provider {provider_type} is already registered, overwriting",
                provider_type=provider_type,
            )
        self._providers[provider_type] = provider_class
        log.debug("Provider registered: {provider_type}", provider_type=provider_type)

    async def create(self, config: ProviderConfig) -> ResourceProvider:
        """Instantiate and initialize the provider registered for ``config.type``.

        Raises:
            ProviderError: PROVIDER_NOT_FOUND when the type is unknown,
                PROVIDER_CREATION_FAILED when construction or initialize fails.
        """
        provider_class = self._providers.get(config.type)
        if provider_class is None:
            available = ", ".join(self.list_providers()) or "none"
            raise ProviderError(
                f"Provider type '{config.type}' is not registered. "
                f"Available providers: {available}",
                ErrorCode.PROVIDER_NOT_FOUND,
                config.type,
            )

        try:
            provider = provider_class()
            await provider.initialize(config)
        except Exception as e:
            log.error(
                "Failed to create provider {provider_type}: {error}",
                provider_type=config.type, error=e,
            )
            raise ProviderError(
                f"Failed to create provider '{config.type}': {e}",
                ErrorCode.PROVIDER_CREATION_FAILED,
                config.type,
            ) from e

        log.info("Provider created: {provider_type}", provider_type=config.type)
        return provider

    def list_providers(self) -> list[str]:
        return list(self._providers)

    def is_registered(self, provider_type: str) -> bool:
        return provider_type in self._providers

    def unregister(self, provider_type: str) -> bool:
        return self._providers.pop(provider_type, None) is not None


@cache
def default_factory() -> ProviderFactory:
    """Process-wide factory with the built-in providers registered once."""
    return ProviderFactory()
