"""Shared polling, retry and health-check engine for providers.

Providers do not inherit behaviour. Each adapter embeds one
``ProviderEngine`` and delegates the generic parts of the contract to it:

    engine = ProviderEngine(provider="chinamobile", name="China Mobile Cloud ECS")
    engine.ensure_initialized()
    info = await engine.wait_for_status(self.get_resource_info, resource_id, options)

``clock`` and ``sleep`` are injectable so waits can be driven by a fake
clock in tests.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any

from loguru import logger
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from vibebox.api.model import (
    ProviderHealthStatus,
    ResourceInfo,
    ResourceStatus,
    RetryOptions,
    WaitForStatusOptions,
)
from vibebox.api.provider import ProviderConfig
from vibebox.core.exceptions import (
    InvalidParameterError,
    OperationCancelledError,
    OperationTimeoutError,
    ProviderNotInitializedError,
    ResourceErrorStateError,
)

type Clock = Callable[[], float]
type Sleep = Callable[[float], Awaitable[Any]]
type Fetch = Callable[[str], Awaitable[ResourceInfo]]
type HealthCheck = Callable[[], Awaitable[bool]]


def validate_credentials(provider: str, config: ProviderConfig) -> None:
    """Reject configs without a usable access key pair.

    Raises:
        InvalidParameterError: Naming the first missing field.
    """
    credentials = config.credentials
    if credentials is None:
        raise InvalidParameterError(provider, "credentials", "Credentials are required")
    if not credentials.access_key_id:
        raise InvalidParameterError(
            provider, "credentials.access_key_id", "Access Key ID is required"
        )
    if not credentials.access_key_secret:
        raise InvalidParameterError(
            provider, "credentials.access_key_secret", "Access Key Secret is required"
        )


class ProviderEngine:
    """Polling/retry engine embedded by every provider adapter."""

    def __init__(
        self,
        provider: str,
        name: str,
        *,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.provider = provider
        self.name = name
        self._clock = clock
        self._sleep = sleep
        self._initialized = False
        self._log = logger.bind(provider=provider, component="engine")

    # =========================================================================
    # Initialization guard
    # =========================================================================

    @property
    def initialized(self) -> bool:
        return self._initialized

    def mark_initialized(self) -> None:
        self._initialized = True

    def ensure_initialized(self) -> None:
        if not self._initialized:
            raise ProviderNotInitializedError(self.provider)

    # =========================================================================
    # Status polling
    # =========================================================================

    async def wait_for_status(
        self,
        fetch: Fetch,
        resource_id: str,
        options: WaitForStatusOptions,
        *,
        cancel: asyncio.Event | None = None,
    ) -> ResourceInfo:
        """Poll ``fetch`` until the resource reaches ``options.target_status``.

        The deadline is computed once, on entry, so slow polls cannot extend it.

        Args:
            fetch: Fresh resource query, usually the provider's get_resource_info.
            resource_id: Resource to poll.
            options: Target status, timeout and interval in seconds.
            cancel: Optional event; setting it aborts the wait.

        Returns:
            The first snapshot whose status equals the target.

        Raises:
            ResourceErrorStateError: ERROR observed while waiting for another status.
            OperationTimeoutError: Deadline passed without reaching the target.
            OperationCancelledError: ``cancel`` was set.
        """
        self.ensure_initialized()

        target = options.target_status
        operation = f"wait_for_status({target})"
        deadline = self._clock() + options.timeout
        polls = 0

        while True:
            self._raise_if_cancelled(cancel, operation)
            info = await fetch(resource_id)
            polls += 1

            if info.status == target:
                self._log.debug(
                    "Resource {resource_id} reached {target} after {polls} polls",
                    resource_id=resource_id, target=target, polls=polls,
                )
                return info

            if info.status == ResourceStatus.ERROR:
                self._log.warning(
                    "Resource {resource_id} entered ERROR while waiting for {target}",
                    resource_id=resource_id, target=target,
                )
                raise ResourceErrorStateError(self.provider, resource_id, target)

            if self._clock() >= deadline:
                break

            self._log.trace(
                "Resource {resource_id} is {status}, waiting for {target}",
                resource_id=resource_id, status=info.status, target=target,
            )
            await self._pause(options.interval, cancel, operation)

            if self._clock() >= deadline:
                break

        self._log.warning(
            "Timed out waiting for {resource_id} to reach {target} after {polls} polls",
            resource_id=resource_id, target=target, polls=polls,
        )
        raise OperationTimeoutError(self.provider, operation, options.timeout)

    async def _pause(
        self, seconds: float, cancel: asyncio.Event | None, operation: str
    ) -> None:
        if cancel is None:
            await self._sleep(seconds)
            return

        sleeper = asyncio.ensure_future(self._sleep(seconds))
        waiter = asyncio.ensure_future(cancel.wait())
        try:
            await asyncio.wait({sleeper, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (sleeper, waiter):
                if not task.done():
                    task.cancel()
            await asyncio.gather(sleeper, waiter, return_exceptions=True)
        self._raise_if_cancelled(cancel, operation)

    def _raise_if_cancelled(self, cancel: asyncio.Event | None, operation: str) -> None:
        if cancel is not None and cancel.is_set():
            self._log.info("{operation} cancelled by caller", operation=operation)
            raise OperationCancelledError(self.provider, operation)

    # =========================================================================
    # Retry
    # =========================================================================

    async def retry_with_backoff[T](
        self,
        operation: Callable[[], Awaitable[T]],
        options: RetryOptions | None = None,
    ) -> T:
        """Run ``operation`` with exponential backoff.

        Makes at most ``max_retries + 1`` attempts. On exhaustion the last
        error is re-raised unchanged. Opt-in: nothing in the contract calls
        this implicitly.
        """
        options = options or RetryOptions()
        retrying = AsyncRetrying(
            stop=stop_after_attempt(options.max_retries + 1),
            wait=wait_exponential(
                multiplier=options.initial_delay,
                exp_base=options.factor,
                max=options.max_delay,
            ),
            retry=retry_if_exception(options.retry_on),
            before_sleep=self._log_retry,
            reraise=True,
            sleep=self._sleep,
        )
        return await retrying(operation)

    def _log_retry(self, state: RetryCallState) -> None:
        error = state.outcome.exception() if state.outcome else None
        delay = state.next_action.sleep if state.next_action else 0.0
        self._log.warning(
            "Retry {attempt} after {error_type}: {error}. Waiting {delay:.1f}s...",
            attempt=state.attempt_number,
            error_type=type(error).__name__,
            error=error,
            delay=delay,
        )

    # =========================================================================
    # Health
    # =========================================================================

    async def health_check(self, check: HealthCheck) -> ProviderHealthStatus:
        """Run a vendor reachability check, converting any failure into an unhealthy status."""
        try:
            self.ensure_initialized()
            healthy = await check()
        except Exception as e:
            self._log.warning("Health check failed: {error}", error=e)
            return ProviderHealthStatus(
                healthy=False,
                message=str(e) or type(e).__name__,
                last_checked=datetime.now(UTC),
            )

        return ProviderHealthStatus(
            healthy=healthy,
            message="Provider is healthy" if healthy else "Provider is unhealthy",
            last_checked=datetime.now(UTC),
        )
