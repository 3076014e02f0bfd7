from __future__ import annotations

import asyncio
from collections.abc import Iterator

import pytest
from loguru import logger

from vibebox.providers.engine import ProviderEngine


class FakeClock:
    """Monotonic clock advanced only by its own ``sleep``."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        await asyncio.sleep(0)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def engine(clock: FakeClock) -> ProviderEngine:
    engine = ProviderEngine("fake", "Fake Provider", clock=clock, sleep=clock.sleep)
    engine.mark_initialized()
    return engine


@pytest.fixture
def log_messages() -> Iterator[list[str]]:
    """Capture vibebox log records as ``LEVEL message`` strings."""
    messages: list[str] = []
    logger.enable("vibebox")
    hid = logger.add(lambda m: messages.append(f"{m.record['level'].name} {m.record['message']}"))
    yield messages
    logger.remove(hid)
