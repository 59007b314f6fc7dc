"""Shared fixtures: a controllable clock and an isolated cache."""

from __future__ import annotations

import pytest

from conanreadme.cache import TtlCache
from conanreadme.config import Settings


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def cache(clock: FakeClock) -> TtlCache:
    return TtlCache(clock=clock)


@pytest.fixture()
def settings() -> Settings:
    return Settings()
