# tests/conftest.py
from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Generator
from dataclasses import dataclass, field

import pytest

from tickerview.config.settings import get_settings
from tickerview.domain.entities.bar import Bar, FetchError, Page

_DAY_MS = 86_400_000
_BASE_MS = 1_700_006_400_000  # 2023-11-15T00:00:00Z


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Keep tests off the network and independent of the developer's environment."""
    for name in (
        "POLYGON_API_KEY",
        "POLYGON_BASE_URL",
        "POLYGON_PAGE_SIZE",
        "TICKERVIEW_DATA_SOURCE",
        "TICKERVIEW_DEFAULT_SYMBOL",
        "TICKERVIEW_CORS_ALLOW_ORIGINS_RAW",
        "REQUEST_ID",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("TICKERVIEW_ENVIRONMENT", "test")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_bars() -> Callable[..., tuple[Bar, ...]]:
    """Return a factory producing ``n`` ascending daily bars."""

    def _make(n: int, *, start: int = 0, base_price: float = 100.0) -> tuple[Bar, ...]:
        bars = []
        for i in range(start, start + n):
            price = base_price + i
            bars.append(
                Bar(
                    timestamp=_BASE_MS + i * _DAY_MS,
                    open=price,
                    high=price + 2,
                    low=price - 2,
                    close=price + 1,
                    volume=1_000.0 + i,
                )
            )
        return tuple(bars)

    return _make


@dataclass
class PendingFetch:
    symbol: str
    page: int
    future: asyncio.Future[Page | FetchError]

    def resolve(self, result: Page | FetchError) -> None:
        self.future.set_result(result)

    def fail(self, exc: BaseException) -> None:
        self.future.set_exception(exc)


@dataclass
class ControlledGateway:
    """Gateway whose fetches stay pending until the test resolves them."""

    calls: list[PendingFetch] = field(default_factory=list)

    async def fetch(self, symbol: str, page: int) -> Page | FetchError:
        future: asyncio.Future[Page | FetchError] = asyncio.get_running_loop().create_future()
        self.calls.append(PendingFetch(symbol=symbol, page=page, future=future))
        return await future

    @property
    def last(self) -> PendingFetch:
        return self.calls[-1]


@pytest.fixture
def controlled_gateway() -> ControlledGateway:
    return ControlledGateway()


async def _settle() -> None:
    for _ in range(5):
        await asyncio.sleep(0)


@pytest.fixture
def settle() -> Callable[[], Awaitable[None]]:
    """Return a coroutine function that lets scheduled tasks run."""
    return _settle
