from __future__ import annotations

from collections.abc import Generator

import httpx
import pytest
import respx
from fastapi import FastAPI
from fastapi.testclient import TestClient

from tickerview.config.settings import DataSource, Settings
from tickerview.dependencies import market_data as md
from tickerview.domain.entities.bar import Bar, FetchError, Page
from tickerview.infrastructure.external_apis.polygon.settings import PolygonSettings
from tickerview.main import create_app

pytestmark = pytest.mark.integration


class _RecordingGateway:
    def __init__(self, result: Page | FetchError) -> None:
        self.result = result
        self.calls: list[tuple[str, int]] = []

    async def fetch(self, symbol: str, page: int) -> Page | FetchError:
        self.calls.append((symbol, page))
        return self.result


class _ExplodingGateway:
    async def fetch(self, symbol: str, page: int) -> Page | FetchError:
        raise RuntimeError("unexpected")


@pytest.fixture
def app() -> FastAPI:
    return create_app(Settings())


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def _bar(i: int) -> Bar:
    return Bar(
        timestamp=1_704_153_600_000 + i * 86_400_000,
        open=10.0,
        high=11.0,
        low=9.0,
        close=10.5,
        volume=100.0,
    )


def test_default_request_serves_first_page(client: TestClient) -> None:
    r = client.get("/stock-data")

    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] == "*"
    body = r.json()
    assert body["status"] == "success"
    assert body["page"] == 1
    assert body["hasMore"] is True
    assert len(body["data"]) == 100
    assert set(body["data"][0]) == {"t", "o", "h", "l", "c", "v"}
    stamps = [row["t"] for row in body["data"]]
    assert stamps == sorted(stamps)


def test_symbol_and_page_are_forwarded(app: FastAPI, client: TestClient) -> None:
    gw = _RecordingGateway(Page(bars=(_bar(0), _bar(1)), page=3, has_more=False))
    app.dependency_overrides[md.get_bar_gateway] = lambda: gw

    r = client.get("/stock-data", params={"symbol": " msft", "page": 3})

    assert r.status_code == 200
    assert gw.calls == [("MSFT", 3)]
    assert r.json() == {
        "status": "success",
        "data": [
            {"t": 1_704_153_600_000, "o": 10.0, "h": 11.0, "l": 9.0, "c": 10.5, "v": 100.0},
            {"t": 1_704_240_000_000, "o": 10.0, "h": 11.0, "l": 9.0, "c": 10.5, "v": 100.0},
        ],
        "page": 3,
        "hasMore": False,
    }


def test_gateway_failure_maps_to_500_envelope(app: FastAPI, client: TestClient) -> None:
    app.dependency_overrides[md.get_bar_gateway] = lambda: _RecordingGateway(
        FetchError("Market data provider returned HTTP 403.")
    )

    r = client.get("/stock-data", params={"symbol": "AAPL"})

    assert r.status_code == 500
    assert r.headers["access-control-allow-origin"] == "*"
    assert r.json() == {"status": "error", "message": "Failed to fetch stock data"}


@pytest.mark.parametrize("page", ["0", "-1", "two"])
def test_invalid_page_is_422_envelope(client: TestClient, page: str) -> None:
    r = client.get("/stock-data", params={"page": page})

    assert r.status_code == 422
    body = r.json()
    assert body["status"] == "error"
    assert "page" in body["message"]


@pytest.mark.parametrize("symbol", ["", "   "])
def test_blank_symbol_is_400(client: TestClient, symbol: str) -> None:
    r = client.get("/stock-data", params={"symbol": symbol})
    assert r.status_code == 400
    assert r.json()["status"] == "error"
    assert r.json()["message"] == "symbol must not be blank"


def test_unhandled_error_is_500_envelope(app: FastAPI) -> None:
    app.dependency_overrides[md.get_bar_gateway] = lambda: _ExplodingGateway()
    with TestClient(app, raise_server_exceptions=False) as c:
        r = c.get("/stock-data")

    assert r.status_code == 500
    assert r.json()["status"] == "error"
    assert r.json()["message"] == "Internal server error"


def test_request_id_is_echoed_or_generated(client: TestClient) -> None:
    r = client.get("/stock-data", headers={"X-Request-ID": "abc-123"})
    assert r.headers["X-Request-ID"] == "abc-123"

    r = client.get("/stock-data", headers={"X-Request-ID": "bad id with spaces"})
    assert r.headers["X-Request-ID"] != "bad id with spaces"
    assert len(r.headers["X-Request-ID"]) == 36


def test_cors_preflight_allows_any_origin(client: TestClient) -> None:
    r = client.options(
        "/stock-data",
        headers={"Origin": "https://charts.example", "Access-Control-Request-Method": "GET"},
    )
    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] == "*"


@respx.mock
def test_polygon_source_end_to_end(
    app: FastAPI, client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(md, "get_settings", lambda: Settings(data_source=DataSource.POLYGON))
    monkeypatch.setattr(
        md,
        "get_polygon_settings",
        lambda: PolygonSettings(api_key="k", page_size=2),  # type: ignore[arg-type]
    )
    route = respx.get(url__regex=r"https://api\.polygon\.io/v2/aggs/ticker/AAPL/range/1/day/.+").mock(
        return_value=httpx.Response(
            200,
            json={
                "status": "OK",
                "results": [
                    {"t": 1_704_153_600_000, "o": 1, "h": 2, "l": 0.5, "c": 1.5, "v": 10},
                    {"t": 1_704_240_000_000, "o": 1.5, "h": 2, "l": 1, "c": 1.8, "v": 12},
                ],
            },
        )
    )

    r = client.get("/stock-data", params={"symbol": "aapl", "page": 2})

    assert r.status_code == 200
    body = r.json()
    assert body["page"] == 2
    assert body["hasMore"] is True
    assert [row["t"] for row in body["data"]] == [1_704_153_600_000, 1_704_240_000_000]
    assert route.calls.last.request.url.params["offset"] == "2"


@respx.mock
def test_polygon_upstream_error_is_500(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(md, "get_settings", lambda: Settings(data_source=DataSource.POLYGON))
    monkeypatch.setattr(
        md, "get_polygon_settings", lambda: PolygonSettings(api_key="k")  # type: ignore[arg-type]
    )
    respx.get(url__regex=r"https://api\.polygon\.io/.*").mock(return_value=httpx.Response(429))

    r = client.get("/stock-data")

    assert r.status_code == 500
    assert r.json() == {"status": "error", "message": "Failed to fetch stock data"}
