from __future__ import annotations

from datetime import date

import httpx
import pytest
import respx

from tickerview.domain.exceptions.market_data import (
    MalformedResponseError,
    TransportError,
    UpstreamStatusError,
)
from tickerview.infrastructure.external_apis.polygon.client import PolygonClient
from tickerview.infrastructure.external_apis.polygon.settings import PolygonSettings
from tickerview.infrastructure.logging.logger import set_request_context

_URL = "https://api.polygon.io/v2/aggs/ticker/AAPL/range/1/day/2023-01-02/2025-01-02"


async def _call(client: PolygonClient, *, offset: int = 0):
    return await client.daily_aggregates(
        symbol="AAPL",
        date_from=date(2023, 1, 2),
        date_to=date(2025, 1, 2),
        limit=100,
        offset=offset,
    )


@pytest.mark.asyncio
@respx.mock
async def test_daily_aggregates_builds_request_and_returns_results() -> None:
    cfg = PolygonSettings(api_key="secret-key")  # type: ignore[arg-type]
    results = [{"t": 1672617600000, "o": 1, "h": 2, "l": 0.5, "c": 1.5, "v": 10}]
    route = respx.get(_URL).mock(
        return_value=httpx.Response(200, json={"status": "OK", "results": results})
    )
    set_request_context(request_id="rid-123")

    async with httpx.AsyncClient() as http:
        client = PolygonClient(cfg, http=http)
        records = await _call(client, offset=200)

    assert records == results
    request = route.calls.last.request
    assert request.url.params["sort"] == "asc"
    assert request.url.params["limit"] == "100"
    assert request.url.params["offset"] == "200"
    assert "apiKey" not in request.url.params
    assert request.headers["Authorization"] == "Bearer secret-key"
    assert request.headers["X-Request-ID"] == "rid-123"


@pytest.mark.asyncio
@respx.mock
async def test_missing_results_is_an_empty_page() -> None:
    cfg = PolygonSettings(api_key="x")  # type: ignore[arg-type]
    respx.get(_URL).mock(return_value=httpx.Response(200, json={"status": "OK", "resultsCount": 0}))

    async with httpx.AsyncClient() as http:
        assert await _call(PolygonClient(cfg, http=http)) == []


@pytest.mark.asyncio
@respx.mock
@pytest.mark.parametrize("status", [401, 403, 429, 500, 502])
async def test_non_success_status_raises_upstream_status_error(status: int) -> None:
    cfg = PolygonSettings(api_key="x")  # type: ignore[arg-type]
    respx.get(_URL).mock(return_value=httpx.Response(status, json={"status": "ERROR"}))

    async with httpx.AsyncClient() as http:
        with pytest.raises(UpstreamStatusError) as info:
            await _call(PolygonClient(cfg, http=http))
    assert info.value.status == status


@pytest.mark.asyncio
@respx.mock
async def test_network_failure_raises_transport_error() -> None:
    cfg = PolygonSettings(api_key="x")  # type: ignore[arg-type]
    respx.get(_URL).mock(side_effect=httpx.ConnectError("refused"))

    async with httpx.AsyncClient() as http:
        with pytest.raises(TransportError):
            await _call(PolygonClient(cfg, http=http))


@pytest.mark.asyncio
@respx.mock
async def test_timeout_raises_transport_error() -> None:
    cfg = PolygonSettings(api_key="x")  # type: ignore[arg-type]
    respx.get(_URL).mock(side_effect=httpx.ReadTimeout("slow"))

    async with httpx.AsyncClient() as http:
        with pytest.raises(TransportError):
            await _call(PolygonClient(cfg, http=http))


@pytest.mark.asyncio
@respx.mock
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="<html>not json</html>"),
        httpx.Response(200, json=[1, 2, 3]),
        httpx.Response(200, json={"status": "ERROR", "error": "bad key"}),
        httpx.Response(200, json={"status": "OK", "results": {"t": 1}}),
        httpx.Response(200, json={"status": "OK", "results": [1, 2]}),
    ],
)
async def test_wrong_shapes_raise_malformed(response: httpx.Response) -> None:
    cfg = PolygonSettings(api_key="x")  # type: ignore[arg-type]
    respx.get(_URL).mock(return_value=response)

    async with httpx.AsyncClient() as http:
        with pytest.raises(MalformedResponseError):
            await _call(PolygonClient(cfg, http=http))


@pytest.mark.asyncio
async def test_owned_client_is_closed_and_shared_client_is_not() -> None:
    cfg = PolygonSettings(api_key="x")  # type: ignore[arg-type]
    owned = PolygonClient(cfg)
    await owned.aclose()
    assert owned._client.is_closed

    async with httpx.AsyncClient() as http:
        shared = PolygonClient(cfg, http=http)
        await shared.aclose()
        assert not http.is_closed
