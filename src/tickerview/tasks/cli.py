# Copyright (c) Tickerview.
# SPDX-License-Identifier: MIT
"""Tickerview CLI: serve the stock-data endpoint, fetch pages, watch a chart.

Commands:
    serve    Run the ``/stock-data`` HTTP service under uvicorn.
    fetch    Fetch one page of bars and print the wire envelope as JSON.
    watch    Interactive terminal chart driven by the acquisition controller.

Watch commands (one per line):
    symbol <TICKER> | s <TICKER>   Switch symbol (reloads page 1)
    more | m                       Load the next page of history
    refresh | r                    Re-fetch page 1 of the current symbol
    resize <COLUMNS>               Change the chart width
    quit | q                       Exit

Environment:
    TICKERVIEW_DATA_SOURCE    auto | polygon | proxy | deterministic
    TICKERVIEW_LOG_LEVEL      Root log level (logs go to stderr)
    POLYGON_API_KEY           Provider key for the polygon source
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable

import typer

from tickerview.adapters.mappers.bar_mapper import bar_to_record
from tickerview.adapters.views.chart_view import ChartView
from tickerview.adapters.views.surfaces import TerminalCandlestickSurface
from tickerview.application.services.acquisition_controller import AcquisitionController
from tickerview.config.settings import DataSource, Settings, get_settings
from tickerview.dependencies.market_data import (
    GatewayBundle,
    build_gateway,
    get_polygon_settings,
)
from tickerview.domain.entities.acquisition import AcquisitionSnapshot, AcquisitionStatus
from tickerview.domain.entities.bar import FetchError
from tickerview.infrastructure.logging.logger import configure_root_logging, get_json_logger

log = get_json_logger(__name__)

app = typer.Typer(add_completion=False, no_args_is_help=True)

LineReader = Callable[[], Awaitable[str | None]]

_HELP = "commands: symbol <TICKER> | more | refresh | resize <COLUMNS> | quit"


def _settings_for(source: DataSource | None) -> Settings:
    settings = get_settings()
    if source is not None:
        settings = settings.model_copy(update={"data_source": source})
    configure_root_logging(settings.log_level)
    return settings


def _build_or_exit(settings: Settings) -> GatewayBundle:
    try:
        return build_gateway(settings, get_polygon_settings())
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2) from exc


def render_status(snapshot: AcquisitionSnapshot) -> str:
    """Return a one-line summary of ``snapshot`` for the terminal."""
    if snapshot.status is AcquisitionStatus.LOADING:
        return f"{snapshot.symbol}: loading..."
    if snapshot.status is AcquisitionStatus.ERROR:
        return f"{snapshot.symbol}: error: {snapshot.error_message}"
    if snapshot.status is AcquisitionStatus.IDLE:
        return f"{snapshot.symbol}: idle"
    tail = "more available" if snapshot.has_more else "end of history"
    return f"{snapshot.symbol}: {len(snapshot.bars)} bars, page {snapshot.page}, {tail}"


def dispatch_command(controller: AcquisitionController, view: ChartView, line: str) -> bool:
    """Apply one watch command.

    Returns:
        False when the loop should stop, True otherwise.
    """
    parts = line.split()
    if not parts:
        return True
    verb, args = parts[0].lower(), parts[1:]

    if verb in {"quit", "q", "exit"}:
        return False
    if verb in {"symbol", "s"} and len(args) == 1:
        try:
            controller.set_symbol(args[0])
        except ValueError as exc:
            typer.echo(f"invalid symbol: {exc}", err=True)
    elif verb in {"more", "m"} and not args:
        if not controller.snapshot.can_load_more:
            typer.echo("no more history to load")
        controller.load_more()
    elif verb in {"refresh", "r"} and not args:
        controller.refresh()
    elif verb == "resize" and len(args) == 1 and args[0].isdigit() and int(args[0]) > 0:
        view.resize(int(args[0]))
    else:
        typer.echo(_HELP)
    return True


async def run_watch(
    controller: AcquisitionController,
    view: ChartView,
    read_line: LineReader,
) -> None:
    """Drive ``controller`` from lines produced by ``read_line`` until quit or EOF."""
    controller.start()
    await controller.wait_idle()
    typer.echo(render_status(controller.snapshot))

    while True:
        line = await read_line()
        if line is None or not dispatch_command(controller, view, line):
            break
        await controller.wait_idle()
        typer.echo(render_status(controller.snapshot))


async def _stdin_line() -> str | None:
    def _read() -> str | None:
        try:
            return input("> ")
        except EOFError:
            return None

    return await asyncio.to_thread(_read)


@app.command("serve")
def serve(
    host: str = typer.Option("127.0.0.1", help="Bind address."),
    port: int = typer.Option(8080, envvar="PORT", help="Bind port."),
    reload: bool = typer.Option(False, help="Reload on code changes (development)."),
) -> None:
    """Run the stock-data HTTP service."""
    import uvicorn

    uvicorn.run(
        "tickerview.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


@app.command("fetch")
def fetch(
    symbol: str = typer.Argument("AAPL", help="Ticker symbol."),
    page: int = typer.Option(1, min=1, help="1-based page index."),
    source: DataSource | None = typer.Option(None, help="Override the data source."),
) -> None:
    """Fetch one page of bars and print it as the ``/stock-data`` envelope."""
    settings = _settings_for(source)
    bundle = _build_or_exit(settings)

    async def _run() -> dict[str, object]:
        try:
            result = await bundle.gateway.fetch(symbol.strip().upper(), page)
        finally:
            await bundle.aclose()
        if isinstance(result, FetchError):
            return {"status": "error", "message": result.message}
        return {
            "status": "success",
            "data": [bar_to_record(bar) for bar in result.bars],
            "page": result.page,
            "hasMore": result.has_more,
        }

    payload = asyncio.run(_run())
    typer.echo(json.dumps(payload))
    if payload["status"] == "error":
        raise typer.Exit(code=1)


@app.command("watch")
def watch(
    symbol: str | None = typer.Argument(None, help="Initial symbol (default from settings)."),
    source: DataSource | None = typer.Option(None, help="Override the data source."),
    width: int = typer.Option(60, min=1, help="Chart width in columns."),
    height: int = typer.Option(12, min=2, help="Chart height in rows."),
) -> None:
    """Interactive terminal chart with incremental history loading."""
    settings = _settings_for(source)
    bundle = _build_or_exit(settings)

    async def _run() -> None:
        controller = AcquisitionController(
            bundle.gateway, default_symbol=symbol or settings.default_symbol
        )
        surface = TerminalCandlestickSurface(height=height, default_width=width)
        try:
            with ChartView(controller, surface, "tickerview", width=width) as view:
                typer.echo(_HELP)
                await run_watch(controller, view, _stdin_line)
        finally:
            await controller.aclose()
            await bundle.aclose()

    log.info("watch_started", extra={"extra": {"source": bundle.source.value}})
    asyncio.run(_run())


if __name__ == "__main__":  # pragma: no cover
    app()
