from __future__ import annotations

import json
from collections.abc import Iterable

import pytest
from typer.testing import CliRunner

from tickerview.adapters.gateways.deterministic_gateway import DeterministicBarGateway
from tickerview.adapters.views.chart_view import ChartView
from tickerview.adapters.views.surfaces import RecordingSurface
from tickerview.application.services.acquisition_controller import AcquisitionController
from tickerview.domain.entities.acquisition import AcquisitionStatus
from tickerview.tasks.cli import app, dispatch_command, render_status, run_watch

runner = CliRunner()


def _reader(lines: Iterable[str | None]):
    queue = list(lines)

    async def _read() -> str | None:
        return queue.pop(0) if queue else None

    return _read


def test_fetch_prints_stock_data_envelope() -> None:
    result = runner.invoke(app, ["fetch", "msft", "--page", "2", "--source", "deterministic"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout.strip().splitlines()[-1])
    assert payload["status"] == "success"
    assert payload["page"] == 2
    assert payload["hasMore"] is True
    assert len(payload["data"]) == 100


def test_fetch_polygon_without_key_exits_with_usage_error() -> None:
    result = runner.invoke(app, ["fetch", "AAPL", "--source", "polygon"])
    assert result.exit_code == 2


@pytest.mark.asyncio
async def test_run_watch_drives_controller_from_commands() -> None:
    gateway = DeterministicBarGateway(page_size=100, history_days=250)
    ctl = AcquisitionController(gateway)
    surface = RecordingSurface()
    view = ChartView(ctl, surface, "tickerview")

    await run_watch(
        ctl,
        view,
        _reader(["more", "more", "more", "resize 40", "symbol msft", "refresh", "q", "never"]),
    )

    snap = ctl.snapshot
    assert snap.symbol == "MSFT"
    assert snap.status is AcquisitionStatus.LOADED
    assert len(snap.bars) == 100
    assert ("resize", 40) in surface.calls
    await ctl.aclose()
    view.close()


@pytest.mark.asyncio
async def test_run_watch_stops_at_end_of_input() -> None:
    ctl = AcquisitionController(DeterministicBarGateway(history_days=30))
    view = ChartView(ctl, RecordingSurface(), None)

    await run_watch(ctl, view, _reader([]))

    assert ctl.snapshot.has_more is False
    assert len(ctl.snapshot.bars) == 30
    await ctl.aclose()


@pytest.mark.asyncio
async def test_dispatch_command_handles_bad_input(capsys: pytest.CaptureFixture[str]) -> None:
    ctl = AcquisitionController(DeterministicBarGateway())
    view = ChartView(ctl, RecordingSurface(), None)

    assert dispatch_command(ctl, view, "") is True
    assert dispatch_command(ctl, view, "resize wide") is True
    assert dispatch_command(ctl, view, "bogus") is True
    assert dispatch_command(ctl, view, "quit") is False
    assert "commands:" in capsys.readouterr().out
    assert ctl.last_request is None
    await ctl.aclose()


def test_render_status_lines() -> None:
    ctl = AcquisitionController(DeterministicBarGateway())
    assert render_status(ctl.snapshot) == "AAPL: idle"
