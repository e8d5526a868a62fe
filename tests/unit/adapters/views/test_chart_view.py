from __future__ import annotations

import pytest

from tickerview.adapters.views.chart_view import ChartView
from tickerview.adapters.views.surfaces import RecordingSurface
from tickerview.application.interfaces.chart_surface import ChartSurface
from tickerview.application.services.acquisition_controller import AcquisitionController
from tickerview.domain.entities.bar import FetchError, Page


def test_recording_surface_satisfies_protocol() -> None:
    assert isinstance(RecordingSurface(), ChartSurface)


@pytest.mark.asyncio
async def test_surface_created_lazily_on_first_bars(controlled_gateway, make_bars, settle) -> None:
    ctl = AcquisitionController(controlled_gateway)
    surface = RecordingSurface()
    view = ChartView(ctl, surface, "container", width=800)

    ctl.start()
    await settle()
    assert surface.calls == []
    assert view.created is False

    bars = make_bars(5)
    controlled_gateway.last.resolve(Page(bars=bars, page=1, has_more=False))
    await ctl.wait_idle()

    assert surface.calls == [
        ("create", "container"),
        ("resize", 800),
        ("set_series", bars),
    ]
    assert view.created is True


@pytest.mark.asyncio
async def test_each_change_resupplies_full_sequence(controlled_gateway, make_bars, settle) -> None:
    ctl = AcquisitionController(controlled_gateway)
    surface = RecordingSurface()
    ChartView(ctl, surface, None)

    ctl.start()
    await settle()
    first = make_bars(100)
    controlled_gateway.last.resolve(Page(bars=first, page=1, has_more=True))
    await ctl.wait_idle()

    ctl.load_more()
    await settle()
    second = make_bars(40, start=100)
    controlled_gateway.last.resolve(Page(bars=second, page=2, has_more=False))
    await ctl.wait_idle()

    assert surface.count("create") == 1
    assert surface.count("set_series") == 2
    assert surface.series == first + second


@pytest.mark.asyncio
async def test_error_and_loading_do_not_resupply(controlled_gateway, make_bars, settle) -> None:
    ctl = AcquisitionController(controlled_gateway)
    surface = RecordingSurface()
    ChartView(ctl, surface, None)

    ctl.start()
    await settle()
    controlled_gateway.last.resolve(Page(bars=make_bars(100), page=1, has_more=True))
    await ctl.wait_idle()

    ctl.load_more()
    await settle()
    controlled_gateway.last.resolve(FetchError("boom"))
    await ctl.wait_idle()

    assert surface.count("set_series") == 1


@pytest.mark.asyncio
async def test_resize_forwards_only_after_creation(controlled_gateway, make_bars, settle) -> None:
    ctl = AcquisitionController(controlled_gateway)
    surface = RecordingSurface()
    view = ChartView(ctl, surface, None)

    view.resize(640)
    assert surface.calls == []

    ctl.start()
    await settle()
    controlled_gateway.last.resolve(Page(bars=make_bars(3), page=1, has_more=False))
    await ctl.wait_idle()
    surface.calls.clear()

    view.resize(1024)
    view.resize(1024)
    assert surface.calls == [("resize", 1024), ("resize", 1024)]


@pytest.mark.asyncio
async def test_close_destroys_once_and_unsubscribes(controlled_gateway, make_bars, settle) -> None:
    ctl = AcquisitionController(controlled_gateway)
    surface = RecordingSurface()

    with ChartView(ctl, surface, None) as view:
        ctl.start()
        await settle()
        controlled_gateway.last.resolve(Page(bars=make_bars(3), page=1, has_more=True))
        await ctl.wait_idle()
        view.close()

    assert surface.count("destroy") == 1

    ctl.load_more()
    await settle()
    controlled_gateway.last.resolve(Page(bars=make_bars(3, start=3), page=2, has_more=False))
    await ctl.wait_idle()
    assert surface.count("set_series") == 1
    view.resize(10)
    assert surface.count("resize") == 0


def test_close_without_data_never_touches_surface(controlled_gateway) -> None:
    ctl = AcquisitionController(controlled_gateway)
    surface = RecordingSurface()
    view = ChartView(ctl, surface, None)
    view.close()
    assert surface.calls == []
