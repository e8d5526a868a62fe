from __future__ import annotations

import pytest
from pydantic import ValidationError

from tickerview.infrastructure.external_apis.polygon.settings import PolygonSettings


def test_defaults() -> None:
    cfg = PolygonSettings()
    assert cfg.base_url == "https://api.polygon.io"
    assert cfg.timeout_s == 8.0
    assert cfg.page_size == 100
    assert cfg.lookback_years == 2
    assert cfg.has_api_key is False


def test_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("POLYGON_API_KEY", "abc")
    monkeypatch.setenv("POLYGON_PAGE_SIZE", "250")
    monkeypatch.setenv("POLYGON_TIMEOUT_S", "2.5")

    cfg = PolygonSettings()

    assert cfg.has_api_key is True
    assert cfg.page_size == 250
    assert cfg.timeout_s == 2.5
    assert "abc" not in repr(cfg)


def test_blank_key_is_not_a_key() -> None:
    assert PolygonSettings(api_key="   ").has_api_key is False  # type: ignore[arg-type]


@pytest.mark.parametrize("field", [{"page_size": 0}, {"timeout_s": 0}, {"lookback_years": 0}])
def test_rejects_out_of_range(field: dict[str, int]) -> None:
    with pytest.raises(ValidationError):
        PolygonSettings(**field)  # type: ignore[arg-type]
