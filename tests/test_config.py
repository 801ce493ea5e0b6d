from __future__ import annotations

import pytest

from pytacmon.config import TrackerConfig
from pytacmon.engine import TrackingEngine
from pytacmon.exceptions import TacmonConfigError
from pytacmon.sources import MockSnapshotSource


def test_defaults() -> None:
    config = TrackerConfig()

    assert config.radius_km == 50.0
    assert config.poll_interval == 5.0
    assert config.cache_bust is True
    assert config.observer is None


def test_from_env(monkeypatch) -> None:
    monkeypatch.setenv("TACMON_RADIUS_KM", "12.5")
    monkeypatch.setenv("TACMON_SNAPSHOT_URL", "https://feed.example/data.json")
    monkeypatch.setenv("TACMON_OBSERVER_LAT", "50.45")
    monkeypatch.setenv("TACMON_OBSERVER_LNG", "30.52")
    monkeypatch.setenv("TACMON_CACHE_BUST", "off")
    monkeypatch.setenv("TACMON_LOG_CAPACITY", "20")

    config = TrackerConfig.from_env()

    assert config.radius_km == 12.5
    assert config.snapshot_url == "https://feed.example/data.json"
    assert config.cache_bust is False
    assert config.log_capacity == 20
    assert config.observer is not None
    assert (config.observer.lat, config.observer.lng) == (50.45, 30.52)


def test_overrides_win_over_env(monkeypatch) -> None:
    monkeypatch.setenv("TACMON_RADIUS_KM", "12.5")

    assert TrackerConfig.from_env(radius_km=3.0).radius_km == 3.0


def test_unparseable_number_raises_config_error(monkeypatch) -> None:
    monkeypatch.setenv("TACMON_POLL_INTERVAL", "soon")

    with pytest.raises(TacmonConfigError, match="TACMON_POLL_INTERVAL"):
        TrackerConfig.from_env()


def test_out_of_range_observer_raises_config_error() -> None:
    with pytest.raises(TacmonConfigError):
        _ = TrackerConfig(observer_lat=95.0, observer_lng=0.0).observer


def test_engine_from_config() -> None:
    config = TrackerConfig(radius_km=7.0, observer_lat=1.0, observer_lng=2.0)

    engine = TrackingEngine.from_config(config, source=MockSnapshotSource())

    assert engine.radius_km == 7.0
    assert engine.observer is not None and engine.observer.lat == 1.0


def test_engine_from_config_rejects_bad_radius() -> None:
    with pytest.raises(TacmonConfigError):
        TrackingEngine.from_config(TrackerConfig(radius_km=0.0), source=MockSnapshotSource())
