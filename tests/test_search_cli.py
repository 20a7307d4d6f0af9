import argparse

import pytest

from locator.core.config import Settings
from locator.core.errors import DeviceErrorKind, DeviceLocationError
from locator.core.models import Entity, ScoredEntity, SortMode
from locator.core.session import SearchStatus
from locator.jobs import search_cli


def test_build_parser_defaults(monkeypatch):
    monkeypatch.setattr(search_cli, "get_settings", lambda: Settings(data_source="x", default_radius_miles=15.0))
    parser = search_cli.build_parser()
    args = parser.parse_args(["17055"])
    assert isinstance(parser, argparse.ArgumentParser)
    assert args.text == "17055"
    assert args.radius == 15.0
    assert args.sort_mode == "distance"
    assert args.use_device_location is False


def test_format_results():
    results = [
        ScoredEntity(Entity(name="Grace", address="1 Main St", city="Carlisle", zip="17013"), 1.234),
    ]
    lines = search_cli.format_results(results, SearchStatus.OK)
    assert lines[0] == "1 results found."
    assert "Grace" in lines[1] and "1 Main St, Carlisle, 17013" in lines[1] and "1.2 mi" in lines[1]

    assert search_cli.format_results([], SearchStatus.OK) == ["No results found."]
    assert search_cli.format_results([], SearchStatus.ZIP_NOT_FOUND) == ["That ZIP code is not in the directory."]


def test_main_prints_results(monkeypatch, capsys):
    monkeypatch.setattr(search_cli, "get_settings", lambda: Settings(data_source="x"))
    captured = {}

    async def fake_run_search(**kwargs):
        captured.update(kwargs)
        return ["1 results found.", "line"]

    monkeypatch.setattr(search_cli, "run_search", fake_run_search)

    assert search_cli.main(["Carlisle, PA", "--radius", "10", "--sort", "name"]) == 0
    assert capsys.readouterr().out.splitlines() == ["1 results found.", "line"]
    assert captured == {
        "text": "Carlisle, PA",
        "radius": 10.0,
        "sort_mode": SortMode.NAME,
        "use_device_location": False,
    }


def test_main_reports_device_failure(monkeypatch):
    monkeypatch.setattr(search_cli, "get_settings", lambda: Settings(data_source="x"))

    async def failing_run_search(**kwargs):
        raise DeviceLocationError(DeviceErrorKind.TIMEOUT)

    monkeypatch.setattr(search_cli, "run_search", failing_run_search)
    assert search_cli.main(["--use-device-location"]) == 1


def test_main_rejects_negative_radius(monkeypatch):
    monkeypatch.setattr(search_cli, "get_settings", lambda: Settings(data_source="x"))
    with pytest.raises(SystemExit):
        search_cli.main(["17055", "--radius", "-3"])
