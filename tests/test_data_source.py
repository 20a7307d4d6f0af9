import json

import pytest
import requests

from locator.core.errors import DataSourceError
from locator.vendors import data_source


class DummyResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError("http error")

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class DummySession:
    def __init__(self):
        self.calls = []
        self.response = None

    def get(self, url, timeout=None):
        self.calls.append((url, timeout))
        return self.response


@pytest.fixture(autouse=True)
def patch_session(monkeypatch):
    session = DummySession()
    monkeypatch.setattr(data_source, "_SESSION", session)
    return session


def test_remote_list_payload(patch_session):
    patch_session.response = DummyResponse(payload=[{"name": "A"}, {"name": "B"}])
    source = data_source.JsonDataSource("https://example.com/churches.json", timeout=3)
    assert source.fetch() == [{"name": "A"}, {"name": "B"}]
    assert patch_session.calls == [("https://example.com/churches.json", 3)]


def test_remote_envelope_payload(patch_session):
    patch_session.response = DummyResponse(payload={"churches": [{"name": "A"}]})
    source = data_source.JsonDataSource("https://example.com/churches.json")
    assert source.fetch() == [{"name": "A"}]


def test_remote_failures_raise_data_source_error(patch_session):
    source = data_source.JsonDataSource("https://example.com/churches.json")

    patch_session.response = DummyResponse(status_code=500)
    with pytest.raises(DataSourceError):
        source.fetch()

    patch_session.response = DummyResponse(payload=ValueError("not json"))
    with pytest.raises(DataSourceError):
        source.fetch()

    patch_session.response = DummyResponse(payload={"unexpected": True})
    with pytest.raises(DataSourceError):
        source.fetch()


def test_local_file(tmp_path):
    path = tmp_path / "churches.json"
    path.write_text(json.dumps([{"name": "Local"}]), encoding="utf-8")
    source = data_source.JsonDataSource(str(path), prevalidated=True)
    assert not source.is_remote
    assert source.prevalidated is True
    assert source.fetch() == [{"name": "Local"}]


def test_missing_local_file(tmp_path):
    source = data_source.JsonDataSource(str(tmp_path / "missing.json"))
    with pytest.raises(DataSourceError):
        source.fetch()


def test_location_required():
    with pytest.raises(ValueError):
        data_source.JsonDataSource("")
