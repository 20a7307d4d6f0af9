import pytest
import requests

from locator.core.config import Settings
from locator.core.errors import DeviceErrorKind, DeviceLocationError
from locator.core.models import Coordinate, PositionOptions
from locator.vendors import device_location


class DummyResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload or {}

    def json(self):
        return self._payload


class DummySession:
    def __init__(self):
        self.calls = []
        self.response = DummyResponse()

    def get(self, url, timeout=None):
        self.calls.append((url, timeout))
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


@pytest.fixture(autouse=True)
def patch_session(monkeypatch):
    session = DummySession()
    monkeypatch.setattr(device_location, "_SESSION", session)
    return session


def test_ip_locator_parses_loc(patch_session):
    patch_session.response = DummyResponse(payload={"loc": "40.2,-77.0"})
    locator = device_location.IpDeviceLocator("https://ip.test/json")
    point = locator.get_current_position(PositionOptions(timeout_ms=2000))
    assert point == Coordinate(40.2, -77.0)
    assert patch_session.calls == [("https://ip.test/json", 2.0)]


def test_ip_locator_honours_max_age(patch_session):
    patch_session.response = DummyResponse(payload={"latitude": 40.2, "longitude": -77.0})
    locator = device_location.IpDeviceLocator("https://ip.test/json")
    locator.get_current_position(PositionOptions(max_age_ms=60000))
    locator.get_current_position(PositionOptions(max_age_ms=60000))
    assert len(patch_session.calls) == 1

    locator.get_current_position(PositionOptions(max_age_ms=0))
    assert len(patch_session.calls) == 2


@pytest.mark.parametrize(
    "response, kind",
    [
        (requests.Timeout("slow"), DeviceErrorKind.TIMEOUT),
        (requests.ConnectionError("down"), DeviceErrorKind.UNAVAILABLE),
        (DummyResponse(status_code=403), DeviceErrorKind.PERMISSION_DENIED),
        (DummyResponse(status_code=500), DeviceErrorKind.UNAVAILABLE),
        (DummyResponse(payload={"city": "Somewhere"}), DeviceErrorKind.UNAVAILABLE),
    ],
)
def test_ip_locator_errors(patch_session, response, kind):
    patch_session.response = response
    locator = device_location.IpDeviceLocator("https://ip.test/json")
    with pytest.raises(DeviceLocationError) as excinfo:
        locator.get_current_position(PositionOptions())
    assert excinfo.value.kind is kind


def test_static_locator():
    point = Coordinate(40.0, -76.6)
    assert device_location.StaticDeviceLocator(point).get_current_position(PositionOptions()) == point
    with pytest.raises(DeviceLocationError) as excinfo:
        device_location.StaticDeviceLocator(None).get_current_position(PositionOptions())
    assert excinfo.value.kind is DeviceErrorKind.UNAVAILABLE


def test_parse_ip_payload_rejects_out_of_range():
    with pytest.raises(ValueError):
        device_location.parse_ip_payload({"loc": "95.0,10.0"})


def test_build_device_locator():
    ip = device_location.build_device_locator(Settings(data_source="x", device_locator="ip"))
    assert isinstance(ip, device_location.IpDeviceLocator)

    static = device_location.build_device_locator(
        Settings(data_source="x", device_locator="static", device_latitude=1.0, device_longitude=2.0)
    )
    assert static.point == Coordinate(1.0, 2.0)

    disabled = device_location.build_device_locator(Settings(data_source="x", device_locator="none"))
    assert disabled.point is None
