import io

import pytest
import requests

from liiga_teletext import __version__
from liiga_teletext.exceptions import ConfigError
from liiga_teletext.version import check_latest_version, is_newer, parse_version, print_version_info


class FakeResponse:
    def __init__(self, payload):
        self._payload = payload

    def raise_for_status(self):
        pass

    def json(self):
        return self._payload


def test_parse_version():
    assert parse_version("1.2.3") == (1, 2, 3)
    assert parse_version("v10.0.1") == (10, 0, 1)


@pytest.mark.parametrize("raw", ["1.2", "1.2.x", ""])
def test_invalid_versions(raw):
    with pytest.raises(ConfigError):
        parse_version(raw)


def test_is_newer():
    assert is_newer("1.0.1", "1.0.0")
    assert is_newer("1.10.0", "1.9.9")
    assert not is_newer("1.0.0", "1.0.0")


def test_check_latest_version(monkeypatch):
    monkeypatch.setattr(requests, "get", lambda url, timeout=None: FakeResponse({"info": {"version": "2.0.0"}}))
    assert check_latest_version() == "2.0.0"


def test_check_latest_version_offline(monkeypatch):
    def offline(url, timeout=None):
        raise requests.ConnectionError("offline")

    monkeypatch.setattr(requests, "get", offline)
    assert check_latest_version() is None


@pytest.mark.parametrize(
    "latest, expected",
    [
        (None, "Uusinta versiota ei voitu tarkistaa"),
        ("99.0.0", "Uusi versio saatavilla: 99.0.0"),
        (__version__, "Käytössä on uusin versio"),
    ],
)
def test_print_version_info(latest, expected):
    out = io.StringIO()
    print_version_info(latest, out)
    text = out.getvalue()
    assert f"Versio: {__version__}" in text
    assert expected in text
