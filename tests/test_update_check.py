from types import SimpleNamespace
from unittest.mock import patch

import requests

from gitp.update_check import fetch_latest_version, is_newer


class DummyResponse(SimpleNamespace):
    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code}")

    def json(self):
        return self.payload


def test_fetch_latest_version(monkeypatch):
    monkeypatch.delenv("GITP_NO_UPDATE_CHECK")
    response = DummyResponse(status_code=200, payload={"info": {"version": "2.0.1"}})
    with patch("requests.get", return_value=response) as get:
        assert fetch_latest_version() == "2.0.1"
    assert get.call_args.args[0] == "https://pypi.org/pypi/gitp/json"


def test_fetch_latest_version_failures(monkeypatch):
    monkeypatch.delenv("GITP_NO_UPDATE_CHECK")
    with patch("requests.get", side_effect=requests.ConnectionError("offline")):
        assert fetch_latest_version() is None
    with patch("requests.get", return_value=DummyResponse(status_code=404, payload={})):
        assert fetch_latest_version() is None
    with patch("requests.get", return_value=DummyResponse(status_code=200, payload={})):
        assert fetch_latest_version() is None


def test_disabled_by_environment():
    with patch("requests.get") as get:
        assert fetch_latest_version() is None
    get.assert_not_called()


def test_is_newer():
    assert is_newer("1.10.0", "1.9.3")
    assert is_newer("2.0", "1.4.0")
    assert not is_newer("1.4.0", "1.4.0")
    assert not is_newer("1.3.9", "1.4.0")
    assert not is_newer(None, "1.4.0")


def test_pre_releases_are_not_newer_than_the_release():
    assert not is_newer("1.4.0rc1", "1.4.0")
    assert not is_newer("1.4.0.dev3", "1.4.0")
    assert is_newer("1.5.0b1", "1.4.0")
