"""
Tests for the HTTP endpoints.

The upstream fetch is patched out; only routing, serialization and error
mapping are exercised.
"""

import os
import runpy
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

os.environ.setdefault("ALLOWED_HOSTS", "testserver")
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from fastapi.testclient import TestClient

import main
from services.weather import WeatherAPIError

RAW = "CYTZ 051900Z AUTO 17011KT 9SM CLR 29/23 A3006 RMK SLP178"


@pytest.fixture
def client():
    return TestClient(main.app)


class TestHealth:

    def test_health(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "ok"
        assert "checkwx_configured" in body


class TestDecode:
    """POST /metar/decode parses a raw report from the request body."""

    def test_decode(self, client):
        resp = client.post("/metar/decode", json={"metar": "METAR CYTZ 051900Z 17011G20KT"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["METAR"] == "METAR CYTZ 051900Z 17011G20KT"
        assert body["parsedMETAR"] == {
            "reportType": "METAR",
            "ICAO": "CYTZ",
            "timestamp": {"dayOfMonth": "05", "hours": "19", "mins": "00", "timezone": "Z"},
            "wind": {"direction": "170", "speed": "11", "gustingSpeed": "20", "speedUnits": "KT"},
        }
        assert body["diagnostics"] == []
        assert body["unparsed"] == []

    def test_decode_reports_discarded_tokens(self, client):
        body = client.post("/metar/decode", json={"metar": "CYTZ BADTIME AUTO 17011KT"}).json()
        assert "timestamp" not in body["parsedMETAR"]
        assert body["parsedMETAR"]["modifier"] == "AUTO"
        assert body["diagnostics"][0]["field"] == "timestamp"
        assert body["diagnostics"][0]["token"] == "BADTIME"

    def test_blank_report(self, client):
        resp = client.post("/metar/decode", json={"metar": "   "})
        assert resp.status_code == 400

    def test_non_string_report(self, client):
        resp = client.post("/metar/decode", json={"metar": 17011})
        assert resp.status_code == 422


class TestStationMetar:
    """GET /metar/{icao} fetches then decodes."""

    def test_station(self, client):
        with patch("main.fetch_metar", return_value=RAW) as mock_fetch:
            resp = client.get("/metar/CYTZ")
        mock_fetch.assert_called_once_with("CYTZ")
        assert resp.status_code == 200
        body = resp.json()
        assert body["METAR"] == RAW
        assert body["parsedMETAR"]["wind"]["speed"] == "11"
        assert body["unparsed"][0] == "9SM"

    def test_default_station(self, client):
        with patch("main.fetch_metar", return_value=RAW) as mock_fetch:
            resp = client.get("/metar")
        mock_fetch.assert_called_once_with(main.DEFAULT_STATION)
        assert resp.status_code == 200

    def test_upstream_failure(self, client):
        with patch("main.fetch_metar", side_effect=WeatherAPIError("Invalid result: 0")):
            resp = client.get("/metar/CYTZ")
        assert resp.status_code == 502
        assert resp.json()["detail"] == "Invalid result: 0"

    def test_upstream_blank_report(self, client):
        with patch("main.fetch_metar", return_value=""):
            resp = client.get("/metar/CYTZ")
        assert resp.status_code == 422

    def test_text(self, client):
        with patch("main.fetch_metar", return_value=RAW):
            resp = client.get("/metar/CYTZ/text")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/plain")
        assert resp.text.splitlines()[0] == RAW


def test_run_as_script_serves_app():
    """Running main.py directly hands the app to uvicorn."""
    with patch("uvicorn.run") as mock_run, \
            patch.dict("os.environ", {"HOST": "0.0.0.0", "PORT": "9000"}):
        runpy.run_path(str(Path(main.__file__)), run_name="__main__")
    args, kwargs = mock_run.call_args
    assert args[0].title == "METAR Decoder"
    assert kwargs == {"host": "0.0.0.0", "port": 9000}
