import logging
import os

import requests
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# API docs: https://api.checkwx.com/
CHECKWX_BASE = os.getenv("CHECKWX_BASE", "https://api.checkwx.com").rstrip("/")
CHECKWX_API_KEY = os.getenv("CHECKWX_API_KEY")
DEFAULT_TIMEOUT = 10.0


def _timeout_from_env() -> float:
    raw = os.getenv("CHECKWX_TIMEOUT")
    if raw is None:
        return DEFAULT_TIMEOUT
    try:
        timeout = float(raw)
    except ValueError:
        timeout = 0
    if not timeout > 0:
        logger.warning(f"⚠️ Invalid CHECKWX_TIMEOUT {raw!r}, using {DEFAULT_TIMEOUT}s")
        return DEFAULT_TIMEOUT
    return timeout


CHECKWX_TIMEOUT = _timeout_from_env()

logger.info(f"🔑 CHECKWX_API_KEY: {'configured' if CHECKWX_API_KEY else 'MISSING'}")


class WeatherAPIError(Exception):
    """The weather API could not produce exactly one METAR."""


def _headers() -> dict:
    return {
        "Accept": "application/json",
        "X-API-Key": CHECKWX_API_KEY,
    }


def validate_envelope(payload) -> str:
    """Return the single raw METAR from a CheckWX response body.

    The body looks like:
        {"results": 1, "data": ["CYTZ 051900Z AUTO 17011KT 9SM CLR 29/23 A3006 RMK SLP178"]}
    """
    if not isinstance(payload, dict):
        raise WeatherAPIError(f"Invalid response: {payload!r}")

    results = payload.get("results")
    # True == 1 in Python, the API only ever sends the integer
    if isinstance(results, bool) or results != 1:
        raise WeatherAPIError(f"Invalid result: {results}")

    data = payload.get("data")
    if not isinstance(data, list) or len(data) != 1:
        raise WeatherAPIError(f"Invalid data: {data!r}")

    metar = data[0]
    if not isinstance(metar, str):
        raise WeatherAPIError(f"Invalid data: {data!r}")
    return metar


def fetch_metar(icao: str) -> str:
    """Fetch the latest raw METAR text for a station."""
    if not CHECKWX_API_KEY:
        raise WeatherAPIError(f"CHECKWX_API_KEY not configured - cannot fetch METAR for {icao}")

    url = f"{CHECKWX_BASE}/metar/{icao.upper()}"
    logger.info(f"🌐 Fetching METAR: {url}")
    try:
        r = requests.get(url, headers=_headers(), timeout=CHECKWX_TIMEOUT)
    except requests.RequestException as e:
        raise WeatherAPIError(f"METAR request failed for {icao}: {e}") from e

    logger.info(f"📊 METAR Response Status: {r.status_code}")

    if r.status_code != 200:
        logger.error(f"❌ METAR API Error: {r.text}")
        raise WeatherAPIError(f"Network response was not ok ({r.status_code})")

    try:
        payload = r.json()
    except ValueError as e:
        raise WeatherAPIError(f"METAR response for {icao} is not JSON") from e

    return validate_envelope(payload)
