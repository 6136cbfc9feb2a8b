# file: wastewatch/open_meteo.py

import asyncio
import logging
from typing import Any, Dict

import aiohttp

from wastewatch.errors import NetworkError
from wastewatch.models import Coordinate, PollutantReading, PollutantValue
from wastewatch.utils import get_current_time

AQI_FIELD = "us_aqi"
PARAM_MAPPING = {
    "pm2_5": "PM2.5",
    "pm10": "PM10",
    "carbon_monoxide": "CO",
    "nitrogen_dioxide": "NO₂",
    "ozone": "O₃",
    "sulphur_dioxide": "SO₂",
}
CURRENT_FIELDS = ",".join(list(PARAM_MAPPING) + [AQI_FIELD])

FALLBACK_VALUES = {
    "pm10": (45, "µg/m³"),
    "pm2_5": (25, "µg/m³"),
    "carbon_monoxide": (0.5, "mg/m³"),
    "nitrogen_dioxide": (20, "µg/m³"),
    "sulphur_dioxide": (5, "µg/m³"),
    "ozone": (30, "µg/m³"),
}
FALLBACK_AQI = 68


def fallback_reading() -> PollutantReading:
    """Fixed sample reading shown when live data cannot be loaded."""
    return PollutantReading(
        timestamp=get_current_time(),
        aqi=FALLBACK_AQI,
        components={name: PollutantValue(value=value, unit=unit) for name, (value, unit) in FALLBACK_VALUES.items()},
    )


def parse_current(payload: Dict[str, Any]) -> PollutantReading:
    """Convert an Open-Meteo ``current`` block into a reading."""
    if not isinstance(payload, dict):
        raise NetworkError("Air quality response was not a JSON object")
    current = payload.get("current") or {}
    units = payload.get("current_units") or {}
    aqi = current.get(AQI_FIELD)
    if aqi is None:
        raise NetworkError("Air quality response did not include us_aqi")

    components = {
        name: PollutantValue(value=float(current[name]), unit=units.get(name, ""))
        for name in PARAM_MAPPING
        if current.get(name) is not None
    }
    return PollutantReading(
        timestamp=current.get("time") or get_current_time(),
        aqi=max(0, int(round(float(aqi)))),
        components=components,
    )


class ReadingsClient:
    """Current pollutant readings for a coordinate."""

    def __init__(self, session: aiohttp.ClientSession, base_url: str):
        self._session = session
        self._base_url = base_url

    async def fetch_current(self, coordinate: Coordinate) -> PollutantReading:
        params = {
            "latitude": str(coordinate.latitude),
            "longitude": str(coordinate.longitude),
            "current": CURRENT_FIELDS,
        }
        try:
            async with self._session.get(self._base_url, params=params) as response:
                if response.status != 200:
                    logging.warning(f"Air quality request failed: HTTP {response.status}")
                    raise NetworkError(f"Air quality service returned HTTP {response.status}")
                payload = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise NetworkError(f"Could not reach the air quality service: {e}") from e
        except ValueError as e:
            raise NetworkError(f"Malformed air quality response: {e}") from e

        try:
            return parse_current(payload)
        except (TypeError, ValueError) as e:
            raise NetworkError(f"Unexpected air quality payload: {e}") from e
