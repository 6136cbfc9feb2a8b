#file: wastewatch_ui/data_fetch.py

import os
import logging
from typing import Any, Dict, Optional

import aiohttp

FASTAPI_URL = os.getenv("FASTAPI_URL", "http://localhost:8000")


async def _get_json(path: str, params: Dict[str, Any]) -> Optional[Any]:
    url = f"{FASTAPI_URL}{path}"
    async with aiohttp.ClientSession() as session:
        try:
            async with session.get(url, params=params) as response:
                if response.status == 404:
                    return None
                response.raise_for_status()
                return await response.json()
        except aiohttp.ClientResponseError as e:
            logging.error(f"[ERROR] HTTP {e.status} for {path}: {e.message}")
        except aiohttp.ClientError as e:
            logging.error(f"[ERROR] Network request failed: {e}")
    return None


async def fetch_air_quality_state(city: str):
    """Fetch the monitored air quality state for a city."""
    return await _get_json("/air_quality/state", {"city": city})


async def fetch_report_map():
    """Fetch report markers and the map center."""
    return await _get_json("/reports/map", {})


async def search_location(query: str):
    """Resolve a place name; None when nothing matched or the service failed."""
    return await _get_json("/geocode/search", {"q": query})
