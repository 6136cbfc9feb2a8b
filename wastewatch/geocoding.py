# file: wastewatch/geocoding.py

import asyncio
import logging
from collections import OrderedDict
from typing import Any, Dict, Optional, Tuple

import aiohttp

from wastewatch.errors import GeoError, NetworkError, NotFoundError
from wastewatch.models import Coordinate, LocationSource, ResolvedLocation

ADDRESS_NOT_FOUND = "Address not found"
CURRENT_LOCATION = "Current Location"


class GeocodingGateway:
    """Forward and reverse lookups against a Nominatim-compatible provider.

    Forward search reports failures to the caller. Reverse lookups are
    cosmetic: they always return a string and never raise.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        base_url: str,
        not_found_address: str = ADDRESS_NOT_FOUND,
        memo_size: int = 256,
    ):
        self._session = session
        self._base_url = base_url.rstrip("/")
        self._not_found_address = not_found_address
        self._memo: "OrderedDict[Tuple[float, float], str]" = OrderedDict()
        self._memo_size = memo_size

    async def _get_json(self, path: str, params: Dict[str, str]) -> Any:
        url = f"{self._base_url}/{path}"
        try:
            async with self._session.get(url, params=params) as response:
                if response.status != 200:
                    raise NetworkError(f"Geocoding service returned HTTP {response.status}")
                return await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise NetworkError(f"Could not connect to the location service: {e}") from e
        except ValueError as e:
            raise NetworkError(f"Malformed response from the location service: {e}") from e

    async def forward_search(self, query: str) -> ResolvedLocation:
        """Resolve a place name to the first matching location."""
        query = query.strip()
        if not query:
            raise ValueError("Search query must not be empty")

        results = await self._get_json("search", {"format": "json", "q": query, "limit": "1"})
        if not isinstance(results, list) or not results:
            logging.info(f"No geocoding results for {query!r}")
            raise NotFoundError(f"Location not found: {query}")

        first = results[0]
        try:
            coordinate = Coordinate(latitude=float(first["lat"]), longitude=float(first["lon"]))
            address = first.get("display_name") or query
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise NetworkError(f"Unexpected search result for {query!r}: {e}") from e
        return ResolvedLocation(coordinate=coordinate, address=address, source=LocationSource.SEARCH)

    async def reverse_resolve(self, coordinate: Coordinate, fallback: Optional[str] = None) -> str:
        """Best-effort coordinate to address lookup."""
        fallback = fallback or self._not_found_address
        key = coordinate.rounded_key()
        if key in self._memo:
            self._memo.move_to_end(key)
            return self._memo[key]

        params = {
            "format": "json",
            "lat": str(coordinate.latitude),
            "lon": str(coordinate.longitude),
        }
        try:
            payload = await self._get_json("reverse", params)
        except GeoError as e:
            logging.warning(f"Reverse geocoding failed for {key}: {e}")
            return fallback

        address = payload.get("display_name") if isinstance(payload, dict) else None
        if not address:
            return fallback

        self._memo[key] = address
        if len(self._memo) > self._memo_size:
            self._memo.popitem(last=False)
        return address
