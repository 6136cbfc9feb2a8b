# file: wastewatch/main.py

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Query, WebSocket, WebSocketDisconnect
from fastapi.requests import HTTPConnection

from wastewatch import config
from wastewatch.aggregator import EnvironmentalDataAggregator
from wastewatch.aqi import classify, normalized_severity
from wastewatch.cache import ReadingsCache, cache_key
from wastewatch.errors import NetworkError, NotFoundError
from wastewatch.geocoding import GeocodingGateway
from wastewatch.markers import render_markers
from wastewatch.models import (
    AggregatorState,
    AirQualityResponse,
    Coordinate,
    LocationSource,
    MapView,
    Report,
    ResolvedLocation,
)
from wastewatch.open_meteo import ReadingsClient
from wastewatch.picker import PickerSession
from wastewatch.report_store import load_reports
from wastewatch.utils import create_session, get_current_time

# Configure logging
logging.basicConfig(level=config.LOG_LEVEL, format='%(asctime)s - %(levelname)s - %(message)s')

DEVICE_POSITION_TIMEOUT_SECONDS = 30


@asynccontextmanager
async def lifespan(app: FastAPI) :
    """Open one shared HTTP session for the providers and close it on shutdown."""
    session = create_session(config.HTTP_TIMEOUT_SECONDS, config.GEOCODER_USER_AGENT)
    gateway = GeocodingGateway(session, config.NOMINATIM_URL)
    readings = ReadingsClient(session, config.AIR_QUALITY_URL)
    app.state.gateway = gateway
    app.state.readings = readings
    app.state.aggregator = EnvironmentalDataAggregator(gateway, readings, config.AQ_REFRESH_INTERVAL_SECONDS)
    app.state.cache = ReadingsCache(config.AQ_CACHE_TTL_SECONDS)
    try :
        yield
    finally :
        await session.close()


app = FastAPI(
    title = "WasteWatch - Geo & Air Quality",
    description = "Location resolution, air quality monitoring and report map markers for WasteWatch.",
    version = "0.1",
    lifespan = lifespan
)


def get_gateway(connection: HTTPConnection) -> GeocodingGateway :
    return connection.app.state.gateway


def get_readings(connection: HTTPConnection) -> ReadingsClient :
    return connection.app.state.readings


def get_aggregator(connection: HTTPConnection) -> EnvironmentalDataAggregator :
    return connection.app.state.aggregator


def get_cache(connection: HTTPConnection) -> ReadingsCache :
    return connection.app.state.cache


def get_default_location() -> ResolvedLocation :
    return ResolvedLocation(
        coordinate = Coordinate(latitude = config.DEFAULT_LATITUDE, longitude = config.DEFAULT_LONGITUDE),
        address = config.DEFAULT_ADDRESS,
        source = LocationSource.INITIAL,
    )


def get_reports() -> List[Report] :
    return load_reports(config.REPORTS_FILE)


async def _cancel_task(task: asyncio.Task) -> None :
    """Cancel a websocket helper task and collect its outcome."""
    task.cancel()
    try :
        await task
    except asyncio.CancelledError :
        pass
    except Exception as e :
        logging.warning(f"Websocket task ended with an error: {e}")


@app.get("/air_quality", response_model=AirQualityResponse)
async def air_quality(
    city: str = Query(..., min_length=1, description="City name"),
    lat: Optional[float] = Query(None, ge=-90, le=90, description="Latitude, skips geocoding together with lon"),
    lon: Optional[float] = Query(None, ge=-180, le=180, description="Longitude, skips geocoding together with lat"),
    gateway: GeocodingGateway = Depends(get_gateway),
    readings: ReadingsClient = Depends(get_readings),
    cache: ReadingsCache = Depends(get_cache),
):
    """Current air quality for a city or coordinate, cached for 30 minutes."""
    key = cache_key(city, lat, lon)
    cached = cache.get(key)
    if cached is not None:
        logging.debug(f"Serving air quality for {key} from cache")
        return cached.model_copy(update={"cached": True})

    try:
        if lat is not None and lon is not None:
            coordinate = Coordinate(latitude=lat, longitude=lon)
        else:
            coordinate = (await gateway.forward_search(city)).coordinate
        reading = await readings.fetch_current(coordinate)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Location not found")
    except NetworkError as e:
        logging.error(f"Air quality API error: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch air quality data")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid input: {e}")

    result = AirQualityResponse(
        location=coordinate,
        reading=reading,
        category=classify(reading.aqi),
        normalized_severity=normalized_severity(reading.aqi),
        timestamp=get_current_time(),
    )
    cache.set(key, result)
    return result


@app.get("/air_quality/state", response_model=AggregatorState)
async def air_quality_state(
    city: str = Query(..., min_length=1),
    aggregator: EnvironmentalDataAggregator = Depends(get_aggregator),
):
    """One refresh of the monitored view; failures come back as a DEGRADED state."""
    return await aggregator.fetch_state(city)


@app.websocket("/air_quality/stream")
async def air_quality_stream(
    websocket: WebSocket,
    city: str = Query(..., min_length=1),
    aggregator: EnvironmentalDataAggregator = Depends(get_aggregator),
):
    """Push aggregator states for a city until the client disconnects."""
    await websocket.accept()
    states = aggregator.observe(city)

    async def pump() -> None:
        try:
            async for state in states:
                await websocket.send_json(state.model_dump(mode="json"))
        finally:
            await states.aclose()

    pump_task = asyncio.create_task(pump())
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logging.info(f"Air quality stream for {city!r} closed by client")
    finally:
        await _cancel_task(pump_task)


@app.websocket("/location/picker")
async def location_picker(
    websocket: WebSocket,
    gateway: GeocodingGateway = Depends(get_gateway),
    initial: ResolvedLocation = Depends(get_default_location),
):
    """Interactive location picker: search, drag and device location over one socket."""
    await websocket.accept()
    session = PickerSession(gateway, initial, device_timeout=DEVICE_POSITION_TIMEOUT_SECONDS)

    async def send_updates() -> None:
        while True:
            message = await session.outbox.get()
            await websocket.send_json(message)

    sender = asyncio.create_task(send_updates())
    try:
        while True:
            message: Dict[str, Any] = await websocket.receive_json()
            if not isinstance(message, dict):
                continue
            session.handle(message)
    except WebSocketDisconnect:
        logging.info("Location picker closed by client")
    finally:
        session.close()
        await _cancel_task(sender)


@app.get("/geocode/search", response_model=ResolvedLocation)
async def geocode_search(
    q: str = Query(..., min_length=1, description="Free-text place name"),
    gateway: GeocodingGateway = Depends(get_gateway),
):
    """First match for a place name."""
    try:
        return await gateway.forward_search(q)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Location not found")
    except NetworkError as e:
        logging.error(f"Geocoding failed for {q!r}: {e}")
        raise HTTPException(status_code=502, detail="Could not connect to the location service")
    except ValueError:
        raise HTTPException(status_code=400, detail="Search query must not be empty")


@app.get("/geocode/reverse")
async def geocode_reverse(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    gateway: GeocodingGateway = Depends(get_gateway),
):
    """Address for a coordinate; falls back to a placeholder instead of failing."""
    try:
        coordinate = Coordinate(latitude=lat, longitude=lon)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid coordinate: {e}")
    return {"address": await gateway.reverse_resolve(coordinate)}


@app.get("/aqi/classify")
async def aqi_classify(aqi: float = Query(..., ge=0, description="US AQI value")):
    """Severity category and gauge fill for an AQI value."""
    return {"category": classify(aqi), "normalized_severity": normalized_severity(aqi)}


@app.get("/reports/map", response_model=MapView)
async def reports_map(
    reports: List[Report] = Depends(get_reports),
    default_location: ResolvedLocation = Depends(get_default_location),
):
    """Markers for every stored report with usable coordinates."""
    return render_markers(reports, default_location.coordinate)


@app.post("/reports/markers", response_model=MapView)
async def reports_markers(
    reports: List[Report],
    default_location: ResolvedLocation = Depends(get_default_location),
):
    """Markers for a posted list of reports."""
    return render_markers(reports, default_location.coordinate)


if __name__ == "__main__" :
    uvicorn.run(app, host = "0.0.0.0", port = 8000, log_level="info")
