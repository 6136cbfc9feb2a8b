# file: wastewatch/aggregator.py

import asyncio
import logging
from typing import AsyncIterator, Optional, Tuple

from wastewatch.errors import (
    GeoError,
    GeocodeTransportError,
    LocationNotFound,
    NetworkError,
    NotFoundError,
    ReadingsTransportError,
)
from wastewatch.geocoding import GeocodingGateway
from wastewatch.models import AggregatorPhase, AggregatorState, PollutantReading
from wastewatch.open_meteo import ReadingsClient, fallback_reading
from wastewatch.utils import get_current_time


class EnvironmentalDataAggregator:
    """Place name -> coordinates -> current readings, folded into one display state."""

    def __init__(self, gateway: GeocodingGateway, readings: ReadingsClient, refresh_interval: float):
        self._gateway = gateway
        self._readings = readings
        self.refresh_interval = refresh_interval

    async def _load(self, place_name: str) -> PollutantReading:
        try:
            location = await self._gateway.forward_search(place_name)
        except (NotFoundError, ValueError) as e:
            raise LocationNotFound(f"Location not found: {place_name}") from e
        except NetworkError as e:
            raise GeocodeTransportError("Failed to fetch location data") from e

        try:
            return await self._readings.fetch_current(location.coordinate)
        except NetworkError as e:
            raise ReadingsTransportError("Failed to fetch air quality data") from e

    async def fetch_state(
        self,
        place_name: str,
        last_good: Optional[Tuple[PollutantReading, str]] = None,
    ) -> AggregatorState:
        """Run the lookup chain once. Failures become a DEGRADED state, never an exception."""
        try:
            reading = await self._load(place_name)
        except GeoError as e:
            logging.warning(f"Air quality for {place_name!r} degraded: {e}")
            error = str(e)
        except Exception as e:
            logging.error(f"Unexpected error loading air quality for {place_name!r}: {e}")
            error = "Failed to load air quality data. Please try again later."
        else:
            return AggregatorState(phase=AggregatorPhase.READY, data=reading, last_fetched_at=get_current_time())

        if last_good is not None:
            reading, fetched_at = last_good
            return AggregatorState(phase=AggregatorPhase.DEGRADED, data=reading, last_error=error,
                                   last_fetched_at=fetched_at)
        return AggregatorState(phase=AggregatorPhase.DEGRADED, data=fallback_reading(), last_error=error)

    def subscribe(self, place_name: str) -> "Subscription":
        subscription = Subscription(self, place_name)
        subscription.start()
        return subscription

    async def observe(self, place_name: str) -> AsyncIterator[AggregatorState]:
        """Stream states for a place until the consumer stops iterating."""
        subscription = self.subscribe(place_name)
        try:
            async for state in subscription:
                yield state
        finally:
            subscription.stop()


class Subscription:
    """Live state slot for one place, refreshed on a timer until stopped."""

    def __init__(self, aggregator: EnvironmentalDataAggregator, place_name: str):
        self.place_name = place_name
        self.state = AggregatorState(phase=AggregatorPhase.LOADING)
        self._aggregator = aggregator
        self._updates: asyncio.Queue = asyncio.Queue()
        self._timer: Optional[asyncio.Task] = None
        self._stopped = False
        self._last_good: Optional[Tuple[PollutantReading, str]] = None

    @property
    def running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def start(self) -> None:
        if self._timer is not None or self._stopped:
            raise RuntimeError("Subscription can only be started once")
        logging.info(f"Monitoring air quality for {self.place_name!r}")
        self._publish(self.state)
        self._timer = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        while True:
            await self.refresh()
            await asyncio.sleep(self._aggregator.refresh_interval)

    async def refresh(self) -> AggregatorState:
        """Refresh now. Overlapping refreshes are fine: the last one to finish wins."""
        state = await self._aggregator.fetch_state(self.place_name, last_good=self._last_good)
        if self._stopped:
            return state
        if state.phase is AggregatorPhase.READY:
            self._last_good = (state.data, state.last_fetched_at)
        self._publish(state)
        return state

    def _publish(self, state: AggregatorState) -> None:
        self.state = state
        self._updates.put_nowait(state)

    def stop(self) -> None:
        if self._stopped:
            return
        self._stopped = True
        if self._timer is not None:
            self._timer.cancel()
        self._updates.put_nowait(None)
        logging.info(f"Stopped monitoring air quality for {self.place_name!r}")

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> AggregatorState:
        state = await self._updates.get()
        if state is None:
            raise StopAsyncIteration
        return state
