import asyncio

import pytest

from fakes import AMRAVATI, OPEN_METEO_PAYLOAD, FakeGateway, FakeReadings, FakeResponse, FakeSession, make_reading, settle
from wastewatch.aggregator import EnvironmentalDataAggregator
from wastewatch.aqi import classify
from wastewatch.errors import NetworkError
from wastewatch.geocoding import GeocodingGateway
from wastewatch.models import AggregatorPhase
from wastewatch.open_meteo import FALLBACK_AQI, ReadingsClient

HOUR = 3600


async def first_states(aggregator, place_name, count=2):
    subscription = aggregator.subscribe(place_name)
    states = [await subscription.__anext__() for _ in range(count)]
    subscription.stop()
    await settle()
    remaining = [state async for state in subscription]
    return subscription, states, remaining


@pytest.mark.parametrize("gateway, readings, message", [
    (FakeGateway({"Amravati": NetworkError("offline")}), FakeReadings(), "Failed to fetch location data"),
    (FakeGateway(), FakeReadings(), "Location not found: Amravati"),
    (FakeGateway({"Amravati": AMRAVATI}), FakeReadings(NetworkError("HTTP 500")), "Failed to fetch air quality data"),
])
def test_failures_degrade_to_fallback_exactly_once(gateway, readings, message):
    aggregator = EnvironmentalDataAggregator(gateway, readings, refresh_interval=HOUR)

    subscription, states, remaining = asyncio.run(first_states(aggregator, "Amravati"))

    assert [state.phase for state in states] == [AggregatorPhase.LOADING, AggregatorPhase.DEGRADED]
    degraded = states[1]
    assert degraded.last_error == message
    assert degraded.data.aqi == FALLBACK_AQI
    assert degraded.data.components["pm2_5"].value == 25
    assert degraded.last_fetched_at is None
    assert remaining == []
    assert not subscription.running


def test_unexpected_errors_are_absorbed():
    gateway = FakeGateway({"Amravati": RuntimeError("demo failure")})
    aggregator = EnvironmentalDataAggregator(gateway, FakeReadings(), refresh_interval=HOUR)

    state = asyncio.run(aggregator.fetch_state("Amravati"))

    assert state.phase is AggregatorPhase.DEGRADED
    assert state.last_error == "Failed to load air quality data. Please try again later."
    assert state.data is not None


def test_ready_state_for_amravati_end_to_end():
    geocoder_session = FakeSession(FakeResponse(payload=[
        {"lat": "20.9374", "lon": "77.7796", "display_name": "Amravati, Maharashtra, India"},
    ]))
    readings_session = FakeSession(FakeResponse(payload=OPEN_METEO_PAYLOAD))
    aggregator = EnvironmentalDataAggregator(
        GeocodingGateway(geocoder_session, "https://nominatim.example.org"),
        ReadingsClient(readings_session, "https://air.example.org/v1/air-quality"),
        refresh_interval=HOUR,
    )

    _, states, _ = asyncio.run(first_states(aggregator, "Amravati"))

    ready = states[1]
    assert ready.phase is AggregatorPhase.READY
    assert ready.data.aqi == 68
    assert ready.last_error is None
    assert ready.last_fetched_at is not None
    assert classify(ready.data.aqi).label == "Moderate"
    assert classify(ready.data.aqi).severity_rank == 2
    assert readings_session.calls[0]["params"]["latitude"] == "20.9374"


def test_refresh_failure_after_success_keeps_last_good_reading():
    readings = FakeReadings(make_reading(aqi=42))
    aggregator = EnvironmentalDataAggregator(FakeGateway({"Amravati": AMRAVATI}), readings, refresh_interval=HOUR)

    async def scenario():
        subscription = aggregator.subscribe("Amravati")
        await subscription.__anext__()
        ready = await subscription.__anext__()
        readings.result = NetworkError("HTTP 502")
        degraded = await subscription.refresh()
        subscription.stop()
        return ready, degraded, subscription.state

    ready, degraded, current = asyncio.run(scenario())
    assert degraded.phase is AggregatorPhase.DEGRADED
    assert degraded.data.aqi == 42
    assert degraded.last_fetched_at == ready.last_fetched_at
    assert current == degraded


def test_timer_refreshes_until_stopped():
    readings = FakeReadings()
    aggregator = EnvironmentalDataAggregator(FakeGateway({"Amravati": AMRAVATI}), readings, refresh_interval=0.01)

    async def scenario():
        subscription = aggregator.subscribe("Amravati")
        states = [await asyncio.wait_for(subscription.__anext__(), timeout=1) for _ in range(4)]
        subscription.stop()
        await settle()
        calls = len(readings.calls)
        await asyncio.sleep(0.05)
        return states, calls, subscription

    states, calls, subscription = asyncio.run(scenario())
    assert [state.phase for state in states] == [AggregatorPhase.LOADING] + [AggregatorPhase.READY] * 3
    assert not subscription.running
    assert len(readings.calls) == calls


def test_observe_tears_down_timer_on_close():
    aggregator = EnvironmentalDataAggregator(FakeGateway({"Amravati": AMRAVATI}), FakeReadings(), refresh_interval=HOUR)

    async def scenario():
        before = len(asyncio.all_tasks())
        stream = aggregator.observe("Amravati")
        loading = await stream.__anext__()
        ready = await stream.__anext__()
        await stream.aclose()
        await settle()
        return loading, ready, len(asyncio.all_tasks()) - before

    loading, ready, leftover_tasks = asyncio.run(scenario())
    assert loading.phase is AggregatorPhase.LOADING
    assert ready.phase is AggregatorPhase.READY
    assert leftover_tasks == 0


def test_subscription_cannot_start_twice():
    aggregator = EnvironmentalDataAggregator(FakeGateway(), FakeReadings(), refresh_interval=HOUR)

    async def scenario():
        subscription = aggregator.subscribe("Amravati")
        try:
            with pytest.raises(RuntimeError):
                subscription.start()
        finally:
            subscription.stop()

    asyncio.run(scenario())
