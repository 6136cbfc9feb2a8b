import json

import pytest

from fakes import make_reading
from wastewatch.aqi import classify
from wastewatch.cache import ReadingsCache, cache_key
from wastewatch.models import AirQualityResponse, Coordinate
from wastewatch.report_store import load_reports


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def sample_response():
    reading = make_reading()
    return AirQualityResponse(
        location=Coordinate(latitude=20.9374, longitude=77.7796),
        reading=reading,
        category=classify(reading.aqi),
        normalized_severity=reading.aqi / 3,
        timestamp="2026-10-18T09:00:00+00:00",
    )


def test_cache_key_prefers_coordinates():
    assert cache_key("Amravati", 20.9374, 77.7796) == "20.9374,77.7796"
    assert cache_key(" Amravati ") == "amravati"
    assert cache_key("Amravati", 20.9374, None) == "amravati"


def test_cache_entries_expire_after_ttl():
    clock = FakeClock()
    cache = ReadingsCache(ttl=1800, clock=clock)
    cache.set("amravati", sample_response())

    clock.now += 1799
    assert cache.get("amravati") is not None

    clock.now += 1
    assert cache.get("amravati") is None
    assert len(cache) == 0


def test_load_reports_reads_export(tmp_path):
    export = tmp_path / "reports.json"
    export.write_text(json.dumps([
        {"id": 1, "status": "completed", "latitude": "19.0", "longitude": "72.8", "imageUrl": "/a.jpg",
         "title": "Bin", "address": "Mumbai", "rewardPoints": 10},
        {"id": 2, "status": "pending", "latitude": 20.93, "longitude": 77.75},
        {"status": "pending"},
    ]), encoding="utf-8")

    reports = load_reports(str(export))

    assert [report.id for report in reports] == [1, 2]
    assert reports[0].image_url == "/a.jpg"
    assert reports[1].latitude == "20.93"


def test_load_reports_missing_file_is_empty(tmp_path):
    assert load_reports(str(tmp_path / "missing.json")) == []


def test_load_reports_rejects_non_list(tmp_path):
    export = tmp_path / "reports.json"
    export.write_text(json.dumps({"id": 1}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_reports(str(export))
