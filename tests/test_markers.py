import pytest

from wastewatch.markers import render_markers, report_coordinate
from wastewatch.models import Coordinate, MarkerStyle, Report

CITY = Coordinate(latitude=20.9374, longitude=77.7796)


def test_sentinel_coordinates_are_filtered():
    reports = [
        Report(id=1, status="completed", latitude="19.0", longitude="72.8"),
        Report(id=2, status="pending", latitude="0", longitude="0"),
    ]

    view = render_markers(reports, CITY)

    assert [marker.report_id for marker in view.markers] == [1]
    assert view.center == Coordinate(latitude=19.0, longitude=72.8)


@pytest.mark.parametrize("latitude, longitude", [
    (None, None),
    ("", ""),
    ("19.0", None),
    ("0", "72.8"),
    ("0.0", "0.0"),
    ("north", "east"),
    ("95.0", "72.8"),
])
def test_unusable_coordinates(latitude, longitude):
    assert report_coordinate(Report(id=1, latitude=latitude, longitude=longitude)) is None


@pytest.mark.parametrize("status, style, animated", [
    ("pending", MarkerStyle.NEUTRAL, False),
    ("processing", MarkerStyle.IN_PROGRESS, True),
    ("completed", MarkerStyle.SUCCESS, False),
    ("rejected", MarkerStyle.FAILURE, False),
    ("archived", MarkerStyle.NEUTRAL, False),
    ("", MarkerStyle.NEUTRAL, False),
])
def test_status_maps_to_marker_style(status, style, animated):
    view = render_markers([Report(id=7, status=status, latitude="20.93", longitude="77.75")], CITY)

    marker = view.markers[0]
    assert marker.style is style
    assert marker.animated is animated
    assert marker.status == status


def test_center_falls_back_to_city_without_valid_reports():
    view = render_markers([Report(id=1, latitude="0", longitude="0")], CITY)
    assert view.markers == []
    assert view.center == CITY


def test_marker_carries_popup_details():
    report = Report.model_validate({
        "id": 3, "status": "processing", "latitude": 20.93, "longitude": 77.75,
        "title": "Overflowing bin", "imageUrl": "/uploads/3.jpg", "address": "Rajapeth, Amravati",
    })

    marker = render_markers([report], CITY).markers[0]

    assert marker.title == "Overflowing bin"
    assert marker.image_url == "/uploads/3.jpg"
    assert marker.address == "Rajapeth, Amravati"
    assert marker.glyph == "loader"
