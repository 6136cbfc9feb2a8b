# file: wastewatch/markers.py

from typing import Iterable, List, Optional

from wastewatch.models import Coordinate, MapView, MarkerStyle, Report, ReportMarker, ReportStatus

# status -> (style, glyph, animated)
STATUS_MARKERS = {
    ReportStatus.PENDING.value: (MarkerStyle.NEUTRAL, "flag", False),
    ReportStatus.PROCESSING.value: (MarkerStyle.IN_PROGRESS, "loader", True),
    ReportStatus.COMPLETED.value: (MarkerStyle.SUCCESS, "check-circle", False),
    ReportStatus.REJECTED.value: (MarkerStyle.FAILURE, "x-circle", False),
}
DEFAULT_MARKER = STATUS_MARKERS[ReportStatus.PENDING.value]


def report_coordinate(report: Report) -> Optional[Coordinate]:
    """Parse a report's stored coordinates; None when missing, unset or invalid."""
    if not report.latitude or not report.longitude :
        return None
    if report.latitude.strip() == "0" or report.longitude.strip() == "0" :
        return None
    try :
        return Coordinate(latitude=float(report.latitude), longitude=float(report.longitude))
    except ValueError :
        return None


def marker_for(report: Report, coordinate: Coordinate) -> ReportMarker:
    style, glyph, animated = STATUS_MARKERS.get(report.status, DEFAULT_MARKER)
    return ReportMarker(
        report_id=report.id,
        coordinate=coordinate,
        status=report.status,
        style=style,
        glyph=glyph,
        animated=animated,
        title=report.title,
        address=report.address,
        image_url=report.image_url,
    )


def render_markers(reports: Iterable[Report], fallback_center: Coordinate) -> MapView:
    """Build map markers for every report with usable coordinates."""
    markers: List[ReportMarker] = []
    for report in reports :
        coordinate = report_coordinate(report)
        if coordinate is not None :
            markers.append(marker_for(report, coordinate))

    center = markers[0].coordinate if markers else fallback_center
    return MapView(center=center, markers=markers)
