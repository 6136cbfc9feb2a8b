# file: wastewatch/aqi.py

from typing import List, Optional, Tuple

from wastewatch.models import AQICategory

# Upper bounds are inclusive, so a boundary value belongs to the lower category
AQI_BREAKPOINTS: List[Tuple[Optional[float], AQICategory]] = [
    (50, AQICategory(label="Good", severity_rank=1, color="#22c55e",
                     description="Air quality is satisfactory")),
    (100, AQICategory(label="Moderate", severity_rank=2, color="#eab308",
                      description="Air quality is acceptable")),
    (150, AQICategory(label="Unhealthy for Sensitive Groups", severity_rank=3, color="#f97316",
                      description="Members of sensitive groups may experience health effects")),
    (200, AQICategory(label="Unhealthy", severity_rank=4, color="#ef4444",
                      description="Everyone may begin to experience health effects")),
    (300, AQICategory(label="Very Unhealthy", severity_rank=5, color="#581c87",
                      description="Health alert: everyone may experience more serious health effects")),
    (None, AQICategory(label="Hazardous", severity_rank=6, color="#7f1d1d",
                       description="Health warning of emergency conditions")),
]


def classify(aqi: float) -> AQICategory:
    """Map a non-negative AQI value to its severity category."""
    for upper, category in AQI_BREAKPOINTS:
        if upper is None or aqi <= upper:
            return category
    return AQI_BREAKPOINTS[-1][1]


def normalized_severity(aqi: float) -> float:
    """Gauge fill percentage (0-100); everything from 300 up is a full bar."""
    return min(100.0, aqi / 3)
