#file: wastewatch_ui/utils.py

import pandas as pd

from wastewatch.open_meteo import PARAM_MAPPING

STYLE_COLORS = {
    "neutral" : "#4b5563",
    "in_progress" : "#ea580c",
    "success" : "#16a34a",
    "failure" : "#dc2626",
}
MARKER_COLUMNS = ["id", "lat", "lon", "title", "status", "style", "color", "address"]


def markers_to_dataframe(map_view) :
    """Flatten report markers into a DataFrame for plotting."""
    markers = (map_view or {}).get("markers") or []
    if not markers :
        return pd.DataFrame(columns = MARKER_COLUMNS)

    rows = [
        {
            "id" : marker["report_id"],
            "lat" : marker["coordinate"]["latitude"],
            "lon" : marker["coordinate"]["longitude"],
            "title" : marker.get("title") or f"Report {marker['report_id']}",
            "status" : marker["status"],
            "style" : marker["style"],
            "color" : STYLE_COLORS.get(marker["style"], STYLE_COLORS["neutral"]),
            "address" : marker.get("address") or "",
        }
        for marker in markers
    ]
    return pd.DataFrame(rows, columns = MARKER_COLUMNS)


def pollutant_table(reading) :
    """Pollutant readings as display rows, in a fixed order."""
    components = (reading or {}).get("components") or {}
    rows = [
        {"pollutant" : label, "value" : components[key]["value"], "unit" : components[key]["unit"]}
        for key, label in PARAM_MAPPING.items()
        if key in components
    ]
    return pd.DataFrame(rows, columns = ["pollutant", "value", "unit"])
