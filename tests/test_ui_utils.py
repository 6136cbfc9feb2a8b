from wastewatch_ui.utils import MARKER_COLUMNS, STYLE_COLORS, markers_to_dataframe, pollutant_table

MAP_VIEW = {
    "center": {"latitude": 19.0, "longitude": 72.8},
    "markers": [
        {"report_id": 1, "coordinate": {"latitude": 19.0, "longitude": 72.8}, "status": "completed",
         "style": "success", "glyph": "check-circle", "animated": False, "title": "Bin near station",
         "address": "Dadar, Mumbai"},
        {"report_id": 2, "coordinate": {"latitude": 19.1, "longitude": 72.9}, "status": "processing",
         "style": "in_progress", "glyph": "loader", "animated": True, "title": "", "address": None},
    ],
}


def test_markers_to_dataframe():
    df = markers_to_dataframe(MAP_VIEW)

    assert list(df.columns) == MARKER_COLUMNS
    assert df["id"].tolist() == [1, 2]
    assert df["color"].tolist() == [STYLE_COLORS["success"], STYLE_COLORS["in_progress"]]
    assert df.loc[1, "title"] == "Report 2"
    assert df.loc[1, "address"] == ""


def test_markers_to_dataframe_empty():
    df = markers_to_dataframe({"center": MAP_VIEW["center"], "markers": []})
    assert df.empty
    assert list(df.columns) == MARKER_COLUMNS


def test_pollutant_table_uses_display_names_in_order():
    reading = {
        "aqi": 68,
        "timestamp": "2026-10-18T09:00",
        "components": {
            "ozone": {"value": 30, "unit": "µg/m³"},
            "pm2_5": {"value": 25, "unit": "µg/m³"},
        },
    }

    table = pollutant_table(reading)

    assert table["pollutant"].tolist() == ["PM2.5", "O₃"]
    assert table["value"].tolist() == [25, 30]
