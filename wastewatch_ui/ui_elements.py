#file: wastewatch_ui/ui_elements.py

import pandas as pd
import plotly.express as px
import streamlit as st

from wastewatch.aqi import classify, normalized_severity
from wastewatch_ui.utils import pollutant_table


def display_air_quality_card(state, city) :
    """Display AQI, category, gauge and pollutant grid for an aggregator state."""
    st.subheader(f"Air Quality in {city}")

    reading = state.get("data") if state else None
    if not reading :
        st.info("Loading air quality data...")
        return

    if state.get("phase") == "DEGRADED" :
        st.warning(f"{state.get('last_error') or 'Live data unavailable'} Showing sample data.")

    aqi = reading["aqi"]
    category = classify(aqi)
    col1, col2 = st.columns([1, 2])
    with col1 :
        st.metric("AQI US", aqi)
    with col2 :
        st.markdown(
            f"<span style='color:{category.color};font-weight:700'>{category.label}</span><br>{category.description}",
            unsafe_allow_html = True
        )
    st.progress(int(normalized_severity(aqi)))

    table = pollutant_table(reading)
    columns = st.columns(3)
    for index, row in table.iterrows() :
        with columns[index % 3] :
            st.metric(row["pollutant"], f"{row['value']} {row['unit']}")

    st.caption(f"Last updated: {pd.to_datetime(reading['timestamp']).strftime('%Y-%m-%d %H:%M')}")
    st.caption("Data provided by Open-Meteo")


def display_report_map(marker_df, center) :
    """Display a map with report markers coloured by status."""
    if marker_df.empty :
        marker_df = pd.DataFrame([{"lat" : center["latitude"], "lon" : center["longitude"], "title" : "City center",
                                   "status" : "", "color" : "#4b5563", "address" : ""}])

    fig_map = px.scatter_mapbox(
        marker_df,
        lat = "lat",
        lon = "lon",
        hover_name = "title",
        hover_data = {"status" : True, "address" : True, "lat" : False, "lon" : False},
        color = "color",
        color_discrete_map = "identity",
        zoom = 12,
        height = 500,
        title = "Waste Reports"
    )
    fig_map.update_traces(marker = {"size" : 14})
    fig_map.update_layout(
        mapbox_style = "open-street-map",
        mapbox_center = {"lat" : center["latitude"], "lon" : center["longitude"]},
        showlegend = False,
        margin = {
            "r" : 0,
            "t" : 30,
            "l" : 0,
            "b" : 0
        }
    )

    st.plotly_chart(fig_map)
