#file: wastewatch_ui/app.py

import os
import sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import asyncio
import streamlit as st

st.set_page_config(page_title="WasteWatch Air Quality", page_icon="🌍", layout="wide")

from wastewatch_ui.data_fetch import fetch_air_quality_state, fetch_report_map, search_location
from wastewatch_ui.ui_elements import display_air_quality_card, display_report_map
from wastewatch_ui.utils import markers_to_dataframe

INDIAN_CITIES = sorted([
    "Mumbai", "Delhi", "Bangalore", "Hyderabad", "Ahmedabad",
    "Chennai", "Kolkata", "Surat", "Pune", "Jaipur",
    "Lucknow", "Kanpur", "Nagpur", "Visakhapatnam", "Indore",
    "Thane", "Bhopal", "Patna", "Vadodara", "Ghaziabad", "Amravati"
])
CUSTOM_CITY = "Other..."

st.title("Air Quality Index")
st.caption("Check real-time air quality information for cities across India")

col1, col2 = st.columns([1, 2])
with col1:
    selected = st.selectbox("Select a city", INDIAN_CITIES + [CUSTOM_CITY], index = INDIAN_CITIES.index("Mumbai"))
    city = selected
    if selected == CUSTOM_CITY:
        city = st.text_input("Enter city name").strip()
        if not city:
            st.info("Enter a city to see its air quality.")
            st.stop()

with col2:
    state = asyncio.run(fetch_air_quality_state(city))
    if state is None:
        st.error("Could not reach the air quality service.")
    else:
        display_air_quality_card(state, city)

st.markdown("---")
st.subheader("Find a location")
query = st.text_input("Search for a location...")
if query:
    location = asyncio.run(search_location(query))
    if location:
        coordinate = location["coordinate"]
        st.success(location["address"])
        st.caption(f"{coordinate['latitude']:.5f}, {coordinate['longitude']:.5f}")
    else:
        st.error("Location not found. Please try a different search term.")

st.markdown("---")
map_view = asyncio.run(fetch_report_map())
if map_view:
    display_report_map(markers_to_dataframe(map_view), map_view["center"])
else:
    st.warning("No report data available.")
