# file: wastewatch/config.py

import os
from dotenv import load_dotenv

load_dotenv()


def _float_env(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


NOMINATIM_URL = os.getenv("NOMINATIM_URL", "https://nominatim.openstreetmap.org")
AIR_QUALITY_URL = os.getenv("AIR_QUALITY_URL", "https://air-quality-api.open-meteo.com/v1/air-quality")
GEOCODER_USER_AGENT = os.getenv("GEOCODER_USER_AGENT", "wastewatch-geo/0.1")
HTTP_TIMEOUT_SECONDS = _float_env("HTTP_TIMEOUT_SECONDS", "10")

# Open-Meteo refreshes hourly; polling every 30 minutes keeps the card current
AQ_REFRESH_INTERVAL_SECONDS = _float_env("AQ_REFRESH_INTERVAL_SECONDS", str(30 * 60))
AQ_CACHE_TTL_SECONDS = _float_env("AQ_CACHE_TTL_SECONDS", str(30 * 60))

DEFAULT_CITY = os.getenv("DEFAULT_CITY", "Amravati")
DEFAULT_LATITUDE = _float_env("DEFAULT_LATITUDE", "20.9374")
DEFAULT_LONGITUDE = _float_env("DEFAULT_LONGITUDE", "77.7796")
DEFAULT_ADDRESS = os.getenv("DEFAULT_ADDRESS", "Amravati, Maharashtra, India")

REPORTS_FILE = os.getenv("REPORTS_FILE", "reports_export.json")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Validate configuration
if HTTP_TIMEOUT_SECONDS <= 0 or AQ_REFRESH_INTERVAL_SECONDS <= 0 or AQ_CACHE_TTL_SECONDS < 0 :
    raise ValueError("Timeouts and refresh intervals must be positive")
if not (-90 <= DEFAULT_LATITUDE <= 90 and -180 <= DEFAULT_LONGITUDE <= 180) :
    raise ValueError("Default coordinate is out of range")
if DEFAULT_LATITUDE == 0 and DEFAULT_LONGITUDE == 0 :
    raise ValueError("Default coordinate cannot be (0, 0)")
