#file: wastewatch/utils.py

import ssl
from datetime import datetime

import aiohttp
import certifi
import pytz


def get_current_time() -> str:
    """Get current UTC time as a formatted string."""
    return datetime.now(pytz.utc).isoformat()


def create_session(timeout: float, user_agent: str) -> aiohttp.ClientSession:
    """Create an HTTP session that verifies certificates against the certifi bundle."""
    ssl_context = ssl.create_default_context(cafile=certifi.where())
    return aiohttp.ClientSession(
        connector=aiohttp.TCPConnector(ssl=ssl_context),
        timeout=aiohttp.ClientTimeout(total=timeout),
        headers={"User-Agent": user_agent},
    )
