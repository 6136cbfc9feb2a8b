# file: wastewatch/device.py

import asyncio
from typing import Optional

from wastewatch.errors import DeviceLocationError, DevicePermissionError
from wastewatch.models import Coordinate


class PendingPositionLocator:
    """One-shot device position supplied by the client that owns the device.

    The browser runs the geolocation call and pushes the outcome back with
    ``report_position`` or ``report_error``; ``current_position`` waits for it.
    """

    def __init__(self, timeout: float):
        self._timeout = timeout
        self._pending: Optional[asyncio.Future] = None

    async def current_position(self) -> Coordinate:
        if self._pending is not None and not self._pending.done():
            self._pending.set_exception(DeviceLocationError("Superseded by a newer request"))
        future = asyncio.get_running_loop().create_future()
        self._pending = future
        try:
            return await asyncio.wait_for(future, timeout=self._timeout)
        except asyncio.TimeoutError:
            raise DeviceLocationError("Timed out waiting for the device position", DeviceLocationError.TIMEOUT)
        finally:
            if self._pending is future:
                self._pending = None

    def report_position(self, coordinate: Coordinate) -> bool:
        if self._pending is None or self._pending.done():
            return False
        self._pending.set_result(coordinate)
        return True

    def report_error(self, reason: str, message: str = "") -> bool:
        if self._pending is None or self._pending.done():
            return False
        if reason == DeviceLocationError.PERMISSION_DENIED:
            error = DevicePermissionError(message or "User denied Geolocation")
        else:
            error = DeviceLocationError(message or "Position unavailable", reason or DeviceLocationError.UNAVAILABLE)
        self._pending.set_exception(error)
        return True
