# file: wastewatch/picker.py

import asyncio
import logging
from typing import Any, Dict, Set

from wastewatch.device import PendingPositionLocator
from wastewatch.geocoding import GeocodingGateway
from wastewatch.location_resolver import LocationResolver
from wastewatch.models import Coordinate, Notice, ResolvedLocation


class PickerSession:
    """One location picker connected over a websocket.

    Incoming client messages drive a LocationResolver. Location changes and
    notices are queued on ``outbox`` for the connection to send back.
    """

    def __init__(self, gateway: GeocodingGateway, initial: ResolvedLocation, device_timeout: float):
        self.outbox: asyncio.Queue = asyncio.Queue()
        self.device = PendingPositionLocator(timeout=device_timeout)
        self.resolver = LocationResolver(
            gateway,
            initial=initial,
            device=self.device,
            on_change=self._location_changed,
            on_notice=self._notice_raised,
        )
        self._actions: Set[asyncio.Task] = set()
        self._location_changed(initial)

    def _location_changed(self, location: ResolvedLocation) -> None:
        self.outbox.put_nowait({
            "type": "location",
            "phase": self.resolver.phase.value,
            "location": location.model_dump(mode="json"),
        })

    def _notice_raised(self, notice: Notice) -> None:
        self.outbox.put_nowait({"type": "notice", **notice.model_dump()})

    def _spawn(self, coro) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._actions.add(task)
        task.add_done_callback(self._actions.discard)

    def handle(self, message: Dict[str, Any]) -> None:
        """Dispatch one client message. Slow actions run in the background."""
        action = message.get("action")
        try:
            if action == "search":
                self._spawn(self.resolver.submit_search(str(message.get("query", ""))))
            elif action == "drag":
                coordinate = Coordinate(latitude=message["latitude"], longitude=message["longitude"])
                self.resolver.drag_marker_to(coordinate)
            elif action == "locate":
                self._spawn(self.resolver.use_device_location())
            elif action == "position":
                coordinate = Coordinate(latitude=message["latitude"], longitude=message["longitude"])
                self.device.report_position(coordinate)
            elif action == "position_error":
                self.device.report_error(str(message.get("reason", "")), str(message.get("message", "")))
            elif action == "dismiss":
                self.resolver.dismiss_notice(int(message.get("index", 0)))
            else:
                self._notice_raised(Notice(title="Unknown action", description=f"Unsupported action {action!r}"))
        except (KeyError, TypeError, ValueError) as e:
            logging.warning(f"Rejected picker message {message!r}: {e}")
            self._notice_raised(Notice(title="Invalid location", description="Could not read the coordinates."))

    def close(self) -> None:
        self.resolver.close()
        for task in list(self._actions):
            task.cancel()
