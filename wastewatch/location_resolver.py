# file: wastewatch/location_resolver.py

import asyncio
import logging
from enum import Enum
from typing import Callable, List, Optional, Set

from wastewatch.errors import DeviceLocationError, NetworkError, NotFoundError
from wastewatch.geocoding import CURRENT_LOCATION, GeocodingGateway
from wastewatch.models import Coordinate, LocationSource, Notice, ResolvedLocation


class ResolverPhase(str, Enum):
    IDLE = "IDLE"
    RESOLVING = "RESOLVING"
    RESOLVED = "RESOLVED"


class LocationResolver:
    """Turns searches, marker drags and device fixes into one (coordinate, address) pair.

    Every user action takes a ticket. Only the holder of the newest ticket may
    change the location, so the result always follows the most recently
    started action, whatever order the network answers in. A drag's address
    lookup is applied while the marker is still on the dragged coordinate.
    """

    def __init__(
        self,
        gateway: GeocodingGateway,
        initial: Optional[ResolvedLocation] = None,
        device=None,
        on_change: Optional[Callable[[ResolvedLocation], None]] = None,
        on_notice: Optional[Callable[[Notice], None]] = None,
    ):
        self._gateway = gateway
        self._device = device
        self._on_change = on_change
        self._on_notice = on_notice
        self._location = initial
        self._phase = ResolverPhase.RESOLVED if initial else ResolverPhase.IDLE
        self._ticket = 0
        self._closed = False
        self._address_tasks: Set[asyncio.Task] = set()
        self.notices: List[Notice] = []

    @property
    def location(self) -> Optional[ResolvedLocation]:
        return self._location

    @property
    def phase(self) -> ResolverPhase:
        return self._phase

    def _take_ticket(self) -> int:
        self._ticket += 1
        return self._ticket

    def _is_current(self, ticket: int) -> bool:
        return not self._closed and ticket == self._ticket

    def _settle(self, ticket: int) -> None:
        if self._is_current(ticket):
            self._phase = ResolverPhase.RESOLVED if self._location else ResolverPhase.IDLE

    def _commit(self, location: ResolvedLocation) -> None:
        self._location = location
        if self._on_change:
            self._on_change(location)

    def _notify(self, title: str, description: str) -> None:
        logging.info(f"Location notice: {title} - {description}")
        notice = Notice(title=title, description=description)
        self.notices.append(notice)
        if self._on_notice:
            self._on_notice(notice)

    def dismiss_notice(self, index: int = 0) -> None:
        if 0 <= index < len(self.notices):
            self.notices.pop(index)

    async def submit_search(self, query: str) -> Optional[ResolvedLocation]:
        """Search for a place and move the marker to the first match."""
        if not query or not query.strip():
            return self._location

        ticket = self._take_ticket()
        self._phase = ResolverPhase.RESOLVING
        try:
            location = await self._gateway.forward_search(query)
        except NotFoundError:
            if self._is_current(ticket):
                self._notify("Location not found", "Please try a different search term.")
        except NetworkError:
            if self._is_current(ticket):
                self._notify("Search failed", "Could not connect to the location service.")
        else:
            if self._is_current(ticket):
                self._phase = ResolverPhase.RESOLVED
                self._commit(location)
            else:
                logging.debug(f"Discarding stale search result for {query!r}")
        finally:
            self._settle(ticket)
        return self._location

    def drag_marker_to(
        self,
        coordinate: Coordinate,
        source: LocationSource = LocationSource.DRAG,
        fallback: Optional[str] = None,
    ) -> Optional[asyncio.Task]:
        """Move the marker now and look up its address in the background.

        The previous address is kept until the lookup finishes. The returned
        task completes once the address has been updated (or discarded).
        Returns None once the resolver is closed.
        """
        if self._closed:
            return None
        self._take_ticket()
        previous_address = self._location.address if self._location else ""
        self._phase = ResolverPhase.RESOLVED
        self._commit(ResolvedLocation(coordinate=coordinate, address=previous_address, source=source))

        task = asyncio.get_running_loop().create_task(self._refresh_address(coordinate, fallback))
        self._address_tasks.add(task)
        task.add_done_callback(self._address_tasks.discard)
        return task

    async def _refresh_address(self, coordinate: Coordinate, fallback: Optional[str]) -> None:
        address = await self._gateway.reverse_resolve(coordinate, fallback=fallback)
        # The address belongs to whatever marker still sits on this coordinate,
        # even if a later action failed without moving it.
        if self._closed or self._location is None or self._location.coordinate != coordinate:
            logging.debug(f"Discarding stale address for {coordinate.rounded_key()}")
            return
        self._commit(self._location.model_copy(update={"address": address}))

    async def use_device_location(self) -> Optional[ResolvedLocation]:
        """Move the marker to the device position, if the device will tell us."""
        if self._device is None:
            self._notify("Geolocation Error", "Geolocation is not supported by this device.")
            return self._location

        ticket = self._take_ticket()
        self._phase = ResolverPhase.RESOLVING
        try:
            coordinate = await self._device.current_position()
        except DeviceLocationError as e:
            if self._is_current(ticket):
                self._notify("Geolocation Error", str(e))
            return self._location
        finally:
            self._settle(ticket)

        if not self._is_current(ticket):
            return self._location
        task = self.drag_marker_to(coordinate, source=LocationSource.DEVICE, fallback=CURRENT_LOCATION)
        if task is not None:
            await task
        return self._location

    def close(self) -> None:
        """Stop accepting results and cancel pending address lookups."""
        self._closed = True
        for task in list(self._address_tasks):
            task.cancel()
