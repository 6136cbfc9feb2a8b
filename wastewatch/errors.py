# file: wastewatch/errors.py


class GeoError(Exception):
    """Base class for failures of the geocoding and readings providers."""


class NotFoundError(GeoError):
    """The query matched nothing. The user should retry with different input."""


class NetworkError(GeoError):
    """The provider was unreachable or answered with an error."""


TransportError = NetworkError


class DeviceLocationError(GeoError):
    """The device could not report its position."""

    PERMISSION_DENIED = "permission_denied"
    UNAVAILABLE = "unavailable"
    TIMEOUT = "timeout"
    UNSUPPORTED = "unsupported"

    def __init__(self, message: str, reason: str = UNAVAILABLE):
        super().__init__(message)
        self.reason = reason


class DevicePermissionError(DeviceLocationError):
    def __init__(self, message: str = "User denied Geolocation"):
        super().__init__(message, reason=DeviceLocationError.PERMISSION_DENIED)


# Aggregator taxonomy: all of these end up as a DEGRADED state, the message is kept for display

class LocationNotFound(NotFoundError):
    pass


class GeocodeTransportError(NetworkError):
    pass


class ReadingsTransportError(NetworkError):
    pass
