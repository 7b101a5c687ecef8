"""Exception hierarchy for suburbview.

Every error carries a `user_message` the presentation boundary can show as is.
None of them is allowed to stop the controller's event loop.
"""

from __future__ import annotations


class SuburbViewError(Exception):
    """Base exception for all suburbview errors."""

    @property
    def user_message(self) -> str:
        return str(self)


class SensorError(SuburbViewError):
    """A position or heading stream could not be started."""

    def __init__(self, message: str, *, sensor: str) -> None:
        self.sensor = sensor
        super().__init__(message)


class SensorUnavailable(SensorError):
    """The platform lacks the capability; the stream stays inactive for good."""

    def __init__(self, sensor: str, message: str | None = None) -> None:
        super().__init__(message or f"{sensor.capitalize()} is not supported on this device", sensor=sensor)


class SensorPermissionDenied(SensorError):
    """The user declined access; the stream stays inactive."""

    def __init__(self, sensor: str, message: str | None = None) -> None:
        super().__init__(message or f"Permission to access {sensor} was denied", sensor=sensor)


class CatalogRefreshFailed(SuburbViewError):
    """Fetching or parsing a new area batch failed; the previous catalog stays in use."""

    def __init__(self, message: str, *, bbox: str = "", cause: BaseException | None = None) -> None:
        self.bbox = bbox
        self.cause = cause
        super().__init__(message)

    @property
    def user_message(self) -> str:
        return f"Failed to fetch suburb data: {self}"
