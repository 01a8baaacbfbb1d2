"""Custom exception hierarchy for hydrantgate."""

from __future__ import annotations


class HydrantGateError(Exception):
    """Base exception for all hydrantgate errors."""


class HydrantGateConfigError(HydrantGateError):
    """Invalid or missing configuration."""


class AssetSourceError(HydrantGateError):
    """The asset source could not be loaded.

    Load failures are never cached: the cache returns to its unloaded
    state and the next query retries the load.
    """


class SchemaError(AssetSourceError):
    """Header row lacks a latitude or longitude column."""


class EmptyDataError(AssetSourceError):
    """Source text contains no non-blank lines."""


class FetchError(AssetSourceError):
    """Network or filesystem failure while fetching the source text."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        source: str = "",
    ) -> None:
        self.status_code = status_code
        self.source = source
        super().__init__(message)


class LocationError(HydrantGateError):
    """Device location could not be obtained.

    ``code`` follows the geolocation convention used by location
    providers: ``1`` permission denied, ``2`` position unavailable,
    ``3`` timeout.
    """

    def __init__(self, message: str, *, code: int | None = None) -> None:
        self.code = code
        super().__init__(message)


class PermissionDeniedError(LocationError):
    """The user or platform refused access to the device location."""


class PositionUnavailableError(LocationError):
    """The provider could not determine a position."""


class LocationTimeoutError(LocationError):
    """The provider did not produce a fix within the requested timeout."""


class LocationUnsupportedError(LocationError):
    """No location provider is available in this environment."""


class DistanceExceededError(HydrantGateError):
    """Reporter is farther from the target than the proximity threshold.

    Recoverable: the caller may retry after moving closer.
    """

    def __init__(self, distance_m: float, threshold_m: float) -> None:
        self.distance_m = distance_m
        self.threshold_m = threshold_m
        super().__init__(
            f"You are {distance_m:.1f} m from the target; reports require being within {threshold_m:.0f} m"
        )


_LOCATION_ERRORS: dict[int, tuple[type[LocationError], str]] = {
    1: (
        PermissionDeniedError,
        "Location access denied. Enable location permissions and try again.",
    ),
    2: (
        PositionUnavailableError,
        "Location information is unavailable. Check the device's location settings.",
    ),
    3: (
        LocationTimeoutError,
        "Location request timed out. Try again or set a location manually.",
    ),
}


def classify_location_error(code: int | None, message: str = "") -> LocationError:
    """Map a provider's numeric error code to a typed :class:`LocationError`.

    Unknown codes are reported as :class:`PositionUnavailableError`.
    """
    exc_type, default_message = _LOCATION_ERRORS.get(
        code if code is not None else -1,
        (PositionUnavailableError, "Unable to retrieve your location"),
    )
    return exc_type(message or default_message, code=code)
