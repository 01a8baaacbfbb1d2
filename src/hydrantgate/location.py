"""Device location acquisition.

Two separate capabilities sit on top of an external
:class:`LocationProvider`:

- :meth:`LocationService.acquire` takes a single fix. A high accuracy
  request that times out may fall back to exactly one low accuracy
  attempt; every other failure is raised immediately.
- :meth:`LocationService.watch` streams fixes to a callback until the
  returned :class:`WatchSubscription` is cancelled.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Protocol

from hydrantgate.config import LocationOptions
from hydrantgate.exceptions import LocationError, LocationTimeoutError, LocationUnsupportedError
from hydrantgate.models.location import LocationFix

_logger = logging.getLogger(__name__)

# Extra time granted to a provider beyond the requested timeout before
# the attempt is treated as timed out.
_PROVIDER_GRACE_S = 1.0

WatchCallback = Callable[[LocationFix | None, LocationError | None], None]


class LocationProvider(Protocol):
    """Device location collaborator.

    Implementations report failures by raising (single-shot) or passing
    (watch) :class:`LocationError` subclasses; see
    :func:`hydrantgate.exceptions.classify_location_error` for mapping
    numeric provider codes.
    """

    async def get_position(self, *, timeout: float, max_age: float, high_accuracy: bool) -> LocationFix:
        ...

    def watch_position(
        self,
        on_fix: Callable[[LocationFix], None],
        on_error: Callable[[LocationError], None],
        *,
        timeout: float,
        max_age: float,
        high_accuracy: bool,
    ) -> int:
        ...

    def clear_watch(self, watch_id: int) -> None:
        ...


class WatchSubscription:
    """Handle for a continuous location watch.

    Cancelling is idempotent and only affects this subscription.
    Deliveries that arrive after cancellation are dropped.
    """

    def __init__(self, provider: LocationProvider) -> None:
        self._provider = provider
        self._watch_id: int | None = None
        self._active = True

    @property
    def watch_id(self) -> int | None:
        return self._watch_id

    @property
    def active(self) -> bool:
        return self._active

    def _bind(self, watch_id: int) -> None:
        self._watch_id = watch_id

    def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        if self._watch_id is not None:
            self._provider.clear_watch(self._watch_id)
            _logger.debug("Location watch %s cleared", self._watch_id)

    def __enter__(self) -> WatchSubscription:
        return self

    def __exit__(self, *exc: object) -> None:
        self.cancel()


class LocationService:
    """Acquire device location fixes from a :class:`LocationProvider`."""

    def __init__(self, provider: LocationProvider | None) -> None:
        self._provider = provider

    @property
    def is_supported(self) -> bool:
        return self._provider is not None

    def _require_provider(self) -> LocationProvider:
        if self._provider is None:
            raise LocationUnsupportedError("Geolocation is not supported in this environment")
        return self._provider

    async def _attempt(self, provider: LocationProvider, options: LocationOptions, high_accuracy: bool) -> LocationFix:
        try:
            async with asyncio.timeout(options.timeout + _PROVIDER_GRACE_S):
                return await provider.get_position(
                    timeout=options.timeout,
                    max_age=options.max_age,
                    high_accuracy=high_accuracy,
                )
        except TimeoutError as exc:
            raise LocationTimeoutError("Location request timed out", code=3) from exc

    async def acquire(self, options: LocationOptions | None = None) -> LocationFix:
        """Take a single location fix.

        Parameters
        ----------
        options : LocationOptions or None
            Request options; defaults to :class:`LocationOptions` defaults.

        Returns
        -------
        LocationFix
            The fix from the first attempt, or from the single low
            accuracy fallback attempt.

        Raises
        ------
        LocationError
            Typed failure of the final attempt.
        """
        opts = options or LocationOptions()
        provider = self._require_provider()

        try:
            return await self._attempt(provider, opts, opts.high_accuracy)
        except LocationTimeoutError:
            if not (opts.high_accuracy and opts.fallback_on_timeout):
                raise
            _logger.warning("High accuracy location timed out, trying low accuracy")

        return await self._attempt(provider, opts, False)

    def watch(self, callback: WatchCallback, options: LocationOptions | None = None) -> WatchSubscription:
        """Stream location updates to *callback* until cancelled.

        *callback* is invoked on the running event loop as
        ``callback(fix, None)`` for each fix and ``callback(None, error)``
        for each failure. Must be called from a running event loop.
        """
        opts = options or LocationOptions.for_watch()
        provider = self._require_provider()
        loop = asyncio.get_running_loop()
        subscription = WatchSubscription(provider)

        def _deliver(fix: LocationFix | None, error: LocationError | None) -> None:
            if not subscription.active:
                return
            try:
                callback(fix, error)
            except Exception:
                _logger.warning("Location watch callback failed", exc_info=True)

        def _on_fix(fix: LocationFix) -> None:
            loop.call_soon_threadsafe(_deliver, fix, None)

        def _on_error(error: LocationError) -> None:
            loop.call_soon_threadsafe(_deliver, None, error)

        watch_id = provider.watch_position(
            _on_fix,
            _on_error,
            timeout=opts.timeout,
            max_age=opts.max_age,
            high_accuracy=opts.high_accuracy,
        )
        subscription._bind(watch_id)
        _logger.debug("Location watch %s started (high_accuracy=%s)", watch_id, opts.high_accuracy)
        return subscription
