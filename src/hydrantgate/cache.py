"""Single-flight asset cache.

Owns the parsed asset records for the lifetime of a process (or until
:meth:`AssetCache.invalidate`). Concurrent callers of
:meth:`AssetCache.get_or_load` share one fetch-and-parse operation:

- ``unloaded``: the first caller starts the load; everyone queues a waiter.
- ``loading``: later callers queue a waiter on the in-flight load.
- ``loaded``: callers get the snapshot immediately.

Load failures are delivered to every waiter and are not cached.
"""

from __future__ import annotations

import asyncio
import contextlib
import functools
import logging
from enum import StrEnum

from hydrantgate._source import AssetSource
from hydrantgate.config import AdmissibleRegion
from hydrantgate.models.asset import AssetRecord
from hydrantgate.parser import DEFAULT_REGION, ParseReport, parse_assets

_logger = logging.getLogger(__name__)


class CacheState(StrEnum):
    UNLOADED = "unloaded"
    LOADING = "loading"
    LOADED = "loaded"


class AssetCache:
    """Load the asset source exactly once and share the result.

    Every waiter of one load receives the same immutable tuple, so no
    caller can observe a partially parsed snapshot.
    """

    def __init__(
        self,
        source: AssetSource,
        *,
        region: AdmissibleRegion = DEFAULT_REGION,
    ) -> None:
        self._source = source
        self._region = region
        self._state = CacheState.UNLOADED
        self._records: tuple[AssetRecord, ...] | None = None
        self._waiters: list[asyncio.Future[tuple[AssetRecord, ...]]] = []
        self._load_task: asyncio.Task[None] | None = None
        self._load_waiters: list[asyncio.Future[tuple[AssetRecord, ...]]] = []
        self._epoch = 0
        self._last_report: ParseReport | None = None

    @property
    def state(self) -> CacheState:
        return self._state

    @property
    def epoch(self) -> int:
        """Incremented by every :meth:`invalidate`."""
        return self._epoch

    @property
    def is_loaded(self) -> bool:
        return self._state is CacheState.LOADED

    @property
    def last_report(self) -> ParseReport | None:
        """Parse diagnostics of the load installed in the current epoch."""
        return self._last_report

    async def get_or_load(self) -> tuple[AssetRecord, ...]:
        """Return the cached records, loading them if necessary.

        Raises
        ------
        AssetSourceError
            If the load this caller waited on failed. The cache is left
            unloaded so a later call retries.
        """
        while True:
            if self._state is CacheState.LOADED:
                assert self._records is not None  # noqa: S101
                return self._records

            if self._state is CacheState.UNLOADED:
                pending = self._load_task
                if pending is not None and not pending.done():
                    # A load from a previous epoch is still running; let it
                    # finish so only one fetch is ever in flight.
                    await asyncio.wait({pending})
                    continue
                self._start_load()

            waiter: asyncio.Future[tuple[AssetRecord, ...]] = asyncio.get_running_loop().create_future()
            waiters = self._waiters
            waiters.append(waiter)
            try:
                return await waiter
            finally:
                if waiter.cancelled():
                    with contextlib.suppress(ValueError):
                        waiters.remove(waiter)

    def invalidate(self) -> None:
        """Drop the cached snapshot and start a new epoch.

        Snapshots already returned are unaffected. A load still in flight
        resolves its own waiters but is not installed into the new epoch.
        """
        self._epoch += 1
        self._state = CacheState.UNLOADED
        self._records = None
        self._last_report = None
        self._waiters = []
        _logger.debug("Asset cache invalidated (epoch=%d)", self._epoch)

    async def aclose(self) -> None:
        """Cancel an in-flight load; pending callers see ``CancelledError``."""
        task = self._load_task
        load_waiters = self._load_waiters
        self._load_task = None
        self._load_waiters = []
        if task is not None and not task.done():
            task.cancel()
            await asyncio.wait({task})
        # A task cancelled before its first step never resolves its waiters.
        for waiter in (*load_waiters, *self._waiters):
            if not waiter.done():
                waiter.cancel()
        self.invalidate()

    def _start_load(self) -> None:
        self._state = CacheState.LOADING
        epoch = self._epoch
        waiters = self._waiters
        self._load_waiters = waiters
        self._load_task = asyncio.get_running_loop().create_task(
            self._load(epoch, waiters),
            name=f"hydrantgate-load-{epoch}",
        )

    async def _load(
        self,
        epoch: int,
        waiters: list[asyncio.Future[tuple[AssetRecord, ...]]],
    ) -> None:
        _logger.debug("Loading asset source (epoch=%d)", epoch)
        report = ParseReport()
        try:
            text = await self._source.fetch_text()
            loop = asyncio.get_running_loop()
            parsed = await loop.run_in_executor(
                None,
                functools.partial(parse_assets, text, region=self._region, report=report),
            )
            records = tuple(parsed)
        except asyncio.CancelledError:
            if epoch == self._epoch:
                self._state = CacheState.UNLOADED
            for waiter in waiters:
                if not waiter.done():
                    waiter.cancel()
            waiters.clear()
            raise
        except Exception as exc:
            _logger.debug("Asset load failed (epoch=%d)", epoch, exc_info=True)
            if epoch == self._epoch:
                self._state = CacheState.UNLOADED
            for waiter in waiters:
                if not waiter.done():
                    waiter.set_exception(exc)
            waiters.clear()
            return

        if epoch == self._epoch:
            self._records = records
            self._last_report = report
            self._state = CacheState.LOADED
            _logger.info("Loaded %d assets (%d rows dropped)", len(records), report.rows_dropped)
        else:
            _logger.debug("Discarding load result from stale epoch %d", epoch)

        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(records)
        waiters.clear()
