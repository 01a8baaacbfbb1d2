"""Asset source transports.

A source only fetches text; parsing and caching live elsewhere.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Protocol

import aiohttp

from hydrantgate.config import GateConfig
from hydrantgate.exceptions import FetchError, HydrantGateConfigError

_logger = logging.getLogger(__name__)


class AssetSource(Protocol):
    """Structural source interface used by the cache.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementations concrete.
    """

    async def fetch_text(self) -> str:
        ...


class HttpAssetSource:
    """Fetch the asset CSV over HTTP(S)."""

    def __init__(
        self,
        url: str,
        http_session: aiohttp.ClientSession,
        *,
        timeout: float = 30.0,
    ) -> None:
        self._url = url
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    @property
    def url(self) -> str:
        return self._url

    async def fetch_text(self) -> str:
        _logger.debug("GET %s", self._url)
        try:
            async with self._http.get(self._url, timeout=self._timeout) as resp:
                if resp.status != 200:
                    raise FetchError(
                        f"Failed to load asset source: HTTP {resp.status} {resp.reason or ''}".rstrip(),
                        status_code=resp.status,
                        source=self._url,
                    )
                return await resp.text()
        except FetchError:
            raise
        except (aiohttp.ClientError, TimeoutError, UnicodeDecodeError) as exc:
            raise FetchError(
                f"Request to {self._url} failed: {exc}",
                source=self._url,
            ) from exc


class FileAssetSource:
    """Read the asset CSV from the local filesystem."""

    def __init__(self, path: str | Path, *, encoding: str = "utf-8") -> None:
        self._path = Path(path)
        self._encoding = encoding

    @property
    def path(self) -> Path:
        return self._path

    async def fetch_text(self) -> str:
        _logger.debug("Reading asset source from %s", self._path)
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, self._path.read_text, self._encoding)
        except (OSError, UnicodeDecodeError) as exc:
            raise FetchError(
                f"Failed to read asset source {self._path}: {exc}",
                source=str(self._path),
            ) from exc


def source_from_config(
    config: GateConfig,
    http_session: aiohttp.ClientSession | None = None,
) -> AssetSource:
    """Build the source described by *config*; URLs win over paths."""
    if config.source_url:
        if http_session is None:
            raise HydrantGateConfigError("An HTTP session is required for source_url")
        return HttpAssetSource(config.source_url, http_session, timeout=config.fetch_timeout)
    if config.source_path:
        return FileAssetSource(config.source_path)
    raise HydrantGateConfigError("Either source_url or source_path must be configured")
