"""Snapshot sources.

A source produces one snapshot (a list of untrusted entity records) per
call and raises :class:`TacmonFetchError` on failure. The engine does not
care where records come from.
"""

from __future__ import annotations

import asyncio
import copy
import json
import logging
import time
from collections.abc import Callable, Iterable, Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Protocol

import aiohttp

from pytacmon._constants import CACHE_BUST_PARAM, DEFAULT_REQUEST_TIMEOUT_S, USER_AGENT
from pytacmon.config import TrackerConfig
from pytacmon.exceptions import TacmonFetchError

_logger = logging.getLogger(__name__)


def _now_ms() -> int:
    """Current epoch timestamp in milliseconds."""
    return int(time.time() * 1000)


class SnapshotSource(Protocol):
    """Structural snapshot source interface used by the engine.

    Having a protocol here makes it easy to pass test doubles while keeping
    the shipped sources concrete.
    """

    async def fetch_snapshot(self) -> list[Any]:
        ...


def _preview(body: bytes) -> str:
    return body[:200].decode("utf-8", errors="replace")


def _ensure_records(payload: Any, url: str) -> list[Any]:
    if not isinstance(payload, list):
        raise TacmonFetchError(
            f"Snapshot from {url} is a {type(payload).__name__}, expected a JSON array",
            url=url,
        )
    return payload


class HttpSnapshotSource:
    """Fetch snapshots as a JSON array over HTTP(S).

    Pass an existing ``aiohttp.ClientSession`` to share a connection pool;
    otherwise the source opens one lazily and closes it in :meth:`close` (or
    on leaving ``async with``).
    """

    def __init__(
        self,
        url: str,
        *,
        session: aiohttp.ClientSession | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT_S,
        cache_bust: bool = True,
        clock_ms: Callable[[], int] = _now_ms,
    ) -> None:
        self._url = url
        self._external_session = session is not None
        self._http_session = session
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._cache_bust = cache_bust
        self._clock_ms = clock_ms

    @property
    def url(self) -> str:
        return self._url

    async def __aenter__(self) -> HttpSnapshotSource:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    async def fetch_snapshot(self) -> list[Any]:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()

        params = {CACHE_BUST_PARAM: str(self._clock_ms())} if self._cache_bust else None
        headers = {"accept": "application/json", "user-agent": USER_AGENT}

        _logger.debug("GET %s", self._url)

        try:
            async with self._http_session.get(self._url, params=params, headers=headers, timeout=self._timeout) as resp:
                body = await resp.read()
                if resp.status != 200:
                    raise TacmonFetchError(
                        f"HTTP {resp.status} from {self._url}: {_preview(body)}",
                        status_code=resp.status,
                        url=self._url,
                    )
        except TacmonFetchError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise TacmonFetchError(
                f"Request to {self._url} failed: {str(exc) or type(exc).__name__}",
                url=self._url,
            ) from exc

        try:
            payload = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise TacmonFetchError(
                f"Invalid JSON from {self._url}: {_preview(body)}",
                status_code=200,
                url=self._url,
            ) from exc

        return _ensure_records(payload, self._url)


class FileSnapshotSource:
    """Read snapshots from a local JSON file on every call."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    async def fetch_snapshot(self) -> list[Any]:
        location = str(self._path)
        try:
            raw = await asyncio.to_thread(self._path.read_bytes)
        except OSError as exc:
            raise TacmonFetchError(f"Cannot read {location}: {exc}", url=location) from exc

        try:
            payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise TacmonFetchError(f"Invalid JSON in {location}: {exc}", url=location) from exc

        return _ensure_records(payload, location)


def default_mock_records() -> list[dict[str, Any]]:
    """Two canned records in the shape the live feed uses."""
    now = datetime.now(UTC).isoformat()
    return [
        {"id": 1, "lat": 49.99, "lng": 36.23, "type": "drone", "label": "SHAHEED-136", "time": now},
        {"id": 2, "lat": 50.45, "lng": 30.52, "type": "missile", "label": "KH-101", "time": now},
    ]


class MockSnapshotSource:
    """Scripted source for demos and tests.

    *responses* is consumed one item per call; each item is either a
    sequence of records or an exception instance to raise. Once exhausted,
    the last item is repeated. Without responses, :func:`default_mock_records`
    is returned on every call.
    """

    def __init__(self, responses: Iterable[Sequence[Any] | BaseException] | None = None) -> None:
        self._responses: list[Sequence[Any] | BaseException] = list(responses) if responses is not None else []
        self.calls = 0

    async def fetch_snapshot(self) -> list[Any]:
        index = self.calls
        self.calls += 1
        if not self._responses:
            return default_mock_records()

        response = self._responses[min(index, len(self._responses) - 1)]
        if isinstance(response, BaseException):
            raise response
        return copy.deepcopy(list(response))


def build_source(config: TrackerConfig) -> SnapshotSource:
    """Pick a source from *config*: URL first, then file, else the mock feed."""
    if config.snapshot_url:
        return HttpSnapshotSource(
            config.snapshot_url,
            timeout=config.request_timeout,
            cache_bust=config.cache_bust,
        )
    if config.snapshot_path:
        return FileSnapshotSource(config.snapshot_path)
    _logger.info("No snapshot URL or path configured; using the built-in mock feed")
    return MockSnapshotSource()
