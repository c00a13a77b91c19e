"""
GPX Track Resolver

Maps a hike's display date to the GPX track recorded that day and returns the
track as an ordered list of latitude/longitude points.

Track files follow a fixed naming convention:

    <TRACK_BASE_URL>/<TRACK_DIRECTORY>/<YYYYMMDD>.<TRACK_EXTENSION>

where TRACK_BASE_URL is either an http(s) URL or a local directory. Every
outcome for a key is memoized in a TrackCache, including failures, so a
missing track is requested at most once per resolver. A missing file is an
expected outcome (not every hike was recorded) and is not logged as an error.

Usage:
    resolver = TrackResolver()
    result = asyncio.run(resolver.resolve("2/6/2026"))
    if result.ok:
        print(len(result.points))
"""

from __future__ import annotations

import asyncio
import logging
import os
import xml.etree.ElementTree as ET
from datetime import datetime
from enum import Enum
from typing import NamedTuple

import requests
from dateutil import parser as date_parser
from pydantic import BaseModel, ConfigDict, Field

from config.settings import config

# A date string missing its day falls on the 1st ("Feb 2026" -> Feb 1). Parsing
# against both defaults detects a missing year or month: the results differ.
_DATE_DEFAULT = datetime(1970, 1, 1)
_ALT_DATE_DEFAULT = datetime(1971, 2, 1)


class TrackFailure(str, Enum):
    """Why a track could not be resolved."""

    INVALID_DATE = "invalid_date"
    NOT_FOUND = "not_found"
    HTTP_ERROR = "http_error"
    FETCH_ERROR = "fetch_error"
    PARSE_ERROR = "parse_error"


class TrackPoint(NamedTuple):
    lat: float
    lng: float


class TrackResult(BaseModel):
    """Outcome of resolving a track: points on success, a failure otherwise."""

    model_config = ConfigDict(frozen=True)

    key: str | None = Field(default=None, description="YYYYMMDD track key")
    points: tuple[TrackPoint, ...] = Field(
        default=(), description="Track points in document order (empty on failure)"
    )
    failure: TrackFailure | None = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, key: str, points: list[TrackPoint]) -> TrackResult:
        return cls(key=key, points=tuple(points))

    @classmethod
    def failed(
        cls, key: str | None, failure: TrackFailure, detail: str = ""
    ) -> TrackResult:
        return cls(key=key, failure=failure, detail=detail)


class TrackCache:
    """Memoizes track outcomes (successes and failures) by track key."""

    def __init__(self):
        self._entries: dict[str, TrackResult] = {}

    def get(self, key: str) -> TrackResult | None:
        return self._entries.get(key)

    def put(self, key: str, result: TrackResult) -> None:
        self._entries[key] = result

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def parse_track_date(date_string: str | None) -> datetime | None:
    """
    Parse a display date such as "2/6/2026", "2026-02-06" or "Feb 6, 2026".

    Args:
        date_string: Date text from the hike log

    Returns:
        datetime, or None if the text is empty, not a recognizable date, or
        lacks a year or month (a bare weekday such as "Saturday")
    """
    if not date_string or not isinstance(date_string, str):
        return None
    text = date_string.strip()
    try:
        parsed = date_parser.parse(text, default=_DATE_DEFAULT)
        check = date_parser.parse(text, default=_ALT_DATE_DEFAULT)
    except (ValueError, OverflowError):
        return None
    if parsed != check:
        return None
    return parsed


def track_key(date_string: str | None) -> str | None:
    """Return the zero-padded YYYYMMDD key for a date, or None if unparseable."""
    parsed = parse_track_date(date_string)
    if parsed is None:
        return None
    return f"{parsed.year:04d}{parsed.month:02d}{parsed.day:02d}"


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def parse_gpx(content: bytes | str) -> list[TrackPoint]:
    """
    Extract every track point from a GPX document, in document order.

    Args:
        content: GPX document

    Returns:
        List of TrackPoint (empty if the document has no trkpt elements)

    Raises:
        xml.etree.ElementTree.ParseError: If the document is not valid XML
        ValueError: If a track point lacks a numeric lat/lon attribute
    """
    root = ET.fromstring(content)

    points = []
    for element in root.iter():
        if _local_name(element.tag) != "trkpt":
            continue
        lat = element.get("lat")
        lon = element.get("lon")
        if lat is None or lon is None:
            raise ValueError(f"Track point {len(points)} is missing lat/lon")
        points.append(TrackPoint(float(lat), float(lon)))
    return points


class TrackResolver:
    """Resolve hike dates to GPX track points, memoizing every outcome."""

    def __init__(
        self,
        cache: TrackCache | None = None,
        base_url: str | None = None,
        session: requests.Session | None = None,
        timeout: int | None = None,
        logger: logging.Logger | None = None,
    ):
        """
        Initialize the resolver.

        Args:
            cache: Cache to memoize outcomes in (a fresh one if not provided)
            base_url: http(s) URL or local directory holding the track directory
                      (uses config.TRACK_BASE_URL if not provided)
            session: requests session for http(s) sources
            timeout: Request timeout in seconds (uses config.REQUEST_TIMEOUT if not provided)
            logger: Logger instance for operation tracking
        """
        self.cache = cache if cache is not None else TrackCache()
        self.base_url = base_url or config.TRACK_BASE_URL
        self.timeout = timeout or config.REQUEST_TIMEOUT
        self.logger = logger or logging.getLogger("track_resolver")

        self.session = session or requests.Session()
        self.session.headers.update(
            {"User-Agent": f"{config.APP_NAME}/{config.APP_VERSION} ({config.USER_EMAIL})"}
        )

        self._in_flight: dict[str, asyncio.Future] = {}

        self.stats = {
            "cache_hits": 0,
            "fetches": 0,
            "not_found": 0,
            "failures": 0,
        }

    @property
    def is_remote(self) -> bool:
        return self.base_url.startswith(("http://", "https://"))

    @staticmethod
    def track_path(key: str) -> str:
        """Relative path of the track file for a key."""
        return f"{config.TRACK_DIRECTORY}/{key}.{config.TRACK_EXTENSION}"

    def resource_for(self, key: str) -> str:
        """Full URL or filesystem path of the track file for a key."""
        path = self.track_path(key)
        if self.is_remote:
            return f"{self.base_url.rstrip('/')}/{path}"
        return os.path.join(self.base_url, *path.split("/"))

    def cached(self, date_string: str | None) -> TrackResult | None:
        """Return the memoized outcome for a date without doing any I/O."""
        key = track_key(date_string)
        if key is None:
            return None
        return self.cache.get(key)

    async def resolve(self, date_string: str | None) -> TrackResult:
        """
        Resolve a hike date to its track.

        An unparseable date fails immediately without touching the cache. A
        cached outcome is returned without I/O. Concurrent resolutions of the
        same key share one fetch.

        Args:
            date_string: Display date of the hike

        Returns:
            TrackResult with the track points, or a failure
        """
        key = track_key(date_string)
        if key is None:
            self.logger.warning(f"Invalid date for track lookup: {date_string!r}")
            return TrackResult.failed(
                None, TrackFailure.INVALID_DATE, f"Unrecognized date {date_string!r}"
            )

        cached = self.cache.get(key)
        if cached is not None:
            self.stats["cache_hits"] += 1
            return cached

        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._load(key))
            self._in_flight[key] = task
            task.add_done_callback(lambda _: self._in_flight.pop(key, None))
        return await asyncio.shield(task)

    async def resolve_all(self, date_strings: list[str]) -> dict[str, TrackResult]:
        """Resolve several dates concurrently; returns results keyed by date."""
        unique_dates = list(dict.fromkeys(date_strings))
        results = await asyncio.gather(*(self.resolve(d) for d in unique_dates))
        return dict(zip(unique_dates, results))

    async def _load(self, key: str) -> TrackResult:
        resource = self.resource_for(key)
        self.stats["fetches"] += 1
        self.logger.debug(f"Fetching track {resource}")

        try:
            status, content = await asyncio.to_thread(self._fetch, resource)
        except (requests.exceptions.RequestException, OSError) as e:
            self.logger.error(f"Failed to fetch track {resource}: {e}")
            result = TrackResult.failed(key, TrackFailure.FETCH_ERROR, str(e))
        else:
            result = self._interpret(key, resource, status, content)

        if not result.ok:
            if result.failure == TrackFailure.NOT_FOUND:
                self.stats["not_found"] += 1
            else:
                self.stats["failures"] += 1

        self.cache.put(key, result)
        return result

    def _interpret(
        self, key: str, resource: str, status: int, content: bytes
    ) -> TrackResult:
        if status == 404:
            self.logger.debug(f"No track recorded for {key}")
            return TrackResult.failed(key, TrackFailure.NOT_FOUND)

        if not 200 <= status < 300:
            self.logger.warning(f"Failed to load track {resource}: HTTP {status}")
            return TrackResult.failed(key, TrackFailure.HTTP_ERROR, f"HTTP {status}")

        try:
            points = parse_gpx(content)
        except (ET.ParseError, ValueError) as e:
            self.logger.error(f"Error parsing GPX {resource}: {e}")
            return TrackResult.failed(key, TrackFailure.PARSE_ERROR, str(e))

        self.logger.debug(f"Loaded {len(points)} points from {resource}")
        return TrackResult.success(key, points)

    def _fetch(self, resource: str) -> tuple[int, bytes]:
        """Blocking fetch returning (status, body); a missing file reads as 404."""
        if self.is_remote:
            response = self.session.get(resource, timeout=self.timeout)
            return response.status_code, response.content

        if not os.path.isfile(resource):
            return 404, b""
        with open(resource, "rb") as f:
            return 200, f.read()
