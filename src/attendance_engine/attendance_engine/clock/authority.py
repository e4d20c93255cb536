from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional, Protocol, Sequence

import pytz
import requests

from ..common.datetime_utils import get_zone
from ..core.constants import DEFAULT_CLOCK_TIMEOUT_SECONDS, DEFAULT_TIME_SOURCES
from ..core.exceptions import ClockUnavailable

logger = logging.getLogger(__name__)


class ClockAuthority(Protocol):
    def now(self) -> datetime:
        """Current instant, timezone-aware in the system's civil zone."""

        raise NotImplementedError


def _parse_timeapi_io(payload: dict, zone) -> datetime:
    # timeapi.io returns the civil fields for the requested zone.
    naive = datetime(
        int(payload["year"]),
        int(payload["month"]),
        int(payload["day"]),
        int(payload["hour"]),
        int(payload["minute"]),
        int(payload["seconds"]),
        int(payload.get("milliSeconds") or 0) * 1000,
    )
    return zone.localize(naive)


def _parse_worldtimeapi(payload: dict, zone) -> datetime:
    return datetime.fromtimestamp(int(payload["unixtime"]), tz=pytz.utc).astimezone(zone)


class TimeSource:
    """One trusted HTTP time endpoint and how to read its payload."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip("/")
        if "timeapi.io" in self.base_url:
            self._parser: Callable[[dict, object], datetime] = _parse_timeapi_io
        elif "worldtimeapi" in self.base_url:
            self._parser = _parse_worldtimeapi
        else:
            raise ValueError(f"Unsupported time source: {base_url!r}")

    def request_url(self, zone_name: str) -> tuple[str, Optional[dict]]:
        if self._parser is _parse_timeapi_io:
            return self.base_url, {"timeZone": zone_name}
        return f"{self.base_url}/{zone_name}", None

    def parse(self, payload: dict, zone) -> datetime:
        return self._parser(payload, zone)


class HttpClockAuthority:
    """Reads the current instant from trusted time services.

    Sources are tried in order with a bounded timeout each. There is no
    fallback to the local clock: when every source fails the caller gets
    ``ClockUnavailable`` and must not mutate anything.
    """

    def __init__(
        self,
        *,
        timezone: str,
        sources: Sequence[str] = DEFAULT_TIME_SOURCES,
        timeout: float = DEFAULT_CLOCK_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        self._zone_name = timezone
        self._zone = get_zone(timezone)
        self._sources = [TimeSource(s) for s in sources]
        self._timeout = float(timeout)
        self._session = session or requests.Session()

    @property
    def zone(self):
        return self._zone

    def now(self) -> datetime:
        for source in self._sources:
            url, params = source.request_url(self._zone_name)
            try:
                response = self._session.get(url, params=params, timeout=self._timeout)
                response.raise_for_status()
                return source.parse(response.json(), self._zone)
            except (requests.RequestException, ValueError, KeyError, TypeError) as exc:
                logger.warning("Time source %s failed: %s", source.base_url, exc)

        logger.error("All %d time sources failed; refusing to use the local clock", len(self._sources))
        raise ClockUnavailable()
