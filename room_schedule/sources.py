"""Week file sources.

A source returns the ``WeekPartition`` for an ISO ``(year, week)``. Files are
either read from a local directory or fetched over HTTP with ``requests``.
Every failure (missing file, non-2xx status, bad JSON, wrong shape) is
reported as ``PartitionUnavailable`` so callers only handle one exception.
Requests are not retried.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol, Union

import requests
from pydantic import ValidationError

from .config import Settings
from .models import WeekPartition
from .weeks import DEFAULT_PATH_TEMPLATE, partition_path

logger = logging.getLogger(__name__)


class PartitionUnavailable(Exception):
    """No usable week file exists for the requested week."""

    def __init__(self, year: int, week: int, reason: str) -> None:
        super().__init__(f"week {year}-W{week:02d} unavailable: {reason}")
        self.year = year
        self.week = week
        self.reason = reason


class PartitionSource(Protocol):
    def fetch(self, year: int, week: int) -> WeekPartition:
        ...


def _parse(raw: Union[str, bytes], year: int, week: int) -> WeekPartition:
    try:
        return WeekPartition.model_validate(json.loads(raw))
    except (ValueError, ValidationError) as exc:
        # JSONDecodeError and UnicodeDecodeError are both ValueErrors
        raise PartitionUnavailable(year, week, f"invalid week file: {exc}") from exc


class DirectoryPartitionSource:
    """Reads week files below a local directory."""

    def __init__(self, root: Union[str, Path], template: str = DEFAULT_PATH_TEMPLATE) -> None:
        self.root = Path(root)
        self.template = template

    def fetch(self, year: int, week: int) -> WeekPartition:
        path = self.root / partition_path(year, week, self.template)
        try:
            raw = path.read_bytes()
        except OSError as exc:
            logger.warning("Cannot read week file %s: %s", path, exc)
            raise PartitionUnavailable(year, week, f"cannot read {path}") from exc
        return _parse(raw, year, week)


class HttpPartitionSource:
    """Fetches week files from ``{base_url}/{path}``."""

    def __init__(
        self,
        base_url: str,
        template: str = DEFAULT_PATH_TEMPLATE,
        *,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.template = template
        self.timeout = timeout
        self.session = session or requests.Session()

    def url_for(self, year: int, week: int) -> str:
        return f"{self.base_url}/{partition_path(year, week, self.template)}"

    def fetch(self, year: int, week: int) -> WeekPartition:
        url = self.url_for(year, week)
        try:
            response = self.session.get(url, timeout=self.timeout, headers={"Accept": "application/json"})
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("Week file request failed for %s: %s", url, exc)
            raise PartitionUnavailable(year, week, f"request failed: {exc}") from exc
        return _parse(response.content, year, week)


def source_from_settings(settings: Settings) -> PartitionSource:
    """Build the source described by ``BOOKINGS_SOURCE``.

    An ``http://`` or ``https://`` prefix selects HTTP; anything else is
    treated as a directory path on the host filesystem.
    """
    raw = settings.bookings_source.strip()
    if raw.lower().startswith(("http://", "https://")):
        return HttpPartitionSource(raw, settings.partition_path_template, timeout=settings.fetch_timeout_seconds)
    return DirectoryPartitionSource(raw, settings.partition_path_template)
