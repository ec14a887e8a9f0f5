"""Pydantic data models for the week files and the API responses.

The first group mirrors the JSON written by the upstream collector: one file
per ISO week holding buildings, their rooms and each room's bookings. The
second group is what the API hands to the browser shell. Field names follow
the JSON on both sides.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import List, Optional, Union

from pydantic import AliasChoices, BaseModel, Field, field_validator

logger = logging.getLogger(__name__)


def parse_wall_time(value: object) -> Optional[datetime]:
    """Parse an ISO timestamp into a naive wall-clock datetime.

    Offsets are dropped rather than converted: the date and time printed in
    the file are the ones shown, which keeps day filtering equivalent to a
    ``YYYY-MM-DD`` prefix match. Returns ``None`` for anything unparseable.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        return None
    s = value.strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(s).replace(tzinfo=None)
    except ValueError:
        return None


class Booking(BaseModel):
    """A single reservation of a room.

    Records without an ``id`` are placeholders for free slots and never count
    as occupancy. Broken timestamps are kept as ``None`` so one bad record
    does not reject the whole week.
    """

    id: Optional[Union[int, str]] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    title: Optional[str] = None
    renterName: Optional[str] = None

    @field_validator("start", "end", mode="before")
    @classmethod
    def _lenient_timestamp(cls, value: object) -> Optional[datetime]:
        parsed = parse_wall_time(value)
        if parsed is None and value not in (None, ""):
            logger.debug("Ignoring unparseable booking timestamp %r", value)
        return parsed

    @field_validator("title", "renterName", mode="before")
    @classmethod
    def _lenient_text(cls, value: object) -> Optional[str]:
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, (int, float)):
            return str(value)
        logger.debug("Ignoring non-text booking field %r", value)
        return None

    @field_validator("id", mode="before")
    @classmethod
    def _lenient_id(cls, value: object) -> Optional[Union[int, str]]:
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, bool) or isinstance(value, float):
            return str(value)
        if isinstance(value, int):
            return value
        # A present but unusable id still marks a real booking.
        logger.debug("Coercing booking id %r to text", value)
        return str(value)

    @property
    def is_real(self) -> bool:
        return self.id is not None

    @property
    def day(self) -> Optional[date]:
        """Calendar day the booking starts on."""
        return self.start.date() if self.start is not None else None


class Room(BaseModel):
    name: str = Field(validation_alias=AliasChoices("name", "roomName"))
    bookings: List[Booking] = []

    @field_validator("bookings", mode="before")
    @classmethod
    def _drop_non_records(cls, value: object) -> object:
        if value is None:
            return []
        if not isinstance(value, list):
            return value
        kept = [item for item in value if isinstance(item, (dict, Booking))]
        if len(kept) != len(value):
            logger.debug("Dropped %d booking entries that are not records", len(value) - len(kept))
        return kept


class Building(BaseModel):
    name: str = Field(validation_alias=AliasChoices("name", "buildingName"))
    rooms: List[Room] = []


class WeekPartition(BaseModel):
    """One week of bookings for every building.

    ``weekStart``/``weekEnd`` are taken as written; older files are
    Sunday-aligned, newer ones Monday-aligned.
    """

    weekStart: date
    weekEnd: date
    buildings: List[Building] = []
    lastUpdate: Optional[datetime] = None


# --- API responses ---------------------------------------------------------


class TimelineBlock(BaseModel):
    """A booking laid out on the timeline; fractions are in [0, 1]."""

    startFraction: float
    endFraction: float
    title: Optional[str] = None
    renterName: Optional[str] = None
    displayRange: str
    bookingId: Optional[Union[int, str]] = None


class BuildingSummary(BaseModel):
    """First start and last end of a building's day, or free all day."""

    firstStart: Optional[str] = None
    lastEnd: Optional[str] = None
    freeAllDay: bool = False


class OverviewBox(BaseModel):
    buildingIndex: int
    buildingName: str
    isSelected: bool
    colorIndex: int
    summary: BuildingSummary


class RoomTimeline(BaseModel):
    buildingIndex: int
    buildingName: str
    roomName: str
    colorIndex: int
    blocks: List[TimelineBlock] = []


class BookingDetail(BaseModel):
    buildingName: str
    roomName: str
    displayRange: str
    title: Optional[str] = None
    renterName: Optional[str] = None


class DayView(BaseModel):
    """Everything the shell needs to paint one day."""

    date: str
    dateLabel: str
    weekLabel: str
    status: str
    message: Optional[str] = None
    lastUpdate: Optional[str] = None
    windowStart: int
    windowEnd: int
    hourTicks: List[int] = []
    overviewBoxes: List[OverviewBox] = []
    timelines: List[RoomTimeline] = []
    details: List[BookingDetail] = []
    filteredIndices: List[int] = []
    userClearedFilter: bool = False
