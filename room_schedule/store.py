"""Queries over the currently loaded week.

The store holds exactly one ``WeekPartition``; loading another week replaces
it. Every query counts real bookings only (those with an ``id``) and matches
days on the calendar date the booking starts.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional, Set

from .models import Booking, BookingDetail, BuildingSummary, Room, WeekPartition
from .timeline import format_range
from .weeks import DayLike, to_day


def _real_on(bookings: List[Booking], day: date) -> List[Booking]:
    return [b for b in bookings if b.is_real and b.day == day]


def _well_formed(booking: Booking) -> bool:
    return booking.end is not None and booking.end > booking.start


class BookingStore:
    """Read-only view of one week of bookings."""

    def __init__(self, partition: Optional[WeekPartition] = None) -> None:
        self.partition = partition

    def load(self, partition: WeekPartition) -> None:
        self.partition = partition

    def clear(self) -> None:
        self.partition = None

    @property
    def loaded(self) -> bool:
        return self.partition is not None

    @property
    def building_count(self) -> int:
        return len(self.partition.buildings) if self.partition else 0

    def room_bookings_on_date(self, room: Room, value: DayLike) -> List[Booking]:
        """Real bookings of ``room`` starting on the given day."""
        return _real_on(room.bookings, to_day(value))

    def bookings_on_date(self, value: DayLike) -> List[Booking]:
        """Real bookings of every room starting on the given day."""
        if self.partition is None:
            return []
        day = to_day(value)
        out: List[Booking] = []
        for building in self.partition.buildings:
            for room in building.rooms:
                out.extend(_real_on(room.bookings, day))
        return out

    def buildings_with_bookings(self, value: DayLike) -> Set[int]:
        """Indices of buildings with at least one real booking on the day."""
        if self.partition is None:
            return set()
        day = to_day(value)
        return {
            index
            for index, building in enumerate(self.partition.buildings)
            if any(_real_on(room.bookings, day) for room in building.rooms)
        }

    def overview_for(self, value: DayLike) -> Dict[int, BuildingSummary]:
        """Earliest start and latest end per building, or free all day."""
        if self.partition is None:
            return {}
        day = to_day(value)
        result: Dict[int, BuildingSummary] = {}
        for index, building in enumerate(self.partition.buildings):
            day_bookings = [
                b
                for room in building.rooms
                for b in _real_on(room.bookings, day)
                if _well_formed(b)
            ]
            if not day_bookings:
                result[index] = BuildingSummary(freeAllDay=True)
                continue
            first = min(b.start for b in day_bookings)
            last = max(b.end for b in day_bookings)
            result[index] = BuildingSummary(firstStart=f"{first:%H:%M}", lastEnd=f"{last:%H:%M}")
        return result

    def details_for(self, value: DayLike, buildings: Optional[Set[int]] = None) -> List[BookingDetail]:
        """Every real booking of the day, grouped by building and room, by start time.

        ``buildings`` limits the listing to those building indices.
        """
        if self.partition is None:
            return []
        day = to_day(value)
        details: List[BookingDetail] = []
        for index, building in enumerate(self.partition.buildings):
            if buildings is not None and index not in buildings:
                continue
            for room in building.rooms:
                day_bookings = [b for b in _real_on(room.bookings, day) if _well_formed(b)]
                for b in sorted(day_bookings, key=lambda b: b.start):
                    details.append(
                        BookingDetail(
                            buildingName=building.name,
                            roomName=room.name,
                            displayRange=format_range(b),
                            title=b.title,
                            renterName=b.renterName,
                        )
                    )
        return details
