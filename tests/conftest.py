from datetime import date
from typing import Dict, List, Optional, Tuple

import pytest

from room_schedule.models import WeekPartition
from room_schedule.sources import PartitionUnavailable


def make_partition(week_start: str, week_end: str, buildings: List[dict], last_update: Optional[str] = None) -> WeekPartition:
    return WeekPartition.model_validate(
        {"weekStart": week_start, "weekEnd": week_end, "buildings": buildings, "lastUpdate": last_update}
    )


def booking(id, start: str, end: str, title: Optional[str] = None, renter: Optional[str] = None) -> dict:
    return {"id": id, "start": start, "end": end, "title": title, "renterName": renter}


class StubSource:
    """In-memory source keyed by (year, week); records every request."""

    def __init__(self, partitions: Optional[Dict[Tuple[int, int], WeekPartition]] = None) -> None:
        self.partitions = partitions or {}
        self.calls: List[Tuple[int, int]] = []

    def fetch(self, year: int, week: int) -> WeekPartition:
        self.calls.append((year, week))
        try:
            return self.partitions[(year, week)]
        except KeyError:
            raise PartitionUnavailable(year, week, "not found") from None


@pytest.fixture
def week10() -> WeekPartition:
    """ISO week 2024-W10 (Mon 4 March - Sun 10 March) with three buildings."""
    return make_partition(
        "2024-03-04",
        "2024-03-10",
        [
            {
                "name": "Main Hall",
                "rooms": [
                    {
                        "name": "Hall A",
                        "bookings": [
                            booking(1, "2024-03-04T09:00", "2024-03-04T10:00", "Choir", "Anna"),
                            booking(None, "2024-03-04T11:00", "2024-03-04T12:00"),
                            booking(2, "2024-03-05T18:00", "2024-03-05T20:00", "Yoga"),
                        ],
                    },
                    {
                        "name": "Hall B",
                        "bookings": [booking(3, "2024-03-04T14:00", "2024-03-04T16:30", "Chess club")],
                    },
                ],
            },
            {
                "name": "Annex",
                "rooms": [{"name": "Room 1", "bookings": [booking(4, "2024-03-06T08:00", "2024-03-06T09:00")]}],
            },
            {
                "buildingName": "Gym",
                "rooms": [{"roomName": "Court", "bookings": [booking(5, "2024-03-04T17:00", "2024-03-04T21:00", "Futsal")]}],
            },
        ],
        last_update="2024-03-03T22:15:00Z",
    )


@pytest.fixture
def week11() -> WeekPartition:
    return make_partition(
        "2024-03-11",
        "2024-03-17",
        [
            {"name": "Main Hall", "rooms": [{"name": "Hall A", "bookings": []}]},
            {"name": "Annex", "rooms": [{"name": "Room 1", "bookings": [booking(9, "2024-03-11T10:00", "2024-03-11T11:00")]}]},
            {"name": "Gym", "rooms": [{"name": "Court", "bookings": []}]},
        ],
    )


@pytest.fixture
def stub_source(week10, week11) -> StubSource:
    return StubSource({(2024, 10): week10, (2024, 11): week11})


@pytest.fixture
def fixed_today():
    return lambda: date(2024, 3, 4)
