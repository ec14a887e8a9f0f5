import json

import pytest
import requests

from room_schedule.config import Settings
from room_schedule.sources import (
    DirectoryPartitionSource,
    HttpPartitionSource,
    PartitionUnavailable,
    source_from_settings,
)

WEEK = {
    "weekStart": "2024-03-04",
    "weekEnd": "2024-03-10",
    "lastUpdate": "2024-03-03T22:00:00",
    "buildings": [
        {
            "buildingName": "Main Hall",
            "rooms": [
                {
                    "roomName": "Hall A",
                    "bookings": [
                        {"id": 1, "start": "2024-03-04T09:00", "end": "2024-03-04T10:00", "title": "Choir"},
                        {"start": "2024-03-04T10:00", "end": "2024-03-04T12:00"},
                        {"id": 2, "start": "soon", "end": None},
                    ],
                }
            ],
        }
    ],
}


def test_directory_source_reads_week_file(tmp_path):
    target = tmp_path / "2024" / "week-10.json"
    target.parent.mkdir()
    target.write_text(json.dumps(WEEK), encoding="utf-8")
    partition = DirectoryPartitionSource(tmp_path).fetch(2024, 10)
    room = partition.buildings[0].rooms[0]
    assert partition.buildings[0].name == "Main Hall"
    assert room.name == "Hall A"
    assert [b.is_real for b in room.bookings] == [True, False, True]
    assert room.bookings[2].start is None


def test_directory_source_missing_file(tmp_path):
    with pytest.raises(PartitionUnavailable) as info:
        DirectoryPartitionSource(tmp_path).fetch(2024, 11)
    assert info.value.week == 11


def test_directory_source_bad_json(tmp_path):
    target = tmp_path / "2024" / "week-10.json"
    target.parent.mkdir()
    target.write_text("{not json", encoding="utf-8")
    with pytest.raises(PartitionUnavailable):
        DirectoryPartitionSource(tmp_path).fetch(2024, 10)


def test_directory_source_wrong_shape(tmp_path):
    target = tmp_path / "2024" / "week-10.json"
    target.parent.mkdir()
    target.write_text(json.dumps({"buildings": []}), encoding="utf-8")
    with pytest.raises(PartitionUnavailable):
        DirectoryPartitionSource(tmp_path).fetch(2024, 10)


class FakeResponse:
    def __init__(self, status_code, body):
        self.status_code = status_code
        self.content = body

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeSession:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.urls = []

    def get(self, url, timeout=None, headers=None):
        self.urls.append(url)
        if self.exc is not None:
            raise self.exc
        return self.response


def test_http_source_fetches_from_base_url():
    session = FakeSession(FakeResponse(200, json.dumps(WEEK).encode()))
    source = HttpPartitionSource("https://example.org/bookings/", session=session)
    partition = source.fetch(2024, 10)
    assert session.urls == ["https://example.org/bookings/2024/week-10.json"]
    assert partition.weekEnd.isoformat() == "2024-03-10"


def test_http_source_non_2xx_is_unavailable():
    source = HttpPartitionSource("https://example.org/bookings", session=FakeSession(FakeResponse(404, b"")))
    with pytest.raises(PartitionUnavailable):
        source.fetch(2024, 10)


def test_http_source_transport_error_is_unavailable():
    source = HttpPartitionSource("https://example.org", session=FakeSession(exc=requests.ConnectionError("down")))
    with pytest.raises(PartitionUnavailable):
        source.fetch(2024, 10)


def test_source_from_settings_picks_transport(tmp_path):
    http = source_from_settings(Settings(BOOKINGS_SOURCE="https://example.org/data", FETCH_TIMEOUT_SECONDS=3))
    assert isinstance(http, HttpPartitionSource)
    assert http.timeout == 3
    directory = source_from_settings(
        Settings(BOOKINGS_SOURCE=str(tmp_path), PARTITION_PATH_TEMPLATE="{year}-{week:02d}.json")
    )
    assert isinstance(directory, DirectoryPartitionSource)
    assert directory.template == "{year}-{week:02d}.json"


def test_settings_reject_inverted_window():
    with pytest.raises(ValueError):
        Settings(TIMELINE_START_HOUR=20, TIMELINE_END_HOUR=8)


def test_directory_source_undecodable_bytes(tmp_path):
    target = tmp_path / "2024" / "week-10.json"
    target.parent.mkdir()
    target.write_bytes(b'{"weekStart": "\xff\xfe"}')
    with pytest.raises(PartitionUnavailable):
        DirectoryPartitionSource(tmp_path).fetch(2024, 10)


def test_undecodable_week_file_leaves_controller_without_data(tmp_path):
    from datetime import date

    from room_schedule.navigation import STATUS_NO_DATA, NavigationController

    target = tmp_path / "2024" / "week-10.json"
    target.parent.mkdir()
    target.write_bytes(b"\xff\xfe")
    ctl = NavigationController(DirectoryPartitionSource(tmp_path), today=lambda: date(2024, 3, 4))
    ctl.start()
    assert ctl.state.status == STATUS_NO_DATA
    assert ctl.state.missing_date == date(2024, 3, 4)


def test_badly_typed_booking_does_not_reject_the_week(tmp_path):
    week = {
        "weekStart": "2024-03-04",
        "weekEnd": "2024-03-10",
        "buildings": [
            {
                "name": "Main Hall",
                "rooms": [
                    {
                        "name": "Hall A",
                        "bookings": [
                            {"id": 1, "start": "2024-03-04T09:00", "end": "2024-03-04T10:00", "title": "Choir"},
                            {"id": 2, "start": "2024-03-04T11:00", "end": "2024-03-04T12:00", "title": 42},
                            {"id": {"ref": 3}, "start": "2024-03-04T13:00", "end": "2024-03-04T14:00", "renterName": ["x"]},
                            "not a booking",
                            None,
                        ],
                    }
                ],
            }
        ],
    }
    target = tmp_path / "2024" / "week-10.json"
    target.parent.mkdir()
    target.write_text(json.dumps(week), encoding="utf-8")
    bookings = DirectoryPartitionSource(tmp_path).fetch(2024, 10).buildings[0].rooms[0].bookings
    assert len(bookings) == 3
    assert bookings[0].title == "Choir"
    assert bookings[1].title == "42"
    assert bookings[2].is_real
    assert bookings[2].renterName is None
