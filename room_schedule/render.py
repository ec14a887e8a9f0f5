"""Builds the ``DayView`` the browser shell paints.

Rendering is a pure function of the navigation state and the settings: it
reads the loaded week, never fetches and never mutates state.

Building selection: buildings in the filter are shown; an empty filter
shows every building, whether the user cleared it or no building had
bookings that day.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional, Set

from .config import Settings
from .models import DayView, OverviewBox, RoomTimeline
from .navigation import STATUS_LOADED, STATUS_LOADING, ViewState
from .store import BookingStore
from .timeline import layout
from .weeks import iso_week_bounds, week_identifier


def date_label(day: date) -> str:
    return f"{day:%A} {day.day} {day:%B %Y}"


def week_label(day: date, store: Optional[BookingStore] = None) -> str:
    _, week = week_identifier(day)
    if store is not None and store.loaded:
        start, end = store.partition.weekStart, store.partition.weekEnd
    else:
        start, end = iso_week_bounds(day)
    return f"Week {week}, {start:%d %b} - {end:%d %b %Y}"


def shown_buildings(filtered: Iterable[int], building_count: int) -> Set[int]:
    selected = {i for i in filtered if 0 <= i < building_count}
    return selected or set(range(building_count))


def render_day(
    store: BookingStore,
    selected_date: date,
    filtered_indices: Set[int],
    *,
    window_start: int,
    window_end: int,
    min_gap_minutes: float,
    palette_size: int,
) -> DayView:
    """Overview boxes, room timelines and the booking list for one day."""
    partition = store.partition
    overview = store.overview_for(selected_date)
    shown = shown_buildings(filtered_indices, store.building_count)

    boxes: List[OverviewBox] = []
    timelines: List[RoomTimeline] = []
    for index, building in enumerate(partition.buildings if partition else []):
        color = index % palette_size
        boxes.append(
            OverviewBox(
                buildingIndex=index,
                buildingName=building.name,
                isSelected=index in filtered_indices,
                colorIndex=color,
                summary=overview[index],
            )
        )
        if index not in shown:
            continue
        for room in building.rooms:
            blocks = layout(
                store.room_bookings_on_date(room, selected_date),
                window_start,
                window_end,
                min_gap_minutes,
            )
            timelines.append(
                RoomTimeline(
                    buildingIndex=index,
                    buildingName=building.name,
                    roomName=room.name,
                    colorIndex=color,
                    blocks=blocks,
                )
            )

    last_update = None
    if partition is not None and partition.lastUpdate is not None:
        last_update = f"{partition.lastUpdate:%Y-%m-%d %H:%M}"

    return DayView(
        date=selected_date.isoformat(),
        dateLabel=date_label(selected_date),
        weekLabel=week_label(selected_date, store),
        status=STATUS_LOADED,
        lastUpdate=last_update,
        windowStart=window_start,
        windowEnd=window_end,
        hourTicks=list(range(window_start, window_end + 1)),
        overviewBoxes=boxes,
        timelines=timelines,
        details=store.details_for(selected_date, shown),
        filteredIndices=sorted(filtered_indices),
    )


def render_empty(selected_date: date, status: str, settings: Settings) -> DayView:
    if status == STATUS_LOADING:
        message = f"Loading bookings for {selected_date.isoformat()}..."
    else:
        message = f"No booking data available for {selected_date.isoformat()}."
    return DayView(
        date=selected_date.isoformat(),
        dateLabel=date_label(selected_date),
        weekLabel=week_label(selected_date),
        status=status,
        message=message,
        windowStart=settings.timeline_start_hour,
        windowEnd=settings.timeline_end_hour,
        hourTicks=list(range(settings.timeline_start_hour, settings.timeline_end_hour + 1)),
    )


def render(state: ViewState, settings: Settings) -> DayView:
    """Render ``state`` for the shell."""
    status = state.status
    if status != STATUS_LOADED:
        view = render_empty(state.selected_date, status, settings)
        view.filteredIndices = sorted(state.filtered_indices)
        view.userClearedFilter = state.user_cleared_filter
        return view

    view = render_day(
        state.store,
        state.selected_date,
        state.filtered_indices,
        window_start=settings.timeline_start_hour,
        window_end=settings.timeline_end_hour,
        min_gap_minutes=settings.min_gap_minutes,
        palette_size=settings.palette_size,
    )
    view.userClearedFilter = state.user_cleared_filter
    return view
