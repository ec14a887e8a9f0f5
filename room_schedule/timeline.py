"""Timeline layout for one room on one day.

Bookings are placed on a fixed hour window as blocks whose position and
width are fractions of that window. Blocks never overlap: each start is
pushed past the previous block's end plus a small gap, so back-to-back or
overlapping bookings stay visually distinct. Overlaps are not reported as
conflicts.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, List

from .models import Booking, TimelineBlock

logger = logging.getLogger(__name__)


def _hour_of_day(ts: datetime, midnight: datetime) -> float:
    """Hours elapsed since ``midnight``; may exceed 24 for spill-over ends."""
    return (ts - midnight).total_seconds() / 3600.0


def format_range(booking: Booking) -> str:
    """``"HH:MM-HH:MM"`` of the booking as written in the file."""
    return f"{booking.start:%H:%M}-{booking.end:%H:%M}"


def layout(
    bookings: Iterable[Booking],
    window_start: float,
    window_end: float,
    min_gap_minutes: float,
) -> List[TimelineBlock]:
    """Lay out same-day, real bookings of one room on ``[window_start, window_end]``.

    Args:
        bookings: the room's bookings for the day, in any order. Callers
            filter out placeholders and other days beforehand.
        window_start: first visible hour (e.g. 7 for 07:00).
        window_end: last visible hour (e.g. 23 for 23:00).
        min_gap_minutes: minimum distance between consecutive blocks.

    Returns:
        Blocks ordered by start time. Bookings with a missing or inverted
        interval, or that end up empty after clipping, are left out.

    Raises:
        ValueError: for an empty window or a negative gap.
    """
    if window_end <= window_start:
        raise ValueError(f"empty timeline window {window_start}..{window_end}")
    if min_gap_minutes < 0:
        raise ValueError("min_gap_minutes must not be negative")

    usable: List[Booking] = []
    for booking in bookings:
        if booking.start is None or booking.end is None or booking.end <= booking.start:
            logger.debug("Dropping malformed booking id=%s start=%s end=%s", booking.id, booking.start, booking.end)
            continue
        usable.append(booking)
    # sorted() is stable, so equal starts keep their input order.
    usable = sorted(usable, key=lambda b: b.start)

    span = window_end - window_start
    gap = min_gap_minutes / 60.0
    blocks: List[TimelineBlock] = []
    prev_end = None
    for booking in usable:
        midnight = booking.start.replace(hour=0, minute=0, second=0, microsecond=0)
        start = max(window_start, _hour_of_day(booking.start, midnight))
        end = min(window_end, _hour_of_day(booking.end, midnight))
        if prev_end is not None and start < prev_end + gap:
            start = prev_end + gap
        if end <= start:
            continue
        blocks.append(
            TimelineBlock(
                startFraction=(start - window_start) / span,
                endFraction=(end - window_start) / span,
                title=booking.title,
                renterName=booking.renterName,
                displayRange=format_range(booking),
                bookingId=booking.id,
            )
        )
        prev_end = end
    return blocks
