"""Selected-date navigation and building filter state.

``NavigationController`` owns a ``ViewState`` and moves it between two
states: no week loaded, or one week loaded. Moving to a day inside the
loaded week only changes the selected date; any other day requires the
week file for that day.

Fetching is split in two so a caller can do the I/O outside its own lock:
``navigate_to`` returns a ``FetchTicket`` when a week file is needed and
``complete_fetch`` applies the result. Only the most recently issued ticket
is honoured; a response for an older request is dropped, so a slow answer
can never replace the week the user has since moved to.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Callable, Optional, Set

from .models import WeekPartition
from .sources import PartitionSource, PartitionUnavailable
from .store import BookingStore
from .weeks import DayLike, partition_contains, to_day, week_identifier

logger = logging.getLogger(__name__)

STATUS_LOADED = "loaded"
STATUS_LOADING = "loading"
STATUS_NO_DATA = "no-data"


@dataclass(frozen=True)
class FetchTicket:
    """A request for the week file covering ``date``."""

    generation: int
    date: date
    year: int
    week: int


@dataclass
class ViewState:
    selected_date: date
    store: BookingStore = field(default_factory=BookingStore)
    filtered_indices: Set[int] = field(default_factory=set)
    user_cleared_filter: bool = False
    missing_date: Optional[date] = None
    pending: Optional[FetchTicket] = None

    @property
    def status(self) -> str:
        if self.pending is not None:
            return STATUS_LOADING
        if self.store.loaded:
            return STATUS_LOADED
        return STATUS_NO_DATA


class NavigationController:
    def __init__(
        self,
        source: Optional[PartitionSource] = None,
        *,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.source = source
        self._today = today
        self._generation = 0
        self.state = ViewState(selected_date=today())

    # --- two-phase API ---------------------------------------------------

    def navigate_to(self, value: DayLike) -> Optional[FetchTicket]:
        """Select a day; return a ticket if its week file must be fetched."""
        new_date = to_day(value)
        state = self.state
        if state.store.loaded and partition_contains(state.store.partition, new_date):
            if state.pending is not None:
                logger.debug("Superseding pending fetch for %s", state.pending.date)
            state.pending = None
            state.selected_date = new_date
            self._apply_default_filter()
            return None

        self._generation += 1
        year, week = week_identifier(new_date)
        ticket = FetchTicket(self._generation, new_date, year, week)
        state.selected_date = new_date
        state.pending = ticket
        logger.info("Requesting week %s-W%02d for %s", year, week, new_date)
        return ticket

    def complete_fetch(self, ticket: FetchTicket, partition: Optional[WeekPartition]) -> bool:
        """Apply the outcome of ``ticket``; ``partition`` is ``None`` on failure.

        Returns False when the ticket was superseded and nothing changed.
        """
        state = self.state
        if state.pending is None or state.pending.generation != ticket.generation:
            logger.debug("Discarding stale response for %s (generation %s)", ticket.date, ticket.generation)
            return False
        state.pending = None
        if partition is not None and not partition_contains(partition, ticket.date):
            logger.warning(
                "Week file %s-W%02d covers %s..%s, not %s",
                ticket.year,
                ticket.week,
                partition.weekStart,
                partition.weekEnd,
                ticket.date,
            )
            partition = None
        if partition is None:
            state.store.clear()
            state.missing_date = ticket.date
            return True

        state.store.load(partition)
        state.missing_date = None
        state.filtered_indices = set()
        state.user_cleared_filter = False
        self._apply_default_filter()
        return True

    def fetch(self, ticket: FetchTicket) -> Optional[WeekPartition]:
        """Fetch the week file for ``ticket`` from the configured source."""
        if self.source is None:
            raise RuntimeError("NavigationController has no partition source")
        try:
            return self.source.fetch(ticket.year, ticket.week)
        except PartitionUnavailable as exc:
            logger.warning("No booking data for %s: %s", ticket.date, exc)
            return None

    # --- synchronous navigation -----------------------------------------

    def jump_to(self, value: DayLike) -> None:
        ticket = self.navigate_to(value)
        if ticket is not None:
            self.complete_fetch(ticket, self.fetch(ticket))

    def step(self, days: int) -> None:
        self.jump_to(self.state.selected_date + timedelta(days=days))

    def today(self) -> date:
        """Today according to the controller's clock."""
        return self._today()

    def go_today(self) -> None:
        self.jump_to(self.today())

    def start(self) -> None:
        """Initial load: today's week."""
        self.go_today()

    # --- building filter -------------------------------------------------

    def toggle_building_filter(self, index: int) -> None:
        if not 0 <= index < self.state.store.building_count:
            raise IndexError(f"unknown building index {index}")
        indices = self.state.filtered_indices
        if index in indices:
            indices.remove(index)
            if not indices:
                self.state.user_cleared_filter = True
        else:
            indices.add(index)

    def clear_filter(self) -> None:
        self.state.filtered_indices = set()
        self.state.user_cleared_filter = True

    def _apply_default_filter(self) -> None:
        # An explicitly cleared filter stays cleared until the next week loads.
        state = self.state
        if state.filtered_indices or state.user_cleared_filter:
            return
        state.filtered_indices = state.store.buildings_with_bookings(state.selected_date)
