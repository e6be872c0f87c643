"""Full schedule view state: the public DevConnect catalog with filters."""
from __future__ import annotations

import typing as t
from datetime import datetime, timezone, tzinfo

from gateways.catalog import CatalogGateway
from schedule.derivation import add_to_schedule, derive_schedule, display_timezone, event_days
from schedule.models import ALL, CategoryFilter, DayGroup, FilterSelection
from services.shared.models import CatalogEvent, Reminder


ViewState = t.Literal["loading", "error", "empty", "ready"]
ReminderSink = t.Callable[[Reminder], t.Any]


class FullScheduleView:
    """Catalog snapshot, load state and the current filter selection."""

    def __init__(
        self,
        gateway: t.Optional[CatalogGateway] = None,
        on_add_to_schedule: t.Optional[ReminderSink] = None,
        clock: t.Optional[t.Callable[[], datetime]] = None,
        tz: t.Optional[tzinfo] = None,
    ) -> None:
        self.gateway = gateway or CatalogGateway()
        self.events: list[CatalogEvent] = []
        self.loading = False
        self.error: t.Optional[str] = None
        self.selection = FilterSelection()
        self.added: set[int] = set()
        self._on_add_to_schedule = on_add_to_schedule
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self.tz = tz or display_timezone()

    def now(self) -> datetime:
        return self._clock()

    @property
    def state(self) -> ViewState:
        if self.loading:
            return "loading"
        if self.error:
            return "error"
        if not self.events:
            return "empty"
        return "ready"

    async def load(self) -> list[CatalogEvent]:
        """Fetch the catalog. Nothing is cached; every call hits the provider."""
        self.loading = True
        self.error = None
        try:
            events = await self.gateway.fetch()
        finally:
            self.loading = False
        self.events = events
        self.error = self.gateway.error
        return self.events

    async def retry(self) -> list[CatalogEvent]:
        return await self.load()

    def set_category(self, category: t.Union[CategoryFilter, str]) -> None:
        self.selection = FilterSelection(category=CategoryFilter(category), day=self.selection.day)

    def select_day(self, day: str) -> None:
        if day != ALL and day not in self.days():
            raise ValueError(f"Unknown day {day!r}; choose one of {self.days()}")
        self.selection = FilterSelection(category=self.selection.category, day=day)

    def days(self) -> list[str]:
        return event_days(self.events, self.tz)

    def groups(self) -> list[DayGroup]:
        return derive_schedule(self.events, self.selection, self.now(), self.tz)

    def find(self, event_id: int) -> t.Optional[CatalogEvent]:
        return next((e for e in self.events if e.id == event_id), None)

    @property
    def can_add_to_schedule(self) -> bool:
        return self._on_add_to_schedule is not None

    def is_added(self, event_id: int) -> bool:
        return event_id in self.added

    def add_to_schedule(self, event: CatalogEvent) -> t.Optional[Reminder]:
        """Copy `event` into the personal schedule and mark it as added.

        Returns None when the event was already added or no personal
        schedule is attached.
        """
        if self._on_add_to_schedule is None or self.is_added(event.id):
            return None
        reminder = add_to_schedule(event)
        self._on_add_to_schedule(reminder)
        self.added.add(event.id)
        return reminder
