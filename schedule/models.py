"""
Data models for the derived DevConnect schedule.

Everything here is recomputed from the catalog snapshot and the current
filter selection; nothing is persisted.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from services.shared.models import CatalogEvent


ALL = "all"


class TimeStatus(Enum):
    """Where an event's start falls relative to now."""
    PAST = "past"
    TODAY = "today"
    TOMORROW = "tomorrow"
    UPCOMING = "upcoming"
    FUTURE = "future"


class CategoryFilter(Enum):
    """Category buttons of the full schedule."""
    ALL = "all"
    CORE = "core"
    TODAY = "today"
    UPCOMING = "upcoming"


@dataclass(frozen=True)
class TimeStatusInfo:
    """A status plus its badge text, e.g. (UPCOMING, "3 days")."""
    status: TimeStatus
    text: str


@dataclass(frozen=True)
class FilterSelection:
    """The category filter and day filter currently selected."""
    category: CategoryFilter = CategoryFilter.ALL
    day: str = ALL  # "all" or a day key such as "Mon, Nov 17"


@dataclass
class DayGroup:
    """Events sharing one day key, in start-time order."""
    day: str
    events: list[CatalogEvent] = field(default_factory=list)
