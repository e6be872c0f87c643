"""Derivation of the grouped, filtered DevConnect schedule.

All functions here are pure: the catalog snapshot, the current time and the
display timezone are passed in, so the same inputs always give the same
schedule. Timestamps that can't be parsed never raise; they classify as past
and show up under an "Invalid date" heading.
"""
from __future__ import annotations

import logging
import os
import typing as t
from datetime import date, datetime, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from schedule.models import (
    ALL,
    CategoryFilter,
    DayGroup,
    FilterSelection,
    TimeStatus,
    TimeStatusInfo,
)
from services.shared.models import CatalogEvent, Reminder


logger = logging.getLogger(__name__)

INVALID_DATE = "Invalid date"
REMINDER_ID_PREFIX = "devconnect-"
REMINDER_DESCRIPTION_PREFIX = "DevConnect Event: "
REMINDER_DESCRIPTION_LENGTH = 100

MS_PER_HOUR = 3_600_000
UPCOMING_HORIZON_HOURS = 7 * 24

_UPCOMING_STATUSES = {TimeStatus.UPCOMING, TimeStatus.TOMORROW, TimeStatus.FUTURE}


def display_timezone() -> tzinfo:
    """Timezone used for day keys: ROCKY_DISPLAY_TZ, else the local zone."""
    name = os.getenv("ROCKY_DISPLAY_TZ")
    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning("Unknown ROCKY_DISPLAY_TZ %r; using local time", name)
    return datetime.now().astimezone().tzinfo or timezone.utc


def parse_timestamp(value: t.Union[str, datetime, None]) -> t.Optional[datetime]:
    """Parse an ISO 8601 timestamp into an aware datetime, or None.

    Naive values are taken to be UTC.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _as_aware(now: datetime) -> datetime:
    return now if now.tzinfo is not None else now.replace(tzinfo=timezone.utc)


def _diff_ms(target: datetime, now: datetime) -> int:
    return (target - _as_aware(now)) // timedelta(milliseconds=1)


def classify(start_time: t.Union[str, datetime, None], now: datetime) -> TimeStatusInfo:
    """Classify an event start relative to `now`.

    Hours and days are whole, truncated counts of the elapsed milliseconds,
    not calendar-day differences: 23h59m ahead is still "today". An event
    counts as upcoming up to exactly seven days ahead.
    """
    target = parse_timestamp(start_time)
    if target is None:
        return TimeStatusInfo(TimeStatus.PAST, INVALID_DATE)

    diff_ms = _diff_ms(target, now)
    if diff_ms < 0:
        return TimeStatusInfo(TimeStatus.PAST, "Completed")

    diff_hours = diff_ms // MS_PER_HOUR
    diff_days = diff_hours // 24
    if diff_days == 0:
        return TimeStatusInfo(TimeStatus.TODAY, "Today")
    if diff_days == 1:
        return TimeStatusInfo(TimeStatus.TOMORROW, "Tomorrow")
    # hour count, not whole days: 7d+1h is already future
    if diff_hours <= UPCOMING_HORIZON_HOURS:
        return TimeStatusInfo(TimeStatus.UPCOMING, f"{diff_days} days")
    return TimeStatusInfo(TimeStatus.FUTURE, f"{diff_days} days")


def _to_local(start_time: t.Union[str, datetime, None], tz: tzinfo) -> t.Optional[datetime]:
    parsed = parse_timestamp(start_time)
    if parsed is None:
        return None
    try:
        return parsed.astimezone(tz)
    except OverflowError:
        return None


def _local_date(start_time: t.Union[str, datetime, None], tz: tzinfo) -> t.Optional[date]:
    local = _to_local(start_time, tz)
    return local.date() if local else None


def day_key(start_time: t.Union[str, datetime, None], tz: t.Optional[tzinfo] = None) -> str:
    """Day label such as "Mon, Nov 17" for the start time in `tz`."""
    local = _to_local(start_time, tz or display_timezone())
    if local is None:
        return INVALID_DATE
    return f"{local:%a}, {local:%b} {local.day}"


def format_date_time(
    start_time: t.Union[str, datetime, None], tz: t.Optional[tzinfo] = None
) -> tuple[str, str]:
    """Card date and time, e.g. ("Mon, Nov 17, 2025", "9:00 AM")."""
    local = _to_local(start_time, tz or display_timezone())
    if local is None:
        return INVALID_DATE, ""
    hour = local.hour % 12 or 12
    meridiem = "AM" if local.hour < 12 else "PM"
    return (
        f"{local:%a}, {local:%b} {local.day}, {local.year}",
        f"{hour}:{local.minute:02d} {meridiem}",
    )


def _ordered_day_keys(events: t.Iterable[CatalogEvent], tz: tzinfo) -> list[str]:
    dates: dict[str, t.Optional[date]] = {}
    for event in events:
        key = day_key(event.start_time, tz)
        if key not in dates:
            dates[key] = _local_date(event.start_time, tz)
    return sorted(dates, key=lambda k: (dates[k] is None, dates[k] or date.min))


def event_days(events: t.Iterable[CatalogEvent], tz: t.Optional[tzinfo] = None) -> list[str]:
    """Distinct day keys of `events`, in calendar order ("Invalid date" last)."""
    return _ordered_day_keys(events, tz or display_timezone())


def filter_by_category(
    events: t.Iterable[CatalogEvent], category: CategoryFilter, now: datetime
) -> list[CatalogEvent]:
    if category is CategoryFilter.ALL:
        return list(events)
    if category is CategoryFilter.CORE:
        return [e for e in events if e.is_core_event]
    if category is CategoryFilter.TODAY:
        return [e for e in events if classify(e.start_time, now).status is TimeStatus.TODAY]
    return [e for e in events if classify(e.start_time, now).status in _UPCOMING_STATUSES]


def filter_by_day(
    events: t.Iterable[CatalogEvent], day: str, tz: t.Optional[tzinfo] = None
) -> list[CatalogEvent]:
    if day == ALL:
        return list(events)
    tz = tz or display_timezone()
    return [e for e in events if day_key(e.start_time, tz) == day]


def filter_events(
    events: t.Iterable[CatalogEvent],
    selection: FilterSelection,
    now: datetime,
    tz: t.Optional[tzinfo] = None,
) -> list[CatalogEvent]:
    """Keep events matching both the category and the day of `selection`."""
    by_category = filter_by_category(events, selection.category, now)
    return filter_by_day(by_category, selection.day, tz)


def sort_events(events: t.Iterable[CatalogEvent]) -> list[CatalogEvent]:
    """Stable sort by start time; unparseable start times go last."""
    def start_key(event: CatalogEvent) -> tuple[bool, float]:
        parsed = parse_timestamp(event.start_time)
        return (parsed is None, parsed.timestamp() if parsed else 0.0)

    return sorted(events, key=start_key)


def group_events(
    events: t.Sequence[CatalogEvent], day: str = ALL, tz: t.Optional[tzinfo] = None
) -> list[DayGroup]:
    """Partition already-sorted events into day groups.

    With a specific `day` selected the result is that single group.
    """
    if day != ALL:
        return [DayGroup(day=day, events=list(events))]

    tz = tz or display_timezone()
    groups = {key: DayGroup(day=key) for key in _ordered_day_keys(events, tz)}
    for event in events:
        groups[day_key(event.start_time, tz)].events.append(event)
    return list(groups.values())


def derive_schedule(
    events: t.Iterable[CatalogEvent],
    selection: FilterSelection,
    now: datetime,
    tz: t.Optional[tzinfo] = None,
) -> list[DayGroup]:
    """Filter, sort and group the catalog for display."""
    tz = tz or display_timezone()
    filtered = sort_events(filter_events(events, selection, now, tz))
    return group_events(filtered, selection.day, tz)


def add_to_schedule(event: CatalogEvent) -> Reminder:
    """Snapshot a catalog event into a personal reminder."""
    excerpt = event.description[:REMINDER_DESCRIPTION_LENGTH]
    return Reminder(
        id=f"{REMINDER_ID_PREFIX}{event.id}",
        title=event.title,
        description=f"{REMINDER_DESCRIPTION_PREFIX}{excerpt}...",
        time=event.start_time,
        sent=False,
    )
