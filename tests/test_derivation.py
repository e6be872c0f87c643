"""Tests for the schedule derivation engine.

Covers time classification boundaries, day keys, filtering, grouping and the
add-to-schedule snapshot.
"""
from datetime import datetime, timedelta, timezone

import pytest

from schedule.derivation import (
    INVALID_DATE,
    add_to_schedule,
    classify,
    day_key,
    derive_schedule,
    event_days,
    filter_by_category,
    filter_by_day,
    format_date_time,
    sort_events,
)
from schedule.models import ALL, CategoryFilter, FilterSelection, TimeStatus


BUENOS_AIRES = timezone(timedelta(hours=-3))


def _iso(value: datetime) -> str:
    return value.isoformat().replace("+00:00", "Z")


@pytest.mark.parametrize(
    "offset, expected",
    [
        (timedelta(hours=23, minutes=59), TimeStatus.TODAY),
        (timedelta(0), TimeStatus.TODAY),
        (timedelta(hours=24), TimeStatus.TOMORROW),
        (timedelta(hours=47, minutes=59), TimeStatus.TOMORROW),
        (timedelta(hours=48), TimeStatus.UPCOMING),
        (timedelta(days=7), TimeStatus.UPCOMING),
        (timedelta(days=7, hours=1), TimeStatus.FUTURE),
        (timedelta(days=30), TimeStatus.FUTURE),
        (timedelta(seconds=-1), TimeStatus.PAST),
    ],
)
def test_classify_boundaries(now, offset, expected) -> None:
    """Test classification at the hour and day boundaries."""
    assert classify(_iso(now + offset), now).status is expected


def test_classify_texts(now) -> None:
    """Test the badge text that goes with each status."""
    assert classify(_iso(now - timedelta(hours=2)), now).text == "Completed"
    assert classify(_iso(now + timedelta(hours=3)), now).text == "Today"
    assert classify(_iso(now + timedelta(hours=30)), now).text == "Tomorrow"
    assert classify(_iso(now + timedelta(days=3, hours=5)), now).text == "3 days"


@pytest.mark.parametrize("value", ["", "not a date", "2025-13-45T99:00:00Z", None, "   "])
def test_classify_never_raises_on_bad_input(now, value) -> None:
    """Test that unparseable timestamps classify as past instead of raising."""
    info = classify(value, now)
    assert info.status is TimeStatus.PAST
    assert info.text == INVALID_DATE


def test_classify_accepts_naive_now() -> None:
    """Test that a naive `now` is treated as UTC."""
    naive_now = datetime(2025, 11, 17, 12, 0, 0)
    assert classify("2025-11-17T13:00:00Z", naive_now).status is TimeStatus.TODAY


def test_day_key_uses_display_timezone() -> None:
    """Test that day keys follow the display timezone, not UTC."""
    late_utc = "2025-11-18T01:30:00Z"
    assert day_key(late_utc, timezone.utc) == "Tue, Nov 18"
    assert day_key(late_utc, BUENOS_AIRES) == "Mon, Nov 17"
    assert day_key("garbage", timezone.utc) == INVALID_DATE


def test_format_date_time() -> None:
    """Test card date/time formatting and its invalid fallback."""
    assert format_date_time("2025-11-17T12:05:00Z", BUENOS_AIRES) == ("Mon, Nov 17, 2025", "9:05 AM")
    assert format_date_time("2025-11-17T00:00:00Z", timezone.utc) == ("Mon, Nov 17, 2025", "12:00 AM")
    assert format_date_time("nope", timezone.utc) == (INVALID_DATE, "")


def test_event_days_are_in_calendar_order(make_event) -> None:
    """Test distinct day keys sorted by date, invalid dates last."""
    events = [
        make_event(1, "2025-11-20T10:00:00Z"),
        make_event(2, "not-a-date"),
        make_event(3, "2025-11-17T10:00:00Z"),
        make_event(4, "2025-11-20T18:00:00Z"),
        make_event(5, "2025-12-01T09:00:00Z"),
    ]
    assert event_days(events, timezone.utc) == [
        "Mon, Nov 17",
        "Thu, Nov 20",
        "Mon, Dec 1",
        INVALID_DATE,
    ]


def test_category_filters(make_event, now) -> None:
    """Test each category filter against a mixed catalog."""
    events = [
        make_event(1, _iso(now + timedelta(hours=2)), is_core_event=True),
        make_event(2, _iso(now + timedelta(hours=26))),
        make_event(3, _iso(now + timedelta(days=4))),
        make_event(4, _iso(now + timedelta(days=12)), is_core_event=True),
        make_event(5, _iso(now - timedelta(hours=1))),
    ]

    def ids(category):
        return [e.id for e in filter_by_category(events, category, now)]

    assert ids(CategoryFilter.ALL) == [1, 2, 3, 4, 5]
    assert ids(CategoryFilter.CORE) == [1, 4]
    assert ids(CategoryFilter.TODAY) == [1]
    assert ids(CategoryFilter.UPCOMING) == [2, 3, 4]


def test_filter_composition_is_order_independent(make_event, now) -> None:
    """Test that category-then-day and day-then-category give the same events."""
    events = [
        make_event(1, "2025-11-17T14:00:00Z", is_core_event=True),
        make_event(2, "2025-11-17T20:00:00Z"),
        make_event(3, "2025-11-18T14:00:00Z", is_core_event=True),
        make_event(4, "2025-11-19T14:00:00Z"),
        make_event(5, "bad"),
    ]
    for category in CategoryFilter:
        for day in [ALL, "Mon, Nov 17", "Tue, Nov 18", INVALID_DATE]:
            first = filter_by_day(filter_by_category(events, category, now), day, timezone.utc)
            second = filter_by_category(filter_by_day(events, day, timezone.utc), category, now)
            assert [e.id for e in first] == [e.id for e in second]


def test_sort_is_stable_and_puts_invalid_last(make_event) -> None:
    """Test ascending start order with ties kept in input order."""
    events = [
        make_event(1, "2025-11-18T10:00:00Z"),
        make_event(2, "oops"),
        make_event(3, "2025-11-17T10:00:00Z"),
        make_event(4, "2025-11-18T10:00:00Z"),
    ]
    assert [e.id for e in sort_events(events)] == [3, 1, 4, 2]


def test_grouping_is_a_partition(make_event, now) -> None:
    """Test that every filtered event lands in exactly one day group."""
    events = [
        make_event(1, "2025-11-19T15:00:00Z"),
        make_event(2, "2025-11-17T18:00:00Z"),
        make_event(3, "2025-11-19T09:00:00Z"),
        make_event(4, "2025-11-18T01:00:00Z"),
        make_event(5, "2025-11-17T13:00:00Z"),
    ]
    groups = derive_schedule(events, FilterSelection(), now, BUENOS_AIRES)

    assert [g.day for g in groups] == ["Mon, Nov 17", "Wed, Nov 19"]
    assert [[e.id for e in g.events] for g in groups] == [[5, 2, 4], [3, 1]]

    grouped_ids = sorted(e.id for g in groups for e in g.events)
    assert grouped_ids == [1, 2, 3, 4, 5]
    assert {g.day for g in groups} == set(event_days(events, BUENOS_AIRES))


def test_specific_day_yields_exactly_one_group(make_event, now) -> None:
    """Test that selecting a day gives one group, even with no matches."""
    events = [
        make_event(1, "2025-11-17T14:00:00Z"),
        make_event(2, "2025-11-18T14:00:00Z"),
    ]
    groups = derive_schedule(events, FilterSelection(day="Tue, Nov 18"), now, timezone.utc)
    assert len(groups) == 1
    assert groups[0].day == "Tue, Nov 18"
    assert [e.id for e in groups[0].events] == [2]

    selection = FilterSelection(category=CategoryFilter.CORE, day="Tue, Nov 18")
    groups = derive_schedule(events, selection, now, timezone.utc)
    assert len(groups) == 1
    assert groups[0].events == []


def test_add_to_schedule_snapshot(make_event) -> None:
    """Test the reminder copied out of a catalog event."""
    description = "x" * 150
    event = make_event(77, "2025-11-18T14:00:00Z", title="ZK Day", description=description)

    reminder = add_to_schedule(event)

    assert reminder.id == "devconnect-77"
    assert reminder.title == "ZK Day"
    assert reminder.description == "DevConnect Event: " + "x" * 100 + "..."
    assert reminder.time == "2025-11-18T14:00:00Z"
    assert reminder.sent is False
