# -*- coding: utf-8 -*-
from schedule.derivation import (
    add_to_schedule,
    classify,
    day_key,
    derive_schedule,
    display_timezone,
    event_days,
    filter_events,
    format_date_time,
)
from schedule.models import ALL, CategoryFilter, DayGroup, FilterSelection, TimeStatus, TimeStatusInfo

__all__ = [
    "ALL",
    "CategoryFilter",
    "DayGroup",
    "FilterSelection",
    "TimeStatus",
    "TimeStatusInfo",
    "add_to_schedule",
    "classify",
    "day_key",
    "derive_schedule",
    "display_timezone",
    "event_days",
    "filter_events",
    "format_date_time",
]
