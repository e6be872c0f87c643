"""
Gateway for the user's pending reminders.

Fetches the reminders the Rocky agent has scheduled for an inbox. The app must
always have something to show, so any failure degrades to a fixed pair of
sample reminders instead of raising.
"""
from __future__ import annotations

import logging
import typing as t
from datetime import datetime, timedelta, timezone

import httpx
from pydantic import TypeAdapter, ValidationError

from gateways.http import ROCKY_API_URL, client_scope
from services.shared.models import Reminder


logger = logging.getLogger(__name__)

_REMINDER_LIST = TypeAdapter(list[Reminder])


def _iso_utc(value: datetime) -> str:
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S") + f".{value.microsecond // 1000:03d}Z"


def placeholder_reminders(now: t.Optional[datetime] = None) -> list[Reminder]:
    """The two sample reminders shown when real ones are unavailable."""
    now = now or datetime.now(timezone.utc)
    return [
        Reminder(
            id="1",
            title="Welcome to DevConnect!",
            description="Opening ceremony and keynote presentation",
            time=_iso_utc(now + timedelta(hours=1)),
            sent=False,
        ),
        Reminder(
            id="2",
            title="Blockchain Security Workshop",
            description="Learn about smart contract security best practices",
            time=_iso_utc(now + timedelta(hours=2)),
            sent=False,
        ),
    ]


async def fetch_reminders(
    inbox_id: str,
    token: t.Optional[str] = None,
    *,
    now: t.Optional[datetime] = None,
    base_url: t.Optional[str] = None,
    client: t.Optional[httpx.AsyncClient] = None,
) -> list[Reminder]:
    """Fetch pending reminders for `inbox_id`, one attempt.

    The list comes back already filtered to unsent reminders and ordered by
    target time.

    :param inbox_id: The agent's inbox identifier (the user's wallet address).
    :param token: Bearer token of the signed-in session, if any.
    :param now: Reference time for the placeholder reminders.
    :param base_url: Companion service URL, defaults to ROCKY_API_URL.
    :param client: Optional shared AsyncClient.
    :return: The reminders, or placeholder_reminders() on any failure.
    """
    url = f"{base_url or ROCKY_API_URL}/api/reminders/{inbox_id}"
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    try:
        async with client_scope(client) as http:
            response = await http.get(url, headers=headers)
            response.raise_for_status()
        return _REMINDER_LIST.validate_python(response.json())
    except httpx.HTTPStatusError as e:
        logger.warning("Reminder service returned %s; using sample reminders", e.response.status_code)
    except (httpx.HTTPError, ValueError, ValidationError) as e:
        logger.error("Failed to load reminders: %s", e)
    return placeholder_reminders(now)
