"""Personal schedule ("My Schedule") view state.

Holds the user's reminder list, which is filled from the reminder gateway or
from catalog events added by hand, and shares it through whichever channel
works first.
"""
from __future__ import annotations

import logging
import math
import os
import typing as t
import webbrowser
from datetime import datetime, timedelta, timezone
from enum import Enum
from urllib.parse import urlencode

import pyperclip

from companion.host import HostRuntime
from companion.session import SessionFlow
from gateways.reminders import fetch_reminders, placeholder_reminders
from schedule.derivation import parse_timestamp
from services.shared.models import Reminder


logger = logging.getLogger(__name__)

SHARE_URL = os.getenv("ROCKY_SHARE_URL", "https://www.craycray.xyz/")
COMPOSE_INTENT_URL = "https://warpcast.com/~/compose"

SHARE_TEXT_WITH_COUNT = (
    "🚀 DevConnect schedule is locked and loaded! {count} sessions planned and "
    "Rocky Event Agent is keeping me organized. This is gonna be epic! "
    "#DevConnect #BaseChain #RockyAgent"
)
SHARE_TEXT = (
    "🚀 DevConnect schedule is locked and loaded! Rocky Event Agent is keeping "
    "me organized. This is gonna be epic! #DevConnect #BaseChain #RockyAgent"
)

NOTICE_COPIED = "Schedule copied to clipboard!"
NOTICE_SHARE_FAILED = "Unable to share schedule right now."

IMMINENT_LABEL = "soon!"

MS_PER_HOUR = 3_600_000
MS_PER_MINUTE = 60_000

ReminderFetcher = t.Callable[..., t.Awaitable[list[Reminder]]]
Notifier = t.Callable[[str], None]


class ShareChannel(Enum):
    HOST = "host"
    PLATFORM = "platform"
    CLIPBOARD = "clipboard"
    NONE = "none"


def time_until(target_time: t.Union[str, datetime, None], now: datetime) -> str:
    """Short countdown label: "in 2d", "in 5h", "in 12m" or "soon!"."""
    target = parse_timestamp(target_time)
    if target is None:
        return IMMINENT_LABEL
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    diff_ms = (target - now) // timedelta(milliseconds=1)
    diff_hours = diff_ms // MS_PER_HOUR
    # remainder keeps the sign of diff_ms, so past targets never count minutes
    diff_minutes = math.floor(math.fmod(diff_ms, MS_PER_HOUR) / MS_PER_MINUTE)

    if diff_hours > 24:
        return f"in {diff_hours // 24}d"
    if diff_hours > 0:
        return f"in {diff_hours}h"
    if diff_minutes > 0:
        return f"in {diff_minutes}m"
    return IMMINENT_LABEL


def share_message(reminders: t.Sequence[Reminder]) -> str:
    if reminders:
        return SHARE_TEXT_WITH_COUNT.format(count=len(reminders))
    return SHARE_TEXT


def open_compose_intent(text: str, url: str = SHARE_URL) -> bool:
    """Platform share: open the web compose intent in the default browser."""
    query = urlencode({"text": text, "embeds[]": url})
    return webbrowser.open(f"{COMPOSE_INTENT_URL}?{query}")


def copy_to_clipboard(text: str) -> None:
    pyperclip.copy(text)


class PersonalScheduleView:
    """The user's reminders plus the share action."""

    def __init__(
        self,
        session: SessionFlow,
        host: HostRuntime,
        fetch: t.Optional[ReminderFetcher] = None,
        platform_share: t.Callable[[str], bool] = open_compose_intent,
        clipboard: t.Callable[[str], None] = copy_to_clipboard,
        notify: t.Optional[Notifier] = None,
        clock: t.Optional[t.Callable[[], datetime]] = None,
    ) -> None:
        self.session = session
        self.host = host
        self.reminders: list[Reminder] = []
        self.loading = False
        self._fetch = fetch or fetch_reminders
        self._platform_share = platform_share
        self._clipboard = clipboard
        self._notify = notify or (lambda message: logger.info(message))
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def now(self) -> datetime:
        return self._clock()

    async def load(self) -> list[Reminder]:
        """Load reminders for the signed-in user, or show the sample pair.

        Called on sign-in and by the refresh action. The last load to finish
        wins.
        """
        if not self.session.can_fetch_reminders:
            self.reminders = placeholder_reminders(self.now())
            return self.reminders

        self.loading = True
        try:
            self.reminders = await self._fetch(
                self.session.user.address,
                self.session.auth_token,
                now=self.now(),
            )
        finally:
            self.loading = False
        return self.reminders

    def add(self, reminder: Reminder) -> bool:
        """Append a reminder unless one with the same id is already listed."""
        if any(existing.id == reminder.id for existing in self.reminders):
            return False
        self.reminders.append(reminder)
        return True

    def time_until(self, reminder: Reminder) -> str:
        return time_until(reminder.time, self.now())

    def share_message(self) -> str:
        return share_message(self.reminders)

    async def share(self) -> ShareChannel:
        """Share the schedule through the first channel that works.

        Order: host compose sheet, platform share, clipboard copy.
        """
        text = self.share_message()

        try:
            if await self.host.compose_share(text, [SHARE_URL]):
                return ShareChannel.HOST
        except Exception as e:
            logger.error("Host compose failed: %s", e)

        try:
            if self._platform_share(text):
                return ShareChannel.PLATFORM
        except Exception as e:
            logger.error("Platform share failed: %s", e)

        try:
            self._clipboard(f"{text}\n{SHARE_URL}")
        except Exception as e:
            logger.error("Failed to share schedule: %s", e)
            self._notify(NOTICE_SHARE_FAILED)
            return ShareChannel.NONE

        self._notify(NOTICE_COPIED)
        return ShareChannel.CLIPBOARD
