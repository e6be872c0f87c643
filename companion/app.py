"""
The Rocky companion app shell.

Wires the host runtime, session flow, both schedule views and the persisted
onboarding flag together, and tracks which of the three sections is showing.
"""
from __future__ import annotations

import asyncio
import typing as t
from datetime import datetime, timezone, tzinfo
from enum import Enum

from companion.catalog_view import FullScheduleView
from companion.host import HostRuntime, LocalHost
from companion.personal import Notifier, PersonalScheduleView
from companion.preferences import Preferences
from companion.session import SessionFlow
from gateways.catalog import CatalogGateway


APP_TITLE = "CrayCray Studios"
FOOTER_TEXT = "© 2025 CrayCray Studios. All rights reserved."

PRESENTATION_VIDEO_URL = (
    "https://res.cloudinary.com/dg5qvbxjp/video/upload/v1760661156/Basecamp_vid_ndzww8.mp4"
)
PRESENTATION_DECK_URL = "https://www.canva.com/design/DAGz8ZPplT8/usUPBi4UE_YLeqz0emIdOw/view"


class Section(Enum):
    PRESENTATION = "presentation"
    FULL_SCHEDULE = "full_schedule"
    MY_SCHEDULE = "my_schedule"


SECTION_LABELS = {
    Section.PRESENTATION: "Presentation",
    Section.FULL_SCHEDULE: "Full Schedule",
    Section.MY_SCHEDULE: "My Schedule",
}

SECTION_SUBTITLES = {
    Section.PRESENTATION: "Presenting Rocky - Event Agents Framework",
    Section.FULL_SCHEDULE: "Rocky Event Agents - DevConnect Schedule",
    Section.MY_SCHEDULE: "Rocky Event Agents - Personal Schedule",
}


class CompanionApp:
    """Top-level state of one companion session."""

    def __init__(
        self,
        host: t.Optional[HostRuntime] = None,
        session: t.Optional[SessionFlow] = None,
        catalog_gateway: t.Optional[CatalogGateway] = None,
        preferences: t.Optional[Preferences] = None,
        notify: t.Optional[Notifier] = None,
        clock: t.Optional[t.Callable[[], datetime]] = None,
        tz: t.Optional[tzinfo] = None,
        **personal_options: t.Any,
    ) -> None:
        self.host = host or LocalHost()
        self.session = session or SessionFlow(self.host)
        self.preferences = preferences or Preferences()
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.personal = PersonalScheduleView(
            self.session, self.host, notify=notify, clock=self.clock, **personal_options
        )
        self.full_schedule = FullScheduleView(
            gateway=catalog_gateway,
            on_add_to_schedule=self.personal.add,
            clock=self.clock,
            tz=tz,
        )
        self.active_section = Section.PRESENTATION
        self.show_onboarding = not self.preferences.has_seen_onboarding

        self.session.on_authenticated(self._load_reminders)

    async def _load_reminders(self, session: SessionFlow) -> None:
        await self.personal.load()

    @property
    def subtitle(self) -> str:
        return SECTION_SUBTITLES[self.active_section]

    def show_section(self, section: t.Union[Section, str]) -> None:
        self.active_section = Section(section)

    def dismiss_onboarding(self) -> None:
        self.show_onboarding = False
        self.preferences.mark_onboarding_seen()

    async def startup(self) -> None:
        """Identity-ready trigger and catalog load, in flight together."""
        await asyncio.gather(self.session.start(), self.full_schedule.load())

    async def sign_in(self) -> bool:
        """Sign in; without fetchable reminders My Schedule shows the samples."""
        signed_in = await self.session.sign_in()
        if not self.session.can_fetch_reminders:
            await self.personal.load()
        return signed_in

    async def refresh_reminders(self) -> None:
        await self.personal.load()
