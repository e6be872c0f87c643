# -*- coding: utf-8 -*-
"""Rich renderables for the three sections of the companion."""
from __future__ import annotations

import typing as t

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from companion.app import (
    APP_TITLE,
    FOOTER_TEXT,
    PRESENTATION_DECK_URL,
    PRESENTATION_VIDEO_URL,
    SECTION_LABELS,
    CompanionApp,
    Section,
)
from companion.catalog_view import FullScheduleView
from companion.personal import PersonalScheduleView
from companion.session import SessionFlow
from schedule.derivation import classify, format_date_time
from schedule.models import ALL, CategoryFilter, TimeStatus
from services.shared.models import CatalogEvent


STATUS_BADGES = {
    TimeStatus.TODAY: ("Today", "bold white on dark_cyan"),
    TimeStatus.TOMORROW: ("Tomorrow", "black on grey85"),
    TimeStatus.UPCOMING: ("Upcoming", "white on grey37"),
    TimeStatus.FUTURE: ("Upcoming", "white on grey37"),
    TimeStatus.PAST: ("Completed", "white on grey58"),
}

CATEGORY_LABELS = {
    CategoryFilter.ALL: "All Events",
    CategoryFilter.CORE: "⭐ Core Events",
    CategoryFilter.TODAY: "Today",
    CategoryFilter.UPCOMING: "⏰ Upcoming",
}


def truncate(text: str, max_length: int = 120) -> str:
    """First `max_length` characters, with an ellipsis if anything was cut."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


def _tab(label: str, active: bool) -> Text:
    style = "bold white on dark_cyan" if active else "white"
    return Text(f" {label} ", style=style)


def render_header(app: CompanionApp) -> Panel:
    nav = Text("  ").join(
        _tab(label, section is app.active_section) for section, label in SECTION_LABELS.items()
    )
    body = Group(Text(app.subtitle, style="grey70"), Text(""), nav)
    return Panel(body, title=f"[bold]{APP_TITLE}[/bold]", border_style="cyan")


def render_footer() -> Text:
    return Text(FOOTER_TEXT, style="dim", justify="center")


def render_presentation() -> Group:
    video = Panel(
        Text.from_markup(f"[link={PRESENTATION_VIDEO_URL}]▶ Watch the Rocky video[/link]\n{PRESENTATION_VIDEO_URL}"),
        title="Video Presentation",
        border_style="cyan",
    )
    deck = Panel(
        Text.from_markup(f"[link={PRESENTATION_DECK_URL}]View presentation in new tab[/link]\n{PRESENTATION_DECK_URL}"),
        title="Presentation",
        border_style="cyan",
    )
    return Group(video, deck)


def render_onboarding() -> Panel:
    features = Table.grid(padding=(0, 2))
    features.add_column()
    features.add_column()
    features.add_row("🤖", "[bold]Smart Agent Integration[/bold]\nChat with Rocky Agent to set reminders for sessions you want to attend")
    features.add_row("📅", "[bold]Personal Schedule[/bold]\nView all your DevConnect reminders in one organized place")
    features.add_row("📤", "[bold]Share & Connect[/bold]\nShare your schedule with other attendees and build your network")
    return Panel(
        Group(Text("Your personal event assistant for DevConnect", style="grey70"), Text(""), features),
        title="[bold]Welcome to Rocky Event Schedule[/bold]",
        subtitle="rocky onboarding --dismiss to get started",
        border_style="cyan",
    )


def render_connection(session: SessionFlow) -> Text:
    indicator = Text("● ", style="green" if session.is_connected else "red")
    line = indicator + Text(session.status_text)
    if not session.is_authenticated:
        line.append("   (sign in to view your schedule)", style="dim")
    return line


def render_profile(session: SessionFlow) -> t.Optional[Panel]:
    if not session.is_authenticated or session.user is None:
        return None
    user = session.user
    initial = user.username[0] if user.username else "👤"
    return Panel(
        Text.assemble((user.username or "Anonymous User", "bold"), f"\nFID: {user.fid}"),
        title=initial,
        title_align="left",
        border_style="cyan",
        expand=False,
    )


def render_reminders(view: PersonalScheduleView) -> RenderableType:
    if view.loading:
        return Text("Loading your reminders...", style="cyan")
    if not view.reminders:
        return Panel(
            Text("Interact with the Rocky agent to create your first reminder!", justify="center"),
            title="📅 No reminders yet",
            border_style="dim",
        )

    table = Table(title="Your Event Reminders", show_header=True, header_style="bold magenta")
    table.add_column("", width=3)
    table.add_column("Title", style="white")
    table.add_column("Description", style="grey70")
    table.add_column("When", style="yellow")
    table.add_column("Status", style="cyan")
    for reminder in view.reminders:
        table.add_row(
            "⏰",
            Text(reminder.title),
            Text(reminder.description),
            view.time_until(reminder),
            "Sent" if reminder.sent else "Pending",
        )
    return table


def render_my_schedule(app: CompanionApp) -> Group:
    parts: list[RenderableType] = []
    if app.show_onboarding:
        parts.append(render_onboarding())
    parts.append(render_connection(app.session))
    profile = render_profile(app.session)
    if profile is not None:
        parts.append(profile)
    parts.append(render_reminders(app.personal))
    return Group(*parts)


def _filter_bar(view: FullScheduleView) -> Text:
    tabs = []
    for category, label in CATEGORY_LABELS.items():
        if category is CategoryFilter.ALL:
            label = f"{label} ({len(view.events)})"
        tabs.append(_tab(label, category is view.selection.category))
    return Text(" ").join(tabs)


def _day_bar(view: FullScheduleView) -> Text:
    tabs = [_tab("All Days", view.selection.day == ALL)]
    tabs.extend(_tab(day, view.selection.day == day) for day in view.days())
    return Text(" ").join(tabs)


def _event_row(view: FullScheduleView, event: CatalogEvent) -> list[RenderableType]:
    now = view.now()
    _, start = format_date_time(event.start_time, view.tz)
    _, end = format_date_time(event.end_time, view.tz)
    label, style = STATUS_BADGES[classify(event.start_time, now).status]

    title = Text(event.title, style="bold")
    if event.is_core_event:
        title.append(" ⭐ Core", style="cyan")
    details = Text(truncate(event.description), style="grey70")
    ticket = "Ticket Required" if event.requires_ticket else "Free"
    if event.sold_out:
        ticket += " (Sold Out)"
    links = "\n".join(
        f"[link={url}]{name}[/link]"
        for name, url in (("Learn More", event.main_url), ("Get Tickets", event.tickets_url))
        if url
    )

    row: list[RenderableType] = [
        str(event.id),
        f"{start} - {end}",
        Group(title, details),
        Text(event.event_type),
        Text(label, style=style),
        Text(f"{event.location.name}\n{event.location.address}".strip()),
        Text(event.organizer.name),
        ticket,
        Text.from_markup(links) if links else "",
    ]
    if view.can_add_to_schedule:
        row.append("✓" if view.is_added(event.id) else "+")
    return row


def render_full_schedule(view: FullScheduleView) -> Group:
    heading = Text.assemble(
        ("DevConnect Schedule\n", "bold white"),
        ("The Ethereum World's Fair\n", "grey85"),
        ("17-22 November, Buenos Aires", "grey70"),
        justify="center",
    )
    parts: list[RenderableType] = [heading, _filter_bar(view), _day_bar(view)]

    state = view.state
    if state == "loading":
        parts.append(Text("Loading DevConnect events...", style="cyan"))
    elif state == "error":
        parts.append(Panel(
            Text(f"{view.error}\n\nTry again with: rocky schedule", justify="center"),
            title="⚠️  Unable to load schedule",
            border_style="red",
        ))
    elif state == "empty":
        parts.append(Panel(
            Text("DevConnect events will appear here once they are loaded.", justify="center"),
            title="📅 No events found",
            border_style="dim",
        ))
    else:
        for group in view.groups():
            table = Table(
                title=f"{group.day} ({len(group.events)} events)",
                show_header=True,
                header_style="bold magenta",
                expand=True,
            )
            for column in ("#", "Time", "Event", "Type", "Status", "Location", "Organizer", "Tickets", "Links"):
                table.add_column(column)
            if view.can_add_to_schedule:
                table.add_column("Added", justify="center")
            for event in group.events:
                table.add_row(*_event_row(view, event))
            parts.append(table)
    return Group(*parts)


def render_section(app: CompanionApp) -> Group:
    """Header, the active section, and the footer."""
    if app.active_section is Section.PRESENTATION:
        body = render_presentation()
    elif app.active_section is Section.FULL_SCHEDULE:
        body = render_full_schedule(app.full_schedule)
    else:
        body = render_my_schedule(app)
    return Group(render_header(app), body, render_footer())
