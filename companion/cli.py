# -*- coding: utf-8 -*-
"""Command line entry point for the Rocky companion."""
from __future__ import annotations

import asyncio
import logging
import typing as t

import click
from rich.console import Console
from rich.logging import RichHandler

from companion.app import CompanionApp, Section
from companion.personal import ShareChannel
from companion.render import render_onboarding, render_reminders, render_section
from gateways.catalog import CatalogGateway
from schedule.models import ALL, CategoryFilter


console = Console()
err_console = Console(stderr=True)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, rich_tracebacks=True, show_path=False)],
    )


def _notify(message: str) -> None:
    console.print(f"[bold cyan]ℹ[/bold cyan] {message}")


def _build_app(events_url: t.Optional[str] = None) -> CompanionApp:
    return CompanionApp(catalog_gateway=CatalogGateway(url=events_url), notify=_notify)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
def cli(verbose: bool) -> None:
    """Rocky, the DevConnect event companion."""
    configure_logging(verbose)


@cli.command()
@click.option("--host", default="0.0.0.0", show_default=True, help="Interface to bind.")
@click.option("--port", default=8000, show_default=True, type=int, help="Port to listen on.")
@click.option("--reload", is_flag=True, help="Reload on code changes (development).")
def serve(host: str, port: int, reload: bool) -> None:
    """Run the companion backend (auth + reminders API)."""
    import uvicorn
    uvicorn.run("services.companion_service.app:app", host=host, port=port, reload=reload)


@cli.command()
def presentation() -> None:
    """Show the Rocky presentation links."""
    app = _build_app()
    app.show_section(Section.PRESENTATION)
    console.print(render_section(app))


@cli.command()
@click.option(
    "--filter",
    "category",
    type=click.Choice([c.value for c in CategoryFilter]),
    default=CategoryFilter.ALL.value,
    show_default=True,
    help="Category filter.",
)
@click.option("--day", default=ALL, show_default=True, help='Day to show, e.g. "Mon, Nov 17".')
@click.option("--add", "add_ids", multiple=True, type=int, help="Add the event with this id to My Schedule.")
@click.option("--events-url", default=None, help="Override the DevConnect events URL.")
def schedule(category: str, day: str, add_ids: tuple[int, ...], events_url: t.Optional[str]) -> None:
    """Browse the public DevConnect schedule."""
    asyncio.run(_schedule(category, day, add_ids, events_url))


async def _schedule(
    category: str, day: str, add_ids: tuple[int, ...], events_url: t.Optional[str]
) -> None:
    app = _build_app(events_url)
    await app.startup()
    view = app.full_schedule
    app.show_section(Section.FULL_SCHEDULE)

    # nothing to select or add from a failed load; show the error panel
    if view.state == "error":
        console.print(render_section(app))
        return

    view.set_category(category)
    try:
        view.select_day(day)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--day")

    for event_id in add_ids:
        event = view.find(event_id)
        if event is None:
            raise click.BadParameter(f"No event with id {event_id}", param_hint="--add")
        view.add_to_schedule(event)

    console.print(render_section(app))

    if add_ids:
        console.print(render_reminders(app.personal))


@cli.command("my-schedule")
@click.option("--sign-in/--no-sign-in", default=True, show_default=True, help="Sign in with the host token.")
@click.option("--share", is_flag=True, help="Share the schedule after loading it.")
def my_schedule(sign_in: bool, share: bool) -> None:
    """Show your personal DevConnect reminders."""
    asyncio.run(_my_schedule(sign_in, share))


async def _my_schedule(sign_in: bool, share: bool) -> None:
    app = _build_app()
    await app.session.start()

    if sign_in:
        await app.sign_in()
    else:
        await app.refresh_reminders()

    app.show_section(Section.MY_SCHEDULE)
    console.print(render_section(app))

    if share:
        channel = await app.personal.share()
        if channel is ShareChannel.HOST:
            _notify("Opened the share composer.")
        elif channel is ShareChannel.PLATFORM:
            _notify("Opened the share page in your browser.")


@cli.command()
@click.option("--dismiss", is_flag=True, help='Mark onboarding as seen ("Get Started").')
def onboarding(dismiss: bool) -> None:
    """Show the onboarding panel."""
    app = _build_app()
    if dismiss:
        app.dismiss_onboarding()
        _notify("Onboarding dismissed. Welcome aboard!")
        return
    console.print(render_onboarding())


if __name__ == "__main__":
    cli()
