"""Tests for the full schedule view state."""
from datetime import timezone

import httpx
import pytest

from companion.catalog_view import FullScheduleView
from conftest import NOW, catalog_entry
from gateways.catalog import LOAD_ERROR, CatalogGateway
from schedule.models import ALL, CategoryFilter


PAYLOAD = [
    catalog_entry(1, "2025-11-17T14:00:00Z", title="Opening Ceremony", is_core_event=True),
    catalog_entry(2, "2025-11-18T16:00:00Z", title="ZK Day"),
    catalog_entry(3, "2025-11-17T19:00:00Z", title="DeFi Panel"),
]


def _view(handler, **kwargs) -> tuple[FullScheduleView, list[httpx.Request]]:
    requests = []

    def recording(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(recording))
    gateway = CatalogGateway(url="http://calendar.test/calendar-events", client=client)
    view = FullScheduleView(gateway=gateway, clock=lambda: NOW, tz=timezone.utc, **kwargs)
    return view, requests


@pytest.mark.asyncio
async def test_ready_state_groups_by_day() -> None:
    """Test a loaded catalog grouped into day tables."""
    view, _ = _view(lambda request: httpx.Response(200, json=PAYLOAD))

    await view.load()

    assert view.state == "ready"
    assert view.days() == ["Mon, Nov 17", "Tue, Nov 18"]
    groups = view.groups()
    assert [(g.day, [e.id for e in g.events]) for g in groups] == [
        ("Mon, Nov 17", [1, 3]),
        ("Tue, Nov 18", [2]),
    ]


@pytest.mark.asyncio
async def test_empty_and_error_states_differ() -> None:
    """Test that an empty catalog is not shown as an error."""
    empty, _ = _view(lambda request: httpx.Response(200, json=[]))
    failed, _ = _view(lambda request: httpx.Response(503))

    await empty.load()
    await failed.load()

    assert empty.state == "empty"
    assert empty.error is None
    assert failed.state == "error"
    assert failed.error == LOAD_ERROR


@pytest.mark.asyncio
async def test_retry_issues_exactly_one_fetch() -> None:
    """Test that retry refetches once and recovers from the error."""
    responses = [httpx.Response(503), httpx.Response(200, json=PAYLOAD)]
    view, requests = _view(lambda request: responses.pop(0))

    await view.load()
    assert view.state == "error"
    assert len(requests) == 1

    await view.retry()
    assert len(requests) == 2
    assert view.state == "ready"
    assert len(view.events) == 3


@pytest.mark.asyncio
async def test_filters_apply_to_groups() -> None:
    """Test category and day selections narrowing the groups."""
    view, _ = _view(lambda request: httpx.Response(200, json=PAYLOAD))
    await view.load()

    view.set_category("core")
    assert [[e.id for e in g.events] for g in view.groups()] == [[1]]

    view.set_category(CategoryFilter.ALL)
    view.select_day("Tue, Nov 18")
    groups = view.groups()
    assert len(groups) == 1
    assert [e.id for e in groups[0].events] == [2]

    view.select_day(ALL)
    assert len(view.groups()) == 2


@pytest.mark.asyncio
async def test_select_unknown_day_raises() -> None:
    """Test that only days present in the catalog can be selected."""
    view, _ = _view(lambda request: httpx.Response(200, json=PAYLOAD))
    await view.load()

    with pytest.raises(ValueError):
        view.select_day("Fri, Dec 25")
    assert view.selection.day == ALL


@pytest.mark.asyncio
async def test_add_to_schedule_is_guarded() -> None:
    """Test that each event is copied into the personal schedule once."""
    added = []
    view, _ = _view(lambda request: httpx.Response(200, json=PAYLOAD), on_add_to_schedule=added.append)
    await view.load()
    event = view.find(2)

    reminder = view.add_to_schedule(event)

    assert reminder.id == "devconnect-2"
    assert view.is_added(2)
    assert view.add_to_schedule(event) is None
    assert [r.id for r in added] == ["devconnect-2"]


@pytest.mark.asyncio
async def test_add_to_schedule_without_personal_schedule() -> None:
    """Test that adding is unavailable when no personal schedule is attached."""
    view, _ = _view(lambda request: httpx.Response(200, json=PAYLOAD))
    await view.load()

    assert not view.can_add_to_schedule
    assert view.add_to_schedule(view.find(1)) is None
    assert view.find(99) is None
