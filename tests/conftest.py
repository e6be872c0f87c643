# -*- coding: utf-8 -*-
"""Shared fixtures for the companion tests."""
from __future__ import annotations

import typing as t
from datetime import datetime, timezone

import pytest

from services.shared.models import CatalogEntry, CatalogEvent, User


NOW = datetime(2025, 11, 17, 12, 0, 0, tzinfo=timezone.utc)


def catalog_entry(
    event_id: int,
    start_utc: str,
    title: str = "",
    is_core_event: bool = False,
    **record: t.Any,
) -> dict[str, t.Any]:
    """Build one item of the provider's /calendar-events payload."""
    body = {
        "title": title or f"Event {event_id}",
        "start_utc": start_utc,
        "end_utc": record.pop("end_utc", start_utc),
        "location": {"name": "La Rural", "address": "Av. Sarmiento 2704"},
        "organizer": {"name": "EF", "contact": "devconnect@ethereum.org"},
        "description": record.pop("description", "A DevConnect session."),
        "event_type": record.pop("event_type", "Talk"),
        "expertise": "All",
        "requires_ticket": False,
        "sold_out": False,
    }
    body.update(record)
    return {
        "id": event_id,
        "rkey": f"rkey-{event_id}",
        "created_by": "did:plc:devconnect",
        "record_passed_review": {"$type": "org.devconnect.event", **body},
        "is_core_event": is_core_event,
        "updated_at": "2025-11-01T00:00:00Z",
    }


class FakeHost:
    """Scriptable host runtime."""

    def __init__(
        self,
        user: t.Optional[User] = None,
        token: t.Optional[str] = "host-token",
        compose_result: t.Union[bool, Exception] = False,
        ready_error: t.Optional[Exception] = None,
    ) -> None:
        self.user = user
        self.token = token
        self.compose_result = compose_result
        self.ready_error = ready_error
        self.ready_calls = 0
        self.composed: list[str] = []

    async def signal_ready(self) -> None:
        self.ready_calls += 1
        if self.ready_error:
            raise self.ready_error

    async def get_identity_context(self) -> t.Optional[User]:
        return self.user

    async def request_token(self) -> str:
        if self.token is None:
            raise RuntimeError("quick auth unavailable")
        return self.token

    async def compose_share(self, text: str, embeds: list[str]) -> bool:
        self.composed.append(text)
        if isinstance(self.compose_result, Exception):
            raise self.compose_result
        return self.compose_result


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_event() -> t.Callable[..., CatalogEvent]:
    def _make(event_id: int, start_utc: str, **kwargs: t.Any) -> CatalogEvent:
        return CatalogEvent.from_entry(CatalogEntry.model_validate(catalog_entry(event_id, start_utc, **kwargs)))

    return _make


@pytest.fixture
def user() -> User:
    return User(address="0xabc123", username="rocky", fid=4242)
