"""
Shared Pydantic models for REST API serialization.

This module contains the wire shapes exchanged between the companion service,
the public DevConnect calendar provider and the client gateways, so every
layer agrees on the same JSON.
"""
from __future__ import annotations

import typing as t
from pydantic import BaseModel, Field


# Reminder Models
class Reminder(BaseModel):
    """A personal event reminder as shown in "My Schedule"."""
    id: str
    title: str
    description: str = ""
    time: str  # ISO 8601, UTC
    sent: bool = False


class StoredReminder(Reminder):
    """
    A pending reminder row from the agent's database.

    `title` carries the agent's reminder message and `time` its target time.
    """
    inbox_id: str = ""
    conversation_id: str = ""
    created_at: str = ""


# Identity Models
class User(BaseModel):
    """Identity context supplied by the host runtime."""
    address: str = ""
    username: t.Optional[str] = None
    avatar: t.Optional[str] = None
    fid: t.Optional[int] = None


class AuthVerification(BaseModel):
    """Response body of a successful token verification."""
    fid: t.Union[int, str]
    authenticated: bool = True


# DevConnect Catalog Models
class EventLocation(BaseModel):
    name: str = ""
    address: str = ""


class EventOrganizer(BaseModel):
    name: str = ""
    contact: str = ""


class EventRecord(BaseModel):
    """
    The reviewed record of a catalog entry, as published by the provider.
    """
    title: str = ""
    start_utc: str = ""
    end_utc: str = ""
    location: EventLocation = Field(default_factory=EventLocation)
    organizer: EventOrganizer = Field(default_factory=EventOrganizer)
    description: str = ""
    event_type: str = ""
    expertise: str = ""
    requires_ticket: bool = False
    sold_out: bool = False
    main_url: t.Optional[str] = None
    tickets_url: t.Optional[str] = None


class CatalogEntry(BaseModel):
    """One item of the provider's `/calendar-events` array."""
    id: int
    rkey: str = ""
    created_by: str = ""
    record_passed_review: EventRecord
    is_core_event: bool = False
    updated_at: str = ""


class CatalogEvent(BaseModel):
    """Flattened, read-only view of a DevConnect catalog event."""
    id: int
    title: str = ""
    description: str = ""
    start_time: str = ""            # ISO datetime, may be unparseable
    end_time: str = ""
    event_type: str = ""
    expertise: str = ""
    location: EventLocation = Field(default_factory=EventLocation)
    organizer: EventOrganizer = Field(default_factory=EventOrganizer)
    requires_ticket: bool = False
    sold_out: bool = False
    is_core_event: bool = False
    main_url: t.Optional[str] = None
    tickets_url: t.Optional[str] = None

    @classmethod
    def from_entry(cls, entry: CatalogEntry) -> "CatalogEvent":
        record = entry.record_passed_review
        return cls(
            id=entry.id,
            title=record.title,
            description=record.description,
            start_time=record.start_utc,
            end_time=record.end_utc,
            event_type=record.event_type,
            expertise=record.expertise,
            location=record.location,
            organizer=record.organizer,
            requires_ticket=record.requires_ticket,
            sold_out=record.sold_out,
            is_core_event=entry.is_core_event,
            main_url=record.main_url,
            tickets_url=record.tickets_url,
        )


# Error Models
class ErrorResponse(BaseModel):
    """Error body returned by the companion service."""
    error: str
    message: t.Optional[str] = None
    details: t.Optional[str] = None
