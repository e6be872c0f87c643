# -*- coding: utf-8 -*-
"""Read access to the Rocky agent's reminder table."""
from __future__ import annotations

import os
import typing as t
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, create_engine, text
from sqlalchemy.engine import Engine

from services.shared.models import StoredReminder


# Same query as the agent's listAllPendingForInbox
PENDING_REMINDERS_QUERY = text(
    """
    SELECT id, inbox_id, conversation_id, target_time, message, sent, created_at
    FROM reminders
    WHERE inbox_id = :inbox_id AND sent = FALSE
    ORDER BY target_time ASC
    """
).columns(target_time=DateTime, created_at=DateTime, sent=Boolean)


def create_reminder_engine(database_url: str) -> Engine:
    """Creates the process-wide engine (and its connection pool).

    :param database_url: A ``postgres://`` style URL or any SQLAlchemy URL.
    :return: A SQLAlchemy Engine.
    """
    url = database_url
    if url.startswith("postgres://"):
        url = "postgresql+psycopg://" + url[len("postgres://"):]
    elif url.startswith("postgresql://"):
        url = "postgresql+psycopg://" + url[len("postgresql://"):]

    connect_args = {}
    if url.startswith("postgresql") and os.getenv("ROCKY_ENV") == "production":
        connect_args["sslmode"] = "require"

    return create_engine(url, pool_pre_ping=True, connect_args=connect_args)


def format_timestamp(value: t.Union[datetime, str, None]) -> str:
    """Formats a timestamp as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC.

    Naive datetimes are taken to be UTC already.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S") + f".{value.microsecond // 1000:03d}Z"


def list_pending_reminders(engine: Engine, inbox_id: str) -> list[StoredReminder]:
    """Lists unsent reminders for an inbox, earliest target time first.

    :param engine: Engine created by create_reminder_engine.
    :param inbox_id: The agent's inbox identifier for the user.
    :return: A list of StoredReminder objects.
    """
    with engine.connect() as conn:
        rows = conn.execute(PENDING_REMINDERS_QUERY, {"inbox_id": inbox_id}).mappings().all()

    return [
        StoredReminder(
            id=str(row["id"]),
            inbox_id=str(row["inbox_id"]),
            conversation_id=str(row["conversation_id"] or ""),
            title=row["message"] or "",
            time=format_timestamp(row["target_time"]),
            sent=bool(row["sent"]),
            created_at=format_timestamp(row["created_at"]),
        )
        for row in rows
    ]
