"""
Gateway for the public DevConnect event catalog.

The calendar provider needs no authentication. Every fetch goes to the
network; a failed fetch leaves an error message on the gateway and yields no
events, and the caller decides how to surface it.
"""
from __future__ import annotations

import logging
import os
import typing as t

import httpx
from pydantic import TypeAdapter, ValidationError

from gateways.http import client_scope
from services.shared.models import CatalogEntry, CatalogEvent


logger = logging.getLogger(__name__)

DEVCONNECT_EVENTS_URL = os.getenv(
    "DEVCONNECT_EVENTS_URL", "https://at-slurper.onrender.com/calendar-events"
)

LOAD_ERROR = "Failed to load DevConnect events"

_ENTRY_LIST = TypeAdapter(list[CatalogEntry])


class CatalogGateway:
    """Loads the full catalog from the calendar provider."""

    def __init__(
        self,
        url: t.Optional[str] = None,
        client: t.Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.url = url or DEVCONNECT_EVENTS_URL
        self.error: t.Optional[str] = None
        self._client = client

    async def fetch(self) -> list[CatalogEvent]:
        """Fetch every catalog event.

        :return: The events, or an empty list with `error` set on failure.
        """
        self.error = None
        try:
            async with client_scope(self._client) as http:
                response = await http.get(self.url)
                response.raise_for_status()
            entries = _ENTRY_LIST.validate_python(response.json())
        except (httpx.HTTPError, ValueError, ValidationError) as e:
            logger.error("%s: %s", LOAD_ERROR, e)
            self.error = LOAD_ERROR
            return []
        return [CatalogEvent.from_entry(entry) for entry in entries]
