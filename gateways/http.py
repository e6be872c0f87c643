"""Shared httpx plumbing for the client gateways."""
from __future__ import annotations

import os
import typing as t
from contextlib import asynccontextmanager

import httpx


# Companion service URL - configurable via environment variable
ROCKY_API_URL = os.getenv("ROCKY_API_URL", "http://localhost:8000")


@asynccontextmanager
async def client_scope(client: t.Optional[httpx.AsyncClient] = None) -> t.AsyncIterator[httpx.AsyncClient]:
    """Yield `client` if given, otherwise a short-lived one closed on exit."""
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient() as owned:
        yield owned
