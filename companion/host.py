"""
Host runtime capability bridge.

Inside the host client the mini-app can signal it is ready, read the
signed-in user's identity context, request a quick-auth token and open the
host's compose sheet. `HostRuntime` is that surface; `LocalHost` backs it with
environment variables so the companion can run from a terminal.
"""
from __future__ import annotations

import os
import typing as t

from services.shared.models import User


class HostError(Exception):
    """A host capability is unavailable or failed."""


class HostRuntime(t.Protocol):
    async def signal_ready(self) -> None:
        ...

    async def get_identity_context(self) -> t.Optional[User]:
        ...

    async def request_token(self) -> str:
        ...

    async def compose_share(self, text: str, embeds: list[str]) -> bool:
        ...


class LocalHost:
    """Host runtime for running outside a host client.

    Identity comes from ROCKY_USER_ADDRESS / ROCKY_USERNAME / ROCKY_FID /
    ROCKY_AVATAR and the token from ROCKY_AUTH_TOKEN. There is no compose
    sheet, so compose_share always reports failure.
    """

    def __init__(self, environ: t.Optional[t.Mapping[str, str]] = None) -> None:
        self._environ = os.environ if environ is None else environ
        self.ready = False

    async def signal_ready(self) -> None:
        self.ready = True

    async def get_identity_context(self) -> t.Optional[User]:
        address = self._environ.get("ROCKY_USER_ADDRESS", "")
        fid = self._environ.get("ROCKY_FID")
        if not address and not fid:
            return None
        try:
            parsed_fid = int(fid) if fid else None
        except ValueError as e:
            raise HostError(f"ROCKY_FID must be an integer, got {fid!r}") from e
        return User(
            address=address,
            username=self._environ.get("ROCKY_USERNAME") or None,
            avatar=self._environ.get("ROCKY_AVATAR") or None,
            fid=parsed_fid,
        )

    async def request_token(self) -> str:
        token = self._environ.get("ROCKY_AUTH_TOKEN")
        if not token:
            raise HostError("No quick-auth token available (set ROCKY_AUTH_TOKEN)")
        return token

    async def compose_share(self, text: str, embeds: list[str]) -> bool:
        return False
