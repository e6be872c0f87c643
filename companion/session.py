"""Authentication session flow.

States move forward only: disconnected -> connected -> authenticated. The
identity-ready trigger runs once at startup; sign-in is user driven and never
retried automatically.
"""
from __future__ import annotations

import logging
import typing as t
from enum import Enum

from companion.host import HostRuntime
from gateways.auth import verify_token as verify_with_service
from services.shared.models import AuthVerification, User


logger = logging.getLogger(__name__)

STATUS_CONNECTING = "Connecting to Base..."
STATUS_DEVELOPMENT = "Development Mode"
STATUS_CONNECTED = "Connected - Sign in to view schedule"
STATUS_SIGNING_IN = "Signing in..."
STATUS_SIGNED_IN = "Connected - Signed in"
STATUS_FAILED = "Authentication failed - try again"

TokenVerifier = t.Callable[[str], t.Awaitable[AuthVerification]]
AuthenticatedCallback = t.Callable[["SessionFlow"], t.Awaitable[None]]


class SessionStatus(Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    AUTHENTICATED = "authenticated"


class SessionFlow:
    """Tracks who the user is and whether their token has been verified."""

    def __init__(self, host: HostRuntime, verify_token: t.Optional[TokenVerifier] = None) -> None:
        self.host = host
        self.status = SessionStatus.DISCONNECTED
        self.status_text = STATUS_CONNECTING
        self.user: t.Optional[User] = None
        self.auth_token: t.Optional[str] = None
        self.verification: t.Optional[AuthVerification] = None
        self._verify_token = verify_token or verify_with_service
        self._on_authenticated: list[AuthenticatedCallback] = []
        self._started = False

    @property
    def is_connected(self) -> bool:
        return self.status is not SessionStatus.DISCONNECTED

    @property
    def is_authenticated(self) -> bool:
        return self.status is SessionStatus.AUTHENTICATED

    @property
    def can_fetch_reminders(self) -> bool:
        """Reminders come from the service only for a verified user with an address."""
        return self.is_authenticated and bool(self.user and self.user.address)

    def on_authenticated(self, callback: AuthenticatedCallback) -> None:
        """Register a coroutine to run after a successful sign-in."""
        self._on_authenticated.append(callback)

    async def start(self) -> SessionStatus:
        """Identity-ready trigger: signal the host and read its identity context."""
        if self._started:
            return self.status
        self._started = True

        try:
            await self.host.signal_ready()
            user = await self.host.get_identity_context()
        except Exception as e:
            logger.error("Host initialization failed: %s", e)
            user = None

        if user is None:
            self.status = SessionStatus.DISCONNECTED
            self.status_text = STATUS_DEVELOPMENT
            return self.status

        self.user = user
        self.status = SessionStatus.CONNECTED
        self.status_text = STATUS_CONNECTED
        return self.status

    async def sign_in(self) -> bool:
        """Sign-in trigger: get a token from the host and verify it.

        :return: True once the session is authenticated.
        """
        if self.is_authenticated:
            return True
        if not self.is_connected:
            logger.warning("Sign-in needs a host identity; staying in development mode")
            return False

        self.status_text = STATUS_SIGNING_IN
        try:
            token = await self.host.request_token()
            verification = await self._verify_token(token)
        except Exception as e:
            logger.error("Authentication failed: %s", e)
            self.status_text = STATUS_FAILED
            return False

        self.auth_token = token
        self.verification = verification
        self.status = SessionStatus.AUTHENTICATED
        self.status_text = STATUS_SIGNED_IN

        if self.can_fetch_reminders:
            for callback in self._on_authenticated:
                await callback(self)
        return True
