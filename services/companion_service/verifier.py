"""
Quick Auth token verification.

The host client issues a short-lived JWT signed by the quick-auth server.
The companion service checks the signature against the issuer's published
JWKS and requires the audience to match the domain the request was sent to.
"""
from __future__ import annotations

import os
import typing as t
from dataclasses import dataclass

import jwt


QUICK_AUTH_ISSUER = os.getenv("QUICK_AUTH_ISSUER", "https://auth.farcaster.xyz")
QUICK_AUTH_JWKS_URL = os.getenv(
    "QUICK_AUTH_JWKS_URL", f"{QUICK_AUTH_ISSUER}/.well-known/jwks.json"
)
QUICK_AUTH_ALGORITHMS = ["EdDSA", "ES256", "RS256"]


class InvalidTokenError(Exception):
    """The bearer token is malformed, expired, or not meant for this domain."""


class VerificationUnavailableError(Exception):
    """The verification infrastructure (JWKS endpoint) could not be reached."""


@dataclass
class VerifiedToken:
    """Claims of a verified quick-auth token."""
    subject: t.Union[int, str]
    issued_at: t.Optional[int] = None
    expires_at: t.Optional[int] = None


class TokenVerifier(t.Protocol):
    def verify(self, token: str, domain: str) -> VerifiedToken:
        ...


class QuickAuthVerifier:
    """Verifies quick-auth JWTs with PyJWT against the issuer's JWKS."""

    def __init__(
        self,
        jwks_client: t.Optional[jwt.PyJWKClient] = None,
        issuer: str = QUICK_AUTH_ISSUER,
        algorithms: t.Optional[list[str]] = None,
    ) -> None:
        self._jwks_client = jwks_client or jwt.PyJWKClient(QUICK_AUTH_JWKS_URL)
        self._issuer = issuer
        self._algorithms = algorithms or QUICK_AUTH_ALGORITHMS

    def verify(self, token: str, domain: str) -> VerifiedToken:
        """Verify `token` for `domain` and return its claims.

        :raises InvalidTokenError: if the token fails any check.
        :raises VerificationUnavailableError: if the signing keys can't be fetched.
        """
        try:
            signing_key = self._jwks_client.get_signing_key_from_jwt(token)
        except jwt.PyJWKClientConnectionError as e:
            raise VerificationUnavailableError(str(e)) from e
        except (jwt.PyJWKClientError, jwt.InvalidTokenError) as e:
            raise InvalidTokenError(str(e)) from e

        try:
            payload = jwt.decode(
                token,
                signing_key.key,
                algorithms=self._algorithms,
                audience=domain,
                issuer=self._issuer,
                # quick-auth subjects are numeric FIDs, not strings
                options={"require": ["sub", "exp", "iss", "aud"], "verify_sub": False},
            )
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(str(e)) from e

        return VerifiedToken(
            subject=payload["sub"],
            issued_at=payload.get("iat"),
            expires_at=payload.get("exp"),
        )
