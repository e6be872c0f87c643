"""
Client side of quick-auth token verification.

Submits the token obtained from the host runtime to the companion service's
`/api/auth` endpoint as a bearer credential.
"""
from __future__ import annotations

import typing as t

import httpx
from pydantic import ValidationError

from gateways.http import ROCKY_API_URL, client_scope
from services.shared.models import AuthVerification


class AuthenticationError(Exception):
    """The token was rejected or could not be verified."""


async def verify_token(
    token: str,
    *,
    base_url: t.Optional[str] = None,
    client: t.Optional[httpx.AsyncClient] = None,
) -> AuthVerification:
    """Verify `token` with the companion service.

    :param token: Quick-auth JWT from the host runtime.
    :param base_url: Companion service URL, defaults to ROCKY_API_URL.
    :param client: Optional shared AsyncClient.
    :return: The verification body (FID of the signed-in user).
    :raises AuthenticationError: on any non-2xx status or transport failure.
    """
    url = f"{base_url or ROCKY_API_URL}/api/auth"
    try:
        async with client_scope(client) as http:
            response = await http.get(url, headers={"Authorization": f"Bearer {token}"})
            response.raise_for_status()
        return AuthVerification.model_validate(response.json())
    except httpx.HTTPStatusError as e:
        raise AuthenticationError(
            f"Token rejected by companion service: {e.response.status_code}"
        ) from e
    except (httpx.HTTPError, ValueError, ValidationError) as e:
        raise AuthenticationError(f"Error calling companion service: {e}") from e
