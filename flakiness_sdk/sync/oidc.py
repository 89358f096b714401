"""
GitHub Actions OIDC token exchange

With ``permissions: id-token: write`` a job can mint a short-lived token
whose ``aud`` claim names the Flakiness project (``org/proj``), and use it
instead of a static access token.
"""
import logging
from typing import Optional

import httpx

from ..config import Settings, load_settings
from ..errors import OIDCTokenError

logger = logging.getLogger(__name__)


def is_github_oidc_available(config: Optional[Settings] = None) -> bool:
    """True when running in GitHub Actions with OIDC token requests enabled."""
    config = config or load_settings()
    return bool(config.ACTIONS_ID_TOKEN_REQUEST_URL and config.ACTIONS_ID_TOKEN_REQUEST_TOKEN)


async def request_github_oidc_token(
    audience: str,
    config: Optional[Settings] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> str:
    """
    Request a GitHub Actions OIDC token.

    Args:
        audience: ``aud`` claim, formatted as ``org/proj``
        config: Settings to read the request URL and token from
        client: HTTP client to reuse; a temporary one is created otherwise

    Returns:
        The OIDC JWT

    Raises:
        OIDCTokenError: if the environment is not set up or the request fails
    """
    config = config or load_settings()
    request_url = config.ACTIONS_ID_TOKEN_REQUEST_URL
    request_token = config.ACTIONS_ID_TOKEN_REQUEST_TOKEN
    if not request_url or not request_token:
        raise OIDCTokenError(
            "GitHub OIDC environment variables are not available. "
            "Ensure the job has `permissions: id-token: write`."
        )

    headers = {
        "Authorization": f"bearer {request_token}",
        "Accept": "application/json; api-version=2.0",
    }
    try:
        if client is None:
            async with httpx.AsyncClient() as own_client:
                response = await own_client.get(request_url, params={"audience": audience}, headers=headers)
        else:
            response = await client.get(request_url, params={"audience": audience}, headers=headers)
    except httpx.HTTPError as e:
        raise OIDCTokenError(f"Failed to request GitHub OIDC token: {e}") from e

    if not response.is_success:
        raise OIDCTokenError(f"Failed to request GitHub OIDC token: {response.status_code} {response.text}")

    try:
        payload = response.json()
    except ValueError:
        payload = None
    value = payload.get("value") if isinstance(payload, dict) else None
    if not value:
        raise OIDCTokenError("GitHub OIDC token response did not contain a token value.")

    logger.debug(f"Obtained GitHub OIDC token for audience {audience}")
    return value
