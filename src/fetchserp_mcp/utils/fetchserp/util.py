import logging
import os
from typing import Any, Mapping, Optional

from fetchserp_mcp.auth.factory import create_auth_client

logger = logging.getLogger(__name__)

SERVICE_NAME = "fetchserp"


def extract_bearer_token(headers: Optional[Mapping[str, str]]) -> Optional[str]:
    """Return the token from an ``Authorization: Bearer <token>`` header, if any"""
    if not headers:
        return None
    auth_header = headers.get("authorization") or headers.get("Authorization")
    if not auth_header:
        return None
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def authenticate_and_save_fetchserp_key(user_id: str) -> str:
    """Prompt for a FetchSERP API token and save it for ``user_id``"""
    logger.info("Starting FetchSERP authentication for user %s...", user_id)

    auth_client = create_auth_client()

    api_key = input("Please enter your FetchSERP API token: ").strip()
    if not api_key:
        raise ValueError("API token cannot be empty")

    auth_client.save_user_credentials(SERVICE_NAME, user_id, {"api_key": api_key})

    logger.info(
        "FetchSERP API token saved for user %s. You can now run the server.", user_id
    )
    return api_key


def get_fetchserp_credentials(
    user_id: Optional[str],
    api_key: Optional[str] = None,
    request: Any = None,
    local_fallback: bool = True,
) -> Optional[str]:
    """Resolve the FetchSERP token for one tool call.

    Order: bearer header of the inbound HTTP request, token bound to the
    server instance, FETCHSERP_API_TOKEN, then stored local credentials.
    The last two are only consulted when ``local_fallback`` is set (stdio).
    Returns None when nothing is found.
    """
    if request is not None:
        token = extract_bearer_token(getattr(request, "headers", None))
        if token:
            return token

    if api_key:
        return api_key

    if not local_fallback:
        return None

    env_token = os.environ.get("FETCHSERP_API_TOKEN")
    if env_token:
        return env_token

    if not user_id:
        return None

    credentials_data = create_auth_client().get_user_credentials(
        SERVICE_NAME, user_id
    )
    if not credentials_data:
        logger.warning(f"FetchSERP API token not found for user {user_id}")
        return None

    if isinstance(credentials_data, str):
        return credentials_data
    return credentials_data.get("api_key")
