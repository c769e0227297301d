import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx
from mcp.shared.exceptions import McpError
from mcp.types import INTERNAL_ERROR, INVALID_REQUEST, ErrorData

from fetchserp_mcp.utils.fetchserp.config import api_url, request_timeout

logger = logging.getLogger(__name__)


def _make_client() -> httpx.AsyncClient:
    """Create a client for one upstream call (caller manages lifecycle)"""
    return httpx.AsyncClient(base_url=api_url(), timeout=request_timeout())


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_query_params(params: Optional[Dict[str, Any]]) -> List[Tuple[str, str]]:
    """Flatten tool arguments into query pairs.

    ``None`` values are dropped and list values are sent as repeated
    ``key[]`` parameters, which is how the API expects arrays.
    """
    pairs: List[Tuple[str, str]] = []
    for key, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            pairs.extend((f"{key}[]", _format_value(v)) for v in value)
        else:
            pairs.append((key, _format_value(value)))
    return pairs


async def make_fetchserp_request(
    endpoint: str,
    method: str = "GET",
    params: Optional[Dict[str, Any]] = None,
    body: Optional[Dict[str, Any]] = None,
    token: Optional[str] = None,
) -> Any:
    """Call a FetchSERP endpoint and return the decoded JSON body as-is"""
    if not token:
        raise McpError(
            ErrorData(code=INVALID_REQUEST, message="FETCHSERP_API_TOKEN is required")
        )

    headers = {
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/json",
    }

    request_kwargs: Dict[str, Any] = {
        "params": build_query_params(params),
        "headers": headers,
    }
    if body is not None and method != "GET":
        request_kwargs["json"] = body

    async with _make_client() as client:
        response = await client.request(method, endpoint, **request_kwargs)

    if not response.is_success:
        logger.error(
            f"HTTP error occurred: {response.status_code} - {response.text}"
        )
        raise McpError(
            ErrorData(
                code=INTERNAL_ERROR,
                message=(
                    f"API request failed: {response.status_code} "
                    f"{response.reason_phrase} - {response.text}"
                ),
            )
        )

    return response.json()
