import json
import logging
import sys
from typing import Any, Dict, Optional
from urllib.parse import quote

from dotenv import load_dotenv

from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions
from mcp.shared.exceptions import McpError
from mcp.types import (
    INTERNAL_ERROR,
    METHOD_NOT_FOUND,
    EmbeddedResource,
    ErrorData,
    ImageContent,
    TextContent,
    Tool,
)

from fetchserp_mcp.servers.fetchserp.handlers.tools import ENDPOINTS, get_tools
from fetchserp_mcp.servers.metrics import tool_calls_total
from fetchserp_mcp.utils.fetchserp.client import make_fetchserp_request
from fetchserp_mcp.utils.fetchserp.config import SERVER_NAME, SERVER_VERSION
from fetchserp_mcp.utils.fetchserp.util import (
    authenticate_and_save_fetchserp_key,
    get_fetchserp_credentials,
)

SERVICE_NAME = "fetchserp"

logger = logging.getLogger(SERVICE_NAME)


def _current_request(server: Server) -> Any:
    """The HTTP request that carried the MCP message being handled, if any"""
    try:
        ctx = server.request_context
    except LookupError:
        return None
    return getattr(ctx, "request", None)


def build_request(name: str, arguments: Dict[str, Any]) -> Dict[str, Any]:
    """Map tool arguments onto the upstream endpoint, query params and body"""
    method, endpoint = ENDPOINTS[name]

    if name == "get_serp_js_result":
        uuid = quote(str(arguments.get("uuid", "")), safe="")
        return {
            "endpoint": endpoint.format(uuid=uuid),
            "method": method,
            "params": {},
            "body": None,
        }

    if name == "get_user_info":
        return {"endpoint": endpoint, "method": method, "params": {}, "body": None}

    if name in ("scrape_webpage_js", "scrape_webpage_js_proxy"):
        # The script travels in the body, everything else stays in the query
        params = {k: v for k, v in arguments.items() if k != "js_script"}
        body = {"url": arguments.get("url"), "js_script": arguments.get("js_script")}
        return {"endpoint": endpoint, "method": method, "params": params, "body": body}

    return {"endpoint": endpoint, "method": method, "params": arguments, "body": None}


def create_server(
    user_id: Optional[str] = None,
    api_key: Optional[str] = None,
    local_fallback: bool = True,
):
    """Create a new server instance with optional user context.

    With ``local_fallback`` off (HTTP transports) a call is only ever made with
    the caller's own token, never FETCHSERP_API_TOKEN or stored credentials.
    """
    server = Server(SERVER_NAME, version=SERVER_VERSION)

    server.user_id = user_id
    server.api_key = api_key
    server.local_fallback = local_fallback

    @server.list_tools()
    async def handle_list_tools() -> list[Tool]:
        """List the FetchSERP tool catalog"""
        logger.info(f"Listing tools for user: {server.user_id}")
        return get_tools()

    @server.call_tool()
    async def handle_call_tool(
        name: str, arguments: dict | None
    ) -> list[TextContent | ImageContent | EmbeddedResource]:
        """Forward a tool call to its FetchSERP endpoint"""
        logger.info(f"Tool: {name}, User: {server.user_id}")
        arguments = arguments or {}

        if name not in ENDPOINTS:
            tool_calls_total.labels(tool="unknown", outcome="not_found").inc()
            raise McpError(
                ErrorData(code=METHOD_NOT_FOUND, message=f"Unknown tool: {name}")
            )

        token = get_fetchserp_credentials(
            server.user_id,
            server.api_key,
            _current_request(server),
            local_fallback=server.local_fallback,
        )

        try:
            result = await make_fetchserp_request(
                token=token, **build_request(name, arguments)
            )
        except McpError:
            tool_calls_total.labels(tool=name, outcome="error").inc()
            raise
        except Exception as e:
            tool_calls_total.labels(tool=name, outcome="error").inc()
            logger.error(f"Error processing {name}: {e}")
            raise McpError(
                ErrorData(code=INTERNAL_ERROR, message=f"Tool execution failed: {e}")
            ) from e

        tool_calls_total.labels(tool=name, outcome="success").inc()
        return [TextContent(type="text", text=json.dumps(result, indent=2))]

    return server


server = create_server


def get_initialization_options(server_instance: Server) -> InitializationOptions:
    """Get the initialization options for the server"""
    return InitializationOptions(
        server_name=SERVER_NAME,
        server_version=SERVER_VERSION,
        capabilities=server_instance.get_capabilities(
            notification_options=NotificationOptions(),
            experimental_capabilities={},
        ),
    )


def main(argv=None):
    """Auth CLI: ``python -m fetchserp_mcp.servers.fetchserp.main auth [user_id]``"""
    load_dotenv()
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    argv = sys.argv[1:] if argv is None else argv
    if argv and argv[0].lower() == "auth":
        user_id = argv[1] if len(argv) > 1 else "local"
        authenticate_and_save_fetchserp_key(user_id)
        return 0

    print("Usage:")
    print(
        "  python -m fetchserp_mcp.servers.fetchserp.main auth [user_id]"
        " - Save a FetchSERP API token"
    )
    print("Note: To run the server, use the fetchserp-mcp command.")
    return 1


if __name__ == "__main__":
    sys.exit(main())
