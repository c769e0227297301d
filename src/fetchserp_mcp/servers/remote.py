import contextlib
import importlib
import logging
from typing import Optional

import uvicorn
from mcp.server.sse import SseServerTransport
from mcp.server.streamable_http_manager import StreamableHTTPSessionManager
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from fetchserp_mcp.servers.local import available_servers
from fetchserp_mcp.servers.metrics import (
    active_connections,
    connection_total,
    http_requests_total,
)
from fetchserp_mcp.utils.fetchserp.config import (
    SERVER_NAME,
    SERVER_VERSION,
    ServerSettings,
)
from fetchserp_mcp.utils.fetchserp.util import extract_bearer_token

logger = logging.getLogger("fetchserp-server")

# Server name -> {"server": factory, "get_initialization_options": fn}
servers = {}

# Live SSE transports, keyed by "<server_name>:<session_key>"
user_session_transports = {}

STREAMABLE_HTTP_PATHS = ("/sse", "/mcp")
PRIMARY_SERVER = "fetchserp"

UNAUTHORIZED_BODY = {"error": "Unauthorized - Bearer token required"}


def discover_servers():
    """Discover and load all servers from the servers package"""
    for server_name in available_servers():
        if server_name in servers:
            continue
        try:
            server_module = importlib.import_module(
                f"fetchserp_mcp.servers.{server_name}.main"
            )
        except Exception as e:
            logger.error(f"Failed to load server {server_name}: {e}")
            continue

        if hasattr(server_module, "server") and hasattr(
            server_module, "get_initialization_options"
        ):
            servers[server_name] = {
                "server": server_module.server,
                "get_initialization_options": server_module.get_initialization_options,
            }
            logger.info(f"Loaded server: {server_name}")
        else:
            logger.warning(
                f"Server {server_name} does not have required server or get_initialization_options"
            )

    logger.info(f"Discovered {len(servers)} servers")


def parse_session_key(session_key_encoded: str):
    """Split an SSE session key of the form ``<user_id>[:<token>]``"""
    if ":" in session_key_encoded:
        user_id, api_key = session_key_encoded.split(":", 1)
        return user_id, api_key or None
    return session_key_encoded, None


class StreamableHTTPEndpoint:
    """ASGI endpoint that requires a bearer token before handing off to the MCP session manager"""

    def __init__(self, session_manager: StreamableHTTPSessionManager):
        self.session_manager = session_manager

    async def __call__(self, scope, receive, send):
        request = Request(scope, receive)

        if not extract_bearer_token(request.headers):
            http_requests_total.labels(method=request.method, status="401").inc()
            response = JSONResponse(UNAUTHORIZED_BODY, status_code=401)
            await response(scope, receive, send)
            return

        logger.info(f"Received {request.method} MCP request on {request.url.path}")

        response_started = False
        status = "500"

        async def tracking_send(message):
            nonlocal response_started, status
            if message["type"] == "http.response.start":
                response_started = True
                status = str(message["status"])
            await send(message)

        try:
            await self.session_manager.handle_request(scope, receive, tracking_send)
        except Exception:
            logger.exception("Error handling MCP request")
            if not response_started:
                response = JSONResponse(
                    {"error": "Internal server error"}, status_code=500
                )
                await response(scope, receive, send)
        finally:
            http_requests_total.labels(method=request.method, status=status).inc()


class SseMessageEndpoint:
    """ASGI endpoint that routes a POSTed message to its SSE session"""

    def __init__(self, server_name: str):
        self.server_name = server_name

    async def __call__(self, scope, receive, send):
        session_key_encoded = scope["path_params"]["session_key"]
        session_key = f"{self.server_name}:{session_key_encoded}"

        transport = user_session_transports.get(session_key)
        if transport is None:
            response = Response("Session not found or expired", status_code=404)
            await response(scope, receive, send)
            return

        await transport.handle_post_message(scope, receive, send)


def create_sse_handler(server_name, server_factory, get_init_options):
    async def handle_sse(request):
        """Handle SSE connection requests for a specific server and session"""
        session_key_encoded = request.path_params["session_key"]
        session_key = f"{server_name}:{session_key_encoded}"

        user_id, api_key = parse_session_key(session_key_encoded)
        api_key = api_key or extract_bearer_token(request.headers)

        if not api_key:
            logger.warning(
                f"Rejected SSE connection for {server_name} session {user_id}: no token"
            )
            return JSONResponse(UNAUTHORIZED_BODY, status_code=401)

        logger.info(
            f"New SSE connection requested for {server_name} with session: {user_id}"
        )

        sse_transport = SseServerTransport(
            f"/{server_name}/{session_key_encoded}/messages/"
        )
        user_session_transports[session_key] = sse_transport

        # HTTP sessions only ever spend the caller's own token
        server_instance = server_factory(user_id, api_key, local_fallback=False)

        init_options = get_init_options(server_instance)

        active_connections.labels(server=server_name).inc()
        connection_total.labels(server=server_name).inc()
        try:
            async with sse_transport.connect_sse(
                request.scope, request.receive, request._send
            ) as streams:
                logger.info(
                    f"SSE connection established for {server_name} session: {user_id}"
                )
                await server_instance.run(
                    streams[0],
                    streams[1],
                    init_options,
                )
        finally:
            if user_session_transports.get(session_key) is sse_transport:
                del user_session_transports[session_key]
            active_connections.labels(server=server_name).dec()
            logger.info(f"Closed SSE connection for {server_name} session: {user_id}")

        return Response()

    return handle_sse


def create_metrics_app():
    """Create a separate Starlette app just for metrics"""

    async def metrics_endpoint(request):
        """Prometheus metrics endpoint"""
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    routes = [Route("/metrics", endpoint=metrics_endpoint)]

    return Starlette(routes=routes)


def create_starlette_app(settings: Optional[ServerSettings] = None):
    """Create the Starlette app serving streamable HTTP, SSE and health routes"""
    settings = settings or ServerSettings.from_env(mode="http")

    discover_servers()

    routes = []

    # Streamable HTTP transport for the primary server
    primary = servers[PRIMARY_SERVER]
    streamable_server = primary["server"](local_fallback=False)
    session_manager = StreamableHTTPSessionManager(app=streamable_server)
    streamable_endpoint = StreamableHTTPEndpoint(session_manager)
    for path in STREAMABLE_HTTP_PATHS:
        routes.append(
            Route(
                path,
                endpoint=streamable_endpoint,
                methods=["GET", "POST", "DELETE"],
            )
        )

    # Session-keyed SSE transport for every discovered server
    for server_name, server_info in servers.items():
        handler = create_sse_handler(
            server_name,
            server_info["server"],
            server_info["get_initialization_options"],
        )
        routes.append(Route(f"/{server_name}/{{session_key}}", endpoint=handler))
        routes.append(
            Route(
                f"/{server_name}/{{session_key}}/messages/",
                endpoint=SseMessageEndpoint(server_name),
                methods=["POST"],
            )
        )
        logger.info(f"Added user-specific routes for server: {server_name}")

    base_url = settings.public_base_url

    async def health_check(request):
        """Health check endpoint"""
        return JSONResponse(
            {
                "status": "ok",
                "server": SERVER_NAME,
                "version": SERVER_VERSION,
                "transport": "Streamable HTTP",
                "protocol": settings.protocol,
                "domain": settings.domain,
                "port": settings.port,
                "ssl": settings.ssl_description,
                "endpoint": (
                    "/sse (GET, POST, DELETE) - Streamable HTTP transport for MCP connectors"
                ),
                "servers": list(servers.keys()),
            }
        )

    async def root_handler(request):
        """Root endpoint describing how to connect"""
        return JSONResponse(
            {
                "name": "FetchSERP MCP Server",
                "version": SERVER_VERSION,
                "protocol": settings.protocol,
                "domain": settings.domain,
                "port": settings.port,
                "endpoints": {
                    "sse": f"{base_url}/sse - Streamable HTTP transport for MCP connectors",
                    "mcp": f"{base_url}/mcp - Alias of /sse",
                    "legacy_sse": f"{base_url}/{PRIMARY_SERVER}/<user_id>:<token> - SSE transport",
                    "health": f"{base_url}/health - Health check",
                },
                "usage": (
                    f"Connect your MCP client to {base_url}/sse "
                    "with your FetchSERP API token as a Bearer token"
                ),
                "ssl": settings.ssl_description,
            }
        )

    routes.append(Route("/health", endpoint=health_check))
    routes.append(Route("/", endpoint=root_handler))

    @contextlib.asynccontextmanager
    async def lifespan(app):
        async with session_manager.run():
            logger.info("Streamable HTTP session manager started")
            yield
        logger.info("Streamable HTTP session manager stopped")

    app = Starlette(routes=routes, lifespan=lifespan)
    app.state.session_manager = session_manager
    return app


def run_metrics_server(host, port):
    """Run a separate metrics server on the specified port"""
    metrics_app = create_metrics_app()
    logger.info(f"Starting metrics server on {host}:{port}")
    uvicorn.run(metrics_app, host=host, port=port, log_level="warning")


def serve(
    settings: ServerSettings,
    ssl_keyfile: Optional[str] = None,
    ssl_certfile: Optional[str] = None,
):
    """Run the HTTP(S) app with uvicorn until interrupted"""
    app = create_starlette_app(settings)
    logger.info(
        f"Starting {settings.protocol.upper()} server on {settings.host}:{settings.port}"
    )
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        ssl_keyfile=ssl_keyfile,
        ssl_certfile=ssl_certfile,
        log_level=settings.log_level.lower(),
    )
