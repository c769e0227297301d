import argparse
import asyncio
import dataclasses
import logging
import sys
import threading

from fetchserp_mcp.utils.fetchserp.config import ServerSettings

logger = logging.getLogger("fetchserp-server")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="FetchSERP MCP Server")
    parser.add_argument(
        "--mode",
        choices=["stdio", "http", "https"],
        default=None,
        help="Transport to serve (default: from MCP_HTTPS_MODE / MCP_HTTP_MODE, else stdio)",
    )
    parser.add_argument("--host", default=None, help="Host for the HTTP(S) server")
    parser.add_argument(
        "--port", type=int, default=None, help="Port for the HTTP(S) server"
    )
    parser.add_argument(
        "--user-id", default="local", help="User ID for stdio credentials lookup"
    )
    parser.add_argument(
        "--no-metrics",
        action="store_true",
        help="Do not start the Prometheus metrics server in HTTP(S) mode",
    )
    return parser.parse_args(argv)


def start_metrics_thread(settings):
    from fetchserp_mcp.servers.remote import run_metrics_server

    metrics_thread = threading.Thread(
        target=run_metrics_server,
        args=(settings.host, settings.metrics_port),
        daemon=True,
    )
    metrics_thread.start()
    logger.info(
        f"Starting Metrics server on http://{settings.host}:{settings.metrics_port}/metrics"
    )


def run_https(settings):
    """Obtain certificates and serve over HTTPS, exiting on failure"""
    from fetchserp_mcp.servers.remote import serve
    from fetchserp_mcp.utils.tls.certificates import (
        CertificateError,
        create_self_signed_certs,
        obtain_letsencrypt_certs,
    )

    logger.info("Starting HTTPS server...")
    logger.info(f"Domain: {settings.domain}")
    logger.info(f"Port: {settings.port}")
    logger.info(f"SSL Mode: {settings.ssl_description}")
    if not settings.use_self_signed:
        logger.info(f"Email: {settings.le_email}")
        logger.info(f"Staging: {settings.le_staging}")

    try:
        if settings.use_self_signed:
            certs = create_self_signed_certs(settings.domain)
            logger.warning(
                "Using self-signed certificates - clients may need to accept security warnings"
            )
        else:
            certs = obtain_letsencrypt_certs(
                settings.domain, settings.le_email, staging=settings.le_staging
            )

        logger.info(f"SSE endpoint: {settings.public_base_url}/sse")
        logger.info(f"Health check: {settings.public_base_url}/health")
        serve(settings, ssl_keyfile=certs.keyfile, ssl_certfile=certs.certfile)
    except (CertificateError, OSError) as e:
        logger.error(f"Failed to start HTTPS server: {e}")
        if settings.use_self_signed:
            logger.error("Make sure OpenSSL is installed on your system")
        else:
            logger.error("Make sure:")
            logger.error(
                "1. Domain DNS is pointing to this server for Let's Encrypt validation"
            )
            logger.error(
                "2. Port 80 and 443 are available for Let's Encrypt challenges"
            )
            logger.error("3. Firewall allows incoming connections on these ports")
            logger.error(
                "For local development, try: USE_SELF_SIGNED=true MCP_HTTPS_MODE=true fetchserp-mcp"
            )
        sys.exit(1)


def main(argv=None):
    """Parse arguments and launch the FetchSERP MCP server"""
    args = parse_args(argv)
    settings = ServerSettings.from_env(mode=args.mode)

    overrides = {}
    if args.host:
        overrides["host"] = args.host
    if args.port:
        overrides["port"] = args.port
    if overrides:
        settings = dataclasses.replace(settings, **overrides)

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if settings.mode == "stdio":
        from fetchserp_mcp.servers.local import serve_stdio

        logger.info("FetchSERP MCP server running on stdio")
        asyncio.run(serve_stdio(user_id=args.user_id))
        return

    if not args.no_metrics:
        start_metrics_thread(settings)

    if settings.mode == "https":
        run_https(settings)
        return

    from fetchserp_mcp.servers.remote import serve

    logger.info(f"Starting FetchSERP MCP server on {settings.host}:{settings.port}")
    logger.info(f"SSE endpoint: http://{settings.host}:{settings.port}/sse")
    serve(settings)


if __name__ == "__main__":
    main()
