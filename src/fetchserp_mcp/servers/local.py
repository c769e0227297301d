import argparse
import asyncio
import importlib
import logging
import sys
from pathlib import Path

import mcp.server.stdio
from dotenv import load_dotenv

logger = logging.getLogger("fetchserp-local-stdio")

DEFAULT_SERVER = "fetchserp"


async def run_stdio_server(server, get_initialization_options):
    """Run the server using stdin/stdout streams"""
    logger.info("Starting stdio server")
    async with mcp.server.stdio.stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            get_initialization_options(),
        )


def available_servers():
    """Names of server packages that ship a main.py"""
    servers_dir = Path(__file__).parent.absolute()
    return sorted(
        item.name
        for item in servers_dir.iterdir()
        if item.is_dir() and (item / "main.py").exists()
    )


def load_server(server_name):
    """Load a server module by name"""
    if server_name not in available_servers():
        logger.error(f"Server '{server_name}' not found")
        print("Available servers:", file=sys.stderr)
        for name in available_servers():
            print(f"  - {name}", file=sys.stderr)
        sys.exit(1)

    server_module = importlib.import_module(f"fetchserp_mcp.servers.{server_name}.main")

    # Verify required attributes
    if not hasattr(server_module, "server") or not hasattr(
        server_module, "get_initialization_options"
    ):
        logger.error(
            f"Server '{server_name}' does not have required server or get_initialization_options"
        )
        sys.exit(1)

    return server_module.server, server_module.get_initialization_options


async def serve_stdio(server_name=DEFAULT_SERVER, user_id="local", api_key=None):
    """Create a server instance and serve it over stdio until stdin closes"""
    server_creator, get_initialization_options = load_server(server_name)
    server_instance = server_creator(user_id=user_id, api_key=api_key)

    logger.info(
        f"Starting local stdio server for server: {server_name} with user: {user_id or 'None'}"
    )
    await run_stdio_server(
        server_instance, lambda: get_initialization_options(server_instance)
    )


def main():
    """Main entry point for the stdio server"""
    parser = argparse.ArgumentParser(description="FetchSERP MCP Local Stdio Server")
    parser.add_argument(
        "--server",
        default=DEFAULT_SERVER,
        help="Name of the server to run (default: fetchserp)",
    )
    parser.add_argument(
        "--user-id", default="local", help="User ID for server context (optional)"
    )

    args = parser.parse_args()
    load_dotenv()

    # stdout carries the protocol, so logs go to stderr
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    asyncio.run(serve_stdio(args.server, args.user_id))


if __name__ == "__main__":
    main()
