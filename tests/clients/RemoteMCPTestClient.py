import asyncio
import argparse
import os

from mcp.client.streamable_http import streamablehttp_client

from tests.clients.BaseMCPTestClient import BaseMCPTestClient


class RemoteMCPTestClient(BaseMCPTestClient):
    async def connect_to_server(self, endpoint: str, token: str):
        """Connect to a running HTTP(S) server over streamable HTTP

        Args:
            endpoint: Full endpoint URL (e.g., "http://localhost:8000/sse")
            token: FetchSERP API token sent as the bearer credential
        """
        print(f"Connecting to server at {endpoint}")

        read_stream, write_stream, _ = await self.exit_stack.enter_async_context(
            streamablehttp_client(endpoint, headers={"Authorization": f"Bearer {token}"})
        )
        await self._open_session(read_stream, write_stream)


async def main():
    parser = argparse.ArgumentParser(description="Remote MCP Test Client")
    parser.add_argument(
        "--endpoint",
        default="http://localhost:8000/sse",
        help="Endpoint URL for the MCP server",
    )
    args = parser.parse_args()

    client = RemoteMCPTestClient()
    try:
        await client.connect_to_server(args.endpoint, os.environ["FETCHSERP_API_TOKEN"])
        await client.chat_loop()
    finally:
        await client.cleanup()


if __name__ == "__main__":
    asyncio.run(main())
