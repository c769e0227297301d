import asyncio
import json
import os

import httpx
import pytest
import pytest_asyncio

from fetchserp_mcp.utils.fetchserp import client as fetchserp_client

UPSTREAM_BASE_URL = "https://www.fetchserp.com"


class UpstreamRecorder:
    """Stands in for the FetchSERP API and records every request it receives"""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.payload: object = {"data": {"ok": True}}
        self.text: str | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text)
        return httpx.Response(
            self.status_code,
            content=json.dumps(self.payload).encode(),
            headers={"content-type": "application/json"},
        )

    @property
    def last(self) -> httpx.Request:
        assert self.requests, "no upstream request was made"
        return self.requests[-1]

    def last_json_body(self):
        return json.loads(self.last.content)


@pytest.fixture
def upstream(monkeypatch, tmp_path):
    """Route all FetchSERP calls to an in-process recorder"""
    recorder = UpstreamRecorder()

    def make_client():
        return httpx.AsyncClient(
            base_url=UPSTREAM_BASE_URL,
            transport=httpx.MockTransport(recorder.handler),
        )

    monkeypatch.setattr(fetchserp_client, "_make_client", make_client)
    monkeypatch.setenv("FETCHSERP_API_TOKEN", "env-token")
    monkeypatch.setenv("FETCHSERP_CREDENTIALS_DIR", str(tmp_path / "credentials"))
    return recorder


@pytest_asyncio.fixture(scope="function")
async def client(request):
    """Connected LLM-driven client for the live tests in test_live.py"""
    if not os.environ.get("ANTHROPIC_API_KEY") or not os.environ.get(
        "FETCHSERP_API_TOKEN"
    ):
        pytest.skip("Live tests need ANTHROPIC_API_KEY and FETCHSERP_API_TOKEN")

    from tests.clients.LocalMCPTestClient import LocalMCPTestClient
    from tests.clients.RemoteMCPTestClient import RemoteMCPTestClient

    test_path = request.node.fspath.strpath
    server_name = os.path.basename(os.path.dirname(test_path))

    is_remote = request.config.getoption("--remote", False)

    if is_remote:
        endpoint = (
            request.config.getoption("--endpoint") or "http://localhost:8000/sse"
        )
        client = RemoteMCPTestClient()
        await client.connect_to_server(endpoint, os.environ["FETCHSERP_API_TOKEN"])
        print(f"Connected to {server_name} at {endpoint}")
    else:
        client = LocalMCPTestClient()
        await client.connect_to_server_by_name(server_name)
        print(f"Connected to {server_name}")

    try:
        yield client
    finally:
        cleanup_task = asyncio.create_task(client.cleanup())
        await cleanup_task
