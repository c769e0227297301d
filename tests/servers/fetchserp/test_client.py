"""Unit tests for the FetchSERP HTTP helper (upstream mocked via httpx.MockTransport)."""

import pytest
from mcp.shared.exceptions import McpError
from mcp.types import INTERNAL_ERROR, INVALID_REQUEST

from fetchserp_mcp.utils.fetchserp.client import (
    build_query_params,
    make_fetchserp_request,
)


class TestBuildQueryParams:
    def test_drops_none_values(self) -> None:
        pairs = build_query_params({"domain": "example.com", "country": None})
        assert pairs == [("domain", "example.com")]

    def test_lists_become_bracketed_repeats(self) -> None:
        pairs = build_query_params({"keywords": ["serp api", "seo"], "country": "us"})
        assert pairs == [
            ("keywords[]", "serp api"),
            ("keywords[]", "seo"),
            ("country", "us"),
        ]

    def test_scalars_are_stringified(self) -> None:
        pairs = build_query_params({"pages_number": 3, "flag": True})
        assert pairs == [("pages_number", "3"), ("flag", "true")]

    def test_empty(self) -> None:
        assert build_query_params(None) == []
        assert build_query_params({}) == []


class TestMakeFetchserpRequest:
    @pytest.mark.asyncio
    async def test_missing_token(self, upstream) -> None:
        with pytest.raises(McpError) as exc_info:
            await make_fetchserp_request("/api/v1/user", token=None)

        assert exc_info.value.error.code == INVALID_REQUEST
        assert "FETCHSERP_API_TOKEN is required" in str(exc_info.value)
        assert upstream.requests == []

    @pytest.mark.asyncio
    async def test_get_sends_bearer_and_query(self, upstream) -> None:
        upstream.payload = {"data": {"results": [1, 2, 3]}}

        result = await make_fetchserp_request(
            "/api/v1/serp",
            params={"query": "serp api", "pages_number": 2},
            token="abc123",
        )

        assert result == {"data": {"results": [1, 2, 3]}}
        request = upstream.last
        assert request.method == "GET"
        assert request.url.path == "/api/v1/serp"
        assert request.url.params["query"] == "serp api"
        assert request.url.params["pages_number"] == "2"
        assert request.headers["authorization"] == "Bearer abc123"
        assert request.headers["content-type"] == "application/json"
        assert request.content == b""

    @pytest.mark.asyncio
    async def test_get_ignores_body(self, upstream) -> None:
        await make_fetchserp_request(
            "/api/v1/scrape", params={"url": "https://a.test"}, body={"x": 1}, token="t"
        )
        assert upstream.last.content == b""

    @pytest.mark.asyncio
    async def test_post_sends_json_body_and_query(self, upstream) -> None:
        await make_fetchserp_request(
            "/api/v1/scrape_js",
            method="POST",
            params={"url": "https://a.test"},
            body={"url": "https://a.test", "js_script": "return 1"},
            token="t",
        )

        request = upstream.last
        assert request.method == "POST"
        assert request.url.params["url"] == "https://a.test"
        assert upstream.last_json_body() == {
            "url": "https://a.test",
            "js_script": "return 1",
        }

    @pytest.mark.asyncio
    async def test_non_2xx_raises_internal_error_with_details(self, upstream) -> None:
        upstream.status_code = 402
        upstream.text = "Not enough credits"

        with pytest.raises(McpError) as exc_info:
            await make_fetchserp_request("/api/v1/serp", params={"query": "q"}, token="t")

        assert exc_info.value.error.code == INTERNAL_ERROR
        message = str(exc_info.value)
        assert message.startswith("API request failed: 402 Payment Required")
        assert message.endswith("- Not enough credits")

    @pytest.mark.asyncio
    async def test_returns_json_lists_unchanged(self, upstream) -> None:
        upstream.payload = [{"a": 1}, {"b": None}]
        result = await make_fetchserp_request("/api/v1/user", token="t")
        assert result == [{"a": 1}, {"b": None}]
