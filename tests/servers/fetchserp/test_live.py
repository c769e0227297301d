"""Live checks against the real FetchSERP API, driven by Claude.

Skipped unless ANTHROPIC_API_KEY and FETCHSERP_API_TOKEN are set. Run with
``--remote --endpoint https://localhost:8000/sse`` to go through a running
HTTP(S) server instead of a stdio subprocess.
"""

import pytest

from tests.utils.tool_runner import get_test_id, run_tool_test

TOOL_TESTS = [
    {
        "name": "get_user_info",
        "args": "",
        "expected_keywords": ["email", "api_credit"],
        "description": "the account details and remaining API credits",
    },
    {
        "name": "get_domain_info",
        "args": "for domain='fetchserp.com'",
        "expected_keywords": ["domain", "registrar"],
        "description": "DNS, WHOIS and tech stack information",
    },
    {
        "name": "get_keywords_search_volume",
        "args": "with keywords=['serp api', 'rank tracker'] and country='us'",
        "expected_keywords": ["keyword", "search_volume"],
        "description": "monthly search volume",
    },
    {
        "name": "get_long_tail_keywords",
        "args": "with keyword='serp api' and count=5",
        "expected_keywords": ["long_tail_keyword_count"],
        "description": "long tail keyword ideas, counting how many came back",
    },
    {
        "name": "get_serp_results",
        "args": "with query='fetchserp' and pages_number=1",
        "expected_keywords": ["first_result_url"],
        "description": "organic search results",
    },
    {
        "name": "get_domain_ranking",
        "args": "with keyword='serp api' domain='fetchserp.com' and pages_number=1",
        "expected_keywords": ["ranking_count"],
        "description": "ranking positions for the domain, counting the entries",
    },
    {
        "name": "scrape_webpage",
        "args": "with url='https://example.com'",
        "expected_keywords": ["page_title"],
        "description": "the scraped page content",
    },
    {
        "name": "scrape_webpage_js",
        "args": "with url='https://example.com' and js_script='return document.title'",
        "expected_keywords": ["script_result"],
        "description": "the result of running a script in the page",
    },
    {
        "name": "get_webpage_seo_analysis",
        "args": "with url='https://example.com'",
        "expected_keywords": ["title"],
        "description": "an on-page SEO report",
    },
    {
        "name": "get_serp_js_start",
        "args": "with query='fetchserp' and pages_number=1",
        "expected_keywords": ["uuid"],
        "description": "a background SERP job",
        "regex_extractors": {"serp_uuid": r"uuid:\s*([0-9a-fA-F-]{8,})"},
    },
    {
        "name": "get_serp_js_result",
        "args_template": "with uuid='{serp_uuid}'",
        "expected_keywords": ["status"],
        "description": "the status and results of the background SERP job",
        "depends_on": ["serp_uuid"],
    },
]


@pytest.fixture(scope="module")
def context():
    return {}


@pytest.mark.asyncio
@pytest.mark.parametrize("test_config", TOOL_TESTS, ids=get_test_id)
async def test_fetchserp_tool(client, context, test_config):
    await run_tool_test(client, context, test_config)
