from typing import Any, Dict, List, Tuple

from mcp.types import Tool


def _search_engine_property() -> Dict[str, Any]:
    return {
        "type": "string",
        "description": (
            "The search engine to use (google, bing, yahoo, duckduckgo). Default: google"
        ),
        "default": "google",
    }


def _country_property(
    description: str = "The country to search from. Default: us",
    default: str | None = "us",
) -> Dict[str, Any]:
    prop: Dict[str, Any] = {"type": "string", "description": description}
    if default is not None:
        prop["default"] = default
    return prop


def _pages_number_property(default: int, maximum: int = 30) -> Dict[str, Any]:
    return {
        "type": "integer",
        "description": f"The number of pages to search (1-{maximum}). Default: {default}",
        "default": default,
        "minimum": 1,
        "maximum": maximum,
    }


def _serp_query_schema(query_description: str = "The query to search") -> dict:
    return {
        "type": "object",
        "properties": {
            "query": {"type": "string", "description": query_description},
            "search_engine": _search_engine_property(),
            "country": _country_property(),
            "pages_number": _pages_number_property(default=1),
        },
        "required": ["query"],
    }


# Tool name -> (HTTP method, upstream path)
ENDPOINTS: Dict[str, Tuple[str, str]] = {
    # Domain tools
    "get_backlinks": ("GET", "/api/v1/backlinks"),
    "get_domain_emails": ("GET", "/api/v1/domain_emails"),
    "get_domain_info": ("GET", "/api/v1/domain_infos"),
    "get_moz_analysis": ("GET", "/api/v1/moz"),
    "check_page_indexation": ("GET", "/api/v1/page_indexation"),
    "get_domain_ranking": ("GET", "/api/v1/ranking"),
    # Keyword tools
    "get_keywords_search_volume": ("GET", "/api/v1/keywords_search_volume"),
    "get_keywords_suggestions": ("GET", "/api/v1/keywords_suggestions"),
    "get_long_tail_keywords": ("GET", "/api/v1/long_tail_keywords_generator"),
    # Scraping tools
    "scrape_webpage": ("GET", "/api/v1/scrape"),
    "scrape_domain": ("GET", "/api/v1/scrape_domain"),
    "scrape_webpage_js": ("POST", "/api/v1/scrape_js"),
    "scrape_webpage_js_proxy": ("POST", "/api/v1/scrape_js_with_proxy"),
    # SERP tools
    "get_serp_results": ("GET", "/api/v1/serp"),
    "get_serp_html": ("GET", "/api/v1/serp_html"),
    "get_serp_js_start": ("GET", "/api/v1/serp_js"),
    "get_serp_js_result": ("GET", "/api/v1/serp_js/{uuid}"),
    "get_serp_text": ("GET", "/api/v1/serp_text"),
    # Account and page analysis tools
    "get_user_info": ("GET", "/api/v1/user"),
    "get_webpage_ai_analysis": ("GET", "/api/v1/web_page_ai_analysis"),
    "get_webpage_seo_analysis": ("GET", "/api/v1/web_page_seo_analysis"),
}


def get_tools() -> List[Tool]:
    """Return the FetchSERP tool catalog, in the order it is advertised"""
    domain_tools = [
        Tool(
            name="get_backlinks",
            description="Get backlinks for a given domain",
            inputSchema={
                "type": "object",
                "properties": {
                    "domain": {
                        "type": "string",
                        "description": "The domain to search for backlinks",
                    },
                    "search_engine": _search_engine_property(),
                    "country": _country_property(),
                    "pages_number": _pages_number_property(default=15),
                },
                "required": ["domain"],
            },
        ),
        Tool(
            name="get_domain_emails",
            description="Retrieve emails from a given domain",
            inputSchema={
                "type": "object",
                "properties": {
                    "domain": {
                        "type": "string",
                        "description": "The domain to search emails from",
                    },
                    "search_engine": _search_engine_property(),
                    "country": _country_property(),
                    "pages_number": _pages_number_property(default=1),
                },
                "required": ["domain"],
            },
        ),
        Tool(
            name="get_domain_info",
            description=(
                "Get domain info including DNS records, WHOIS data, "
                "SSL certificates, and technology stack"
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "domain": {
                        "type": "string",
                        "description": "The domain to check",
                    },
                },
                "required": ["domain"],
            },
        ),
    ]

    keyword_tools = [
        Tool(
            name="get_keywords_search_volume",
            description="Get search volume for given keywords",
            inputSchema={
                "type": "object",
                "properties": {
                    "keywords": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "The keywords to search",
                    },
                    "country": _country_property(
                        "The country code to search for", default=None
                    ),
                },
                "required": ["keywords"],
            },
        ),
        Tool(
            name="get_keywords_suggestions",
            description="Get keyword suggestions based on a url or a list of keywords",
            inputSchema={
                "type": "object",
                "properties": {
                    "url": {
                        "type": "string",
                        "description": "The url to search (optional if keywords provided)",
                    },
                    "keywords": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "The keywords to search (optional if url provided)",
                    },
                    "country": _country_property(
                        "The country code to search for", default=None
                    ),
                },
            },
        ),
        Tool(
            name="get_long_tail_keywords",
            description="Generate long-tail keywords for a given keyword",
            inputSchema={
                "type": "object",
                "properties": {
                    "keyword": {
                        "type": "string",
                        "description": "The seed keyword to generate long-tail keywords from",
                    },
                    "search_intent": {
                        "type": "string",
                        "description": (
                            "The search intent (informational, commercial, "
                            "transactional, navigational). Default: informational"
                        ),
                        "default": "informational",
                    },
                    "count": {
                        "type": "integer",
                        "description": (
                            "The number of long-tail keywords to generate (1-500). Default: 10"
                        ),
                        "default": 10,
                        "minimum": 1,
                        "maximum": 500,
                    },
                },
                "required": ["keyword"],
            },
        ),
    ]

    analysis_tools = [
        Tool(
            name="get_moz_analysis",
            description="Get Moz domain analysis data",
            inputSchema={
                "type": "object",
                "properties": {
                    "domain": {
                        "type": "string",
                        "description": "The domain to analyze",
                    },
                },
                "required": ["domain"],
            },
        ),
        Tool(
            name="check_page_indexation",
            description="Check if a domain is indexed for a given keyword",
            inputSchema={
                "type": "object",
                "properties": {
                    "domain": {
                        "type": "string",
                        "description": "The domain to check",
                    },
                    "keyword": {
                        "type": "string",
                        "description": "The keyword to check",
                    },
                },
                "required": ["domain", "keyword"],
            },
        ),
        Tool(
            name="get_domain_ranking",
            description="Get domain ranking for a given keyword",
            inputSchema={
                "type": "object",
                "properties": {
                    "keyword": {
                        "type": "string",
                        "description": "The keyword to search",
                    },
                    "domain": {
                        "type": "string",
                        "description": "The domain to search",
                    },
                    "search_engine": _search_engine_property(),
                    "country": _country_property(),
                    "pages_number": _pages_number_property(default=10),
                },
                "required": ["keyword", "domain"],
            },
        ),
    ]

    scrape_tools = [
        Tool(
            name="scrape_webpage",
            description="Scrape a web page without JS",
            inputSchema={
                "type": "object",
                "properties": {
                    "url": {
                        "type": "string",
                        "description": "The url to scrape",
                    },
                },
                "required": ["url"],
            },
        ),
        Tool(
            name="scrape_domain",
            description="Scrape a domain",
            inputSchema={
                "type": "object",
                "properties": {
                    "domain": {
                        "type": "string",
                        "description": "The domain to scrape",
                    },
                    "max_pages": {
                        "type": "integer",
                        "description": (
                            "The maximum number of pages to scrape (up to 200). Default: 10"
                        ),
                        "default": 10,
                        "maximum": 200,
                    },
                },
                "required": ["domain"],
            },
        ),
        Tool(
            name="scrape_webpage_js",
            description="Scrape a web page with custom JS",
            inputSchema={
                "type": "object",
                "properties": {
                    "url": {
                        "type": "string",
                        "description": "The url to scrape",
                    },
                    "js_script": {
                        "type": "string",
                        "description": "The javascript code to execute on the page",
                    },
                },
                "required": ["url", "js_script"],
            },
        ),
        Tool(
            name="scrape_webpage_js_proxy",
            description="Scrape a web page with JS and proxy",
            inputSchema={
                "type": "object",
                "properties": {
                    "url": {
                        "type": "string",
                        "description": "The url to scrape",
                    },
                    "country": _country_property(
                        "The country to use for the proxy", default=None
                    ),
                    "js_script": {
                        "type": "string",
                        "description": "The javascript code to execute on the page",
                    },
                },
                "required": ["url", "country", "js_script"],
            },
        ),
    ]

    serp_tools = [
        Tool(
            name="get_serp_results",
            description="Get search engine results",
            inputSchema=_serp_query_schema(),
        ),
        Tool(
            name="get_serp_html",
            description="Get search engine results with HTML content",
            inputSchema=_serp_query_schema(),
        ),
        Tool(
            name="get_serp_js_start",
            description="Start SERP with AI Overview job (step 1) - returns UUID for polling",
            inputSchema={
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "The query to search",
                    },
                    "country": _country_property(),
                    "pages_number": _pages_number_property(default=1, maximum=10),
                },
                "required": ["query"],
            },
        ),
        Tool(
            name="get_serp_js_result",
            description="Get SERP with AI Overview results (step 2) using UUID from step 1",
            inputSchema={
                "type": "object",
                "properties": {
                    "uuid": {
                        "type": "string",
                        "description": "The UUID returned by the SERP JS start endpoint",
                    },
                },
                "required": ["uuid"],
            },
        ),
        Tool(
            name="get_serp_text",
            description="Get search engine results with text content",
            inputSchema=_serp_query_schema(),
        ),
    ]

    account_tools = [
        Tool(
            name="get_user_info",
            description="Get user information including API credit",
            inputSchema={
                "type": "object",
                "properties": {},
            },
        ),
        Tool(
            name="get_webpage_ai_analysis",
            description="Analyze a web page with AI",
            inputSchema={
                "type": "object",
                "properties": {
                    "url": {
                        "type": "string",
                        "description": "The url to analyze",
                    },
                    "prompt": {
                        "type": "string",
                        "description": "The prompt to use for the analysis",
                    },
                },
                "required": ["url", "prompt"],
            },
        ),
        Tool(
            name="get_webpage_seo_analysis",
            description="Get SEO analysis for a given url",
            inputSchema={
                "type": "object",
                "properties": {
                    "url": {
                        "type": "string",
                        "description": "The url to analyze",
                    },
                },
                "required": ["url"],
            },
        ),
    ]

    return (
        domain_tools
        + keyword_tools
        + analysis_tools
        + scrape_tools
        + serp_tools
        + account_tools
    )
