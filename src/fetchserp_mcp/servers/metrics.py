from prometheus_client import Counter, Gauge

active_connections = Gauge(
    "fetchserp_mcp_active_connections", "Number of active SSE connections", ["server"]
)
connection_total = Counter(
    "fetchserp_mcp_connection_total", "Total number of SSE connections", ["server"]
)
http_requests_total = Counter(
    "fetchserp_mcp_http_requests_total",
    "Streamable HTTP requests by method and response status",
    ["method", "status"],
)
tool_calls_total = Counter(
    "fetchserp_mcp_tool_calls_total",
    "Tool calls by tool name and outcome",
    ["tool", "outcome"],
)
