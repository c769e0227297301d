"""Environment-driven settings for the FetchSERP MCP server.

Values come from the process environment, optionally seeded from a ``.env``
file in the working directory.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

FETCHSERP_API_URL = "https://www.fetchserp.com"
DEFAULT_TIMEOUT = 30.0
DEFAULT_DOMAIN = "mcp.fetchserp.com"
DEFAULT_LE_EMAIL = "admin@fetchserp.com"

SERVER_NAME = "fetchserp-mcp-server"
SERVER_VERSION = "1.0.0"


def env_flag(name: str, default: bool = False) -> bool:
    """Read a boolean flag; only the literal string 'true' (any case) is truthy"""
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() == "true"


def api_url() -> str:
    return os.environ.get("FETCHSERP_API_URL", FETCHSERP_API_URL).rstrip("/")


def request_timeout() -> float:
    return float(os.environ.get("FETCHSERP_TIMEOUT", str(DEFAULT_TIMEOUT)))


@dataclass(frozen=True)
class ServerSettings:
    mode: str
    host: str
    port: int
    domain: str
    le_email: str
    le_staging: bool
    use_self_signed: bool
    metrics_port: int
    log_level: str

    @property
    def ssl_description(self) -> str:
        if self.mode != "https":
            return "None (plain HTTP, terminate TLS upstream)"
        if self.use_self_signed:
            return "Self-signed certificates"
        return "Let's Encrypt"

    @property
    def protocol(self) -> str:
        return "https" if self.mode == "https" else "http"

    @property
    def public_base_url(self) -> str:
        # Let's Encrypt mode serves on the default HTTPS port
        if self.mode == "https" and not self.use_self_signed:
            return f"https://{self.domain}"
        return f"{self.protocol}://{self.domain}:{self.port}"

    @classmethod
    def from_env(cls, mode: str | None = None) -> "ServerSettings":
        """Build settings from the environment; ``mode`` overrides the env flags"""
        load_dotenv()

        if mode is None:
            if env_flag("MCP_HTTPS_MODE"):
                mode = "https"
            elif env_flag("MCP_HTTP_MODE"):
                mode = "http"
            else:
                mode = "stdio"

        domain = os.environ.get("DOMAIN", DEFAULT_DOMAIN)
        use_self_signed = env_flag("USE_SELF_SIGNED") or domain == "localhost"

        if mode == "https":
            if use_self_signed:
                port = int(os.environ.get("HTTPS_PORT", "8000"))
            else:
                port = 443
        else:
            port = int(os.environ.get("PORT", "8000"))

        return cls(
            mode=mode,
            host=os.environ.get("HOST", "0.0.0.0"),
            port=port,
            domain=domain,
            le_email=os.environ.get("LE_EMAIL", DEFAULT_LE_EMAIL),
            le_staging=env_flag("LE_STAGING"),
            use_self_signed=use_self_signed,
            metrics_port=int(os.environ.get("METRICS_PORT", "9091")),
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        )
