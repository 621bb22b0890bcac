# =============================================================================
# core/config.py  —  Process-wide settings
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Reads the server's configuration from environment variables.  main.py
#   calls load_dotenv() first, so a local .env file works the same as real
#   environment variables.
#
# VARIABLES:
#   APOLLO_API_KEY          Required.  Sent as the x-api-key header.
#   APOLLO_BASE_URL         Default https://api.apollo.io/api/v1
#   APOLLO_TIMEOUT_SECONDS  Per-request network timeout (default 30).
#   APOLLO_WEBHOOK_URL      Server default callback for waterfall enrichment.
#   ENRICH_CONCURRENCY      Max parallel enrich calls in search_and_enrich (5).
#   MCP_TRANSPORT           "stdio" (default) or "http".
#   HOST / PORT             Bind address for the http transport.
#
# Settings are passed explicitly down the call chain.  Nothing in core/
# reads os.environ except load_settings().
# =============================================================================

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from core.errors import ConfigurationError

DEFAULT_BASE_URL = "https://api.apollo.io/api/v1"

_TRANSPORTS = ("stdio", "http")


@dataclass(frozen=True)
class Settings:
    """Everything the server needs to boot."""

    api_key: str
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = 30.0
    webhook_url: Optional[str] = None
    enrich_concurrency: int = 5
    transport: str = "stdio"
    host: str = "0.0.0.0"
    port: int = 3000

    def __repr__(self) -> str:
        # Keep the key out of tracebacks and debug logs.
        return (
            f"Settings(api_key='***', base_url={self.base_url!r}, "
            f"timeout_seconds={self.timeout_seconds}, webhook_url={self.webhook_url!r}, "
            f"enrich_concurrency={self.enrich_concurrency}, transport={self.transport!r}, "
            f"host={self.host!r}, port={self.port})"
        )


def _number(env: Mapping[str, str], name: str, default, cast):
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = cast(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {raw!r}")
    return value


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from the environment.

    Args:
        env: Mapping to read from.  Defaults to os.environ; tests pass a dict.

    Raises:
        ConfigurationError: APOLLO_API_KEY is missing or a value is malformed.
    """
    if env is None:
        env = os.environ

    api_key = env.get("APOLLO_API_KEY", "").strip()
    if not api_key:
        raise ConfigurationError("APOLLO_API_KEY environment variable is required")

    transport = env.get("MCP_TRANSPORT", "stdio").strip().lower() or "stdio"
    if transport not in _TRANSPORTS:
        raise ConfigurationError(
            f"MCP_TRANSPORT must be one of {', '.join(_TRANSPORTS)}, got {transport!r}"
        )

    return Settings(
        api_key=api_key,
        base_url=env.get("APOLLO_BASE_URL", "").strip().rstrip("/") or DEFAULT_BASE_URL,
        timeout_seconds=_number(env, "APOLLO_TIMEOUT_SECONDS", 30.0, float),
        webhook_url=env.get("APOLLO_WEBHOOK_URL", "").strip() or None,
        enrich_concurrency=_number(env, "ENRICH_CONCURRENCY", 5, int),
        transport=transport,
        host=env.get("HOST", "").strip() or "0.0.0.0",
        port=_number(env, "PORT", 3000, int),
    )
