# =============================================================================
# main.py  —  Entry Point for the Apollo contacts MCP server
# =============================================================================
#
# HOW TO RUN:
#   uv run python main.py
#
# WHAT HAPPENS:
#   1. Loads environment variables from .env (APOLLO_API_KEY, etc.)
#   2. Builds Settings; a missing API key stops the server right here
#   3. Creates the ApolloClient and the FastMCP server (tools/mcp_server.py)
#   4. Serves MCP over stdio (default) or HTTP (MCP_TRANSPORT=http)
#
# STDIO vs HTTP:
#   stdio is what desktop agents use: they spawn this script as a
#   subprocess and talk over stdin/stdout.  HTTP is for running it as a
#   container; it's also the only mode where the waterfall webhook route
#   (/webhooks/apollo) is reachable.
# =============================================================================

import logging
import sys

from dotenv import load_dotenv

# Load .env BEFORE reading settings; load_settings() reads os.environ.
load_dotenv()

from core.apollo_client import ApolloClient
from core.config import load_settings
from core.errors import ConfigurationError
from tools.mcp_server import create_server


def main() -> int:
    try:
        settings = load_settings()
        client = ApolloClient(
            settings.api_key,
            base_url=settings.base_url,
            timeout=settings.timeout_seconds,
        )
    except ConfigurationError as exc:
        logging.error(f"Configuration error: {exc}")
        return 1

    mcp = create_server(
        client,
        default_webhook_url=settings.webhook_url,
        max_concurrency=settings.enrich_concurrency,
    )

    if settings.transport == "http":
        logging.info(f"Serving MCP over HTTP on {settings.host}:{settings.port}")
        mcp.run(transport="http", host=settings.host, port=settings.port)
    else:
        mcp.run()
    return 0


# =============================================================================
# Script entry point
# =============================================================================
if __name__ == "__main__":
    sys.exit(main())
