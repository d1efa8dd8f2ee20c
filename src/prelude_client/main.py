"""MCP server exposing the Prelude client."""

import asyncio
import logging

from mcp.server.fastmcp import FastMCP

from .client import PreludeClient
from .config import Config, setup_logging
from .consts import (
    ALERT_PATHS,
    DEFAULT_LIMIT,
    DEFAULT_OFFSET,
    LOG_PATHS,
    RETRIEVE_ACTION,
)
from .store import FileConfigStore

logger = logging.getLogger("prelude-client.main")

# Global state
_config: Config | None = None
_client: PreludeClient | None = None


def create_mcp_server() -> FastMCP:
    """Create and configure the MCP server.

    Returns:
        Configured FastMCP server instance.
    """
    logger.debug("Creating MCP server")
    mcp = FastMCP("prelude")

    @mcp.tool()
    async def prelude_status() -> dict:
        """Check the Prelude connection - access token, alerts and logs endpoints."""
        logger.debug("prelude_status called")
        client = await get_client()
        checks = await client.status()
        result = {"ok": False not in checks.values(), "checks": checks}
        logger.info(f"prelude_status completed - ok: {result['ok']}")
        return result

    @mcp.tool()
    async def get_alerts(
        limit: int = DEFAULT_LIMIT, offset: int = DEFAULT_OFFSET
    ) -> dict:
        """Retrieve Prelude alerts (creation time and classification)

        Args:
            limit: Maximum number of alerts (default: 100)
            offset: Number of alerts to skip (default: 0)
        """
        logger.debug(f"get_alerts called with limit={limit} offset={offset}")
        client = await get_client()
        alerts = await client.get_alerts(_retrieve_params(ALERT_PATHS, limit, offset))
        return _tool_result(alerts, "alerts")

    @mcp.tool()
    async def get_logs(
        limit: int = DEFAULT_LIMIT, offset: int = DEFAULT_OFFSET
    ) -> dict:
        """Retrieve Prelude logs (timestamp and host)

        Args:
            limit: Maximum number of logs (default: 100)
            offset: Number of logs to skip (default: 0)
        """
        logger.debug(f"get_logs called with limit={limit} offset={offset}")
        client = await get_client()
        logs = await client.get_logs(_retrieve_params(LOG_PATHS, limit, offset))
        return _tool_result(logs, "logs")

    logger.info("MCP server created")
    return mcp


def _retrieve_params(paths: list[str], limit: int, offset: int) -> dict:
    return {
        "query": {
            "action": RETRIEVE_ACTION,
            "request": {"path": list(paths), "limit": limit, "offset": offset},
        }
    }


def _tool_result(data, name: str) -> dict:
    if data is None:
        logger.warning(f"{name} retrieval failed")
        return {
            "error": f"Could not retrieve {name}",
            "suggestion": "Use prelude_status() to check the token and endpoints",
        }
    logger.info(f"{name} retrieved")
    return {"data": data}


async def get_client() -> PreludeClient:
    """Get or create the PreludeClient instance.

    Lazy and idempotent: config and client are created on first use.
    """
    global _config, _client

    if _config is None:
        logger.debug("Initializing config")
        _config = Config()
        setup_logging(_config.log_level)
        logger.info(
            f"Config initialized for {_config.api_url} "
            f"(token endpoint {_config.resolved_token_url})"
        )

    if _client is None:
        logger.debug("Initializing client")
        _client = PreludeClient(
            FileConfigStore(_config), timeout_seconds=_config.timeout_seconds
        )
        logger.info("Initialized PreludeClient")

    return _client


async def cleanup() -> None:
    """Clean up global resources."""
    global _client

    logger.debug("Starting cleanup")

    if _client:
        try:
            await _client.close()
            logger.info("Client closed")
        except Exception as e:
            logger.error(f"Error during cleanup: {e}")
        finally:
            _client = None

    logger.debug("Cleanup completed")


def main() -> None:
    """Main entry point."""
    logger.debug("Starting main")

    try:
        mcp = create_mcp_server()
        logger.info("Starting MCP server")
        mcp.run(transport="stdio")
    except Exception as e:
        logger.error(f"Server failed: {e}")
        raise
    finally:
        try:
            logger.debug("Running final cleanup")
            asyncio.run(cleanup())
        except Exception as e:
            logger.error(f"Error during final cleanup: {e}")


if __name__ == "__main__":
    main()
