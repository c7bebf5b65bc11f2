"""Laborobo MCP Server - Expose work management and agent tools to AI assistants."""
import asyncio
import logging
import sys
import traceback
from typing import Any

import httpx
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from laborobo_core.config import get_settings

from . import handlers
from . import tools

# Configure logging to stderr (stdout carries the MCP protocol)
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    stream=sys.stderr,
    force=True
)
logger = logging.getLogger("laborobo-mcp")

settings = get_settings()

logger.info(f"MCP Server starting with API base URL: {settings.api_base_url}")
if settings.api_key:
    logger.info("MCP Server configured with API key authentication")
else:
    logger.info("MCP Server running without authentication (local development mode)")


# MCP Server instance
app = Server("laborobo-mcp")


def request_headers() -> dict[str, str]:
    """Caller identity and optional API key forwarded on every request."""
    headers = {
        "X-User-Id": str(settings.mcp_user_id),
        "X-Team-Id": str(settings.mcp_team_id),
    }
    if settings.api_key:
        headers["X-API-Key"] = settings.api_key
    return headers


@app.list_tools()
async def list_tools() -> list[Tool]:
    """List available MCP tools."""
    return tools.get_tools()


@app.call_tool()
async def call_tool(name: str, arguments: Any) -> list[TextContent]:
    """Handle MCP tool calls by delegating to handlers."""
    logger.info(f"Tool call: {name} with arguments: {arguments}")
    arguments = dict(arguments or {})

    async with httpx.AsyncClient(base_url=settings.api_base_url, timeout=30.0, headers=request_headers()) as client:
        try:
            if name in tools.AGENT_TOOL_NAMES:
                return await handlers.handle_agent_tool(
                    name, arguments, client, settings.mcp_agent_id, team_id=settings.mcp_team_id
                )

            handler = handlers.HANDLER_MAP.get(name)
            if not handler:
                logger.warning(f"Unknown tool requested: {name}")
                return [TextContent(type="text", text=f"Unknown tool: {name}")]

            return await handler(arguments, client)

        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error during {name} call:")
            logger.error(f"  Status: {e.response.status_code}")
            logger.error(f"  URL: {e.request.url}")
            try:
                error_detail = e.response.json().get("detail", str(e))
            except ValueError:
                error_detail = e.response.text or str(e)
            logger.error(f"  Detail: {error_detail}")
            return [TextContent(type="text", text=f"Error: {error_detail}")]

        except httpx.RequestError as e:
            logger.error(f"Request error during {name} call: {type(e).__name__}: {e}")
            logger.error(f"  Traceback: {traceback.format_exc()}")
            return [TextContent(type="text", text=f"Error: Connection failed - {str(e)}")]


async def main():
    """Run the MCP server."""
    async with stdio_server() as (read_stream, write_stream):
        await app.run(read_stream, write_stream, app.create_initialization_options())


def run():
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
