"""MCP tool handlers.

All handlers follow a consistent pattern:
- Accept: arguments dict and an httpx.AsyncClient already carrying the
  caller's X-User-Id / X-Team-Id headers
- Return: list[TextContent]
- Use formatters from formatters module for consistent output
"""
import logging
from typing import Optional

import httpx
from mcp.types import TextContent

from . import formatters

logger = logging.getLogger("laborobo-mcp.handlers")


# ============================================================================
# Agent Tool Handlers
# ============================================================================

async def handle_agent_tool(
    name: str,
    arguments: dict,
    client: httpx.AsyncClient,
    agent_id: int,
    team_id: Optional[int] = None,
) -> list[TextContent]:
    """Execute an agent tool through the gateway endpoint.

    ``team_id`` is filled in from the server's team when the caller omits it.
    Denials and failures come back in the result body, not as HTTP errors.
    """
    params = {k: v for k, v in arguments.items() if v is not None}
    if team_id and "team_id" not in params:
        params["team_id"] = team_id

    response = await client.post(f"/tools/{name}/execute", json={"agent_id": agent_id, "params": params})
    response.raise_for_status()
    result = response.json()
    logger.info(f"Tool {name} finished with status {result.get('status')}")

    return [TextContent(type="text", text=formatters.format_tool_result(name, result))]


# ============================================================================
# My Work Handlers
# ============================================================================

async def handle_get_my_work(arguments: dict, client: httpx.AsyncClient) -> list[TextContent]:
    """List RACI-scoped projects and work orders plus assigned tasks."""
    params = {k: v for k, v in arguments.items() if v is not None}
    if "include_informed" in params:
        params["include_informed"] = "true" if params["include_informed"] else "false"
    response = await client.get("/my-work/", params=params)
    response.raise_for_status()
    result = response.json()
    logger.info(
        f"Retrieved My Work: {len(result['projects'])} projects, "
        f"{len(result['workOrders'])} work orders, {len(result['tasks'])} tasks"
    )
    return [TextContent(type="text", text=formatters.format_my_work(result))]


async def handle_get_my_work_metrics(arguments: dict, client: httpx.AsyncClient) -> list[TextContent]:
    response = await client.get("/my-work/metrics")
    response.raise_for_status()
    return [TextContent(type="text", text=formatters.format_metrics(response.json()))]


async def handle_get_today(arguments: dict, client: httpx.AsyncClient) -> list[TextContent]:
    response = await client.get("/my-work/today")
    response.raise_for_status()
    return [TextContent(type="text", text=formatters.format_today(response.json()))]


# ============================================================================
# RACI Handlers
# ============================================================================

RACI_PATHS = {
    "project": "/projects/{id}/raci",
    "work_order": "/work-orders/{id}/raci",
}


async def handle_update_raci(arguments: dict, client: httpx.AsyncClient) -> list[TextContent]:
    """Update RACI assignments, surfacing overwrite confirmations."""
    arguments = dict(arguments)
    entity_type = arguments.pop("entity_type")
    entity_id = arguments.pop("entity_id")
    path = RACI_PATHS.get(entity_type)
    if path is None:
        return [TextContent(type="text", text="Error: entity_type must be one of: project, work_order")]

    response = await client.put(path.format(id=entity_id), json=arguments)
    response.raise_for_status()
    result = response.json()
    if result.get("confirmation_required"):
        logger.info(f"RACI update on {entity_type} {entity_id} awaiting confirmation")
    else:
        logger.info(f"Updated RACI on {entity_type} {entity_id}")

    return [TextContent(type="text", text=formatters.format_raci_result(result))]


HANDLER_MAP = {
    "get_my_work": handle_get_my_work,
    "get_my_work_metrics": handle_get_my_work_metrics,
    "get_today": handle_get_today,
    "update_raci": handle_update_raci,
}
