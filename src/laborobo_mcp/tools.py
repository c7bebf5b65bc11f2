"""MCP tool definitions for Laborobo.

Agent tools are described from the tool registry so their parameters never
drift from the implementations; My Work and RACI tools wrap REST endpoints.
"""

from mcp.types import Tool

from laborobo_core.agent_tools import TOOL_CLASSES, parameters_schema

# Filled in by the server from its configured team when omitted
CONTEXT_PARAMETERS = ("team_id",)

AGENT_TOOL_NAMES = frozenset(tool_class.name for tool_class in TOOL_CLASSES)


def get_agent_tools() -> list[Tool]:
    """MCP tools for every registered agent tool."""
    mcp_tools = []
    for tool_class in TOOL_CLASSES:
        # Metadata only; no session is needed to describe a tool
        tool = tool_class(None)
        schema = parameters_schema(tool)
        schema["required"] = [name for name in schema["required"] if name not in CONTEXT_PARAMETERS]
        mcp_tools.append(Tool(
            name=tool.name,
            description=f"{tool.description} (category: {tool.category})",
            inputSchema=schema,
        ))
    return mcp_tools


def get_tools() -> list[Tool]:
    """Get the list of all MCP tools for Laborobo."""
    return get_agent_tools() + [
        # ============================================================================
        # My Work Tools
        # ============================================================================
        Tool(
            name="get_my_work",
            description="List the projects, work orders and tasks you are involved in. "
                       "Projects and work orders are matched on your RACI roles (accountable, responsible, consulted; "
                       "informed when include_informed is true), tasks on assignment. Closed items are excluded.",
            inputSchema={
                "type": "object",
                "properties": {
                    "include_informed": {
                        "type": "boolean",
                        "description": "Include items where you are only informed (default: your saved preference)"
                    }
                }
            }
        ),
        Tool(
            name="get_my_work_metrics",
            description="Count your accountable and responsible items, work orders awaiting your review "
                       "and open tasks assigned to you.",
            inputSchema={"type": "object", "properties": {}}
        ),
        Tool(
            name="get_today",
            description="Daily summary: overdue tasks, pending approvals, upcoming deadlines, "
                       "suggested focus and completion metrics.",
            inputSchema={"type": "object", "properties": {}}
        ),
        # ============================================================================
        # RACI Tools
        # ============================================================================
        Tool(
            name="update_raci",
            description="Update RACI assignments on a project or work order. "
                       "Overwriting an existing assignment requires confirmed=true; without it the pending "
                       "changes are returned and nothing is saved. reviewer_id applies to work orders only.",
            inputSchema={
                "type": "object",
                "properties": {
                    "entity_type": {
                        "type": "string",
                        "enum": ["project", "work_order"],
                        "description": "Entity to update"
                    },
                    "entity_id": {"type": "integer", "description": "Project or work order ID"},
                    "accountable_id": {"type": "integer", "description": "Accountable user ID"},
                    "responsible_id": {"type": "integer", "description": "Responsible user ID"},
                    "reviewer_id": {"type": "integer", "description": "Reviewer user ID (work orders only)"},
                    "consulted_ids": {
                        "type": "array",
                        "items": {"type": "integer"},
                        "description": "Consulted user IDs (replaces the current list)"
                    },
                    "informed_ids": {
                        "type": "array",
                        "items": {"type": "integer"},
                        "description": "Informed user IDs (replaces the current list)"
                    },
                    "confirmed": {"type": "boolean", "description": "Confirm overwriting existing assignments"}
                },
                "required": ["entity_type", "entity_id"]
            }
        ),
    ]
