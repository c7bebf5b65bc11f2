"""Registry of agent tools and the permissions each one requires."""
import logging
from typing import Any, Optional

from .base import Tool

logger = logging.getLogger("laborobo-core.agent_tools.registry")

# Category -> AgentConfiguration flags; categories not listed need none
CATEGORY_PERMISSIONS: dict[str, list[str]] = {
    "tasks": ["can_modify_tasks"],
    "work_orders": ["can_create_work_orders"],
    "client_data": ["can_access_client_data"],
    "email": ["can_send_emails"],
    "deliverables": ["can_modify_deliverables"],
    "financial": ["can_access_financial_data"],
    "playbooks": ["can_modify_playbooks"],
}

_JSON_SCHEMA_TYPES = {"integer", "number", "string", "boolean", "array", "object"}


class ToolRegistry:
    """Name-keyed store of Tool instances."""

    def __init__(self):
        self._tools: dict[str, Tool] = {}
        self._permission_overrides: dict[str, list[str]] = {}

    def register(self, tool: Tool, required_permissions: Optional[list[str]] = None) -> None:
        """
        Register a tool, replacing any tool with the same name.

        Args:
            tool: Tool instance
            required_permissions: Overrides the permissions derived from the
                tool's category
        """
        if not tool.name:
            raise ValueError("Tool name must not be empty")
        if tool.name in self._tools:
            logger.warning(f"Replacing registered tool '{tool.name}'")
        self._tools[tool.name] = tool
        if required_permissions is not None:
            self._permission_overrides[tool.name] = list(required_permissions)
        else:
            self._permission_overrides.pop(tool.name, None)

    def get(self, name: str) -> Optional[Tool]:
        return self._tools.get(name)

    def has(self, name: str) -> bool:
        return name in self._tools

    def all(self) -> list[Tool]:
        return list(self._tools.values())

    def get_by_category(self, category: str) -> list[Tool]:
        return [tool for tool in self._tools.values() if tool.category == category]

    def unregister(self, name: str) -> bool:
        self._permission_overrides.pop(name, None)
        return self._tools.pop(name, None) is not None

    def clear(self) -> None:
        self._tools.clear()
        self._permission_overrides.clear()

    def count(self) -> int:
        return len(self._tools)

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        return self.has(name)

    def get_required_permissions(self, name: str) -> list[str]:
        """
        Permission flags needed to run a tool.

        A registration override wins, then the tool's own
        ``required_permissions``, then its category mapping.
        """
        if name in self._permission_overrides:
            return list(self._permission_overrides[name])
        tool = self._tools.get(name)
        if tool is None:
            return []
        if tool.required_permissions is not None:
            return list(tool.required_permissions)
        return list(CATEGORY_PERMISSIONS.get(tool.category, []))


def parameters_schema(tool: Tool) -> dict[str, Any]:
    """JSON schema for a tool's parameters, as used by MCP and the tools API."""
    properties = {}
    required = []
    for name, definition in tool.get_parameters().items():
        param_type = definition.get("type", "string")
        prop: dict[str, Any] = {
            "type": param_type if param_type in _JSON_SCHEMA_TYPES else "string",
            "description": definition.get("description", ""),
        }
        if param_type == "array":
            prop["items"] = {}
        properties[name] = prop
        if definition.get("required"):
            required.append(name)
    return {"type": "object", "properties": properties, "required": required}


def describe_tool(tool: Tool, registry: ToolRegistry) -> dict[str, Any]:
    return {
        "name": tool.name,
        "description": tool.description,
        "category": tool.category,
        "required_permissions": registry.get_required_permissions(tool.name),
        "parameters": tool.get_parameters(),
    }
