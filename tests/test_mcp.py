"""
Tests for the MCP tool definitions, formatters and handlers.

Handlers run against an httpx.MockTransport, so no API server is needed.
"""
import asyncio
import json

import httpx
import pytest

from laborobo_mcp import formatters
from laborobo_mcp.handlers import HANDLER_MAP, handle_agent_tool, handle_get_my_work, handle_update_raci
from laborobo_mcp.tools import AGENT_TOOL_NAMES, get_tools


def mock_client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://api.test/api/v1")


class TestToolDefinitions:
    """Test the MCP tool list."""

    def test_every_agent_tool_is_exposed(self):
        names = [tool.name for tool in get_tools()]
        assert AGENT_TOOL_NAMES <= set(names)
        assert {"get_my_work", "get_my_work_metrics", "get_today", "update_raci"} <= set(names)
        assert len(names) == len(set(names)) == 14

    def test_team_id_is_optional_over_mcp(self):
        """The server supplies team_id from its configuration."""
        create_task = next(tool for tool in get_tools() if tool.name == "create-task")
        assert "team_id" in create_task.inputSchema["properties"]
        assert create_task.inputSchema["required"] == ["work_order_id", "title"]

    def test_every_non_agent_tool_has_a_handler(self):
        for tool in get_tools():
            if tool.name not in AGENT_TOOL_NAMES:
                assert tool.name in HANDLER_MAP


class TestFormatters:
    def test_my_work(self):
        text = formatters.format_my_work({
            "projects": [{"id": "1", "name": "Website", "status": "active", "userRaciRoles": ["accountable"]}],
            "workOrders": [],
            "tasks": [{"id": "7", "title": "Icons", "status": "todo", "dueDate": "2025-06-01", "isBlocked": True}],
            "showInformed": False,
        })
        assert "## Projects (1)" in text
        assert "Your roles: accountable" in text
        assert "## Work Orders (0)" in text
        assert "- [todo] Icons (due 2025-06-01) [BLOCKED] (ID: 7)" in text
        assert "Informed-only items are hidden" in text

    def test_raci_confirmation(self):
        text = formatters.format_raci_result({
            "confirmation_required": True,
            "message": "This will overwrite existing RACI assignments. Please confirm to proceed.",
            "changes": [
                {"field": "responsible_id", "from": "Bob", "to": "Carol"},
                {"field": "consulted_ids", "from": [], "to": ["Dana"]},
            ],
        })
        assert "**Confirmation required**" in text
        assert "- responsible_id: Bob → Carol" in text
        assert "- consulted_ids: (none) → Dana" in text

    def test_raci_applied(self):
        text = formatters.format_raci_result({
            "confirmation_required": False,
            "message": "RACI assignments updated successfully.",
            "work_order": {"accountable_name": "Alice", "responsible_id": None, "consulted_ids": ["3", "4"]},
        })
        assert "Accountable: Alice" in text
        assert "Responsible: (none)" in text
        assert "Consulted: 3, 4" in text
        assert "Informed: (none)" in text

    def test_tool_results(self):
        success = formatters.format_tool_result("task-list", {
            "status": "success", "data": {"count": 0}, "execution_time_ms": 2.0,
        })
        assert success.startswith("**task-list** succeeded in 2.0ms")
        assert '"count": 0' in success

        denied = formatters.format_tool_result("get-playbooks", {"status": "denied", "error": "Permission denied"})
        assert denied == "**get-playbooks** denied: Permission denied"

        failed = formatters.format_tool_result("create-task", {"status": "failure", "error": "title is required"})
        assert failed == "**create-task** failed: title is required"


class TestHandlers:
    """Test request shaping against a mocked API."""

    def test_agent_tool_fills_in_team(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"status": "success", "data": {"count": 0}, "execution_time_ms": 1.0})

        async def run():
            async with mock_client(handler) as client:
                return await handle_agent_tool("task-list", {"work_order_id": 5, "status": None}, client, agent_id=3, team_id=9)

        result = asyncio.run(run())
        assert seen["path"] == "/api/v1/tools/task-list/execute"
        assert seen["body"] == {"agent_id": 3, "params": {"work_order_id": 5, "team_id": 9}}
        assert "succeeded" in result[0].text

    def test_get_my_work_sends_boolean_as_text(self):
        seen = {}

        def handler(request):
            seen["query"] = dict(request.url.params)
            return httpx.Response(200, json={"projects": [], "workOrders": [], "tasks": [], "showInformed": True})

        async def run():
            async with mock_client(handler) as client:
                return await handle_get_my_work({"include_informed": True}, client)

        result = asyncio.run(run())
        assert seen["query"] == {"include_informed": "true"}
        assert "Informed-only items are shown" in result[0].text

    def test_update_raci_routes_by_entity_type(self):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={
                "confirmation_required": False,
                "message": "RACI assignments updated successfully.",
                "work_order": {"accountable_name": "Alice"},
            })

        async def run():
            async with mock_client(handler) as client:
                return await handle_update_raci(
                    {"entity_type": "work_order", "entity_id": 12, "reviewer_id": 4, "confirmed": True},
                    client,
                )

        result = asyncio.run(run())
        assert seen == {
            "method": "PUT",
            "path": "/api/v1/work-orders/12/raci",
            "body": {"reviewer_id": 4, "confirmed": True},
        }
        assert result[0].text.startswith("RACI assignments updated successfully.")

    def test_update_raci_rejects_unknown_entity_type(self):
        async def run():
            async with mock_client(lambda request: httpx.Response(500)) as client:
                return await handle_update_raci({"entity_type": "task", "entity_id": 1}, client)

        result = asyncio.run(run())
        assert result[0].text == "Error: entity_type must be one of: project, work_order"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
