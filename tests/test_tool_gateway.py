"""
Tests for the tool registry and the permission-checked tool gateway.
"""
import json
import logging

import pytest

from laborobo_core import models
from laborobo_core.agent_tools import (
    TOOL_CLASSES,
    ToolGateway,
    ToolRegistry,
    ToolResult,
    ToolResultStatus,
    build_default_registry,
    parameters_schema,
)
from laborobo_core.agent_tools.base import Tool
from laborobo_core.agent_tools.create_task import CreateTaskTool
from laborobo_core.agent_tools.get_playbooks import GetPlaybooksTool


class TestToolRegistry:
    """Test registration and permission lookup."""

    def test_default_registry_holds_every_tool(self, db):
        registry = build_default_registry(db)
        assert registry.count() == len(TOOL_CLASSES) == 10
        assert "create-task" in registry
        assert registry.has("work-order-info")
        assert {t.name for t in registry.get_by_category("tasks")} == {
            "create-task", "get-project-insights", "task-list",
        }

    @pytest.mark.parametrize("tool_name,expected", [
        ("create-task", ["can_modify_tasks"]),
        ("create-draft-work-order", ["can_create_work_orders"]),
        ("create-deliverable", ["can_modify_deliverables"]),
        ("get-playbooks", ["can_modify_playbooks"]),
        ("get-team-capacity", []),
        ("get-documents", []),
        ("create-note", []),
        ("missing-tool", []),
    ])
    def test_category_permissions(self, db, tool_name, expected):
        assert build_default_registry(db).get_required_permissions(tool_name) == expected

    def test_registration_override(self, db):
        """Permissions given at registration replace the category mapping."""
        registry = ToolRegistry()
        registry.register(GetPlaybooksTool(db), required_permissions=[])
        assert registry.get_required_permissions("get-playbooks") == []

        registry.register(GetPlaybooksTool(db))
        assert registry.get_required_permissions("get-playbooks") == ["can_modify_playbooks"]

    def test_unregister_and_clear(self, db):
        registry = build_default_registry(db)
        assert registry.unregister("task-list") is True
        assert registry.unregister("task-list") is False
        assert registry.get("task-list") is None
        assert len(registry) == 9

        registry.clear()
        assert registry.all() == []

    def test_parameters_schema(self, db):
        schema = parameters_schema(CreateTaskTool(db))
        assert schema["type"] == "object"
        assert schema["required"] == ["team_id", "work_order_id", "title"]
        assert schema["properties"]["checklist_items"] == {
            "type": "array",
            "description": "Array of checklist items from playbook templates",
            "items": {},
        }


class TestToolGateway:
    """Test permission checks, execution outcomes and activity logging."""

    def _gateway(self, db):
        return ToolGateway(db, build_default_registry(db))

    def _logs(self, db):
        return db.query(models.AgentActivityLog).order_by(models.AgentActivityLog.id).all()

    def test_successful_execution_is_logged(self, db, seed, agent):
        result = self._gateway(db).execute(agent.agent, agent.config, "task-list", {
            "team_id": seed.team.id,
            "work_order_id": seed.work_order.id,
        })

        assert result.status == ToolResultStatus.SUCCESS
        assert result.is_success
        assert result.data["count"] == 0
        assert result.execution_time_ms is not None

        log = self._logs(db)[0]
        assert log.run_type == "tool_execution"
        assert log.ai_agent_id == agent.agent.id
        assert json.loads(log.input)["tool"] == "task-list"
        assert json.loads(log.output)["count"] == 0
        assert log.error is None
        assert log.tool_calls[0]["status"] == "success"

    def test_unknown_tool(self, db, seed, agent):
        result = self._gateway(db).execute(agent.agent, agent.config, "launch-rockets", {})
        assert result.status == ToolResultStatus.FAILURE
        assert result.error == "Tool 'launch-rockets' not found"
        assert self._logs(db)[0].error == "Tool 'launch-rockets' not found"

    def test_missing_category_permission_is_denied(self, db, seed, agent):
        result = self._gateway(db).execute(agent.agent, agent.config, "create-deliverable", {
            "team_id": seed.team.id,
            "work_order_id": seed.work_order.id,
            "title": "Style guide",
        })

        assert result.status == ToolResultStatus.DENIED
        assert result.error == (
            "Permission denied: Agent does not have required permissions for tool 'create-deliverable'"
        )
        assert db.query(models.Deliverable).count() == 0
        assert self._logs(db)[0].tool_calls[0]["status"] == "denied"

    def test_tool_permissions_override(self, db, seed, agent):
        """A per-tool entry can revoke a tool but cannot grant a missing category flag."""
        agent.config.tool_permissions = {"create-task": False, "get-playbooks": True}
        db.commit()
        gateway = self._gateway(db)

        assert gateway.has_permission(agent.config, "create-task") is False
        assert gateway.has_permission(agent.config, "task-list") is True
        assert gateway.has_permission(agent.config, "get-playbooks") is False

    def test_available_tools(self, db, seed, agent):
        names = {tool.name for tool in self._gateway(db).get_available_tools(agent.config)}
        assert names == {
            "create-task",
            "get-project-insights",
            "task-list",
            "create-draft-work-order",
            "work-order-info",
            "create-note",
            "get-documents",
            "get-team-capacity",
        }

    def test_domain_error_becomes_failure(self, db, seed, agent, caplog):
        with caplog.at_level(logging.ERROR, logger="laborobo-core.agent_tools.gateway"):
            result = self._gateway(db).execute(agent.agent, agent.config, "create-task", {
                "team_id": seed.team.id,
                "work_order_id": seed.work_order.id,
            })

        assert result.status == ToolResultStatus.FAILURE
        assert result.error == "title is required"
        assert db.query(models.Task).count() == 0
        assert self._logs(db)[0].error == "title is required"
        assert any(record.exc_info for record in caplog.records)

    def test_activity_log_failure_does_not_fail_the_call(self, db, seed, agent, caplog):
        """A log row without a team violates NOT NULL; the tool result still returns."""
        config = models.AgentConfiguration(ai_agent_id=agent.agent.id, team_id=None)

        with caplog.at_level(logging.ERROR, logger="laborobo-core.agent_tools.gateway"):
            result = self._gateway(db).execute(agent.agent, config, "get-team-capacity", {"team_id": seed.team.id})

        assert result.is_success
        assert result.data["total_members"] == 3
        assert db.query(models.AgentActivityLog).count() == 0
        assert "Failed to write activity log" in caplog.text


class ExplodingTool(Tool):
    name = "explode"
    description = "Fails with a programming error"

    def get_parameters(self):
        return {}

    def execute(self, params):
        raise RuntimeError("kaboom")


class TestGatewayBoundaries:
    """Test team scoping and malformed input at the gateway."""

    def _gateway(self, db):
        return ToolGateway(db, build_default_registry(db))

    def _foreign_work_order(self, db, seed):
        work_order = models.WorkOrder(
            team_id=seed.other_team.id,
            project_id=seed.other_project.id,
            title="Foreign work",
            created_by_id=seed.dave.id,
        )
        db.add(work_order)
        db.commit()
        return work_order

    def test_create_in_other_team_is_denied(self, db, seed, agent):
        foreign = self._foreign_work_order(db, seed)

        result = self._gateway(db).execute(agent.agent, agent.config, "create-task", {
            "team_id": seed.other_team.id,
            "work_order_id": foreign.id,
            "title": "planted",
        })

        assert result.status == ToolResultStatus.DENIED
        assert result.error == f"Permission denied: Agent is not configured for team {seed.other_team.id}"
        assert db.query(models.Task).count() == 0
        log = db.query(models.AgentActivityLog).one()
        assert log.team_id == seed.team.id
        assert log.tool_calls[0]["status"] == "denied"

    def test_read_from_other_team_is_denied(self, db, seed, agent):
        result = self._gateway(db).execute(agent.agent, agent.config, "get-team-capacity", {
            "team_id": str(seed.other_team.id),
        })
        assert result.status == ToolResultStatus.DENIED
        assert result.data is None

    def test_malformed_team_id_is_denied(self, db, seed, agent):
        result = self._gateway(db).execute(agent.agent, agent.config, "get-team-capacity", {"team_id": "Studio"})
        assert result.status == ToolResultStatus.DENIED

    def test_missing_team_id_uses_configured_team(self, db, seed, agent):
        result = self._gateway(db).execute(agent.agent, agent.config, "task-list", {
            "work_order_id": seed.work_order.id,
        })
        assert result.is_success
        log = db.query(models.AgentActivityLog).one()
        assert json.loads(log.input)["params"]["team_id"] == seed.team.id

    def test_wrong_parameter_type_is_failure(self, db, seed, agent):
        agent.config.can_modify_playbooks = True
        db.commit()

        result = self._gateway(db).execute(agent.agent, agent.config, "get-playbooks", {
            "team_id": seed.team.id,
            "search": 42,
        })

        assert result.status == ToolResultStatus.FAILURE
        assert result.error == "search must be a string"
        assert db.query(models.AgentActivityLog).one().error == "search must be a string"

    @pytest.mark.parametrize("tool_name,params", [
        ("task-list", {"limit": 0}),
        ("task-list", {"limit": -1}),
        ("get-documents", {"entity_type": "project", "limit": -5}),
    ])
    def test_non_positive_limit_is_failure(self, db, seed, agent, tool_name, params):
        params = {**params, "team_id": seed.team.id}
        params.setdefault("work_order_id", seed.work_order.id)
        params.setdefault("entity_id", seed.project.id)

        result = self._gateway(db).execute(agent.agent, agent.config, tool_name, params)

        assert result.status == ToolResultStatus.FAILURE
        assert result.error == "limit must be greater than 0"

    def test_unexpected_exception_becomes_failure(self, db, seed, agent, caplog):
        registry = ToolRegistry()
        registry.register(ExplodingTool(db))

        with caplog.at_level(logging.ERROR, logger="laborobo-core.agent_tools.gateway"):
            result = ToolGateway(db, registry).execute(agent.agent, agent.config, "explode", {})

        assert result.status == ToolResultStatus.FAILURE
        assert result.error == "Tool execution failed: RuntimeError"
        assert result.execution_time_ms is not None
        assert db.query(models.AgentActivityLog).one().error == "Tool execution failed: RuntimeError"
        assert any(record.exc_info for record in caplog.records)


class TestToolResult:
    def test_to_dict(self):
        assert ToolResult.failure("boom", execution_time_ms=1.5).to_dict() == {
            "status": "failure",
            "data": None,
            "error": "boom",
            "execution_time_ms": 1.5,
        }
        assert ToolResult.denied("no").execution_time_ms is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
