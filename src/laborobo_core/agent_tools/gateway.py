"""Permission-checked, logged execution of agent tools.

Every call through ``ToolGateway.execute`` produces a ``ToolResult`` and an
``AgentActivityLog`` row, whatever the outcome. Exceptions raised by a tool
become failure results; they are never re-raised to the caller. Calls are
pinned to the team of the agent configuration.
"""
import json
import logging
import time
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import models
from ..errors import LaboroboError
from .base import Tool, ToolResult, ToolResultStatus
from .registry import ToolRegistry

logger = logging.getLogger("laborobo-core.agent_tools.gateway")

TOOL_EXECUTION_RUN_TYPE = "tool_execution"


def tool_not_found_message(tool_name: str) -> str:
    return f"Tool '{tool_name}' not found"


def permission_denied_message(tool_name: str) -> str:
    return f"Permission denied: Agent does not have required permissions for tool '{tool_name}'"


def team_denied_message(team_id: Any) -> str:
    return f"Permission denied: Agent is not configured for team {team_id}"


class ToolGateway:
    """Runs registered tools on behalf of an agent."""

    def __init__(self, db: Session, registry: ToolRegistry):
        self.db = db
        self.registry = registry

    # ========================================================================
    # Permissions
    # ========================================================================

    def has_permission(self, config: models.AgentConfiguration, tool_name: str) -> bool:
        """
        Check whether an agent configuration may run a tool.

        All category (or overridden) permission flags must be set, and a
        ``tool_permissions`` entry for the tool, when present, has the last word.
        """
        for permission in self.registry.get_required_permissions(tool_name):
            if not config.has_permission(permission):
                return False

        tool_permissions = config.tool_permissions or {}
        if tool_name in tool_permissions:
            return bool(tool_permissions[tool_name])
        return True

    @staticmethod
    def scope_to_team(
        config: models.AgentConfiguration, params: dict[str, Any]
    ) -> Optional[dict[str, Any]]:
        """
        Pin tool parameters to the configuration's team.

        A missing ``team_id`` is filled in from the configuration. Returns
        None when the call names a different team.
        """
        if config.team_id is None:
            return params
        requested = params.get("team_id")
        if requested is None or requested == "":
            return {**params, "team_id": config.team_id}
        if isinstance(requested, bool):
            return None
        try:
            requested_id = int(requested)
        except (TypeError, ValueError):
            return None
        if requested_id != config.team_id:
            return None
        return {**params, "team_id": requested_id}

    def get_available_tools(self, config: models.AgentConfiguration) -> list[Tool]:
        return [tool for tool in self.registry.all() if self.has_permission(config, tool.name)]

    # ========================================================================
    # Execution
    # ========================================================================

    def execute(
        self,
        agent: models.AIAgent,
        config: models.AgentConfiguration,
        tool_name: str,
        params: Optional[dict[str, Any]] = None,
    ) -> ToolResult:
        """
        Execute a tool for an agent.

        Args:
            agent: The calling agent
            config: The agent's configuration for the team
            tool_name: Registered tool name
            params: Tool parameters

        Returns:
            ToolResult with status success, failure or denied
        """
        params = params or {}
        tool = self.registry.get(tool_name)
        if tool is None:
            logger.warning(f"Agent {agent.id} requested unknown tool '{tool_name}'")
            result = ToolResult.failure(tool_not_found_message(tool_name))
            self._log_execution(agent, config, tool_name, params, result)
            return result

        if not self.has_permission(config, tool_name):
            logger.warning(f"Agent {agent.id} denied tool '{tool_name}' for team {config.team_id}")
            result = ToolResult.denied(permission_denied_message(tool_name))
            self._log_execution(agent, config, tool_name, params, result)
            return result

        scoped = self.scope_to_team(config, params)
        if scoped is None:
            logger.warning(
                f"Agent {agent.id} configured for team {config.team_id} targeted team {params.get('team_id')}"
            )
            result = ToolResult.denied(team_denied_message(params.get("team_id")))
            self._log_execution(agent, config, tool_name, params, result)
            return result
        params = scoped

        start = time.perf_counter()
        try:
            data = tool.execute(params)
            result = ToolResult.success(data, execution_time_ms=_elapsed_ms(start))
            logger.info(f"Agent {agent.id} executed '{tool_name}' in {result.execution_time_ms:.1f}ms")
        except LaboroboError as e:
            self.db.rollback()
            logger.error(f"Tool '{tool_name}' failed: {e}", exc_info=True)
            result = ToolResult.failure(str(e), execution_time_ms=_elapsed_ms(start))
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Tool '{tool_name}' database error: {e}", exc_info=True)
            result = ToolResult.failure(f"Database error: {e.__class__.__name__}", execution_time_ms=_elapsed_ms(start))
        except Exception as e:
            self.db.rollback()
            logger.exception(f"Tool '{tool_name}' raised unexpectedly")
            result = ToolResult.failure(
                f"Tool execution failed: {e.__class__.__name__}", execution_time_ms=_elapsed_ms(start)
            )

        self._log_execution(agent, config, tool_name, params, result)
        return result

    def _log_execution(
        self,
        agent: models.AIAgent,
        config: models.AgentConfiguration,
        tool_name: str,
        params: dict[str, Any],
        result: ToolResult,
    ) -> None:
        duration_ms = int(round(result.execution_time_ms)) if result.execution_time_ms is not None else 0
        try:
            log = models.AgentActivityLog(
                team_id=config.team_id,
                ai_agent_id=agent.id,
                run_type=TOOL_EXECUTION_RUN_TYPE,
                input=json.dumps({"tool": tool_name, "params": params}, default=str),
                output=json.dumps(result.data, default=str) if result.is_success else None,
                error=result.error,
                tool_calls=[{
                    "tool": tool_name,
                    "params": params,
                    "result": result.data if result.is_success else None,
                    "duration_ms": duration_ms,
                    "status": result.status.value,
                }],
                duration_ms=duration_ms,
            )
            self.db.add(log)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to write activity log for tool '{tool_name}': {e}", exc_info=True)


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


__all__ = ["ToolGateway", "ToolResult", "ToolResultStatus"]
