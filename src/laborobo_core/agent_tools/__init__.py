"""Agent tools: single-purpose handlers an AI copilot can invoke on a team's behalf."""
from sqlalchemy.orm import Session

from .base import Tool, ToolResult, ToolResultStatus
from .create_deliverable import CreateDeliverableTool
from .create_draft_work_order import CreateDraftWorkOrderTool
from .create_note import CreateNoteTool
from .create_task import CreateTaskTool
from .gateway import ToolGateway
from .get_documents import GetDocumentsTool
from .get_playbooks import GetPlaybooksTool
from .get_project_insights import GetProjectInsightsTool
from .get_team_capacity import GetTeamCapacityTool
from .registry import CATEGORY_PERMISSIONS, ToolRegistry, describe_tool, parameters_schema
from .task_list import TaskListTool
from .work_order_info import WorkOrderInfoTool

TOOL_CLASSES = (
    CreateTaskTool,
    CreateDeliverableTool,
    CreateDraftWorkOrderTool,
    CreateNoteTool,
    GetDocumentsTool,
    GetPlaybooksTool,
    GetProjectInsightsTool,
    GetTeamCapacityTool,
    TaskListTool,
    WorkOrderInfoTool,
)


def build_default_registry(db: Session) -> ToolRegistry:
    """Registry holding every built-in tool bound to ``db``."""
    registry = ToolRegistry()
    for tool_class in TOOL_CLASSES:
        registry.register(tool_class(db))
    return registry


__all__ = [
    "CATEGORY_PERMISSIONS",
    "TOOL_CLASSES",
    "Tool",
    "ToolGateway",
    "ToolRegistry",
    "ToolResult",
    "ToolResultStatus",
    "build_default_registry",
    "describe_tool",
    "parameters_schema",
]
