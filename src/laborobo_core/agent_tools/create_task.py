"""create-task: add a Todo task to a work order."""
import logging
from datetime import date, timedelta
from typing import Any

from .. import models
from ..crud import next_task_position, recalculate_project_progress
from ..scoring import task_confidence
from .base import Tool

logger = logging.getLogger("laborobo-core.agent_tools.create_task")

DEFAULT_DUE_IN_DAYS = 7


def normalize_checklist_items(items: list) -> list[dict[str, Any]]:
    """Coerce checklist entries (dicts or strings) to ``{id, text, completed}``."""
    normalized = []
    for index, item in enumerate(items):
        if isinstance(item, dict):
            normalized.append({
                "id": item.get("id") or f"item-{index + 1}",
                "text": item.get("text") if item.get("text") is not None else str(item.get("label") or ""),
                "completed": bool(item.get("completed", False)),
            })
        elif isinstance(item, str):
            normalized.append({"id": f"item-{index + 1}", "text": item, "completed": False})
    return normalized


def normalize_dependencies(dependencies: list) -> list[int]:
    """Keep dependencies that parse as positive integers."""
    result = []
    for dep in dependencies:
        try:
            value = int(dep)
        except (TypeError, ValueError):
            continue
        if value > 0:
            result.append(value)
    return result


class CreateTaskTool(Tool):
    name = "create-task"
    description = (
        "Creates a new task for a work order with Todo status. Used for generating task "
        "breakdowns from work order analysis and playbook templates."
    )
    category = "tasks"

    def get_parameters(self) -> dict[str, dict[str, Any]]:
        return {
            "team_id": {"type": "integer", "description": "The ID of the team to create the task for", "required": True},
            "work_order_id": {"type": "integer", "description": "The ID of the work order to link the task to", "required": True},
            "title": {"type": "string", "description": "The title of the task", "required": True},
            "description": {"type": "string", "description": "Detailed description of the task", "required": False},
            "estimated_hours": {"type": "number", "description": "Estimated hours to complete the task (default: 0)", "required": False},
            "position_in_work_order": {"type": "integer", "description": "Position/order of the task within the work order", "required": False},
            "checklist_items": {"type": "array", "description": "Array of checklist items from playbook templates", "required": False},
            "dependencies": {"type": "array", "description": "Array of task IDs that this task depends on", "required": False},
            "due_date": {
                "type": "string",
                "description": "Due date in YYYY-MM-DD format (defaults to work order due date or 7 days from now)",
                "required": False,
            },
        }

    def execute(self, params: dict[str, Any]) -> dict[str, Any]:
        self.require(params, "team_id", "work_order_id", "title")

        team_id = self.int_param(params, "team_id")
        work_order_id = self.int_param(params, "work_order_id")
        description = self.str_param(params, "description")
        estimated_hours = self.float_param(params, "estimated_hours", 0.0)
        position = self.int_param(params, "position_in_work_order")
        checklist_items = normalize_checklist_items(self.list_param(params, "checklist_items"))
        dependencies = normalize_dependencies(self.list_param(params, "dependencies"))
        due_date = self.date_param(params, "due_date")

        self.get_team(team_id)
        work_order = self.get_team_entity(models.WorkOrder, "Work order", work_order_id, team_id)

        if position is None:
            position = next_task_position(self.db, work_order.id)
        if due_date is None:
            due_date = work_order.due_date or date.today() + timedelta(days=DEFAULT_DUE_IN_DAYS)

        confidence = task_confidence(description, estimated_hours, checklist_items, dependencies)

        task = models.Task(
            team_id=team_id,
            work_order_id=work_order.id,
            project_id=work_order.project_id,
            title=str(params["title"]),
            description=description,
            status=models.TaskStatus.TODO,
            estimated_hours=estimated_hours,
            position_in_work_order=position,
            checklist_items=checklist_items,
            dependencies=dependencies,
            is_blocked=False,
            due_date=due_date,
        )
        self.db.add(task)
        self.db.commit()
        self.db.refresh(task)
        recalculate_project_progress(self.db, work_order.project)

        logger.info(f"Agent created task {task.id} on work order {work_order.id}")
        return {
            "success": True,
            "task": {
                "id": task.id,
                "title": task.title,
                "description": task.description,
                "status": task.status.value,
                "estimated_hours": task.estimated_hours,
                "position_in_work_order": task.position_in_work_order,
                "checklist_items": task.checklist_items,
                "dependencies": task.dependencies,
                "due_date": task.due_date.isoformat() if task.due_date else None,
                "work_order_id": task.work_order_id,
                "project_id": task.project_id,
                "team_id": task.team_id,
                "created_at": task.created_at.isoformat(),
            },
            "confidence": confidence.value,
        }
