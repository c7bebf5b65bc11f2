"""task-list: tasks of a work order or project."""
from typing import Any

from .. import models
from ..errors import ParameterValidationError
from .base import Tool

DEFAULT_LIMIT = 50
MAX_LIMIT = 100


class TaskListTool(Tool):
    name = "task-list"
    description = (
        "Lists tasks for a specified work order or project. Returns task details including title, "
        "status, assignee, and due date."
    )
    category = "tasks"

    def get_parameters(self) -> dict[str, dict[str, Any]]:
        return {
            "team_id": {"type": "integer", "description": "The ID of the team owning the tasks", "required": True},
            "work_order_id": {"type": "integer", "description": "The ID of the work order to list tasks for", "required": False},
            "project_id": {"type": "integer", "description": "The ID of the project to list tasks for", "required": False},
            "status": {
                "type": "string",
                "description": "Filter tasks by status (todo, in_progress, in_review, approved, done, blocked, cancelled)",
                "required": False,
            },
            "limit": {"type": "integer", "description": "Maximum number of tasks to return (default: 50, max: 100)", "required": False},
        }

    def execute(self, params: dict[str, Any]) -> dict[str, Any]:
        self.require(params, "team_id")

        team_id = self.int_param(params, "team_id")
        work_order_id = self.int_param(params, "work_order_id")
        project_id = self.int_param(params, "project_id")
        status = self.str_param(params, "status")
        limit = self.limit_param(params, DEFAULT_LIMIT, MAX_LIMIT)

        if work_order_id is None and project_id is None:
            raise ParameterValidationError("Either work_order_id or project_id must be provided")

        self.get_team(team_id)
        query = (
            self.db.query(models.Task)
            .filter(models.Task.team_id == team_id)
            .filter(models.Task.deleted_at.is_(None))
        )
        if work_order_id is not None:
            self.get_team_entity(models.WorkOrder, "Work order", work_order_id, team_id)
            query = query.filter(models.Task.work_order_id == work_order_id)
        if project_id is not None:
            self.get_team_entity(models.Project, "Project", project_id, team_id)
            query = query.filter(models.Task.project_id == project_id)
        if status:
            query = query.filter(models.Task.status == self.enum_param(models.TaskStatus, "status", status))

        tasks = (
            query.order_by(models.Task.due_date.is_(None), models.Task.due_date, models.Task.id)
            .limit(limit)
            .all()
        )

        return {
            "tasks": [
                {
                    "id": task.id,
                    "title": task.title,
                    "description": task.description,
                    "status": task.status.value if task.status else None,
                    "due_date": task.due_date.isoformat() if task.due_date else None,
                    "estimated_hours": task.estimated_hours,
                    "actual_hours": task.actual_hours,
                    "is_blocked": task.is_blocked,
                    "assignee": {"id": task.assigned_to.id, "name": task.assigned_to.name} if task.assigned_to else None,
                }
                for task in tasks
            ],
            "count": len(tasks),
            "filters_applied": {
                "work_order_id": work_order_id,
                "project_id": project_id,
                "status": status,
                "limit": limit,
            },
        }
