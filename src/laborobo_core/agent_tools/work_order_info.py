"""work-order-info: a work order with its project, people, task summary and deliverables."""
from collections import Counter
from typing import Any, Optional

from .. import models
from .base import Tool


def _person(user: Optional[models.User]) -> Optional[dict[str, Any]]:
    return {"id": user.id, "name": user.name} if user else None


def _timestamp(value) -> Optional[str]:
    return value.isoformat(sep=" ", timespec="seconds") if value else None


def task_summary(tasks: list[models.Task]) -> dict[str, Any]:
    """Counts of live tasks by status; done and approved both count as completed."""
    by_status = Counter(task.status.value if task.status else "unknown" for task in tasks)
    return {
        "total": len(tasks),
        "completed": by_status["done"] + by_status["approved"],
        "in_progress": by_status["in_progress"],
        "todo": by_status["todo"],
        "blocked": by_status["blocked"],
        "in_review": by_status["in_review"],
        "by_status": dict(by_status),
    }


class WorkOrderInfoTool(Tool):
    name = "work-order-info"
    description = (
        "Retrieves detailed information about a specific work order including status, tasks, "
        "deliverables, and related project information."
    )
    category = "work_orders"

    def get_parameters(self) -> dict[str, dict[str, Any]]:
        return {
            "team_id": {"type": "integer", "description": "The ID of the team owning the work order", "required": True},
            "work_order_id": {"type": "integer", "description": "The ID of the work order to retrieve", "required": True},
            "include_task_summary": {
                "type": "boolean",
                "description": "Include summary of task statuses (default: true)",
                "required": False,
            },
            "include_deliverables": {
                "type": "boolean",
                "description": "Include list of deliverables (default: false)",
                "required": False,
            },
        }

    def execute(self, params: dict[str, Any]) -> dict[str, Any]:
        self.require(params, "team_id", "work_order_id")

        team_id = self.int_param(params, "team_id")
        work_order_id = self.int_param(params, "work_order_id")
        include_task_summary = self.bool_param(params, "include_task_summary", True)
        include_deliverables = self.bool_param(params, "include_deliverables", False)

        self.get_team(team_id)
        work_order = self.get_team_entity(models.WorkOrder, "Work order", work_order_id, team_id)
        project = work_order.project

        info = {
            "id": work_order.id,
            "title": work_order.title,
            "description": work_order.description,
            "status": work_order.status.value if work_order.status else None,
            "priority": work_order.priority.value if work_order.priority else None,
            "due_date": work_order.due_date.isoformat() if work_order.due_date else None,
            "estimated_hours": work_order.estimated_hours,
            "actual_hours": work_order.actual_hours,
            "acceptance_criteria": work_order.acceptance_criteria,
            "sop_attached": work_order.sop_attached,
            "sop_name": work_order.sop_name,
            "created_at": _timestamp(work_order.created_at),
            "updated_at": _timestamp(work_order.updated_at),
            "project": {
                "id": project.id,
                "name": project.name,
                "status": project.status.value if project.status else None,
            } if project else None,
            "assigned_to": _person(work_order.assigned_to),
            "created_by": _person(work_order.created_by),
            "accountable": _person(work_order.accountable),
            "responsible": _person(work_order.responsible),
        }

        if include_task_summary:
            info["task_summary"] = task_summary([t for t in work_order.tasks if t.deleted_at is None])

        if include_deliverables:
            info["deliverables"] = [
                {
                    "id": d.id,
                    "name": d.title,
                    "status": d.status.value if d.status else None,
                    "due_date": d.delivered_date.isoformat() if d.delivered_date else None,
                }
                for d in work_order.deliverables
                if d.deleted_at is None
            ]

        return {"work_order": info}
