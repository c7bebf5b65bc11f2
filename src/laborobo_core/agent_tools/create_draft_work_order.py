"""create-draft-work-order: open a Draft work order with routed RACI assignments."""
import logging
from typing import Any

from .. import models
from .base import Tool

logger = logging.getLogger("laborobo-core.agent_tools.create_draft_work_order")


def parse_priority(value: Any) -> models.Priority:
    """Unknown or missing priorities fall back to ``medium``."""
    try:
        return models.Priority(str(value).strip().lower())
    except ValueError:
        return models.Priority.MEDIUM


class CreateDraftWorkOrderTool(Tool):
    name = "create-draft-work-order"
    description = (
        "Creates a draft work order with extracted requirements and assigns the top-ranked "
        "candidate as responsible. Includes routing reasoning in metadata."
    )
    category = "work_orders"

    def get_parameters(self) -> dict[str, dict[str, Any]]:
        return {
            "team_id": {"type": "integer", "description": "The ID of the team to create the work order for", "required": True},
            "project_id": {"type": "integer", "description": "The ID of the project to link the work order to", "required": True},
            "title": {"type": "string", "description": "The title of the work order", "required": True},
            "description": {"type": "string", "description": "Detailed description of the work to be done", "required": False},
            "priority": {"type": "string", "description": "Priority level: low, medium, high, or urgent (default: medium)", "required": False},
            "due_date": {"type": "string", "description": "Due date in YYYY-MM-DD format", "required": False},
            "estimated_hours": {"type": "number", "description": "Estimated hours to complete the work", "required": False},
            "acceptance_criteria": {"type": "array", "description": "Array of acceptance criteria for the work", "required": False},
            "responsible_id": {
                "type": "integer",
                "description": "User ID of the person responsible for the work (top-ranked candidate)",
                "required": False,
            },
            "accountable_id": {"type": "integer", "description": "User ID of the person accountable for the work", "required": False},
            "routing_reasoning": {
                "type": "object",
                "description": "JSON object containing the reasoning for routing decisions",
                "required": False,
            },
            "created_by_id": {"type": "integer", "description": "User ID of the person creating the work order", "required": False},
        }

    def execute(self, params: dict[str, Any]) -> dict[str, Any]:
        self.require(params, "team_id", "project_id", "title")

        team_id = self.int_param(params, "team_id")
        project_id = self.int_param(params, "project_id")
        responsible_id = self.int_param(params, "responsible_id")
        accountable_id = self.int_param(params, "accountable_id")
        created_by_id = self.int_param(params, "created_by_id")
        due_date = self.date_param(params, "due_date")
        estimated_hours = self.float_param(params, "estimated_hours")
        acceptance_criteria = params.get("acceptance_criteria") or []
        if not isinstance(acceptance_criteria, list):
            acceptance_criteria = []
        routing_reasoning = params.get("routing_reasoning") or {}

        self.get_team(team_id)
        project = self.get_team_entity(models.Project, "Project", project_id, team_id)

        if responsible_id is not None:
            self.get_user(responsible_id)
        if accountable_id is not None:
            self.get_user(accountable_id)
        if accountable_id is None and created_by_id is not None:
            accountable_id = created_by_id

        work_order = models.WorkOrder(
            team_id=team_id,
            project_id=project.id,
            title=str(params["title"]),
            description=self.str_param(params, "description"),
            status=models.WorkOrderStatus.DRAFT,
            priority=parse_priority(params.get("priority") or models.Priority.MEDIUM.value),
            due_date=due_date,
            estimated_hours=estimated_hours,
            acceptance_criteria=acceptance_criteria,
            responsible_id=responsible_id,
            accountable_id=accountable_id,
            assigned_to_id=accountable_id,
            created_by_id=created_by_id,
        )
        self.db.add(work_order)
        self.db.commit()
        self.db.refresh(work_order)

        logger.info(f"Agent created draft work order {work_order.id} in project {project.id}")
        return {
            "success": True,
            "work_order": {
                "id": work_order.id,
                "title": work_order.title,
                "description": work_order.description,
                "status": work_order.status.value,
                "priority": work_order.priority.value,
                "due_date": work_order.due_date.isoformat() if work_order.due_date else None,
                "estimated_hours": work_order.estimated_hours,
                "acceptance_criteria": work_order.acceptance_criteria,
                "responsible_id": work_order.responsible_id,
                "accountable_id": work_order.accountable_id,
                "project_id": work_order.project_id,
                "team_id": work_order.team_id,
                "created_at": work_order.created_at.isoformat(),
            },
            "routing_reasoning": routing_reasoning,
        }
