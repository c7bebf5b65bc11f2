"""create-deliverable: add a Draft deliverable to a work order."""
import logging
from datetime import date
from typing import Any

from .. import models
from ..scoring import deliverable_confidence
from .base import Tool

logger = logging.getLogger("laborobo-core.agent_tools.create_deliverable")


def parse_deliverable_type(value: Any) -> models.DeliverableType:
    """Unknown or missing types fall back to ``other``."""
    try:
        return models.DeliverableType(str(value).strip().lower())
    except ValueError:
        return models.DeliverableType.OTHER


class CreateDeliverableTool(Tool):
    name = "create-deliverable"
    description = (
        "Creates a new deliverable for a work order with Draft status. Used for generating "
        "deliverable structures from work order analysis."
    )
    category = "deliverables"

    def get_parameters(self) -> dict[str, dict[str, Any]]:
        return {
            "team_id": {"type": "integer", "description": "The ID of the team to create the deliverable for", "required": True},
            "work_order_id": {"type": "integer", "description": "The ID of the work order to link the deliverable to", "required": True},
            "title": {"type": "string", "description": "The title of the deliverable", "required": True},
            "description": {"type": "string", "description": "Detailed description of the deliverable", "required": False},
            "type": {
                "type": "string",
                "description": "Type of deliverable: document, design, report, code, or other (default: other)",
                "required": False,
            },
            "acceptance_criteria": {"type": "array", "description": "Array of acceptance criteria for the deliverable", "required": False},
        }

    def execute(self, params: dict[str, Any]) -> dict[str, Any]:
        self.require(params, "team_id", "work_order_id", "title")

        team_id = self.int_param(params, "team_id")
        work_order_id = self.int_param(params, "work_order_id")
        description = self.str_param(params, "description")
        raw_type = self.str_param(params, "type") or models.DeliverableType.OTHER.value
        acceptance_criteria = params.get("acceptance_criteria") or []
        if not isinstance(acceptance_criteria, list):
            acceptance_criteria = []

        self.get_team(team_id)
        work_order = self.get_team_entity(models.WorkOrder, "Work order", work_order_id, team_id)

        deliverable_type = parse_deliverable_type(raw_type)
        confidence = deliverable_confidence(description, acceptance_criteria, str(raw_type))

        deliverable = models.Deliverable(
            team_id=team_id,
            work_order_id=work_order.id,
            project_id=work_order.project_id,
            title=str(params["title"]),
            description=description,
            type=deliverable_type,
            status=models.DeliverableStatus.DRAFT,
            acceptance_criteria=acceptance_criteria,
            version="1.0",
            created_date=date.today(),
        )
        self.db.add(deliverable)
        self.db.commit()
        self.db.refresh(deliverable)

        logger.info(f"Agent created deliverable {deliverable.id} on work order {work_order.id}")
        return {
            "success": True,
            "deliverable": {
                "id": deliverable.id,
                "title": deliverable.title,
                "description": deliverable.description,
                "type": deliverable.type.value,
                "status": deliverable.status.value,
                "acceptance_criteria": deliverable.acceptance_criteria,
                "version": deliverable.version,
                "work_order_id": deliverable.work_order_id,
                "project_id": deliverable.project_id,
                "team_id": deliverable.team_id,
                "created_at": deliverable.created_at.isoformat(),
            },
            "confidence": confidence.value,
        }
