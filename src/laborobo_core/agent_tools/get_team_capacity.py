"""get-team-capacity: available hours per team member."""
from typing import Any

from ..capacity import get_team_capacity
from .base import Tool


class GetTeamCapacityTool(Tool):
    name = "get-team-capacity"
    description = (
        "Retrieves capacity and workload information for all members of a team, including available "
        "hours for new work assignments."
    )
    category = "work_routing"

    def get_parameters(self) -> dict[str, dict[str, Any]]:
        return {
            "team_id": {"type": "integer", "description": "The ID of the team to get capacity information for", "required": True},
            "min_available_hours": {
                "type": "number",
                "description": "Optional filter to only return members with at least this many available hours",
                "required": False,
            },
        }

    def execute(self, params: dict[str, Any]) -> dict[str, Any]:
        self.require(params, "team_id")
        team_id = self.int_param(params, "team_id")
        min_available_hours = self.float_param(params, "min_available_hours")
        return get_team_capacity(self.db, team_id, min_available_hours)
