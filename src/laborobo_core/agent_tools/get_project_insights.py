"""get-project-insights: overdue items, bottlenecks and resource capacity for a team or project."""
from typing import Any

from .. import models
from ..insights import get_bottlenecks, get_overdue_items, get_resource_insights
from ..scoring import insight_confidence, overall_severity
from .base import Tool


class GetProjectInsightsTool(Tool):
    name = "get-project-insights"
    description = (
        "Analyzes project data to identify overdue items, bottlenecks (blocked tasks), and resource "
        "capacity issues. Returns structured insights with severity levels."
    )
    category = "tasks"

    def get_parameters(self) -> dict[str, dict[str, Any]]:
        return {
            "team_id": {"type": "integer", "description": "The ID of the team to analyze", "required": True},
            "project_id": {
                "type": "integer",
                "description": "Optional project ID to focus analysis on a specific project",
                "required": False,
            },
            "include_resource_insights": {
                "type": "boolean",
                "description": "Whether to include resource capacity analysis (default: true)",
                "required": False,
            },
        }

    def execute(self, params: dict[str, Any]) -> dict[str, Any]:
        self.require(params, "team_id")

        team_id = self.int_param(params, "team_id")
        project_id = self.int_param(params, "project_id")
        include_resource_insights = self.bool_param(params, "include_resource_insights", True)

        team = self.get_team(team_id)
        if project_id is not None:
            self.get_team_entity(models.Project, "Project", project_id, team_id)

        overdue_items = get_overdue_items(self.db, team_id, project_id)
        bottlenecks = get_bottlenecks(self.db, team_id, project_id)
        resource_insights = get_resource_insights(self.db, team, project_id) if include_resource_insights else {}

        overdue_rows = overdue_items["tasks"] + overdue_items["work_orders"] + overdue_items["deliverables"]
        overloaded = resource_insights.get("team_summary", {}).get("overloaded_members", [])
        severity = overall_severity(
            (row["severity"] for row in overdue_rows),
            blocked_count=bottlenecks["total_blocked"],
            overloaded_count=len(overloaded),
        )
        data_points = len(overdue_rows) + bottlenecks["total_blocked"] + len(resource_insights.get("members", []))

        return {
            "success": True,
            "project_id": project_id,
            "team_id": team_id,
            "insights": {
                "overdue_items": overdue_items,
                "bottlenecks": bottlenecks,
                "resource_capacity": resource_insights,
            },
            "summary": {
                "total_overdue_tasks": len(overdue_items["tasks"]),
                "total_overdue_work_orders": len(overdue_items["work_orders"]),
                "total_overdue_deliverables": len(overdue_items["deliverables"]),
                "total_blocked_tasks": len(bottlenecks["blocked_tasks"]),
                "overall_severity": severity,
            },
            "confidence": insight_confidence(data_points).value,
        }
