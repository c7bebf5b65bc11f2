"""get-playbooks: search a team's SOPs, checklists and templates."""
from typing import Any

from .. import models
from .base import Tool

DEFAULT_LIMIT = 10


def matches_any_tag(playbook: models.Playbook, tags: list[str]) -> bool:
    playbook_tags = playbook.tags or []
    return any(tag in playbook_tags for tag in tags)


class GetPlaybooksTool(Tool):
    name = "get-playbooks"
    description = (
        "Searches for relevant playbooks (SOPs and templates) based on tags and keywords to suggest "
        "standard procedures for work assignments."
    )
    category = "playbooks"

    def get_parameters(self) -> dict[str, dict[str, Any]]:
        return {
            "team_id": {"type": "integer", "description": "The ID of the team to search playbooks for", "required": True},
            "search": {
                "type": "string",
                "description": "Search query to match against playbook name, description, and tags",
                "required": False,
            },
            "tags": {"type": "array", "description": "Array of tags to filter playbooks by", "required": False},
            "type": {
                "type": "string",
                "description": "Playbook type to filter by (e.g., checklist, template, sop)",
                "required": False,
            },
            "limit": {"type": "integer", "description": "Maximum number of playbooks to return (default: 10)", "required": False},
        }

    def execute(self, params: dict[str, Any]) -> dict[str, Any]:
        self.require(params, "team_id")

        team_id = self.int_param(params, "team_id")
        search = self.str_param(params, "search")
        tags = [str(tag) for tag in self.list_param(params, "tags")]
        playbook_type = self.str_param(params, "type")
        limit = self.limit_param(params, DEFAULT_LIMIT)

        self.get_team(team_id)

        query = (
            self.db.query(models.Playbook)
            .filter(models.Playbook.team_id == team_id)
            .filter(models.Playbook.deleted_at.is_(None))
        )
        if playbook_type:
            query = query.filter(models.Playbook.type == self.enum_param(models.PlaybookType, "type", playbook_type))

        playbooks = query.order_by(
            models.Playbook.times_applied.desc(),
            models.Playbook.last_used.is_(None),
            models.Playbook.last_used.desc(),
            models.Playbook.id,
        ).all()

        # Tags live in a JSON column, so keyword and tag matching happen here
        if search:
            needle = search.lower()
            playbooks = [
                p for p in playbooks
                if needle in (p.name or "").lower()
                or needle in (p.description or "").lower()
                or any(needle in str(tag).lower() for tag in (p.tags or []))
            ]
        if tags:
            playbooks = [p for p in playbooks if matches_any_tag(p, tags)]
        playbooks = playbooks[:limit]

        return {
            "team_id": team_id,
            "search_criteria": {"search": search, "tags": tags, "type": playbook_type},
            "playbooks": [
                {
                    "id": p.id,
                    "name": p.name,
                    "description": p.description,
                    "type": p.type.value if p.type else None,
                    "tags": p.tags or [],
                    "content": p.content,
                    "times_applied": p.times_applied,
                    "last_used": p.last_used.isoformat(sep=" ", timespec="seconds") if p.last_used else None,
                    "ai_generated": p.ai_generated,
                }
                for p in playbooks
            ],
            "total_found": len(playbooks),
        }
