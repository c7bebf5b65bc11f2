"""create-note: attach a note to a team entity for human review."""
import json
import logging
from datetime import datetime
from typing import Any

from .. import models
from ..entity_types import EntityType, parse_entity_type
from ..errors import ParameterValidationError, UnknownEntityTypeError
from .base import Tool

logger = logging.getLogger("laborobo-core.agent_tools.create_note")

NOTE_TYPES = ("general", "status_update", "feedback", "decision", "blocker", "question")
DEFAULT_NOTE_TYPE = "general"


class CreateNoteTool(Tool):
    name = "create-note"
    description = (
        "Creates a note or comment on an entity (task, work order, project). Notes are stored for "
        "human review and can be used for documentation or communication purposes."
    )
    category = "general"

    def get_parameters(self) -> dict[str, dict[str, Any]]:
        return {
            "entity_type": {
                "type": "string",
                "description": "The type of entity to attach the note to (task, work_order, project, party, deliverable)",
                "required": True,
            },
            "entity_id": {"type": "integer", "description": "The ID of the entity to attach the note to", "required": True},
            "content": {"type": "string", "description": "The content of the note", "required": True},
            "note_type": {
                "type": "string",
                "description": "The type of note (general, status_update, feedback, decision, blocker, question). Default: general",
                "required": False,
            },
            "agent_id": {
                "type": "integer",
                "description": "The ID of the AI agent creating the note (for activity logging)",
                "required": False,
            },
            "team_id": {
                "type": "integer",
                "description": "The ID of the team owning the entity (scopes the lookup and activity logging)",
                "required": False,
            },
        }

    def execute(self, params: dict[str, Any]) -> dict[str, Any]:
        if params.get("entity_type") is None:
            raise ParameterValidationError.required("entity_type")
        if params.get("entity_id") is None:
            raise ParameterValidationError.required("entity_id")
        content = params.get("content")
        if content is None or str(content).strip() == "":
            raise ParameterValidationError(
                "content is required and cannot be empty", parameter="content", value=content
            )

        entity_type = parse_entity_type(params["entity_type"])
        note_type = self.str_param(params, "note_type") or DEFAULT_NOTE_TYPE
        if note_type not in NOTE_TYPES:
            raise UnknownEntityTypeError(note_type, NOTE_TYPES, parameter="note_type")

        entity_id = self.int_param(params, "entity_id")
        team_id = self.int_param(params, "team_id")
        agent_id = self.int_param(params, "agent_id")

        if team_id is not None:
            self.get_team(team_id)
            self.get_team_entity(entity_type.model, entity_type.label, entity_id, team_id)

        note = {
            "entity_type": entity_type.value,
            "entity_id": entity_id,
            "content": content,
            "note_type": note_type,
            "created_at": datetime.utcnow().isoformat(sep=" ", timespec="seconds"),
        }

        if agent_id is not None and team_id is not None:
            activity_log = models.AgentActivityLog(
                team_id=team_id,
                ai_agent_id=agent_id,
                run_type="note_creation",
                input=json.dumps({
                    "entity_type": entity_type.value,
                    "entity_id": entity_id,
                    "note_type": note_type,
                }),
                output=content,
                tool_calls=[{"tool": self.name, "params": params, "result": dict(note)}],
                context_accessed={"entity_type": entity_type.value, "entity_id": entity_id},
            )
            self.db.add(activity_log)
            self.db.commit()
            self.db.refresh(activity_log)
            note["activity_log_id"] = activity_log.id

        logger.info(f"Agent note ({note_type}) created on {entity_type.value} #{entity_id}")
        return {
            "note": note,
            "success": True,
            "message": f"Note created successfully on {entity_type.value} #{entity_id}",
        }
