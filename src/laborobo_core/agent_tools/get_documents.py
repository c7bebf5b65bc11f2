"""get-documents: list documents attached to a project or work order."""
from typing import Any

from .. import models
from ..entity_types import DOCUMENTABLE_TYPES, parse_entity_type
from .base import Tool

DEFAULT_LIMIT = 20


class GetDocumentsTool(Tool):
    name = "get-documents"
    description = (
        "Lists documents attached to a project or work order, returning metadata such as name, "
        "type, file URL, and size."
    )
    category = "documents"

    def get_parameters(self) -> dict[str, dict[str, Any]]:
        return {
            "team_id": {"type": "integer", "description": "The ID of the team owning the entity", "required": True},
            "entity_type": {
                "type": "string",
                "description": "The type of entity to list documents for ('project' or 'work_order')",
                "required": True,
            },
            "entity_id": {"type": "integer", "description": "The ID of the project or work order", "required": True},
            "document_type": {
                "type": "string",
                "description": "Filter by document type (reference, artifact, evidence, template)",
                "required": False,
            },
            "search": {"type": "string", "description": "Search documents by name", "required": False},
            "limit": {"type": "integer", "description": "Maximum number of documents to return (default: 20)", "required": False},
        }

    def execute(self, params: dict[str, Any]) -> dict[str, Any]:
        self.require(params, "team_id", "entity_type", "entity_id")

        team_id = self.int_param(params, "team_id")
        entity_type = parse_entity_type(params["entity_type"], allowed=DOCUMENTABLE_TYPES)
        entity_id = self.int_param(params, "entity_id")
        document_type = self.str_param(params, "document_type")
        search = self.str_param(params, "search")
        limit = self.limit_param(params, DEFAULT_LIMIT)

        self.get_team(team_id)
        self.get_team_entity(entity_type.model, entity_type.label, entity_id, team_id)

        query = (
            self.db.query(models.Document)
            .filter(models.Document.team_id == team_id)
            .filter(models.Document.documentable_type == entity_type.value)
            .filter(models.Document.documentable_id == entity_id)
            .filter(models.Document.deleted_at.is_(None))
        )
        if document_type:
            query = query.filter(models.Document.type == self.enum_param(models.DocumentType, "document_type", document_type))
        if search:
            query = query.filter(models.Document.name.ilike(f"%{search}%"))

        documents = query.order_by(models.Document.created_at.desc(), models.Document.id.desc()).limit(limit).all()

        return {
            "entity_type": entity_type.value,
            "entity_id": entity_id,
            "documents": [
                {
                    "id": doc.id,
                    "name": doc.name,
                    "type": doc.type.value if doc.type else None,
                    "file_size": doc.file_size,
                    "file_url": doc.file_url,
                    "uploaded_at": doc.created_at.isoformat(sep=" ", timespec="seconds") if doc.created_at else None,
                    "folder_id": doc.folder_id,
                }
                for doc in documents
            ],
            "total_found": len(documents),
        }
