"""Closed set of entity type tags accepted by notes, documents and RACI updates."""
import enum
from typing import Iterable, Optional

from . import models
from .errors import UnknownEntityTypeError


class EntityType(str, enum.Enum):
    """Entity type tag."""

    TASK = "task"
    WORK_ORDER = "work_order"
    PROJECT = "project"
    PARTY = "party"
    DELIVERABLE = "deliverable"

    @property
    def model(self):
        return ENTITY_MODELS[self]

    @property
    def label(self) -> str:
        return ENTITY_LABELS[self]


ENTITY_MODELS = {
    EntityType.TASK: models.Task,
    EntityType.WORK_ORDER: models.WorkOrder,
    EntityType.PROJECT: models.Project,
    EntityType.PARTY: models.Party,
    EntityType.DELIVERABLE: models.Deliverable,
}

ENTITY_LABELS = {
    EntityType.TASK: "Task",
    EntityType.WORK_ORDER: "Work order",
    EntityType.PROJECT: "Project",
    EntityType.PARTY: "Party",
    EntityType.DELIVERABLE: "Deliverable",
}

# Entities that carry RACI assignments
RACI_ENTITY_TYPES = (EntityType.PROJECT, EntityType.WORK_ORDER)

# Entities that own documents
DOCUMENTABLE_TYPES = (EntityType.PROJECT, EntityType.WORK_ORDER)


def parse_entity_type(
    value: object,
    allowed: Optional[Iterable[EntityType]] = None,
    parameter: str = "entity_type",
) -> EntityType:
    """
    Parse an entity type tag.

    Args:
        value: Raw tag, e.g. ``"work_order"``
        allowed: Subset of EntityType accepted here (defaults to all)
        parameter: Parameter name used in the error message

    Returns:
        The matching EntityType

    Raises:
        UnknownEntityTypeError: If the tag is missing or outside ``allowed``
    """
    allowed_types = list(allowed) if allowed is not None else list(EntityType)
    if isinstance(value, EntityType):
        entity_type = value
    else:
        try:
            entity_type = EntityType(str(value).strip().lower()) if value is not None else None
        except ValueError:
            entity_type = None

    if entity_type is None or entity_type not in allowed_types:
        raise UnknownEntityTypeError(value, [t.value for t in allowed_types], parameter=parameter)
    return entity_type
