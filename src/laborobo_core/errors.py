"""Error taxonomy shared by services, agent tools and the API layer.

Three families of failure exist:

- Validation: a parameter is missing, empty or malformed. Raised before any
  side effect (``ParameterValidationError`` and subclasses).
- Not found / ownership: a referenced entity does not exist or is not scoped
  to the caller's team (``EntityNotFoundError``).
- Authorization: the caller may not act on the target (``PermissionDeniedError``).

The first two are both ``InvalidArgumentError`` (and therefore ``ValueError``)
so agent tools surface them uniformly as invalid-argument failures.
"""
from typing import Any, Optional


class LaboroboError(Exception):
    """Base class for all domain errors."""


class InvalidArgumentError(LaboroboError, ValueError):
    """Raised when a caller supplied arguments that cannot be acted upon."""


class ParameterValidationError(InvalidArgumentError):
    """Raised when a parameter is missing, empty or malformed."""

    def __init__(self, message: str, parameter: Optional[str] = None, value: Any = None):
        super().__init__(message)
        self.parameter = parameter
        self.value = value

    @classmethod
    def required(cls, parameter: str) -> "ParameterValidationError":
        return cls(f"{parameter} is required", parameter=parameter)


class UnknownEntityTypeError(ParameterValidationError):
    """Raised when an entity type tag is outside the accepted set."""

    def __init__(self, value: Any, allowed: list[str], parameter: str = "entity_type"):
        super().__init__(
            f"{parameter} must be one of: {', '.join(allowed)}",
            parameter=parameter,
            value=value,
        )
        self.allowed = allowed


class InvalidRaciIdsError(ParameterValidationError):
    """Raised when a consulted/informed id set contains invalid identifiers."""

    def __init__(self, message: str, invalid_ids: list[Any], parameter: Optional[str] = None):
        super().__init__(message, parameter=parameter, value=invalid_ids)
        self.invalid_ids = invalid_ids


class EntityNotFoundError(InvalidArgumentError):
    """Raised when an entity is absent or belongs to another team."""

    def __init__(self, entity_label: str, entity_id: Any, team_id: Optional[int] = None):
        if team_id is None:
            message = f"{entity_label} with ID {entity_id} not found"
        else:
            message = f"{entity_label} with ID {entity_id} not found or does not belong to team"
        super().__init__(message)
        self.entity_label = entity_label
        self.entity_id = entity_id
        self.team_id = team_id


class PermissionDeniedError(LaboroboError):
    """Raised when the caller lacks permission for the target (HTTP 403)."""

    def __init__(self, message: str, user_id: Optional[int] = None, action: Optional[str] = None):
        super().__init__(message)
        self.user_id = user_id
        self.action = action
