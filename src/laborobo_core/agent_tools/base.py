"""Agent tool interface, parameter helpers and the gateway result type."""
import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

from sqlalchemy.orm import Session

from .. import models
from ..errors import EntityNotFoundError, ParameterValidationError
from ..raci import team_scope


class ToolResultStatus(str, enum.Enum):
    """Outcome of a gateway tool call."""

    SUCCESS = "success"
    FAILURE = "failure"
    DENIED = "denied"


@dataclass(frozen=True)
class ToolResult:
    """Result of executing a tool through the gateway."""

    status: ToolResultStatus
    data: Optional[dict[str, Any]] = None
    error: Optional[str] = None
    execution_time_ms: Optional[float] = None

    @classmethod
    def success(cls, data: dict[str, Any], execution_time_ms: Optional[float] = None) -> "ToolResult":
        return cls(ToolResultStatus.SUCCESS, data=data, execution_time_ms=execution_time_ms)

    @classmethod
    def failure(cls, error: str, execution_time_ms: Optional[float] = None) -> "ToolResult":
        return cls(ToolResultStatus.FAILURE, error=error, execution_time_ms=execution_time_ms)

    @classmethod
    def denied(cls, error: str) -> "ToolResult":
        return cls(ToolResultStatus.DENIED, error=error)

    @property
    def is_success(self) -> bool:
        return self.status == ToolResultStatus.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "data": self.data,
            "error": self.error,
            "execution_time_ms": self.execution_time_ms,
        }


class Tool(ABC):
    """
    A single-purpose handler an agent can invoke.

    Subclasses set ``name``, ``description`` and ``category`` and implement
    ``get_parameters`` and ``execute``. ``execute`` raises
    ``ParameterValidationError`` for missing or malformed parameters and
    ``EntityNotFoundError`` when a referenced entity does not resolve within
    the team, always before any write.
    """

    name: str = ""
    description: str = ""
    category: str = "general"

    # Overrides the category-derived permissions when set
    required_permissions: Optional[list[str]] = None

    def __init__(self, db: Session):
        self.db = db

    @abstractmethod
    def get_parameters(self) -> dict[str, dict[str, Any]]:
        """Return ``{param: {"type", "description", "required"}}``."""

    @abstractmethod
    def execute(self, params: dict[str, Any]) -> dict[str, Any]:
        """Run the tool and return a JSON-serializable result."""

    # ------------------------------------------------------------------
    # Parameter helpers
    # ------------------------------------------------------------------

    @staticmethod
    def is_missing(value: Any) -> bool:
        return value is None or (isinstance(value, str) and value.strip() == "")

    def require(self, params: dict[str, Any], *names: str) -> None:
        """Raise for the first required parameter that is absent, None or blank."""
        for name in names:
            if self.is_missing(params.get(name)):
                raise ParameterValidationError.required(name)

    def int_param(self, params: dict[str, Any], name: str, default: Optional[int] = None) -> Optional[int]:
        value = params.get(name)
        if self.is_missing(value):
            return default
        if isinstance(value, bool):
            raise ParameterValidationError(f"{name} must be an integer", parameter=name, value=value)
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ParameterValidationError(f"{name} must be an integer", parameter=name, value=value)

    def float_param(self, params: dict[str, Any], name: str, default: Optional[float] = None) -> Optional[float]:
        value = params.get(name)
        if self.is_missing(value):
            return default
        if isinstance(value, bool):
            raise ParameterValidationError(f"{name} must be a number", parameter=name, value=value)
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ParameterValidationError(f"{name} must be a number", parameter=name, value=value)

    def limit_param(self, params: dict[str, Any], default: int, maximum: Optional[int] = None) -> int:
        """Positive ``limit`` parameter, capped at ``maximum`` when given."""
        limit = self.int_param(params, "limit", default)
        if limit <= 0:
            raise ParameterValidationError("limit must be greater than 0", parameter="limit", value=limit)
        if maximum is not None:
            limit = min(limit, maximum)
        return limit

    @staticmethod
    def str_param(params: dict[str, Any], name: str, default: Optional[str] = None) -> Optional[str]:
        value = params.get(name)
        if value is None:
            return default
        if not isinstance(value, str):
            raise ParameterValidationError(f"{name} must be a string", parameter=name, value=value)
        return value

    @staticmethod
    def bool_param(params: dict[str, Any], name: str, default: bool) -> bool:
        value = params.get(name)
        if value is None:
            return default
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes")
        return bool(value)

    @staticmethod
    def list_param(params: dict[str, Any], name: str) -> list:
        value = params.get(name)
        if value is None:
            return []
        if not isinstance(value, (list, tuple)):
            raise ParameterValidationError(f"{name} must be an array", parameter=name, value=value)
        return list(value)

    @staticmethod
    def date_param(params: dict[str, Any], name: str) -> Optional[date]:
        value = params.get(name)
        if value is None or value == "":
            return None
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        try:
            return datetime.fromisoformat(str(value)).date()
        except ValueError:
            raise ParameterValidationError(
                f"{name} must be a date in YYYY-MM-DD format", parameter=name, value=value
            )

    @staticmethod
    def enum_param(enum_class, name: str, value: Any):
        """Coerce a filter value to ``enum_class`` or raise a validation error."""
        try:
            return enum_class(str(value).strip().lower())
        except ValueError:
            allowed = ", ".join(member.value for member in enum_class)
            raise ParameterValidationError(f"{name} must be one of: {allowed}", parameter=name, value=value)

    # ------------------------------------------------------------------
    # Entity resolution
    # ------------------------------------------------------------------

    def get_team(self, team_id: int) -> models.Team:
        team = self.db.query(models.Team).filter(models.Team.id == team_id).first()
        if not team:
            raise EntityNotFoundError("Team", team_id)
        return team

    def get_team_entity(self, model, label: str, entity_id: int, team_id: int):
        """Resolve a live entity owned by the team, or raise EntityNotFoundError."""
        entity = team_scope(self.db, model, team_id).filter(model.id == entity_id).first()
        if entity is None:
            raise EntityNotFoundError(label, entity_id, team_id=team_id)
        return entity

    def get_user(self, user_id: int) -> models.User:
        user = self.db.query(models.User).filter(models.User.id == user_id).first()
        if not user:
            raise EntityNotFoundError("User", user_id)
        return user

    def __repr__(self) -> str:
        return f"<Tool {self.name} ({self.category})>"
