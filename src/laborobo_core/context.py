"""Explicit caller context passed to every scoped query and mutation."""
from dataclasses import dataclass

from sqlalchemy.orm import Session

from . import models
from .errors import EntityNotFoundError, PermissionDeniedError


@dataclass(frozen=True)
class RequestContext:
    """Team and user on whose behalf an operation runs."""

    team_id: int
    user_id: int


def require_team_member(db: Session, context: RequestContext, action: str = "access team") -> models.Team:
    """
    Resolve the context team and verify the user belongs to it.

    The team owner always counts as a member.

    Raises:
        EntityNotFoundError: If the team does not exist
        PermissionDeniedError: If the user is not a member of the team
    """
    team = db.query(models.Team).filter(models.Team.id == context.team_id).first()
    if not team:
        raise EntityNotFoundError("Team", context.team_id)
    if not team.has_user(context.user_id):
        raise PermissionDeniedError(
            f"User {context.user_id} is not a member of team {context.team_id}",
            user_id=context.user_id,
            action=action,
        )
    return team
