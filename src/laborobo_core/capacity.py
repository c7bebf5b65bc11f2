"""Team capacity: per-member availability, capacity scores and team summaries."""
import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from . import models
from .errors import EntityNotFoundError

logger = logging.getLogger("laborobo-core.capacity")

LOW_CAPACITY_THRESHOLD = 0.20  # Available share of weekly capacity
LOW_CAPACITY_PENALTY = 0.50
BASELINE_WEEK_HOURS = 40.0


def get_team_or_raise(db: Session, team_id: int) -> models.Team:
    team = db.query(models.Team).filter(models.Team.id == team_id).first()
    if not team:
        raise EntityNotFoundError("Team", team_id)
    return team


def base_capacity_score(available_hours: float, estimated_hours: float) -> float:
    """
    Score how well ``estimated_hours`` of work fits into ``available_hours``.

    No capacity scores 0. Without an estimate the score is the available
    share of a 40 hour week. Otherwise the score follows the fit ratio:
    2x or more is 100, 1.5x-2x is 90-100, 1x-1.5x is 70-90 and below 1x
    scales linearly from 0 to 70.
    """
    if available_hours <= 0:
        return 0.0

    if estimated_hours <= 0:
        return min(available_hours / BASELINE_WEEK_HOURS * 100, 100.0)

    ratio = available_hours / estimated_hours
    if ratio >= 2.0:
        return 100.0
    if ratio >= 1.5:
        return 90.0 + (ratio - 1.5) / 0.5 * 10
    if ratio >= 1.0:
        return 70.0 + (ratio - 1.0) / 0.5 * 20
    return max(ratio * 70, 0.0)


def member_capacity_score(member: models.User, estimated_hours: float) -> dict[str, Any]:
    """Capacity score for one member, halved when under 20% of capacity is free."""
    capacity = member.capacity_hours
    available = member.available_capacity
    capacity_share = available / capacity if capacity > 0 else 0.0

    base_score = base_capacity_score(available, estimated_hours)
    penalty_applied = capacity_share < LOW_CAPACITY_THRESHOLD
    final_score = base_score * LOW_CAPACITY_PENALTY if penalty_applied else base_score

    return {
        "user_id": member.id,
        "user_name": member.name,
        "score": round(final_score, 2),
        "capacity_hours_per_week": capacity,
        "current_workload_hours": member.workload_hours,
        "available_capacity": available,
        "capacity_percentage": round(capacity_share * 100, 2),
        "penalty_applied": penalty_applied,
        "can_fit_work": available >= estimated_hours,
    }


def calculate_capacity_scores(db: Session, team_id: int, estimated_hours: float) -> dict[int, dict[str, Any]]:
    """Capacity scores keyed by user id for every team member (owner included)."""
    team = db.query(models.Team).filter(models.Team.id == team_id).first()
    if team is None:
        return {}
    return {member.id: member_capacity_score(member, estimated_hours) for member in team.all_users()}


def member_capacity_row(member: models.User) -> dict[str, Any]:
    capacity = member.capacity_hours
    available = member.available_capacity
    return {
        "user_id": member.id,
        "user_name": member.name,
        "capacity_hours_per_week": capacity,
        "current_workload_hours": member.workload_hours,
        "available_capacity": available,
        "utilization_percentage": round(member.workload_hours / capacity * 100, 1) if capacity > 0 else 0,
        "has_low_capacity": capacity > 0 and available / capacity < LOW_CAPACITY_THRESHOLD,
    }


def get_team_capacity(db: Session, team_id: int, min_available_hours: Optional[float] = None) -> dict[str, Any]:
    """
    Capacity rows for all team members, most available first.

    Args:
        db: Database session
        team_id: Team ID
        min_available_hours: Drop members with less available capacity

    Returns:
        Dict with team_id, team_name, team_capacity, total_members and
        total_available_hours

    Raises:
        EntityNotFoundError: If the team does not exist
    """
    team = get_team_or_raise(db, team_id)

    rows = []
    for member in team.all_users():
        if min_available_hours is not None and member.available_capacity < min_available_hours:
            continue
        rows.append(member_capacity_row(member))

    rows.sort(key=lambda row: row["available_capacity"], reverse=True)

    return {
        "team_id": team.id,
        "team_name": team.name,
        "team_capacity": rows,
        "total_members": len(rows),
        "total_available_hours": sum(row["available_capacity"] for row in rows),
    }


def get_team_capacity_summary(db: Session, team_id: int) -> dict[str, Any]:
    """Aggregate capacity, workload and utilization across the team."""
    team = db.query(models.Team).filter(models.Team.id == team_id).first()
    if team is None:
        return {
            "total_capacity": 0,
            "total_workload": 0,
            "total_available": 0,
            "utilization_percentage": 0.0,
            "members_with_capacity": 0,
            "members_overloaded": 0,
        }

    total_capacity = 0.0
    total_workload = 0.0
    members_with_capacity = 0
    members_overloaded = 0
    for member in team.all_users():
        total_capacity += member.capacity_hours
        total_workload += member.workload_hours
        if member.available_capacity > 0:
            members_with_capacity += 1
        if member.workload_hours > member.capacity_hours:
            members_overloaded += 1

    utilization = total_workload / total_capacity * 100 if total_capacity > 0 else 0.0
    return {
        "total_capacity": total_capacity,
        "total_workload": total_workload,
        "total_available": total_capacity - total_workload,
        "utilization_percentage": round(utilization, 2),
        "members_with_capacity": members_with_capacity,
        "members_overloaded": members_overloaded,
    }


def find_members_with_capacity(
    db: Session,
    team_id: int,
    estimated_hours: float,
    minimum_buffer: float = 1.0,
) -> list[models.User]:
    """Members whose available capacity covers ``estimated_hours * minimum_buffer``."""
    team = db.query(models.Team).filter(models.Team.id == team_id).first()
    if team is None:
        return []
    required = estimated_hours * minimum_buffer
    return [member for member in team.all_users() if member.available_capacity >= required]
