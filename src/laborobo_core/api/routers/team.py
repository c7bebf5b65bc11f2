"""Team API endpoints: capacity, skills and work routing recommendations."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ... import capacity, routing, skills
from ...context import RequestContext
from ...database import get_db
from ...errors import LaboroboError
from ..dependencies import get_request_context, http_error

logger = logging.getLogger("laborobo-core.team")

router = APIRouter(tags=["team"])


@router.get("/capacity")
def get_capacity(
    min_available_hours: Optional[float] = Query(None, ge=0, description="Only members with at least this much free time"),
    context: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """Capacity rows for every team member plus team totals."""
    try:
        result = capacity.get_team_capacity(db, context.team_id, min_available_hours)
        result["summary"] = capacity.get_team_capacity_summary(db, context.team_id)
        return result
    except LaboroboError as e:
        raise http_error(e)


@router.get("/capacity/available")
def list_members_with_capacity(
    estimated_hours: float = Query(..., ge=0, description="Hours of work to place"),
    minimum_buffer: float = Query(1.0, ge=0, description="Multiplier applied to the estimate"),
    context: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """Members whose free capacity covers the estimate times the buffer."""
    members = capacity.find_members_with_capacity(db, context.team_id, estimated_hours, minimum_buffer)
    return [capacity.member_capacity_row(member) for member in members]


@router.get("/skills")
def get_skills(
    context: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """Skills held across the team, most common first."""
    return skills.get_team_skills_summary(db, context.team_id)


@router.get("/routing")
def route_work(
    required_skills: list[str] = Query([], description="Skills the work needs"),
    estimated_hours: float = Query(0, ge=0, description="Estimated hours of work"),
    context: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """
    Rank team members for a piece of work.

    - **required_skills**: Repeat the parameter for each skill
    - **estimated_hours**: Used for the capacity half of the score
    """
    return routing.calculate_routing(db, context.team_id, required_skills, estimated_hours)


@router.get("/routing/top")
def top_recommendation(
    required_skills: list[str] = Query([], description="Skills the work needs"),
    estimated_hours: float = Query(0, ge=0, description="Estimated hours of work"),
    context: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """The single best candidate for a piece of work."""
    candidate = routing.get_top_recommendation(db, context.team_id, required_skills, estimated_hours)
    if candidate is None:
        raise HTTPException(status_code=404, detail="No candidates available for routing")
    return candidate
