"""My Work API endpoints: RACI-scoped work lists, metrics, preferences and Today."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ... import my_work, schemas
from ...context import RequestContext
from ...database import get_db
from ...errors import LaboroboError
from ..dependencies import get_request_context, http_error

logger = logging.getLogger("laborobo-core.my_work")

router = APIRouter(tags=["my-work"])


@router.get("/")
def get_my_work(
    include_informed: Optional[bool] = Query(
        None, description="Include informed-only items (defaults to the saved preference)"
    ),
    context: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """
    Projects, work orders and tasks the caller is involved in.

    Projects and work orders are matched on the caller's RACI roles; tasks
    on assignment. Closed items are excluded.
    """
    return my_work.get_my_work_data(db, context, include_informed=include_informed)


@router.get("/metrics", response_model=schemas.MyWorkMetrics, response_model_by_alias=True)
def get_my_work_metrics(
    context: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """Accountable, responsible, awaiting-review and assigned-task counts."""
    return my_work.compute_metrics(db, context)


@router.get("/preferences")
def get_preferences(
    context: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    return my_work.get_preferences(db, context.user_id)


@router.put("/preferences")
def update_preference(
    preference: schemas.PreferenceUpdate,
    context: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """
    Save a single preference.

    - **key**: One of work_view, my_work_subtab, my_work_show_informed
    - **value**: Preference value
    """
    try:
        pref = my_work.set_preference(db, context.user_id, preference.key, preference.value)
    except LaboroboError as e:
        raise http_error(e)
    return {"key": pref.key, "value": pref.value}


@router.get("/today")
def get_today(
    context: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """Daily summary and completion metrics for the Today view."""
    return {
        "dailySummary": my_work.get_daily_summary(db, context),
        "metrics": my_work.get_today_metrics(db, context),
    }
