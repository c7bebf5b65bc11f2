"""Work order API endpoints."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from ... import crud, models, raci, schemas
from ...context import RequestContext
from ...database import get_db
from ...entity_types import EntityType
from ...errors import LaboroboError
from ..dependencies import get_request_context, http_error

logger = logging.getLogger("laborobo-core.work_orders")

router = APIRouter(tags=["work-orders"])


@router.post("/", response_model=schemas.WorkOrderResponse, status_code=201)
def create_work_order(
    work_order: schemas.WorkOrderCreate,
    context: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """
    Create a work order under a project.

    The accountable user defaults to the caller.
    """
    try:
        return crud.create_work_order(db, context, work_order)
    except LaboroboError as e:
        raise http_error(e)


@router.get("/", response_model=list[schemas.WorkOrderResponse])
def list_work_orders(
    project_id: Optional[int] = Query(None, description="Filter by project"),
    status: Optional[models.WorkOrderStatus] = Query(None, description="Filter by status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    context: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    work_orders, _total = crud.get_work_orders(
        db, context, project_id=project_id, status=status, skip=skip, limit=limit
    )
    return work_orders


@router.get("/{work_order_id}", response_model=schemas.WorkOrderResponse)
def get_work_order(
    work_order_id: int,
    context: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    work_order = crud.get_work_order(db, context, work_order_id)
    if not work_order:
        raise HTTPException(status_code=404, detail=f"Work order not found: {work_order_id}")
    return work_order


@router.put("/{work_order_id}", response_model=schemas.WorkOrderResponse)
def update_work_order(
    work_order_id: int,
    work_order_update: schemas.WorkOrderUpdate,
    context: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    work_order = crud.update_work_order(db, context, work_order_id, work_order_update)
    if not work_order:
        raise HTTPException(status_code=404, detail=f"Work order not found: {work_order_id}")
    return work_order


@router.delete("/{work_order_id}", status_code=204)
def delete_work_order(
    work_order_id: int,
    context: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    if not crud.delete_work_order(db, context, work_order_id):
        raise HTTPException(status_code=404, detail=f"Work order not found: {work_order_id}")


@router.put("/{work_order_id}/raci")
def update_work_order_raci(
    work_order_id: int,
    payload: schemas.RaciUpdate,
    request: Request,
    context: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """
    Update a work order's RACI assignments and reviewer.

    Setting **accountable_id** also reassigns the work order.
    Overwriting an existing assignment requires **confirmed=true**.
    """
    try:
        return raci.update_raci(
            db,
            context,
            EntityType.WORK_ORDER,
            work_order_id,
            payload,
            ip_address=request.client.host if request.client else None,
        )
    except LaboroboError as e:
        raise http_error(e)
