"""Task API endpoints."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ... import crud, models, schemas
from ...context import RequestContext
from ...database import get_db
from ...errors import LaboroboError
from ..dependencies import get_request_context, http_error

logger = logging.getLogger("laborobo-core.tasks")

router = APIRouter(tags=["tasks"])


@router.post("/", response_model=schemas.TaskResponse, status_code=201)
def create_task(
    task: schemas.TaskCreate,
    context: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """
    Create a task in a work order.

    The task is appended after the work order's existing tasks and inherits
    its due date when none is given.
    """
    try:
        return crud.create_task(db, context, task)
    except LaboroboError as e:
        raise http_error(e)


@router.get("/", response_model=list[schemas.TaskResponse])
def list_tasks(
    work_order_id: Optional[int] = Query(None, description="Filter by work order"),
    assigned_to_id: Optional[int] = Query(None, description="Filter by assignee"),
    status: Optional[models.TaskStatus] = Query(None, description="Filter by status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    context: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    tasks, _total = crud.get_tasks(
        db,
        context,
        work_order_id=work_order_id,
        assigned_to_id=assigned_to_id,
        status=status,
        skip=skip,
        limit=limit,
    )
    return tasks


@router.get("/{task_id}", response_model=schemas.TaskResponse)
def get_task(
    task_id: int,
    context: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    task = crud.get_task(db, context, task_id)
    if not task:
        raise HTTPException(status_code=404, detail=f"Task not found: {task_id}")
    return task


@router.put("/{task_id}", response_model=schemas.TaskResponse)
def update_task(
    task_id: int,
    task_update: schemas.TaskUpdate,
    context: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """Update a task. Clearing **is_blocked** also clears the blocker reason and details."""
    try:
        task = crud.update_task(db, context, task_id, task_update)
    except LaboroboError as e:
        raise http_error(e)
    if not task:
        raise HTTPException(status_code=404, detail=f"Task not found: {task_id}")
    return task


@router.delete("/{task_id}", status_code=204)
def delete_task(
    task_id: int,
    context: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    if not crud.delete_task(db, context, task_id):
        raise HTTPException(status_code=404, detail=f"Task not found: {task_id}")
