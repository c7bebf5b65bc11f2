"""Projects API endpoints."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from ... import crud, insights, models, raci, schemas
from ...context import RequestContext
from ...database import get_db
from ...entity_types import EntityType
from ...errors import LaboroboError
from ..dependencies import get_request_context, http_error

logger = logging.getLogger("laborobo-core.projects")

router = APIRouter(tags=["projects"])


@router.post("/", response_model=schemas.ProjectResponse, status_code=201)
def create_project(
    project: schemas.ProjectCreate,
    context: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """
    Create a new project in the caller's team.

    - **name**: Project name
    - **party_id**: Optional client or vendor
    - **accountable_id** / **responsible_id**: RACI owners
    - **consulted_ids** / **informed_ids**: RACI member lists
    - **is_private**: Hide from team members without a role
    """
    try:
        return crud.create_project(db, context, project)
    except LaboroboError as e:
        raise http_error(e)


@router.get("/", response_model=list[schemas.ProjectResponse])
def list_projects(
    status: Optional[models.ProjectStatus] = Query(None, description="Filter by status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    context: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """List projects visible to the caller, most recently updated first."""
    projects, _total = crud.get_projects(db, context, status=status, skip=skip, limit=limit)
    return projects


@router.get("/{project_id}", response_model=schemas.ProjectResponse)
def get_project(
    project_id: int,
    context: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    project = crud.get_project(db, context, project_id)
    if not project:
        raise HTTPException(status_code=404, detail=f"Project not found: {project_id}")
    return project


@router.put("/{project_id}", response_model=schemas.ProjectResponse)
def update_project(
    project_id: int,
    project_update: schemas.ProjectUpdate,
    context: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """Update project fields. RACI fields are changed through the RACI endpoint."""
    project = crud.update_project(db, context, project_id, project_update)
    if not project:
        raise HTTPException(status_code=404, detail=f"Project not found: {project_id}")
    return project


@router.delete("/{project_id}", status_code=204)
def delete_project(
    project_id: int,
    context: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    if not crud.delete_project(db, context, project_id):
        raise HTTPException(status_code=404, detail=f"Project not found: {project_id}")


@router.put("/{project_id}/raci")
def update_project_raci(
    project_id: int,
    payload: schemas.RaciUpdate,
    request: Request,
    context: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """
    Update a project's RACI assignments.

    Overwriting an existing assignment requires **confirmed=true**; without it
    the response lists the pending changes and nothing is saved.
    """
    try:
        return raci.update_raci(
            db,
            context,
            EntityType.PROJECT,
            project_id,
            payload,
            ip_address=request.client.host if request.client else None,
        )
    except LaboroboError as e:
        raise http_error(e)


@router.get("/{project_id}/insights")
def get_project_insights(
    project_id: int,
    context: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """Health findings for a project, most severe first."""
    project = crud.get_project(db, context, project_id)
    if not project:
        raise HTTPException(status_code=404, detail=f"Project not found: {project_id}")
    return [insight.to_dict() for insight in insights.generate_insights(db, project)]
