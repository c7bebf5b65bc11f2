"""CRUD operations for projects, work orders and tasks."""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from . import models, schemas
from .context import RequestContext
from .errors import EntityNotFoundError
from .raci import team_scope, visible_scope

logger = logging.getLogger("laborobo-core.crud")


def _nulls_last(column):
    """Portable ascending order with NULLs last."""
    return (column.is_(None), column)


def _require_user(db: Session, user_id: Optional[int]) -> None:
    if user_id is None:
        return
    if not db.query(models.User.id).filter(models.User.id == user_id).first():
        raise EntityNotFoundError("User", user_id)


def _require_users(db: Session, *user_ids: Optional[int]) -> None:
    for user_id in user_ids:
        _require_user(db, user_id)


# ============================================================================
# Teams and Users
# ============================================================================


def get_team(db: Session, team_id: int) -> Optional[models.Team]:
    return db.query(models.Team).filter(models.Team.id == team_id).first()


def get_user(db: Session, user_id: int) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.id == user_id).first()


# ============================================================================
# Projects
# ============================================================================


def create_project(db: Session, context: RequestContext, project: schemas.ProjectCreate) -> models.Project:
    """
    Create a new project in the caller's team.

    Args:
        db: Database session
        context: Caller team and user
        project: Project creation data

    Returns:
        Created project instance

    Raises:
        EntityNotFoundError: If a referenced party or user does not exist
    """
    if project.party_id is not None:
        party = team_scope(db, models.Party, context.team_id).filter(models.Party.id == project.party_id).first()
        if not party:
            raise EntityNotFoundError("Party", project.party_id, team_id=context.team_id)

    _require_users(db, project.owner_id, project.accountable_id, project.responsible_id)

    db_project = models.Project(
        team_id=context.team_id,
        party_id=project.party_id,
        owner_id=project.owner_id or context.user_id,
        accountable_id=project.accountable_id or context.user_id,
        responsible_id=project.responsible_id,
        consulted_ids=project.consulted_ids,
        informed_ids=project.informed_ids,
        name=project.name,
        description=project.description,
        status=project.status,
        start_date=project.start_date,
        target_end_date=project.target_end_date,
        budget_hours=project.budget_hours or 0.0,
        tags=project.tags,
        is_private=project.is_private,
    )
    db.add(db_project)
    db.commit()
    db.refresh(db_project)

    logger.info(f"Created project {db_project.id}: {db_project.name}")
    return db_project


def get_project(db: Session, context: RequestContext, project_id: int) -> Optional[models.Project]:
    """Get a live project in the caller's team that the caller may see."""
    return (
        visible_scope(db, models.Project, context)
        .filter(models.Project.id == project_id)
        .first()
    )


def get_projects(
    db: Session,
    context: RequestContext,
    status: Optional[models.ProjectStatus] = None,
    skip: int = 0,
    limit: int = 50,
) -> tuple[list[models.Project], int]:
    """
    List projects visible to the caller.

    Returns:
        Tuple of (projects, total_count)
    """
    query = visible_scope(db, models.Project, context)
    if status:
        query = query.filter(models.Project.status == status)

    total = query.count()
    projects = query.order_by(models.Project.updated_at.desc()).offset(skip).limit(limit).all()
    return projects, total


def update_project(
    db: Session,
    context: RequestContext,
    project_id: int,
    project_update: schemas.ProjectUpdate,
) -> Optional[models.Project]:
    db_project = get_project(db, context, project_id)
    if not db_project:
        return None

    for field, value in project_update.model_dump(exclude_unset=True).items():
        setattr(db_project, field, value)

    db.commit()
    db.refresh(db_project)
    logger.info(f"Updated project {project_id}")
    return db_project


def delete_project(db: Session, context: RequestContext, project_id: int) -> bool:
    """Soft delete a project. Returns False if it does not exist."""
    db_project = get_project(db, context, project_id)
    if not db_project:
        return False

    db_project.deleted_at = datetime.utcnow()
    db.commit()
    logger.info(f"Soft deleted project {project_id}")
    return True


def recalculate_project_progress(db: Session, project: models.Project) -> int:
    """
    Recompute project progress as the percentage of done tasks.

    Archived work orders and archived or deleted tasks are ignored. A project
    without countable tasks has 0 progress.
    """
    total_query = (
        db.query(func.count(models.Task.id))
        .join(models.WorkOrder, models.Task.work_order_id == models.WorkOrder.id)
        .filter(models.WorkOrder.project_id == project.id)
        .filter(models.WorkOrder.status != models.WorkOrderStatus.ARCHIVED)
        .filter(models.WorkOrder.deleted_at.is_(None))
        .filter(models.Task.status != models.TaskStatus.ARCHIVED)
        .filter(models.Task.deleted_at.is_(None))
    )
    total = total_query.scalar() or 0
    done = total_query.filter(models.Task.status == models.TaskStatus.DONE).scalar() or 0

    project.progress = int(round(done / total * 100)) if total > 0 else 0
    db.commit()
    return project.progress


# ============================================================================
# Work Orders
# ============================================================================


def create_work_order(
    db: Session,
    context: RequestContext,
    work_order: schemas.WorkOrderCreate,
) -> models.WorkOrder:
    """
    Create a work order under a project in the caller's team.

    The accountable user defaults to the creator and is mirrored as the assignee.

    Raises:
        EntityNotFoundError: If the project or a referenced user does not exist
    """
    project = visible_scope(db, models.Project, context).filter(models.Project.id == work_order.project_id).first()
    if not project:
        raise EntityNotFoundError("Project", work_order.project_id, team_id=context.team_id)

    _require_users(db, work_order.accountable_id, work_order.responsible_id, work_order.reviewer_id)
    accountable_id = work_order.accountable_id or context.user_id

    db_work_order = models.WorkOrder(
        team_id=context.team_id,
        project_id=project.id,
        created_by_id=context.user_id,
        assigned_to_id=accountable_id,
        accountable_id=accountable_id,
        responsible_id=work_order.responsible_id,
        reviewer_id=work_order.reviewer_id,
        consulted_ids=work_order.consulted_ids,
        informed_ids=work_order.informed_ids,
        title=work_order.title,
        description=work_order.description,
        status=work_order.status,
        priority=work_order.priority,
        due_date=work_order.due_date,
        estimated_hours=work_order.estimated_hours,
        acceptance_criteria=work_order.acceptance_criteria,
    )
    db.add(db_work_order)
    db.commit()
    db.refresh(db_work_order)

    logger.info(f"Created work order {db_work_order.id}: {db_work_order.title}")
    return db_work_order


def get_work_order(db: Session, context: RequestContext, work_order_id: int) -> Optional[models.WorkOrder]:
    return visible_scope(db, models.WorkOrder, context).filter(models.WorkOrder.id == work_order_id).first()


def get_work_orders(
    db: Session,
    context: RequestContext,
    project_id: Optional[int] = None,
    status: Optional[models.WorkOrderStatus] = None,
    skip: int = 0,
    limit: int = 50,
) -> tuple[list[models.WorkOrder], int]:
    """
    List work orders in the caller's team.

    Returns:
        Tuple of (work_orders, total_count), ordered by due date
    """
    query = visible_scope(db, models.WorkOrder, context)
    if project_id is not None:
        query = query.filter(models.WorkOrder.project_id == project_id)
    if status:
        query = query.filter(models.WorkOrder.status == status)

    total = query.count()
    work_orders = query.order_by(*_nulls_last(models.WorkOrder.due_date)).offset(skip).limit(limit).all()
    return work_orders, total


def update_work_order(
    db: Session,
    context: RequestContext,
    work_order_id: int,
    work_order_update: schemas.WorkOrderUpdate,
) -> Optional[models.WorkOrder]:
    db_work_order = get_work_order(db, context, work_order_id)
    if not db_work_order:
        return None

    update_data = work_order_update.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(db_work_order, field, value)

    db.commit()
    db.refresh(db_work_order)

    if "status" in update_data:
        recalculate_project_progress(db, db_work_order.project)

    logger.info(f"Updated work order {work_order_id}")
    return db_work_order


def delete_work_order(db: Session, context: RequestContext, work_order_id: int) -> bool:
    db_work_order = get_work_order(db, context, work_order_id)
    if not db_work_order:
        return False

    db_work_order.deleted_at = datetime.utcnow()
    db.commit()
    recalculate_project_progress(db, db_work_order.project)
    logger.info(f"Soft deleted work order {work_order_id}")
    return True


# ============================================================================
# Tasks
# ============================================================================


def next_task_position(db: Session, work_order_id: int) -> int:
    """Position after the last task in the work order (1 for the first task)."""
    current = (
        db.query(func.max(models.Task.position_in_work_order))
        .filter(models.Task.work_order_id == work_order_id)
        .scalar()
    )
    return (current or 0) + 1


def create_task(db: Session, context: RequestContext, task: schemas.TaskCreate) -> models.Task:
    """
    Create a task at the end of a work order.

    Raises:
        EntityNotFoundError: If the work order or assignee does not exist
    """
    work_order = get_work_order(db, context, task.work_order_id)
    if not work_order:
        raise EntityNotFoundError("Work order", task.work_order_id, team_id=context.team_id)

    _require_user(db, task.assigned_to_id)

    db_task = models.Task(
        team_id=context.team_id,
        work_order_id=work_order.id,
        project_id=work_order.project_id,
        assigned_to_id=task.assigned_to_id,
        created_by_id=context.user_id,
        title=task.title,
        description=task.description,
        status=models.TaskStatus.TODO,
        due_date=task.due_date or work_order.due_date,
        estimated_hours=task.estimated_hours or 0.0,
        checklist_items=task.checklist_items,
        dependencies=task.dependencies,
        position_in_work_order=next_task_position(db, work_order.id),
    )
    db.add(db_task)
    db.commit()
    db.refresh(db_task)

    recalculate_project_progress(db, work_order.project)
    logger.info(f"Created task {db_task.id}: {db_task.title}")
    return db_task


def get_task(db: Session, context: RequestContext, task_id: int) -> Optional[models.Task]:
    return team_scope(db, models.Task, context.team_id).filter(models.Task.id == task_id).first()


def get_tasks(
    db: Session,
    context: RequestContext,
    work_order_id: Optional[int] = None,
    assigned_to_id: Optional[int] = None,
    status: Optional[models.TaskStatus] = None,
    skip: int = 0,
    limit: int = 50,
) -> tuple[list[models.Task], int]:
    """
    List tasks in the caller's team.

    Returns:
        Tuple of (tasks, total_count)
    """
    query = team_scope(db, models.Task, context.team_id)
    if work_order_id is not None:
        query = query.filter(models.Task.work_order_id == work_order_id)
    if assigned_to_id is not None:
        query = query.filter(models.Task.assigned_to_id == assigned_to_id)
    if status:
        query = query.filter(models.Task.status == status)

    total = query.count()
    order = (models.Task.position_in_work_order,) if work_order_id is not None else _nulls_last(models.Task.due_date)
    tasks = query.order_by(*order).offset(skip).limit(limit).all()
    return tasks, total


def update_task(
    db: Session,
    context: RequestContext,
    task_id: int,
    task_update: schemas.TaskUpdate,
) -> Optional[models.Task]:
    db_task = get_task(db, context, task_id)
    if not db_task:
        return None

    update_data = task_update.model_dump(exclude_unset=True)
    if "assigned_to_id" in update_data:
        _require_user(db, update_data["assigned_to_id"])

    for field, value in update_data.items():
        setattr(db_task, field, value)

    # Clearing the blocked flag clears its reason
    if update_data.get("is_blocked") is False:
        db_task.blocker_reason = None
        db_task.blocker_details = None

    db.commit()
    db.refresh(db_task)

    if "status" in update_data:
        recalculate_project_progress(db, db_task.project)

    logger.info(f"Updated task {task_id}")
    return db_task


def delete_task(db: Session, context: RequestContext, task_id: int) -> bool:
    db_task = get_task(db, context, task_id)
    if not db_task:
        return False

    db_task.deleted_at = datetime.utcnow()
    db.commit()
    recalculate_project_progress(db, db_task.project)
    logger.info(f"Soft deleted task {task_id}")
    return True
