"""My Work: RACI-scoped lists, workload metrics, daily summary and preferences."""
import logging
from datetime import date, datetime, time, timedelta
from typing import Any, Optional

from sqlalchemy.orm import Session

from . import models
from .context import RequestContext
from .errors import ParameterValidationError
from .raci import (
    entities_where_user_has_role,
    in_review_where_user_is_accountable,
    role_labels,
    roles_of,
    team_scope,
    where_user_is_accountable,
    where_user_is_responsible,
)

logger = logging.getLogger("laborobo-core.my_work")

ALLOWED_PREFERENCE_KEYS = ("work_view", "my_work_subtab", "my_work_show_informed")

PREFERENCE_DEFAULTS = {
    "work_view": "all_projects",
    "my_work_subtab": "tasks",
    "my_work_show_informed": "false",
}

_CLOSED_PROJECT_STATUSES = (models.ProjectStatus.COMPLETED, models.ProjectStatus.ARCHIVED)
_CLOSED_WORK_ORDER_STATUSES = (models.WorkOrderStatus.DELIVERED, models.WorkOrderStatus.CANCELLED)
_CLOSED_TASK_STATUSES = (models.TaskStatus.DONE, models.TaskStatus.CANCELLED)

UPCOMING_DEADLINE_DAYS = 3


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def _str_id(value: Optional[int]) -> Optional[str]:
    return str(value) if value else None


def _plural(count: int, singular: str, plural: str) -> str:
    return singular if count == 1 else plural


# ============================================================================
# Preferences
# ============================================================================


def get_preference(db: Session, user_id: int, key: str, default: Optional[str] = None) -> Optional[str]:
    pref = (
        db.query(models.UserPreference)
        .filter(models.UserPreference.user_id == user_id, models.UserPreference.key == key)
        .first()
    )
    if pref is None:
        return default if default is not None else PREFERENCE_DEFAULTS.get(key)
    return pref.value


def get_preferences(db: Session, user_id: int) -> dict[str, Optional[str]]:
    """All allowed preferences for a user, with defaults filled in."""
    return {key: get_preference(db, user_id, key) for key in ALLOWED_PREFERENCE_KEYS}


def set_preference(db: Session, user_id: int, key: str, value: Optional[str]) -> models.UserPreference:
    """
    Upsert a preference.

    Raises:
        ParameterValidationError: If the key is not an allowed preference key
    """
    if key not in ALLOWED_PREFERENCE_KEYS:
        raise ParameterValidationError("Invalid preference key.", parameter="key", value=key)

    pref = (
        db.query(models.UserPreference)
        .filter(models.UserPreference.user_id == user_id, models.UserPreference.key == key)
        .first()
    )
    if pref is None:
        pref = models.UserPreference(user_id=user_id, key=key, value=value)
        db.add(pref)
    else:
        pref.value = value

    db.commit()
    db.refresh(pref)
    logger.info(f"Set preference {key}={value!r} for user {user_id}")
    return pref


def show_informed(db: Session, user_id: int) -> bool:
    return get_preference(db, user_id, "my_work_show_informed", "false") == "true"


# ============================================================================
# Metrics
# ============================================================================


def compute_metrics(db: Session, context: RequestContext) -> dict[str, int]:
    """
    Count the caller's RACI obligations in the team.

    Each count is an independent query; no transaction spans them.

    Returns:
        Dict with accountableCount, responsibleCount, awaitingReviewCount
        and assignedTasksCount
    """
    user_id = context.user_id

    accountable_projects = (
        team_scope(db, models.Project, context.team_id)
        .filter(where_user_is_accountable(models.Project, user_id))
        .count()
    )
    accountable_work_orders = (
        team_scope(db, models.WorkOrder, context.team_id)
        .filter(where_user_is_accountable(models.WorkOrder, user_id))
        .count()
    )
    responsible_projects = (
        team_scope(db, models.Project, context.team_id)
        .filter(where_user_is_responsible(models.Project, user_id))
        .count()
    )
    responsible_work_orders = (
        team_scope(db, models.WorkOrder, context.team_id)
        .filter(where_user_is_responsible(models.WorkOrder, user_id))
        .count()
    )
    awaiting_review = (
        team_scope(db, models.WorkOrder, context.team_id)
        .filter(in_review_where_user_is_accountable(user_id))
        .count()
    )
    assigned_tasks = (
        team_scope(db, models.Task, context.team_id)
        .filter(models.Task.assigned_to_id == user_id)
        .filter(models.Task.status.notin_(_CLOSED_TASK_STATUSES))
        .count()
    )

    return {
        "accountableCount": accountable_projects + accountable_work_orders,
        "responsibleCount": responsible_projects + responsible_work_orders,
        "awaitingReviewCount": awaiting_review,
        "assignedTasksCount": assigned_tasks,
    }


# ============================================================================
# My Work lists
# ============================================================================


def get_my_work_projects(db: Session, context: RequestContext, include_informed: bool = False) -> list[dict[str, Any]]:
    user_id = context.user_id
    projects = (
        team_scope(db, models.Project, context.team_id)
        .filter(entities_where_user_has_role(models.Project, user_id, exclude_informed=not include_informed))
        .filter(models.Project.status.notin_(_CLOSED_PROJECT_STATUSES))
        .order_by(models.Project.updated_at.desc())
        .all()
    )
    return [
        {
            "id": str(project.id),
            "name": project.name,
            "description": project.description,
            "partyId": _str_id(project.party_id),
            "partyName": project.party.name if project.party else "Unknown",
            "ownerId": _str_id(project.owner_id),
            "ownerName": project.owner.name if project.owner else "Unknown",
            "status": project.status.value,
            "startDate": _iso(project.start_date),
            "targetEndDate": _iso(project.target_end_date),
            "budgetHours": float(project.budget_hours or 0),
            "actualHours": float(project.actual_hours or 0),
            "progress": project.progress,
            "tags": project.tags or [],
            "isPrivate": project.is_private,
            "userRaciRoles": role_labels(roles_of(project, user_id)),
        }
        for project in projects
    ]


def get_my_work_work_orders(db: Session, context: RequestContext, include_informed: bool = False) -> list[dict[str, Any]]:
    user_id = context.user_id
    work_orders = (
        team_scope(db, models.WorkOrder, context.team_id)
        .filter(entities_where_user_has_role(models.WorkOrder, user_id, exclude_informed=not include_informed))
        .filter(models.WorkOrder.status.notin_(_CLOSED_WORK_ORDER_STATUSES))
        .order_by(models.WorkOrder.due_date.is_(None), models.WorkOrder.due_date)
        .all()
    )
    return [
        {
            "id": str(wo.id),
            "title": wo.title,
            "description": wo.description,
            "projectId": str(wo.project_id),
            "projectName": wo.project.name if wo.project else "Unknown",
            "assignedToId": _str_id(wo.assigned_to_id),
            "assignedToName": wo.assigned_to.name if wo.assigned_to else "Unassigned",
            "status": wo.status.value,
            "priority": wo.priority.value,
            "dueDate": _iso(wo.due_date),
            "estimatedHours": float(wo.estimated_hours or 0),
            "actualHours": float(wo.actual_hours or 0),
            "acceptanceCriteria": wo.acceptance_criteria or [],
            "sopAttached": wo.sop_attached,
            "sopName": wo.sop_name,
            "createdBy": _str_id(wo.created_by_id),
            "createdByName": wo.created_by.name if wo.created_by else "Unknown",
            "userRaciRoles": role_labels(roles_of(wo, user_id)),
        }
        for wo in work_orders
    ]


def get_my_work_tasks(db: Session, context: RequestContext) -> list[dict[str, Any]]:
    tasks = (
        team_scope(db, models.Task, context.team_id)
        .filter(models.Task.assigned_to_id == context.user_id)
        .filter(models.Task.status.notin_(_CLOSED_TASK_STATUSES))
        .order_by(models.Task.due_date.is_(None), models.Task.due_date)
        .all()
    )
    return [
        {
            "id": str(task.id),
            "title": task.title,
            "description": task.description,
            "workOrderId": str(task.work_order_id),
            "workOrderTitle": task.work_order.title if task.work_order else "Unknown",
            "projectId": str(task.project_id),
            "projectName": task.project.name if task.project else "Unknown",
            "assignedToId": _str_id(task.assigned_to_id),
            "assignedToName": task.assigned_to.name if task.assigned_to else "Unassigned",
            "status": task.status.value,
            "dueDate": _iso(task.due_date),
            "estimatedHours": float(task.estimated_hours or 0),
            "actualHours": float(task.actual_hours or 0),
            "checklistItems": task.checklist_items or [],
            "dependencies": task.dependencies or [],
            "isBlocked": task.is_blocked,
        }
        for task in tasks
    ]


def get_my_work_data(
    db: Session,
    context: RequestContext,
    include_informed: Optional[bool] = None,
) -> dict[str, Any]:
    """
    Build the My Work payload for the caller.

    When ``include_informed`` is None the caller's ``my_work_show_informed``
    preference decides whether informed-only projects and work orders appear.
    """
    if include_informed is None:
        include_informed = show_informed(db, context.user_id)

    return {
        "projects": get_my_work_projects(db, context, include_informed),
        "workOrders": get_my_work_work_orders(db, context, include_informed),
        "tasks": get_my_work_tasks(db, context),
        "showInformed": include_informed,
    }


# ============================================================================
# Today
# ============================================================================


def get_daily_summary(db: Session, context: RequestContext, today: Optional[date] = None) -> dict[str, Any]:
    """
    Summarize what needs the caller's attention today.

    Counts overdue tasks assigned to the caller, work orders awaiting the
    caller's review and team work orders due within the next three days.
    """
    today = today or date.today()

    overdue_tasks = (
        team_scope(db, models.Task, context.team_id)
        .filter(models.Task.assigned_to_id == context.user_id)
        .filter(models.Task.status != models.TaskStatus.DONE)
        .filter(models.Task.due_date < today)
        .count()
    )
    pending_approvals = (
        team_scope(db, models.WorkOrder, context.team_id)
        .filter(in_review_where_user_is_accountable(context.user_id))
        .count()
    )
    upcoming_deadlines = (
        team_scope(db, models.WorkOrder, context.team_id)
        .filter(models.WorkOrder.status.notin_((models.WorkOrderStatus.DELIVERED, models.WorkOrderStatus.APPROVED)))
        .filter(models.WorkOrder.due_date >= today)
        .filter(models.WorkOrder.due_date <= today + timedelta(days=UPCOMING_DEADLINE_DAYS))
        .count()
    )

    priorities = []
    if overdue_tasks > 0:
        priorities.append(f"Address {overdue_tasks} overdue {_plural(overdue_tasks, 'task', 'tasks')}")
    if pending_approvals > 0:
        priorities.append(f"Review {pending_approvals} pending {_plural(pending_approvals, 'approval', 'approvals')}")
    if upcoming_deadlines > 0:
        priorities.append(f"Check {upcoming_deadlines} upcoming {_plural(upcoming_deadlines, 'deadline', 'deadlines')}")
    if not priorities:
        priorities = ["Review your task list for today", "Check upcoming work orders"]

    if overdue_tasks > 0:
        summary = f"You have {overdue_tasks} overdue {_plural(overdue_tasks, 'task', 'tasks')} that need attention."
    elif pending_approvals > 0:
        summary = f"You have {pending_approvals} {_plural(pending_approvals, 'approval', 'approvals')} waiting for review."
    else:
        summary = "You're all caught up! Check your upcoming deadlines."

    if overdue_tasks > 0:
        suggested_focus = "Focus on clearing overdue tasks first."
    elif pending_approvals > 0:
        suggested_focus = "Start by reviewing pending approvals to unblock work."
    elif upcoming_deadlines > 0:
        suggested_focus = "Prepare for upcoming deadlines."
    else:
        suggested_focus = "Great progress! Keep up the momentum."

    return {
        "generatedAt": datetime.utcnow().isoformat(),
        "summary": summary,
        "priorities": priorities,
        "suggestedFocus": suggested_focus,
        "counts": {
            "overdueTasks": overdue_tasks,
            "pendingApprovals": pending_approvals,
            "upcomingDeadlines": upcoming_deadlines,
        },
    }


def get_today_metrics(db: Session, context: RequestContext, today: Optional[date] = None) -> dict[str, int]:
    """Team completion and blocker counts for the Today view."""
    today = today or date.today()
    day_start = datetime.combine(today, time.min)
    week_start = datetime.combine(today - timedelta(days=today.weekday()), time.min)

    done_tasks = (
        team_scope(db, models.Task, context.team_id)
        .filter(models.Task.status == models.TaskStatus.DONE)
    )
    return {
        "tasksCompletedToday": done_tasks.filter(
            models.Task.updated_at >= day_start,
            models.Task.updated_at < day_start + timedelta(days=1),
        ).count(),
        "tasksCompletedThisWeek": done_tasks.filter(models.Task.updated_at >= week_start).count(),
        "activeBlockers": (
            team_scope(db, models.Task, context.team_id)
            .filter(models.Task.is_blocked.is_(True))
            .count()
        ),
    }
