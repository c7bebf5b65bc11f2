"""Project insights: overdue items, bottlenecks, capacity imbalance and scope creep.

Two views over the same data:

- ``get_overdue_items`` / ``get_bottlenecks`` / ``get_resource_insights`` build
  the raw report returned by the project insights agent tool.
- ``generate_insights`` turns a project's data into ``ProjectInsight`` objects
  with severity, affected items and a suggested action.

An item is overdue once its due date has been reached and it is still open;
an item due today is overdue by 0 days.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from . import models
from .capacity import get_team_capacity
from .models import AIConfidence
from .raci import team_scope
from .scoring import (
    SEVERITY_CRITICAL,
    SEVERITY_HIGH,
    SEVERITY_LOW,
    SEVERITY_MEDIUM,
    capacity_status,
    days_overdue,
    overdue_severity,
    scope_creep_confidence,
    severity_sort_key,
)

logger = logging.getLogger("laborobo-core.insights")

SCOPE_CREEP_THRESHOLD = 0.20
RESOURCE_OVERLOAD_THRESHOLD = 100
AVAILABLE_CAPACITY_THRESHOLD = 75

TYPE_OVERDUE = "overdue"
TYPE_BOTTLENECK = "bottleneck"
TYPE_RESOURCE = "resource"
TYPE_SCOPE_CREEP = "scope_creep"

_CLOSED_TASK_STATUSES = (models.TaskStatus.DONE, models.TaskStatus.APPROVED, models.TaskStatus.CANCELLED)
_CLOSED_WORK_ORDER_STATUSES = (models.WorkOrderStatus.DELIVERED, models.WorkOrderStatus.CANCELLED)

BLOCKER_SUGGESTIONS = {
    models.BlockerReason.WAITING_ON_EXTERNAL.value:
        "Follow up with external parties and set up escalation paths if responses are delayed.",
    models.BlockerReason.MISSING_INFORMATION.value:
        "Identify the information needed and reach out to stakeholders who can provide it.",
    models.BlockerReason.TECHNICAL_ISSUE.value:
        "Engage technical leads or specialists to help resolve the blocking issues.",
    models.BlockerReason.WAITING_ON_APPROVAL.value:
        "Expedite the approval process by notifying approvers of the pending items.",
}
DEFAULT_BLOCKER_SUGGESTION = "Review the blocker details and determine appropriate next steps."


@dataclass(frozen=True)
class ProjectInsight:
    """A single finding about a project's health."""

    type: str
    severity: str
    title: str
    description: str
    affected_items: list[dict[str, Any]] = field(default_factory=list)
    suggestion: Optional[str] = None
    confidence: AIConfidence = AIConfidence.MEDIUM

    @property
    def is_urgent(self) -> bool:
        return self.severity in (SEVERITY_CRITICAL, SEVERITY_HIGH)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "severity": self.severity,
            "title": self.title,
            "description": self.description,
            "affected_items": self.affected_items,
            "affected_items_count": len(self.affected_items),
            "suggestion": self.suggestion,
            "confidence": self.confidence.value,
            "is_urgent": self.is_urgent,
        }


def blocker_suggestion(reason: Optional[str]) -> str:
    return BLOCKER_SUGGESTIONS.get(reason or "", DEFAULT_BLOCKER_SUGGESTION)


def _scoped(db: Session, model, team_id: int, project_id: Optional[int]):
    query = team_scope(db, model, team_id)
    if project_id is not None:
        query = query.filter(model.project_id == project_id)
    return query


def _affected(items, item_type: str) -> list[dict[str, Any]]:
    return [{"id": item.id, "type": item_type, "title": item.title} for item in items]


# ============================================================================
# Report data (agent tool view)
# ============================================================================


def query_overdue_tasks(db: Session, team_id: int, project_id: Optional[int], today: date):
    return (
        _scoped(db, models.Task, team_id, project_id)
        .filter(models.Task.due_date.isnot(None))
        .filter(models.Task.due_date <= today)
        .filter(models.Task.status.notin_(_CLOSED_TASK_STATUSES))
        .order_by(models.Task.due_date)
        .all()
    )


def query_overdue_work_orders(db: Session, team_id: int, project_id: Optional[int], today: date):
    return (
        _scoped(db, models.WorkOrder, team_id, project_id)
        .filter(models.WorkOrder.due_date.isnot(None))
        .filter(models.WorkOrder.due_date <= today)
        .filter(models.WorkOrder.status.notin_(_CLOSED_WORK_ORDER_STATUSES))
        .order_by(models.WorkOrder.due_date)
        .all()
    )


def query_overdue_deliverables(db: Session, team_id: int, project_id: Optional[int], today: date):
    # delivered_date holds the expected delivery date until delivery
    return (
        _scoped(db, models.Deliverable, team_id, project_id)
        .filter(models.Deliverable.delivered_date.isnot(None))
        .filter(models.Deliverable.delivered_date <= today)
        .filter(models.Deliverable.status != models.DeliverableStatus.DELIVERED)
        .order_by(models.Deliverable.delivered_date)
        .all()
    )


def get_overdue_items(db: Session, team_id: int, project_id: Optional[int] = None, today: Optional[date] = None) -> dict[str, list]:
    """Overdue tasks, work orders and deliverables with days overdue and severity."""
    today = today or date.today()

    def _row(item, due: Optional[date], **extra) -> dict[str, Any]:
        days = days_overdue(due, today)
        return {
            "id": item.id,
            "title": item.title,
            "due_date": due.isoformat() if due else None,
            "days_overdue": days,
            "status": item.status.value if item.status else None,
            "severity": overdue_severity(days),
            **extra,
        }

    return {
        "tasks": [
            _row(t, t.due_date, work_order_id=t.work_order_id, assigned_to_id=t.assigned_to_id)
            for t in query_overdue_tasks(db, team_id, project_id, today)
        ],
        "work_orders": [
            _row(wo, wo.due_date, project_id=wo.project_id)
            for wo in query_overdue_work_orders(db, team_id, project_id, today)
        ],
        "deliverables": [
            _row(d, d.delivered_date, work_order_id=d.work_order_id)
            for d in query_overdue_deliverables(db, team_id, project_id, today)
        ],
    }


def query_blocked_tasks(db: Session, team_id: int, project_id: Optional[int], open_only: bool = False):
    query = _scoped(db, models.Task, team_id, project_id).filter(models.Task.is_blocked.is_(True))
    if open_only:
        query = query.filter(models.Task.status.notin_(_CLOSED_TASK_STATUSES))
    return query.order_by(models.Task.id).all()


def get_bottlenecks(db: Session, team_id: int, project_id: Optional[int] = None) -> dict[str, Any]:
    """Blocked tasks grouped by blocker reason."""
    blocked_tasks = [
        {
            "id": task.id,
            "title": task.title,
            "is_blocked": task.is_blocked,
            "blocker_reason": task.blocker_reason.value if task.blocker_reason else None,
            "blocker_reason_label": task.blocker_reason.label() if task.blocker_reason else None,
            "blocker_details": task.blocker_details,
            "status": task.status.value,
            "work_order_id": task.work_order_id,
            "assigned_to_id": task.assigned_to_id,
        }
        for task in query_blocked_tasks(db, team_id, project_id)
    ]

    by_reason: dict[Optional[str], dict[str, Any]] = {}
    for task in blocked_tasks:
        group = by_reason.setdefault(task["blocker_reason"], {"count": 0, "tasks": []})
        group["count"] += 1
        group["tasks"].append(task["id"])

    return {
        "blocked_tasks": blocked_tasks,
        "by_reason": by_reason,
        "total_blocked": len(blocked_tasks),
    }


def get_resource_insights(db: Session, team: models.Team, project_id: Optional[int] = None) -> dict[str, Any]:
    """Member utilization including estimated hours of pending assigned tasks."""
    members = []
    for user in team.all_users():
        pending_query = (
            db.query(func.coalesce(func.sum(models.Task.estimated_hours), 0.0))
            .filter(models.Task.assigned_to_id == user.id)
            .filter(models.Task.deleted_at.is_(None))
            .filter(models.Task.status.in_((models.TaskStatus.TODO, models.TaskStatus.IN_PROGRESS)))
        )
        if project_id is not None:
            pending_query = pending_query.filter(models.Task.project_id == project_id)
        pending_hours = float(pending_query.scalar() or 0.0)

        capacity = user.capacity_hours
        total_workload = user.workload_hours + pending_hours
        utilization = total_workload / capacity * 100 if capacity > 0 else 0.0
        members.append({
            "user_id": user.id,
            "name": user.name,
            "capacity_hours": capacity,
            "current_workload_hours": user.workload_hours,
            "pending_task_hours": pending_hours,
            "total_workload": total_workload,
            "utilization_rate": round(utilization, 1),
            "status": capacity_status(utilization),
        })

    total_capacity = sum(m["capacity_hours"] for m in members)
    total_workload = sum(m["total_workload"] for m in members)
    team_utilization = total_workload / total_capacity * 100 if total_capacity > 0 else 0.0

    return {
        "members": members,
        "team_summary": {
            "total_capacity_hours": total_capacity,
            "total_workload_hours": total_workload,
            "team_utilization_rate": round(team_utilization, 1),
            "overloaded_members": [m["user_id"] for m in members if m["utilization_rate"] > RESOURCE_OVERLOAD_THRESHOLD],
            "available_members": [m["user_id"] for m in members if m["utilization_rate"] < AVAILABLE_CAPACITY_THRESHOLD],
        },
    }


# ============================================================================
# ProjectInsight generation
# ============================================================================


def detect_overdue_items(db: Session, project: models.Project, today: Optional[date] = None) -> list[ProjectInsight]:
    today = today or date.today()
    insights = []

    tasks = query_overdue_tasks(db, project.team_id, project.id, today)
    work_orders = query_overdue_work_orders(db, project.team_id, project.id, today)
    deliverables = query_overdue_deliverables(db, project.team_id, project.id, today)

    critical = [t for t in tasks if days_overdue(t.due_date, today) >= 7]
    high = [t for t in tasks if 3 <= days_overdue(t.due_date, today) < 7]
    medium = [t for t in tasks if days_overdue(t.due_date, today) < 3]

    if critical:
        insights.append(ProjectInsight(
            type=TYPE_OVERDUE,
            severity=SEVERITY_CRITICAL,
            title="Critical Overdue Tasks",
            description=f"{len(critical)} task(s) are critically overdue (7+ days past due date). Immediate attention required.",
            affected_items=_affected(critical, "task"),
            suggestion="Review these tasks immediately and either reschedule with stakeholders or escalate blockers.",
            confidence=AIConfidence.HIGH,
        ))
    if high:
        insights.append(ProjectInsight(
            type=TYPE_OVERDUE,
            severity=SEVERITY_HIGH,
            title="High Priority Overdue Tasks",
            description=f"{len(high)} task(s) are overdue by 3-7 days. These need attention soon.",
            affected_items=_affected(high, "task"),
            suggestion="Prioritize these tasks and consider reassigning if the current assignee is overloaded.",
            confidence=AIConfidence.HIGH,
        ))
    if medium:
        insights.append(ProjectInsight(
            type=TYPE_OVERDUE,
            severity=SEVERITY_MEDIUM,
            title="Recently Overdue Tasks",
            description=f"{len(medium)} task(s) have recently become overdue (less than 3 days). Quick action can prevent escalation.",
            affected_items=_affected(medium, "task"),
            suggestion="Check task status and update estimates if needed.",
            confidence=AIConfidence.MEDIUM,
        ))

    if work_orders:
        max_days = max(days_overdue(wo.due_date, today) for wo in work_orders)
        if max_days >= 7:
            severity = SEVERITY_CRITICAL
        elif max_days >= 3:
            severity = SEVERITY_HIGH
        else:
            severity = SEVERITY_MEDIUM
        insights.append(ProjectInsight(
            type=TYPE_OVERDUE,
            severity=severity,
            title="Overdue Work Orders",
            description=f"{len(work_orders)} work order(s) are past their due date, with the oldest being {max_days} days overdue.",
            affected_items=_affected(work_orders, "work_order"),
            suggestion="Review work order scope and timeline with stakeholders. Consider breaking down large work orders.",
            confidence=AIConfidence.HIGH,
        ))

    if deliverables:
        insights.append(ProjectInsight(
            type=TYPE_OVERDUE,
            severity=SEVERITY_HIGH,
            title="Overdue Deliverables",
            description=f"{len(deliverables)} deliverable(s) have passed their expected delivery date.",
            affected_items=_affected(deliverables, "deliverable"),
            suggestion="Coordinate with assigned team members to get status updates and revised ETAs.",
            confidence=AIConfidence.HIGH,
        ))

    return insights


def identify_bottlenecks(db: Session, project: models.Project) -> list[ProjectInsight]:
    blocked = query_blocked_tasks(db, project.team_id, project.id, open_only=True)
    if not blocked:
        return []

    grouped: dict[Optional[str], list[models.Task]] = defaultdict(list)
    for task in blocked:
        grouped[task.blocker_reason.value if task.blocker_reason else None].append(task)

    insights = []
    for reason, tasks in grouped.items():
        label = tasks[0].blocker_reason.label() if tasks[0].blocker_reason else "Unknown Reason"
        insights.append(ProjectInsight(
            type=TYPE_BOTTLENECK,
            severity=SEVERITY_HIGH if len(tasks) >= 3 else SEVERITY_MEDIUM,
            title=f"Bottleneck: {label}",
            description=f'{len(tasks)} task(s) are blocked due to "{label}". This is impacting project progress.',
            affected_items=_affected(tasks, "task"),
            suggestion=blocker_suggestion(reason),
            confidence=AIConfidence.HIGH,
        ))

    if len(blocked) >= 5 and len(grouped) >= 2:
        insights.append(ProjectInsight(
            type=TYPE_BOTTLENECK,
            severity=SEVERITY_CRITICAL,
            title="Multiple Bottlenecks Detected",
            description=(
                f"The project has {len(blocked)} blocked tasks across {len(grouped)} different reasons. "
                "This indicates systemic issues that need addressing."
            ),
            affected_items=_affected(blocked, "task"),
            suggestion="Schedule a blocker review meeting with the team to address these issues systematically.",
            confidence=AIConfidence.HIGH,
        ))

    return insights


def generate_resource_reallocation_suggestions(db: Session, project: models.Project) -> list[ProjectInsight]:
    rows = get_team_capacity(db, project.team_id)["team_capacity"]
    if not rows:
        return []

    overloaded = [m for m in rows if m["utilization_percentage"] > RESOURCE_OVERLOAD_THRESHOLD]
    available = [m for m in rows if m["utilization_percentage"] < AVAILABLE_CAPACITY_THRESHOLD]
    insights = []

    if overloaded:
        if available:
            names = ", ".join(m["user_name"] for m in available[:3])
            suggestion = f"Consider redistributing tasks to team members with available capacity: {names}."
        else:
            suggestion = "Consider extending deadlines or bringing in additional resources."

        insights.append(ProjectInsight(
            type=TYPE_RESOURCE,
            severity=SEVERITY_HIGH if len(overloaded) >= 2 else SEVERITY_MEDIUM,
            title="Overloaded Team Members",
            description=(
                f"{len(overloaded)} team member(s) are overloaded with work exceeding their capacity: "
                f"{', '.join(m['user_name'] for m in overloaded)}."
            ),
            affected_items=[
                {
                    "id": m["user_id"],
                    "type": "user",
                    "title": f"{m['user_name']} ({m['utilization_percentage']:.0f}% utilization)",
                }
                for m in overloaded
            ],
            suggestion=suggestion,
            confidence=AIConfidence.MEDIUM,
        ))

    if overloaded and available:
        excess_hours = sum(max(0.0, m["current_workload_hours"] - m["capacity_hours_per_week"]) for m in overloaded)
        available_hours = sum(m["available_capacity"] for m in available)
        if excess_hours > 0 and available_hours >= excess_hours * 0.5:
            insights.append(ProjectInsight(
                type=TYPE_RESOURCE,
                severity=SEVERITY_LOW,
                title="Capacity Reallocation Opportunity",
                description=(
                    f"There are approximately {excess_hours:.0f} excess hours of work and {available_hours:.0f} "
                    "available hours in the team. Redistribution could improve overall efficiency."
                ),
                suggestion=(
                    "Review task assignments and consider reassigning some tasks from overloaded members "
                    "to those with capacity."
                ),
                confidence=AIConfidence.MEDIUM,
            ))

    return insights


def _over_estimate(query, model):
    return (
        query.filter(model.estimated_hours.isnot(None))
        .filter(model.estimated_hours > 0)
        .filter(model.actual_hours.isnot(None))
        .filter(model.actual_hours > model.estimated_hours * (1 + SCOPE_CREEP_THRESHOLD))
    )


def _overage_percent(item) -> float:
    return (item.actual_hours - item.estimated_hours) / item.estimated_hours * 100


def detect_scope_creep(db: Session, project: models.Project) -> list[ProjectInsight]:
    work_orders = _over_estimate(
        _scoped(db, models.WorkOrder, project.team_id, project.id)
        .filter(models.WorkOrder.status != models.WorkOrderStatus.CANCELLED),
        models.WorkOrder,
    ).all()
    if not work_orders:
        return []

    total_estimated = sum(wo.estimated_hours for wo in work_orders)
    total_actual = sum(wo.actual_hours for wo in work_orders)
    overage = (total_actual - total_estimated) / total_estimated * 100 if total_estimated > 0 else 0.0

    if overage >= 50:
        severity = SEVERITY_CRITICAL
    elif overage >= 30:
        severity = SEVERITY_HIGH
    else:
        severity = SEVERITY_MEDIUM

    insights = [ProjectInsight(
        type=TYPE_SCOPE_CREEP,
        severity=severity,
        title="Scope Creep Detected",
        description=(
            f"{len(work_orders)} work order(s) have exceeded their estimated hours by more than 20%. "
            f"Total variance: {total_actual - total_estimated:.0f} hours ({overage:.0f}% over estimate)."
        ),
        affected_items=[
            {"id": wo.id, "type": "work_order", "title": f"{wo.title} (+{_overage_percent(wo):.0f}% over estimate)"}
            for wo in work_orders
        ],
        suggestion=(
            "Review work order scope definitions and acceptance criteria. "
            "Consider implementing change request processes for scope additions."
        ),
        confidence=scope_creep_confidence(len(work_orders)),
    )]

    tasks = _over_estimate(
        _scoped(db, models.Task, project.team_id, project.id)
        .filter(models.Task.status != models.TaskStatus.CANCELLED),
        models.Task,
    ).all()
    if len(tasks) >= 3:
        insights.append(ProjectInsight(
            type=TYPE_SCOPE_CREEP,
            severity=SEVERITY_MEDIUM,
            title="Tasks Exceeding Estimates",
            description=(
                f"{len(tasks)} task(s) have exceeded their estimated hours. This may indicate estimation "
                "issues or scope changes at the task level."
            ),
            affected_items=[
                {"id": t.id, "type": "task", "title": f"{t.title} (+{_overage_percent(t):.0f}% over estimate)"}
                for t in tasks
            ],
            suggestion="Review estimation practices. Consider breaking down large tasks into smaller, more predictable units.",
            confidence=AIConfidence.MEDIUM,
        ))

    return insights


def generate_insights(db: Session, project: models.Project, today: Optional[date] = None) -> list[ProjectInsight]:
    """All insights for a project, most severe first."""
    insights = (
        detect_overdue_items(db, project, today)
        + identify_bottlenecks(db, project)
        + generate_resource_reallocation_suggestions(db, project)
        + detect_scope_creep(db, project)
    )
    insights.sort(key=lambda insight: severity_sort_key(insight.severity))
    logger.info(f"Generated {len(insights)} insight(s) for project {project.id}")
    return insights
