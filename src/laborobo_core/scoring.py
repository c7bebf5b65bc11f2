"""
Confidence and severity heuristics.

Pure functions with fixed thresholds; every function accepts zero and empty
inputs and never raises.
"""
from datetime import date
from typing import Iterable, Optional

from .models import AIConfidence, DeliverableType


# Severity labels, most severe first
SEVERITY_CRITICAL = "critical"
SEVERITY_HIGH = "high"
SEVERITY_MEDIUM = "medium"
SEVERITY_LOW = "low"
SEVERITY_UNKNOWN = "unknown"
SEVERITY_HEALTHY = "healthy"

SEVERITY_ORDER = {
    SEVERITY_CRITICAL: 0,
    SEVERITY_HIGH: 1,
    SEVERITY_MEDIUM: 2,
    SEVERITY_LOW: 3,
}

# Capacity status labels
CAPACITY_CRITICALLY_OVERLOADED = "critically_overloaded"
CAPACITY_OVERLOADED = "overloaded"
CAPACITY_OPTIMAL = "optimal"
CAPACITY_AVAILABLE = "available"
CAPACITY_UNDERUTILIZED = "underutilized"


# ============================================================================
# Confidence
# ============================================================================


def confidence_from_points(points: int) -> AIConfidence:
    """Map a supporting-evidence point total to a confidence label."""
    if points >= 4:
        return AIConfidence.HIGH
    if points >= 2:
        return AIConfidence.MEDIUM
    return AIConfidence.LOW


def task_confidence(
    description: Optional[str] = None,
    estimated_hours: Optional[float] = None,
    checklist_items: Optional[list] = None,
    dependencies: Optional[list] = None,
) -> AIConfidence:
    """
    Confidence for an agent-created task.

    Points: description 2, positive estimate 2, checklist 1, dependencies 1.
    """
    points = 0
    if description:
        points += 2
    if estimated_hours is not None and estimated_hours > 0:
        points += 2
    if checklist_items:
        points += 1
    if dependencies:
        points += 1
    return confidence_from_points(points)


def deliverable_confidence(
    description: Optional[str] = None,
    acceptance_criteria: Optional[list] = None,
    deliverable_type: Optional[str] = None,
) -> AIConfidence:
    """
    Confidence for an agent-created deliverable.

    Points: description 2, acceptance criteria 2, a type other than "other" 1.
    """
    points = 0
    if description:
        points += 2
    if acceptance_criteria:
        points += 2
    if deliverable_type and deliverable_type != DeliverableType.OTHER.value:
        points += 1
    return confidence_from_points(points)


def insight_confidence(data_points: int) -> AIConfidence:
    """Confidence for an insights report by number of data points analyzed."""
    if data_points >= 10:
        return AIConfidence.HIGH
    if data_points >= 3:
        return AIConfidence.MEDIUM
    return AIConfidence.LOW


def scope_creep_confidence(work_order_count: int) -> AIConfidence:
    if work_order_count >= 5:
        return AIConfidence.HIGH
    if work_order_count >= 2:
        return AIConfidence.MEDIUM
    return AIConfidence.LOW


# ============================================================================
# Severity
# ============================================================================


def days_overdue(due_date: Optional[date], today: Optional[date] = None) -> Optional[int]:
    """Whole days past due, never negative. None when there is no due date."""
    if due_date is None:
        return None
    today = today or date.today()
    return max(0, (today - due_date).days)


def overdue_severity(days: Optional[int]) -> str:
    """Severity for an item that is ``days`` past due ("unknown" without a due date)."""
    if days is None:
        return SEVERITY_UNKNOWN
    if days >= 7:
        return SEVERITY_CRITICAL
    if days >= 3:
        return SEVERITY_HIGH
    if days >= 1:
        return SEVERITY_MEDIUM
    return SEVERITY_LOW


def overall_severity(overdue_severities: Iterable[str], blocked_count: int = 0, overloaded_count: int = 0) -> str:
    """
    Roll up a project health label.

    Any critical overdue item makes the project critical. Otherwise high
    overdue items, blocked tasks and overloaded members all count as high
    signals: three or more is high, any is medium, none is healthy.
    """
    critical_count = 0
    high_count = 0
    for severity in overdue_severities:
        if severity == SEVERITY_CRITICAL:
            critical_count += 1
        elif severity == SEVERITY_HIGH:
            high_count += 1

    high_count += blocked_count + overloaded_count

    if critical_count > 0:
        return SEVERITY_CRITICAL
    if high_count >= 3:
        return SEVERITY_HIGH
    if high_count > 0:
        return SEVERITY_MEDIUM
    return SEVERITY_HEALTHY


def severity_sort_key(severity: str) -> int:
    return SEVERITY_ORDER.get(severity, len(SEVERITY_ORDER))


def capacity_status(utilization_rate: float) -> str:
    """Capacity label for a utilization percentage."""
    if utilization_rate > 120:
        return CAPACITY_CRITICALLY_OVERLOADED
    if utilization_rate > 100:
        return CAPACITY_OVERLOADED
    if utilization_rate >= 75:
        return CAPACITY_OPTIMAL
    if utilization_rate >= 50:
        return CAPACITY_AVAILABLE
    return CAPACITY_UNDERUTILIZED
