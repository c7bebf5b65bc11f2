"""Pydantic schemas for request/response validation."""
from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, ConfigDict, field_validator

from .models import (
    ProjectStatus,
    WorkOrderStatus,
    TaskStatus,
    Priority,
    BlockerReason,
)
from .roles import RaciIdSet


def _id_list(value: Any, field: str) -> Optional[list[int]]:
    """Validate a consulted/informed id list through RaciIdSet."""
    if value is None:
        return None
    if isinstance(value, RaciIdSet):
        return value.to_list()
    if isinstance(value, (str, bytes)) or not hasattr(value, "__iter__"):
        raise ValueError(f"{field} must be a list of user ids")
    return RaciIdSet(value, field=field).to_list()


class _RaciIdsMixin(BaseModel):
    """Shared validation for consulted_ids/informed_ids fields."""

    @field_validator("consulted_ids", "informed_ids", mode="before", check_fields=False)
    @classmethod
    def validate_raci_ids(cls, value, info):
        return _id_list(value, info.field_name)


# ============================================================================
# Project Schemas
# ============================================================================


class ProjectCreate(_RaciIdsMixin):
    """Schema for creating a project."""

    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    party_id: Optional[int] = None
    owner_id: Optional[int] = None
    accountable_id: Optional[int] = None
    responsible_id: Optional[int] = None
    consulted_ids: Optional[list[int]] = None
    informed_ids: Optional[list[int]] = None
    status: ProjectStatus = ProjectStatus.ACTIVE
    start_date: Optional[date] = None
    target_end_date: Optional[date] = None
    budget_hours: Optional[float] = Field(None, ge=0)
    tags: list[str] = Field(default_factory=list)
    is_private: bool = False


class ProjectUpdate(BaseModel):
    """Schema for partial project updates. RACI fields go through the RACI endpoint."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    party_id: Optional[int] = None
    status: Optional[ProjectStatus] = None
    start_date: Optional[date] = None
    target_end_date: Optional[date] = None
    budget_hours: Optional[float] = Field(None, ge=0)
    actual_hours: Optional[float] = Field(None, ge=0)
    tags: Optional[list[str]] = None
    is_private: Optional[bool] = None


class ProjectResponse(_RaciIdsMixin):
    """Schema for project responses."""

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    id: int
    team_id: int
    party_id: Optional[int] = None
    owner_id: Optional[int] = None
    accountable_id: Optional[int] = None
    responsible_id: Optional[int] = None
    consulted_ids: list[int] = Field(default_factory=list)
    informed_ids: list[int] = Field(default_factory=list)
    name: str
    description: Optional[str] = None
    status: ProjectStatus
    start_date: Optional[date] = None
    target_end_date: Optional[date] = None
    budget_hours: Optional[float] = None
    actual_hours: Optional[float] = None
    progress: int = 0
    tags: list[str] = Field(default_factory=list)
    is_private: bool = False
    created_at: datetime
    updated_at: datetime


# ============================================================================
# Work Order Schemas
# ============================================================================


class WorkOrderCreate(_RaciIdsMixin):
    """Schema for creating a work order."""

    project_id: int
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    status: WorkOrderStatus = WorkOrderStatus.DRAFT
    priority: Priority = Priority.MEDIUM
    due_date: Optional[date] = None
    estimated_hours: Optional[float] = Field(None, ge=0)
    accountable_id: Optional[int] = None
    responsible_id: Optional[int] = None
    reviewer_id: Optional[int] = None
    consulted_ids: Optional[list[int]] = None
    informed_ids: Optional[list[int]] = None
    acceptance_criteria: list[str] = Field(default_factory=list)


class WorkOrderUpdate(BaseModel):
    """Schema for partial work order updates."""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[WorkOrderStatus] = None
    priority: Optional[Priority] = None
    due_date: Optional[date] = None
    estimated_hours: Optional[float] = Field(None, ge=0)
    actual_hours: Optional[float] = Field(None, ge=0)
    acceptance_criteria: Optional[list[str]] = None


class WorkOrderResponse(_RaciIdsMixin):
    """Schema for work order responses."""

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    id: int
    team_id: int
    project_id: int
    assigned_to_id: Optional[int] = None
    created_by_id: Optional[int] = None
    accountable_id: Optional[int] = None
    responsible_id: Optional[int] = None
    reviewer_id: Optional[int] = None
    consulted_ids: list[int] = Field(default_factory=list)
    informed_ids: list[int] = Field(default_factory=list)
    title: str
    description: Optional[str] = None
    status: WorkOrderStatus
    priority: Priority
    due_date: Optional[date] = None
    estimated_hours: Optional[float] = None
    actual_hours: Optional[float] = None
    acceptance_criteria: list[Any] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


# ============================================================================
# Task Schemas
# ============================================================================


class TaskCreate(BaseModel):
    """Schema for creating a task."""

    work_order_id: int
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    assigned_to_id: Optional[int] = None
    due_date: Optional[date] = None
    estimated_hours: Optional[float] = Field(None, ge=0)
    checklist_items: list[Any] = Field(default_factory=list)
    dependencies: list[int] = Field(default_factory=list)


class TaskUpdate(BaseModel):
    """Schema for partial task updates."""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    assigned_to_id: Optional[int] = None
    due_date: Optional[date] = None
    estimated_hours: Optional[float] = Field(None, ge=0)
    actual_hours: Optional[float] = Field(None, ge=0)
    is_blocked: Optional[bool] = None
    blocker_reason: Optional[BlockerReason] = None
    blocker_details: Optional[str] = None


class TaskResponse(BaseModel):
    """Schema for task responses."""

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    id: int
    team_id: int
    work_order_id: int
    project_id: int
    assigned_to_id: Optional[int] = None
    title: str
    description: Optional[str] = None
    status: TaskStatus
    due_date: Optional[date] = None
    estimated_hours: Optional[float] = None
    actual_hours: Optional[float] = None
    checklist_items: list[Any] = Field(default_factory=list)
    dependencies: list[int] = Field(default_factory=list)
    is_blocked: bool = False
    blocker_reason: Optional[BlockerReason] = None
    blocker_details: Optional[str] = None
    position_in_work_order: int
    created_at: datetime
    updated_at: datetime


# ============================================================================
# RACI Schemas
# ============================================================================


class RaciUpdate(_RaciIdsMixin):
    """Schema for RACI assignment updates. Only fields that are sent are applied."""

    accountable_id: Optional[int] = Field(None, gt=0)
    responsible_id: Optional[int] = Field(None, gt=0)
    reviewer_id: Optional[int] = Field(None, gt=0, description="Work orders only")
    consulted_ids: Optional[list[int]] = None
    informed_ids: Optional[list[int]] = None
    confirmed: bool = Field(False, description="Confirm overwriting existing assignments")


# ============================================================================
# My Work Schemas
# ============================================================================


class MyWorkMetrics(BaseModel):
    """RACI-scoped workload counts for the current user."""

    model_config = ConfigDict(populate_by_name=True)

    accountable_count: int = Field(..., alias="accountableCount")
    responsible_count: int = Field(..., alias="responsibleCount")
    awaiting_review_count: int = Field(..., alias="awaitingReviewCount")
    assigned_tasks_count: int = Field(..., alias="assignedTasksCount")


class PreferenceUpdate(BaseModel):
    """Schema for updating a single user preference."""

    key: str = Field(..., min_length=1, max_length=100)
    value: str = Field(..., max_length=255)


# ============================================================================
# Agent Tool Schemas
# ============================================================================


class ToolExecuteRequest(BaseModel):
    """Schema for executing an agent tool through the gateway."""

    agent_id: int
    params: dict[str, Any] = Field(default_factory=dict)


class ToolInfo(BaseModel):
    """Schema describing an available tool."""

    name: str
    description: str
    category: str
    required_permissions: list[str] = []
    parameters: dict[str, dict[str, Any]]


class ToolResultResponse(BaseModel):
    """Schema for gateway results."""

    status: str
    data: Optional[dict[str, Any]] = None
    error: Optional[str] = None
    execution_time_ms: Optional[float] = None
