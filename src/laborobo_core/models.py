"""SQLAlchemy database models."""
from datetime import datetime
from typing import Any, Iterable, Optional
import enum

from sqlalchemy import (
    Column,
    String,
    Text,
    Integer,
    Float,
    Date,
    DateTime,
    ForeignKey,
    Enum,
    CheckConstraint,
    Boolean,
    JSON,
    UniqueConstraint,
    and_,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship, declarative_base

from .roles import RaciIdSet, RaciRole

# Base class for all models
Base = declarative_base()

# JSONB on Postgres, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")

DEFAULT_CAPACITY_HOURS = 40.0


# ============================================================================
# Enums
# ============================================================================


class ProjectStatus(str, enum.Enum):
    """Project status enum."""

    ACTIVE = "active"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class WorkOrderStatus(str, enum.Enum):
    """Work order lifecycle status enum."""

    DRAFT = "draft"
    ACTIVE = "active"
    IN_REVIEW = "in_review"
    APPROVED = "approved"
    DELIVERED = "delivered"
    BLOCKED = "blocked"
    CANCELLED = "cancelled"
    REVISION_REQUESTED = "revision_requested"
    ARCHIVED = "archived"


class TaskStatus(str, enum.Enum):
    """Task lifecycle status enum."""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    IN_REVIEW = "in_review"
    APPROVED = "approved"
    DONE = "done"
    BLOCKED = "blocked"
    CANCELLED = "cancelled"
    REVISION_REQUESTED = "revision_requested"
    ARCHIVED = "archived"


class Priority(str, enum.Enum):
    """Work order priority enum."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class BlockerReason(str, enum.Enum):
    """Reason a task is blocked."""

    WAITING_ON_EXTERNAL = "waiting_on_external"
    MISSING_INFORMATION = "missing_information"
    TECHNICAL_ISSUE = "technical_issue"
    WAITING_ON_APPROVAL = "waiting_on_approval"

    def label(self) -> str:
        return {
            BlockerReason.WAITING_ON_EXTERNAL: "Waiting on External",
            BlockerReason.MISSING_INFORMATION: "Missing Information",
            BlockerReason.TECHNICAL_ISSUE: "Technical Issue",
            BlockerReason.WAITING_ON_APPROVAL: "Waiting on Approval",
        }[self]


class DeliverableType(str, enum.Enum):
    """Deliverable type enum."""

    DOCUMENT = "document"
    DESIGN = "design"
    REPORT = "report"
    CODE = "code"
    OTHER = "other"


class DeliverableStatus(str, enum.Enum):
    """Deliverable status enum."""

    DRAFT = "draft"
    IN_REVIEW = "in_review"
    APPROVED = "approved"
    DELIVERED = "delivered"


class PlaybookType(str, enum.Enum):
    """Playbook type enum."""

    SOP = "sop"
    CHECKLIST = "checklist"
    TEMPLATE = "template"
    ACCEPTANCE_CRITERIA = "acceptance_criteria"


class DocumentType(str, enum.Enum):
    """Document type enum."""

    REFERENCE = "reference"
    ARTIFACT = "artifact"
    EVIDENCE = "evidence"
    TEMPLATE = "template"


class AIConfidence(str, enum.Enum):
    """Confidence label attached to AI-generated output."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# ============================================================================
# Mixins
# ============================================================================


class SoftDeleteMixin:
    """Tombstone column for recoverable deletes."""

    deleted_at = Column(DateTime, nullable=True, index=True)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


class RaciAssignableMixin:
    """Exposes consulted_ids/informed_ids as RaciIdSet over raci_members rows.

    Subclasses define a ``raci_members`` relationship and set
    ``raci_member_class`` to the association model.
    """

    raci_member_class: Any = None

    def _raci_ids(self, role: RaciRole) -> RaciIdSet:
        return RaciIdSet.from_stored(m.user_id for m in self.raci_members if m.role == role)

    def _replace_raci_ids(self, role: RaciRole, ids: Optional[Iterable[Any]]) -> None:
        if isinstance(ids, RaciIdSet):
            id_set = ids
        else:
            id_set = RaciIdSet(ids, field=f"{role.value}_ids")

        # Reuse rows for retained ids so the unique constraint never sees a
        # delete and re-insert of the same (entity, user, role) in one flush
        existing = {m.user_id: m for m in self.raci_members if m.role == role}
        others = [m for m in self.raci_members if m.role != role]
        self.raci_members = others + [
            existing.get(user_id) or self.raci_member_class(user_id=user_id, role=role)
            for user_id in id_set
        ]

    @property
    def consulted_ids(self) -> RaciIdSet:
        return self._raci_ids(RaciRole.CONSULTED)

    @consulted_ids.setter
    def consulted_ids(self, ids: Optional[Iterable[Any]]) -> None:
        self._replace_raci_ids(RaciRole.CONSULTED, ids)

    @property
    def informed_ids(self) -> RaciIdSet:
        return self._raci_ids(RaciRole.INFORMED)

    @informed_ids.setter
    def informed_ids(self, ids: Optional[Iterable[Any]]) -> None:
        self._replace_raci_ids(RaciRole.INFORMED, ids)

    @classmethod
    def raci_member_clause(cls, role: RaciRole, user_id: int):
        """SQL predicate: user holds the given set-valued role on the row."""
        member = cls.raci_member_class
        return cls.raci_members.any(and_(member.user_id == user_id, member.role == role))


def _raci_role_enum():
    return Enum(RaciRole, values_callable=lambda obj: [e.value for e in obj], name="raci_role")


# ============================================================================
# Teams and Users
# ============================================================================


class Team(Base):
    """Team workspace. All work entities are scoped to exactly one team."""

    __tablename__ = "teams"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    owner = relationship("User", foreign_keys=[owner_id])
    memberships = relationship("TeamMember", back_populates="team", cascade="all, delete-orphan")

    def all_users(self) -> list["User"]:
        """Team members plus the owner, without duplicates."""
        users = [m.user for m in self.memberships if m.user is not None]
        if self.owner is not None and all(u.id != self.owner.id for u in users):
            users.append(self.owner)
        return users

    def has_user(self, user_id: int) -> bool:
        return self.owner_id == user_id or any(m.user_id == user_id for m in self.memberships)

    def __repr__(self) -> str:
        return f"<Team {self.id}: {self.name}>"


class User(Base):
    """User account with weekly capacity used for routing and insights."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    capacity_hours_per_week = Column(Float, nullable=True, default=DEFAULT_CAPACITY_HOURS)
    current_workload_hours = Column(Float, nullable=True, default=0.0)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    skills = relationship("UserSkill", back_populates="user", cascade="all, delete-orphan")
    team_memberships = relationship("TeamMember", back_populates="user", cascade="all, delete-orphan")

    @property
    def capacity_hours(self) -> float:
        return self.capacity_hours_per_week if self.capacity_hours_per_week is not None else DEFAULT_CAPACITY_HOURS

    @property
    def workload_hours(self) -> float:
        return self.current_workload_hours or 0.0

    @property
    def available_capacity(self) -> float:
        """Remaining weekly hours, never negative."""
        return max(0.0, self.capacity_hours - self.workload_hours)

    def __repr__(self) -> str:
        return f"<User {self.id}: {self.email}>"


class TeamMember(Base):
    """Junction table linking users to teams."""

    __tablename__ = "team_members"

    id = Column(Integer, primary_key=True, autoincrement=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String(50), nullable=False, default="member")
    joined_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    team = relationship("Team", back_populates="memberships")
    user = relationship("User", back_populates="team_memberships")

    __table_args__ = (
        UniqueConstraint("team_id", "user_id", name="unique_team_user"),
    )


class UserSkill(Base):
    """A skill held by a user with a 1 (basic) to 3 (advanced) proficiency."""

    __tablename__ = "user_skills"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    skill_name = Column(String(100), nullable=False)
    proficiency = Column(Integer, nullable=False, default=1)

    user = relationship("User", back_populates="skills")

    __table_args__ = (
        CheckConstraint("proficiency BETWEEN 1 AND 3", name="valid_proficiency"),
    )

    @property
    def proficiency_label(self) -> str:
        return {1: "Basic", 2: "Intermediate", 3: "Advanced"}.get(self.proficiency, "Basic")


class UserPreference(Base):
    """Per-user key/value preference (e.g. My Work view options)."""

    __tablename__ = "user_preferences"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    key = Column(String(100), nullable=False)
    value = Column(String(255), nullable=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "key", name="unique_user_preference"),
    )


class Party(Base):
    """Client or vendor organization a project is delivered for."""

    __tablename__ = "parties"

    id = Column(Integer, primary_key=True, autoincrement=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


# ============================================================================
# RACI membership rows (consulted / informed)
# ============================================================================


class ProjectRaciMember(Base):
    """Consulted or informed membership on a project."""

    __tablename__ = "project_raci_members"

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(_raci_role_enum(), nullable=False)

    __table_args__ = (
        UniqueConstraint("project_id", "user_id", "role", name="uq_project_raci_member"),
        CheckConstraint("role IN ('consulted', 'informed')", name="project_raci_set_role"),
    )


class WorkOrderRaciMember(Base):
    """Consulted or informed membership on a work order."""

    __tablename__ = "work_order_raci_members"

    id = Column(Integer, primary_key=True, autoincrement=True)
    work_order_id = Column(Integer, ForeignKey("work_orders.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(_raci_role_enum(), nullable=False)

    __table_args__ = (
        UniqueConstraint("work_order_id", "user_id", "role", name="uq_work_order_raci_member"),
        CheckConstraint("role IN ('consulted', 'informed')", name="work_order_raci_set_role"),
    )


# ============================================================================
# Work entities
# ============================================================================


class Project(RaciAssignableMixin, SoftDeleteMixin, Base):
    """Project delivered for a party, decomposed into work orders."""

    __tablename__ = "projects"

    raci_member_class = ProjectRaciMember

    id = Column(Integer, primary_key=True, autoincrement=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    party_id = Column(Integer, ForeignKey("parties.id", ondelete="SET NULL"), nullable=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    # RACI single-reference slots (consulted/informed live in project_raci_members)
    accountable_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    responsible_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(
        Enum(ProjectStatus, values_callable=lambda obj: [e.value for e in obj], name="project_status"),
        nullable=False,
        default=ProjectStatus.ACTIVE,
        index=True,
    )
    start_date = Column(Date, nullable=True)
    target_end_date = Column(Date, nullable=True)
    budget_hours = Column(Float, nullable=True, default=0.0)
    actual_hours = Column(Float, nullable=True, default=0.0)
    progress = Column(Integer, nullable=False, default=0)
    tags = Column(JSONType, nullable=False, default=list)
    is_private = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    team = relationship("Team")
    party = relationship("Party")
    owner = relationship("User", foreign_keys=[owner_id])
    accountable = relationship("User", foreign_keys=[accountable_id])
    responsible = relationship("User", foreign_keys=[responsible_id])
    raci_members = relationship(
        "ProjectRaciMember",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="ProjectRaciMember.id",
    )
    work_orders = relationship("WorkOrder", back_populates="project")

    def __repr__(self) -> str:
        return f"<Project {self.id}: {self.name[:30]}>"


class WorkOrder(RaciAssignableMixin, SoftDeleteMixin, Base):
    """Unit of contracted work within a project, decomposed into tasks."""

    __tablename__ = "work_orders"

    raci_member_class = WorkOrderRaciMember

    id = Column(Integer, primary_key=True, autoincrement=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    assigned_to_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    created_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    accountable_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    responsible_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    reviewer_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(
        Enum(WorkOrderStatus, values_callable=lambda obj: [e.value for e in obj], name="work_order_status"),
        nullable=False,
        default=WorkOrderStatus.DRAFT,
        index=True,
    )
    priority = Column(
        Enum(Priority, values_callable=lambda obj: [e.value for e in obj], name="priority"),
        nullable=False,
        default=Priority.MEDIUM,
    )
    due_date = Column(Date, nullable=True, index=True)
    estimated_hours = Column(Float, nullable=True)
    actual_hours = Column(Float, nullable=True, default=0.0)
    acceptance_criteria = Column(JSONType, nullable=False, default=list)
    sop_attached = Column(Boolean, nullable=False, default=False)
    sop_name = Column(String(255), nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    team = relationship("Team")
    project = relationship("Project", back_populates="work_orders")
    assigned_to = relationship("User", foreign_keys=[assigned_to_id])
    created_by = relationship("User", foreign_keys=[created_by_id])
    accountable = relationship("User", foreign_keys=[accountable_id])
    responsible = relationship("User", foreign_keys=[responsible_id])
    reviewer = relationship("User", foreign_keys=[reviewer_id])
    raci_members = relationship(
        "WorkOrderRaciMember",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="WorkOrderRaciMember.id",
    )
    tasks = relationship("Task", back_populates="work_order", order_by="Task.position_in_work_order")
    deliverables = relationship("Deliverable", back_populates="work_order")

    def __repr__(self) -> str:
        return f"<WorkOrder {self.id}: {self.title[:30]}>"


class Task(SoftDeleteMixin, Base):
    """Actionable step within a work order, assigned to a single user."""

    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    work_order_id = Column(Integer, ForeignKey("work_orders.id", ondelete="CASCADE"), nullable=False, index=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    assigned_to_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    created_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    reviewer_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(
        Enum(TaskStatus, values_callable=lambda obj: [e.value for e in obj], name="task_status"),
        nullable=False,
        default=TaskStatus.TODO,
        index=True,
    )
    due_date = Column(Date, nullable=True, index=True)
    estimated_hours = Column(Float, nullable=True, default=0.0)
    actual_hours = Column(Float, nullable=True, default=0.0)
    checklist_items = Column(JSONType, nullable=False, default=list)  # [{id, text, completed}]
    dependencies = Column(JSONType, nullable=False, default=list)  # [task id]
    is_blocked = Column(Boolean, nullable=False, default=False, index=True)
    blocker_reason = Column(
        Enum(BlockerReason, values_callable=lambda obj: [e.value for e in obj], name="blocker_reason"),
        nullable=True,
    )
    blocker_details = Column(Text, nullable=True)
    position_in_work_order = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    team = relationship("Team")
    work_order = relationship("WorkOrder", back_populates="tasks")
    project = relationship("Project")
    assigned_to = relationship("User", foreign_keys=[assigned_to_id])
    created_by = relationship("User", foreign_keys=[created_by_id])

    def __repr__(self) -> str:
        return f"<Task {self.id}: {self.title[:30]}>"


class Deliverable(SoftDeleteMixin, Base):
    """Output handed to the client for a work order."""

    __tablename__ = "deliverables"

    id = Column(Integer, primary_key=True, autoincrement=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    work_order_id = Column(Integer, ForeignKey("work_orders.id", ondelete="CASCADE"), nullable=False, index=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(
        Enum(DeliverableType, values_callable=lambda obj: [e.value for e in obj], name="deliverable_type"),
        nullable=False,
        default=DeliverableType.OTHER,
    )
    status = Column(
        Enum(DeliverableStatus, values_callable=lambda obj: [e.value for e in obj], name="deliverable_status"),
        nullable=False,
        default=DeliverableStatus.DRAFT,
        index=True,
    )
    version = Column(String(20), nullable=False, default="1.0")
    acceptance_criteria = Column(JSONType, nullable=False, default=list)
    created_date = Column(Date, nullable=True)
    delivered_date = Column(Date, nullable=True)  # Expected delivery date until delivered

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    work_order = relationship("WorkOrder", back_populates="deliverables")
    project = relationship("Project")


class Playbook(SoftDeleteMixin, Base):
    """Reusable SOP, checklist or template."""

    __tablename__ = "playbooks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(
        Enum(PlaybookType, values_callable=lambda obj: [e.value for e in obj], name="playbook_type"),
        nullable=False,
        default=PlaybookType.SOP,
    )
    tags = Column(JSONType, nullable=False, default=list)
    content = Column(JSONType, nullable=True)
    times_applied = Column(Integer, nullable=False, default=0)
    last_used = Column(DateTime, nullable=True)
    ai_generated = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


class Document(SoftDeleteMixin, Base):
    """File attached to a project or work order."""

    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    documentable_type = Column(String(20), nullable=False)  # 'project' or 'work_order'
    documentable_id = Column(Integer, nullable=False)
    folder_id = Column(Integer, nullable=True)
    name = Column(String(255), nullable=False)
    type = Column(
        Enum(DocumentType, values_callable=lambda obj: [e.value for e in obj], name="document_type"),
        nullable=True,
    )
    file_url = Column(String(1024), nullable=True)
    file_size = Column(Integer, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    __table_args__ = (
        CheckConstraint("documentable_type IN ('project', 'work_order')", name="valid_documentable_type"),
    )


# ============================================================================
# Audit and agents
# ============================================================================


class AuditLog(Base):
    """Immutable audit trail row."""

    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    actor_type = Column(String(20), nullable=False)  # 'user' or 'agent'
    actor_id = Column(String(50), nullable=True)
    actor_name = Column(String(255), nullable=True)
    action = Column(String(100), nullable=False, index=True)
    details = Column(Text, nullable=True)
    target = Column(String(100), nullable=True)
    target_id = Column(String(50), nullable=True)
    ip_address = Column(String(45), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)


class AIAgent(Base):
    """AI agent identity (e.g. PM copilot, dispatcher)."""

    __tablename__ = "ai_agents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    agent_type = Column(String(50), nullable=False, default="pm_copilot")
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class AgentConfiguration(Base):
    """Per-team permission flags for an agent."""

    __tablename__ = "agent_configurations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    ai_agent_id = Column(Integer, ForeignKey("ai_agents.id", ondelete="CASCADE"), nullable=False, index=True)
    enabled = Column(Boolean, nullable=False, default=True)

    can_modify_tasks = Column(Boolean, nullable=False, default=False)
    can_create_work_orders = Column(Boolean, nullable=False, default=False)
    can_modify_deliverables = Column(Boolean, nullable=False, default=False)
    can_modify_playbooks = Column(Boolean, nullable=False, default=False)
    can_access_client_data = Column(Boolean, nullable=False, default=False)
    can_send_emails = Column(Boolean, nullable=False, default=False)
    can_access_financial_data = Column(Boolean, nullable=False, default=False)
    tool_permissions = Column(JSONType, nullable=True)  # {tool_name: bool}

    agent = relationship("AIAgent")

    __table_args__ = (
        UniqueConstraint("team_id", "ai_agent_id", name="unique_team_agent_configuration"),
    )

    def has_permission(self, permission: str) -> bool:
        return bool(getattr(self, permission, False))


class AgentActivityLog(Base):
    """Record of an agent run or tool execution."""

    __tablename__ = "agent_activity_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    ai_agent_id = Column(Integer, ForeignKey("ai_agents.id", ondelete="CASCADE"), nullable=True, index=True)
    run_type = Column(String(50), nullable=False)
    input = Column(Text, nullable=True)
    output = Column(Text, nullable=True)
    error = Column(Text, nullable=True)
    tool_calls = Column(JSONType, nullable=True)
    context_accessed = Column(JSONType, nullable=True)
    duration_ms = Column(Integer, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
