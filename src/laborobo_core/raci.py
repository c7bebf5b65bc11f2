"""RACI role resolution, scoped query predicates and RACI assignment updates."""
import logging
from typing import Any, Iterable, Optional, Union

from sqlalchemy import or_, and_, false
from sqlalchemy.orm import Session

from . import models, schemas
from .context import RequestContext, require_team_member
from .entity_types import EntityType, RACI_ENTITY_TYPES, parse_entity_type
from .errors import EntityNotFoundError, ParameterValidationError
from .roles import RaciIdSet, RaciRole, RACI_ROLE_ORDER

logger = logging.getLogger("laborobo-core.raci")

RaciEntity = Union[models.Project, models.WorkOrder]
RaciModel = Union[type[models.Project], type[models.WorkOrder]]

RACI_OVERWRITE_MESSAGE = "This will overwrite existing RACI assignments. Please confirm to proceed."
RACI_UPDATED_MESSAGE = "RACI assignments updated successfully."

# Single-reference slots whose values are user ids
_USER_REFERENCE_FIELDS = ("accountable_id", "responsible_id", "reviewer_id", "assigned_to_id")
_ID_SET_FIELDS = ("consulted_ids", "informed_ids")


# ============================================================================
# Role resolution
# ============================================================================


def roles_of(entity: RaciEntity, user_id: int) -> frozenset[RaciRole]:
    """
    Return the RACI roles a user holds on a project or work order.

    Single-reference slots match on equality, set slots on membership.
    Absent slots contribute nothing.
    """
    roles = set()
    if entity.accountable_id is not None and entity.accountable_id == user_id:
        roles.add(RaciRole.ACCOUNTABLE)
    if entity.responsible_id is not None and entity.responsible_id == user_id:
        roles.add(RaciRole.RESPONSIBLE)
    if user_id in entity.consulted_ids:
        roles.add(RaciRole.CONSULTED)
    if user_id in entity.informed_ids:
        roles.add(RaciRole.INFORMED)
    return frozenset(roles)


def role_labels(roles: Iterable[RaciRole]) -> list[str]:
    """Render roles as labels in accountable, responsible, consulted, informed order."""
    present = set(roles)
    return [role.value for role in RACI_ROLE_ORDER if role in present]


# ============================================================================
# Query predicates
# ============================================================================


def entities_where_user_has_role(model: RaciModel, user_id: int, exclude_informed: bool = True):
    """
    Build a predicate matching rows where the user holds a qualifying role.

    Accountable, responsible and consulted always qualify. Informed qualifies
    only when ``exclude_informed`` is False; an informed user who also holds
    another role still matches with ``exclude_informed=True``.
    """
    clauses = [
        model.accountable_id == user_id,
        model.responsible_id == user_id,
        model.raci_member_clause(RaciRole.CONSULTED, user_id),
    ]
    if not exclude_informed:
        clauses.append(model.raci_member_clause(RaciRole.INFORMED, user_id))
    return or_(*clauses)


def where_user_is_accountable(model: RaciModel, user_id: int):
    return model.accountable_id == user_id


def where_user_is_responsible(model: RaciModel, user_id: int):
    return model.responsible_id == user_id


def in_review_where_user_is_accountable(user_id: int):
    """Work orders awaiting review by their accountable user."""
    return and_(
        models.WorkOrder.status == models.WorkOrderStatus.IN_REVIEW,
        models.WorkOrder.accountable_id == user_id,
    )


def visible_to(user_id: int):
    """Projects that are public within the team, owned by the user or carry any of the user's roles."""
    return or_(
        models.Project.is_private == false(),
        models.Project.owner_id == user_id,
        entities_where_user_has_role(models.Project, user_id, exclude_informed=False),
    )


def work_order_visible_to(user_id: int):
    """Work orders under a project the user can see, or carrying any of the user's roles."""
    return or_(
        models.WorkOrder.project.has(visible_to(user_id)),
        entities_where_user_has_role(models.WorkOrder, user_id, exclude_informed=False),
    )


def visible_scope(db: Session, model, context: RequestContext):
    """Team-scoped query limited to the projects or work orders the caller may see."""
    query = team_scope(db, model, context.team_id)
    if model is models.Project:
        return query.filter(visible_to(context.user_id))
    if model is models.WorkOrder:
        return query.filter(work_order_visible_to(context.user_id))
    return query


def team_scope(db: Session, model, team_id: int):
    """Query over a team's live (non-tombstoned) rows of ``model``."""
    query = db.query(model).filter(model.team_id == team_id)
    if hasattr(model, "deleted_at"):
        query = query.filter(model.deleted_at.is_(None))
    return query


# ============================================================================
# RACI assignment updates
# ============================================================================


def _get_raci_entity(db: Session, entity_type: EntityType, entity_id: int, context: RequestContext) -> RaciEntity:
    entity = visible_scope(db, entity_type.model, context).filter(entity_type.model.id == entity_id).first()
    if not entity:
        raise EntityNotFoundError(entity_type.label, entity_id, team_id=context.team_id)
    return entity


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, RaciIdSet) and not value)


def _values_differ(old: Any, new: Any) -> bool:
    if isinstance(old, RaciIdSet) or isinstance(new, RaciIdSet):
        old_set = old if isinstance(old, RaciIdSet) else RaciIdSet()
        new_set = new if isinstance(new, RaciIdSet) else RaciIdSet()
        return old_set != new_set
    return old != new


def _display_value(db: Session, field: str, value: Any) -> Any:
    """Resolve user ids to names for change previews."""
    if value is None:
        return None
    if field in _USER_REFERENCE_FIELDS:
        user = db.query(models.User).filter(models.User.id == value).first()
        return user.name if user else str(value)
    if field in _ID_SET_FIELDS:
        ids = list(value)
        if not ids:
            return []
        users = db.query(models.User).filter(models.User.id.in_(ids)).all()
        names = {u.id: u.name for u in users}
        return [names[i] for i in ids if i in names]
    return value


def detect_changes(db: Session, entity: RaciEntity, update_data: dict[str, Any]) -> list[dict[str, Any]]:
    """
    List the fields whose value would change.

    Returns:
        A list of ``{"field", "from", "to"}`` entries with display values
        (user names for references, lists of names for id sets)
    """
    changes = []
    for field, new_value in update_data.items():
        old_value = getattr(entity, field)
        if _values_differ(old_value, new_value):
            changes.append({
                "field": field,
                "from": _display_value(db, field, old_value),
                "to": _display_value(db, field, new_value),
            })
    return changes


def has_existing_value_overwrites(entity: RaciEntity, update_data: dict[str, Any]) -> bool:
    """True when an update replaces a non-empty existing value with a different one."""
    for field, new_value in update_data.items():
        old_value = getattr(entity, field)
        if _is_empty(old_value):
            continue
        if _values_differ(old_value, new_value):
            return True
    return False


def _build_update_data(
    db: Session,
    entity_type: EntityType,
    fields: dict[str, Any],
) -> dict[str, Any]:
    """Normalize the fields present in a RACI payload into model attribute values."""
    update_data: dict[str, Any] = {}

    if "reviewer_id" in fields and entity_type != EntityType.WORK_ORDER:
        raise ParameterValidationError(
            "reviewer_id is only supported on work orders",
            parameter="reviewer_id",
            value=fields["reviewer_id"],
        )

    for field in ("accountable_id", "responsible_id", "reviewer_id"):
        if field in fields:
            update_data[field] = fields[field]
            if field == "accountable_id" and entity_type == EntityType.WORK_ORDER:
                # Work orders mirror the accountable user as the assignee
                update_data["assigned_to_id"] = fields[field]

    for field in _ID_SET_FIELDS:
        if field in fields:
            update_data[field] = RaciIdSet(fields[field] or [], field=field)

    referenced: set[int] = set()
    for field, value in update_data.items():
        if isinstance(value, RaciIdSet):
            referenced.update(value)
        elif value is not None:
            referenced.add(value)
    if referenced:
        found = {row.id for row in db.query(models.User.id).filter(models.User.id.in_(referenced)).all()}
        missing = sorted(referenced - found)
        if missing:
            raise EntityNotFoundError("User", missing[0])

    return update_data


def format_raci_response(entity: RaciEntity) -> dict[str, Any]:
    """Serialize RACI assignments with string ids and resolved names."""
    def _str_id(value: Optional[int]) -> Optional[str]:
        return str(value) if value else None

    def _str_ids(ids: RaciIdSet) -> Optional[list[str]]:
        return [str(i) for i in ids] if ids else None

    response: dict[str, Any] = {"id": str(entity.id)}
    if isinstance(entity, models.WorkOrder):
        response["title"] = entity.title
    else:
        response["name"] = entity.name
    response.update({
        "accountable_id": _str_id(entity.accountable_id),
        "accountable_name": entity.accountable.name if entity.accountable else None,
        "responsible_id": _str_id(entity.responsible_id),
        "responsible_name": entity.responsible.name if entity.responsible else None,
    })
    if isinstance(entity, models.WorkOrder):
        response["reviewer_id"] = _str_id(entity.reviewer_id)
        response["reviewer_name"] = entity.reviewer.name if entity.reviewer else None
    response["consulted_ids"] = _str_ids(entity.consulted_ids)
    response["informed_ids"] = _str_ids(entity.informed_ids)
    return response


def update_raci(
    db: Session,
    context: RequestContext,
    entity_type: Union[str, EntityType],
    entity_id: int,
    payload: schemas.RaciUpdate,
    ip_address: Optional[str] = None,
) -> dict[str, Any]:
    """
    Update RACI assignments on a project or work order.

    Only fields present in the payload are applied. When the update would
    replace a non-empty existing value and ``payload.confirmed`` is not set,
    nothing is written and a confirmation request listing the changes is
    returned instead.

    Args:
        db: Database session
        context: Caller team and user
        entity_type: "project" or "work_order"
        entity_id: Entity ID
        payload: RACI fields to apply
        ip_address: Caller address recorded in the audit log

    Returns:
        ``{"confirmation_required": True, "message", "changes"}`` or
        ``{"confirmation_required": False, "message", "<entity>": {...}}``

    Raises:
        UnknownEntityTypeError: If entity_type is not project or work_order
        PermissionDeniedError: If the caller is not a member of the team
        EntityNotFoundError: If the entity or a referenced user does not exist
        InvalidRaciIdsError: If an id set holds invalid or duplicate ids
    """
    resolved_type = parse_entity_type(entity_type, allowed=RACI_ENTITY_TYPES)
    require_team_member(db, context, action="update_raci")
    entity = _get_raci_entity(db, resolved_type, entity_id, context)

    fields = payload.model_dump(exclude_unset=True)
    confirmed = bool(fields.pop("confirmed", False))
    update_data = _build_update_data(db, resolved_type, fields)

    changes = detect_changes(db, entity, update_data)
    if has_existing_value_overwrites(entity, update_data) and not confirmed:
        logger.info(
            f"RACI update on {resolved_type.value} {entity_id} needs confirmation "
            f"({len(changes)} change(s))"
        )
        return {
            "confirmation_required": True,
            "message": RACI_OVERWRITE_MESSAGE,
            "changes": changes,
        }

    for field, value in update_data.items():
        setattr(entity, field, value)

    if changes:
        actor = db.query(models.User).filter(models.User.id == context.user_id).first()
        db.add(models.AuditLog(
            team_id=context.team_id,
            actor_type="user",
            actor_id=str(context.user_id),
            actor_name=actor.name if actor else None,
            action="raci_updated",
            details=f"RACI fields updated: {', '.join(c['field'] for c in changes)}",
            target="Project" if resolved_type == EntityType.PROJECT else "WorkOrder",
            target_id=str(entity.id),
            ip_address=ip_address,
        ))

    db.commit()
    db.refresh(entity)
    logger.info(f"Updated RACI on {resolved_type.value} {entity_id}: {[c['field'] for c in changes]}")

    return {
        "confirmation_required": False,
        "message": RACI_UPDATED_MESSAGE,
        resolved_type.value: format_raci_response(entity),
    }
