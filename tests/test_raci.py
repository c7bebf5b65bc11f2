"""
Tests for RACI query predicates and RACI assignment updates.
"""
import pytest
from pydantic import ValidationError

from laborobo_core import models
from laborobo_core.context import RequestContext
from laborobo_core.errors import (
    EntityNotFoundError,
    ParameterValidationError,
    PermissionDeniedError,
    UnknownEntityTypeError,
)
from laborobo_core.raci import (
    RACI_OVERWRITE_MESSAGE,
    RACI_UPDATED_MESSAGE,
    entities_where_user_has_role,
    format_raci_response,
    roles_of,
    team_scope,
    update_raci,
)
from laborobo_core.roles import RaciRole
from laborobo_core.schemas import RaciUpdate


class TestRolePredicates:
    """Query predicates agree with in-memory role resolution."""

    def _projects_for(self, db, seed, user, exclude_informed):
        return (
            team_scope(db, models.Project, seed.team.id)
            .filter(entities_where_user_has_role(models.Project, user.id, exclude_informed=exclude_informed))
            .all()
        )

    def test_informed_only_rows_are_excluded_by_default(self, db, seed):
        """An informed-only user sees the project only when informed is included."""
        seed.project.informed_ids = [seed.carol.id]
        db.commit()

        assert self._projects_for(db, seed, seed.carol, exclude_informed=True) == []
        assert self._projects_for(db, seed, seed.carol, exclude_informed=False) == [seed.project]

    def test_informed_user_with_another_role_still_matches(self, db, seed):
        """Being informed does not hide a project where the user is also consulted."""
        seed.project.consulted_ids = [seed.carol.id]
        seed.project.informed_ids = [seed.carol.id]
        db.commit()

        assert self._projects_for(db, seed, seed.carol, exclude_informed=True) == [seed.project]

    def test_excluding_informed_returns_a_subset(self, db, seed):
        """Every row matched with informed excluded also matches with it included."""
        seed.project.consulted_ids = [seed.carol.id]
        seed.work_order.informed_ids = [seed.carol.id, seed.bob.id]
        db.commit()

        for user in (seed.alice, seed.bob, seed.carol, seed.dave):
            for model in (models.Project, models.WorkOrder):
                narrow = {
                    row.id for row in team_scope(db, model, seed.team.id)
                    .filter(entities_where_user_has_role(model, user.id, exclude_informed=True))
                }
                wide = {
                    row.id for row in team_scope(db, model, seed.team.id)
                    .filter(entities_where_user_has_role(model, user.id, exclude_informed=False))
                }
                assert narrow <= wide

    def test_predicate_matches_roles_of(self, db, seed):
        """Rows matched by the predicate are exactly those with a non-informed role."""
        seed.work_order.consulted_ids = [seed.carol.id]
        db.commit()

        for user in (seed.alice, seed.bob, seed.carol, seed.dave):
            matched = {
                wo.id for wo in team_scope(db, models.WorkOrder, seed.team.id)
                .filter(entities_where_user_has_role(models.WorkOrder, user.id))
            }
            expected = {
                wo.id for wo in team_scope(db, models.WorkOrder, seed.team.id)
                if roles_of(wo, user.id) - {RaciRole.INFORMED}
            }
            assert matched == expected

    def test_team_scope_hides_tombstoned_rows(self, db, seed):
        from datetime import datetime

        seed.project.deleted_at = datetime.utcnow()
        db.commit()
        assert team_scope(db, models.Project, seed.team.id).count() == 0


class TestUpdateRaci:
    """Test RACI updates, overwrite confirmation and auditing."""

    def test_filling_empty_slots_needs_no_confirmation(self, db, seed, context):
        """Assigning consulted users to an empty set applies immediately."""
        result = update_raci(
            db, context, "project", seed.project.id,
            RaciUpdate(consulted_ids=[seed.carol.id]),
        )

        assert result["confirmation_required"] is False
        assert result["message"] == RACI_UPDATED_MESSAGE
        assert result["project"]["consulted_ids"] == [str(seed.carol.id)]
        db.refresh(seed.project)
        assert seed.project.consulted_ids == {seed.carol.id}

    def test_overwrite_requires_confirmation(self, db, seed, context):
        """Replacing a non-empty value without confirmation writes nothing."""
        result = update_raci(
            db, context, "project", seed.project.id,
            RaciUpdate(responsible_id=seed.carol.id),
        )

        assert result["confirmation_required"] is True
        assert result["message"] == RACI_OVERWRITE_MESSAGE
        assert result["changes"] == [{"field": "responsible_id", "from": "Bob", "to": "Carol"}]
        db.refresh(seed.project)
        assert seed.project.responsible_id == seed.bob.id
        assert db.query(models.AuditLog).count() == 0

    def test_confirmed_overwrite_applies_and_audits(self, db, seed, context):
        result = update_raci(
            db, context, "project", seed.project.id,
            RaciUpdate(responsible_id=seed.carol.id, confirmed=True),
            ip_address="10.0.0.1",
        )

        assert result["confirmation_required"] is False
        assert result["project"]["responsible_id"] == str(seed.carol.id)
        assert result["project"]["responsible_name"] == "Carol"

        log = db.query(models.AuditLog).one()
        assert log.action == "raci_updated"
        assert log.actor_id == str(seed.alice.id)
        assert log.actor_name == "Alice"
        assert log.target == "Project"
        assert log.target_id == str(seed.project.id)
        assert log.ip_address == "10.0.0.1"
        assert "responsible_id" in log.details

    def test_unchanged_values_write_no_audit_entry(self, db, seed, context):
        """Sending the current values is not an overwrite and logs nothing."""
        result = update_raci(
            db, context, "project", seed.project.id,
            RaciUpdate(accountable_id=seed.alice.id, responsible_id=seed.bob.id),
        )
        assert result["confirmation_required"] is False
        assert db.query(models.AuditLog).count() == 0

    def test_work_order_accountable_mirrors_assignee(self, db, seed, context):
        """Changing a work order's accountable user also reassigns it."""
        result = update_raci(
            db, context, "work_order", seed.work_order.id,
            RaciUpdate(accountable_id=seed.carol.id, confirmed=True),
        )

        db.refresh(seed.work_order)
        assert seed.work_order.accountable_id == seed.carol.id
        assert seed.work_order.assigned_to_id == seed.carol.id
        assert result["work_order"]["title"] == "Design system"
        assert result["work_order"]["accountable_name"] == "Carol"

    def test_reviewer_only_on_work_orders(self, db, seed, context):
        with pytest.raises(ParameterValidationError):
            update_raci(db, context, "project", seed.project.id, RaciUpdate(reviewer_id=seed.carol.id))

        result = update_raci(db, context, "work_order", seed.work_order.id, RaciUpdate(reviewer_id=seed.carol.id))
        assert result["work_order"]["reviewer_id"] == str(seed.carol.id)
        assert result["work_order"]["reviewer_name"] == "Carol"

    def test_unknown_entity_type(self, db, seed, context):
        with pytest.raises(UnknownEntityTypeError):
            update_raci(db, context, "task", 1, RaciUpdate(accountable_id=seed.bob.id))

    def test_entity_from_another_team_is_not_found(self, db, seed, context):
        """Projects outside the caller's team are invisible."""
        with pytest.raises(EntityNotFoundError):
            update_raci(db, context, "project", seed.other_project.id, RaciUpdate(accountable_id=seed.bob.id))

    def test_non_member_is_denied(self, db, seed):
        context = RequestContext(team_id=seed.team.id, user_id=seed.dave.id)
        with pytest.raises(PermissionDeniedError):
            update_raci(db, context, "project", seed.project.id, RaciUpdate(accountable_id=seed.bob.id))

    def test_unknown_user_is_rejected(self, db, seed, context):
        with pytest.raises(EntityNotFoundError):
            update_raci(db, context, "project", seed.project.id, RaciUpdate(consulted_ids=[9999]))

    def test_duplicate_ids_fail_schema_validation(self):
        """Duplicate consulted ids are rejected before reaching the service."""
        with pytest.raises(ValidationError):
            RaciUpdate(consulted_ids=[1, 1])
        with pytest.raises(ValidationError):
            RaciUpdate(informed_ids=[0])


class TestFormatRaciResponse:
    def test_project_response_uses_string_ids_and_names(self, db, seed):
        response = format_raci_response(seed.project)
        assert response["id"] == str(seed.project.id)
        assert response["name"] == "Website Relaunch"
        assert response["accountable_name"] == "Alice"
        assert response["responsible_id"] == str(seed.bob.id)
        assert response["consulted_ids"] is None
        assert response["informed_ids"] is None
        assert "reviewer_id" not in response


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
