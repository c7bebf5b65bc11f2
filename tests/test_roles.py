"""
Unit tests for RACI role resolution and the consulted/informed id set.
"""
from types import SimpleNamespace

import pytest

from laborobo_core.errors import InvalidRaciIdsError, ParameterValidationError
from laborobo_core.raci import role_labels, roles_of
from laborobo_core.roles import RaciIdSet, RaciRole


def make_entity(accountable_id=None, responsible_id=None, consulted=(), informed=()):
    return SimpleNamespace(
        accountable_id=accountable_id,
        responsible_id=responsible_id,
        consulted_ids=RaciIdSet(consulted),
        informed_ids=RaciIdSet(informed),
    )


class TestRaciIdSet:
    """Test validation and set semantics of RaciIdSet."""

    def test_accepts_positive_integers_and_numeric_strings(self):
        """Numeric strings are coerced to ints."""
        ids = RaciIdSet([3, "7", 11])
        assert ids.to_list() == [3, 7, 11]
        assert 7 in ids
        assert len(ids) == 3

    def test_empty_set_is_falsy(self):
        """None and an empty list both build an empty set."""
        assert not RaciIdSet()
        assert not RaciIdSet([])

    @pytest.mark.parametrize("bad", [0, -4, "abc", 2.5, True, None])
    def test_rejects_invalid_ids(self, bad):
        """Zero, negatives, non-numeric values and booleans are invalid."""
        with pytest.raises(InvalidRaciIdsError) as exc_info:
            RaciIdSet([1, bad], field="consulted_ids")
        assert exc_info.value.parameter == "consulted_ids"
        assert bad in exc_info.value.invalid_ids

    def test_rejects_duplicates(self):
        """A user may appear only once in a set."""
        with pytest.raises(InvalidRaciIdsError) as exc_info:
            RaciIdSet([1, 2, "2"], field="informed_ids")
        assert exc_info.value.invalid_ids == [2]
        assert "duplicate" in str(exc_info.value)

    def test_invalid_ids_are_parameter_validation_errors(self):
        """Invalid id sets surface as invalid-argument failures."""
        with pytest.raises(ParameterValidationError):
            RaciIdSet(["x"])
        with pytest.raises(ValueError):
            RaciIdSet([-1])

    def test_equality_ignores_order(self):
        """Sets compare by membership; iteration keeps insertion order."""
        assert RaciIdSet([1, 2, 3]) == RaciIdSet([3, 1, 2])
        assert RaciIdSet([1, 2]) == {1, 2}
        assert list(RaciIdSet([3, 1, 2])) == [3, 1, 2]
        assert hash(RaciIdSet([1, 2])) == hash(RaciIdSet([2, 1]))


class TestRolesOf:
    """Test derivation of a user's roles on an entity."""

    def test_no_roles(self):
        """A user not referenced anywhere holds no roles."""
        entity = make_entity(accountable_id=1, responsible_id=2, consulted=[3], informed=[4])
        assert roles_of(entity, 99) == frozenset()

    def test_each_slot_contributes_its_role(self):
        entity = make_entity(accountable_id=1, responsible_id=2, consulted=[3], informed=[4])
        assert roles_of(entity, 1) == {RaciRole.ACCOUNTABLE}
        assert roles_of(entity, 2) == {RaciRole.RESPONSIBLE}
        assert roles_of(entity, 3) == {RaciRole.CONSULTED}
        assert roles_of(entity, 4) == {RaciRole.INFORMED}

    def test_user_can_hold_all_roles(self):
        """Roles are independent; one user may hold all four."""
        entity = make_entity(accountable_id=5, responsible_id=5, consulted=[5], informed=[5])
        assert roles_of(entity, 5) == set(RaciRole)

    def test_absent_slots_contribute_nothing(self):
        """Empty references never match, even for falsy user ids."""
        entity = make_entity()
        assert roles_of(entity, 1) == frozenset()

    def test_role_labels_follow_canonical_order(self):
        """Labels render accountable, responsible, consulted, informed."""
        labels = role_labels({RaciRole.INFORMED, RaciRole.ACCOUNTABLE, RaciRole.CONSULTED})
        assert labels == ["accountable", "consulted", "informed"]
        assert role_labels([]) == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
