"""
Tests for entity type tags and their model dispatch.
"""
import pytest

from laborobo_core import models
from laborobo_core.entity_types import (
    DOCUMENTABLE_TYPES,
    ENTITY_LABELS,
    ENTITY_MODELS,
    EntityType,
    parse_entity_type,
)
from laborobo_core.errors import UnknownEntityTypeError


class TestDispatch:
    """Every entity type must resolve to a model and a label."""

    def test_models_cover_every_type(self):
        assert set(ENTITY_MODELS) == set(EntityType)

    def test_labels_cover_every_type(self):
        assert set(ENTITY_LABELS) == set(EntityType)

    def test_properties(self):
        assert EntityType.WORK_ORDER.model is models.WorkOrder
        assert EntityType.WORK_ORDER.label == "Work order"


class TestParseEntityType:
    @pytest.mark.parametrize("raw,expected", [
        ("task", EntityType.TASK),
        (" Work_Order ", EntityType.WORK_ORDER),
        (EntityType.PARTY, EntityType.PARTY),
    ])
    def test_accepts_known_tags(self, raw, expected):
        assert parse_entity_type(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "invoice"])
    def test_rejects_unknown_tags(self, raw):
        with pytest.raises(UnknownEntityTypeError, match="entity_type must be one of"):
            parse_entity_type(raw)

    def test_allowed_subset(self):
        with pytest.raises(UnknownEntityTypeError, match="entity_type must be one of: project, work_order"):
            parse_entity_type("task", allowed=DOCUMENTABLE_TYPES)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
