"""
Unit tests for confidence and severity heuristics.
"""
from datetime import date

import pytest

from laborobo_core.models import AIConfidence
from laborobo_core.scoring import (
    capacity_status,
    days_overdue,
    deliverable_confidence,
    insight_confidence,
    overall_severity,
    overdue_severity,
    task_confidence,
)


class TestConfidence:
    """Test confidence scoring for agent-created items."""

    def test_task_with_nothing_is_low(self):
        assert task_confidence() == AIConfidence.LOW
        assert task_confidence("", 0, [], []) == AIConfidence.LOW

    def test_task_with_description_only_is_medium(self):
        assert task_confidence("Build the header") == AIConfidence.MEDIUM

    def test_task_with_description_and_estimate_is_high(self):
        assert task_confidence("Build the header", 4) == AIConfidence.HIGH

    def test_task_checklist_and_dependencies_add_up(self):
        """Checklist and dependencies are worth one point each."""
        assert task_confidence(None, None, [{"text": "a"}], None) == AIConfidence.LOW
        assert task_confidence(None, None, [{"text": "a"}], [1]) == AIConfidence.MEDIUM

    def test_deliverable_scoring(self):
        assert deliverable_confidence() == AIConfidence.LOW
        assert deliverable_confidence(deliverable_type="other") == AIConfidence.LOW
        assert deliverable_confidence(deliverable_type="design") == AIConfidence.LOW
        assert deliverable_confidence("Spec", deliverable_type="design") == AIConfidence.MEDIUM
        assert deliverable_confidence("Spec", ["Reviewed"]) == AIConfidence.HIGH

    @pytest.mark.parametrize("points,expected", [
        (0, AIConfidence.LOW),
        (2, AIConfidence.LOW),
        (3, AIConfidence.MEDIUM),
        (9, AIConfidence.MEDIUM),
        (10, AIConfidence.HIGH),
    ])
    def test_insight_confidence_thresholds(self, points, expected):
        assert insight_confidence(points) == expected


class TestSeverity:
    """Test overdue and overall severity."""

    def test_days_overdue_is_never_negative(self):
        today = date(2025, 3, 10)
        assert days_overdue(date(2025, 3, 1), today) == 9
        assert days_overdue(date(2025, 3, 10), today) == 0
        assert days_overdue(date(2025, 3, 20), today) == 0
        assert days_overdue(None, today) is None

    @pytest.mark.parametrize("days,expected", [
        (None, "unknown"),
        (0, "low"),
        (1, "medium"),
        (2, "medium"),
        (3, "high"),
        (6, "high"),
        (7, "critical"),
        (30, "critical"),
    ])
    def test_overdue_severity_buckets(self, days, expected):
        assert overdue_severity(days) == expected

    def test_any_critical_item_is_critical(self):
        assert overall_severity(["critical"]) == "critical"
        assert overall_severity(["low", "critical"], blocked_count=0) == "critical"

    def test_high_signals_accumulate(self):
        """High overdue items, blocked tasks and overloaded members all count."""
        assert overall_severity(["high"]) == "medium"
        assert overall_severity(["high"], blocked_count=1, overloaded_count=1) == "high"
        assert overall_severity([], blocked_count=3) == "high"

    def test_nothing_wrong_is_healthy(self):
        assert overall_severity([]) == "healthy"
        assert overall_severity(["medium", "low", "unknown"]) == "healthy"

    @pytest.mark.parametrize("rate,expected", [
        (0, "underutilized"),
        (49.9, "underutilized"),
        (50, "available"),
        (75, "optimal"),
        (100, "optimal"),
        (100.1, "overloaded"),
        (120, "overloaded"),
        (121, "critically_overloaded"),
    ])
    def test_capacity_status(self, rate, expected):
        assert capacity_status(rate) == expected


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
