"""
Tests for the project insights service.
"""
from datetime import date, timedelta

import pytest

from laborobo_core import models
from laborobo_core.insights import (
    DEFAULT_BLOCKER_SUGGESTION,
    blocker_suggestion,
    detect_overdue_items,
    detect_scope_creep,
    generate_insights,
    generate_resource_reallocation_suggestions,
    get_bottlenecks,
    get_overdue_items,
    get_resource_insights,
    identify_bottlenecks,
)

TODAY = date(2025, 6, 16)


def days_ago(n):
    return TODAY - timedelta(days=n)


class TestOverdueItems:
    """Test overdue detection and severity bucketing."""

    def test_report_rows_carry_severity(self, db, seed, make_task):
        make_task(title="Ancient", due_date=days_ago(10))
        make_task(title="Today", due_date=TODAY)
        make_task(title="Future", due_date=TODAY + timedelta(days=2))
        make_task(title="Done", due_date=days_ago(10), status=models.TaskStatus.DONE)

        report = get_overdue_items(db, seed.team.id, seed.project.id, today=TODAY)

        rows = {row["title"]: row for row in report["tasks"]}
        assert set(rows) == {"Ancient", "Today"}
        assert rows["Ancient"]["days_overdue"] == 10
        assert rows["Ancient"]["severity"] == "critical"
        assert rows["Today"]["days_overdue"] == 0
        assert rows["Today"]["severity"] == "low"

    def test_deliverables_use_expected_delivery_date(self, db, seed):
        db.add(models.Deliverable(
            team_id=seed.team.id,
            work_order_id=seed.work_order.id,
            project_id=seed.project.id,
            title="Brand book",
            delivered_date=days_ago(4),
        ))
        db.commit()

        report = get_overdue_items(db, seed.team.id, today=TODAY)
        assert [d["severity"] for d in report["deliverables"]] == ["high"]

    def test_tasks_bucketed_into_insights(self, db, seed, make_task):
        make_task(title="Critical", due_date=days_ago(8))
        make_task(title="High", due_date=days_ago(4))
        make_task(title="Medium", due_date=days_ago(1))

        insights = detect_overdue_items(db, seed.project, today=TODAY)
        by_title = {i.title: i for i in insights}
        assert by_title["Critical Overdue Tasks"].severity == "critical"
        assert by_title["High Priority Overdue Tasks"].severity == "high"
        assert by_title["Recently Overdue Tasks"].severity == "medium"
        assert by_title["Recently Overdue Tasks"].confidence == models.AIConfidence.MEDIUM

    def test_work_order_severity_from_oldest(self, db, seed):
        seed.work_order.due_date = days_ago(9)
        db.commit()

        insights = detect_overdue_items(db, seed.project, today=TODAY)
        work_order_insight = next(i for i in insights if i.title == "Overdue Work Orders")
        assert work_order_insight.severity == "critical"
        assert "9 days overdue" in work_order_insight.description


class TestBottlenecks:
    """Test blocked-task grouping."""

    def _block(self, make_task, reason, count):
        for n in range(count):
            make_task(title=f"{reason.value} {n}", is_blocked=True, blocker_reason=reason)

    def test_grouped_by_reason(self, db, seed, make_task):
        self._block(make_task, models.BlockerReason.TECHNICAL_ISSUE, 2)
        make_task(title="Mystery", is_blocked=True)

        report = get_bottlenecks(db, seed.team.id, seed.project.id)
        assert report["total_blocked"] == 3
        assert report["by_reason"]["technical_issue"]["count"] == 2
        assert report["by_reason"][None]["count"] == 1

    def test_multiple_bottlenecks(self, db, seed, make_task):
        """Five blocked tasks across two reasons raise a critical insight."""
        self._block(make_task, models.BlockerReason.TECHNICAL_ISSUE, 3)
        self._block(make_task, models.BlockerReason.WAITING_ON_EXTERNAL, 2)

        insights = identify_bottlenecks(db, seed.project)
        by_title = {i.title: i for i in insights}
        assert by_title["Bottleneck: Technical Issue"].severity == "high"
        assert by_title["Bottleneck: Waiting on External"].severity == "medium"
        assert by_title["Multiple Bottlenecks Detected"].severity == "critical"
        assert len(by_title["Multiple Bottlenecks Detected"].affected_items) == 5

    def test_suggestions(self):
        assert blocker_suggestion("waiting_on_approval").startswith("Expedite the approval process")
        assert blocker_suggestion(None) == DEFAULT_BLOCKER_SUGGESTION


class TestResources:
    def test_pending_task_hours_add_to_workload(self, db, seed, make_task):
        make_task(title="Wireframes", assigned_to_id=seed.carol.id, estimated_hours=9)

        report = get_resource_insights(db, seed.team, seed.project.id)
        carol = next(m for m in report["members"] if m["name"] == "Carol")
        assert carol["pending_task_hours"] == 9
        assert carol["utilization_rate"] == 30.0
        assert carol["status"] == "underutilized"
        assert seed.carol.id in report["team_summary"]["available_members"]

    def test_overloaded_member_with_spare_capacity_elsewhere(self, db, seed):
        seed.bob.current_workload_hours = 50
        db.commit()

        insights = generate_resource_reallocation_suggestions(db, seed.project)
        titles = [i.title for i in insights]
        assert titles == ["Overloaded Team Members", "Capacity Reallocation Opportunity"]
        assert "Bob" in insights[0].description
        assert insights[0].suggestion.startswith("Consider redistributing tasks")


class TestScopeCreep:
    def test_work_orders_over_estimate(self, db, seed):
        seed.work_order.actual_hours = 30
        db.commit()

        insights = detect_scope_creep(db, seed.project)
        assert len(insights) == 1
        assert insights[0].severity == "critical"
        assert "+50% over estimate" in insights[0].affected_items[0]["title"]

    def test_within_tolerance(self, db, seed):
        seed.work_order.actual_hours = 24
        db.commit()
        assert detect_scope_creep(db, seed.project) == []


class TestGenerateInsights:
    def test_sorted_most_severe_first(self, db, seed, make_task):
        make_task(title="Late", due_date=days_ago(1))
        make_task(title="Stuck", is_blocked=True, blocker_reason=models.BlockerReason.MISSING_INFORMATION)
        seed.work_order.actual_hours = 40
        db.commit()

        insights = generate_insights(db, seed.project, today=TODAY)
        severities = [i.severity for i in insights]
        assert severities[0] == "critical"
        order = {"critical": 0, "high": 1, "medium": 2, "low": 3}
        assert severities == sorted(severities, key=order.__getitem__)
        assert insights[0].to_dict()["affected_items_count"] == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
