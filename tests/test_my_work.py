"""
Tests for My Work lists, metrics, preferences and the Today view.
"""
from datetime import date, datetime, time, timedelta

import pytest

from laborobo_core import models
from laborobo_core.context import RequestContext
from laborobo_core.errors import ParameterValidationError
from laborobo_core.my_work import (
    compute_metrics,
    get_daily_summary,
    get_my_work_data,
    get_preferences,
    get_today_metrics,
    set_preference,
    show_informed,
)


def context_for(seed, user):
    return RequestContext(team_id=seed.team.id, user_id=user.id)


class TestMetrics:
    """Test RACI-scoped counts."""

    def test_counts_projects_and_work_orders(self, db, seed, context):
        """Alice is accountable and Bob responsible on both seeded entities."""
        metrics = compute_metrics(db, context)
        assert metrics == {
            "accountableCount": 2,
            "responsibleCount": 0,
            "awaitingReviewCount": 0,
            "assignedTasksCount": 0,
        }
        assert compute_metrics(db, context_for(seed, seed.bob))["responsibleCount"] == 2

    def test_awaiting_review_and_assigned_tasks(self, db, seed, context, make_task):
        db.add(models.WorkOrder(
            team_id=seed.team.id,
            project_id=seed.project.id,
            title="Copy review",
            accountable_id=seed.alice.id,
            status=models.WorkOrderStatus.IN_REVIEW,
        ))
        db.commit()
        make_task(title="Open", assigned_to_id=seed.alice.id)
        make_task(title="Finished", assigned_to_id=seed.alice.id, status=models.TaskStatus.DONE)

        metrics = compute_metrics(db, context)
        assert metrics["accountableCount"] == 3
        assert metrics["awaitingReviewCount"] == 1
        assert metrics["assignedTasksCount"] == 1

    def test_deleted_rows_are_not_counted(self, db, seed, context):
        seed.work_order.deleted_at = datetime.utcnow()
        db.commit()
        assert compute_metrics(db, context)["accountableCount"] == 1

    def test_other_team_sees_nothing(self, db, seed):
        context = RequestContext(team_id=seed.other_team.id, user_id=seed.alice.id)
        assert compute_metrics(db, context)["accountableCount"] == 0


class TestMyWorkData:
    """Test the My Work payload."""

    def test_rows_carry_string_ids_and_roles(self, db, seed, context):
        data = get_my_work_data(db, context)

        assert data["showInformed"] is False
        project = data["projects"][0]
        assert project["id"] == str(seed.project.id)
        assert project["partyName"] == "Acme"
        assert project["userRaciRoles"] == ["accountable"]
        work_order = data["workOrders"][0]
        assert work_order["projectName"] == "Website Relaunch"
        assert work_order["dueDate"] == seed.work_order.due_date.isoformat()

    def test_informed_only_rows_follow_the_preference(self, db, seed):
        """Carol is only informed, so she sees the project once she opts in."""
        seed.project.informed_ids = [seed.carol.id]
        db.commit()
        context = context_for(seed, seed.carol)

        assert get_my_work_data(db, context)["projects"] == []

        set_preference(db, seed.carol.id, "my_work_show_informed", "true")
        data = get_my_work_data(db, context)
        assert data["showInformed"] is True
        assert [p["userRaciRoles"] for p in data["projects"]] == [["informed"]]

    def test_explicit_flag_overrides_preference(self, db, seed):
        seed.project.informed_ids = [seed.carol.id]
        db.commit()
        set_preference(db, seed.carol.id, "my_work_show_informed", "true")

        data = get_my_work_data(db, context_for(seed, seed.carol), include_informed=False)
        assert data["projects"] == []

    def test_closed_entities_are_hidden(self, db, seed, context, make_task):
        seed.project.status = models.ProjectStatus.COMPLETED
        seed.work_order.status = models.WorkOrderStatus.DELIVERED
        db.commit()
        make_task(title="Cancelled", assigned_to_id=seed.alice.id, status=models.TaskStatus.CANCELLED)

        data = get_my_work_data(db, context)
        assert data["projects"] == []
        assert data["workOrders"] == []
        assert data["tasks"] == []

    def test_tasks_sorted_by_due_date_with_undated_last(self, db, seed, context, make_task):
        today = date.today()
        make_task(title="Undated", assigned_to_id=seed.alice.id)
        make_task(title="Later", assigned_to_id=seed.alice.id, due_date=today + timedelta(days=5))
        make_task(title="Sooner", assigned_to_id=seed.alice.id, due_date=today + timedelta(days=1))

        titles = [t["title"] for t in get_my_work_data(db, context)["tasks"]]
        assert titles == ["Sooner", "Later", "Undated"]


class TestPreferences:
    def test_defaults(self, db, seed):
        prefs = get_preferences(db, seed.alice.id)
        assert set(prefs) == {"work_view", "my_work_subtab", "my_work_show_informed"}
        assert show_informed(db, seed.alice.id) is False

    def test_upsert(self, db, seed):
        set_preference(db, seed.alice.id, "work_view", "board")
        set_preference(db, seed.alice.id, "work_view", "list")
        assert get_preferences(db, seed.alice.id)["work_view"] == "list"
        assert db.query(models.UserPreference).count() == 1

    def test_unknown_key_is_rejected(self, db, seed):
        with pytest.raises(ParameterValidationError, match="Invalid preference key."):
            set_preference(db, seed.alice.id, "theme", "dark")


class TestToday:
    """Test the daily summary and today metrics."""

    def test_all_caught_up(self, db, seed):
        summary = get_daily_summary(db, RequestContext(team_id=seed.other_team.id, user_id=seed.dave.id))
        assert summary["summary"] == "You're all caught up! Check your upcoming deadlines."
        assert summary["priorities"] == ["Review your task list for today", "Check upcoming work orders"]
        assert summary["suggestedFocus"] == "Great progress! Keep up the momentum."
        assert summary["counts"] == {"overdueTasks": 0, "pendingApprovals": 0, "upcomingDeadlines": 0}

    def test_overdue_tasks_take_priority(self, db, seed, context, make_task):
        today = date.today()
        make_task(title="Late", assigned_to_id=seed.alice.id, due_date=today - timedelta(days=2))
        db.add(models.WorkOrder(
            team_id=seed.team.id,
            project_id=seed.project.id,
            title="Needs sign-off",
            accountable_id=seed.alice.id,
            status=models.WorkOrderStatus.IN_REVIEW,
            due_date=today + timedelta(days=1),
        ))
        db.commit()

        summary = get_daily_summary(db, context, today=today)
        assert summary["counts"] == {"overdueTasks": 1, "pendingApprovals": 1, "upcomingDeadlines": 1}
        assert summary["priorities"] == [
            "Address 1 overdue task",
            "Review 1 pending approval",
            "Check 1 upcoming deadline",
        ]
        assert summary["summary"].startswith("You have 1 overdue task")
        assert summary["suggestedFocus"] == "Focus on clearing overdue tasks first."

    def test_pending_approvals_without_overdue(self, db, seed, context):
        db.add(models.WorkOrder(
            team_id=seed.team.id,
            project_id=seed.project.id,
            title="Needs sign-off",
            accountable_id=seed.alice.id,
            status=models.WorkOrderStatus.IN_REVIEW,
        ))
        db.commit()

        summary = get_daily_summary(db, context)
        assert summary["summary"] == "You have 1 approval waiting for review."
        assert summary["suggestedFocus"] == "Start by reviewing pending approvals to unblock work."

    def test_today_metrics(self, db, seed, context, make_task):
        today = date.today()
        noon = datetime.combine(today, time(12, 0))
        make_task(title="Shipped", status=models.TaskStatus.DONE, updated_at=noon)
        make_task(title="Old", status=models.TaskStatus.DONE, updated_at=noon - timedelta(days=30))
        make_task(title="Stuck", is_blocked=True, blocker_reason=models.BlockerReason.TECHNICAL_ISSUE)

        metrics = get_today_metrics(db, context, today=today)
        assert metrics["tasksCompletedToday"] == 1
        assert metrics["tasksCompletedThisWeek"] == 1
        assert metrics["activeBlockers"] == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
