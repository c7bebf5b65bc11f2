"""
Tests for capacity scoring, skill matching and work routing.
"""
import pytest

from laborobo_core import models
from laborobo_core.capacity import (
    base_capacity_score,
    get_team_capacity,
    get_team_capacity_summary,
    member_capacity_score,
)
from laborobo_core.errors import EntityNotFoundError
from laborobo_core.models import AIConfidence
from laborobo_core.routing import calculate_routing, determine_confidence, get_top_recommendation
from laborobo_core.skills import find_skill_match, member_skill_score


class TestCapacityScore:
    """Test the capacity fit curve."""

    @pytest.mark.parametrize("available,estimated,expected", [
        (0, 10, 0.0),
        (-5, 10, 0.0),
        (30, 10, 100.0),
        (20, 10, 100.0),
        (15, 10, 90.0),
        (10, 10, 70.0),
        (5, 10, 35.0),
        (20, 0, 50.0),
        (80, 0, 100.0),
    ])
    def test_base_capacity_score(self, available, estimated, expected):
        assert base_capacity_score(available, estimated) == pytest.approx(expected)

    def test_low_availability_halves_the_score(self, seed):
        """Bob has 4 of 40 hours free, below the 20% threshold."""
        score = member_capacity_score(seed.bob, 2)
        assert score["penalty_applied"] is True
        assert score["score"] == 50.0
        assert score["can_fit_work"] is True

    def test_no_penalty_with_ample_capacity(self, seed):
        score = member_capacity_score(seed.alice, 10)
        assert score["penalty_applied"] is False
        assert score["score"] == 100.0
        assert score["capacity_percentage"] == 75.0


class TestTeamCapacity:
    def test_rows_sorted_by_available_capacity(self, db, seed):
        result = get_team_capacity(db, seed.team.id)

        assert result["team_name"] == "Studio"
        assert result["total_members"] == 3
        assert result["total_available_hours"] == 64
        available = [row["available_capacity"] for row in result["team_capacity"]]
        assert available == sorted(available, reverse=True)
        assert result["team_capacity"][-1]["user_name"] == "Bob"
        assert result["team_capacity"][-1]["has_low_capacity"] is True

    def test_min_available_hours_filter(self, db, seed):
        result = get_team_capacity(db, seed.team.id, min_available_hours=10)
        assert {row["user_name"] for row in result["team_capacity"]} == {"Alice", "Carol"}

    def test_unknown_team(self, db, seed):
        with pytest.raises(EntityNotFoundError):
            get_team_capacity(db, 9999)

    def test_summary_counts_overloaded_members(self, db, seed):
        seed.carol.current_workload_hours = 45
        db.commit()

        summary = get_team_capacity_summary(db, seed.team.id)
        assert summary["total_capacity"] == 110
        assert summary["members_overloaded"] == 1
        assert summary["members_with_capacity"] == 2


class TestSkillMatching:
    """Test exact, partial and synonym skill matching."""

    def test_exact_match_is_case_insensitive(self):
        skills = [models.UserSkill(skill_name="Python", proficiency=2)]
        assert find_skill_match(skills, "python").skill_name == "Python"

    def test_partial_match(self):
        skills = [models.UserSkill(skill_name="React", proficiency=2)]
        assert find_skill_match(skills, "reactjs").skill_name == "React"

    def test_synonym_match(self):
        """Django satisfies a Python requirement through the skill groups."""
        skills = [models.UserSkill(skill_name="Django", proficiency=2)]
        assert find_skill_match(skills, "python").skill_name == "Django"

    def test_no_match(self):
        skills = [models.UserSkill(skill_name="Figma", proficiency=3)]
        assert find_skill_match(skills, "python") is None

    def test_weighted_score(self, seed):
        """Advanced Python (1.0) plus intermediate React (0.66) over two skills."""
        result = member_skill_score(seed.alice, ["python", "react"])
        assert result["score"] == 83.0
        assert result["missing_skills"] == []

        result = member_skill_score(seed.carol, ["python", "react"])
        assert result["score"] == 0.0
        assert result["missing_skills"] == ["python", "react"]


class TestRouting:
    """Test combined candidate ranking."""

    def test_candidates_ranked_by_combined_score(self, db, seed):
        result = calculate_routing(db, seed.team.id, ["python"], 10)

        names = [c["user_name"] for c in result["candidates"]]
        assert names == ["Alice", "Carol", "Bob"]
        assert result["top_score"] == 100.0
        assert result["threshold_score"] == 90.0
        assert result["candidates"][2]["combined_score"] == 23.5

    def test_at_least_three_top_candidates(self, db, seed):
        """Only Alice is within 10% of the top, but three are always marked."""
        result = calculate_routing(db, seed.team.id, ["python"], 10)
        assert all(c["is_top_candidate"] for c in result["candidates"])
        assert result["recommendation_summary"].startswith("3 candidates within 10% of top score")

    def test_high_confidence_needs_two_matches(self, db, seed):
        single = get_top_recommendation(db, seed.team.id, ["python"], 10)
        assert single["confidence"] == "medium"

        double = get_top_recommendation(db, seed.team.id, ["python", "react"], 10)
        assert double["user_name"] == "Alice"
        assert double["confidence"] == "high"
        assert double["reasoning"]["confidence_rationale"].startswith("High confidence: All 2 required skills matched")

    def test_no_required_skills_means_no_candidates(self, db, seed):
        result = calculate_routing(db, seed.team.id, [], 10)
        assert result["candidates"] == []
        assert result["recommendation_summary"] == "No candidates available for routing."

    @pytest.mark.parametrize("score,matches,available,hours,expected", [
        (85, 2, 20, 10, AIConfidence.HIGH),
        (85, 2, 5, 10, AIConfidence.MEDIUM),
        (60, 1, 1, 10, AIConfidence.MEDIUM),
        (60, 0, 20, 10, AIConfidence.LOW),
        (40, 3, 20, 10, AIConfidence.LOW),
    ])
    def test_determine_confidence(self, score, matches, available, hours, expected):
        assert determine_confidence(score, matches, available, hours) == expected


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
