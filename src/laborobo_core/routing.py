"""Work routing: rank team members for a piece of work by skills and capacity.

Each candidate's combined score weighs skill match and capacity fit equally.
Candidates within 10% of the top score are marked as top candidates, and at
least three are marked whenever that many candidates exist.
"""
import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from .capacity import calculate_capacity_scores
from .models import AIConfidence
from .skills import calculate_skill_scores

logger = logging.getLogger("laborobo-core.routing")

SKILL_WEIGHT = 0.50
CAPACITY_WEIGHT = 0.50
TOP_CANDIDATE_THRESHOLD = 0.10
MIN_CANDIDATES = 3


def determine_confidence(
    score: float,
    skill_match_count: int,
    available_capacity: float,
    required_hours: float,
) -> AIConfidence:
    if score >= 80 and skill_match_count >= 2 and available_capacity >= required_hours:
        return AIConfidence.HIGH
    if score >= 50 and skill_match_count >= 1 and available_capacity > 0:
        return AIConfidence.MEDIUM
    return AIConfidence.LOW


def confidence_rationale(
    confidence: AIConfidence,
    matched_count: int,
    missing_count: int,
    can_fit_work: bool,
    penalty_applied: bool,
) -> str:
    parts = []
    if matched_count == 0:
        parts.append("No matching skills found")
    elif missing_count == 0:
        parts.append(f"All {matched_count} required skills matched")
    else:
        parts.append(f"{matched_count} skills matched, {missing_count} missing")

    parts.append("sufficient capacity available" if can_fit_work else "limited capacity for this work")
    if penalty_applied:
        parts.append("score penalized due to low availability (<20%)")

    return f"{confidence.value.capitalize()} confidence: {'; '.join(parts)}"


def _reasoning(skill_data: dict, capacity_data: dict, estimated_hours: float, confidence: AIConfidence) -> dict[str, Any]:
    skill_matches = [
        {"skill": m["skill_name"], "proficiency": m["proficiency_label"], "weight": m["weight"]}
        for m in skill_data["matched_skills"]
    ]
    return {
        "skill_matches": skill_matches,
        "missing_skills": skill_data["missing_skills"],
        "capacity_analysis": {
            "available_hours": capacity_data["available_capacity"],
            "required_hours": estimated_hours,
            "utilization": 100 - capacity_data["capacity_percentage"],
            "can_fit_work": capacity_data["can_fit_work"],
            "penalty_applied": capacity_data["penalty_applied"],
        },
        "confidence_rationale": confidence_rationale(
            confidence,
            len(skill_matches),
            len(skill_data["missing_skills"]),
            capacity_data["can_fit_work"],
            capacity_data["penalty_applied"],
        ),
    }


def combine_scores(
    skill_scores: dict[int, dict],
    capacity_scores: dict[int, dict],
    estimated_hours: float,
) -> list[dict[str, Any]]:
    """Merge skill and capacity scores. Users missing either score are skipped."""
    candidates = []
    for user_id in dict.fromkeys(list(skill_scores) + list(capacity_scores)):
        skill_data = skill_scores.get(user_id)
        capacity_data = capacity_scores.get(user_id)
        if skill_data is None or capacity_data is None:
            continue

        combined = skill_data["score"] * SKILL_WEIGHT + capacity_data["score"] * CAPACITY_WEIGHT
        confidence = determine_confidence(
            combined,
            len(skill_data["matched_skills"]),
            capacity_data["available_capacity"],
            estimated_hours,
        )
        candidates.append({
            "user_id": user_id,
            "user_name": skill_data["user_name"],
            "skill_score": round(skill_data["score"], 2),
            "capacity_score": round(capacity_data["score"], 2),
            "combined_score": round(combined, 2),
            "confidence": confidence.value,
            "is_top_candidate": False,
            "reasoning": _reasoning(skill_data, capacity_data, estimated_hours, confidence),
        })
    return candidates


def mark_top_candidates(candidates: list[dict[str, Any]], threshold_score: float) -> None:
    """Flag candidates at or above the threshold, then top up to MIN_CANDIDATES in rank order."""
    for candidate in candidates:
        candidate["is_top_candidate"] = candidate["combined_score"] >= threshold_score

    remaining = MIN_CANDIDATES - sum(1 for c in candidates if c["is_top_candidate"])
    for candidate in candidates:
        if remaining <= 0:
            break
        if not candidate["is_top_candidate"]:
            candidate["is_top_candidate"] = True
            remaining -= 1


def recommendation_summary(candidates: list[dict[str, Any]], top_score: float) -> str:
    if not candidates:
        return "No candidates available for routing."

    top_candidates = [c for c in candidates if c["is_top_candidate"]]
    if not top_candidates:
        return "No suitable candidates found."

    names = ", ".join(c["user_name"] for c in top_candidates[:3])
    if len(top_candidates) == 1:
        return f"Recommended: {names} with score {top_score:g}"
    return f"{len(top_candidates)} candidates within 10% of top score ({top_score:g}): {names}"


def calculate_routing(
    db: Session,
    team_id: int,
    required_skills: list[str],
    estimated_hours: float,
) -> dict[str, Any]:
    """
    Rank team members for work needing ``required_skills`` and ``estimated_hours``.

    Returns:
        Dict with candidates (sorted by combined score), top_score,
        threshold_score and recommendation_summary. No skills required
        means no candidates.
    """
    skill_scores = calculate_skill_scores(db, team_id, required_skills)
    capacity_scores = calculate_capacity_scores(db, team_id, estimated_hours)

    candidates = combine_scores(skill_scores, capacity_scores, estimated_hours)
    candidates.sort(key=lambda c: c["combined_score"], reverse=True)

    top_score = candidates[0]["combined_score"] if candidates else 0.0
    threshold_score = top_score * (1 - TOP_CANDIDATE_THRESHOLD)
    mark_top_candidates(candidates, threshold_score)

    logger.info(f"Routed work for team {team_id}: {len(candidates)} candidate(s), top score {top_score}")
    return {
        "candidates": candidates,
        "top_score": round(top_score, 2),
        "threshold_score": round(threshold_score, 2),
        "recommendation_summary": recommendation_summary(candidates, top_score),
    }


def get_top_recommendation(
    db: Session,
    team_id: int,
    required_skills: list[str],
    estimated_hours: float,
) -> Optional[dict[str, Any]]:
    result = calculate_routing(db, team_id, required_skills, estimated_hours)
    return result["candidates"][0] if result["candidates"] else None
