"""Skill matching between required skills and team members' skill profiles."""
from collections import Counter, defaultdict
from typing import Any, Iterable, Optional

from sqlalchemy.orm import Session

from . import models

# Basic, intermediate, advanced
PROFICIENCY_WEIGHTS = {1: 0.33, 2: 0.66, 3: 1.0}

SKILL_GROUPS = {
    "php": ["laravel", "symfony", "wordpress", "drupal"],
    "laravel": ["php", "eloquent", "artisan"],
    "javascript": ["js", "typescript", "ts", "node", "nodejs"],
    "react": ["reactjs", "react.js", "jsx"],
    "vue": ["vuejs", "vue.js"],
    "angular": ["angularjs", "angular.js"],
    "css": ["scss", "sass", "less", "tailwind", "bootstrap"],
    "html": ["html5", "markup"],
    "python": ["django", "flask", "fastapi"],
    "ruby": ["rails", "ruby on rails"],
    "database": ["sql", "mysql", "postgresql", "postgres", "mongodb", "redis"],
    "mysql": ["sql", "database", "mariadb"],
    "postgresql": ["postgres", "sql", "database"],
    "mongodb": ["mongo", "nosql", "database"],
    "devops": ["docker", "kubernetes", "k8s", "aws", "azure", "gcp", "ci/cd"],
    "docker": ["containers", "devops", "kubernetes"],
    "aws": ["amazon web services", "cloud", "ec2", "s3"],
    "api": ["rest", "restful", "graphql", "backend"],
    "testing": ["test", "qa", "phpunit", "jest", "cypress"],
    "frontend": ["ui", "ux", "client-side", "web"],
    "backend": ["server-side", "api", "server"],
    "mobile": ["ios", "android", "react native", "flutter"],
    "design": ["ui", "ux", "figma", "sketch", "adobe"],
}


def _build_related_skills() -> dict[str, list[str]]:
    related: dict[str, list[str]] = defaultdict(list)
    for primary, group in SKILL_GROUPS.items():
        related[primary].extend(group)
        for skill in group:
            related[skill].append(primary)
    return dict(related)


RELATED_SKILLS = _build_related_skills()


def _overlaps(a: str, b: str) -> bool:
    return a == b or a in b or b in a


def find_skill_match(member_skills: Iterable[models.UserSkill], required_skill: str) -> Optional[models.UserSkill]:
    """
    Find the member skill satisfying ``required_skill``.

    Tries an exact (case-insensitive) match, then a substring match in
    either direction, then the synonym groups.
    """
    skills = list(member_skills)
    required = required_skill.strip().lower()

    for skill in skills:
        if skill.skill_name.lower() == required:
            return skill

    for skill in skills:
        name = skill.skill_name.lower()
        if required in name or name in required:
            return skill

    search_terms = RELATED_SKILLS.get(required, []) + [required]
    for skill in skills:
        name = skill.skill_name.lower()
        for term in search_terms:
            if _overlaps(name, term):
                return skill
    return None


def member_skill_score(member: models.User, required_skills: list[str]) -> dict[str, Any]:
    """Weighted share of required skills the member covers, 0-100."""
    matched = []
    missing = []
    total_weight = 0.0

    for required in required_skills:
        match = find_skill_match(member.skills, required)
        if match is None:
            missing.append(required)
            continue
        weight = PROFICIENCY_WEIGHTS.get(match.proficiency, PROFICIENCY_WEIGHTS[1])
        total_weight += weight
        matched.append({
            "skill_name": match.skill_name,
            "proficiency": match.proficiency,
            "proficiency_label": match.proficiency_label,
            "weight": weight,
        })

    score = total_weight / len(required_skills) * 100 if required_skills else 0.0
    return {
        "user_id": member.id,
        "user_name": member.name,
        "score": round(score, 2),
        "matched_skills": matched,
        "missing_skills": missing,
    }


def calculate_skill_scores(db: Session, team_id: int, required_skills: list[str]) -> dict[int, dict[str, Any]]:
    """Skill scores keyed by user id. Empty when no skills are required."""
    if not required_skills:
        return {}
    team = db.query(models.Team).filter(models.Team.id == team_id).first()
    if team is None:
        return {}
    return {member.id: member_skill_score(member, required_skills) for member in team.all_users()}


def get_team_skills_summary(db: Session, team_id: int) -> list[dict[str, Any]]:
    """Skills held across the team with holder counts and average proficiency."""
    team = db.query(models.Team).filter(models.Team.id == team_id).first()
    if team is None:
        return []

    proficiencies: dict[str, list[int]] = defaultdict(list)
    for member in team.all_users():
        for skill in member.skills:
            proficiencies[skill.skill_name].append(skill.proficiency)

    counts = Counter({name: len(levels) for name, levels in proficiencies.items()})
    return [
        {
            "skill_name": name,
            "users_count": count,
            "avg_proficiency": round(sum(proficiencies[name]) / count, 2),
        }
        for name, count in counts.most_common()
    ]
