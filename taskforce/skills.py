"""
Skill normalization and matching.

Every component that compares skills goes through this module so that
assignment, learning detection and expertise tracking agree on what
"has the skill" means:

- normalize_skill: lower-case and trim
- skill_matches: case-insensitive substring match in either direction
- has_skill_overlap: any worker skill matches any required skill
- missing_skills: required skills absent from a skill list (exact, case-folded)
- detect_developer_role: keyword heuristic for a worker's role label
"""

from typing import Dict, Iterable, List, Optional

FRONTEND_KEYWORDS = ["react", "vue", "angular", "html", "css", "ui", "ux", "javascript", "typescript"]
BACKEND_KEYWORDS = ["node", "express", "python", "django", "java", "spring", "api", "database", "mongodb", "sql"]
DEVOPS_KEYWORDS = ["docker", "kubernetes", "aws", "azure", "ci/cd", "jenkins", "terraform", "linux"]
AI_KEYWORDS = ["machine learning", "ai", "tensorflow", "pytorch", "nlp", "deep learning", "data science"]
MOBILE_KEYWORDS = ["react native", "flutter", "ios", "android", "swift", "kotlin"]
QA_KEYWORDS = ["testing", "selenium", "jest", "cypress", "qa", "test automation"]

DEFAULT_ROLE = "Software Developer"

# Checked in order; the first family with at least two matching skills wins.
ROLE_PRECEDENCE = [
    ("AI/ML Engineer", AI_KEYWORDS),
    ("Mobile Developer", MOBILE_KEYWORDS),
    ("DevOps Engineer", DEVOPS_KEYWORDS),
    ("QA Engineer", QA_KEYWORDS),
]


def normalize_skill(skill: Optional[str]) -> str:
    return (skill or "").strip().lower()


def normalize_skills(skills: Optional[Iterable[str]]) -> List[str]:
    """Normalize a skill list, dropping blanks and duplicates but keeping order."""
    seen = set()
    result = []
    for skill in skills or []:
        key = normalize_skill(skill)
        if key and key not in seen:
            seen.add(key)
            result.append(key)
    return result


def skill_matches(candidate: Optional[str], required: Optional[str]) -> bool:
    """True when one normalized skill contains the other ("react" ~ "react native")."""
    a = normalize_skill(candidate)
    b = normalize_skill(required)
    if not a or not b:
        return False
    return a in b or b in a


def has_skill_overlap(worker_skills: Optional[Iterable[str]], required: Optional[Iterable[str]]) -> bool:
    required = list(required or [])
    return any(
        skill_matches(skill, req)
        for skill in worker_skills or []
        for req in required
    )


def contains_label(label: Optional[str], fragment: Optional[str]) -> bool:
    """Case-insensitive "label contains fragment"; an empty fragment never matches."""
    needle = normalize_skill(fragment)
    if not needle:
        return False
    return needle in normalize_skill(label)


def missing_skills(current: Optional[Iterable[str]], required: Optional[Iterable[str]]) -> List[str]:
    """Required skills (original spelling) that are not already in current."""
    known = {normalize_skill(s) for s in current or []}
    result = []
    for skill in required or []:
        key = normalize_skill(skill)
        if key and key not in known:
            known.add(key)
            result.append(skill.strip())
    return result


def _count_family(skills: List[str], keywords: List[str]) -> int:
    return sum(1 for s in skills if any(k in s for k in keywords))


def detect_developer_role(skills: Optional[Iterable[str]]) -> str:
    """Derive a role label from a skill list using keyword families."""
    lowered = [normalize_skill(s) for s in skills or []]

    for role, keywords in ROLE_PRECEDENCE:
        if _count_family(lowered, keywords) >= 2:
            return role

    frontend = _count_family(lowered, FRONTEND_KEYWORDS)
    backend = _count_family(lowered, BACKEND_KEYWORDS)
    if frontend >= 2 and backend >= 2:
        return "Full-Stack Developer"
    if frontend >= 2:
        return "Frontend Developer"
    if backend >= 2:
        return "Backend Developer"
    return DEFAULT_ROLE


def strongest_skill(skills: List[str], ratings: Optional[Dict[str, float]] = None) -> Optional[str]:
    """Skill with the highest rating; unrated skills count as 100, first wins ties."""
    if not skills:
        return None
    ratings = ratings or {}
    top = skills[0]
    top_rating = ratings.get(top, 100)
    for skill in skills:
        rating = ratings.get(skill, 100)
        if rating > top_rating:
            top, top_rating = skill, rating
    return top
