"""Fuzzy skill overlap between a job's skill list and a resume's skills.

Matching is bidirectional substring containment on lowercased, trimmed
names: a job skill matches when some resume skill contains it or is
contained by it, so "java" matches "javascript".
"""

from collections.abc import Iterable


def normalize_skills(skills: Iterable[str]) -> list[str]:
    """Lowercase and trim skill names, dropping blanks and duplicates (order kept)."""
    seen: set[str] = set()
    normalized: list[str] = []
    for skill in skills:
        s = skill.strip().lower()
        # An empty string is a substring of everything
        if s and s not in seen:
            seen.add(s)
            normalized.append(s)
    return normalized


def skills_overlap(skill_a: str, skill_b: str) -> bool:
    """True when either normalized skill name contains the other."""
    return skill_a in skill_b or skill_b in skill_a


def find_matching_skills(job_skills: Iterable[str], resume_skills: Iterable[str]) -> list[str]:
    """Return the job skills (original casing, job order) matched by any resume skill."""
    resume_norm = normalize_skills(resume_skills)
    matched: list[str] = []
    seen: set[str] = set()
    for skill in job_skills:
        key = skill.strip().lower()
        if not key or key in seen:
            continue
        seen.add(key)
        if any(skills_overlap(key, r) for r in resume_norm):
            matched.append(skill.strip())
    return matched


def skill_overlap_score(matching_skills: list[str], job_skills: Iterable[str]) -> float:
    """Fraction of the job's distinct skills that matched. 0.0 when the job lists none."""
    return len(matching_skills) / max(len(normalize_skills(job_skills)), 1)
