from __future__ import annotations

import math
from typing import List, Optional, Sequence, Tuple

from talentmatch.config import ScoringPolicy
from talentmatch.core.dates import months_between
from talentmatch.core.text_processing import names_overlap
from talentmatch.models import (
    EducationRequirement,
    ExperienceRequirement,
    JobLocation,
    StructuredProfile,
)


def round_half_up(x: float) -> int:
    # Python's round() is banker's rounding; scores round .5 upwards.
    return int(math.floor(x + 0.5))


def clamp_score(x: float) -> int:
    return max(0, min(100, round_half_up(x)))


def total_experience_years(profile: StructuredProfile) -> int:
    """
    Whole years across entries with both a start and an end date.
    Open-ended (current) roles are not counted.
    """
    months = 0
    for exp in profile.experience:
        if exp.start_date and exp.end_date:
            months += max(0, months_between(exp.start_date, exp.end_date))
    return round_half_up(months / 12)


def experience_score(profile: StructuredProfile, requirement: ExperienceRequirement) -> int:
    min_years = requirement.min_years
    if not min_years or min_years <= 0:
        return 100
    years = total_experience_years(profile)
    if years >= min_years:
        return 100
    return clamp_score(100 * years / min_years)


def education_score(profile: StructuredProfile, requirement: EducationRequirement) -> int:
    if not requirement.required:
        return 100
    return 100 if education_satisfied(profile, requirement) else 0


def education_satisfied(profile: StructuredProfile, requirement: EducationRequirement) -> bool:
    wanted = (requirement.degree or "").strip().lower()
    for edu in profile.education:
        degree = (edu.degree or "").strip().lower()
        if degree and wanted in degree:
            return True
    return False


def location_matches(profile: StructuredProfile, location: JobLocation) -> bool:
    """Remote job, or job city and candidate location contain one another."""
    if location.remote:
        return True
    return names_overlap(profile.personal_info.location, location.city)


def location_score(profile: StructuredProfile, location: JobLocation, policy: ScoringPolicy) -> int:
    """
    - remote job => 100
    - either side unknown => policy.unknown_location_score
    - city contained in candidate location (or vice versa) => 100
    - otherwise => policy.location_mismatch_score
    """
    if location_matches(profile, location):
        return 100
    if not (profile.personal_info.location or "").strip() or not (location.city or "").strip():
        return policy.unknown_location_score
    return policy.location_mismatch_score


def lexical_skills_score(
        resume_skills: Sequence[str],
        job_skills: Sequence[str],
        policy: ScoringPolicy,
) -> int:
    """
    Exact case-insensitive match earns 1.0, containment either way earns
    policy.partial_skill_credit. Score is the average credit over job skills.
    """
    if not resume_skills or not job_skills:
        return 0
    candidate = [s.strip().lower() for s in resume_skills if s and s.strip()]
    total = 0.0
    for required in job_skills:
        req = (required or "").strip().lower()
        if not req:
            continue
        if req in candidate:
            total += 1.0
        elif any(names_overlap(req, c) for c in candidate):
            total += policy.partial_skill_credit
    return clamp_score(100 * total / len(job_skills))


def skill_overlap(
        resume_skills: Sequence[str],
        job_skills: Sequence[str],
) -> Tuple[List[str], List[str], List[str]]:
    """(matched job skills, missing job skills, resume skills matching no job skill)."""
    matched = [j for j in job_skills if any(names_overlap(j, r) for r in resume_skills)]
    missing = [j for j in job_skills if j not in matched]
    extra = [r for r in resume_skills if not any(names_overlap(r, j) for j in job_skills)]
    return matched, missing, extra


def experience_gap(required_years: Optional[float], actual_years: int) -> float:
    if not required_years:
        return 0
    return max(0, required_years - actual_years)
