from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence, TypeVar

from talentmatch.config import ScoringPolicy
from talentmatch.llm.backends import GenerativeBackend
from talentmatch.models import JobPosting, ResumeRecord

from .scoring import (
    clamp_score,
    education_satisfied,
    education_score,
    experience_gap,
    experience_score,
    location_matches,
    location_score,
    skill_overlap,
    total_experience_years,
)
from .skills import SkillsScorer
from .types import MatchBreakdown, SkillsScore

logger = logging.getLogger(__name__)

T = TypeVar("T")


def weighted_overall(
        skills: int,
        experience: int,
        education: int,
        location: int,
        policy: ScoringPolicy,
) -> int:
    scores = {"skills": skills, "experience": experience, "education": education, "location": location}
    return clamp_score(sum(scores[name] * weight for name, weight in policy.weights().items()))


class MatchAggregator:
    """
    Runs the four dimension scorers and combines them into a MatchBreakdown.

    A scorer that raises is logged and contributes 0; it never aborts the
    match. Overall is the policy-weighted sum, clamped to [0, 100].
    """

    def __init__(
            self,
            backend: Optional[GenerativeBackend] = None,
            *,
            policy: Optional[ScoringPolicy] = None,
            skills_scorer: Optional[SkillsScorer] = None,
    ) -> None:
        self._policy = policy or ScoringPolicy()
        self._skills = skills_scorer or SkillsScorer(backend, policy=self._policy)

    @property
    def policy(self) -> ScoringPolicy:
        return self._policy

    def _safe(self, dimension: str, fn: Callable[[], T], default: T) -> T:
        try:
            return fn()
        except Exception:
            logger.exception("%s scorer failed; using neutral value", dimension)
            return default

    def score(self, resume: ResumeRecord, job: JobPosting) -> MatchBreakdown:
        profile = resume.profile

        skills = self._safe("skills", lambda: self._skills.score(resume, job), SkillsScore(0, "error"))
        experience = self._safe("experience", lambda: experience_score(profile, job.experience), 0)
        education = self._safe("education", lambda: education_score(profile, job.education), 0)
        location = self._safe("location", lambda: location_score(profile, job.location, self._policy), 0)

        # Explainability evidence; each piece degrades to a neutral value on failure.
        job_skills: Sequence[str] = job.skill_names()
        matched, missing, extra = self._safe(
            "skill overlap",
            lambda: skill_overlap(profile.skill_names(), job_skills),
            ([], list(job_skills), []),
        )
        actual_years = self._safe("experience years", lambda: total_experience_years(profile), 0)
        required_years = job.experience.min_years
        satisfied = self._safe(
            "education evidence",
            lambda: (not job.education.required) or education_satisfied(profile, job.education),
            False,
        )
        location_match = self._safe("location evidence", lambda: location_matches(profile, job.location), False)

        return MatchBreakdown(
            overall=weighted_overall(skills.score, experience, education, location, self._policy),
            skills=skills.score,
            experience=experience,
            education=education,
            location=location,
            matched_skills=matched,
            missing_skills=missing,
            extra_skills=extra,
            skills_method=skills.method,
            required_experience_years=required_years,
            actual_experience_years=actual_years,
            experience_gap=experience_gap(required_years, actual_years),
            education_required=job.education.required,
            education_satisfied=satisfied,
            remote=job.location.remote,
            location_match=location_match,
        )
