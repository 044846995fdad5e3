"""
talentmatch/insights.py

Natural-language match insights and job-independent resume analysis.

Both follow the same shape: an AI primary that must return a JSON object,
and a deterministic heuristic derived only from already-computed data.
Neither ever raises for backend trouble.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from talentmatch.errors import BackendMalformedResponse
from talentmatch.llm.backends import GenerativeBackend
from talentmatch.llm.fallback import with_fallback
from talentmatch.llm.prompt import build_insights_prompt, build_resume_analysis_prompt
from talentmatch.llm.sanitizer import expect_object, parse_response
from talentmatch.matching.types import MatchBreakdown
from talentmatch.models import (
    Insights,
    JobPosting,
    ResumeAnalysis,
    ResumeRecord,
    SkillGap,
    StructuredProfile,
    insights_from_dict,
    resume_analysis_from_dict,
)

logger = logging.getLogger(__name__)

_MAX_FALLBACK_GAPS = 3


def fallback_insights(breakdown: MatchBreakdown, *, remote: Optional[bool] = None) -> Insights:
    """Deterministic insights computed from the breakdown alone."""
    matched = list(breakdown.matched_skills)
    missing = list(breakdown.missing_skills)
    is_remote = breakdown.remote if remote is None else remote

    strengths: List[str] = []
    if matched:
        strengths.append(f"Strong match with {len(matched)} required skills")
        strengths.append(f"Proficient in: {', '.join(matched[:3])}")
    if breakdown.experience >= 80:
        strengths.append("Meets or exceeds experience requirements")
    if breakdown.education >= 80:
        strengths.append("Educational background aligns with requirements")

    weaknesses: List[str] = []
    if missing:
        weaknesses.append(f"Missing {len(missing)} key skills: {', '.join(missing[:3])}")
    if breakdown.experience < 50:
        weaknesses.append("Experience level below job requirements")
    if breakdown.location < 50 and not is_remote:
        weaknesses.append("Location may not be ideal for this position")

    recommendations: List[str] = []
    if missing:
        recommendations.append(f"Consider learning: {', '.join(missing[:2])}")
    if breakdown.overall < 70:
        recommendations.append("Focus on building relevant experience in this field")
    recommendations.append("Tailor your resume to highlight relevant achievements")
    recommendations.append("Prepare specific examples of your skills in action")

    interview_tips = [
        "Research the company and role thoroughly",
        "Prepare examples that demonstrate your key skills",
        "Ask thoughtful questions about the role and team",
    ]
    if missing:
        interview_tips.append(f"Be ready to discuss your plan for learning: {missing[0]}")

    skill_gaps = [
        SkillGap(
            skill=skill,
            importance=5,
            current_level="Beginner",
            required_level="Intermediate",
            learning_path=f"Consider online courses, tutorials, or hands-on projects to develop {skill} skills",
        )
        for skill in missing[:_MAX_FALLBACK_GAPS]
    ]

    return Insights(
        strengths=strengths,
        weaknesses=weaknesses,
        recommendations=recommendations,
        interview_tips=interview_tips,
        skill_gaps=skill_gaps,
        source="heuristic",
    )


class InsightGenerator:
    def __init__(self, backend: Optional[GenerativeBackend] = None) -> None:
        self._backend = backend

    def generate(self, resume: ResumeRecord, job: JobPosting, breakdown: MatchBreakdown) -> Insights:
        primary = None
        if self._backend is not None:
            primary = lambda: self._generate_with_ai(resume.profile, job, breakdown)  # noqa: E731
        return with_fallback(
            primary,
            lambda: fallback_insights(breakdown, remote=job.location.remote),
            label="match insights",
        )

    def _generate_with_ai(self, profile: StructuredProfile, job: JobPosting, breakdown: MatchBreakdown) -> Insights:
        raw = self._backend.complete(build_insights_prompt(profile=profile, job=job, breakdown=breakdown))
        data = expect_object(parse_response(raw))
        try:
            return insights_from_dict(data)
        except (TypeError, ValueError, AttributeError) as exc:
            raise BackendMalformedResponse(f"unusable insights payload: {type(exc).__name__}") from None


# ---------------------------------------------------------------------------
# Job-independent resume analysis
# ---------------------------------------------------------------------------

# Completeness weights; they sum to 100.
_SKILLS_POINTS = 30
_EXPERIENCE_POINTS = 25
_EDUCATION_POINTS = 15
_PROJECTS_POINTS = 15
_CONTACT_POINTS = 15

_TARGET_SKILL_COUNT = 10


def heuristic_resume_analysis(profile: StructuredProfile) -> ResumeAnalysis:
    strengths: List[str] = []
    weaknesses: List[str] = []
    suggestions: List[str] = []
    score = 0.0

    skills = profile.skill_names()
    score += _SKILLS_POINTS * min(len(skills), _TARGET_SKILL_COUNT) / _TARGET_SKILL_COUNT
    if len(skills) >= _TARGET_SKILL_COUNT:
        strengths.append(f"Broad skill set with {len(skills)} listed skills")
    elif skills:
        suggestions.append("List more of the tools and technologies you have used")
    else:
        weaknesses.append("No skills section detected")
        suggestions.append("Add a dedicated skills section")

    dated = [e for e in profile.experience if e.start_date]
    if dated:
        score += _EXPERIENCE_POINTS
        strengths.append(f"Work history with {len(profile.experience)} documented roles")
    elif profile.experience:
        score += _EXPERIENCE_POINTS * 0.6
        suggestions.append("Add start and end dates to each role")
    else:
        weaknesses.append("No work experience listed")
        suggestions.append("Describe internships, freelance or volunteer work")

    if profile.education:
        score += _EDUCATION_POINTS
        strengths.append("Education details provided")
    else:
        weaknesses.append("Education section missing")

    if profile.projects or profile.certifications:
        score += _PROJECTS_POINTS
        strengths.append("Projects or certifications demonstrate applied skills")
    else:
        suggestions.append("Showcase projects or certifications that prove your skills")

    info = profile.personal_info
    contact_fields = [info.email, info.phone, info.linkedin or info.github]
    present = sum(1 for v in contact_fields if v)
    score += _CONTACT_POINTS * present / len(contact_fields)
    if not info.email and not info.phone:
        weaknesses.append("Contact details missing")
        suggestions.append("Add an email address and phone number")

    return ResumeAnalysis(
        strengths=strengths,
        weaknesses=weaknesses,
        suggestions=suggestions,
        skill_gaps=[],
        overall_score=max(0, min(100, int(score + 0.5))),
        source="heuristic",
    )


class ResumeAnalyzer:
    def __init__(self, backend: Optional[GenerativeBackend] = None) -> None:
        self._backend = backend

    def analyze(self, profile: StructuredProfile) -> ResumeAnalysis:
        primary = None
        if self._backend is not None:
            primary = lambda: self._analyze_with_ai(profile)  # noqa: E731
        return with_fallback(
            primary,
            lambda: heuristic_resume_analysis(profile),
            label="resume analysis",
        )

    def _analyze_with_ai(self, profile: StructuredProfile) -> ResumeAnalysis:
        raw = self._backend.complete(build_resume_analysis_prompt(profile))
        data = expect_object(parse_response(raw))
        try:
            return resume_analysis_from_dict(data)
        except (TypeError, ValueError, AttributeError) as exc:
            raise BackendMalformedResponse(f"unusable analysis payload: {type(exc).__name__}") from None
