"""
tests/unit/test_prompt.py
"""
from talentmatch.llm.prompt import (
    build_extraction_prompt,
    build_insights_prompt,
    build_resume_analysis_prompt,
    build_skills_prompt,
)
from talentmatch.matching.types import MatchBreakdown
from talentmatch.models import ExperienceEntry, JobPosting, PersonalInfo, SkillEntry, StructuredProfile


def _profile() -> StructuredProfile:
    return StructuredProfile(
        personal_info=PersonalInfo(name="Jane Doe"),
        skills=[SkillEntry(name="Python"), SkillEntry(name="SQL")],
        experience=[ExperienceEntry(company="Initrode", position="Data Engineer")],
    )


def test_extraction_prompt_embeds_resume_and_schema() -> None:
    prompt = build_extraction_prompt("Jane Doe\nSkills: Python")
    assert '"personalInfo"' in prompt
    assert prompt.endswith("Jane Doe\nSkills: Python")


def test_extraction_prompt_truncates_long_resumes() -> None:
    prompt = build_extraction_prompt("x" * 50000)
    assert prompt.count("x") < 20000


def test_skills_prompt_lists_both_sides() -> None:
    prompt = build_skills_prompt(["Python", "SQL"], ["Go"])
    assert "CANDIDATE SKILLS: Python, SQL" in prompt
    assert "REQUIRED SKILLS: Go" in prompt
    assert '{"score"' in prompt


def test_insights_prompt_carries_scores_and_gaps() -> None:
    breakdown = MatchBreakdown(
        overall=72, skills=50, experience=100, education=100, location=50,
        missing_skills=["Go"],
    )
    job = JobPosting(title="Backend Engineer", description="Build services", company="Initech")
    prompt = build_insights_prompt(profile=_profile(), job=job, breakdown=breakdown)

    assert "Overall: 72" in prompt
    assert "Missing skills: Go" in prompt
    assert "Experience: Data Engineer at Initrode" in prompt
    assert "interviewTips" in prompt


def test_resume_analysis_prompt_handles_empty_profile() -> None:
    prompt = build_resume_analysis_prompt(StructuredProfile())
    assert "(none listed)" in prompt
    assert "overallScore" in prompt
