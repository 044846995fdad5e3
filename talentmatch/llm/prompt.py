"""
talentmatch/llm/prompt.py

Prompt builders for the generative backend.

Every prompt asks for JSON only; responses go through the sanitizer, so
wording can change freely without touching the parsing contract.
"""
from __future__ import annotations

import json
from typing import TYPE_CHECKING, List, Sequence

from talentmatch.core.text_processing import truncate
from talentmatch.models import JobPosting, StructuredProfile

if TYPE_CHECKING:
    from talentmatch.matching.types import MatchBreakdown

SYSTEM_PROMPT = """\
You are a recruiting analyst. You read resumes and job postings and answer with \
strictly valid JSON matching the requested schema. No markdown, no commentary.
Only use facts present in the provided text. Do NOT invent employers, dates, degrees or skills.\
"""

# Upper bound on resume text forwarded to the extraction prompt.
_RESUME_PROMPT_CHARS = 12000

_EXTRACTION_SCHEMA = {
    "personalInfo": {
        "name": "", "email": "", "phone": "", "location": "",
        "linkedin": "", "github": "", "website": "",
    },
    "summary": "",
    "experience": [{
        "company": "", "position": "", "duration": "", "description": "",
        "startDate": "YYYY-MM", "endDate": "YYYY-MM or null", "current": False,
    }],
    "education": [{"institution": "", "degree": "", "field": "", "graduationYear": 0, "gpa": ""}],
    "skills": [{"name": "", "category": "", "level": "", "yearsOfExperience": 0}],
    "certifications": [{"name": "", "issuer": "", "date": "YYYY-MM", "expiryDate": "YYYY-MM or null"}],
    "projects": [{"name": "", "description": "", "technologies": [], "url": ""}],
    "languages": [{"name": "", "proficiency": ""}],
    "achievements": [],
}


def build_extraction_prompt(resume_text: str) -> str:
    schema = json.dumps(_EXTRACTION_SCHEMA, indent=2)
    return f"""\
Extract structured information from the resume below.

Return a JSON object with exactly this shape (use empty strings, empty lists or null when unknown):
{schema}

RESUME:
{truncate(resume_text, _RESUME_PROMPT_CHARS)}\
"""


def build_skills_prompt(resume_skills: Sequence[str], job_skills: Sequence[str]) -> str:
    return f"""\
Compare the candidate's skills with the skills a job requires.
Consider synonyms, abbreviations and closely related technologies (e.g. "JS" and "JavaScript").

CANDIDATE SKILLS: {", ".join(resume_skills)}
REQUIRED SKILLS: {", ".join(job_skills)}

Return a JSON object: {{"score": <integer 0-100>}}
where 100 means every required skill is covered.\
"""


def _profile_summary(profile: StructuredProfile) -> List[str]:
    lines = []
    if profile.summary:
        lines.append(f"- Summary: {truncate(profile.summary, 400)}")
    skills = profile.skill_names()
    lines.append(f"- Skills: {', '.join(skills[:30]) if skills else '(none listed)'}")
    for exp in profile.experience[:5]:
        role = " at ".join(p for p in (exp.position, exp.company) if p)
        if role:
            lines.append(f"- Experience: {role}")
    for edu in profile.education[:3]:
        degree = " in ".join(p for p in (edu.degree, edu.field) if p)
        if degree or edu.institution:
            lines.append(f"- Education: {degree or 'degree'} ({edu.institution or 'unknown institution'})")
    return lines


def build_insights_prompt(
        *,
        profile: StructuredProfile,
        job: JobPosting,
        breakdown: MatchBreakdown,
) -> str:
    candidate = "\n".join(_profile_summary(profile))
    return f"""\
Explain how well this candidate fits the job.

JOB:
- Title: {job.title or "the position"}
- Company: {job.company or "the company"}
- Required skills: {", ".join(job.skill_names()) or "(none listed)"}
- Description: {truncate(job.description, 800)}

CANDIDATE:
{candidate}

SCORES (0-100):
- Overall: {breakdown.overall}
- Skills: {breakdown.skills}
- Experience: {breakdown.experience}
- Education: {breakdown.education}
- Location: {breakdown.location}
- Missing skills: {", ".join(breakdown.missing_skills) or "(none)"}

Return a JSON object:
{{"strengths": [""], "weaknesses": [""], "recommendations": [""], "interviewTips": [""],
  "skillGaps": [{{"skill": "", "importance": 1, "currentLevel": "", "requiredLevel": "", "learningPath": ""}}]}}
importance is an integer from 1 (minor) to 5 (critical).\
"""


def build_resume_analysis_prompt(profile: StructuredProfile) -> str:
    candidate = "\n".join(_profile_summary(profile))
    return f"""\
Review this resume independently of any specific job.

CANDIDATE:
{candidate}
- Projects: {len(profile.projects)}
- Certifications: {len(profile.certifications)}

Return a JSON object:
{{"strengths": [""], "weaknesses": [""], "improvementSuggestions": [""], "skillGaps": [""],
  "overallScore": <integer 0-100>}}\
"""


def build_interview_questions_prompt(
        *,
        profile: StructuredProfile,
        job: JobPosting,
        question_types: Sequence[str],
        count: int,
) -> str:
    candidate = "\n".join(_profile_summary(profile))
    experience = ""
    if job.experience.min_years:
        experience = f"\n- Minimum experience: {job.experience.min_years:g} years"
    return f"""\
Write {count} interview questions tailored to this job and candidate.

JOB:
- Title: {job.title or "Software Developer"}
- Company: {job.company or "the company"}
- Required skills: {", ".join(job.skill_names()) or "(none listed)"}{experience}
- Description: {truncate(job.description, 800)}

CANDIDATE:
{candidate}

QUESTION TYPES: {", ".join(question_types)}

Vary difficulty from beginner to advanced. Give actionable answering tips and follow-up questions.
Return a JSON object:
{{"questions": [{{"id": 1, "type": "technical", "category": "", "question": "",
  "difficulty": "intermediate", "expectedAnswer": "", "tips": [""], "followUpQuestions": [""]}}]}}\
"""


def build_answer_analysis_prompt(question: str, answer: str, job_context: str = "") -> str:
    return f"""\
Assess a candidate's answer to an interview question.
Judge technical accuracy, clarity, relevance, use of concrete examples and problem-solving approach.

QUESTION: {truncate(question, 1000)}
ANSWER: {truncate(answer, 4000)}
JOB CONTEXT: {truncate(job_context, 400) or "General software development role"}

Return a JSON object:
{{"score": <integer 0-100>, "strengths": [""], "weaknesses": [""], "suggestions": [""],
  "keywords": [""], "overallFeedback": "", "improvementAreas": [""]}}\
"""


def build_prep_tips_prompt(job_title: str = "", company: str = "", industry: str = "") -> str:
    return f"""\
Give interview preparation tips for:
- Job title: {job_title or "Software Developer"}
- Company: {company or "Tech Company"}
- Industry: {industry or "Technology"}

Cover technical preparation, company research, behavioral questions, presentation skills and follow-up actions.
Return a JSON object:
{{"tips": [{{"category": "", "title": "", "description": "", "priority": "high|medium|low", "actions": [""]}}]}}\
"""
