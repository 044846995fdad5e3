"""
talentmatch/interview.py

Interview preparation: tailored questions, feedback on a practice answer,
and preparation tips.

Same contract as insights.py: an AI primary that must return a JSON object,
and a fixed deterministic fallback. Only missing caller input raises.
"""
from __future__ import annotations

import math
from typing import List, Optional, Sequence

from talentmatch.errors import BackendMalformedResponse, MissingInputError
from talentmatch.llm.backends import GenerativeBackend
from talentmatch.llm.fallback import with_fallback
from talentmatch.llm.prompt import (
    build_answer_analysis_prompt,
    build_interview_questions_prompt,
    build_prep_tips_prompt,
)
from talentmatch.llm.sanitizer import expect_object, parse_response
from talentmatch.models import (
    AnswerFeedback,
    InterviewQuestion,
    JobPosting,
    PrepTip,
    StructuredProfile,
    answer_feedback_from_dict,
    interview_questions_from_dict,
    prep_tips_from_dict,
)

QUESTION_TYPES = ("technical", "behavioral", "situational")
DEFAULT_QUESTION_COUNT = 10
MAX_QUESTION_COUNT = 50

_QUESTION_TEMPLATES = {
    "technical": [
        "Explain your experience with [technology] and how you've used it in previous projects.",
        "How would you approach debugging a performance issue in a web application?",
        "Describe the architecture of a system you've designed or worked on.",
        "What's your experience with version control and collaborative development?",
        "How do you stay updated with the latest technologies in your field?",
    ],
    "behavioral": [
        "Tell me about a challenging project you worked on and how you overcame obstacles.",
        "Describe a time when you had to learn a new technology quickly for a project.",
        "Give me an example of how you've worked effectively in a team environment.",
        "Tell me about a time when you had to explain a complex technical concept to a non-technical person.",
        "Describe a situation where you had to meet a tight deadline and how you managed it.",
    ],
    "situational": [
        "How would you handle a situation where a team member is not meeting expectations?",
        "What would you do if you disagreed with a technical decision made by your manager?",
        "How do you prioritize tasks when you have multiple urgent deadlines?",
        "Describe how you would approach mentoring a junior developer.",
        "How would you handle a situation where a project is behind schedule?",
    ],
}


def _normalize_types(question_types: Optional[Sequence[str]]) -> List[str]:
    types = [t.strip().lower() for t in (question_types or []) if t and t.strip()]
    return types or list(QUESTION_TYPES)


def fallback_questions(question_types: Sequence[str], count: int) -> List[InterviewQuestion]:
    """
    Round the requested count up per type and take templates in order.
    Unknown types borrow the technical templates. Ids run 1..count.
    """
    types = _normalize_types(question_types)
    per_type = math.ceil(count / len(types)) if count > 0 else 0
    questions: List[InterviewQuestion] = []
    for qtype in types:
        templates = _QUESTION_TEMPLATES.get(qtype, _QUESTION_TEMPLATES["technical"])
        for i in range(per_type):
            if len(questions) >= count:
                break
            questions.append(InterviewQuestion(
                id=len(questions) + 1,
                type=qtype,
                category=qtype.capitalize(),
                question=templates[i % len(templates)],
                difficulty="intermediate",
                expected_answer="Provide a clear, specific example with measurable results",
                tips=["Use the STAR method", "Be specific with examples", "Show your thought process"],
                follow_up_questions=["Can you elaborate on that?", "What was the outcome?"],
            ))
    return questions


def fallback_answer_feedback() -> AnswerFeedback:
    return AnswerFeedback(
        score=70,
        strengths=["Provided an answer"],
        weaknesses=["Could be more specific"],
        suggestions=["Add more examples", "Be more detailed"],
        keywords=[],
        overall_feedback="Good start, but could be improved",
        improvement_areas=["Specificity", "Examples"],
        source="heuristic",
    )


def fallback_prep_tips() -> List[PrepTip]:
    return [
        PrepTip(
            category="Technical Preparation",
            title="Review Core Technologies",
            description="Brush up on the key technologies mentioned in the job description",
            priority="high",
            actions=["Practice coding problems", "Review documentation", "Prepare examples"],
        ),
        PrepTip(
            category="Company Research",
            title="Research the Company",
            description="Learn about the company's mission, values, and recent news",
            priority="high",
            actions=["Visit company website", "Read recent news", "Check social media"],
        ),
        PrepTip(
            category="Behavioral Questions",
            title="Prepare STAR Examples",
            description="Prepare specific examples using the STAR method",
            priority="medium",
            actions=["Identify key achievements", "Practice storytelling", "Prepare metrics"],
        ),
    ]


class InterviewCoach:
    def __init__(self, backend: Optional[GenerativeBackend] = None) -> None:
        self._backend = backend

    def questions(
            self,
            profile: StructuredProfile,
            job: JobPosting,
            question_types: Optional[Sequence[str]] = None,
            count: int = DEFAULT_QUESTION_COUNT,
    ) -> List[InterviewQuestion]:
        types = _normalize_types(question_types)
        count = max(0, min(count, MAX_QUESTION_COUNT))
        if count == 0:
            return []
        primary = None
        if self._backend is not None:
            primary = lambda: self._questions_with_ai(profile, job, types, count)  # noqa: E731
        return with_fallback(primary, lambda: fallback_questions(types, count), label="interview questions")

    def analyze_answer(self, question: str, answer: str, job_context: str = "") -> AnswerFeedback:
        if not (question or "").strip() or not (answer or "").strip():
            raise MissingInputError("question and answer are required")
        primary = None
        if self._backend is not None:
            primary = lambda: self._feedback_with_ai(question, answer, job_context)  # noqa: E731
        return with_fallback(primary, fallback_answer_feedback, label="answer feedback")

    def prep_tips(self, job_title: str = "", company: str = "", industry: str = "") -> List[PrepTip]:
        primary = None
        if self._backend is not None:
            primary = lambda: self._tips_with_ai(job_title, company, industry)  # noqa: E731
        return with_fallback(primary, fallback_prep_tips, label="prep tips")

    def _questions_with_ai(
            self,
            profile: StructuredProfile,
            job: JobPosting,
            types: List[str],
            count: int,
    ) -> List[InterviewQuestion]:
        prompt = build_interview_questions_prompt(profile=profile, job=job, question_types=types, count=count)
        data = expect_object(parse_response(self._backend.complete(prompt)))
        try:
            return interview_questions_from_dict(data, limit=count)
        except (TypeError, ValueError, AttributeError) as exc:
            raise BackendMalformedResponse(f"unusable questions payload: {type(exc).__name__}") from None

    def _feedback_with_ai(self, question: str, answer: str, job_context: str) -> AnswerFeedback:
        raw = self._backend.complete(build_answer_analysis_prompt(question, answer, job_context))
        data = expect_object(parse_response(raw))
        try:
            return answer_feedback_from_dict(data)
        except (TypeError, ValueError, AttributeError) as exc:
            raise BackendMalformedResponse(f"unusable feedback payload: {type(exc).__name__}") from None

    def _tips_with_ai(self, job_title: str, company: str, industry: str) -> List[PrepTip]:
        raw = self._backend.complete(build_prep_tips_prompt(job_title, company, industry))
        data = expect_object(parse_response(raw))
        try:
            return prep_tips_from_dict(data)
        except (TypeError, ValueError, AttributeError) as exc:
            raise BackendMalformedResponse(f"unusable tips payload: {type(exc).__name__}") from None
