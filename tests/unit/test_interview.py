import json

import pytest

from talentmatch.errors import BackendTimeout, MissingInputError
from talentmatch.interview import InterviewCoach, fallback_questions


# ------------------------------------------------------------------
# Deterministic questions
# ------------------------------------------------------------------

def test_fallback_questions_spread_across_types() -> None:
    questions = fallback_questions(["technical", "behavioral", "situational"], 5)

    assert [q.id for q in questions] == [1, 2, 3, 4, 5]
    assert [q.type for q in questions] == ["technical", "technical", "behavioral", "behavioral", "situational"]
    assert questions[0].category == "Technical"
    assert questions[2].question.startswith("Tell me about a challenging project")
    assert questions[0].tips[0] == "Use the STAR method"
    assert questions[0].follow_up_questions == ["Can you elaborate on that?", "What was the outcome?"]


def test_fallback_questions_unknown_type_uses_technical_templates() -> None:
    questions = fallback_questions(["leadership"], 2)
    assert [q.type for q in questions] == ["leadership", "leadership"]
    assert questions[0].category == "Leadership"
    assert questions[1].question.startswith("How would you approach debugging")


def test_fallback_questions_cycle_templates() -> None:
    questions = fallback_questions(["behavioral"], 7)
    assert len(questions) == 7
    assert questions[5].question == questions[0].question


def test_zero_count_returns_no_questions(make_resume, make_job, stub_generative) -> None:
    backend = stub_generative('{"questions": ["Why Python?"]}')
    assert InterviewCoach(backend).questions(make_resume().profile, make_job(), count=0) == []
    assert backend.prompts == []


def test_count_is_capped(make_resume, make_job) -> None:
    questions = InterviewCoach().questions(make_resume().profile, make_job(), count=500)
    assert len(questions) == 50


# ------------------------------------------------------------------
# AI questions
# ------------------------------------------------------------------

def test_ai_questions_are_coerced(make_resume, make_job, stub_generative) -> None:
    payload = {
        "questions": [
            {"id": 7, "type": "Behavioral", "question": "Describe a conflict.", "tips": ["Be honest", 3]},
            "What is a closure?",
            {"type": "technical"},
            42,
        ],
    }
    backend = stub_generative(json.dumps(payload))
    questions = InterviewCoach(backend).questions(
        make_resume(["Python"]).profile, make_job(["Python", "Go"], title="Backend Engineer"), ["technical"], 5,
    )

    assert [(q.id, q.type, q.question) for q in questions] == [
        (7, "behavioral", "Describe a conflict."),
        (2, "technical", "What is a closure?"),
    ]
    assert questions[0].category == "Behavioral"
    assert questions[0].tips == ["Be honest", "3"]
    assert "Backend Engineer" in backend.prompts[0]
    assert "QUESTION TYPES: technical" in backend.prompts[0]


def test_ai_questions_are_trimmed_to_count(make_resume, make_job, stub_generative) -> None:
    payload = {"questions": [f"Question {i}?" for i in range(6)]}
    questions = InterviewCoach(stub_generative(json.dumps(payload))).questions(
        make_resume().profile, make_job(), count=2,
    )
    assert [q.question for q in questions] == ["Question 0?", "Question 1?"]


@pytest.mark.parametrize("reply", [
    "no json",
    '{"questions": []}',
    '{"questions": "ask anything"}',
    '[{"question": "Why?"}]',
    BackendTimeout("slow"),
])
def test_unusable_ai_questions_fall_back(make_resume, make_job, stub_generative, reply) -> None:
    questions = InterviewCoach(stub_generative(reply)).questions(
        make_resume().profile, make_job(), ["situational"], 3,
    )
    assert [q.type for q in questions] == ["situational"] * 3
    assert questions[0].expected_answer == "Provide a clear, specific example with measurable results"


# ------------------------------------------------------------------
# Answer feedback
# ------------------------------------------------------------------

def test_ai_answer_feedback(stub_generative) -> None:
    payload = {
        "score": 140,
        "strengths": ["Clear"],
        "weaknesses": "none",
        "overallFeedback": "Solid answer",
        "improvementAreas": ["Metrics"],
    }
    backend = stub_generative(json.dumps(payload))
    feedback = InterviewCoach(backend).analyze_answer("What is REST?", "An architectural style.")

    assert feedback.source == "ai"
    assert feedback.score == 100
    assert feedback.strengths == ["Clear"]
    assert feedback.weaknesses == []
    assert feedback.overall_feedback == "Solid answer"
    assert feedback.improvement_areas == ["Metrics"]
    assert "General software development role" in backend.prompts[0]


@pytest.mark.parametrize("reply", ['{"score": "great"}', '{"strengths": ["x"]}', "```json\n{oops\n```"])
def test_unusable_answer_feedback_falls_back(stub_generative, reply) -> None:
    feedback = InterviewCoach(stub_generative(reply)).analyze_answer("Q?", "A.")
    assert feedback.source == "heuristic"
    assert feedback.score == 70
    assert feedback.suggestions == ["Add more examples", "Be more detailed"]


def test_answer_feedback_without_backend() -> None:
    feedback = InterviewCoach().analyze_answer("Q?", "A.", job_context="Data engineer")
    assert (feedback.score, feedback.overall_feedback) == (70, "Good start, but could be improved")


@pytest.mark.parametrize("question,answer", [("", "A."), ("Q?", "   "), ("  ", "")])
def test_answer_feedback_requires_question_and_answer(stub_generative, question, answer) -> None:
    backend = stub_generative('{"score": 90}')
    with pytest.raises(MissingInputError):
        InterviewCoach(backend).analyze_answer(question, answer)
    assert backend.prompts == []


# ------------------------------------------------------------------
# Preparation tips
# ------------------------------------------------------------------

def test_ai_prep_tips(stub_generative) -> None:
    payload = {
        "tips": [
            {"category": "Research", "title": "Read the blog", "priority": "HIGH", "actions": ["Skim posts"]},
            {"description": "Sleep well", "priority": "urgent"},
            {"category": "Empty"},
        ],
    }
    backend = stub_generative(json.dumps(payload))
    tips = InterviewCoach(backend).prep_tips("Data Engineer", "Acme", "Retail")

    assert [(t.category, t.title, t.priority) for t in tips] == [
        ("Research", "Read the blog", "high"),
        ("General", "Sleep well", "medium"),
    ]
    assert "Acme" in backend.prompts[0]


@pytest.mark.parametrize("reply", ['{"tips": []}', "nope", BackendTimeout("slow")])
def test_unusable_prep_tips_fall_back(stub_generative, reply) -> None:
    tips = InterviewCoach(stub_generative(reply)).prep_tips()
    assert [t.title for t in tips] == ["Review Core Technologies", "Research the Company", "Prepare STAR Examples"]
    assert [t.priority for t in tips] == ["high", "high", "medium"]
