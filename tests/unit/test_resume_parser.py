import json
import logging
from datetime import date

from talentmatch.errors import BackendQuotaExceeded
from talentmatch.models import PersonalInfo, StructuredProfile
from talentmatch.resume_parser import (
    StructuredExtractor,
    extract_contacts,
    merge_contacts,
    rule_based_extract,
)


# ------------------------------------------------------------------
# Rule-based extraction
# ------------------------------------------------------------------

def test_inline_skills_header_only() -> None:
    profile = rule_based_extract("Skills: Python, React, SQL")
    assert profile.skill_names() == ["Python", "React", "SQL"]
    assert profile.experience == []
    assert profile.education == []
    assert profile.projects == []
    assert profile.source == "rules"


def test_sections_and_contacts_from_fixture(load_text) -> None:
    profile = rule_based_extract(load_text("resume_jane.txt"))

    info = profile.personal_info
    assert info.name == "Jane Doe"
    assert info.email == "jane.doe@example.com"
    assert info.phone == "(555) 123-4567"
    assert info.linkedin == "linkedin.com/in/janedoe"
    assert info.github == "github.com/janedoe"

    assert profile.skill_names() == ["Python", "SQL", "Docker"]
    assert len(profile.experience) == 3
    assert [p.name for p in profile.projects] == ["Resume parser in Python"]
    assert [c.name for c in profile.certifications] == ["AWS Certified Developer"]
    assert [lang.name for lang in profile.languages] == ["English"]
    assert profile.education[0].graduation_year == 2015


def test_experience_lines_get_dates(load_text) -> None:
    exp = rule_based_extract(load_text("resume_jane.txt")).experience
    assert (exp[0].start_date, exp[0].end_date) == (date(2019, 1, 1), date(2022, 1, 1))
    assert (exp[1].start_date, exp[1].end_date) == (date(2016, 1, 1), date(2018, 1, 1))
    assert exp[2].current is True
    assert exp[2].end_date is None


def test_headers_are_case_insensitive_with_trailing_dash() -> None:
    text = "TECHNICAL SKILLS -\n• Go | Rust\n- go\nwork experience:\n- Built a compiler"
    profile = rule_based_extract(text)
    assert profile.skill_names() == ["Go", "Rust"]
    assert [e.description for e in profile.experience] == ["Built a compiler"]


def test_name_is_first_non_empty_line() -> None:
    profile = rule_based_extract("\n\n  Jane Doe  \nSkills: Python\nBob Smith\n")
    assert profile.personal_info.name == "Jane Doe"


def test_heading_on_first_line_leaves_name_empty() -> None:
    profile = rule_based_extract("\n\nSkills\nPython\nExperience\nAcme Corp\n")
    assert profile.personal_info.name == ""
    assert profile.skill_names() == ["Python"]


def test_caps_are_enforced() -> None:
    skills = ", ".join(f"skill{i}" for i in range(150))
    projects = "\n".join(f"- project {i}" for i in range(30))
    education = "\n".join(f"Degree {i}" for i in range(15))
    profile = rule_based_extract(f"Skills: {skills}\nProjects\n{projects}\nEducation\n{education}")
    assert len(profile.skills) == 100
    assert len(profile.projects) == 20
    assert len(profile.education) == 10


def test_empty_text_yields_empty_profile() -> None:
    profile = rule_based_extract("")
    assert profile.personal_info.name == ""
    assert profile.skills == []


def test_extract_contacts_missing_fields_are_empty() -> None:
    assert extract_contacts("nothing here") == {"email": "", "phone": "", "linkedin": "", "github": ""}


# ------------------------------------------------------------------
# Merge policy
# ------------------------------------------------------------------

def test_merge_fills_empty_and_rule_value_wins_on_conflict(caplog) -> None:
    ai = StructuredProfile(
        personal_info=PersonalInfo(name="J. Doe", email="wrong@example.com", phone=""),
        source="ai",
    )
    contacts = {"email": "jane@example.com", "phone": "555-123-4567", "linkedin": "", "github": ""}

    with caplog.at_level(logging.INFO, logger="talentmatch.resume_parser"):
        merged = merge_contacts(ai, contacts, name="Jane Doe")

    assert merged.personal_info.email == "jane@example.com"
    assert merged.personal_info.phone == "555-123-4567"
    assert merged.personal_info.name == "J. Doe"  # AI name wins when present
    assert "disagrees" in caplog.text
    assert merged.source == "ai"


def test_merge_uses_rule_name_when_ai_name_empty() -> None:
    merged = merge_contacts(StructuredProfile(), {}, name="Jane Doe")
    assert merged.personal_info.name == "Jane Doe"


# ------------------------------------------------------------------
# StructuredExtractor
# ------------------------------------------------------------------

def _ai_payload():
    return {
        "personalInfo": {"name": "Jane Doe", "email": "", "phone": "", "location": "Austin, TX"},
        "summary": "Backend engineer",
        "experience": [
            {"company": "Acme", "position": "Engineer", "startDate": "2019-01", "endDate": "2022-01"},
            "not an object",
        ],
        "education": [{"institution": "State U", "degree": "Bachelor of Science", "graduationYear": "2015"}],
        "skills": [{"name": "Python", "level": "Expert"}, "SQL", {"category": "no name"}],
        "projects": [{"name": "Parser", "technologies": ["Python"]}],
        "achievements": ["Speaker at PyCon"],
    }


def test_ai_extraction_is_coerced_and_merged(stub_generative, load_text) -> None:
    backend = stub_generative("```json\n" + json.dumps(_ai_payload()) + "\n```")
    profile = StructuredExtractor(backend).extract(load_text("resume_jane.txt"))

    assert profile.source == "ai"
    assert profile.skill_names() == ["Python", "SQL"]
    assert len(profile.experience) == 1
    assert profile.experience[0].start_date == date(2019, 1, 1)
    assert profile.education[0].graduation_year == 2015
    assert profile.personal_info.location == "Austin, TX"
    # regex pass filled the empty AI contact fields
    assert profile.personal_info.email == "jane.doe@example.com"
    assert profile.achievements == ["Speaker at PyCon"]


def test_malformed_ai_output_falls_back_to_rules(stub_generative) -> None:
    profile = StructuredExtractor(stub_generative("I could not read this resume.")).extract("Skills: Python")
    assert profile.source == "rules"
    assert profile.skill_names() == ["Python"]


def test_array_ai_output_falls_back_to_rules(stub_generative) -> None:
    profile = StructuredExtractor(stub_generative('["Python"]')).extract("Skills: Go")
    assert profile.source == "rules"
    assert profile.skill_names() == ["Go"]


def test_quota_error_falls_back_to_rules(stub_generative) -> None:
    backend = stub_generative(BackendQuotaExceeded("quota"))
    profile = StructuredExtractor(backend).extract("Skills: Python")
    assert profile.source == "rules"


def test_empty_text_never_calls_backend(stub_generative) -> None:
    backend = stub_generative("{}")
    StructuredExtractor(backend).extract("   ")
    assert backend.prompts == []
