from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Dict, List, Optional, Tuple

from talentmatch.core.dates import find_date_range
from talentmatch.core.text_processing import (
    dedupe_first_seen,
    normalize_text,
    split_list_items,
    strip_bullet,
)
from talentmatch.errors import BackendMalformedResponse
from talentmatch.llm.backends import GenerativeBackend
from talentmatch.llm.fallback import with_fallback
from talentmatch.llm.prompt import build_extraction_prompt
from talentmatch.llm.sanitizer import expect_object, parse_response
from talentmatch.models import (
    CertificationEntry,
    EducationEntry,
    ExperienceEntry,
    LanguageEntry,
    PersonalInfo,
    ProjectEntry,
    SkillEntry,
    StructuredProfile,
)

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
_PHONE_RE = re.compile(r"(\+?\d{1,3}[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}")
_LINKEDIN_RE = re.compile(r"linkedin\.com/in/[a-zA-Z0-9-]+", re.IGNORECASE)
_GITHUB_RE = re.compile(r"github\.com/[a-zA-Z0-9-]+", re.IGNORECASE)
_YEAR_RE = re.compile(r"\b(19[5-9]\d|20\d{2})\b")

# Heading text -> bucket. Matching is case-insensitive on the whole heading.
_SECTION_ALIASES = {
    "skills": "skills",
    "technical skills": "skills",
    "projects": "projects",
    "experience": "experience",
    "work experience": "experience",
    "education": "education",
    "certifications": "certifications",
    "languages": "languages",
}

# A heading, optionally followed by ":" or "-" and inline content ("Skills: Python, SQL").
_HEADING_RE = re.compile(
    r"^(%s)\s*(?:[:\-]\s*(.*))?$" % "|".join(
        re.escape(h) for h in sorted(_SECTION_ALIASES, key=len, reverse=True)
    ),
    re.IGNORECASE,
)

_MAX_SKILLS = 100
_MAX_EXPERIENCE = 20
_MAX_PROJECTS = 20
_MAX_EDUCATION = 10
_MAX_CERTIFICATIONS = 20
_MAX_LANGUAGES = 20

_CONTACT_FIELDS = ("email", "phone", "linkedin", "github")


def _match_heading(line: str) -> Optional[Tuple[str, str]]:
    m = _HEADING_RE.match(line)
    if not m:
        return None
    return _SECTION_ALIASES[m.group(1).lower()], (m.group(2) or "").strip()


def _split_into_sections(text: str) -> Tuple[Dict[str, List[str]], str]:
    """
    Assign each non-empty line to the most recent heading ("other" before any).
    Also returns the first non-empty line as the candidate name, or "" when
    that line is a section heading.
    """
    current = "other"
    sections: Dict[str, List[str]] = {"other": []}
    name = ""
    seen_content = False
    for raw_line in (text or "").splitlines():
        line = normalize_text(raw_line)
        if not line:
            continue
        heading = _match_heading(line)
        is_first, seen_content = not seen_content, True
        if heading:
            current, inline = heading
            sections.setdefault(current, [])
            if inline:
                sections[current].append(inline)
            continue
        if is_first:
            name = line
        sections.setdefault(current, []).append(line)
    return sections, name


def _first(regex: re.Pattern, text: str) -> str:
    m = regex.search(text or "")
    return m.group(0).strip() if m else ""


def extract_contacts(text: str) -> Dict[str, str]:
    return {
        "email": _first(_EMAIL_RE, text),
        "phone": _first(_PHONE_RE, text),
        "linkedin": _first(_LINKEDIN_RE, text),
        "github": _first(_GITHUB_RE, text),
    }


def _experience_entry(line: str) -> ExperienceEntry:
    entry = ExperienceEntry(description=line)
    found = find_date_range(line)
    if found:
        start, end, current = found
        entry.start_date = start
        entry.end_date = end
        entry.current = current
    return entry


def _education_entry(line: str) -> EducationEntry:
    years = _YEAR_RE.findall(line)
    return EducationEntry(degree=line, graduation_year=int(years[-1]) if years else None)


def _lines(sections: Dict[str, List[str]], key: str, cap: int) -> List[str]:
    out = [strip_bullet(line) for line in sections.get(key, [])]
    return [line for line in out if line][:cap]


def rule_based_extract(text: str) -> StructuredProfile:
    """
    Deterministic extraction used when the generative backend is unavailable.

    Sections are found by single-line headings. Skills lines are split into
    items; every other section yields one record per line.
    """
    sections, name = _split_into_sections(text)

    skill_items: List[str] = []
    for line in sections.get("skills", []):
        skill_items.extend(split_list_items(line))
    skills = dedupe_first_seen(skill_items, case_insensitive=True)[:_MAX_SKILLS]

    contacts = extract_contacts(text)
    return StructuredProfile(
        personal_info=PersonalInfo(name=name, **contacts),
        experience=[_experience_entry(line) for line in _lines(sections, "experience", _MAX_EXPERIENCE)],
        education=[_education_entry(line) for line in _lines(sections, "education", _MAX_EDUCATION)],
        skills=[SkillEntry(name=s) for s in skills],
        certifications=[CertificationEntry(name=line) for line in _lines(sections, "certifications", _MAX_CERTIFICATIONS)],
        projects=[ProjectEntry(name=line) for line in _lines(sections, "projects", _MAX_PROJECTS)],
        languages=[LanguageEntry(name=line) for line in _lines(sections, "languages", _MAX_LANGUAGES)],
        source="rules",
    )


def merge_contacts(profile: StructuredProfile, contacts: Dict[str, str], *, name: str = "") -> StructuredProfile:
    """
    Reconcile AI-extracted contact details with the regex pass.

    Regex values fill empty fields and win on disagreement (logged). The AI
    name wins when present.
    """
    info = profile.personal_info
    updates: Dict[str, str] = {}
    for key in _CONTACT_FIELDS:
        found = contacts.get(key) or ""
        current = getattr(info, key)
        if not found:
            continue
        if not current:
            updates[key] = found
        elif current.strip().lower() != found.strip().lower():
            logger.info("Contact field %r disagrees between extractors; keeping rule-based value.", key)
            updates[key] = found
    if not info.name and name:
        updates["name"] = name
    if not updates:
        return profile
    return replace(profile, personal_info=replace(info, **updates))


class StructuredExtractor:
    """Resume text -> StructuredProfile. Never raises for backend trouble."""

    def __init__(self, backend: Optional[GenerativeBackend] = None) -> None:
        self._backend = backend

    def extract(self, text: str) -> StructuredProfile:
        text = text or ""
        primary = None
        if self._backend is not None and text.strip():
            primary = lambda: self._extract_with_ai(text)  # noqa: E731
        return with_fallback(
            primary,
            lambda: rule_based_extract(text),
            label="resume extraction",
        )

    def _extract_with_ai(self, text: str) -> StructuredProfile:
        raw = self._backend.complete(build_extraction_prompt(text))
        data = expect_object(parse_response(raw))
        try:
            profile = StructuredProfile.from_dict(data, source="ai")
        except (TypeError, ValueError, AttributeError) as exc:
            raise BackendMalformedResponse(f"unusable profile payload: {type(exc).__name__}") from None

        _, rules_name = _split_into_sections(text)
        return merge_contacts(profile, extract_contacts(text), name=rules_name)
