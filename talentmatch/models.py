from __future__ import annotations

from dataclasses import dataclass, field, asdict, replace
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
import hashlib
import uuid

from talentmatch.core.dates import parse_month_year
from talentmatch.core.text_processing import normalize_whitespace


class MatchStatus(str, Enum):
    NEW = "new"
    VIEWED = "viewed"
    APPLIED = "applied"
    SHORTLISTED = "shortlisted"
    REJECTED = "rejected"
    HIRED = "hired"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


# ---------------------------------------------------------------------------
# Coercion helpers for loosely-typed payloads (backend JSON, stored documents)
# ---------------------------------------------------------------------------

def _get(data: Dict[str, Any], *keys: str) -> Any:
    """First present key wins; lets payloads use camelCase or snake_case."""
    for k in keys:
        if k in data and data[k] is not None:
            return data[k]
    return None


def _str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(normalize_whitespace(str(v)) for v in value if v is not None)
    return normalize_whitespace(str(value))


def _opt_str(value: Any) -> Optional[str]:
    s = _str(value)
    return s or None


def _str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return []
    out = []
    for v in value:
        if isinstance(v, dict):
            v = _get(v, "name", "text", "title")
        s = _str(v)
        if s:
            out.append(s)
    return out


def _mapping(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _dicts(value: Any) -> List[Dict[str, Any]]:
    if not isinstance(value, (list, tuple)):
        return []
    return [v for v in value if isinstance(v, dict)]


def _opt_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(round(float(str(value).strip())))
    except (TypeError, ValueError):
        return None


def _opt_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(str(value).strip())
    except (TypeError, ValueError):
        return None


def _bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1", "y")
    return bool(value)


def _vector(value: Any) -> List[float]:
    if not isinstance(value, (list, tuple)):
        return []
    try:
        return [float(v) for v in value]
    except (TypeError, ValueError):
        return []


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def _parse_dt(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# Resume side
# ---------------------------------------------------------------------------

@dataclass
class PersonalInfo:
    name: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    linkedin: str = ""
    github: str = ""
    website: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "PersonalInfo":
        if not isinstance(data, dict):
            return cls()
        return cls(
            name=_str(_get(data, "name", "fullName", "full_name")),
            email=_str(_get(data, "email")),
            phone=_str(_get(data, "phone", "phoneNumber", "phone_number")),
            location=_str(_get(data, "location", "city", "address")),
            linkedin=_str(_get(data, "linkedin", "linkedIn")),
            github=_str(_get(data, "github", "gitHub")),
            website=_str(_get(data, "website", "portfolio")),
        )


@dataclass
class ExperienceEntry:
    company: str = ""
    position: str = ""
    duration: str = ""
    description: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    current: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExperienceEntry":
        end_raw = _get(data, "endDate", "end_date", "end")
        current = _bool(_get(data, "current", "isCurrent", "is_current"))
        if isinstance(end_raw, str) and end_raw.strip().lower() in ("present", "current", "now"):
            current = True
        return cls(
            company=_str(_get(data, "company", "employer", "organization")),
            position=_str(_get(data, "position", "title", "role", "designation")),
            duration=_str(_get(data, "duration")),
            description=_str(_get(data, "description", "summary", "responsibilities")),
            start_date=parse_month_year(_get(data, "startDate", "start_date", "start")),
            end_date=parse_month_year(end_raw),
            current=current,
        )

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["start_date"] = _iso(self.start_date)
        d["end_date"] = _iso(self.end_date)
        return d


@dataclass
class EducationEntry:
    institution: str = ""
    degree: str = ""
    field: str = ""
    graduation_year: Optional[int] = None
    gpa: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EducationEntry":
        return cls(
            institution=_str(_get(data, "institution", "school", "university", "college")),
            degree=_str(_get(data, "degree", "qualification")),
            field=_str(_get(data, "field", "fieldOfStudy", "major")),
            graduation_year=_opt_int(_get(data, "graduationYear", "graduation_year", "year")),
            gpa=_str(_get(data, "gpa", "grade", "cgpa")),
        )


@dataclass
class SkillEntry:
    name: str
    category: str = ""
    level: str = ""
    years_of_experience: Optional[float] = None

    @classmethod
    def from_value(cls, value: Any) -> Optional["SkillEntry"]:
        if isinstance(value, dict):
            name = _str(_get(value, "name", "skill"))
            if not name:
                return None
            return cls(
                name=name,
                category=_str(_get(value, "category")),
                level=_str(_get(value, "level", "proficiency")),
                years_of_experience=_opt_float(_get(value, "yearsOfExperience", "years_of_experience")),
            )
        name = _str(value)
        return cls(name=name) if name else None


@dataclass
class CertificationEntry:
    name: str
    issuer: str = ""
    date: Optional[date] = None
    expiry_date: Optional[date] = None

    @classmethod
    def from_value(cls, value: Any) -> Optional["CertificationEntry"]:
        if isinstance(value, dict):
            name = _str(_get(value, "name", "title"))
            if not name:
                return None
            return cls(
                name=name,
                issuer=_str(_get(value, "issuer", "organization")),
                date=parse_month_year(_get(value, "date", "issued")),
                expiry_date=parse_month_year(_get(value, "expiryDate", "expiry_date")),
            )
        name = _str(value)
        return cls(name=name) if name else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "issuer": self.issuer,
            "date": _iso(self.date),
            "expiry_date": _iso(self.expiry_date),
        }


@dataclass
class ProjectEntry:
    name: str = ""
    description: str = ""
    technologies: List[str] = field(default_factory=list)
    url: str = ""

    @classmethod
    def from_value(cls, value: Any) -> Optional["ProjectEntry"]:
        if isinstance(value, dict):
            entry = cls(
                name=_str(_get(value, "name", "title")),
                description=_str(_get(value, "description", "summary")),
                technologies=_str_list(_get(value, "technologies", "stack", "tools")),
                url=_str(_get(value, "url", "link")),
            )
            return entry if (entry.name or entry.description) else None
        text = _str(value)
        return cls(name=text) if text else None


@dataclass
class LanguageEntry:
    name: str
    proficiency: str = ""

    @classmethod
    def from_value(cls, value: Any) -> Optional["LanguageEntry"]:
        if isinstance(value, dict):
            name = _str(_get(value, "name", "language"))
            return cls(name=name, proficiency=_str(_get(value, "proficiency", "level"))) if name else None
        name = _str(value)
        return cls(name=name) if name else None


@dataclass
class StructuredProfile:
    """
    Typed view of a resume. Produced by the structured extractor, either from
    the generative backend ("ai") or from the rule-based parser ("rules").
    """
    personal_info: PersonalInfo = field(default_factory=PersonalInfo)
    summary: str = ""
    experience: List[ExperienceEntry] = field(default_factory=list)
    education: List[EducationEntry] = field(default_factory=list)
    skills: List[SkillEntry] = field(default_factory=list)
    certifications: List[CertificationEntry] = field(default_factory=list)
    projects: List[ProjectEntry] = field(default_factory=list)
    languages: List[LanguageEntry] = field(default_factory=list)
    achievements: List[str] = field(default_factory=list)
    source: str = "rules"  # "ai" | "rules"

    def skill_names(self) -> List[str]:
        return [s.name for s in self.skills if s.name]

    @classmethod
    def from_dict(cls, data: Dict[str, Any], *, source: str = "ai") -> "StructuredProfile":
        """
        Build a profile from an untrusted payload. Unknown keys are ignored and
        entries of the wrong shape are dropped rather than rejected.
        """
        if not isinstance(data, dict):
            raise TypeError("profile payload must be a JSON object")

        def _entries(key_names, factory):
            raw = _get(data, *key_names)
            if isinstance(raw, dict):
                raw = [raw]
            if not isinstance(raw, (list, tuple)):
                return []
            out = []
            for item in raw:
                entry = factory(item)
                if entry is not None:
                    out.append(entry)
            return out

        return cls(
            personal_info=PersonalInfo.from_dict(_get(data, "personalInfo", "personal_info", "contact")),
            summary=_str(_get(data, "summary", "objective", "profile")),
            experience=[ExperienceEntry.from_dict(d) for d in _dicts(_get(data, "experience", "workExperience"))],
            education=[EducationEntry.from_dict(d) for d in _dicts(_get(data, "education"))],
            skills=_entries(("skills",), SkillEntry.from_value),
            certifications=_entries(("certifications",), CertificationEntry.from_value),
            projects=_entries(("projects",), ProjectEntry.from_value),
            languages=_entries(("languages",), LanguageEntry.from_value),
            achievements=_str_list(_get(data, "achievements")),
            source=source,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "personal_info": asdict(self.personal_info),
            "summary": self.summary,
            "experience": [e.to_dict() for e in self.experience],
            "education": [asdict(e) for e in self.education],
            "skills": [asdict(s) for s in self.skills],
            "certifications": [c.to_dict() for c in self.certifications],
            "projects": [asdict(p) for p in self.projects],
            "languages": [asdict(lang) for lang in self.languages],
            "achievements": list(self.achievements),
            "source": self.source,
        }


@dataclass(frozen=True)
class ResumeAnalysis:
    strengths: List[str] = field(default_factory=list)
    weaknesses: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)
    skill_gaps: List[str] = field(default_factory=list)
    overall_score: int = 0
    last_analyzed: datetime = field(default_factory=utc_now)
    source: str = "heuristic"  # "ai" | "heuristic"

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["last_analyzed"] = self.last_analyzed.isoformat()
        return d


@dataclass(frozen=True)
class ResumeRecord:
    """
    A stored resume. At most one active record per owner; a newer upload
    archives the previous one. Mutated only by re-analysis or version bump,
    both of which return a new record.
    """
    owner_id: str
    raw_text: str
    profile: StructuredProfile
    full_text_embedding: List[float] = field(default_factory=list)
    skills_embedding: List[float] = field(default_factory=list)
    analysis: Optional[ResumeAnalysis] = None
    is_active: bool = True
    version: int = 1
    resume_id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utc_now)

    def archive(self) -> "ResumeRecord":
        return replace(self, is_active=False)

    def with_analysis(self, analysis: ResumeAnalysis) -> "ResumeRecord":
        return replace(self, analysis=analysis)

    def new_version(
            self,
            *,
            raw_text: str,
            profile: StructuredProfile,
            full_text_embedding: Optional[List[float]] = None,
            skills_embedding: Optional[List[float]] = None,
    ) -> "ResumeRecord":
        """Successor record for a re-upload: fresh id, next version, active, not yet analyzed."""
        return replace(
            self,
            resume_id=new_id(),
            created_at=utc_now(),
            is_active=True,
            raw_text=raw_text,
            profile=profile,
            full_text_embedding=list(full_text_embedding or []),
            skills_embedding=list(skills_embedding or []),
            analysis=None,
            version=self.version + 1,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "resume_id": self.resume_id,
            "owner_id": self.owner_id,
            "raw_text": self.raw_text,
            "profile": self.profile.to_dict(),
            "full_text_embedding": list(self.full_text_embedding),
            "skills_embedding": list(self.skills_embedding),
            "analysis": self.analysis.to_dict() if self.analysis else None,
            "is_active": self.is_active,
            "version": self.version,
            "created_at": self.created_at.isoformat(),
        }


# ---------------------------------------------------------------------------
# Job side
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class JobLocation:
    city: str = ""
    state: str = ""
    country: str = ""
    remote: bool = False
    hybrid: bool = False


@dataclass(frozen=True)
class SkillRequirement:
    name: str
    level: str = "required"  # "required" | "preferred" | "nice-to-have"
    importance: int = 3      # 1..5


@dataclass(frozen=True)
class ExperienceRequirement:
    min_years: Optional[float] = None
    max_years: Optional[float] = None


@dataclass(frozen=True)
class EducationRequirement:
    degree: str = ""
    field: str = ""
    required: bool = False


@dataclass(frozen=True)
class Compensation:
    salary_min: Optional[float] = None
    salary_max: Optional[float] = None
    currency: str = "USD"
    period: str = "yearly"
    benefits: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class JobPosting:
    """
    A job posting as seen by the engine.

    The embedding, if present, is computed from embedding_text() and must be
    regenerated whenever the title, description or required skill names change.
    """
    title: str
    description: str
    company: str = ""
    location: JobLocation = field(default_factory=JobLocation)
    skills: List[SkillRequirement] = field(default_factory=list)
    experience: ExperienceRequirement = field(default_factory=ExperienceRequirement)
    education: EducationRequirement = field(default_factory=EducationRequirement)
    compensation: Compensation = field(default_factory=Compensation)
    embedding: List[float] = field(default_factory=list)
    job_id: str = field(default_factory=new_id)
    active: bool = True

    def skill_names(self) -> List[str]:
        return [s.name for s in self.skills if s.name]

    def embedding_text(self) -> str:
        return "\n".join([self.title or "", self.description or "", " ".join(self.skill_names())]).strip()

    def embedding_fingerprint(self) -> str:
        return hashlib.sha256(self.embedding_text().encode("utf-8")).hexdigest()[:16]

    def needs_reembedding(self, previous: Optional["JobPosting"]) -> bool:
        if not self.embedding:
            return True
        if previous is None:
            return False
        return previous.embedding_fingerprint() != self.embedding_fingerprint()

    def with_embedding(self, embedding: List[float]) -> "JobPosting":
        return replace(self, embedding=list(embedding))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JobPosting":
        if not isinstance(data, dict):
            raise TypeError("job payload must be a JSON object")
        loc = _get(data, "location")
        if isinstance(loc, str):
            loc = {"city": loc, "remote": "remote" in loc.lower()}
        loc = _mapping(loc)
        reqs = _mapping(_get(data, "requirements"))
        exp = _mapping(_get(reqs, "experience"))
        edu = _mapping(_get(reqs, "education"))
        comp = _mapping(_get(data, "compensation"))
        salary = _mapping(_get(comp, "salary")) or comp
        company = _get(data, "company")
        if isinstance(company, dict):
            company = _get(company, "name")

        skills: List[SkillRequirement] = []
        raw_skills = _get(reqs, "skills")
        for s in raw_skills if isinstance(raw_skills, list) else []:
            if isinstance(s, dict):
                name = _str(_get(s, "name"))
                if name:
                    importance = _opt_int(_get(s, "importance")) or 3
                    skills.append(SkillRequirement(
                        name=name,
                        level=_str(_get(s, "level")) or "required",
                        importance=max(1, min(5, importance)),
                    ))
            elif _str(s):
                skills.append(SkillRequirement(name=_str(s)))

        kwargs: Dict[str, Any] = {}
        job_id = _opt_str(_get(data, "job_id", "id", "_id"))
        if job_id:
            kwargs["job_id"] = job_id

        return cls(
            title=_str(_get(data, "title")),
            description=_str(_get(data, "description")),
            company=_str(company),
            location=JobLocation(
                city=_str(_get(loc, "city")),
                state=_str(_get(loc, "state")),
                country=_str(_get(loc, "country")),
                remote=_bool(_get(loc, "remote")),
                hybrid=_bool(_get(loc, "hybrid")),
            ),
            skills=skills,
            experience=ExperienceRequirement(
                min_years=_opt_float(_get(exp, "min", "min_years")),
                max_years=_opt_float(_get(exp, "max", "max_years")),
            ),
            education=EducationRequirement(
                degree=_str(_get(edu, "degree")),
                field=_str(_get(edu, "field")),
                required=_bool(_get(edu, "required")),
            ),
            compensation=Compensation(
                salary_min=_opt_float(_get(salary, "min", "salary_min")),
                salary_max=_opt_float(_get(salary, "max", "salary_max")),
                currency=_str(_get(salary, "currency")) or "USD",
                period=_str(_get(salary, "period")) or "yearly",
                benefits=_str_list(_get(comp, "benefits")),
            ),
            embedding=_vector(_get(data, "embedding")),
            active=_get(data, "active") is not False and _str(_get(data, "status")) in ("", "active"),
            **kwargs,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Match side
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SkillGap:
    skill: str
    importance: int = 3
    current_level: str = ""
    required_level: str = ""
    learning_path: str = ""

    @classmethod
    def from_value(cls, value: Any) -> Optional["SkillGap"]:
        if isinstance(value, str):
            return cls(skill=_str(value)) if _str(value) else None
        if not isinstance(value, dict):
            return None
        skill = _str(_get(value, "skill", "name"))
        if not skill:
            return None
        importance = _opt_int(_get(value, "importance"))
        return cls(
            skill=skill,
            importance=max(1, min(5, importance if importance is not None else 3)),
            current_level=_str(_get(value, "currentLevel", "current_level")),
            required_level=_str(_get(value, "requiredLevel", "required_level")),
            learning_path=_str(_get(value, "learningPath", "learning_path")),
        )


@dataclass(frozen=True)
class Insights:
    strengths: List[str] = field(default_factory=list)
    weaknesses: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    interview_tips: List[str] = field(default_factory=list)
    skill_gaps: List[SkillGap] = field(default_factory=list)
    source: str = "heuristic"  # "ai" | "heuristic"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def insights_from_dict(data: Dict[str, Any]) -> Insights:
    """
    Coerce a backend insights payload. Absent or non-list fields become empty
    lists. A bare string skill gap becomes a gap with default importance;
    entries that are neither objects nor strings are dropped.
    """
    if not isinstance(data, dict):
        raise TypeError("insights payload must be a JSON object")

    def _list_field(*keys: str) -> List[str]:
        raw = _get(data, *keys)
        return _str_list(raw) if isinstance(raw, list) else []

    gaps_raw = _get(data, "skillGaps", "skill_gaps")
    gaps: List[SkillGap] = []
    if isinstance(gaps_raw, list):
        for item in gaps_raw:
            gap = SkillGap.from_value(item)
            if gap is not None:
                gaps.append(gap)

    return Insights(
        strengths=_list_field("strengths"),
        weaknesses=_list_field("weaknesses"),
        recommendations=_list_field("recommendations"),
        interview_tips=_list_field("interviewTips", "interview_tips"),
        skill_gaps=gaps,
        source="ai",
    )


def resume_analysis_from_dict(data: Dict[str, Any]) -> ResumeAnalysis:
    if not isinstance(data, dict):
        raise TypeError("analysis payload must be a JSON object")
    score = _get(data, "overallScore", "overall_score")
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        raise ValueError("overallScore is not a number")

    def _list_field(*keys: str) -> List[str]:
        raw = _get(data, *keys)
        return _str_list(raw) if isinstance(raw, list) else []

    return ResumeAnalysis(
        strengths=_list_field("strengths"),
        weaknesses=_list_field("weaknesses"),
        suggestions=_list_field("improvementSuggestions", "suggestions"),
        skill_gaps=_list_field("skillGaps", "skill_gaps"),
        overall_score=max(0, min(100, int(round(score)))),
        source="ai",
    )


# ---------------------------------------------------------------------------
# Interview preparation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class InterviewQuestion:
    id: int
    type: str
    question: str
    category: str = ""
    difficulty: str = "intermediate"
    expected_answer: str = ""
    tips: List[str] = field(default_factory=list)
    follow_up_questions: List[str] = field(default_factory=list)

    @classmethod
    def from_value(cls, value: Any, *, default_id: int) -> Optional["InterviewQuestion"]:
        if isinstance(value, str):
            value = {"question": value}
        if not isinstance(value, dict):
            return None
        question = _str(_get(value, "question", "text"))
        if not question:
            return None
        qtype = _str(_get(value, "type")).lower() or "technical"
        return cls(
            id=_opt_int(_get(value, "id")) or default_id,
            type=qtype,
            question=question,
            category=_str(_get(value, "category")) or qtype.capitalize(),
            difficulty=_str(_get(value, "difficulty")).lower() or "intermediate",
            expected_answer=_str(_get(value, "expectedAnswer", "expected_answer")),
            tips=_str_list(_get(value, "tips")),
            follow_up_questions=_str_list(_get(value, "followUpQuestions", "follow_up_questions")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class AnswerFeedback:
    score: int
    strengths: List[str] = field(default_factory=list)
    weaknesses: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)
    overall_feedback: str = ""
    improvement_areas: List[str] = field(default_factory=list)
    source: str = "heuristic"  # "ai" | "heuristic"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PrepTip:
    category: str
    title: str
    description: str = ""
    priority: str = "medium"  # "high" | "medium" | "low"
    actions: List[str] = field(default_factory=list)

    @classmethod
    def from_value(cls, value: Any) -> Optional["PrepTip"]:
        if not isinstance(value, dict):
            return None
        title = _str(_get(value, "title"))
        description = _str(_get(value, "description"))
        if not title and not description:
            return None
        priority = _str(_get(value, "priority")).lower()
        return cls(
            category=_str(_get(value, "category")) or "General",
            title=title or description,
            description=description,
            priority=priority if priority in ("high", "medium", "low") else "medium",
            actions=_str_list(_get(value, "actions")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def interview_questions_from_dict(data: Dict[str, Any], *, limit: int) -> List[InterviewQuestion]:
    """
    Coerce a backend question payload. Entries without question text are
    dropped; ids missing from the payload follow list position.
    Raises ValueError when no usable question remains.
    """
    if not isinstance(data, dict):
        raise TypeError("questions payload must be a JSON object")
    raw = _get(data, "questions")
    items = raw if isinstance(raw, list) else []
    questions = [
        q for q in (InterviewQuestion.from_value(item, default_id=i) for i, item in enumerate(items, start=1))
        if q is not None
    ]
    if not questions:
        raise ValueError("no usable interview questions")
    return questions[:max(0, limit)]


def answer_feedback_from_dict(data: Dict[str, Any]) -> AnswerFeedback:
    if not isinstance(data, dict):
        raise TypeError("feedback payload must be a JSON object")
    score = _get(data, "score")
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        raise ValueError("score is not a number")
    if score != score or score in (float("inf"), float("-inf")):
        raise ValueError("score is not finite")

    def _list_field(*keys: str) -> List[str]:
        raw = _get(data, *keys)
        return _str_list(raw) if isinstance(raw, list) else []

    return AnswerFeedback(
        score=max(0, min(100, int(round(score)))),
        strengths=_list_field("strengths"),
        weaknesses=_list_field("weaknesses"),
        suggestions=_list_field("suggestions"),
        keywords=_list_field("keywords"),
        overall_feedback=_str(_get(data, "overallFeedback", "overall_feedback")),
        improvement_areas=_list_field("improvementAreas", "improvement_areas"),
        source="ai",
    )


def prep_tips_from_dict(data: Dict[str, Any]) -> List[PrepTip]:
    if not isinstance(data, dict):
        raise TypeError("tips payload must be a JSON object")
    raw = _get(data, "tips")
    tips = [t for t in (PrepTip.from_value(item) for item in (raw if isinstance(raw, list) else [])) if t]
    if not tips:
        raise ValueError("no usable preparation tips")
    return tips


@dataclass(frozen=True)
class MatchResult:
    """
    One persisted match per (candidate, job) pair. Recomputation replaces the
    score, breakdown and insights but keeps identity, status and created_at.
    """
    candidate_id: str
    job_id: str
    resume_id: str
    overall_score: int
    breakdown: Any  # MatchBreakdown
    insights: Insights
    status: MatchStatus = MatchStatus.NEW
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    @property
    def key(self) -> str:
        return f"{self.candidate_id}:{self.job_id}"

    def updated(self, newer: "MatchResult") -> "MatchResult":
        return replace(
            self,
            resume_id=newer.resume_id,
            overall_score=newer.overall_score,
            breakdown=newer.breakdown,
            insights=newer.insights,
            updated_at=utc_now(),
        )

    def with_status(self, status: MatchStatus) -> "MatchResult":
        return replace(self, status=MatchStatus(status), updated_at=utc_now())

    def to_dict(self) -> Dict[str, Any]:
        breakdown = self.breakdown.to_dict() if hasattr(self.breakdown, "to_dict") else dict(self.breakdown or {})
        return {
            "candidate_id": self.candidate_id,
            "job_id": self.job_id,
            "resume_id": self.resume_id,
            "overall_score": self.overall_score,
            "breakdown": breakdown,
            "insights": self.insights.to_dict(),
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MatchResult":
        ins = data.get("insights") or {}
        gaps = [g for g in (SkillGap.from_value(x) for x in ins.get("skill_gaps") or []) if g]
        return cls(
            candidate_id=str(data["candidate_id"]),
            job_id=str(data["job_id"]),
            resume_id=str(data.get("resume_id") or ""),
            overall_score=int(data.get("overall_score") or 0),
            breakdown=dict(data.get("breakdown") or {}),
            insights=Insights(
                strengths=_str_list(ins.get("strengths")),
                weaknesses=_str_list(ins.get("weaknesses")),
                recommendations=_str_list(ins.get("recommendations")),
                interview_tips=_str_list(ins.get("interview_tips")),
                skill_gaps=gaps,
                source=_str(ins.get("source")) or "heuristic",
            ),
            status=MatchStatus(data.get("status") or MatchStatus.NEW.value),
            created_at=_parse_dt(data.get("created_at")) or utc_now(),
            updated_at=_parse_dt(data.get("updated_at")) or utc_now(),
        )
