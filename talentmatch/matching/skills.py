from __future__ import annotations

import logging
import re
from typing import Optional, Sequence

from talentmatch.config import ScoringPolicy
from talentmatch.embedding import similarity_score
from talentmatch.errors import BackendMalformedResponse
from talentmatch.llm.backends import GenerativeBackend
from talentmatch.llm.fallback import with_fallback
from talentmatch.llm.prompt import build_skills_prompt
from talentmatch.llm.sanitizer import Parsed, parse_response
from talentmatch.models import JobPosting, ResumeRecord
from .scoring import lexical_skills_score
from .types import SkillsScore

logger = logging.getLogger(__name__)

_BARE_INT_RE = re.compile(r"^\s*(-?\d+)\s*$")


def parse_skills_score(raw: str) -> int:
    """
    Accepts {"score": <int>} (optionally fenced) or a bare integer.
    Anything else, floats and booleans included, is malformed.
    """
    m = _BARE_INT_RE.match(raw or "") if isinstance(raw, str) else None
    if m:
        value = int(m.group(1))
    else:
        result = parse_response(raw)
        if not isinstance(result, Parsed) or not isinstance(result.value, dict):
            raise BackendMalformedResponse("skills comparison did not return a score object")
        value = result.value.get("score")
        if isinstance(value, bool) or not isinstance(value, int):
            raise BackendMalformedResponse("skills comparison score is not an integer")
    return max(0, min(100, value))


class SkillsScorer:
    """
    Skills dimension. Preference order:
      1. cosine similarity of resume skills embedding vs job embedding
      2. AI comparison (synonyms/abbreviations aware)
      3. lexical exact/partial matching
    """

    def __init__(
            self,
            backend: Optional[GenerativeBackend] = None,
            *,
            policy: Optional[ScoringPolicy] = None,
    ) -> None:
        self._backend = backend
        self._policy = policy or ScoringPolicy()

    def score(self, resume: ResumeRecord, job: JobPosting) -> SkillsScore:
        # Dimension mismatch raises InputValidationError; the aggregator handles it.
        if resume.skills_embedding and job.embedding:
            return SkillsScore(similarity_score(resume.skills_embedding, job.embedding), "embedding")

        resume_skills = resume.profile.skill_names()
        job_skills = job.skill_names()
        if not resume_skills or not job_skills:
            return SkillsScore(0, "lexical")

        return self.compare(resume_skills, job_skills)

    def compare(self, resume_skills: Sequence[str], job_skills: Sequence[str]) -> SkillsScore:
        primary = None
        if self._backend is not None:
            primary = lambda: SkillsScore(self._compare_with_ai(resume_skills, job_skills), "ai")  # noqa: E731
        return with_fallback(
            primary,
            lambda: SkillsScore(lexical_skills_score(resume_skills, job_skills, self._policy), "lexical"),
            label="skills comparison",
        )

    def _compare_with_ai(self, resume_skills: Sequence[str], job_skills: Sequence[str]) -> int:
        raw = self._backend.complete(build_skills_prompt(list(resume_skills), list(job_skills)))
        return parse_skills_score(raw)
