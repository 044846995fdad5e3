from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class MatchBreakdown:
    # Dimension scores, each an int in [0, 100]
    overall: int
    skills: int
    experience: int
    education: int
    location: int

    # Skills detail: job skills covered / not covered, resume skills unused by the job
    matched_skills: List[str] = field(default_factory=list)
    missing_skills: List[str] = field(default_factory=list)
    extra_skills: List[str] = field(default_factory=list)
    skills_method: str = "lexical"  # "embedding" | "ai" | "lexical" | "error"

    required_experience_years: Optional[float] = None
    actual_experience_years: int = 0
    experience_gap: float = 0

    education_required: bool = False
    education_satisfied: bool = True

    remote: bool = False
    location_match: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SkillsScore:
    score: int
    method: str
