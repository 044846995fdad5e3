import json
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

import pytest

from talentmatch.config import EngineConfig, ScoringPolicy
from talentmatch.models import (
    ExperienceRequirement,
    EducationRequirement,
    JobLocation,
    JobPosting,
    PersonalInfo,
    ResumeRecord,
    SkillEntry,
    SkillRequirement,
    StructuredProfile,
)

# Path to tests/fixtures directory
FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixtures_dir() -> Path:
    """
    Exposes the fixtures directory in case a test needs direct file access.
    """
    return FIXTURES_DIR


@pytest.fixture
def load_text(fixtures_dir):
    """
    Fixture that returns a function: load_text("file.ext") -> str
    """
    def _load(name: str) -> str:
        return (fixtures_dir / name).read_text(encoding="utf-8")
    return _load


@pytest.fixture
def load_json(load_text):
    """
    Fixture that returns a function: load_json("file.json") -> dict
    Built on load_text so there's one source of truth for file IO.
    """
    def _load(name: str) -> dict:
        return json.loads(load_text(name))
    return _load


# ------------------------------------------------------------------
# Deterministic backend stubs (no network)
# ------------------------------------------------------------------

class StubGenerative:
    """
    GenerativeBackend stub. `reply` is a string, an exception instance to
    raise, or a callable(prompt) -> str.
    """

    def __init__(self, reply: Union[str, Exception, Callable[[str], str]] = "") -> None:
        self.reply = reply
        self.prompts: List[str] = []

    def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if isinstance(self.reply, Exception):
            raise self.reply
        if callable(self.reply):
            return self.reply(prompt)
        return self.reply


class StubEmbedding:
    def __init__(self, vector: Optional[Sequence[float]] = None, error: Optional[Exception] = None) -> None:
        self.vector = list(vector or [0.1, 0.2, 0.3])
        self.error = error
        self.inputs: List[str] = []

    def embed(self, text: str) -> List[float]:
        self.inputs.append(text)
        if self.error is not None:
            raise self.error
        return list(self.vector)


@pytest.fixture
def stub_generative():
    return StubGenerative


@pytest.fixture
def stub_embedding():
    return StubEmbedding


@pytest.fixture
def policy() -> ScoringPolicy:
    return ScoringPolicy()


@pytest.fixture
def engine_config() -> EngineConfig:
    return EngineConfig()


# ------------------------------------------------------------------
# Model builders
# ------------------------------------------------------------------

@pytest.fixture
def make_resume():
    def _make(
            skills: Sequence[str] = (),
            *,
            owner_id: str = "cand-1",
            location: str = "",
            experience=None,
            education=None,
            skills_embedding: Sequence[float] = (),
    ) -> ResumeRecord:
        profile = StructuredProfile(
            personal_info=PersonalInfo(name="Test Candidate", location=location),
            skills=[SkillEntry(name=s) for s in skills],
            experience=list(experience or []),
            education=list(education or []),
        )
        return ResumeRecord(
            owner_id=owner_id,
            raw_text="",
            profile=profile,
            skills_embedding=list(skills_embedding),
        )
    return _make


@pytest.fixture
def make_job():
    def _make(
            skills: Sequence[str] = (),
            *,
            job_id: str = "job-1",
            title: str = "Engineer",
            remote: bool = True,
            city: str = "",
            min_years=None,
            degree: str = "",
            degree_required: bool = False,
            embedding: Sequence[float] = (),
    ) -> JobPosting:
        return JobPosting(
            job_id=job_id,
            title=title,
            description=f"{title} role",
            location=JobLocation(city=city, remote=remote),
            skills=[SkillRequirement(name=s) for s in skills],
            experience=ExperienceRequirement(min_years=min_years),
            education=EducationRequirement(degree=degree, required=degree_required),
            embedding=list(embedding),
        )
    return _make
