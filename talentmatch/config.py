# talentmatch/config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Dict, Optional

# --- Backends ---

# Provider selection for text generation: "anthropic" | "openai"  (default: anthropic)
TALENTMATCH_LLM_PROVIDER: str = os.environ.get("TALENTMATCH_LLM_PROVIDER", "anthropic").strip().lower()

# Model selection per provider. Override via TALENTMATCH_LLM_MODEL.
_DEFAULT_MODELS: dict[str, str] = {
    "anthropic": "claude-sonnet-4-6",
    "openai": "gpt-4o-mini",
}
TALENTMATCH_LLM_MODEL: str = (
        os.environ.get("TALENTMATCH_LLM_MODEL", "").strip()
        or _DEFAULT_MODELS.get(TALENTMATCH_LLM_PROVIDER, "claude-sonnet-4-6")
)

# Embeddings are served by OpenAI only (Anthropic has no embedding endpoint).
TALENTMATCH_EMBEDDING_MODEL: str = (
        os.environ.get("TALENTMATCH_EMBEDDING_MODEL", "").strip() or "text-embedding-3-small"
)

# --- Networking ---

REQUEST_TIMEOUT_SECONDS = 20

# --- Guardrails ---

EMBEDDING_INPUT_CHARS = 8000
FALLBACK_EMBEDDING_DIMS = 50
RAW_SNIPPET_CHARS = 500

BATCH_JOB_LIMIT = 50
BATCH_MIN_SCORE = 30
BATCH_WORKERS = 4


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def resolve_api_key(provider: str) -> Optional[str]:
    """
    Look up the API key for a provider. Project-scoped variables win over the
    vendor defaults. Keys are never logged or written anywhere.
    """
    provider = (provider or "").strip().lower()
    if provider == "anthropic":
        return os.getenv("TALENTMATCH_ANTHROPIC_KEY") or os.getenv("ANTHROPIC_API_KEY") or None
    if provider == "openai":
        return os.getenv("TALENTMATCH_OPENAI_KEY") or os.getenv("OPENAI_API_KEY") or None
    return None


def llm_configured() -> bool:
    return bool(resolve_api_key(TALENTMATCH_LLM_PROVIDER))


def embeddings_configured() -> bool:
    return bool(resolve_api_key("openai"))


@dataclass(frozen=True)
class ScoringPolicy:
    """
    Empirical policy constants for the match score.
    Weights are applied as-is; they are expected to sum to 1.0.
    """
    skills_weight: float = 0.40
    experience_weight: float = 0.30
    education_weight: float = 0.20
    location_weight: float = 0.10

    # Lexical skills fallback: credit for "one name contains the other"
    partial_skill_credit: float = 0.5

    # Location scorer
    unknown_location_score: int = 50
    location_mismatch_score: int = 30

    def weights(self) -> Dict[str, float]:
        return {
            "skills": self.skills_weight,
            "experience": self.experience_weight,
            "education": self.education_weight,
            "location": self.location_weight,
        }


def load_scoring_policy() -> ScoringPolicy:
    d = ScoringPolicy()
    return ScoringPolicy(
        skills_weight=_env_float("TALENTMATCH_WEIGHT_SKILLS", d.skills_weight),
        experience_weight=_env_float("TALENTMATCH_WEIGHT_EXPERIENCE", d.experience_weight),
        education_weight=_env_float("TALENTMATCH_WEIGHT_EDUCATION", d.education_weight),
        location_weight=_env_float("TALENTMATCH_WEIGHT_LOCATION", d.location_weight),
        partial_skill_credit=_env_float("TALENTMATCH_PARTIAL_SKILL_CREDIT", d.partial_skill_credit),
        unknown_location_score=_env_int("TALENTMATCH_UNKNOWN_LOCATION_SCORE", d.unknown_location_score),
        location_mismatch_score=_env_int("TALENTMATCH_LOCATION_MISMATCH_SCORE", d.location_mismatch_score),
    )


@dataclass(frozen=True)
class EngineConfig:
    request_timeout_seconds: float = REQUEST_TIMEOUT_SECONDS
    embedding_input_chars: int = EMBEDDING_INPUT_CHARS
    fallback_embedding_dims: int = FALLBACK_EMBEDDING_DIMS
    batch_job_limit: int = BATCH_JOB_LIMIT
    batch_min_score: int = BATCH_MIN_SCORE
    batch_workers: int = BATCH_WORKERS


def load_engine_config() -> EngineConfig:
    return EngineConfig(
        request_timeout_seconds=_env_float("TALENTMATCH_REQUEST_TIMEOUT", REQUEST_TIMEOUT_SECONDS),
        embedding_input_chars=_env_int("TALENTMATCH_EMBED_INPUT_CHARS", EMBEDDING_INPUT_CHARS),
        batch_job_limit=_env_int("TALENTMATCH_BATCH_JOB_LIMIT", BATCH_JOB_LIMIT),
        batch_min_score=_env_int("TALENTMATCH_BATCH_MIN_SCORE", BATCH_MIN_SCORE),
        batch_workers=max(1, _env_int("TALENTMATCH_BATCH_WORKERS", BATCH_WORKERS)),
    )
