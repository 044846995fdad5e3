"""
talentmatch/embedding.py

Vector embeddings with a deterministic term-frequency fallback, plus the
cosine similarity used by the skills scorer and semantic job search.

Fallback vectors and backend vectors live in different spaces and generally
differ in length; comparing them raises InputValidationError rather than
producing a meaningless similarity.
"""
from __future__ import annotations

import logging
from collections import Counter
from typing import List, Optional, Sequence

import numpy as np

from talentmatch import config as _config
from talentmatch.config import EngineConfig
from talentmatch.core.text_processing import truncate
from talentmatch.errors import InputValidationError
from talentmatch.llm.backends import EmbeddingBackend
from talentmatch.llm.fallback import with_fallback
from talentmatch.models import JobPosting

logger = logging.getLogger(__name__)


def fallback_embedding(text: str, dims: int = _config.FALLBACK_EMBEDDING_DIMS) -> List[float]:
    """
    Term-frequency vector over the first `dims` distinct words (len > 2) in
    encounter order. Frequencies are relative to the total word count,
    short words included. Always exactly `dims` long.
    """
    words = (text or "").lower().split()
    total = len(words)
    if total == 0:
        return [0.0] * dims

    counts = Counter(w for w in words if len(w) > 2)
    # Counter preserves first-insertion order.
    vector = [count / total for count in list(counts.values())[:dims]]
    vector.extend([0.0] * (dims - len(vector)))
    return vector


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity clamped to [-1, 1].
    Zero-magnitude vectors yield 0.0; empty or differently-sized vectors raise.
    """
    if not a or not b:
        raise InputValidationError("cannot compare an empty vector")
    if len(a) != len(b):
        raise InputValidationError(f"vector dimensions differ: {len(a)} != {len(b)}")

    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)
    norm = float(np.linalg.norm(va) * np.linalg.norm(vb))
    if norm == 0.0:
        return 0.0
    return float(np.clip(np.dot(va, vb) / norm, -1.0, 1.0))


def similarity_score(a: Sequence[float], b: Sequence[float]) -> int:
    """Cosine similarity as an integer percentage in [0, 100]."""
    return int(max(0, min(100, round(cosine_similarity(a, b) * 100))))


class VectorEmbedder:
    def __init__(
            self,
            backend: Optional[EmbeddingBackend] = None,
            *,
            config: Optional[EngineConfig] = None,
    ) -> None:
        self._backend = backend
        self._config = config or EngineConfig()

    def embed(self, text: str, *, allow_fallback: bool = True) -> List[float]:
        """
        Backend vector for `text`. On backend failure (or with no backend)
        returns the term-frequency fallback, or [] when allow_fallback is False.
        """
        text = text or ""
        primary = None
        if self._backend is not None and text.strip():
            payload = truncate(text, self._config.embedding_input_chars)
            primary = lambda: self._backend.embed(payload)  # noqa: E731
        if allow_fallback:
            fallback = lambda: fallback_embedding(text, self._config.fallback_embedding_dims)  # noqa: E731
        else:
            fallback = list
        return with_fallback(primary, fallback, label="embedding")

    def embed_skills(self, skill_names: Sequence[str]) -> List[float]:
        """
        Skills-only vector for the skills scorer. Returns [] rather than a
        term-frequency vector when the backend is unavailable, which sends
        skills scoring down the lexical path.
        """
        names = [n for n in skill_names if n]
        if not names:
            return []
        return self.embed(", ".join(names), allow_fallback=False)

    def embed_job(self, job: JobPosting) -> List[float]:
        return self.embed(job.embedding_text())
