import math

import pytest

from talentmatch.config import EngineConfig
from talentmatch.embedding import VectorEmbedder, cosine_similarity, fallback_embedding, similarity_score
from talentmatch.errors import BackendQuotaExceeded, BackendTimeout, InputValidationError


# ------------------------------------------------------------------
# Fallback embedding
# ------------------------------------------------------------------

@pytest.mark.parametrize("text", ["", "a b", "python " * 500, " ".join(f"word{i}" for i in range(200))])
def test_fallback_embedding_is_always_50_dims(text) -> None:
    assert len(fallback_embedding(text)) == 50


def test_fallback_embedding_empty_text_is_zero_vector() -> None:
    assert fallback_embedding("") == [0.0] * 50


def test_fallback_embedding_counts_relative_to_all_words() -> None:
    # 5 words total; "an" and "is" are too short to be features
    vec = fallback_embedding("Python is python an SQL")
    assert vec[0] == pytest.approx(2 / 5)  # "python"
    assert vec[1] == pytest.approx(1 / 5)  # "sql"
    assert vec[2:] == [0.0] * 48


def test_fallback_embedding_keeps_first_50_distinct_tokens() -> None:
    text = " ".join(f"tok{i}" for i in range(60))
    vec = fallback_embedding(text)
    assert all(v == pytest.approx(1 / 60) for v in vec)


# ------------------------------------------------------------------
# Cosine similarity
# ------------------------------------------------------------------

def test_cosine_of_vector_with_itself_is_one() -> None:
    a = [0.3, -1.2, 4.0]
    assert cosine_similarity(a, a) == pytest.approx(1.0)


def test_cosine_is_bounded() -> None:
    assert cosine_similarity([1, 0], [-1, 0]) == pytest.approx(-1.0)
    assert -1.0 <= cosine_similarity([0.1, 0.7, -3.0], [2.0, -0.4, 9.5]) <= 1.0


def test_cosine_against_zero_vector_is_zero_not_nan() -> None:
    result = cosine_similarity([1.0, 2.0], [0.0, 0.0])
    assert result == 0.0
    assert not math.isnan(result)


def test_cosine_rejects_mismatched_or_empty_vectors() -> None:
    with pytest.raises(InputValidationError):
        cosine_similarity([1.0, 2.0], [1.0, 2.0, 3.0])
    with pytest.raises(InputValidationError):
        cosine_similarity([], [])


def test_similarity_score_clamps_negative_to_zero() -> None:
    assert similarity_score([1, 0], [-1, 0]) == 0
    assert similarity_score([1, 1], [1, 1]) == 100


# ------------------------------------------------------------------
# VectorEmbedder
# ------------------------------------------------------------------

def test_embedder_returns_backend_vector_unmodified(stub_embedding) -> None:
    backend = stub_embedding(vector=[0.5, -0.25])
    assert VectorEmbedder(backend).embed("python developer") == [0.5, -0.25]


def test_embedder_truncates_input(stub_embedding) -> None:
    backend = stub_embedding()
    VectorEmbedder(backend, config=EngineConfig(embedding_input_chars=10)).embed("x" * 50)
    assert backend.inputs == ["x" * 10]


@pytest.mark.parametrize("error", [BackendQuotaExceeded("quota"), BackendTimeout("slow")])
def test_embedder_single_failure_uses_fallback(stub_embedding, error) -> None:
    backend = stub_embedding(error=error)
    vec = VectorEmbedder(backend).embed("python developer")
    assert len(vec) == 50
    assert len(backend.inputs) == 1  # no retries


def test_embedder_without_backend_uses_fallback() -> None:
    assert VectorEmbedder().embed("python developer") == fallback_embedding("python developer")


def test_embed_skills_empty_list_skips_backend(stub_embedding) -> None:
    backend = stub_embedding()
    assert VectorEmbedder(backend).embed_skills([]) == []
    assert backend.inputs == []


def test_embed_skills_joins_names(stub_embedding) -> None:
    backend = stub_embedding()
    VectorEmbedder(backend).embed_skills(["Python", "SQL"])
    assert backend.inputs == ["Python, SQL"]


def test_embed_skills_never_returns_fallback_vector(stub_embedding) -> None:
    assert VectorEmbedder().embed_skills(["Python"]) == []
    failing = stub_embedding(error=BackendTimeout("slow"))
    assert VectorEmbedder(failing).embed_skills(["Python"]) == []


def test_embed_job_uses_title_description_and_skills(stub_embedding, make_job) -> None:
    backend = stub_embedding()
    job = make_job(["Python", "Go"], title="Backend Engineer")
    VectorEmbedder(backend).embed_job(job)
    assert backend.inputs == [job.embedding_text()]
    assert "Python Go" in backend.inputs[0]
