"""
talentmatch/engine.py

MatchingEngine: the application-facing facade.

Wires the extractor, embedder, aggregator and insight generator around
injected backends and stores. Backend failures never surface here; only
MissingInputError does, when a caller asks for a resume or job that does not
exist.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from talentmatch.config import EngineConfig, ScoringPolicy, load_engine_config, load_scoring_policy
from talentmatch.embedding import VectorEmbedder, cosine_similarity
from talentmatch.errors import InputValidationError, MissingInputError
from talentmatch.insights import InsightGenerator, ResumeAnalyzer
from talentmatch.interview import InterviewCoach
from talentmatch.llm.backends import EmbeddingBackend, GenerativeBackend
from talentmatch.matching import MatchAggregator, MatchBreakdown
from talentmatch.models import (
    AnswerFeedback,
    Insights,
    InterviewQuestion,
    JobPosting,
    MatchResult,
    PrepTip,
    ResumeAnalysis,
    ResumeRecord,
    StructuredProfile,
)
from talentmatch.resume_parser import StructuredExtractor
from talentmatch.stores import JobStore, MatchStore, ResumeStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchOutcome:
    score: int
    breakdown: MatchBreakdown
    insights: Insights

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "breakdown": self.breakdown.to_dict(),
            "insights": self.insights.to_dict(),
        }


@dataclass(frozen=True)
class JobSearchHit:
    job: JobPosting
    similarity: float


class MatchingEngine:
    def __init__(
            self,
            *,
            generative: Optional[GenerativeBackend] = None,
            embedding: Optional[EmbeddingBackend] = None,
            policy: Optional[ScoringPolicy] = None,
            config: Optional[EngineConfig] = None,
            resumes: Optional[ResumeStore] = None,
            jobs: Optional[JobStore] = None,
            matches: Optional[MatchStore] = None,
    ) -> None:
        self.policy = policy or load_scoring_policy()
        self.config = config or load_engine_config()
        self.resumes = resumes
        self.jobs = jobs
        self.matches = matches

        self._extractor = StructuredExtractor(generative)
        self._embedder = VectorEmbedder(embedding, config=self.config)
        self._aggregator = MatchAggregator(generative, policy=self.policy)
        self._insights = InsightGenerator(generative)
        self._analyzer = ResumeAnalyzer(generative)
        self._coach = InterviewCoach(generative)

    # ------------------------------------------------------------------
    # Resume side
    # ------------------------------------------------------------------

    def parse_resume(self, raw_text: str) -> StructuredProfile:
        return self._extractor.extract(raw_text)

    def reanalyze(self, profile: StructuredProfile) -> ResumeAnalysis:
        return self._analyzer.analyze(profile)

    def ingest_resume(
            self,
            owner_id: str,
            raw_text: str,
            store: Optional[ResumeStore] = None,
    ) -> ResumeRecord:
        """
        Extract, embed and analyze a freshly uploaded resume.
        With a store, the record becomes the owner's active resume and the
        previous active one is archived.
        """
        profile = self.parse_resume(raw_text)
        full_text_embedding = self._embedder.embed(raw_text)
        skills_embedding = self._embedder.embed_skills(profile.skill_names())

        store = store or self.resumes
        previous = store.get_active_for_user(owner_id) if store is not None else None
        if previous is not None:
            record = previous.new_version(
                raw_text=raw_text,
                profile=profile,
                full_text_embedding=full_text_embedding,
                skills_embedding=skills_embedding,
            )
        else:
            record = ResumeRecord(
                owner_id=owner_id,
                raw_text=raw_text,
                profile=profile,
                full_text_embedding=full_text_embedding,
                skills_embedding=skills_embedding,
            )
        record = record.with_analysis(self.reanalyze(profile))

        if store is not None:
            store.save(record)
        logger.info("Ingested resume %s for owner %s (source=%s)", record.resume_id, owner_id, profile.source)
        return record

    # ------------------------------------------------------------------
    # Job side
    # ------------------------------------------------------------------

    def prepare_job(self, job: JobPosting, previous: Optional[JobPosting] = None) -> JobPosting:
        """
        Attach an embedding when the job has none, or when its title,
        description or skills changed since `previous` (the stored version).
        """
        if not job.needs_reembedding(previous):
            return job
        return job.with_embedding(self._embedder.embed_job(job))

    def search_jobs(self, query: str, jobs: Sequence[JobPosting], limit: int = 20) -> List[JobSearchHit]:
        """
        Rank jobs by cosine similarity to the query. Jobs without an embedding,
        or with one from a different vector space, are skipped.
        """
        query_vec = self._embedder.embed(query)
        hits: List[JobSearchHit] = []
        for job in jobs:
            if not job.embedding:
                continue
            try:
                sim = cosine_similarity(query_vec, job.embedding)
            except InputValidationError:
                logger.debug("Skipping job %s: embedding incompatible with query", job.job_id)
                continue
            hits.append(JobSearchHit(job=job, similarity=sim))
        hits.sort(key=lambda h: h.similarity, reverse=True)
        return hits[:max(0, limit)]

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------

    def compute_match(self, resume: ResumeRecord, job: JobPosting) -> MatchOutcome:
        breakdown = self._aggregator.score(resume, job)
        insights = self._insights.generate(resume, job, breakdown)
        return MatchOutcome(score=breakdown.overall, breakdown=breakdown, insights=insights)

    def _require_stores(self) -> Tuple[ResumeStore, JobStore]:
        if self.resumes is None or self.jobs is None:
            raise MissingInputError("resume and job stores are required for stored matching")
        return self.resumes, self.jobs

    def _active_resume(self, candidate_id: str) -> ResumeRecord:
        resumes, _ = self._require_stores()
        resume = resumes.get_active_for_user(candidate_id)
        if resume is None:
            raise MissingInputError(f"no active resume for candidate {candidate_id}")
        return resume

    def _to_result(self, candidate_id: str, resume: ResumeRecord, job: JobPosting, outcome: MatchOutcome) -> MatchResult:
        return MatchResult(
            candidate_id=candidate_id,
            job_id=job.job_id,
            resume_id=resume.resume_id,
            overall_score=outcome.score,
            breakdown=outcome.breakdown,
            insights=outcome.insights,
        )

    def _store(self, result: MatchResult) -> MatchResult:
        if self.matches is None:
            return result
        return self.matches.upsert(result.candidate_id, result.job_id, result)

    def match_candidate(self, candidate_id: str, job_id: str) -> MatchResult:
        _, jobs = self._require_stores()
        resume = self._active_resume(candidate_id)
        job = jobs.get(job_id)
        if job is None:
            raise MissingInputError(f"job {job_id} not found")
        outcome = self.compute_match(resume, job)
        return self._store(self._to_result(candidate_id, resume, job, outcome))

    def generate_matches(
            self,
            candidate_id: str,
            min_score: Optional[int] = None,
            limit: Optional[int] = None,
    ) -> List[MatchResult]:
        """
        Score the candidate's active resume against active jobs.
        Keeps results at or above min_score, best first. A job that fails is
        logged and skipped.
        """
        _, jobs = self._require_stores()
        resume = self._active_resume(candidate_id)
        min_score = self.config.batch_min_score if min_score is None else min_score
        limit = self.config.batch_job_limit if limit is None else limit
        candidates = jobs.list_active(limit)

        def _one(job: JobPosting) -> Optional[MatchOutcome]:
            try:
                return self.compute_match(resume, job)
            except Exception:
                logger.exception("Matching failed for job %s; skipping", job.job_id)
                return None

        with ThreadPoolExecutor(max_workers=self.config.batch_workers) as pool:
            outcomes = list(pool.map(_one, candidates))

        results: List[MatchResult] = []
        for job, outcome in zip(candidates, outcomes):
            if outcome is None or outcome.score < min_score:
                continue
            results.append(self._to_result(candidate_id, resume, job, outcome))

        results.sort(key=lambda r: r.overall_score, reverse=True)
        return [self._store(r) for r in results]

    def job_matches(self, job_id: str, min_score: Optional[int] = None, limit: int = 20) -> List[MatchResult]:
        """Recruiter view: stored matches for one job, best first."""
        if self.matches is None:
            raise MissingInputError("a match store is required to list a job's matches")
        return self.matches.list_for_job(job_id, min_score=min_score, limit=limit)

    # ------------------------------------------------------------------
    # Interview preparation
    # ------------------------------------------------------------------

    def interview_questions(
            self,
            resume: ResumeRecord,
            job: JobPosting,
            question_types: Optional[Sequence[str]] = None,
            count: int = 10,
    ) -> List[InterviewQuestion]:
        return self._coach.questions(resume.profile, job, question_types, count)

    def analyze_answer(self, question: str, answer: str, job_context: str = "") -> AnswerFeedback:
        return self._coach.analyze_answer(question, answer, job_context)

    def prep_tips(self, job_title: str = "", company: str = "", industry: str = "") -> List[PrepTip]:
        return self._coach.prep_tips(job_title, company, industry)
