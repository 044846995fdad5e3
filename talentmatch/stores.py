from __future__ import annotations

import json
import os
import threading
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol

from talentmatch.models import JobPosting, MatchResult, ResumeRecord


def _ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def _best_effort_lockdown_file_permissions(path: Path) -> None:
    """
    Best-effort privacy: on Unix, set 600. On Windows, no-op.
    """
    try:
        os.chmod(path, 0o600)
    except OSError:
        pass


def _top_for_job(
        matches: Iterable[MatchResult],
        job_id: str,
        min_score: Optional[int],
        limit: int,
) -> List[MatchResult]:
    out = [
        m for m in matches
        if m.job_id == job_id and (min_score is None or m.overall_score >= min_score)
    ]
    out.sort(key=lambda m: m.overall_score, reverse=True)
    return out[:max(0, limit)]


class ResumeStore(Protocol):
    def get_active_for_user(self, user_id: str) -> Optional[ResumeRecord]:
        ...

    def save(self, record: ResumeRecord) -> ResumeRecord:
        ...


class JobStore(Protocol):
    def get(self, job_id: str) -> Optional[JobPosting]:
        ...

    def list_active(self, limit: int) -> List[JobPosting]:
        ...


class MatchStore(Protocol):
    def upsert(self, candidate_id: str, job_id: str, result: MatchResult) -> MatchResult:
        """
        Insert, or update score/breakdown/insights of the existing pair.
        Returns the stored record.
        """
        ...

    def list_for_job(self, job_id: str, min_score: Optional[int] = None, limit: int = 20) -> List[MatchResult]:
        """A job's matches at or above min_score, best first."""
        ...


class InMemoryResumeStore:
    """
    Reference ResumeStore. Saving an active record archives every other
    active record of the same owner.
    """

    def __init__(self) -> None:
        self._records: Dict[str, ResumeRecord] = {}
        self._lock = threading.Lock()

    def get(self, resume_id: str) -> Optional[ResumeRecord]:
        return self._records.get(resume_id)

    def get_active_for_user(self, user_id: str) -> Optional[ResumeRecord]:
        for record in self._records.values():
            if record.owner_id == user_id and record.is_active:
                return record
        return None

    def list_for_user(self, user_id: str) -> List[ResumeRecord]:
        return [r for r in self._records.values() if r.owner_id == user_id]

    def save(self, record: ResumeRecord) -> ResumeRecord:
        with self._lock:
            if record.is_active:
                for rid, other in list(self._records.items()):
                    if rid != record.resume_id and other.owner_id == record.owner_id and other.is_active:
                        self._records[rid] = other.archive()
            self._records[record.resume_id] = record
        return record


class InMemoryJobStore:
    def __init__(self, jobs: Optional[List[JobPosting]] = None) -> None:
        self._jobs: Dict[str, JobPosting] = {}
        for job in jobs or []:
            self.save(job)

    def save(self, job: JobPosting) -> JobPosting:
        self._jobs[job.job_id] = job
        return job

    def get(self, job_id: str) -> Optional[JobPosting]:
        return self._jobs.get(job_id)

    def list_active(self, limit: int) -> List[JobPosting]:
        return [j for j in self._jobs.values() if j.active][:max(0, limit)]


class InMemoryMatchStore:
    def __init__(self) -> None:
        self._matches: Dict[str, MatchResult] = {}
        self._lock = threading.Lock()

    def upsert(self, candidate_id: str, job_id: str, result: MatchResult) -> MatchResult:
        key = f"{candidate_id}:{job_id}"
        with self._lock:
            existing = self._matches.get(key)
            stored = existing.updated(result) if existing else result
            self._matches[key] = stored
        return stored

    def get(self, candidate_id: str, job_id: str) -> Optional[MatchResult]:
        return self._matches.get(f"{candidate_id}:{job_id}")

    def list_for_candidate(self, candidate_id: str) -> List[MatchResult]:
        out = [m for m in self._matches.values() if m.candidate_id == candidate_id]
        out.sort(key=lambda m: m.overall_score, reverse=True)
        return out

    def list_for_job(self, job_id: str, min_score: Optional[int] = None, limit: int = 20) -> List[MatchResult]:
        with self._lock:
            snapshot = list(self._matches.values())
        return _top_for_job(snapshot, job_id, min_score, limit)


class JsonMatchStore:
    """
    MatchStore persisted to a local JSON file.

    Layout:
      <base_dir>/
        matches.json -> { "<candidate_id>:<job_id>": {MatchResult...}, ... }
    """

    def __init__(self, base_dir: Path) -> None:
        self.base_dir = base_dir
        self.matches_path = base_dir / "matches.json"
        self._lock = threading.Lock()
        _ensure_dir(self.base_dir)

    def load(self) -> Dict[str, MatchResult]:
        if not self.matches_path.exists():
            return {}

        raw_text = self.matches_path.read_text(encoding="utf-8").strip()
        if not raw_text:
            return {}

        data = json.loads(raw_text)
        return {key: MatchResult.from_dict(entry) for key, entry in data.items()}

    def _write(self, matches: Dict[str, MatchResult]) -> None:
        payload = {key: m.to_dict() for key, m in matches.items()}
        self.matches_path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
        _best_effort_lockdown_file_permissions(self.matches_path)

    def upsert(self, candidate_id: str, job_id: str, result: MatchResult) -> MatchResult:
        key = f"{candidate_id}:{job_id}"
        with self._lock:
            matches = self.load()
            existing = matches.get(key)
            stored = existing.updated(result) if existing else result
            matches[key] = stored
            self._write(matches)
        return stored

    def get(self, candidate_id: str, job_id: str) -> Optional[MatchResult]:
        return self.load().get(f"{candidate_id}:{job_id}")

    def list_for_job(self, job_id: str, min_score: Optional[int] = None, limit: int = 20) -> List[MatchResult]:
        return _top_for_job(self.load().values(), job_id, min_score, limit)


def default_store_dir() -> Path:
    return Path(".talentmatch")
