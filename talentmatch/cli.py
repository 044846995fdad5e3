from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from talentmatch.config import embeddings_configured, llm_configured
from talentmatch.engine import MatchingEngine, MatchOutcome
from talentmatch.llm.backends import build_embedding_backend, build_generative_backend
from talentmatch.logging_config import setup_logging
from talentmatch.models import JobPosting, ResumeRecord, StructuredProfile


def _read_text(path: str) -> str:
    p = Path(path)
    if not p.exists():
        print(f"[talentmatch] File not found: {p}", file=sys.stderr)
        raise SystemExit(2)
    return p.read_text(encoding="utf-8")


def _build_engine(offline: bool) -> MatchingEngine:
    if offline:
        return MatchingEngine()
    return MatchingEngine(
        generative=build_generative_backend() if llm_configured() else None,
        embedding=build_embedding_backend() if embeddings_configured() else None,
    )


def print_profile(profile: StructuredProfile) -> None:
    info = profile.personal_info
    print("\n=== Parsed Resume ===")
    print(f"Source: {profile.source}")
    print(f"Name: {info.name or '-'}")
    print(f"Email: {info.email or '-'} | Phone: {info.phone or '-'}")
    skills = profile.skill_names()
    print(f"Skills ({len(skills)}): {', '.join(skills) if skills else '-'}")
    print(f"Experience entries: {len(profile.experience)}")
    for exp in profile.experience[:5]:
        span = ""
        if exp.start_date:
            end = "present" if exp.current else (exp.end_date.isoformat() if exp.end_date else "?")
            span = f"  [{exp.start_date.isoformat()} - {end}]"
        print(f"   - {exp.position or exp.description}{span}")
    print(f"Education entries: {len(profile.education)}")
    print(f"Projects: {len(profile.projects)}")


def print_outcome(outcome: MatchOutcome, job: JobPosting) -> None:
    b = outcome.breakdown
    print(f"\n=== Match: {job.title or 'job'} @ {job.company or '-'} ===")
    print(f"Overall: {outcome.score}")
    print(f"   skills: {b.skills} ({b.skills_method}) | experience: {b.experience} "
          f"| education: {b.education} | location: {b.location}")
    if b.matched_skills:
        print(f"   matched: {', '.join(b.matched_skills)}")
    if b.missing_skills:
        print(f"   missing: {', '.join(b.missing_skills)}")

    ins = outcome.insights
    for title, items in (
            ("Strengths", ins.strengths),
            ("Weaknesses", ins.weaknesses),
            ("Recommendations", ins.recommendations),
            ("Interview tips", ins.interview_tips),
    ):
        if items:
            print(f"\n{title}:")
            for item in items:
                print(f"   - {item}")


def _cmd_parse(args: argparse.Namespace, engine: MatchingEngine) -> int:
    profile = engine.parse_resume(_read_text(args.resume))
    if args.json:
        print(json.dumps(profile.to_dict(), indent=2))
    else:
        print_profile(profile)
    return 0


def _read_job(path: str) -> Optional[JobPosting]:
    try:
        job_data = json.loads(_read_text(path))
    except json.JSONDecodeError as exc:
        print(f"[talentmatch] Job file is not valid JSON: {exc.msg}", file=sys.stderr)
        return None
    if not isinstance(job_data, dict):
        print("[talentmatch] Job file must contain a JSON object", file=sys.stderr)
        return None
    return JobPosting.from_dict(job_data)


def _cmd_match(args: argparse.Namespace, engine: MatchingEngine) -> int:
    raw_resume = _read_text(args.resume)
    posting = _read_job(args.job)
    if posting is None:
        return 2

    record: ResumeRecord = engine.ingest_resume(args.candidate_id, raw_resume)
    job = engine.prepare_job(posting)
    outcome = engine.compute_match(record, job)

    if args.json:
        print(json.dumps(outcome.to_dict(), indent=2, default=str))
    else:
        print_outcome(outcome, job)
    return 0


def _cmd_interview(args: argparse.Namespace, engine: MatchingEngine) -> int:
    profile = engine.parse_resume(_read_text(args.resume))
    job = _read_job(args.job)
    if job is None:
        return 2

    record = ResumeRecord(owner_id="local-user", raw_text="", profile=profile)
    questions = engine.interview_questions(record, job, args.types, args.count)
    tips = engine.prep_tips(job.title, job.company, args.industry)

    if args.json:
        print(json.dumps({
            "questions": [q.to_dict() for q in questions],
            "tips": [t.to_dict() for t in tips],
        }, indent=2))
        return 0

    print(f"\n=== Interview prep: {job.title or 'job'} @ {job.company or '-'} ===")
    for q in questions:
        print(f"{q.id:>2}. [{q.category}] {q.question}")
    print("\nPreparation tips:")
    for tip in tips:
        print(f"   - ({tip.priority}) {tip.title}: {tip.description}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="talentmatch", description="Candidate/job compatibility engine")
    parser.add_argument("--json", action="store_true", help="Print JSON only (machine-readable)")
    parser.add_argument("--offline", action="store_true", help="Never call AI backends; use deterministic fallbacks")
    parser.add_argument("--log-level", default=None, help="Logging level (default: TALENTMATCH_LOG_LEVEL or WARNING)")
    sub = parser.add_subparsers(dest="command", required=True)

    p_parse = sub.add_parser("parse", help="Extract structured data from a plain-text resume")
    p_parse.add_argument("resume", help="Path to resume .txt")
    p_parse.set_defaults(func=_cmd_parse)

    p_match = sub.add_parser("match", help="Score a resume against a job posting")
    p_match.add_argument("resume", help="Path to resume .txt")
    p_match.add_argument("job", help="Path to job posting .json")
    p_match.add_argument("--candidate-id", default="local-user", help="Candidate identifier")
    p_match.set_defaults(func=_cmd_match)

    p_prep = sub.add_parser("interview", help="Interview questions and preparation tips for a job")
    p_prep.add_argument("resume", help="Path to resume .txt")
    p_prep.add_argument("job", help="Path to job posting .json")
    p_prep.add_argument("--count", type=int, default=10, help="Number of questions (default: 10)")
    p_prep.add_argument(
        "--types",
        nargs="+",
        default=None,
        help="Question types, e.g. technical behavioral situational",
    )
    p_prep.add_argument("--industry", default="", help="Industry hint for the preparation tips")
    p_prep.set_defaults(func=_cmd_interview)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    engine = _build_engine(args.offline)
    return args.func(args, engine)


if __name__ == "__main__":
    raise SystemExit(main())
