from datetime import date

import pytest

from talentmatch.config import ScoringPolicy
from talentmatch.matching.scoring import (
    clamp_score,
    education_score,
    experience_score,
    lexical_skills_score,
    location_score,
    round_half_up,
    skill_overlap,
    total_experience_years,
)
from talentmatch.models import (
    EducationEntry,
    EducationRequirement,
    ExperienceEntry,
    ExperienceRequirement,
    JobLocation,
    PersonalInfo,
    StructuredProfile,
)


def _profile_with_years(years: int) -> StructuredProfile:
    return StructuredProfile(
        experience=[ExperienceEntry(company="Acme", start_date=date(2010, 1, 1), end_date=date(2010 + years, 1, 1))]
    )


# ------------------------------------------------------------------
# Experience
# ------------------------------------------------------------------

def test_experience_below_minimum_is_proportional() -> None:
    assert experience_score(_profile_with_years(2), ExperienceRequirement(min_years=4)) == 50


def test_experience_meeting_minimum_is_full() -> None:
    assert experience_score(_profile_with_years(5), ExperienceRequirement(min_years=4)) == 100


@pytest.mark.parametrize("min_years", [None, 0])
def test_experience_without_minimum_is_full(min_years) -> None:
    assert experience_score(StructuredProfile(), ExperienceRequirement(min_years=min_years)) == 100


def test_experience_ignores_entries_without_both_dates() -> None:
    profile = StructuredProfile(experience=[
        ExperienceEntry(start_date=date(2015, 1, 1), end_date=date(2018, 1, 1)),
        ExperienceEntry(start_date=date(2019, 1, 1), current=True),
        ExperienceEntry(description="undated"),
    ])
    assert total_experience_years(profile) == 3


def test_experience_years_round_half_up() -> None:
    # 18 months -> 1.5 years -> 2
    profile = StructuredProfile(experience=[ExperienceEntry(start_date=date(2020, 1, 1), end_date=date(2021, 7, 1))])
    assert total_experience_years(profile) == 2


# ------------------------------------------------------------------
# Education
# ------------------------------------------------------------------

def test_education_not_required_always_full() -> None:
    req = EducationRequirement(degree="PhD", required=False)
    assert education_score(StructuredProfile(), req) == 100
    assert education_score(StructuredProfile(education=[EducationEntry(degree="High School")]), req) == 100


def test_education_required_substring_match() -> None:
    req = EducationRequirement(degree="Bachelor", required=True)
    ok = StructuredProfile(education=[EducationEntry(degree="Bachelor of Science")])
    ko = StructuredProfile(education=[EducationEntry(degree="Diploma")])
    assert education_score(ok, req) == 100
    assert education_score(ko, req) == 0
    assert education_score(StructuredProfile(), req) == 0


# ------------------------------------------------------------------
# Location
# ------------------------------------------------------------------

def _located(where: str) -> StructuredProfile:
    return StructuredProfile(personal_info=PersonalInfo(location=where))


def test_location_rules(policy) -> None:
    assert location_score(_located(""), JobLocation(remote=True), policy) == 100
    assert location_score(_located(""), JobLocation(city="Berlin"), policy) == 50
    assert location_score(_located("Berlin"), JobLocation(city=""), policy) == 50
    assert location_score(_located("Berlin, Germany"), JobLocation(city="berlin"), policy) == 100
    assert location_score(_located("Paris"), JobLocation(city="Berlin"), policy) == 30


def test_location_constants_come_from_policy() -> None:
    policy = ScoringPolicy(unknown_location_score=40, location_mismatch_score=10)
    assert location_score(_located(""), JobLocation(city="Berlin"), policy) == 40
    assert location_score(_located("Paris"), JobLocation(city="Berlin"), policy) == 10


# ------------------------------------------------------------------
# Lexical skills
# ------------------------------------------------------------------

def test_lexical_exact_and_partial_credit(policy) -> None:
    # Python exact (1.0), React partial via "React Native" (0.5), Go missing (0)
    score = lexical_skills_score(["python", "React Native"], ["Python", "React", "Go"], policy)
    assert score == 50


def test_lexical_one_of_two(policy) -> None:
    assert lexical_skills_score(["Python", "SQL"], ["Python", "Go"], policy) == 50


def test_lexical_empty_inputs_score_zero(policy) -> None:
    assert lexical_skills_score([], ["Python"], policy) == 0
    assert lexical_skills_score(["Python"], [], policy) == 0


def test_skill_overlap_lists() -> None:
    matched, missing, extra = skill_overlap(["Python", "SQL", "React Native"], ["Python", "Go", "React"])
    assert matched == ["Python", "React"]
    assert missing == ["Go"]
    assert extra == ["SQL"]


def test_round_and_clamp() -> None:
    assert round_half_up(72.5) == 73
    assert clamp_score(-3) == 0
    assert clamp_score(140) == 100
