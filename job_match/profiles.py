"""
Profile Extractor

Normalizes raw candidate and job records (as returned by the data source)
into immutable CandidateProfile / JobProfile structures. All defaulting of
optional fields happens here so that the feature encoder never has to deal
with missing values.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

import pandas as pd

from .config import DEFAULT_DEGREE_LEVELS

logger = logging.getLogger(__name__)

DateLike = Union[str, date, datetime, pd.Timestamp, None]


@dataclass(frozen=True)
class Location:
    city: str = ''
    state: str = ''
    country: str = ''


@dataclass(frozen=True)
class Preferences:
    job_types: Tuple[str, ...] = ()
    industries: Tuple[str, ...] = ()
    locations: Tuple[str, ...] = ()
    expected_salary: Optional[float] = None


@dataclass(frozen=True)
class Experience:
    title: str
    company_name: str = ''
    duration_months: int = 0
    skills: Tuple[str, ...] = ()
    level: str = 'entry'


@dataclass(frozen=True)
class Education:
    degree: str
    field: str = ''
    grade: Optional[float] = None
    institution: str = ''


@dataclass(frozen=True)
class SalaryRange:
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    currency: Optional[str] = None
    period: Optional[str] = None


@dataclass(frozen=True)
class CandidateProfile:
    """Canonical candidate profile used for feature encoding"""
    id: Optional[str] = None
    skills: Tuple[str, ...] = ()
    experience: Tuple[Experience, ...] = ()
    education: Tuple[Education, ...] = ()
    location: Location = field(default_factory=Location)
    preferences: Preferences = field(default_factory=Preferences)


@dataclass(frozen=True)
class JobProfile:
    """Canonical job profile used for feature encoding"""
    id: Optional[str] = None
    title: str = ''
    description: str = ''
    requirements: Tuple[str, ...] = ()
    employment_type: str = ''
    location: str = ''
    industry: str = ''
    company_size: str = ''
    salary: Optional[SalaryRange] = None
    experience_level: str = 'entry'
    skills: Tuple[str, ...] = ()


def _to_timestamp(value: DateLike) -> Optional[pd.Timestamp]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        timestamp = pd.Timestamp(value)
    except (ValueError, TypeError):
        logger.warning(f"Unparsable date {value!r}, treating as missing")
        return None
    if pd.isna(timestamp):
        return None
    return timestamp


def calculate_duration(start_date: DateLike, end_date: DateLike = None,
                       now: Optional[datetime] = None) -> int:
    """
    Whole months between start and end (or now), floored at zero

    Args:
        start_date: Start of the period
        end_date: End of the period, None for an ongoing position
        now: Reference time used when end_date is missing

    Returns:
        Duration in months
    """
    start = _to_timestamp(start_date)
    if start is None:
        return 0

    end = _to_timestamp(end_date)
    if end is None:
        end = pd.Timestamp(now or datetime.now())

    months = (end.year - start.year) * 12 + (end.month - start.month)
    return max(0, months)


def parse_grade(grade: Any) -> float:
    """Parse a numeric or numeric-like grade, 0 when it cannot be parsed"""
    if isinstance(grade, bool):
        return 0.0
    if isinstance(grade, (int, float)):
        return float(grade)
    if isinstance(grade, str):
        try:
            return float(grade.strip())
        except ValueError:
            return 0.0
    return 0.0


def get_education_level(degree: str, degree_levels: Optional[Mapping[str, int]] = None,
                        default: int = 1) -> int:
    """Resolve a degree to its rank by substring match against the degree table"""
    levels = DEFAULT_DEGREE_LEVELS if degree_levels is None else degree_levels
    normalized = (degree or '').lower()
    for key, value in levels.items():
        if key in normalized:
            return value
    return default


def _dedupe(values: Iterable[str]) -> Tuple[str, ...]:
    # dict keeps first-seen order
    return tuple(dict.fromkeys(v for v in values if v))


def _skill_names(raw_skills: Optional[Iterable[Any]]) -> List[str]:
    names = []
    for skill in raw_skills or []:
        if isinstance(skill, Mapping):
            skill = skill.get('name')
        if skill:
            names.append(str(skill).strip().lower())
    return names


def _parse_amount(raw: Any) -> Optional[float]:
    """Numeric or numeric-like amount, None when it cannot be parsed"""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, str):
        raw = raw.replace(',', '').strip()
    try:
        return float(raw)
    except (TypeError, ValueError):
        return None


def _parse_salary(raw: Any) -> Optional[SalaryRange]:
    if isinstance(raw, Mapping):
        minimum = _parse_amount(raw.get('min', raw.get('minimum')))
        maximum = _parse_amount(raw.get('max', raw.get('maximum')))
        if minimum is None and maximum is None:
            return None
        return SalaryRange(
            minimum=minimum,
            maximum=maximum,
            currency=raw.get('currency'),
            period=raw.get('period'),
        )
    value = _parse_amount(raw)
    if value is None:
        return None
    return SalaryRange(minimum=value, maximum=value)


def _normalize_job_location(raw: Any) -> str:
    if isinstance(raw, Mapping):
        parts = [str(raw.get(key) or '').strip() for key in ('city', 'state', 'country')]
        return ', '.join(part for part in parts if part).lower()
    return str(raw or '').strip().lower()


def extract_candidate_profile(record: Mapping[str, Any],
                              now: Optional[datetime] = None) -> CandidateProfile:
    """
    Build a CandidateProfile from a raw candidate record

    Args:
        record: Candidate with nested skills, experiences and education
        now: Reference time for ongoing experience entries

    Returns:
        CandidateProfile
    """
    experiences = []
    for entry in record.get('experiences') or []:
        company = entry.get('company')
        company_name = company.get('name') if isinstance(company, Mapping) else None
        experiences.append(Experience(
            title=str(entry.get('title') or '').strip().lower(),
            company_name=company_name or entry.get('companyName') or '',
            duration_months=calculate_duration(entry.get('startDate'), entry.get('endDate'), now=now),
            skills=_dedupe(_skill_names(entry.get('skills'))),
            level=entry.get('level') or 'entry',
        ))

    education = []
    for entry in record.get('education') or []:
        grade = entry.get('grade')
        education.append(Education(
            degree=str(entry.get('degree') or '').strip().lower(),
            field=str(entry.get('field') or '').strip().lower(),
            grade=parse_grade(grade) if grade is not None else None,
            institution=entry.get('institution') or '',
        ))

    preferences = Preferences(
        job_types=tuple(record.get('preferredJobTypes') or ()),
        industries=tuple(record.get('preferredIndustries') or ()),
        locations=tuple(record.get('preferredLocations') or ()),
        expected_salary=_parse_amount(record.get('expectedSalary')),
    )

    return CandidateProfile(
        id=_record_id(record),
        skills=_dedupe(_skill_names(record.get('skills'))),
        experience=tuple(experiences),
        education=tuple(education),
        location=Location(
            city=record.get('city') or '',
            state=record.get('state') or '',
            country=record.get('country') or '',
        ),
        preferences=preferences,
    )


def extract_job_profile(record: Mapping[str, Any]) -> JobProfile:
    """
    Build a JobProfile from a raw job record

    Args:
        record: Job with a nested company

    Returns:
        JobProfile
    """
    company = record.get('company')
    if not isinstance(company, Mapping):
        company = {}

    return JobProfile(
        id=_record_id(record),
        title=str(record.get('title') or '').strip().lower(),
        description=record.get('description') or '',
        requirements=tuple(record.get('requirements') or ()),
        employment_type=str(record.get('type') or '').lower(),
        location=_normalize_job_location(record.get('location')),
        industry=str(company.get('industry') or '').strip().lower(),
        company_size=company.get('size') or '',
        salary=_parse_salary(record.get('salary')),
        experience_level=str(record.get('experienceLevel') or 'entry').lower(),
        skills=_dedupe(_skill_names(record.get('skills'))),
    )


def _record_id(record: Mapping[str, Any]) -> Optional[str]:
    value = record.get('id')
    return str(value) if value is not None else None
