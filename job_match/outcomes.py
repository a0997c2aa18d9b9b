"""
Outcome Labeler

Turns observed interaction signals into the engagement score used as the
regression target.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict

from .profiles import CandidateProfile, JobProfile

# Highest-precedence signal first; exactly one weight applies
ENGAGEMENT_WEIGHTS: Dict[str, float] = {
    'hired': 1.0,
    'interviewed': 0.8,
    'applied': 0.6,
    'saved': 0.4,
    'viewed': 0.2,
}


class ApplicationStatus(str, Enum):
    PENDING = 'PENDING'
    REVIEWED = 'REVIEWED'
    SHORTLISTED = 'SHORTLISTED'
    ACCEPTED = 'ACCEPTED'
    REJECTED = 'REJECTED'
    WITHDRAWN = 'WITHDRAWN'


def calculate_engagement_score(applied: bool = False, interviewed: bool = False,
                               hired: bool = False, saved: bool = False,
                               viewed: bool = False) -> float:
    """Score of the strongest signal present (0.0 when none)"""
    flags = {
        'hired': hired,
        'interviewed': interviewed,
        'applied': applied,
        'saved': saved,
        'viewed': viewed,
    }
    for signal, weight in ENGAGEMENT_WEIGHTS.items():
        if flags[signal]:
            return weight
    return 0.0


@dataclass(frozen=True)
class InteractionOutcome:
    applied: bool = False
    interviewed: bool = False
    hired: bool = False
    saved: bool = False
    viewed: bool = False

    @property
    def engagement_score(self) -> float:
        return calculate_engagement_score(
            applied=self.applied,
            interviewed=self.interviewed,
            hired=self.hired,
            saved=self.saved,
            viewed=self.viewed,
        )

    @property
    def is_negative(self) -> bool:
        return not (self.applied or self.interviewed or self.hired or self.saved or self.viewed)

    @classmethod
    def from_application(cls, status: str, interview_count: int) -> 'InteractionOutcome':
        return cls(
            applied=True,
            interviewed=interview_count > 0,
            hired=str(status).upper() == ApplicationStatus.ACCEPTED.value,
            viewed=True,
        )

    @classmethod
    def from_saved_job(cls) -> 'InteractionOutcome':
        return cls(saved=True, viewed=True)

    @classmethod
    def from_job_view(cls) -> 'InteractionOutcome':
        return cls(viewed=True)

    @classmethod
    def negative(cls) -> 'InteractionOutcome':
        return cls()

    def to_dict(self) -> Dict[str, object]:
        return {
            'applied': self.applied,
            'interviewed': self.interviewed,
            'hired': self.hired,
            'saved': self.saved,
            'viewed': self.viewed,
            'engagement_score': self.engagement_score,
        }


@dataclass(frozen=True)
class TrainingExample:
    """A (candidate, job, outcome) triple; lives only for one run"""
    candidate: CandidateProfile
    job: JobProfile
    outcome: InteractionOutcome

    @property
    def label(self) -> float:
        return self.outcome.engagement_score
