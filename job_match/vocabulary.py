"""
Vocabulary Builder

Scans the collected examples once and freezes six ordered, deduplicated lists
of categorical values. A value's position in its list is its feature offset,
so the lists are persisted with the model and reused verbatim at inference.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Tuple

from .outcomes import TrainingExample

logger = logging.getLogger(__name__)

VOCABULARY_KEYS = {
    'skills': 'skillsList',
    'titles': 'titlesList',
    'industries': 'industriesList',
    'degrees': 'degreesList',
    'fields': 'fieldsList',
    'locations': 'locationsList',
}


@dataclass(frozen=True)
class Vocabulary:
    skills: Tuple[str, ...] = ()
    titles: Tuple[str, ...] = ()
    industries: Tuple[str, ...] = ()
    degrees: Tuple[str, ...] = ()
    fields: Tuple[str, ...] = ()
    locations: Tuple[str, ...] = ()

    def sizes(self) -> Dict[str, int]:
        return {name: len(getattr(self, name)) for name in VOCABULARY_KEYS}

    def to_dict(self) -> Dict[str, Any]:
        return {key: list(getattr(self, name)) for name, key in VOCABULARY_KEYS.items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Vocabulary':
        return cls(**{name: tuple(data.get(key) or ()) for name, key in VOCABULARY_KEYS.items()})


class _OrderedSet:
    def __init__(self):
        self._items: Dict[str, None] = {}

    def add(self, value: str):
        if value:
            self._items.setdefault(value.lower(), None)

    def freeze(self) -> Tuple[str, ...]:
        return tuple(self._items)


def build_vocabulary(examples: Iterable[TrainingExample]) -> Vocabulary:
    """
    Build the vocabulary from the full example set

    Values are lower-cased and kept in first-seen order.

    Args:
        examples: All examples of the run, in collection order

    Returns:
        Frozen Vocabulary
    """
    skills, titles, industries = _OrderedSet(), _OrderedSet(), _OrderedSet()
    degrees, fields, locations = _OrderedSet(), _OrderedSet(), _OrderedSet()

    for example in examples:
        for skill in example.candidate.skills:
            skills.add(skill)
        for experience in example.candidate.experience:
            titles.add(experience.title)
        industries.add(example.job.industry)
        for education in example.candidate.education:
            degrees.add(education.degree)
            fields.add(education.field)
        locations.add(example.job.location)

    vocabulary = Vocabulary(
        skills=skills.freeze(),
        titles=titles.freeze(),
        industries=industries.freeze(),
        degrees=degrees.freeze(),
        fields=fields.freeze(),
        locations=locations.freeze(),
    )
    logger.info(f"Built vocabulary: {vocabulary.sizes()}")
    return vocabulary
