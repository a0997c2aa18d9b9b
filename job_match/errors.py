"""
Error types for the job match training pipeline.
"""

from typing import List, Optional


class JobMatchError(Exception):
    """Base class for pipeline errors"""


class InsufficientDataError(JobMatchError):
    """Raised when a run collects fewer examples than the training minimum"""

    def __init__(self, count: int, minimum: int):
        self.count = count
        self.minimum = minimum
        super().__init__(
            f"Insufficient training data. Need at least {minimum} samples, got {count}"
        )


class EncodingMismatchError(JobMatchError):
    """Raised when an encoded feature vector does not have the expected length"""

    def __init__(self, expected: int, actual: int, context: Optional[str] = None):
        self.expected = expected
        self.actual = actual
        message = f"Feature length mismatch: expected {expected}, got {actual}"
        if context:
            message = f"{message} ({context})"
        super().__init__(message)


class ArtifactMissingError(JobMatchError):
    """Raised when a persisted model, metadata or report cannot be found"""

    def __init__(self, name: str, run_id: Optional[str] = None):
        self.name = name
        self.run_id = run_id
        where = f" for run {run_id}" if run_id else ""
        super().__init__(f"Artifact '{name}' not found{where}")


class SamplingShortfallError(JobMatchError):
    """
    Raised by the negative sampler when it cannot reach its target.

    Not fatal: the examples that were produced travel with the error so the
    caller can log it and carry on with fewer negatives.
    """

    def __init__(self, requested: int, produced: List):
        self.requested = requested
        self.examples = produced
        super().__init__(
            f"Negative sampling produced {len(produced)} of {requested} requested examples"
        )
