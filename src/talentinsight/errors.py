from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from talentinsight.types import ReconcileSummary


class TalentInsightError(Exception):
    """Base service error."""


class InvalidSubmissionError(TalentInsightError):
    """Raised when a payload fails validation before anything is written."""


class NotFoundError(TalentInsightError):
    """Raised when the requested entity does not exist."""


class ConflictError(TalentInsightError):
    """Raised when a write collides with an existing unique value."""


class ReconciliationAbortedError(TalentInsightError):
    """Raised when a batch import is rolled back by an infrastructure failure.

    Carries the counters collected before the failure so callers can still
    report them.
    """

    def __init__(self, message: str, summary: ReconcileSummary):
        super().__init__(message)
        self.summary = summary
