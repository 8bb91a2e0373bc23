from __future__ import annotations

import secrets
import string
import time
from collections.abc import Callable

from talentinsight.types import RecordKind

_BASE36 = string.digits + string.ascii_lowercase
_KIND_TAGS: dict[str, str] = {"candidate": "cs", "applicant": "as"}

Clock = Callable[[], int]


def epoch_millis() -> int:
    return time.time_ns() // 1_000_000


def random_suffix(length: int) -> str:
    return "".join(secrets.choice(_BASE36) for _ in range(length))


class IdentifierFactory:
    """Generates entity and historical-record identifiers.

    Historical ids for candidate and applicant surveys are derived from the
    survey instance id, so re-archiving the same survey always targets the
    same row. Everything else is time-based with a random suffix.
    """

    def __init__(self, clock: Clock | None = None, suffix: Callable[[int], str] | None = None):
        self._clock = clock or epoch_millis
        self._suffix = suffix or random_suffix

    def derive_record_id(self, kind: RecordKind, instance_id: str | None = None) -> str:
        if kind in _KIND_TAGS:
            if not instance_id:
                raise ValueError(f"{kind} historical records need a survey instance id")
            return f"hist_{_KIND_TAGS[kind]}_{instance_id}"
        if kind == "import":
            if instance_id:
                return instance_id
            return f"hist_auto_{self._clock()}_{self._suffix(5)}"
        raise ValueError(f"unsupported record kind '{kind}'")

    def user_id(self) -> str:
        return f"user_{self._clock()}_{self._suffix(5)}"

    def company_user_id(self) -> str:
        return f"comp_user_{self._clock()}_{self._suffix(4)}"

    def candidate_survey_id(self, user_id: str) -> str:
        return f"survey_{self._clock()}_{user_id[-4:]}"

    def applicant_survey_id(self, company_id: str) -> str:
        return f"appsurvey_{self._clock()}_{company_id[-4:]}"


_DEFAULT_FACTORY = IdentifierFactory()


def derive_record_id(kind: RecordKind, instance_id: str | None = None) -> str:
    return _DEFAULT_FACTORY.derive_record_id(kind, instance_id)
