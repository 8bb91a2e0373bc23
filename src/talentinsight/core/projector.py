from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from talentinsight.core.catalog import QuestionCatalog
from talentinsight.errors import InvalidSubmissionError
from talentinsight.types import (
    ApplicantSurveySubmission,
    CandidateSurveySubmission,
    SurveyResponseItem,
)

logger = logging.getLogger(__name__)

Answer = int | float | None

BASE_COLUMNS: tuple[str, ...] = (
    "record_id",
    "submission_source",
    "submission_date",
    "full_name",
    "age",
    "gender",
    "study_field",
)

PLATFORM_SOURCE = "CandidateSurvey_Platform"
MISSING_NAME = "N/A"

# Accepted spellings of the base fields in bulk-import rows, compared casefolded.
_IMPORT_ALIASES: dict[str, tuple[str, ...]] = {
    "record_id": ("recordId", "record_id"),
    "submission_source": ("submissionSource", "submission_source"),
    "submission_date": ("submissionDate", "submission_date"),
    "full_name": ("FullName", "full_name", "fullName"),
    "age": ("Age",),
    "gender": ("Gender",),
    "study_field": ("Study_field", "studyField", "study_field"),
}


@dataclass(slots=True)
class HistoricalRecord:
    record_id: str
    submission_source: str
    submission_date: datetime
    full_name: str | None = None
    age: int | None = None
    gender: str | None = None
    study_field: str | None = None
    answers: dict[str, Answer] = field(default_factory=dict)

    def as_row(self) -> dict[str, Any]:
        row: dict[str, Any] = {
            "record_id": self.record_id,
            "submission_source": self.submission_source,
            "submission_date": self.submission_date,
            "full_name": self.full_name,
            "age": self.age,
            "gender": self.gender,
            "study_field": self.study_field,
        }
        row.update(self.answers)
        return row


def candidate_source(targeted_company_id: str | None) -> str:
    if targeted_company_id:
        return f"CandidateSurvey_Targeted_{targeted_company_id}"
    return PLATFORM_SOURCE


def applicant_source(company_id: str, stage_number: int) -> str:
    return f"ApplicantSurvey_Company_{company_id}_Stage_{stage_number}"


def _now() -> datetime:
    return datetime.now(UTC)


class RecordProjector:
    """Flattens survey submissions and import rows onto the historical columns."""

    def __init__(self, catalog: QuestionCatalog):
        self.catalog = catalog

    def empty_answers(self) -> dict[str, Answer]:
        return dict.fromkeys(self.catalog.all_ids())

    def project_candidate(self, submission: CandidateSurveySubmission, record_id: str) -> HistoricalRecord:
        info = submission.personal_info
        return HistoricalRecord(
            record_id=record_id,
            submission_source=candidate_source(submission.targeted_company_id),
            submission_date=as_utc(submission.submitted_at) if submission.submitted_at else _now(),
            full_name=info.full_name or MISSING_NAME,
            age=info.age or None,
            gender=info.gender or None,
            study_field=info.study_field or None,
            answers=self._survey_answers(submission.responses, record_id),
        )

    def project_applicant(self, submission: ApplicantSurveySubmission, record_id: str) -> HistoricalRecord:
        return HistoricalRecord(
            record_id=record_id,
            submission_source=applicant_source(submission.company_id, submission.stage_number),
            submission_date=as_utc(submission.submitted_at) if submission.submitted_at else _now(),
            full_name=submission.applicant_name,
            age=None,
            gender=None,
            study_field=None,
            answers=self._survey_answers(submission.responses, record_id),
        )

    def project_import_row(
        self,
        row: Mapping[str, Any],
        record_id: str,
        *,
        default_source: str = "CSV_Upload",
    ) -> HistoricalRecord:
        if not isinstance(row, Mapping):
            raise InvalidSubmissionError(f"expected an object per record, got {type(row).__name__}")

        base: dict[str, Any] = {}
        answers = self.empty_answers()
        for key, value in row.items():
            if not isinstance(key, str):
                continue
            question_id = self.catalog.resolve(key)
            if question_id is not None:
                answers[question_id] = coerce_number(value, column=question_id)
                continue
            base_field = _IMPORT_FIELD_LOOKUP.get(key.strip().casefold())
            if base_field is not None:
                base[base_field] = value

        age = coerce_number(base.get("age"), column="Age")
        if isinstance(age, float):
            if not age.is_integer():
                raise InvalidSubmissionError(f"column 'Age' must be a whole number, got {age!r}")
            age = int(age)

        return HistoricalRecord(
            record_id=record_id,
            submission_source=_text_or_none(base.get("submission_source")) or default_source,
            submission_date=coerce_datetime(base.get("submission_date")) or _now(),
            full_name=_text_or_none(base.get("full_name")),
            age=age,
            gender=_text_or_none(base.get("gender")),
            study_field=_text_or_none(base.get("study_field")),
            answers=answers,
        )

    def _survey_answers(self, responses: Iterable[SurveyResponseItem], record_id: str) -> dict[str, Answer]:
        answers = self.empty_answers()
        for response in responses:
            if self.catalog.contains(response.question_id):
                answers[response.question_id] = response.answer
            else:
                logger.debug("Dropping uncatalogued question %s for %s", response.question_id, record_id)
        return answers


_IMPORT_FIELD_LOOKUP: dict[str, str] = {
    alias.casefold(): name for name, aliases in _IMPORT_ALIASES.items() for alias in aliases
}


def import_row_record_id(row: Any) -> str | None:
    if not isinstance(row, Mapping):
        return None
    for key, value in row.items():
        if isinstance(key, str) and _IMPORT_FIELD_LOOKUP.get(key.strip().casefold()) == "record_id":
            return _text_or_none(value)
    return None


def import_row_label(row: Any, index: int) -> str:
    if isinstance(row, Mapping):
        for key, value in row.items():
            if isinstance(key, str) and _IMPORT_FIELD_LOOKUP.get(key.strip().casefold()) == "full_name":
                name = _text_or_none(value)
                if name:
                    return name
    return import_row_record_id(row) or f"row #{index + 1}"


def coerce_number(value: Any, *, column: str) -> Answer:
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidSubmissionError(f"column '{column}' must be numeric, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value):
            return None
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            raise InvalidSubmissionError(f"column '{column}' must be numeric, got {value!r}") from None
        if math.isnan(number) or math.isinf(number):
            raise InvalidSubmissionError(f"column '{column}' must be numeric, got {value!r}")
        return int(number) if number.is_integer() and "." not in text else number
    raise InvalidSubmissionError(f"column '{column}' must be numeric, got {type(value).__name__}")


def as_utc(value: datetime) -> datetime:
    """Timestamps without an offset are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def coerce_datetime(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, str):
        try:
            return as_utc(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))
        except ValueError:
            raise InvalidSubmissionError(f"submissionDate is not an ISO timestamp: {value!r}") from None
    raise InvalidSubmissionError(f"submissionDate is not an ISO timestamp: {value!r}")


def _text_or_none(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
