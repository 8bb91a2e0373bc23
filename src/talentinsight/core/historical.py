from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from sqlalchemy import Table, insert, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from talentinsight.config import Settings, get_settings
from talentinsight.core.catalog import QuestionCatalog
from talentinsight.core.identifiers import IdentifierFactory
from talentinsight.core.projector import HistoricalRecord, RecordProjector, as_utc, import_row_record_id
from talentinsight.core.runtime import get_question_catalog
from talentinsight.db.models import historical_survey_records
from talentinsight.types import ApplicantSurveySubmission, CandidateSurveySubmission

logger = logging.getLogger(__name__)

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}

# Column names used by the export format and accepted back by the bulk import.
EXPORT_BASE_KEYS: dict[str, str] = {
    "record_id": "recordId",
    "submission_source": "submissionSource",
    "submission_date": "submissionDate",
    "full_name": "FullName",
    "age": "Age",
    "gender": "Gender",
    "study_field": "Study_field",
}


def write_historical_record(session: Session, record: HistoricalRecord, table: Table | None = None) -> None:
    """Insert the record, or overwrite every non-key column of the existing row.

    Runs inside the caller's transaction and never commits.
    """
    table = table if table is not None else historical_survey_records
    values = record.as_row()
    unknown = set(values) - set(table.c.keys())
    if unknown:
        raise ValueError(f"record has columns missing from {table.name}: {sorted(unknown)}")

    dialect = session.get_bind().dialect.name
    dialect_insert = _DIALECT_INSERTS.get(dialect)
    if dialect_insert is not None:
        statement = dialect_insert(table).values(**values)
        statement = statement.on_conflict_do_update(
            index_elements=[table.c.record_id],
            set_={column.name: statement.excluded[column.name] for column in table.c if column.name != "record_id"},
        )
        session.execute(statement)
        return

    changes = {column.name: values.get(column.name) for column in table.c if column.name != "record_id"}
    exists = session.execute(select(table.c.record_id).where(table.c.record_id == record.record_id)).first()
    if exists:
        session.execute(update(table).where(table.c.record_id == record.record_id).values(**changes))
    else:
        session.execute(insert(table).values(**values))


class HistoricalArchive:
    """Projects submissions onto the historical table and upserts them."""

    def __init__(
        self,
        session: Session,
        *,
        catalog: QuestionCatalog | None = None,
        table: Table | None = None,
        identifiers: IdentifierFactory | None = None,
        settings: Settings | None = None,
    ):
        self.session = session
        self.catalog = catalog or get_question_catalog()
        self.table = table if table is not None else historical_survey_records
        self.identifiers = identifiers or IdentifierFactory()
        self.settings = settings or get_settings()
        self.projector = RecordProjector(self.catalog)

    def archive_candidate_survey(
        self, submission: CandidateSurveySubmission, survey_instance_id: str
    ) -> HistoricalRecord:
        record_id = self.identifiers.derive_record_id("candidate", survey_instance_id)
        record = self.projector.project_candidate(submission, record_id)
        write_historical_record(self.session, record, self.table)
        return record

    def archive_applicant_survey(
        self, submission: ApplicantSurveySubmission, unique_survey_id: str
    ) -> HistoricalRecord:
        record_id = self.identifiers.derive_record_id("applicant", unique_survey_id)
        record = self.projector.project_applicant(submission, record_id)
        write_historical_record(self.session, record, self.table)
        return record

    def archive_import_row(self, row: Mapping[str, Any]) -> HistoricalRecord:
        record_id = self.identifiers.derive_record_id("import", import_row_record_id(row))
        record = self.projector.project_import_row(
            row, record_id, default_source=self.settings.historical_import_source
        )
        write_historical_record(self.session, record, self.table)
        return record

    def get_record(self, record_id: str) -> dict[str, Any] | None:
        row = self.session.execute(select(self.table).where(self.table.c.record_id == record_id)).mappings().first()
        return dict(row) if row else None

    def list_records(self) -> list[dict[str, Any]]:
        statement = select(self.table).order_by(self.table.c.submission_date.desc(), self.table.c.record_id.asc())
        return [dict(row) for row in self.session.execute(statement).mappings().all()]

    def export_rows(self) -> list[dict[str, Any]]:
        return [self.to_export(row) for row in self.list_records()]

    def export_columns(self) -> list[str]:
        return [*EXPORT_BASE_KEYS.values(), *self.catalog.all_ids()]

    def to_export(self, row: Mapping[str, Any]) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        for column, key in EXPORT_BASE_KEYS.items():
            value = row.get(column)
            payload[key] = as_utc(value).isoformat() if isinstance(value, datetime) else value
        for question_id in self.catalog.all_ids():
            payload[question_id] = _answer_value(row.get(question_id))
        return payload


def _answer_value(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value
