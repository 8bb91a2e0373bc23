from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from talentinsight.core.historical import HistoricalArchive
from talentinsight.core.identifiers import IdentifierFactory
from talentinsight.core.projector import import_row_label
from talentinsight.core.provisioning import AttributeTypeMap, ProvisioningPolicy, coerce_bool, coerce_rank
from talentinsight.core.runtime import get_attribute_type_map, get_provisioning_policy
from talentinsight.db.repositories import Repository
from talentinsight.db.session import transaction
from talentinsight.errors import InvalidSubmissionError, ReconciliationAbortedError
from talentinsight.types import AttributePreference, BinaryAssessment, CompanyImportSummary, ReconcileSummary

logger = logging.getLogger(__name__)

EMPLOYER_KEY = "EMPLOYEER"
ASSESSMENT_STAGE = 1


def employer_name(row: Any) -> str | None:
    if not isinstance(row, Mapping):
        return None
    for key, value in row.items():
        if isinstance(key, str) and key.strip().upper() == EMPLOYER_KEY and value is not None:
            name = str(value).strip()
            return name or None
    return None


def attribute_cells(row: Mapping[str, Any], *, skip_blank: bool = False) -> list[tuple[str, Any]]:
    cells = []
    for key, value in row.items():
        name = str(key).strip()
        if not name or name.upper() == EMPLOYER_KEY or value is None:
            continue
        if skip_blank and isinstance(value, str) and not value.strip():
            continue
        cells.append((name, value))
    return cells


class BulkReconciler:
    """Applies batches of external rows one item at a time.

    The batch shares one transaction. Each item runs in its own savepoint so a
    failing item is rolled back alone and reported, while the rest of the batch
    still commits. Connection-level failures abort the whole batch.
    """

    def __init__(
        self,
        session: Session,
        *,
        archive: HistoricalArchive | None = None,
        identifiers: IdentifierFactory | None = None,
        policy: ProvisioningPolicy | None = None,
        attribute_types: AttributeTypeMap | None = None,
    ):
        self.session = session
        self.repo = Repository(session)
        self.identifiers = identifiers or IdentifierFactory()
        self.archive = archive or HistoricalArchive(session, identifiers=self.identifiers)
        self.policy = policy or get_provisioning_policy()
        self.attribute_types = attribute_types or get_attribute_type_map()

    def reconcile_historical_rows(self, rows: Sequence[Any] | None) -> ReconcileSummary:
        if not rows:
            raise InvalidSubmissionError("No records provided for upload.")

        summary = ReconcileSummary()
        try:
            with transaction(self.session):
                for index, row in enumerate(rows):
                    label = import_row_label(row, index)
                    try:
                        with self.session.begin_nested():
                            self.archive.archive_import_row(row)
                    except OperationalError:
                        raise
                    except Exception as exc:
                        summary.error_count += 1
                        summary.errors.append(f"Error processing record for {label}: {exc}")
                        logger.exception("Error processing historical record %s", label)
                        continue
                    summary.success_count += 1
        except OperationalError as exc:
            logger.exception("Historical records batch aborted")
            summary.errors.append(str(exc))
            raise ReconciliationAbortedError("Batch upload failed due to a server error.", summary) from exc

        logger.info(
            "Historical upload finished: %s stored, %s failed", summary.success_count, summary.error_count
        )
        return summary

    def import_company_preferences(
        self,
        rankings: Sequence[Any] | None,
        assessments: Sequence[Any] | None,
    ) -> CompanyImportSummary:
        rankings = list(rankings or [])
        assessments = list(assessments or [])
        if not rankings and not assessments:
            raise InvalidSubmissionError("No ranking or assessment data provided.")

        summary = CompanyImportSummary()
        rankings_by_name: dict[str, Mapping[str, Any]] = {}
        assessments_by_name: dict[str, Mapping[str, Any]] = {}
        sources = (
            (rankings, rankings_by_name, "ranking"),
            (assessments, assessments_by_name, "assessment"),
        )
        for source, target, kind in sources:
            for index, row in enumerate(source):
                name = employer_name(row)
                if name is None:
                    summary.error_count += 1
                    summary.errors.append(f"Error processing {kind} row #{index + 1}: missing {EMPLOYER_KEY}")
                    continue
                target.setdefault(name, row)

        names = list(dict.fromkeys([*rankings_by_name, *assessments_by_name]))
        try:
            with transaction(self.session):
                for name in names:
                    try:
                        with self.session.begin_nested():
                            created = self._apply_company_preferences(
                                name, rankings_by_name.get(name), assessments_by_name.get(name)
                            )
                    except OperationalError:
                        raise
                    except Exception as exc:
                        summary.error_count += 1
                        summary.errors.append(f"Error processing preferences for {name}: {exc}")
                        logger.exception("Error for %s in batch import", name)
                        continue
                    summary.success_count += 1
                    if created:
                        summary.created += 1
                    else:
                        summary.updated += 1
        except OperationalError as exc:
            logger.exception("Company preferences batch aborted")
            summary.errors.append(str(exc))
            raise ReconciliationAbortedError("Batch import failed due to a server error.", summary) from exc

        logger.info(
            "Company preferences import finished: %s created, %s updated, %s failed",
            summary.created,
            summary.updated,
            summary.error_count,
        )
        return summary

    def _apply_company_preferences(
        self,
        name: str,
        ranking_row: Mapping[str, Any] | None,
        assessment_row: Mapping[str, Any] | None,
    ) -> bool:
        """Returns True when the company account was created by this import."""
        user = self.repo.find_company_user_by_name(name)
        created = user is None
        if user is None:
            user = self.repo.create_user(
                user_id=self.identifiers.company_user_id(),
                full_name=name,
                email=self.policy.placeholder_email(name),
                role="COMPANY",
            )
            logger.info("Provisioned company account %s for %s", user.id, name)

        if self.repo.get_company_settings(user.id) is None:
            self.repo.create_company_settings(
                company_id=user.id,
                company_name=name,
                total_interviews=self.policy.default_total_interviews,
            )

        if ranking_row is not None:
            preferences = [
                (
                    AttributePreference(category_id=attribute, rank=coerce_rank(value, column=attribute)),
                    self.attribute_types.classify(attribute),
                )
                for attribute, value in attribute_cells(ranking_row, skip_blank=True)
            ]
            self.repo.replace_attribute_preferences(user.id, preferences)

        if assessment_row is not None:
            stage = self.repo.get_stage_setting(user.id, ASSESSMENT_STAGE)
            if stage is None:
                stage = self.repo.create_stage_setting(user.id, ASSESSMENT_STAGE)
            self.repo.replace_binary_assessments(
                stage.stage_setting_id,
                [
                    BinaryAssessment(category_id=attribute, assessed=coerce_bool(value, column=attribute))
                    for attribute, value in attribute_cells(assessment_row)
                ],
            )
        return created
