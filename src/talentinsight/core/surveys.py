from __future__ import annotations

import logging
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from talentinsight.core.historical import HistoricalArchive
from talentinsight.core.identifiers import IdentifierFactory
from talentinsight.db.models import CandidateSurveyRow, CompanyApplicantSurveyRow
from talentinsight.db.repositories import Repository
from talentinsight.db.session import transaction
from talentinsight.errors import InvalidSubmissionError, NotFoundError
from talentinsight.types import (
    ApplicantSurvey,
    ApplicantSurveySubmission,
    CandidateSurvey,
    CandidateSurveySubmission,
    PersonalInfo,
    SurveyResponseItem,
)

logger = logging.getLogger(__name__)


class SurveyService:
    def __init__(
        self,
        session: Session,
        *,
        archive: HistoricalArchive | None = None,
        identifiers: IdentifierFactory | None = None,
    ):
        self.session = session
        self.repo = Repository(session)
        self.identifiers = identifiers or IdentifierFactory()
        self.archive = archive or HistoricalArchive(session, identifiers=self.identifiers)

    def submit_candidate_survey(self, submission: CandidateSurveySubmission) -> CandidateSurvey:
        if not submission.responses:
            raise InvalidSubmissionError("Missing or invalid survey data.")

        survey_instance_id = self.identifiers.candidate_survey_id(submission.user_id)
        submitted_at = datetime.now(UTC)
        snapshot = submission.model_copy(update={"submitted_at": submitted_at})

        with transaction(self.session):
            self.repo.create_candidate_survey(
                survey_instance_id=survey_instance_id,
                user_id=submission.user_id,
                submitted_at=submitted_at,
                targeted_company_id=submission.targeted_company_id or None,
            )
            self.repo.save_personal_info(survey_instance_id, submission.personal_info)
            self.repo.replace_survey_responses(survey_instance_id, submission.responses)
            self.archive.archive_candidate_survey(snapshot, survey_instance_id)

        logger.info("Candidate survey %s submitted for user %s", survey_instance_id, submission.user_id)
        return CandidateSurvey(
            survey_instance_id=survey_instance_id,
            user_id=submission.user_id,
            personal_info=submission.personal_info,
            responses=submission.responses,
            targeted_company_id=submission.targeted_company_id or None,
            submitted_at=submitted_at,
        )

    def update_candidate_survey(
        self, survey_instance_id: str, submission: CandidateSurveySubmission
    ) -> CandidateSurvey:
        submitted_at = datetime.now(UTC)
        snapshot = submission.model_copy(update={"submitted_at": submitted_at, "targeted_company_id": None})

        with transaction(self.session):
            survey = self.repo.get_candidate_survey(survey_instance_id)
            if survey is None:
                raise NotFoundError("Survey not found.")
            if survey.targeted_company_id is not None:
                raise InvalidSubmissionError("Only general surveys can be updated this way.")

            self.repo.save_personal_info(survey_instance_id, submission.personal_info)
            self.repo.replace_survey_responses(survey_instance_id, submission.responses)
            survey.submitted_at = submitted_at
            self.session.flush()
            self.archive.archive_candidate_survey(snapshot, survey_instance_id)

        logger.info("Candidate survey %s updated", survey_instance_id)
        return CandidateSurvey(
            survey_instance_id=survey_instance_id,
            user_id=submission.user_id,
            personal_info=submission.personal_info,
            responses=submission.responses,
            targeted_company_id=None,
            submitted_at=submitted_at,
        )

    def list_user_surveys(self, user_id: str) -> list[CandidateSurvey]:
        rows = self.repo.list_candidate_surveys(user_id=user_id)
        return [self._load_candidate_survey(row) for row in rows]

    def latest_general_survey(self, user_id: str) -> CandidateSurvey | None:
        rows = self.repo.list_candidate_surveys(user_id=user_id, general_only=True, limit=1)
        return self._load_candidate_survey(rows[0]) if rows else None

    def latest_targeted_survey(self, user_id: str, company_id: str) -> CandidateSurvey | None:
        rows = self.repo.list_candidate_surveys(user_id=user_id, targeted_company_id=company_id, limit=1)
        return self._load_candidate_survey(rows[0]) if rows else None

    def list_all_surveys(self) -> list[CandidateSurvey]:
        return [self._load_candidate_survey(row) for row in self.repo.list_candidate_surveys()]

    def submit_applicant_survey(self, submission: ApplicantSurveySubmission) -> ApplicantSurvey:
        unique_survey_id = self.identifiers.applicant_survey_id(submission.company_id)
        submitted_at = datetime.now(UTC)
        snapshot = submission.model_copy(update={"submitted_at": submitted_at})

        with transaction(self.session):
            self.repo.create_applicant_survey(
                unique_survey_id=unique_survey_id,
                company_id=submission.company_id,
                applicant_email=submission.applicant_email,
                applicant_name=submission.applicant_name,
                stage_number=submission.stage_number,
                submitted_at=submitted_at,
                responses=submission.responses,
            )
            self.archive.archive_applicant_survey(snapshot, unique_survey_id)

        logger.info(
            "Applicant survey %s submitted for company %s stage %s",
            unique_survey_id,
            submission.company_id,
            submission.stage_number,
        )
        return ApplicantSurvey(unique_survey_id=unique_survey_id, **snapshot.model_dump())

    def list_applicant_surveys(self, company_id: str) -> list[ApplicantSurvey]:
        return [self._load_applicant_survey(row) for row in self.repo.list_applicant_surveys(company_id)]

    def _load_candidate_survey(self, row: CandidateSurveyRow) -> CandidateSurvey:
        info = self.repo.get_personal_info(row.survey_instance_id)
        responses = self.repo.list_survey_responses(row.survey_instance_id)
        return CandidateSurvey(
            survey_instance_id=row.survey_instance_id,
            user_id=row.user_id,
            submitted_at=row.submitted_at,
            targeted_company_id=row.targeted_company_id,
            personal_info=PersonalInfo(
                full_name=info.full_name if info else "N/A",
                email=info.email if info else "N/A",
                phone_number=info.phone_number if info else None,
                city=info.city if info else None,
                linked_in_url=info.linked_in_url if info else None,
                age=info.age if info else None,
                study_field=info.study_field if info else None,
                gender=info.gender if info else None,
                other_city=info.other_city if info else None,
            ),
            responses=[_response_item(item.question_id, item.answer) for item in responses],
        )

    def _load_applicant_survey(self, row: CompanyApplicantSurveyRow) -> ApplicantSurvey:
        responses = self.repo.list_applicant_responses(row.unique_survey_id)
        return ApplicantSurvey(
            unique_survey_id=row.unique_survey_id,
            company_id=row.company_id,
            applicant_email=row.applicant_email,
            applicant_name=row.applicant_name,
            stage_number=row.stage_number,
            submitted_at=row.submitted_at,
            responses=[_response_item(item.question_id, item.answer) for item in responses],
        )


def _response_item(question_id: str, answer: float) -> SurveyResponseItem:
    value = int(answer) if float(answer).is_integer() else float(answer)
    return SurveyResponseItem(question_id=question_id, answer=value)
