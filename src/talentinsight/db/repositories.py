from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from sqlalchemy import and_, delete, select
from sqlalchemy.orm import Session

from talentinsight.db.models import (
    ApplicantSurveyResponse,
    CandidateSurveyRow,
    CompanyApplicantSurveyRow,
    CompanyAttributePreference,
    CompanyGlobalCustomQuestion,
    CompanyInterviewStageSetting,
    CompanySettings,
    StageBinaryAssessment,
    StageCustomQuestion,
    SurveyPersonalInformation,
    SurveyResponse,
    User,
)
from talentinsight.types import (
    AttributePreference,
    BinaryAssessment,
    CustomQuestion,
    PersonalInfo,
    SurveyResponseItem,
)

_PERSONAL_INFO_FIELDS = (
    "full_name",
    "email",
    "phone_number",
    "city",
    "linked_in_url",
    "age",
    "study_field",
    "gender",
    "other_city",
)


class Repository:
    """Data access over one session. Never commits; callers own the transaction."""

    def __init__(self, session: Session):
        self.session = session

    # users

    def create_user(self, *, user_id: str, full_name: str, email: str, role: str) -> User:
        user = User(id=user_id, full_name=full_name, email=email, role=role)
        self.session.add(user)
        self.session.flush()
        return user

    def get_user(self, user_id: str) -> User | None:
        return self.session.get(User, user_id)

    def get_user_by_email(self, email: str) -> User | None:
        return self.session.scalar(select(User).where(User.email == email))

    def find_company_user_by_name(self, full_name: str) -> User | None:
        statement = (
            select(User)
            .where(and_(User.full_name == full_name, User.role == "COMPANY"))
            .order_by(User.created_at.asc())
        )
        return self.session.scalars(statement).first()

    def list_users(self, role: str | None = None) -> list[User]:
        statement = select(User).order_by(User.full_name.asc())
        if role is not None:
            statement = statement.where(User.role == role)
        return list(self.session.scalars(statement).all())

    # candidate surveys

    def create_candidate_survey(
        self,
        *,
        survey_instance_id: str,
        user_id: str,
        submitted_at: datetime,
        targeted_company_id: str | None,
    ) -> CandidateSurveyRow:
        row = CandidateSurveyRow(
            survey_instance_id=survey_instance_id,
            user_id=user_id,
            submitted_at=submitted_at,
            targeted_company_id=targeted_company_id,
        )
        self.session.add(row)
        self.session.flush()
        return row

    def get_candidate_survey(self, survey_instance_id: str) -> CandidateSurveyRow | None:
        return self.session.get(CandidateSurveyRow, survey_instance_id)

    def list_candidate_surveys(
        self,
        *,
        user_id: str | None = None,
        general_only: bool = False,
        targeted_company_id: str | None = None,
        limit: int | None = None,
    ) -> list[CandidateSurveyRow]:
        statement = select(CandidateSurveyRow)
        if user_id is not None:
            statement = statement.where(CandidateSurveyRow.user_id == user_id)
        if general_only:
            statement = statement.where(CandidateSurveyRow.targeted_company_id.is_(None))
        if targeted_company_id is not None:
            statement = statement.where(CandidateSurveyRow.targeted_company_id == targeted_company_id)
        statement = statement.order_by(
            CandidateSurveyRow.submitted_at.desc(), CandidateSurveyRow.survey_instance_id.asc()
        )
        if limit is not None:
            statement = statement.limit(limit)
        return list(self.session.scalars(statement).all())

    def save_personal_info(self, survey_instance_id: str, info: PersonalInfo) -> SurveyPersonalInformation:
        values = {name: getattr(info, name) for name in _PERSONAL_INFO_FIELDS}
        values["age"] = info.age or None
        existing = self.session.get(SurveyPersonalInformation, survey_instance_id)
        if existing:
            for key, value in values.items():
                setattr(existing, key, value)
            obj = existing
        else:
            obj = SurveyPersonalInformation(survey_instance_id=survey_instance_id, **values)
            self.session.add(obj)
        self.session.flush()
        return obj

    def get_personal_info(self, survey_instance_id: str) -> SurveyPersonalInformation | None:
        return self.session.get(SurveyPersonalInformation, survey_instance_id)

    def replace_survey_responses(self, survey_instance_id: str, responses: Iterable[SurveyResponseItem]) -> None:
        self.session.execute(delete(SurveyResponse).where(SurveyResponse.survey_instance_id == survey_instance_id))
        for item in responses:
            self.session.add(
                SurveyResponse(
                    survey_instance_id=survey_instance_id,
                    question_id=item.question_id,
                    answer=item.answer,
                )
            )
        self.session.flush()

    def list_survey_responses(self, survey_instance_id: str) -> list[SurveyResponse]:
        statement = (
            select(SurveyResponse)
            .where(SurveyResponse.survey_instance_id == survey_instance_id)
            .order_by(SurveyResponse.question_id.asc(), SurveyResponse.id.asc())
        )
        return list(self.session.scalars(statement).all())

    # applicant surveys

    def create_applicant_survey(
        self,
        *,
        unique_survey_id: str,
        company_id: str,
        applicant_email: str,
        applicant_name: str,
        stage_number: int,
        submitted_at: datetime,
        responses: Iterable[SurveyResponseItem],
    ) -> CompanyApplicantSurveyRow:
        row = CompanyApplicantSurveyRow(
            unique_survey_id=unique_survey_id,
            company_id=company_id,
            applicant_email=applicant_email,
            applicant_name=applicant_name,
            stage_number=stage_number,
            submitted_at=submitted_at,
        )
        self.session.add(row)
        self.session.flush()
        for item in responses:
            self.session.add(
                ApplicantSurveyResponse(
                    applicant_survey_id=unique_survey_id,
                    question_id=item.question_id,
                    answer=item.answer,
                )
            )
        self.session.flush()
        return row

    def list_applicant_surveys(self, company_id: str) -> list[CompanyApplicantSurveyRow]:
        statement = (
            select(CompanyApplicantSurveyRow)
            .where(CompanyApplicantSurveyRow.company_id == company_id)
            .order_by(
                CompanyApplicantSurveyRow.submitted_at.desc(),
                CompanyApplicantSurveyRow.unique_survey_id.asc(),
            )
        )
        return list(self.session.scalars(statement).all())

    def list_applicant_responses(self, unique_survey_id: str) -> list[ApplicantSurveyResponse]:
        statement = (
            select(ApplicantSurveyResponse)
            .where(ApplicantSurveyResponse.applicant_survey_id == unique_survey_id)
            .order_by(ApplicantSurveyResponse.question_id.asc(), ApplicantSurveyResponse.id.asc())
        )
        return list(self.session.scalars(statement).all())

    # company settings

    def get_company_settings(self, company_id: str) -> CompanySettings | None:
        return self.session.get(CompanySettings, company_id)

    def create_company_settings(
        self,
        *,
        company_id: str,
        company_name: str,
        total_interviews: int,
    ) -> CompanySettings:
        settings = CompanySettings(
            company_id=company_id,
            company_name=company_name,
            total_interviews=total_interviews,
        )
        self.session.add(settings)
        self.session.flush()
        return settings

    def list_attribute_preferences(self, company_id: str, attribute_type: str) -> list[CompanyAttributePreference]:
        statement = (
            select(CompanyAttributePreference)
            .where(
                and_(
                    CompanyAttributePreference.company_id == company_id,
                    CompanyAttributePreference.attribute_type == attribute_type,
                )
            )
            .order_by(CompanyAttributePreference.id.asc())
        )
        return list(self.session.scalars(statement).all())

    def replace_attribute_preferences(
        self,
        company_id: str,
        preferences: Iterable[tuple[AttributePreference, str]],
    ) -> None:
        self.session.execute(
            delete(CompanyAttributePreference).where(CompanyAttributePreference.company_id == company_id)
        )
        for preference, attribute_type in preferences:
            self.session.add(
                CompanyAttributePreference(
                    company_id=company_id,
                    category_id=preference.category_id,
                    rank=preference.rank,
                    attribute_type=attribute_type,
                )
            )
        self.session.flush()

    def list_global_custom_questions(self, company_id: str) -> list[CompanyGlobalCustomQuestion]:
        statement = (
            select(CompanyGlobalCustomQuestion)
            .where(CompanyGlobalCustomQuestion.company_id == company_id)
            .order_by(CompanyGlobalCustomQuestion.id.asc())
        )
        return list(self.session.scalars(statement).all())

    def replace_global_custom_questions(self, company_id: str, questions: Iterable[CustomQuestion]) -> None:
        self.session.execute(
            delete(CompanyGlobalCustomQuestion).where(CompanyGlobalCustomQuestion.company_id == company_id)
        )
        for question in questions:
            self.session.add(
                CompanyGlobalCustomQuestion(
                    company_id=company_id,
                    original_question_id=question.original_question_id,
                    custom_text=question.custom_text,
                )
            )
        self.session.flush()

    def list_stage_settings(self, company_id: str) -> list[CompanyInterviewStageSetting]:
        statement = (
            select(CompanyInterviewStageSetting)
            .where(CompanyInterviewStageSetting.company_id == company_id)
            .order_by(CompanyInterviewStageSetting.stage_number.asc())
        )
        return list(self.session.scalars(statement).all())

    def get_stage_setting(self, company_id: str, stage_number: int) -> CompanyInterviewStageSetting | None:
        statement = select(CompanyInterviewStageSetting).where(
            and_(
                CompanyInterviewStageSetting.company_id == company_id,
                CompanyInterviewStageSetting.stage_number == stage_number,
            )
        )
        return self.session.scalar(statement)

    def create_stage_setting(self, company_id: str, stage_number: int) -> CompanyInterviewStageSetting:
        stage = CompanyInterviewStageSetting(company_id=company_id, stage_number=stage_number)
        self.session.add(stage)
        self.session.flush()
        return stage

    def delete_stage_settings(self, company_id: str) -> None:
        stage_ids = select(CompanyInterviewStageSetting.stage_setting_id).where(
            CompanyInterviewStageSetting.company_id == company_id
        )
        self.session.execute(
            delete(StageBinaryAssessment).where(StageBinaryAssessment.stage_setting_id.in_(stage_ids))
        )
        self.session.execute(delete(StageCustomQuestion).where(StageCustomQuestion.stage_setting_id.in_(stage_ids)))
        self.session.execute(
            delete(CompanyInterviewStageSetting).where(CompanyInterviewStageSetting.company_id == company_id)
        )
        self.session.flush()

    def list_binary_assessments(self, stage_setting_id: int) -> list[StageBinaryAssessment]:
        statement = (
            select(StageBinaryAssessment)
            .where(StageBinaryAssessment.stage_setting_id == stage_setting_id)
            .order_by(StageBinaryAssessment.id.asc())
        )
        return list(self.session.scalars(statement).all())

    def replace_binary_assessments(self, stage_setting_id: int, assessments: Iterable[BinaryAssessment]) -> None:
        self.session.execute(
            delete(StageBinaryAssessment).where(StageBinaryAssessment.stage_setting_id == stage_setting_id)
        )
        for assessment in assessments:
            self.session.add(
                StageBinaryAssessment(
                    stage_setting_id=stage_setting_id,
                    category_id=assessment.category_id,
                    assessed=assessment.assessed,
                )
            )
        self.session.flush()

    def list_stage_custom_questions(self, stage_setting_id: int) -> list[StageCustomQuestion]:
        statement = (
            select(StageCustomQuestion)
            .where(StageCustomQuestion.stage_setting_id == stage_setting_id)
            .order_by(StageCustomQuestion.id.asc())
        )
        return list(self.session.scalars(statement).all())

    def add_stage_custom_questions(self, stage_setting_id: int, questions: Iterable[CustomQuestion]) -> None:
        for question in questions:
            self.session.add(
                StageCustomQuestion(
                    stage_setting_id=stage_setting_id,
                    original_question_id=question.original_question_id,
                    custom_text=question.custom_text,
                )
            )
        self.session.flush()
