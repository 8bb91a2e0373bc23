from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from talentinsight.core.catalog import QuestionCatalog
from talentinsight.core.runtime import get_question_catalog
from talentinsight.db.base import Base, TimestampMixin

HISTORICAL_TABLE_NAME = "historical_survey_records"


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False)


class CandidateSurveyRow(TimestampMixin, Base):
    __tablename__ = "candidate_surveys"

    survey_instance_id: Mapped[str] = mapped_column(String(80), primary_key=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    targeted_company_id: Mapped[str | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )


class SurveyPersonalInformation(TimestampMixin, Base):
    __tablename__ = "survey_personal_information"

    survey_instance_id: Mapped[str] = mapped_column(
        ForeignKey("candidate_surveys.survey_instance_id", ondelete="CASCADE"), primary_key=True
    )
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone_number: Mapped[str | None] = mapped_column(String(40), nullable=True)
    city: Mapped[str | None] = mapped_column(String(120), nullable=True)
    linked_in_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    age: Mapped[int | None] = mapped_column(Integer, nullable=True)
    study_field: Mapped[str | None] = mapped_column(String(255), nullable=True)
    gender: Mapped[str | None] = mapped_column(String(60), nullable=True)
    other_city: Mapped[str | None] = mapped_column(String(120), nullable=True)


class SurveyResponse(TimestampMixin, Base):
    __tablename__ = "survey_responses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    survey_instance_id: Mapped[str] = mapped_column(
        ForeignKey("candidate_surveys.survey_instance_id", ondelete="CASCADE"), index=True
    )
    question_id: Mapped[str] = mapped_column(String(40), nullable=False)
    answer: Mapped[float] = mapped_column(Float, nullable=False)


class CompanyApplicantSurveyRow(TimestampMixin, Base):
    __tablename__ = "company_applicant_surveys"

    unique_survey_id: Mapped[str] = mapped_column(String(80), primary_key=True)
    company_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    applicant_email: Mapped[str] = mapped_column(String(255), nullable=False)
    applicant_name: Mapped[str] = mapped_column(String(255), nullable=False)
    stage_number: Mapped[int] = mapped_column(Integer, nullable=False)
    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class ApplicantSurveyResponse(TimestampMixin, Base):
    __tablename__ = "applicant_survey_responses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    applicant_survey_id: Mapped[str] = mapped_column(
        ForeignKey("company_applicant_surveys.unique_survey_id", ondelete="CASCADE"), index=True
    )
    question_id: Mapped[str] = mapped_column(String(40), nullable=False)
    answer: Mapped[float] = mapped_column(Float, nullable=False)


class CompanySettings(TimestampMixin, Base):
    __tablename__ = "company_settings"

    company_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    company_name: Mapped[str] = mapped_column(String(255), nullable=False)
    company_size: Mapped[str | None] = mapped_column(String(80), nullable=True)
    company_type: Mapped[str | None] = mapped_column(String(120), nullable=True)
    company_linkedin: Mapped[str | None] = mapped_column(String(500), nullable=True)
    company_website: Mapped[str | None] = mapped_column(String(500), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    contact_person_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    contact_person_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    contact_person_designation: Mapped[str | None] = mapped_column(String(255), nullable=True)
    company_phone_number: Mapped[str | None] = mapped_column(String(40), nullable=True)
    total_interviews: Mapped[int] = mapped_column(Integer, default=1, nullable=False)


class CompanyAttributePreference(TimestampMixin, Base):
    __tablename__ = "company_attribute_preferences"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    company_id: Mapped[str] = mapped_column(
        ForeignKey("company_settings.company_id", ondelete="CASCADE"), index=True
    )
    category_id: Mapped[str] = mapped_column(String(120), nullable=False)
    rank: Mapped[int] = mapped_column(Integer, nullable=False)
    attribute_type: Mapped[str] = mapped_column(String(20), nullable=False)


class CompanyGlobalCustomQuestion(TimestampMixin, Base):
    __tablename__ = "company_global_custom_questions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    company_id: Mapped[str] = mapped_column(
        ForeignKey("company_settings.company_id", ondelete="CASCADE"), index=True
    )
    original_question_id: Mapped[str] = mapped_column(String(40), nullable=False)
    custom_text: Mapped[str] = mapped_column(Text, nullable=False)


class CompanyInterviewStageSetting(TimestampMixin, Base):
    __tablename__ = "company_interview_stage_settings"
    __table_args__ = (UniqueConstraint("company_id", "stage_number", name="uq_company_stage"),)

    stage_setting_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    company_id: Mapped[str] = mapped_column(
        ForeignKey("company_settings.company_id", ondelete="CASCADE"), index=True
    )
    stage_number: Mapped[int] = mapped_column(Integer, nullable=False)


class StageBinaryAssessment(TimestampMixin, Base):
    __tablename__ = "stage_binary_assessments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    stage_setting_id: Mapped[int] = mapped_column(
        ForeignKey("company_interview_stage_settings.stage_setting_id", ondelete="CASCADE"), index=True
    )
    category_id: Mapped[str] = mapped_column(String(120), nullable=False)
    assessed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


class StageCustomQuestion(TimestampMixin, Base):
    __tablename__ = "stage_custom_questions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    stage_setting_id: Mapped[int] = mapped_column(
        ForeignKey("company_interview_stage_settings.stage_setting_id", ondelete="CASCADE"), index=True
    )
    original_question_id: Mapped[str] = mapped_column(String(40), nullable=False)
    custom_text: Mapped[str] = mapped_column(Text, nullable=False)


def build_historical_table(metadata: MetaData, catalog: QuestionCatalog) -> Table:
    """Wide archival table: seven base columns plus one numeric column per catalog question."""
    return Table(
        HISTORICAL_TABLE_NAME,
        metadata,
        Column("record_id", String(120), primary_key=True),
        Column("submission_source", String(255), nullable=False),
        Column("submission_date", DateTime(timezone=True), nullable=False, index=True),
        Column("full_name", String(255), nullable=True),
        Column("age", Integer, nullable=True),
        Column("gender", String(60), nullable=True),
        Column("study_field", String(255), nullable=True),
        *(Column(question_id, Float, nullable=True) for question_id in catalog.all_ids()),
    )


historical_survey_records = build_historical_table(Base.metadata, get_question_catalog())
