from __future__ import annotations

import re
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, field_validator
from pydantic.alias_generators import to_camel

UserRole = Literal["CANDIDATE", "COMPANY", "ADMIN"]
AttributeType = Literal["personal", "organizational"]
RecordKind = Literal["candidate", "applicant", "import"]

_EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")


def validate_email_format(value: str) -> str:
    if not _EMAIL_PATTERN.search(value):
        raise ValueError("Invalid email format.")
    return value


class SchemaModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SurveyResponseItem(SchemaModel):
    question_id: str = Field(min_length=1)
    answer: StrictInt | StrictFloat


class PersonalInfo(SchemaModel):
    full_name: str = Field(min_length=1)
    email: str = Field(min_length=1)
    phone_number: str | None = None
    city: str | None = None
    linked_in_url: str | None = None
    age: int | None = None
    study_field: str | None = None
    gender: str | None = None
    other_city: str | None = None

    @field_validator("age", mode="before")
    @classmethod
    def blank_age_is_missing(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class CandidateSurveySubmission(SchemaModel):
    user_id: str = Field(min_length=1)
    personal_info: PersonalInfo
    responses: list[SurveyResponseItem] = Field(default_factory=list)
    targeted_company_id: str | None = None
    submitted_at: datetime | None = None


class CandidateSurvey(CandidateSurveySubmission):
    survey_instance_id: str


class ApplicantSurveySubmission(SchemaModel):
    company_id: str = Field(min_length=1)
    applicant_email: str = Field(min_length=1)
    applicant_name: str = Field(min_length=1)
    stage_number: int
    responses: list[SurveyResponseItem] = Field(default_factory=list)
    submitted_at: datetime | None = None


class ApplicantSurvey(ApplicantSurveySubmission):
    unique_survey_id: str


class UserAccount(SchemaModel):
    id: str
    full_name: str
    email: str
    role: UserRole


class AttributePreference(SchemaModel):
    category_id: str
    rank: int


class CustomQuestion(SchemaModel):
    original_question_id: str
    custom_text: str


class BinaryAssessment(SchemaModel):
    category_id: str
    assessed: bool


class InterviewStageSetting(SchemaModel):
    stage_setting_id: int | None = None
    stage_number: int
    binary_assessments: list[BinaryAssessment] = Field(default_factory=list)
    custom_questions: list[CustomQuestion] = Field(default_factory=list)


class CompanySettingsData(SchemaModel):
    company_id: str | None = None
    company_name: str | None = None
    company_size: str | None = None
    company_type: str | None = None
    company_linked_in: str | None = None
    company_website: str | None = None
    address: str | None = None
    contact_person_name: str | None = None
    contact_person_email: str | None = None
    contact_person_designation: str | None = None
    company_phone_number: str | None = None
    total_interviews: int | None = None
    personal_attribute_preferences: list[AttributePreference] = Field(default_factory=list)
    organizational_attribute_preferences: list[AttributePreference] = Field(default_factory=list)
    global_custom_questions: list[CustomQuestion] = Field(default_factory=list)
    interview_stage_settings: list[InterviewStageSetting] = Field(default_factory=list)

    @field_validator("total_interviews")
    @classmethod
    def validate_total_interviews(cls, value: int | None) -> int | None:
        if value is not None and value < 1:
            raise ValueError("total_interviews must be at least 1")
        return value


class ReconcileSummary(SchemaModel):
    success_count: int = 0
    error_count: int = 0
    errors: list[str] = Field(default_factory=list)


class CompanyImportSummary(ReconcileSummary):
    created: int = 0
    updated: int = 0
