from __future__ import annotations

from typing import Any

from pydantic import Field

from talentinsight.types import (
    ApplicantSurvey,
    CandidateSurvey,
    CompanyImportSummary,
    ReconcileSummary,
    SchemaModel,
    UserAccount,
)


class SignupRequest(SchemaModel):
    full_name: str = ""
    email: str = ""
    role: str = ""


class LoginRequest(SchemaModel):
    email: str = ""
    password: str | None = None


class UserResponse(SchemaModel):
    message: str
    user: UserAccount


class CandidateSurveyResponse(SchemaModel):
    message: str
    survey: CandidateSurvey


class ApplicantSurveyResponse(SchemaModel):
    message: str
    survey: ApplicantSurvey


class HistoricalUploadResponse(ReconcileSummary):
    message: str


class CompanyPreferencesImportRequest(SchemaModel):
    rankings_input: list[Any] | None = Field(default=None)
    binary_assessments_input: list[Any] | None = Field(default=None)


class CompanyPreferencesImportResponse(CompanyImportSummary):
    message: str
