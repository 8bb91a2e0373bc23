from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from talentinsight.api.deps import get_db
from talentinsight.api.schemas import (
    ApplicantSurveyResponse,
    CandidateSurveyResponse,
    CompanyPreferencesImportRequest,
    CompanyPreferencesImportResponse,
    HistoricalUploadResponse,
    LoginRequest,
    SignupRequest,
    UserResponse,
)
from talentinsight.core.accounts import AccountService
from talentinsight.core.company_settings import CompanySettingsService
from talentinsight.core.historical import HistoricalArchive
from talentinsight.core.reconciliation import BulkReconciler
from talentinsight.core.surveys import SurveyService
from talentinsight.errors import (
    ConflictError,
    InvalidSubmissionError,
    NotFoundError,
    ReconciliationAbortedError,
)
from talentinsight.types import (
    ApplicantSurvey,
    ApplicantSurveySubmission,
    CandidateSurvey,
    CandidateSurveySubmission,
    CompanySettingsData,
    UserAccount,
)

router = APIRouter(prefix="/api", tags=["api"])


def _aborted(exc: ReconciliationAbortedError) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"error": str(exc), **exc.summary.model_dump(by_alias=True)},
    )


@router.post("/auth/signup", response_model=UserResponse, status_code=201)
def signup(payload: SignupRequest, db: Session = Depends(get_db)) -> UserResponse:
    try:
        user = AccountService(db).signup(full_name=payload.full_name, email=payload.email, role=payload.role)
    except InvalidSubmissionError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ConflictError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return UserResponse(message="User registered successfully!", user=user)


@router.post("/auth/login", response_model=UserResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)) -> UserResponse:
    try:
        user = AccountService(db).login(payload.email)
    except InvalidSubmissionError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except NotFoundError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    return UserResponse(message="Login successful!", user=user)


@router.get("/admin/users", response_model=list[UserAccount])
def list_users(db: Session = Depends(get_db)) -> list[UserAccount]:
    return AccountService(db).list_users()


@router.post("/surveys", response_model=CandidateSurveyResponse, status_code=201)
def submit_survey(payload: CandidateSurveySubmission, db: Session = Depends(get_db)) -> CandidateSurveyResponse:
    try:
        survey = SurveyService(db).submit_candidate_survey(payload)
    except InvalidSubmissionError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return CandidateSurveyResponse(message="Survey submitted successfully!", survey=survey)


@router.put("/surveys/{survey_instance_id}", response_model=CandidateSurveyResponse)
def update_survey(
    survey_instance_id: str,
    payload: CandidateSurveySubmission,
    db: Session = Depends(get_db),
) -> CandidateSurveyResponse:
    try:
        survey = SurveyService(db).update_candidate_survey(survey_instance_id, payload)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except InvalidSubmissionError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return CandidateSurveyResponse(message="Survey updated successfully!", survey=survey)


@router.get("/surveys/user/{user_id}", response_model=list[CandidateSurvey])
def list_user_surveys(user_id: str, db: Session = Depends(get_db)) -> list[CandidateSurvey]:
    return SurveyService(db).list_user_surveys(user_id)


@router.get("/surveys/user/{user_id}/general", response_model=CandidateSurvey | None)
def get_general_survey(user_id: str, db: Session = Depends(get_db)) -> CandidateSurvey | None:
    return SurveyService(db).latest_general_survey(user_id)


@router.get("/surveys/user/{user_id}/targeted/{company_id}", response_model=CandidateSurvey | None)
def get_targeted_survey(user_id: str, company_id: str, db: Session = Depends(get_db)) -> CandidateSurvey | None:
    return SurveyService(db).latest_targeted_survey(user_id, company_id)


@router.get("/admin/surveys", response_model=list[CandidateSurvey])
def list_all_surveys(db: Session = Depends(get_db)) -> list[CandidateSurvey]:
    return SurveyService(db).list_all_surveys()


@router.post("/company-applicant-surveys", response_model=ApplicantSurveyResponse, status_code=201)
def submit_applicant_survey(
    payload: ApplicantSurveySubmission,
    db: Session = Depends(get_db),
) -> ApplicantSurveyResponse:
    try:
        survey = SurveyService(db).submit_applicant_survey(payload)
    except InvalidSubmissionError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return ApplicantSurveyResponse(message="Applicant survey submitted successfully!", survey=survey)


@router.get("/companies/{company_id}/applicant-surveys", response_model=list[ApplicantSurvey])
def list_applicant_surveys(company_id: str, db: Session = Depends(get_db)) -> list[ApplicantSurvey]:
    return SurveyService(db).list_applicant_surveys(company_id)


@router.get("/companies/{company_id}/settings", response_model=CompanySettingsData)
def get_company_settings(company_id: str, db: Session = Depends(get_db)) -> CompanySettingsData:
    try:
        return CompanySettingsService(db).get_settings(company_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.put("/companies/{company_id}/settings", response_model=CompanySettingsData)
def replace_company_settings(
    company_id: str,
    payload: CompanySettingsData,
    db: Session = Depends(get_db),
) -> CompanySettingsData:
    try:
        return CompanySettingsService(db).replace_settings(company_id, payload)
    except InvalidSubmissionError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.get("/admin/company-settings", response_model=list[CompanySettingsData])
def list_company_settings(db: Session = Depends(get_db)) -> list[CompanySettingsData]:
    return CompanySettingsService(db).list_all_settings()


@router.post("/admin/historical-records/upload", response_model=HistoricalUploadResponse)
def upload_historical_records(
    records: list[Any] | None = Body(default=None),
    db: Session = Depends(get_db),
):
    try:
        summary = BulkReconciler(db).reconcile_historical_rows(records)
    except InvalidSubmissionError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ReconciliationAbortedError as exc:
        return _aborted(exc)
    return HistoricalUploadResponse(
        **summary.model_dump(),
        message=f"{summary.success_count} records processed.",
    )


@router.get("/admin/historical-records")
def list_historical_records(db: Session = Depends(get_db)) -> list[dict[str, Any]]:
    return HistoricalArchive(db).export_rows()


@router.post("/admin/company-preferences/batch-import", response_model=CompanyPreferencesImportResponse)
def import_company_preferences(
    payload: CompanyPreferencesImportRequest,
    db: Session = Depends(get_db),
):
    try:
        summary = BulkReconciler(db).import_company_preferences(
            payload.rankings_input, payload.binary_assessments_input
        )
    except InvalidSubmissionError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ReconciliationAbortedError as exc:
        return _aborted(exc)
    return CompanyPreferencesImportResponse(
        **summary.model_dump(),
        message="Company preferences batch import processed.",
    )
