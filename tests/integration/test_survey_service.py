import itertools

import pytest

from talentinsight.core.accounts import AccountService
from talentinsight.core.historical import HistoricalArchive
from talentinsight.core.identifiers import IdentifierFactory, derive_record_id
from talentinsight.core.surveys import SurveyService
from talentinsight.db.session import SessionLocal
from talentinsight.errors import InvalidSubmissionError, NotFoundError
from talentinsight.types import ApplicantSurveySubmission, CandidateSurveySubmission


def _submission(user_id: str, responses: list[dict], **extra) -> CandidateSurveySubmission:
    return CandidateSurveySubmission.model_validate(
        {
            "userId": user_id,
            "personalInfo": {"fullName": "Ada Lovelace", "email": "ada@example.com", "age": 24, "studyField": "Math"},
            "responses": responses,
            **extra,
        }
    )


def _service(db) -> SurveyService:
    ticks = itertools.count(1700000000000)
    return SurveyService(db, identifiers=IdentifierFactory(clock=lambda: next(ticks)))


@pytest.fixture
def candidate_id() -> str:
    with SessionLocal() as db:
        return AccountService(db).signup(full_name="Ada Lovelace", email="ada@example.com", role="CANDIDATE").id


def test_submission_writes_survey_and_historical_shadow(candidate_id: str) -> None:
    with SessionLocal() as db:
        survey = _service(db).submit_candidate_survey(
            _submission(candidate_id, [{"questionId": "QP_MC_1", "answer": 3}, {"questionId": "EXTRA_9", "answer": 1}])
        )

    assert survey.survey_instance_id.startswith("survey_")
    assert survey.survey_instance_id.endswith(candidate_id[-4:])

    with SessionLocal() as db:
        record = HistoricalArchive(db).get_record(derive_record_id("candidate", survey.survey_instance_id))
        stored = SurveyService(db).list_user_surveys(candidate_id)

    assert record["submission_source"] == "CandidateSurvey_Platform"
    assert record["full_name"] == "Ada Lovelace"
    assert record["study_field"] == "Math"
    assert record["QP_MC_1"] == 3
    assert "EXTRA_9" not in record
    assert len(stored) == 1
    assert {item.question_id for item in stored[0].responses} == {"QP_MC_1", "EXTRA_9"}


def test_update_overwrites_the_historical_shadow(candidate_id: str) -> None:
    with SessionLocal() as db:
        service = _service(db)
        survey = service.submit_candidate_survey(
            _submission(candidate_id, [{"questionId": "QP_MC_1", "answer": 3}, {"questionId": "QP_MC_2", "answer": 4}])
        )
        service.update_candidate_survey(
            survey.survey_instance_id,
            _submission(candidate_id, [{"questionId": "QP_MC_1", "answer": 5}, {"questionId": "QO_C_1", "answer": 2}]),
        )

    with SessionLocal() as db:
        records = HistoricalArchive(db).list_records()
        latest = SurveyService(db).latest_general_survey(candidate_id)

    assert len(records) == 1
    assert records[0]["record_id"] == f"hist_cs_{survey.survey_instance_id}"
    assert records[0]["QP_MC_1"] == 5
    assert records[0]["QP_MC_2"] is None
    assert records[0]["QO_C_1"] == 2
    assert {(item.question_id, item.answer) for item in latest.responses} == {("QP_MC_1", 5), ("QO_C_1", 2)}


def test_targeted_surveys_are_kept_apart_from_general_ones(candidate_id: str) -> None:
    with SessionLocal() as db:
        company = AccountService(db).signup(full_name="Acme", email="jobs@acme.test", role="COMPANY")
        service = _service(db)
        general = service.submit_candidate_survey(_submission(candidate_id, [{"questionId": "QP_R_1", "answer": 1}]))
        targeted = service.submit_candidate_survey(
            _submission(candidate_id, [{"questionId": "QP_R_1", "answer": 2}], targetedCompanyId=company.id)
        )

        assert service.latest_general_survey(candidate_id).survey_instance_id == general.survey_instance_id
        assert service.latest_targeted_survey(candidate_id, company.id).survey_instance_id == targeted.survey_instance_id
        assert service.latest_targeted_survey(candidate_id, "comp_user_missing") is None

        with pytest.raises(InvalidSubmissionError):
            service.update_candidate_survey(
                targeted.survey_instance_id, _submission(candidate_id, [{"questionId": "QP_R_1", "answer": 3}])
            )

        record = HistoricalArchive(db).get_record(f"hist_cs_{targeted.survey_instance_id}")

    assert record["submission_source"] == f"CandidateSurvey_Targeted_{company.id}"


def test_invalid_candidate_submissions_are_rejected(candidate_id: str) -> None:
    with SessionLocal() as db:
        service = _service(db)
        with pytest.raises(InvalidSubmissionError):
            service.submit_candidate_survey(_submission(candidate_id, []))
        with pytest.raises(NotFoundError):
            service.update_candidate_survey("survey_missing", _submission(candidate_id, []))
        assert HistoricalArchive(db).list_records() == []


def test_applicant_survey_is_archived_per_stage() -> None:
    with SessionLocal() as db:
        company = AccountService(db).signup(full_name="Acme", email="jobs@acme.test", role="COMPANY")
        submission = ApplicantSurveySubmission.model_validate(
            {
                "companyId": company.id,
                "applicantEmail": "jane@example.com",
                "applicantName": "Jane",
                "stageNumber": 2,
                "responses": [{"questionId": "QO_ER_1", "answer": 4}],
            }
        )
        survey = SurveyService(db).submit_applicant_survey(submission)

    with SessionLocal() as db:
        record = HistoricalArchive(db).get_record(f"hist_as_{survey.unique_survey_id}")
        listed = SurveyService(db).list_applicant_surveys(company.id)

    assert survey.unique_survey_id.startswith("appsurvey_")
    assert record["submission_source"] == f"ApplicantSurvey_Company_{company.id}_Stage_2"
    assert record["full_name"] == "Jane"
    assert record["age"] is None
    assert record["QO_ER_1"] == 4
    assert listed[0].applicant_name == "Jane"
    assert listed[0].responses[0].answer == 4
