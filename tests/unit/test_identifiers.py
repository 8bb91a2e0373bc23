import pytest

from talentinsight.core.identifiers import IdentifierFactory, derive_record_id


def _factory() -> IdentifierFactory:
    return IdentifierFactory(clock=lambda: 1700000000000, suffix=lambda n: "z" * n)


def test_candidate_and_applicant_ids_are_derived_from_instance_id() -> None:
    assert derive_record_id("candidate", "S1") == "hist_cs_S1"
    assert derive_record_id("candidate", "S1") == derive_record_id("candidate", "S1")
    assert derive_record_id("applicant", "appsurvey_1_abcd") == "hist_as_appsurvey_1_abcd"


def test_survey_kinds_require_an_instance_id() -> None:
    with pytest.raises(ValueError):
        derive_record_id("candidate", "")
    with pytest.raises(ValueError):
        derive_record_id("applicant", None)


def test_import_ids_keep_supplied_value_or_generate_one() -> None:
    factory = _factory()
    assert factory.derive_record_id("import", "legacy-42") == "legacy-42"
    assert factory.derive_record_id("import") == "hist_auto_1700000000000_zzzzz"


def test_unknown_kind_is_rejected() -> None:
    with pytest.raises(ValueError):
        derive_record_id("other", "x")  # type: ignore[arg-type]


def test_entity_identifier_formats() -> None:
    factory = _factory()
    assert factory.user_id() == "user_1700000000000_zzzzz"
    assert factory.company_user_id() == "comp_user_1700000000000_zzzz"
    assert factory.candidate_survey_id("user_123_abcd") == "survey_1700000000000_abcd"
    assert factory.applicant_survey_id("comp_user_1_wxyz") == "appsurvey_1700000000000_wxyz"


def test_generated_import_ids_differ_between_calls() -> None:
    factory = IdentifierFactory()
    assert factory.derive_record_id("import") != factory.derive_record_id("import")
