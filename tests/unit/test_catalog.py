import pytest

from talentinsight.core.catalog import DEFAULT_CATALOG, GEN_Z_SURVEY_QUESTION_IDS, QuestionCatalog, topic_code


def test_default_catalog_holds_every_gen_z_question_in_order() -> None:
    assert len(DEFAULT_CATALOG) == 63
    assert DEFAULT_CATALOG.all_ids() == GEN_Z_SURVEY_QUESTION_IDS
    assert DEFAULT_CATALOG.all_ids()[0] == "QP_MC_1"
    assert DEFAULT_CATALOG.all_ids()[-1] == "QO_DG_2"


def test_contains_is_exact_but_resolve_ignores_case() -> None:
    assert DEFAULT_CATALOG.contains("QP_MC_1")
    assert not DEFAULT_CATALOG.contains("qp_mc_1")
    assert DEFAULT_CATALOG.resolve("qp_mc_1") == "QP_MC_1"
    assert DEFAULT_CATALOG.resolve(" Qo_Dg_2 ") == "QO_DG_2"
    assert DEFAULT_CATALOG.resolve("QX_1") is None


def test_topics_group_questions_by_prefix() -> None:
    topics = DEFAULT_CATALOG.topics()
    assert topics["QP_MC"] == ("QP_MC_1", "QP_MC_2", "QP_MC_3", "QP_MC_4", "QP_MC_5")
    assert len(topics["QO_ER"]) == 3
    assert topic_code("QP_TW_6") == "QP_TW"
    assert topic_code("Motivation") == "Motivation"


def test_scope_follows_personal_prefix() -> None:
    assert DEFAULT_CATALOG.scope_of("QP_IS_2") == "personal"
    assert DEFAULT_CATALOG.scope_of("QO_WC_1") == "organizational"


def test_alternate_catalog_rejects_duplicates_and_blanks() -> None:
    catalog = QuestionCatalog.from_ids(["A_1", "B_1"])
    assert list(catalog) == ["A_1", "B_1"]

    with pytest.raises(ValueError):
        QuestionCatalog.from_ids(["A_1", "a_1"])
    with pytest.raises(ValueError):
        QuestionCatalog.from_ids(["A_1", ""])
