from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from talentinsight.core.historical import HistoricalArchive
from talentinsight.core.reconciliation import BulkReconciler
from talentinsight.db.session import SessionLocal
from talentinsight.errors import InvalidSubmissionError, ReconciliationAbortedError


def _rows() -> list[dict]:
    return [
        {"recordId": "r1", "FullName": "One", "QP_MC_1": "1"},
        {"recordId": "r2", "FullName": "Two", "qp_mc_1": "2"},
        {"recordId": "r3", "FullName": "Three", "QP_MC_1": "not a number"},
        {"recordId": "r4", "FullName": "Four", "Age": "40"},
        {"FullName": "Five", "QO_DG_1": 5},
    ]


def test_malformed_row_does_not_abort_siblings() -> None:
    with SessionLocal() as db:
        summary = BulkReconciler(db).reconcile_historical_rows(_rows())

    assert summary.success_count == 4
    assert summary.error_count == 1
    assert summary.errors[0].startswith("Error processing record for Three:")

    with SessionLocal() as db:
        archive = HistoricalArchive(db)
        records = archive.list_records()
        assert archive.get_record("r3") is None
        assert archive.get_record("r2")["QP_MC_1"] == 2
        assert archive.get_record("r4")["age"] == 40

    assert len(records) == 4
    generated = [record["record_id"] for record in records if record["full_name"] == "Five"]
    assert generated[0].startswith("hist_auto_")


def test_reimporting_a_record_id_overwrites_it() -> None:
    with SessionLocal() as db:
        BulkReconciler(db).reconcile_historical_rows([{"recordId": "r1", "QP_MC_1": 1, "QP_MC_2": 2}])
        BulkReconciler(db).reconcile_historical_rows([{"recordId": "r1", "QP_MC_1": 4}])

    with SessionLocal() as db:
        records = HistoricalArchive(db).list_records()

    assert len(records) == 1
    assert records[0]["QP_MC_1"] == 4
    assert records[0]["QP_MC_2"] is None
    assert records[0]["submission_source"] == "CSV_Upload"


def test_non_object_rows_are_reported() -> None:
    with SessionLocal() as db:
        summary = BulkReconciler(db).reconcile_historical_rows([["a"], {"recordId": "ok"}])

    assert summary.success_count == 1
    assert summary.error_count == 1
    assert "row #1" in summary.errors[0]


def test_empty_batch_is_rejected() -> None:
    with SessionLocal() as db:
        with pytest.raises(InvalidSubmissionError):
            BulkReconciler(db).reconcile_historical_rows([])


def test_infrastructure_failure_aborts_the_whole_batch() -> None:
    calls = {"n": 0}
    original = HistoricalArchive.archive_import_row

    def flaky(self, row):
        calls["n"] += 1
        if calls["n"] == 2:
            raise OperationalError("INSERT", {}, Exception("connection lost"))
        return original(self, row)

    with SessionLocal() as db:
        with patch.object(HistoricalArchive, "archive_import_row", flaky):
            with pytest.raises(ReconciliationAbortedError) as info:
                BulkReconciler(db).reconcile_historical_rows([{"recordId": "a"}, {"recordId": "b"}, {"recordId": "c"}])

    assert info.value.summary.success_count == 1
    assert str(info.value) == "Batch upload failed due to a server error."

    with SessionLocal() as db:
        assert HistoricalArchive(db).list_records() == []
