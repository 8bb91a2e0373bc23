from unittest.mock import patch

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from talentinsight.api.app import create_app
from talentinsight.core.historical import HistoricalArchive


def test_historical_upload_reports_per_row_errors() -> None:
    client = TestClient(create_app())

    resp = client.post(
        "/api/admin/historical-records/upload",
        json=[
            {"recordId": "r1", "FullName": "One", "QP_MC_1": 1},
            {"recordId": "r2", "FullName": "Two", "QP_MC_1": "bad"},
            {"recordId": "r3", "FullName": "Three", "qo_dg_2": "2"},
        ],
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["successCount"] == 2
    assert body["errorCount"] == 1
    assert body["message"] == "2 records processed."
    assert body["errors"][0].startswith("Error processing record for Two:")

    records = client.get("/api/admin/historical-records").json()
    assert sorted(row["recordId"] for row in records) == ["r1", "r3"]


def test_historical_upload_rejects_empty_or_non_list_bodies() -> None:
    client = TestClient(create_app())

    empty = client.post("/api/admin/historical-records/upload", json=[])
    assert empty.status_code == 400
    assert empty.json()["detail"] == "No records provided for upload."

    wrong_shape = client.post("/api/admin/historical-records/upload", json={"recordId": "r1"})
    assert wrong_shape.status_code == 400


def test_historical_upload_infrastructure_failure_returns_500() -> None:
    client = TestClient(create_app())

    def broken(self, row):
        raise OperationalError("INSERT", {}, Exception("connection lost"))

    with patch.object(HistoricalArchive, "archive_import_row", broken):
        resp = client.post("/api/admin/historical-records/upload", json=[{"recordId": "r1"}])

    assert resp.status_code == 500
    assert resp.json()["error"] == "Batch upload failed due to a server error."
    assert resp.json()["successCount"] == 0


def test_company_preferences_batch_import_api() -> None:
    client = TestClient(create_app())

    resp = client.post(
        "/api/admin/company-preferences/batch-import",
        json={
            "rankingsInput": [{"EMPLOYEER": "Acme Corp", "QP_MC": 1}, {"QP_MC": 2}],
            "binaryAssessmentsInput": [{"EMPLOYEER": "Acme Corp", "QP_MC": "x"}],
        },
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["successCount"] == 1
    assert body["errorCount"] == 1
    assert body["created"] == 1

    users = client.get("/api/admin/users").json()
    assert users[0]["email"] == "acme.corp@example.csv.com"
    assert users[0]["role"] == "COMPANY"

    settings = client.get(f"/api/companies/{users[0]['id']}/settings").json()
    assert settings["personalAttributePreferences"] == [{"categoryId": "QP_MC", "rank": 1}]

    empty = client.post("/api/admin/company-preferences/batch-import", json={})
    assert empty.status_code == 400
