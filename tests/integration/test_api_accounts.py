from fastapi.testclient import TestClient

from talentinsight.api.app import create_app


def test_signup_login_and_list_users_api() -> None:
    client = TestClient(create_app())

    signup_resp = client.post(
        "/api/auth/signup",
        json={"fullName": "Ada Lovelace", "email": "ada@example.com", "role": "CANDIDATE"},
    )
    assert signup_resp.status_code == 201
    user = signup_resp.json()["user"]
    assert user["id"].startswith("user_")
    assert user["fullName"] == "Ada Lovelace"

    login_resp = client.post("/api/auth/login", json={"email": "ada@example.com"})
    assert login_resp.status_code == 200
    assert login_resp.json()["user"]["id"] == user["id"]

    list_resp = client.get("/api/admin/users")
    assert list_resp.status_code == 200
    assert [item["email"] for item in list_resp.json()] == ["ada@example.com"]


def test_signup_validation_and_conflicts() -> None:
    client = TestClient(create_app())

    missing = client.post("/api/auth/signup", json={"email": "x@y.test"})
    assert missing.status_code == 400
    assert missing.json()["detail"] == "Full Name, Email, and Role are required."

    bad_role = client.post("/api/auth/signup", json={"fullName": "X", "email": "x@y.test", "role": "ROOT"})
    assert bad_role.status_code == 400

    bad_email = client.post("/api/auth/signup", json={"fullName": "X", "email": "not-an-email", "role": "CANDIDATE"})
    assert bad_email.json()["detail"] == "Invalid email format."

    first = client.post("/api/auth/signup", json={"fullName": "X", "email": "x@y.test", "role": "CANDIDATE"})
    assert first.status_code == 201
    duplicate = client.post("/api/auth/signup", json={"fullName": "Y", "email": "x@y.test", "role": "ADMIN"})
    assert duplicate.status_code == 409
    assert duplicate.json()["detail"] == "This email is already registered."


def test_login_rejects_unknown_email() -> None:
    client = TestClient(create_app())

    assert client.post("/api/auth/login", json={}).status_code == 400
    unknown = client.post("/api/auth/login", json={"email": "ghost@example.com"})
    assert unknown.status_code == 401


def test_company_signup_exposes_settings_api() -> None:
    client = TestClient(create_app())
    company = client.post(
        "/api/auth/signup", json={"fullName": "Acme", "email": "hr@acme.test", "role": "COMPANY"}
    ).json()["user"]

    get_resp = client.get(f"/api/companies/{company['id']}/settings")
    assert get_resp.status_code == 200
    assert get_resp.json()["companyName"] == "Acme"
    assert get_resp.json()["totalInterviews"] == 1

    put_resp = client.put(
        f"/api/companies/{company['id']}/settings",
        json={
            "companyName": "Acme Corp",
            "totalInterviews": 3,
            "interviewStageSettings": [{"stageNumber": 1, "binaryAssessments": [{"categoryId": "QP_TW", "assessed": True}]}],
        },
    )
    assert put_resp.status_code == 200
    assert put_resp.json()["interviewStageSettings"][0]["binaryAssessments"][0]["categoryId"] == "QP_TW"

    bad = client.put(f"/api/companies/{company['id']}/settings", json={"totalInterviews": 0})
    assert bad.status_code == 400

    assert client.get("/api/companies/nobody/settings").status_code == 404
    assert [item["companyName"] for item in client.get("/api/admin/company-settings").json()] == ["Acme Corp"]
