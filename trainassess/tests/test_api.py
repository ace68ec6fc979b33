"""
API Integration Tests for trainassess

This module exercises the HTTP surface through FastAPI's TestClient with an
in-memory document store:
1. The trainee submit / admin evaluate scenario
2. Status codes of the error taxonomy
3. Role gating of every protected route family
"""

import pytest
from fastapi.testclient import TestClient

from trainassess import create_app
from trainassess.config import Settings

DATE = "2024-01-01"

ANSWERS = [
    {"topic": "Python", "question": "What is a generator?", "answer": "A lazy iterator"},
    {"topic": "Python", "question": "What does len() return?", "answer": "The size"},
    {"topic": "Math", "question": "2 + 2?", "answer": 4},
]


def _settings(**overrides):
    values = dict(
        STORE_URL="memory://",
        JWT_SECRET_KEY="test-secret",
        ENV="testing",
        LOG_LEVEL="WARNING",
        DEFAULT_ADMIN_EMAIL="root@example.com",
        DEFAULT_ADMIN_PASSWORD="rootpass"
    )
    values.update(overrides)
    return Settings(**values)


def _auth(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client():
    with TestClient(create_app(_settings())) as test_client:
        yield test_client


@pytest.fixture
def tokens(client):
    """Tokens for the seeded superadmin, an admin and a trainee."""
    response = client.post("/api/auth/login", json={"email": "root@example.com", "password": "rootpass"})
    assert response.status_code == 200
    root = response.json()["token"]

    response = client.post(
        "/api/users",
        json={"name": "Ada Admin", "email": "ada@example.com", "password": "secret1", "role": "admin"},
        headers=_auth(root)
    )
    assert response.status_code == 201

    admin = client.post("/api/auth/login", json={"email": "ada@example.com", "password": "secret1"}).json()["token"]

    response = client.post(
        "/api/auth/register",
        json={"name": "Tina", "email": "tina@example.com", "password": "secret1"}
    )
    assert response.status_code == 201
    trainee = response.json()["token"]

    return {"superadmin": root, "admin": admin, "trainee": trainee}


@pytest.fixture
def question_set_id(client, tokens):
    response = client.post(
        "/api/questions",
        json={
            "date": DATE,
            "sessionTitle": "Week 1",
            "questions": [{"topic": a["topic"], "question": a["question"]} for a in ANSWERS]
        },
        headers=_auth(tokens["admin"])
    )
    assert response.status_code == 201
    return response.json()["id"]


def _submission(question_set_id, status="submitted", **extra):
    body = {
        "questionSetId": question_set_id,
        "date": DATE,
        "sessionTitle": "Week 1",
        "questionAnswers": ANSWERS,
        "overallUnderstanding": "good",
        "status": status,
        "remarks": ""
    }
    body.update(extra)
    return body


EVALUATION = {
    "questionAnswers": [
        {"score": 8, "feedback": "Good"},
        {"score": 6, "feedback": "Partly right"},
        {"score": 10},
    ],
    "evaluation": {"overallFeedback": "Solid work"}
}


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "OK"


def test_end_to_end_scenario(client, tokens, question_set_id):
    trainee, admin = _auth(tokens["trainee"]), _auth(tokens["admin"])

    response = client.post("/api/attempts", json=_submission(question_set_id), headers=trainee)
    assert response.status_code == 201
    attempt = response.json()
    assert attempt["status"] == "submitted"
    assert attempt["submittedAt"]
    assert len(attempt["questionAnswers"]) == 3

    response = client.put(f"/api/attempts/{attempt['id']}", json=EVALUATION, headers=admin)
    assert response.status_code == 200
    evaluated = response.json()
    assert evaluated["status"] == "evaluated"
    assert evaluated["evaluation"]["totalScore"] == 24
    assert evaluated["evaluation"]["maxScore"] == 30
    assert evaluated["evaluation"]["percentage"] == 80
    assert evaluated["evaluation"]["grade"] == "B+"
    assert evaluated["evaluation"]["evaluatedBy"] == "Ada Admin"
    assert evaluated["evaluation"]["overallFeedback"] == "Solid work"
    assert [a["score"] for a in evaluated["questionAnswers"]] == [8, 6, 10]

    response = client.post("/api/attempts", json=_submission(question_set_id), headers=trainee)
    assert response.status_code == 409
    assert response.json()["message"] == "Test has already been evaluated and cannot be resubmitted"
    assert response.json()["code"] == "conflict_error"

    mine = client.get("/api/attempts/mine", headers=trainee).json()
    assert len(mine) == 1
    assert mine[0]["evaluation"]["grade"] == "B+"


def test_autosave_then_submit_updates_one_attempt(client, tokens, question_set_id):
    trainee = _auth(tokens["trainee"])

    first = client.post("/api/attempts", json=_submission(question_set_id, "in-progress"), headers=trainee)
    assert first.status_code == 201
    assert first.json()["submittedAt"] is None

    second = client.post(
        "/api/attempts",
        json=_submission(question_set_id, id=first.json()["id"]),
        headers=trainee
    )
    assert second.status_code == 200
    assert second.json()["id"] == first.json()["id"]
    assert second.json()["status"] == "submitted"

    listing = client.get("/api/attempts", params={"date": DATE}, headers=_auth(tokens["admin"]))
    assert listing.status_code == 200
    assert len(listing.json()) == 1


def test_answers_key_is_accepted(client, tokens, question_set_id):
    body = _submission(question_set_id)
    body["answers"] = body.pop("questionAnswers")
    response = client.post("/api/attempts", json=body, headers=_auth(tokens["trainee"]))
    assert response.status_code == 201


def test_submissions_alias(client, tokens, question_set_id):
    response = client.post("/api/submissions", json=_submission(question_set_id), headers=_auth(tokens["trainee"]))
    assert response.status_code == 201
    attempt_id = response.json()["id"]

    response = client.get(f"/api/submissions/{attempt_id}", headers=_auth(tokens["admin"]))
    assert response.status_code == 200

    response = client.get("/api/submissions/my", headers=_auth(tokens["trainee"]))
    assert response.status_code == 200
    assert [a["id"] for a in response.json()] == [attempt_id]


def test_trainee_cannot_evaluate(client, tokens, question_set_id):
    trainee = _auth(tokens["trainee"])
    attempt = client.post("/api/attempts", json=_submission(question_set_id), headers=trainee).json()

    response = client.put(f"/api/attempts/{attempt['id']}", json=EVALUATION, headers=trainee)
    assert response.status_code == 403
    assert response.json()["code"] == "authorization_error"

    # Regardless of payload validity
    response = client.put(f"/api/attempts/{attempt['id']}", json={"questionAnswers": "nonsense"}, headers=trainee)
    assert response.status_code == 403

    response = client.put(
        f"/api/attempts/{attempt['id']}",
        content=b"{not json",
        headers={**trainee, "Content-Type": "application/json"}
    )
    assert response.status_code == 403


def test_evaluate_rejects_malformed_body_from_staff(client, tokens, question_set_id):
    attempt = client.post("/api/attempts", json=_submission(question_set_id), headers=_auth(tokens["trainee"])).json()
    admin = {**_auth(tokens["admin"]), "Content-Type": "application/json"}

    response = client.put(f"/api/attempts/{attempt['id']}", content=b"{not json", headers=admin)
    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"

    response = client.put(f"/api/attempts/{attempt['id']}", json={"questionAnswers": "nonsense"}, headers=admin)
    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"


def test_missing_or_invalid_token(client, question_set_id):
    response = client.get("/api/attempts/mine")
    assert response.status_code == 401
    assert response.json()["code"] == "authentication_error"

    response = client.get("/api/attempts/mine", headers=_auth("garbage"))
    assert response.status_code == 401

    response = client.put("/api/attempts/anything", json=EVALUATION)
    assert response.status_code == 401


@pytest.mark.parametrize("method,path", [
    ("get", "/api/attempts"),
    ("delete", "/api/attempts/some-id"),
    ("get", "/api/trainees"),
    ("get", "/api/users"),
    ("post", "/api/questions"),
])
def test_trainee_forbidden_routes(client, tokens, method, path):
    response = getattr(client, method)(path, headers=_auth(tokens["trainee"]))
    assert response.status_code == 403


def test_admin_cannot_submit_or_manage_users(client, tokens, question_set_id):
    admin = _auth(tokens["admin"])
    assert client.post("/api/attempts", json=_submission(question_set_id), headers=admin).status_code == 403
    assert client.get("/api/users", headers=admin).status_code == 403
    assert client.get("/api/trainees", headers=admin).status_code == 200


def test_validation_errors_are_400(client, tokens, question_set_id):
    trainee, admin = _auth(tokens["trainee"]), _auth(tokens["admin"])

    body = _submission(question_set_id)
    del body["questionSetId"]
    response = client.post("/api/attempts", json=body, headers=trainee)
    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"

    response = client.post("/api/attempts", json=_submission(question_set_id, questionAnswers=[]), headers=trainee)
    assert response.status_code == 400

    body = _submission(question_set_id)
    del body["sessionTitle"]
    assert client.post("/api/attempts", json=body, headers=trainee).status_code == 400
    response = client.post("/api/attempts", json=_submission(question_set_id, sessionTitle="  "), headers=trainee)
    assert response.status_code == 400
    response = client.post("/api/attempts", json=_submission(question_set_id, date="20240101"), headers=trainee)
    assert response.status_code == 400

    attempt = client.post("/api/attempts", json=_submission(question_set_id), headers=trainee).json()
    short = {"questionAnswers": EVALUATION["questionAnswers"][:2]}
    assert client.put(f"/api/attempts/{attempt['id']}", json=short, headers=admin).status_code == 400

    too_high = {"questionAnswers": [{"score": 11}, {"score": 5}, {"score": 5}]}
    response = client.put(f"/api/attempts/{attempt['id']}", json=too_high, headers=admin)
    assert response.status_code == 400
    assert "questionAnswers[0].score" in response.json()["details"]["errors"]


def test_not_found(client, tokens):
    admin = _auth(tokens["admin"])
    assert client.put("/api/attempts/missing", json=EVALUATION, headers=admin).status_code == 404
    assert client.get("/api/questions/missing", headers=admin).status_code == 404
    response = client.post(
        "/api/attempts",
        json=_submission("missing"),
        headers=_auth(tokens["trainee"])
    )
    assert response.status_code == 404


def test_question_set_routes(client, tokens, question_set_id):
    trainee, admin = _auth(tokens["trainee"]), _auth(tokens["admin"])

    assert len(client.get("/api/questions", headers=trainee).json()) == 1
    assert len(client.get(f"/api/questions/date/{DATE}", headers=trainee).json()) == 1
    assert client.get("/api/questions/today", headers=trainee).status_code == 200

    response = client.put(f"/api/questions/{question_set_id}", json={"sessionTitle": "Week One"}, headers=admin)
    assert response.status_code == 200
    assert response.json()["sessionTitle"] == "Week One"

    client.post("/api/attempts", json=_submission(question_set_id), headers=trainee)
    assert client.delete(f"/api/questions/{question_set_id}", headers=admin).status_code == 409


def test_account_routes(client, tokens):
    root, trainee = _auth(tokens["superadmin"]), _auth(tokens["trainee"])

    me = client.get("/api/auth/me", headers=trainee).json()
    assert me["email"] == "tina@example.com"
    assert "passwordHash" not in me

    response = client.post(
        "/api/auth/register",
        json={"name": "Tina", "email": "tina@example.com", "password": "secret1"}
    )
    assert response.status_code == 409

    response = client.post("/api/auth/login", json={"email": "tina@example.com", "password": "nope"})
    assert response.status_code == 401

    response = client.post(
        "/api/auth/reset-password",
        json={"currentPassword": "secret1", "newPassword": "secret2"},
        headers=trainee
    )
    assert response.status_code == 200
    assert client.post("/api/auth/login", json={"email": "tina@example.com", "password": "secret2"}).status_code == 200

    users = client.get("/api/users", headers=root).json()
    root_id = next(u["id"] for u in users if u["role"] == "superadmin")
    assert client.delete(f"/api/users/{root_id}", headers=root).status_code == 403

    response = client.put(f"/api/users/{me['id']}", json={"role": "admin"}, headers=root)
    assert response.status_code == 200
    assert response.json()["role"] == "admin"

    assert client.delete(f"/api/users/{me['id']}", headers=root).status_code == 200
    assert client.delete(f"/api/users/{me['id']}", headers=root).status_code == 404
