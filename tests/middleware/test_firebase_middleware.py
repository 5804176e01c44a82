from unittest.mock import patch

from fastapi import FastAPI, Request
from firebase_admin.auth import ExpiredIdTokenError, InvalidIdTokenError, RevokedIdTokenError
import pytest
from starlette.testclient import TestClient

from app.middleware.firebase_middleware import FirebaseAuthMiddleware


@pytest.fixture
def app() -> FastAPI:
    app: FastAPI = FastAPI()

    @app.get("/protected")
    async def protected(request: Request):
        user = request.state.current_user
        return {"user": {"id": user.id, "email": user.email, "name": user.name}}

    app.add_middleware(FirebaseAuthMiddleware)
    return app


def test_missing_authorization_header(app: FastAPI):
    resp = TestClient(app).get("/protected")

    assert resp.status_code == 401
    assert resp.json()["error_code"] == "TOKEN_MISSING"


def test_invalid_authorization_scheme(app: FastAPI):
    resp = TestClient(app).get("/protected", headers={"Authorization": "Token abc"})

    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid auth scheme"


def test_malformed_authorization_header(app: FastAPI):
    resp = TestClient(app).get("/protected", headers={"Authorization": "Bearer"})

    assert resp.status_code == 401
    assert resp.json()["detail"] == "Malformed Authorization header"


@patch("firebase_admin.auth.verify_id_token")
def test_valid_token_sets_request_state_user(mock_verify, app: FastAPI):
    mock_verify.return_value = {"uid": "user123", "email": "user@example.com", "name": "Ada"}

    resp = TestClient(app).get("/protected", headers={"Authorization": "Bearer goodtoken"})

    assert resp.status_code == 200
    assert resp.json()["user"] == {"id": "user123", "email": "user@example.com", "name": "Ada"}


@patch("firebase_admin.auth.verify_id_token")
def test_token_without_email_or_name(mock_verify, app: FastAPI):
    mock_verify.return_value = {"uid": "service-account"}

    resp = TestClient(app).get("/protected", headers={"Authorization": "Bearer goodtoken"})

    assert resp.status_code == 200
    assert resp.json()["user"] == {"id": "service-account", "email": None, "name": ""}


@pytest.mark.parametrize(
    "error,error_code",
    [
        (ExpiredIdTokenError("Token expired", cause=None), "TOKEN_EXPIRED"),
        (RevokedIdTokenError("Token revoked"), "TOKEN_REVOKED"),
        (InvalidIdTokenError("Invalid token", cause=None), "TOKEN_INVALID"),
    ],
)
@patch("firebase_admin.auth.verify_id_token")
def test_rejected_tokens(mock_verify, error, error_code, app: FastAPI):
    mock_verify.side_effect = error

    resp = TestClient(app).get("/protected", headers={"Authorization": "Bearer badtoken"})

    assert resp.status_code == 401
    assert resp.json()["error_code"] == error_code


@patch("firebase_admin.auth.verify_id_token")
def test_unexpected_verification_error(mock_verify, app: FastAPI):
    mock_verify.side_effect = Exception("invalid")

    resp = TestClient(app).get("/protected", headers={"Authorization": "Bearer badtoken"})

    assert resp.status_code == 500
    assert "Internal server error" in resp.json()["detail"]


def test_excluded_path_docs(app: FastAPI):
    resp = TestClient(app).get("/docs")

    assert resp.status_code == 200
