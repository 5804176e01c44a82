"""Unit tests for the availability evaluation endpoint."""

from unittest.mock import MagicMock, patch

from fastapi import FastAPI, Request
import pytest
from starlette.testclient import TestClient

from app.api.v1.routes.availability import router
from app.availability.exceptions import UnknownConditionKindError
from app.initializers.firestore import get_db
from app.models.availability import EvaluationResult
from app.models.user import User


@pytest.fixture
def client():
    app = FastAPI()
    app.dependency_overrides[get_db] = lambda: MagicMock()

    @app.middleware("http")
    async def mock_user(request: Request, call_next):
        request.state.current_user = User(id="admin1")
        return await call_next(request)

    app.include_router(router, prefix="/availability")
    return TestClient(app)


def test_evaluate_returns_result(client):
    with patch("app.api.v1.routes.availability.AvailabilityCriterionService") as mock_service:
        mock_service.return_value.check.return_value = EvaluationResult(
            satisfied=False, explanation="You belong to group 3"
        )
        response = client.post(
            "/availability/evaluate",
            json={
                "availability": '{"op":"&","c":[{"type":"group","id":3}],"showc":[0]}',
                "user_id": "user1",
                "course_id": "course1",
            },
        )

    assert response.status_code == 200
    assert response.json() == {"satisfied": False, "explanation": "You belong to group 3"}


def test_evaluate_unknown_kind_returns_422(client):
    with patch("app.api.v1.routes.availability.AvailabilityCriterionService") as mock_service:
        mock_service.return_value.check.side_effect = UnknownConditionKindError("mystery")
        response = client.post(
            "/availability/evaluate", json={"user_id": "user1", "course_id": "course1"}
        )

    assert response.status_code == 422


def test_evaluate_missing_fields_returns_422(client):
    response = client.post("/availability/evaluate", json={"user_id": "user1"})

    assert response.status_code == 422
