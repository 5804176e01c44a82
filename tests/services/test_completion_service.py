"""Unit tests for CompletionService."""

from datetime import datetime
from unittest.mock import MagicMock

from google.api_core.exceptions import AlreadyExists
import pytest

from app.availability.exceptions import StoreWriteConflict
from app.models.completion import CompletionRecordCreate
from app.services.completion_service import CompletionService
from tests.mocks.firestore import FirestoreMocks


@pytest.fixture
def completion_create():
    return CompletionRecordCreate(
        user_id="user123",
        course_id="course456",
        criteria_id="crit789",
        time_completed=datetime(2025, 1, 15, 11, 10),
    )


@pytest.fixture
def existing_completion_data():
    return {
        "id": "user123_crit789",
        "user_id": "user123",
        "course_id": "course456",
        "criteria_id": "crit789",
        "time_completed": datetime(2025, 1, 1),
    }


def make_service(collection):
    return CompletionService(FirestoreMocks.mock_db_with_collection(collection))


def test_find_completion_returns_none_when_missing():
    collection = MagicMock()
    collection.document.return_value.get.return_value = FirestoreMocks.document_not_found()

    assert make_service(collection).find_completion("user123", "crit789") is None
    collection.document.assert_called_with("user123_crit789")


def test_find_completion_returns_record(existing_completion_data):
    collection = MagicMock()
    collection.document.return_value.get.return_value = FirestoreMocks.document_exists(
        "user123_crit789", existing_completion_data
    )

    record = make_service(collection).find_completion("user123", "crit789")

    assert record.id == "user123_crit789"
    assert record.is_complete


def test_insert_completion_uses_create(completion_create):
    collection = MagicMock()

    record = make_service(collection).insert_completion(completion_create)

    assert record.id == "user123_crit789"
    collection.document.assert_called_with("user123_crit789")
    collection.document.return_value.create.assert_called_once()
    collection.document.return_value.set.assert_not_called()


def test_insert_completion_existing_raises_conflict(completion_create):
    collection = MagicMock()
    collection.document.return_value.create.side_effect = AlreadyExists("exists")

    with pytest.raises(StoreWriteConflict) as exc_info:
        make_service(collection).insert_completion(completion_create)

    assert exc_info.value.record_id == "user123_crit789"


def test_mark_complete_keeps_completed_record(existing_completion_data):
    """Completion is monotonic: an existing completion time is never replaced."""
    collection = MagicMock()
    collection.document.return_value.get.return_value = FirestoreMocks.document_exists(
        "user123_crit789", existing_completion_data
    )

    record = make_service(collection).mark_complete(
        "user123", "course456", "crit789", datetime(2025, 2, 1)
    )

    assert record.time_completed == datetime(2025, 1, 1)
    collection.document.return_value.update.assert_not_called()
    collection.document.return_value.create.assert_not_called()


def test_mark_complete_fills_incomplete_record(existing_completion_data):
    existing_completion_data["time_completed"] = None
    collection = MagicMock()
    collection.document.return_value.get.return_value = FirestoreMocks.document_exists(
        "user123_crit789", existing_completion_data
    )

    record = make_service(collection).mark_complete(
        "user123", "course456", "crit789", datetime(2025, 2, 1)
    )

    assert record.time_completed == datetime(2025, 2, 1)
    collection.document.return_value.update.assert_called_once_with(
        {"time_completed": datetime(2025, 2, 1)}
    )


def test_mark_complete_inserts_new_record():
    collection = MagicMock()
    collection.document.return_value.get.return_value = FirestoreMocks.document_not_found()

    record = make_service(collection).mark_complete(
        "user123", "course456", "crit789", datetime(2025, 2, 1)
    )

    assert record.course_id == "course456"
    collection.document.return_value.create.assert_called_once()


def test_mark_complete_concurrent_insert_returns_stored_record(existing_completion_data):
    collection = MagicMock()
    collection.document.return_value.get.side_effect = [
        FirestoreMocks.document_not_found(),
        FirestoreMocks.document_exists("user123_crit789", existing_completion_data),
    ]
    collection.document.return_value.create.side_effect = AlreadyExists("exists")

    record = make_service(collection).mark_complete(
        "user123", "course456", "crit789", datetime(2025, 2, 1)
    )

    assert record.time_completed == datetime(2025, 1, 1)
