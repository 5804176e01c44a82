from datetime import datetime
import logging

from google.api_core.exceptions import AlreadyExists

from app.availability.exceptions import StoreWriteConflict
from app.models.completion import CompletionRecord, CompletionRecordCreate
from app.utils.firestore_exception import handle_firestore_exceptions


logger = logging.getLogger(__name__)


class CompletionService:
    """Completion records of criteria, one per (user, criteria) pair."""

    def __init__(self, db):
        self.db = db
        self.collection = db.collection("course_completion_crit_compl")

    def _generate_completion_id(self, user_id: str, criteria_id: str) -> str:
        """Generate composite key for a completion record."""
        return f"{user_id}_{criteria_id}"

    @handle_firestore_exceptions
    def find_completion(self, user_id: str, criteria_id: str) -> CompletionRecord | None:
        doc = self.collection.document(self._generate_completion_id(user_id, criteria_id)).get()
        if not doc.exists:
            return None
        return CompletionRecord(**doc.to_dict())

    @handle_firestore_exceptions
    def insert_completion(self, data: CompletionRecordCreate) -> CompletionRecord:
        """
        Insert a completion record if none exists for the pair yet.

        Raises:
            StoreWriteConflict: If a record for (user, criteria) already exists
        """
        completion_id = self._generate_completion_id(data.user_id, data.criteria_id)
        completion_data = {**data.model_dump(), "id": completion_id}

        try:
            # create() fails when the document exists, unlike set()
            self.collection.document(completion_id).create(completion_data)
        except AlreadyExists as e:
            raise StoreWriteConflict(completion_id) from e

        return CompletionRecord(**completion_data)

    @handle_firestore_exceptions
    def mark_complete(
        self, user_id: str, course_id: str, criteria_id: str, time_completed: datetime
    ) -> CompletionRecord:
        """Mark a user complete; an already completed record is left as it is."""
        existing = self.find_completion(user_id, criteria_id)
        if existing is not None:
            if existing.is_complete:
                return existing
            self.collection.document(existing.id).update({"time_completed": time_completed})
            logger.info(f"Marked existing completion record '{existing.id}' complete")
            return existing.model_copy(update={"time_completed": time_completed})

        try:
            record = self.insert_completion(
                CompletionRecordCreate(
                    user_id=user_id,
                    course_id=course_id,
                    criteria_id=criteria_id,
                    time_completed=time_completed,
                )
            )
        except StoreWriteConflict:
            # Written concurrently; the stored record wins
            return self.find_completion(user_id, criteria_id)

        logger.info(f"Created completion record '{record.id}'")
        return record
