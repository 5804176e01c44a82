"""Firestore-backed learner data read by the built-in availability conditions."""

import logging

from google.cloud.firestore_v1.base_query import FieldFilter

from app.availability.conditions import COMPLETION_INCOMPLETE
from app.utils.firestore_exception import handle_firestore_exceptions


logger = logging.getLogger(__name__)


class LearnerDataService:
    def __init__(self, db):
        self.db = db
        self.grades_collection = db.collection("grades")
        self.group_members_collection = db.collection("group_members")
        self.activity_completions_collection = db.collection("activity_completions")

    @handle_firestore_exceptions
    def grade_percent(self, user_id: str, course_id: str, item_id: str) -> float | None:
        docs = (
            self.grades_collection.where(filter=FieldFilter("user_id", "==", user_id))
            .where(filter=FieldFilter("course_id", "==", course_id))
            .where(filter=FieldFilter("item_id", "==", item_id))
            .limit(1)
            .get()
        )
        for doc in docs:
            grade = doc.to_dict().get("grade_percent")
            return None if grade is None else float(grade)
        return None

    @handle_firestore_exceptions
    def group_ids(self, user_id: str, course_id: str) -> set[str]:
        docs = (
            self.group_members_collection.where(filter=FieldFilter("user_id", "==", user_id))
            .where(filter=FieldFilter("course_id", "==", course_id))
            .get()
        )
        return {str(doc.to_dict()["group_id"]) for doc in docs}

    @handle_firestore_exceptions
    def activity_completion_state(self, user_id: str, course_id: str, cm_id: str) -> int:
        """Completion state of an activity; activity ids are unique across courses."""
        doc = self.activity_completions_collection.document(f"{user_id}_{cm_id}").get()
        if not doc.exists:
            return COMPLETION_INCOMPLETE
        return int(doc.to_dict().get("completion_state", COMPLETION_INCOMPLETE))
