from fastapi import HTTPException, status
from google.cloud.firestore_v1.base_query import FieldFilter

from app.models.course import Course
from app.utils.firestore_exception import handle_firestore_exceptions


class CourseService:
    def __init__(self, db):
        self.db = db
        self.collection = db.collection("courses")

    @handle_firestore_exceptions
    def get_course(self, course_id: str) -> Course:
        doc = self.collection.document(course_id).get()
        if not doc.exists:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Course with ID '{course_id}' not found.",
            )

        course_data = doc.to_dict()
        course_data["id"] = doc.id
        return Course(**course_data)

    @handle_firestore_exceptions
    def get_completion_enabled_course_ids(self) -> set[str]:
        """IDs of all courses with completion tracking enabled."""
        docs = self.collection.where(filter=FieldFilter("enable_completion", "==", True)).get()
        return {doc.id for doc in docs}
