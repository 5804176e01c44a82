import logging

from fastapi import HTTPException, status
from google.cloud.firestore_v1.base_query import FieldFilter

from app.models.enrollment import Enrollment
from app.models.user import User
from app.utils.firestore_exception import handle_firestore_exceptions


logger = logging.getLogger(__name__)


class EnrollmentService:
    """Read access to course enrolments kept by the host platform."""

    def __init__(self, db):
        self.db = db
        self.collection = db.collection("enrollments")

    def _generate_enrollment_id(self, user_id: str, course_id: str) -> str:
        """Generate composite key for enrollment."""
        return f"{user_id}_{course_id}"

    @handle_firestore_exceptions
    def get_enrollment(self, user_id: str, course_id: str) -> Enrollment:
        enrollment_id = self._generate_enrollment_id(user_id, course_id)
        doc = self.collection.document(enrollment_id).get()

        if not doc.exists:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Enrollment not found for user '{user_id}' in course '{course_id}'.",
            )

        return Enrollment(**doc.to_dict())

    @handle_firestore_exceptions
    def get_enrollments_by_course(self, course_id: str) -> list[Enrollment]:
        """Get all enrollments for a specific course."""
        docs = self.collection.where(filter=FieldFilter("course_id", "==", course_id)).get()
        return [Enrollment(**doc.to_dict()) for doc in docs]

    def enrolled_users(self, course_id: str) -> list[User]:
        enrollments = self.get_enrollments_by_course(course_id)
        users = [User(id=e.user_id, name=e.user_name) for e in enrollments]
        logger.info(f"Retrieved {len(users)} enrolled users for course: {course_id}")
        return users
