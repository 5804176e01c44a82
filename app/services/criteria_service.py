from datetime import datetime
import logging

from fastapi import HTTPException, status
from google.cloud.firestore_v1.base_query import FieldFilter

from app.availability.conditions import ConditionRegistry, default_registry
from app.availability.tree import parse, serialize
from app.models.criterion import CRITERIA_TYPE_AVAILABILITY, Criterion, CriterionCreate
from app.utils.firestore_exception import handle_firestore_exceptions


logger = logging.getLogger(__name__)


class CriteriaService:
    """Stores availability criteria of course completion configurations."""

    def __init__(self, db, registry: ConditionRegistry | None = None):
        self.db = db
        self.registry = registry or default_registry
        self.collection = db.collection("course_completion_criteria")
        self.completions_collection = db.collection("course_completion_crit_compl")

    @handle_firestore_exceptions
    def create_criterion(self, data: CriterionCreate) -> Criterion:
        """
        Validate and store a new availability criterion.

        The tree is normalised through parse/serialize before storing. A tree
        without conditions is rejected since it would complete every user.

        Raises:
            MalformedTreeError: If the availability JSON is not a valid tree
            UnknownConditionKindError: If a condition type is not registered
            HTTPException: 400 if the tree has no conditions
        """
        tree = parse(data.availability)
        if tree.is_empty():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Availability criterion needs at least one condition.",
            )
        self.registry.validate(tree)

        doc_ref = self.collection.document()
        criterion_data = data.model_dump()
        criterion_data["id"] = doc_ref.id
        criterion_data["criteria_type"] = CRITERIA_TYPE_AVAILABILITY
        criterion_data["availability"] = serialize(tree)
        criterion_data["created_at"] = datetime.today()

        doc_ref.set(criterion_data)
        logger.info(f"Created availability criterion '{doc_ref.id}' for course '{data.course_id}'")
        return Criterion(**criterion_data)

    @handle_firestore_exceptions
    def get_criterion(self, criteria_id: str) -> Criterion:
        doc = self.collection.document(criteria_id).get()
        if not doc.exists:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Criterion with ID '{criteria_id}' not found.",
            )

        criterion_data = doc.to_dict()
        criterion_data["id"] = doc.id
        return Criterion(**criterion_data)

    @handle_firestore_exceptions
    def fetch_criteria(self, course_id: str | None = None) -> list[Criterion]:
        """Fetch availability criteria, optionally only those of one course."""
        query = self.collection.where(
            filter=FieldFilter("criteria_type", "==", CRITERIA_TYPE_AVAILABILITY)
        )
        if course_id is not None:
            query = query.where(filter=FieldFilter("course_id", "==", course_id))

        criteria = []
        for doc in query.get():
            criterion_data = doc.to_dict()
            criterion_data["id"] = doc.id
            criteria.append(Criterion(**criterion_data))
        return criteria

    @handle_firestore_exceptions
    def delete_criteria_for_course(self, course_id: str) -> dict:
        """Remove a course's availability criteria together with their completion records."""
        criteria = self.fetch_criteria(course_id)
        for criterion in criteria:
            completion_docs = self.completions_collection.where(
                filter=FieldFilter("criteria_id", "==", criterion.id)
            ).get()
            for doc in completion_docs:
                doc.reference.delete()
            self.collection.document(criterion.id).delete()

        logger.info(f"Deleted {len(criteria)} availability criteria for course '{course_id}'")
        return {"message": f"Deleted {len(criteria)} criteria for course '{course_id}'."}
