from fastapi import APIRouter

from .routes.availability import router as availability_router
from .routes.completion import router as completion_router
from .routes.criteria import router as criteria_router

router = APIRouter()

router.include_router(criteria_router, prefix="/criteria", tags=["criteria"])
router.include_router(availability_router, prefix="/availability", tags=["availability"])
router.include_router(completion_router, prefix="/completion", tags=["completion"])
