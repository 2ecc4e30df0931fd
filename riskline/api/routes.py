from fastapi import APIRouter

from riskline.api.assessment import router as assessment_router
from riskline.api.health import router as health_router
from riskline.api.preview import router as preview_router

router = APIRouter()
router.include_router(health_router, tags=["health"])
router.include_router(assessment_router, prefix="/assessments", tags=["assessment"])
router.include_router(preview_router, prefix="/v1", tags=["preview"])
