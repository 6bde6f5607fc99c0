from fastapi import APIRouter

from recruit.modules.applications import admin_router as admin_applications_router
from recruit.modules.applications import router as applications_router

api_router = APIRouter()

api_router.include_router(applications_router, prefix="/applications", tags=["Applications"])

api_router.include_router(
    admin_applications_router,
    prefix="/applications",
    tags=["Admin - Applications"],
)
