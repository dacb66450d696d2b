from fastapi import APIRouter

from tazasu.api.v1.routes_admin import router as admin_router
from tazasu.api.v1.routes_auth import router as auth_router
from tazasu.api.v1.routes_complaints import router as complaints_router
from tazasu.api.v1.routes_health import router as health_router
from tazasu.api.v1.routes_updates import router as updates_router
from tazasu.api.v1.routes_upload import router as upload_router


api_router = APIRouter()

api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, prefix="/auth", tags=["auth"])
api_router.include_router(complaints_router, prefix="/complaints", tags=["complaints"])
api_router.include_router(admin_router, prefix="/admin", tags=["admin"])
api_router.include_router(updates_router, prefix="/updates", tags=["updates"])
api_router.include_router(upload_router, prefix="/upload", tags=["upload"])
