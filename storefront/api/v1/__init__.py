"""API v1 routes."""

from fastapi import APIRouter

from storefront.api.v1 import auth, comments, geo, health

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(geo.router, tags=["geo"])
router.include_router(comments.router, prefix="/comments", tags=["comments"])
