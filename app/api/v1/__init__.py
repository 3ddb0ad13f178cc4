"""API v1 routes."""

from fastapi import APIRouter

from app.api.v1 import auth, health, rbac

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(rbac.router, prefix="/rbac", tags=["rbac"])
