"""Module: api."""

# backend/app/api/v1/api.py
from fastapi import APIRouter

# Core operational routes (health/auth).
from app.api.v1.routes.health import router as health_router
from app.api.v1.routes.auth import router as auth_router

# Domain routes used by the staff portal pages.
from app.api.v1.routes.departments import router as departments_router
from app.api.v1.routes.leaves import router as leaves_router
from app.api.v1.routes.balance import router as balance_router
from app.api.v1.routes.slots import router as slots_router


api_router = APIRouter()

# Register operational endpoints first for service-level concerns.
api_router.include_router(health_router, prefix="/health", tags=["health"])
api_router.include_router(auth_router, prefix="/auth", tags=["auth"])

# Register business/domain endpoints consumed by the application UI.
api_router.include_router(departments_router, prefix="/departments", tags=["departments"])
api_router.include_router(leaves_router, prefix="/leaves", tags=["leaves"])
api_router.include_router(balance_router, prefix="/balance", tags=["balance"])
api_router.include_router(slots_router, prefix="/slots", tags=["slots"])
