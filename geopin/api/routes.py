from fastapi import APIRouter

from .endpoints import health

router = APIRouter()

# Include all endpoint routers
router.include_router(health.router, tags=["health"])
