"""Main API router that registers all sub-routers.

This module aggregates all domain-specific routers into a single router
that gets mounted in main.py.
"""

from fastapi import APIRouter

from apps.chat import router as chat_router
from apps.health import router as health_router

router = APIRouter()

router.include_router(health_router)
router.include_router(chat_router)
