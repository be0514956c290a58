"""Health check endpoints."""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from fridgechef.api.dependencies import get_controller
from fridgechef.config import settings
from fridgechef.services.app_controller import AppController

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health_check() -> Dict[str, str]:
    return {"status": "healthy"}


@router.get("/ready")
async def readiness_check(controller: AppController = Depends(get_controller)) -> Dict[str, Any]:
    """
    Readiness check.

    The server is usable without a chat session or an API key; both are
    reported so the front end can disable what will not work.
    """
    return {
        "status": "ready",
        "dependencies": {
            "gemini_api_key": bool(settings.gemini_api_key),
            "chat": controller.chat.available,
        },
    }
