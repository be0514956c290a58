"""Whole-application state."""

import logging

from fastapi import APIRouter, Depends

from fridgechef.api.dependencies import get_controller
from fridgechef.models.state import AppSnapshot
from fridgechef.services.app_controller import AppController

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/state", tags=["state"])


@router.get("", response_model=AppSnapshot)
async def get_state(controller: AppController = Depends(get_controller)) -> AppSnapshot:
    return controller.snapshot()


@router.post("/reset", response_model=AppSnapshot)
async def reset_state(controller: AppController = Depends(get_controller)) -> AppSnapshot:
    """Start over with a new photo. Favorites and the shopping list are kept."""
    controller.reset()
    logger.info("Application state reset")
    return controller.snapshot()
