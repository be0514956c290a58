"""Fridge photo analysis and the recipe list views."""

import logging
from typing import Dict, List

from fastapi import APIRouter, Depends, File, UploadFile
from pydantic import BaseModel, Field

from fridgechef.api.dependencies import get_controller
from fridgechef.middleware.rate_limit import rate_limit_dependency
from fridgechef.models.state import AppSnapshot, RecipeCard, Tab
from fridgechef.services.app_controller import AppController

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/recipes", tags=["recipes"])


class SearchRequest(BaseModel):
    query: str = Field("", description="Matched against recipe and ingredient names")


class TabRequest(BaseModel):
    tab: Tab


@router.post("/analyze", response_model=AppSnapshot)
async def analyze_image(
    file: UploadFile = File(...),
    _: None = Depends(rate_limit_dependency),
    controller: AppController = Depends(get_controller),
) -> AppSnapshot:
    """
    Suggest recipes from a photo of the fridge.

    - **file**: Image file (JPEG, PNG, WebP or HEIC, max 10MB)

    The active dietary filters are passed to the model. On failure the
    state's `error` field carries the message shown to the user.
    """
    logger.info(
        "Route /recipes/analyze called",
        extra={
            "route": "/recipes/analyze",
            "params": {"filename": file.filename, "content_type": file.content_type},
        },
    )
    image_data = await file.read()
    await controller.analyze_image(image_data)
    return controller.snapshot()


@router.get("", response_model=List[RecipeCard])
async def list_recipes(controller: AppController = Depends(get_controller)) -> List[RecipeCard]:
    """Filtered view of the active tab."""
    return controller.visible_recipes()


@router.post("/filters/{tag}", response_model=AppSnapshot)
async def toggle_filter(tag: str, controller: AppController = Depends(get_controller)) -> AppSnapshot:
    controller.toggle_filter(tag)
    return controller.snapshot()


@router.delete("/filters", response_model=AppSnapshot)
async def clear_filters(controller: AppController = Depends(get_controller)) -> AppSnapshot:
    controller.clear_filters()
    return controller.snapshot()


@router.put("/search", response_model=AppSnapshot)
async def set_search(body: SearchRequest, controller: AppController = Depends(get_controller)) -> AppSnapshot:
    controller.set_search_query(body.query)
    return controller.snapshot()


@router.put("/tab", response_model=AppSnapshot)
async def set_tab(body: TabRequest, controller: AppController = Depends(get_controller)) -> AppSnapshot:
    controller.set_tab(body.tab)
    return controller.snapshot()


@router.post("/{recipe_id}/favorite")
async def toggle_favorite(recipe_id: str, controller: AppController = Depends(get_controller)) -> Dict[str, bool]:
    return {"isFavorite": controller.toggle_favorite(recipe_id)}
