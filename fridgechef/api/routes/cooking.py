"""Cooking mode: the selected recipe, its steps, ingredients and translations."""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, BackgroundTasks, Depends
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from fridgechef.api.dependencies import get_controller
from fridgechef.api.routes.chat import NDJSON_MEDIA_TYPE, ndjson_events
from fridgechef.middleware.rate_limit import rate_limit_dependency
from fridgechef.models.state import AppSnapshot, CookingSnapshot
from fridgechef.services.app_controller import AppController

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/cooking", tags=["cooking"])


class SelectRequest(BaseModel):
    recipe_id: str


class LanguageRequest(BaseModel):
    language: str = Field(..., description="Code from the supported languages table, e.g. 'es'")


class VoiceCommandRequest(BaseModel):
    transcript: str


class SubstituteRequest(BaseModel):
    ingredient: str = Field(..., description="Original (untranslated) ingredient name")


class ReadAloudResponse(BaseModel):
    text: Optional[str] = None
    isSpeaking: bool


@router.post("/select", response_model=CookingSnapshot)
async def select_recipe(
    body: SelectRequest,
    background_tasks: BackgroundTasks,
    controller: AppController = Depends(get_controller),
) -> CookingSnapshot:
    """Open a recipe in cooking mode. A missing cook time is estimated after the response."""
    controller.select_recipe(body.recipe_id)
    background_tasks.add_task(controller.estimate_cook_time)
    return controller.cooking_snapshot()


@router.post("/back", response_model=AppSnapshot)
async def back_to_recipes(controller: AppController = Depends(get_controller)) -> AppSnapshot:
    controller.back_to_recipes()
    return controller.snapshot()


@router.get("", response_model=CookingSnapshot)
async def get_cooking(controller: AppController = Depends(get_controller)) -> CookingSnapshot:
    return controller.cooking_snapshot()


@router.post("/steps/next", response_model=CookingSnapshot)
async def next_step(controller: AppController = Depends(get_controller)) -> CookingSnapshot:
    controller.next_step()
    return controller.cooking_snapshot()


@router.post("/steps/previous", response_model=CookingSnapshot)
async def previous_step(controller: AppController = Depends(get_controller)) -> CookingSnapshot:
    controller.previous_step()
    return controller.cooking_snapshot()


@router.post("/ingredients/{name}/toggle", response_model=CookingSnapshot)
async def toggle_ingredient(name: str, controller: AppController = Depends(get_controller)) -> CookingSnapshot:
    controller.toggle_ingredient(name)
    return controller.cooking_snapshot()


@router.post("/missing-to-shopping-list")
async def add_missing_to_shopping_list(controller: AppController = Depends(get_controller)) -> Dict[str, Any]:
    message = controller.add_missing_to_shopping_list()
    return {"message": message, "shoppingList": controller.shopping_list.items}


@router.put("/language", response_model=CookingSnapshot)
async def set_language(body: LanguageRequest, controller: AppController = Depends(get_controller)) -> CookingSnapshot:
    """Translate the recipe's ingredients and steps. Failure reverts to English with `translationError` set."""
    await controller.set_cooking_language(body.language)
    return controller.cooking_snapshot()


@router.post("/voice-command", response_model=CookingSnapshot)
async def voice_command(body: VoiceCommandRequest, controller: AppController = Depends(get_controller)) -> CookingSnapshot:
    """Apply a recognized utterance; anything other than next/previous/back is ignored."""
    command = controller.apply_voice_command(body.transcript)
    logger.info("Voice command", extra={"command": command.value if command else None})
    return controller.cooking_snapshot()


@router.post("/read-aloud", response_model=ReadAloudResponse)
async def read_aloud(controller: AppController = Depends(get_controller)) -> ReadAloudResponse:
    text = controller.read_aloud()
    return ReadAloudResponse(text=text, isSpeaking=controller.cooking_snapshot().isSpeaking)


@router.post("/ask/substitute")
async def ask_substitute(
    body: SubstituteRequest,
    _: None = Depends(rate_limit_dependency),
    controller: AppController = Depends(get_controller),
) -> StreamingResponse:
    """Ask the assistant for a substitute; streams chat events like POST /chat/messages."""
    events = controller.ask_substitute(body.ingredient)
    return StreamingResponse(ndjson_events(events), media_type=NDJSON_MEDIA_TYPE)


@router.post("/ask/social")
async def ask_social(
    _: None = Depends(rate_limit_dependency),
    controller: AppController = Depends(get_controller),
) -> StreamingResponse:
    events = controller.ask_social_links()
    return StreamingResponse(ndjson_events(events), media_type=NDJSON_MEDIA_TYPE)
