"""Shopping list endpoints."""

from typing import List

from fastapi import APIRouter, Depends

from fridgechef.api.dependencies import get_controller
from fridgechef.services.app_controller import AppController

router = APIRouter(prefix="/shopping-list", tags=["shopping-list"])


@router.get("", response_model=List[str])
async def get_shopping_list(controller: AppController = Depends(get_controller)) -> List[str]:
    return controller.shopping_list.items


@router.delete("/{item:path}", response_model=List[str])
async def remove_item(item: str, controller: AppController = Depends(get_controller)) -> List[str]:
    controller.remove_shopping_item(item)
    return controller.shopping_list.items
