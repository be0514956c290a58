"""Navigation enums and read-only state snapshots handed to the presentation layer."""

from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from fridgechef.models.chat import ChatRole, ChatState, GroundingChunk
from fridgechef.models.recipe import Recipe


class View(str, Enum):
    UPLOAD = "upload"
    RECIPES = "recipes"
    COOKING = "cooking"


class Tab(str, Enum):
    RECIPES = "recipes"
    SHOPPING_LIST = "shoppingList"
    FAVORITES = "favorites"


class RecipeCard(BaseModel):
    recipe: Recipe
    isFavorite: bool


class TabCounts(BaseModel):
    recipes: int
    favorites: int
    shoppingList: int


class ChatSummary(BaseModel):
    available: bool
    isOpen: bool
    state: ChatState
    language: str
    messageCount: int


class AppSnapshot(BaseModel):
    """Everything the main screen needs, derived from the application state."""

    view: View
    activeTab: Tab
    isLoading: bool
    error: Optional[str] = None
    activeFilters: List[str]
    searchQuery: str
    recipes: List[RecipeCard] = Field(..., description="Filtered view for the active tab")
    emptyMessage: Optional[str] = None
    counts: TabCounts
    shoppingList: List[str]
    selectedRecipeId: Optional[str] = None
    dietaryOptions: List[str]
    languages: List[Dict[str, str]]
    chat: ChatSummary


class IngredientView(BaseModel):
    name: str = Field(..., description="Display name, translated when available")
    originalName: str
    isAvailable: bool


class CookingSnapshot(BaseModel):
    """Derived state of the recipe being cooked."""

    recipe: Recipe
    isFavorite: bool
    language: str
    isTranslating: bool
    translationError: Optional[str] = None
    ingredients: List[IngredientView]
    missingIngredients: List[str]
    instructions: List[str]
    currentStep: int
    stepCount: int
    currentInstruction: Optional[str] = None
    cookTime: Optional[int] = None
    estimatedCookTime: Optional[int] = None
    isEstimatingCookTime: bool
    speechSupported: bool
    isSpeaking: bool
    isListening: bool


class ChatMessageView(BaseModel):
    id: str
    role: ChatRole
    text: str
    groundingChunks: List[GroundingChunk]
    isStreaming: bool


class ChatTranscript(BaseModel):
    language: str
    state: ChatState
    available: bool
    isOpen: bool
    isTranslating: bool
    messages: List[ChatMessageView]
