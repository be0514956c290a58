"""Recipe Pydantic models."""

import uuid
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

Difficulty = Literal["Easy", "Medium", "Hard"]


def new_recipe_id() -> str:
    """Identifier assigned to every recipe when it enters the application."""
    return uuid.uuid4().hex


class Ingredient(BaseModel):
    """Single ingredient of a suggested recipe."""

    name: str = Field(..., description="Ingredient name, identity key within a recipe")
    isAvailable: bool = Field(False, description="Whether the ingredient was seen in the fridge")


class Recipe(BaseModel):
    """Recipe suggested from a fridge photo."""

    id: str = Field(default_factory=new_recipe_id, description="Generated at ingestion time")
    name: str = Field(..., description="Recipe name")
    difficulty: Difficulty = Field("Medium", description="Easy, Medium or Hard")
    prepTime: int = Field(0, ge=0, description="Preparation time in minutes")
    cookTime: Optional[int] = Field(None, ge=0, description="Cooking time in minutes, estimated when absent")
    calories: int = Field(0, ge=0, description="Calories per serving")
    dietaryTags: List[str] = Field(default_factory=list, description="Dietary tags, e.g. 'Vegan'")
    ingredients: List[Ingredient] = Field(default_factory=list, description="Ordered ingredients")
    instructions: List[str] = Field(default_factory=list, description="Ordered instruction steps")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "5f0c2a7e9b1d4c3e8a6f2b1c0d9e8f7a",
                "name": "Spinach and Feta Omelette",
                "difficulty": "Easy",
                "prepTime": 5,
                "cookTime": 10,
                "calories": 320,
                "dietaryTags": ["Vegetarian", "Gluten-Free", "Keto"],
                "ingredients": [
                    {"name": "Eggs", "isAvailable": True},
                    {"name": "Spinach", "isAvailable": True},
                    {"name": "Feta cheese", "isAvailable": False},
                ],
                "instructions": [
                    "Whisk the eggs with a pinch of salt.",
                    "Wilt the spinach in a hot pan.",
                    "Pour in the eggs, add the feta and fold once set.",
                ],
            }
        }
    )

    @property
    def ingredient_names(self) -> List[str]:
        return [ingredient.name for ingredient in self.ingredients]


class RecipeTranslation(BaseModel):
    """Translated display copy of a recipe's ingredient names and steps."""

    language: str
    ingredientNames: List[str]
    instructions: List[str]
