"""Fixed option tables and user-facing texts."""

from typing import Dict, List, Optional

DIETARY_OPTIONS: List[str] = ["Vegetarian", "Keto", "Gluten-Free", "Vegan", "Dairy-Free"]

TRANSLATION_LANGUAGES: List[Dict[str, str]] = [
    {"code": "en", "name": "English"},
    {"code": "es", "name": "Spanish"},
    {"code": "fr", "name": "French"},
    {"code": "de", "name": "German"},
    {"code": "hi", "name": "Hindi"},
    {"code": "zh", "name": "Chinese (Simplified)"},
    {"code": "ja", "name": "Japanese"},
    {"code": "ar", "name": "Arabic"},
    {"code": "ru", "name": "Russian"},
    {"code": "si", "name": "Sinhala"},
    {"code": "ta", "name": "Tamil"},
]


def language_name(code: str) -> Optional[str]:
    """Return the display name for a language code, or None if unknown."""
    for language in TRANSLATION_LANGUAGES:
        if language["code"] == code:
            return language["name"]
    return None


# Chat
CHAT_SYSTEM_INSTRUCTION = (
    "You are a helpful and friendly culinary assistant. You can answer questions about recipes, "
    "cooking techniques, ingredient substitutions, and nutrition. Use Google Search to find the most "
    "up-to-date and accurate information, especially for specific recipes, nutritional data, or "
    "current food trends. Keep your answers concise and easy to understand."
)
CHAT_GREETING = (
    "Hi! I'm your culinary assistant. Ask me for cooking tips, ingredient substitutions, or recipe ideas!"
)
CHAT_INIT_FAILED = "Sorry, the chatbot could not be started."
CHAT_TURN_FAILED = "Sorry, I'm having trouble connecting right now."

# Recipe analysis
EMPTY_RESPONSE_MESSAGE = (
    "The AI returned an empty response. This could be due to a safety filter or an issue "
    "with the image. Please try a different photo."
)
INVALID_FORMAT_MESSAGE = "The AI returned an invalid recipe format. Please try again."
NO_RECIPES_MESSAGE = "The AI could not recognize any recipes in this photo. Please try a clearer photo."
ANALYSIS_FAILED_MESSAGE = "Failed to get recipes from the AI. Please try another image."

# Cooking mode
TRANSLATION_FAILED_MESSAGE = "Sorry, we couldn't translate the recipe at this time."
NO_FAVORITES_MESSAGE = "You haven't saved any favorite recipes yet."
NO_MATCHES_MESSAGE = "No recipes match your search or filters."
SUBSTITUTE_PROMPT = 'What\'s a good substitute for {ingredient} in a "{recipe}" recipe?'
SOCIAL_LINKS_PROMPT = 'Can you find social media posts or videos about how to make "{recipe}"?'

# Shopping list
ITEMS_ADDED_MESSAGE = "{count} item(s) added to your shopping list!"
