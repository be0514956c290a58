"""Custom exception classes."""


class FridgeChefException(Exception):
    """Base exception for FridgeChef application."""

    pass


class ValidationError(FridgeChefException):
    """Raised when input validation fails."""

    pass


class ImageProcessingError(FridgeChefException):
    """Raised when an uploaded image is rejected."""

    pass


class GeminiError(FridgeChefException):
    """Raised when Gemini API call fails."""

    pass


class RecipeParseError(FridgeChefException):
    """Raised when the AI response holds no recognizable recipe content."""

    pass


class TranslationError(FridgeChefException):
    """Raised when a translation payload does not match its input batch."""

    pass


class ChatUnavailableError(FridgeChefException):
    """Raised when the chat session could not be started."""

    pass


class ChatBusyError(FridgeChefException):
    """Raised when a chat turn is sent while another one is in progress."""

    pass


class InvalidTransitionError(FridgeChefException):
    """Raised when a navigation transition is not allowed from the current view."""

    pass


class NotFoundError(FridgeChefException):
    """Raised when a recipe or item cannot be found."""

    pass
