"""FastAPI application entry point."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from fridgechef.api.dependencies import get_controller
from fridgechef.api.routes import chat, cooking, health, recipes, shopping, state
from fridgechef.config import settings
from fridgechef.core.request_id import get_request_id
from fridgechef.middleware.logging import RequestLoggingMiddleware
from fridgechef.middleware.rate_limit import get_rate_limit_exceeded_handler, limiter
from fridgechef.middleware.security import SecurityHeadersMiddleware, setup_cors
from fridgechef.utils.exceptions import (
    ChatBusyError,
    ChatUnavailableError,
    FridgeChefException,
    GeminiError,
    ImageProcessingError,
    InvalidTransitionError,
    NotFoundError,
    RecipeParseError,
    ValidationError,
)
from fridgechef.utils.logging_config import setup_logging

# Setup logging
setup_logging(settings.log_level, settings.log_format)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="FridgeChef",
    description="Recipes from a photo of your fridge, with a cooking assistant powered by Gemini",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, get_rate_limit_exceeded_handler())

# (exception type, status code, error title); first match wins
ERROR_RESPONSES = [
    (ValidationError, status.HTTP_400_BAD_REQUEST, "Validation error"),
    (ImageProcessingError, status.HTTP_400_BAD_REQUEST, "Image processing error"),
    (RecipeParseError, status.HTTP_422_UNPROCESSABLE_ENTITY, "Unusable AI response"),
    (GeminiError, status.HTTP_502_BAD_GATEWAY, "Gemini API error"),
    (ChatUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE, "Chat unavailable"),
    (ChatBusyError, status.HTTP_409_CONFLICT, "Chat busy"),
    (InvalidTransitionError, status.HTTP_409_CONFLICT, "Invalid state transition"),
    (NotFoundError, status.HTTP_404_NOT_FOUND, "Not found"),
]


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request validation errors with detailed messages."""
    request_id = get_request_id()
    logger.warning(
        f"Validation error: {str(exc)}",
        extra={"path": request.url.path, "method": request.method},
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "Validation error",
            "detail": exc.errors(),
            "request_id": request_id,
        },
    )


@app.exception_handler(FridgeChefException)
async def fridgechef_exception_handler(request: Request, exc: FridgeChefException) -> JSONResponse:
    """Render application exceptions as {"error", "detail", "request_id"}."""
    status_code, error_message = status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error"
    for exc_type, code, title in ERROR_RESPONSES:
        if isinstance(exc, exc_type):
            status_code, error_message = code, title
            break

    log = logger.error if status_code >= 500 else logger.warning
    log(
        f"Exception: {error_message}",
        extra={"path": request.url.path, "exception": str(exc)},
        exc_info=status_code >= 500,
    )

    return JSONResponse(
        status_code=status_code,
        content={
            "error": error_message,
            "detail": str(exc),
            "request_id": get_request_id(),
        },
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(f"Unexpected exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal server error",
            "detail": "An unexpected error occurred",
            "request_id": get_request_id(),
        },
    )


# Add middleware (order matters!)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLoggingMiddleware)
setup_cors(app)

app.include_router(health.router)
app.include_router(state.router)
app.include_router(recipes.router)
app.include_router(cooking.router)
app.include_router(shopping.router)
app.include_router(chat.router)


@app.on_event("startup")
async def startup_event():
    """Create the chat session; a failure leaves the chat inert but the app usable."""
    logger.info("FridgeChef starting up...")
    logger.info(f"Log level: {settings.log_level}")
    await get_controller().start()


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("FridgeChef shutting down...")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "FridgeChef",
        "version": "1.0.0",
        "docs": "/docs",
    }


def run() -> None:
    """Serve the app on the local interface."""
    import uvicorn

    uvicorn.run("fridgechef.main:app", host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
