"""FastAPI application entry point."""

import uuid
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from mealcart import __version__
from mealcart.config import get_settings
from mealcart.logging_config import LoggingContext, configure_logging, get_logger
from mealcart.partners.instacart import close_partner_client
from mealcart.routers import grocery_lists_router

settings = get_settings()

# Configure logging on module load
configure_logging(settings.log_level)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup and shutdown events."""
    logger.info(f"Starting Mealcart API ({settings.environment})")
    if not settings.instacart_api_key:
        logger.warning("INSTACART_API_KEY is not set; Instacart exports will fail")

    yield

    logger.info("Shutting down Mealcart API")
    await close_partner_client()


app = FastAPI(
    title="Mealcart API",
    description="Grocery lists from meal plans, with Instacart checkout",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Tag every log line of a request with its request id."""
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    with LoggingContext(request_id=request_id):
        response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


app.include_router(grocery_lists_router)


@app.get("/health")
async def health_check() -> dict:
    """Basic health check endpoint."""
    return {"status": "ok", "service": "mealcart-api"}


@app.get("/")
async def root() -> dict:
    """Root endpoint with API information."""
    return {
        "name": "Mealcart API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
    }
