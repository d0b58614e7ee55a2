"""FastAPI application entry point."""
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import get_settings
from app.core.logging import setup_logging

# Setup logging
logger = setup_logging("main")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Create the Gemini client and image service at startup.

    A missing credential aborts startup; the app never runs without a client.
    """
    from app.services.image import ImageStudioService, create_genai_client

    settings = get_settings()
    client = create_genai_client(settings.api_key)
    app.state.image_service = ImageStudioService(
        client=client,
        generation_model=settings.generation_model,
        edit_model=settings.edit_model,
    )
    logger.info("Services initialized successfully")

    yield
    app.state.image_service = None


settings = get_settings()

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Generate and edit images with Gemini from natural-language prompts",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=[f"http://localhost:{settings.frontend_port}"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
from app.api.images import router as images_router  # noqa: E402

app.include_router(images_router)


@app.get("/health")
async def health_check(request: Request) -> dict:
    """Health check endpoint.

    Always returns HTTP 200; check `services.image_studio` for actual status.
    """
    svc = getattr(request.app.state, "image_service", None)

    logger.info("Health check requested")
    return {
        "status": "ok",
        "version": app.version,
        "services": {
            "image_studio": "ok" if svc is not None else "unavailable",
        },
    }
