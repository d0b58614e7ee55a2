"""Image studio API router."""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from app.core.config import Settings, get_settings
from app.core.errors import EditValidationError, ImageStudioError
from app.models.image import EditImageRequest, GenerateImageRequest, ImageResponse
from app.services.image import ImageStudioService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/images", tags=["images"])


def get_image_service(request: Request) -> ImageStudioService:
    """FastAPI dependency: retrieve ImageStudioService from app.state.

    Returns HTTP 503 if the service was not initialized at startup.
    """
    svc: ImageStudioService | None = getattr(request.app.state, "image_service", None)
    if svc is None:
        raise HTTPException(
            status_code=503,
            detail="Image service unavailable. Service not initialized.",
        )
    return svc


def _to_http_error(exc: ImageStudioError, locale: str) -> HTTPException:
    status_code = 422 if isinstance(exc, EditValidationError) else 502
    return HTTPException(status_code=status_code, detail=exc.localized(locale))


@router.post("/generate", response_model=ImageResponse)
def generate(
    body: GenerateImageRequest,
    service: ImageStudioService = Depends(get_image_service),
    settings: Settings = Depends(get_settings),
) -> ImageResponse:
    """Generate an image from a text prompt.

    Raises:
        HTTPException 502: The model returned no image or the call failed.
    """
    try:
        image = service.generate_image(
            body.prompt,
            body.mode,
            body.aspect_ratio,
            negative_prompt=body.negative_prompt,
            style_modifier=body.style_modifier,
            camera_angle=body.camera_angle,
            lighting_style=body.lighting_style,
        )
    except ImageStudioError as exc:
        raise _to_http_error(exc, settings.locale) from exc
    return ImageResponse(image=image)


@router.post("/edit", response_model=ImageResponse)
def edit(
    body: EditImageRequest,
    service: ImageStudioService = Depends(get_image_service),
    settings: Settings = Depends(get_settings),
) -> ImageResponse:
    """Edit the main image using the prompt, references and optional mask.

    Raises:
        HTTPException 422: Missing reference image or empty prompt.
        HTTPException 502: The model returned text instead of an image.
        HTTPException 503: The Gemini API call itself failed.
    """
    try:
        image = service.process_images_with_prompt(
            body.prompt,
            body.main_image,
            body.reference_images,
            body.mask,
            body.edit_mode,
            target_dimensions=body.target_dimensions,
            style_intensity=body.style_intensity,
        )
    except ImageStudioError as exc:
        raise _to_http_error(exc, settings.locale) from exc
    except Exception as exc:
        logger.error(
            "Image edit failed",
            exc_info=True,
            extra={"operation": "edit", "error_type": type(exc).__name__},
        )
        raise HTTPException(
            status_code=503,
            detail="Image service unavailable. Please try again later.",
        ) from exc
    return ImageResponse(image=image)
