"""Image studio service: text-to-image generation and image edits via Gemini."""
import logging
from typing import Any, Optional, Sequence, Union

from google import genai  # type: ignore[import-untyped]
from google.genai import types  # type: ignore[import-untyped]

from app.core.errors import ConfigurationError, EditFailedError, GenerationFailedError
from app.models.image import CreationMode, EditMode, EncodedImage, TargetDimensions
from app.services.prompts import (
    NEUTRAL_MODIFIER,
    RequestPart,
    assemble_parts,
    build_edit_instruction,
    build_generation_prompt,
)

logger = logging.getLogger(__name__)

GENERATION_MIME_TYPE = "image/png"
DEFAULT_GENERATION_MODEL = "imagen-4.0-generate-001"
DEFAULT_EDIT_MODEL = "gemini-2.5-flash-image-preview"


def create_genai_client(api_key: Optional[str]) -> genai.Client:
    """Create the Gemini API client.

    Raises:
        ConfigurationError: When no API key is configured.
    """
    if not api_key:
        raise ConfigurationError()
    return genai.Client(api_key=api_key)


class ImageStudioService:
    """Composes prompts and issues one Gemini call per request.

    The client is injected so that tests can pass a mock. The service holds
    no per-request state and never retries.
    """

    def __init__(
        self,
        client: Any,
        generation_model: str = DEFAULT_GENERATION_MODEL,
        edit_model: str = DEFAULT_EDIT_MODEL,
    ) -> None:
        self.client = client
        self.generation_model = generation_model
        self.edit_model = edit_model

    def generate_image(
        self,
        prompt: str,
        mode: Union[CreationMode, str],
        aspect_ratio: str,
        negative_prompt: str = "",
        style_modifier: str = NEUTRAL_MODIFIER,
        camera_angle: str = NEUTRAL_MODIFIER,
        lighting_style: str = NEUTRAL_MODIFIER,
    ) -> str:
        """Generate one image from text.

        Args:
            prompt: The user's idea.
            mode: Creation mode tag; unknown tags behave like ``free``.
            aspect_ratio: Passed to the API unchanged, e.g. ``"16:9"``.

        Returns:
            ``data:image/png;base64,...`` URI of the first generated image.

        Raises:
            GenerationFailedError: When the call fails or yields no image.
        """
        final_prompt = build_generation_prompt(
            prompt,
            mode,
            negative_prompt=negative_prompt,
            style_modifier=style_modifier,
            camera_angle=camera_angle,
            lighting_style=lighting_style,
        )
        try:
            image_bytes = self._call_generate_images(final_prompt, aspect_ratio)
        except Exception as exc:
            logger.error(
                "Image generation request failed: %s: %s",
                type(exc).__name__,
                exc,
                extra={
                    "operation": "generate_image",
                    "model": self.generation_model,
                    "error_type": type(exc).__name__,
                },
            )
            raise GenerationFailedError() from exc

        if image_bytes is None:
            logger.error(
                "Image generation returned no images",
                extra={"operation": "generate_image", "model": self.generation_model},
            )
            raise GenerationFailedError()

        return EncodedImage.from_bytes(image_bytes, GENERATION_MIME_TYPE).to_data_uri()

    def process_images_with_prompt(
        self,
        prompt: str,
        main_image: EncodedImage,
        reference_images: Sequence[EncodedImage],
        mask: Optional[EncodedImage],
        edit_mode: Union[EditMode, str],
        target_dimensions: Optional[TargetDimensions] = None,
        style_intensity: Optional[int] = None,
    ) -> str:
        """Edit ``main_image`` according to ``prompt`` and the edit mode.

        Inputs are validated before any remote call. Errors raised by the
        Gemini client propagate unchanged.

        Returns:
            Data URI of the first image part in the response.

        Raises:
            MissingReferenceImageError: style/compose without reference images.
            InvalidStyleIntensityError: style with an intensity outside 1..5.
            EmptyPromptError: add-remove without a prompt.
            EditFailedError: The response contains no image part.
        """
        instruction = build_edit_instruction(
            prompt,
            reference_images,
            mask,
            edit_mode,
            target_dimensions=target_dimensions,
            style_intensity=style_intensity,
        )
        parts = assemble_parts(main_image, reference_images, mask, instruction)

        image = self._call_generate_content(parts)
        if image is None:
            logger.error(
                "Image edit returned no image part",
                extra={"operation": "process_images_with_prompt", "model": self.edit_model},
            )
            raise EditFailedError()
        return image.to_data_uri()

    def _call_generate_images(self, prompt: str, aspect_ratio: str) -> Optional[bytes]:
        """Call the Imagen text-to-image API.

        Returns:
            Raw bytes of the first generated image, or None when the response
            holds no images.
        """
        logger.info(
            "Requesting text-to-image generation",
            extra={"operation": "generate_image", "model": self.generation_model},
        )
        response = self.client.models.generate_images(
            model=self.generation_model,
            prompt=prompt,
            config=types.GenerateImagesConfig(
                number_of_images=1,
                output_mime_type=GENERATION_MIME_TYPE,
                aspect_ratio=aspect_ratio,
            ),
        )
        generated = response.generated_images
        if not generated or generated[0].image is None:
            return None
        return generated[0].image.image_bytes

    def _call_generate_content(self, parts: list[RequestPart]) -> Optional[EncodedImage]:
        """Call the multimodal Gemini API with ordered image and text parts.

        Returns:
            The first inline image of the first candidate, or None.
        """
        contents = [_to_genai_part(part) for part in parts]
        logger.info(
            "Requesting image edit",
            extra={
                "operation": "process_images_with_prompt",
                "model": self.edit_model,
                "part_count": len(contents),
            },
        )
        response = self.client.models.generate_content(
            model=self.edit_model,
            contents=contents,
            config=types.GenerateContentConfig(
                response_modalities=["IMAGE", "TEXT"],
            ),
        )

        candidates = response.candidates
        if not candidates or candidates[0].content is None:
            return None

        for part in candidates[0].content.parts or []:
            if getattr(part, "inline_data", None) is not None and part.inline_data.data:
                return _blob_to_image(part.inline_data)
        return None


def _to_genai_part(part: RequestPart) -> types.Part:
    if isinstance(part, EncodedImage):
        return types.Part(
            inline_data=types.Blob(data=part.to_bytes(), mime_type=part.mime_type)
        )
    return types.Part(text=part)


def _blob_to_image(blob: Any) -> EncodedImage:
    mime_type = blob.mime_type or GENERATION_MIME_TYPE
    return EncodedImage.from_bytes(bytes(blob.data), mime_type)
