"""Prompt and request-part composition for generation and edits.

Everything here is pure string/list building; no remote calls are made.
"""
import logging
import re
from typing import Optional, Sequence, Union

from app.core.errors import (
    EmptyPromptError,
    InvalidStyleIntensityError,
    MissingReferenceImageError,
)
from app.models.image import CreationMode, EditMode, EncodedImage, TargetDimensions

logger = logging.getLogger(__name__)

# A request part is either an image payload or the single trailing text block.
RequestPart = Union[EncodedImage, str]

NEUTRAL_MODIFIER = "default"
NOIR_COMIC = "noir comic"

STYLE_INTENSITY_DESCRIPTIONS: dict[int, str] = {
    1: "Very subtle: apply only a light hint of the reference style, keeping the content image almost unchanged.",
    2: "Light: apply the reference style gently, letting the content image's original look remain clearly visible.",
    3: "Moderate: apply the reference style clearly while keeping a balanced amount of the content image's original character.",
    4: "Strong: apply the reference style prominently so it dominates the look of the content image.",
    5: "Maximum: fully transform the content image into the reference style, as if it had been created with that exact technique.",
}
DEFAULT_STYLE_INTENSITY = 3
STRONG_STYLE_THRESHOLD = 4

STRONG_STYLE_CONSTRAINT = (
    "HARD CONSTRAINT: Do NOT copy any recognizable objects, characters or shapes "
    "from the reference images into the result. Transfer only how things are "
    "painted, never what is painted. For example, if the content image shows a "
    "cat and the reference is Van Gogh's \"The Starry Night\", the result must be "
    "the same cat painted with Van Gogh's swirling brushwork and palette, not a "
    "cat placed inside a starry night sky. This is a style transform, not a "
    "content merge."
)

STYLE_FALLBACK_REQUEST = "Apply the style as instructed."
COMPOSE_FALLBACK_REQUEST = "Combine the elements of the images creatively."

_BLANK_LINES = re.compile(r"\n{2,}")


def resolve_creation_mode(mode: Union[CreationMode, str, None]) -> CreationMode:
    """Map a creation tag to a CreationMode; unknown tags become ``free``."""
    try:
        return CreationMode(mode)
    except ValueError:
        return CreationMode.free


def resolve_edit_mode(mode: Union[EditMode, str, None]) -> EditMode:
    """Map an edit tag to an EditMode; unknown tags become ``add-remove``."""
    try:
        return EditMode(mode)
    except ValueError:
        return EditMode.add_remove


def style_intensity_description(level: Optional[int]) -> str:
    """Return the fixed description for ``level``, defaulting to level 3.

    Raises:
        InvalidStyleIntensityError: ``level`` is outside 1..5.
    """
    if level is None:
        level = DEFAULT_STYLE_INTENSITY
    if level not in STYLE_INTENSITY_DESCRIPTIONS:
        raise InvalidStyleIntensityError()
    return STYLE_INTENSITY_DESCRIPTIONS[level]


def build_generation_prompt(
    prompt: str,
    mode: Union[CreationMode, str],
    negative_prompt: str = "",
    style_modifier: str = NEUTRAL_MODIFIER,
    camera_angle: str = NEUTRAL_MODIFIER,
    lighting_style: str = NEUTRAL_MODIFIER,
) -> str:
    """Expand a short user prompt into the full text-to-image prompt.

    The mode selects the template; camera angle, lighting and the negative
    prompt are appended only when they differ from their neutral values.

    Args:
        prompt: The user's idea, embedded verbatim.
        mode: Creation mode tag. Unknown tags use the ``free`` template.
        negative_prompt: Things the image should avoid.
        style_modifier: Extra style keyword for sticker/text/comic templates.
        camera_angle: Camera angle keyword.
        lighting_style: Lighting keyword.

    Returns:
        The final prompt string.
    """
    resolved = resolve_creation_mode(mode)
    fragments: list[str] = []

    if resolved is CreationMode.sticker:
        fragments.append(f"A die-cut sticker of {prompt}")
        if style_modifier != NEUTRAL_MODIFIER:
            fragments.append(f"{style_modifier} style")
        fragments.append("with a thick white border, on a plain white background")
    elif resolved is CreationMode.text:
        fragments.append(
            f'A clean, minimalist vector-style logo featuring the text "{prompt}"'
        )
        if style_modifier != NEUTRAL_MODIFIER:
            fragments.append(f"{style_modifier} design")
    elif resolved is CreationMode.comic:
        fragments.append(f"A single comic book panel of {prompt}")
        if style_modifier == NOIR_COMIC:
            fragments.append(
                "noir comic art style, black and white, high contrast, "
                "heavy shadows, halftone dot texture"
            )
        else:
            if style_modifier != NEUTRAL_MODIFIER:
                fragments.append(f"{style_modifier} art style")
            fragments.append("vibrant colors, bold lines, dynamic action")
    else:
        fragments.append(f"A cinematic, photorealistic image of {prompt}")
        fragments.append("hyper-detailed, 8K resolution")

    if camera_angle != NEUTRAL_MODIFIER:
        fragments.append(f"{camera_angle} shot")
    if lighting_style != NEUTRAL_MODIFIER:
        fragments.append(f"{lighting_style} lighting")

    final_prompt = ", ".join(fragments)
    if negative_prompt:
        final_prompt += f". Avoid the following: {negative_prompt}"

    logger.debug("Built generation prompt", extra={"mode": resolved.value})
    return final_prompt


def _dimension_clause(target_dimensions: Optional[TargetDimensions]) -> str:
    if target_dimensions is None:
        return ""
    width, height = target_dimensions.width, target_dimensions.height
    return (
        f"CRITICAL RULE: The output image MUST be exactly {width}px wide by "
        f"{height}px high ({width}x{height}). Do NOT crop, resize, or change the "
        "aspect ratio. The entire scene from the original image must be present "
        "in the final output, with the edits applied on top of it."
    )


def _style_instructions(style_intensity: Optional[int]) -> str:
    instructions = f"""
Instructions:
1. Image 1 is the CONTENT image. All following images are STYLE references.
2. Preserve the subject, composition and layout of the content image exactly.
3. From the style references, extract only stylistic qualities: medium, brushwork, texture, color palette and lighting. Ignore their subjects.
4. Style intensity: {style_intensity_description(style_intensity)}
"""
    if style_intensity is not None and style_intensity >= STRONG_STYLE_THRESHOLD:
        instructions += f"\n{STRONG_STYLE_CONSTRAINT}\n"
    return instructions


def _compose_instructions() -> str:
    return (
        "Image 1 is the target canvas. "
        "Take elements from the subsequent images and blend them naturally into it."
    )


def _add_remove_instructions(has_mask: bool) -> str:
    if has_mask:
        return """
Image 2 is a black and white mask for image 1.
Apply the requested edit ONLY inside the WHITE region of the mask.
Every pixel in the BLACK region must remain identical to image 1.
Blend the edited area seamlessly with its surroundings at the mask boundary.
"""
    return (
        "Image 1 is the image to edit. "
        "Any other images are reference context for the requested change."
    )


def build_edit_instruction(
    prompt: str,
    reference_images: Sequence[EncodedImage],
    mask: Optional[EncodedImage],
    edit_mode: Union[EditMode, str],
    target_dimensions: Optional[TargetDimensions] = None,
    style_intensity: Optional[int] = None,
) -> str:
    """Build the trailing text block of an edit request.

    Raises:
        MissingReferenceImageError: style/compose without reference images.
        InvalidStyleIntensityError: style with an intensity outside 1..5.
        EmptyPromptError: add-remove with an empty prompt.
    """
    resolved = resolve_edit_mode(edit_mode)

    if resolved is EditMode.style:
        if not reference_images:
            raise MissingReferenceImageError()
        user_request = prompt.strip() or STYLE_FALLBACK_REQUEST
        mode_instructions = _style_instructions(style_intensity)
    elif resolved is EditMode.compose:
        if not reference_images:
            raise MissingReferenceImageError()
        user_request = prompt.strip() or COMPOSE_FALLBACK_REQUEST
        mode_instructions = _compose_instructions()
    else:
        if not prompt.strip():
            raise EmptyPromptError()
        user_request = prompt
        mode_instructions = _add_remove_instructions(mask is not None)

    sections = [
        _dimension_clause(target_dimensions),
        f'User request: "{user_request}"',
        mode_instructions,
    ]
    text = "\n\n".join(section for section in sections if section)
    return _BLANK_LINES.sub("\n", text).strip()


def assemble_parts(
    main_image: EncodedImage,
    reference_images: Sequence[EncodedImage],
    mask: Optional[EncodedImage],
    instruction: str,
) -> list[RequestPart]:
    """Order the request parts: main, mask, references, then the text block."""
    parts: list[RequestPart] = [main_image]
    if mask is not None:
        parts.append(mask)
    parts.extend(reference_images)
    parts.append(instruction)
    return parts
