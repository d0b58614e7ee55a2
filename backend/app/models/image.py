"""Image studio data models."""
import base64
import binascii
import mimetypes
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_MIME_TYPE = "image/png"


class CreationMode(str, Enum):
    """Prompt templates available for text-to-image generation."""

    free = "free"
    sticker = "sticker"
    text = "text"
    comic = "comic"


class EditMode(str, Enum):
    """Instruction templates available for image edits."""

    style = "style"
    compose = "compose"
    add_remove = "add-remove"


class EncodedImage(BaseModel):
    """Base64 image payload tagged with its media type.

    The payload is checked to be valid base64 on construction; it is only
    decoded by ``to_bytes``.
    """

    model_config = ConfigDict(frozen=True)

    data: str = Field(..., min_length=1)
    mime_type: str = DEFAULT_MIME_TYPE

    @field_validator("data")
    @classmethod
    def check_base64(cls, value: str) -> str:
        try:
            base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("Image data is not valid base64") from exc
        return value

    @classmethod
    def from_bytes(cls, raw: bytes, mime_type: str = DEFAULT_MIME_TYPE) -> "EncodedImage":
        return cls(data=base64.b64encode(raw).decode("ascii"), mime_type=mime_type)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "EncodedImage":
        """Read an image file, guessing the media type from its name."""
        path = Path(path)
        mime_type, _ = mimetypes.guess_type(path.name)
        return cls.from_bytes(path.read_bytes(), mime_type or DEFAULT_MIME_TYPE)

    @classmethod
    def from_data_uri(cls, uri: str) -> "EncodedImage":
        """Parse ``data:<mime>;base64,<data>``.

        Raises:
            ValueError: When ``uri`` is not a base64 data URI.
        """
        header, sep, data = uri.partition(",")
        if not sep or not header.startswith("data:") or not header.endswith(";base64"):
            raise ValueError("Not a base64 data URI")
        mime_type = header[len("data:"):-len(";base64")] or DEFAULT_MIME_TYPE
        return cls(data=data, mime_type=mime_type)

    def to_data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"

    def to_bytes(self) -> bytes:
        return base64.b64decode(self.data, validate=True)


class TargetDimensions(BaseModel):
    """Pixel size the edited image must keep."""

    model_config = ConfigDict(frozen=True)

    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)


class GenerateImageRequest(BaseModel):
    """Request body for POST /api/images/generate.

    ``mode`` is a plain string so that unknown tags reach the composer, which
    treats them as ``free``.
    """

    prompt: str = Field(..., min_length=1, max_length=4000)
    mode: str = CreationMode.free.value
    aspect_ratio: str = "1:1"
    negative_prompt: str = ""
    style_modifier: str = "default"
    camera_angle: str = "default"
    lighting_style: str = "default"


class EditImageRequest(BaseModel):
    """Request body for POST /api/images/edit."""

    prompt: str = Field(default="", max_length=4000)
    main_image: EncodedImage
    reference_images: list[EncodedImage] = Field(default_factory=list)
    mask: Optional[EncodedImage] = None
    edit_mode: str = EditMode.add_remove.value
    target_dimensions: Optional[TargetDimensions] = None
    style_intensity: Optional[int] = Field(default=None, ge=1, le=5)


class ImageResponse(BaseModel):
    """Response body carrying the generated image as a data URI."""

    image: str
