"""Command-line front end for the image studio.

Reads local image files, calls ImageStudioService and writes the result to disk.
The API key is read from the environment (API_KEY or GEMINI_API_KEY) or .env.

Usage:
    python scripts/studio.py generate "a red fox in the snow" --mode sticker --out fox.png
    python scripts/studio.py edit "add a hat" --image photo.jpg --mask mask.png --out edited.png
    python scripts/studio.py edit "" --image photo.jpg --reference starry.jpg \\
        --edit-mode style --intensity 5
"""

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

# Allow running from the repository root without installing the package
_BACKEND_PATH = Path(__file__).parent.parent / "backend"
if str(_BACKEND_PATH) not in sys.path:
    sys.path.insert(0, str(_BACKEND_PATH))

from app.core.config import get_settings
from app.core.errors import ImageStudioError
from app.core.logging import setup_logging
from app.models.image import CreationMode, EditMode, EncodedImage, TargetDimensions
from app.services.image import ImageStudioService, create_genai_client

logger = setup_logging("studio-cli")


def build_service() -> ImageStudioService:
    """Create an ImageStudioService from application settings."""
    settings = get_settings()
    return ImageStudioService(
        client=create_genai_client(settings.api_key),
        generation_model=settings.generation_model,
        edit_model=settings.edit_model,
    )


def save_data_uri(uri: str, out: Path) -> Path:
    """Decode a data URI and write the image bytes to ``out``."""
    image = EncodedImage.from_data_uri(uri)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(image.to_bytes())
    return out


def run_generate(service: ImageStudioService, args: argparse.Namespace) -> str:
    return service.generate_image(
        args.prompt,
        args.mode,
        args.aspect_ratio,
        negative_prompt=args.negative_prompt,
    )


def run_edit(service: ImageStudioService, args: argparse.Namespace) -> str:
    dimensions: Optional[TargetDimensions] = None
    if args.width is not None and args.height is not None:
        dimensions = TargetDimensions(width=args.width, height=args.height)
    return service.process_images_with_prompt(
        args.prompt,
        EncodedImage.from_path(args.image),
        [EncodedImage.from_path(path) for path in args.reference],
        EncodedImage.from_path(args.mask) if args.mask else None,
        args.edit_mode,
        target_dimensions=dimensions,
        style_intensity=args.intensity,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate and edit images with Gemini.")
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Create an image from a text prompt.")
    gen.add_argument("prompt")
    gen.add_argument("--mode", default=CreationMode.free.value, help="free, sticker, text or comic.")
    gen.add_argument("--aspect-ratio", default="1:1")
    gen.add_argument("--negative-prompt", default="")
    gen.add_argument("--out", type=Path, default=Path("generated.png"))

    edit = sub.add_parser("edit", help="Edit an existing image.")
    edit.add_argument("prompt")
    edit.add_argument("--image", type=Path, required=True)
    edit.add_argument("--reference", type=Path, action="append", default=[])
    edit.add_argument("--mask", type=Path)
    edit.add_argument(
        "--edit-mode",
        default=EditMode.add_remove.value,
        choices=[m.value for m in EditMode],
    )
    edit.add_argument("--width", type=int)
    edit.add_argument("--height", type=int)
    edit.add_argument("--intensity", type=int, choices=range(1, 6))
    edit.add_argument("--out", type=Path, default=Path("edited.png"))
    return parser


def main(argv: Optional[Sequence[str]] = None, service: Optional[ImageStudioService] = None) -> int:
    args = build_parser().parse_args(argv)
    if service is None:
        service = build_service()

    try:
        if args.command == "generate":
            uri = run_generate(service, args)
        else:
            uri = run_edit(service, args)
    except ImageStudioError as exc:
        logger.error(
            "Studio request failed",
            extra={"operation": args.command, "error_type": type(exc).__name__},
        )
        print(exc.localized(get_settings().locale), file=sys.stderr)
        return 1

    out = save_data_uri(uri, args.out)
    print(f"Saved image to {out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
