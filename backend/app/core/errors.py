"""Error kinds raised by the image studio and their user-facing messages."""
from enum import Enum


class ErrorKind(str, Enum):
    """Stable identifiers for every failure the studio reports."""

    missing_credential = "missing_credential"
    missing_reference_image = "missing_reference_image"
    invalid_style_intensity = "invalid_style_intensity"
    empty_prompt = "empty_prompt"
    generation_failed = "generation_failed"
    edit_returned_text = "edit_returned_text"


DEFAULT_LOCALE = "en"

MESSAGES: dict[str, dict[ErrorKind, str]] = {
    "en": {
        ErrorKind.missing_credential: "API_KEY environment variable is not set.",
        ErrorKind.missing_reference_image: "Please add a style reference image.",
        ErrorKind.invalid_style_intensity: "Style intensity must be between 1 and 5.",
        ErrorKind.empty_prompt: "Please describe the edit you want to make.",
        ErrorKind.generation_failed: (
            "Image generation failed. This may be due to a safety restriction "
            "on your prompt. Try rephrasing your request."
        ),
        ErrorKind.edit_returned_text: (
            "Image edit failed. The model may have returned text instead of an "
            "image, which can happen with complex instructions. Try simplifying "
            "your request."
        ),
    },
    "pt-BR": {
        ErrorKind.missing_credential: "A variável de ambiente API_KEY não está definida.",
        ErrorKind.missing_reference_image: "Por favor, adicione uma imagem de referência de estilo.",
        ErrorKind.invalid_style_intensity: "A intensidade do estilo deve estar entre 1 e 5.",
        ErrorKind.empty_prompt: "Por favor, descreva a edição que deseja fazer.",
        ErrorKind.generation_failed: (
            "A geração da imagem falhou. Isso pode ser devido a uma restrição de "
            "segurança no seu prompt. Tente reformular sua solicitação."
        ),
        ErrorKind.edit_returned_text: (
            "A edição da imagem falhou. O modelo pode ter retornado texto em vez "
            "de uma imagem, o que pode ocorrer com instruções complexas. Tente "
            "simplificar seu pedido."
        ),
    },
}


def message_for(kind: ErrorKind, locale: str = DEFAULT_LOCALE) -> str:
    """Return the user-facing message for ``kind``.

    Unknown locales fall back to English.
    """
    catalogue = MESSAGES.get(locale, MESSAGES[DEFAULT_LOCALE])
    return catalogue[kind]


class ImageStudioError(Exception):
    """Base class for failures reported by the studio."""

    kind: ErrorKind

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or message_for(self.kind))

    def localized(self, locale: str) -> str:
        return message_for(self.kind, locale)


class ConfigurationError(ImageStudioError):
    """The remote client cannot be created (missing credential)."""

    kind = ErrorKind.missing_credential


class EditValidationError(ImageStudioError):
    """Edit inputs were rejected before any remote call."""


class MissingReferenceImageError(EditValidationError):
    kind = ErrorKind.missing_reference_image


class InvalidStyleIntensityError(EditValidationError):
    kind = ErrorKind.invalid_style_intensity


class EmptyPromptError(EditValidationError):
    kind = ErrorKind.empty_prompt


class GenerationFailedError(ImageStudioError):
    """Text-to-image call failed or returned no image."""

    kind = ErrorKind.generation_failed


class EditFailedError(ImageStudioError):
    """Edit call returned no inline image part."""

    kind = ErrorKind.edit_returned_text
