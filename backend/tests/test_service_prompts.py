"""Tests for prompt and request-part composition."""
import pytest

from app.core.errors import (
    EmptyPromptError,
    ErrorKind,
    InvalidStyleIntensityError,
    MissingReferenceImageError,
)
from app.models.image import CreationMode, EditMode, EncodedImage, TargetDimensions
from app.services.prompts import (
    COMPOSE_FALLBACK_REQUEST,
    STRONG_STYLE_CONSTRAINT,
    STYLE_FALLBACK_REQUEST,
    STYLE_INTENSITY_DESCRIPTIONS,
    assemble_parts,
    build_edit_instruction,
    build_generation_prompt,
    resolve_creation_mode,
    resolve_edit_mode,
)

MAIN = EncodedImage(data="bWFpbg==", mime_type="image/png")
MASK = EncodedImage(data="bWFzaw==", mime_type="image/png")
REF1 = EncodedImage(data="cmVmMQ==", mime_type="image/jpeg")
REF2 = EncodedImage(data="cmVmMg==", mime_type="image/webp")


class TestBuildGenerationPrompt:
    """Tests for build_generation_prompt()."""

    @pytest.mark.parametrize(
        "mode,phrase",
        [
            (CreationMode.sticker, "die-cut sticker"),
            (CreationMode.text, "vector-style logo"),
            (CreationMode.comic, "comic book panel"),
            (CreationMode.free, "cinematic, photorealistic"),
        ],
    )
    def test_mode_phrase_and_literal_prompt(self, mode: CreationMode, phrase: str) -> None:
        prompt = build_generation_prompt("a Red Fox & friends!", mode)
        assert phrase in prompt
        assert "a Red Fox & friends!" in prompt

    def test_sticker_has_white_border_and_background(self) -> None:
        prompt = build_generation_prompt("a cat", CreationMode.sticker)
        assert "white border" in prompt
        assert "white background" in prompt

    def test_text_embeds_prompt_as_logo_text(self) -> None:
        prompt = build_generation_prompt("ACME", CreationMode.text)
        assert 'featuring the text "ACME"' in prompt

    def test_free_exact_template(self) -> None:
        assert build_generation_prompt("a lake", "free") == (
            "A cinematic, photorealistic image of a lake, hyper-detailed, 8K resolution"
        )

    @pytest.mark.parametrize("tag", ["poster", "", "STICKER", None])
    def test_unknown_mode_equals_free(self, tag: object) -> None:
        assert build_generation_prompt("a lake", tag) == build_generation_prompt("a lake", "free")  # type: ignore[arg-type]

    def test_string_tags_match_enum(self) -> None:
        assert build_generation_prompt("a cat", "comic") == build_generation_prompt(
            "a cat", CreationMode.comic
        )

    def test_default_modifiers_add_nothing(self) -> None:
        prompt = build_generation_prompt("a cat", CreationMode.sticker)
        assert "style," not in prompt
        assert "shot" not in prompt
        assert "lighting" not in prompt
        assert "Avoid" not in prompt

    def test_style_modifier_for_sticker(self) -> None:
        prompt = build_generation_prompt("a cat", CreationMode.sticker, style_modifier="kawaii")
        assert "kawaii style" in prompt

    def test_noir_comic_replaces_colour_clause(self) -> None:
        prompt = build_generation_prompt("a detective", CreationMode.comic, style_modifier="noir comic")
        assert "black and white" in prompt
        assert "vibrant colors" not in prompt

    def test_free_ignores_style_modifier(self) -> None:
        prompt = build_generation_prompt("a lake", CreationMode.free, style_modifier="pixel art")
        assert "pixel art" not in prompt

    def test_camera_lighting_and_negative_prompt(self) -> None:
        prompt = build_generation_prompt(
            "a lake",
            CreationMode.free,
            negative_prompt="people, boats",
            camera_angle="aerial",
            lighting_style="golden hour",
        )
        assert "aerial shot" in prompt
        assert "golden hour lighting" in prompt
        assert prompt.endswith(". Avoid the following: people, boats")


class TestResolveModes:
    def test_resolve_creation_mode_known(self) -> None:
        assert resolve_creation_mode("text") is CreationMode.text

    def test_resolve_edit_mode_default(self) -> None:
        assert resolve_edit_mode("unknown") is EditMode.add_remove
        assert resolve_edit_mode("add-remove") is EditMode.add_remove


class TestStyleInstruction:
    """Tests for the style edit branch."""

    def test_requires_reference_image(self) -> None:
        with pytest.raises(MissingReferenceImageError) as excinfo:
            build_edit_instruction("", [], None, EditMode.style)
        assert excinfo.value.kind is ErrorKind.missing_reference_image

    @pytest.mark.parametrize("level", [1, 2, 3, 4, 5])
    def test_intensity_description(self, level: int) -> None:
        text = build_edit_instruction("", [REF1], None, "style", style_intensity=level)
        assert STYLE_INTENSITY_DESCRIPTIONS[level] in text
        others = [d for lvl, d in STYLE_INTENSITY_DESCRIPTIONS.items() if lvl != level]
        assert not any(d in text for d in others)

    @pytest.mark.parametrize("level,expected", [(1, False), (3, False), (4, True), (5, True)])
    def test_hard_constraint_for_strong_intensity(self, level: int, expected: bool) -> None:
        text = build_edit_instruction("", [REF1], None, "style", style_intensity=level)
        assert (STRONG_STYLE_CONSTRAINT in text) is expected
        assert ("Van Gogh" in text) is expected

    @pytest.mark.parametrize("level", [0, 6, -1])
    def test_out_of_range_intensity_rejected(self, level: int) -> None:
        with pytest.raises(InvalidStyleIntensityError) as excinfo:
            build_edit_instruction("", [REF1], None, "style", style_intensity=level)
        assert excinfo.value.kind is ErrorKind.invalid_style_intensity

    def test_absent_intensity_defaults_to_level_3(self) -> None:
        text = build_edit_instruction("", [REF1], None, "style")
        assert STYLE_INTENSITY_DESCRIPTIONS[3] in text
        assert STRONG_STYLE_CONSTRAINT not in text

    def test_four_points_and_roles(self) -> None:
        text = build_edit_instruction("", [REF1, REF2], None, "style")
        for marker in ("1. ", "2. ", "3. ", "4. "):
            assert marker in text
        assert "Image 1 is the CONTENT image" in text

    def test_empty_prompt_uses_fallback(self) -> None:
        text = build_edit_instruction("", [REF1], None, "style")
        assert f'User request: "{STYLE_FALLBACK_REQUEST}"' in text

    def test_whitespace_prompt_uses_fallback(self) -> None:
        text = build_edit_instruction("   ", [REF1], None, "style")
        assert f'User request: "{STYLE_FALLBACK_REQUEST}"' in text

    def test_prompt_used_when_given(self) -> None:
        text = build_edit_instruction("make it moody", [REF1], None, "style")
        assert 'User request: "make it moody"' in text


class TestComposeInstruction:
    def test_requires_reference_image(self) -> None:
        with pytest.raises(MissingReferenceImageError):
            build_edit_instruction("put the dog in", [], None, EditMode.compose)

    def test_canvas_instruction(self) -> None:
        text = build_edit_instruction("put the dog in", [REF1], None, "compose")
        assert "Image 1 is the target canvas." in text
        assert 'User request: "put the dog in"' in text

    def test_empty_prompt_uses_fallback(self) -> None:
        text = build_edit_instruction("", [REF1], None, "compose")
        assert f'User request: "{COMPOSE_FALLBACK_REQUEST}"' in text

    def test_whitespace_prompt_uses_fallback(self) -> None:
        text = build_edit_instruction(" \n ", [REF1], None, "compose")
        assert f'User request: "{COMPOSE_FALLBACK_REQUEST}"' in text


class TestAddRemoveInstruction:
    @pytest.mark.parametrize("prompt", ["", "   "])
    def test_requires_prompt(self, prompt: str) -> None:
        with pytest.raises(EmptyPromptError) as excinfo:
            build_edit_instruction(prompt, [REF1], MASK, EditMode.add_remove)
        assert excinfo.value.kind is ErrorKind.empty_prompt

    def test_with_mask_restricts_to_white_region(self) -> None:
        text = build_edit_instruction("remove the car", [], MASK, "add-remove")
        assert "WHITE region" in text
        assert "BLACK region must remain identical" in text
        assert "seamlessly" in text

    def test_without_mask_generic_instruction(self) -> None:
        text = build_edit_instruction("remove the car", [REF1], None, "add-remove")
        assert "WHITE region" not in text
        assert "Image 1 is the image to edit." in text
        assert "reference context" in text

    def test_unknown_mode_behaves_like_add_remove(self) -> None:
        assert build_edit_instruction("remove the car", [], None, "erase") == build_edit_instruction(
            "remove the car", [], None, EditMode.add_remove
        )


class TestDimensionClause:
    def test_clause_present_with_dimensions(self) -> None:
        text = build_edit_instruction(
            "remove the car", [], None, "add-remove", target_dimensions=TargetDimensions(width=800, height=600)
        )
        assert "800px wide by 600px high" in text
        assert "800x600" in text
        assert "Do NOT crop, resize" in text
        assert text.startswith("CRITICAL RULE")

    def test_no_clause_without_dimensions(self) -> None:
        text = build_edit_instruction("remove the car", [], None, "add-remove")
        assert "CRITICAL RULE" not in text
        assert "crop" not in text
        assert text.startswith('User request: "remove the car"')


class TestTextBlockFormatting:
    def test_no_blank_lines_and_trimmed(self) -> None:
        text = build_edit_instruction(
            "",
            [REF1],
            None,
            "style",
            target_dimensions=TargetDimensions(width=10, height=20),
            style_intensity=5,
        )
        assert "\n\n" not in text
        assert text == text.strip()


class TestAssembleParts:
    def test_order_main_mask_refs_text(self) -> None:
        parts = assemble_parts(MAIN, [REF1, REF2], MASK, "instruction")
        assert parts == [MAIN, MASK, REF1, REF2, "instruction"]

    def test_without_mask(self) -> None:
        parts = assemble_parts(MAIN, [REF1], None, "instruction")
        assert parts == [MAIN, REF1, "instruction"]

    def test_exactly_one_text_block_last(self) -> None:
        parts = assemble_parts(MAIN, [], None, "instruction")
        assert [p for p in parts if isinstance(p, str)] == ["instruction"]
        assert parts[-1] == "instruction"
