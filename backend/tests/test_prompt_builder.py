"""
Prompt builder unit tests
"""
import pytest

from models.image_operation import OperationKind, MediaPart, TextPart
from services.prompt_builder import (
    build_prompt,
    build_suggestions_prompt,
    resolve_parameters,
    PROMPT_TEMPLATES,
    DEFAULT_ENHANCEMENT_STYLE,
    MissingParameterError,
)

FILTER_PARAMS = {"filterName": "Vintage Film"}


def params_for(kind):
    return FILTER_PARAMS if kind == OperationKind.APPLY_FILTER else {}


@pytest.mark.unit
class TestTemplateSelection:
    """Tests for per-operation template selection"""

    def test_every_operation_has_a_template(self):
        assert set(PROMPT_TEMPLATES) == set(OperationKind)

    def test_templates_are_distinct(self):
        assert len(set(PROMPT_TEMPLATES.values())) == len(PROMPT_TEMPLATES)

    @pytest.mark.parametrize("kind", list(OperationKind))
    def test_image_part_comes_first(self, kind, png_data_uri):
        prompt = build_prompt(kind, params_for(kind), png_data_uri)

        assert len(prompt.parts) == 2
        assert isinstance(prompt.parts[0], MediaPart)
        assert prompt.parts[0].data_uri == png_data_uri
        assert isinstance(prompt.parts[1], TextPart)

    @pytest.mark.parametrize("kind", list(OperationKind))
    def test_prompt_is_deterministic(self, kind, png_data_uri):
        first = build_prompt(kind, params_for(kind), png_data_uri)
        second = build_prompt(kind, params_for(kind), png_data_uri)

        assert first.text.encode("utf-8") == second.text.encode("utf-8")
        assert first == second

    def test_remove_background_mentions_transparency(self, png_data_uri):
        prompt = build_prompt(OperationKind.REMOVE_BACKGROUND, {}, png_data_uri)
        assert "transparent background" in prompt.text


@pytest.mark.unit
class TestApplyFilter:
    """Tests for the filter name parameter"""

    def test_filter_name_is_interpolated(self, png_data_uri):
        prompt = build_prompt(OperationKind.APPLY_FILTER, FILTER_PARAMS, png_data_uri)
        assert '"Vintage Film"' in prompt.text

    def test_filter_name_with_braces_is_literal(self, png_data_uri):
        prompt = build_prompt(OperationKind.APPLY_FILTER, {"filterName": "{Neon} Punk"}, png_data_uri)
        assert "{Neon} Punk" in prompt.text

    @pytest.mark.parametrize("params", [{}, {"filterName": ""}, {"filterName": "   "}, {"filterName": None}])
    def test_missing_filter_name_fails_fast(self, params, png_data_uri):
        with pytest.raises(MissingParameterError) as exc_info:
            build_prompt(OperationKind.APPLY_FILTER, params, png_data_uri)

        assert exc_info.value.parameter == "filterName"


@pytest.mark.unit
class TestFocusEnhanceFace:
    """Tests for the enhancement style default"""

    def test_style_defaults_to_natural_clarity(self):
        resolved = resolve_parameters(OperationKind.FOCUS_ENHANCE_FACE, {})
        assert resolved["enhancementStyle"] == DEFAULT_ENHANCEMENT_STYLE == "natural clarity"

    def test_default_style_reaches_prompt(self, png_data_uri):
        prompt = build_prompt(OperationKind.FOCUS_ENHANCE_FACE, {}, png_data_uri)
        assert "'natural clarity'" in prompt.text

    def test_custom_style_is_used(self, png_data_uri):
        prompt = build_prompt(OperationKind.FOCUS_ENHANCE_FACE, {"enhancementStyle": "soft glow"}, png_data_uri)

        assert "'soft glow'" in prompt.text
        assert "natural clarity" not in prompt.text

    def test_other_operations_get_no_default(self):
        assert resolve_parameters(OperationKind.SHARPEN, {}) == {}


@pytest.mark.unit
class TestPayload:
    """Tests for the provider payload shape"""

    def test_contents_shape(self, png_data_uri):
        prompt = build_prompt(OperationKind.SHARPEN, {}, png_data_uri)
        contents = prompt.to_contents()

        assert len(contents) == 1
        parts = contents[0]["parts"]
        assert parts[0]["inline_data"]["mime_type"] == "image/png"
        assert parts[0]["inline_data"]["data"] == png_data_uri.split(",", 1)[1]
        assert parts[1]["text"] == prompt.text

    def test_suggestions_prompt(self, png_data_uri):
        prompt = build_suggestions_prompt(png_data_uri)

        assert prompt.parts[0].data_uri == png_data_uri
        assert "JSON array" in prompt.text
