"""Unit tests for prompts_loader (YAML-loaded instruction templates)."""

from unittest.mock import mock_open, patch

import pytest

from tryon.core.prompts_loader import (
    _load_prompts,
    get_concise_template,
    get_default_background,
    get_detailed_background_texts,
    get_detailed_template,
    get_prompt,
)
from tryon.utils.exceptions import ConfigurationError


def _patched_yaml(text: str):
    mock_files = patch("importlib.resources.files")
    files = mock_files.start()
    files.return_value.joinpath.return_value.open.return_value = mock_open(read_data=text)()
    return mock_files


@pytest.mark.unit
class TestPromptsLoader:
    def test_detailed_template_has_slot(self):
        template = get_detailed_template()
        assert "{background_instruction}" in template
        assert "first uploaded image" in template

    def test_detailed_background_texts_have_slot(self):
        preference, default = get_detailed_background_texts()
        assert "{background}" in preference
        assert "{background}" in default

    def test_concise_template_has_slot(self):
        assert "{background}" in get_concise_template()

    def test_default_background(self):
        assert get_default_background() == "neutral, professional studio setting"

    def test_get_prompt_unknown_key_returns_none(self):
        assert get_prompt("nonexistent_key") is None
        assert get_prompt("tryon", "nonexistent_subkey") is None
        assert get_prompt("tryon", "default_background", "deeper") is None


@pytest.mark.unit
class TestYAMLValidation:
    """Test YAML validation with the Pydantic schema."""

    def test_bundled_yaml_loads(self):
        data = _load_prompts()
        assert set(data["tryon"]) >= {"default_background", "detailed", "concise"}

    def test_malformed_yaml_raises_configuration_error(self):
        patcher = _patched_yaml("tryon: [unclosed")
        try:
            with pytest.raises(ConfigurationError) as exc_info:
                _load_prompts()
        finally:
            patcher.stop()
        assert "Failed to parse prompts.yaml" in str(exc_info.value)

    def test_empty_yaml_raises_configuration_error(self):
        patcher = _patched_yaml("")
        try:
            with pytest.raises(ConfigurationError) as exc_info:
                _load_prompts()
        finally:
            patcher.stop()
        assert "empty" in str(exc_info.value)

    def test_missing_concise_section_raises_configuration_error(self):
        text = (
            "tryon:\n"
            "  default_background: studio\n"
            "  detailed:\n"
            "    template: 'x {background_instruction}'\n"
            "    background_preference: 'p {background}'\n"
            "    background_default: 'd {background}'\n"
        )
        patcher = _patched_yaml(text)
        try:
            with pytest.raises(ConfigurationError) as exc_info:
                _load_prompts()
        finally:
            patcher.stop()
        assert "tryon.concise" in str(exc_info.value)

    def test_template_without_placeholder_raises_configuration_error(self):
        text = (
            "tryon:\n"
            "  default_background: studio\n"
            "  detailed:\n"
            "    template: 'no slot here'\n"
            "    background_preference: 'p {background}'\n"
            "    background_default: 'd {background}'\n"
            "  concise:\n"
            "    template: 'c {background}'\n"
        )
        patcher = _patched_yaml(text)
        try:
            with pytest.raises(ConfigurationError) as exc_info:
                get_detailed_template()
        finally:
            patcher.stop()
        assert "{background_instruction}" in str(exc_info.value)

    def test_missing_file_raises_configuration_error(self):
        with patch("importlib.resources.files") as mock_files:
            mock_files.return_value.joinpath.return_value.open.side_effect = FileNotFoundError
            with pytest.raises(ConfigurationError) as exc_info:
                _load_prompts()
        assert "not found" in str(exc_info.value)
