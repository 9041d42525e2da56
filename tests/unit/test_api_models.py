"""Unit tests for the API request models."""

import pytest
from pydantic import ValidationError

from artdirector.api.models import (
    AnalyzePageRequest,
    CSVGenerateRequest,
    CSVParseRequest,
    CSVTaskModel,
    GenerateImageRequest,
    LibrarySearchRequest,
    ModifyImageRequest,
    PromptRequest,
    SaveImageRequest,
)
from artdirector.core.csv_parser import CSVTask, TaskStatus


class TestGenerateImageRequest:
    """Tests for GenerateImageRequest validation."""

    def test_defaults(self):
        request = GenerateImageRequest(prompt="a fox")
        assert request.model is None
        assert request.size == "1024x1024"
        assert request.quality == "standard"

    def test_empty_prompt_rejected(self):
        with pytest.raises(ValidationError):
            GenerateImageRequest(prompt="")

    @pytest.mark.parametrize("size", ["large", "1024", "1024x"])
    def test_size_pattern(self, size):
        with pytest.raises(ValidationError):
            GenerateImageRequest(prompt="a fox", size=size)

    def test_quality_literal(self):
        with pytest.raises(ValidationError):
            GenerateImageRequest(prompt="a fox", quality="ultra")


class TestCamelCaseAliases:
    def test_save_image_request(self):
        request = SaveImageRequest.model_validate({"imageUrl": "https://img.test/a.png"})
        assert request.image_url == "https://img.test/a.png"
        assert request.metadata == {}

    def test_snake_case_also_accepted(self):
        assert SaveImageRequest(image_url="u").image_url == "u"

    def test_analyze_page_requires_sections(self):
        with pytest.raises(ValidationError):
            AnalyzePageRequest.model_validate({"sections": [], "styleVersion": "v1"})

    def test_modify_request_style_uses_palette_alias(self):
        request = ModifyImageRequest.model_validate(
            {
                "imageUrl": "u",
                "modificationPrompt": "make it blue",
                "style": {"aesthetic": "flat", "colorPalette": ["#000"]},
            }
        )
        assert request.style.color_palette == ["#000"]

    def test_prompt_request(self):
        request = PromptRequest.model_validate(
            {"styleId": "scanned-x", "subject": "s", "customStyle": {"mood": "calm"}}
        )
        assert request.custom_style.mood == "calm"
        assert request.enrich is False

    def test_library_defaults_to_unsplash(self):
        assert LibrarySearchRequest(query="lake").library == "unsplash"

    def test_csv_text_alias(self):
        assert CSVParseRequest.model_validate({"csv": "a,img\n1,"}).csv_text == "a,img\n1,"


class TestCSVTaskModel:
    def test_round_trip_with_core_task(self):
        task = CSVTask(row_index=2, row={"name": "A"}, image_column="img", context="name: A")
        task.mark_ready("A subject", "name: A")
        model = CSVTaskModel.model_validate(task.to_dict())
        assert model.status is TaskStatus.READY
        assert model.to_task() == task

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            CSVTaskModel.model_validate({"rowIndex": 0, "imageColumn": "img", "status": "done"})

    def test_negative_row_rejected(self):
        with pytest.raises(ValidationError):
            CSVTaskModel.model_validate({"rowIndex": -1, "imageColumn": "img"})


def test_csv_generate_request_defaults():
    request = CSVGenerateRequest.model_validate(
        {"tasks": [{"rowIndex": 0, "imageColumn": "img"}], "styleId": "v1"}
    )
    assert request.save is False
    assert request.template_id is None
    assert request.tasks[0].status is TaskStatus.PENDING
