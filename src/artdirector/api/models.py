"""Pydantic request models for the Art Director API.

These models define the JSON schema for every API endpoint.  FastAPI uses
them for request validation and OpenAPI documentation; a validation failure
is answered with ``400 {"error": ...}``.

Request bodies use the camelCase keys the frontend sends (``imageUrl``,
``styleVersion``...).  Every model also accepts the snake_case field names.

Models
------
GenerateImageRequest
    ``POST /api/generate-image``
SaveImageRequest
    ``POST /api/save-image``
AnalyzePageRequest
    ``POST /api/analyze-page``
PageUrlRequest
    ``POST /api/analyze-website-style``, ``/api/scan-page-content`` and
    ``/api/extract-page-images``
LibrarySearchRequest / LibraryStyleRequest
    Stock photo search and style analysis
ModifyImageRequest
    ``POST /api/analyze-and-modify-image``
PromptRequest
    ``POST /api/prompt/generate``
CSVParseRequest / CSVAnalyzeRequest / CSVGenerateRequest / CSVExportRequest
    The CSV batch workflow
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from artdirector.core.csv_parser import CSVTask, TaskStatus
from artdirector.core.models import StyleDescriptor


class APIModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class GenerateImageRequest(APIModel):
    """Request body for ``POST /api/generate-image``.

    Attributes:
        prompt: Image prompt; truncated to 4000 characters upstream.
        model: Image model; the configured default when omitted.
        size: ``WIDTHxHEIGHT``.
        quality: ``standard`` or ``hd`` (``dall-e-3`` only).
        style: Style id recorded in the history entry.
        subject: Subject recorded in the history entry.
    """

    prompt: str = Field(..., min_length=1, description="Image prompt.")
    model: str | None = Field(default=None, description="Image model (default from config).")
    size: str = Field(default="1024x1024", pattern=r"^\d+x\d+$")
    quality: Literal["standard", "hd"] = "standard"
    style: str = ""
    subject: str = ""


class SaveImageRequest(APIModel):
    image_url: str = Field(..., alias="imageUrl", min_length=1)
    metadata: dict[str, Any] = Field(default_factory=dict)


class AnalyzePageRequest(APIModel):
    sections: list[dict[str, Any]] = Field(..., min_length=1)
    style_version: str = Field(..., alias="styleVersion", min_length=1)


class PageUrlRequest(APIModel):
    url: str = Field(..., min_length=1, description="Absolute http(s) URL of the page.")


class LibrarySearchRequest(APIModel):
    query: str = Field(..., min_length=1)
    library: str = Field(default="unsplash", description="'unsplash' or 'pexels'.")


class LibraryStyleRequest(APIModel):
    image_urls: list[str] = Field(..., alias="imageUrls", min_length=1)


class ModifyImageRequest(APIModel):
    """Request body for ``POST /api/analyze-and-modify-image``.

    The source image is described by the vision model, the description is
    merged with ``modificationPrompt`` and the optional style, and a new
    image is generated.
    """

    image_url: str = Field(..., alias="imageUrl", min_length=1)
    modification_prompt: str = Field(..., alias="modificationPrompt", min_length=1)
    style: StyleDescriptor | None = None
    model: str | None = None
    size: str = Field(default="1024x1024", pattern=r"^\d+x\d+$")
    quality: Literal["standard", "hd"] = "standard"


class PromptRequest(APIModel):
    """Request body for ``POST /api/prompt/generate``.

    Attributes:
        style_id: Preset id or custom id (``scanned-``, ``uploaded-``,
            ``library-`` prefix).
        subject: What the image should show.
        template_id: Optional preset template.
        custom_style: Required for custom ids.
        enrich: Ask a text model to elaborate the prompt.
    """

    style_id: str = Field(..., alias="styleId", min_length=1)
    subject: str = Field(..., min_length=1)
    template_id: str | None = Field(default=None, alias="templateId")
    custom_style: StyleDescriptor | None = Field(default=None, alias="customStyle")
    enrich: bool = False


class CSVTaskModel(APIModel):
    """Wire form of a :class:`~artdirector.core.csv_parser.CSVTask`."""

    row_index: int = Field(..., alias="rowIndex", ge=0)
    row: dict[str, str] = Field(default_factory=dict)
    image_column: str = Field(..., alias="imageColumn", min_length=1)
    subject: str = ""
    context: str = ""
    status: TaskStatus = TaskStatus.PENDING
    image_url: str = Field(default="", alias="imageUrl")
    prompt: str = ""
    error: str = ""

    def to_task(self) -> CSVTask:
        return CSVTask(
            row_index=self.row_index,
            row=dict(self.row),
            image_column=self.image_column,
            subject=self.subject,
            context=self.context,
            status=self.status,
            image_url=self.image_url,
            prompt=self.prompt,
            error=self.error,
        )


class CSVParseRequest(APIModel):
    csv_text: str = Field(..., alias="csv", min_length=1, description="Raw CSV content.")


class CSVAnalyzeRequest(APIModel):
    tasks: list[CSVTaskModel] = Field(..., min_length=1)


class CSVGenerateRequest(APIModel):
    tasks: list[CSVTaskModel] = Field(..., min_length=1)
    style_id: str = Field(..., alias="styleId", min_length=1)
    template_id: str | None = Field(default=None, alias="templateId")
    custom_style: StyleDescriptor | None = Field(default=None, alias="customStyle")
    model: str | None = None
    size: str = Field(default="1024x1024", pattern=r"^\d+x\d+$")
    quality: Literal["standard", "hd"] = "standard"
    save: bool = Field(default=False, description="Download and save each generated image.")


class CSVExportRequest(APIModel):
    csv_text: str = Field(..., alias="csv", min_length=1)
    tasks: list[CSVTaskModel] = Field(default_factory=list)
