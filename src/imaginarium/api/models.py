"""Pydantic request and response models for the Imaginarium API.

These models define the JSON schema for every API endpoint.  FastAPI uses
them for automatic request validation, serialisation, and OpenAPI
documentation generation.

Models
------
WorkspaceUpdate
    Payload for ``PUT /api/workspace`` — prompt, aspect ratio, input mode.
ToolRequest
    Payload for ``POST /api/canvas/tool``.
PointerEvent
    Payload for ``POST /api/canvas/pointer`` — one pointer event in display
    coordinates.
ReferenceDataUri
    Payload for ``PUT /api/reference`` — a reference image as a data URI.
GenerateRequest
    Payload for ``POST /api/generate``.
EncodedImageResponse, EntryResponse, WorkspaceResponse
    Serialised views of domain values.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, model_validator

from imaginarium.core.models import AspectRatio, EncodedImage, GeneratedEntry, InputMode, Tool


class WorkspaceUpdate(BaseModel):
    """Request body for ``PUT /api/workspace``.

    Every field is optional; only supplied fields are applied.
    """

    prompt: str | None = Field(default=None, description="Prompt text as typed by the user.")
    aspect_ratio: AspectRatio | None = Field(
        default=None, description="Aspect ratio for the next generation."
    )
    input_mode: InputMode | None = Field(
        default=None, description="Reference source: 'upload' or 'draw'."
    )


class ToolRequest(BaseModel):
    """Request body for ``POST /api/canvas/tool``."""

    tool: Tool = Field(..., description="Tool to activate: 'draw', 'erase' or 'mask'.")


class PointerEvent(BaseModel):
    """Request body for ``POST /api/canvas/pointer``.

    Attributes:
        type: ``down``, ``move``, ``up`` or ``leave``.
        x: Horizontal position in display pixels.
        y: Vertical position in display pixels.
        display_width: Width the canvas is displayed at.  Required for
            ``down`` and ``move``.
        display_height: Height the canvas is displayed at.  Required for
            ``down`` and ``move``.
    """

    type: Literal["down", "move", "up", "leave"]
    x: float = 0.0
    y: float = 0.0
    display_width: float | None = Field(default=None, gt=0)
    display_height: float | None = Field(default=None, gt=0)

    @model_validator(mode="after")
    def _require_display_size(self) -> PointerEvent:
        if self.type in ("down", "move") and (
            self.display_width is None or self.display_height is None
        ):
            raise ValueError("display_width and display_height are required for down/move")
        return self


class ReferenceDataUri(BaseModel):
    """Request body for ``PUT /api/reference``."""

    data_uri: str = Field(..., description="Image as a data:<mime>;base64,<data> URI.")


class GenerateRequest(BaseModel):
    """Request body for ``POST /api/generate``.

    Supplied fields update the workspace before generating; omitted fields
    use the workspace's current values.
    """

    prompt: str | None = Field(default=None, description="Prompt text.")
    aspect_ratio: AspectRatio | None = Field(default=None, description="Aspect ratio.")


class EncodedImageResponse(BaseModel):
    mime_type: str
    data: str
    display_uri: str

    @classmethod
    def from_image(cls, image: EncodedImage) -> EncodedImageResponse:
        return cls(mime_type=image.mime_type, data=image.data, display_uri=image.display_uri)


class EntryResponse(BaseModel):
    """A gallery entry."""

    id: str
    image: EncodedImageResponse
    original_prompt_text: str
    aspect_ratio: AspectRatio
    created_at: float

    @classmethod
    def from_entry(cls, entry: GeneratedEntry) -> EntryResponse:
        return cls(
            id=entry.id,
            image=EncodedImageResponse.from_image(entry.image),
            original_prompt_text=entry.original_prompt_text,
            aspect_ratio=entry.aspect_ratio,
            created_at=entry.created_at,
        )


class WorkspaceResponse(BaseModel):
    """Snapshot of the editing session."""

    prompt: str
    aspect_ratio: AspectRatio
    input_mode: InputMode
    tool: Tool
    mask_used: bool
    is_generating: bool
    reference_image: EncodedImageResponse | None
    last_error: str | None
    canvas_width: int
    canvas_height: int
