"""Domain data models for Imaginarium.

Everything here is an immutable value.  Mutable state lives in the
components that own it (the drawing engine, the gallery store and the
workspace), which replace values rather than edit them in place.
"""

import time
import uuid
from dataclasses import dataclass, field
from enum import Enum


class AspectRatio(str, Enum):
    """Supported width:height tags, forwarded verbatim to the service."""

    SQUARE = "1:1"
    LANDSCAPE = "16:9"
    PORTRAIT = "9:16"
    WIDE = "4:3"
    TALL = "3:4"


class InputMode(str, Enum):
    """Where the reference image comes from."""

    UPLOAD = "upload"
    DRAW = "draw"


class Tool(str, Enum):
    """Drawing tools. Exactly one is active at a time."""

    DRAW = "draw"
    ERASE = "erase"
    MASK = "mask"

    @property
    def style(self) -> "ToolStyle":
        return TOOL_STYLES[self]


@dataclass(frozen=True)
class ToolStyle:
    """Fixed stroke styling for a tool.  Every tool paints over existing pixels.

    Attributes:
        color: RGB colour of the stroke
        width: Line width in raster pixels
        opacity: 0.0-1.0 alpha applied to the whole stroke
    """

    color: tuple[int, int, int]
    width: int
    opacity: float


TOOL_STYLES: dict[Tool, ToolStyle] = {
    Tool.DRAW: ToolStyle(color=(0x0F, 0x17, 0x2A), width=3, opacity=1.0),  # near-black
    Tool.MASK: ToolStyle(color=(0xEC, 0x48, 0x99), width=25, opacity=0.4),  # magenta highlight
    # Erasing paints background white over the existing pixels
    Tool.ERASE: ToolStyle(color=(0xFF, 0xFF, 0xFF), width=30, opacity=1.0),
}

MASK_HIGHLIGHT_COLOR_NAME = "magenta"


@dataclass(frozen=True)
class Stroke:
    """One pointer-down to pointer-up path in raster coordinates.

    The tool is fixed when the stroke begins; ``extend`` returns a new
    stroke with one more point and the same tool.
    """

    tool: Tool
    points: tuple[tuple[float, float], ...] = ()

    def extend(self, x: float, y: float) -> "Stroke":
        return Stroke(tool=self.tool, points=self.points + ((x, y),))

    @property
    def style(self) -> ToolStyle:
        return TOOL_STYLES[self.tool]


@dataclass(frozen=True)
class EncodedImage:
    """Portable, self-describing image value.

    ``display_uri`` is derived from ``mime_type`` and ``data`` so the two
    representations can never diverge.

    Attributes:
        mime_type: Media type, e.g. ``"image/png"``
        data: Base64 payload without any ``data:`` prefix
    """

    mime_type: str
    data: str

    @property
    def display_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


@dataclass(frozen=True)
class GenerationRequest:
    """A single outbound generation request.

    ``prompt_text`` is the final instruction (possibly mask-augmented).
    Callers must not submit blank prompts; the orchestrator rejects them
    with ``EmptyPrompt``.
    """

    prompt_text: str
    aspect_ratio: AspectRatio
    reference_image: EncodedImage | None = None


@dataclass(frozen=True)
class GeneratedEntry:
    """A gallery item.

    ``original_prompt_text`` always holds what the user typed, never the
    instruction that was sent to the service.
    """

    image: EncodedImage
    original_prompt_text: str
    aspect_ratio: AspectRatio
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: float = field(default_factory=time.time)


# Prompt recorded for sketches saved without any prompt text
DEFAULT_SKETCH_PROMPT = "Hand-drawn Sketch"
