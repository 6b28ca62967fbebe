"""Fixed-size raster buffer and stroke compositing.

The compositing itself is the pure function :func:`apply_stroke`, which takes
a buffer and returns a new one.  :class:`RasterSurface` owns the current
buffer and a cached PNG export, and is the only place the buffer changes.

Stroke Rendering
----------------
A stroke is rendered as a polyline with round joins and caps into an 8-bit
coverage mask.  The mask is scaled by the tool's opacity and used to blend
the tool colour over the buffer.  Because the whole path is rendered into a
single mask, overlapping segments of one semi-transparent stroke are blended
once, not repeatedly.

Continuous strokes are accumulated by re-applying the growing path over the
buffer as it was when the stroke began (see ``RasterSurface.apply_stroke``'s
``base`` argument).
"""

from __future__ import annotations

import logging

from PIL import Image, ImageDraw

from imaginarium.core.codec import from_raster
from imaginarium.core.models import EncodedImage, Stroke, ToolStyle

logger = logging.getLogger(__name__)

BACKGROUND_COLOR = (255, 255, 255)


def blank_buffer(width: int, height: int) -> Image.Image:
    """Return an opaque white RGB buffer."""
    return Image.new("RGB", (width, height), BACKGROUND_COLOR)


def apply_stroke(
    buffer: Image.Image, stroke: Stroke, style: ToolStyle | None = None
) -> Image.Image:
    """Composite a stroke onto a copy of ``buffer``.

    A stroke with fewer than two points paints nothing: pressing the
    pointer without moving it leaves the canvas untouched.

    Args:
        buffer: Source raster (not modified)
        stroke: Path in raster coordinates
        style: Styling to use (default: the stroke tool's style)

    Returns:
        New buffer with the stroke composited
    """
    style = style or stroke.style
    if len(stroke.points) < 2:
        return buffer.copy()

    coverage = Image.new("L", buffer.size, 0)
    draw = ImageDraw.Draw(coverage)
    draw.line(list(stroke.points), fill=255, width=style.width, joint="curve")

    # Round caps
    if style.width > 2:
        radius = style.width / 2
        for x, y in (stroke.points[0], stroke.points[-1]):
            draw.ellipse((x - radius, y - radius, x + radius, y + radius), fill=255)

    alpha = coverage.point(lambda v: round(v * style.opacity))
    paint = Image.new(buffer.mode, buffer.size, style.color)
    return Image.composite(paint, buffer, alpha)


class RasterSurface:
    """Owns the pixel buffer that strokes are composited onto.

    The logical size is fixed at construction and is independent of the
    size the canvas is displayed at.

    Attributes:
        width: Raster width in pixels
        height: Raster height in pixels
    """

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self._buffer = blank_buffer(width, height)
        self._export_cache: EncodedImage | None = None

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    def _replace(self, buffer: Image.Image) -> None:
        self._buffer = buffer
        self._export_cache = None

    def reset_to_blank(self) -> None:
        """Fill the entire buffer with opaque white."""
        self._replace(blank_buffer(self.width, self.height))

    def load_from_image(self, source: Image.Image) -> None:
        """Stretch ``source`` to cover the raster exactly.

        No letterboxing is applied.  Transparent pixels are flattened onto
        the white background.
        """
        scaled = source.convert("RGBA").resize(self.size, Image.Resampling.BILINEAR)
        flattened = Image.new("RGBA", self.size, BACKGROUND_COLOR + (255,))
        flattened.alpha_composite(scaled)
        self._replace(flattened.convert("RGB"))
        logger.debug("Loaded %sx%s source into %sx%s raster", *source.size, *self.size)

    def apply_stroke(self, stroke: Stroke, base: Image.Image | None = None) -> None:
        """Composite ``stroke`` over ``base`` (default: the current buffer)."""
        self._replace(apply_stroke(base if base is not None else self._buffer, stroke))

    def snapshot(self) -> Image.Image:
        """Return a copy of the current buffer."""
        return self._buffer.copy()

    def get_pixel(self, x: int, y: int) -> tuple[int, int, int]:
        return self._buffer.getpixel((x, y))

    def export(self) -> EncodedImage:
        """Return the buffer as a PNG EncodedImage without modifying it."""
        if self._export_cache is None:
            self._export_cache = from_raster(self._buffer)
        return self._export_cache
