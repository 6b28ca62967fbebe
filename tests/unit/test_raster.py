"""Tests for imaginarium.core.raster — buffer and stroke compositing."""

from __future__ import annotations

from PIL import Image

from imaginarium.core.codec import to_pixels
from imaginarium.core.models import Stroke, Tool
from imaginarium.core.raster import BACKGROUND_COLOR, RasterSurface, apply_stroke, blank_buffer

INK = (0x0F, 0x17, 0x2A)
MAGENTA = (0xEC, 0x48, 0x99)


def _stroke(tool: Tool, *points: tuple[float, float]) -> Stroke:
    stroke = Stroke(tool=tool)
    for x, y in points:
        stroke = stroke.extend(x, y)
    return stroke


class TestApplyStroke:
    """Test the pure apply_stroke function."""

    def test_draw_paints_ink_along_path(self):
        result = apply_stroke(blank_buffer(200, 100), _stroke(Tool.DRAW, (10, 50), (190, 50)))
        assert result.getpixel((100, 50)) == INK

    def test_source_buffer_is_not_modified(self):
        buffer = blank_buffer(200, 100)
        apply_stroke(buffer, _stroke(Tool.DRAW, (10, 50), (190, 50)))
        assert buffer.getpixel((100, 50)) == BACKGROUND_COLOR

    def test_pixels_off_path_untouched(self):
        result = apply_stroke(blank_buffer(200, 100), _stroke(Tool.DRAW, (10, 50), (190, 50)))
        assert result.getpixel((100, 10)) == BACKGROUND_COLOR

    def test_single_point_paints_nothing(self):
        """Pressing without moving leaves the canvas untouched."""
        result = apply_stroke(blank_buffer(50, 50), _stroke(Tool.MASK, (25, 25)))
        assert result.getpixel((25, 25)) == BACKGROUND_COLOR

    def test_mask_is_translucent(self):
        """A mask stroke over white blends to a light pink, not full magenta."""
        result = apply_stroke(blank_buffer(200, 100), _stroke(Tool.MASK, (10, 50), (190, 50)))
        r, g, b = result.getpixel((100, 50))
        assert (r, g, b) != MAGENTA
        assert (r, g, b) != BACKGROUND_COLOR
        assert MAGENTA[1] < g < 255
        assert MAGENTA[2] < b < 255

    def test_erase_restores_white(self):
        drawn = apply_stroke(blank_buffer(200, 100), _stroke(Tool.DRAW, (10, 50), (190, 50)))
        erased = apply_stroke(drawn, _stroke(Tool.ERASE, (10, 50), (190, 50)))
        assert erased.getpixel((100, 50)) == BACKGROUND_COLOR

    def test_overlapping_mask_blends_once(self):
        """Doubling back within one stroke must not darken the overlap."""
        once = apply_stroke(blank_buffer(200, 100), _stroke(Tool.MASK, (10, 50), (190, 50)))
        back_and_forth = apply_stroke(
            blank_buffer(200, 100),
            _stroke(Tool.MASK, (10, 50), (190, 50), (10, 50), (190, 50)),
        )
        assert back_and_forth.getpixel((100, 50)) == once.getpixel((100, 50))

    def test_stroke_width_follows_tool(self):
        """The eraser (width 30) covers pixels the pen (width 3) does not."""
        base = Image.new("RGB", (200, 100), (0, 0, 0))
        pen = apply_stroke(base, _stroke(Tool.DRAW, (10, 50), (190, 50)))
        eraser = apply_stroke(base, _stroke(Tool.ERASE, (10, 50), (190, 50)))
        assert pen.getpixel((100, 60)) == (0, 0, 0)
        assert eraser.getpixel((100, 60)) == BACKGROUND_COLOR


class TestRasterSurface:
    """Test RasterSurface buffer ownership and export."""

    def test_starts_blank(self):
        surface = RasterSurface(80, 60)
        assert surface.size == (80, 60)
        assert surface.get_pixel(0, 0) == BACKGROUND_COLOR
        assert surface.get_pixel(79, 59) == BACKGROUND_COLOR

    def test_export_is_idempotent(self):
        surface = RasterSurface(80, 60)
        assert surface.export() == surface.export()

    def test_export_reflects_changes(self):
        surface = RasterSurface(80, 60)
        before = surface.export()
        surface.apply_stroke(_stroke(Tool.DRAW, (0, 30), (79, 30)))
        after = surface.export()
        assert before != after
        assert to_pixels(after).convert("RGB").getpixel((40, 30)) == INK

    def test_reset_to_blank(self):
        surface = RasterSurface(80, 60)
        blank = surface.export()
        surface.apply_stroke(_stroke(Tool.DRAW, (0, 30), (79, 30)))
        surface.reset_to_blank()
        assert surface.get_pixel(40, 30) == BACKGROUND_COLOR
        assert surface.export() == blank

    def test_apply_over_base(self):
        """Re-applying a growing stroke over its base accumulates the path."""
        surface = RasterSurface(100, 100)
        base = surface.snapshot()
        surface.apply_stroke(_stroke(Tool.DRAW, (10, 10), (90, 10)), base=base)
        surface.apply_stroke(_stroke(Tool.DRAW, (10, 10), (90, 10), (90, 90)), base=base)
        assert surface.get_pixel(50, 10) == INK
        assert surface.get_pixel(90, 50) == INK

    def test_snapshot_is_a_copy(self):
        surface = RasterSurface(50, 50)
        snap = surface.snapshot()
        surface.apply_stroke(_stroke(Tool.DRAW, (0, 25), (49, 25)))
        assert snap.getpixel((25, 25)) == BACKGROUND_COLOR

    def test_load_stretches_to_cover(self):
        """A source of another aspect ratio fills the raster with no letterbox."""
        surface = RasterSurface(80, 60)
        surface.load_from_image(Image.new("RGB", (10, 40), (255, 0, 0)))
        assert surface.get_pixel(0, 0) == (255, 0, 0)
        assert surface.get_pixel(79, 59) == (255, 0, 0)
        assert surface.get_pixel(40, 30) == (255, 0, 0)

    def test_load_flattens_transparency(self):
        surface = RasterSurface(20, 20)
        surface.load_from_image(Image.new("RGBA", (5, 5), (0, 0, 255, 0)))
        assert surface.get_pixel(10, 10) == BACKGROUND_COLOR

    def test_load_keeps_raster_size(self):
        surface = RasterSurface(80, 60)
        surface.load_from_image(Image.new("RGB", (300, 300), (0, 128, 0)))
        assert surface.size == (80, 60)
        assert to_pixels(surface.export()).size == (80, 60)
