"""Tool selection, mask tracking and pointer handling for the canvas.

The engine's bookkeeping is an immutable :class:`DrawingState` advanced by
small pure update functions:

========================  ===================================================
Function                  Effect
========================  ===================================================
``begin_stroke``          Idle -> Stroking; sets ``mask_used`` for the Mask
                          tool
``end_stroke``            Stroking -> Idle; applies any pending tool switch
``select_tool``           Switches immediately when Idle, otherwise defers
                          the switch until the stroke ends
``clear_state``           Back to Idle with ``mask_used`` reset
========================  ===================================================

:class:`DrawingEngine` owns a :class:`RasterSurface` and the current state.
It converts display-space pointer events to raster space, feeds strokes to
the surface, and notifies a listener whenever the reference image changes
(a fresh export after each stroke, or ``None`` after a clear).

All methods are synchronous and never block.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import Enum

from PIL import Image

from imaginarium.core.codec import to_pixels
from imaginarium.core.errors import DecodeError
from imaginarium.core.models import EncodedImage, Stroke, Tool
from imaginarium.core.raster import RasterSurface

logger = logging.getLogger(__name__)

ImageListener = Callable[[EncodedImage | None], None]


class Phase(str, Enum):
    IDLE = "idle"
    STROKING = "stroking"


@dataclass(frozen=True)
class DrawingState:
    """Immutable snapshot of the engine's tool and mask bookkeeping.

    Attributes:
        phase: Whether a stroke is in progress
        tool: Tool used by the current (or next) stroke
        pending_tool: Tool selected mid-stroke, applied when the stroke ends
        mask_used: True once any Mask stroke has begun
    """

    phase: Phase = Phase.IDLE
    tool: Tool = Tool.DRAW
    pending_tool: Tool | None = None
    mask_used: bool = False


def select_tool(state: DrawingState, tool: Tool) -> DrawingState:
    if state.phase is Phase.STROKING:
        return replace(state, pending_tool=tool)
    return replace(state, tool=tool, pending_tool=None)


def begin_stroke(state: DrawingState) -> DrawingState:
    if state.phase is Phase.STROKING:
        return state
    return replace(
        state,
        phase=Phase.STROKING,
        mask_used=state.mask_used or state.tool is Tool.MASK,
    )


def end_stroke(state: DrawingState) -> DrawingState:
    if state.phase is Phase.IDLE:
        return state
    return replace(
        state,
        phase=Phase.IDLE,
        tool=state.pending_tool or state.tool,
        pending_tool=None,
    )


def clear_state(state: DrawingState) -> DrawingState:
    return replace(
        state,
        phase=Phase.IDLE,
        tool=state.pending_tool or state.tool,
        pending_tool=None,
        mask_used=False,
    )


def to_raster(
    x: float,
    y: float,
    display_width: float,
    display_height: float,
    raster_width: int,
    raster_height: int,
) -> tuple[float, float]:
    """Map a display-space point to raster space.

    Horizontal and vertical scale factors are independent because the
    canvas may be displayed stretched.

    Raises:
        ValueError: If the display size is not positive
    """
    if display_width <= 0 or display_height <= 0:
        raise ValueError(f"Display size must be positive, got {display_width}x{display_height}")
    return x * (raster_width / display_width), y * (raster_height / display_height)


class DrawingEngine:
    """Stateful canvas controller.

    Args:
        width: Raster width in pixels
        height: Raster height in pixels
        on_image_change: Called with the new reference image after each
            stroke, or with ``None`` when the canvas is cleared
    """

    def __init__(self, width: int, height: int, on_image_change: ImageListener | None = None):
        self.surface = RasterSurface(width, height)
        self.state = DrawingState()
        self.on_image_change = on_image_change

        self._stroke: Stroke | None = None
        self._stroke_base: Image.Image | None = None

    @property
    def tool(self) -> Tool:
        return self.state.tool

    @property
    def mask_used(self) -> bool:
        return self.state.mask_used

    @property
    def is_stroking(self) -> bool:
        return self.state.phase is Phase.STROKING

    def _notify(self, image: EncodedImage | None) -> None:
        if self.on_image_change is not None:
            self.on_image_change(image)

    def select_tool(self, tool: Tool) -> None:
        self.state = select_tool(self.state, tool)
        if self.state.pending_tool is not None:
            logger.debug("Tool %s deferred until current stroke ends", tool.value)

    def to_raster(
        self, x: float, y: float, display_width: float, display_height: float
    ) -> tuple[float, float]:
        return to_raster(
            x, y, display_width, display_height, self.surface.width, self.surface.height
        )

    # -- Pointer input ------------------------------------------------------

    def pointer_down(self, x: float, y: float, display_width: float, display_height: float) -> None:
        """Start a stroke at a display-space point with the active tool."""
        if self.is_stroking:
            return

        point = self.to_raster(x, y, display_width, display_height)
        self.state = begin_stroke(self.state)
        self._stroke = Stroke(tool=self.state.tool).extend(*point)
        self._stroke_base = self.surface.snapshot()
        logger.debug("Stroke started with %s at %s", self.state.tool.value, point)

    def pointer_move(self, x: float, y: float, display_width: float, display_height: float) -> None:
        """Extend the current stroke; ignored when no stroke is in progress."""
        if not self.is_stroking or self._stroke is None:
            return

        self._stroke = self._stroke.extend(*self.to_raster(x, y, display_width, display_height))
        self.surface.apply_stroke(self._stroke, base=self._stroke_base)

    def pointer_up(self) -> None:
        """Finish the current stroke and publish the new canvas image."""
        if not self.is_stroking:
            return

        self.state = end_stroke(self.state)
        self._stroke = None
        self._stroke_base = None
        self._notify(self.surface.export())

    pointer_leave = pointer_up

    # -- Whole-canvas actions -----------------------------------------------

    def clear(self) -> None:
        """Blank the canvas, forget the mask and drop the reference image."""
        self.state = clear_state(self.state)
        self._stroke = None
        self._stroke_base = None
        self.surface.reset_to_blank()
        self._notify(None)

    def load_initial_image(self, image: EncodedImage | None) -> None:
        """Seed the canvas with an existing image (or blank it for ``None``).

        A malformed image degrades to a blank canvas instead of raising.
        """
        if image is None:
            self.clear()
            return

        self.state = clear_state(self.state)
        self._stroke = None
        self._stroke_base = None
        self.surface.reset_to_blank()

        try:
            self.surface.load_from_image(to_pixels(image))
        except (DecodeError, OSError, ValueError, MemoryError) as e:
            logger.warning("Could not load initial canvas image, using blank canvas: %s", e)
            self.surface.reset_to_blank()
            self._notify(None)
            return

        self._notify(self.surface.export())

    def export(self) -> EncodedImage:
        return self.surface.export()
