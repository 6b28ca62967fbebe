"""Session controller tying the canvas, orchestrator and gallery together.

A :class:`Workspace` holds everything a single user session edits: the
prompt, the aspect ratio, the reference-input mode, the current reference
image, the drawing engine and the gallery.  It implements the user-facing
actions (upload, draw over an image, save a sketch, generate, delete) on top
of the core components.

Reference Image Ownership
-------------------------
In ``upload`` mode the reference image is whatever was last uploaded.  In
``draw`` mode it is the canvas: the drawing engine publishes a fresh export
after every stroke (and ``None`` after a clear) and the workspace stores it.
Switching modes always starts from no reference image.
"""

from __future__ import annotations

import logging

from imaginarium.core.codec import decode_upload, from_data_uri, to_bytes
from imaginarium.core.drawing import DrawingEngine
from imaginarium.core.errors import (
    EntryNotFound,
    GenerationError,
    SubmissionInProgress,
    WorkspaceError,
)
from imaginarium.core.gallery_store import GalleryStore
from imaginarium.core.models import (
    DEFAULT_SKETCH_PROMPT,
    AspectRatio,
    EncodedImage,
    GeneratedEntry,
    GenerationRequest,
    InputMode,
)
from imaginarium.core.orchestrator import GenerationOrchestrator, OrchestratorState
from imaginarium.core.prompt_composer import compose

logger = logging.getLogger(__name__)

# The canvas is 4:3, so saved sketches are recorded with that ratio
SKETCH_ASPECT_RATIO = AspectRatio.WIDE


class Workspace:
    """Mutable state and actions of one editing session.

    Attributes:
        prompt: Prompt text as typed by the user
        aspect_ratio: Ratio for the next generation
        input_mode: Where the reference image comes from
        reference_image: Current reference image, if any
        last_error: User-visible message of the last failed generation
        gallery: Generated and saved entries, newest first
        engine: Canvas drawing engine
        orchestrator: Single-flight generation orchestrator
    """

    def __init__(
        self,
        orchestrator: GenerationOrchestrator,
        canvas_width: int = 800,
        canvas_height: int = 600,
        aspect_ratio: AspectRatio = AspectRatio.SQUARE,
        gallery: GalleryStore | None = None,
    ):
        self.prompt = ""
        self.aspect_ratio = aspect_ratio
        self.input_mode = InputMode.UPLOAD
        self.reference_image: EncodedImage | None = None
        self.last_error: str | None = None

        self.gallery = gallery if gallery is not None else GalleryStore()
        self.orchestrator = orchestrator
        self.engine = DrawingEngine(
            canvas_width, canvas_height, on_image_change=self._on_canvas_image
        )

    @property
    def is_generating(self) -> bool:
        return self.orchestrator.state is OrchestratorState.SUBMITTING

    @property
    def mask_used(self) -> bool:
        """Whether the next generation should be scoped to the mask."""
        return self.input_mode is InputMode.DRAW and self.engine.mask_used

    def _on_canvas_image(self, image: EncodedImage | None) -> None:
        if self.input_mode is InputMode.DRAW:
            self.reference_image = image

    # -- Simple setters -----------------------------------------------------

    def set_prompt(self, text: str) -> None:
        self.prompt = text

    def set_aspect_ratio(self, ratio: AspectRatio) -> None:
        self.aspect_ratio = ratio

    def set_input_mode(self, mode: InputMode) -> None:
        """Switch between upload and draw.

        Any switch drops the reference image.  The canvas is cleared too,
        which forgets the mask.
        """
        if mode is self.input_mode:
            return
        logger.info("Input mode: %s -> %s", self.input_mode.value, mode.value)
        self.input_mode = mode
        self.reference_image = None
        self.engine.clear()

    # -- Reference image ----------------------------------------------------

    def upload_reference(self, file_bytes: bytes, mime_type: str) -> EncodedImage:
        """Use an uploaded file as the reference image.

        Raises:
            WorkspaceError: If not in upload mode
            UnsupportedMediaType: If the file is not an image; the previous
                reference is kept
        """
        if self.input_mode is not InputMode.UPLOAD:
            raise WorkspaceError("Switch to upload mode to upload a reference image.")

        image = decode_upload(file_bytes, mime_type)
        self.reference_image = image
        logger.info("Reference image uploaded (%s, %d bytes)", image.mime_type, len(file_bytes))
        return image

    def upload_reference_uri(self, uri: str) -> EncodedImage:
        """Use a ``data:<mime>;base64,<data>`` URI as the reference image.

        Raises:
            DecodeError: If the URI or its base64 payload is malformed
            UnsupportedMediaType: If the URI does not carry an image
            WorkspaceError: If not in upload mode
        """
        parsed = from_data_uri(uri)
        return self.upload_reference(to_bytes(parsed), parsed.mime_type)

    def clear_reference(self) -> None:
        if self.input_mode is InputMode.DRAW:
            self.engine.clear()
        else:
            self.reference_image = None

    def _open_canvas(self, image: EncodedImage) -> None:
        self.input_mode = InputMode.DRAW
        self.reference_image = None
        self.engine.load_initial_image(image)

    def edit_uploaded_reference(self) -> None:
        """Switch to draw mode with the uploaded image on the canvas.

        Raises:
            WorkspaceError: If there is no uploaded image
        """
        if self.input_mode is not InputMode.UPLOAD or self.reference_image is None:
            raise WorkspaceError("Upload an image before drawing on it.")
        self._open_canvas(self.reference_image)

    def edit_entry(self, entry_id: str) -> GeneratedEntry:
        """Start a new editing session from an existing gallery entry.

        The entry's prompt and aspect ratio are restored and its image is
        loaded onto a fresh canvas with no mask.

        Raises:
            EntryNotFound: If no entry has ``entry_id``
        """
        entry = self.gallery.get(entry_id)
        if entry is None:
            raise EntryNotFound(entry_id)

        self.prompt = entry.original_prompt_text
        self.aspect_ratio = entry.aspect_ratio
        self._open_canvas(entry.image)
        logger.info("Editing gallery entry %s", entry_id)
        return entry

    # -- Gallery-producing actions -----------------------------------------

    def save_sketch(self) -> GeneratedEntry:
        """Save the current canvas to the gallery without generating.

        Raises:
            WorkspaceError: If not in draw mode or the canvas has no image
        """
        if self.input_mode is not InputMode.DRAW or self.reference_image is None:
            raise WorkspaceError("Draw something before saving a sketch.")

        entry = GeneratedEntry(
            image=self.reference_image,
            original_prompt_text=self.prompt.strip() or DEFAULT_SKETCH_PROMPT,
            aspect_ratio=SKETCH_ASPECT_RATIO,
        )
        self.gallery.append(entry)
        return entry

    async def generate(self) -> GeneratedEntry:
        """Generate an image from the current prompt and reference.

        Returns:
            The new gallery entry (already prepended)

        Raises:
            GenerationError: Any orchestrator failure; ``last_error`` holds
                its user-visible message
        """
        if self.is_generating:
            raise SubmissionInProgress()

        original_prompt = self.prompt.strip()
        request = GenerationRequest(
            prompt_text=compose(self.prompt, self.mask_used),
            aspect_ratio=self.aspect_ratio,
            reference_image=self.reference_image,
        )

        self.last_error = None
        try:
            image = await self.orchestrator.submit(request)
        except GenerationError as e:
            self.last_error = e.user_message
            raise

        entry = GeneratedEntry(
            image=image,
            original_prompt_text=original_prompt,
            aspect_ratio=request.aspect_ratio,
        )
        self.gallery.append(entry)
        return entry

    def delete_entry(self, entry_id: str) -> bool:
        return self.gallery.remove(entry_id)
