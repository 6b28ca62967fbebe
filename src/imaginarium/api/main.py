"""Imaginarium — FastAPI Application.

This module is the single entry point for the web application.  It defines
the FastAPI ``app`` instance, all REST API routes, and the ``main()`` CLI
function that launches the uvicorn server.

Architecture
------------
The application keeps one in-memory editing session:

- **Workspace** (:class:`~imaginarium.core.workspace.Workspace`) is created
  at startup and stored on ``app.state``.  Nothing is persisted; restarting
  the server starts a fresh gallery.
- **Image generation** goes through the single-flight
  :class:`~imaginarium.core.orchestrator.GenerationOrchestrator`, backed by
  :class:`~imaginarium.core.gemini_service.GeminiImageService`.
- **Drawing** endpoints are synchronous and remain usable while a
  generation is in flight.

Endpoints
---------
========  ============================  ====================================
Method    Path                          Purpose
========  ============================  ====================================
GET       ``/api/config``               Aspect ratios, tools, canvas size
GET       ``/api/workspace``            Session snapshot
PUT       ``/api/workspace``            Set prompt / ratio / input mode
POST      ``/api/canvas/tool``          Select drawing tool
POST      ``/api/canvas/pointer``       Pointer event in display coords
POST      ``/api/canvas/clear``         Clear the canvas
POST      ``/api/canvas/sketch``        Save the canvas to the gallery
POST      ``/api/reference/upload``     Upload a reference image
PUT       ``/api/reference``            Reference image as a data URI
DELETE    ``/api/reference``            Drop the reference image
POST      ``/api/reference/edit``       Draw over the uploaded image
POST      ``/api/generate``             Generate an image
GET       ``/api/gallery``              Gallery listing, newest first
GET       ``/api/gallery/{id}``         Single gallery entry
DELETE    ``/api/gallery/{id}``         Delete a gallery entry
POST      ``/api/gallery/{id}/edit``    Re-use an entry as canvas seed
========  ============================  ====================================

Usage
-----
CLI (installed entry point)::

    imaginarium

Direct invocation::

    python -m imaginarium.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from imaginarium import __version__
from imaginarium.api.models import (
    EncodedImageResponse,
    EntryResponse,
    GenerateRequest,
    PointerEvent,
    ReferenceDataUri,
    ToolRequest,
    WorkspaceResponse,
    WorkspaceUpdate,
)
from imaginarium.core.config import ImaginariumConfig, config
from imaginarium.core.errors import (
    DecodeError,
    EmptyPrompt,
    EntryNotFound,
    ImaginariumError,
    NoImageInResponse,
    ServiceFailure,
    SubmissionInProgress,
    UnsupportedMediaType,
    WorkspaceError,
)
from imaginarium.core.gemini_service import GeminiImageService
from imaginarium.core.models import AspectRatio, InputMode, Tool
from imaginarium.core.orchestrator import GenerationOrchestrator
from imaginarium.core.workspace import Workspace

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Error → HTTP status mapping.  Checked in order, so subclasses come first.
# ---------------------------------------------------------------------------
_STATUS_BY_ERROR: tuple[tuple[type[ImaginariumError], int], ...] = (
    (EmptyPrompt, 400),
    (SubmissionInProgress, 409),
    (ServiceFailure, 502),
    (NoImageInResponse, 502),
    (UnsupportedMediaType, 415),
    (DecodeError, 400),
    (EntryNotFound, 404),
    (WorkspaceError, 400),
)


def _to_http(error: ImaginariumError) -> HTTPException:
    status = next((code for kind, code in _STATUS_BY_ERROR if isinstance(error, kind)), 500)
    return HTTPException(status_code=status, detail=error.user_message)


def build_workspace(cfg: ImaginariumConfig) -> Workspace:
    """Create the session workspace from configuration."""
    service = GeminiImageService(cfg.api_key)
    orchestrator = GenerationOrchestrator(service, cfg.model_id)
    return Workspace(
        orchestrator,
        canvas_width=cfg.canvas_width,
        canvas_height=cfg.canvas_height,
        aspect_ratio=cfg.default_aspect_ratio,
    )


# ---------------------------------------------------------------------------
# Application lifecycle.
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the workspace on startup and drop it on shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control back to the application for the duration of its lifetime.
    """
    app.state.workspace = build_workspace(config)
    logger.info(
        "Workspace initialised (model=%s, canvas=%sx%s).",
        config.model_id,
        config.canvas_width,
        config.canvas_height,
    )

    yield

    app.state.workspace = None
    logger.info("Workspace released on shutdown.")


app = FastAPI(
    title="Imaginarium",
    description="Prompt-driven image generation with sketch, upload and masked edits.",
    version=__version__,
    lifespan=lifespan,
)

# Allow the frontend to be served from a different port during development.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _workspace() -> Workspace:
    return app.state.workspace


def _snapshot(workspace: Workspace) -> WorkspaceResponse:
    reference = workspace.reference_image
    return WorkspaceResponse(
        prompt=workspace.prompt,
        aspect_ratio=workspace.aspect_ratio,
        input_mode=workspace.input_mode,
        tool=workspace.engine.tool,
        mask_used=workspace.mask_used,
        is_generating=workspace.is_generating,
        reference_image=EncodedImageResponse.from_image(reference) if reference else None,
        last_error=workspace.last_error,
        canvas_width=workspace.engine.surface.width,
        canvas_height=workspace.engine.surface.height,
    )


# ---------------------------------------------------------------------------
# Routes.
# ---------------------------------------------------------------------------


@app.get("/api/config")
async def get_config() -> dict:
    """Return static options for the frontend.

    Returns:
        Dictionary with ``version``, ``aspect_ratios``, ``tools``,
        ``canvas_width`` and ``canvas_height``.
    """
    return {
        "version": __version__,
        "aspect_ratios": [ratio.value for ratio in AspectRatio],
        "tools": [tool.value for tool in Tool],
        "canvas_width": config.canvas_width,
        "canvas_height": config.canvas_height,
    }


@app.get("/api/workspace", response_model=WorkspaceResponse)
async def get_workspace() -> WorkspaceResponse:
    return _snapshot(_workspace())


@app.put("/api/workspace", response_model=WorkspaceResponse)
async def update_workspace(req: WorkspaceUpdate) -> WorkspaceResponse:
    """Apply prompt, aspect ratio and input mode changes.

    Switching the input mode clears the reference image and the mask.
    """
    workspace = _workspace()
    if req.prompt is not None:
        workspace.set_prompt(req.prompt)
    if req.aspect_ratio is not None:
        workspace.set_aspect_ratio(req.aspect_ratio)
    if req.input_mode is not None:
        workspace.set_input_mode(req.input_mode)
    return _snapshot(workspace)


@app.post("/api/canvas/tool", response_model=WorkspaceResponse)
async def select_tool(req: ToolRequest) -> WorkspaceResponse:
    """Select the drawing tool.  Mid-stroke switches apply to the next stroke."""
    workspace = _workspace()
    workspace.engine.select_tool(req.tool)
    return _snapshot(workspace)


@app.post("/api/canvas/pointer", response_model=WorkspaceResponse)
async def pointer_event(req: PointerEvent) -> WorkspaceResponse:
    """Feed one pointer event to the drawing engine.

    Raises:
        HTTPException: 400 if the workspace is not in draw mode.
    """
    workspace = _workspace()
    if workspace.input_mode is not InputMode.DRAW:
        raise HTTPException(status_code=400, detail="Canvas is only available in draw mode")

    engine = workspace.engine
    if req.type == "down":
        engine.pointer_down(req.x, req.y, req.display_width, req.display_height)
    elif req.type == "move":
        engine.pointer_move(req.x, req.y, req.display_width, req.display_height)
    else:
        engine.pointer_up()
    return _snapshot(workspace)


@app.post("/api/canvas/clear", response_model=WorkspaceResponse)
async def clear_canvas() -> WorkspaceResponse:
    workspace = _workspace()
    workspace.engine.clear()
    return _snapshot(workspace)


@app.post("/api/canvas/sketch", response_model=EntryResponse)
async def save_sketch() -> EntryResponse:
    """Save the current canvas to the gallery without generating.

    Raises:
        HTTPException: 400 if there is nothing drawn to save.
    """
    try:
        entry = _workspace().save_sketch()
    except ImaginariumError as e:
        raise _to_http(e) from e
    return EntryResponse.from_entry(entry)


@app.post("/api/reference/upload", response_model=WorkspaceResponse)
async def upload_reference(file: UploadFile = File(...)) -> WorkspaceResponse:
    """Use an uploaded file as the reference image.

    Raises:
        HTTPException: 415 if the file is not an image, 400 if not in
            upload mode.
    """
    workspace = _workspace()
    data = await file.read()
    try:
        workspace.upload_reference(data, file.content_type or "")
    except ImaginariumError as e:
        raise _to_http(e) from e
    return _snapshot(workspace)


@app.put("/api/reference", response_model=WorkspaceResponse)
async def set_reference_data_uri(req: ReferenceDataUri) -> WorkspaceResponse:
    """Use a data URI (as produced by a browser file reader) as the reference.

    Raises:
        HTTPException: 400 for a malformed URI or when not in upload mode,
            415 if the URI does not carry an image.
    """
    workspace = _workspace()
    try:
        workspace.upload_reference_uri(req.data_uri)
    except ImaginariumError as e:
        raise _to_http(e) from e
    return _snapshot(workspace)


@app.delete("/api/reference", response_model=WorkspaceResponse)
async def clear_reference() -> WorkspaceResponse:
    workspace = _workspace()
    workspace.clear_reference()
    return _snapshot(workspace)


@app.post("/api/reference/edit", response_model=WorkspaceResponse)
async def edit_reference() -> WorkspaceResponse:
    """Switch to draw mode with the uploaded image on the canvas."""
    workspace = _workspace()
    try:
        workspace.edit_uploaded_reference()
    except ImaginariumError as e:
        raise _to_http(e) from e
    return _snapshot(workspace)


@app.post("/api/generate", response_model=EntryResponse)
async def generate_image(req: GenerateRequest) -> EntryResponse:
    """Generate an image from the workspace prompt and reference.

    Raises:
        HTTPException: 400 for a blank prompt, 409 while another
            generation is in flight, 502 when the service fails or returns
            no image.
    """
    workspace = _workspace()
    # A rejected request must not overwrite the in-flight session's fields
    if workspace.is_generating:
        raise _to_http(SubmissionInProgress())
    if req.prompt is not None:
        workspace.set_prompt(req.prompt)
    if req.aspect_ratio is not None:
        workspace.set_aspect_ratio(req.aspect_ratio)

    try:
        entry = await workspace.generate()
    except ImaginariumError as e:
        raise _to_http(e) from e
    return EntryResponse.from_entry(entry)


@app.get("/api/gallery")
async def get_gallery() -> dict:
    """Return all gallery entries, newest first.

    Returns:
        Dictionary with ``total`` and ``images``.
    """
    entries = _workspace().gallery.list_all()
    return {
        "total": len(entries),
        "images": [EntryResponse.from_entry(entry).model_dump() for entry in entries],
    }


@app.get("/api/gallery/{entry_id}", response_model=EntryResponse)
async def get_entry(entry_id: str) -> EntryResponse:
    entry = _workspace().gallery.get(entry_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Image not found")
    return EntryResponse.from_entry(entry)


@app.delete("/api/gallery/{entry_id}")
async def delete_entry(entry_id: str) -> dict:
    """Delete a gallery entry.  Unknown ids are a no-op.

    Returns:
        Dictionary with ``success`` and ``deleted`` (whether an entry was
        actually removed).
    """
    removed = _workspace().delete_entry(entry_id)
    return {"success": True, "deleted": removed}


@app.post("/api/gallery/{entry_id}/edit", response_model=WorkspaceResponse)
async def edit_entry(entry_id: str) -> WorkspaceResponse:
    """Load a gallery entry onto the canvas for further editing."""
    workspace = _workspace()
    try:
        workspace.edit_entry(entry_id)
    except ImaginariumError as e:
        raise _to_http(e) from e
    return _snapshot(workspace)


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host, port and log level from
    :data:`~imaginarium.core.config.config`.  Registered as the
    ``imaginarium`` console script in ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "imaginarium.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
