"""Core functionality for Imaginarium.

This package holds everything that is independent of the HTTP layer:

- **Canvas**: raster.py (pixel buffer, stroke compositing) and drawing.py
  (tool/mask state machine, pointer handling)
- **Codec**: codec.py converts pixels, uploads and data URIs to EncodedImage
- **Prompting**: prompt_composer.py wraps prompts for masked edits
- **Generation**: orchestrator.py (single-flight submission) and
  gemini_service.py (google-genai backend)
- **Gallery**: gallery_store.py keeps entries newest first
- **Session**: workspace.py wires the pieces into user-facing actions
- **Configuration**: config.py loads IMAGINARIUM_* settings

Usage Example
-------------
    import asyncio

    from imaginarium.core import GeminiImageService, GenerationOrchestrator, Workspace, config

    service = GeminiImageService(config.api_key)
    workspace = Workspace(GenerationOrchestrator(service, config.model_id))
    workspace.set_prompt("a red bicycle")
    entry = asyncio.run(workspace.generate())
"""

from imaginarium.core.config import ImaginariumConfig, config
from imaginarium.core.drawing import DrawingEngine
from imaginarium.core.gallery_store import GalleryStore
from imaginarium.core.gemini_service import GeminiImageService
from imaginarium.core.orchestrator import GenerationOrchestrator, OrchestratorState
from imaginarium.core.workspace import Workspace

__all__ = [
    "DrawingEngine",
    "GalleryStore",
    "GeminiImageService",
    "GenerationOrchestrator",
    "ImaginariumConfig",
    "OrchestratorState",
    "Workspace",
    "config",
]
