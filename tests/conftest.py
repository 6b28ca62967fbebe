"""Shared pytest fixtures for Imaginarium tests."""

import asyncio
import io
import struct
import zlib
from typing import Any, Generator

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from imaginarium.core.config import ImaginariumConfig
from imaginarium.core.orchestrator import GenerationOrchestrator
from imaginarium.core.workspace import Workspace

TEST_MODEL_ID = "test-image-model"


def make_png_bytes(color=(255, 0, 0), size=(8, 6), mode="RGB") -> bytes:
    """Encode a solid-colour image as PNG bytes."""
    out = io.BytesIO()
    Image.new(mode, size, color).save(out, format="PNG")
    return out.getvalue()


def make_oversized_png(width: int = 20000, height: int = 20000) -> bytes:
    """Build a tiny PNG whose header declares a huge pixel size.

    Pillow refuses to open it as a decompression bomb.
    """

    def chunk(kind: bytes, data: bytes) -> bytes:
        crc = zlib.crc32(kind + data) & 0xFFFFFFFF
        return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", crc)

    header = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return (
        b"\x89PNG\r\n\x1a\n"
        + chunk(b"IHDR", header)
        + chunk(b"IDAT", zlib.compress(b""))
        + chunk(b"IEND", b"")
    )


def image_response(data: str = "Zm9v", mime_type: str | None = "image/png") -> dict:
    """Build a service response holding one inline image part."""
    inline = {"data": data}
    if mime_type is not None:
        inline["mimeType"] = mime_type
    return {"candidates": [{"content": {"parts": [{"inlineData": inline}]}}]}


class FakeGenerationService:
    """In-memory stand-in for the external generation service.

    Attributes:
        calls: Request bodies received, in order
        response: Response returned on success
        error: Exception raised instead of responding, if set
        gate: Event awaited before responding, if set (for in-flight tests)
    """

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self.response: dict[str, Any] = image_response()
        self.error: Exception | None = None
        self.gate: asyncio.Event | None = None

    async def generate_content(self, body: dict[str, Any]) -> dict[str, Any]:
        self.calls.append(body)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def test_config() -> ImaginariumConfig:
    """Create a test configuration that ignores any local .env file.

    Returns:
        ImaginariumConfig instance for testing
    """
    return ImaginariumConfig(
        api_key=None,
        model_id=TEST_MODEL_ID,
        canvas_width=800,
        canvas_height=600,
        _env_file=None,
    )


@pytest.fixture
def fake_service() -> FakeGenerationService:
    return FakeGenerationService()


@pytest.fixture
def orchestrator(fake_service: FakeGenerationService) -> GenerationOrchestrator:
    return GenerationOrchestrator(fake_service, TEST_MODEL_ID)


@pytest.fixture
def workspace(orchestrator: GenerationOrchestrator, test_config: ImaginariumConfig) -> Workspace:
    """Create a fresh workspace backed by the fake service."""
    return Workspace(
        orchestrator,
        canvas_width=test_config.canvas_width,
        canvas_height=test_config.canvas_height,
    )


@pytest.fixture
def png_bytes() -> bytes:
    return make_png_bytes()


@pytest.fixture
def test_client(monkeypatch, fake_service: FakeGenerationService) -> Generator[TestClient, None, None]:
    """TestClient whose workspace talks to the fake service.

    The Gemini service constructor is patched so the lifespan handler wires
    the fake into a fresh workspace on every test.
    """
    from imaginarium.api import main

    monkeypatch.setattr(main, "GeminiImageService", lambda api_key: fake_service)
    with TestClient(main.app) as client:
        yield client
