"""Tests for imaginarium.core.gemini_service — google-genai adapter.

The ``genai.Client`` is replaced with a MagicMock whose async
``generate_content`` returns SimpleNamespace objects shaped like SDK
responses, so no network access occurs.
"""

from __future__ import annotations

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from imaginarium.core.errors import ServiceFailure
from imaginarium.core.gemini_service import GeminiImageService

BODY = {
    "model": "gemini-2.5-flash-image",
    "contents": {
        "parts": [
            {"inlineData": {"data": "cmVm", "mimeType": "image/png"}},
            {"text": "add a hat"},
        ]
    },
    "config": {"imageConfig": {"aspectRatio": "16:9"}},
}


def _sdk_response(*parts) -> SimpleNamespace:
    return SimpleNamespace(
        candidates=[SimpleNamespace(content=SimpleNamespace(parts=list(parts)))]
    )


def _image_part(data: bytes, mime_type: str | None = "image/png") -> SimpleNamespace:
    return SimpleNamespace(
        inline_data=SimpleNamespace(data=data, mime_type=mime_type), text=None
    )


def _text_part(text: str) -> SimpleNamespace:
    return SimpleNamespace(inline_data=None, text=text)


@pytest.fixture
def mock_client() -> MagicMock:
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock(
        return_value=_sdk_response(_image_part(b"foo"))
    )
    return client


class TestRequestConversion:
    """The camelCase body is converted to typed SDK arguments."""

    def test_model_and_parts(self, mock_client):
        service = GeminiImageService("key", client=mock_client)
        asyncio.run(service.generate_content(BODY))

        kwargs = mock_client.aio.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "gemini-2.5-flash-image"
        parts = kwargs["contents"].parts
        assert parts[0].inline_data.data == b"ref"
        assert parts[0].inline_data.mime_type == "image/png"
        assert parts[1].text == "add a hat"

    def test_aspect_ratio_config(self, mock_client):
        service = GeminiImageService("key", client=mock_client)
        asyncio.run(service.generate_content(BODY))

        config = mock_client.aio.models.generate_content.call_args.kwargs["config"]
        assert config.image_config.aspect_ratio == "16:9"


class TestResponseConversion:
    """SDK responses are converted back to camelCase with base64 data."""

    def test_image_bytes_are_base64_encoded(self, mock_client):
        service = GeminiImageService("key", client=mock_client)
        response = asyncio.run(service.generate_content(BODY))
        assert response == {
            "candidates": [
                {"content": {"parts": [{"inlineData": {"data": "Zm9v", "mimeType": "image/png"}}]}}
            ]
        }

    def test_text_parts_are_kept(self, mock_client):
        mock_client.aio.models.generate_content.return_value = _sdk_response(
            _text_part("Sure!"), _image_part(b"foo", "image/jpeg")
        )
        service = GeminiImageService("key", client=mock_client)
        parts = asyncio.run(service.generate_content(BODY))["candidates"][0]["content"]["parts"]
        assert parts[0] == {"text": "Sure!"}
        assert parts[1]["inlineData"]["mimeType"] == "image/jpeg"

    def test_no_candidates(self, mock_client):
        mock_client.aio.models.generate_content.return_value = SimpleNamespace(candidates=None)
        service = GeminiImageService("key", client=mock_client)
        assert asyncio.run(service.generate_content(BODY)) == {"candidates": []}


class TestClientCreation:
    """The client is created lazily from the API key."""

    def test_missing_api_key(self):
        service = GeminiImageService(None)
        with pytest.raises(ServiceFailure) as exc_info:
            asyncio.run(service.generate_content(BODY))
        assert "API key not configured" in exc_info.value.user_message

    @patch("imaginarium.core.gemini_service.genai.Client")
    def test_client_built_once(self, mock_client_cls, mock_client):
        mock_client_cls.return_value = mock_client
        service = GeminiImageService("secret")
        asyncio.run(service.generate_content(BODY))
        asyncio.run(service.generate_content(BODY))
        mock_client_cls.assert_called_once_with(api_key="secret")

    def test_sdk_errors_propagate(self, mock_client):
        mock_client.aio.models.generate_content.side_effect = RuntimeError("429 quota")
        service = GeminiImageService("key", client=mock_client)
        with pytest.raises(RuntimeError, match="429 quota"):
            asyncio.run(service.generate_content(BODY))
