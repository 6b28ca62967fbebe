"""Gemini backend for the generation orchestrator.

:class:`GeminiImageService` implements the orchestrator's
``generate_content(body) -> response`` contract on top of the
``google-genai`` async client.  The orchestrator speaks plain camelCase
dictionaries with base64 strings; this adapter converts them to and from the
SDK's typed objects, which carry raw bytes.

The client is created lazily on the first call, so the application can start
(and be tested) without a credential.
"""

from __future__ import annotations

import base64
import logging
from typing import Any

from google import genai
from google.genai import types

from imaginarium.core.errors import ServiceFailure

logger = logging.getLogger(__name__)


class GeminiImageService:
    """Send generation requests to Gemini through ``google-genai``.

    Args:
        api_key: Service credential; required at call time
        client: Pre-built ``genai.Client`` (mainly for tests)
    """

    def __init__(self, api_key: str | None, client: Any | None = None):
        self._api_key = api_key
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            if not self._api_key:
                raise ServiceFailure("API key not configured. Set IMAGINARIUM_API_KEY.")
            logger.info("Creating google-genai client")
            self._client = genai.Client(api_key=self._api_key)
        return self._client

    async def generate_content(self, body: dict[str, Any]) -> dict[str, Any]:
        client = self._get_client()
        response = await client.aio.models.generate_content(
            model=body["model"],
            contents=types.Content(role="user", parts=_to_parts(body["contents"]["parts"])),
            config=_to_config(body.get("config") or {}),
        )
        return _response_to_dict(response)


def _to_parts(parts: list[dict[str, Any]]) -> list[types.Part]:
    converted: list[types.Part] = []
    for part in parts:
        inline = part.get("inlineData")
        if inline is not None:
            converted.append(
                types.Part(
                    inline_data=types.Blob(
                        data=base64.b64decode(inline["data"]),
                        mime_type=inline.get("mimeType"),
                    )
                )
            )
        elif "text" in part:
            converted.append(types.Part(text=part["text"]))
    return converted


def _to_config(config: dict[str, Any]) -> types.GenerateContentConfig:
    image_config = config.get("imageConfig") or {}
    if image_config.get("aspectRatio"):
        return types.GenerateContentConfig(
            image_config=types.ImageConfig(aspect_ratio=image_config["aspectRatio"])
        )
    return types.GenerateContentConfig()


def _response_to_dict(response: Any) -> dict[str, Any]:
    """Convert an SDK response into the orchestrator's camelCase shape."""
    candidates: list[dict[str, Any]] = []
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        parts: list[dict[str, Any]] = []
        for part in getattr(content, "parts", None) or []:
            inline = getattr(part, "inline_data", None)
            if inline is not None and inline.data:
                data = inline.data
                if isinstance(data, (bytes, bytearray)):
                    data = base64.b64encode(data).decode("ascii")
                parts.append({"inlineData": {"data": data, "mimeType": inline.mime_type}})
            elif getattr(part, "text", None) is not None:
                parts.append({"text": part.text})
        candidates.append({"content": {"parts": parts}})
    return {"candidates": candidates}
