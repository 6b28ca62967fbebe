"""Single-flight generation orchestrator.

:class:`GenerationOrchestrator` turns a :class:`GenerationRequest` into one
call against the external generation service and classifies the outcome.

State Machine
-------------
::

    READY --submit()--> SUBMITTING --success/failure--> READY

Only one submission may be in flight.  The orchestrator holds an ownership
token while submitting; a second ``submit()`` finds the token taken and is
rejected with :class:`SubmissionInProgress` without contacting the service.
The check and the take happen with no ``await`` in between, so they are
atomic on the event loop.  There is no queueing, cancellation or retry.

Request Body
------------
::

    {
        "model": "<model id>",
        "contents": {"parts": [
            {"inlineData": {"data": "<b64>", "mimeType": "image/png"}},  # optional
            {"text": "<instruction>"},
        ]},
        "config": {"imageConfig": {"aspectRatio": "1:1"}},
    }

Response Handling
-----------------
Only ``candidates[0].content.parts`` is consulted.  The first part carrying
``inlineData.data`` becomes the result; its media type defaults to
``image/png`` when the service omits one.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Protocol

from imaginarium.core.errors import (
    EmptyPrompt,
    GenerationError,
    NoImageInResponse,
    ServiceFailure,
    SubmissionInProgress,
)
from imaginarium.core.models import EncodedImage, GenerationRequest

logger = logging.getLogger(__name__)

DEFAULT_RESULT_MIME_TYPE = "image/png"


class GenerationService(Protocol):
    """Narrow contract for the external image-generation service."""

    async def generate_content(self, body: dict[str, Any]) -> dict[str, Any]: ...


class OrchestratorState(str, Enum):
    READY = "ready"
    SUBMITTING = "submitting"


class GenerationOrchestrator:
    """Builds, submits and classifies generation requests.

    Attributes:
        service: Backend implementing :class:`GenerationService`
        model_id: Model identifier placed in every request body
    """

    def __init__(self, service: GenerationService, model_id: str):
        self.service = service
        self.model_id = model_id
        self._token: object | None = None

    @property
    def state(self) -> OrchestratorState:
        return OrchestratorState.READY if self._token is None else OrchestratorState.SUBMITTING

    def build_request_body(self, request: GenerationRequest) -> dict[str, Any]:
        """Build the service request body.

        The reference image, if any, is placed ahead of the text instruction.
        """
        parts: list[dict[str, Any]] = []
        if request.reference_image is not None:
            parts.append(
                {
                    "inlineData": {
                        "data": request.reference_image.data,
                        "mimeType": request.reference_image.mime_type,
                    }
                }
            )
        parts.append({"text": request.prompt_text})

        return {
            "model": self.model_id,
            "contents": {"parts": parts},
            "config": {"imageConfig": {"aspectRatio": request.aspect_ratio.value}},
        }

    async def submit(self, request: GenerationRequest) -> EncodedImage:
        """Run one generation.

        Returns:
            The generated image

        Raises:
            SubmissionInProgress: If another submission is in flight
            EmptyPrompt: If the prompt is blank
            ServiceFailure: If the service call fails
            NoImageInResponse: If the response holds no image payload
        """
        if self._token is not None:
            raise SubmissionInProgress()
        if not request.prompt_text.strip():
            raise EmptyPrompt()

        token = object()
        self._token = token
        body = self.build_request_body(request)
        logger.info(
            "Submitting generation (model=%s, aspect_ratio=%s, reference=%s)",
            self.model_id,
            request.aspect_ratio.value,
            request.reference_image is not None,
        )

        try:
            try:
                response = await self.service.generate_content(body)
            except GenerationError:
                raise
            except Exception as e:
                logger.error("Generation service call failed: %s", e, exc_info=True)
                raise ServiceFailure(str(e)) from e

            image = extract_image(response)
            logger.info("Generation succeeded (%s)", image.mime_type)
            return image
        finally:
            if self._token is token:
                self._token = None


def extract_image(response: dict[str, Any]) -> EncodedImage:
    """Return the first inline image in ``candidates[0].content.parts``.

    Raises:
        NoImageInResponse: If no part carries inline image data
    """
    candidates = (response or {}).get("candidates") or []
    if not candidates:
        raise NoImageInResponse()

    content = candidates[0].get("content") or {}
    for part in content.get("parts") or []:
        inline = part.get("inlineData") or {}
        if inline.get("data"):
            return EncodedImage(
                mime_type=inline.get("mimeType") or DEFAULT_RESULT_MIME_TYPE,
                data=inline["data"],
            )

    raise NoImageInResponse()
