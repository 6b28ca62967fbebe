"""Exception taxonomy for Imaginarium.

Every exception carries a ``user_message`` that can be displayed directly,
mirroring how the HTTP layer reports failures as ``detail`` strings.

Hierarchy::

    ImaginariumError
    ├── GenerationError
    │   ├── EmptyPrompt
    │   ├── SubmissionInProgress
    │   ├── ServiceFailure
    │   └── NoImageInResponse
    ├── DecodeError
    │   └── UnsupportedMediaType
    └── WorkspaceError
        └── EntryNotFound
"""


class ImaginariumError(Exception):
    """Base class for all application errors."""

    def __init__(self, user_message: str):
        super().__init__(user_message)
        self.user_message = user_message


class GenerationError(ImaginariumError):
    """A submission ended without producing an image."""


class EmptyPrompt(GenerationError):
    """The prompt was blank; the service was never contacted."""

    def __init__(self):
        super().__init__("Please enter a prompt before generating.")


class SubmissionInProgress(GenerationError):
    """Another generation is already in flight."""

    def __init__(self):
        super().__init__("A generation is already in progress.")


class ServiceFailure(GenerationError):
    """The external service failed at the transport or service level.

    Attributes:
        upstream_message: The service's error text, preserved verbatim
    """

    def __init__(self, upstream_message: str):
        super().__init__(f"Generation failed: {upstream_message}")
        self.upstream_message = upstream_message


class NoImageInResponse(GenerationError):
    """The service answered successfully but returned no image payload."""

    def __init__(self):
        super().__init__("Generation failed: No image data found in response.")


class DecodeError(ImaginariumError):
    """Bytes or a data URI could not be turned into an image."""


class UnsupportedMediaType(DecodeError):
    """An uploaded file is not an image."""

    def __init__(self, mime_type: str):
        super().__init__(f"Unsupported media type: {mime_type or 'unknown'}. Please upload an image.")
        self.mime_type = mime_type


class WorkspaceError(ImaginariumError):
    """A workspace action is not valid in the current state."""


class EntryNotFound(WorkspaceError):
    """No gallery entry has the requested id."""

    def __init__(self, entry_id: str):
        super().__init__(f"Image not found: {entry_id}")
        self.entry_id = entry_id
