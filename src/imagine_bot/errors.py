"""Exception hierarchy for imagine-bot.

Every error carries a ``user_message`` that is safe to post back into chat.
The Generation Orchestrator catches everything below ``ImagineBotError`` and
turns it into a single reply; nothing here is meant to reach the dispatch loop.

    ImagineBotError
    ├── ConfigurationError
    ├── GenerationError
    │   ├── TransientBackendError      (retryable, 500/503)
    │   ├── ExhaustedRetriesError      (transient until the attempt bound)
    │   ├── FatalGenerationError       (non-retryable, wraps the cause)
    │   ├── BackendRequestError        (transport failure)
    │   ├── BackendHTTPError           (non-2xx, non-transient)
    │   └── ResponseDecodeError
    │       ├── MalformedResponseError
    │       ├── MissingImageDataError
    │       └── EmptyImageError
    └── DeliveryError
"""


class ImagineBotError(Exception):
    """Base class for all imagine-bot errors."""

    def __init__(self, message: str, user_message: str | None = None):
        super().__init__(message)
        self.user_message = user_message or message


class ConfigurationError(ImagineBotError):
    """Raised when required configuration (e.g. the API token) is missing."""


class GenerationError(ImagineBotError):
    """Base class for errors on the image generation path."""


class TransientBackendError(GenerationError):
    """The backend is temporarily unavailable (model cold-start)."""

    def __init__(self, status_code: int, detail: str = ""):
        super().__init__(f"Model issue ({status_code}): {detail}")
        self.status_code = status_code
        self.detail = detail


class ExhaustedRetriesError(GenerationError):
    """The backend stayed unavailable for every allowed attempt."""

    def __init__(self, attempts: int):
        super().__init__(
            f"Backend still unavailable after {attempts} attempts",
            user_message="Model is still loading. Please try again in a minute.",
        )
        self.attempts = attempts


class FatalGenerationError(GenerationError):
    """A non-retryable failure; the original error is kept as ``cause``."""

    def __init__(self, cause: Exception):
        user_message = getattr(cause, "user_message", None) or str(cause)
        super().__init__(str(cause), user_message=user_message)
        self.cause = cause


class BackendRequestError(GenerationError):
    """The request never produced an HTTP response."""


class BackendHTTPError(GenerationError):
    """The backend answered with a non-2xx status that is not transient."""

    def __init__(self, status_code: int, detail: str = ""):
        super().__init__(
            f"Image backend request failed ({status_code}): {detail or 'no details'}"
        )
        self.status_code = status_code
        self.detail = detail


class ResponseDecodeError(GenerationError):
    """Base class for response decoding failures."""


class MalformedResponseError(ResponseDecodeError):
    """The payload could not be parsed as the expected structure."""


class MissingImageDataError(ResponseDecodeError):
    """The payload parsed but carried no inline image data."""


class EmptyImageError(ResponseDecodeError):
    """The decoded image has zero bytes."""


class DeliveryError(ImagineBotError):
    """Posting a message, attachment, reaction or removal failed."""
