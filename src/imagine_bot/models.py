"""Data model for the bot: inbound events and the generation pipeline values."""

from dataclasses import dataclass, field
from datetime import datetime, timezone

from pydantic import BaseModel, Field

from imagine_bot.errors import EmptyImageError

# --- Inbound events (webhook bodies) ---


class CommandInvocation(BaseModel):
    """A slash command sent to the bot."""

    command: str  # Without the leading slash, e.g. "imagine"
    args: list[str] = Field(default_factory=list)
    channel_id: str
    user_id: str


class MessageEvent(BaseModel):
    """A plain chat message seen by the bot."""

    message: str
    channel_id: str
    event_id: str
    created_at: datetime


class ReactionEvent(BaseModel):
    """A reaction added in a channel the bot is in."""

    reaction: str
    channel_id: str


# --- Generation pipeline ---


@dataclass(frozen=True)
class GenerationRequest:
    """One /imagine request. Discarded once the pipeline completes."""

    prompt: str
    requester_id: str
    submitted_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    def __post_init__(self):
        if not self.prompt.strip():
            raise ValueError("GenerationRequest prompt cannot be blank")


@dataclass(frozen=True)
class GeneratedImage:
    """Decoded image bytes, handed straight to the outbound attachment call."""

    data: bytes
    mime_type: str = "image/png"

    def __post_init__(self):
        if len(self.data) == 0:
            raise EmptyImageError("Received empty image data from the backend")

    @property
    def byte_length(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class RawResponse:
    """Unparsed view of a single backend HTTP exchange."""

    status_code: int
    content_type: str | None
    body: bytes

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    def text(self, limit: int = 500) -> str:
        """Body as text for logs and error details, truncated to ``limit``."""
        return self.body[:limit].decode("utf-8", errors="replace")


@dataclass(frozen=True)
class LoadingNotice:
    """Handle to the temporary "generating..." message."""

    message_id: str
    channel_id: str


@dataclass(frozen=True)
class Attachment:
    """A file sent along with an outbound chat message."""

    data: bytes
    filename: str
    mime_type: str
