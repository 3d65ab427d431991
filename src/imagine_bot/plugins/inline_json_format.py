"""Inline JSON Response Format Plugin

Handles backends that embed base64 image data in a JSON document, in the
Gemini ``generateContent`` shape:

    {"candidates": [{"content": {"parts": [
        {"text": "..."},
        {"inlineData": {"mimeType": "image/png", "data": "<base64>"}}
    ]}}]}

The shape is validated with pydantic so that any deviation fails with a named
decode error instead of silently reading missing fields.
"""

import base64
import binascii
import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from imagine_bot.errors import MalformedResponseError, MissingImageDataError
from imagine_bot.models import GeneratedImage, RawResponse
from imagine_bot.response_format_plugin import DEFAULT_MIME_TYPE, ResponseFormatPlugin
from imagine_bot.response_format_registry import PRIORITY, ResponseFormatRegistry

logger = logging.getLogger(__name__)


# --- Response schema ---


class InlineData(BaseModel):
    """Base64 payload with its MIME type."""

    model_config = ConfigDict(populate_by_name=True)

    mime_type: str | None = Field(default=None, alias="mimeType")
    data: str


class Part(BaseModel):
    """One part of a candidate: text, inline data, or both absent."""

    model_config = ConfigDict(populate_by_name=True)

    text: str | None = None
    inline_data: InlineData | None = Field(default=None, alias="inlineData")


class Content(BaseModel):
    parts: list[Part] = Field(default_factory=list)


class Candidate(BaseModel):
    content: Content | None = None


class InlineImageResponse(BaseModel):
    """Top-level ``generateContent`` response."""

    candidates: list[Candidate] = Field(default_factory=list)


class InlineJsonResponseFormat(ResponseFormatPlugin):
    """Base64 image embedded in a JSON candidates/parts document."""

    def build_url(self, api_url: str, model: str) -> str:
        return f"{super().build_url(api_url, model)}:generateContent"

    def build_payload(self, prompt: str) -> dict:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"responseModalities": ["TEXT", "IMAGE"]},
        }

    def build_headers(self, credentials: str) -> dict:
        return {
            "x-goog-api-key": credentials,
            "Content-Type": "application/json",
        }

    def decode(self, raw: RawResponse) -> GeneratedImage:
        try:
            response = InlineImageResponse.model_validate_json(raw.body)
        except ValidationError as e:
            raise MalformedResponseError(
                f"Unexpected response structure: {e.error_count()} validation error(s)",
                user_message="The image backend returned an unexpected response.",
            ) from e

        inline_data = self._find_inline_data(response)
        if inline_data is None:
            raise MissingImageDataError(
                "No inline image data in response",
                user_message="The image backend did not return an image.",
            )

        try:
            data = base64.b64decode(inline_data.data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise MalformedResponseError(
                f"Inline image data is not valid base64: {e}",
                user_message="The image backend returned an unexpected response.",
            ) from e

        mime_type = inline_data.mime_type or DEFAULT_MIME_TYPE
        image = GeneratedImage(data=data, mime_type=mime_type)
        logger.info(f"[imagine] Image generated ({image.byte_length} bytes, {mime_type})")
        return image

    @staticmethod
    def _find_inline_data(response: InlineImageResponse) -> InlineData | None:
        for candidate in response.candidates:
            if candidate.content is None:
                continue
            for part in candidate.content.parts:
                if part.inline_data is not None:
                    return part.inline_data
        return None


ResponseFormatRegistry.register(
    id="inline-json",
    handler=InlineJsonResponseFormat,
    priority=PRIORITY["BUILTIN"],
    description="Base64 image in a JSON candidates/parts document (Gemini)",
)
