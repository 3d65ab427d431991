"""Binary Response Format Plugin

Handles backends that return the image itself as the response body, with its
MIME type in the Content-Type header (Hugging Face Inference API).
"""

import logging

from imagine_bot.errors import MissingImageDataError
from imagine_bot.models import GeneratedImage, RawResponse
from imagine_bot.response_format_plugin import (
    DEFAULT_MIME_TYPE,
    ResponseFormatPlugin,
    parse_mime_type,
)
from imagine_bot.response_format_registry import PRIORITY, ResponseFormatRegistry

logger = logging.getLogger(__name__)

# Generic binary type some backends send for image bodies
_GENERIC_BINARY = "application/octet-stream"


class BinaryResponseFormat(ResponseFormatPlugin):
    """Raw image bytes in the body, MIME type in the header."""

    def decode(self, raw: RawResponse) -> GeneratedImage:
        mime_type = parse_mime_type(raw.content_type)

        if mime_type and not (
            mime_type.startswith("image/") or mime_type == _GENERIC_BINARY
        ):
            raise MissingImageDataError(
                f"Expected image data but the backend sent {mime_type}: {raw.text(200)}",
                user_message="The image backend did not return an image.",
            )

        if mime_type is None or mime_type == _GENERIC_BINARY:
            mime_type = DEFAULT_MIME_TYPE

        image = GeneratedImage(data=raw.body, mime_type=mime_type)
        logger.info(f"[imagine] Image generated ({image.byte_length} bytes, {mime_type})")
        return image


ResponseFormatRegistry.register(
    id="binary",
    handler=BinaryResponseFormat,
    priority=PRIORITY["BUILTIN"],
    description="Raw image bytes with Content-Type header (Hugging Face)",
)
