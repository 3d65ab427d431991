"""Response Format Plugin Base Class

Base class for image backend response formats. Backends disagree on how they
return an image: some send raw bytes with a Content-Type header, others embed
base64 data in a JSON document. A format plugin describes one such backend
shape: how to address the model, how to phrase the request and how to decode
what comes back.

Example:
    class MyFormat(ResponseFormatPlugin):
        def decode(self, raw):
            payload = json.loads(raw.body)
            return GeneratedImage(
                data=base64.b64decode(payload["image"]),
                mime_type="image/png",
            )

    ResponseFormatRegistry.register(
        id="my-format",
        handler=MyFormat,
        priority=PRIORITY["COMMUNITY"],
    )
"""

import logging
from abc import ABC, abstractmethod
from urllib.parse import quote

from imagine_bot.models import GeneratedImage, RawResponse

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "image/png"


def parse_mime_type(content_type: str | None) -> str | None:
    """Strip parameters from a Content-Type header value.

    >>> parse_mime_type("image/jpeg; charset=binary")
    'image/jpeg'
    """
    if not content_type:
        return None
    mime_type = content_type.split(";")[0].strip().lower()
    return mime_type or None


class ResponseFormatPlugin(ABC):
    """Base class for backend response formats.

    The request-side hooks have Hugging Face Inference API defaults; subclasses
    override them when their backend differs. All formats must implement
    ``decode()``.
    """

    def build_url(self, api_url: str, model: str) -> str:
        """Endpoint for a model: ``<api_url>/<model>``."""
        return f"{api_url.rstrip('/')}/{quote(model, safe='/')}"

    def build_payload(self, prompt: str) -> dict:
        """JSON request body carrying the prompt."""
        return {"inputs": prompt}

    def build_headers(self, credentials: str) -> dict:
        """Request headers carrying the credentials."""
        return {
            "Authorization": f"Bearer {credentials}",
            "Content-Type": "application/json",
        }

    @abstractmethod
    def decode(self, raw: RawResponse) -> GeneratedImage:
        """Decode a successful backend response into image bytes.

        Args:
            raw: RawResponse with a 2xx status

        Returns:
            GeneratedImage with non-empty data

        Raises:
            MalformedResponseError: If the payload is not the expected structure
            MissingImageDataError: If no image is present where expected
            EmptyImageError: If the decoded image has zero bytes
        """
        raise NotImplementedError(
            "ResponseFormatPlugin.decode() must be implemented by subclass"
        )
