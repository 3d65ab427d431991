"""Auto-detecting Response Format Plugin

Picks the decoder per response: JSON bodies go through the inline JSON format,
everything else is treated as raw image bytes. Requests are phrased the
Hugging Face way.
"""

from imagine_bot.models import GeneratedImage, RawResponse
from imagine_bot.plugins.binary_format import BinaryResponseFormat
from imagine_bot.plugins.inline_json_format import InlineJsonResponseFormat
from imagine_bot.response_format_plugin import ResponseFormatPlugin, parse_mime_type
from imagine_bot.response_format_registry import PRIORITY, ResponseFormatRegistry


class AutoResponseFormat(ResponseFormatPlugin):
    """Chooses binary or inline JSON decoding from the response content type."""

    def __init__(self):
        self._binary = BinaryResponseFormat()
        self._inline_json = InlineJsonResponseFormat()

    def decode(self, raw: RawResponse) -> GeneratedImage:
        mime_type = parse_mime_type(raw.content_type)
        if mime_type is not None and mime_type.endswith("json"):
            return self._inline_json.decode(raw)
        return self._binary.decode(raw)


ResponseFormatRegistry.register(
    id="auto",
    handler=AutoResponseFormat,
    priority=PRIORITY["OFFICIAL"],
    description="Detect binary or inline JSON from the response content type",
)
