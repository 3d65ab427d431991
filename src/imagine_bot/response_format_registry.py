"""Response Format Registry - Plugin System for Image Backend Response Shapes

Enables configuration-driven selection of how backend responses are decoded.
Built-in formats and third-party plugins use this same registration API.

Usage:
    from imagine_bot.response_format_registry import ResponseFormatRegistry, PRIORITY
    from imagine_bot.response_format_plugin import ResponseFormatPlugin

    class MyFormat(ResponseFormatPlugin):
        def decode(self, raw):
            ...

    ResponseFormatRegistry.register(
        id="my-format",
        handler=MyFormat,
        priority=PRIORITY["COMMUNITY"],
    )

    fmt = ResponseFormatRegistry.create("my-format")
"""

import logging
from typing import ClassVar

from imagine_bot.errors import ConfigurationError

logger = logging.getLogger(__name__)

# Priority levels for response formats (higher priority = listed first)
PRIORITY = {
    "BUILTIN": 100,
    "OFFICIAL": 50,
    "COMMUNITY": 10,
}


class ResponseFormatRegistry:
    """Registry for backend response formats.

    Formats are looked up by id; the id comes from configuration
    (``IMAGE_RESPONSE_FORMAT``).
    """

    _formats: ClassVar[dict[str, dict]] = {}

    @classmethod
    def register(
        cls,
        id: str,
        handler: type,
        priority: int = PRIORITY["COMMUNITY"],
        description: str = "",
    ) -> None:
        """Register a response format.

        Args:
            id: Unique format identifier
            handler: Format class (must extend ResponseFormatPlugin)
            priority: Priority level (higher = listed first)
            description: Optional format description

        Raises:
            ValueError: If config is invalid
        """
        if not id:
            raise ValueError("ResponseFormatRegistry.register: id is required")
        if not handler:
            raise ValueError(
                f'ResponseFormatRegistry.register: handler is required for "{id}"'
            )
        if not isinstance(handler, type):
            raise ValueError(
                f'ResponseFormatRegistry.register: handler must be a class for "{id}"'
            )

        if id in cls._formats:
            logger.warning(f'ResponseFormatRegistry: Overwriting existing format "{id}"')

        cls._formats[id] = {
            "id": id,
            "handler": handler,
            "priority": priority,
            "description": description,
        }

        logger.debug(f"[ResponseFormatRegistry] Registered format: {id}")

    @classmethod
    def find_format(cls, format_id: str) -> dict | None:
        """Get a format config by ID.

        Args:
            format_id: Format ID

        Returns:
            Format config dict, or None if not found
        """
        _load_builtin_formats()
        return cls._formats.get(format_id)

    @classmethod
    def get_all_formats(cls) -> list[dict]:
        """Get all registered formats, highest priority first."""
        _load_builtin_formats()
        return sorted(cls._formats.values(), key=lambda f: f["priority"], reverse=True)

    @classmethod
    def create(cls, format_id: str):
        """Instantiate the format registered under ``format_id``.

        Raises:
            ConfigurationError: If no such format is registered
        """
        format_config = cls.find_format(format_id)
        if format_config is None:
            raise ConfigurationError(f"Unknown response format '{format_id}'")
        return format_config["handler"]()


def _load_builtin_formats() -> None:
    # Importing the plugins package registers the built-in formats.
    import imagine_bot.plugins  # noqa: F401
