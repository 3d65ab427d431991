"""Backend plugins for imagine-bot.

This package contains the built-in image backend response formats.
"""

# Import built-in response format plugins (registers them)
from imagine_bot.plugins import (
    auto_format,  # noqa: F401
    binary_format,  # noqa: F401
    inline_json_format,  # noqa: F401
)
