"""Configuration module for imagine-bot.

Configuration is built once at process start and passed into the backend
client, the orchestrator and the webhook app. Nothing reads the environment
after that.

Sources, lowest precedence first:
1. Built-in defaults (Hugging Face Inference API, FLUX.1-schnell)
2. Optional config.yaml (non-secret settings only)
3. Environment variables

Key design principles:
- Config file is optional (the bot runs from environment alone)
- Secrets are only ever read from environment variables
- A missing API token disables /imagine but leaves other commands working
- Validation happens at startup to fail fast with clear errors
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path

from ruamel.yaml import YAML

from imagine_bot.errors import ConfigurationError
from imagine_bot.response_format_registry import ResponseFormatRegistry

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "black-forest-labs/FLUX.1-schnell"
DEFAULT_API_URL = "https://api-inference.huggingface.co/models"
DEFAULT_RESPONSE_FORMAT = "binary"
DEFAULT_REQUEST_TIMEOUT = 120.0
DEFAULT_CHAT_API_URL = "http://localhost:8787"
DEFAULT_API_KEY_ENV_VAR = "HF_API_TOKEN"

NOT_CONFIGURED = "Image generation is not configured. Please set HF_API_TOKEN."

# config.yaml key -> BotConfig field
_YAML_FIELDS = {
    "model": "model",
    "apiUrl": "api_url",
    "responseFormat": "response_format",
    "requestTimeout": "request_timeout",
    "chatApiUrl": "chat_api_url",
}

# environment variable -> BotConfig field
_ENV_FIELDS = {
    "HF_MODEL": "model",
    "HF_API_URL": "api_url",
    "IMAGE_RESPONSE_FORMAT": "response_format",
    "IMAGE_REQUEST_TIMEOUT": "request_timeout",
    "CHAT_API_URL": "chat_api_url",
    "CHAT_BOT_TOKEN": "chat_bot_token",
    "WEBHOOK_SECRET": "webhook_secret",
}


@dataclass(frozen=True)
class BotConfig:
    """Process-wide, read-only configuration."""

    api_token: str | None = None  # Backend credential; None disables /imagine
    model: str = DEFAULT_MODEL
    api_url: str = DEFAULT_API_URL
    response_format: str = DEFAULT_RESPONSE_FORMAT  # Id in ResponseFormatRegistry
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT  # Seconds per backend call
    chat_api_url: str = DEFAULT_CHAT_API_URL
    chat_bot_token: str | None = None
    webhook_secret: str | None = None

    @property
    def generation_enabled(self) -> bool:
        """Whether image generation can be attempted at all."""
        return bool(self.api_token)

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        base: "BotConfig | None" = None,
        api_key_env_var: str = DEFAULT_API_KEY_ENV_VAR,
    ) -> "BotConfig":
        """Build config from environment variables.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``
            base: Config whose values are used where a variable is unset
            api_key_env_var: Variable holding the backend API token

        Returns:
            BotConfig with environment overrides applied
        """
        if environ is None:
            environ = os.environ
        config = base or cls()

        overrides: dict = {}
        token = environ.get(api_key_env_var)
        if token:
            overrides["api_token"] = token

        for env_var, field_name in _ENV_FIELDS.items():
            value = environ.get(env_var)
            if value:
                overrides[field_name] = value

        if "request_timeout" in overrides:
            overrides["request_timeout"] = _parse_timeout(
                overrides["request_timeout"], "IMAGE_REQUEST_TIMEOUT"
            )

        return replace(config, **overrides)

    @classmethod
    def load(
        cls,
        config_path: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> "BotConfig":
        """Load configuration from an optional config.yaml plus the environment.

        Args:
            config_path: Path to config.yaml. Must exist when given; the default
                ./config.yaml is optional
            environ: Mapping to read secrets and overrides from

        Returns:
            Validated BotConfig

        Raises:
            ConfigurationError: If the file or the resulting config is invalid
        """
        if config_path is None:
            config_path = Path.cwd() / "config.yaml"
        elif not config_path.exists():
            raise ConfigurationError(f"Config file not found: {config_path}")

        base = cls()
        api_key_env_var = DEFAULT_API_KEY_ENV_VAR

        if config_path.exists():
            yaml = YAML(typ="safe")
            with config_path.open() as f:
                data = yaml.load(f)

            if data is None:
                data = {}
            if not isinstance(data, dict):
                raise ConfigurationError(
                    f"Config file {config_path} must contain a mapping"
                )

            file_values = {}
            for key, field_name in _YAML_FIELDS.items():
                if key in data and data[key] is not None:
                    file_values[field_name] = data[key]

            unknown = set(data) - set(_YAML_FIELDS) - {"apiKeyEnvVar"}
            for key in sorted(unknown):
                logger.warning(f"Ignoring unknown config key: {key}")

            if "request_timeout" in file_values:
                file_values["request_timeout"] = _parse_timeout(
                    file_values["request_timeout"], "requestTimeout"
                )
            api_key_env_var = data.get("apiKeyEnvVar") or DEFAULT_API_KEY_ENV_VAR
            base = replace(base, **file_values)
            logger.info(f"Loaded config from {config_path}")
        else:
            logger.info(f"No config file at {config_path}, using environment only")

        config = cls.from_env(environ, base=base, api_key_env_var=api_key_env_var)
        config.validate()
        return config

    def validate(self) -> None:
        """Validate settings that would otherwise fail on first use.

        A missing API token is not an error: generation is simply disabled.

        Raises:
            ConfigurationError: If any setting is invalid
        """
        if ResponseFormatRegistry.find_format(self.response_format) is None:
            known = ", ".join(
                f["id"] for f in ResponseFormatRegistry.get_all_formats()
            )
            raise ConfigurationError(
                f"Unknown response format '{self.response_format}' "
                f"(known formats: {known})"
            )
        if self.request_timeout <= 0:
            raise ConfigurationError("Request timeout must be positive")
        if not self.model:
            raise ConfigurationError("Model id cannot be empty")

        if not self.generation_enabled:
            logger.warning(
                "[imagine] No API token configured; image generation is disabled"
            )


def _parse_timeout(value, source: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(
            f"{source} must be a number of seconds, got {value!r}"
        ) from None
