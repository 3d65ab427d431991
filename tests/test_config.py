"""Unit tests for BotConfig - no API calls required."""

import pytest

from imagine_bot.config import DEFAULT_API_URL, DEFAULT_MODEL, BotConfig
from imagine_bot.errors import ConfigurationError

# --- from_env tests ---


def test_defaults():
    """Test built-in defaults point at the Hugging Face FLUX model."""
    config = BotConfig()
    assert config.model == DEFAULT_MODEL == "black-forest-labs/FLUX.1-schnell"
    assert config.api_url == DEFAULT_API_URL
    assert config.response_format == "binary"
    assert config.api_token is None
    assert not config.generation_enabled


def test_from_env_reads_variables():
    """Test environment variables override the defaults."""
    config = BotConfig.from_env(
        {
            "HF_API_TOKEN": "hf_abc",
            "HF_MODEL": "stabilityai/sdxl-turbo",
            "HF_API_URL": "https://example.com/models",
            "IMAGE_RESPONSE_FORMAT": "auto",
            "IMAGE_REQUEST_TIMEOUT": "45",
            "CHAT_API_URL": "https://chat.example.com",
            "CHAT_BOT_TOKEN": "bot-token",
            "WEBHOOK_SECRET": "s3cret",
        }
    )

    assert config.api_token == "hf_abc"
    assert config.generation_enabled
    assert config.model == "stabilityai/sdxl-turbo"
    assert config.api_url == "https://example.com/models"
    assert config.response_format == "auto"
    assert config.request_timeout == 45.0
    assert config.chat_api_url == "https://chat.example.com"
    assert config.chat_bot_token == "bot-token"
    assert config.webhook_secret == "s3cret"


def test_from_env_ignores_empty_values():
    """Test empty variables fall back to defaults."""
    config = BotConfig.from_env({"HF_API_TOKEN": "", "HF_MODEL": ""})
    assert config.api_token is None
    assert config.model == DEFAULT_MODEL


def test_from_env_bad_timeout():
    """Test a non-numeric timeout fails with a clear message."""
    with pytest.raises(ConfigurationError, match="IMAGE_REQUEST_TIMEOUT"):
        BotConfig.from_env({"IMAGE_REQUEST_TIMEOUT": "soon"})


def test_config_is_frozen():
    """Test the config cannot be mutated after construction."""
    config = BotConfig()
    with pytest.raises(AttributeError):
        config.api_token = "x"  # type: ignore[misc]


# --- load tests ---


def test_load_without_file_uses_environment(tmp_path, monkeypatch):
    """Test a missing default ./config.yaml is not an error."""
    monkeypatch.chdir(tmp_path)
    config = BotConfig.load(environ={"HF_API_TOKEN": "hf_x"})
    assert config.api_token == "hf_x"
    assert config.model == DEFAULT_MODEL


def test_load_without_token_disables_generation(tmp_path, monkeypatch):
    """Test a missing token loads fine but disables generation."""
    monkeypatch.chdir(tmp_path)
    config = BotConfig.load(environ={})
    assert not config.generation_enabled


def test_load_explicit_missing_file(tmp_path):
    """Test a config path given explicitly must exist."""
    with pytest.raises(ConfigurationError, match="Config file not found"):
        BotConfig.load(tmp_path / "typo.yaml", environ={})


def test_load_yaml_values(tmp_path):
    """Test loading non-secret settings from YAML."""
    config_file = tmp_path / "config.yaml"
    config_file.write_text("""
model: "stabilityai/stable-diffusion-xl-base-1.0"
apiUrl: "https://hf.example.com/models"
responseFormat: "auto"
requestTimeout: 30
chatApiUrl: "https://chat.example.com/api"
""")

    config = BotConfig.load(config_file, environ={"HF_API_TOKEN": "hf_x"})

    assert config.model == "stabilityai/stable-diffusion-xl-base-1.0"
    assert config.api_url == "https://hf.example.com/models"
    assert config.response_format == "auto"
    assert config.request_timeout == 30.0
    assert config.chat_api_url == "https://chat.example.com/api"


def test_load_environment_overrides_yaml(tmp_path):
    """Test environment variables win over config.yaml."""
    config_file = tmp_path / "config.yaml"
    config_file.write_text('model: "from/yaml"\n')

    config = BotConfig.load(config_file, environ={"HF_MODEL": "from/env"})

    assert config.model == "from/env"


def test_load_custom_api_key_env_var(tmp_path):
    """Test apiKeyEnvVar names the variable holding the token."""
    config_file = tmp_path / "config.yaml"
    config_file.write_text('apiKeyEnvVar: "MY_IMAGE_TOKEN"\n')

    config = BotConfig.load(
        config_file, environ={"MY_IMAGE_TOKEN": "custom", "HF_API_TOKEN": "ignored"}
    )

    assert config.api_token == "custom"


def test_load_empty_file(tmp_path):
    """Test an empty config.yaml behaves like no file."""
    config_file = tmp_path / "config.yaml"
    config_file.write_text("")

    config = BotConfig.load(config_file, environ={})
    assert config.model == DEFAULT_MODEL


def test_load_non_mapping(tmp_path):
    """Test a YAML list is rejected."""
    config_file = tmp_path / "config.yaml"
    config_file.write_text("- one\n- two\n")

    with pytest.raises(ConfigurationError, match="must contain a mapping"):
        BotConfig.load(config_file, environ={})


def test_load_unknown_key_warns(tmp_path, caplog):
    """Test unknown keys are logged and ignored."""
    config_file = tmp_path / "config.yaml"
    config_file.write_text("colour: blue\n")

    BotConfig.load(config_file, environ={})

    assert "Ignoring unknown config key: colour" in caplog.text


def test_load_unknown_response_format(tmp_path):
    """Test validation rejects unregistered response formats."""
    config_file = tmp_path / "config.yaml"
    config_file.write_text("")
    with pytest.raises(ConfigurationError, match="Unknown response format 'png-url'"):
        BotConfig.load(
            config_file, environ={"IMAGE_RESPONSE_FORMAT": "png-url"}
        )


def test_validate_non_positive_timeout():
    """Test validation rejects a zero timeout."""
    with pytest.raises(ConfigurationError, match="timeout must be positive"):
        BotConfig(request_timeout=0).validate()


def test_validate_warns_when_generation_disabled(caplog):
    """Test a missing token is logged as a warning, not raised."""
    BotConfig().validate()
    assert "image generation is disabled" in caplog.text
