"""Configuration loader with Pydantic validation and env var expansion."""

import logging
import os
import re
from pathlib import Path

import yaml
from pydantic import BaseModel

from .. import settings
from ..llm.models import ModelDescriptor

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "models.yaml"


class OpenAIConfig(BaseModel):
    """Credentials for the primary provider."""

    api_key: str | None = None


class OpenRouterConfig(BaseModel):
    """Credentials and routing headers for OpenRouter."""

    api_key: str | None = None
    base_url: str = settings.OPENROUTER_BASE_URL
    referer: str = settings.OPENROUTER_REFERER
    title: str = settings.OPENROUTER_TITLE


class AnthropicConfig(BaseModel):
    """Credentials for the Anthropic API."""

    api_key: str | None = None
    default_max_tokens: int = settings.ANTHROPIC_DEFAULT_MAX_TOKENS


class ProfileConfig(BaseModel):
    """Configuration profile containing all provider configs."""

    openai: OpenAIConfig = OpenAIConfig()
    openrouter: OpenRouterConfig = OpenRouterConfig()
    anthropic: AnthropicConfig = AnthropicConfig()
    max_retries: int = 0  # SDK-level retries; the dispatcher never retries itself
    timeout: float | None = None  # None keeps each SDK's own default


class ConfigFile(BaseModel):
    """Root configuration file structure."""

    profiles: dict[str, ProfileConfig]
    models: list[ModelDescriptor] = []


def expand_env_vars(value: str) -> str | None:
    """Expand ${VAR} references in string with environment variables.

    A value that is only a reference to an unset variable becomes None,
    so optional credentials stay unset instead of holding the literal text.

    Args:
        value: String potentially containing env var references

    Returns:
        String with env vars expanded
    """
    if not isinstance(value, str):
        return value

    # Replace ${VAR} style references
    pattern = r"\$\{([^}]+)\}"

    whole = re.fullmatch(pattern, value)
    if whole and whole.group(1) not in os.environ:
        return None

    def replacer(match):
        var_name = match.group(1)
        return os.environ.get(var_name, match.group(0))

    return re.sub(pattern, replacer, value)


def expand_env_vars_recursive(data):
    """Recursively expand env vars in nested dict/list structures.

    Args:
        data: Dict, list, or primitive value

    Returns:
        Data structure with all env vars expanded
    """
    if isinstance(data, dict):
        return {k: expand_env_vars_recursive(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [expand_env_vars_recursive(item) for item in data]
    elif isinstance(data, str):
        return expand_env_vars(data)
    else:
        return data


def _drop_none(data):
    """Remove None values so pydantic field defaults apply."""
    if isinstance(data, dict):
        return {k: _drop_none(v) for k, v in data.items() if v is not None}
    return data


def load_config_file(config_path: Path = DEFAULT_CONFIG_PATH) -> ConfigFile:
    """Parse and validate a whole config file.

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValidationError: If config is invalid
    """
    with open(config_path) as f:
        raw_data = yaml.safe_load(f)

    # Expand environment variables
    expanded_data = _drop_none(expand_env_vars_recursive(raw_data))

    return ConfigFile(**expanded_data)


def load_config_from_yaml(config_path: Path, profile_name: str) -> ProfileConfig:
    """Load configuration from YAML file.

    Args:
        config_path: Path to config YAML file
        profile_name: Name of profile to load

    Returns:
        ProfileConfig for the requested profile

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValidationError: If config is invalid
        KeyError: If profile doesn't exist
    """
    config_file = load_config_file(config_path)

    # Get requested profile
    if profile_name not in config_file.profiles:
        available = ", ".join(config_file.profiles.keys())
        raise KeyError(
            f"Profile '{profile_name}' not found. " f"Available profiles: {available}"
        )

    return config_file.profiles[profile_name]


def load_config_from_env() -> ProfileConfig:
    """Load configuration from environment variables (fallback mode).

    Returns:
        ProfileConfig constructed from environment variables
    """
    return ProfileConfig(
        openai=OpenAIConfig(api_key=os.environ.get("OPENAI_API_KEY")),
        openrouter=OpenRouterConfig(
            api_key=os.environ.get("OPENROUTER_API_KEY"),
            base_url=os.environ.get("OPENROUTER_BASE_URL", settings.OPENROUTER_BASE_URL),
        ),
        anthropic=AnthropicConfig(api_key=os.environ.get("ANTHROPIC_API_KEY")),
    )


def load_config(
    profile: str | None = None,
    config_path: Path | None = None,
) -> ProfileConfig:
    """Load configuration from YAML file or environment variables.

    This is the main entry point for loading configuration. It tries to load
    from a YAML config file first, and falls back to environment variables
    if the file doesn't exist or can't be parsed.

    Args:
        profile: Profile name to load. If None, uses PLAYGROUND_PROFILE env var
                or "default".
        config_path: Path to config file. If None, uses the packaged
                    config/models.yaml.

    Returns:
        ProfileConfig with all provider configurations

    Raises:
        KeyError: If requested profile doesn't exist
    """
    if profile is None:
        profile = os.environ.get("PLAYGROUND_PROFILE", settings.PLAYGROUND_PROFILE)

    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if not config_path.exists():
        logger.info(f"Config file {config_path} not found, using environment variables")
        return load_config_from_env()

    try:
        return load_config_from_yaml(config_path, profile)
    except KeyError:
        raise
    except Exception as e:
        logger.warning(f"Failed to load config from {config_path}: {e}")
        logger.warning("Falling back to environment variables...")
        return load_config_from_env()
