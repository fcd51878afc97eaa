"""Configuration system for provider credentials and the model catalog."""

from .loader import (
    load_config,
    load_config_file,
    load_config_from_env,
    load_config_from_yaml,
    ProfileConfig,
    OpenAIConfig,
    OpenRouterConfig,
    AnthropicConfig,
)
from .factory import create_provider

__all__ = [
    # Loader
    "load_config",
    "load_config_file",
    "load_config_from_env",
    "load_config_from_yaml",
    "ProfileConfig",
    "OpenAIConfig",
    "OpenRouterConfig",
    "AnthropicConfig",
    # Factory
    "create_provider",
]
