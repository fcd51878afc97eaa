"""Factory functions to create provider handlers from configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx

from ..llm.models import ProviderKind

if TYPE_CHECKING:
    from ..llm.protocols import CompletionProvider
    from .loader import ProfileConfig


def create_provider(
    kind: ProviderKind,
    config: ProfileConfig,
    http_client: httpx.AsyncClient | None = None,
) -> CompletionProvider:
    """Create the handler for a provider kind.

    Args:
        kind: Which provider family to build
        config: Profile holding credentials and client options
        http_client: Optional shared transport, passed to the SDK client

    Returns:
        CompletionProvider instance (not yet entered)

    Raises:
        ValueError: If the provider kind is not supported
    """
    client_options = {
        "max_retries": config.max_retries,
        "timeout": config.timeout,
        "http_client": http_client,
    }

    if kind == ProviderKind.OPENROUTER:
        from ..llm.adapters import OpenRouterProvider

        return OpenRouterProvider(config.openrouter, **client_options)

    elif kind == ProviderKind.ANTHROPIC:
        from ..llm.adapters import AnthropicProvider

        return AnthropicProvider(config.anthropic, **client_options)

    elif kind == ProviderKind.OPENAI:
        from ..llm.adapters import OpenAIProvider

        return OpenAIProvider(config.openai, **client_options)

    else:
        raise ValueError(f"Unsupported provider: {kind}")
