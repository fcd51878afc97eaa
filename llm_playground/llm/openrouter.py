"""OpenRouter request headers and generation stats lookup."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx
from openai.types import CompletionUsage

if TYPE_CHECKING:
    from ..config.loader import OpenRouterConfig

logger = logging.getLogger(__name__)


def openrouter_headers(config: OpenRouterConfig) -> dict[str, str]:
    """Headers OpenRouter expects on both completion and stats requests."""
    return {
        "Authorization": f"Bearer {config.api_key}",
        "HTTP-Referer": config.referer,
        "X-Title": config.title,
        "Content-Type": "application/json",
    }


async def fetch_generation_usage(
    client: httpx.AsyncClient,
    config: OpenRouterConfig,
    generation_id: str,
) -> CompletionUsage:
    """
    Query token counts for a finished generation.

    Args:
        client: HTTP client used for the request
        config: OpenRouter settings (base URL and credentials)
        generation_id: The `id` of the completion response

    Returns:
        Usage built from the generation's tokens_prompt/tokens_completion

    Raises:
        httpx.HTTPStatusError: If the stats endpoint returns an error status
    """
    url = f"{config.base_url.rstrip('/')}/generation"
    logger.debug(f"Fetching OpenRouter generation stats for {generation_id}")

    response = await client.get(
        url,
        params={"id": generation_id},
        headers=openrouter_headers(config),
    )
    response.raise_for_status()

    data = response.json().get("data") or {}
    prompt_tokens = data.get("tokens_prompt")
    completion_tokens = data.get("tokens_completion")

    total_tokens = None
    if prompt_tokens is not None and completion_tokens is not None:
        total_tokens = prompt_tokens + completion_tokens

    # model_construct: the stats endpoint may omit either count
    return CompletionUsage.model_construct(
        prompt_tokens=prompt_tokens,
        completion_tokens=completion_tokens,
        total_tokens=total_tokens,
    )
