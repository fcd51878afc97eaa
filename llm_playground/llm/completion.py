"""Convenience functions for running prompts."""

from __future__ import annotations

from collections.abc import AsyncIterator, Mapping
from typing import TYPE_CHECKING, Any

from openai.types.chat import ChatCompletion, ChatCompletionChunk

from .dispatcher import PromptDispatcher
from .request import CompletionParams

if TYPE_CHECKING:
    from ..config.loader import ProfileConfig


async def run_ai_model(
    content: str | list[Any],
    extra: CompletionParams | dict[str, Any] | None,
    variables: Mapping[str, str] | None,
    model: str,
    stream: bool = False,
    config: ProfileConfig | None = None,
) -> ChatCompletion | AsyncIterator[ChatCompletionChunk]:
    """
    Run a prompt once with a throwaway dispatcher.

    Args:
        content: A plain string or a list of message records
        extra: Sampling and tool parameters
        variables: Template variables, or None to skip compilation
        model: Model identifier
        stream: Stream partial results
        config: Provider credentials. Defaults to load_config().

    Returns:
        The completion, or when streaming an async iterator that closes
        the provider client once exhausted

    Example:
        response = await run_ai_model("Hello {{name}}", {"temperature": 0}, {"name": "Ada"}, "gpt-4o")
    """
    if stream:
        return _stream_ai_model(content, extra, variables, model, config)

    async with PromptDispatcher(config) as dispatcher:
        return await dispatcher.run(content, extra, variables, model)


async def _stream_ai_model(
    content: str | list[Any],
    extra: CompletionParams | dict[str, Any] | None,
    variables: Mapping[str, str] | None,
    model: str,
    config: ProfileConfig | None,
) -> AsyncIterator[ChatCompletionChunk]:
    async with PromptDispatcher(config) as dispatcher:
        chunks = await dispatcher.run(content, extra, variables, model, stream=True)
        async for chunk in chunks:
            yield chunk
