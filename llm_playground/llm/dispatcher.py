"""Prompt dispatch: compile, normalize, route to a provider."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Mapping
from contextlib import AsyncExitStack
from typing import TYPE_CHECKING, Any

import httpx
from openai.types.chat import ChatCompletion, ChatCompletionChunk

from ..config.factory import create_provider
from .messages import convert_input_to_messages
from .models import ModelRegistry, ProviderKind, default_registry
from .request import CompletionParams, build_completion_request
from .templates import compile_prompt

if TYPE_CHECKING:
    from ..config.loader import ProfileConfig
    from .protocols import CompletionProvider

logger = logging.getLogger(__name__)


class PromptDispatcher:
    """
    Runs a prompt against whichever provider the model is catalogued under.

    Provider clients are opened on first use and closed when the
    dispatcher's context exits. A streamed result must be consumed
    before that.

    Usage:
        async with PromptDispatcher(load_config()) as dispatcher:
            response = await dispatcher.run("Hello {{name}}", None, {"name": "Ada"}, "gpt-4o")
    """

    def __init__(
        self,
        config: ProfileConfig | None = None,
        registry: ModelRegistry | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize the dispatcher.

        Args:
            config: Provider credentials. Defaults to load_config().
            registry: Model catalog. Defaults to the packaged catalog.
            http_client: Optional transport shared by every provider client
        """
        if config is None:
            from ..config.loader import load_config

            config = load_config()

        self.config = config
        self.registry = registry or default_registry()
        self.http_client = http_client
        self._providers: dict[ProviderKind, CompletionProvider] = {}
        self._stack: AsyncExitStack | None = None

    async def __aenter__(self) -> "PromptDispatcher":
        self._stack = AsyncExitStack()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._stack:
            await self._stack.aclose()
            self._stack = None
        self._providers.clear()

    async def provider_for(self, kind: ProviderKind) -> CompletionProvider:
        """Return the entered provider handler for a kind, opening it on first use."""
        if self._stack is None:
            raise RuntimeError(
                "Dispatcher not initialized. Use 'async with' context manager."
            )

        if kind not in self._providers:
            provider = create_provider(kind, self.config, http_client=self.http_client)
            self._providers[kind] = await self._stack.enter_async_context(provider)

        return self._providers[kind]

    async def run(
        self,
        content: str | list[Any],
        extra: CompletionParams | dict[str, Any] | None,
        variables: Mapping[str, str] | None,
        model: str,
        stream: bool = False,
    ) -> ChatCompletion | AsyncIterator[ChatCompletionChunk]:
        """
        Compile a prompt and run it on the model's provider.

        Args:
            content: A plain string or a list of message records
            extra: Sampling and tool parameters; unset ones are not sent
            variables: Template variables for {{name}} placeholders, or None
            model: Model identifier, looked up in the catalog
            stream: Return an async iterator of chunks instead of a completion

        Returns:
            A ChatCompletion, or an async iterator of ChatCompletionChunk
            when streaming
        """
        compiled = compile_prompt(content, variables)
        messages = convert_input_to_messages(compiled)

        kind = self.registry.resolve_provider(model)
        logger.info(f"Dispatching {model} to {kind.value}")

        request = build_completion_request(model, messages, stream=stream, extra=extra)
        logger.debug(
            f"Request parameters: "
            f"{sorted(k for k in request if k not in ('model', 'messages'))}"
        )

        provider = await self.provider_for(kind)
        return await provider.create(request)
