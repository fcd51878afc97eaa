"""Adapter implementations for completion providers."""

from __future__ import annotations

import json
import logging
import time
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Any

import httpx
from anthropic import AsyncAnthropic
from openai import AsyncOpenAI
from openai.types.chat import ChatCompletion, ChatCompletionChunk

from .openrouter import fetch_generation_usage, openrouter_headers
from .protocols import MessageRole

if TYPE_CHECKING:
    from ..config.loader import AnthropicConfig, OpenAIConfig, OpenRouterConfig

logger = logging.getLogger(__name__)


class _SDKProvider:
    """Shared client lifecycle for SDK-backed providers.

    Usage:
        async with OpenAIProvider(config) as provider:
            response = await provider.create(request)
    """

    name = "provider"

    def __init__(
        self,
        max_retries: int = 0,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.max_retries = max_retries
        self.timeout = timeout
        self.http_client = http_client
        self._client: Any = None

    def _client_options(self) -> dict[str, Any]:
        options: dict[str, Any] = {"max_retries": self.max_retries}
        if self.timeout is not None:
            options["timeout"] = self.timeout
        if self.http_client is not None:
            options["http_client"] = self.http_client
        return options

    def _build_client(self) -> Any:
        raise NotImplementedError

    async def __aenter__(self):
        self._client = self._build_client()
        logger.info(f"{self.name} client initialized")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        # An injected http_client belongs to the caller
        if self._client and self.http_client is None:
            await self._client.close()
        self._client = None

    @property
    def client(self) -> Any:
        if self._client is None:
            raise RuntimeError(
                "Client not initialized. Use 'async with' context manager."
            )
        return self._client


def _openai_kwargs(request: dict[str, Any]) -> dict[str, Any]:
    """Request dict as chat.completions.create keyword arguments."""
    kwargs = dict(request)
    # Not a named parameter of the SDK; send it in the body as-is
    top_k = kwargs.pop("top_k", None)
    if top_k is not None:
        kwargs["extra_body"] = {"top_k": top_k}
    return kwargs


class OpenAIProvider(_SDKProvider):
    """
    Adapter for the OpenAI chat completions API.

    Also the default for models with no catalog entry.
    """

    name = "OpenAI"

    def __init__(self, config: OpenAIConfig, **client_options: Any):
        super().__init__(**client_options)
        self.config = config

    def _build_client(self) -> AsyncOpenAI:
        return AsyncOpenAI(api_key=self.config.api_key, **self._client_options())

    async def create(
        self, request: dict[str, Any]
    ) -> ChatCompletion | AsyncIterator[ChatCompletionChunk]:
        """Run a chat completion, streamed if request["stream"] is set."""
        logger.info(
            f"Requesting completion from {self.name} with {request['model']} "
            f"({len(request['messages'])} messages, stream={request['stream']})"
        )

        response = await self.client.chat.completions.create(**_openai_kwargs(request))

        if not request["stream"]:
            logger.info(f"Completion received: {response.id}")
            logger.debug(f"Usage: {response.usage}")

        return response


class OpenRouterProvider(OpenAIProvider):
    """
    Adapter for OpenRouter.

    OpenRouter provides access to many LLMs through an OpenAI-compatible API.
    Its responses don't carry reliable usage, so after a non-streaming
    completion the generation stats endpoint is queried and its token
    counts replace response.usage.
    """

    name = "OpenRouter"

    def __init__(self, config: OpenRouterConfig, **client_options: Any):
        super().__init__(config, **client_options)
        self._stats_client: httpx.AsyncClient | None = None

    def _build_client(self) -> AsyncOpenAI:
        return AsyncOpenAI(
            api_key=self.config.api_key,
            base_url=self.config.base_url,
            default_headers=openrouter_headers(self.config),
            **self._client_options(),
        )

    async def __aenter__(self) -> "OpenRouterProvider":
        await super().__aenter__()
        self._stats_client = self.http_client or httpx.AsyncClient()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._stats_client and self.http_client is None:
            await self._stats_client.aclose()
        self._stats_client = None
        await super().__aexit__(exc_type, exc_val, exc_tb)

    async def create(
        self, request: dict[str, Any]
    ) -> ChatCompletion | AsyncIterator[ChatCompletionChunk]:
        response = await super().create(request)

        if not request["stream"] and response.id:
            response.usage = await fetch_generation_usage(
                self._stats_client, self.config, response.id
            )
            logger.debug(f"OpenRouter usage for {response.id}: {response.usage}")

        return response


# Anthropic stop_reason -> OpenAI finish_reason
FINISH_REASONS = {
    "end_turn": "stop",
    "stop_sequence": "stop",
    "max_tokens": "length",
    "tool_use": "tool_calls",
    "refusal": "content_filter",
}


def _finish_reason(stop_reason: str | None) -> str | None:
    if stop_reason is None:
        return None
    return FINISH_REASONS.get(stop_reason, "stop")


def to_anthropic_messages(
    messages: list[dict[str, Any]],
) -> tuple[str | None, list[dict[str, Any]]]:
    """Split OpenAI-style messages into an Anthropic system prompt and turns.

    Anthropic only knows user and assistant. Function and tool results
    answering an assistant's tool calls become tool_result blocks, matched
    to the pending tool_use ids in order; consecutive results share one
    user turn. Any other function or tool message is a plain user turn.
    """
    system_parts: list[str] = []
    converted: list[dict[str, Any]] = []
    pending_tool_ids: list[str] = []

    for message in messages:
        role = message["role"]
        content = message.get("content")

        if role == MessageRole.SYSTEM.value:
            if content:
                system_parts.append(str(content))
            continue

        if role == MessageRole.ASSISTANT.value:
            tool_calls = message.get("tool_calls")
            if tool_calls:
                blocks: list[dict[str, Any]] = []
                if content:
                    blocks.append({"type": "text", "text": content})
                for call in tool_calls:
                    function = call.get("function", {})
                    blocks.append({
                        "type": "tool_use",
                        "id": call.get("id"),
                        "name": function.get("name"),
                        "input": json.loads(function.get("arguments") or "{}"),
                    })
                converted.append({"role": "assistant", "content": blocks})
                pending_tool_ids = [block["id"] for block in blocks if block["type"] == "tool_use"]
            else:
                converted.append({"role": "assistant", "content": content or ""})
                pending_tool_ids = []
            continue

        if role in (MessageRole.TOOL.value, MessageRole.FUNCTION.value) and pending_tool_ids:
            result = {
                "type": "tool_result",
                "tool_use_id": pending_tool_ids.pop(0),
                "content": content if content is not None else "",
            }
            previous = converted[-1]
            if previous["role"] == "user" and isinstance(previous["content"], list) and all(
                block.get("type") == "tool_result" for block in previous["content"]
            ):
                previous["content"].append(result)
            else:
                converted.append({"role": "user", "content": [result]})
            continue

        pending_tool_ids = []
        converted.append({"role": "user", "content": content or ""})

    system = "\n\n".join(system_parts) if system_parts else None
    return system, converted


def to_anthropic_tools(request: dict[str, Any]) -> list[dict[str, Any]]:
    """Convert OpenAI tools and legacy functions to Anthropic tool definitions."""
    declared = [tool["function"] for tool in request.get("tools") or []]
    functions = request.get("functions")
    if isinstance(functions, list):
        declared += functions

    tools = []
    for function in declared:
        # Legacy functions are passed through unchecked
        if not isinstance(function, dict) or not function.get("name"):
            continue
        tool = {
            "name": function["name"],
            "input_schema": function.get("parameters") or {"type": "object", "properties": {}},
        }
        if function.get("description"):
            tool["description"] = function["description"]
        tools.append(tool)
    return tools


def to_chat_completion(message: Any) -> ChatCompletion:
    """Convert an Anthropic Message into an OpenAI ChatCompletion."""
    text_parts = []
    tool_calls = []
    for block in message.content:
        if block.type == "text":
            text_parts.append(block.text)
        elif block.type == "tool_use":
            tool_calls.append({
                "id": block.id,
                "type": "function",
                "function": {"name": block.name, "arguments": json.dumps(block.input)},
            })

    completion_message: dict[str, Any] = {
        "role": "assistant",
        "content": "".join(text_parts) or None,
    }
    if tool_calls:
        completion_message["tool_calls"] = tool_calls

    input_tokens = message.usage.input_tokens
    output_tokens = message.usage.output_tokens

    return ChatCompletion.model_validate({
        "id": message.id,
        "object": "chat.completion",
        "created": int(time.time()),
        "model": message.model,
        "choices": [{
            "index": 0,
            "finish_reason": _finish_reason(message.stop_reason) or "stop",
            "message": completion_message,
        }],
        "usage": {
            "prompt_tokens": input_tokens,
            "completion_tokens": output_tokens,
            "total_tokens": input_tokens + output_tokens,
        },
    })


class AnthropicProvider(_SDKProvider):
    """
    Adapter for Anthropic API (direct).

    Uses the Anthropic Python SDK's own request contract and converts the
    result (or stream) back to the OpenAI chat completion shape.
    """

    name = "Anthropic"

    def __init__(self, config: AnthropicConfig, **client_options: Any):
        super().__init__(**client_options)
        self.config = config

    def _build_client(self) -> AsyncAnthropic:
        return AsyncAnthropic(api_key=self.config.api_key, **self._client_options())

    def _messages_kwargs(self, request: dict[str, Any]) -> dict[str, Any]:
        system, messages = to_anthropic_messages(request["messages"])

        kwargs: dict[str, Any] = {
            "model": request["model"],
            "messages": messages,
            "max_tokens": request.get("max_tokens") or self.config.default_max_tokens,
        }
        if system:
            kwargs["system"] = system
        for key in ("temperature", "top_p", "top_k"):
            if key in request:
                kwargs[key] = request[key]
        if "stop" in request:
            stop = request["stop"]
            kwargs["stop_sequences"] = [stop] if isinstance(stop, str) else stop

        tools = to_anthropic_tools(request)
        if tools:
            kwargs["tools"] = tools

        unsupported = [
            key for key in ("presence_penalty", "frequency_penalty", "seed") if key in request
        ]
        if unsupported:
            logger.debug(f"Anthropic ignores parameters: {', '.join(unsupported)}")

        return kwargs

    async def create(
        self, request: dict[str, Any]
    ) -> ChatCompletion | AsyncIterator[ChatCompletionChunk]:
        """Run a message completion, streamed if request["stream"] is set."""
        kwargs = self._messages_kwargs(request)
        logger.info(
            f"Requesting completion from {self.name} with {request['model']} "
            f"({len(kwargs['messages'])} messages, stream={request['stream']})"
        )

        if request["stream"]:
            stream = await self.client.messages.create(stream=True, **kwargs)
            return self._stream_chunks(stream, request["model"])

        message = await self.client.messages.create(**kwargs)
        logger.info(f"Completion received: {message.id}")
        logger.debug(
            f"Usage: input={message.usage.input_tokens}, output={message.usage.output_tokens}"
        )

        return to_chat_completion(message)

    async def _stream_chunks(
        self, stream: Any, model: str
    ) -> AsyncIterator[ChatCompletionChunk]:
        """Translate Anthropic stream events into chat completion chunks."""
        completion_id = ""
        created = int(time.time())
        tool_index = -1

        async for event in stream:
            delta: dict[str, Any] | None = None
            finish_reason = None

            if event.type == "message_start":
                completion_id = event.message.id
                delta = {"role": "assistant", "content": ""}
            elif event.type == "content_block_start" and event.content_block.type == "tool_use":
                tool_index += 1
                delta = {"tool_calls": [{
                    "index": tool_index,
                    "id": event.content_block.id,
                    "type": "function",
                    "function": {"name": event.content_block.name, "arguments": ""},
                }]}
            elif event.type == "content_block_delta":
                if event.delta.type == "text_delta":
                    delta = {"content": event.delta.text}
                elif event.delta.type == "input_json_delta":
                    delta = {"tool_calls": [{
                        "index": tool_index,
                        "function": {"arguments": event.delta.partial_json},
                    }]}
            elif event.type == "message_delta":
                delta = {}
                finish_reason = _finish_reason(event.delta.stop_reason)

            if delta is None:
                continue

            yield ChatCompletionChunk.model_validate({
                "id": completion_id,
                "object": "chat.completion.chunk",
                "created": created,
                "model": model,
                "choices": [{"index": 0, "delta": delta, "finish_reason": finish_reason}],
            })
