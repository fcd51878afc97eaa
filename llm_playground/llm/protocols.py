"""Protocol definitions for completion providers."""

from collections.abc import AsyncIterator
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from openai.types.chat import ChatCompletion, ChatCompletionChunk
from pydantic import BaseModel


class MessageRole(str, Enum):
    """Role of a message in a conversation."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    FUNCTION = "function"
    TOOL = "tool"


# Input alias accepted from callers, rewritten to ASSISTANT
AI_ROLE_ALIAS = "ai"


class Message(BaseModel):
    """A provider-neutral chat message.

    Unset fields are left out of ``to_dict()`` entirely; SDKs treat an
    omitted key differently from an explicit ``null``.
    """

    role: str
    content: Any = None
    function_call: dict[str, Any] | None = None
    tool_calls: list[dict[str, Any]] | None = None
    name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


@runtime_checkable
class CompletionProvider(Protocol):
    """Protocol for completion providers.

    Implement this protocol to add support for new LLM APIs.
    """

    async def create(
        self,
        request: dict[str, Any],
    ) -> ChatCompletion | AsyncIterator[ChatCompletionChunk]:
        """
        Run a chat completion.

        Args:
            request: Assembled completion request (see build_completion_request)

        Returns:
            The completion, or an async iterator of chunks when
            request["stream"] is true
        """
        ...

    async def __aenter__(self) -> "CompletionProvider":
        ...

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        ...
