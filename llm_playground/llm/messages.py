"""Normalization of caller input into provider-neutral messages."""

import logging
from typing import Any

from .protocols import AI_ROLE_ALIAS, Message, MessageRole

logger = logging.getLogger(__name__)

# Substrings of model ids whose providers accept tool declarations
TOOL_CAPABLE_MODEL_MARKERS = ("gpt", "claude")


def _first_present(item: dict[str, Any], *keys: str) -> Any:
    """Return the first key's value that is not None (callers use camelCase or snake_case)."""
    for key in keys:
        value = item.get(key)
        if value is not None:
            return value
    return None


def convert_input_to_messages(items: str | list[Any]) -> list[dict[str, Any]]:
    """
    Convert caller input to a list of OpenAI-style message dicts.

    Args:
        items: A plain string or a list of message records (dicts or Message)

    Returns:
        One dict per message. Fields the caller did not set are omitted.
    """
    if isinstance(items, str):
        items = [{"role": MessageRole.USER.value, "content": items}]

    messages = []
    for item in items:
        if isinstance(item, Message):
            item = item.model_dump(exclude_none=True)

        role = item.get("role")
        if role == AI_ROLE_ALIAS:
            role = MessageRole.ASSISTANT.value

        message = Message(
            role=role,
            content=item.get("content") or item.get("text") or None,
            function_call=_first_present(item, "function_call", "functionCall"),
            tool_calls=_first_present(item, "tool_calls", "toolCalls"),
            name=item.get("name") or None,
        )
        messages.append(message.to_dict())

    return messages


def validate_tool_calls(model: str, tool_calls: Any) -> list[dict[str, Any]] | None:
    """Return tool_calls unchanged if every entry is a named function tool, else None.

    The list is dropped as a whole for models outside the gpt/claude
    families, never filtered.
    """
    if not tool_calls:
        return None

    if not any(marker in model for marker in TOOL_CAPABLE_MODEL_MARKERS):
        logger.debug(f"Dropping tools for model without tool support: {model}")
        return None

    if not isinstance(tool_calls, list):
        return None

    for tool in tool_calls:
        if not isinstance(tool, dict) or tool.get("type") != "function":
            logger.debug("Dropping tools: entry is not a function tool")
            return None
        function = tool.get("function")
        if not isinstance(function, dict) or not function.get("name"):
            logger.debug("Dropping tools: function entry has no name")
            return None

    return tool_calls
