"""Template variable substitution for prompt content."""

import re
from collections.abc import Mapping
from typing import Any

TEMPLATE_PATTERN = re.compile(r"{{(.*?)}}")


def compile_text_template(content: str, variables: Mapping[str, str]) -> str:
    """Replace {{variable}} placeholders with their values.

    Unknown or empty variables resolve to an empty string.

    Example:
        compile_text_template("Hello {{name}}", {"name": "Ada"})  # "Hello Ada"
    """
    return TEMPLATE_PATTERN.sub(
        lambda match: str(variables.get(match.group(1)) or ""), content
    )


def compile_prompt(
    content: str | list[Any],
    variables: Mapping[str, str] | None,
) -> list[Any]:
    """
    Build the message list for a prompt, compiling templates if variables are given.

    Args:
        content: A plain string (becomes a single user message) or a list of
            message records
        variables: Template variables. None leaves every message untouched.

    Only a string ``content`` field is compiled. A message whose payload
    is only in ``text``, or whose content is not a string, is copied as is.

    Returns:
        A new list of messages. Input messages are never mutated.
    """
    if isinstance(content, str):
        original_messages: list[Any] = [{"role": "user", "content": content}]
    else:
        original_messages = list(content)

    if variables is None:
        return original_messages

    compiled_messages = []
    for item in original_messages:
        if hasattr(item, "model_dump"):
            item = item.model_dump(exclude_none=True)

        message_content = item.get("content")
        if isinstance(message_content, str):
            item = {**item, "content": compile_text_template(message_content, variables)}
        else:
            item = dict(item)

        compiled_messages.append(item)

    return compiled_messages
