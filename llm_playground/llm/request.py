"""Assembly of the completion request sent to providers."""

from typing import Any

from pydantic import BaseModel

from .messages import validate_tool_calls


class CompletionParams(BaseModel):
    """Optional sampling and tooling parameters supplied by the caller.

    Anything left as None is not sent, so the provider applies its own default.
    """

    temperature: float | None = None
    max_tokens: int | None = None
    top_p: float | None = None
    top_k: int | None = None
    presence_penalty: float | None = None
    frequency_penalty: float | None = None
    stop: str | list[str] | None = None
    # Left untyped; validate_tool_calls drops malformed tools as a whole
    functions: Any = None
    tools: Any = None
    seed: int | None = None


def build_completion_request(
    model: str,
    messages: list[dict[str, Any]],
    stream: bool = False,
    extra: CompletionParams | dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Combine messages and caller parameters into a single request dict.

    Args:
        model: Model identifier
        messages: Normalized messages (see convert_input_to_messages)
        stream: Whether to stream partial results
        extra: Caller parameters, as CompletionParams or a plain dict

    Returns:
        Request dict with model, messages and stream always set and every
        other key present only when it has a value
    """
    if extra is None:
        params = CompletionParams()
    elif isinstance(extra, CompletionParams):
        params = extra
    else:
        params = CompletionParams.model_validate(extra)

    request: dict[str, Any] = {
        "model": model,
        "messages": messages,
        "stream": stream,
    }

    optional = params.model_dump(exclude={"tools"})
    optional["tools"] = validate_tool_calls(model, params.tools)

    request.update({key: value for key, value in optional.items() if value is not None})
    return request
