"""
Prompt Preparation Tests

Tests for template compilation, message normalization, tool validation
and request assembly.
"""

from llm_playground.llm import (
    CompletionParams,
    Message,
    build_completion_request,
    compile_prompt,
    compile_text_template,
    convert_input_to_messages,
    validate_tool_calls,
)

FUNCTION_TOOL = {"type": "function", "function": {"name": "x"}}


def test_compile_text_template():
    """Test placeholder substitution in a single string."""
    print("=" * 60)
    print("TEST 1: compile_text_template")
    print("=" * 60)

    assert compile_text_template("Hello {{name}}", {"name": "Ada"}) == "Hello Ada"
    assert compile_text_template("Hi {{missing}}", {}) == "Hi "
    assert compile_text_template("{{a}} and {{a}} and {{b}}", {"a": "1", "b": "2"}) == "1 and 1 and 2"
    assert compile_text_template("No placeholders here", {"name": "Ada"}) == "No placeholders here"
    # Empty values blank out like missing ones
    assert compile_text_template("[{{empty}}]", {"empty": ""}) == "[]"

    print("\n[PASS] Placeholders substituted")


def test_compile_prompt_with_variables():
    """Test compiling every message of a conversation."""
    print("\n" + "=" * 60)
    print("TEST 2: compile_prompt with variables")
    print("=" * 60)

    messages = [
        {"role": "system", "content": "You are {{persona}}."},
        {"role": "user", "content": "Greet {{name}} as {{persona}}."},
        {"role": "user", "content": [{"type": "text", "text": "{{name}}"}]},
    ]
    compiled = compile_prompt(messages, {"persona": "a pirate", "name": "Ada"})

    assert compiled[0]["content"] == "You are a pirate."
    assert compiled[1]["content"] == "Greet Ada as a pirate."
    # Non-string content is passed through untouched
    assert compiled[2]["content"] == [{"type": "text", "text": "{{name}}"}]
    # Input is not mutated
    assert messages[0]["content"] == "You are {{persona}}."

    # The text fallback is not compiled
    compiled = compile_prompt([{"role": "ai", "text": "Hi {{name}}"}], {"name": "Ada"})
    assert compiled == [{"role": "ai", "text": "Hi {{name}}"}]

    compiled = compile_prompt("Hello {{name}}", {"name": "Ada"})
    assert compiled == [{"role": "user", "content": "Hello Ada"}]

    print("\n[PASS] Conversation compiled")


def test_compile_prompt_without_variables():
    """Test that no variables means no compilation."""
    print("\n" + "=" * 60)
    print("TEST 3: compile_prompt without variables")
    print("=" * 60)

    messages = [{"role": "user", "content": "Keep {{this}}"}]
    compiled = compile_prompt(messages, None)

    assert compiled == messages
    assert compiled is not messages
    assert compile_prompt(compiled, None) == compiled

    # An empty mapping still compiles
    assert compile_prompt(messages, {})[0]["content"] == "Keep "

    print("\n[PASS] Messages passed through unchanged")


def test_convert_string_input():
    """Test wrapping a plain string."""
    print("\n" + "=" * 60)
    print("TEST 4: convert_input_to_messages with a string")
    print("=" * 60)

    assert convert_input_to_messages("Hello") == [{"role": "user", "content": "Hello"}]

    print("\n[PASS] String wrapped as a user message")


def test_convert_message_records():
    """Test role aliasing, text fallback and omitted fields."""
    print("\n" + "=" * 60)
    print("TEST 5: convert_input_to_messages with records")
    print("=" * 60)

    tool_calls = [{"id": "call_1", "type": "function", "function": {"name": "x", "arguments": "{}"}}]
    messages = convert_input_to_messages([
        {"role": "system", "content": "Be brief."},
        {"role": "ai", "text": "Hi there", "toolCalls": tool_calls},
        {"role": "function", "content": "42", "name": "answer", "functionCall": None},
        {"role": "user", "content": "", "name": ""},
        Message(role="tool", content="done"),
    ])

    assert messages[0] == {"role": "system", "content": "Be brief."}
    assert messages[1] == {"role": "assistant", "content": "Hi there", "tool_calls": tool_calls}
    assert messages[2] == {"role": "function", "content": "42", "name": "answer"}
    # Empty content and name are omitted, not sent as null
    assert messages[3] == {"role": "user"}
    assert messages[4] == {"role": "tool", "content": "done"}

    for message in messages:
        assert None not in message.values()

    print("\n[PASS] Records normalized")


def test_validate_tool_calls():
    """Test the all-or-nothing tool gate."""
    print("\n" + "=" * 60)
    print("TEST 6: validate_tool_calls")
    print("=" * 60)

    tools = [FUNCTION_TOOL]
    assert validate_tool_calls("gpt-4", tools) is tools
    assert validate_tool_calls("claude-3-haiku-20240307", tools) is tools
    assert validate_tool_calls("llama-2", tools) is None

    assert validate_tool_calls("gpt-4", None) is None
    assert validate_tool_calls("gpt-4", []) is None
    assert validate_tool_calls("gpt-4", FUNCTION_TOOL) is None

    # One bad entry drops the whole list
    assert validate_tool_calls("gpt-4", [FUNCTION_TOOL, {"type": "retrieval"}]) is None
    assert validate_tool_calls("gpt-4", [FUNCTION_TOOL, {"type": "function", "function": {}}]) is None
    assert validate_tool_calls("gpt-4", [{"type": "function", "function": {"name": ""}}]) is None

    print("\n[PASS] Tool gate behaves")


def test_build_completion_request():
    """Test that unset parameters are omitted."""
    print("\n" + "=" * 60)
    print("TEST 7: build_completion_request")
    print("=" * 60)

    messages = [{"role": "user", "content": "Hi"}]

    request = build_completion_request("gpt-4o", messages)
    assert request == {"model": "gpt-4o", "messages": messages, "stream": False}

    request = build_completion_request(
        "gpt-4o",
        messages,
        stream=True,
        extra={"temperature": 0, "max_tokens": 64, "stop": ["\n"], "seed": 7, "tools": [FUNCTION_TOOL]},
    )
    assert request["stream"] is True
    assert request["temperature"] == 0
    assert request["max_tokens"] == 64
    assert request["stop"] == ["\n"]
    assert request["seed"] == 7
    assert request["tools"] == [FUNCTION_TOOL]
    assert "top_p" not in request
    assert "frequency_penalty" not in request

    # Tools are dropped for models without tool support
    request = build_completion_request(
        "mistralai/mistral-7b-instruct",
        messages,
        extra=CompletionParams(top_k=40, tools=[FUNCTION_TOOL]),
    )
    assert request["top_k"] == 40
    assert "tools" not in request

    # Malformed tools are dropped, never rejected
    for malformed in (["not-a-tool"], FUNCTION_TOOL, [None], "x"):
        request = build_completion_request("gpt-4", messages, extra={"tools": malformed})
        assert "tools" not in request

    request = build_completion_request("gpt-4", messages, extra={"functions": [{"name": "f"}]})
    assert request["functions"] == [{"name": "f"}]

    print("\n[PASS] Request assembled")


def main():
    """Run all tests."""
    print("\n" + "=" * 60)
    print("PROMPT PREPARATION TESTS")
    print("=" * 60)

    test_compile_text_template()
    test_compile_prompt_with_variables()
    test_compile_prompt_without_variables()
    test_convert_string_input()
    test_convert_message_records()
    test_validate_tool_calls()
    test_build_completion_request()

    print("\n" + "=" * 60)
    print("ALL TESTS PASSED!")
    print("=" * 60)


if __name__ == "__main__":
    main()
