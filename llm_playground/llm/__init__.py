"""LLM provider integrations with protocol-based adapter pattern."""

from .protocols import CompletionProvider, Message, MessageRole
from .templates import compile_text_template, compile_prompt
from .messages import convert_input_to_messages, validate_tool_calls
from .request import CompletionParams, build_completion_request
from .models import ModelDescriptor, ModelRegistry, ProviderKind, default_registry
from .adapters import AnthropicProvider, OpenAIProvider, OpenRouterProvider
from .dispatcher import PromptDispatcher
from .completion import run_ai_model

__all__ = [
    # Protocols
    "CompletionProvider",
    "Message",
    "MessageRole",
    # Prompt preparation
    "compile_text_template",
    "compile_prompt",
    "convert_input_to_messages",
    "validate_tool_calls",
    "CompletionParams",
    "build_completion_request",
    # Model catalog
    "ModelDescriptor",
    "ModelRegistry",
    "ProviderKind",
    "default_registry",
    # Adapters
    "AnthropicProvider",
    "OpenAIProvider",
    "OpenRouterProvider",
    # Dispatch
    "PromptDispatcher",
    "run_ai_model",
]
