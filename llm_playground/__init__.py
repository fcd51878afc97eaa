"""Prompt playground: template compilation and multi-provider dispatch."""

from .llm import PromptDispatcher, run_ai_model, compile_prompt, compile_text_template
from .config import load_config

__all__ = [
    "PromptDispatcher",
    "run_ai_model",
    "compile_prompt",
    "compile_text_template",
    "load_config",
]
