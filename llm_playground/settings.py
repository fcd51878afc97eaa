"""Environment defaults for the prompt playground."""

import logging
import os
from dotenv import load_dotenv

load_dotenv()

# Logging setup
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%H:%M:%S",
)

# OpenAI (primary provider)
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")

# OpenRouter (aggregator)
# HTTP-Referer and X-Title are used for app rankings on openrouter.ai
OPENROUTER_API_KEY = os.getenv("OPENROUTER_API_KEY")
OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
OPENROUTER_REFERER = os.getenv("OPENROUTER_REFERER", "https://lunary.ai")
OPENROUTER_TITLE = os.getenv("OPENROUTER_TITLE", "Lunary.ai")

# Anthropic (direct API)
ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY")
# Anthropic requires max_tokens on every request
ANTHROPIC_DEFAULT_MAX_TOKENS = 4096

# Config profile
PLAYGROUND_PROFILE = os.getenv("PLAYGROUND_PROFILE", "default")
