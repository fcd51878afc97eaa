"""Model catalog lookups."""

import logging
from enum import Enum
from pathlib import Path

import yaml
from pydantic import BaseModel

logger = logging.getLogger(__name__)

DEFAULT_MODELS_PATH = Path(__file__).parent.parent / "config" / "models.yaml"


class ProviderKind(str, Enum):
    """Provider families a model can be routed to."""

    OPENAI = "openai"
    OPENROUTER = "openrouter"
    ANTHROPIC = "anthropic"

    @classmethod
    def from_tag(cls, tag: str | None) -> "ProviderKind":
        """Map a catalog provider tag to a kind; unknown tags use OpenAI."""
        if tag == cls.ANTHROPIC.value:
            return cls.ANTHROPIC
        if tag == cls.OPENROUTER.value:
            return cls.OPENROUTER
        return cls.OPENAI


class ModelDescriptor(BaseModel):
    """A catalog entry."""

    id: str
    name: str | None = None
    provider: str


class ModelRegistry:
    """Exact-id lookup over a list of model descriptors."""

    def __init__(self, models: list[ModelDescriptor]):
        self.models = list(models)

    def get(self, model_id: str) -> ModelDescriptor | None:
        return next((m for m in self.models if m.id == model_id), None)

    def resolve_provider(self, model_id: str) -> ProviderKind:
        """Provider kind for a model id. Models not in the catalog use OpenAI."""
        descriptor = self.get(model_id)
        if descriptor is None:
            logger.debug(f"Model {model_id} not in catalog, using default provider")
            return ProviderKind.OPENAI
        return ProviderKind.from_tag(descriptor.provider)


def load_models(path: Path = DEFAULT_MODELS_PATH) -> list[ModelDescriptor]:
    """Load the `models` list from a YAML catalog file."""
    with open(path) as f:
        data = yaml.safe_load(f) or {}

    return [ModelDescriptor(**entry) for entry in data.get("models", [])]


def default_registry() -> ModelRegistry:
    """Registry backed by the packaged catalog."""
    return ModelRegistry(load_models())
