"""Provider adapters, one per backend."""

from story_gateway.models import LLMProvider
from story_gateway.providers.base import CloudProvider, HTTPProvider
from story_gateway.providers.claude import ClaudeProvider
from story_gateway.providers.gemini import GeminiProvider
from story_gateway.providers.ollama import DaemonProbe, OllamaProvider
from story_gateway.providers.openai import OpenAIProvider

# Closed set of variants, in registry order.
PROVIDER_TYPES: dict[str, type[HTTPProvider]] = {
    "gemini": GeminiProvider,
    "claude": ClaudeProvider,
    "openai": OpenAIProvider,
    "ollama": OllamaProvider,
}

__all__ = [
    "LLMProvider",
    "HTTPProvider",
    "CloudProvider",
    "GeminiProvider",
    "ClaudeProvider",
    "OpenAIProvider",
    "OllamaProvider",
    "DaemonProbe",
    "PROVIDER_TYPES",
]
