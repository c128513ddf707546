"""Configuration for story-gateway.

``GatewaySettings`` reads the environment (and ``.env``) once; it is turned
into an immutable ``GatewayConfig`` that the gateway receives by reference.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from story_gateway.exceptions import ConfigurationError
from story_gateway.models import ProviderDescriptor, RequestClass
from story_gateway.priority import parse_priority
from story_gateway.providers.claude import CLAUDE_BASE_URL
from story_gateway.providers.gemini import GEMINI_BASE_URL
from story_gateway.providers.openai import OPENAI_BASE_URL

# Approximate input prices, informational only.
COST_PER_1K_TOKENS: dict[str, float] = {
    "gemini": 0.000075,
    "claude": 0.003,
    "openai": 0.0025,
    "ollama": 0.0,  # runs locally
}


class GatewaySettings(BaseSettings):
    """Environment-backed settings."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    GEMINI_API_KEY: str | None = None
    GEMINI_MODEL: str = "gemini-1.5-flash"
    GEMINI_BASE_URL: str = GEMINI_BASE_URL

    CLAUDE_API_KEY: str | None = None
    CLAUDE_MODEL: str = "claude-sonnet-4-20250514"
    CLAUDE_BASE_URL: str = CLAUDE_BASE_URL

    OPENAI_API_KEY: str | None = None
    OPENAI_MODEL: str = "gpt-4o"
    OPENAI_BASE_URL: str = OPENAI_BASE_URL

    CLOUD_TIMEOUT: float = Field(60.0, gt=0)

    OLLAMA_BASE_URL: str = "http://ollama:11434"
    OLLAMA_MODEL: str = "mistral"
    OLLAMA_TIMEOUT: float = Field(120.0, gt=0)

    SD_BASE_URL: str = "http://stable-diffusion:7860"
    SD_TIMEOUT: float = Field(180.0, gt=0)

    # First available wins, with fallback. Put 'ollama' in the adult list.
    AI_PROVIDER_PRIORITY: str = "gemini,claude,openai"
    AI_ADULT_PRIORITY: str = "ollama"

    CIRCUIT_FAILURE_THRESHOLD: int = Field(3, ge=1)
    CIRCUIT_TTL_SECONDS: float = Field(300.0, gt=0)

    PROMPT_LANGUAGE: str = "Ukrainian"

    LOG_LEVEL: str = "INFO"
    LOG_FILE: str | None = None

    @field_validator("GEMINI_API_KEY", "CLAUDE_API_KEY", "OPENAI_API_KEY", mode="before")
    @classmethod
    def _blank_key_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.upper()


@dataclass(frozen=True)
class GatewayConfig:
    """Immutable provider registry plus dispatch policy."""

    descriptors: tuple[ProviderDescriptor, ...]
    priority: tuple[str, ...]
    adult_priority: tuple[str, ...]
    failure_threshold: int = 3
    circuit_ttl_s: float = 300.0

    def __post_init__(self) -> None:
        names = [d.name for d in self.descriptors]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ConfigurationError(f"Duplicate provider names: {', '.join(duplicates)}")

    @property
    def provider_names(self) -> list[str]:
        """Registered names in registry order."""
        return [d.name for d in self.descriptors]

    def priority_for(self, request_class: RequestClass) -> tuple[str, ...]:
        if request_class is RequestClass.ADULT:
            return self.adult_priority
        return self.priority

    @classmethod
    def from_settings(cls, settings: GatewaySettings) -> GatewayConfig:
        cloud_timeout = settings.CLOUD_TIMEOUT
        descriptors = (
            ProviderDescriptor(
                name="gemini",
                endpoint=settings.GEMINI_BASE_URL,
                model=settings.GEMINI_MODEL,
                cost_per_1k_tokens=COST_PER_1K_TOKENS["gemini"],
                timeout=cloud_timeout,
                api_key=settings.GEMINI_API_KEY,
            ),
            ProviderDescriptor(
                name="claude",
                endpoint=settings.CLAUDE_BASE_URL,
                model=settings.CLAUDE_MODEL,
                cost_per_1k_tokens=COST_PER_1K_TOKENS["claude"],
                timeout=cloud_timeout,
                api_key=settings.CLAUDE_API_KEY,
            ),
            ProviderDescriptor(
                name="openai",
                endpoint=settings.OPENAI_BASE_URL,
                model=settings.OPENAI_MODEL,
                cost_per_1k_tokens=COST_PER_1K_TOKENS["openai"],
                timeout=cloud_timeout,
                api_key=settings.OPENAI_API_KEY,
            ),
            ProviderDescriptor(
                name="ollama",
                endpoint=settings.OLLAMA_BASE_URL,
                model=settings.OLLAMA_MODEL,
                cost_per_1k_tokens=COST_PER_1K_TOKENS["ollama"],
                timeout=settings.OLLAMA_TIMEOUT,
            ),
        )
        return cls(
            descriptors=descriptors,
            priority=parse_priority(settings.AI_PROVIDER_PRIORITY),
            adult_priority=parse_priority(settings.AI_ADULT_PRIORITY),
            failure_threshold=settings.CIRCUIT_FAILURE_THRESHOLD,
            circuit_ttl_s=settings.CIRCUIT_TTL_SECONDS,
        )
