"""story-gateway: multi-provider AI writing gateway with circuit breaker and failover."""

from story_gateway.config import GatewayConfig, GatewaySettings
from story_gateway.context import Chapter, CharacterEntry, ContentMode, Operation, StoryContext, Universe
from story_gateway.exceptions import ContentModeError, GatewayError, UnknownProviderError
from story_gateway.failover import CircuitBreaker, FailoverChain
from story_gateway.models import ChatRequest, ChatResult, DispatchOutcome, LLMProvider, RequestClass
from story_gateway.prompts import PromptAssembler, truncate_text
from story_gateway.router import GatewayRouter, build_gateway
from story_gateway.service import AssistRequest, ServiceUnavailable, StoryAIService, build_service
from story_gateway.status import StatusReporter
from story_gateway.store import InMemoryTTLStore, TTLStore

__all__ = [
    "GatewayConfig",
    "GatewaySettings",
    "Chapter",
    "CharacterEntry",
    "ContentMode",
    "Operation",
    "StoryContext",
    "Universe",
    "ContentModeError",
    "GatewayError",
    "UnknownProviderError",
    "CircuitBreaker",
    "FailoverChain",
    "ChatRequest",
    "ChatResult",
    "DispatchOutcome",
    "LLMProvider",
    "RequestClass",
    "PromptAssembler",
    "truncate_text",
    "GatewayRouter",
    "build_gateway",
    "AssistRequest",
    "ServiceUnavailable",
    "StoryAIService",
    "build_service",
    "StatusReporter",
    "InMemoryTTLStore",
    "TTLStore",
]
