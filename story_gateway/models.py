"""Core data models for story-gateway."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum


class RequestClass(str, Enum):
    """Dispatch path; each class has its own provider pool."""

    STANDARD = "standard"
    ADULT = "adult"


class FailureKind(str, Enum):
    UNREACHABLE = "unreachable"        # transport error or timeout
    REJECTED = "rejected"              # non-2xx status or malformed body
    NOT_CONFIGURED = "not_configured"  # no credential, no call made


@dataclass(frozen=True)
class ProviderDescriptor:
    """Static description of one backend. Built once at startup."""

    name: str
    endpoint: str
    model: str
    cost_per_1k_tokens: float
    timeout: float
    api_key: str | None = None


@dataclass(frozen=True)
class ChatRequest:
    system_prompt: str
    user_message: str
    max_tokens: int = 1024
    request_class: RequestClass = RequestClass.STANDARD


@dataclass(frozen=True)
class ChatResult:
    """Outcome of one adapter call: generated text or a failure marker."""

    text: str | None = None
    failure: FailureKind | None = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.failure is None and self.text is not None

    @classmethod
    def success(cls, text: str) -> "ChatResult":
        return cls(text=text)

    @classmethod
    def failed(cls, kind: FailureKind, detail: str = "") -> "ChatResult":
        return cls(failure=kind, detail=detail)


@dataclass
class DispatchOutcome:
    """Result of walking a priority list.

    ``attempted`` and ``skipped`` are diagnostics for logs and tests; callers
    outside the gateway only look at ``ok`` and ``text``. Providers passed over
    because they were unavailable or their circuit was open are recorded in
    ``skipped`` with the reason; ``attempted`` holds only providers actually called.
    """

    text: str | None = None
    provider: str | None = None
    attempted: list[str] = field(default_factory=list)
    skipped: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.text is not None


class LLMProvider(ABC):
    """Abstract base class for text providers.

    Implementations wrap exactly one backend and must never let a transport or
    protocol failure escape ``chat``; they return ``ChatResult.failed`` instead.
    """

    def __init__(self, descriptor: ProviderDescriptor):
        self.descriptor = descriptor

    @abstractmethod
    async def chat(
        self,
        system_prompt: str,
        user_message: str,
        max_tokens: int = 1024,
    ) -> ChatResult:
        """Send one chat request. Exactly one network call, no retry."""
        ...

    @abstractmethod
    async def is_available(self) -> bool:
        """Whether the provider should be tried at all."""
        ...

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def cost_per_1k_tokens(self) -> float:
        return self.descriptor.cost_per_1k_tokens
