# tests/conftest.py
import pytest

from story_gateway.config import GatewayConfig
from story_gateway.failover import CircuitBreaker
from story_gateway.models import ChatResult, FailureKind, LLMProvider, ProviderDescriptor
from story_gateway.router import GatewayRouter
from story_gateway.store import InMemoryTTLStore


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def descriptor(name: str, cost: float = 0.001) -> ProviderDescriptor:
    return ProviderDescriptor(
        name=name,
        endpoint=f"http://{name}.test",
        model=f"{name}-model",
        cost_per_1k_tokens=cost,
        timeout=1.0,
        api_key="key",
    )


class FakeProvider(LLMProvider):
    """Scripted provider: returns ``text`` or fails with ``failure``."""

    def __init__(self, name: str, text: str | None = None, available: bool = True,
                 failure: FailureKind = FailureKind.UNREACHABLE, cost: float = 0.001):
        super().__init__(descriptor(name, cost))
        self.text = text
        self.available = available
        self.failure = failure
        self.calls: list[tuple[str, str, int]] = []

    async def chat(self, system_prompt, user_message, max_tokens=1024):
        self.calls.append((system_prompt, user_message, max_tokens))
        if self.text is None:
            return ChatResult.failed(self.failure, "scripted")
        return ChatResult.success(self.text)

    async def is_available(self):
        return self.available


def make_router(providers, priority, adult_priority=(), store=None, threshold=3, ttl_s=300.0):
    config = GatewayConfig(
        descriptors=tuple(p.descriptor for p in providers),
        priority=tuple(priority),
        adult_priority=tuple(adult_priority),
        failure_threshold=threshold,
        circuit_ttl_s=ttl_s,
    )
    breaker = CircuitBreaker(store if store is not None else InMemoryTTLStore(), threshold, ttl_s)
    return GatewayRouter(config, {p.name: p for p in providers}, breaker)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return InMemoryTTLStore(clock=clock)


@pytest.fixture
def breaker(store):
    return CircuitBreaker(store, failure_threshold=3, ttl_s=300.0)


@pytest.fixture
def fake_provider():
    return FakeProvider


@pytest.fixture
def router_factory(store):
    def _factory(providers, priority, adult_priority=()):
        return make_router(providers, priority, adult_priority, store=store)

    return _factory
