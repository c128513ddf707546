"""Failover chain for text providers."""

import time

from loguru import logger

from story_gateway.models import ChatRequest, DispatchOutcome, LLMProvider
from story_gateway.store import TTLStore


class CircuitBreaker:
    """Per-provider circuit breaker over a shared TTL store.

    Opens after ``failure_threshold`` consecutive failures. There is no
    half-open probe: the counter expires ``ttl_s`` after the last failure and
    the circuit is closed again from then on.
    """

    KEY_PREFIX = "ai_provider_errors:"

    def __init__(self, store: TTLStore, failure_threshold: int = 3, ttl_s: float = 300.0):
        self._store = store
        self._failure_threshold = failure_threshold
        self._ttl_s = ttl_s

    def _key(self, name: str) -> str:
        return f"{self.KEY_PREFIX}{name}"

    def failures(self, name: str) -> int:
        return self._store.get(self._key(name)) or 0

    def is_open(self, name: str) -> bool:
        """Check if circuit is open (should skip provider)."""
        return self.failures(name) >= self._failure_threshold

    def record_success(self, name: str) -> None:
        """Record a successful call and reset the circuit."""
        key = self._key(name)
        previous = self._store.get(key)
        self._store.delete(key)
        if previous and previous >= self._failure_threshold:
            logger.info(f"CircuitBreaker: {name} -> closed (recovered)")

    def record_failure(self, name: str) -> None:
        """Record a failure; may trip the circuit."""
        count = self._store.increment(self._key(name), self._ttl_s)
        if count == self._failure_threshold:
            logger.warning(
                f"CircuitBreaker: {name} -> open ({count} failures, retry after {self._ttl_s:.0f}s)"
            )


class FailoverChain:
    """Try providers in order until one succeeds."""

    def __init__(self, breaker: CircuitBreaker) -> None:
        self._breaker = breaker

    @property
    def breaker(self) -> CircuitBreaker:
        return self._breaker

    async def try_providers(
        self,
        chain: list[LLMProvider],
        request: ChatRequest,
    ) -> DispatchOutcome:
        """Attempt each provider in sequence, at most one in flight.

        Unavailable and circuit-open providers are skipped without touching
        the breaker. Returns on the first success; on exhaustion the outcome
        carries no text, only diagnostics.
        """
        outcome = DispatchOutcome()

        for provider in chain:
            name = provider.name
            if not await provider.is_available():
                logger.debug(f"Provider {name} is not available, skipping")
                outcome.skipped[name] = "unavailable"
                continue

            if self._breaker.is_open(name):
                logger.debug(f"CircuitBreaker: skipping {name} (circuit open)")
                outcome.skipped[name] = "circuit_open"
                continue

            logger.info(f"Trying AI provider: {name} ({request.request_class.value})")
            outcome.attempted.append(name)
            start = time.monotonic()
            result = await provider.chat(
                request.system_prompt,
                request.user_message,
                request.max_tokens,
            )
            latency_ms = int((time.monotonic() - start) * 1000)

            if result.ok:
                self._breaker.record_success(name)
                logger.info(f"Successfully used provider: {name} in {latency_ms}ms")
                outcome.text = result.text
                outcome.provider = name
                return outcome

            self._breaker.record_failure(name)
            logger.warning(
                f"Provider {name} failed in {latency_ms}ms "
                f"({result.failure.value if result.failure else 'empty'}), trying next..."
            )

        logger.error(
            f"All {request.request_class.value} AI providers failed. "
            f"tried={outcome.attempted} skipped={outcome.skipped}"
        )
        return outcome
