"""Gateway: resolves the provider chain per request class and dispatches.

Two pools:
  1. Standard requests walk ``AI_PROVIDER_PRIORITY``, followed by every other
     registered provider in registry order.
  2. Adult requests walk ``AI_ADULT_PRIORITY`` only. A provider missing from
     that list is never tried for adult content, even if it is registered.

The walk itself is a sequential failover chain (see ``failover.py``), never a
fan-out: at most one paid call is in flight per request.
"""

from __future__ import annotations

import httpx
from loguru import logger

from story_gateway.config import GatewayConfig
from story_gateway.exceptions import ConfigurationError, UnknownProviderError
from story_gateway.failover import CircuitBreaker, FailoverChain
from story_gateway.models import ChatRequest, DispatchOutcome, LLMProvider, RequestClass
from story_gateway.priority import resolve_order
from story_gateway.providers import PROVIDER_TYPES
from story_gateway.store import InMemoryTTLStore, TTLStore


class GatewayRouter:
    """Dispatches chat requests across the configured providers."""

    def __init__(
        self,
        config: GatewayConfig,
        providers: dict[str, LLMProvider],
        breaker: CircuitBreaker,
        *,
        client: httpx.AsyncClient | None = None,
    ):
        missing = [name for name in config.provider_names if name not in providers]
        if missing:
            raise ConfigurationError(f"No adapter for provider(s): {', '.join(missing)}")

        self._config = config
        # Registry order follows the config, not the dict handed in.
        self._providers = {name: providers[name] for name in config.provider_names}
        self._failover = FailoverChain(breaker)
        self._client = client

        names = config.provider_names
        self._orders: dict[RequestClass, list[str]] = {
            RequestClass.STANDARD: resolve_order(
                config.priority_for(RequestClass.STANDARD), names, append_unlisted=True
            ),
            RequestClass.ADULT: resolve_order(
                config.priority_for(RequestClass.ADULT), names, append_unlisted=False
            ),
        }
        logger.info(
            f"Gateway ready: standard={self._orders[RequestClass.STANDARD]} "
            f"adult={self._orders[RequestClass.ADULT]}"
        )

    @property
    def config(self) -> GatewayConfig:
        return self._config

    @property
    def breaker(self) -> CircuitBreaker:
        return self._failover.breaker

    @property
    def providers(self) -> list[LLMProvider]:
        """All registered providers in registry order."""
        return list(self._providers.values())

    def provider(self, name: str) -> LLMProvider:
        try:
            return self._providers[name]
        except KeyError:
            error = UnknownProviderError(name, list(self._providers))
            logger.error(str(error))
            raise error from None

    def order(self, request_class: RequestClass = RequestClass.STANDARD) -> list[str]:
        """Resolved provider names for a request class."""
        return list(self._orders[request_class])

    def _build_chain(self, request_class: RequestClass) -> list[LLMProvider]:
        return [self._providers[name] for name in self._orders[request_class]]

    async def dispatch(self, request: ChatRequest) -> DispatchOutcome:
        chain = self._build_chain(request.request_class)
        return await self._failover.try_providers(chain, request)

    async def chat(
        self,
        system_prompt: str,
        user_message: str,
        max_tokens: int = 1024,
        request_class: RequestClass = RequestClass.STANDARD,
    ) -> DispatchOutcome:
        return await self.dispatch(
            ChatRequest(system_prompt, user_message, max_tokens, request_class)
        )

    async def chat_with_provider(
        self,
        name: str,
        system_prompt: str,
        user_message: str,
        max_tokens: int = 1024,
    ) -> DispatchOutcome:
        """Force one specific provider, bypassing the priority lists.

        Raises:
            UnknownProviderError: If ``name`` is not registered.
        """
        provider = self.provider(name)
        if not await provider.is_available():
            logger.error(f"Provider {name} is not available")
            return DispatchOutcome(skipped={name: "unavailable"})

        result = await provider.chat(system_prompt, user_message, max_tokens)
        outcome = DispatchOutcome(attempted=[name])
        if result.ok:
            self.breaker.record_success(name)
            outcome.text = result.text
            outcome.provider = name
        else:
            self.breaker.record_failure(name)
            logger.warning(f"Forced provider {name} failed ({result.failure.value if result.failure else 'empty'})")
        return outcome

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()


def build_gateway(
    config: GatewayConfig,
    *,
    client: httpx.AsyncClient | None = None,
    store: TTLStore | None = None,
) -> GatewayRouter:
    """Wire adapters, breaker and router from an immutable config.

    All adapters share one ``httpx.AsyncClient`` connection pool.
    """
    client = client or httpx.AsyncClient()
    providers: dict[str, LLMProvider] = {}
    for descriptor in config.descriptors:
        provider_cls = PROVIDER_TYPES.get(descriptor.name)
        if provider_cls is None:
            raise ConfigurationError(f"No adapter type for provider '{descriptor.name}'")
        providers[descriptor.name] = provider_cls(descriptor, client)

    breaker = CircuitBreaker(
        store or InMemoryTTLStore(),
        failure_threshold=config.failure_threshold,
        ttl_s=config.circuit_ttl_s,
    )
    return GatewayRouter(config, providers, breaker, client=client)
