"""Read-only provider health aggregation for diagnostics endpoints."""

from __future__ import annotations

from dataclasses import asdict, dataclass

from story_gateway.models import RequestClass
from story_gateway.router import GatewayRouter


@dataclass(frozen=True)
class ProviderStatus:
    available: bool
    circuit_open: bool
    cost_per_1k_tokens: float

    def to_dict(self) -> dict:
        return asdict(self)


class StatusReporter:
    """Aggregates per-provider state. Never mutates the breaker."""

    def __init__(self, gateway: GatewayRouter):
        self._gateway = gateway

    async def provider_status(self) -> dict[str, ProviderStatus]:
        breaker = self._gateway.breaker
        return {
            provider.name: ProviderStatus(
                available=await provider.is_available(),
                circuit_open=breaker.is_open(provider.name),
                cost_per_1k_tokens=provider.cost_per_1k_tokens,
            )
            for provider in self._gateway.providers
        }

    async def available_providers(
        self, request_class: RequestClass = RequestClass.STANDARD
    ) -> list[str]:
        """Providers in priority order that would currently be tried."""
        breaker = self._gateway.breaker
        available = []
        for name in self._gateway.order(request_class):
            if breaker.is_open(name):
                continue
            if await self._gateway.provider(name).is_available():
                available.append(name)
        return available

    async def primary_provider(
        self, request_class: RequestClass = RequestClass.STANDARD
    ) -> str | None:
        breaker = self._gateway.breaker
        for name in self._gateway.order(request_class):
            if breaker.is_open(name):
                continue
            if await self._gateway.provider(name).is_available():
                return name
        return None

    async def is_available(self, request_class: RequestClass = RequestClass.STANDARD) -> bool:
        return await self.primary_provider(request_class) is not None
