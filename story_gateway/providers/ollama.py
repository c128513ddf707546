"""Ollama adapter for locally hosted, uncensored models.

Used for adult-rated writing that the commercial APIs refuse to generate.
"""

from dataclasses import dataclass, field

import httpx
from loguru import logger

from story_gateway.models import ChatResult
from story_gateway.providers.base import HTTPProvider

PROBE_TIMEOUT_S = 5.0
PULL_TIMEOUT_S = 600.0


@dataclass
class DaemonProbe:
    """What a ``/api/tags`` probe found."""

    reachable: bool
    models: list[str] = field(default_factory=list)
    model_present: bool = False


class OllamaProvider(HTTPProvider):
    """Local Ollama daemon, ``/api/chat`` without streaming."""

    @property
    def _base(self) -> str:
        return self.descriptor.endpoint.rstrip("/")

    async def chat(self, system_prompt: str, user_message: str, max_tokens: int = 1024) -> ChatResult:
        return await self._post_chat(
            f"{self._base}/api/chat",
            {
                "model": self.descriptor.model,
                "messages": [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_message},
                ],
                "stream": False,
                "options": {
                    "num_predict": max_tokens,
                    "temperature": 0.8,
                },
            },
        )

    def _extract_text(self, data):
        return data["message"]["content"]

    async def probe(self) -> DaemonProbe:
        """Ask the daemon which models it has. Never raises."""
        try:
            response = await self._client.get(f"{self._base}/api/tags", timeout=PROBE_TIMEOUT_S)
        except httpx.HTTPError as e:
            logger.debug(f"Ollama probe failed: {e!r}")
            return DaemonProbe(reachable=False)

        if not response.is_success:
            return DaemonProbe(reachable=False)

        try:
            models = [
                m["name"]
                for m in response.json().get("models") or []
                if isinstance(m, dict) and isinstance(m.get("name"), str)
            ]
            present = any(name.startswith(self.descriptor.model) for name in models)
        except (ValueError, AttributeError, TypeError):
            logger.warning("Ollama /api/tags returned a malformed body")
            return DaemonProbe(reachable=True)

        return DaemonProbe(reachable=True, models=models, model_present=present)

    async def is_available(self) -> bool:
        """Daemon is running and the configured model is pulled."""
        status = await self.probe()
        if status.reachable and not status.model_present:
            logger.info(
                f"Ollama running but model '{self.descriptor.model}' not found. "
                f"Available: {', '.join(status.models) or 'none'}"
            )
        return status.model_present

    async def is_service_running(self) -> bool:
        return (await self.probe()).reachable

    async def available_models(self) -> list[str]:
        return (await self.probe()).models

    async def pull_model(self, model_name: str) -> bool:
        try:
            response = await self._client.post(
                f"{self._base}/api/pull",
                json={"name": model_name, "stream": False},
                timeout=PULL_TIMEOUT_S,
            )
        except httpx.HTTPError as e:
            logger.error(f"Failed to pull Ollama model {model_name}: {e!r}")
            return False
        return response.is_success
