"""Anthropic Claude adapter (Messages API)."""

from story_gateway.models import ChatResult
from story_gateway.providers.base import CloudProvider

CLAUDE_BASE_URL = "https://api.anthropic.com/v1"
ANTHROPIC_VERSION = "2023-06-01"


class ClaudeProvider(CloudProvider):
    """Anthropic Messages API; the system prompt travels outside ``messages``."""

    async def chat(self, system_prompt: str, user_message: str, max_tokens: int = 1024) -> ChatResult:
        if not self.descriptor.api_key:
            return self._not_configured()

        return await self._post_chat(
            f"{self.descriptor.endpoint.rstrip('/')}/messages",
            {
                "model": self.descriptor.model,
                "max_tokens": max_tokens,
                "system": system_prompt,
                "messages": [{"role": "user", "content": user_message}],
            },
            headers={
                "x-api-key": self.descriptor.api_key,
                "anthropic-version": ANTHROPIC_VERSION,
            },
        )

    def _extract_text(self, data):
        return data["content"][0]["text"]
