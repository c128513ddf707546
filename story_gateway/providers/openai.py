"""OpenAI adapter (chat completions)."""

from story_gateway.models import ChatResult
from story_gateway.providers.base import CloudProvider

OPENAI_BASE_URL = "https://api.openai.com/v1"


class OpenAIProvider(CloudProvider):
    """OpenAI chat completions with bearer auth."""

    async def chat(self, system_prompt: str, user_message: str, max_tokens: int = 1024) -> ChatResult:
        if not self.descriptor.api_key:
            return self._not_configured()

        return await self._post_chat(
            f"{self.descriptor.endpoint.rstrip('/')}/chat/completions",
            {
                "model": self.descriptor.model,
                "max_tokens": max_tokens,
                "messages": [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_message},
                ],
            },
            headers={"Authorization": f"Bearer {self.descriptor.api_key}"},
        )

    def _extract_text(self, data):
        return data["choices"][0]["message"]["content"]
