"""Google Gemini adapter (generateContent API)."""

from story_gateway.models import ChatResult
from story_gateway.providers.base import CloudProvider

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


class GeminiProvider(CloudProvider):
    """Gemini has a generous free tier, so it usually leads the standard list.

    The key travels as a query parameter, not a header.
    """

    async def chat(self, system_prompt: str, user_message: str, max_tokens: int = 1024) -> ChatResult:
        if not self.descriptor.api_key:
            return self._not_configured()

        base = self.descriptor.endpoint.rstrip("/")
        return await self._post_chat(
            f"{base}/models/{self.descriptor.model}:generateContent",
            {
                "systemInstruction": {"parts": [{"text": system_prompt}]},
                "contents": [{"parts": [{"text": user_message}]}],
                "generationConfig": {
                    "maxOutputTokens": max_tokens,
                    "temperature": 0.7,
                },
            },
            params={"key": self.descriptor.api_key},
        )

    def _extract_text(self, data):
        return data["candidates"][0]["content"]["parts"][0]["text"]
