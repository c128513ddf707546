"""Shared HTTP plumbing for provider adapters."""

from typing import Any

import httpx
from loguru import logger

from story_gateway.models import ChatResult, FailureKind, LLMProvider, ProviderDescriptor

_BODY_LOG_LIMIT = 300


class HTTPProvider(LLMProvider):
    """Base for adapters that talk JSON over HTTP.

    Subclasses build the request and pull the text out of the response body;
    this class owns the single network call and maps every way it can go
    wrong to a ``ChatResult`` failure.
    """

    def __init__(self, descriptor: ProviderDescriptor, client: httpx.AsyncClient | None = None):
        super().__init__(descriptor)
        self._client = client or httpx.AsyncClient()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _post_chat(
        self,
        url: str,
        payload: dict[str, Any],
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
    ) -> ChatResult:
        try:
            response = await self._client.post(
                url,
                json=payload,
                headers=headers,
                params=params,
                timeout=self.descriptor.timeout,
            )
        except httpx.TimeoutException as e:
            logger.warning(f"{self.name} API timeout after {self.descriptor.timeout}s: {e!r}")
            return ChatResult.failed(FailureKind.UNREACHABLE, "timeout")
        except httpx.HTTPError as e:
            logger.warning(f"{self.name} API transport error: {e!r}")
            return ChatResult.failed(FailureKind.UNREACHABLE, type(e).__name__)

        if not response.is_success:
            logger.warning(
                f"{self.name} API error: status={response.status_code} "
                f"body={response.text[:_BODY_LOG_LIMIT]}"
            )
            return ChatResult.failed(FailureKind.REJECTED, f"status {response.status_code}")

        try:
            text = self._extract_text(response.json())
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.warning(f"{self.name} API returned a malformed body: {e!r}")
            return ChatResult.failed(FailureKind.REJECTED, "malformed body")

        if not isinstance(text, str) or not text:
            logger.warning(f"{self.name} API returned no text")
            return ChatResult.failed(FailureKind.REJECTED, "empty text")
        return ChatResult.success(text)

    def _extract_text(self, data: Any) -> Any:
        raise NotImplementedError


class CloudProvider(HTTPProvider):
    """Commercial API: available iff a credential is configured."""

    async def is_available(self) -> bool:
        return bool(self.descriptor.api_key)

    def _not_configured(self) -> ChatResult:
        return ChatResult.failed(FailureKind.NOT_CONFIGURED, "no api key")
