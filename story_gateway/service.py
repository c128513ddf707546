"""StoryAIService: writing operations on top of the gateway.

Callers get text, a list of lines, or a ``ServiceUnavailable`` value. Which
providers were tried, and why they failed, stays in the logs.
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from story_gateway.config import GatewayConfig, GatewaySettings
from story_gateway.context import Chapter, ContentMode, Operation, StoryContext
from story_gateway.exceptions import ContentModeError
from story_gateway.models import RequestClass
from story_gateway.prompts import Prompt, PromptAssembler, split_lines
from story_gateway.providers.ollama import OllamaProvider
from story_gateway.router import GatewayRouter, build_gateway
from story_gateway.status import StatusReporter

MAX_TOKENS: dict[Operation, int] = {
    Operation.CONTINUE: 1500,
    Operation.SUGGEST: 500,
    Operation.IMPROVE: 2000,
    Operation.TITLE: 200,
    Operation.DESCRIPTION: 300,
}
ADULT_CONTINUE_MAX_TOKENS = 2000

UNAVAILABLE_MESSAGE = "AI service is temporarily unavailable"
ADULT_UNAVAILABLE_MESSAGE = (
    "AI service for adult content is unavailable. Make sure Ollama is running."
)


@dataclass(frozen=True)
class ServiceUnavailable:
    """Every eligible provider failed or was skipped."""

    message: str = UNAVAILABLE_MESSAGE
    request_class: RequestClass = RequestClass.STANDARD


@dataclass(frozen=True)
class AssistRequest:
    story: StoryContext
    operation: Operation
    chapter: Chapter | None = None
    instruction: str = ""
    content_mode: ContentMode = ContentMode.STANDARD
    text: str = ""  # only used by IMPROVE


AssistResult = str | list[str] | ServiceUnavailable


class StoryAIService:

    def __init__(self, gateway: GatewayRouter, assembler: PromptAssembler | None = None):
        self._gateway = gateway
        self._assembler = assembler or PromptAssembler()
        self._status = StatusReporter(gateway)

    @property
    def assembler(self) -> PromptAssembler:
        return self._assembler

    async def run(self, request: AssistRequest) -> AssistResult:
        """Handle one inbound request, whatever the operation."""
        mode = request.content_mode
        self._check_mode(request.story, mode)

        prompt = self._assembler.build(
            request.operation,
            request.story,
            chapter=request.chapter,
            instruction=request.instruction,
            mode=mode,
            text=request.text,
        )
        text = await self._send(prompt, self._max_tokens(request.operation, mode), mode)
        if isinstance(text, ServiceUnavailable):
            return text
        if request.operation in (Operation.SUGGEST, Operation.TITLE):
            return split_lines(text)
        return text

    async def continue_writing(
        self,
        story: StoryContext,
        chapter: Chapter | None = None,
        instruction: str = "",
        mode: ContentMode = ContentMode.STANDARD,
    ) -> str | ServiceUnavailable:
        return await self.run(AssistRequest(story, Operation.CONTINUE, chapter, instruction, mode))

    async def suggestions(
        self, story: StoryContext, chapter: Chapter | None = None
    ) -> list[str] | ServiceUnavailable:
        return await self.run(AssistRequest(story, Operation.SUGGEST, chapter))

    async def improve_text(
        self, story: StoryContext, text: str, instruction: str
    ) -> str | ServiceUnavailable:
        return await self.run(
            AssistRequest(story, Operation.IMPROVE, instruction=instruction, text=text)
        )

    async def generate_titles(self, story: StoryContext) -> list[str] | ServiceUnavailable:
        return await self.run(AssistRequest(story, Operation.TITLE))

    async def generate_description(self, story: StoryContext) -> str | ServiceUnavailable:
        return await self.run(AssistRequest(story, Operation.DESCRIPTION))

    # --- diagnostics ---

    async def status(self) -> dict:
        providers = await self._status.provider_status()
        primary = await self._status.primary_provider()
        return {
            "available": primary is not None,
            "primary_provider": primary,
            "providers": {name: s.to_dict() for name, s in providers.items()},
        }

    async def adult_status(self) -> dict:
        """Local daemon state: reachable vs. reachable-with-model are reported apart."""
        daemons = [p for p in self._gateway.providers if isinstance(p, OllamaProvider)]
        if not daemons:
            return {"available": False, "service_running": False, "models": []}
        probe = await daemons[0].probe()
        return {
            "available": probe.model_present,
            "service_running": probe.reachable,
            "models": probe.models,
        }

    # --- internals ---

    @staticmethod
    def _check_mode(story: StoryContext, mode: ContentMode) -> None:
        if mode is ContentMode.ADULT and not story.is_adult_rated:
            raise ContentModeError(
                f"Adult mode requires an adult rating, story '{story.title}' is rated {story.rating}"
            )

    @staticmethod
    def _max_tokens(operation: Operation, mode: ContentMode) -> int:
        if operation is Operation.CONTINUE and mode is ContentMode.ADULT:
            return ADULT_CONTINUE_MAX_TOKENS
        return MAX_TOKENS[operation]

    async def _send(
        self, prompt: Prompt, max_tokens: int, mode: ContentMode
    ) -> str | ServiceUnavailable:
        request_class = mode.request_class
        outcome = await self._gateway.chat(
            prompt.system_prompt, prompt.user_message, max_tokens, request_class
        )
        if outcome.ok:
            return outcome.text
        logger.error(f"AI request failed ({request_class.value}): no provider produced text")
        message = ADULT_UNAVAILABLE_MESSAGE if request_class is RequestClass.ADULT else UNAVAILABLE_MESSAGE
        return ServiceUnavailable(message=message, request_class=request_class)


def build_service(settings: GatewaySettings | None = None, **gateway_kwargs) -> StoryAIService:
    """Process-start wiring: settings -> immutable config -> gateway -> service."""
    settings = settings or GatewaySettings()
    gateway = build_gateway(GatewayConfig.from_settings(settings), **gateway_kwargs)
    return StoryAIService(gateway, PromptAssembler(language=settings.PROMPT_LANGUAGE))
