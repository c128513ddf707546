# tests/test_service.py
import pytest

from story_gateway.context import Chapter, ContentMode, Operation, StoryContext
from story_gateway.exceptions import ContentModeError
from story_gateway.models import RequestClass
from story_gateway.service import (
    ADULT_CONTINUE_MAX_TOKENS,
    AssistRequest,
    ServiceUnavailable,
    StoryAIService,
)


@pytest.fixture
def story():
    return StoryContext(
        title="Night Market",
        rating="PG",
        chapters=(Chapter(1, "Lanterns", "The stalls opened at dusk."),),
    )


@pytest.fixture
def adult_story():
    return StoryContext(title="After Hours", rating="18+")


@pytest.mark.asyncio
async def test_continue_returns_text(router_factory, fake_provider, story):
    gemini = fake_provider("gemini", text="They walked on.")
    service = StoryAIService(router_factory([gemini], ["gemini"]))

    result = await service.continue_writing(story, story.chapters[0], "more rain")

    assert result == "They walked on."
    system, user, max_tokens = gemini.calls[0]
    assert "Night Market" in system
    assert "more rain" in user
    assert max_tokens == 1500


@pytest.mark.asyncio
async def test_titles_are_split_into_lines(router_factory, fake_provider, story):
    gemini = fake_provider("gemini", text="Lantern Light\n\n  Dusk Market \nPaper Moons\n")
    service = StoryAIService(router_factory([gemini], ["gemini"]))

    titles = await service.generate_titles(story)

    assert titles == ["Lantern Light", "Dusk Market", "Paper Moons"]
    assert gemini.calls[0][2] == 200


@pytest.mark.asyncio
async def test_suggestions_are_split_into_lines(router_factory, fake_provider, story):
    gemini = fake_provider("gemini", text="1. A thief\n2. A fire")
    service = StoryAIService(router_factory([gemini], ["gemini"]))

    assert await service.suggestions(story) == ["1. A thief", "2. A fire"]


@pytest.mark.asyncio
async def test_improve_and_description(router_factory, fake_provider, story):
    gemini = fake_provider("gemini", text="Better.")
    service = StoryAIService(router_factory([gemini], ["gemini"]))

    assert await service.improve_text(story, "Bad.", "fix it") == "Better."
    assert await service.generate_description(story) == "Better."
    assert [c[2] for c in gemini.calls] == [2000, 300]


@pytest.mark.asyncio
async def test_total_failure_is_generic_unavailable(router_factory, fake_provider, story):
    providers = [fake_provider("gemini"), fake_provider("claude"), fake_provider("openai")]
    service = StoryAIService(router_factory(providers, ["gemini", "claude", "openai"]))

    result = await service.continue_writing(story)

    assert isinstance(result, ServiceUnavailable)
    assert result.request_class is RequestClass.STANDARD
    for name in ("gemini", "claude", "openai"):
        assert name not in result.message


@pytest.mark.asyncio
async def test_adult_mode_uses_adult_pool(router_factory, fake_provider, adult_story):
    gemini = fake_provider("gemini", text="cloud")
    ollama = fake_provider("ollama", text="local")
    service = StoryAIService(router_factory([gemini, ollama], ["gemini"], adult_priority=["ollama"]))

    result = await service.continue_writing(adult_story, mode=ContentMode.ADULT)

    assert result == "local"
    assert gemini.calls == []
    assert ollama.calls[0][2] == ADULT_CONTINUE_MAX_TOKENS


@pytest.mark.asyncio
async def test_adult_mode_unavailable_message(router_factory, fake_provider, adult_story):
    service = StoryAIService(router_factory([fake_provider("ollama")], [], adult_priority=["ollama"]))

    result = await service.continue_writing(adult_story, mode=ContentMode.ADULT)

    assert isinstance(result, ServiceUnavailable)
    assert result.request_class is RequestClass.ADULT
    assert "Ollama" in result.message


@pytest.mark.asyncio
async def test_adult_mode_requires_adult_rating(router_factory, fake_provider, story):
    ollama = fake_provider("ollama", text="local")
    service = StoryAIService(router_factory([ollama], [], adult_priority=["ollama"]))

    with pytest.raises(ContentModeError):
        await service.continue_writing(story, mode=ContentMode.ADULT)
    assert ollama.calls == []


@pytest.mark.asyncio
async def test_run_dispatches_by_operation(router_factory, fake_provider, story):
    gemini = fake_provider("gemini", text="one\ntwo")
    service = StoryAIService(router_factory([gemini], ["gemini"]))

    result = await service.run(AssistRequest(story, Operation.TITLE))

    assert result == ["one", "two"]


@pytest.mark.asyncio
async def test_status_reports_primary_and_providers(router_factory, fake_provider, story):
    gemini = fake_provider("gemini", text="x", available=False, cost=0.000075)
    claude = fake_provider("claude", text="x", cost=0.003)
    service = StoryAIService(router_factory([gemini, claude], ["gemini", "claude"]))

    status = await service.status()

    assert status["available"] is True
    assert status["primary_provider"] == "claude"
    assert status["providers"]["gemini"] == {
        "available": False,
        "circuit_open": False,
        "cost_per_1k_tokens": 0.000075,
    }


def test_build_service_uses_prompt_language():
    from story_gateway.config import GatewaySettings
    from story_gateway.service import build_service

    service = build_service(GatewaySettings(_env_file=None, PROMPT_LANGUAGE="Polish"))

    assert service.assembler.language == "Polish"


@pytest.mark.asyncio
async def test_adult_status_without_local_daemon(router_factory, fake_provider):
    service = StoryAIService(router_factory([fake_provider("gemini", text="x")], ["gemini"]))
    assert await service.adult_status() == {"available": False, "service_running": False, "models": []}
