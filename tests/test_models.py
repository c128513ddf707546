"""Basic structure tests for story_gateway."""

from story_gateway.models import FailureKind, ProviderDescriptor


def test_imports():
    from story_gateway import (  # noqa: F401
        CircuitBreaker,
        FailoverChain,
        GatewayRouter,
        LLMProvider,
        PromptAssembler,
        StoryAIService,
    )


def test_chat_result_success():
    from story_gateway import ChatResult
    r = ChatResult.success("hello")
    assert r.ok
    assert r.text == "hello"
    assert r.failure is None


def test_chat_result_failure():
    from story_gateway import ChatResult
    r = ChatResult.failed(FailureKind.REJECTED, "status 500")
    assert not r.ok
    assert r.text is None
    assert r.detail == "status 500"


def test_dispatch_outcome_defaults():
    from story_gateway import DispatchOutcome
    outcome = DispatchOutcome()
    assert not outcome.ok
    assert outcome.attempted == []
    assert outcome.skipped == {}


def test_descriptor_is_immutable():
    d = ProviderDescriptor("gemini", "http://x", "m", 0.0, 1.0)
    try:
        d.name = "other"
    except AttributeError:
        pass
    else:
        raise AssertionError("descriptor should be frozen")
