"""Stage 기반 LLM 라우팅 테스트."""

import asyncio

import pytest

from meetpoint.core import llm_router
from meetpoint.core.config import Settings
from meetpoint.core.llm_router import (
    LLMNotConfiguredError,
    Stage,
    Tier,
    ainvoke,
    attempt_count,
    clear_llm_client_cache,
    resolve_model,
)
from meetpoint.services.provider_registry import build_meetup_dependencies


@pytest.fixture(autouse=True)
def _fresh_client_cache():
    clear_llm_client_cache()
    yield
    clear_llm_client_cache()


def test_resolve_model_without_routing_uses_default_model() -> None:
    settings = Settings(LLM_MODEL_NAME="gpt-4o-mini", LLM_MODEL_QUALITY="gpt-4o")

    assert resolve_model(Stage.PLACE_RANKING, settings) == ("gpt-4o-mini", None, False)


def test_resolve_model_with_routing_uses_quality_tier() -> None:
    settings = Settings(LLM_MODEL_NAME="gpt-4o-mini", ENABLE_STAGE_LLM_ROUTING=True, LLM_MODEL_QUALITY="gpt-4o")

    assert resolve_model(Stage.PLACE_RANKING, settings) == ("gpt-4o", Tier.QUALITY, True)


def test_ainvoke_requires_api_key() -> None:
    with pytest.raises(LLMNotConfiguredError):
        asyncio.run(ainvoke(Stage.PLACE_RANKING, "ping", settings=Settings(OPENAI_API_KEY="")))


def test_ainvoke_retries_once_with_fallback_model(monkeypatch) -> None:
    used_models: list[str] = []

    class _FakeClient:
        def __init__(self, model: str) -> None:
            self.model = model

        async def ainvoke(self, payload):
            used_models.append(self.model)
            if self.model == "gpt-4o":
                raise RuntimeError("tier model down")
            return "ok"

    monkeypatch.setattr(
        llm_router,
        "_get_chat_openai_client",
        lambda model, temperature, timeout_seconds, api_key: _FakeClient(model),
    )
    settings = Settings(
        OPENAI_API_KEY="test-key",
        LLM_MODEL_NAME="gpt-4o-mini",
        ENABLE_STAGE_LLM_ROUTING=True,
        LLM_MODEL_QUALITY="gpt-4o",
    )

    result = asyncio.run(ainvoke(Stage.PLACE_RANKING, "ping", settings=settings, timeout_seconds=5))

    assert result == "ok"
    assert used_models == ["gpt-4o", "gpt-4o-mini"]


def test_attempt_count_reflects_fallback_retry() -> None:
    assert attempt_count(Stage.PLACE_RANKING, Settings(LLM_MODEL_NAME="gpt-4o-mini")) == 1
    assert (
        attempt_count(
            Stage.PLACE_RANKING,
            Settings(LLM_MODEL_NAME="gpt-4o-mini", ENABLE_STAGE_LLM_ROUTING=True, LLM_MODEL_QUALITY="gpt-4o"),
        )
        == 2
    )
    assert (
        attempt_count(
            Stage.PLACE_RANKING,
            Settings(LLM_MODEL_NAME="gpt-4o-mini", ENABLE_STAGE_LLM_ROUTING=True, LLM_MODEL_QUALITY="gpt-4o-mini"),
        )
        == 1
    )


def test_ranking_timeout_leaves_room_for_fallback_retry() -> None:
    routed = build_meetup_dependencies(
        Settings(
            OPENAI_API_KEY="test-key",
            LLM_TIMEOUT_SECONDS=20,
            LLM_MODEL_NAME="gpt-4o-mini",
            ENABLE_STAGE_LLM_ROUTING=True,
            LLM_MODEL_QUALITY="gpt-4o",
        )
    )
    single = build_meetup_dependencies(Settings(OPENAI_API_KEY="test-key", LLM_TIMEOUT_SECONDS=20))

    assert routed.engine.timeout_seconds == 40
    assert single.engine.timeout_seconds == 20


def test_chat_clients_are_cached_until_cleared() -> None:
    first = llm_router._get_chat_openai_client("gpt-4o-mini", 0.0, 10, "test-key")

    assert llm_router._get_chat_openai_client("gpt-4o-mini", 0.0, 10, "test-key") is first

    clear_llm_client_cache()

    assert llm_router._get_chat_openai_client("gpt-4o-mini", 0.0, 10, "test-key") is not first
