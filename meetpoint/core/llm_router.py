"""Stage 기반 LLM 라우팅 유틸."""

from __future__ import annotations

from enum import StrEnum
from functools import lru_cache
from time import perf_counter
from typing import Any

from langchain_openai import ChatOpenAI

from meetpoint.core.config import Settings, get_settings
from meetpoint.core.logger import get_logger
from meetpoint.core.timeout_policy import get_timeout_policy

logger = get_logger(__name__)


class Tier(StrEnum):
    """Stage 라우팅 tier."""

    QUALITY = "QUALITY"


class Stage(StrEnum):
    """LLM 호출 stage."""

    PLACE_RANKING = "PLACE_RANKING"


_STAGE_TIER_MAP: dict[Stage, Tier] = {
    Stage.PLACE_RANKING: Tier.QUALITY,
}
_TIER_MODEL_SETTINGS: dict[Tier, str] = {
    Tier.QUALITY: "LLM_MODEL_QUALITY",
}


class LLMNotConfiguredError(RuntimeError):
    """OPENAI_API_KEY가 없어 LLM을 호출할 수 없을 때 발생합니다."""


def stage_to_tier(stage: Stage) -> Tier:
    """Stage를 tier로 매핑합니다."""
    return _STAGE_TIER_MAP[stage]


def _normalize_model_name(model_name: str) -> str:
    return model_name.strip()


def _tier_model_name(tier: Tier, settings: Settings) -> str:
    return _normalize_model_name(getattr(settings, _TIER_MODEL_SETTINGS[tier]))


def resolve_model(stage: Stage, settings: Settings | None = None) -> tuple[str, Tier | None, bool]:
    """설정과 stage를 기반으로 최종 모델을 선택합니다."""
    resolved_settings = settings or get_settings()
    fallback_model = _normalize_model_name(resolved_settings.LLM_MODEL_NAME)

    if not resolved_settings.ENABLE_STAGE_LLM_ROUTING:
        return fallback_model, None, False

    tier = stage_to_tier(stage)
    tier_model = _tier_model_name(tier, resolved_settings)
    model = tier_model or fallback_model
    return model, tier, True


def attempt_count(stage: Stage, settings: Settings | None = None) -> int:
    """`ainvoke`가 한 번의 요청에서 모델을 호출하는 최대 횟수. tier 모델이 기본 모델과 다르면 2입니다."""
    resolved_settings = settings or get_settings()
    selected_model, _, routing_enabled = resolve_model(stage, resolved_settings)
    fallback_model = _normalize_model_name(resolved_settings.LLM_MODEL_NAME)
    return 2 if routing_enabled and selected_model != fallback_model else 1


@lru_cache(maxsize=32)
def _get_chat_openai_client(
    model: str,
    temperature: float,
    timeout_seconds: int,
    api_key: str,
) -> ChatOpenAI:
    return ChatOpenAI(
        model=model,
        temperature=temperature,
        api_key=api_key,
        request_timeout=timeout_seconds,
        # 재시도는 ainvoke가 기본 모델로 한 번만 수행한다.
        max_retries=0,
    )


def clear_llm_client_cache() -> None:
    """테스트/운영 시 클라이언트 캐시를 비웁니다."""
    _get_chat_openai_client.cache_clear()


def _resolve_timeout_seconds(timeout_seconds: int | None, settings: Settings) -> int:
    if timeout_seconds is None:
        return get_timeout_policy(settings).llm_timeout_seconds
    return max(1, int(timeout_seconds))


def _log_call(
    message: str,
    *,
    stage: Stage,
    tier: Tier | None,
    selected_model: str,
    fallback_used: bool,
    latency_ms: float,
    exc: Exception | None = None,
) -> None:
    log = logger.warning if exc is not None else logger.info
    log(
        "%s: stage=%s tier=%s model=%s fallback_used=%s latency_ms=%.1f",
        message,
        stage.value,
        tier.value if tier else None,
        selected_model,
        fallback_used,
        latency_ms,
        exc_info=exc,
    )


async def ainvoke(
    stage: Stage,
    payload: Any,
    *,
    settings: Settings | None = None,
    timeout_seconds: int | None = None,
    temperature: float | None = None,
) -> Any:
    """Stage 기준으로 모델을 선택해 비동기 LLM 호출을 수행합니다.

    라우팅이 켜져 있고 tier 모델이 실패하면 기본 모델로 한 번 재시도합니다.

    Raises:
        LLMNotConfiguredError: OPENAI_API_KEY가 설정되지 않았을 때.
    """
    resolved_settings = settings or get_settings()
    if not resolved_settings.OPENAI_API_KEY:
        raise LLMNotConfiguredError("OPENAI_API_KEY is not configured.")

    resolved_timeout = _resolve_timeout_seconds(timeout_seconds, resolved_settings)
    resolved_temperature = 0.0 if temperature is None else float(temperature)
    selected_model, tier, routing_enabled = resolve_model(stage, resolved_settings)
    fallback_model = _normalize_model_name(resolved_settings.LLM_MODEL_NAME)

    started = perf_counter()
    try:
        client = _get_chat_openai_client(
            selected_model,
            resolved_temperature,
            resolved_timeout,
            resolved_settings.OPENAI_API_KEY,
        )
        response = await client.ainvoke(payload)
        _log_call(
            "LLM call succeeded",
            stage=stage,
            tier=tier,
            selected_model=selected_model,
            fallback_used=False,
            latency_ms=(perf_counter() - started) * 1000,
        )
        return response
    except Exception as exc:
        retry = routing_enabled and selected_model != fallback_model
        _log_call(
            "LLM call failed. Retrying with fallback model" if retry else "LLM call failed",
            stage=stage,
            tier=tier,
            selected_model=selected_model,
            fallback_used=False,
            latency_ms=(perf_counter() - started) * 1000,
            exc=exc,
        )
        if not retry:
            raise

    fallback_started = perf_counter()
    fallback_client = _get_chat_openai_client(
        fallback_model,
        resolved_temperature,
        resolved_timeout,
        resolved_settings.OPENAI_API_KEY,
    )
    try:
        response = await fallback_client.ainvoke(payload)
    except Exception as fallback_exc:
        _log_call(
            "LLM fallback call failed",
            stage=stage,
            tier=tier,
            selected_model=fallback_model,
            fallback_used=True,
            latency_ms=(perf_counter() - fallback_started) * 1000,
            exc=fallback_exc,
        )
        raise

    _log_call(
        "LLM call succeeded",
        stage=stage,
        tier=tier,
        selected_model=fallback_model,
        fallback_used=True,
        latency_ms=(perf_counter() - fallback_started) * 1000,
    )
    return response
