"""LLM 기반 장소 추천과 접근성 기반 대체 순위."""

from __future__ import annotations

import asyncio
import json
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Literal

from langchain_core.prompts import ChatPromptTemplate
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictInt, StrictStr, ValidationError

from meetpoint.core.config import Settings, get_settings
from meetpoint.core.llm_router import Stage, ainvoke
from meetpoint.core.logger import get_logger
from meetpoint.schemas.location import Coordinate, Place

logger = get_logger(__name__)

RankingMethod = Literal["ai", "accessibility"]
DEFAULT_ACCESSIBILITY_SCORE = 5.0

RECOMMENDATION_INSTRUCTION = (
    "당신은 한국의 약속 장소 추천 전문가입니다.\n"
    "주어진 장소들 중에서 모든 참가자에게 공평하고 요구사항에 맞는 곳을 최대 {max_results}개까지 추천해주세요.\n\n"
    "추천 기준:\n"
    "- 참가자 전체의 평균 대중교통 이동 시간과 접근성 점수\n"
    "- 사용자 선호도와의 일치도\n"
    "- 평점 및 품질\n"
    "- 장소 유형과의 적합성\n"
    "- 영업 상태\n\n"
    "응답은 JSON 배열만 반환하세요:\n"
    "[\n"
    '  {{"placeIndex": 장소번호(1부터 시작), "score": 추천점수(1-10), "reason": "추천 이유(한국어)"}}\n'
    "]\n"
    "목록에 없는 장소 번호는 절대 만들지 마세요."
)

_USER_PROMPT = (
    "참가자 주소:\n{addresses}\n\n"
    "중심점: 위도 {center_lat:.5f}, 경도 {center_lng:.5f}\n"
    "장소 유형: {place_type}\n"
    "사용자 선호사항: {preferences}\n\n"
    "검색된 장소 목록:\n{places}"
)


class ScoringOracle(ABC):
    """장소 목록 문맥과 지시문을 받아 원문 응답을 돌려주는 채점기."""

    @abstractmethod
    async def score(self, context_text: str, instruction_text: str) -> str:
        raise NotImplementedError


class LangChainScoringOracle(ScoringOracle):
    """llm_router를 통해 ChatOpenAI를 호출하는 채점기."""

    def __init__(self, settings: Settings | None = None, timeout_seconds: int | None = None) -> None:
        self._settings = settings or get_settings()
        self._timeout_seconds = timeout_seconds

    async def score(self, context_text: str, instruction_text: str) -> str:
        prompt = ChatPromptTemplate.from_messages([("system", "{instruction}"), ("human", "{context}")])
        messages = prompt.format_messages(instruction=instruction_text, context=context_text)
        response = await ainvoke(
            Stage.PLACE_RANKING,
            messages,
            settings=self._settings,
            timeout_seconds=self._timeout_seconds,
            temperature=self._settings.RECOMMEND_LLM_TEMPERATURE,
        )
        return response.content if isinstance(response.content, str) else str(response.content)


class OracleRecommendation(BaseModel):
    """채점기 응답 배열의 항목 하나."""

    model_config = ConfigDict(populate_by_name=True)

    place_index: StrictInt = Field(..., validation_alias=AliasChoices("placeIndex", "place_index"))
    score: float = Field(default=0.0, validation_alias=AliasChoices("score", "recommendationScore"))
    reason: StrictStr


def strip_code_fence(text: str) -> str:
    """코드 펜스를 제거합니다."""
    content = (text or "").strip()
    if content.startswith("```"):
        parts = content.split("```")
        if len(parts) > 1:
            content = parts[1].strip()
            if content.startswith("json"):
                content = content[4:].strip()
    return content.strip()


def _first_json_array(text: str) -> list | None:
    decoder = json.JSONDecoder()
    start = text.find("[")
    while start != -1:
        try:
            value, _ = decoder.raw_decode(text, start)
        except ValueError:
            value = None
        if isinstance(value, list):
            return value
        start = text.find("[", start + 1)
    return None


def parse_oracle_output(raw: str, place_count: int) -> list[OracleRecommendation]:
    """응답에서 첫 번째 올바른 JSON 배열을 찾아 유효한 항목만 점수 내림차순으로 반환합니다.

    범위를 벗어난 placeIndex, 문자열이 아닌 reason은 항목 단위로 버립니다.
    """
    items = _first_json_array(strip_code_fence(raw))
    if items is None:
        logger.warning("Oracle output has no JSON array: length=%d", len(raw or ""))
        return []

    accepted: list[OracleRecommendation] = []
    seen: set[int] = set()
    for position, item in enumerate(items):
        try:
            entry = OracleRecommendation.model_validate(item)
        except ValidationError as exc:
            logger.warning("Oracle entry discarded: position=%d errors=%d", position, exc.error_count())
            continue
        if not 1 <= entry.place_index <= place_count:
            logger.warning(
                "Oracle entry discarded: position=%d place_index=%d out of range 1..%d",
                position,
                entry.place_index,
                place_count,
            )
            continue
        if entry.place_index in seen:
            logger.warning("Oracle entry discarded: position=%d duplicate place_index=%d", position, entry.place_index)
            continue
        seen.add(entry.place_index)
        accepted.append(entry)

    return sorted(accepted, key=lambda entry: entry.score, reverse=True)


def _describe_place(index: int, place: Place) -> str:
    lines = [
        f"{index}. {place.name}",
        f"   주소: {place.road_address or place.address or 'N/A'}",
        f"   카테고리: {place.category or 'N/A'}",
        f"   평점: {place.rating if place.rating is not None else 'N/A'}",
        f"   중심점으로부터 거리: {place.distance_from_center}m",
    ]
    accessibility = place.transportation_accessibility
    if accessibility is not None:
        lines.append(
            f"   평균 대중교통 이동시간: {accessibility.average_transit_time}분 "
            f"(접근성 점수 {accessibility.accessibility_score:g}/10, {accessibility.calculation_method})"
        )
        for leg in accessibility.from_addresses:
            lines.append(f"     - {leg.origin}: {leg.transit_time}, {leg.transit_distance}")
    if place.business_status:
        lines.append(f"   영업 상태: {place.business_status}")
    if place.price_level is not None:
        lines.append(f"   가격대: {place.price_level}/4")
    if place.open_now is not None:
        lines.append(f"   현재 영업 중: {'예' if place.open_now else '아니오'}")
    if place.opening_hours:
        lines.append(f"   영업 시간: {'; '.join(place.opening_hours)}")
    return "\n".join(lines)


def build_places_context(
    places: Sequence[Place],
    center: Coordinate,
    original_addresses: Sequence[str],
    type_filter: str,
    preferences: str,
) -> str:
    """채점기에 전달할 장소 목록 문맥을 만듭니다. 장소 번호는 1부터 시작합니다."""
    return _USER_PROMPT.format(
        addresses="\n".join(f"- {address}" for address in original_addresses),
        center_lat=center.lat,
        center_lng=center.lng,
        place_type=type_filter,
        preferences=preferences.strip() or "특별한 선호사항 없음",
        places="\n\n".join(_describe_place(index, place) for index, place in enumerate(places, start=1)),
    )


def _accessibility_key(place: Place) -> float:
    accessibility = place.transportation_accessibility
    if accessibility is None:
        return DEFAULT_ACCESSIBILITY_SCORE
    return accessibility.accessibility_score


def rank_by_accessibility(places: Sequence[Place], max_results: int) -> list[Place]:
    """접근성 점수 내림차순(없으면 5점)으로 정렬합니다. 동점은 입력 순서를 유지합니다."""
    return sorted(places, key=_accessibility_key, reverse=True)[:max_results]


class RecommendationEngine:
    """채점기로 순위를 매기고, 실패하면 접근성 순위로 대체합니다. 예외를 던지지 않습니다."""

    def __init__(self, oracle: ScoringOracle | None, *, timeout_seconds: int = 30) -> None:
        self._oracle = oracle
        self._timeout_seconds = timeout_seconds

    @property
    def timeout_seconds(self) -> int:
        return self._timeout_seconds

    async def recommend(
        self,
        places: Sequence[Place],
        center: Coordinate,
        original_addresses: Sequence[str],
        type_filter: str,
        preferences: str,
        max_results: int,
    ) -> tuple[list[Place], RankingMethod]:
        if not places:
            return [], "accessibility"
        if self._oracle is None:
            logger.info("Scoring oracle not configured. Ranking by accessibility.")
            return rank_by_accessibility(places, max_results), "accessibility"

        context = build_places_context(places, center, original_addresses, type_filter, preferences)
        instruction = RECOMMENDATION_INSTRUCTION.format(max_results=max_results)
        try:
            raw = await asyncio.wait_for(
                self._oracle.score(context, instruction),
                timeout=self._timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning("Place ranking timed out: timeout=%s", self._timeout_seconds)
            return rank_by_accessibility(places, max_results), "accessibility"
        except Exception:
            logger.exception("Place ranking call failed")
            return rank_by_accessibility(places, max_results), "accessibility"

        entries = parse_oracle_output(raw, len(places))
        if not entries:
            logger.warning("Place ranking produced no valid entries. Ranking by accessibility.")
            return rank_by_accessibility(places, max_results), "accessibility"

        ranked = [
            places[entry.place_index - 1].model_copy(
                update={"ai_recommendation_score": entry.score, "ai_analysis": entry.reason}
            )
            for entry in entries[:max_results]
        ]
        logger.info("Place ranking completed: candidates=%d recommended=%d", len(places), len(ranked))
        return ranked, "ai"
