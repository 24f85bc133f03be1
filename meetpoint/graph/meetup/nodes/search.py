"""공급자 병렬 장소 검색 노드."""

import asyncio
from typing import Any

from langchain_core.runnables import RunnableConfig

from meetpoint.core.logger import get_logger
from meetpoint.core.outcome import Outcome, settle
from meetpoint.graph.meetup.state import MeetupState, PipelineStage
from meetpoint.graph.meetup.utils import get_dependencies
from meetpoint.schemas.location import Coordinate, Place
from meetpoint.services.naver_service import naver_search_term
from meetpoint.services.place_merger import merge_places
from meetpoint.services.places_service import PlacesServiceProtocol
from meetpoint.services.provider_registry import MeetupDependencies

logger = get_logger(__name__)

MAX_SEARCH_RADIUS_METERS = 20000
BROADEN_RADIUS_FACTOR = 2


async def _search_provider(
    service: PlacesServiceProtocol,
    *,
    center: Coordinate,
    place_type: str,
    preferences: str,
    radius_meters: int,
    limit: int,
    area_hint: str | None,
    timeout_seconds: int,
) -> list[Place]:
    """공급자 하나의 유형 검색과 (선호 사항이 있으면) 키워드 검색을 함께 실행합니다."""
    nearby_task = settle(
        service.search_nearby(center, place_type, radius_meters, limit, area_hint=area_hint),
        fallback=[],
        timeout_seconds=timeout_seconds,
        label=f"search_nearby:{service.name}",
    )
    keyword = preferences.strip()
    if not keyword:
        return (await nearby_task).value

    keyword_task = settle(
        service.search_by_keyword(center, keyword, radius_meters, limit, area_hint=area_hint),
        fallback=[],
        timeout_seconds=timeout_seconds,
        label=f"search_by_keyword:{service.name}",
    )
    nearby, by_keyword = await asyncio.gather(nearby_task, keyword_task)
    return merge_places(nearby.value, by_keyword.value)


async def _broaden(
    deps: MeetupDependencies,
    *,
    center: Coordinate,
    place_type: str,
    radius_meters: int,
    area_hint: str | None,
) -> dict[str, list[Place]]:
    """반경을 넓히고 일반 키워드로 우선순위 순서대로 한 번 더 검색합니다."""
    broadened_radius = min(MAX_SEARCH_RADIUS_METERS, radius_meters * BROADEN_RADIUS_FACTOR)
    keyword = naver_search_term(place_type)

    for service in deps.place_services:
        outcome: Outcome[list[Place]] = await settle(
            service.search_by_keyword(center, keyword, broadened_radius, deps.search_limit, area_hint=area_hint),
            fallback=[],
            timeout_seconds=deps.search_timeout_seconds,
            label=f"broadened_search:{service.name}",
        )
        if outcome.value:
            logger.info(
                "Broadened search succeeded: provider=%s keyword=%s radius=%d count=%d",
                service.name,
                keyword,
                broadened_radius,
                len(outcome.value),
            )
            return {service.name: outcome.value}

    logger.warning("Broadened search found no places: keyword=%s radius=%d", keyword, broadened_radius)
    return {}


async def search_places(state: MeetupState, config: RunnableConfig) -> dict[str, Any]:
    """모든 공급자를 동시에 검색하고, 결과가 전혀 없으면 검색을 한 번 넓힙니다."""
    deps = get_dependencies(config)
    center = state["center_point"].coordinates
    place_type = state.get("place_type", "restaurant")
    radius_meters = state.get("radius_meters", 2000)
    area_hint = state.get("area_hint")

    results = await asyncio.gather(
        *(
            _search_provider(
                service,
                center=center,
                place_type=place_type,
                preferences=state.get("preferences", ""),
                radius_meters=radius_meters,
                limit=deps.search_limit,
                area_hint=area_hint,
                timeout_seconds=deps.search_timeout_seconds,
            )
            for service in deps.place_services
        )
    )
    search_results = {service.name: places for service, places in zip(deps.place_services, results)}
    logger.info(
        "Place search completed: %s",
        ", ".join(f"{name}={len(places)}" for name, places in search_results.items()) or "no providers",
    )

    broadened = False
    if not any(search_results.values()):
        broadened = True
        search_results = await _broaden(
            deps,
            center=center,
            place_type=place_type,
            radius_meters=radius_meters,
            area_hint=area_hint,
        )

    return {
        **state,
        "stage": PipelineStage.SEARCHING,
        "search_results": search_results,
        "search_broadened": broadened,
    }
