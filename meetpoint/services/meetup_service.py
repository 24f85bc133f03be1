"""여러 주소의 중심점 기준 약속 장소 추천 서비스."""

from __future__ import annotations

from collections.abc import Sequence

from meetpoint.core.errors import EmptyAddressListError, InvalidSearchParameterError, TooManyAddressesError
from meetpoint.core.geo import centroid, round_half_up
from meetpoint.core.logger import get_logger
from meetpoint.graph.meetup.state import MeetupState, PipelineStage
from meetpoint.graph.meetup.workflow import compiled_graph
from meetpoint.schemas.location import (
    CenterPoint,
    Coordinate,
    DistanceMatrixSummary,
    GeocodeResult,
    MeetupResult,
    Place,
    TransitLeg,
)
from meetpoint.services.provider_registry import MeetupDependencies
from meetpoint.services.recommendation_service import DEFAULT_ACCESSIBILITY_SCORE

logger = get_logger(__name__)

MAX_ADDRESSES = 20
MIN_RADIUS_METERS = 100
MAX_RADIUS_METERS = 20000
MIN_RESULTS = 1
MAX_RESULTS = 50


def validate_addresses(addresses: Sequence[str]) -> list[str]:
    """빈 주소를 제거하고 개수를 검증합니다."""
    cleaned = [address.strip() for address in addresses if address and address.strip()]
    if not cleaned:
        raise EmptyAddressListError()
    if len(cleaned) > MAX_ADDRESSES:
        raise TooManyAddressesError(len(cleaned), MAX_ADDRESSES)
    return cleaned


def validate_recommend_params(
    addresses: Sequence[str],
    radius_meters: int,
    max_results: int,
) -> list[str]:
    """I/O 이전에 요청 범위를 검증합니다.

    Raises:
        EmptyAddressListError: 주소가 없을 때
        TooManyAddressesError: 주소가 20개를 넘을 때
        InvalidSearchParameterError: 반경 또는 결과 수가 범위를 벗어날 때
    """
    cleaned = validate_addresses(addresses)
    if not MIN_RADIUS_METERS <= radius_meters <= MAX_RADIUS_METERS:
        raise InvalidSearchParameterError("radius_meters", radius_meters, MIN_RADIUS_METERS, MAX_RADIUS_METERS)
    if not MIN_RESULTS <= max_results <= MAX_RESULTS:
        raise InvalidSearchParameterError("max_results", max_results, MIN_RESULTS, MAX_RESULTS)
    return cleaned


def _accessibility_score(place: Place) -> float:
    accessibility = place.transportation_accessibility
    return accessibility.accessibility_score if accessibility else DEFAULT_ACCESSIBILITY_SCORE


def build_diagnostics(state: MeetupState) -> DistanceMatrixSummary:
    """이동 시간 계산 결과와 추천 목록으로 진단 요약을 만듭니다."""
    analyzed = state.get("analyzed_places", [])
    recommendations = state.get("recommendations", [])

    total_calculations = sum(
        len(place.transportation_accessibility.from_addresses)
        for place in analyzed
        if place.transportation_accessibility
    )
    estimated_count = sum(
        1
        for place in analyzed
        if place.transportation_accessibility
        and place.transportation_accessibility.calculation_method == "estimated"
    )

    if not recommendations:
        return DistanceMatrixSummary(
            total_calculations=total_calculations,
            estimated_place_count=estimated_count,
            ranking_method=state.get("ranking_method", "accessibility"),
            search_broadened=state.get("search_broadened", False),
        )

    scores = [_accessibility_score(place) for place in recommendations]
    best = max(recommendations, key=_accessibility_score)
    minutes = [
        place.transportation_accessibility.average_transit_time
        for place in recommendations
        if place.transportation_accessibility
    ]
    return DistanceMatrixSummary(
        total_calculations=total_calculations,
        average_accessibility_score=round(sum(scores) / len(scores), 1),
        best_accessibility_location=best.name,
        average_transit_time=f"{round_half_up(sum(minutes) / len(minutes))}분" if minutes else "N/A",
        estimated_place_count=estimated_count,
        ranking_method=state.get("ranking_method", "accessibility"),
        search_broadened=state.get("search_broadened", False),
    )


async def recommend_meeting_places(
    deps: MeetupDependencies,
    addresses: Sequence[str],
    place_type: str = "restaurant",
    radius_meters: int = 2000,
    max_results: int = 10,
    preferences: str = "",
) -> MeetupResult:
    """주소 목록의 중심점 주변에서 참가자 모두에게 가까운 장소를 추천합니다.

    Raises:
        EmptyAddressListError, TooManyAddressesError, InvalidSearchParameterError: 입력 오류
        GeocodingExhaustedError: 주소 하나라도 좌표로 변환하지 못했을 때
    """
    cleaned = validate_recommend_params(addresses, radius_meters, max_results)
    initial_state: MeetupState = {
        "addresses": cleaned,
        "place_type": (place_type or "restaurant").strip() or "restaurant",
        "radius_meters": radius_meters,
        "max_results": max_results,
        "preferences": preferences or "",
        "search_broadened": False,
    }
    logger.info(
        "Meetup recommendation started: addresses=%d place_type=%s radius=%d max_results=%d",
        len(cleaned),
        initial_state["place_type"],
        radius_meters,
        max_results,
    )

    state: MeetupState = await compiled_graph.ainvoke(
        initial_state,
        config={"configurable": {"dependencies": deps}},
    )
    if state.get("stage") == PipelineStage.FAILED:
        raise state["failure"]

    diagnostics = build_diagnostics(state)
    logger.info(
        "Meetup recommendation completed: recommendations=%d ranking_method=%s calculations=%d",
        len(state.get("recommendations", [])),
        diagnostics.ranking_method,
        diagnostics.total_calculations,
    )
    return MeetupResult(
        center_point=state["center_point"],
        recommendations=state.get("recommendations", []),
        diagnostics=diagnostics,
    )


async def geocode_addresses(deps: MeetupDependencies, addresses: Sequence[str]) -> list[GeocodeResult]:
    """주소 목록을 좌표로 변환합니다."""
    return await deps.geocoder.geocode_addresses(validate_addresses(addresses))


async def get_center_point(deps: MeetupDependencies, addresses: Sequence[str]) -> CenterPoint:
    """주소 목록의 중심점을 계산합니다."""
    results = await geocode_addresses(deps, addresses)
    center = centroid([result.coordinates for result in results])
    address = await deps.geocoder.reverse_geocode(center)
    return CenterPoint(coordinates=center, address=address, address_count=len(results))


async def calculate_transit_legs(
    deps: MeetupDependencies,
    origin: Coordinate,
    destinations: Sequence[Coordinate],
) -> list[TransitLeg]:
    """출발지 하나에서 목적지 각각까지의 이동 구간. 공급자 실패 시 추정값을 씁니다."""
    return await deps.analyzer.legs_from(f"{origin.lat},{origin.lng}", origin, destinations)
