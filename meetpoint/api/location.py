"""여러 주소 기반 약속 장소 추천 API."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from meetpoint.api.dependencies import get_meetup_dependencies
from meetpoint.core.logger import get_logger
from meetpoint.schemas.recommend import (
    AddressListRequest,
    CenterPointResponse,
    GeocodeResponse,
    RecommendPlacesRequest,
    RecommendPlacesResponse,
    SearchParams,
    TransitTimeItem,
    TransitTimesRequest,
    TransitTimesResponse,
)
from meetpoint.services import meetup_service
from meetpoint.services.provider_registry import MeetupDependencies

router = APIRouter(prefix="/api/v1/location", tags=["location"])
logger = get_logger(__name__)

ERROR_RESPONSES = {
    400: {"description": "입력 오류 또는 지오코딩 실패 (error_code 참고)"},
    503: {"description": "외부 공급자 사용 불가"},
}


@router.post("/recommend-places", response_model=RecommendPlacesResponse, responses=ERROR_RESPONSES)
async def recommend_places(
    request: RecommendPlacesRequest,
    deps: MeetupDependencies = Depends(get_meetup_dependencies),
) -> RecommendPlacesResponse:
    """주소들의 중심점 주변에서 모든 참가자가 가기 편한 장소를 추천합니다."""
    result = await meetup_service.recommend_meeting_places(
        deps,
        request.addresses,
        place_type=request.place_type,
        radius_meters=request.radius_meters,
        max_results=request.max_results,
        preferences=request.preferences,
    )
    return RecommendPlacesResponse(
        center_point=result.center_point,
        recommendations=result.recommendations,
        distance_matrix=result.diagnostics,
        search_params=SearchParams(
            place_type=request.place_type,
            radius_meters=request.radius_meters,
            max_results=request.max_results,
            preferences=request.preferences or None,
        ),
    )


@router.post("/geocode", response_model=GeocodeResponse, responses=ERROR_RESPONSES)
async def geocode(
    request: AddressListRequest,
    deps: MeetupDependencies = Depends(get_meetup_dependencies),
) -> GeocodeResponse:
    """주소 목록을 좌표로 변환합니다."""
    results = await meetup_service.geocode_addresses(deps, request.addresses)
    return GeocodeResponse(results=results)


@router.post("/center-point", response_model=CenterPointResponse, responses=ERROR_RESPONSES)
async def center_point(
    request: AddressListRequest,
    deps: MeetupDependencies = Depends(get_meetup_dependencies),
) -> CenterPointResponse:
    """주소 목록의 중심점을 계산합니다."""
    center = await meetup_service.get_center_point(deps, request.addresses)
    return CenterPointResponse(center_point=center)


@router.post("/transit-times", response_model=TransitTimesResponse)
async def transit_times(
    request: TransitTimesRequest,
    deps: MeetupDependencies = Depends(get_meetup_dependencies),
) -> TransitTimesResponse:
    """출발지 하나에서 목적지들까지의 대중교통 이동 시간을 조회합니다. 실패한 구간은 추정값입니다."""
    legs = await meetup_service.calculate_transit_legs(deps, request.origin, request.destinations)
    return TransitTimesResponse(
        origin=request.origin,
        results=[
            TransitTimeItem(
                destination=destination,
                duration_seconds=leg.duration_seconds,
                distance_meters=leg.distance_meters,
                transit_mode=leg.transit_mode,
            )
            for destination, leg in zip(request.destinations, legs)
        ],
    )
