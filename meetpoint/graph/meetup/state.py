"""약속 장소 추천 그래프 상태 정의."""

from enum import StrEnum
from typing import TypedDict

from meetpoint.core.errors import MeetpointError
from meetpoint.schemas.location import CenterPoint, GeocodeResult, Place


class PipelineStage(StrEnum):
    """파이프라인 단계. FAILED는 GEOCODING에서만 진입합니다."""

    GEOCODING = "GEOCODING"
    CENTROID = "CENTROID"
    SEARCHING = "SEARCHING"
    MERGING = "MERGING"
    ACCESSIBILITY = "ACCESSIBILITY"
    RANKING = "RANKING"
    DONE = "DONE"
    FAILED = "FAILED"


class MeetupState(TypedDict, total=False):
    """약속 장소 추천 그래프 상태.

    Keys:
        addresses: 입력 주소 목록
        place_type: 장소 유형
        radius_meters: 검색 반경(m)
        max_results: 최대 추천 수
        preferences: 자유 형식 선호 사항
        stage: 마지막으로 완료된 단계
        geocode_results: 주소별 지오코딩 결과
        center_point: 중심점
        area_hint: 역지오코딩으로 얻은 지역 이름 (없으면 None)
        search_results: 공급자 이름별 검색 결과 (우선순위 순서)
        search_broadened: 확장 검색 수행 여부
        candidates: 병합된 후보 장소
        analyzed_places: 접근성 정보가 붙은 후보 장소
        recommendations: 최종 추천 장소
        ranking_method: ai 또는 accessibility
        failure: GEOCODING 실패 시 예외
    """

    addresses: list[str]
    place_type: str
    radius_meters: int
    max_results: int
    preferences: str
    stage: PipelineStage
    geocode_results: list[GeocodeResult]
    center_point: CenterPoint | None
    area_hint: str | None
    search_results: dict[str, list[Place]]
    search_broadened: bool
    candidates: list[Place]
    analyzed_places: list[Place]
    recommendations: list[Place]
    ranking_method: str
    failure: MeetpointError | None
