"""좌표, 지오코딩 결과, 장소 및 접근성 정보를 표현하는 도메인 모델."""

from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

PlaceSource = Literal["kakao", "naver", "google"]
TransitMode = Literal["transit", "estimated"]
CalculationMethod = Literal["provider_api", "estimated"]


class GeocodeAccuracy(StrEnum):
    """지오코딩 결과의 주소 정밀도."""

    ROAD_ADDRESS = "ROAD_ADDRESS"
    LAND_LOT = "LAND_LOT"


class Coordinate(BaseModel):
    """WGS84 위경도 좌표."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90, description="위도")
    lng: float = Field(..., ge=-180, le=180, description="경도")


class GeocodeResult(BaseModel):
    """주소 하나에 대한 지오코딩 결과."""

    model_config = ConfigDict(frozen=True)

    original_address: str = Field(..., description="입력 주소")
    formatted_address: str = Field(..., description="공급자가 정규화한 주소")
    coordinates: Coordinate = Field(..., description="주소 좌표")
    accuracy: GeocodeAccuracy = Field(..., description="도로명/지번 구분")


class CenterPoint(BaseModel):
    """입력 주소들의 중심점."""

    coordinates: Coordinate = Field(..., description="중심 좌표")
    address: str = Field(..., description="역지오코딩 주소 (실패 시 좌표 표기)")
    address_count: int = Field(..., ge=1, description="중심점 계산에 사용된 주소 수")


class TransitLeg(BaseModel):
    """출발 주소 하나에서 장소까지의 대중교통 구간."""

    model_config = ConfigDict(frozen=True)

    origin: str = Field(..., description="출발 주소")
    transit_time: str = Field(..., description="이동 시간 표기")
    transit_distance: str = Field(..., description="이동 거리 표기")
    transit_mode: TransitMode = Field(..., description="transit: 공급자 응답, estimated: 직선거리 추정")
    duration_seconds: int = Field(..., ge=0, description="이동 시간(초)")
    distance_meters: int = Field(..., ge=0, description="이동 거리(m)")


class AccessibilitySummary(BaseModel):
    """장소 하나에 대한 참가자 전체의 대중교통 접근성."""

    average_transit_time: int = Field(..., ge=0, description="평균 이동 시간(분)")
    accessibility_score: float = Field(..., ge=1, le=10, description="접근성 점수 (1~10)")
    from_addresses: list[TransitLeg] = Field(default_factory=list, description="주소별 이동 구간")
    calculation_method: CalculationMethod = Field(..., description="계산 방식")


class Place(BaseModel):
    """후보 장소.

    검색 공급자가 생성하고, 접근성 분석과 추천 단계가 복사본에 정보를 덧붙입니다.
    """

    name: str = Field(..., description="장소 이름")
    address: str = Field(default="", description="지번 또는 대표 주소")
    road_address: str | None = Field(default=None, description="도로명 주소")
    coordinates: Coordinate = Field(..., description="장소 좌표")
    category: str | None = Field(default=None, description="카테고리")
    rating: float | None = Field(default=None, ge=0, le=5, description="평점")
    distance_from_center: int = Field(default=0, ge=0, description="중심점으로부터 직선거리(m)")
    phone: str | None = Field(default=None, description="전화번호")
    url: str | None = Field(default=None, description="상세 페이지 URL")
    website: str | None = Field(default=None, description="공식 웹사이트")
    source: PlaceSource = Field(..., description="검색 공급자")
    provider_place_id: str | None = Field(default=None, description="공급자 장소 ID")
    business_status: str | None = Field(default=None, description="영업 상태")
    price_level: int | None = Field(default=None, ge=0, le=4, description="가격대")
    user_ratings_total: int | None = Field(default=None, ge=0, description="평점 참여 수")
    open_now: bool | None = Field(default=None, description="현재 영업 여부")
    opening_hours: list[str] | None = Field(default=None, description="요일별 영업 시간")
    transportation_accessibility: AccessibilitySummary | None = Field(default=None, description="대중교통 접근성")
    ai_recommendation_score: float | None = Field(default=None, description="AI 추천 점수 (1~10)")
    ai_analysis: str | None = Field(default=None, description="AI 추천 사유")


class DistanceMatrixSummary(BaseModel):
    """주소 × 장소 이동 시간 계산에 대한 진단 요약."""

    analysis_complete: bool = Field(default=True)
    total_calculations: int = Field(default=0, ge=0, description="계산된 이동 구간 수")
    average_accessibility_score: float = Field(default=0.0, description="추천 결과의 평균 접근성 점수")
    best_accessibility_location: str = Field(default="N/A", description="접근성이 가장 좋은 추천 장소")
    average_transit_time: str = Field(default="N/A", description="추천 결과의 평균 이동 시간")
    estimated_place_count: int = Field(default=0, ge=0, description="추정값으로 계산된 장소 수")
    ranking_method: Literal["ai", "accessibility"] = Field(default="accessibility")
    search_broadened: bool = Field(default=False, description="확장 검색 수행 여부")


class MeetupResult(BaseModel):
    """추천 파이프라인의 최종 결과."""

    center_point: CenterPoint
    recommendations: list[Place] = Field(default_factory=list)
    diagnostics: DistanceMatrixSummary = Field(default_factory=DistanceMatrixSummary)
