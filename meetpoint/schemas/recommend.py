"""장소 추천 API 요청/응답 스키마."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator

from meetpoint.schemas.location import CenterPoint, Coordinate, DistanceMatrixSummary, GeocodeResult, Place

DEFAULT_PLACE_TYPE = "restaurant"
DEFAULT_RADIUS_METERS = 2000
DEFAULT_MAX_RESULTS = 10


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AddressListRequest(BaseModel):
    """주소 목록만 받는 요청 본문."""

    addresses: list[str] = Field(..., description="주소 목록", examples=[["서울 강남구 테헤란로 152", "서울 중구 세종대로 110"]])

    @field_validator("addresses", mode="after")
    @classmethod
    def _strip_addresses(cls, value: list[str]) -> list[str]:
        return [address.strip() for address in value if address and address.strip()]


class RecommendPlacesRequest(AddressListRequest):
    """여러 주소의 중심점 기준 장소 추천 요청.

    범위 검증(주소 수, 반경, 결과 수)은 서비스 계층에서 수행되어 도메인 예외로 보고됩니다.
    """

    place_type: str = Field(default=DEFAULT_PLACE_TYPE, description="장소 유형 (restaurant, cafe, ...)")
    radius_meters: int = Field(default=DEFAULT_RADIUS_METERS, description="검색 반경(m), 100~20000")
    max_results: int = Field(default=DEFAULT_MAX_RESULTS, description="최대 추천 수, 1~50")
    preferences: str = Field(default="", description="자유 형식 선호 사항")


class SearchParams(BaseModel):
    """실제로 적용된 검색 조건."""

    place_type: str
    radius_meters: int
    max_results: int
    preferences: str | None = None


class ResponseEnvelope(BaseModel):
    success: bool = Field(default=True)
    timestamp: datetime = Field(default_factory=_utc_now)


class RecommendPlacesResponse(ResponseEnvelope):
    """장소 추천 응답."""

    center_point: CenterPoint
    recommendations: list[Place]
    distance_matrix: DistanceMatrixSummary
    search_params: SearchParams


class GeocodeResponse(ResponseEnvelope):
    results: list[GeocodeResult]


class CenterPointResponse(ResponseEnvelope):
    center_point: CenterPoint


class TransitTimesRequest(BaseModel):
    """출발지 하나에서 여러 목적지까지의 이동 시간 조회 요청."""

    origin: Coordinate
    destinations: list[Coordinate] = Field(..., min_length=1, max_length=25)


class TransitTimeItem(BaseModel):
    destination: Coordinate
    duration_seconds: int
    distance_meters: int
    transit_mode: str


class TransitTimesResponse(ResponseEnvelope):
    origin: Coordinate
    results: list[TransitTimeItem]
