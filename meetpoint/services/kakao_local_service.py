"""Kakao Local API 기반 지오코딩 및 장소 검색 서비스."""

from __future__ import annotations

from typing import Any

from meetpoint.core.errors import AddressNotFoundError, ProviderUnavailableError
from meetpoint.core.geo import haversine_distance, round_half_up
from meetpoint.core.http import request_json
from meetpoint.core.logger import get_logger
from meetpoint.schemas.location import Coordinate, GeocodeAccuracy, GeocodeResult, Place
from meetpoint.services.geocoding_service import GeocodingServiceProtocol
from meetpoint.services.places_service import PlacesServiceProtocol

logger = get_logger(__name__)

KAKAO_LOCAL_BASE_URL = "https://dapi.kakao.com/v2/local"
KAKAO_MAX_RADIUS_METERS = 20000
KAKAO_MAX_PAGE_SIZE = 15

_CATEGORY_GROUP_CODES = {
    "restaurant": "FD6",
    "cafe": "CE7",
    "shopping": "MT1",
    "entertainment": "AT4",
    "culture": "CT1",
    "park": "AT4",
    "accommodation": "AD5",
}
_DEFAULT_CATEGORY_GROUP_CODE = "FD6"


def kakao_category_code(type_filter: str) -> str:
    """장소 유형을 Kakao 카테고리 그룹 코드로 변환합니다."""
    return _CATEGORY_GROUP_CODES.get(type_filter.strip().lower(), _DEFAULT_CATEGORY_GROUP_CODE)


def _parse_coordinate(raw: dict[str, Any]) -> Coordinate | None:
    try:
        return Coordinate(lat=float(raw["y"]), lng=float(raw["x"]))
    except (KeyError, TypeError, ValueError):
        return None


def transform_kakao_address(document: dict[str, Any], original_address: str) -> GeocodeResult | None:
    """주소 검색 응답 document 하나를 GeocodeResult로 변환합니다."""
    coordinate = _parse_coordinate(document)
    if coordinate is None:
        return None

    road_address = document.get("road_address")
    if road_address:
        formatted = road_address.get("address_name") or document.get("address_name") or original_address
        accuracy = GeocodeAccuracy.ROAD_ADDRESS
    else:
        land_lot = document.get("address") or {}
        formatted = land_lot.get("address_name") or document.get("address_name") or original_address
        accuracy = GeocodeAccuracy.LAND_LOT

    return GeocodeResult(
        original_address=original_address,
        formatted_address=formatted,
        coordinates=coordinate,
        accuracy=accuracy,
    )


def transform_kakao_place(document: dict[str, Any], center: Coordinate) -> Place | None:
    """장소 검색 응답 document 하나를 Place로 변환합니다."""
    name = (document.get("place_name") or "").strip()
    coordinate = _parse_coordinate(document)
    if not name or coordinate is None:
        return None

    return Place(
        name=name,
        address=document.get("address_name") or "",
        road_address=document.get("road_address_name") or None,
        coordinates=coordinate,
        category=document.get("category_name") or None,
        distance_from_center=round_half_up(haversine_distance(center, coordinate)),
        phone=document.get("phone") or None,
        url=document.get("place_url") or None,
        source="kakao",
        provider_place_id=document.get("id") or None,
    )


class KakaoLocalClient:
    """Kakao Local REST 호출 공통 처리."""

    name = "kakao"

    def __init__(self, api_key: str, timeout_seconds: int = 10) -> None:
        self._api_key = api_key
        self._timeout_seconds = timeout_seconds

    async def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        if not self._api_key:
            raise ProviderUnavailableError(self.name, "KAKAO_REST_API_KEY is not configured")
        return await request_json(
            "GET",
            f"{KAKAO_LOCAL_BASE_URL}{path}",
            provider=self.name,
            timeout_seconds=self._timeout_seconds,
            params=params,
            headers={"Authorization": f"KakaoAK {self._api_key}"},
        )


class KakaoGeocodingService(KakaoLocalClient, GeocodingServiceProtocol):
    """Kakao 주소 검색 기반 지오코더."""

    async def geocode(self, address: str) -> GeocodeResult:
        data = await self._get(
            "/search/address.json",
            {"query": address, "analyze_type": "similar", "size": 1},
        )
        documents = data.get("documents") or []
        result = transform_kakao_address(documents[0], address) if documents else None
        if result is None:
            raise AddressNotFoundError(address, self.name)
        return result

    async def reverse_geocode(self, coordinate: Coordinate) -> str:
        data = await self._get(
            "/geo/coord2address.json",
            {"x": coordinate.lng, "y": coordinate.lat, "input_coord": "WGS84"},
        )
        documents = data.get("documents") or []
        if not documents:
            raise AddressNotFoundError(f"{coordinate.lat},{coordinate.lng}", self.name)

        document = documents[0]
        road_address = document.get("road_address") or {}
        land_lot = document.get("address") or {}
        address = road_address.get("address_name") or land_lot.get("address_name")
        if not address:
            raise AddressNotFoundError(f"{coordinate.lat},{coordinate.lng}", self.name)
        return address


class KakaoPlacesService(KakaoLocalClient, PlacesServiceProtocol):
    """Kakao 카테고리/키워드 검색 기반 Places 서비스."""

    def _base_params(self, center: Coordinate, radius_meters: int, limit: int) -> dict[str, Any]:
        return {
            "x": center.lng,
            "y": center.lat,
            "radius": max(0, min(KAKAO_MAX_RADIUS_METERS, int(radius_meters))),
            "size": max(1, min(KAKAO_MAX_PAGE_SIZE, int(limit))),
            "sort": "distance",
        }

    def _to_places(self, data: dict[str, Any], center: Coordinate) -> list[Place]:
        documents = data.get("documents") or []
        return [place for place in (transform_kakao_place(doc, center) for doc in documents) if place]

    async def search_nearby(
        self,
        center: Coordinate,
        type_filter: str,
        radius_meters: int,
        limit: int,
        *,
        area_hint: str | None = None,
    ) -> list[Place]:
        params = self._base_params(center, radius_meters, limit)
        params["category_group_code"] = kakao_category_code(type_filter)
        places = self._to_places(await self._get("/search/category.json", params), center)
        logger.info(
            "Kakao category search completed: code=%s radius=%s candidate_count=%d",
            params["category_group_code"],
            params["radius"],
            len(places),
        )
        return places

    async def search_by_keyword(
        self,
        center: Coordinate,
        keyword: str,
        radius_meters: int,
        limit: int,
        *,
        area_hint: str | None = None,
    ) -> list[Place]:
        if not keyword.strip():
            return []
        params = self._base_params(center, radius_meters, limit)
        params["query"] = keyword.strip()
        places = self._to_places(await self._get("/search/keyword.json", params), center)
        logger.info(
            "Kakao keyword search completed: keyword=%s radius=%s candidate_count=%d",
            params["query"],
            params["radius"],
            len(places),
        )
        return places
