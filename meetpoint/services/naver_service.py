"""Naver Maps(NCP) 지오코딩 및 Naver 지역 검색 서비스."""

from __future__ import annotations

import html
import re
from typing import Any

from meetpoint.core.errors import AddressNotFoundError, ProviderUnavailableError
from meetpoint.core.geo import haversine_distance, round_half_up
from meetpoint.core.http import request_json
from meetpoint.core.logger import get_logger
from meetpoint.schemas.location import Coordinate, GeocodeAccuracy, GeocodeResult, Place
from meetpoint.services.geocoding_service import GeocodingServiceProtocol
from meetpoint.services.places_service import PlacesServiceProtocol

logger = get_logger(__name__)

NAVER_GEOCODE_URL = "https://naveropenapi.apigw.ntruss.com/map-geocode/v2/geocode"
NAVER_REVERSE_GEOCODE_URL = "https://naveropenapi.apigw.ntruss.com/map-reversegeocode/v2/gc"
NAVER_LOCAL_SEARCH_URL = "https://openapi.naver.com/v1/search/local.json"
NAVER_MAX_DISPLAY = 5
NAVER_COORDINATE_SCALE = 10_000_000

_HTML_TAG_PATTERN = re.compile(r"<[^>]+>")

_SEARCH_TERMS = {
    "restaurant": "맛집",
    "cafe": "카페",
    "hospital": "병원",
    "pharmacy": "약국",
    "bank": "은행",
    "gas_station": "주유소",
    "parking": "주차장",
    "hotel": "호텔",
    "accommodation": "숙소",
    "shopping": "쇼핑",
    "beauty": "미용실",
    "gym": "헬스장",
    "school": "학교",
    "culture": "문화시설",
    "park": "공원",
    "entertainment": "놀거리",
}


def naver_search_term(type_filter: str) -> str:
    """장소 유형을 Naver 검색어로 변환합니다. 매핑이 없으면 입력값을 그대로 씁니다."""
    normalized = type_filter.strip().lower()
    return _SEARCH_TERMS.get(normalized, type_filter.strip() or "맛집")


def clean_html(text: str | None) -> str:
    """검색 결과의 강조 태그와 HTML 엔티티를 제거합니다."""
    return html.unescape(_HTML_TAG_PATTERN.sub("", text or "")).strip()


def transform_naver_address(item: dict[str, Any], original_address: str) -> GeocodeResult | None:
    """NCP 지오코딩 응답의 addresses 항목 하나를 GeocodeResult로 변환합니다."""
    try:
        coordinate = Coordinate(lat=float(item["y"]), lng=float(item["x"]))
    except (KeyError, TypeError, ValueError):
        return None

    road_address = (item.get("roadAddress") or "").strip()
    land_lot_address = (item.get("jibunAddress") or "").strip()
    return GeocodeResult(
        original_address=original_address,
        formatted_address=road_address or land_lot_address or original_address,
        coordinates=coordinate,
        accuracy=GeocodeAccuracy.ROAD_ADDRESS if road_address else GeocodeAccuracy.LAND_LOT,
    )


def transform_naver_reverse(result: dict[str, Any]) -> str:
    """역지오코딩 results 항목 하나를 주소 문자열로 조합합니다."""
    region = result.get("region") or {}
    parts = [
        (region.get(area) or {}).get("name", "")
        for area in ("area1", "area2", "area3", "area4")
    ]
    land = result.get("land") or {}
    parts.append(land.get("name", ""))
    number = "-".join(value for value in (land.get("number1", ""), land.get("number2", "")) if value)
    parts.append(number)
    return " ".join(part for part in parts if part).strip()


def transform_naver_place(item: dict[str, Any], center: Coordinate) -> Place | None:
    """지역 검색 응답 items 항목 하나를 Place로 변환합니다. 좌표는 1e7 배율 정수입니다."""
    name = clean_html(item.get("title"))
    try:
        coordinate = Coordinate(
            lat=int(item["mapy"]) / NAVER_COORDINATE_SCALE,
            lng=int(item["mapx"]) / NAVER_COORDINATE_SCALE,
        )
    except (KeyError, TypeError, ValueError):
        return None
    if not name:
        return None

    return Place(
        name=name,
        address=clean_html(item.get("address")),
        road_address=clean_html(item.get("roadAddress")) or None,
        coordinates=coordinate,
        category=clean_html(item.get("category")) or None,
        distance_from_center=round_half_up(haversine_distance(center, coordinate)),
        phone=(item.get("telephone") or "").strip() or None,
        url=(item.get("link") or "").strip() or None,
        source="naver",
    )


class NaverGeocodingService(GeocodingServiceProtocol):
    """NCP Maps 지오코딩 기반 지오코더."""

    name = "naver"

    def __init__(self, client_id: str, client_secret: str, timeout_seconds: int = 10) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._timeout_seconds = timeout_seconds

    async def _get(self, url: str, params: dict[str, Any]) -> dict[str, Any]:
        if not (self._client_id and self._client_secret):
            raise ProviderUnavailableError(self.name, "NAVER_CLIENT_ID/NAVER_CLIENT_SECRET is not configured")
        return await request_json(
            "GET",
            url,
            provider=self.name,
            timeout_seconds=self._timeout_seconds,
            params=params,
            headers={
                "X-NCP-APIGW-API-KEY-ID": self._client_id,
                "X-NCP-APIGW-API-KEY": self._client_secret,
            },
        )

    async def geocode(self, address: str) -> GeocodeResult:
        data = await self._get(NAVER_GEOCODE_URL, {"query": address, "count": 1})
        items = data.get("addresses") or []
        result = transform_naver_address(items[0], address) if items else None
        if result is None:
            raise AddressNotFoundError(address, self.name)
        return result

    async def reverse_geocode(self, coordinate: Coordinate) -> str:
        data = await self._get(
            NAVER_REVERSE_GEOCODE_URL,
            {"coords": f"{coordinate.lng},{coordinate.lat}", "orders": "roadaddr,addr", "output": "json"},
        )
        for result in data.get("results") or []:
            address = transform_naver_reverse(result)
            if address:
                return address
        raise AddressNotFoundError(f"{coordinate.lat},{coordinate.lng}", self.name)


class NaverPlacesService(PlacesServiceProtocol):
    """Naver 지역 검색 기반 Places 서비스.

    반경 파라미터가 없어 지역 이름을 검색어 앞에 붙이고, 반경 밖의 결과는 버립니다.
    """

    name = "naver"

    def __init__(self, client_id: str, client_secret: str, timeout_seconds: int = 15) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._timeout_seconds = timeout_seconds

    async def _search(
        self,
        query: str,
        center: Coordinate,
        radius_meters: int,
        limit: int,
        sort: str,
    ) -> list[Place]:
        if not (self._client_id and self._client_secret):
            raise ProviderUnavailableError(
                self.name,
                "NAVER_SEARCH_CLIENT_ID/NAVER_SEARCH_CLIENT_SECRET is not configured",
            )

        display = max(1, min(NAVER_MAX_DISPLAY, int(limit)))
        data = await request_json(
            "GET",
            NAVER_LOCAL_SEARCH_URL,
            provider=self.name,
            timeout_seconds=self._timeout_seconds,
            params={"query": query, "display": display, "start": 1, "sort": sort},
            headers={
                "X-Naver-Client-Id": self._client_id,
                "X-Naver-Client-Secret": self._client_secret,
            },
        )
        items = data.get("items") or []
        candidates = [place for place in (transform_naver_place(item, center) for item in items) if place]
        places = [place for place in candidates if place.distance_from_center <= radius_meters]
        logger.info(
            "Naver local search completed: query=%s candidate_count=%d within_radius=%d",
            query,
            len(candidates),
            len(places),
        )
        return places

    async def search_nearby(
        self,
        center: Coordinate,
        type_filter: str,
        radius_meters: int,
        limit: int,
        *,
        area_hint: str | None = None,
    ) -> list[Place]:
        term = naver_search_term(type_filter)
        query = f"{area_hint} {term}" if area_hint else term
        return await self._search(query, center, radius_meters, limit, sort="random")

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
        query = f"{area_hint} {keyword.strip()}" if area_hint else keyword.strip()
        return await self._search(query, center, radius_meters, limit, sort="comment")
