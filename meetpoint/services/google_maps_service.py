"""Google Maps Platform 기반 장소 검색과 대중교통 이동 시간 서비스."""

from __future__ import annotations

import asyncio
from typing import Any

from meetpoint.core.errors import ProviderUnavailableError
from meetpoint.core.geo import haversine_distance, round_half_up
from meetpoint.core.http import request_json
from meetpoint.core.logger import get_logger
from meetpoint.core.outcome import settle
from meetpoint.schemas.location import Coordinate, Place
from meetpoint.services.places_service import PlacesServiceProtocol
from meetpoint.services.transit_service import TransitMatrixProtocol, TransitResult

logger = get_logger(__name__)

GOOGLE_MAPS_BASE_URL = "https://maps.googleapis.com/maps/api"
GOOGLE_MAX_RADIUS_METERS = 50000
GOOGLE_MAX_RESULTS = 20
GOOGLE_DETAILS_LIMIT = 10
_DETAIL_FIELDS = "place_id,opening_hours,formatted_phone_number,website"

_PLACE_TYPES = {
    "restaurant": "restaurant",
    "cafe": "cafe",
    "shopping": "shopping_mall",
    "entertainment": "amusement_park",
    "culture": "museum",
    "park": "park",
    "accommodation": "lodging",
    "hospital": "hospital",
    "pharmacy": "pharmacy",
    "gas_station": "gas_station",
    "bank": "bank",
    "gym": "gym",
}
_DEFAULT_PLACE_TYPE = "establishment"
_EMPTY_STATUSES = {"OK", "ZERO_RESULTS"}


def google_place_type(type_filter: str) -> str:
    """장소 유형을 Google place type으로 변환합니다."""
    return _PLACE_TYPES.get(type_filter.strip().lower(), _DEFAULT_PLACE_TYPE)


def _latlng(coordinate: Coordinate) -> str:
    return f"{coordinate.lat},{coordinate.lng}"


def transform_google_place(raw: dict[str, Any], center: Coordinate) -> Place | None:
    """Places 검색 결과 항목 하나를 Place로 변환합니다."""
    name = (raw.get("name") or "").strip()
    location = (raw.get("geometry") or {}).get("location") or {}
    try:
        coordinate = Coordinate(lat=float(location["lat"]), lng=float(location["lng"]))
    except (KeyError, TypeError, ValueError):
        return None
    if not name:
        return None

    place_id = raw.get("place_id")
    opening_hours = raw.get("opening_hours") or {}
    types = raw.get("types") or []
    return Place(
        name=name,
        address=raw.get("vicinity") or raw.get("formatted_address") or "",
        road_address=raw.get("formatted_address") or None,
        coordinates=coordinate,
        category=types[0] if types else None,
        rating=raw.get("rating"),
        distance_from_center=round_half_up(haversine_distance(center, coordinate)),
        url=f"https://www.google.com/maps/place/?q=place_id:{place_id}" if place_id else None,
        source="google",
        provider_place_id=place_id,
        business_status=raw.get("business_status"),
        price_level=raw.get("price_level"),
        user_ratings_total=raw.get("user_ratings_total"),
        open_now=opening_hours.get("open_now"),
        opening_hours=opening_hours.get("weekday_text") or None,
    )


def apply_google_details(place: Place, details: dict[str, Any]) -> Place:
    """Place Details 결과의 영업 시간, 전화번호, 웹사이트로 보강한 복사본을 반환합니다."""
    opening_hours = details.get("opening_hours") or {}
    update: dict[str, Any] = {}
    if opening_hours.get("weekday_text"):
        update["opening_hours"] = list(opening_hours["weekday_text"])
    if opening_hours.get("open_now") is not None:
        update["open_now"] = opening_hours["open_now"]
    phone = (details.get("formatted_phone_number") or "").strip()
    if phone:
        update["phone"] = phone
    website = (details.get("website") or "").strip()
    if website:
        update["website"] = website
    return place.model_copy(update=update) if update else place


def transform_distance_matrix(data: dict[str, Any], destination_count: int) -> list[TransitResult]:
    """Distance Matrix 응답의 첫 행을 목적지 순서의 TransitResult 목록으로 변환합니다."""
    rows = data.get("rows") or []
    elements = (rows[0].get("elements") or []) if rows else []

    results: list[TransitResult] = []
    for index in range(destination_count):
        element = elements[index] if index < len(elements) else {}
        if element.get("status") != "OK":
            results.append(TransitResult(duration_seconds=0, distance_meters=0, success=False))
            continue
        duration = int((element.get("duration") or {}).get("value") or 0)
        distance = int((element.get("distance") or {}).get("value") or 0)
        results.append(TransitResult(duration_seconds=duration, distance_meters=distance, success=duration > 0))
    return results


class GoogleMapsClient:
    """Google Maps Web Service 호출 공통 처리."""

    name = "google"

    def __init__(self, api_key: str, timeout_seconds: int = 10, language_code: str = "ko") -> None:
        self._api_key = api_key
        self._timeout_seconds = timeout_seconds
        self._language_code = language_code.strip() if language_code else ""

    async def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        if not self._api_key:
            raise ProviderUnavailableError(self.name, "GOOGLE_MAPS_API_KEY is not configured")
        query = {**params, "key": self._api_key}
        if self._language_code:
            query["language"] = self._language_code

        data = await request_json(
            "GET",
            f"{GOOGLE_MAPS_BASE_URL}{path}",
            provider=self.name,
            timeout_seconds=self._timeout_seconds,
            params=query,
        )
        status = data.get("status")
        if status not in _EMPTY_STATUSES:
            logger.error("Google Maps API status error: path=%s status=%s", path, status)
            raise ProviderUnavailableError(self.name, f"status {status}")
        return data


class GooglePlacesService(GoogleMapsClient, PlacesServiceProtocol):
    """Google Places nearby/text search 기반 Places 서비스.

    상위 결과는 Place Details로 영업 시간과 연락처를 보강합니다. 보강 실패 시 검색 결과를 그대로 씁니다.
    """

    def _to_places(self, data: dict[str, Any], center: Coordinate, limit: int) -> list[Place]:
        size = max(1, min(GOOGLE_MAX_RESULTS, int(limit)))
        items = data.get("results") or []
        places = [place for place in (transform_google_place(item, center) for item in items) if place]
        return places[:size]

    async def _place_details(self, place_id: str) -> dict[str, Any]:
        data = await self._get("/place/details/json", {"place_id": place_id, "fields": _DETAIL_FIELDS})
        return data.get("result") or {}

    async def _enrich(self, place: Place) -> Place:
        if not place.provider_place_id:
            return place
        outcome = await settle(
            self._place_details(place.provider_place_id),
            fallback={},
            timeout_seconds=max(1, self._timeout_seconds // 3),
            label=f"place_details:{place.provider_place_id}",
        )
        return apply_google_details(place, outcome.value)

    async def _with_details(self, places: list[Place], limit: int) -> list[Place]:
        count = min(GOOGLE_DETAILS_LIMIT, max(0, int(limit)), len(places))
        enriched = await asyncio.gather(*(self._enrich(place) for place in places[:count]))
        return [*enriched, *places[count:]]

    async def search_nearby(
        self,
        center: Coordinate,
        type_filter: str,
        radius_meters: int,
        limit: int,
        *,
        area_hint: str | None = None,
    ) -> list[Place]:
        place_type = google_place_type(type_filter)
        data = await self._get(
            "/place/nearbysearch/json",
            {
                "location": _latlng(center),
                "radius": max(1, min(GOOGLE_MAX_RADIUS_METERS, int(radius_meters))),
                "type": place_type,
            },
        )
        places = await self._with_details(self._to_places(data, center, limit), limit)
        logger.info("Google nearby search completed: type=%s candidate_count=%d", place_type, len(places))
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
        data = await self._get(
            "/place/textsearch/json",
            {
                "query": keyword.strip(),
                "location": _latlng(center),
                "radius": max(1, min(GOOGLE_MAX_RADIUS_METERS, int(radius_meters))),
            },
        )
        places = await self._with_details(self._to_places(data, center, limit), limit)
        logger.info("Google text search completed: keyword=%s candidate_count=%d", keyword, len(places))
        return places


class GoogleTransitMatrixService(GoogleMapsClient, TransitMatrixProtocol):
    """Google Distance Matrix 대중교통 모드 기반 이동 시간 서비스."""

    async def calculate_transit_times(
        self,
        origin: Coordinate,
        destinations: list[Coordinate],
    ) -> list[TransitResult]:
        if not destinations:
            return []
        data = await self._get(
            "/distancematrix/json",
            {
                "origins": _latlng(origin),
                "destinations": "|".join(_latlng(destination) for destination in destinations),
                "mode": "transit",
                "transit_mode": "bus|subway|train",
                "transit_routing_preference": "fewer_transfers",
            },
        )
        return transform_distance_matrix(data, len(destinations))
