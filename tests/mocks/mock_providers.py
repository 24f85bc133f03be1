"""외부 공급자 Mock 구현.

실제 API 호출 없이 미리 정한 좌표, 장소, 이동 시간, 채점 응답을 돌려준다.
"""

from __future__ import annotations

import asyncio

from meetpoint.core.errors import AddressNotFoundError, ProviderUnavailableError
from meetpoint.schemas.location import Coordinate, GeocodeAccuracy, GeocodeResult, Place
from meetpoint.services.geocoding_service import GeocodingServiceProtocol
from meetpoint.services.places_service import PlacesServiceProtocol
from meetpoint.services.recommendation_service import ScoringOracle
from meetpoint.services.transit_service import TransitMatrixProtocol, TransitResult


def make_place(name: str, lat: float, lng: float, source: str = "kakao", **extra) -> Place:
    return Place(name=name, address=f"{name} 주소", coordinates=Coordinate(lat=lat, lng=lng), source=source, **extra)


class MockGeocodingService(GeocodingServiceProtocol):
    """주소 → 좌표 사전 기반 지오코더. 사전에 없으면 AddressNotFoundError."""

    def __init__(
        self,
        name: str,
        coordinates: dict[str, tuple[float, float]] | None = None,
        *,
        unavailable: bool = False,
        reverse_address: str | None = None,
    ) -> None:
        self.name = name
        self._coordinates = coordinates or {}
        self._unavailable = unavailable
        self._reverse_address = reverse_address
        self.geocode_calls: list[str] = []

    async def geocode(self, address: str) -> GeocodeResult:
        self.geocode_calls.append(address)
        if self._unavailable:
            raise ProviderUnavailableError(self.name, "mock outage")
        if address not in self._coordinates:
            raise AddressNotFoundError(address, self.name)
        lat, lng = self._coordinates[address]
        return GeocodeResult(
            original_address=address,
            formatted_address=f"{address} (정규화)",
            coordinates=Coordinate(lat=lat, lng=lng),
            accuracy=GeocodeAccuracy.ROAD_ADDRESS,
        )

    async def reverse_geocode(self, coordinate: Coordinate) -> str:
        if self._unavailable or self._reverse_address is None:
            raise ProviderUnavailableError(self.name, "mock outage")
        return self._reverse_address


class MockPlacesService(PlacesServiceProtocol):
    """고정 장소 목록을 돌려주는 검색 서비스."""

    def __init__(
        self,
        name: str,
        nearby: list[Place] | None = None,
        *,
        keyword_results: list[Place] | None = None,
        unavailable: bool = False,
    ) -> None:
        self.name = name
        self._nearby = nearby or []
        self._keyword_results = keyword_results or []
        self._unavailable = unavailable
        self.nearby_calls: list[dict] = []
        self.keyword_calls: list[dict] = []

    async def search_nearby(self, center, type_filter, radius_meters, limit, *, area_hint=None) -> list[Place]:
        self.nearby_calls.append({"type_filter": type_filter, "radius_meters": radius_meters, "area_hint": area_hint})
        if self._unavailable:
            raise ProviderUnavailableError(self.name, "mock outage")
        return list(self._nearby[:limit])

    async def search_by_keyword(self, center, keyword, radius_meters, limit, *, area_hint=None) -> list[Place]:
        self.keyword_calls.append({"keyword": keyword, "radius_meters": radius_meters, "area_hint": area_hint})
        if self._unavailable:
            raise ProviderUnavailableError(self.name, "mock outage")
        return list(self._keyword_results[:limit])


class MockTransitService(TransitMatrixProtocol):
    """출발지 좌표별 고정 소요 시간(초)을 돌려주는 이동 시간 서비스."""

    name = "mock-transit"

    def __init__(
        self,
        durations: dict[tuple[float, float], int] | None = None,
        *,
        failing: bool = False,
        delay_seconds: float = 0.0,
    ) -> None:
        self._durations = durations or {}
        self._failing = failing
        self._delay_seconds = delay_seconds
        self.calls = 0
        self.in_flight = 0
        self.max_in_flight = 0

    async def calculate_transit_times(self, origin, destinations) -> list[TransitResult]:
        self.calls += 1
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self._delay_seconds:
                await asyncio.sleep(self._delay_seconds)
        finally:
            self.in_flight -= 1
        if self._failing:
            raise ProviderUnavailableError(self.name, "mock outage")
        duration = self._durations.get((origin.lat, origin.lng), 0)
        return [
            TransitResult(duration_seconds=duration, distance_meters=duration * 5, success=duration > 0)
            for _ in destinations
        ]


class MockScoringOracle(ScoringOracle):
    """미리 정한 원문 응답을 돌려주거나 예외를 던지는 채점기."""

    def __init__(self, response: str = "", *, error: Exception | None = None) -> None:
        self._response = response
        self._error = error
        self.calls: list[tuple[str, str]] = []

    async def score(self, context_text: str, instruction_text: str) -> str:
        self.calls.append((context_text, instruction_text))
        if self._error is not None:
            raise self._error
        return self._response
