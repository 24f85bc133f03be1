"""참가자 주소 × 후보 장소 대중교통 접근성 분석."""

from __future__ import annotations

import asyncio
import contextlib
import math
from collections.abc import Sequence

from meetpoint.core.geo import haversine_distance, round_half_up
from meetpoint.core.logger import get_logger
from meetpoint.core.outcome import Outcome, settle
from meetpoint.schemas.location import AccessibilitySummary, Coordinate, Place, TransitLeg
from meetpoint.services.transit_service import TransitMatrixProtocol, TransitResult

logger = get_logger(__name__)

DEFAULT_FALLBACK_SPEED_MPS = 5.0
DEFAULT_DETOUR_FACTOR = 1.3
DEFAULT_MAX_CONCURRENCY = 4
_FAILED_RESULT = TransitResult(duration_seconds=0, distance_meters=0, success=False)

_GRACE_MINUTES = 15
_MINUTES_PER_POINT = 5
_MIN_SCORE = 1
_MAX_SCORE = 10


def accessibility_score(average_minutes: int) -> int:
    """평균 이동 시간(분)을 1~10 점수로 변환합니다.

    15분 이내는 10점이고, 이후 5분마다 1점씩 깎이며 최저 1점입니다.
    """
    raw = _MAX_SCORE - math.floor((average_minutes - _GRACE_MINUTES) / _MINUTES_PER_POINT)
    return max(_MIN_SCORE, min(_MAX_SCORE, raw))


def format_minutes(seconds: int) -> str:
    return f"{round_half_up(seconds / 60)}분"


def format_distance(meters: int) -> str:
    if meters < 1000:
        return f"{meters}m"
    return f"{meters / 1000:.1f}km"


def estimate_leg(
    origin_address: str,
    origin: Coordinate,
    destination: Coordinate,
    *,
    speed_mps: float = DEFAULT_FALLBACK_SPEED_MPS,
    detour_factor: float = DEFAULT_DETOUR_FACTOR,
) -> TransitLeg:
    """직선거리 기반의 결정적 추정 구간. 같은 입력에는 항상 같은 결과를 냅니다."""
    distance = round_half_up(haversine_distance(origin, destination) * detour_factor)
    duration = round_half_up(distance / speed_mps)
    return TransitLeg(
        origin=origin_address,
        transit_time=format_minutes(duration),
        transit_distance=format_distance(distance),
        transit_mode="estimated",
        duration_seconds=duration,
        distance_meters=distance,
    )


def summarize_legs(legs: Sequence[TransitLeg]) -> AccessibilitySummary:
    """주소별 구간으로 장소 하나의 접근성 요약을 만듭니다."""
    mean_seconds = sum(leg.duration_seconds for leg in legs) / len(legs) if legs else 0
    average_minutes = round_half_up(mean_seconds / 60)
    provider_used = any(leg.transit_mode == "transit" for leg in legs)
    return AccessibilitySummary(
        average_transit_time=average_minutes,
        accessibility_score=accessibility_score(average_minutes),
        from_addresses=list(legs),
        calculation_method="provider_api" if provider_used else "estimated",
    )


class AccessibilityAnalyzer:
    """장소마다 모든 출발 주소의 대중교통 구간을 계산해 접근성을 붙입니다."""

    def __init__(
        self,
        transit: TransitMatrixProtocol | None,
        *,
        timeout_seconds: int = 10,
        fallback_speed_mps: float = DEFAULT_FALLBACK_SPEED_MPS,
        detour_factor: float = DEFAULT_DETOUR_FACTOR,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> None:
        self._transit = transit
        self._timeout_seconds = timeout_seconds
        self._fallback_speed_mps = fallback_speed_mps
        self._detour_factor = detour_factor
        self._max_concurrency = max(1, int(max_concurrency))

    async def _transit_result(self, origin: Coordinate, destination: Coordinate) -> TransitResult:
        if self._transit is None:
            return _FAILED_RESULT
        results = await self._transit.calculate_transit_times(origin, [destination])
        return results[0] if results else _FAILED_RESULT

    def _limiter(self) -> asyncio.Semaphore:
        return asyncio.Semaphore(self._max_concurrency)

    async def leg(
        self,
        origin_address: str,
        origin: Coordinate,
        destination: Coordinate,
        *,
        limiter: asyncio.Semaphore | None = None,
    ) -> TransitLeg:
        """구간 하나를 계산합니다. 공급자 실패, 타임아웃, 0 이하 소요 시간은 추정값으로 대체합니다.

        limiter가 있으면 슬롯을 얻은 뒤부터 타임아웃을 잽니다.
        """
        async with limiter or contextlib.nullcontext():
            outcome: Outcome[TransitResult] = await settle(
                self._transit_result(origin, destination),
                fallback=_FAILED_RESULT,
                timeout_seconds=self._timeout_seconds,
                label=f"transit:{origin_address}",
            )
        result = outcome.value
        if result.success and result.duration_seconds > 0:
            return TransitLeg(
                origin=origin_address,
                transit_time=format_minutes(result.duration_seconds),
                transit_distance=format_distance(result.distance_meters),
                transit_mode="transit",
                duration_seconds=result.duration_seconds,
                distance_meters=result.distance_meters,
            )
        return estimate_leg(
            origin_address,
            origin,
            destination,
            speed_mps=self._fallback_speed_mps,
            detour_factor=self._detour_factor,
        )

    async def _analyze_place(
        self,
        origin_addresses: Sequence[str],
        origin_coords: Sequence[Coordinate],
        place: Place,
        limiter: asyncio.Semaphore,
    ) -> Place:
        legs = await asyncio.gather(
            *(
                self.leg(address, coord, place.coordinates, limiter=limiter)
                for address, coord in zip(origin_addresses, origin_coords)
            )
        )
        return place.model_copy(update={"transportation_accessibility": summarize_legs(legs)})

    async def analyze(
        self,
        origin_addresses: Sequence[str],
        origin_coords: Sequence[Coordinate],
        places: Sequence[Place],
    ) -> list[Place]:
        """각 장소의 복사본에 접근성 요약을 붙여 입력 순서대로 반환합니다."""
        if len(origin_addresses) != len(origin_coords):
            raise ValueError("origin_addresses and origin_coords must have the same length")
        if not places:
            return []

        limiter = self._limiter()
        analyzed = await asyncio.gather(
            *(self._analyze_place(origin_addresses, origin_coords, place, limiter) for place in places)
        )
        estimated = sum(
            1
            for place in analyzed
            if place.transportation_accessibility
            and place.transportation_accessibility.calculation_method == "estimated"
        )
        logger.info(
            "Accessibility analysis completed: places=%d origins=%d estimated_places=%d",
            len(analyzed),
            len(origin_coords),
            estimated,
        )
        return list(analyzed)

    async def legs_from(
        self,
        origin_address: str,
        origin: Coordinate,
        destinations: Sequence[Coordinate],
    ) -> list[TransitLeg]:
        """출발지 하나에서 목적지 각각까지의 구간을 목적지 순서대로 반환합니다."""
        limiter = self._limiter()
        legs = await asyncio.gather(
            *(self.leg(origin_address, origin, destination, limiter=limiter) for destination in destinations)
        )
        return list(legs)
