"""중심점, 거리, 문자열 유사도 계산을 위한 순수 함수 모음."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from meetpoint.core.errors import InvalidInputError
from meetpoint.schemas.location import Coordinate

EARTH_RADIUS_METERS = 6_371_000.0


def round_half_up(value: float) -> int:
    """0.5를 항상 올리는 반올림. 내장 `round`의 은행원 반올림과 다릅니다."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def centroid(points: Sequence[Coordinate]) -> Coordinate:
    """좌표들의 위도/경도 산술 평균을 반환합니다.

    Raises:
        InvalidInputError: 좌표가 하나도 없을 때.
    """
    if not points:
        raise InvalidInputError("Cannot calculate center of an empty coordinate list")
    if len(points) == 1:
        return points[0]

    lat = sum(point.lat for point in points) / len(points)
    lng = sum(point.lng for point in points) / len(points)
    return Coordinate(lat=lat, lng=lng)


def haversine_distance(a: Coordinate, b: Coordinate) -> float:
    """두 좌표 사이의 대원 거리(m)."""
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    d_lat = math.radians(b.lat - a.lat)
    d_lng = math.radians(b.lng - a.lng)

    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    return 2 * EARTH_RADIUS_METERS * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def edit_distance(a: str, b: str) -> int:
    """단위 비용 삽입/삭제/치환 기준 Levenshtein 거리."""
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i] + [0] * len(b)
        for j, char_b in enumerate(b, start=1):
            cost = 0 if char_a == char_b else 1
            current[j] = min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + cost,
            )
        previous = current
    return previous[-1]


def string_similarity(a: str, b: str) -> float:
    """`1 - edit_distance / max(len)`. 두 문자열이 모두 비어 있으면 1.0."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - edit_distance(a, b) / longest
