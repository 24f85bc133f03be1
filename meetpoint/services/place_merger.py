"""여러 검색 공급자의 장소 목록을 중복 없이 합치는 유틸."""

from __future__ import annotations

from collections.abc import Sequence

from meetpoint.core.geo import haversine_distance, string_similarity
from meetpoint.schemas.location import Place

NAME_SIMILARITY_THRESHOLD = 0.7
SAME_PLACE_DISTANCE_METERS = 100.0


def is_same_place(a: Place, b: Place) -> bool:
    """이름 유사도가 0.7 초과이고 거리가 100m 미만이면 같은 장소로 봅니다."""
    if string_similarity(a.name, b.name) <= NAME_SIMILARITY_THRESHOLD:
        return False
    return haversine_distance(a.coordinates, b.coordinates) < SAME_PLACE_DISTANCE_METERS


def merge_places(primary: Sequence[Place], secondary: Sequence[Place]) -> list[Place]:
    """primary 전체 뒤에, 이미 합쳐진 결과와 겹치지 않는 secondary 장소를 순서대로 붙입니다."""
    merged = list(primary)
    for candidate in secondary:
        if not any(is_same_place(existing, candidate) for existing in merged):
            merged.append(candidate)
    return merged
