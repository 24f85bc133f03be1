"""장소 병합 테스트."""

from meetpoint.services.place_merger import is_same_place, merge_places
from tests.mocks.mock_providers import make_place

# 위도 0.00045도는 약 50m
LAT_50M = 0.00045
LAT_150M = 0.00135
LAT_10M = 0.00009


def test_merge_with_itself_is_idempotent() -> None:
    places = [
        make_place("을지로 골뱅이", 37.5660, 126.9910),
        make_place("을지면옥", 37.5665, 126.9920),
        make_place("우래옥", 37.5680, 126.9980),
    ]

    assert merge_places(places, places) == places


def test_identical_names_far_apart_are_not_merged() -> None:
    primary = [make_place("스타벅스", 37.5000, 127.0000)]
    secondary = [make_place("스타벅스", 37.5000 + LAT_150M, 127.0000, source="naver")]

    merged = merge_places(primary, secondary)

    assert len(merged) == 2


def test_similar_names_close_together_are_merged() -> None:
    # 유사도 0.71
    primary = [make_place("a" * 100, 37.5000, 127.0000)]
    secondary = [make_place("a" * 71 + "b" * 29, 37.5000 + LAT_50M, 127.0000, source="naver")]

    merged = merge_places(primary, secondary)

    assert merged == primary


def test_dissimilar_names_very_close_are_not_merged() -> None:
    # 유사도 0.69
    primary = [make_place("a" * 100, 37.5000, 127.0000)]
    secondary = [make_place("a" * 69 + "b" * 31, 37.5000 + LAT_10M, 127.0000, source="google")]

    merged = merge_places(primary, secondary)

    assert len(merged) == 2


def test_primary_record_wins_and_order_is_kept() -> None:
    kakao = make_place("우래옥", 37.5680, 126.9980, phone="02-000-0000")
    naver_duplicate = make_place("우래옥", 37.5680, 126.9981, source="naver")
    naver_new = make_place("평양면옥", 37.5600, 126.9700, source="naver")

    merged = merge_places([kakao], [naver_duplicate, naver_new])

    assert merged == [kakao, naver_new]
    assert merged[0].source == "kakao"


def test_secondary_duplicates_within_secondary_are_dropped() -> None:
    first = make_place("을지다방", 37.5660, 126.9910, source="naver")
    second = make_place("을지다방", 37.5660, 126.9911, source="naver")

    assert merge_places([], [first, second]) == [first]


def test_is_same_place_requires_both_conditions() -> None:
    a = make_place("카페 온도", 37.5, 127.0)

    assert is_same_place(a, make_place("카페 온도", 37.5 + LAT_50M, 127.0))
    assert not is_same_place(a, make_place("전혀 다른 가게", 37.5, 127.0))
