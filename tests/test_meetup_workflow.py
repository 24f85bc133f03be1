"""약속 장소 추천 파이프라인 테스트."""

import asyncio

import pytest

from meetpoint.core.errors import (
    EmptyAddressListError,
    GeocodingExhaustedError,
    InvalidSearchParameterError,
    TooManyAddressesError,
)
from meetpoint.services.accessibility_service import AccessibilityAnalyzer
from meetpoint.services.geocoding_service import GeocodingChain
from meetpoint.services.meetup_service import recommend_meeting_places
from meetpoint.services.provider_registry import MeetupDependencies
from meetpoint.services.recommendation_service import RecommendationEngine
from tests.mocks.mock_providers import (
    MockGeocodingService,
    MockPlacesService,
    MockScoringOracle,
    MockTransitService,
    make_place,
)

GANGNAM = "서울 강남구 테헤란로 152"
CITY_HALL = "서울 중구 세종대로 110"
COORDINATES = {GANGNAM: (37.50, 127.03), CITY_HALL: (37.56, 126.97)}


def _deps(
    *,
    place_services=None,
    transit=None,
    oracle=None,
    geocoders=None,
) -> MeetupDependencies:
    return MeetupDependencies(
        geocoder=GeocodingChain(
            geocoders
            if geocoders is not None
            else [MockGeocodingService("kakao", COORDINATES, reverse_address="서울특별시 용산구 한강로동 1")]
        ),
        analyzer=AccessibilityAnalyzer(transit, timeout_seconds=1),
        engine=RecommendationEngine(oracle, timeout_seconds=1),
        place_services=place_services or [],
        search_timeout_seconds=1,
        search_limit=15,
    )


def _three_places():
    return [
        make_place("장소1", 37.530, 127.000),
        make_place("장소2", 37.531, 127.002),
        make_place("장소3", 37.529, 126.998),
    ]


def test_two_address_end_to_end_scenario() -> None:
    places = MockPlacesService("kakao", _three_places())
    transit = MockTransitService({(37.50, 127.03): 600, (37.56, 126.97): 900})
    deps = _deps(place_services=[places], transit=transit)

    result = asyncio.run(recommend_meeting_places(deps, [GANGNAM, CITY_HALL]))

    assert result.center_point.coordinates.lat == pytest.approx(37.53)
    assert result.center_point.coordinates.lng == pytest.approx(127.00)
    assert result.center_point.address_count == 2
    assert result.center_point.address == "서울특별시 용산구 한강로동 1"
    assert len(result.recommendations) == 3
    for place in result.recommendations:
        summary = place.transportation_accessibility
        assert summary.average_transit_time == 13
        assert summary.accessibility_score == 10
        assert summary.calculation_method == "provider_api"
    assert result.diagnostics.total_calculations == 6
    assert result.diagnostics.average_accessibility_score == 10
    assert result.diagnostics.best_accessibility_location == "장소1"
    assert result.diagnostics.average_transit_time == "13분"
    assert result.diagnostics.ranking_method == "accessibility"
    assert result.diagnostics.search_broadened is False
    assert places.nearby_calls[0]["area_hint"] == "서울특별시 용산구 한강로동"


def test_pipeline_uses_oracle_ranking_when_available() -> None:
    oracle = MockScoringOracle('[{"placeIndex": 3, "score": 9.5, "reason": "두 사람 모두 가깝다"}]')
    deps = _deps(place_services=[MockPlacesService("kakao", _three_places())], oracle=oracle)

    result = asyncio.run(recommend_meeting_places(deps, [GANGNAM, CITY_HALL], max_results=5))

    assert [place.name for place in result.recommendations] == ["장소3"]
    assert result.recommendations[0].ai_analysis == "두 사람 모두 가깝다"
    assert result.diagnostics.ranking_method == "ai"


def test_failed_provider_is_filled_by_others_and_duplicates_merged() -> None:
    kakao = MockPlacesService("kakao", unavailable=True)
    naver = MockPlacesService("naver", [make_place("장소1", 37.530, 127.000, source="naver")])
    google = MockPlacesService(
        "google",
        [make_place("장소1", 37.5301, 127.0001, source="google"), make_place("장소4", 37.54, 127.01, source="google")],
    )
    deps = _deps(place_services=[kakao, naver, google])

    result = asyncio.run(recommend_meeting_places(deps, [GANGNAM, CITY_HALL]))

    names = sorted((place.name, place.source) for place in result.recommendations)
    assert names == [("장소1", "naver"), ("장소4", "google")]
    assert result.diagnostics.estimated_place_count == 2


def test_preferences_trigger_keyword_search() -> None:
    kakao = MockPlacesService("kakao", _three_places()[:1], keyword_results=[make_place("조용한 카페", 37.52, 126.99)])
    deps = _deps(place_services=[kakao])

    result = asyncio.run(recommend_meeting_places(deps, [GANGNAM, CITY_HALL], place_type="cafe", preferences="조용한"))

    assert kakao.keyword_calls[0]["keyword"] == "조용한"
    assert {place.name for place in result.recommendations} == {"장소1", "조용한 카페"}


def test_empty_search_is_broadened_once() -> None:
    kakao = MockPlacesService("kakao")
    naver = MockPlacesService("naver", keyword_results=[make_place("넓힌 결과", 37.55, 127.02, source="naver")])
    deps = _deps(place_services=[kakao, naver])

    result = asyncio.run(recommend_meeting_places(deps, [GANGNAM, CITY_HALL], radius_meters=15000))

    assert [place.name for place in result.recommendations] == ["넓힌 결과"]
    assert result.diagnostics.search_broadened is True
    assert kakao.keyword_calls == [{"keyword": "맛집", "radius_meters": 20000, "area_hint": "서울특별시 용산구 한강로동"}]
    assert naver.keyword_calls[0]["radius_meters"] == 20000


def test_no_places_anywhere_returns_empty_recommendations() -> None:
    deps = _deps(place_services=[MockPlacesService("kakao")])

    result = asyncio.run(recommend_meeting_places(deps, [GANGNAM]))

    assert result.recommendations == []
    assert result.diagnostics.best_accessibility_location == "N/A"
    assert result.diagnostics.average_accessibility_score == 0.0
    assert result.diagnostics.search_broadened is True


def test_unresolvable_address_fails_pipeline() -> None:
    places = MockPlacesService("kakao", _three_places())
    deps = _deps(place_services=[places])

    with pytest.raises(GeocodingExhaustedError):
        asyncio.run(recommend_meeting_places(deps, [GANGNAM, "존재하지 않는 주소"]))

    assert places.nearby_calls == []


def test_reverse_geocode_failure_uses_coordinate_label() -> None:
    geocoder = MockGeocodingService("kakao", COORDINATES)
    deps = _deps(geocoders=[geocoder], place_services=[MockPlacesService("kakao", _three_places())])

    result = asyncio.run(recommend_meeting_places(deps, [GANGNAM, CITY_HALL]))

    assert result.center_point.address == "위도 37.5300, 경도 127.0000 근처"


@pytest.mark.parametrize(
    ("kwargs", "error"),
    [
        ({"addresses": []}, EmptyAddressListError),
        ({"addresses": ["  ", ""]}, EmptyAddressListError),
        ({"addresses": [f"주소 {i}" for i in range(21)]}, TooManyAddressesError),
        ({"addresses": [GANGNAM], "radius_meters": 50}, InvalidSearchParameterError),
        ({"addresses": [GANGNAM], "radius_meters": 25000}, InvalidSearchParameterError),
        ({"addresses": [GANGNAM], "max_results": 0}, InvalidSearchParameterError),
        ({"addresses": [GANGNAM], "max_results": 51}, InvalidSearchParameterError),
    ],
)
def test_input_errors_are_raised_before_any_io(kwargs, error) -> None:
    geocoder = MockGeocodingService("kakao", COORDINATES)
    deps = _deps(geocoders=[geocoder])

    with pytest.raises(error):
        asyncio.run(recommend_meeting_places(deps, **kwargs))

    assert geocoder.geocode_calls == []


def test_twenty_addresses_are_accepted() -> None:
    coordinates = {f"주소 {i}": (37.5 + i * 0.001, 127.0) for i in range(20)}
    deps = _deps(geocoders=[MockGeocodingService("kakao", coordinates)])

    result = asyncio.run(recommend_meeting_places(deps, list(coordinates)))

    assert result.center_point.address_count == 20


class _ReverseCrashGeocoder(MockGeocodingService):
    async def reverse_geocode(self, coordinate):
        raise KeyError("road_address")


def test_unexpected_reverse_geocode_error_does_not_fail_pipeline() -> None:
    deps = _deps(
        geocoders=[_ReverseCrashGeocoder("kakao", COORDINATES)],
        place_services=[MockPlacesService("kakao", _three_places())],
    )

    result = asyncio.run(recommend_meeting_places(deps, [GANGNAM, CITY_HALL]))

    assert result.center_point.address == "위도 37.5300, 경도 127.0000 근처"
    assert len(result.recommendations) == 3
