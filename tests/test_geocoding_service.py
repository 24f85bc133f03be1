"""지오코딩 체인 테스트."""

import asyncio

import pytest

from meetpoint.core.errors import GeocodingExhaustedError
from meetpoint.schemas.location import Coordinate
from meetpoint.services.geocoding_service import GeocodingChain
from tests.mocks.mock_providers import MockGeocodingService


def test_chain_uses_primary_when_it_succeeds() -> None:
    primary = MockGeocodingService("kakao", {"서울시청": (37.5663, 126.9779)})
    secondary = MockGeocodingService("naver", {"서울시청": (0.0, 0.0)})
    chain = GeocodingChain([primary, secondary])

    result = asyncio.run(chain.geocode("서울시청"))

    assert result.coordinates == Coordinate(lat=37.5663, lng=126.9779)
    assert secondary.geocode_calls == []


def test_chain_falls_back_on_not_found_and_unavailable() -> None:
    for primary in (
        MockGeocodingService("kakao", {}),
        MockGeocodingService("kakao", {"강남역": (1.0, 1.0)}, unavailable=True),
    ):
        secondary = MockGeocodingService("naver", {"강남역": (37.4979, 127.0276)})
        chain = GeocodingChain([primary, secondary])

        result = asyncio.run(chain.geocode("강남역"))

        assert result.coordinates.lat == 37.4979
        assert secondary.geocode_calls == ["강남역"]


def test_chain_exhausted_reports_providers_tried() -> None:
    chain = GeocodingChain([MockGeocodingService("kakao"), MockGeocodingService("naver", unavailable=True)])

    with pytest.raises(GeocodingExhaustedError) as exc_info:
        asyncio.run(chain.geocode("없는 주소"))

    assert exc_info.value.providers_tried == ["kakao", "naver"]
    assert exc_info.value.error_code == "GEOCODING_ALL_FAILED"


def test_chain_without_providers_is_exhausted() -> None:
    with pytest.raises(GeocodingExhaustedError) as exc_info:
        asyncio.run(GeocodingChain([]).geocode("서울시청"))

    assert exc_info.value.providers_tried == []


def test_batch_geocoding_is_sequential_and_fails_fast() -> None:
    provider = MockGeocodingService("kakao", {"A": (37.0, 127.0), "C": (37.1, 127.1)})
    chain = GeocodingChain([provider])

    with pytest.raises(GeocodingExhaustedError) as exc_info:
        asyncio.run(chain.geocode_addresses(["A", "B", "C"]))

    assert exc_info.value.address == "B"
    assert provider.geocode_calls == ["A", "B"]


def test_reverse_geocode_never_raises() -> None:
    chain = GeocodingChain([MockGeocodingService("kakao", unavailable=True)])

    label = asyncio.run(chain.reverse_geocode(Coordinate(lat=37.53, lng=127.0)))

    assert label == "위도 37.5300, 경도 127.0000 근처"


def test_reverse_geocode_uses_first_available_provider() -> None:
    chain = GeocodingChain(
        [
            MockGeocodingService("kakao", unavailable=True),
            MockGeocodingService("naver", reverse_address="서울특별시 용산구 한강로동"),
        ]
    )

    assert asyncio.run(chain.reverse_geocode(Coordinate(lat=37.53, lng=127.0))) == "서울특별시 용산구 한강로동"


class _BrokenReverseGeocoder(MockGeocodingService):
    async def reverse_geocode(self, coordinate: Coordinate) -> str:
        raise KeyError("road_address")


def test_reverse_geocode_survives_unexpected_provider_errors() -> None:
    chain = GeocodingChain([_BrokenReverseGeocoder("kakao")])

    label = asyncio.run(chain.reverse_geocode(Coordinate(lat=37.53, lng=127.0)))

    assert label == "위도 37.5300, 경도 127.0000 근처"


def test_reverse_geocode_moves_past_unexpected_error_to_next_provider() -> None:
    chain = GeocodingChain(
        [_BrokenReverseGeocoder("kakao"), MockGeocodingService("naver", reverse_address="서울특별시 중구 태평로1가")]
    )

    assert asyncio.run(chain.reverse_geocode(Coordinate(lat=37.53, lng=127.0))) == "서울특별시 중구 태평로1가"
