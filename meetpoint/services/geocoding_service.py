"""지오코딩 서비스 프로토콜과 공급자 순서 기반 대체 체인."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from meetpoint.core.errors import AddressNotFoundError, GeocodingExhaustedError, ProviderUnavailableError
from meetpoint.core.logger import get_logger
from meetpoint.schemas.location import Coordinate, GeocodeResult

logger = get_logger(__name__)


def coordinate_label(coordinate: Coordinate) -> str:
    """역지오코딩 실패 시 사용하는 좌표 표기."""
    return f"위도 {coordinate.lat:.4f}, 경도 {coordinate.lng:.4f} 근처"


class GeocodingServiceProtocol(ABC):
    """주소와 좌표를 상호 변환하는 공급자 인터페이스."""

    name: str

    @abstractmethod
    async def geocode(self, address: str) -> GeocodeResult:
        """주소를 좌표로 변환합니다.

        Raises:
            AddressNotFoundError: 일치하는 결과가 없을 때
            ProviderUnavailableError: 네트워크/인증/타임아웃 실패
        """
        raise NotImplementedError

    @abstractmethod
    async def reverse_geocode(self, coordinate: Coordinate) -> str:
        """좌표를 사람이 읽을 수 있는 주소로 변환합니다.

        Raises:
            AddressNotFoundError: 일치하는 결과가 없을 때
            ProviderUnavailableError: 네트워크/인증/타임아웃 실패
        """
        raise NotImplementedError


class GeocodingChain:
    """공급자를 순서대로 시도하는 지오코더."""

    def __init__(self, providers: Sequence[GeocodingServiceProtocol]) -> None:
        self._providers = list(providers)

    @property
    def provider_names(self) -> list[str]:
        return [provider.name for provider in self._providers]

    async def geocode(self, address: str) -> GeocodeResult:
        """첫 번째로 성공한 공급자의 결과를 반환합니다.

        Raises:
            GeocodingExhaustedError: 모든 공급자가 실패했을 때
        """
        tried: list[str] = []
        for provider in self._providers:
            tried.append(provider.name)
            try:
                result = await provider.geocode(address)
            except AddressNotFoundError:
                logger.warning("Geocoding found no match: provider=%s address=%s", provider.name, address)
                continue
            except ProviderUnavailableError as exc:
                logger.warning(
                    "Geocoding provider unavailable: provider=%s address=%s reason=%s",
                    provider.name,
                    address,
                    exc.reason,
                )
                continue
            logger.info(
                "Geocoding succeeded: provider=%s address=%s accuracy=%s",
                provider.name,
                address,
                result.accuracy,
            )
            return result

        logger.error("Geocoding exhausted all providers: address=%s tried=%s", address, tried)
        raise GeocodingExhaustedError(address, tried)

    async def geocode_addresses(self, addresses: Sequence[str]) -> list[GeocodeResult]:
        """주소 목록을 입력 순서대로 하나씩 변환합니다. 첫 실패에서 중단합니다."""
        results: list[GeocodeResult] = []
        for address in addresses:
            results.append(await self.geocode(address))
        return results

    async def reverse_geocode(self, coordinate: Coordinate) -> str:
        """역지오코딩. 실패해도 예외 없이 좌표 표기를 반환합니다."""
        for provider in self._providers:
            try:
                address = await provider.reverse_geocode(coordinate)
            except (AddressNotFoundError, ProviderUnavailableError) as exc:
                logger.warning("Reverse geocoding failed: provider=%s error=%s", provider.name, exc)
                continue
            except Exception:
                logger.exception("Reverse geocoding raised unexpectedly: provider=%s", provider.name)
                continue
            if address:
                return address
        return coordinate_label(coordinate)
