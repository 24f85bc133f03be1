"""Places 서비스 추상 프로토콜 정의."""

from abc import ABC, abstractmethod

from meetpoint.schemas.location import Coordinate, Place


class PlacesServiceProtocol(ABC):
    """중심 좌표 주변 장소 검색을 위한 인터페이스를 정의합니다.

    반경과 결과 수는 공급자 한도에 맞춰 조용히 줄어들고, 공급자 고유의 정렬 순서를 유지합니다.
    """

    name: str

    @abstractmethod
    async def search_nearby(
        self,
        center: Coordinate,
        type_filter: str,
        radius_meters: int,
        limit: int,
        *,
        area_hint: str | None = None,
    ) -> list[Place]:
        """장소 유형으로 주변 장소를 검색합니다.

        Args:
            center: 검색 중심 좌표
            type_filter: 장소 유형 (restaurant, cafe, ...)
            radius_meters: 검색 반경(m)
            limit: 최대 결과 수
            area_hint: 지역 이름 (반경 파라미터가 없는 공급자용)

        Raises:
            ProviderUnavailableError: 공급자 호출 실패
        """
        raise NotImplementedError

    @abstractmethod
    async def search_by_keyword(
        self,
        center: Coordinate,
        keyword: str,
        radius_meters: int,
        limit: int,
        *,
        area_hint: str | None = None,
    ) -> list[Place]:
        """키워드로 주변 장소를 검색합니다.

        Raises:
            ProviderUnavailableError: 공급자 호출 실패
        """
        raise NotImplementedError
