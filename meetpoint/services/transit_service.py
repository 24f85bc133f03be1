"""대중교통 이동 시간 행렬 서비스 프로토콜."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from meetpoint.schemas.location import Coordinate


@dataclass(frozen=True, slots=True)
class TransitResult:
    """출발지-목적지 한 쌍의 이동 결과. 실패한 경우 success=False."""

    duration_seconds: int
    distance_meters: int
    success: bool


class TransitMatrixProtocol(ABC):
    name: str

    @abstractmethod
    async def calculate_transit_times(
        self,
        origin: Coordinate,
        destinations: list[Coordinate],
    ) -> list[TransitResult]:
        """출발지 하나에서 목적지 각각까지의 대중교통 이동 결과를 목적지 순서대로 반환합니다."""
        raise NotImplementedError
