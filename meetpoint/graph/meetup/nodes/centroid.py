"""중심점 계산 노드."""

from typing import Any

from langchain_core.runnables import RunnableConfig

from meetpoint.core.geo import centroid
from meetpoint.core.logger import get_logger
from meetpoint.graph.meetup.state import MeetupState, PipelineStage
from meetpoint.graph.meetup.utils import area_hint_from_address, get_dependencies
from meetpoint.schemas.location import CenterPoint
from meetpoint.services.geocoding_service import coordinate_label

logger = get_logger(__name__)


async def compute_center(state: MeetupState, config: RunnableConfig) -> dict[str, Any]:
    """지오코딩 좌표의 중심점을 구하고 역지오코딩으로 이름을 붙입니다."""
    deps = get_dependencies(config)
    results = state.get("geocode_results", [])

    center = centroid([result.coordinates for result in results])
    address = await deps.geocoder.reverse_geocode(center)
    center_point = CenterPoint(coordinates=center, address=address, address_count=len(results))

    logger.info("Center point: lat=%.6f lng=%.6f address=%s", center.lat, center.lng, address)
    return {
        **state,
        "stage": PipelineStage.CENTROID,
        "center_point": center_point,
        "area_hint": area_hint_from_address(address, coordinate_label(center)),
    }
