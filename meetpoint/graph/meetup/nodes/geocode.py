"""주소 지오코딩 노드."""

from typing import Any

from langchain_core.runnables import RunnableConfig

from meetpoint.core.errors import GeocodingExhaustedError
from meetpoint.core.logger import get_logger
from meetpoint.graph.meetup.state import MeetupState, PipelineStage
from meetpoint.graph.meetup.utils import get_dependencies

logger = get_logger(__name__)


async def geocode_addresses(state: MeetupState, config: RunnableConfig) -> dict[str, Any]:
    """모든 입력 주소를 순서대로 변환합니다. 하나라도 실패하면 FAILED로 끝납니다."""
    deps = get_dependencies(config)
    addresses = state.get("addresses", [])

    try:
        results = await deps.geocoder.geocode_addresses(addresses)
    except GeocodingExhaustedError as exc:
        logger.error("Pipeline failed at geocoding: address=%s tried=%s", exc.address, exc.providers_tried)
        return {**state, "stage": PipelineStage.FAILED, "failure": exc, "geocode_results": []}

    logger.info("Geocoded %d addresses", len(results))
    return {**state, "stage": PipelineStage.GEOCODING, "geocode_results": results, "failure": None}
