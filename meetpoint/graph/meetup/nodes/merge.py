"""검색 결과 병합 노드."""

from typing import Any

from langchain_core.runnables import RunnableConfig

from meetpoint.core.logger import get_logger
from meetpoint.graph.meetup.state import MeetupState, PipelineStage
from meetpoint.graph.meetup.utils import get_dependencies
from meetpoint.services.place_merger import merge_places

logger = get_logger(__name__)

CANDIDATE_LIMIT_FACTOR = 2


def merge_candidates(state: MeetupState, config: RunnableConfig) -> dict[str, Any]:
    """공급자 우선순위 순서로 결과를 합치고 후보 수를 제한합니다."""
    deps = get_dependencies(config)
    candidates = []
    for places in state.get("search_results", {}).values():
        candidates = merge_places(candidates, places)

    limit = deps.search_limit * CANDIDATE_LIMIT_FACTOR
    if len(candidates) > limit:
        logger.info("Candidate list truncated: total=%d limit=%d", len(candidates), limit)
        candidates = candidates[:limit]

    logger.info("Merged %d candidate places", len(candidates))
    return {**state, "stage": PipelineStage.MERGING, "candidates": candidates}
