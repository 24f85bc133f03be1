"""추천 순위 결정 노드."""

from typing import Any

from langchain_core.runnables import RunnableConfig

from meetpoint.graph.meetup.state import MeetupState, PipelineStage
from meetpoint.graph.meetup.utils import get_dependencies


async def rank_places(state: MeetupState, config: RunnableConfig) -> dict[str, Any]:
    """추천 엔진으로 순위를 매깁니다. 엔진은 실패 시 접근성 순위로 대체합니다."""
    deps = get_dependencies(config)

    recommendations, ranking_method = await deps.engine.recommend(
        state.get("analyzed_places", []),
        state["center_point"].coordinates,
        state.get("addresses", []),
        state.get("place_type", "restaurant"),
        state.get("preferences", ""),
        state.get("max_results", 10),
    )
    return {
        **state,
        "stage": PipelineStage.DONE,
        "recommendations": recommendations,
        "ranking_method": ranking_method,
    }
