"""대중교통 접근성 분석 노드."""

from typing import Any

from langchain_core.runnables import RunnableConfig

from meetpoint.graph.meetup.state import MeetupState, PipelineStage
from meetpoint.graph.meetup.utils import get_dependencies


async def analyze_accessibility(state: MeetupState, config: RunnableConfig) -> dict[str, Any]:
    deps = get_dependencies(config)
    results = state.get("geocode_results", [])

    analyzed = await deps.analyzer.analyze(
        [result.original_address for result in results],
        [result.coordinates for result in results],
        state.get("candidates", []),
    )
    return {**state, "stage": PipelineStage.ACCESSIBILITY, "analyzed_places": analyzed}
