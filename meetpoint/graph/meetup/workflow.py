"""약속 장소 추천 그래프 워크플로우 구성."""

from langgraph.graph import END, StateGraph

from meetpoint.graph.meetup.nodes import (
    analyze_accessibility,
    compute_center,
    geocode_addresses,
    merge_candidates,
    rank_places,
    search_places,
)
from meetpoint.graph.meetup.state import MeetupState, PipelineStage


def _route_after_geocoding(state: MeetupState) -> str:
    if state.get("stage") == PipelineStage.FAILED:
        return "failed"
    return "continue"


def _create_workflow() -> StateGraph:
    """GEOCODING → CENTROID → SEARCHING → MERGING → ACCESSIBILITY → RANKING 순서의 그래프를 생성합니다."""
    workflow = StateGraph(MeetupState)

    workflow.add_node("geocode_addresses", geocode_addresses)
    workflow.add_node("compute_center", compute_center)
    workflow.add_node("search_places", search_places)
    workflow.add_node("merge_candidates", merge_candidates)
    workflow.add_node("analyze_accessibility", analyze_accessibility)
    workflow.add_node("rank_places", rank_places)

    workflow.set_entry_point("geocode_addresses")
    workflow.add_conditional_edges(
        "geocode_addresses",
        _route_after_geocoding,
        {"failed": END, "continue": "compute_center"},
    )
    workflow.add_edge("compute_center", "search_places")
    workflow.add_edge("search_places", "merge_candidates")
    workflow.add_edge("merge_candidates", "analyze_accessibility")
    workflow.add_edge("analyze_accessibility", "rank_places")
    workflow.add_edge("rank_places", END)

    return workflow


compiled_graph = _create_workflow().compile()
