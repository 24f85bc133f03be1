"""약속 장소 그래프 노드 모음."""

from meetpoint.graph.meetup.nodes.accessibility import analyze_accessibility
from meetpoint.graph.meetup.nodes.centroid import compute_center
from meetpoint.graph.meetup.nodes.geocode import geocode_addresses
from meetpoint.graph.meetup.nodes.merge import merge_candidates
from meetpoint.graph.meetup.nodes.rank import rank_places
from meetpoint.graph.meetup.nodes.search import search_places

__all__ = [
    "geocode_addresses",
    "compute_center",
    "search_places",
    "merge_candidates",
    "analyze_accessibility",
    "rank_places",
]
