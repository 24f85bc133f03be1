"""약속 장소 그래프 노드 공용 헬퍼."""

from langchain_core.runnables import RunnableConfig

from meetpoint.services.provider_registry import MeetupDependencies

_AREA_HINT_TOKENS = 3


def get_dependencies(config: RunnableConfig) -> MeetupDependencies:
    """그래프 config에서 공급자 컨테이너를 꺼냅니다."""
    return config["configurable"]["dependencies"]


def area_hint_from_address(address: str, label: str) -> str | None:
    """역지오코딩 주소의 앞부분(시/구/동)을 지역 이름으로 씁니다. 좌표 표기면 None."""
    if not address or address == label:
        return None
    tokens = address.split()
    return " ".join(tokens[:_AREA_HINT_TOKENS]) or None
