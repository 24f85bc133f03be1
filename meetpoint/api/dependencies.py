"""API 의존성 모음."""

from functools import lru_cache

from meetpoint.core.config import get_settings
from meetpoint.services.provider_registry import MeetupDependencies, build_meetup_dependencies


@lru_cache(maxsize=1)
def get_meetup_dependencies() -> MeetupDependencies:
    """설정 재사용을 위한 프로세스 단위 공급자 컨테이너를 반환합니다."""
    return build_meetup_dependencies(get_settings())
