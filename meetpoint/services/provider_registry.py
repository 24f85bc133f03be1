"""설정으로부터 공급자 구현을 조립하는 의존성 컨테이너."""

from __future__ import annotations

from dataclasses import dataclass, field

from meetpoint.core.config import Settings, get_settings
from meetpoint.core.llm_router import Stage, attempt_count
from meetpoint.core.logger import get_logger
from meetpoint.core.timeout_policy import get_timeout_policy
from meetpoint.services.accessibility_service import AccessibilityAnalyzer
from meetpoint.services.geocoding_service import GeocodingChain, GeocodingServiceProtocol
from meetpoint.services.google_maps_service import GooglePlacesService, GoogleTransitMatrixService
from meetpoint.services.kakao_local_service import KakaoGeocodingService, KakaoPlacesService
from meetpoint.services.naver_service import NaverGeocodingService, NaverPlacesService
from meetpoint.services.places_service import PlacesServiceProtocol
from meetpoint.services.recommendation_service import LangChainScoringOracle, RecommendationEngine, ScoringOracle
from meetpoint.services.transit_service import TransitMatrixProtocol

logger = get_logger(__name__)


@dataclass(slots=True)
class MeetupDependencies:
    """파이프라인이 사용하는 공급자 묶음. 요청마다 그래프 config로 전달됩니다."""

    geocoder: GeocodingChain
    analyzer: AccessibilityAnalyzer
    engine: RecommendationEngine
    place_services: list[PlacesServiceProtocol] = field(default_factory=list)
    search_timeout_seconds: int = 15
    search_limit: int = 15


def build_meetup_dependencies(settings: Settings | None = None) -> MeetupDependencies:
    """설정된 자격 증명만으로 공급자를 구성합니다. 누락된 공급자는 경고 후 제외합니다.

    지오코딩 순서는 Kakao → Naver, 장소 검색 우선순위는 Kakao → Naver → Google입니다.
    """
    resolved_settings = settings or get_settings()
    timeout_policy = get_timeout_policy(resolved_settings)

    geocoders: list[GeocodingServiceProtocol] = []
    place_services: list[PlacesServiceProtocol] = []

    if resolved_settings.KAKAO_REST_API_KEY:
        geocoders.append(
            KakaoGeocodingService(resolved_settings.KAKAO_REST_API_KEY, timeout_policy.geocoding_timeout_seconds)
        )
        place_services.append(
            KakaoPlacesService(resolved_settings.KAKAO_REST_API_KEY, timeout_policy.place_search_timeout_seconds)
        )
    else:
        logger.warning("KAKAO_REST_API_KEY is not configured. Kakao geocoding/search disabled.")

    if resolved_settings.naver_geocoding_configured:
        geocoders.append(
            NaverGeocodingService(
                resolved_settings.NAVER_CLIENT_ID or "",
                resolved_settings.NAVER_CLIENT_SECRET or "",
                timeout_policy.geocoding_timeout_seconds,
            )
        )
    else:
        logger.warning("NAVER_CLIENT_ID/NAVER_CLIENT_SECRET is not configured. Naver geocoding disabled.")

    if resolved_settings.naver_search_configured:
        place_services.append(
            NaverPlacesService(
                resolved_settings.NAVER_SEARCH_CLIENT_ID or "",
                resolved_settings.NAVER_SEARCH_CLIENT_SECRET or "",
                timeout_policy.place_search_timeout_seconds,
            )
        )
    else:
        logger.warning("NAVER_SEARCH_CLIENT_ID/NAVER_SEARCH_CLIENT_SECRET is not configured. Naver search disabled.")

    transit: TransitMatrixProtocol | None = None
    if resolved_settings.GOOGLE_MAPS_API_KEY:
        place_services.append(
            GooglePlacesService(
                resolved_settings.GOOGLE_MAPS_API_KEY,
                timeout_policy.place_search_timeout_seconds,
                resolved_settings.GOOGLE_MAPS_LANGUAGE_CODE,
            )
        )
        transit = GoogleTransitMatrixService(
            resolved_settings.GOOGLE_MAPS_API_KEY,
            timeout_policy.transit_timeout_seconds,
            resolved_settings.GOOGLE_MAPS_LANGUAGE_CODE,
        )
    else:
        logger.warning("GOOGLE_MAPS_API_KEY is not configured. Google search disabled, transit times estimated.")

    oracle: ScoringOracle | None = None
    # 기본 모델 재시도까지 끝날 수 있도록 시도 횟수만큼 순위 결정 시간을 준다.
    ranking_timeout = timeout_policy.llm_timeout_seconds * attempt_count(Stage.PLACE_RANKING, resolved_settings)
    if resolved_settings.OPENAI_API_KEY:
        oracle = LangChainScoringOracle(resolved_settings, timeout_policy.llm_timeout_seconds)
    else:
        logger.warning("OPENAI_API_KEY is not configured. Recommendations ranked by accessibility.")

    return MeetupDependencies(
        geocoder=GeocodingChain(geocoders),
        analyzer=AccessibilityAnalyzer(
            transit,
            timeout_seconds=timeout_policy.transit_timeout_seconds,
            fallback_speed_mps=resolved_settings.TRANSIT_FALLBACK_SPEED_MPS,
            detour_factor=resolved_settings.TRANSIT_FALLBACK_DETOUR_FACTOR,
            max_concurrency=resolved_settings.TRANSIT_MAX_CONCURRENCY,
        ),
        engine=RecommendationEngine(oracle, timeout_seconds=ranking_timeout),
        place_services=place_services,
        search_timeout_seconds=timeout_policy.place_search_timeout_seconds,
        search_limit=resolved_settings.PLACE_SEARCH_LIMIT,
    )
