"""애플리케이션 전역 설정을 관리하는 모듈."""

from functools import lru_cache

from pydantic import ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """환경 변수 기반 설정 모델.

    외부 API 자격 증명은 모두 선택값이며, 누락된 공급자는 비활성화된 채로 동작합니다.
    """

    KAKAO_REST_API_KEY: str | None = None
    NAVER_CLIENT_ID: str | None = None
    NAVER_CLIENT_SECRET: str | None = None
    NAVER_SEARCH_CLIENT_ID: str | None = None
    NAVER_SEARCH_CLIENT_SECRET: str | None = None
    GOOGLE_MAPS_API_KEY: str | None = None
    GOOGLE_MAPS_LANGUAGE_CODE: str = "ko"

    OPENAI_API_KEY: str | None = None
    LLM_MODEL_NAME: str = "gpt-4o-mini"
    ENABLE_STAGE_LLM_ROUTING: bool = False
    LLM_MODEL_QUALITY: str = ""
    RECOMMEND_LLM_TEMPERATURE: float = 0.7

    REQUEST_TIMEOUT_SECONDS: int = 60
    LLM_TIMEOUT_SECONDS: int = 30
    EXTERNAL_API_TIMEOUT_SECONDS: int = 15
    GEOCODING_TIMEOUT_SECONDS: int = 10
    PLACE_SEARCH_TIMEOUT_SECONDS: int = 15
    TRANSIT_TIMEOUT_SECONDS: int = 10

    PLACE_SEARCH_LIMIT: int = 15
    TRANSIT_FALLBACK_SPEED_MPS: float = 5.0
    TRANSIT_FALLBACK_DETOUR_FACTOR: float = 1.3
    TRANSIT_MAX_CONCURRENCY: int = 4

    LOG_LEVEL: str = "INFO"
    APP_ENV: str = "development"
    DOCS_MODE: str = "public"
    EXPOSE_INTERNAL_ERRORS: bool = False
    CORS_ALLOW_ORIGINS: str = ""
    CORS_ALLOW_METHODS: str = "GET,POST,OPTIONS"
    CORS_ALLOW_HEADERS: str = "Content-Type"
    CORS_ALLOW_CREDENTIALS: bool = False
    SECURITY_HEADERS_ENABLED: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("RECOMMEND_LLM_TEMPERATURE", mode="before")
    @classmethod
    def _clamp_recommend_llm_temperature(cls, value: object) -> float:
        try:
            numeric = float(value) if value is not None else 0.7
        except (TypeError, ValueError):
            numeric = 0.7
        return min(2.0, max(0.0, numeric))

    @field_validator("PLACE_SEARCH_LIMIT", mode="before")
    @classmethod
    def _clamp_place_search_limit(cls, value: object) -> int:
        try:
            numeric = int(value) if value is not None else 15
        except (TypeError, ValueError):
            numeric = 15
        return min(50, max(1, numeric))

    @field_validator("TRANSIT_MAX_CONCURRENCY", mode="before")
    @classmethod
    def _clamp_transit_max_concurrency(cls, value: object) -> int:
        try:
            numeric = int(value) if value is not None else 4
        except (TypeError, ValueError):
            numeric = 4
        return min(16, max(1, numeric))

    @field_validator("TRANSIT_FALLBACK_SPEED_MPS", "TRANSIT_FALLBACK_DETOUR_FACTOR", mode="before")
    @classmethod
    def _require_positive_transit_constant(cls, value: object, info: ValidationInfo) -> float:
        defaults = {"TRANSIT_FALLBACK_SPEED_MPS": 5.0, "TRANSIT_FALLBACK_DETOUR_FACTOR": 1.3}
        default = defaults[info.field_name]
        try:
            numeric = float(value) if value is not None else default
        except (TypeError, ValueError):
            numeric = default
        return numeric if numeric > 0 else default

    @property
    def naver_geocoding_configured(self) -> bool:
        return bool(self.NAVER_CLIENT_ID and self.NAVER_CLIENT_SECRET)

    @property
    def naver_search_configured(self) -> bool:
        return bool(self.NAVER_SEARCH_CLIENT_ID and self.NAVER_SEARCH_CLIENT_SECRET)


@lru_cache
def get_settings() -> Settings:
    """Settings 인스턴스를 반환한다. 최초 호출 시에만 생성되고 이후 캐싱된다."""
    return Settings()
