"""타임아웃 정책 유틸 테스트."""

from meetpoint.core.config import Settings
from meetpoint.core.timeout_policy import build_timeout_policy, to_requests_timeout


def test_build_timeout_policy_caps_by_request_timeout() -> None:
    settings = Settings(
        REQUEST_TIMEOUT_SECONDS=20,
        LLM_TIMEOUT_SECONDS=60,
        EXTERNAL_API_TIMEOUT_SECONDS=50,
        GEOCODING_TIMEOUT_SECONDS=30,
        PLACE_SEARCH_TIMEOUT_SECONDS=25,
        TRANSIT_TIMEOUT_SECONDS=5,
    )

    policy = build_timeout_policy(settings)

    assert policy.request_timeout_seconds == 20
    assert policy.llm_timeout_seconds == 20
    assert policy.external_api_timeout_seconds == 20
    assert policy.geocoding_timeout_seconds == 20
    assert policy.place_search_timeout_seconds == 20
    assert policy.transit_timeout_seconds == 5


def test_provider_timeouts_are_capped_by_external_timeout() -> None:
    policy = build_timeout_policy(Settings(EXTERNAL_API_TIMEOUT_SECONDS=8, PLACE_SEARCH_TIMEOUT_SECONDS=15))

    assert policy.place_search_timeout_seconds == 8
    assert policy.geocoding_timeout_seconds == 8


def test_to_requests_timeout_returns_connect_and_read_timeout() -> None:
    connect_timeout, read_timeout = to_requests_timeout(10)

    assert connect_timeout == 3.0
    assert read_timeout == 7.0
