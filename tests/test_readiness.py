"""Readiness 체크 유틸 테스트."""

from __future__ import annotations

import asyncio

from meetpoint.core.config import get_settings
from meetpoint.core.readiness import collect_readiness_status

_PROVIDER_KEYS = (
    "KAKAO_REST_API_KEY",
    "NAVER_CLIENT_ID",
    "NAVER_CLIENT_SECRET",
    "NAVER_SEARCH_CLIENT_ID",
    "NAVER_SEARCH_CLIENT_SECRET",
    "GOOGLE_MAPS_API_KEY",
    "OPENAI_API_KEY",
)


def _set_required_env(monkeypatch, **overrides: str) -> None:
    for key in _PROVIDER_KEYS:
        monkeypatch.setenv(key, "")
    for key, value in overrides.items():
        monkeypatch.setenv(key, value)
    get_settings.cache_clear()


async def _fake_tcp(*args, **kwargs):
    return {"status": "ok", "ok": True, "detail": "mock-ok"}


def test_collect_readiness_status_not_ready_without_geocoder(monkeypatch) -> None:
    _set_required_env(monkeypatch, GOOGLE_MAPS_API_KEY="google-key")
    monkeypatch.setattr("meetpoint.core.readiness._check_tcp_connectivity", _fake_tcp)

    result = asyncio.run(collect_readiness_status())

    assert result["status"] == "not_ready"
    assert result["checks"]["kakao"]["status"] == "skip"
    assert result["checks"]["google_maps"]["status"] == "ok"


def test_collect_readiness_status_ready_with_kakao(monkeypatch) -> None:
    _set_required_env(monkeypatch, KAKAO_REST_API_KEY="kakao-key")
    monkeypatch.setattr("meetpoint.core.readiness._check_tcp_connectivity", _fake_tcp)

    result = asyncio.run(collect_readiness_status())

    assert result["status"] == "ready"
    assert result["checks"]["kakao"]["status"] == "ok"
    assert result["checks"]["openai"]["status"] == "skip"


def test_collect_readiness_status_not_ready_when_geocoder_unreachable(monkeypatch) -> None:
    _set_required_env(monkeypatch, NAVER_CLIENT_ID="id", NAVER_CLIENT_SECRET="secret")

    async def _unreachable(*args, **kwargs):
        return {"status": "fail", "ok": False, "detail": "mock-fail"}

    monkeypatch.setattr("meetpoint.core.readiness._check_tcp_connectivity", _unreachable)

    result = asyncio.run(collect_readiness_status())

    assert result["status"] == "not_ready"
    assert result["checks"]["naver_geocoding"]["status"] == "fail"
