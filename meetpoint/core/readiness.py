"""애플리케이션 준비성(readiness) 체크 유틸."""

from __future__ import annotations

import asyncio
import socket
from collections.abc import Awaitable

from meetpoint.core.config import Settings, get_settings
from meetpoint.core.timeout_policy import TimeoutPolicy, get_timeout_policy

ReadinessCheck = dict[str, str | bool]

_GEOCODING_CHECKS = ("kakao", "naver_geocoding")


def _ok(detail: str) -> ReadinessCheck:
    return {"status": "ok", "ok": True, "detail": detail}


def _fail(detail: str) -> ReadinessCheck:
    return {"status": "fail", "ok": False, "detail": detail}


def _skip(detail: str) -> ReadinessCheck:
    return {"status": "skip", "ok": True, "detail": detail}


async def _check_tcp_connectivity(host: str, port: int, timeout_seconds: int, label: str) -> ReadinessCheck:
    def _connect() -> None:
        with socket.create_connection((host, port), timeout=timeout_seconds):
            return None

    try:
        await asyncio.to_thread(_connect)
        return _ok(f"{label} 연결 가능 ({host}:{port})")
    except Exception as exc:
        return _fail(f"{label} 연결 실패 ({host}:{port}): {exc}")


async def _check_provider(
    *,
    configured: bool,
    key_name: str,
    host: str,
    label: str,
    timeout_policy: TimeoutPolicy,
) -> ReadinessCheck:
    if not configured:
        return _skip(f"{key_name} 미설정으로 {label} 체크를 건너뜁니다.")
    return await _check_tcp_connectivity(
        host=host,
        port=443,
        timeout_seconds=timeout_policy.external_api_timeout_seconds,
        label=label,
    )


def _build_checks(settings: Settings, timeout_policy: TimeoutPolicy) -> dict[str, Awaitable[ReadinessCheck]]:
    return {
        "kakao": _check_provider(
            configured=bool(settings.KAKAO_REST_API_KEY),
            key_name="KAKAO_REST_API_KEY",
            host="dapi.kakao.com",
            label="Kakao Local API",
            timeout_policy=timeout_policy,
        ),
        "naver_geocoding": _check_provider(
            configured=settings.naver_geocoding_configured,
            key_name="NAVER_CLIENT_ID/NAVER_CLIENT_SECRET",
            host="naveropenapi.apigw.ntruss.com",
            label="Naver Maps API",
            timeout_policy=timeout_policy,
        ),
        "naver_search": _check_provider(
            configured=settings.naver_search_configured,
            key_name="NAVER_SEARCH_CLIENT_ID/NAVER_SEARCH_CLIENT_SECRET",
            host="openapi.naver.com",
            label="Naver Search API",
            timeout_policy=timeout_policy,
        ),
        "google_maps": _check_provider(
            configured=bool(settings.GOOGLE_MAPS_API_KEY),
            key_name="GOOGLE_MAPS_API_KEY",
            host="maps.googleapis.com",
            label="Google Maps API",
            timeout_policy=timeout_policy,
        ),
        "openai": _check_provider(
            configured=bool(settings.OPENAI_API_KEY),
            key_name="OPENAI_API_KEY",
            host="api.openai.com",
            label="OpenAI API",
            timeout_policy=timeout_policy,
        ),
    }


async def collect_readiness_status() -> dict[str, object]:
    """외부 API 의존성 준비 상태를 점검합니다.

    지오코딩 공급자 중 하나 이상이 설정되어 있고 연결 가능해야 ready입니다.
    """
    settings = get_settings()
    timeout_policy = get_timeout_policy(settings)

    pending = _build_checks(settings, timeout_policy)
    results = await asyncio.gather(*pending.values())
    checks: dict[str, ReadinessCheck] = dict(zip(pending.keys(), results))

    geocoder_ready = any(checks[name]["status"] == "ok" for name in _GEOCODING_CHECKS)
    return {
        "status": "ready" if geocoder_ready else "not_ready",
        "checks": checks,
    }
