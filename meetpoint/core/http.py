"""외부 API 호출용 HTTP 헬퍼."""

from __future__ import annotations

import asyncio
from typing import Any

import requests

from meetpoint.core.errors import ProviderUnavailableError
from meetpoint.core.logger import get_logger
from meetpoint.core.timeout_policy import to_requests_timeout

logger = get_logger(__name__)


async def request_json(
    method: str,
    url: str,
    *,
    provider: str,
    timeout_seconds: int,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    payload: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """요청을 스레드에서 실행하고 JSON 객체를 반환합니다.

    Raises:
        ProviderUnavailableError: 네트워크 오류, HTTP 오류 상태, 파싱 실패, 타임아웃.
    """
    request_timeout = to_requests_timeout(timeout_seconds)

    def _send() -> requests.Response:
        with requests.Session() as session:
            return session.request(
                method=method,
                url=url,
                params=params,
                headers=headers,
                json=payload,
                timeout=request_timeout,
            )

    try:
        response = await asyncio.wait_for(asyncio.to_thread(_send), timeout=timeout_seconds)
        response.raise_for_status()
        data = response.json()
    except asyncio.TimeoutError as exc:
        logger.warning("%s API timed out: timeout=%s", provider, timeout_seconds)
        raise ProviderUnavailableError(provider, "timeout") from exc
    except requests.HTTPError as exc:
        response = exc.response
        status_code = response.status_code if response is not None else None
        body = (response.text or "")[:200] if response is not None else ""
        logger.error("%s API error: status=%s body=%s", provider, status_code, body)
        raise ProviderUnavailableError(provider, f"http status {status_code}") from exc
    except requests.RequestException as exc:
        logger.error("%s API request failed: %s", provider, exc)
        raise ProviderUnavailableError(provider, "request failed") from exc
    except ValueError as exc:
        logger.error("%s API response parse failed: %s", provider, exc)
        raise ProviderUnavailableError(provider, "invalid response body") from exc

    if not isinstance(data, dict):
        logger.error("%s API returned unexpected payload type: %s", provider, type(data).__name__)
        raise ProviderUnavailableError(provider, "unexpected payload")
    return data
