"""동시 실행 작업의 결과를 정상/강등 값으로 정리하는 유틸."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Generic, TypeVar

from meetpoint.core.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Outcome(Generic[T]):
    """작업 결과. `degraded`이면 `value`는 대체값이고 `error`에 원인이 남습니다."""

    value: T
    degraded: bool = False
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return not self.degraded


async def settle(
    awaitable: Awaitable[T],
    *,
    fallback: T,
    timeout_seconds: float | None,
    label: str,
) -> Outcome[T]:
    """awaitable을 타임아웃과 함께 실행하고 실패를 대체값으로 바꿉니다.

    취소(CancelledError)는 잡지 않고 그대로 전파합니다.
    """
    try:
        if timeout_seconds is None:
            value = await awaitable
        else:
            value = await asyncio.wait_for(awaitable, timeout=timeout_seconds)
        return Outcome(value=value)
    except asyncio.TimeoutError as exc:
        logger.warning("Task timed out: label=%s timeout=%s", label, timeout_seconds)
        return Outcome(value=fallback, degraded=True, error=exc)
    except Exception as exc:
        logger.warning("Task failed: label=%s error=%s", label, exc)
        return Outcome(value=fallback, degraded=True, error=exc)
