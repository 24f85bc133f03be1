"""uvicorn 로그 포맷을 그대로 쓰는 애플리케이션 로깅 설정."""

from __future__ import annotations

import copy
import logging.config
from typing import Any

from uvicorn.config import LOGGING_CONFIG as UVICORN_LOGGING_CONFIG

from meetpoint.core.config import get_settings

_APP_LOGGER_NAME = "meetpoint"
_UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")
# requests 내부 연결 로그는 요청마다 찍혀서 WARNING 이상만 남긴다.
_NOISY_LOGGERS = ("urllib3", "httpx", "openai")


def build_logging_config(level: str | None = None) -> dict[str, Any]:
    """uvicorn 설정을 복사해 root, uvicorn, meetpoint 로거 레벨을 맞춥니다.

    Args:
        level: 명시 레벨. 없으면 Settings.LOG_LEVEL을 사용합니다.
    """
    log_level = (level or get_settings().LOG_LEVEL or "INFO").upper()
    config = copy.deepcopy(UVICORN_LOGGING_CONFIG)

    config["root"] = {"handlers": ["default"], "level": log_level}
    for name in _UVICORN_LOGGERS:
        config["loggers"][name]["level"] = log_level
    config["loggers"][_APP_LOGGER_NAME] = {"level": log_level}
    for name in _NOISY_LOGGERS:
        config["loggers"][name] = {"level": "WARNING"}

    return config


def configure_logging(level: str | None = None) -> None:
    logging.config.dictConfig(build_logging_config(level))
