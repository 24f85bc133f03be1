"""표준화된 로거 모듈.

모든 서비스 모듈은 `get_logger(__name__)`로 로거를 얻어 같은 포맷으로 출력합니다.
"""

import logging
import os
import sys

_LOG_FORMAT = "[%(asctime)s] %(levelname)s [%(name)s] %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _default_level() -> int:
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    return logging.getLevelNamesMapping().get(level_name, logging.INFO)


def get_logger(name: str) -> logging.Logger:
    """모듈 단위 로거를 반환합니다.

    Args:
        name: 로거 이름 (일반적으로 __name__ 사용).

    Returns:
        stdout 핸들러가 연결된 로거 인스턴스.
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        level = _default_level()
        logger.setLevel(level)

        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    return logger
