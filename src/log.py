import sys

from loguru import logger

from src.config import settings


def setup_logging(log_name: str = "server") -> None:
    """
    로깅 설정을 초기화합니다.

    Args:
        log_name: 로그 파일 이름 접두사 (예: "server", "populate")
    """
    logger.remove()
    log_level = settings.log_level.upper()
    logger.add(sys.stderr, level=log_level)

    logger.add(
        f"logs/{log_name}_{{time:YYYY-MM-DD-HH-mm-ss}}.log",
        rotation="10 MB",
        compression="zip",
        level=log_level,
    )
