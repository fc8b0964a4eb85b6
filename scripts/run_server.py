import uvicorn

from src.api.app import build_app
from src.config import settings
from src.log import setup_logging


def main() -> None:
    """API 서버 실행 진입점입니다."""
    setup_logging("server")
    uvicorn.run(
        build_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
