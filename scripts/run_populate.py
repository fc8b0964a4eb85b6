import argparse
import asyncio
import sys

from loguru import logger

from src.config import FeedSources, settings
from src.db.repository import SqlGameRepository
from src.db.session import create_session_factory, init_models
from src.errors import ConfigurationError, PopulationError
from src.log import setup_logging
from src.pipeline.fetchers import HttpFeedFetcher, create_http_client
from src.pipeline.orchestrator import PopulationOrchestrator


async def main(database_url: str | None = None) -> int:
    """
    Population run을 한 번 실행하는 진입점입니다.

    Returns:
        int: 프로세스 종료 코드 (성공 0, 실패 1)
    """
    setup_logging("populate")

    logger.info("=== 랭킹 게임 적재 시작 ===")

    try:
        sources = FeedSources.from_settings(settings)
    except ConfigurationError as e:
        logger.error(f"필수 환경 변수가 설정되지 않았습니다. .env 파일을 확인하세요: {e}")
        return 1

    engine, session_factory = create_session_factory(
        database_url or settings.database_url, echo=settings.debug
    )

    try:
        await init_models(engine)

        async with create_http_client(settings) as http_client:
            orchestrator = PopulationOrchestrator(
                fetcher=HttpFeedFetcher(client=http_client),
                repository=SqlGameRepository(session_factory),
                sources=sources,
            )

            try:
                result = await orchestrator.populate()
            except PopulationError as e:
                logger.error(f"=== 랭킹 게임 적재 실패: {e} (원인: {e.__cause__}) ===")
                return 1
    finally:
        await engine.dispose()

    if result.message:
        logger.success(f"=== 랭킹 게임 적재 완료: {result.message} ===")
    else:
        logger.success(f"=== 랭킹 게임 적재 완료: 신규 {result.added}개 ===")
    logger.success(f"총 소요 시간: {result.elapsed_seconds:.2f}초")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="iOS/Android 랭킹 게임 적재 실행")
    parser.add_argument(
        "--database-url",
        type=str,
        help="적재 대상 DB URL (예: sqlite+aiosqlite:///./games.db). 지정하지 않으면 DATABASE_URL 설정이 사용됩니다.",
    )
    args = parser.parse_args()
    sys.exit(asyncio.run(main(database_url=args.database_url)))
