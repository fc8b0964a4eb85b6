import asyncio
from dataclasses import dataclass
from time import perf_counter

from loguru import logger

from src.config import FeedSources
from src.errors import PersistenceError, PopulationError
from src.pipeline.constants import NO_NEW_GAMES_MESSAGE
from src.pipeline.dedup import collect_bundle_ids, filter_new_games
from src.pipeline.interfaces import FeedFetcher, GameRepository
from src.pipeline.models import RawGameRecord


@dataclass
class PopulationResult:
    """
    Population run 실행 결과를 나타내는 데이터 클래스입니다.

    신규 게임이 없으면 added=0이고 message가 설정됩니다.
    """

    added: int
    ios_count: int
    android_count: int
    elapsed_seconds: float
    message: str | None = None


class PopulationOrchestrator:
    """
    iOS/Android 랭킹 피드를 가져와 신규 게임만 DB에 적재하는 오케스트레이터입니다.

    실행 흐름:
        1. 두 피드를 병렬로 요청 (하나라도 실패하면 전체 실패)
        2. iOS → Android 순으로 병합
        3. 병합된 bundle id 중 이미 저장된 것 조회
        4. 신규 게임 선별
        5. 신규 게임 일괄 적재

    같은 프로세스 안의 동시 실행은 Lock으로 직렬화됩니다.
    """

    def __init__(
        self,
        fetcher: FeedFetcher,
        repository: GameRepository,
        sources: FeedSources,
    ) -> None:
        self._fetcher = fetcher
        self._repository = repository
        self._sources = sources
        self._lock = asyncio.Lock()

    async def populate(self) -> PopulationResult:
        """
        Population run을 한 번 실행합니다.

        Returns:
            PopulationResult: 적재된 게임 수 또는 신규 게임 없음 메시지

        Raises:
            PopulationError: 피드 요청, 존재 여부 조회, 적재 중 하나라도 실패한 경우
        """
        if self._lock.locked():
            logger.info("진행 중인 population run이 있어 완료될 때까지 대기합니다.")

        async with self._lock:
            return await self._run()

    async def _run(self) -> PopulationResult:
        logger.info("Population run 시작")
        start_time = perf_counter()

        ios_records, android_records = await self._fetch_feeds()
        records = ios_records + android_records

        try:
            existing = await self._repository.find_existing_bundle_ids(
                collect_bundle_ids(records)
            )
        except PersistenceError as e:
            logger.error(f"기존 게임 조회 실패로 population run 중단: {e}")
            raise PopulationError("existing game lookup failed") from e

        new_games = filter_new_games(records, existing)
        elapsed = perf_counter() - start_time

        if not new_games:
            logger.info(
                f"신규 게임 없음 - 피드 레코드 {len(records)}개, "
                f"기존 게임 {len(existing)}개"
            )
            return PopulationResult(
                added=0,
                ios_count=len(ios_records),
                android_count=len(android_records),
                elapsed_seconds=elapsed,
                message=NO_NEW_GAMES_MESSAGE,
            )

        try:
            added = await self._repository.bulk_insert(new_games)
        except PersistenceError as e:
            logger.error(f"신규 게임 적재 실패로 population run 중단: {e}")
            raise PopulationError("bulk insert failed") from e

        elapsed = perf_counter() - start_time
        logger.success(
            f"Population run 완료 - iOS: {len(ios_records)}개, "
            f"Android: {len(android_records)}개, 신규 적재: {added}개, "
            f"소요 시간: {elapsed:.2f}초"
        )

        return PopulationResult(
            added=added,
            ios_count=len(ios_records),
            android_count=len(android_records),
            elapsed_seconds=elapsed,
        )

    async def _fetch_feeds(self) -> tuple[list[RawGameRecord], list[RawGameRecord]]:
        """
        iOS/Android 피드를 병렬로 요청합니다.

        한쪽이 실패하면 TaskGroup이 나머지 요청을 취소하고, 성공한 쪽의 결과도 버립니다.

        Returns:
            tuple[list[RawGameRecord], list[RawGameRecord]]: (iOS 레코드, Android 레코드)
        """
        try:
            async with asyncio.TaskGroup() as tg:
                ios_task = tg.create_task(
                    self._fetcher.fetch(self._sources.ios_feed_url)
                )
                android_task = tg.create_task(
                    self._fetcher.fetch(self._sources.android_feed_url)
                )
        except ExceptionGroup as eg:
            for exc in eg.exceptions:
                logger.error(f"피드 요청 실패로 population run 중단: {exc}")
            raise PopulationError("feed fetch failed") from eg.exceptions[0]

        return ios_task.result(), android_task.result()
