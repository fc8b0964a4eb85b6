from collections.abc import Sequence
from typing import Any

from loguru import logger
from sqlalchemy import insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.db.models import Game
from src.errors import GameNotFoundError, PersistenceError
from src.pipeline.interfaces import GameRepository
from src.pipeline.models import GameEntity

# API/파이프라인에서 수정 가능한 컬럼
EDITABLE_FIELDS = (
    "publisher_id",
    "name",
    "platform",
    "store_id",
    "bundle_id",
    "app_version",
    "is_published",
)


class SqlGameRepository(GameRepository):
    """
    SQLAlchemy 기반 GameRepository 구현체.

    메서드 호출마다 세션을 새로 열고 트랜잭션 단위로 커밋합니다.
    SQLAlchemy 오류는 PersistenceError로 변환되어 전파됩니다.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """
        Args:
            session_factory: 비동기 세션 팩토리 (expire_on_commit=False 권장)
        """
        self._session_factory = session_factory

    # === Population run ===

    async def find_existing_bundle_ids(self, bundle_ids: set[str]) -> set[str]:
        if not bundle_ids:
            return set()

        try:
            async with self._session_factory() as session:
                result = await session.scalars(
                    select(Game.bundle_id).where(Game.bundle_id.in_(bundle_ids))
                )
                existing = {bundle_id for bundle_id in result if bundle_id}
        except SQLAlchemyError as e:
            logger.error(f"기존 bundle id 조회 중 오류 발생: {e}")
            raise PersistenceError("failed to query existing bundle ids") from e

        logger.debug(f"기존 bundle id 조회 완료: {len(existing)}/{len(bundle_ids)}개 존재")
        return existing

    async def bulk_insert(self, entities: Sequence[GameEntity]) -> int:
        if not entities:
            return 0

        rows = [entity.model_dump(mode="json") for entity in entities]
        try:
            async with self._session_factory.begin() as session:
                await session.execute(insert(Game), rows)
        except SQLAlchemyError as e:
            logger.error(f"게임 일괄 적재 중 오류 발생 ({len(rows)}개): {e}")
            raise PersistenceError("failed to bulk insert games") from e

        logger.info(f"게임 일괄 적재 완료: {len(rows)}개")
        return len(rows)

    # === CRUD ===

    async def list_games(self) -> list[Game]:
        """저장된 모든 게임을 ID 순으로 반환합니다."""
        try:
            async with self._session_factory() as session:
                result = await session.scalars(select(Game).order_by(Game.id))
                return list(result)
        except SQLAlchemyError as e:
            logger.error(f"게임 목록 조회 중 오류 발생: {e}")
            raise PersistenceError("failed to query games") from e

    async def get_game(self, game_id: int) -> Game:
        """
        ID로 게임을 조회합니다.

        Raises:
            GameNotFoundError: 게임이 없는 경우
        """
        try:
            async with self._session_factory() as session:
                game = await session.get(Game, game_id)
        except SQLAlchemyError as e:
            logger.error(f"게임 조회 중 오류 발생 (id={game_id}): {e}")
            raise PersistenceError(f"failed to query game {game_id}") from e

        if game is None:
            raise GameNotFoundError(game_id)
        return game

    async def create_game(self, fields: dict[str, Any]) -> Game:
        """
        게임을 생성합니다.

        Args:
            fields: 컬럼 값 (EDITABLE_FIELDS 외의 키는 무시)

        Returns:
            Game: 생성된 게임 (id 포함)
        """
        game = Game(**self._editable(fields))
        try:
            async with self._session_factory.begin() as session:
                session.add(game)
                await session.flush()
                await session.refresh(game)
        except SQLAlchemyError as e:
            logger.error(f"게임 생성 중 오류 발생: {e}")
            raise PersistenceError("failed to create game") from e

        logger.info(f"게임 생성 완료: {game!r}")
        return game

    async def update_game(self, game_id: int, fields: dict[str, Any]) -> Game:
        """
        전달된 필드만 갱신합니다.

        Raises:
            GameNotFoundError: 게임이 없는 경우
        """
        try:
            async with self._session_factory.begin() as session:
                game = await session.get(Game, game_id)
                if game is None:
                    raise GameNotFoundError(game_id)

                for key, value in self._editable(fields).items():
                    setattr(game, key, value)
                await session.flush()
                await session.refresh(game)
        except SQLAlchemyError as e:
            logger.error(f"게임 수정 중 오류 발생 (id={game_id}): {e}")
            raise PersistenceError(f"failed to update game {game_id}") from e

        logger.info(f"게임 수정 완료: {game!r}")
        return game

    async def delete_game(self, game_id: int) -> None:
        """
        게임을 삭제합니다 (hard delete).

        Raises:
            GameNotFoundError: 게임이 없는 경우
        """
        try:
            async with self._session_factory.begin() as session:
                game = await session.get(Game, game_id)
                if game is None:
                    raise GameNotFoundError(game_id)
                await session.delete(game)
        except SQLAlchemyError as e:
            logger.error(f"게임 삭제 중 오류 발생 (id={game_id}): {e}")
            raise PersistenceError(f"failed to delete game {game_id}") from e

        logger.info(f"게임 삭제 완료: id={game_id}")

    async def search_games(
        self, name: str | None = None, platform: str | None = None
    ) -> list[Game]:
        """
        플랫폼 일치, 이름 부분 일치(대소문자 무시)로 게임을 검색합니다.

        Args:
            name: 이름 검색어 (정규화된 값)
            platform: 플랫폼 (정규화된 값)

        Returns:
            list[Game]: 조건에 맞는 게임 목록 (조건이 없으면 전체)
        """
        stmt = select(Game).order_by(Game.id)
        if platform:
            stmt = stmt.where(Game.platform == platform)
        if name:
            stmt = stmt.where(Game.name.ilike(f"%{name}%"))

        try:
            async with self._session_factory() as session:
                result = await session.scalars(stmt)
                return list(result)
        except SQLAlchemyError as e:
            logger.error(
                f"게임 검색 중 오류 발생 (name={name!r}, platform={platform!r}): {e}"
            )
            raise PersistenceError("failed to search games") from e

    @staticmethod
    def _editable(fields: dict[str, Any]) -> dict[str, Any]:
        return {key: value for key, value in fields.items() if key in EDITABLE_FIELDS}
