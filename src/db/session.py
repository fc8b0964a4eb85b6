from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from src.db.models import Base


def create_session_factory(
    database_url: str, echo: bool = False
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """
    비동기 엔진과 세션 팩토리를 생성합니다.

    Args:
        database_url: SQLAlchemy async URL (예: "sqlite+aiosqlite:///./games.db")
        echo: SQL 로그 출력 여부

    Returns:
        tuple[AsyncEngine, async_sessionmaker[AsyncSession]]: 엔진과 세션 팩토리
    """
    engine_kwargs: dict[str, Any] = {}
    # 인메모리 SQLite는 연결마다 DB가 달라지므로 단일 연결을 공유
    if database_url.startswith("sqlite") and ":memory:" in database_url:
        engine_kwargs["poolclass"] = StaticPool
        engine_kwargs["connect_args"] = {"check_same_thread": False}

    engine = create_async_engine(database_url, echo=echo, **engine_kwargs)
    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    return engine, session_factory


async def init_models(engine: AsyncEngine) -> None:
    """
    테이블이 없으면 생성합니다. 스키마 마이그레이션은 지원하지 않습니다.

    Args:
        engine: 비동기 엔진
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
