import json
import sys
from collections.abc import AsyncGenerator
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from dotenv import load_dotenv
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# .env 파일을 먼저 로드하여 실제 환경 변수 설정
# 통합 테스트에서 실제 피드 URL을 사용할 수 있도록 함
load_dotenv(override=False)

from src.config import FeedSources  # noqa: E402
from src.db.repository import SqlGameRepository  # noqa: E402
from src.db.session import create_session_factory, init_models  # noqa: E402
from src.pipeline.interfaces import FeedFetcher, GameRepository  # noqa: E402

IOS_FEED_URL = "https://feeds.test/top_ios.json"
ANDROID_FEED_URL = "https://feeds.test/top_android.json"


@pytest.fixture(scope="session")
def mock_feed_data() -> list[list[dict]]:
    """
    [Fixture]
    iOS 랭킹 피드 응답 형식(배열의 배열)의 Mock 데이터를 로드합니다.
    """
    file_path = ROOT / "tests" / "test_data" / "top_games_feed_mock.json"

    with open(file_path, encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def feed_sources() -> FeedSources:
    """테스트용 피드 URL 묶음"""
    return FeedSources(ios_feed_url=IOS_FEED_URL, android_feed_url=ANDROID_FEED_URL)


@pytest.fixture
def mock_client(mocker) -> AsyncMock:
    """httpx.AsyncClient의 기본 Mock (빈 피드 반환)"""
    mock = mocker.AsyncMock()
    mock_response = mocker.Mock(status_code=200, is_success=True, json=lambda: [])
    mock.get.return_value = mock_response
    return mock


@pytest.fixture
def mock_fetcher(mocker) -> AsyncMock:
    """FeedFetcher 인터페이스의 기본 Mock"""
    mock = mocker.AsyncMock(spec=FeedFetcher)
    mock.fetch.return_value = []
    return mock


@pytest.fixture
def mock_repository(mocker) -> AsyncMock:
    """GameRepository 인터페이스의 기본 Mock (저장된 게임 없음)"""
    mock = mocker.AsyncMock(spec=GameRepository)
    mock.find_existing_bundle_ids.return_value = set()
    mock.bulk_insert.side_effect = lambda entities: len(entities)
    return mock


@pytest.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """테이블이 생성된 인메모리 SQLite 세션 팩토리"""
    engine, factory = create_session_factory("sqlite+aiosqlite:///:memory:")
    await init_models(engine)
    yield factory
    await engine.dispose()


@pytest.fixture
def repository(session_factory: async_sessionmaker[AsyncSession]) -> SqlGameRepository:
    """인메모리 DB를 사용하는 실제 SqlGameRepository"""
    return SqlGameRepository(session_factory)
