import pytest
from sqlalchemy.exc import OperationalError

from src.db.repository import SqlGameRepository
from src.errors import GameNotFoundError, PersistenceError
from src.pipeline.interfaces import GameRepository
from src.pipeline.models import GameEntity, Platform


def _entity(bundle_id: str, platform: Platform = Platform.IOS, **kwargs) -> GameEntity:
    return GameEntity(
        bundle_id=bundle_id,
        platform=platform,
        store_id=kwargs.pop("store_id", "1"),
        name=kwargs.pop("name", bundle_id),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_sql_repository_conforms_to_interface():
    """
    [GREEN]
    SqlGameRepository가 GameRepository 인터페이스를 준수하는지 테스트합니다.
    """
    assert issubclass(SqlGameRepository, GameRepository)


@pytest.mark.asyncio
async def test_bulk_insert_and_find_existing(repository: SqlGameRepository):
    """
    일괄 적재 후 존재 여부 조회가 저장된 bundle id만 반환하는지 테스트합니다.
    """
    added = await repository.bulk_insert(
        [_entity("com.a"), _entity("com.b", Platform.ANDROID, app_version="1.0")]
    )

    assert added == 2
    existing = await repository.find_existing_bundle_ids({"com.a", "com.b", "com.c"})
    assert existing == {"com.a", "com.b"}

    games = await repository.list_games()
    assert [g.bundle_id for g in games] == ["com.a", "com.b"]
    assert games[0].platform == "ios"
    assert games[0].is_published is True
    assert games[0].app_version == ""
    assert games[1].app_version == "1.0"
    assert games[0].created_at is not None


@pytest.mark.asyncio
async def test_find_existing_with_empty_set_returns_empty(repository: SqlGameRepository):
    assert await repository.find_existing_bundle_ids(set()) == set()


@pytest.mark.asyncio
async def test_bulk_insert_empty_is_noop(repository: SqlGameRepository):
    assert await repository.bulk_insert([]) == 0
    assert await repository.list_games() == []


@pytest.mark.asyncio
async def test_create_get_update_delete_game(repository: SqlGameRepository):
    """
    CRUD 흐름을 테스트합니다.

    Verifies:
        1. 생성 시 id가 할당되는지
        2. 수정 시 전달된 필드만 바뀌는지
        3. 삭제 후 조회하면 GameNotFoundError가 발생하는지
    """
    created = await repository.create_game(
        {"name": "Helix Jump", "platform": "ios", "bundle_id": "com.h8games.falldown", "store_id": "1345968745"}
    )
    assert created.id is not None
    assert created.is_published is False

    fetched = await repository.get_game(created.id)
    assert fetched.name == "Helix Jump"

    updated = await repository.update_game(
        created.id, {"app_version": "2.4.1", "is_published": True, "unknown": "ignored"}
    )
    assert updated.app_version == "2.4.1"
    assert updated.is_published is True
    assert updated.name == "Helix Jump"

    await repository.delete_game(created.id)

    with pytest.raises(GameNotFoundError):
        await repository.get_game(created.id)


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["get_game", "delete_game"])
async def test_missing_game_raises_not_found(repository: SqlGameRepository, method: str):
    with pytest.raises(GameNotFoundError):
        await getattr(repository, method)(999)


@pytest.mark.asyncio
async def test_update_missing_game_raises_not_found(repository: SqlGameRepository):
    with pytest.raises(GameNotFoundError):
        await repository.update_game(999, {"name": "nope"})


@pytest.mark.asyncio
async def test_search_games_by_platform_and_name(repository: SqlGameRepository):
    """플랫폼 일치와 이름 부분 일치(대소문자 무시) 조건을 테스트합니다."""
    await repository.bulk_insert(
        [
            _entity("com.a", Platform.IOS, name="Helix Jump"),
            _entity("com.b", Platform.ANDROID, name="Helix Jump"),
            _entity("com.c", Platform.IOS, name="Paper.io 2"),
        ]
    )

    ios_games = await repository.search_games(platform="ios")
    assert [g.bundle_id for g in ios_games] == ["com.a", "com.c"]

    helix_ios = await repository.search_games(name="helix", platform="ios")
    assert [g.bundle_id for g in helix_ios] == ["com.a"]

    everything = await repository.search_games()
    assert len(everything) == 3


@pytest.mark.asyncio
async def test_database_errors_become_persistence_error(mocker):
    """SQLAlchemy 오류는 PersistenceError로 변환되어 전파됩니다."""
    session_factory = mocker.MagicMock(
        side_effect=OperationalError("SELECT 1", {}, Exception("database is locked"))
    )
    repository = SqlGameRepository(session_factory)

    with pytest.raises(PersistenceError) as exc_info:
        await repository.find_existing_bundle_ids({"com.a"})

    assert isinstance(exc_info.value.__cause__, OperationalError)
