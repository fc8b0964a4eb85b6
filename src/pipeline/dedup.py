"""신규 게임 선별(중복 제거) 로직."""

from collections.abc import Iterable

from loguru import logger

from src.pipeline.models import GameEntity, Platform, RawGameRecord


def collect_bundle_ids(records: Iterable[RawGameRecord]) -> set[str]:
    """
    레코드 목록에서 비어 있지 않은 bundle id 집합을 반환합니다.

    Args:
        records: 피드 레코드 목록

    Returns:
        set[str]: 존재 여부 조회에 사용할 bundle id 집합
    """
    return {record.bundle_id for record in records if record.bundle_id}


def to_game_entity(record: RawGameRecord) -> GameEntity:
    """
    피드 레코드를 적재용 GameEntity로 변환합니다.

    - os가 정확히 "ios"이면 iOS, 그 외에는 모두 Android
    - store_id는 app_id의 문자열 형태
    - app_version은 없으면 빈 문자열
    """
    if not record.bundle_id:
        raise ValueError("bundle_id is required to build a GameEntity")
    platform = Platform.IOS if record.os == "ios" else Platform.ANDROID

    return GameEntity(
        publisher_id=str(record.publisher_id) if record.publisher_id is not None else None,
        name=record.name,
        platform=platform,
        store_id=str(record.app_id) if record.app_id is not None else "",
        bundle_id=record.bundle_id,
        app_version=record.version or "",
        is_published=True,
    )


def filter_new_games(
    records: Iterable[RawGameRecord], existing_keys: set[str]
) -> list[GameEntity]:
    """
    이미 저장된 게임을 제외한 신규 게임만 GameEntity로 변환해 반환합니다.

    Args:
        records: iOS, Android 순으로 병합된 피드 레코드
        existing_keys: DB에 이미 존재하는 bundle id 집합

    Returns:
        list[GameEntity]: 입력 순서를 유지한 신규 게임 엔티티 목록

    Note:
        - bundle_id가 없거나 이미 저장된 레코드는 오류 없이 건너뜁니다.
        - 같은 실행 안에서 bundle_id가 겹치면 처음 등장한 레코드만 사용합니다.
    """
    new_games: list[GameEntity] = []
    seen: set[str] = set()
    skipped = 0

    for record in records:
        bundle_id = record.bundle_id
        if not bundle_id or bundle_id in existing_keys or bundle_id in seen:
            skipped += 1
            continue

        seen.add(bundle_id)
        new_games.append(to_game_entity(record))

    logger.debug(f"신규 게임 선별 완료 - 신규: {len(new_games)}개, 제외: {skipped}개")
    return new_games
