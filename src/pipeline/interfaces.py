from abc import ABC, abstractmethod
from collections.abc import Sequence

from src.pipeline.models import GameEntity, RawGameRecord


class FeedFetcher(ABC):
    """
    FeedFetcher 인터페이스.

    이 인터페이스는 비동기적으로 랭킹 피드를 가져오는 메서드를 정의합니다.
    """

    @abstractmethod
    async def fetch(self, url: str) -> list[RawGameRecord]:
        """
        외부 피드로부터 게임 레코드를 가져와 평탄화합니다.

        Args:
            url (str): 피드 URL. 누락 여부는 호출 측에서 검증합니다.

        Returns:
            list[RawGameRecord]: 그룹 순서를 유지한 평탄화된 레코드 목록.
        """
        raise NotImplementedError
        return []


class GameRepository(ABC):
    """
    GameRepository 인터페이스.

    Population run이 사용하는 영속 계층 연산(존재 여부 조회, 일괄 적재)을 정의합니다.
    """

    @abstractmethod
    async def find_existing_bundle_ids(self, bundle_ids: set[str]) -> set[str]:
        """
        주어진 bundle id 중 이미 저장된 것들을 반환합니다.

        Args:
            bundle_ids: 조회할 bundle id 집합

        Returns:
            set[str]: DB에 이미 존재하는 bundle id 집합.

        Note:
            bundle_id 컬럼만 조회합니다 (전체 행 조회 아님).
        """
        raise NotImplementedError
        return set()

    @abstractmethod
    async def bulk_insert(self, entities: Sequence[GameEntity]) -> int:
        """
        엔티티 목록을 한 번의 일괄 적재로 저장합니다.

        Args:
            entities: 저장할 게임 엔티티 목록

        Returns:
            int: 적재된 엔티티 수.
        """
        raise NotImplementedError
        return 0
