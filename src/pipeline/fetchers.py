from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import httpx
from loguru import logger
from pydantic import ValidationError

from src.config import Settings, settings
from src.errors import HttpError, MalformedResponseError
from src.pipeline.interfaces import FeedFetcher
from src.pipeline.models import RawGameRecord


@asynccontextmanager
async def create_http_client(
    config: Settings = settings,
) -> AsyncGenerator[httpx.AsyncClient, None]:
    """
    피드 요청에 사용할 비동기 HTTP 클라이언트를 생성하고 세션을 관리합니다.

    Yields:
        httpx.AsyncClient: 공유 HTTP 클라이언트
    """
    logger.info("HTTPX AsyncClient 세션 생성...")
    timeout = httpx.Timeout(config.http_timeout_seconds, connect=10.0)

    async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as http_client:
        try:
            yield http_client
        finally:
            logger.info("HTTPX AsyncClient 세션 종료...")


class HttpFeedFetcher(FeedFetcher):
    """
    HTTP JSON 랭킹 피드를 가져와 평탄화하는 FeedFetcher 구현체.

    피드 응답 형식: 랭킹 그룹의 배열 (배열의 배열)
        [[{"bundle_id": "...", "os": "ios", ...}, ...], [...]]
    """

    def __init__(self, client: Any) -> None:
        """
        Args:
            client: HTTP 클라이언트 (httpx.AsyncClient 등)
        """
        self._client = client

    async def fetch(self, url: str) -> list[RawGameRecord]:
        """
        피드를 가져와 한 단계 평탄화된 게임 레코드 목록을 반환합니다.

        Args:
            url: 피드 URL

        Returns:
            list[RawGameRecord]: 그룹 순서와 그룹 내 순서를 유지한 레코드 목록

        Raises:
            HttpError: 2xx가 아닌 응답 또는 전송 오류
            MalformedResponseError: 본문이 배열의 배열이 아닌 경우
        """
        logger.info(f"피드 요청 시작: {url}")

        try:
            response = await self._client.get(url)
        except httpx.HTTPError as e:
            logger.error(f"피드 요청 중 오류 발생 ({url}): {e}")
            raise HttpError(url, reason=str(e)) from e

        # JSON 파싱 전에 상태 코드 검증
        if not response.is_success:
            error = HttpError(url, status_code=response.status_code)
            logger.error(f"피드 응답 오류: {error}")
            raise error

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"피드 응답 JSON 파싱 실패 ({url}): {e}")
            raise MalformedResponseError(url, "response body is not valid JSON") from e

        records = self._flatten(url, data)
        logger.info(f"피드 요청 완료: {url} - 총 {len(records)}개 레코드")
        return records

    @staticmethod
    def _flatten(url: str, data: Any) -> list[RawGameRecord]:
        """
        랭킹 그룹 배열을 한 단계 평탄화합니다.

        Args:
            url: 오류 메시지용 피드 URL
            data: 파싱된 JSON 값

        Returns:
            list[RawGameRecord]: 평탄화된 레코드 목록

        Note:
            필드 타입이 맞지 않는 레코드는 실행 전체를 중단하지 않고 건너뜁니다.
        """
        if not isinstance(data, list):
            error = MalformedResponseError(url, "expected an array")
            logger.error(f"피드 응답 구조 오류: {error}")
            raise error

        records: list[RawGameRecord] = []
        skipped = 0
        for group_index, group in enumerate(data):
            if not isinstance(group, list):
                error = MalformedResponseError(
                    url, f"expected an array of arrays (group {group_index})"
                )
                logger.error(f"피드 응답 구조 오류: {error}")
                raise error

            for item in group:
                if not isinstance(item, dict):
                    error = MalformedResponseError(
                        url, f"expected game records to be objects (group {group_index})"
                    )
                    logger.error(f"피드 응답 구조 오류: {error}")
                    raise error

                try:
                    records.append(RawGameRecord.model_validate(item))
                except ValidationError as e:
                    # 필드 타입이 맞지 않는 레코드만 건너뛰고 나머지는 유지
                    logger.debug(
                        f"피드 레코드 건너뜀 ({url}, group={group_index}): "
                        f"{e.error_count()}개 필드 오류"
                    )
                    skipped += 1

        if skipped:
            logger.warning(f"{url}: 잘못된 레코드 {skipped}개를 제외했습니다.")
        return records
