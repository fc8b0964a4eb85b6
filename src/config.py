"""Configuration management for the top games backend.

이 파일은 환경 변수를 타입 안전하게 관리합니다.
Pydantic을 사용해서 자동으로 .env 파일을 읽고 검증합니다.

사용법:
    from src.config import settings

    # settings 객체를 통해 환경 변수 접근
    database_url = settings.database_url
"""

from dataclasses import dataclass
from typing import Literal, Self

from pydantic import AliasChoices, Field, PositiveFloat, PositiveInt
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.errors import ConfigurationError


class Settings(BaseSettings):  # type: ignore[misc]
    """
    애플리케이션 설정 클래스.

    .env 파일의 환경 변수를 자동으로 로드하고 타입 검증합니다.
    피드 URL은 선택값이며, 누락 여부는 FeedSources.from_settings()에서 검증합니다.
    """

    # 랭킹 피드 URL (기존 배포 환경의 JSON_URL_* 변수명 유지)
    ios_feed_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("JSON_URL_IOS", "IOS_FEED_URL"),
        description="iOS top games feed URL",
    )
    android_feed_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("JSON_URL_ANDROID", "ANDROID_FEED_URL"),
        description="Android top games feed URL",
    )

    # 데이터베이스 (SQLAlchemy async URL)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./games.db", description="Database URL"
    )

    # 환경 설정 (선택, 기본값 있음)
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # HTTP 서버
    host: str = "0.0.0.0"
    port: PositiveInt = 3000

    # 피드 요청 타임아웃 (초)
    http_timeout_seconds: PositiveFloat = Field(
        default=30.0, description="Timeout for feed requests"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )


@dataclass(frozen=True)
class FeedSources:
    """
    Population run에 사용할 피드 URL 묶음.

    오케스트레이터 생성 시 명시적으로 주입되며, 요청마다 환경 변수를 읽지 않습니다.
    """

    ios_feed_url: str
    android_feed_url: str

    @classmethod
    def from_settings(cls, settings: Settings) -> Self:
        """
        설정에서 피드 URL을 읽어 검증합니다. 서버 시작 시 한 번만 호출합니다.

        Raises:
            ConfigurationError: iOS 또는 Android 피드 URL이 설정되지 않은 경우
        """
        missing = []
        if not settings.ios_feed_url:
            missing.append("JSON_URL_IOS")
        if not settings.android_feed_url:
            missing.append("JSON_URL_ANDROID")

        if missing:
            raise ConfigurationError(
                f"Missing feed URL configuration: {', '.join(missing)}"
            )

        assert settings.ios_feed_url is not None
        assert settings.android_feed_url is not None
        return cls(
            ios_feed_url=settings.ios_feed_url,
            android_feed_url=settings.android_feed_url,
        )


# 전역 settings 인스턴스 (import해서 사용)
settings = Settings()
