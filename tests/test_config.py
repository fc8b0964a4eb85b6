import pytest

from src.config import FeedSources, Settings
from src.errors import ConfigurationError


def test_settings_loads_from_env(monkeypatch):
    """환경 변수가 제대로 로드되는지 테스트

    Pydantic `Settings`가 모듈 레벨에서 인스턴스화되기 때문에,
    환경 변수를 설정한 후에 `Settings` 인스턴스를 새로 생성해야 합니다.
    """
    monkeypatch.setenv("JSON_URL_IOS", "https://feeds.test/ios.json")
    monkeypatch.setenv("JSON_URL_ANDROID", "https://feeds.test/android.json")
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

    settings = Settings(_env_file=None)

    assert settings.ios_feed_url == "https://feeds.test/ios.json"
    assert settings.android_feed_url == "https://feeds.test/android.json"
    assert settings.database_url == "sqlite+aiosqlite:///:memory:"


def test_settings_defaults(monkeypatch):
    """피드 URL이 없어도 Settings 생성은 실패하지 않아야 합니다."""
    for name in ("JSON_URL_IOS", "JSON_URL_ANDROID", "IOS_FEED_URL", "ANDROID_FEED_URL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.delenv("PORT", raising=False)

    settings = Settings(_env_file=None)

    assert settings.ios_feed_url is None
    assert settings.android_feed_url is None
    assert settings.port == 3000


def test_feed_sources_from_settings(monkeypatch):
    for name in ("JSON_URL_IOS", "JSON_URL_ANDROID", "IOS_FEED_URL", "ANDROID_FEED_URL"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(
        _env_file=None,
        ios_feed_url="https://feeds.test/ios.json",
        android_feed_url="https://feeds.test/android.json",
    )

    sources = FeedSources.from_settings(settings)

    assert sources.ios_feed_url == "https://feeds.test/ios.json"
    assert sources.android_feed_url == "https://feeds.test/android.json"


def test_feed_sources_missing_ios_url_raises(monkeypatch):
    """
    JSON_URL_IOS가 없으면 ConfigurationError가 발생해야 합니다.
    """
    monkeypatch.delenv("JSON_URL_IOS", raising=False)
    monkeypatch.delenv("IOS_FEED_URL", raising=False)
    settings = Settings(_env_file=None, android_feed_url="https://feeds.test/android.json")

    with pytest.raises(ConfigurationError, match="JSON_URL_IOS"):
        FeedSources.from_settings(settings)


def test_feed_sources_missing_both_urls_lists_both(monkeypatch):
    for name in ("JSON_URL_IOS", "JSON_URL_ANDROID", "IOS_FEED_URL", "ANDROID_FEED_URL"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings(_env_file=None)

    with pytest.raises(ConfigurationError) as exc_info:
        FeedSources.from_settings(settings)

    assert "JSON_URL_IOS" in str(exc_info.value)
    assert "JSON_URL_ANDROID" in str(exc_info.value)
