from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class Platform(StrEnum):
    """게임 플랫폼."""

    IOS = "ios"
    ANDROID = "android"


class RawGameRecord(BaseModel):
    """
    피드가 제공하는 랭킹 게임 레코드.

    한 번의 population run 동안에만 존재하며, 피드 내/피드 간 중복이 있을 수 있습니다.
    정의되지 않은 키는 무시합니다.
    """

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    publisher_id: int | str | None = None
    name: str | None = None
    os: str | None = None
    app_id: int | str | None = None
    bundle_id: str | None = None
    version: str | None = None


class GameEntity(BaseModel):
    """DB에 적재될 게임 엔티티."""

    publisher_id: str | None = None
    name: str | None = None
    platform: Platform
    store_id: str
    bundle_id: str
    app_version: str = ""
    is_published: bool = True
