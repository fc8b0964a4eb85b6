from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from src.pipeline.models import Platform


class CamelModel(BaseModel):
    """JSON 필드는 camelCase (publisherId, storeId 등)로 주고받습니다."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GameWrite(CamelModel):
    """게임 생성/수정 요청 본문. 수정 시에는 전달된 필드만 반영합니다."""

    publisher_id: str | None = None
    name: str | None = None
    platform: Platform | None = None
    store_id: str | None = None
    bundle_id: str | None = None
    app_version: str | None = None
    is_published: bool | None = None

    @field_validator("platform", mode="before")
    @classmethod
    def normalize_platform(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("publisher_id", "store_id", mode="before")
    @classmethod
    def stringify_id(cls, value: object) -> object:
        # 숫자 ID도 문자열로 저장
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("app_version", "is_published", mode="before")
    @classmethod
    def reject_null(cls, value: object) -> object:
        # DB 컬럼이 NOT NULL이므로 명시적인 null은 허용하지 않음
        if value is None:
            raise ValueError("must not be null")
        return value


class GameRead(CamelModel):
    id: int
    publisher_id: str | None
    name: str | None
    platform: str | None
    store_id: str | None
    bundle_id: str | None
    app_version: str
    is_published: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


class GameSearch(BaseModel):
    """게임 검색 요청 본문. 값은 앞뒤 공백 제거 후 소문자로 정규화됩니다."""

    name: str = ""
    platform: str = ""

    @field_validator("name", "platform", mode="before")
    @classmethod
    def normalize(cls, value: object) -> object:
        if value is None:
            return ""
        if isinstance(value, str):
            return value.strip().lower()
        return value


class DeletedGame(BaseModel):
    id: int
