"""
Database schema for stored games.

Uses SQLAlchemy 2.0 declarative mapping over an async engine.
"""

from datetime import UTC, datetime

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    pass


class Game(Base):
    """게임 모델."""

    __tablename__ = "games"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    publisher_id: Mapped[str | None] = mapped_column(String(255))
    name: Mapped[str | None] = mapped_column(String(512))
    platform: Mapped[str | None] = mapped_column(String(16), index=True)  # ios, android
    store_id: Mapped[str | None] = mapped_column(String(255))
    # population run의 중복 판별 키 (유니크 제약은 두지 않음)
    bundle_id: Mapped[str | None] = mapped_column(String(255), index=True)
    app_version: Mapped[str] = mapped_column(String(64), default="")
    is_published: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    def __repr__(self) -> str:
        return f"<Game(id={self.id}, bundle_id='{self.bundle_id}', platform='{self.platform}')>"
