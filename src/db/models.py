"""SQLAlchemy declarative base for all ORM models."""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models."""


class PlayerModel(Base):
    """ORM model for player resources.

    거래 세션의 원장 시드이자, 세션 종료 시 최종 원장이 기록되는 곳.
    협상 세션 자체는 저장하지 않는다.
    """

    __tablename__ = "players"

    player_id: Mapped[str] = mapped_column(String, primary_key=True)
    gold: Mapped[int] = mapped_column(Integer, default=100)
    food: Mapped[int] = mapped_column(Integer, default=50)  # 0 ~ 100
    water: Mapped[int] = mapped_column(Integer, default=50)  # 0 ~ 100
    strength: Mapped[int] = mapped_column(Integer, default=10)
    trades_completed: Mapped[int] = mapped_column(Integer, default=0)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
