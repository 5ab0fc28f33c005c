# backend/convocoach/models.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .db import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Session(Base):
    """One practice attempt against a scenario."""

    __tablename__ = "sessions"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    scenario_id: Mapped[str] = mapped_column(String(64), nullable=False)

    transcript: Mapped[str] = mapped_column(Text, nullable=False, default="")
    ai_transcript: Mapped[str] = mapped_column(Text, nullable=False, default="")
    duration_seconds: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    feedback: Mapped["Feedback | None"] = relationship(
        "Feedback",
        back_populates="session",
        uselist=False,
        cascade="all, delete-orphan",
    )


class Feedback(Base):
    __tablename__ = "feedback"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # 세션당 리포트 1개
    session_id: Mapped[str] = mapped_column(ForeignKey("sessions.id"), nullable=False, unique=True)

    clarity_score: Mapped[float] = mapped_column(Float, nullable=False)
    confidence_score: Mapped[float] = mapped_column(Float, nullable=False)
    empathy_score: Mapped[float] = mapped_column(Float, nullable=False)
    pacing_score: Mapped[float] = mapped_column(Float, nullable=False)

    filler_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    words_per_minute: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    summary: Mapped[str] = mapped_column(Text, nullable=False, default="")
    strengths: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    improvements: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    practice_drill: Mapped[str] = mapped_column(Text, nullable=False, default="")
    detailed_analysis: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    session: Mapped["Session"] = relationship("Session", back_populates="feedback")


class Badge(Base):
    """Catalog entry. Exactly one of the required_* columns matches `type`."""

    __tablename__ = "badges"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    icon: Mapped[str | None] = mapped_column(String(32), nullable=True)
    tier: Mapped[str | None] = mapped_column(String(16), nullable=True)  # bronze | silver | gold | platinum

    type: Mapped[str] = mapped_column(String(32), nullable=False)  # session_count | streak | score
    required_sessions: Mapped[int | None] = mapped_column(Integer, nullable=True)
    required_streak: Mapped[int | None] = mapped_column(Integer, nullable=True)
    required_score: Mapped[float | None] = mapped_column(Float, nullable=True)

    # catalog order
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class UserBadge(Base):
    __tablename__ = "user_badges"
    __table_args__ = (UniqueConstraint("user_id", "badge_id", name="uq_user_badge"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    badge_id: Mapped[str] = mapped_column(ForeignKey("badges.id"), nullable=False)
    earned_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    badge: Mapped["Badge"] = relationship("Badge")
