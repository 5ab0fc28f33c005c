from __future__ import annotations

import logging
from typing import Any, Iterable, List, Protocol, Set

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session as DBSession

from ..models import Badge as BadgeModel, UserBadge as UserBadgeModel
from .progress import ProgressSnapshot

logger = logging.getLogger(__name__)

SESSION_COUNT = "session_count"
STREAK = "streak"
SCORE = "score"
BADGE_TYPES = (SESSION_COUNT, STREAK, SCORE)

DEFAULT_CATALOG = [
    {"id": "first_steps", "name": "First Steps", "description": "Complete your first practice session",
     "icon": "🎯", "tier": "bronze", "type": SESSION_COUNT, "required_sessions": 1},
    {"id": "conversationalist", "name": "Conversationalist", "description": "Complete 10 practice sessions",
     "icon": "🎯", "tier": "silver", "type": SESSION_COUNT, "required_sessions": 10},
    {"id": "marathon_speaker", "name": "Marathon Speaker", "description": "Complete 50 practice sessions",
     "icon": "🎯", "tier": "gold", "type": SESSION_COUNT, "required_sessions": 50},
    {"id": "week_warrior", "name": "Week Warrior", "description": "Practice 7 days in a row",
     "icon": "🔥", "tier": "silver", "type": STREAK, "required_streak": 7},
    {"id": "monthly_master", "name": "Monthly Master", "description": "Practice 30 days in a row",
     "icon": "🔥", "tier": "platinum", "type": STREAK, "required_streak": 30},
    {"id": "rising_star", "name": "Rising Star", "description": "Reach an average score of 6/10",
     "icon": "⭐", "tier": "bronze", "type": SCORE, "required_score": 6.0},
    {"id": "polished_speaker", "name": "Polished Speaker", "description": "Reach an average score of 8/10",
     "icon": "⭐", "tier": "gold", "type": SCORE, "required_score": 8.0},
]


def qualifies(badge: Any, progress: ProgressSnapshot) -> bool:
    if badge.type == SESSION_COUNT:
        return badge.required_sessions is not None and progress.total_sessions >= badge.required_sessions
    if badge.type == STREAK:
        return badge.required_streak is not None and progress.current_streak >= badge.required_streak
    if badge.type == SCORE:
        return badge.required_score is not None and progress.overall_average() >= badge.required_score
    return False


def evaluate_badges(progress: ProgressSnapshot, catalog: Iterable[Any], already_earned: Set[str]) -> List[Any]:
    """Badges that qualify now and are not yet earned, in catalog order. Pure."""
    return [b for b in catalog if b.id not in already_earned and qualifies(b, progress)]


class BadgeNotifier(Protocol):
    def badge_awarded(self, user_id: str, badge: Any) -> None:
        ...


class LoggingNotifier:
    def badge_awarded(self, user_id: str, badge: Any) -> None:
        logger.info("badge %s awarded to user %s", badge.id, user_id)


def load_catalog(s: DBSession) -> List[BadgeModel]:
    q = select(BadgeModel).order_by(BadgeModel.position.asc(), BadgeModel.id.asc())
    return list(s.execute(q).scalars().all())


def earned_badge_ids(s: DBSession, user_id: str) -> Set[str]:
    q = select(UserBadgeModel.badge_id).where(UserBadgeModel.user_id == user_id)
    return set(s.execute(q).scalars().all())


def list_user_badges(s: DBSession, user_id: str) -> List[UserBadgeModel]:
    q = (
        select(UserBadgeModel)
        .where(UserBadgeModel.user_id == user_id)
        .order_by(UserBadgeModel.earned_at.asc())
    )
    return list(s.execute(q).scalars().all())


def award_badges(
    s: DBSession,
    user_id: str,
    badges: Iterable[BadgeModel],
    notifier: BadgeNotifier | None = None,
) -> List[BadgeModel]:
    """Insert one UserBadge per badge. An existing (user, badge) row is a no-op.

    Returns only the badges actually inserted by this call; only those are
    passed to the notifier.
    """
    awarded: List[BadgeModel] = []
    for badge in list(badges):
        badge_id = badge.id
        s.add(UserBadgeModel(user_id=user_id, badge_id=badge_id))
        try:
            s.commit()
        except IntegrityError:
            # 동시 평가로 이미 지급됨
            s.rollback()
            logger.debug("badge %s already held by user %s", badge_id, user_id)
            continue
        awarded.append(badge)

    if notifier is not None:
        for badge in awarded:
            notifier.badge_awarded(user_id, badge)
    return awarded


def seed_badges(s: DBSession, catalog: List[dict] | None = None) -> int:
    existing = {b.id for b in load_catalog(s)}
    inserted = 0
    for position, entry in enumerate(catalog or DEFAULT_CATALOG):
        if entry["id"] in existing:
            continue
        if entry["type"] not in BADGE_TYPES:
            raise ValueError(f"unknown badge type: {entry['type']}")
        s.add(BadgeModel(position=position, **entry))
        inserted += 1
    s.commit()
    return inserted
