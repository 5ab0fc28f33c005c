from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Set

DIMENSIONS = ("clarity", "confidence", "empathy", "pacing")
RECENT_LIMIT = 10


@dataclass
class ProgressSnapshot:
    current_streak: int
    total_sessions: int
    average_scores: Dict[str, float]
    weekly_trend: List[Dict[str, Any]] = field(default_factory=list)
    recent_session_ids: List[str] = field(default_factory=list)

    def overall_average(self) -> float:
        return sum(self.average_scores.get(d, 0.0) for d in DIMENSIONS) / len(DIMENSIONS)


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def practice_days(sessions: Iterable[Any]) -> Set[date]:
    return {_as_date(s.created_at) for s in sessions if s.created_at is not None}


def current_streak(days: Set[date], as_of: date | datetime) -> int:
    """Consecutive practice days ending today, or yesterday if today is still open."""
    check = _as_date(as_of)
    if check not in days:
        check -= timedelta(days=1)
        if check not in days:
            return 0
    streak = 0
    while check in days:
        streak += 1
        check -= timedelta(days=1)
    return streak


def _feedback_of(session: Any) -> Optional[Any]:
    fb = getattr(session, "feedback", None)
    if isinstance(fb, list):
        return fb[0] if fb else None
    return fb


def average_scores(feedback: List[Any]) -> Dict[str, float]:
    if not feedback:
        return {d: 0.0 for d in DIMENSIONS}
    n = len(feedback)
    return {d: sum(getattr(f, f"{d}_score") for f in feedback) / n for d in DIMENSIONS}


def weekly_trend(sessions: Iterable[Any]) -> List[Dict[str, Any]]:
    """Per ISO week (keyed by its Monday): mean clarity, confidence and filler count."""
    buckets: Dict[date, List[Any]] = defaultdict(list)
    for s in sessions:
        fb = _feedback_of(s)
        if fb is None or s.created_at is None:
            continue
        day = _as_date(s.created_at)
        buckets[day - timedelta(days=day.weekday())].append(fb)

    trend = []
    for week in sorted(buckets):
        items = buckets[week]
        n = len(items)
        trend.append(
            {
                "week": week.isoformat(),
                "clarity": sum(f.clarity_score for f in items) / n,
                "confidence": sum(f.confidence_score for f in items) / n,
                "filler_rate": sum(f.filler_count for f in items) / n,
            }
        )
    return trend


def aggregate_progress(sessions: Iterable[Any], as_of: date | datetime) -> ProgressSnapshot:
    """Build a ProgressSnapshot from all of one user's sessions (feedback attached)."""
    sessions = list(sessions)
    feedback = [fb for fb in (_feedback_of(s) for s in sessions) if fb is not None]
    newest_first = sorted(
        (s for s in sessions if s.created_at is not None),
        key=lambda s: s.created_at,
        reverse=True,
    )
    return ProgressSnapshot(
        current_streak=current_streak(practice_days(sessions), as_of),
        total_sessions=len(sessions),
        average_scores=average_scores(feedback),
        weekly_trend=weekly_trend(sessions),
        recent_session_ids=[s.id for s in newest_first[:RECENT_LIMIT]],
    )
