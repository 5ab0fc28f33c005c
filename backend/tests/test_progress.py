from datetime import date, datetime, timedelta
from types import SimpleNamespace

import pytest

from convocoach.services.progress import aggregate_progress, current_streak

TODAY = date(2026, 10, 17)  # a Saturday


def _fb(clarity, confidence, empathy, pacing, filler_count=0):
    return SimpleNamespace(
        clarity_score=clarity,
        confidence_score=confidence,
        empathy_score=empathy,
        pacing_score=pacing,
        filler_count=filler_count,
    )


def _session(sid, days_ago, feedback=None, hour=12):
    created = datetime.combine(TODAY - timedelta(days=days_ago), datetime.min.time()).replace(hour=hour)
    return SimpleNamespace(id=sid, created_at=created, feedback=feedback)


@pytest.mark.parametrize(
    "offsets, expected",
    [
        ({0, 1, 2}, 3),
        ({2}, 0),
        ({0}, 1),
        ({1, 2}, 2),  # today still open
        ({0, 2, 3}, 1),
        (set(), 0),
    ],
)
def test_current_streak(offsets, expected):
    days = {TODAY - timedelta(days=n) for n in offsets}
    assert current_streak(days, TODAY) == expected


def test_streak_accepts_datetime_as_of():
    days = {TODAY, TODAY - timedelta(days=1)}
    assert current_streak(days, datetime.combine(TODAY, datetime.min.time()).replace(hour=23)) == 2


def test_aggregate_empty_history():
    snap = aggregate_progress([], TODAY)
    assert snap.current_streak == 0
    assert snap.total_sessions == 0
    assert snap.average_scores == {"clarity": 0.0, "confidence": 0.0, "empathy": 0.0, "pacing": 0.0}
    assert snap.weekly_trend == []
    assert snap.overall_average() == 0.0


def test_aggregate_averages_only_sessions_with_feedback():
    sessions = [
        _session("a", 0, _fb(8, 6, 7, 5, filler_count=2)),
        _session("b", 0, None, hour=15),
        _session("c", 1, _fb(6, 4, 9, 7, filler_count=4)),
    ]
    snap = aggregate_progress(sessions, TODAY)
    assert snap.total_sessions == 3
    assert snap.current_streak == 2
    assert snap.average_scores == {"clarity": 7.0, "confidence": 5.0, "empathy": 8.0, "pacing": 6.0}
    assert snap.overall_average() == 6.5
    assert snap.recent_session_ids == ["b", "a", "c"]


def test_weekly_trend_groups_by_monday():
    sessions = [
        _session("a", 0, _fb(8, 6, 7, 5, filler_count=2)),   # Sat 10-17
        _session("b", 5, _fb(6, 4, 7, 5, filler_count=4)),   # Mon 10-12
        _session("c", 7, _fb(5, 5, 5, 5, filler_count=1)),   # Sat 10-10
    ]
    trend = aggregate_progress(sessions, TODAY).weekly_trend
    assert trend == [
        {"week": "2026-10-05", "clarity": 5.0, "confidence": 5.0, "filler_rate": 1.0},
        {"week": "2026-10-12", "clarity": 7.0, "confidence": 5.0, "filler_rate": 3.0},
    ]


def test_recent_sessions_capped_at_ten():
    sessions = [_session(f"s{i}", i) for i in range(15)]
    snap = aggregate_progress(sessions, TODAY)
    assert snap.recent_session_ids == [f"s{i}" for i in range(10)]
    assert snap.current_streak == 15
