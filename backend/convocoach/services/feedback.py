from __future__ import annotations

import logging
import math
from typing import Any, Dict

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session as DBSession

from ..errors import Conflict, InvalidInput, NotFound
from ..models import Feedback as FeedbackModel, Session as SessionModel
from . import metrics
from .llm import Scorer, normalize_feedback
from .prompts import SCORE_FIELDS, build_feedback_request

logger = logging.getLogger(__name__)


def get_owned_session(s: DBSession, session_id: str, user_id: str) -> SessionModel:
    """Same NotFound for "doesn't exist" and "not yours"."""
    row = s.get(SessionModel, session_id) if session_id else None
    if row is None or row.user_id != user_id:
        raise NotFound("session not found")
    return row


def has_feedback(s: DBSession, session_id: str) -> bool:
    q = select(FeedbackModel.id).where(FeedbackModel.session_id == session_id).limit(1)
    return s.execute(q).scalar_one_or_none() is not None


class FeedbackService:
    """validate -> metrics -> prompt -> model -> normalize -> persist once."""

    def __init__(self, db: DBSession, scorer: Scorer) -> None:
        self.db = db
        self.scorer = scorer

    def generate(
        self,
        user_id: str,
        session_id: str,
        user_transcript: str,
        ai_transcript: str,
        duration_seconds: float,
    ) -> FeedbackModel:
        if not user_transcript or not user_transcript.strip():
            raise InvalidInput("user_transcript is required")
        if duration_seconds is None or not math.isfinite(duration_seconds) or duration_seconds < 0:
            raise InvalidInput("duration_seconds must be a finite number >= 0")

        get_owned_session(self.db, session_id, user_id)
        if has_feedback(self.db, session_id):
            raise Conflict("feedback already exists for this session")

        fillers = metrics.detect_filler_words(user_transcript)
        try:
            wpm = metrics.words_per_minute(user_transcript, duration_seconds)
        except InvalidInput:
            # 짧은 세션도 정성 피드백은 받는다
            logger.info("session %s has no usable duration, WPM defaults to 0", session_id)
            wpm = 0
        q_ratio = metrics.question_ratio(user_transcript)

        request = build_feedback_request(
            user_transcript=user_transcript,
            ai_transcript=ai_transcript,
            duration_seconds=duration_seconds,
            words_per_minute=wpm,
            filler_count=fillers.count,
            question_ratio=q_ratio,
        )

        # UpstreamError / Timeout propagate untouched, nothing written yet
        analysis = normalize_feedback(self.scorer.score(request))

        row = FeedbackModel(
            session_id=session_id,
            clarity_score=analysis["clarity_score"],
            confidence_score=analysis["confidence_score"],
            empathy_score=analysis["empathy_score"],
            pacing_score=analysis["pacing_score"],
            filler_count=fillers.count,
            words_per_minute=wpm,
            summary=analysis["summary"],
            strengths=analysis["strengths"],
            improvements=analysis["improvements"],
            practice_drill=analysis["practice_drill"],
            detailed_analysis=build_detailed_analysis(analysis, fillers, q_ratio, wpm),
        )
        self.db.add(row)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise Conflict("feedback already exists for this session") from e
        self.db.refresh(row)

        logger.info(
            "feedback stored for session %s (clarity=%.1f confidence=%.1f empathy=%.1f pacing=%.1f)",
            session_id,
            row.clarity_score,
            row.confidence_score,
            row.empathy_score,
            row.pacing_score,
        )
        return row


def build_detailed_analysis(
    analysis: Dict[str, Any],
    fillers: metrics.FillerAnalysis,
    q_ratio: float,
    wpm: float,
) -> Dict[str, Any]:
    return {
        "filler_words": fillers.details(),
        "tone_analysis": analysis["tone_analysis"],
        "structure_quality": analysis["structure_quality"],
        "question_ratio": q_ratio,
        "active_listening_score": analysis["empathy_score"],
        "pacing_band": metrics.pacing_band(wpm),
        "score_bands": {
            name.removesuffix("_score"): metrics.score_band(analysis[name]) for name in SCORE_FIELDS
        },
    }
