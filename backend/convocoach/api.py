from __future__ import annotations

import logging
import secrets
from datetime import date, datetime, timezone
from functools import lru_cache
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session as DBSession, selectinload

from .db import get_db
from .errors import Conflict, NotFound
from .models import Feedback as FeedbackModel, Session as SessionModel
from .schemas import (
    BadgeOut,
    FeedbackOut,
    GenerateFeedbackRequest,
    GenerateFeedbackResponse,
    ProgressOut,
    SessionCreate,
    SessionOut,
    SessionUpdate,
    UserBadgeOut,
)
from .services.badges import (
    BadgeNotifier,
    LoggingNotifier,
    award_badges,
    earned_badge_ids,
    evaluate_badges,
    list_user_badges,
    load_catalog,
    seed_badges,
)
from .services.feedback import FeedbackService, get_owned_session, has_feedback
from .services.llm import OpenAIScorer, Scorer
from .services.progress import ProgressSnapshot, aggregate_progress

logger = logging.getLogger(__name__)

router = APIRouter()

SESSION_LIST_LIMIT = 50


# --- DEPENDENCIES ---

def get_current_user_id(x_user_id: str = Header(default="")) -> str:
    user_id = x_user_id.strip()
    if not user_id:
        raise HTTPException(status_code=401, detail="missing user identity")
    return user_id


@lru_cache(maxsize=1)
def get_scorer() -> Scorer:
    return OpenAIScorer()


def get_notifier() -> BadgeNotifier:
    return LoggingNotifier()


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


# --- HELPERS ---

def _user_sessions(s: DBSession, user_id: str) -> List[SessionModel]:
    q = (
        select(SessionModel)
        .where(SessionModel.user_id == user_id)
        .options(selectinload(SessionModel.feedback))
        .order_by(SessionModel.created_at.desc())
    )
    return list(s.execute(q).scalars().all())


def _progress(s: DBSession, user_id: str) -> ProgressSnapshot:
    return aggregate_progress(_user_sessions(s, user_id), as_of=today_utc())


def _check_badges(s: DBSession, user_id: str, notifier: BadgeNotifier) -> List[Any]:
    progress = _progress(s, user_id)
    new = evaluate_badges(progress, load_catalog(s), earned_badge_ids(s, user_id))
    return award_badges(s, user_id, new, notifier)


# --- SESSIONS ---

@router.post("/sessions", response_model=SessionOut, status_code=201)
def create_session(
    body: SessionCreate,
    user_id: str = Depends(get_current_user_id),
    s: DBSession = Depends(get_db),
) -> SessionModel:
    row = SessionModel(
        id=secrets.token_hex(16),
        user_id=user_id,
        scenario_id=body.scenario_id,
        transcript="",
        ai_transcript="",
        duration_seconds=0.0,
    )
    s.add(row)
    s.commit()
    s.refresh(row)
    return row


@router.get("/sessions", response_model=List[SessionOut])
def list_sessions(
    user_id: str = Depends(get_current_user_id),
    s: DBSession = Depends(get_db),
) -> List[SessionModel]:
    return _user_sessions(s, user_id)[:SESSION_LIST_LIMIT]


@router.patch("/sessions/{session_id}", response_model=SessionOut)
def update_session(
    session_id: str,
    body: SessionUpdate,
    user_id: str = Depends(get_current_user_id),
    s: DBSession = Depends(get_db),
) -> SessionModel:
    row = get_owned_session(s, session_id, user_id)
    # 피드백 생성 후에는 변경 불가
    if has_feedback(s, session_id):
        raise Conflict("session is locked once feedback exists")

    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    for key, value in changes.items():
        setattr(row, key, value)
    s.commit()
    s.refresh(row)
    return row


# --- FEEDBACK ---

@router.post("/feedback", response_model=GenerateFeedbackResponse, status_code=201)
def generate_feedback(
    body: GenerateFeedbackRequest,
    user_id: str = Depends(get_current_user_id),
    s: DBSession = Depends(get_db),
    scorer: Scorer = Depends(get_scorer),
    notifier: BadgeNotifier = Depends(get_notifier),
) -> Dict[str, Any]:
    service = FeedbackService(s, scorer)
    feedback = service.generate(
        user_id=user_id,
        session_id=body.session_id,
        user_transcript=body.user_transcript,
        ai_transcript=body.ai_transcript,
        duration_seconds=body.duration_seconds,
    )
    # 리포트 저장 후 진행도 재계산 -> 배지 평가
    new_badges = _check_badges(s, user_id, notifier)
    return {"feedback": feedback, "new_badges": new_badges}


@router.get("/sessions/{session_id}/feedback", response_model=FeedbackOut)
def get_session_feedback(
    session_id: str,
    user_id: str = Depends(get_current_user_id),
    s: DBSession = Depends(get_db),
) -> FeedbackModel:
    get_owned_session(s, session_id, user_id)
    q = select(FeedbackModel).where(FeedbackModel.session_id == session_id)
    row = s.execute(q).scalar_one_or_none()
    if row is None:
        raise NotFound("feedback not found")
    return row


# --- PROGRESS & BADGES ---

@router.get("/progress", response_model=ProgressOut)
def get_progress(
    user_id: str = Depends(get_current_user_id),
    s: DBSession = Depends(get_db),
) -> ProgressSnapshot:
    return _progress(s, user_id)


@router.get("/badges", response_model=List[BadgeOut])
def list_badges(s: DBSession = Depends(get_db)) -> List[Any]:
    return load_catalog(s)


@router.get("/badges/me", response_model=List[UserBadgeOut])
def list_my_badges(
    user_id: str = Depends(get_current_user_id),
    s: DBSession = Depends(get_db),
) -> List[Any]:
    return list_user_badges(s, user_id)


@router.post("/badges/check", response_model=List[BadgeOut])
def check_badges(
    user_id: str = Depends(get_current_user_id),
    s: DBSession = Depends(get_db),
    notifier: BadgeNotifier = Depends(get_notifier),
) -> List[Any]:
    return _check_badges(s, user_id, notifier)


@router.post("/badges/seed")
def seed_badge_catalog(s: DBSession = Depends(get_db)) -> Dict[str, Any]:
    return {"inserted": seed_badges(s)}
