from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class SessionCreate(BaseModel):
    scenario_id: str = Field(..., min_length=1, max_length=64)


class SessionUpdate(BaseModel):
    transcript: Optional[str] = None
    ai_transcript: Optional[str] = None
    duration_seconds: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)


class GenerateFeedbackRequest(BaseModel):
    session_id: str
    user_transcript: str
    ai_transcript: str = ""
    duration_seconds: float = Field(..., ge=0, allow_inf_nan=False)


class FillerWordCount(BaseModel):
    word: str
    count: int


class DetailedAnalysis(BaseModel):
    filler_words: List[FillerWordCount]
    tone_analysis: str
    structure_quality: str
    question_ratio: float
    active_listening_score: float
    pacing_band: Optional[str] = None
    score_bands: Optional[Dict[str, str]] = None


class FeedbackOut(BaseModel):
    id: int
    session_id: str
    clarity_score: float
    confidence_score: float
    empathy_score: float
    pacing_score: float
    filler_count: int
    words_per_minute: float
    summary: str
    strengths: List[str]
    improvements: List[str]
    practice_drill: str
    detailed_analysis: DetailedAnalysis
    created_at: datetime

    model_config = {"from_attributes": True}


class SessionOut(BaseModel):
    id: str
    user_id: str
    scenario_id: str
    transcript: str
    ai_transcript: str
    duration_seconds: float
    created_at: datetime
    feedback: Optional[FeedbackOut] = None

    model_config = {"from_attributes": True}


class BadgeOut(BaseModel):
    id: str
    name: str
    description: str
    icon: Optional[str] = None
    tier: Optional[str] = None
    type: str
    required_sessions: Optional[int] = None
    required_streak: Optional[int] = None
    required_score: Optional[float] = None

    model_config = {"from_attributes": True}


class UserBadgeOut(BaseModel):
    badge: BadgeOut
    earned_at: datetime

    model_config = {"from_attributes": True}


class AverageScores(BaseModel):
    clarity: float
    confidence: float
    empathy: float
    pacing: float


class WeeklyPoint(BaseModel):
    week: str
    clarity: float
    confidence: float
    filler_rate: float


class ProgressOut(BaseModel):
    current_streak: int
    total_sessions: int
    average_scores: AverageScores
    weekly_trend: List[WeeklyPoint]
    recent_session_ids: List[str]


class GenerateFeedbackResponse(BaseModel):
    feedback: FeedbackOut
    new_badges: List[BadgeOut]
