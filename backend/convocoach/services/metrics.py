"""Deterministic transcript metrics: filler words, pacing and question ratio.

Everything in here is pure. No I/O, no model calls.
"""
from __future__ import annotations

import math
import re
from typing import Dict, List, NamedTuple

from ..errors import InvalidInput

FILLER_WORDS = (
    "um",
    "uh",
    "like",
    "you know",
    "actually",
    "basically",
    "literally",
    "sort of",
    "kind of",
    "i mean",
    "right",
    "okay",
    "so",
    "well",
)

# WPM bands
SLOW_WPM_MAX = 120
OPTIMAL_WPM_MIN = 150
OPTIMAL_WPM_MAX = 170
FAST_WPM_MIN = 180

_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
_WS_RE = re.compile(r"\s+")


def _filler_pattern(filler: str) -> re.Pattern[str]:
    return re.compile(r"\b" + re.escape(filler) + r"\b", re.IGNORECASE)


_FILLER_PATTERNS = {f: _filler_pattern(f) for f in FILLER_WORDS}


def round_half_up(value: float, ndigits: int = 0) -> float:
    scale = 10 ** ndigits
    return math.floor(value * scale + 0.5) / scale


class FillerAnalysis(NamedTuple):
    count: int
    per_word: Dict[str, int]

    def details(self) -> List[Dict[str, object]]:
        return [{"word": w, "count": c} for w, c in self.per_word.items()]


def detect_filler_words(transcript: str, fillers=FILLER_WORDS) -> FillerAnalysis:
    """Count whole-word filler matches.

    Every filler is matched on its own, so a span that satisfies two listed
    phrases counts toward both. Only fillers seen at least once appear in
    ``per_word``, in list order.
    """
    text = (transcript or "").lower()
    per_word: Dict[str, int] = {}
    total = 0
    for filler in fillers:
        pattern = _FILLER_PATTERNS.get(filler) or _filler_pattern(filler)
        n = len(pattern.findall(text))
        if n:
            per_word[filler] = n
            total += n
    return FillerAnalysis(count=total, per_word=per_word)


def count_words(transcript: str) -> int:
    return len([w for w in _WS_RE.split(transcript or "") if w])


def words_per_minute(transcript: str, duration_seconds: float) -> int:
    if duration_seconds is None or not math.isfinite(duration_seconds) or duration_seconds <= 0:
        raise InvalidInput("duration_seconds must be a finite number > 0 to compute words per minute")
    minutes = duration_seconds / 60
    if minutes <= 0:
        raise InvalidInput("duration_seconds is too small to compute words per minute")
    wpm = count_words(transcript) / minutes
    if not math.isfinite(wpm):
        raise InvalidInput("duration_seconds is too small to compute words per minute")
    return int(round_half_up(wpm))


def question_ratio(transcript: str) -> float:
    """Percentage of sentences that are questions, one decimal place."""
    text = transcript or ""
    sentences = [s for s in _SENTENCE_SPLIT_RE.split(text) if s.strip()]
    if not sentences:
        return 0.0
    questions = text.count("?")
    return round_half_up(questions / len(sentences) * 100, 1)


def pacing_band(wpm: float) -> str:
    if wpm <= 0:
        return "unknown"
    if wpm <= SLOW_WPM_MAX:
        return "slow"
    if wpm >= FAST_WPM_MIN:
        return "fast"
    if OPTIMAL_WPM_MIN <= wpm <= OPTIMAL_WPM_MAX:
        return "optimal"
    return "moderate"


def score_band(score: float) -> str:
    if score >= 8:
        return "excellent"
    if score >= 6:
        return "good"
    if score >= 4:
        return "fair"
    return "poor"
