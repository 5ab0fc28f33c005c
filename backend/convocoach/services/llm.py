from __future__ import annotations

import json
import logging
import math
import re
from typing import Any, Dict, List, Protocol

from openai import APIConnectionError, APIStatusError, APITimeoutError, OpenAI, OpenAIError

from ..config import settings
from ..errors import Timeout, UpstreamError
from .prompts import FeedbackRequest, LIST_FIELDS, SCORE_FIELDS

logger = logging.getLogger(__name__)

NEUTRAL_SCORE = 5.0
DEFAULT_SUMMARY = "Feedback analysis completed."
DEFAULT_DRILL = "Continue practicing to improve your skills."
DEFAULT_ASSESSMENT = "N/A"

_CODE_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE | re.MULTILINE)


def _strip_code_fences(s: str) -> str:
    s = (s or "").strip()
    s = _CODE_FENCE_RE.sub("", s).strip()
    return s


def _safe_json_loads(s: str) -> Dict[str, Any]:
    s = _strip_code_fences(s)
    start = s.find("{")
    end = s.rfind("}")
    if start == -1 or end == -1 or end <= start:
        raise ValueError("No JSON object found in model output")
    obj = json.loads(s[start : end + 1])
    if not isinstance(obj, dict):
        raise ValueError("Model output is not a JSON object")
    return obj


def clamp_score(v: Any, lo: float = 0.0, hi: float = 10.0, default: float = NEUTRAL_SCORE) -> float:
    """Coerce to float and clamp into [lo, hi]; missing or non-numeric -> default."""
    if v is None or isinstance(v, bool):
        return default
    try:
        x = float(v)
    except (TypeError, ValueError):
        return default
    if math.isnan(x):
        return default
    return max(lo, min(hi, x))


def _clean_list(v: Any, limit: int = 10) -> List[str]:
    if not isinstance(v, list):
        return []
    cleaned: List[str] = []
    for x in v:
        if isinstance(x, str):
            s = x.strip()
            if s:
                cleaned.append(s[:500])
    return cleaned[:limit]


def _clean_text(v: Any, default: str) -> str:
    if isinstance(v, str) and v.strip():
        return v.strip()[:4000]
    return default


def normalize_feedback(obj: Dict[str, Any]) -> Dict[str, Any]:
    """Lenient validation of a model response.

    Scores are coerced and clamped, narrative fields fall back to neutral
    defaults. Never raises for a dict input.
    """
    norm: Dict[str, Any] = {name: clamp_score(obj.get(name)) for name in SCORE_FIELDS}
    for name in LIST_FIELDS:
        norm[name] = _clean_list(obj.get(name))
    norm["summary"] = _clean_text(obj.get("summary"), DEFAULT_SUMMARY)
    norm["practice_drill"] = _clean_text(obj.get("practice_drill"), DEFAULT_DRILL)
    norm["tone_analysis"] = _clean_text(obj.get("tone_analysis"), DEFAULT_ASSESSMENT)
    norm["structure_quality"] = _clean_text(obj.get("structure_quality"), DEFAULT_ASSESSMENT)
    return norm


class Scorer(Protocol):
    """The one non-deterministic seam: request in, raw JSON object out."""

    def score(self, request: FeedbackRequest) -> Dict[str, Any]:
        ...


class OpenAIScorer:
    def __init__(
        self,
        client: OpenAI | None = None,
        model: str | None = None,
        temperature: float | None = None,
        timeout: float | None = None,
    ) -> None:
        self.timeout = timeout if timeout is not None else settings.llm_timeout_seconds
        # 재시도 없음: 실패는 호출자에게 그대로 전달
        self.client = client or OpenAI(
            api_key=settings.openai_api_key,
            timeout=self.timeout,
            max_retries=0,
        )
        self.model = model or settings.feedback_model
        self.temperature = settings.feedback_temperature if temperature is None else temperature

    def score(self, request: FeedbackRequest) -> Dict[str, Any]:
        try:
            resp = self.client.chat.completions.create(
                model=self.model,
                messages=request.messages(),
                response_format={
                    "type": "json_schema",
                    "json_schema": {
                        "name": request.schema_name,
                        "schema": request.schema,
                        "strict": True,
                    },
                },
                temperature=self.temperature,
                timeout=self.timeout,
            )
        except APITimeoutError as e:
            logger.warning("feedback model call timed out after %.1fs", self.timeout)
            raise Timeout("language model request timed out") from e
        except APIStatusError as e:
            logger.error("feedback model returned HTTP %s", e.status_code)
            raise UpstreamError(f"language model request failed: {e.status_code}") from e
        except (APIConnectionError, OpenAIError) as e:
            logger.exception("feedback model call failed")
            raise UpstreamError("language model request failed") from e

        if not resp.choices:
            raise UpstreamError("language model returned no choices")
        raw = (resp.choices[0].message.content or "").strip()
        try:
            return _safe_json_loads(raw)
        except ValueError as e:
            # json.JSONDecodeError is a ValueError
            logger.warning("malformed feedback JSON (len=%d)", len(raw))
            raise UpstreamError("language model returned malformed JSON") from e
