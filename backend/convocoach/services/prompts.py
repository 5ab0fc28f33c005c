from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

SCORE_FIELDS = ("clarity_score", "confidence_score", "empathy_score", "pacing_score")
LIST_FIELDS = ("strengths", "improvements")
TEXT_FIELDS = ("summary", "practice_drill", "tone_analysis", "structure_quality")

FEEDBACK_SYSTEM_PROMPT = """
You are an expert communication coach analyzing a conversation practice session.

Given the user's transcript and AI's transcript, evaluate the conversation on multiple dimensions and provide structured feedback.

Analyze the following aspects:
1. Clarity & Brevity: How clear and concise were their statements?
2. Confidence: Did they sound confident and assertive?
3. Empathy & Active Listening: Did they acknowledge the other person and show understanding?
4. Structure: Was their conversation well-organized with clear points?
5. Tone: Was their tone appropriate for the context?

Provide scores (0-10) for clarity, confidence, empathy, and pacing quality.

Also provide:
- A brief summary (2-3 sentences)
- 3 specific things they did well
- 3 specific areas for improvement
- 1 practice drill they should do before their next session

Output exactly one JSON object and nothing else.
""".strip()

FEEDBACK_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "clarity_score": {"type": "number", "minimum": 0, "maximum": 10},
        "confidence_score": {"type": "number", "minimum": 0, "maximum": 10},
        "empathy_score": {"type": "number", "minimum": 0, "maximum": 10},
        "pacing_score": {"type": "number", "minimum": 0, "maximum": 10},
        "summary": {"type": "string"},
        "strengths": {"type": "array", "items": {"type": "string"}},
        "improvements": {"type": "array", "items": {"type": "string"}},
        "practice_drill": {"type": "string"},
        "tone_analysis": {"type": "string"},
        "structure_quality": {"type": "string"},
    },
    "required": [*SCORE_FIELDS, *LIST_FIELDS, *TEXT_FIELDS],
    "additionalProperties": False,
}

# Shown to the model as well, for providers without schema enforcement.
FEEDBACK_SCHEMA_EXAMPLE = """
Return your analysis in this exact JSON format:
{
  "clarity_score": 7.5,
  "confidence_score": 6.0,
  "empathy_score": 8.0,
  "pacing_score": 7.0,
  "summary": "Your analysis summary here",
  "strengths": ["strength 1", "strength 2", "strength 3"],
  "improvements": ["improvement 1", "improvement 2", "improvement 3"],
  "practice_drill": "Specific drill description",
  "tone_analysis": "Brief tone assessment",
  "structure_quality": "Brief structure assessment"
}
""".strip()


@dataclass(frozen=True)
class FeedbackRequest:
    """Provider-agnostic scoring request."""

    system: str
    user: str
    schema: Dict[str, Any] = field(default_factory=lambda: FEEDBACK_SCHEMA)
    schema_name: str = "conversation_feedback"

    def messages(self) -> List[Dict[str, str]]:
        return [
            {"role": "system", "content": self.system},
            {"role": "user", "content": self.user},
        ]


def _fmt_duration(seconds: float) -> str:
    return f"{seconds:g}"


def build_feedback_request(
    user_transcript: str,
    ai_transcript: str,
    duration_seconds: float,
    words_per_minute: int,
    filler_count: int,
    question_ratio: float,
) -> FeedbackRequest:
    user_prompt = (
        "User Transcript:\n"
        + (user_transcript or "")
        + "\n\nAI Transcript:\n"
        + ((ai_transcript or "").strip() or "N/A")
        + "\n\nAdditional Metrics:\n"
        + f"- Duration: {_fmt_duration(duration_seconds)} seconds\n"
        + f"- Words per minute: {words_per_minute}\n"
        + f"- Filler word count: {filler_count}\n"
        + f"- Question ratio: {question_ratio:.1f}%\n"
        + "\nPlease analyze this conversation and provide structured feedback.\n"
    )
    return FeedbackRequest(
        system=FEEDBACK_SYSTEM_PROMPT + "\n\n" + FEEDBACK_SCHEMA_EXAMPLE,
        user=user_prompt,
    )
