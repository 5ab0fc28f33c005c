from convocoach.services.prompts import FEEDBACK_SCHEMA, build_feedback_request


def test_user_block_carries_transcripts_and_metrics():
    req = build_feedback_request(
        user_transcript="I think we should meet.",
        ai_transcript="Sure, when?",
        duration_seconds=30,
        words_per_minute=10,
        filler_count=0,
        question_ratio=66.666,
    )
    assert "I think we should meet." in req.user
    assert "Sure, when?" in req.user
    assert "- Duration: 30 seconds" in req.user
    assert "- Words per minute: 10" in req.user
    assert "- Filler word count: 0" in req.user
    assert "- Question ratio: 66.7%" in req.user


def test_empty_ai_transcript_rendered_as_na():
    req = build_feedback_request("Hello", "  ", 10, 6, 0, 0.0)
    assert "AI Transcript:\nN/A" in req.user


def test_system_prompt_has_rubric_and_schema():
    req = build_feedback_request("Hello", "", 10, 6, 0, 0.0)
    for word in ("Clarity", "Confidence", "Empathy", "Structure", "Tone", "practice_drill"):
        assert word in req.system
    assert req.schema is FEEDBACK_SCHEMA
    assert set(FEEDBACK_SCHEMA["required"]) == set(FEEDBACK_SCHEMA["properties"])
