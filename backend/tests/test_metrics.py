import pytest

from convocoach.errors import InvalidInput
from convocoach.services import metrics

SAMPLE = "Um, so, I think, uh, we should meet tomorrow. Right?"


def test_filler_words_sample_transcript():
    result = metrics.detect_filler_words(SAMPLE)
    assert result.count == 4
    assert result.per_word == {"um": 1, "uh": 1, "right": 1, "so": 1}


def test_filler_words_case_insensitive_and_whole_word():
    result = metrics.detect_filler_words("LIKE, I like it. Unlikely, likewise.")
    assert result.per_word == {"like": 2}


def test_filler_phrases_matched_as_phrases():
    result = metrics.detect_filler_words("You know, it is kind of late. I mean it.")
    assert result.per_word == {"you know": 1, "kind of": 1, "i mean": 1}
    assert result.count == 3


def test_overlapping_fillers_each_count():
    result = metrics.detect_filler_words("you know what I know", fillers=("you know", "know"))
    assert result.per_word == {"you know": 1, "know": 2}
    assert result.count == sum(result.per_word.values()) == 3


def test_filler_details_shape():
    details = metrics.detect_filler_words("um um okay").details()
    assert details == [{"word": "um", "count": 2}, {"word": "okay", "count": 1}]


def test_no_fillers():
    result = metrics.detect_filler_words("We should meet tomorrow.")
    assert result.count == 0
    assert result.details() == []


def test_count_words_ignores_extra_whitespace():
    assert metrics.count_words("  one   two\nthree\t") == 3
    assert metrics.count_words("") == 0
    assert metrics.count_words(SAMPLE) == 10


@pytest.mark.parametrize(
    "text, seconds, expected",
    [
        ("one two three", 60, 3),
        (" a  b ", 30, 4),
        (SAMPLE, 10, 60),
        ("word", 120, 1),  # 0.5 rounds up
    ],
)
def test_words_per_minute(text, seconds, expected):
    assert metrics.words_per_minute(text, seconds) == expected


@pytest.mark.parametrize("seconds", [0, -5, float("nan"), float("inf"), 1e-320, 5e-324])
def test_words_per_minute_rejects_unusable_duration(seconds):
    with pytest.raises(InvalidInput):
        metrics.words_per_minute("hello there", seconds)


def test_question_ratio_example():
    assert metrics.question_ratio("Are you sure? Yes. Really?") == 66.7


def test_question_ratio_sample_transcript():
    # "...tomorrow" and "Right" are two sentences, one "?"
    assert metrics.question_ratio(SAMPLE) == 50.0


@pytest.mark.parametrize("text", ["", "   ", "?!.", "..."])
def test_question_ratio_without_sentences(text):
    assert metrics.question_ratio(text) == 0.0


def test_question_ratio_statement_only():
    assert metrics.question_ratio("Hello there. Nice day") == 0.0


def test_pacing_band():
    assert metrics.pacing_band(0) == "unknown"
    assert metrics.pacing_band(100) == "slow"
    assert metrics.pacing_band(160) == "optimal"
    assert metrics.pacing_band(140) == "moderate"
    assert metrics.pacing_band(200) == "fast"


@pytest.mark.parametrize(
    "wpm, band",
    [(120, "slow"), (121, "moderate"), (150, "optimal"), (170, "optimal"), (179, "moderate"), (180, "fast")],
)
def test_pacing_band_boundaries(wpm, band):
    assert metrics.pacing_band(wpm) == band


def test_score_band():
    assert [metrics.score_band(s) for s in (9, 6.5, 4, 1)] == ["excellent", "good", "fair", "poor"]
