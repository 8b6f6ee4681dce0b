import pytest

from app.features.journaling.transcript import build_transcript, clean_answers, question_label


@pytest.mark.parametrize(
    "question_id, label",
    [
        ("mood", "Mood"),
        ("tomorrowFocus", "Tomorrow Focus"),
        ("whatWentWell", "What Went Well"),
        ("sleep_quality", "Sleep quality"),
        ("gratitude", "Gratitude"),
    ],
)
def test_question_label(question_id, label):
    assert question_label(question_id) == label


def test_transcript_joins_label_and_answer_lines():
    transcript = build_transcript({"mood": "tired but okay", "gratitude": "sunshine"})

    assert transcript == "Mood: tired but okay\nGratitude: sunshine"


def test_transcript_skips_blank_answers():
    transcript = build_transcript({
        "mood": "great!",
        "gratitude": "   ",
        "challenges": "",
        "tomorrowFocus": "  finish the report ",
    })

    assert transcript == "Mood: great!\nTomorrow Focus: finish the report"
    assert "Gratitude" not in transcript
    assert "Challenges" not in transcript


def test_clean_answers_drops_non_text_values():
    assert clean_answers({"mood": None, "sleep": "ok", "score": 7}) == {"sleep": "ok"}


def test_transcript_of_only_blank_answers_is_empty():
    assert build_transcript({"mood": " ", "sleep": "\n"}) == ""
