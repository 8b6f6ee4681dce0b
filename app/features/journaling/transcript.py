"""Turn a submitted answer mapping into the text the summaries are written from."""

import re
from typing import Dict, Mapping

# Splits "tomorrowFocus" -> "tomorrow Focus", "HTTPStatus" -> "HTTP Status".
_CASE_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def question_label(question_id: str) -> str:
    """
    Display label for a question identifier.

    The identifier is split on case boundaries, underscores and hyphens,
    and the first letter is capitalized:

        >>> question_label("tomorrowFocus")
        'Tomorrow Focus'
        >>> question_label("mood")
        'Mood'
        >>> question_label("sleep_quality")
        'Sleep quality'
    """
    spaced = _CASE_BOUNDARY.sub(" ", question_id.strip())
    spaced = re.sub(r"[_\-\s]+", " ", spaced).strip()
    if not spaced:
        return question_id
    return spaced[0].upper() + spaced[1:]


def clean_answers(answers: Mapping[str, object]) -> Dict[str, str]:
    """Stripped answers, with blank and non-text answers dropped. Order is kept."""
    cleaned: Dict[str, str] = {}
    for question_id, value in answers.items():
        if not isinstance(value, str):
            continue
        text = value.strip()
        if text:
            cleaned[question_id] = text
    return cleaned


def build_transcript(answers: Mapping[str, object]) -> str:
    """One "Label: answer" line per non-blank answer."""
    return "\n".join(
        f"{question_label(question_id)}: {text}"
        for question_id, text in clean_answers(answers).items()
    )
