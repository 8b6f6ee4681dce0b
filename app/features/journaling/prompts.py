"""
Instructions sent to the generative text service for a journal entry.

Each summary is its own request with its own output budget. The transcript
is appended to every instruction as-is.
"""

from dataclasses import dataclass

SYSTEM_PROMPT = (
    "You are a supportive and insightful journaling assistant who helps people "
    "reflect on their day with empathy and wisdom."
)


@dataclass(frozen=True)
class SummaryPrompt:
    purpose: str
    instruction: str
    max_tokens: int

    def render(self, transcript: str) -> str:
        return f"{self.instruction}\n\nJournal entries:\n{transcript}"


ONE_LINE = SummaryPrompt(
    purpose="one_line",
    instruction=(
        "Summarize this person's day in a single sentence of no more than 15 words "
        "that captures the essence of how the day went. Respond with the sentence only."
    ),
    max_tokens=60,
)

FOUR_SENTENCE = SummaryPrompt(
    purpose="four_sentence",
    instruction=(
        "Write exactly four sentences about this person's day. The first covers the "
        "main themes, the second how they felt, the third offers encouragement, and "
        "the fourth is a forward-looking note for tomorrow. Respond with the four "
        "sentences only."
    ),
    max_tokens=200,
)

FULL_NARRATIVE = SummaryPrompt(
    purpose="full_narrative",
    instruction=(
        "You are a compassionate journaling assistant. A user has completed their daily "
        "journal with the entries below.\n\n"
        "Please provide:\n"
        "1. A brief, warm summary of their entries\n"
        "2. Thoughtful feedback on their answers, including patterns or themes you notice\n"
        "3. What they could focus on tomorrow, based on the entries\n\n"
        "If an answer is nonsensical or only a single word, say so briefly and do not "
        "give feedback on that answer.\n\n"
        "Keep your response personal, supportive, and between 200 and 300 words."
    ),
    max_tokens=500,
)

CONTENTMENT_SCORE = SummaryPrompt(
    purpose="contentment_score",
    instruction=(
        "Rate how content this person seems today on a scale from 0 to 10 using this rubric:\n"
        "0-2: distressed, overwhelmed or in pain\n"
        "3-4: struggling or low\n"
        "5-6: neutral, mixed or okay\n"
        "7-8: content and positive\n"
        "9-10: very happy and fulfilled\n\n"
        "Respond with ONLY the number (digits only, no words, no punctuation)."
    ),
    max_tokens=5,
)

SUMMARY_PROMPTS = (ONE_LINE, FOUR_SENTENCE, FULL_NARRATIVE, CONTENTMENT_SCORE)
