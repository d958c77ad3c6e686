"""
Domain service: Message feature extraction.

Pure business logic that turns one chat message into a fixed
MessageFeatureRecord. No framework imports. No IO. No side effects.

Extracts:
    - Word and character counts
    - Question presence and depth (none < simple < moderate < deep)
    - Finance jargon hits
    - Urgency keywords
    - Courtesy/social phrases
    - Response time relative to the previous message in the conversation

Malformed or empty text never raises; it yields a zeroed record.
"""

import math
import re
from datetime import datetime
from typing import Optional

from mode_advisor.domain.engagement.entities import MessageFeatureRecord, QuestionDepth

INTERROGATIVE_WORDS = frozenset(
    {"what", "how", "why", "when", "should", "can", "is", "are", "will", "where", "who"}
)

TECHNICAL_TERMS = (
    "sharpe",
    "beta",
    "alpha",
    "volatility",
    "correlation",
    "drawdown",
    "rebalance",
    "rebalancing",
    "diversification",
    "derivative",
    "derivatives",
    "hedge",
    "hedging",
    "liquidity",
    "valuation",
    "dividend",
    "yield",
    "etf",
    "p/e ratio",
    "eps",
    "ebitda",
    "dcf",
    "wacc",
    "cagr",
    "irr",
    "rsi",
    "macd",
    "moving average",
    "market cap",
    "arbitrage",
    "allocation",
    "options",
    "futures",
    "fibonacci",
)

URGENCY_KEYWORDS = (
    "now",
    "urgent",
    "asap",
    "immediately",
    "quick",
    "quickly",
    "fast",
    "hurry",
)

SOCIAL_PHRASES = (
    "thanks",
    "thank you",
    "appreciate",
    "great",
    "awesome",
    "nice",
    "cool",
    "hello",
    "hi",
    "hey",
    "good morning",
    "good afternoon",
    "how are you",
    "i think",
    "i feel",
)

SIMPLE_QUESTION_MAX_WORDS = 8
MODERATE_QUESTION_MAX_WORDS = 25


def _phrase_pattern(phrases: tuple[str, ...]) -> re.Pattern[str]:
    """Compile a whole-phrase alternation, longest phrase first."""
    alternation = "|".join(
        re.escape(p) for p in sorted(phrases, key=len, reverse=True)
    )
    return re.compile(rf"(?<![\w/])(?:{alternation})(?![\w/])")


_TECHNICAL_RE = _phrase_pattern(TECHNICAL_TERMS)
_URGENCY_RE = _phrase_pattern(URGENCY_KEYWORDS)
_SOCIAL_RE = _phrase_pattern(SOCIAL_PHRASES)
_FIRST_WORD_RE = re.compile(r"^[^a-z]*([a-z'\u2019]+)")


class MessageFeatureExtractor:
    """Domain service computing feature records from raw message text.

    Stateless: the same inputs always produce the same record.
    """

    def extract(
        self,
        conversation_id: str,
        text: object,
        created_at: datetime,
        previous_message_at: Optional[datetime] = None,
    ) -> MessageFeatureRecord:
        """Build the feature record of a single message.

        Args:
            conversation_id: Conversation the message belongs to.
            text: Raw message text. Anything but a non-blank string degrades
                to a zeroed record.
            created_at: Creation time of this message.
            previous_message_at: Creation time of the previous message in the
                same conversation, or None for the first message.

        Returns:
            The message's feature record.
        """
        response_time = _response_time_seconds(created_at, previous_message_at)

        if not isinstance(text, str) or not text.strip():
            return MessageFeatureRecord(
                conversation_id=conversation_id,
                created_at=created_at,
                response_time_seconds=response_time,
            )

        lowered = text.lower()
        word_count = len(text.split())
        technical_term_count = len(_TECHNICAL_RE.findall(lowered))
        has_question = _has_question(lowered)

        return MessageFeatureRecord(
            conversation_id=conversation_id,
            created_at=created_at,
            word_count=word_count,
            character_count=len(text),
            has_question=has_question,
            question_depth=_question_depth(
                has_question, word_count, technical_term_count, lowered.count("?")
            ),
            technical_term_count=technical_term_count,
            urgency_signals=frozenset(_URGENCY_RE.findall(lowered)),
            response_time_seconds=response_time,
            social_signal_count=len(_SOCIAL_RE.findall(lowered)),
        )


def _has_question(lowered: str) -> bool:
    if "?" in lowered:
        return True
    match = _FIRST_WORD_RE.match(lowered.lstrip())
    if not match:
        return False
    word = match.group(1).replace("’", "'")
    if word.endswith("'s"):
        word = word[:-2]
    return word.replace("'", "") in INTERROGATIVE_WORDS


def _question_depth(
    has_question: bool, word_count: int, technical_term_count: int, question_marks: int
) -> QuestionDepth:
    if not has_question:
        return QuestionDepth.NONE
    if (
        word_count > MODERATE_QUESTION_MAX_WORDS
        or technical_term_count >= 2
        or question_marks > 1
    ):
        return QuestionDepth.DEEP
    if word_count > SIMPLE_QUESTION_MAX_WORDS or technical_term_count == 1:
        return QuestionDepth.MODERATE
    return QuestionDepth.SIMPLE


def _response_time_seconds(
    created_at: datetime, previous_message_at: Optional[datetime]
) -> Optional[int]:
    """Whole seconds since the previous message; never negative."""
    if previous_message_at is None:
        return None
    try:
        elapsed = (created_at - previous_message_at).total_seconds()
    except TypeError:
        # naive vs aware timestamps
        return None
    return max(0, math.floor(elapsed))
