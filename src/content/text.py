"""Reading statistics over plain text."""

from __future__ import annotations

import math
import re

WORDS_PER_MINUTE = 200

_SENTENCE_BOUNDARY = re.compile(r"[.!?]+")


def count_words(text: str) -> int:
    return len(text.split()) if text else 0


def reading_time(word_count: int) -> int:
    """Minutes to read ``word_count`` words, rounded up."""
    return math.ceil(word_count / WORDS_PER_MINUTE)


def split_sentences(text: str) -> list[str]:
    """Split on runs of ``.``, ``!`` and ``?``, dropping empty pieces."""
    return [s.strip() for s in _SENTENCE_BOUNDARY.split(text) if s.strip()]


def average_sentence_length(text: str, word_count: int | None = None) -> float:
    """Average words per sentence; 0.0 when there are no sentences."""
    sentences = split_sentences(text)
    if not sentences:
        return 0.0
    words = count_words(text) if word_count is None else word_count
    return words / len(sentences)
