"""Counting the hot words of a group's recent chat."""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Iterable, Mapping

MAX_MESSAGES = 10000
DEFAULT_MESSAGES = 1000
TOP_WORDS = 20

_CHINESE = re.compile(r"^[一-龥]+$")


def load_stopwords(text: str) -> list[str]:
    """Split the stopword file into a sorted list of lines."""
    return sorted(text.replace("\r", "").split("\n"))


def is_chinese_word(text: str) -> bool:
    """Whether text is made only of common CJK ideographs."""
    return _CHINESE.match(text) is not None


def count_words(slices: Iterable[str], stopwords: Iterable[str]) -> Counter[str]:
    """Count the Chinese word slices that are not stopwords."""
    stop = set(stopwords)
    counts: Counter[str] = Counter()
    for piece in slices:
        word = piece.strip()
        if is_chinese_word(word) and word not in stop:
            counts[word] += 1
    return counts


def rank_by_word_count(frequencies: Mapping[str, int]) -> list[tuple[str, int]]:
    """Words with their counts, most frequent first."""
    return sorted(frequencies.items(), key=lambda pair: (-pair[1], pair[0]))


def clamp_message_count(count: int) -> int:
    """Messages to read: at most 10000, and 1000 when none was asked for."""
    if count > MAX_MESSAGES:
        return MAX_MESSAGES
    if count == 0:
        return DEFAULT_MESSAGES
    return count