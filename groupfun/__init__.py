"""Game and pastime logic for group chat bots: pairings, scores, sleep, wordle, tarot and more."""

__version__ = "0.1.0"
__all__ = [
    "registry",
    "marriage",
    "reborn",
    "wtf",
    "runcode",
    "wordle",
    "score",
    "sleep",
    "vtb",
    "tarot",
    "ymgal",
    "word_count",
]