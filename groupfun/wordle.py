"""Word guessing game with coloured feedback drawn as an image."""

from __future__ import annotations

import enum
import io
from collections.abc import Iterable

from PIL import Image, ImageDraw, ImageFont

SIDE = 20
SPACE = 10
WHITE = (255, 255, 255, 255)

CLASSES = {"": 5, "五阶": 5, "六阶": 6, "七阶": 7}


class WordleError(Exception):
    """Base error for a rejected guess."""


class LengthNotEnough(WordleError):
    """The guess has the wrong length."""

    def __init__(self) -> None:
        super().__init__("length not enough")


class UnknownWord(WordleError):
    """The guess is not in the dictionary."""

    def __init__(self) -> None:
        super().__init__("unknown word")


class TimesRunOut(WordleError):
    """The last allowed guess was used without success."""

    def __init__(self) -> None:
        super().__init__("times run out")


class Mark(enum.Enum):
    """Feedback for one letter, with the colour it is drawn in."""

    MATCH = (125, 166, 108, 255)
    EXIST = (199, 183, 96, 255)
    NOTEXIST = (123, 123, 123, 255)
    UNDONE = (219, 219, 219, 255)

    @property
    def color(self) -> tuple[int, int, int, int]:
        return self.value


class WordleGame:
    """One game: a target word and the guesses made so far."""

    def __init__(self, target: str, dictionary: Iterable[str]) -> None:
        self.target = target
        self.length = len(target)
        self.attempts = self.length + 1
        self._dictionary = frozenset(dictionary)
        self.record: list[str] = []

    def guess(self, word: str) -> bool:
        """Record a guess; return True when it is the target."""
        word = word.lower()
        win = word == self.target
        if not win:
            if len(word) != self.length:
                raise LengthNotEnough()
            if word not in self._dictionary:
                raise UnknownWord()
        self.record.append(word)
        if not win and len(self.record) >= self.attempts:
            raise TimesRunOut()
        return win

    def marks(self, word: str) -> list[Mark]:
        """Per-letter feedback of a word against the target."""
        result = []
        for index, char in enumerate(word):
            if index < self.length and char == self.target[index]:
                result.append(Mark.MATCH)
            elif char in self.target:
                result.append(Mark.EXIST)
            else:
                result.append(Mark.NOTEXIST)
        return result

    def render(self) -> bytes:
        """The board so far as PNG bytes."""
        step = SIDE + 4
        width = step * self.length + SPACE * 2 - 4
        height = step * self.attempts + SPACE * 2 - 4
        image = Image.new("RGBA", (width, height), WHITE)
        draw = ImageDraw.Draw(image)
        font = ImageFont.load_default()
        for row in range(self.attempts):
            if row < len(self.record):
                word = self.record[row]
                for col, (char, mark) in enumerate(zip(word, self.marks(word))):
                    x = SPACE + col * step
                    y = SPACE + row * step
                    draw.rectangle((x, y, x + SIDE - 1, y + SIDE - 1), fill=mark.color)
                    draw.text((x + 7, y + 4), char.upper(), fill=WHITE, font=font)
            else:
                for col in range(self.length):
                    x = SPACE + col * step + 1
                    y = SPACE + row * step + 1
                    draw.rectangle(
                        (x, y, x + SIDE - 3, y + SIDE - 3),
                        outline=Mark.UNDONE.color,
                        width=1,
                    )
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()


def load_words(text: str) -> list[str]:
    """Split a word list into sorted non-empty lines."""
    return sorted(line for line in text.split("\n") if line)


def word_length(name: str) -> int:
    """Word length for a difficulty name such as 六阶."""
    try:
        return CLASSES[name]
    except KeyError:
        raise ValueError(f"unknown difficulty {name!r}") from None