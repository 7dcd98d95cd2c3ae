"""Drawing and explaining the major arcana of a tarot deck."""

from __future__ import annotations

import json
import os
import random
from collections.abc import Mapping
from dataclasses import dataclass

IMAGE_BASE = os.environ.get("TAROT_IMAGE_BASE", "https://tarot.example.com/")
MAJOR_ARCANA = 22
MAX_DRAW = 20
COUNT_SUFFIX = "张"

REASONS = ("您抽到的是~\n", "锵锵锵，塔罗牌的预言是~\n", "诶，让我看看您抽到了~\n")
POSITIONS = ("正位", "逆位")


class TarotError(Exception):
    """Raised for a bad draw request or an unknown card."""


@dataclass(frozen=True)
class Card:
    """One card and what it means upright and reversed."""

    name: str
    description: str = ""
    reverse_description: str = ""
    img_url: str = ""


def card_image_url(index: int, reverse: bool) -> str:
    """Image of a major arcana card, upright or reversed."""
    return f"{IMAGE_BASE}MajorArcana{'Reverse' if reverse else ''}/{index}.png"


@dataclass(frozen=True)
class Draw:
    """One drawn card."""

    index: int
    reverse: bool
    name: str
    reason: str

    @property
    def position(self) -> str:
        return POSITIONS[int(self.reverse)]

    @property
    def image_url(self) -> str:
        return card_image_url(self.index, self.reverse)

    @property
    def text(self) -> str:
        return f"{self.reason}{self.position} 的 {self.name}\n"


def load_cards(data: str | bytes) -> dict[str, Card]:
    """Parse the card file: card number to card."""
    raw = json.loads(data)
    cards = {}
    for key, entry in raw.items():
        info = entry.get("info") or {}
        cards[key] = Card(
            name=entry.get("name", ""),
            description=info.get("description", ""),
            reverse_description=info.get("reverseDescription", ""),
            img_url=info.get("imgUrl", ""),
        )
    return cards


def build_info_map(cards: Mapping[str, Card]) -> dict[str, Card]:
    """Cards keyed by the part of their name before any parenthesis."""
    return {card.name.split("(")[0]: card for card in cards.values()}


def parse_count(match: str) -> int:
    """Number of cards asked for, such as "3张"; one when nothing was given."""
    if not match:
        return 1
    digits = match.removesuffix(COUNT_SUFFIX)
    try:
        count = int(digits)
    except ValueError as exc:
        raise TarotError(str(exc)) from exc
    if count <= 0:
        raise TarotError("张数必须为正")
    if count > MAX_DRAW:
        raise TarotError("抽取张数过多")
    return count


def draw(
    cards: Mapping[str, Card], n: int, rng: random.Random | None = None
) -> list[Draw]:
    """Draw n distinct major arcana cards, each upright or reversed."""
    if n <= 0 or n > MAJOR_ARCANA:
        raise TarotError(f"cannot draw {n} cards")
    rng = rng if rng is not None else random.Random()
    drawn: list[Draw] = []
    used: set[int] = set()
    for _ in range(n):
        index = rng.randrange(MAJOR_ARCANA)
        while index in used:
            index = rng.randrange(MAJOR_ARCANA)
        used.add(index)
        reverse = rng.randrange(2) == 1
        card = cards.get(str(index))
        name = card.name if card is not None else ""
        reason = REASONS[rng.randrange(len(REASONS))]
        drawn.append(Draw(index, reverse, name, reason))
    return drawn


def explain(info_map: Mapping[str, Card], name: str) -> tuple[str, str]:
    """Image URL and meaning text of the named card."""
    card = info_map.get(name)
    if card is None:
        raise TarotError(f"没有找到{name}噢~")
    text = (
        f"\n{name}的含义是~"
        f"\n正位:{card.description}"
        f"\n逆位:{card.reverse_description}"
    )
    return IMAGE_BASE + card.img_url, text