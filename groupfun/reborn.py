"""Random rebirth: a weighted country and gender, or an unlucky end."""

from __future__ import annotations

import bisect
import itertools
import json
import random
from collections.abc import Iterable
from pathlib import Path
from typing import Any

GENDERS = (("男孩子", 50707), ("女孩子", 48292), ("雌雄同体", 1001))
FAILURE_THRESHOLD = 1 << 27


class WeightedChooser:
    """Pick items at random in proportion to integer weights."""

    def __init__(
        self,
        choices: Iterable[tuple[Any, int]],
        rng: random.Random | None = None,
    ) -> None:
        items: list[Any] = []
        weights: list[int] = []
        for item, weight in choices:
            weight = int(weight)
            if weight < 0:
                raise ValueError(f"negative weight for {item!r}")
            if weight == 0:
                continue
            items.append(item)
            weights.append(weight)
        if not items:
            raise ValueError("no choices with positive weight")
        self._items = items
        self._totals = list(itertools.accumulate(weights))
        self._rng = rng if rng is not None else random.Random()

    def pick(self) -> Any:
        point = self._rng.randint(1, self._totals[-1])
        return self._items[bisect.bisect_left(self._totals, point)]


def load_areas(path: str | Path) -> list[tuple[str, float]]:
    """Read the list of areas and their weights from a JSON file."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return [(entry["name"], float(entry["weight"])) for entry in data]


def area_chooser(
    areas: Iterable[tuple[str, float]], rng: random.Random | None = None
) -> WeightedChooser:
    return WeightedChooser(
        ((name, int(weight * 1e9)) for name, weight in areas), rng
    )


def gender_chooser(rng: random.Random | None = None) -> WeightedChooser:
    return WeightedChooser(GENDERS, rng)


def reborn(
    countries: WeightedChooser,
    genders: WeightedChooser,
    rng: random.Random | None = None,
) -> str:
    """Return the text announcing a rebirth attempt."""
    rng = rng if rng is not None else random.Random()
    if rng.getrandbits(31) > FAILURE_THRESHOLD:
        return f"投胎成功！\n您出生在 {countries.pick()}, 是 {genders.pick()}。"
    return "投胎失败！\n您没能活到出生，祝您下次好运！"