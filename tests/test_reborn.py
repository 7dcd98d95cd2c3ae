import json
import random

import pytest

from groupfun.reborn import (
    WeightedChooser,
    area_chooser,
    gender_chooser,
    load_areas,
    reborn,
)


class FixedBits:
    def __init__(self, value):
        self.value = value

    def getrandbits(self, bits):
        return self.value


def test_single_choice_always_picked():
    chooser = WeightedChooser([("only", 3)], random.Random(1))
    assert {chooser.pick() for _ in range(20)} == {"only"}


def test_zero_weight_never_picked():
    chooser = WeightedChooser([("a", 0), ("b", 5)], random.Random(2))
    assert {chooser.pick() for _ in range(50)} == {"b"}


def test_no_positive_weight_raises():
    with pytest.raises(ValueError):
        WeightedChooser([("a", 0)])


def test_negative_weight_raises():
    with pytest.raises(ValueError):
        WeightedChooser([("a", -1), ("b", 2)])


def test_picks_cover_all_items():
    chooser = WeightedChooser([("a", 1), ("b", 1)], random.Random(3))
    assert {chooser.pick() for _ in range(200)} == {"a", "b"}


def test_load_areas(tmp_path):
    path = tmp_path / "rate.json"
    path.write_text(
        json.dumps([{"name": "A", "weight": 0.5}, {"name": "B", "weight": 0.25}]),
        encoding="utf-8",
    )
    assert load_areas(path) == [("A", 0.5), ("B", 0.25)]


def test_area_chooser_tiny_weights():
    chooser = area_chooser([("A", 1e-6), ("B", 0.0)], random.Random(4))
    assert chooser.pick() == "A"


def test_gender_chooser_values():
    chooser = gender_chooser(random.Random(5))
    picks = {chooser.pick() for _ in range(300)}
    assert picks <= {"男孩子", "女孩子", "雌雄同体"}
    assert "男孩子" in picks


def test_reborn_success_text():
    countries = WeightedChooser([("中国", 1)])
    genders = WeightedChooser([("男孩子", 1)])
    text = reborn(countries, genders, FixedBits((1 << 27) + 1))
    assert text == "投胎成功！\n您出生在 中国, 是 男孩子。"


def test_reborn_failure_text():
    countries = WeightedChooser([("中国", 1)])
    genders = WeightedChooser([("男孩子", 1)])
    text = reborn(countries, genders, FixedBits(1 << 27))
    assert text == "投胎失败！\n您没能活到出生，祝您下次好运！"