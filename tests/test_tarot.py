import json
import random

import pytest

from groupfun.tarot import (
    IMAGE_BASE,
    MAJOR_ARCANA,
    POSITIONS,
    REASONS,
    Card,
    TarotError,
    build_info_map,
    card_image_url,
    draw,
    explain,
    load_cards,
    parse_count,
)

SAMPLE = {
    str(i): {
        "name": f"Card{i}(Arcana {i})",
        "info": {
            "description": f"up {i}",
            "reverseDescription": f"down {i}",
            "imgUrl": f"img/{i}.png",
        },
    }
    for i in range(MAJOR_ARCANA)
}


@pytest.fixture
def cards():
    return load_cards(json.dumps(SAMPLE))


def test_load_cards(cards):
    assert len(cards) == MAJOR_ARCANA
    assert cards["3"] == Card("Card3(Arcana 3)", "up 3", "down 3", "img/3.png")


def test_load_cards_from_bytes():
    data = json.dumps({"0": {"name": "Zero"}}).encode("utf-8")
    assert load_cards(data) == {"0": Card("Zero")}


def test_build_info_map(cards):
    info = build_info_map(cards)
    assert set(info) == {f"Card{i}" for i in range(MAJOR_ARCANA)}
    assert info["Card5"] is cards["5"]


@pytest.mark.parametrize("match, expected", [("", 1), ("3张", 3), ("20张", 20)])
def test_parse_count(match, expected):
    assert parse_count(match) == expected


@pytest.mark.parametrize("match", ["0张", "21张", "x张"])
def test_parse_count_rejects(match):
    with pytest.raises(TarotError):
        parse_count(match)


def test_parse_count_messages():
    with pytest.raises(TarotError, match="张数必须为正"):
        parse_count("0张")
    with pytest.raises(TarotError, match="抽取张数过多"):
        parse_count("99张")


def test_draw_distinct(cards):
    drawn = draw(cards, 20, random.Random(0))
    assert len(drawn) == 20
    assert len({d.index for d in drawn}) == 20
    for d in drawn:
        assert 0 <= d.index < MAJOR_ARCANA
        assert d.name == cards[str(d.index)].name
        assert d.reason in REASONS


def test_draw_whole_deck(cards):
    drawn = draw(cards, MAJOR_ARCANA, random.Random(3))
    assert sorted(d.index for d in drawn) == list(range(MAJOR_ARCANA))


def test_draw_single_text(cards):
    (single,) = draw(cards, 1, random.Random(5))
    assert single.text == f"{single.reason}{single.position} 的 {single.name}\n"
    assert single.position == POSITIONS[int(single.reverse)]
    assert single.image_url == card_image_url(single.index, single.reverse)


def test_draw_missing_card_has_empty_name():
    (single,) = draw({}, 1, random.Random(2))
    assert single.name == ""


@pytest.mark.parametrize("n", [0, MAJOR_ARCANA + 1])
def test_draw_rejects_count(cards, n):
    with pytest.raises(TarotError):
        draw(cards, n, random.Random(0))


def test_card_image_url():
    assert card_image_url(3, True) == IMAGE_BASE + "MajorArcanaReverse/3.png"
    assert card_image_url(3, False) == IMAGE_BASE + "MajorArcana/3.png"


def test_explain(cards):
    url, text = explain(build_info_map(cards), "Card7")
    assert url == IMAGE_BASE + "img/7.png"
    assert text == "\nCard7的含义是~\n正位:up 7\n逆位:down 7"


def test_explain_unknown(cards):
    with pytest.raises(TarotError, match="没有找到Nothing噢~"):
        explain(build_info_map(cards), "Nothing")