import io

import pytest
from PIL import Image

from groupfun.wordle import (
    LengthNotEnough,
    Mark,
    TimesRunOut,
    UnknownWord,
    WordleGame,
    load_words,
    word_length,
)

DICTIONARY = ["apple", "grape", "lemon", "melon", "peach", "plums"]


def make_game():
    return WordleGame("apple", DICTIONARY)


def test_correct_guess_wins():
    game = make_game()
    assert game.guess("APPLE") is True
    assert game.record == ["apple"]


def test_wrong_length():
    game = make_game()
    with pytest.raises(LengthNotEnough):
        game.guess("pear")
    assert game.record == []


def test_unknown_word():
    game = make_game()
    with pytest.raises(UnknownWord):
        game.guess("zzzzz")
    assert game.record == []


def test_runs_out_after_length_plus_one():
    game = make_game()
    for _ in range(5):
        assert game.guess("lemon") is False
    with pytest.raises(TimesRunOut):
        game.guess("melon")
    assert len(game.record) == game.attempts


def test_win_on_last_attempt_is_not_run_out():
    game = make_game()
    for _ in range(5):
        game.guess("grape")
    assert game.guess("apple") is True


def test_marks():
    game = make_game()
    marks = game.marks("plums")
    assert marks[0] is Mark.EXIST
    assert marks[4] is Mark.NOTEXIST
    assert game.marks("apple") == [Mark.MATCH] * 5


def test_render_colours_first_cell():
    game = make_game()
    game.guess("apple")
    image = Image.open(io.BytesIO(game.render())).convert("RGBA")
    assert image.getpixel((11, 11)) == Mark.MATCH.color
    empty = Image.open(io.BytesIO(make_game().render())).convert("RGBA")
    assert empty.size == image.size
    assert empty.getpixel((11, 11)) == Mark.UNDONE.color


def test_render_grows_with_length():
    small = Image.open(io.BytesIO(make_game().render()))
    large = Image.open(io.BytesIO(WordleGame("orange", []).render()))
    assert large.size[0] > small.size[0]
    assert large.size[1] > small.size[1]


def test_load_words_sorted():
    words = load_words("pear\napple\n\nfig")
    assert words == sorted(words)
    assert set(words) == {"pear", "apple", "fig"}


def test_word_length():
    assert word_length("") == 5
    assert word_length("七阶") == 7
    with pytest.raises(ValueError):
        word_length("八阶")