from datetime import datetime, timedelta

import pytest

from groupfun.sleep import (
    SleepDB,
    good_morning_text,
    good_night_text,
    is_evening,
    is_morning,
    split_duration,
)


@pytest.fixture
def db(tmp_path):
    with SleepDB(tmp_path / "manage.db") as database:
        yield database


def test_split_duration():
    assert split_duration(timedelta(hours=2, minutes=3, seconds=4)) == (2, 3, 4)
    assert split_duration(timedelta(0)) == (0, 0, 0)


def test_split_duration_truncates_fraction():
    assert split_duration(timedelta(seconds=5, milliseconds=900)) == (0, 0, 5)


def test_split_duration_negative_truncates_toward_zero():
    assert split_duration(-timedelta(hours=1, minutes=30)) == (-1, -30, 0)


def test_is_morning_bounds():
    assert is_morning(6) and is_morning(12)
    assert not is_morning(5) and not is_morning(13)


def test_is_evening_bounds():
    assert is_evening(21) and is_evening(3) and is_evening(0)
    assert not is_evening(4) and not is_evening(20)


def test_morning_text_without_duration():
    assert good_morning_text(3, timedelta(0)) == "早安成功！你是今天第3个起床的"


def test_night_text_with_duration():
    text = good_night_text(2, timedelta(hours=1, minutes=2, seconds=3))
    assert text == "晚安成功！你的清醒时长为1时2分3秒,你是今天第2个睡觉的"


def test_long_duration_uses_short_text():
    assert good_night_text(4, timedelta(hours=30)) == good_night_text(4, timedelta(0))


def test_first_sleep_has_no_duration(db):
    position, awake = db.sleep(1, 10, datetime(2022, 6, 1, 22, 0))
    assert position == 1
    assert awake == timedelta(0)


def test_sleep_positions_count_tonight(db):
    db.sleep(1, 10, datetime(2022, 6, 1, 22, 0))
    position, _ = db.sleep(1, 11, datetime(2022, 6, 1, 22, 30))
    assert position == 2


def test_sleep_positions_are_per_group(db):
    db.sleep(1, 10, datetime(2022, 6, 1, 22, 0))
    position, _ = db.sleep(2, 11, datetime(2022, 6, 1, 22, 30))
    assert position == 1


def test_get_up_reports_time_asleep(db):
    slept = datetime(2022, 6, 1, 23, 0)
    woke = datetime(2022, 6, 2, 7, 15)
    db.sleep(1, 10, slept)
    position, asleep = db.get_up(1, 10, woke)
    assert asleep == woke - slept
    assert position == 1


def test_after_midnight_counts_from_previous_evening(db):
    db.sleep(1, 10, datetime(2022, 6, 1, 23, 0))
    position, _ = db.sleep(1, 11, datetime(2022, 6, 2, 1, 0))
    assert position == 2