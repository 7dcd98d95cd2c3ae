"""Good-morning and good-night tracking per group, stored in SQLite."""

from __future__ import annotations

import sqlite3
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path

_NS_PER_SECOND = 1_000_000_000
_NS_PER_MINUTE = 60 * _NS_PER_SECOND
_NS_PER_HOUR = 60 * _NS_PER_MINUTE


def _stamp(moment: datetime) -> str:
    return moment.isoformat(sep=" ", timespec="microseconds")


def _truncate(moment: datetime, hour: int) -> datetime:
    return moment - timedelta(
        hours=moment.hour - hour, minutes=moment.minute, seconds=moment.second
    )


def _evening_start(now: datetime) -> datetime:
    if now.hour >= 21:
        return _truncate(now, 21)
    if now.hour <= 3:
        return _truncate(now, -3)
    return datetime.min


class SleepDB:
    """Last sleep or wake time of each user in each group."""

    def __init__(self, path: str | Path) -> None:
        self._lock = threading.RLock()
        self._conn = sqlite3.connect(str(path), check_same_thread=False)
        with self._conn:
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS sleep_manage ("
                "id INTEGER PRIMARY KEY AUTOINCREMENT, group_id INTEGER NOT NULL, "
                "user_id INTEGER NOT NULL, sleep_time TEXT NOT NULL)"
            )

    def __enter__(self) -> SleepDB:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def _touch(
        self, gid: int, uid: int, now: datetime, start: datetime
    ) -> tuple[int, timedelta]:
        elapsed = timedelta(0)
        with self._lock, self._conn as conn:
            row = conn.execute(
                "SELECT sleep_time FROM sleep_manage WHERE group_id = ? AND user_id = ? "
                "ORDER BY id LIMIT 1",
                (gid, uid),
            ).fetchone()
            if row is None:
                conn.execute(
                    "INSERT INTO sleep_manage (group_id, user_id, sleep_time) "
                    "VALUES (?, ?, ?)",
                    (gid, uid, _stamp(now)),
                )
            else:
                elapsed = now - datetime.fromisoformat(row[0])
                conn.execute(
                    "UPDATE sleep_manage SET sleep_time = ? "
                    "WHERE group_id = ? AND user_id = ?",
                    (_stamp(now), gid, uid),
                )
            (position,) = conn.execute(
                "SELECT COUNT(*) FROM sleep_manage WHERE group_id = ? "
                "AND sleep_time <= ? AND sleep_time >= ?",
                (gid, _stamp(now), _stamp(start)),
            ).fetchone()
        return position, elapsed

    def sleep(self, gid: int, uid: int, now: datetime) -> tuple[int, timedelta]:
        """Record going to sleep; return tonight's position and time awake."""
        return self._touch(gid, uid, now, _evening_start(now))

    def get_up(self, gid: int, uid: int, now: datetime) -> tuple[int, timedelta]:
        """Record waking up; return this morning's position and time asleep."""
        return self._touch(gid, uid, now, _truncate(now, 6))


def _div(value: int, unit: int) -> int:
    quotient = abs(value) // unit
    return quotient if value >= 0 else -quotient


def split_duration(delta: timedelta) -> tuple[int, int, int]:
    """Whole hours, minutes and seconds of a duration, truncated toward zero."""
    ns = (delta // timedelta(microseconds=1)) * 1000
    hour = _div(ns, _NS_PER_HOUR)
    minute = _div(ns - hour * _NS_PER_HOUR, _NS_PER_MINUTE)
    second = _div(ns - hour * _NS_PER_HOUR - minute * _NS_PER_MINUTE, _NS_PER_SECOND)
    return hour, minute, second


def is_morning(hour: int) -> bool:
    """Good mornings count from 6 to 12 o'clock."""
    return 6 <= hour <= 12


def is_evening(hour: int) -> bool:
    """Good nights count from 21 o'clock to 3 in the morning."""
    return hour >= 21 or hour <= 3


@dataclass(frozen=True)
class _Greeting:
    done: str
    span: str
    rank: str

    def text(self, position: int, duration: timedelta) -> str:
        hour, minute, second = split_duration(duration)
        if (hour == 0 and minute == 0 and second == 0) or hour >= 24:
            return f"{self.done}你是今天第{position}个{self.rank}的"
        return (
            f"{self.done}你的{self.span}时长为{hour}时{minute}分{second}秒,"
            f"你是今天第{position}个{self.rank}的"
        )


_MORNING = _Greeting("早安成功！", "睡眠", "起床")
_NIGHT = _Greeting("晚安成功！", "清醒", "睡觉")


def good_morning_text(position: int, duration: timedelta) -> str:
    return _MORNING.text(position, duration)


def good_night_text(position: int, duration: timedelta) -> str:
    return _NIGHT.text(position, duration)