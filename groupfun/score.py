"""Daily sign-in that earns points, with levels and a ranking, stored in SQLite."""

from __future__ import annotations

import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

LEVELS = (0, 1, 2, 5, 10, 20, 35, 55, 75, 100, 120)
SCORE_MAX = 120
SIGN_IN_MAX = 1
SIGN_IN_BONUS = 1


@dataclass(frozen=True)
class SignIn:
    """A user's sign-in count and when it last changed."""

    uid: int
    count: int
    updated_at: datetime


def _stamp(moment: datetime) -> str:
    return moment.isoformat(sep=" ", timespec="microseconds")


def _parse(text: str) -> datetime:
    return datetime.fromisoformat(text)


class ScoreDB:
    """Scores and sign-in counts keyed by user id."""

    def __init__(self, path: str | Path) -> None:
        self._lock = threading.RLock()
        self._conn = sqlite3.connect(str(path), check_same_thread=False)
        with self._conn:
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS score ("
                "uid INTEGER PRIMARY KEY, score INTEGER NOT NULL DEFAULT 0)"
            )
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS sign_in ("
                "uid INTEGER PRIMARY KEY, count INTEGER NOT NULL DEFAULT 0, "
                "updated_at TEXT NOT NULL)"
            )

    def __enter__(self) -> ScoreDB:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        with self._lock, self._conn:
            yield self._conn

    def get_score(self, uid: int) -> int:
        """The user's score, creating a zero score if there is none."""
        with self._transaction() as conn:
            conn.execute("INSERT OR IGNORE INTO score (uid, score) VALUES (?, 0)", (uid,))
            (score,) = conn.execute(
                "SELECT score FROM score WHERE uid = ?", (uid,)
            ).fetchone()
        return score

    def set_score(self, uid: int, score: int) -> None:
        with self._transaction() as conn:
            conn.execute(
                "INSERT INTO score (uid, score) VALUES (?, ?) "
                "ON CONFLICT(uid) DO UPDATE SET score = excluded.score",
                (uid, score),
            )

    def get_sign_in(self, uid: int) -> SignIn:
        """The user's sign-in record, creating an empty one stamped now if missing."""
        with self._transaction() as conn:
            conn.execute(
                "INSERT OR IGNORE INTO sign_in (uid, count, updated_at) VALUES (?, 0, ?)",
                (uid, _stamp(datetime.now())),
            )
            count, updated_at = conn.execute(
                "SELECT count, updated_at FROM sign_in WHERE uid = ?", (uid,)
            ).fetchone()
        return SignIn(uid, count, _parse(updated_at))

    def set_sign_in_count(self, uid: int, count: int, now: datetime) -> None:
        with self._transaction() as conn:
            conn.execute(
                "INSERT INTO sign_in (uid, count, updated_at) VALUES (?, ?, ?) "
                "ON CONFLICT(uid) DO UPDATE SET count = excluded.count, "
                "updated_at = excluded.updated_at",
                (uid, count, _stamp(now)),
            )

    def top_scores(self, n: int) -> list[tuple[int, int]]:
        """Up to n (uid, score) pairs, highest score first."""
        with self._transaction() as conn:
            return [
                (uid, score)
                for uid, score in conn.execute(
                    "SELECT uid, score FROM score ORDER BY score DESC LIMIT ?", (n,)
                )
            ]


def hour_word(moment: datetime) -> str:
    """Greeting for the time of day."""
    hour = moment.hour
    if 6 <= hour < 12:
        return "早上好"
    if 12 <= hour < 14:
        return "中午好"
    if 14 <= hour < 19:
        return "下午好"
    if 19 <= hour < 24:
        return "晚上好"
    return "凌晨好"


def level_of(score: int) -> int:
    """Level reached by a score; -1 beyond the table."""
    for level, threshold in enumerate(LEVELS):
        if score == threshold:
            return level
        if score < threshold:
            return level - 1
    return -1


def next_level_score(level: int) -> int:
    """Score needed for the level after the given one."""
    if level < len(LEVELS) - 1:
        return LEVELS[level + 1]
    return SCORE_MAX


def sign_in(db: ScoreDB, uid: int, now: datetime) -> tuple[int, bool] | None:
    """Sign the user in; return (new score, whether the cap was hit), or None if done today."""
    record = db.get_sign_in(uid)
    same_day = record.updated_at.date() == now.date()
    if record.count >= SIGN_IN_MAX and same_day:
        return None
    if not same_day:
        db.set_sign_in_count(uid, 0, now)
    db.set_sign_in_count(uid, record.count + 1, now)
    score = db.get_score(uid) + SIGN_IN_BONUS
    capped = score > SCORE_MAX
    if capped:
        score = SCORE_MAX
    db.set_score(uid, score)
    return score, capped