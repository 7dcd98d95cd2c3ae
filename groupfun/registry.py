"""Daily marriage registry for group chats, stored in SQLite."""

from __future__ import annotations

import enum
import sqlite3
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path

DATE_FORMAT = "%Y/%m/%d"
NAME_WIDTH_LIMIT = 350
ELLIPSIS = "......"
ALL_GROUPS = "ALL"


class RegistryError(Exception):
    """Raised when the registry database fails."""


class Role(enum.IntEnum):
    """Where a user stands in today's registry of a group."""

    WIFE = 0
    HUSBAND = 1
    SINGLE = 3


@dataclass(frozen=True)
class MarriageRecord:
    """One registered couple; a target of 0 marks a chosen single."""

    user: int
    target: int
    username: str
    targetname: str
    updatetime: str

    @property
    def is_alone(self) -> bool:
        return self.target == 0


def _format_day(day: date) -> str:
    return day.strftime(DATE_FORMAT)


def _table(gid: int | str) -> str:
    return f'"{int(gid)}"'


class MarriageRegistry:
    """Per-group couples plus the day each group was last refreshed."""

    def __init__(self, path: str | Path) -> None:
        self._lock = threading.RLock()
        try:
            self._conn = sqlite3.connect(str(path), check_same_thread=False)
            with self._conn:
                self._conn.execute(
                    "CREATE TABLE IF NOT EXISTS updateinfo ("
                    "gid INTEGER PRIMARY KEY, updatetime TEXT NOT NULL)"
                )
        except sqlite3.Error as exc:
            raise RegistryError(str(exc)) from exc

    def __enter__(self) -> MarriageRegistry:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        with self._lock:
            try:
                with self._conn:
                    yield self._conn
            except sqlite3.Error as exc:
                raise RegistryError(str(exc)) from exc

    @staticmethod
    def _ensure_group(conn: sqlite3.Connection, gid: int) -> None:
        conn.execute(
            f"CREATE TABLE IF NOT EXISTS {_table(gid)} ("
            "user INTEGER PRIMARY KEY, target INTEGER NOT NULL, "
            "username TEXT NOT NULL, targetname TEXT NOT NULL, "
            "updatetime TEXT NOT NULL)"
        )

    @staticmethod
    def _record(row: tuple) -> MarriageRecord:
        return MarriageRecord(*row)

    def check_update(self, gid: int, today: date) -> date:
        """Return the day the group was last refreshed, recording today if unknown."""
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT updatetime FROM updateinfo WHERE gid = ?", (gid,)
            ).fetchone()
            if row is None:
                conn.execute(
                    "INSERT INTO updateinfo (gid, updatetime) VALUES (?, ?)",
                    (gid, _format_day(today)),
                )
                return today
        return datetime.strptime(row[0], DATE_FORMAT).date()

    def reset(self, gid: int | str, today: date) -> None:
        """Clear one group's couples, or every group's when gid is "ALL"."""
        with self._transaction() as conn:
            if gid == ALL_GROUPS:
                names = [
                    name
                    for (name,) in conn.execute(
                        "SELECT name FROM sqlite_master WHERE type = 'table'"
                    )
                ]
                groups = [int(name) for name in names if name.lstrip("-").isdigit()]
            else:
                groups = [int(gid)]
            for group in groups:
                conn.execute(f"DROP TABLE IF EXISTS {_table(group)}")
                conn.execute(
                    "INSERT OR REPLACE INTO updateinfo (gid, updatetime) VALUES (?, ?)",
                    (group, _format_day(today)),
                )

    def divorce(self, gid: int, target: int) -> int:
        """Remove couples whose target is given; return how many went."""
        with self._transaction() as conn:
            self._ensure_group(conn, gid)
            cursor = conn.execute(
                f"DELETE FROM {_table(gid)} WHERE target = ?", (target,)
            )
            return cursor.rowcount

    def remarry(
        self,
        gid: int,
        uid: int,
        target: int,
        username: str,
        targetname: str,
        today: date,
    ) -> None:
        """Register uid with target unless both already head a couple."""
        with self._transaction() as conn:
            self._ensure_group(conn, gid)
            heads = {
                user
                for (user,) in conn.execute(
                    f"SELECT user FROM {_table(gid)} WHERE user IN (?, ?)",
                    (uid, target),
                )
            }
            if uid in heads and target in heads:
                return
            conn.execute(
                f"INSERT OR REPLACE INTO {_table(gid)} "
                "(user, target, username, targetname, updatetime) VALUES (?, ?, ?, ?, ?)",
                (uid, target, username, targetname, _format_day(today)),
            )

    def roster(self, gid: int) -> list[MarriageRecord]:
        """Every couple of the group, ordered by user."""
        with self._transaction() as conn:
            self._ensure_group(conn, gid)
            rows = conn.execute(
                "SELECT user, target, username, targetname, updatetime "
                f"FROM {_table(gid)} ORDER BY user"
            ).fetchall()
        return [self._record(row) for row in rows]

    def lookup(self, gid: int, uid: int) -> tuple[MarriageRecord | None, Role]:
        """Find uid's couple and whether uid heads it or is its target."""
        with self._transaction() as conn:
            self._ensure_group(conn, gid)
            columns = "user, target, username, targetname, updatetime"
            row = conn.execute(
                f"SELECT {columns} FROM {_table(gid)} WHERE user = ?", (uid,)
            ).fetchone()
            if row is not None:
                return self._record(row), Role.HUSBAND
            row = conn.execute(
                f"SELECT {columns} FROM {_table(gid)} WHERE target = ? ORDER BY rowid",
                (uid,),
            ).fetchone()
            if row is not None:
                return self._record(row), Role.WIFE
        return None, Role.SINGLE

    def register(
        self,
        gid: int,
        uid: int,
        target: int,
        username: str,
        targetname: str,
        today: date,
    ) -> None:
        """Record a new couple for today."""
        with self._transaction() as conn:
            self._ensure_group(conn, gid)
            conn.execute(
                f"INSERT OR REPLACE INTO {_table(gid)} "
                "(user, target, username, targetname, updatetime) VALUES (?, ?, ?, ?, ?)",
                (uid, target, username, targetname, _format_day(today)),
            )


def truncate_name(name: str, measure: Callable[[str], float]) -> str:
    """Shorten a name whose drawn width would pass the column limit."""
    width = 0
    last_fitting = 0
    for index, char in enumerate(name):
        width += int(measure(char))
        if width > NAME_WIDTH_LIMIT:
            break
        last_fitting = index
    if width > NAME_WIDTH_LIMIT:
        return name[: max(0, last_fitting - 1)] + ELLIPSIS
    return name