"""VTuber voice quotes: three levels of categories kept in SQLite."""

from __future__ import annotations

import json
import random
import re
import sqlite3
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import quote_plus

import requests

VTB_LIST_URL = "https://vtbkeyboard.moe/api/get_vtb_list"
VTB_PAGE_URL = "https://vtbkeyboard.moe/api/get_vtb_page"
TIMEOUT = 30

USER_AGENTS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/96.0.4664.110 Safari/537.36",
    "Mozilla/5.0 (Windows NT 6.1; Win64; x64; rv:87.0) Gecko/20100101 Firefox/87.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/15.4 Safari/605.1.15",
    "Mozilla/5.0 (X11; Linux x86_64; rv:100.0) Gecko/20100101 Firefox/100.0",
)

FIRST_MENU_HEADER = "请选择一个vtb并发送序号:\n"
SECOND_MENU_HEADER = "请选择一个语录类别并发送序号:\n"
THIRD_MENU_HEADER = "请选择一个语录并发送序号:\n"

_UNICODE_ESCAPE = re.compile(r"\\u([0-9a-fA-F]{4})")
_LAST_SEGMENT = re.compile(r".*/(.*)")


@dataclass(frozen=True)
class FirstCategory:
    """A VTuber."""

    index: int
    name: str
    uid: str
    description: str
    icon_path: str


@dataclass(frozen=True)
class SecondCategory:
    """A category of quotes of one VTuber."""

    index: int
    first_uid: str
    name: str
    author: str
    description: str


@dataclass(frozen=True)
class ThirdCategory:
    """A single voice quote."""

    index: int
    second_index: int
    first_uid: str
    name: str
    path: str
    author: str
    description: str


_FIRST_COLUMNS = (
    "first_category_index, first_category_name, first_category_uid, "
    "first_category_description, first_category_icon_path"
)
_SECOND_COLUMNS = (
    "second_category_index, first_category_uid, second_category_name, "
    "second_category_author, second_category_description"
)
_THIRD_COLUMNS = (
    "third_category_index, second_category_index, first_category_uid, "
    "third_category_name, third_category_path, third_category_author, "
    "third_category_description"
)


def _get(obj: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(obj, dict):
            return None
        obj = obj.get(key)
    return obj


def _text(obj: Any, *keys: str) -> str:
    value = _get(obj, *keys)
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    return json.dumps(value, ensure_ascii=False)


def _list(obj: Any, *keys: str) -> list:
    value = _get(obj, *keys)
    return value if isinstance(value, list) else []


class VtbDB:
    """Categories and quotes of VTubers."""

    def __init__(self, path: str | Path) -> None:
        self._lock = threading.RLock()
        self._conn = sqlite3.connect(str(path), check_same_thread=False)
        with self._conn:
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS first_category ("
                "id INTEGER PRIMARY KEY AUTOINCREMENT, "
                "first_category_index INTEGER NOT NULL DEFAULT 0, "
                "first_category_name TEXT NOT NULL DEFAULT '', "
                "first_category_uid TEXT NOT NULL DEFAULT '', "
                "first_category_description TEXT NOT NULL DEFAULT '', "
                "first_category_icon_path TEXT NOT NULL DEFAULT '')"
            )
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS second_category ("
                "id INTEGER PRIMARY KEY AUTOINCREMENT, "
                "second_category_index INTEGER NOT NULL DEFAULT 0, "
                "first_category_uid TEXT NOT NULL DEFAULT '', "
                "second_category_name TEXT NOT NULL DEFAULT '', "
                "second_category_author TEXT NOT NULL DEFAULT '', "
                "second_category_description TEXT NOT NULL DEFAULT '')"
            )
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS third_category ("
                "id INTEGER PRIMARY KEY AUTOINCREMENT, "
                "third_category_index INTEGER NOT NULL DEFAULT 0, "
                "second_category_index INTEGER NOT NULL DEFAULT 0, "
                "first_category_uid TEXT NOT NULL DEFAULT '', "
                "third_category_name TEXT NOT NULL DEFAULT '', "
                "third_category_path TEXT NOT NULL DEFAULT '', "
                "third_category_author TEXT NOT NULL DEFAULT '', "
                "third_category_description TEXT NOT NULL DEFAULT '')"
            )

    def __enter__(self) -> VtbDB:
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

    @staticmethod
    def _first_uid(conn: sqlite3.Connection, first_index: int) -> str:
        row = conn.execute(
            "SELECT first_category_uid FROM first_category "
            "WHERE first_category_index = ? ORDER BY id LIMIT 1",
            (first_index,),
        ).fetchone()
        return row[0] if row is not None else ""

    def first_category_menu(self) -> str:
        """Numbered list of every VTuber."""
        with self._transaction() as conn:
            rows = conn.execute(
                "SELECT first_category_index, first_category_name "
                "FROM first_category ORDER BY id"
            ).fetchall()
        return FIRST_MENU_HEADER + "".join(f"{index}. {name}\n" for index, name in rows)

    def second_category_menu(self, first_index: int) -> str:
        """Numbered list of one VTuber's categories; empty when there are none."""
        with self._transaction() as conn:
            uid = self._first_uid(conn, first_index)
            rows = conn.execute(
                "SELECT second_category_index, second_category_name "
                "FROM second_category WHERE first_category_uid = ? ORDER BY id",
                (uid,),
            ).fetchall()
        if not rows:
            return ""
        return SECOND_MENU_HEADER + "".join(f"{index}. {name}\n" for index, name in rows)

    def third_category_menu(self, first_index: int, second_index: int) -> str:
        """Numbered list of the quotes in one category; empty when there are none."""
        with self._transaction() as conn:
            uid = self._first_uid(conn, first_index)
            rows = conn.execute(
                "SELECT third_category_index, third_category_name FROM third_category "
                "WHERE first_category_uid = ? AND second_category_index = ? ORDER BY id",
                (uid, second_index),
            ).fetchall()
        if not rows:
            return ""
        return THIRD_MENU_HEADER + "".join(f"{index}. {name}\n" for index, name in rows)

    def third_category(
        self, first_index: int, second_index: int, third_index: int
    ) -> ThirdCategory | None:
        """The quote at the given three indices, or None."""
        with self._transaction() as conn:
            uid = self._first_uid(conn, first_index)
            row = conn.execute(
                f"SELECT {_THIRD_COLUMNS} FROM third_category "
                "WHERE first_category_uid = ? AND second_category_index = ? "
                "AND third_category_index = ? ORDER BY id LIMIT 1",
                (uid, second_index, third_index),
            ).fetchone()
        return ThirdCategory(*row) if row is not None else None

    def random_vtb(self, rng: random.Random | None = None) -> ThirdCategory | None:
        """A quote chosen at random, or None when there are none."""
        rng = rng if rng is not None else random.Random()
        with self._transaction() as conn:
            (count,) = conn.execute("SELECT COUNT(*) FROM third_category").fetchone()
            if count == 0:
                return None
            row = conn.execute(
                f"SELECT {_THIRD_COLUMNS} FROM third_category "
                "ORDER BY id LIMIT 1 OFFSET ?",
                (rng.randrange(count),),
            ).fetchone()
        return ThirdCategory(*row)

    def first_category_by_uid(self, uid: str) -> FirstCategory | None:
        with self._transaction() as conn:
            row = conn.execute(
                f"SELECT {_FIRST_COLUMNS} FROM first_category "
                "WHERE first_category_uid = ? ORDER BY id LIMIT 1",
                (uid,),
            ).fetchone()
        return FirstCategory(*row) if row is not None else None

    def store_vtb_list(self, items: Iterable[Any]) -> list[str]:
        """Store the VTubers of a fetched list; return their uids in order."""
        uids = []
        with self._transaction() as conn:
            for index, item in enumerate(items):
                uid = _text(item, "uid")
                values = (
                    index,
                    _text(item, "name"),
                    _text(item, "description"),
                    _text(item, "icon_path"),
                )
                exists = conn.execute(
                    "SELECT 1 FROM first_category WHERE first_category_uid = ?", (uid,)
                ).fetchone()
                if exists is None:
                    conn.execute(
                        "INSERT INTO first_category (first_category_index, "
                        "first_category_name, first_category_description, "
                        "first_category_icon_path, first_category_uid) "
                        "VALUES (?, ?, ?, ?, ?)",
                        (*values, uid),
                    )
                else:
                    conn.execute(
                        "UPDATE first_category SET first_category_index = ?, "
                        "first_category_name = ?, first_category_description = ?, "
                        "first_category_icon_path = ? WHERE first_category_uid = ?",
                        (*values, uid),
                    )
                uids.append(uid)
        return uids

    def store_vtb(self, uid: str, page: Any) -> None:
        """Store the categories and quotes of one VTuber's fetched page."""
        with self._transaction() as conn:
            for second_index, second in enumerate(_list(page, "data", "voices")):
                second_values = (
                    _text(second, "categoryName"),
                    _text(second, "author"),
                    _text(second, "categoryDescription", "zh-CN"),
                )
                key = (uid, second_index)
                exists = conn.execute(
                    "SELECT 1 FROM second_category WHERE first_category_uid = ? "
                    "AND second_category_index = ?",
                    key,
                ).fetchone()
                if exists is None:
                    conn.execute(
                        "INSERT INTO second_category (second_category_name, "
                        "second_category_author, second_category_description, "
                        "first_category_uid, second_category_index) "
                        "VALUES (?, ?, ?, ?, ?)",
                        (*second_values, *key),
                    )
                else:
                    conn.execute(
                        "UPDATE second_category SET second_category_name = ?, "
                        "second_category_author = ?, second_category_description = ? "
                        "WHERE first_category_uid = ? AND second_category_index = ?",
                        (*second_values, *key),
                    )
                for third_index, third in enumerate(_list(second, "voiceList")):
                    third_values = (
                        _text(third, "name"),
                        _text(third, "description", "zh-CN"),
                        _text(third, "path"),
                        _text(third, "author"),
                    )
                    third_key = (uid, second_index, third_index)
                    exists = conn.execute(
                        "SELECT 1 FROM third_category WHERE first_category_uid = ? "
                        "AND second_category_index = ? AND third_category_index = ?",
                        third_key,
                    ).fetchone()
                    if exists is None:
                        conn.execute(
                            "INSERT INTO third_category (third_category_name, "
                            "third_category_description, third_category_path, "
                            "third_category_author, first_category_uid, "
                            "second_category_index, third_category_index) "
                            "VALUES (?, ?, ?, ?, ?, ?, ?)",
                            (*third_values, *third_key),
                        )
                    else:
                        conn.execute(
                            "UPDATE third_category SET third_category_name = ?, "
                            "third_category_description = ?, third_category_path = ?, "
                            "third_category_author = ? WHERE first_category_uid = ? "
                            "AND second_category_index = ? AND third_category_index = ?",
                            (*third_values, *third_key),
                        )


def _decode_unicode_escapes(text: str) -> str:
    return _UNICODE_ESCAPE.sub(lambda m: chr(int(m.group(1), 16)), text)


def _fetch_json(url: str, params: dict[str, str] | None = None) -> Any:
    response = requests.get(
        url,
        params=params,
        headers={"User-Agent": random.choice(USER_AGENTS)},
        timeout=TIMEOUT,
    )
    body = response.content.decode("utf-8", errors="replace")
    return json.loads(_decode_unicode_escapes(body), strict=False)


def fetch_vtb_list() -> Any:
    """Download the list of VTubers."""
    return _fetch_json(VTB_LIST_URL)


def fetch_vtb_page(uid: str) -> Any:
    """Download the quote page of one VTuber."""
    return _fetch_json(VTB_PAGE_URL, {"uid": uid})


def escape_record_url(url: str) -> str:
    """Percent-encode the file name at the end of a record URL."""
    match = _LAST_SEGMENT.match(url)
    if match is None:
        return url
    segment = match.group(1)
    return url.replace(segment, quote_plus(segment)).replace("+", "%20")