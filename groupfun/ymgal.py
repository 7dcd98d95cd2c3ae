"""Galgame CG and sticker sets scraped from a picture site, kept in SQLite."""

from __future__ import annotations

import random
import re
import sqlite3
import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import quote_plus

import lxml.html
import requests

WEB_URL = "https://www.ymgal.com"
CG_TYPE = "Gal CG"
EMOTICON_TYPE = "其他"
WEB_PIC_URL = WEB_URL + "/co/picset/"
CG_URL = (
    WEB_URL
    + "/search?type=picset&sort=default&category="
    + quote_plus(CG_TYPE)
    + "&page="
)
EMOTICON_URL = (
    WEB_URL
    + "/search?type=picset&sort=default&category="
    + quote_plus(EMOTICON_TYPE)
    + "&page="
)
NOT_FOUND = "暂时没有这样的图呢"
REQUEST_DELAY = 0.5
TIMEOUT = 30

PAGE_NUMBER_XPATH = (
    "//*[@id='pager-box']/div/a[@class='icon item pager-next']"
    "/preceding-sibling::a[1]/text()"
)
RESULT_LINK_XPATH = "//*[@id='picset-result-list']/ul/div/div[1]/a"
TITLE_XPATH = "//meta[@name='name']"
DESCRIPTION_XPATH = "//meta[@name='description']"
PICTURE_NUMBER_XPATH = (
    "//div[@class='meta-info']/div[@class='meta-right']/span[2]/text()"
)
CG_PICTURE_XPATH = (
    "//*[@id='main-picset-warp']/div/div[2]/div"
    "/div[@class='swiper-wrapper']/div[{}]"
)
EMOTICON_PICTURE_XPATH = (
    "//*[@id='main-picset-warp']/div/div[@class='stream-list']/div[{}]/img"
)

_NUMBER = re.compile(r"\d+")

Fetch = Callable[[str], str]


@dataclass(frozen=True)
class Picset:
    """One picture set: its id, title, type, description and image URLs."""

    id: int
    title: str
    picture_type: str
    picture_description: str
    picture_list: str

    @property
    def pictures(self) -> list[str]:
        return self.picture_list.split(",") if self.picture_list else []


_COLUMNS = "id, title, picture_type, picture_description, picture_list"


class YmgalDB:
    """Picture sets keyed by their id on the site."""

    def __init__(self, path: str | Path) -> None:
        self._lock = threading.RLock()
        self._conn = sqlite3.connect(str(path), check_same_thread=False)
        with self._conn:
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS ymgal ("
                "id INTEGER PRIMARY KEY, title TEXT NOT NULL DEFAULT '', "
                "picture_type TEXT NOT NULL DEFAULT '', "
                "picture_description TEXT NOT NULL DEFAULT '', "
                "picture_list TEXT NOT NULL DEFAULT '')"
            )

    def __enter__(self) -> YmgalDB:
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

    def upsert(self, picset: Picset) -> None:
        """Insert the set, or overwrite the stored one with the same id."""
        with self._transaction() as conn:
            conn.execute(
                f"INSERT INTO ymgal ({_COLUMNS}) VALUES (?, ?, ?, ?, ?) "
                "ON CONFLICT(id) DO UPDATE SET title = excluded.title, "
                "picture_type = excluded.picture_type, "
                "picture_description = excluded.picture_description, "
                "picture_list = excluded.picture_list",
                (
                    picset.id,
                    picset.title,
                    picset.picture_type,
                    picset.picture_description,
                    picset.picture_list,
                ),
            )

    def get_by_id(self, picset_id: int | str) -> Picset | None:
        try:
            key = int(picset_id)
        except (TypeError, ValueError):
            return None
        with self._transaction() as conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM ymgal WHERE id = ?", (key,)
            ).fetchone()
        return Picset(*row) if row is not None else None

    def _pick(
        self, where: str, params: tuple, rng: random.Random | None
    ) -> Picset | None:
        rng = rng if rng is not None else random.Random()
        with self._transaction() as conn:
            (count,) = conn.execute(
                f"SELECT COUNT(*) FROM ymgal WHERE {where}", params
            ).fetchone()
            if count == 0:
                return None
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM ymgal WHERE {where} "
                "ORDER BY id LIMIT 1 OFFSET ?",
                (*params, rng.randrange(count)),
            ).fetchone()
        return Picset(*row) if row is not None else None

    def random(
        self, picture_type: str, rng: random.Random | None = None
    ) -> Picset | None:
        """A set of the given type chosen at random, or None."""
        return self._pick("picture_type = ?", (picture_type,), rng)

    def search(
        self, picture_type: str, key: str, rng: random.Random | None = None
    ) -> Picset | None:
        """A random set of the type whose title or description contains key."""
        pattern = f"%{key}%"
        return self._pick(
            "picture_type = ? AND (picture_description LIKE ? OR title LIKE ?)",
            (picture_type, pattern, pattern),
            rng,
        )


def _document(html: str | bytes):
    return lxml.html.document_fromstring(html)


def _first(doc, xpath: str):
    found = doc.xpath(xpath)
    if not found:
        raise ValueError(f"nothing found at {xpath}")
    return found[0]


def _attr(element, position: int) -> str:
    values = list(element.attrib.values())
    if len(values) <= position:
        raise ValueError(f"<{element.tag}> has no attribute at {position}")
    return values[position]


def _number(text: str) -> int:
    match = _NUMBER.search(text)
    if match is None:
        raise ValueError(f"no number in {text!r}")
    return int(match.group())


def parse_page_count(html: str | bytes) -> int:
    """Number of the last result page from a search page."""
    return int(str(_first(_document(html), PAGE_NUMBER_XPATH)).strip())


def parse_picset_ids(html: str | bytes) -> list[str]:
    """Ids of the picture sets listed on a search page, in page order."""
    ids = []
    for link in _document(html).xpath(RESULT_LINK_XPATH):
        values = list(link.attrib.values())
        if not values:
            continue
        match = _NUMBER.search(values[0])
        if match is not None:
            ids.append(match.group())
    return ids


def parse_picset(html: str | bytes, picset_id: int, picture_type: str) -> Picset:
    """Read a picture set page."""
    doc = _document(html)
    title = _attr(_first(doc, TITLE_XPATH), 1)
    description = _attr(_first(doc, DESCRIPTION_XPATH), 1)
    count = _number(str(_first(doc, PICTURE_NUMBER_XPATH)))
    xpath = CG_PICTURE_XPATH if picture_type == CG_TYPE else EMOTICON_PICTURE_XPATH
    urls = [_attr(_first(doc, xpath.format(i)), 1) for i in range(1, count + 1)]
    return Picset(int(picset_id), title, picture_type, description, ",".join(urls))


def _fetch(url: str) -> str:
    response = requests.get(url, timeout=TIMEOUT)
    response.raise_for_status()
    return response.text


def _pause() -> None:
    if REQUEST_DELAY > 0:
        time.sleep(REQUEST_DELAY)


def update(db: YmgalDB, fetch: Fetch | None = None) -> int:
    """Store sets not yet known, newest last on the site first; return how many."""
    fetch = fetch if fetch is not None else _fetch
    sources = ((CG_TYPE, CG_URL), (EMOTICON_TYPE, EMOTICON_URL))
    page_counts = [parse_page_count(fetch(base + "1")) for _, base in sources]
    id_lists = []
    for (_, base), pages in zip(sources, page_counts):
        ids: list[str] = []
        for page in range(1, pages + 1):
            ids.extend(parse_picset_ids(fetch(base + str(page))))
            _pause()
        id_lists.append(ids)
    stored = 0
    for (picture_type, _), ids in zip(sources, id_lists):
        for picset_id in reversed(ids):
            existing = db.get_by_id(picset_id)
            if existing is not None and existing.picture_list:
                break
            db.upsert(
                parse_picset(fetch(WEB_PIC_URL + picset_id), int(picset_id), picture_type)
            )
            stored += 1
            _pause()
    return stored


def format_picset(picset: Picset | None) -> list[tuple[str, str]]:
    """Message parts for a set as ("text" | "image", value); empty when nothing to show."""
    if picset is None or not picset.picture_list:
        return []
    parts = [("text", picset.title)]
    if picset.picture_description:
        parts.append(("text", picset.picture_description))
    parts.extend(("image", url) for url in picset.pictures)
    return parts