import random

import pytest
import responses
from responses import matchers

from groupfun.vtb import (
    FIRST_MENU_HEADER,
    SECOND_MENU_HEADER,
    THIRD_MENU_HEADER,
    USER_AGENTS,
    VTB_LIST_URL,
    VTB_PAGE_URL,
    FirstCategory,
    VtbDB,
    escape_record_url,
    fetch_vtb_list,
    fetch_vtb_page,
)

ITEMS = [
    {"name": "Alpha", "uid": "100", "description": "first", "icon_path": "a.png"},
    {"name": "Beta", "uid": "200"},
]

VOICE_PATH = "https://example.com/v/hello world.mp3"

PAGE = {
    "data": {
        "voices": [
            {
                "categoryName": "Greetings",
                "author": "someone",
                "categoryDescription": {"zh-CN": "desc"},
                "voiceList": [
                    {
                        "name": "hello",
                        "path": VOICE_PATH,
                        "author": "voice author",
                        "description": {"zh-CN": "hi"},
                    }
                ],
            }
        ]
    }
}


@pytest.fixture
def mocked():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


@pytest.fixture
def db(tmp_path):
    with VtbDB(tmp_path / "vtb.db") as database:
        yield database


@pytest.fixture
def filled(db):
    db.store_vtb_list(ITEMS)
    db.store_vtb("100", PAGE)
    return db


def test_store_vtb_list_returns_uids(db):
    assert db.store_vtb_list(ITEMS) == ["100", "200"]


def test_first_category_menu(filled):
    assert filled.first_category_menu() == FIRST_MENU_HEADER + "0. Alpha\n1. Beta\n"


def test_first_category_menu_empty(db):
    assert db.first_category_menu() == FIRST_MENU_HEADER


def test_second_category_menu(filled):
    assert filled.second_category_menu(0) == SECOND_MENU_HEADER + "0. Greetings\n"


def test_second_category_menu_without_categories(filled):
    assert filled.second_category_menu(1) == ""
    assert filled.second_category_menu(7) == ""


def test_third_category_menu(filled):
    assert filled.third_category_menu(0, 0) == THIRD_MENU_HEADER + "0. hello\n"
    assert filled.third_category_menu(0, 3) == ""


def test_third_category_lookup(filled):
    quote = filled.third_category(0, 0, 0)
    assert quote.name == "hello"
    assert quote.path == VOICE_PATH
    assert quote.author == "voice author"
    assert quote.description == "hi"
    assert quote.first_uid == "100"


def test_third_category_missing(filled):
    assert filled.third_category(0, 0, 5) is None


def test_random_vtb(filled):
    assert filled.random_vtb(random.Random(1)).name == "hello"


def test_random_vtb_empty(db):
    assert db.random_vtb(random.Random(1)) is None


def test_first_category_by_uid(filled):
    assert filled.first_category_by_uid("100") == FirstCategory(
        0, "Alpha", "100", "first", "a.png"
    )
    assert filled.first_category_by_uid("999") is None


def test_store_vtb_list_updates_existing(filled):
    filled.store_vtb_list([{"name": "Gamma", "uid": "200"}])
    assert filled.first_category_by_uid("200") == FirstCategory(0, "Gamma", "200", "", "")
    assert filled.first_category_menu().count("\n") == 3


def test_store_vtb_updates_quote(filled):
    changed = {
        "data": {
            "voices": [
                {"categoryName": "Greetings", "voiceList": [{"name": "bye", "path": "p"}]}
            ]
        }
    }
    filled.store_vtb("100", changed)
    quote = filled.third_category(0, 0, 0)
    assert (quote.name, quote.path) == ("bye", "p")
    assert filled.third_category_menu(0, 0) == THIRD_MENU_HEADER + "0. bye\n"


def test_store_vtb_ignores_malformed_page(filled):
    filled.store_vtb("200", {"data": None})
    assert filled.second_category_menu(1) == ""


def test_escape_record_url_space():
    assert escape_record_url(VOICE_PATH) == "https://example.com/v/hello%20world.mp3"


def test_escape_record_url_without_slash():
    assert escape_record_url("plain name") == "plain name"


def test_escape_record_url_plus():
    assert escape_record_url("https://example.com/a+b.mp3") == (
        "https://example.com/a%2Bb.mp3"
    )


def test_fetch_vtb_list_decodes_escapes(mocked):
    mocked.add(responses.GET, VTB_LIST_URL, body='[{"name": "\\u4f60", "uid": "1"}]')
    assert fetch_vtb_list() == [{"name": "你", "uid": "1"}]
    assert mocked.calls[0].request.headers["User-Agent"] in USER_AGENTS


def test_fetch_vtb_page_sends_uid(mocked):
    mocked.add(
        responses.GET,
        VTB_PAGE_URL,
        json=PAGE,
        match=[matchers.query_param_matcher({"uid": "100"})],
    )
    assert fetch_vtb_page("100") == PAGE


def test_fetched_list_round_trips_into_db(mocked, db):
    mocked.add(responses.GET, VTB_LIST_URL, json=ITEMS)
    assert db.store_vtb_list(fetch_vtb_list()) == ["100", "200"]
    assert db.first_category_by_uid("200").name == "Beta"