import pytest
import responses

from groupfun.wtf import API_PREFIX, TABLE, WtfError, list_text, new_wtf


@pytest.fixture
def mocked():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


def test_new_wtf_bounds():
    assert new_wtf(0) is TABLE[0]
    assert new_wtf(len(TABLE) - 1) is TABLE[-1]
    assert new_wtf(-1) is None
    assert new_wtf(len(TABLE)) is None


def test_first_entry():
    w = new_wtf(0)
    assert w.name == "你的意义是什么?"
    assert w.path == "mRIFuS"


def test_list_text():
    lines = list_text().splitlines()
    assert len(lines) == len(TABLE)
    assert lines[0] == "00. 你的意义是什么?"
    assert all(line[:2].isdigit() and line[2:4] == ". " for line in lines)


def test_predict_success(mocked):
    w = new_wtf(0)
    mocked.add(
        responses.GET,
        API_PREFIX + "mRIFuS/alice",
        json={"text": "hello", "ok": True, "msg": ""},
    )
    assert w.predict("alice") == "> " + w.name + "\nhello"


def test_predict_escapes_each_name(mocked):
    w = new_wtf(2)
    mocked.add(
        responses.GET,
        API_PREFIX + w.path + "/a+b/carol",
        json={"text": "pair", "ok": True, "msg": ""},
    )
    assert w.predict("a b", "carol").endswith("\npair")
    assert mocked.calls[0].request.url == API_PREFIX + w.path + "/a+b/carol"


def test_predict_remote_failure(mocked):
    w = new_wtf(1)
    mocked.add(
        responses.GET,
        API_PREFIX + w.path + "/alice",
        json={"text": "", "ok": False, "msg": "bad name"},
    )
    with pytest.raises(WtfError, match="bad name"):
        w.predict("alice")


def test_predict_http_error(mocked):
    w = new_wtf(1)
    mocked.add(responses.GET, API_PREFIX + w.path + "/alice", status=500)
    with pytest.raises(WtfError):
        w.predict("alice")


def test_predict_invalid_json(mocked):
    w = new_wtf(1)
    mocked.add(responses.GET, API_PREFIX + w.path + "/alice", body="not json")
    with pytest.raises(WtfError):
        w.predict("alice")