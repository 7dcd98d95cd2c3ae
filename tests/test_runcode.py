from urllib.parse import parse_qs

import pytest
import responses

from groupfun.runcode import (
    API_URL,
    CUT_MARKER,
    RunCodeError,
    clear_newline_suffix,
    cut_too_long,
    lookup_language,
    run_code,
    template,
)


@pytest.fixture
def mocked():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


def test_clear_newline_suffix_strips_only_trailing_newlines():
    assert clear_newline_suffix("abc\n\n\n") == "abc"
    assert clear_newline_suffix("a\nb") == "a\nb"
    assert clear_newline_suffix("\n\n") == ""


def test_cut_too_long_keeps_short_text():
    text = "line\n" * 10
    assert cut_too_long(text) == text


def test_cut_too_long_cuts_many_lines():
    text = "x\n" * 50
    result = cut_too_long(text)
    assert result.endswith(CUT_MARKER)
    assert len(result) < len(text) + len(CUT_MARKER)
    body = result[: -len(CUT_MARKER)]
    assert body.count("\n") <= 30


def test_cut_too_long_crlf_counts_once():
    text = "x\r\n" * 25
    assert cut_too_long(text) == text


def test_cut_too_long_cuts_long_text():
    text = "a" * 2000
    result = cut_too_long(text)
    assert result.endswith(CUT_MARKER)
    body = result[: -len(CUT_MARKER)]
    assert set(body) == {"a"}
    assert len(body) < 1002


def test_lookup_language_is_case_insensitive():
    assert lookup_language("Python") == ("15", "py3")
    assert lookup_language("TS") == ("1010", "ts")


def test_lookup_unknown_language_raises():
    with pytest.raises(RunCodeError):
        lookup_language("brainfuck")


def test_template():
    assert "fmt.Println" in template("go")
    assert template("js") == template("node.js")
    with pytest.raises(RunCodeError):
        template("cobol")


def test_run_code_returns_output(mocked):
    mocked.add(
        responses.POST,
        API_URL,
        json={"output": "hello\n\n", "errors": "\n\n"},
        status=200,
    )
    assert run_code("print(1)", ("15", "py3")) == "hello"
    form = parse_qs(mocked.calls[0].request.body)
    assert form["language"] == ["15"]
    assert form["fileext"] == ["py3"]
    assert form["code"] == ["print(1)"]


def test_run_code_reports_errors(mocked):
    mocked.add(
        responses.POST,
        API_URL,
        json={"output": "", "errors": "SyntaxError\n"},
        status=200,
    )
    with pytest.raises(RunCodeError, match="SyntaxError"):
        run_code("print(", ("15", "py3"))


def test_run_code_non_200(mocked):
    mocked.add(responses.POST, API_URL, body="oops", status=500)
    with pytest.raises(RunCodeError, match="code not 200"):
        run_code("x", ("6", "go"))