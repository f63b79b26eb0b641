import io
import sys

import pytest

from tinyuser.grep import grep, main, match


@pytest.mark.parametrize(
    "pattern, text",
    [
        ("^ab", "abc"),
        ("a.c", "xabcx"),
        ("ab*c", "ac"),
        ("ab*c", "abbbc"),
        ("c$", "abc"),
        (".*", "anything"),
        ("", ""),
        ("a$b", "a$b"),
        ("^$", ""),
    ],
)
def test_match_positive(pattern, text):
    assert match(pattern, text)


@pytest.mark.parametrize(
    "pattern, text",
    [
        ("^b", "abc"),
        ("a$", "abc"),
        ("x", "abc"),
        ("^$", "a"),
        ("a.c", "ac"),
    ],
)
def test_match_negative(pattern, text):
    assert not match(pattern, text)


def test_match_accepts_bytes_text():
    assert match("b.d", b"abcde")
    assert not match("z", b"abcde")


def test_grep_yields_matching_lines():
    data = io.BytesIO(b"abc\nxyz\nbb\n")
    assert list(grep("b", data)) == [b"abc\n", b"bb\n"]


def test_grep_drops_unterminated_last_line():
    data = io.BytesIO(b"x1\nx2")
    assert list(grep("x", data)) == [b"x1\n"]


def test_grep_text_stream():
    data = io.StringIO("one\ntwo\nthree\n")
    assert list(grep("^t", data)) == ["two\n", "three\n"]


def test_grep_stops_when_line_fills_buffer():
    data = io.BytesIO(b"a" * 2000 + b"\nab\n")
    assert list(grep("a", data)) == []


def test_main_usage(capsys):
    assert main([]) == 1
    assert "usage: grep pattern [file ...]" in capsys.readouterr().err


def test_main_files(tmp_path, capsys):
    first = tmp_path / "one"
    first.write_bytes(b"apple\nberry\n")
    second = tmp_path / "two"
    second.write_bytes(b"grape\nplum\n")
    assert main(["ap", str(first), str(second)]) == 0
    assert capsys.readouterr().out == "apple\ngrape\n"


def test_main_missing_file(tmp_path, capsys):
    missing = str(tmp_path / "missing")
    assert main(["a", missing]) == 1
    assert capsys.readouterr().out == f"grep: cannot open {missing}\n"


def test_main_stdin(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(b"red\nblue\n")))
    assert main(["^b"]) == 0
    assert capsys.readouterr().out == "blue\n"