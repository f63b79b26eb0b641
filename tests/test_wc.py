import io
import sys

import pytest

from tinyuser.wc import Counts, count, main


def test_count_worked_example():
    assert count(io.BytesIO(b"hello world\n")) == Counts(lines=1, words=2, chars=12)


@pytest.mark.parametrize(
    "data",
    [b"", b"one two\nthree\n", b"  lead and trail  ", b"tab\tsep\r\nline\vend", b"x" * 1500],
)
def test_count_invariants(data):
    result = count(io.BytesIO(data))
    assert result.chars == len(data)
    assert result.lines == data.count(b"\n")
    assert result.words == len(data.split())


def test_word_across_chunk_boundary():
    data = b"a" * 511 + b"b c"
    assert count(io.BytesIO(data)).words == len(data.split())


def test_nul_separates_words():
    assert count(io.BytesIO(b"a\0b")).words == count(io.BytesIO(b"a b")).words


def test_text_stream_counts_bytes():
    assert count(io.StringIO("ab cd\n")) == count(io.BytesIO(b"ab cd\n"))


def test_read_error():
    class Broken:
        def read(self, n):
            raise OSError("boom")

    with pytest.raises(OSError, match="read error"):
        count(Broken())


def test_main_file(tmp_path, capsys):
    data = b"one two\nthree\n"
    path = tmp_path / "f"
    path.write_bytes(data)
    c = count(io.BytesIO(data))
    assert main([str(path)]) == 0
    assert capsys.readouterr().out == f"{c.lines} {c.words} {c.chars} {path}\n"


def test_main_stdin_has_empty_name(monkeypatch, capsys):
    data = b"a b\n"
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(data)))
    c = count(io.BytesIO(data))
    assert main([]) == 0
    assert capsys.readouterr().out == f"{c.lines} {c.words} {c.chars} \n"


def test_main_missing(tmp_path, capsys):
    missing = str(tmp_path / "nope")
    assert main([missing]) == 1
    assert capsys.readouterr().out == f"wc: cannot open {missing}\n"