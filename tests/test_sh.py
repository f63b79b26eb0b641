import pytest

from tinyuser.sh import (
    BackCmd,
    ExecCmd,
    ListCmd,
    OpenMode,
    PipeCmd,
    RedirCmd,
    ShellSyntaxError,
    parse,
    tokenize,
)

WRITE_TRUNC = OpenMode.WRONLY | OpenMode.CREATE | OpenMode.TRUNC
APPEND = OpenMode.WRONLY | OpenMode.CREATE


def test_simple_exec():
    assert parse("echo hi\n") == ExecCmd(["echo", "hi"])


def test_empty_line_is_empty_exec():
    assert parse("   \n") == ExecCmd([])


def test_input_and_output_redirections_nest_in_order():
    assert parse("cat < in > out") == RedirCmd(
        RedirCmd(ExecCmd(["cat"]), "in", OpenMode.RDONLY, 0), "out", WRITE_TRUNC, 1
    )


def test_append_redirection():
    assert parse("echo x >> log") == RedirCmd(ExecCmd(["echo", "x"]), "log", APPEND, 1)


def test_arguments_after_redirection_belong_to_command():
    cmd = parse("cat < a b")
    assert cmd == RedirCmd(ExecCmd(["cat", "b"]), "a", OpenMode.RDONLY, 0)


def test_pipe_is_right_associative():
    assert parse("a | b | c") == PipeCmd(
        ExecCmd(["a"]), PipeCmd(ExecCmd(["b"]), ExecCmd(["c"]))
    )


def test_list_and_background():
    assert parse("a & ; b") == ListCmd(BackCmd(ExecCmd(["a"])), ExecCmd(["b"]))


def test_double_background():
    assert parse("a & &") == BackCmd(BackCmd(ExecCmd(["a"])))


def test_block_with_redirection():
    assert parse("(a ; b) > out") == RedirCmd(
        ListCmd(ExecCmd(["a"]), ExecCmd(["b"])), "out", WRITE_TRUNC, 1
    )


def test_trailing_semicolon_gives_empty_exec():
    assert parse("a ;") == ListCmd(ExecCmd(["a"]), ExecCmd([]))


def test_leftovers_raise():
    with pytest.raises(ShellSyntaxError, match="syntax") as info:
        parse("a & b")
    assert info.value.leftovers == "b"


def test_missing_redirection_file():
    with pytest.raises(ShellSyntaxError, match="missing file for redirection"):
        parse("echo >")


def test_missing_close_paren():
    with pytest.raises(ShellSyntaxError, match="missing \\)"):
        parse("(a")


def test_unexpected_close_paren():
    with pytest.raises(ShellSyntaxError, match="syntax"):
        parse("a )")


def test_open_paren_after_word():
    with pytest.raises(ShellSyntaxError, match="syntax"):
        parse("a (")


def test_argument_limit():
    nine = " ".join(f"w{i}" for i in range(9))
    assert parse(nine).argv == nine.split()
    with pytest.raises(ShellSyntaxError, match="too many args"):
        parse(nine + " w9")


def test_tokenize_kinds_and_text():
    tokens = list(tokenize("a>>b|c"))
    assert [t.kind for t in tokens] == ["a", "+", "a", "|", "a"]
    assert [t.text for t in tokens] == ["a", ">>", "b", "|", "c"]


def test_tokenize_positions_slice_the_line():
    line = "  ls -l ; (x)&\n"
    for token in tokenize(line):
        assert line[token.start:token.end] == token.text


def test_tokenize_stops_at_nul():
    assert [t.text for t in tokenize("a b\0c")] == ["a", "b"]