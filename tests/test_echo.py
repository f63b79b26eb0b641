from tinyuser.echo import echo, main


def test_echo_joins_with_spaces():
    assert echo(["hello", "world"]) == "hello world\n"


def test_echo_no_args_prints_nothing():
    assert echo([]) == ""


def test_echo_single():
    assert echo(["x"]) == "x\n"


def test_main_writes(capsys):
    assert main(["a", "b", "c"]) == 0
    assert capsys.readouterr().out == "a b c\n"