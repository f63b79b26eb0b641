import signal
from unittest import mock

from tinyuser.kill import main


def test_usage(capsys):
    assert main([]) == 1
    assert capsys.readouterr().err == "usage: kill pid...\n"


def test_non_numeric_and_huge_ids_are_ignored():
    assert main(["abc", "99999999999999999999999"]) == 0


def test_kills_process():
    with mock.patch("os.kill") as fake_kill:
        assert main(["1234"]) == 0
    assert mock.call(1234, signal.SIGKILL) in fake_kill.call_args_list


def test_kills_every_listed_process():
    with mock.patch("os.kill") as fake_kill:
        assert main(["1234", "5678"]) == 0
    calls = fake_kill.call_args_list
    assert mock.call(1234, signal.SIGKILL) in calls
    assert mock.call(5678, signal.SIGKILL) in calls