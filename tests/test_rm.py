from tinyuser.rm import main


def test_usage(capsys):
    assert main([]) == 1
    assert capsys.readouterr().err == "Usage: rm files...\n"


def test_removes_file_and_empty_dir(tmp_path):
    f = tmp_path / "f"
    f.write_bytes(b"x")
    d = tmp_path / "d"
    d.mkdir()
    assert main([str(f), str(d)]) == 0
    assert not f.exists()
    assert not d.exists()


def test_non_empty_dir_fails_and_stops(tmp_path, capsys):
    d = tmp_path / "d"
    d.mkdir()
    (d / "inner").write_bytes(b"")
    after = tmp_path / "after"
    after.write_bytes(b"")
    assert main([str(d), str(after)]) == 0
    assert capsys.readouterr().err == f"rm: {d} failed to delete\n"
    assert d.is_dir()
    assert after.exists()