import io

import pytest

from tinyuser.fmt import format, fprintf, printf


@pytest.mark.parametrize("n", [0, 1, -1, 42, -42, 123456, -2147483648, 2147483647])
def test_d_matches_decimal(n):
    assert format("%d", n) == str(n)


def test_d_wraps_to_32_bits():
    assert format("%d", 2**31) == str(-(2**31))


@pytest.mark.parametrize("n", [0, 9, 10, 255, 4096, 0xDEADBEEF, 2**32 - 1])
def test_x_round_trip(n):
    out = format("%x", n)
    assert int(out, 16) == n
    assert out == out.upper()


def test_x_negative_is_unsigned():
    assert format("%x", -1) == "FFFFFFFF"


@pytest.mark.parametrize("n", [0, 5, 2**31, 2**32 - 1])
def test_l_round_trip(n):
    assert int(format("%l", n)) == n


@pytest.mark.parametrize("v", [0, 1, 0x80000000, 0xFFFFFFFFFFFFFFFF])
def test_p_is_fixed_width(v):
    out = format("%p", v)
    assert out.startswith("0x")
    assert len(out) == 18
    assert int(out[2:], 16) == v


def test_s_and_null():
    assert format("[%s]", "abc") == "[abc]"
    assert format("%s", None) == "(null)"


def test_c_character():
    assert format("%c%c", "h", ord("i")) == "hi"


def test_percent_and_unknown():
    assert format("100%%") == "100%"
    assert format("%q") == "%q"


def test_mixed():
    assert format("%s: read %d bytes\n", "t", 4) == "t: read 4 bytes\n"


def test_missing_argument():
    with pytest.raises(TypeError):
        format("%d %d", 1)


def test_fprintf_writes_to_stream():
    stream = io.StringIO()
    fprintf(stream, "cat: cannot open %s\n", "x")
    assert stream.getvalue() == "cat: cannot open x\n"


def test_printf_writes_stdout(capsys):
    printf("%d %s\n", 3, "ok")
    assert capsys.readouterr().out == "3 ok\n"