import io

from xvkit.ulib import atoi, gets, strcmp


def test_atoi_reads_leading_digits():
    assert atoi("123abc") == 123
    assert atoi("42") == 42


def test_atoi_rejects_sign_and_whitespace():
    assert atoi("-5") == 0
    assert atoi(" 7") == 0


def test_strcmp_equal():
    assert strcmp("abc", "abc") == 0


def test_strcmp_ordering_is_antisymmetric():
    assert strcmp("abc", "abd") < 0
    assert strcmp("abd", "abc") > 0
    assert strcmp("abc", "abd") == -strcmp("abd", "abc")


def test_strcmp_prefix_is_smaller():
    assert strcmp("ab", "abc") < 0
    assert strcmp("abc", "ab") > 0


def test_strcmp_stops_at_nul():
    assert strcmp("ab\0x", "ab\0y") == 0


def test_strcmp_bytes_are_unsigned():
    assert strcmp(b"\xff", b"\x01") > 0


def test_gets_stops_after_newline():
    stream = io.StringIO("hello\nworld")
    assert gets(stream, 100) == "hello\n"
    assert gets(stream, 100) == "world"


def test_gets_stops_after_carriage_return():
    assert gets(io.StringIO("ab\rcd"), 100) == "ab\r"


def test_gets_respects_maximum():
    assert gets(io.StringIO("abcdef"), 4) == "abc"


def test_gets_at_end_of_input_returns_empty():
    assert gets(io.StringIO(""), 10) == ""


def test_gets_binary_stream():
    assert gets(io.BytesIO(b"ls\nrest"), 100) == b"ls\n"