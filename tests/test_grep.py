import io

import pytest

from xvkit.grep import grep_lines, main, match


@pytest.mark.parametrize(
    "pattern, text, expected",
    [
        ("^ab", "abc", True),
        ("^ab", "cab", False),
        ("b$", "ab", True),
        ("b$", "ba", False),
        ("a.c", "xabcx", True),
        ("a*b", "b", True),
        ("a*b", "aaab", True),
        (".*", "", True),
        ("", "", True),
        ("x", "abc", False),
        ("^$", "", True),
        ("^$", "a", False),
        ("a.*z", "a middle z", True),
        ("a.*z", "z then a", False),
    ],
)
def test_match(pattern, text, expected):
    assert match(pattern, text) is expected


def test_match_long_line_does_not_overflow():
    text = "a" * 5000 + "b"
    assert match("ab$", text) is True
    assert match("^a*c", text) is False


def test_grep_lines_only_complete_lines():
    stream = io.StringIO("one\ntwo\nthree")
    assert list(grep_lines("t", stream)) == ["two\n"]


def test_grep_lines_across_chunks():
    lines = [f"line{i}\n" for i in range(600)]
    stream = io.StringIO("".join(lines))
    result = list(grep_lines("^line5", stream))
    assert result == [line for line in lines if line.startswith("line5")]


def test_main_usage(capsys):
    assert main([]) == 1
    assert "usage: grep pattern" in capsys.readouterr().err


def test_main_files(tmp_path, capsys):
    path = tmp_path / "f.txt"
    path.write_text("alpha\nbeta\ngamma\n")
    assert main(["a$", str(path)]) == 0
    assert capsys.readouterr().out == "alpha\nbeta\ngamma\n"
    assert main(["^b", str(path)]) == 0
    assert capsys.readouterr().out == "beta\n"


def test_main_missing_file(tmp_path, capsys):
    missing = tmp_path / "nope"
    assert main(["x", str(missing)]) == 1
    assert capsys.readouterr().out == f"grep: cannot open {missing}\n"


def test_main_stdin(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("cat\ndog\n"))
    assert main(["o"]) == 0
    assert capsys.readouterr().out == "dog\n"