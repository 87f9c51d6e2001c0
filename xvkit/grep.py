"""A small grep that understands only the ^ . * $ operators."""

from __future__ import annotations

import sys

_CHUNK = 1024


def _matchhere(re, ri, text, ti):
    """Match re[ri:] at the start of text[ti:]."""
    n = len(re)
    while True:
        if ri == n:
            return True
        if ri + 1 < n and re[ri + 1] == "*":
            return _matchstar(re[ri], re, ri + 2, text, ti)
        if re[ri] == "$" and ri + 1 == n:
            return ti == len(text)
        if ti < len(text) and (re[ri] == "." or re[ri] == text[ti]):
            ri += 1
            ti += 1
            continue
        return False


def _matchstar(c, re, ri, text, ti):
    """Match c* followed by re[ri:] at the start of text[ti:]."""
    while True:
        if _matchhere(re, ri, text, ti):
            return True
        if ti < len(text) and (text[ti] == c or c == "."):
            ti += 1
        else:
            return False


def match(pattern, text):
    """Return True if pattern matches anywhere in text."""
    if pattern.startswith("^"):
        return _matchhere(pattern, 1, text, 0)
    return any(_matchhere(pattern, 0, text, start) for start in range(len(text) + 1))


def grep_lines(pattern, stream):
    """Yield the newline-terminated lines of a text stream that match pattern.

    A final line without a newline is never reported.
    """
    pending = ""
    while chunk := stream.read(_CHUNK):
        pending += chunk
        *complete, pending = pending.split("\n")
        for line in complete:
            if match(pattern, line):
                yield line + "\n"


def main(argv=None):
    """Search files, or standard input, for a pattern; return the exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        sys.stderr.write("usage: grep pattern [file ...]\n")
        return 1
    pattern, paths = args[0], args[1:]
    if not paths:
        sys.stdout.writelines(grep_lines(pattern, sys.stdin))
        return 0
    for path in paths:
        try:
            stream = open(path, encoding="utf-8", errors="surrogateescape", newline="")
        except OSError:
            sys.stdout.write(f"grep: cannot open {path}\n")
            return 1
        with stream:
            sys.stdout.writelines(grep_lines(pattern, stream))
    return 0