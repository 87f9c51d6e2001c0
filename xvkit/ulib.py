"""Small string and input helpers of the user library."""

from __future__ import annotations


def atoi(s):
    """Parse the leading decimal digits of s; no sign or whitespace is accepted."""
    n = 0
    for ch in s:
        if not "0" <= ch <= "9":
            break
        n = n * 10 + ord(ch) - ord("0")
    return n


def _cstring(s):
    data = s.encode("utf-8") if isinstance(s, str) else bytes(s)
    nul = data.find(b"\0")
    return data if nul < 0 else data[:nul]


def strcmp(p, q):
    """Compare two NUL-terminated strings byte by byte, as unsigned chars.

    Returns zero when equal, otherwise the difference of the first differing bytes.
    """
    a, b = _cstring(p), _cstring(q)
    for x, y in zip(a, b):
        if x != y:
            return x - y
    if len(a) == len(b):
        return 0
    return a[len(b)] if len(a) > len(b) else -b[len(a)]


def gets(stream, maximum):
    """Read one line of at most maximum-1 characters from a stream.

    Reading stops after a newline or carriage return, which is kept, or at
    end of input. The result has the stream's type, str or bytes.
    """
    chars = []
    empty = None
    while len(chars) + 1 < maximum:
        c = stream.read(1)
        if empty is None:
            empty = c[:0]
        if not c:
            break
        chars.append(c)
        if c in ("\n", "\r", b"\n", b"\r"):
            break
    if empty is None:
        empty = stream.read(0)
    return empty.join(chars)