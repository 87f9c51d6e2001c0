"""A small printf that understands %d, %l, %x, %p, %s, %c and %%."""

from __future__ import annotations

import sys

_DIGITS = "0123456789ABCDEF"
_MASK32 = 0xFFFFFFFF
_MASK64 = (1 << 64) - 1


def _to_int32(value):
    value &= _MASK32
    return value - (1 << 32) if value & 0x80000000 else value


def _format_int(value, base, signed):
    """Format value as a 32-bit integer, signed or unsigned, in the given base."""
    value = _to_int32(int(value))
    negative = signed and value < 0
    x = -value if negative else value & _MASK32
    digits = []
    while True:
        x, rem = divmod(x, base)
        digits.append(_DIGITS[rem])
        if x == 0:
            break
    if negative:
        digits.append("-")
    return "".join(reversed(digits))


def _format_ptr(value):
    return "0x" + format(int(value) & _MASK64, "016X")


def render(fmt, *args):
    """Return the text that printing fmt with args would produce."""
    pending = iter(args)

    def take():
        try:
            return next(pending)
        except StopIteration:
            raise ValueError(f"not enough arguments for format {fmt!r}") from None

    out = []
    in_spec = False
    for c in fmt:
        if not in_spec:
            if c == "%":
                in_spec = True
            else:
                out.append(c)
            continue
        in_spec = False
        if c == "d":
            out.append(_format_int(take(), 10, True))
        elif c == "l":
            out.append(_format_int(take(), 10, False))
        elif c == "x":
            out.append(_format_int(take(), 16, False))
        elif c == "p":
            out.append(_format_ptr(take()))
        elif c == "s":
            s = take()
            out.append("(null)" if s is None else str(s))
        elif c == "c":
            ch = take()
            out.append(ch if isinstance(ch, str) else chr(int(ch) & 0xFF))
        elif c == "%":
            out.append("%")
        else:
            # Unknown sequence: print it to draw attention.
            out.append("%" + c)
    return "".join(out)


def fprintf(stream, fmt, *args):
    """Write the formatted text to a text stream."""
    stream.write(render(fmt, *args))


def printf(fmt, *args):
    """Write the formatted text to standard output."""
    fprintf(sys.stdout, fmt, *args)