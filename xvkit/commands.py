"""Small file and process utilities: cat, echo, wc, ls, mkdir, rm, ln, sleep, kill."""

from __future__ import annotations

import os
import signal
import stat as statmod
import sys
import time

from .ulib import atoi

DIRSIZ = 14
TICK = 0.1  # seconds per clock tick
_CHUNK = 512
_PATHBUF = 512
_WC_SPACE = frozenset(b" \r\t\n\v\0")

_T_DIR = 1
_T_FILE = 2
_T_DEVICE = 3


def _args(argv):
    return sys.argv[1:] if argv is None else list(argv)


def _open_text(path):
    return open(path, encoding="utf-8", errors="surrogateescape", newline="")


def _copy(stream):
    while chunk := stream.read(_CHUNK):
        sys.stdout.write(chunk)


def cat(argv=None):
    """Copy the named files, or standard input, to standard output."""
    paths = _args(argv)
    if not paths:
        _copy(sys.stdin)
        return 0
    for path in paths:
        try:
            stream = _open_text(path)
        except OSError:
            sys.stderr.write(f"cat: cannot open {path}\n")
            return 1
        with stream:
            try:
                _copy(stream)
            except OSError:
                sys.stderr.write("cat: read error\n")
                return 1
    return 0


def echo(argv=None):
    """Print the arguments separated by spaces and ended by a newline."""
    words = _args(argv)
    if words:
        sys.stdout.write(" ".join(words) + "\n")
    return 0


def wc_counts(stream):
    """Return (lines, words, bytes) for a text or binary stream."""
    lines = words = chars = 0
    inword = False
    while chunk := stream.read(_CHUNK):
        if isinstance(chunk, str):
            chunk = chunk.encode("utf-8", "surrogateescape")
        for byte in chunk:
            chars += 1
            if byte == 0x0A:
                lines += 1
            if byte in _WC_SPACE:
                inword = False
            elif not inword:
                words += 1
                inword = True
    return lines, words, chars


def wc(argv=None):
    """Count lines, words and bytes of the named files or standard input."""
    paths = _args(argv)
    if not paths:
        source = getattr(sys.stdin, "buffer", sys.stdin)
        lines, words, chars = wc_counts(source)
        sys.stdout.write(f"{lines} {words} {chars} \n")
        return 0
    for path in paths:
        try:
            stream = open(path, "rb")
        except OSError:
            sys.stdout.write(f"wc: cannot open {path}\n")
            return 1
        with stream:
            try:
                lines, words, chars = wc_counts(stream)
            except OSError:
                sys.stdout.write("wc: read error\n")
                return 1
        sys.stdout.write(f"{lines} {words} {chars} {path}\n")
    return 0


def fmtname(path):
    """Return the last path component, blank-padded to DIRSIZ characters."""
    name = path[path.rfind("/") + 1:]
    if len(name) >= DIRSIZ:
        return name
    return name.ljust(DIRSIZ)


def _file_type(st):
    if statmod.S_ISDIR(st.st_mode):
        return _T_DIR
    if statmod.S_ISREG(st.st_mode):
        return _T_FILE
    return _T_DEVICE


def _ls_one(path):
    try:
        st = os.stat(path)
    except OSError:
        sys.stderr.write(f"ls: cannot open {path}\n")
        return
    kind = _file_type(st)
    if kind != _T_DIR:
        sys.stdout.write(f"{fmtname(path)} {kind} {st.st_ino} {st.st_size}\n")
        return
    if len(path) + 1 + DIRSIZ + 1 > _PATHBUF:
        sys.stdout.write("ls: path too long\n")
        return
    try:
        names = [".", ".."] + sorted(os.listdir(path))
    except OSError:
        sys.stderr.write(f"ls: cannot open {path}\n")
        return
    for name in names:
        full = f"{path}/{name}"
        try:
            entry = os.stat(full)
        except OSError:
            sys.stdout.write(f"ls: cannot stat {full}\n")
            continue
        sys.stdout.write(
            f"{fmtname(full)} {_file_type(entry)} {entry.st_ino} {entry.st_size}\n"
        )


def ls(argv=None):
    """List files, or the entries of directories, with type, inode and size."""
    paths = _args(argv) or ["."]
    for path in paths:
        _ls_one(path)
    return 0


def mkdir(argv=None):
    """Create directories, stopping at the first failure."""
    paths = _args(argv)
    if not paths:
        sys.stderr.write("Usage: mkdir files...\n")
        return 1
    for path in paths:
        try:
            os.mkdir(path)
        except OSError:
            sys.stderr.write(f"mkdir: {path} failed to create\n")
            break
    return 0


def _unlink(path):
    if os.path.isdir(path) and not os.path.islink(path):
        os.rmdir(path)
    else:
        os.unlink(path)


def rm(argv=None):
    """Remove files and empty directories, stopping at the first failure."""
    paths = _args(argv)
    if not paths:
        sys.stderr.write("Usage: rm files...\n")
        return 1
    for path in paths:
        try:
            _unlink(path)
        except OSError:
            sys.stderr.write(f"rm: {path} failed to delete\n")
            break
    return 0


def ln(argv=None):
    """Create a hard link: ln old new."""
    args = _args(argv)
    if len(args) != 2:
        sys.stderr.write("Usage: ln old new\n")
        return 1
    old, new = args
    try:
        os.link(old, new)
    except OSError:
        sys.stderr.write(f"link {old} {new}: failed\n")
    return 0


def sleep(argv=None):
    """Pause for a positive number of clock ticks."""
    args = _args(argv)
    if len(args) != 1:
        sys.stderr.write("usage: sleep seconds\n")
        return 1
    ticks = atoi(args[0])
    if ticks > 0:
        time.sleep(ticks * TICK)
        return 0
    sys.stderr.write("Invalid intput\n")
    return 1


def kill(argv=None):
    """Kill each process whose id is given; failures are ignored."""
    args = _args(argv)
    if not args:
        sys.stderr.write("usage: kill pid...\n")
        return 1
    sig = getattr(signal, "SIGKILL", signal.SIGTERM)
    for arg in args:
        pid = atoi(arg)
        if pid <= 0:
            continue  # no process has such an id
        try:
            os.kill(pid, sig)
        except OSError:
            pass
    return 0