"""Parsing shell command lines into command trees."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from .riscv import O_CREATE, O_RDONLY, O_TRUNC, O_WRONLY

MAXARGS = 10

_WHITESPACE = " \t\r\n\v"
_SYMBOLS = "<|>&;()"


class ShellSyntaxError(ValueError):
    """The command line cannot be parsed."""


@dataclass
class ExecCmd:
    argv: list = field(default_factory=list)


@dataclass
class RedirCmd:
    cmd: "Command"
    file: str
    mode: int
    fd: int


@dataclass
class PipeCmd:
    left: "Command"
    right: "Command"


@dataclass
class ListCmd:
    left: "Command"
    right: "Command"


@dataclass
class BackCmd:
    cmd: "Command"


Command = Union[ExecCmd, RedirCmd, PipeCmd, ListCmd, BackCmd]


class _Parser:
    def __init__(self, line):
        self.line = line
        self.pos = 0

    def _char(self):
        return self.line[self.pos] if self.pos < len(self.line) else ""

    def _skip_space(self):
        while self.pos < len(self.line) and self.line[self.pos] in _WHITESPACE:
            self.pos += 1

    def peek(self, toks):
        self._skip_space()
        c = self._char()
        return bool(c) and c in toks

    def gettoken(self):
        """Return (kind, word) for the next token; kind '' marks the end."""
        self._skip_space()
        start = self.pos
        c = self._char()
        kind = c
        if c == "":
            pass
        elif c in "|();&<":
            self.pos += 1
        elif c == ">":
            self.pos += 1
            if self._char() == ">":
                kind = "+"
                self.pos += 1
        else:
            kind = "a"
            while (
                self.pos < len(self.line)
                and self.line[self.pos] not in _WHITESPACE
                and self.line[self.pos] not in _SYMBOLS
            ):
                self.pos += 1
        word = self.line[start:self.pos]
        self._skip_space()
        return kind, word

    def parse(self):
        cmd = self.parseline()
        self.peek("")
        if self.pos != len(self.line):
            raise ShellSyntaxError(f"syntax: leftovers: {self.line[self.pos:]}")
        return cmd

    def parseline(self):
        cmd = self.parsepipe()
        while self.peek("&"):
            self.gettoken()
            cmd = BackCmd(cmd)
        if self.peek(";"):
            self.gettoken()
            cmd = ListCmd(cmd, self.parseline())
        return cmd

    def parsepipe(self):
        cmd = self.parseexec()
        if self.peek("|"):
            self.gettoken()
            cmd = PipeCmd(cmd, self.parsepipe())
        return cmd

    def parseredirs(self, cmd):
        while self.peek("<>"):
            tok, _ = self.gettoken()
            kind, name = self.gettoken()
            if kind != "a":
                raise ShellSyntaxError("missing file for redirection")
            if tok == "<":
                cmd = RedirCmd(cmd, name, O_RDONLY, 0)
            elif tok == ">":
                cmd = RedirCmd(cmd, name, O_WRONLY | O_CREATE | O_TRUNC, 1)
            else:
                cmd = RedirCmd(cmd, name, O_WRONLY | O_CREATE, 1)
        return cmd

    def parseblock(self):
        if not self.peek("("):
            raise ShellSyntaxError("parseblock")
        self.gettoken()
        cmd = self.parseline()
        if not self.peek(")"):
            raise ShellSyntaxError("syntax - missing )")
        self.gettoken()
        return self.parseredirs(cmd)

    def parseexec(self):
        if self.peek("("):
            return self.parseblock()
        cmd = ExecCmd()
        ret = self.parseredirs(cmd)
        while not self.peek("|)&;"):
            kind, word = self.gettoken()
            if kind == "":
                break
            if kind != "a":
                raise ShellSyntaxError("syntax")
            cmd.argv.append(word)
            if len(cmd.argv) >= MAXARGS:
                raise ShellSyntaxError("too many args")
            ret = self.parseredirs(ret)
        return ret


def parse_cmd(line):
    """Parse a command line into a tree of command objects."""
    return _Parser(line).parse()