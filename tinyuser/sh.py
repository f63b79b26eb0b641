"""Command-line parser for a small shell: pipes, lists, background jobs, redirection."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Union

MAXARGS = 10

_WHITESPACE = " \t\r\n\v"
_SYMBOLS = "<|>&;()"


class ShellSyntaxError(ValueError):
    """The command line could not be parsed."""

    def __init__(self, message: str, leftovers: str = "") -> None:
        super().__init__(message)
        self.leftovers = leftovers


class OpenMode(enum.IntFlag):
    """How a redirected file is opened."""

    RDONLY = 0
    WRONLY = 1
    RDWR = 2
    CREATE = 4
    TRUNC = 8


@dataclass
class ExecCmd:
    """Run a program with its arguments; ``argv[0]`` names the program."""

    argv: List[str] = field(default_factory=list)


@dataclass
class RedirCmd:
    """Run ``cmd`` with file descriptor ``fd`` replaced by ``file`` opened in ``mode``."""

    cmd: "Command"
    file: str
    mode: OpenMode
    fd: int


@dataclass
class PipeCmd:
    """Connect the output of ``left`` to the input of ``right``."""

    left: "Command"
    right: "Command"


@dataclass
class ListCmd:
    """Run ``left`` to completion, then ``right``."""

    left: "Command"
    right: "Command"


@dataclass
class BackCmd:
    """Run ``cmd`` without waiting for it."""

    cmd: "Command"


Command = Union[ExecCmd, RedirCmd, PipeCmd, ListCmd, BackCmd]


@dataclass(frozen=True)
class Token:
    """A lexical token.

    ``kind`` is the symbol itself for ``| ( ) ; & < >``, ``"+"`` for ``>>``
    and ``"a"`` for a word. ``start`` and ``end`` delimit ``text`` in the line.
    """

    kind: str
    text: str
    start: int
    end: int


class _Scanner:
    def __init__(self, line: str) -> None:
        self.line = line.split("\0", 1)[0]
        self.pos = 0

    def _skip_whitespace(self) -> None:
        line = self.line
        while self.pos < len(line) and line[self.pos] in _WHITESPACE:
            self.pos += 1

    def at_end(self) -> bool:
        self._skip_whitespace()
        return self.pos >= len(self.line)

    def rest(self) -> str:
        return self.line[self.pos:]

    def peek(self, toks: str) -> bool:
        self._skip_whitespace()
        return self.pos < len(self.line) and self.line[self.pos] in toks

    def gettoken(self) -> Optional[Token]:
        self._skip_whitespace()
        line = self.line
        start = self.pos
        if start >= len(line):
            return None
        ch = line[start]
        if ch in "|();&<":
            self.pos += 1
            kind = ch
        elif ch == ">":
            self.pos += 1
            kind = ">"
            if self.pos < len(line) and line[self.pos] == ">":
                kind = "+"
                self.pos += 1
        else:
            kind = "a"
            while (
                self.pos < len(line)
                and line[self.pos] not in _WHITESPACE
                and line[self.pos] not in _SYMBOLS
            ):
                self.pos += 1
        end = self.pos
        self._skip_whitespace()
        return Token(kind=kind, text=line[start:end], start=start, end=end)


def tokenize(line: str) -> Iterator[Token]:
    """Yield the tokens of ``line`` in order."""
    scanner = _Scanner(line)
    while True:
        token = scanner.gettoken()
        if token is None:
            return
        yield token


class _Parser:
    def __init__(self, line: str) -> None:
        self.scan = _Scanner(line)

    def line(self) -> Command:
        cmd = self.pipe()
        while self.scan.peek("&"):
            self.scan.gettoken()
            cmd = BackCmd(cmd)
        if self.scan.peek(";"):
            self.scan.gettoken()
            cmd = ListCmd(cmd, self.line())
        return cmd

    def pipe(self) -> Command:
        cmd = self.exec()
        if self.scan.peek("|"):
            self.scan.gettoken()
            cmd = PipeCmd(cmd, self.pipe())
        return cmd

    def redirs(self, cmd: Command) -> Command:
        while self.scan.peek("<>"):
            tok = self.scan.gettoken()
            target = self.scan.gettoken()
            if target is None or target.kind != "a":
                raise ShellSyntaxError("missing file for redirection")
            if tok.kind == "<":
                cmd = RedirCmd(cmd, target.text, OpenMode.RDONLY, 0)
            elif tok.kind == ">":
                cmd = RedirCmd(
                    cmd, target.text, OpenMode.WRONLY | OpenMode.CREATE | OpenMode.TRUNC, 1
                )
            else:
                cmd = RedirCmd(cmd, target.text, OpenMode.WRONLY | OpenMode.CREATE, 1)
        return cmd

    def block(self) -> Command:
        if not self.scan.peek("("):
            raise ShellSyntaxError("parseblock")
        self.scan.gettoken()
        cmd = self.line()
        if not self.scan.peek(")"):
            raise ShellSyntaxError("syntax - missing )")
        self.scan.gettoken()
        return self.redirs(cmd)

    def exec(self) -> Command:
        if self.scan.peek("("):
            return self.block()
        exec_cmd = ExecCmd()
        ret: Command = self.redirs(exec_cmd)
        while not self.scan.peek("|)&;"):
            tok = self.scan.gettoken()
            if tok is None:
                break
            if tok.kind != "a":
                raise ShellSyntaxError("syntax")
            exec_cmd.argv.append(tok.text)
            if len(exec_cmd.argv) >= MAXARGS:
                raise ShellSyntaxError("too many args")
            ret = self.redirs(ret)
        return ret


def parse(line: str) -> Command:
    """Parse a whole command line into a command tree.

    Raises :class:`ShellSyntaxError` if the line is malformed or input is
    left over after the command.
    """
    parser = _Parser(line)
    cmd = parser.line()
    if not parser.scan.at_end():
        raise ShellSyntaxError("syntax", leftovers=parser.scan.rest())
    return cmd