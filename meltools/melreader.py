"""Number parsing and word-by-word input for the MEL interpreter.

Input comes from a base text stream plus a stack of pushed sources
(strings and files). The most recently pushed source is read first.
When it runs out, reading resumes where the previous source left off.
The end of a pushed source always ends the word being read.
"""

from __future__ import annotations

from typing import Iterator, TextIO

from meltools.melobjects import MelError

MAXWORD = 32
INT_MAX = 2**31 - 1
START_STRING = "<"
END_STRING = ">"
ESCAPE = "\\"

_DECIMAL = frozenset("0123456789")
_OCTAL = frozenset("01234567")
_HEX = frozenset("0123456789abcdefABCDEF")


def _all_in(text: str, allowed: frozenset[str]) -> bool:
    return all(char in allowed for char in text)


def parse_number(word: str) -> int | float | None:
    """Return the number a word spells, or None when it is not a number.

    A leading ``0`` makes the word octal, and ``0x`` makes it hexadecimal.
    Otherwise the word is decimal with an optional sign and fraction.
    A decimal whole number of INT_MAX or more becomes a float.
    """
    if not word:
        return None
    if word[0] == "0":
        rest = word[1:]
        if rest[:1] in ("x", "X"):
            digits = rest[1:]
            if not _all_in(digits, _HEX):
                return None
            return int(digits, 16) if digits else 0
        if not _all_in(rest, _OCTAL):
            return None
        return int(rest, 8) if rest else 0

    sign = 1
    body = word
    if word[0] == "-":
        sign = -1
        body = word[1:]
    elif word[0] == "+":
        body = word[1:]

    whole, dot, fraction = body.partition(".")
    if not _all_in(whole, _DECIMAL) or not _all_in(fraction, _DECIMAL):
        return None
    if not whole and not fraction:
        return None
    if dot:
        return sign * float(f"{whole or '0'}.{fraction or '0'}")
    value = int(whole)
    if value < INT_MAX:
        return sign * value
    return float(sign * value)


def _stream_chars(stream: TextIO) -> Iterator[str]:
    for line in stream:
        yield from line


def _string_chars(text: str) -> Iterator[str]:
    yield from text
    yield " "


def _file_chars(handle: TextIO) -> Iterator[str]:
    with handle:
        for line in handle:
            yield from line
    yield " "


class WordReader:
    """Reads characters, words and quoted strings from stacked input sources."""

    def __init__(self, stdin: TextIO | None = None) -> None:
        self._base: Iterator[str] = (
            _stream_chars(stdin) if stdin is not None else iter(())
        )
        self._sources: list[Iterator[str]] = []

    def push_string(self, text: str) -> None:
        """Read ``text`` next, before returning to the current input."""
        self._sources.append(_string_chars(text))

    def push_file(self, path) -> None:
        """Read the file at ``path`` next, before returning to the current input."""
        try:
            handle = open(path, encoding="utf-8")
        except OSError as exc:
            raise MelError(f"file_input: couldn't open {path}") from exc
        self._sources.append(_file_chars(handle))

    def next_char(self) -> str:
        """Return the next input character; raise EOFError when all input is used."""
        while self._sources:
            char = next(self._sources[-1], None)
            if char is not None:
                return char
            self._sources.pop()
        char = next(self._base, None)
        if char is None:
            raise EOFError("end of input")
        return char

    def next_word(self) -> str:
        """Return the next whitespace-separated word.

        A word that starts with ``<`` is returned as ``<`` alone so the
        caller can read the string that follows with :meth:`scan_string`.
        Words longer than MAXWORD are split.
        """
        char = self.next_char()
        while char.isspace():
            char = self.next_char()
        if char == START_STRING:
            return char
        chars = [char]
        while len(chars) < MAXWORD:
            try:
                char = self.next_char()
            except EOFError:
                break
            if char.isspace():
                break
            chars.append(char)
        return "".join(chars)

    def scan_string(self) -> str:
        """Read a string whose opening ``<`` has been consumed.

        Angle brackets nest, and a backslash takes the next character
        literally. The closing ``>`` is consumed but not returned.
        """
        depth = 1
        out: list[str] = []
        while True:
            try:
                char = self.next_char()
                if char == ESCAPE:
                    char = self.next_char()
                elif char == END_STRING:
                    depth -= 1
                    if depth == 0:
                        return "".join(out)
                elif char == START_STRING:
                    depth += 1
            except EOFError:
                raise MelError("unterminated string") from None
            out.append(char)