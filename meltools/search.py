"""Forward and reverse search, and search-and-replace, over a text buffer.

Plain patterns are matched character by character. When the buffer is in
magic mode, patterns are compiled with :func:`compile_magic` and matched
with a small backtracking matcher that supports closures and line anchors.
"""

from __future__ import annotations

from typing import Callable, Optional

from meltools.metapattern import (
    DEFAULT_EXPAND_LENGTH,
    Element,
    ElementKind,
    chars_equal,
    compile_magic,
    expand_pattern,
)

Position = tuple[int, int]
Ask = Callable[[str], str]

QUERY_HELP = (
    "(Y)es, (N)o, (!)Do rest, (U)ndo last, (^G)Abort, (.)Abort back, (?)Help: "
)
_PROMPT_WIDTH = DEFAULT_EXPAND_LENGTH * 2 // 3
_ABORT = "\x07"


class TextBuffer:
    """Lines of text with a cursor ("dot") given as (line, offset).

    Line index ``len(lines)`` is the empty header line that joins the end
    of the buffer back to its start, so scans may wrap around.
    """

    def __init__(self, text: str = "", exact: bool = False, magic: bool = False) -> None:
        self.lines: list[str] = text.split("\n")
        self.exact = exact
        self.magic = magic
        self.dot: Position = (0, 0)

    def text(self) -> str:
        """Return the buffer contents with lines joined by newlines."""
        return "\n".join(self.lines)

    @property
    def _header(self) -> int:
        return len(self.lines)

    def _length(self, line: int) -> int:
        return 0 if line == self._header else len(self.lines[line])

    def _next(self, line: int) -> int:
        return (line + 1) % (self._header + 1)

    def _prev(self, line: int) -> int:
        return (line - 1) % (self._header + 1)

    def _at_boundary(self, pos: Position, reverse: bool) -> bool:
        line, off = pos
        if reverse:
            return off == 0 and self._prev(line) == self._header
        return off == self._length(line) and self._next(line) == self._header

    def _nextch(self, pos: Position, reverse: bool) -> tuple[str, Position]:
        """Return the character passed over and the new position."""
        line, off = pos
        if not reverse:
            if off == self._length(line):
                return "\n", (self._next(line), 0)
            return self.lines[line][off], (line, off + 1)
        if off == 0:
            prev = self._prev(line)
            return "\n", (prev, self._length(prev))
        return self.lines[line][off - 1], (line, off - 1)

    def _forward_char(self) -> bool:
        line, off = self.dot
        if off == self._length(line):
            if line == self._header:
                return False
            self.dot = (self._next(line), 0)
        else:
            self.dot = (line, off + 1)
        return True

    def _backward_chars(self, n: int) -> bool:
        line, off = self.dot
        for _ in range(n):
            if off == 0:
                if self._prev(line) == self._header:
                    self.dot = (line, off)
                    return False
                line = self._prev(line)
                off = self._length(line)
            else:
                off -= 1
        self.dot = (line, off)
        return True

    def _delete(self, n: int) -> None:
        """Delete ``n`` characters forward from dot, newlines included."""
        while n > 0:
            line, off = self.dot
            if line == self._header:
                raise ValueError("error while deleting")
            text = self.lines[line]
            chunk = min(len(text) - off, n)
            if chunk == 0:
                if line + 1 < len(self.lines):
                    self.lines[line] = text + self.lines[line + 1]
                    del self.lines[line + 1]
                n -= 1
                continue
            self.lines[line] = text[:off] + text[off + chunk:]
            n -= chunk

    def _insert(self, text: str) -> None:
        """Insert ``text`` at dot, leaving dot after it."""
        for char in text:
            line, off = self.dot
            if line == self._header:
                self.lines.append("")
                if char == "\n":
                    self.dot = (line + 1, 0)
                    continue
                off = 0
            current = self.lines[line]
            if char == "\n":
                self.lines[line] = current[:off]
                self.lines.insert(line + 1, current[off:])
                self.dot = (line + 1, 0)
            else:
                self.lines[line] = current[:off] + char + current[off:]
                self.dot = (line, off + 1)


class Searcher:
    """Search state for one buffer: the last pattern and replacement."""

    def __init__(self, buffer: TextBuffer) -> None:
        self.buffer = buffer
        self.pattern = ""
        self.replacement = ""
        self._elements: Optional[tuple[Element, ...]] = None
        self._magical = False
        self._mclen = 0

    # -- pattern handling -------------------------------------------------

    def _compile(self) -> None:
        self._elements = None
        self._magical = False
        elements, magical = compile_magic(self.pattern)
        self._elements, self._magical = elements, magical

    def _set_pattern(self, pattern: Optional[str]) -> None:
        if pattern:
            self.pattern = pattern
            if self.buffer.magic:
                self._compile()
            else:
                self._elements = None
        elif not self.pattern:
            raise ValueError("No pattern set")

    def _ensure_pattern(self) -> None:
        if not self.pattern:
            raise ValueError("No pattern set")
        if self.buffer.magic and self._elements is None:
            self._compile()

    def _use_magic(self) -> bool:
        return self._magical and self.buffer.magic and self._elements is not None

    # -- scanning ---------------------------------------------------------

    def _find(self, reverse: bool, to_end: bool) -> bool:
        at_end = to_end != reverse
        if self._use_magic():
            elements = self._elements[::-1] if reverse else self._elements
            return self._mcscan(elements, reverse, at_end)
        pattern = self.pattern[::-1] if reverse else self.pattern
        return self._scan(pattern, reverse, at_end)

    def _scan(self, pattern: str, reverse: bool, at_end: bool) -> bool:
        buf = self.buffer
        exact = buf.exact
        pos = buf.dot
        while not buf._at_boundary(pos, reverse):
            last = pos
            char, pos = buf._nextch(pos, reverse)
            if not chars_equal(char, pattern[0], exact):
                continue
            match = pos
            for pchar in pattern[1:]:
                char, match = buf._nextch(match, reverse)
                if not chars_equal(char, pchar, exact):
                    break
            else:
                buf.dot = match if at_end else last
                return True
        return False

    def _mcscan(self, elements: tuple[Element, ...], reverse: bool, at_end: bool) -> bool:
        buf = self.buffer
        pos = buf.dot
        while not buf._at_boundary(pos, reverse):
            last = pos
            self._mclen = 0
            found = self._amatch(elements, 0, reverse, pos)
            if found is not None:
                buf.dot = found if at_end else last
                return True
            _, pos = buf._nextch(pos, reverse)
        return False

    def _amatch(
        self, elements: tuple[Element, ...], idx: int, reverse: bool, pos: Position
    ) -> Optional[Position]:
        """Anchored match of ``elements[idx:]`` at ``pos``; return the end position."""
        buf = self.buffer
        exact = buf.exact
        count = len(elements)

        if idx < count and elements[idx].kind is ElementKind.BOL:
            if pos[1] != 0:
                return None
            idx += 1
        if idx < count and elements[idx].kind is ElementKind.EOL:
            if pos[1] != buf._length(pos[0]):
                return None
            idx += 1

        while idx < count:
            element = elements[idx]
            char, pos = buf._nextch(pos, reverse)

            if element.closure:
                nchars = 0
                while char != "\n" and element.matches(char, exact):
                    char, pos = buf._nextch(pos, reverse)
                    nchars += 1
                idx += 1
                while True:
                    _, pos = buf._nextch(pos, not reverse)
                    found = self._amatch(elements, idx, reverse, pos)
                    if found is not None:
                        self._mclen += nchars
                        return found
                    if nchars == 0:
                        return None
                    nchars -= 1

            if element.kind is ElementKind.BOL:
                if pos[1] == buf._length(pos[0]):
                    _, pos = buf._nextch(pos, not reverse)
                    return pos
                return None
            if element.kind is ElementKind.EOL:
                if pos[1] == 0:
                    _, pos = buf._nextch(pos, not reverse)
                    return pos
                return None
            if not element.matches(char, exact):
                return None

            self._mclen += 1
            idx += 1
        return pos

    def _repeat(self, reverse: bool, n: int) -> bool:
        to_end = not reverse
        for _ in range(n):
            if not self._find(reverse, to_end):
                return False
        return True

    # -- commands ---------------------------------------------------------

    def forward_search(self, pattern: Optional[str] = None, n: int = 1) -> bool:
        """Search forward for ``pattern`` (or the previous one) ``n`` times.

        On success dot is left just after the match.
        """
        if n == 0:
            n = 1
        if n < 0:
            return self.backward_search(pattern, -n)
        self._set_pattern(pattern)
        return self._repeat(False, n)

    def backward_search(self, pattern: Optional[str] = None, n: int = 1) -> bool:
        """Search backward for ``pattern`` (or the previous one) ``n`` times.

        On success dot is left at the first character of the match.
        """
        if n == 0:
            n = 1
        if n < 0:
            return self.forward_search(pattern, -n)
        self._set_pattern(pattern)
        return self._repeat(True, n)

    def forward_hunt(self, n: int = 1) -> bool:
        """Search forward again for the previous pattern."""
        if n == 0:
            n = 1
        if n < 0:
            return self.backward_hunt(-n)
        self._ensure_pattern()
        return self._repeat(False, n)

    def backward_hunt(self, n: int = 1) -> bool:
        """Search backward again for the previous pattern."""
        if n == 0:
            n = 1
        if n < 0:
            return self.forward_hunt(-n)
        self._ensure_pattern()
        return self._repeat(True, n)

    def replace(
        self,
        pattern: Optional[str] = None,
        replacement: Optional[str] = None,
        n: Optional[int] = None,
        ask: Optional[Ask] = None,
    ) -> Optional[int]:
        """Replace matches from dot onward and return the number replaced.

        An empty ``pattern`` or ``replacement`` reuses the previous one.
        ``n`` limits the number of matches considered. When ``ask`` is
        given it is called with a prompt for each match and answers with
        one of ``y``/space, ``n``, ``!``, ``u``, ``.``, ``^G`` or ``?``.
        Returns None when the query is aborted.
        """
        counted = n is not None
        if counted and n < 0:
            raise ValueError("negative repetition count")
        self._set_pattern(pattern)
        if replacement:
            self.replacement = replacement

        pat, rep = self.pattern, self.replacement
        slength, rlength = len(pat), len(rep)
        nlflag = pat.endswith("\n")
        nlrepl = False

        prompt = ""
        if ask is not None:
            prompt = (
                f"Replace '{expand_pattern(pat, _PROMPT_WIDTH)}' "
                f"with '{expand_pattern(rep, _PROMPT_WIDTH)}'? "
            )

        buf = self.buffer
        origin = buf.dot
        last: Optional[Position] = None
        numsub = 0
        nummatch = 0

        while (not counted or n > nummatch) and not (nlflag and nlrepl):
            if self._use_magic():
                if not self._mcscan(self._elements, False, False):
                    break
                slength = self._mclen
            elif not self._scan(pat, False, False):
                break

            nummatch += 1
            nlrepl = buf.dot[0] == len(buf.lines) - 1

            if ask is not None:
                message = prompt
                skip = False
                while True:
                    answer = ask(message)
                    if answer in ("y", " "):
                        break
                    if answer == "n":
                        buf._forward_char()
                        skip = True
                        break
                    if answer == "!":
                        ask = None
                        break
                    if answer == "u":
                        if last is None:
                            continue
                        buf.dot = last
                        last = None
                        buf._backward_chars(rlength)
                        buf._delete(rlength)
                        buf._insert(pat[:slength])
                        numsub -= 1
                        buf._backward_chars(slength)
                        message = prompt
                        continue
                    if answer == ".":
                        buf.dot = origin
                        return None
                    if answer == _ABORT:
                        return None
                    message = QUERY_HELP
                if skip:
                    continue

            buf._delete(slength)
            buf._insert(rep)
            if ask is not None:
                last = buf.dot
            numsub += 1

        return numsub