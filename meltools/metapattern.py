"""Compile and match the editor's "magic" search patterns.

The pattern language is small: ``.`` matches any character except a
newline, ``[...]`` and ``[^...]`` are character classes (with ``-``
ranges), ``*`` makes the preceding element match zero or more times,
``^`` at the start anchors to the beginning of a line, ``$`` at the end
anchors to its end, and ``\\`` takes the next character literally.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum

MC_ANY = "."
MC_CCL = "["
MC_NCCL = "^"
MC_RCCL = "-"
MC_ECCL = "]"
MC_BOL = "^"
MC_EOL = "$"
MC_CLOSURE = "*"
MC_ESC = "\\"

DEFAULT_EXPAND_LENGTH = 64


class PatternError(ValueError):
    """A magic pattern could not be compiled."""


class ElementKind(Enum):
    """What a compiled pattern element matches."""

    LITCHAR = "literal"
    ANY = "any"
    CCL = "class"
    NCCL = "negated class"
    BOL = "beginning of line"
    EOL = "end of line"


def _fold(char: str) -> str:
    if char.isascii() and char.islower():
        return char.upper()
    return char


def _is_letter(char: str) -> bool:
    return char.isascii() and char.isalpha()


def chars_equal(bc: str, pc: str, exact: bool = False) -> bool:
    """Compare a buffer character with a pattern character.

    Unless ``exact`` is set, ASCII letters compare without regard to case.
    """
    if not exact:
        bc, pc = _fold(bc), _fold(pc)
    return bc == pc


@dataclass(frozen=True)
class Element:
    """One compiled element of a magic pattern."""

    kind: ElementKind
    char: str | None = None
    chars: frozenset[str] = field(default_factory=frozenset)
    closure: bool = False

    def matches(self, char: str, exact: bool = False) -> bool:
        """Return whether ``char`` is matched by this element.

        Line anchors match positions, never characters.
        """
        kind = self.kind
        if kind is ElementKind.LITCHAR:
            return chars_equal(char, self.char, exact)
        if kind is ElementKind.ANY:
            return char != "\n"
        if kind is ElementKind.CCL:
            if char in self.chars:
                return True
            return not exact and _is_letter(char) and char.swapcase() in self.chars
        if kind is ElementKind.NCCL:
            if char in self.chars:
                return False
            if not exact and _is_letter(char):
                return char.swapcase() not in self.chars
            return True
        return False


def _parse_class(pattern: str, start: int) -> tuple[Element, int]:
    """Parse the class opened at ``start``; return it and the index of its ']'."""

    def at(index: int) -> str | None:
        return pattern[index] if index < len(pattern) else None

    def unterminated() -> PatternError:
        return PatternError("Character class not ended")

    j = start + 1
    kind = ElementKind.CCL
    if at(j) == MC_NCCL:
        kind = ElementKind.NCCL
        j += 1

    ochr = at(j)
    if ochr == MC_ECCL:
        raise PatternError("No characters in character class")
    if ochr == MC_ESC:
        j += 1
        ochr = at(j)
    if ochr is None:
        raise unterminated()
    chars = {ochr}
    j += 1

    while True:
        pchr = at(j)
        if pchr is None:
            raise unterminated()
        if pchr == MC_ECCL:
            break
        if pchr == MC_RCCL:
            if at(j + 1) == MC_ECCL:
                chars.add(pchr)
            else:
                j += 1
                pchr = at(j)
                if pchr is None:
                    raise unterminated()
                chars.update(chr(c) for c in range(ord(ochr) + 1, ord(pchr) + 1))
        elif pchr == MC_ESC:
            j += 1
            pchr = at(j)
            if pchr is None:
                raise unterminated()
            chars.add(pchr)
        else:
            chars.add(pchr)
        j += 1
        ochr = pchr

    return Element(kind, chars=frozenset(chars)), j


def compile_magic(pattern: str) -> tuple[tuple[Element, ...], bool]:
    """Compile a pattern into elements.

    Returns the elements and whether the pattern used any metacharacter;
    a pattern that did not can be searched for as plain text. The closure
    symbol is literal at the start of the pattern and after an element
    that cannot repeat (a newline, a line anchor or another closure).
    """
    elements: list[Element] = []
    magical = False
    does_closure = False
    i = 0
    n = len(pattern)

    while i < n:
        pchr = pattern[i]
        literal: str | None = None

        if pchr == MC_CCL:
            element, i = _parse_class(pattern, i)
            elements.append(element)
            magical = True
            does_closure = True
        elif pchr == MC_BOL and not elements:
            elements.append(Element(ElementKind.BOL))
            magical = True
            does_closure = False
        elif pchr == MC_EOL and i == n - 1:
            elements.append(Element(ElementKind.EOL))
            magical = True
            does_closure = False
        elif pchr == MC_ANY:
            elements.append(Element(ElementKind.ANY))
            magical = True
            does_closure = True
        elif pchr == MC_CLOSURE and does_closure:
            elements[-1] = dataclasses.replace(elements[-1], closure=True)
            magical = True
            does_closure = False
        elif pchr == MC_ESC:
            magical = True
            if i + 1 < n:
                i += 1
                literal = pattern[i]
            else:
                literal = MC_ESC
        else:
            literal = pchr

        if literal is not None:
            elements.append(Element(ElementKind.LITCHAR, char=literal))
            does_closure = literal != "\n"
        i += 1

    return tuple(elements), magical


def expand_pattern(text: str, maxlength: int = DEFAULT_EXPAND_LENGTH) -> str:
    """Render a pattern for display, spelling out newlines and control keys.

    When the room given by ``maxlength`` runs short, the output is cut
    off and ends in ``$``.
    """
    out: list[str] = []
    room = maxlength
    for char in text:
        code = ord(char)
        if char == "\n":
            out.append("<NL>")
            room -= 4
        elif code < 0x20 or code == 0x7F:
            out.append("^" + chr(code ^ 0x40))
            room -= 2
        else:
            out.append(char)
            room -= 1
        if room < 4:
            out.append("$")
            break
    return "".join(out)