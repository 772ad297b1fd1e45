"""The MEL parameter stack, with marks and thread packing."""

from __future__ import annotations

from typing import Iterator

from meltools.melobjects import Kind, MelError, MelObject

MAXSTACK = 256


class Stack:
    """A bounded stack of MEL objects; iteration runs from bottom to top."""

    def __init__(self, limit: int = MAXSTACK) -> None:
        if limit < 1:
            raise ValueError("stack limit must be at least 1")
        self.limit = limit
        self._items: list[MelObject] = []

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[MelObject]:
        return iter(list(self._items))

    def _need(self, name: str, count: int) -> None:
        if len(self._items) < count:
            raise MelError(f"{name}: end of stack")

    def push(self, ob: MelObject) -> None:
        """Push an object; raise MelError when the stack is full."""
        if len(self._items) >= self.limit:
            raise MelError("stack is full")
        self._items.append(ob)

    def pop(self) -> MelObject:
        """Pop the top object; raise MelError when the stack is empty."""
        if not self._items:
            raise MelError("Empty stack.")
        return self._items.pop()

    def peek(self, depth: int = 0) -> MelObject:
        """Return the object ``depth`` places below the top without removing it."""
        if depth < 0:
            raise ValueError("depth must not be negative")
        self._need("peek", depth + 1)
        return self._items[-1 - depth]

    def dup(self) -> None:
        """Push a copy of the top object."""
        self._need("dup", 1)
        self.push(self._items[-1].copy())

    def over(self) -> None:
        """Push a copy of the second object."""
        self._need("over", 2)
        self.push(self._items[-2].copy())

    def rot(self) -> None:
        """Move the third object to the top: a b c -> b c a."""
        self._need("rot", 3)
        first, second, third = self._items[-3:]
        self._items[-3:] = [second, third, first]

    def exch(self) -> None:
        """Swap the top two objects."""
        self._need("exch", 2)
        self._items[-1], self._items[-2] = self._items[-2], self._items[-1]

    def clear(self) -> None:
        """Remove every object."""
        self._items.clear()

    def depth(self) -> int:
        """Return the number of objects on the stack."""
        return len(self._items)

    def mark(self) -> MelObject:
        """Push a mark and return it."""
        ob = MelObject(Kind.MARK)
        self.push(ob)
        return ob

    def count_to_mark(self) -> int:
        """Return how many objects lie above the topmost mark."""
        for count, ob in enumerate(reversed(self._items)):
            if ob.kind is Kind.MARK:
                return count
        raise MelError("_count_to_mark: no mark")

    def clear_to_mark(self) -> None:
        """Drop objects until a mark (left in place) or the bottom is reached."""
        while self._items and self._items[-1].kind is not Kind.MARK:
            self._items.pop()

    def pack_thread(self) -> MelObject:
        """Replace everything down to the topmost mark with one thread object."""
        count = self.count_to_mark()
        size = len(self._items)
        contents = self._items[size - count:]
        del self._items[size - count - 1:]
        thread = MelObject(Kind.THREAD, contents)
        self.push(thread)
        return thread